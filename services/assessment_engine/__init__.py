# Readiness assessment capture engine.

from .backend import AssessmentBackend
from .cancellation import CancellationToken
from .models import (
    AssessmentHeader,
    AssessmentStatus,
    AssessmentValidationError,
    CatalogValidationError,
    DomainSection,
    EvidenceFile,
    IncompleteAssessmentError,
    InvalidAnswerError,
    LoadedAssessment,
    MissingFieldError,
    ProgressSnapshot,
    QuestionDefinition,
    QuestionKind,
    RawAnswerPair,
    SessionCancelledError,
    SubmissionPayload,
    UnknownQuestionError,
)
from .navigation import NavigationCursor
from .reconciler import AnswerReconciler
from .serializer import AssessmentSerializer
from .session import AssessmentSession
from .store import AnswerStore

__all__ = [
    "AnswerReconciler",
    "AnswerStore",
    "AssessmentBackend",
    "AssessmentHeader",
    "AssessmentSerializer",
    "AssessmentSession",
    "AssessmentStatus",
    "AssessmentValidationError",
    "CancellationToken",
    "CatalogValidationError",
    "DomainSection",
    "EvidenceFile",
    "IncompleteAssessmentError",
    "InvalidAnswerError",
    "LoadedAssessment",
    "MissingFieldError",
    "NavigationCursor",
    "ProgressSnapshot",
    "QuestionDefinition",
    "QuestionKind",
    "RawAnswerPair",
    "SessionCancelledError",
    "SubmissionPayload",
    "UnknownQuestionError",
]
