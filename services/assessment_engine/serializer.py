import logging
from typing import Any, List, Mapping

from . import codec, progress
from .models import (
    AssessmentHeader,
    AssessmentStatus,
    DomainSection,
    IncompleteAssessmentError,
    MissingFieldError,
    SubmissionPayload,
    WireAnswer,
)

logger = logging.getLogger(__name__)


def _require(value: Any, field: str, message: str) -> None:
    if not value or (isinstance(value, str) and not value.strip()):
        raise MissingFieldError(field, message)


class AssessmentSerializer:
    """
    Builds draft and complete submission payloads for one domain section.

    All checks run before a payload exists, so a rejected submission never
    reaches the backend.
    """

    def build_draft(
        self,
        header: AssessmentHeader,
        domain: DomainSection,
        answers: Mapping[str, Any],
    ) -> SubmissionPayload:
        """Partial save: title and domain only, answered questions only."""
        _require(header.domain_id, "domain_id", "Domain is required to save an assessment.")
        _require(header.name, "name", "Assessment name is required to save as draft.")

        questions = [
            WireAnswer(question=q.id, answer=codec.to_wire(q.kind, answers.get(q.id)))
            for q in domain.questions
            if codec.is_answered(q.kind, answers.get(q.id))
        ]
        logger.debug(f"Draft payload for domain '{domain.id}' carries {len(questions)} answer(s)")
        return SubmissionPayload(
            id=header.id,
            domain=header.domain_id,
            title=header.name,
            description=header.description or None,
            full_name=header.full_name or None,
            questions=questions,
            status=AssessmentStatus.DRAFT,
        )

    def build_complete(
        self,
        header: AssessmentHeader,
        domain: DomainSection,
        answers: Mapping[str, Any],
    ) -> SubmissionPayload:
        """
        Final submission: every question of the domain, with empty wire
        values for unanswered optional ones.

        Raises:
            MissingFieldError: domain, name, description or full name is empty.
            IncompleteAssessmentError: required questions are unanswered.
        """
        _require(header.domain_id, "domain_id", "Domain is required to complete assessment.")
        _require(header.name, "name", "Assessment name is required.")
        _require(header.description, "description", "Description is required to complete assessment.")
        _require(header.full_name, "full_name", "Full name is required to complete assessment.")

        missing: List[str] = progress.unanswered_required(domain, answers)
        if missing:
            raise IncompleteAssessmentError(missing)

        questions = [
            WireAnswer(question=q.id, answer=codec.to_wire(q.kind, answers.get(q.id)))
            for q in domain.questions
        ]
        return SubmissionPayload(
            id=header.id,
            domain=header.domain_id,
            title=header.name,
            description=header.description,
            full_name=header.full_name,
            questions=questions,
            status=AssessmentStatus.COMPLETED,
        )
