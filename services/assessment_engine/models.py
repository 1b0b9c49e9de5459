from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuestionKind(str, Enum):
    TEXT = "text"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    NUMBER = "number"


class AssessmentStatus(str, Enum):
    DRAFT = "draft"
    COMPLETED = "completed"


class QuestionDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    kind: QuestionKind = QuestionKind.TEXT
    required: bool = True
    allowed_answers: Tuple[str, ...] = () # Radio/Checkbox only
    min: Optional[float] = None # Number only, advisory
    max: Optional[float] = None # Number only, advisory

    @model_validator(mode='after')
    def check_bounds(self) -> 'QuestionDefinition':
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"Question '{self.id}' has min {self.min} greater than max {self.max}")
        return self


class DomainSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    icon: str = "category"
    questions: Tuple[QuestionDefinition, ...] = ()

    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]


class EvidenceFile(BaseModel):
    """Client-side attachment held next to an answer. Never part of a submission."""
    model_config = ConfigDict(frozen=True)

    filename: str
    content_type: str = "application/octet-stream"
    data: bytes = b""


class RawAnswerPair(BaseModel):
    """
    One persisted (question, answer) pair as returned by the backend.

    `question` is a bare id string in legacy records and an embedded
    question document (carrying `_id`) in current ones.
    """
    question: Union[str, Dict[str, Any], None] = None
    answer: Any = None

    def question_id(self) -> Optional[str]:
        if isinstance(self.question, str):
            return self.question or None
        if isinstance(self.question, dict):
            qid = self.question.get("_id")
            return str(qid) if qid else None
        return None


class LoadedAssessment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    name: str = Field(default="", alias="title")
    description: str = ""
    full_name: str = Field(default="", alias="fullName")
    domain_id: Optional[str] = None
    domain_title: str = ""
    status: Optional[AssessmentStatus] = None
    raw_answer_pairs: List[RawAnswerPair] = Field(default_factory=list)


class AssessmentHeader(BaseModel):
    """Top-level metadata of the assessment being edited."""
    id: Optional[str] = None
    name: str = ""
    description: str = ""
    full_name: str = ""
    domain_id: Optional[str] = None
    domain_title: str = ""
    status: AssessmentStatus = AssessmentStatus.DRAFT


class WireAnswer(BaseModel):
    question: str
    answer: Union[str, List[str], int, float, None]


class SubmissionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, alias="_id")
    domain: str
    title: str
    description: Optional[str] = None
    full_name: Optional[str] = Field(default=None, alias="fullName")
    questions: List[WireAnswer] = Field(default_factory=list)
    status: AssessmentStatus

    def to_wire(self) -> Dict[str, Any]:
        """
        JSON-ready body with backend field names. Unset optional top-level
        fields are omitted; a null answer inside `questions` is kept.
        """
        body = self.model_dump(by_alias=True, mode="json")
        return {key: value for key, value in body.items() if value is not None}


class SectionProgress(BaseModel):
    section_id: str
    progress: float
    completed: bool


class ProgressSnapshot(BaseModel):
    sections: List[SectionProgress] = Field(default_factory=list)
    overall_progress: float = 0.0

    def for_section(self, section_id: str) -> Optional[SectionProgress]:
        return next((s for s in self.sections if s.section_id == section_id), None)


# Custom Error Classes
class AssessmentValidationError(ValueError):
    """Local validation failure raised before any call to the backend."""
    pass

class MissingFieldError(AssessmentValidationError):
    """A required top-level field (title, description, ...) is empty."""
    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Field '{field}' is required")

class IncompleteAssessmentError(AssessmentValidationError):
    """Required questions are unanswered on a complete submission."""
    def __init__(self, question_ids: List[str]):
        self.question_ids = list(question_ids)
        super().__init__(f"Missing answers for required questions: {self.question_ids}")

class InvalidAnswerError(ValueError):
    """An answer that the question cannot hold (e.g. option outside allowed answers)."""
    pass

class UnknownQuestionError(KeyError):
    """The question id is not part of the loaded sections."""
    pass

class CatalogValidationError(ValueError):
    """Question catalog data is malformed beyond what the pydantic models catch."""
    pass

class SessionCancelledError(RuntimeError):
    """An operation was cut short because its session was closed."""
    pass
