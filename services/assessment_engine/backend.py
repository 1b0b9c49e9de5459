from typing import List, Protocol, runtime_checkable

from .models import LoadedAssessment, QuestionDefinition, SubmissionPayload


@runtime_checkable
class AssessmentBackend(Protocol):
    """
    External collaborators the engine talks to.

    Implementations own transport and persistence; failures are raised as-is
    and surfaced to the caller by the session.
    """

    async def load_domain_questions(self, domain_id: str) -> List[QuestionDefinition]:
        ...

    async def load_assessment(self, assessment_id: str) -> LoadedAssessment:
        ...

    async def submit_draft(self, payload: SubmissionPayload) -> str:
        """Persists a draft and returns the assessment id."""
        ...

    async def submit_complete(self, payload: SubmissionPayload) -> str:
        """Persists a completed assessment and returns the assessment id."""
        ...

    async def delete_assessment(self, assessment_id: str) -> None:
        ...
