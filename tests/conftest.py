import asyncio
from typing import Dict, List, Optional

import pytest

from services.assessment_engine.models import (
    DomainSection,
    LoadedAssessment,
    QuestionDefinition,
    QuestionKind,
    SubmissionPayload,
)


@pytest.fixture
def scenario_section() -> DomainSection:
    """T: required text, O: optional text, C: required checkbox with options A and B."""
    return DomainSection(
        id="dom-1",
        name="Data Ecosystem",
        description="Evaluate data quality, governance, and availability",
        icon="database",
        questions=(
            QuestionDefinition(id="T", text="Describe your data governance framework", kind=QuestionKind.TEXT, required=True),
            QuestionDefinition(id="O", text="What data sources are available?", kind=QuestionKind.TEXT, required=False),
            QuestionDefinition(id="C", text="Which platforms are in use?", kind=QuestionKind.CHECKBOX, required=True, allowed_answers=("A", "B")),
        ),
    )


@pytest.fixture
def mixed_section() -> DomainSection:
    """One question of every kind, all required."""
    return DomainSection(
        id="dom-2",
        name="Human Capital",
        questions=(
            QuestionDefinition(id="q-text", text="Describe your AI training programs", kind=QuestionKind.TEXT),
            QuestionDefinition(id="q-radio", text="How many employees have AI/ML expertise?", kind=QuestionKind.RADIO,
                               allowed_answers=("0-5", "6-20", "21-50", "50+")),
            QuestionDefinition(id="q-check", text="Which roles exist?", kind=QuestionKind.CHECKBOX,
                               allowed_answers=("Data engineer", "ML engineer", "Analyst")),
            QuestionDefinition(id="q-num", text="Annual AI budget (k$)", kind=QuestionKind.NUMBER, min=0, max=1000),
        ),
    )


@pytest.fixture
def domain_only(scenario_section) -> DomainSection:
    """The selected domain as a host passes it in, before questions are loaded."""
    return scenario_section.model_copy(update={"questions": ()})


class FakeBackend:
    """
    In-memory AssessmentBackend. Each fetch can be held back with an
    asyncio.Event so tests decide which one resolves first.
    """

    def __init__(self, questions: List[QuestionDefinition], saved: Optional[LoadedAssessment] = None):
        self.questions = list(questions)
        self.domain_questions: Dict[str, List[QuestionDefinition]] = {}
        self.requested_domains: List[str] = []
        self.saved = saved
        self.questions_gate = asyncio.Event()
        self.assessment_gate = asyncio.Event()
        self.questions_gate.set()
        self.assessment_gate.set()
        self.questions_error: Optional[Exception] = None
        self.assessment_error: Optional[Exception] = None
        self.submit_error: Optional[Exception] = None
        self.submitted: List[SubmissionPayload] = []
        self.deleted: List[str] = []
        self.next_id = "assess-1"
        self.calls: Dict[str, int] = {}

    def _count(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1

    async def load_domain_questions(self, domain_id: str) -> List[QuestionDefinition]:
        self._count("load_domain_questions")
        self.requested_domains.append(domain_id)
        await self.questions_gate.wait()
        if self.questions_error:
            raise self.questions_error
        return list(self.domain_questions.get(domain_id, self.questions))

    async def load_assessment(self, assessment_id: str) -> LoadedAssessment:
        self._count("load_assessment")
        await self.assessment_gate.wait()
        if self.assessment_error:
            raise self.assessment_error
        return self.saved

    async def submit_draft(self, payload: SubmissionPayload) -> str:
        self._count("submit_draft")
        return self._store(payload)

    async def submit_complete(self, payload: SubmissionPayload) -> str:
        self._count("submit_complete")
        return self._store(payload)

    def _store(self, payload: SubmissionPayload) -> str:
        if self.submit_error:
            raise self.submit_error
        self.submitted.append(payload)
        return payload.id or self.next_id

    async def delete_assessment(self, assessment_id: str) -> None:
        self._count("delete_assessment")
        self.deleted.append(assessment_id)


@pytest.fixture
def fake_backend_factory():
    return FakeBackend
