# tests/assessment/test_serializer.py
import pytest

from services.assessment_engine.models import (
    AssessmentHeader,
    AssessmentStatus,
    DomainSection,
    IncompleteAssessmentError,
    MissingFieldError,
    QuestionDefinition,
    QuestionKind,
)
from services.assessment_engine.serializer import AssessmentSerializer
from services.assessment_engine.store import AnswerStore


@pytest.fixture
def serializer():
    return AssessmentSerializer()

@pytest.fixture
def header():
    return AssessmentHeader(
        name="Q3 readiness",
        description="Quarterly check",
        full_name="Dana Moreau",
        domain_id="dom-2",
    )

@pytest.fixture
def store(mixed_section):
    return AnswerStore([mixed_section])


def _fill(store):
    store.set_text("q-text", "Internal academy")
    store.set_radio("q-radio", "6-20")
    store.toggle_checkbox_option("q-check", "Analyst")
    store.set_number("q-num", "0")


# --- Draft ---

def test_draft_only_carries_answered_questions(serializer, header, mixed_section, store):
    store.set_text("q-text", "Internal academy")
    store.set_number("q-num", "75")
    store.toggle_checkbox_option("q-check", "Analyst")
    store.toggle_checkbox_option("q-check", "Analyst") # empty selection is not an answer

    payload = serializer.build_draft(header, mixed_section, store)
    assert payload.status == AssessmentStatus.DRAFT
    assert payload.to_wire() == {
        "domain": "dom-2",
        "title": "Q3 readiness",
        "description": "Quarterly check",
        "fullName": "Dana Moreau",
        "questions": [
            {"question": "q-text", "answer": "Internal academy"},
            {"question": "q-num", "answer": 75},
        ],
        "status": "draft",
    }

def test_draft_needs_only_title_and_domain(serializer, mixed_section, store):
    header = AssessmentHeader(name="Early notes", domain_id="dom-2")
    wire = serializer.build_draft(header, mixed_section, store).to_wire()
    assert "description" not in wire
    assert "fullName" not in wire
    assert "_id" not in wire
    assert wire["questions"] == []

@pytest.mark.parametrize("update, field", [
    ({"name": ""}, "name"),
    ({"name": "   "}, "name"),
    ({"domain_id": None}, "domain_id"),
])
def test_draft_rejects_missing_fields(serializer, header, mixed_section, store, update, field):
    with pytest.raises(MissingFieldError) as excinfo:
        serializer.build_draft(header.model_copy(update=update), mixed_section, store)
    assert excinfo.value.field == field

def test_draft_update_carries_id(serializer, header, mixed_section, store):
    payload = serializer.build_draft(header.model_copy(update={"id": "abc123"}), mixed_section, store)
    assert payload.to_wire()["_id"] == "abc123"


# --- Complete ---

def test_complete_carries_every_question(serializer, header, scenario_section):
    store = AnswerStore([scenario_section])
    store.set_text("T", "hello")
    store.toggle_checkbox_option("C", "B")
    header = header.model_copy(update={"domain_id": "dom-1"})

    payload = serializer.build_complete(header, scenario_section, store)
    assert payload.status == AssessmentStatus.COMPLETED
    assert [q.model_dump() for q in payload.questions] == [
        {"question": "T", "answer": "hello"},
        {"question": "O", "answer": ""}, # unanswered optional -> empty wire form
        {"question": "C", "answer": ["B"]},
    ]

def test_complete_serializes_each_kind(serializer, header, mixed_section, store):
    _fill(store)
    wire = serializer.build_complete(header, mixed_section, store).to_wire()
    assert wire["questions"] == [
        {"question": "q-text", "answer": "Internal academy"},
        {"question": "q-radio", "answer": "6-20"},
        {"question": "q-check", "answer": ["Analyst"]},
        {"question": "q-num", "answer": 0},
    ]
    assert wire["status"] == "completed"

def test_complete_keeps_null_for_absent_optional_number(serializer, header):
    section = DomainSection(id="dom-3", name="Budget", questions=(
        QuestionDefinition(id="n", text="Budget?", kind=QuestionKind.NUMBER, required=False),
    ))
    wire = serializer.build_complete(header, section, AnswerStore([section])).to_wire()
    assert wire["questions"] == [{"question": "n", "answer": None}]

@pytest.mark.parametrize("update, field", [
    ({"domain_id": None}, "domain_id"),
    ({"name": ""}, "name"),
    ({"description": ""}, "description"),
    ({"full_name": ""}, "full_name"),
])
def test_complete_requires_top_level_fields(serializer, header, mixed_section, store, update, field):
    _fill(store)
    with pytest.raises(MissingFieldError) as excinfo:
        serializer.build_complete(header.model_copy(update=update), mixed_section, store)
    assert excinfo.value.field == field

def test_complete_rejects_unanswered_required_questions(serializer, header, scenario_section):
    store = AnswerStore([scenario_section])
    store.set_text("T", "hello")
    with pytest.raises(IncompleteAssessmentError) as excinfo:
        serializer.build_complete(header, scenario_section, store)
    assert excinfo.value.question_ids == ["C"]
