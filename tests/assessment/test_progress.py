# tests/assessment/test_progress.py
import pytest

from services.assessment_engine import progress
from services.assessment_engine.models import DomainSection, QuestionDefinition, QuestionKind
from services.assessment_engine.store import AnswerStore


@pytest.fixture
def store(scenario_section):
    return AnswerStore([scenario_section])


def test_scenario_progress_walkthrough(scenario_section, store):
    # O is optional and counts as satisfied from the start
    assert progress.domain_progress(scenario_section, store) == pytest.approx(100 / 3)
    assert not progress.can_complete_domain(scenario_section, store)

    store.set_text("T", "hello")
    assert progress.domain_progress(scenario_section, store) == pytest.approx(200 / 3)
    assert progress.unanswered_required(scenario_section, store) == ["C"]

    store.toggle_checkbox_option("C", "A")
    assert progress.domain_progress(scenario_section, store) == 100
    assert progress.can_complete_domain(scenario_section, store)
    assert progress.is_domain_complete(scenario_section, store)

def test_empty_domain_has_zero_progress():
    empty = DomainSection(id="empty", name="Empty")
    assert progress.domain_progress(empty, {}) == 0.0
    assert progress.can_complete_domain(empty, {})
    assert not progress.is_domain_complete(empty, {})

def test_overall_progress_is_mean_of_sections(scenario_section, mixed_section):
    sections = [scenario_section, mixed_section]
    store = AnswerStore(sections)
    store.set_text("T", "hello")
    store.toggle_checkbox_option("C", "B")
    # scenario 100%, mixed 0%
    assert progress.overall_progress(sections, store) == pytest.approx(50.0)

def test_overall_progress_without_sections():
    assert progress.overall_progress([], {}) == 0.0

def test_optional_question_never_moves_progress(scenario_section, store):
    before = progress.domain_progress(scenario_section, store)
    store.set_text("O", "warehouse, CRM")
    assert progress.domain_progress(scenario_section, store) == before
    store.set_text("O", "")
    assert progress.domain_progress(scenario_section, store) == before

def test_answering_required_questions_never_decreases_progress(mixed_section):
    store = AnswerStore([mixed_section])
    steps = [
        lambda: store.set_text("q-text", "x"),
        lambda: store.set_radio("q-radio", "50+"),
        lambda: store.toggle_checkbox_option("q-check", "Analyst"),
        lambda: store.set_number("q-num", "0"),
    ]
    last = progress.domain_progress(mixed_section, store)
    for step in steps:
        step()
        current = progress.domain_progress(mixed_section, store)
        assert current >= last
        last = current
    assert last == 100

def test_completability_matches_required_answers(mixed_section):
    store = AnswerStore([mixed_section])
    store.set_text("q-text", "x")
    store.set_radio("q-radio", "0-5")
    store.toggle_checkbox_option("q-check", "Analyst")
    assert not progress.can_complete_domain(mixed_section, store)
    store.set_number("q-num", "0") # zero is an answer
    assert progress.can_complete_domain(mixed_section, store)
    store.toggle_checkbox_option("q-check", "Analyst") # empties the selection
    assert not progress.can_complete_domain(mixed_section, store)

def test_all_optional_domain_is_complete_when_empty():
    section = DomainSection(id="opt", name="Optional", questions=(
        QuestionDefinition(id="a", text="A?", required=False),
        QuestionDefinition(id="b", text="B?", kind=QuestionKind.NUMBER, required=False),
    ))
    assert progress.domain_progress(section, {}) == 100
    assert progress.is_domain_complete(section, {})

def test_compute_progress_snapshot(scenario_section, store):
    store.set_text("T", "hello")
    store.toggle_checkbox_option("C", "A")
    snapshot = progress.compute_progress([scenario_section], store)
    section = snapshot.for_section("dom-1")
    assert section.progress == 100
    assert section.completed
    assert snapshot.overall_progress == 100
    assert snapshot.for_section("missing") is None

def test_set_checkbox_answers_count_in_plain_mappings(scenario_section):
    answers = {"T": "hello", "C": {"A"}}
    assert progress.can_complete_domain(scenario_section, answers)
    assert progress.domain_progress(scenario_section, answers) == 100
