import logging
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from . import codec
from .models import (
    DomainSection,
    EvidenceFile,
    InvalidAnswerError,
    QuestionDefinition,
    QuestionKind,
    UnknownQuestionError,
)

logger = logging.getLogger(__name__)


class AnswerStore(Mapping):
    """
    Current answer for each question of the loaded sections.

    Reads go through the Mapping interface (question id -> canonical value,
    missing key = unanswered). Writes go through the typed setters below,
    which mirror user interaction and return whether the stored value changed.
    The store holds no derived state; recomputing progress is the caller's job.
    """

    def __init__(self, sections: Optional[Sequence[DomainSection]] = None):
        self._questions: Dict[str, QuestionDefinition] = {}
        self._answers: Dict[str, Any] = {}
        self._evidence: Dict[str, List[EvidenceFile]] = {}
        if sections is not None:
            self.load_sections(sections)

    # --- Mapping interface ---

    def __getitem__(self, question_id: str) -> Any:
        return self._answers[question_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._answers)

    def __len__(self) -> int:
        return len(self._answers)

    # --- Catalog binding ---

    @property
    def is_bound(self) -> bool:
        return bool(self._questions)

    def load_sections(self, sections: Sequence[DomainSection]) -> None:
        """Binds the store to a catalog, dropping answers whose question is no longer present."""
        self._questions = {q.id: q for section in sections for q in section.questions}
        dropped = [qid for qid in self._answers if qid not in self._questions]
        for qid in dropped:
            del self._answers[qid]
        for qid in [qid for qid in self._evidence if qid not in self._questions]:
            del self._evidence[qid]
        if dropped:
            logger.info(f"Dropped {len(dropped)} answer(s) for questions outside the loaded catalog")

    def question(self, question_id: str) -> QuestionDefinition:
        try:
            return self._questions[question_id]
        except KeyError:
            raise UnknownQuestionError(question_id) from None

    # --- Mutations ---

    def set_text(self, question_id: str, value: Optional[str]) -> bool:
        question = self.question(question_id)
        if question.kind != QuestionKind.TEXT:
            logger.debug(f"set_text ignored for {question.kind.value} question '{question_id}'")
            return False
        return self._assign(question_id, codec.normalize_incoming(question.kind, value))

    def set_radio(self, question_id: str, value: Optional[str]) -> bool:
        question = self.question(question_id)
        if question.kind != QuestionKind.RADIO:
            logger.debug(f"set_radio ignored for {question.kind.value} question '{question_id}'")
            return False
        if value and question.allowed_answers and value not in question.allowed_answers:
            raise InvalidAnswerError(
                f"'{value}' is not an allowed answer for question '{question_id}'. "
                f"Allowed: {list(question.allowed_answers)}"
            )
        return self._assign(question_id, codec.normalize_incoming(question.kind, value))

    def toggle_checkbox_option(self, question_id: str, option: str) -> bool:
        question = self.question(question_id)
        if question.kind != QuestionKind.CHECKBOX:
            return False
        if question.allowed_answers and option not in question.allowed_answers:
            raise InvalidAnswerError(
                f"'{option}' is not an option of question '{question_id}'. "
                f"Allowed: {list(question.allowed_answers)}"
            )
        selected = list(self._answers.get(question_id) or ())
        if option in selected:
            selected.remove(option)
        else:
            selected.append(option)
        return self._assign(question_id, tuple(selected))

    def set_number(self, question_id: str, raw_input: Optional[str]) -> bool:
        """
        Sets a number answer from user input.

        Empty input clears the answer. Input that does not parse as a number
        is ignored and the previous value is kept.
        """
        question = self.question(question_id)
        if question.kind != QuestionKind.NUMBER:
            return False
        if raw_input is None or str(raw_input).strip() == "":
            return self.clear(question_id)
        value = codec.parse_number(raw_input)
        if value is None:
            logger.debug(f"Rejected non-numeric input {raw_input!r} for question '{question_id}'")
            return False
        return self._assign(question_id, value)

    def load_raw(self, question_id: str, raw: Any) -> bool:
        """Stores a raw backend answer after normalizing it for the question's kind."""
        question = self.question(question_id)
        return self._assign(question_id, codec.normalize_incoming(question.kind, raw))

    def clear(self, question_id: str) -> bool:
        self.question(question_id)
        if question_id not in self._answers:
            return False
        del self._answers[question_id]
        return True

    def _assign(self, question_id: str, value: Any) -> bool:
        # Absent answers are not stored
        if value is None:
            return self.clear(question_id)
        if question_id in self._answers and self._answers[question_id] == value:
            return False
        self._answers[question_id] = value
        return True

    # --- Evidence (client-side only) ---

    def evidence(self, question_id: str) -> List[EvidenceFile]:
        return list(self._evidence.get(question_id, []))

    def attach_evidence(self, question_id: str, files: Iterable[EvidenceFile]) -> bool:
        self.question(question_id)
        files = list(files)
        if not files:
            return False
        self._evidence[question_id] = files
        return True

    def remove_evidence_file(self, question_id: str, index: int) -> bool:
        files = self._evidence.get(question_id)
        if not files or not 0 <= index < len(files):
            return False
        files.pop(index)
        if not files:
            del self._evidence[question_id]
        return True
