from typing import Callable, List, Optional, Sequence

from .models import DomainSection, QuestionDefinition


class NavigationCursor:
    """Current (domain, question) position; prev/next cross domain boundaries."""

    def __init__(
        self,
        sections: Sequence[DomainSection] = (),
        on_move: Optional[Callable[[], None]] = None,
    ):
        self.sections: List[DomainSection] = list(sections)
        self.on_move = on_move
        self.domain_index = 0
        self.question_index = 0

    def reset(self, sections: Sequence[DomainSection]) -> None:
        self.sections = list(sections)
        self.domain_index = 0
        self.question_index = 0

    @property
    def current_domain(self) -> Optional[DomainSection]:
        if 0 <= self.domain_index < len(self.sections):
            return self.sections[self.domain_index]
        return None

    @property
    def current_question(self) -> Optional[QuestionDefinition]:
        domain = self.current_domain
        if domain is None or not 0 <= self.question_index < len(domain.questions):
            return None
        return domain.questions[self.question_index]

    @property
    def has_previous_question(self) -> bool:
        return self.question_index > 0

    @property
    def has_next_question(self) -> bool:
        domain = self.current_domain
        if domain is None:
            return False
        return self.question_index < len(domain.questions) - 1

    @property
    def has_previous_domain(self) -> bool:
        return self.domain_index > 0

    @property
    def has_next_domain(self) -> bool:
        return self.domain_index < len(self.sections) - 1

    def next(self) -> None:
        if self.has_next_question:
            self.question_index += 1
        elif self.has_next_domain:
            self.domain_index += 1
            self.question_index = 0
        self._moved()

    def previous(self) -> None:
        if self.has_previous_question:
            self.question_index -= 1
        elif self.has_previous_domain:
            self.domain_index -= 1
            self.question_index = max(len(self.sections[self.domain_index].questions) - 1, 0)
        self._moved()

    def jump_to_domain(self, index: int) -> None:
        if not 0 <= index < len(self.sections):
            raise IndexError(f"Domain index {index} out of range (0..{len(self.sections) - 1})")
        self.domain_index = index
        self.question_index = 0
        self._moved()

    def _moved(self) -> None:
        if self.on_move:
            self.on_move()
