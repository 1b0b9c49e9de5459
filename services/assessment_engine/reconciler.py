import logging
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Union

from .models import DomainSection, RawAnswerPair
from .store import AnswerStore

logger = logging.getLogger(__name__)

RawPair = Union[RawAnswerPair, Dict[str, Any]]


def build_answer_lookup(raw_pairs: Iterable[RawPair]) -> Dict[str, Any]:
    """
    Maps question id -> raw answer for persisted (question, answer) pairs.

    Accepts both record shapes: `question` as a bare id (legacy) or as an
    embedded question document with `_id`. Later pairs win over earlier ones
    for the same id; pairs without a usable id are skipped.
    """
    lookup: Dict[str, Any] = {}
    for pair in raw_pairs:
        if isinstance(pair, dict):
            question = pair.get("question")
            pair = RawAnswerPair(
                question=question if isinstance(question, (str, dict)) else None,
                answer=pair.get("answer"),
            )
        question_id = pair.question_id()
        if not question_id:
            logger.warning(f"Skipping answer pair without a question id: {pair.question!r}")
            continue
        lookup[question_id] = pair.answer
    return lookup


class AnswerReconciler:
    """
    Merges a persisted assessment's answers into an AnswerStore.

    The question catalog and the saved answers are fetched independently and
    can arrive in either order. Answers that arrive first are held back until
    `ingest_catalog` is called, so both orders end in the same store.
    Saved answers with no matching question stay pending and are applied
    when a later catalog contains their question.
    """

    def __init__(self, store: AnswerStore, on_reconciled: Optional[Callable[[], None]] = None):
        self.store = store
        self.on_reconciled = on_reconciled
        self._sections: Optional[Sequence[DomainSection]] = None
        self._pending: Optional[Dict[str, Any]] = None

    @property
    def has_pending_answers(self) -> bool:
        return self._pending is not None

    @property
    def catalog_loaded(self) -> bool:
        return self._sections is not None

    def ingest_answers(self, raw_pairs: Iterable[RawPair]) -> bool:
        """
        Accepts saved answers. Returns True if they were applied right away,
        False if they are deferred until the catalog arrives.
        """
        self._pending = build_answer_lookup(raw_pairs)
        if self._sections is None:
            logger.debug(f"Catalog not loaded yet; deferring {len(self._pending)} saved answer(s)")
            return False
        self._apply()
        return True

    def ingest_catalog(self, sections: Sequence[DomainSection]) -> None:
        """Accepts the question catalog and applies any deferred answers."""
        self._sections = list(sections)
        self.store.load_sections(self._sections)
        if self._pending is not None:
            self._apply()
        elif self.on_reconciled:
            self.on_reconciled()

    def _apply(self) -> None:
        lookup = dict(self._pending or {})
        applied = 0
        for section in self._sections or ():
            for question in section.questions:
                if question.id in lookup:
                    self.store.load_raw(question.id, lookup.pop(question.id))
                    applied += 1
        if lookup:
            # Kept for a later catalog, e.g. a retry after a failed fetch
            logger.info(f"{len(lookup)} saved answer(s) do not match any loaded question yet")
        logger.debug(f"Reconciled {applied} saved answer(s) into the store")
        self._pending = lookup or None
        if self.on_reconciled:
            self.on_reconciled()
