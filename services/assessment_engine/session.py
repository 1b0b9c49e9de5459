import asyncio
import logging
from typing import Any, Iterable, List, Optional

from .backend import AssessmentBackend
from .cancellation import CancellationToken
from .models import (
    AssessmentHeader,
    AssessmentStatus,
    AssessmentValidationError,
    DomainSection,
    EvidenceFile,
    LoadedAssessment,
    ProgressSnapshot,
    QuestionDefinition,
    SessionCancelledError,
    SubmissionPayload,
)
from .navigation import NavigationCursor
from .progress import can_complete_domain, compute_progress
from .reconciler import AnswerReconciler
from .serializer import AssessmentSerializer
from .store import AnswerStore

logger = logging.getLogger(__name__)


class AssessmentSession:
    """
    One editing session of a readiness assessment for a selected domain.

    Owns the answer store, the reconciler, the navigation cursor and the
    cancellation token for its backend calls. Progress is recomputed after
    every answer change, cursor move and reconciliation.

    Usage:
        async with AssessmentSession(backend, domain) as session:
            await session.start(assessment_id)
            session.set_text(question_id, "...")
            await session.save_draft()
    """

    def __init__(
        self,
        backend: AssessmentBackend,
        domain: DomainSection,
        serializer: Optional[AssessmentSerializer] = None,
    ):
        """
        Args:
            backend: Catalog and persistence collaborator.
            domain: The selected domain. Its questions, if any, are replaced
                by the catalog once `load_questions` runs.
            serializer: Payload builder, defaults to AssessmentSerializer().
        """
        self.backend = backend
        self.domain = domain
        self.serializer = serializer or AssessmentSerializer()
        self.header = AssessmentHeader(domain_id=domain.id, domain_title=domain.name)
        self.sections: List[DomainSection] = []
        self.store = AnswerStore()
        self.reconciler = AnswerReconciler(self.store, on_reconciled=self.refresh_progress)
        self.cursor = NavigationCursor(on_move=self.refresh_progress)
        self.token = CancellationToken()
        self.progress = ProgressSnapshot()
        self.has_unsaved_changes = False
        self.catalog_error: Optional[Exception] = None

    async def __aenter__(self) -> "AssessmentSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    # --- Loading ---

    async def start(self, assessment_id: Optional[str] = None) -> None:
        """
        Loads the domain's questions and, when resuming, the saved assessment.

        Both fetches run concurrently and may finish in either order. A
        failed catalog fetch falls back to an empty section; a failed
        assessment fetch is raised once both fetches have settled.
        """
        fetches = [self.load_questions()]
        if assessment_id:
            fetches.append(self.load_assessment(assessment_id))
        results = await asyncio.gather(*fetches, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def load_questions(self) -> None:
        """
        Fetches the questions of the session's domain and installs them.

        Can be called again after a failure. A result for a domain the
        session has since moved away from is discarded.
        """
        domain = self.domain
        error: Optional[Exception] = None
        try:
            questions = await self.token.run(self.backend.load_domain_questions(domain.id))
        except SessionCancelledError:
            raise
        except Exception as e:
            logger.error(f"Failed to load questions for domain '{domain.id}': {e}", exc_info=True)
            error = e
            questions = []
        if domain.id != self.domain.id:
            logger.info(f"Discarding questions for domain '{domain.id}', session moved to '{self.domain.id}'")
            return
        self.catalog_error = error
        section = domain.model_copy(update={"questions": tuple(questions)})
        logger.info(f"Loaded {len(section.questions)} question(s) for domain '{section.id}'")
        self._install_sections([section])

    async def load_assessment(self, assessment_id: str) -> None:
        loaded = await self.token.run(self.backend.load_assessment(assessment_id))
        if self.apply_loaded_assessment(loaded):
            await self.load_questions()

    def apply_loaded_assessment(self, loaded: LoadedAssessment) -> bool:
        """
        Patches top-level fields from a saved assessment and reconciles its answers.

        A record from another domain moves the session to that domain: its
        section is emptied until `load_questions` fetches the right catalog.

        Returns:
            True if the session switched domains and questions must be reloaded.
        """
        switched = bool(loaded.domain_id) and loaded.domain_id != self.domain.id
        if switched:
            logger.info(
                f"Assessment '{loaded.id}' belongs to domain '{loaded.domain_id}', "
                f"moving session from '{self.domain.id}'"
            )
            self.domain = DomainSection(
                id=loaded.domain_id,
                name=loaded.domain_title or loaded.domain_id,
            )
            self._install_sections([self.domain])
        update = {
            "id": loaded.id,
            "name": loaded.name,
            "description": loaded.description,
            "full_name": loaded.full_name,
            "status": loaded.status or AssessmentStatus.DRAFT,
            "domain_id": self.domain.id,
            "domain_title": loaded.domain_title or self.domain.name,
        }
        self.header = self.header.model_copy(update=update)
        applied = self.reconciler.ingest_answers(loaded.raw_answer_pairs)
        logger.info(
            f"Loaded assessment '{loaded.id}' with {len(loaded.raw_answer_pairs)} saved answer(s)"
            + ("" if applied else " (waiting for questions)")
        )
        return switched

    def _install_sections(self, sections: List[DomainSection]) -> None:
        self.sections = sections
        self.cursor.reset(sections)
        self.reconciler.ingest_catalog(sections)

    # --- State ---

    @property
    def current_domain(self) -> Optional[DomainSection]:
        return self.cursor.current_domain

    @property
    def current_question(self) -> Optional[QuestionDefinition]:
        return self.cursor.current_question

    @property
    def current_answer(self) -> Any:
        question = self.current_question
        return self.store.get(question.id) if question else None

    @property
    def can_complete(self) -> bool:
        domain = self.current_domain
        return domain is not None and can_complete_domain(domain, self.store)

    @property
    def overall_progress(self) -> float:
        return self.progress.overall_progress

    def refresh_progress(self) -> None:
        self.progress = compute_progress(self.sections, self.store)

    # --- Answer mutations ---

    def set_text(self, question_id: str, value: Optional[str]) -> bool:
        return self._answer_changed(self.store.set_text(question_id, value))

    def set_radio(self, question_id: str, value: Optional[str]) -> bool:
        return self._answer_changed(self.store.set_radio(question_id, value))

    def toggle_checkbox_option(self, question_id: str, option: str) -> bool:
        return self._answer_changed(self.store.toggle_checkbox_option(question_id, option))

    def set_number(self, question_id: str, raw_input: Optional[str]) -> bool:
        return self._answer_changed(self.store.set_number(question_id, raw_input))

    def clear_answer(self, question_id: str) -> bool:
        return self._answer_changed(self.store.clear(question_id))

    def attach_evidence(self, question_id: str, files: Iterable[EvidenceFile]) -> bool:
        return self._answer_changed(self.store.attach_evidence(question_id, files))

    def remove_evidence_file(self, question_id: str, index: int) -> bool:
        return self._answer_changed(self.store.remove_evidence_file(question_id, index))

    def _answer_changed(self, changed: bool) -> bool:
        if changed:
            self.has_unsaved_changes = True
        self.refresh_progress()
        return changed

    # --- Header fields ---

    def set_name(self, name: str) -> None:
        self._update_header(name=name)

    def set_description(self, description: str) -> None:
        self._update_header(description=description)

    def set_full_name(self, full_name: str) -> None:
        self._update_header(full_name=full_name)

    def _update_header(self, **fields) -> None:
        if any(getattr(self.header, k) != v for k, v in fields.items()):
            self.header = self.header.model_copy(update=fields)
            self.has_unsaved_changes = True

    # --- Navigation ---

    def next_question(self) -> None:
        self.cursor.next()

    def previous_question(self) -> None:
        self.cursor.previous()

    def select_domain(self, index: int) -> None:
        self.cursor.jump_to_domain(index)

    # --- Submission ---

    def _active_domain(self) -> DomainSection:
        return self.current_domain or self.domain.model_copy(update={"questions": ()})

    def build_draft_payload(self) -> SubmissionPayload:
        return self.serializer.build_draft(self.header, self._active_domain(), self.store)

    def build_complete_payload(self) -> SubmissionPayload:
        return self.serializer.build_complete(self.header, self._active_domain(), self.store)

    async def save_draft(self) -> str:
        """
        Saves the answered questions as a draft.

        Raises:
            AssessmentValidationError: before any backend call, if the
                draft is missing its title or domain.
        """
        try:
            payload = self.build_draft_payload()
        except AssessmentValidationError as e:
            logger.info(f"Draft rejected: {e}")
            raise
        return await self._submit(self.backend.submit_draft, payload, AssessmentStatus.DRAFT)

    async def complete(self) -> str:
        """
        Submits every question of the active domain as a completed assessment.

        Raises:
            MissingFieldError / IncompleteAssessmentError: before any backend call.
        """
        try:
            payload = self.build_complete_payload()
        except AssessmentValidationError as e:
            logger.info(f"Completion rejected: {e}")
            raise
        return await self._submit(self.backend.submit_complete, payload, AssessmentStatus.COMPLETED)

    async def _submit(self, submit, payload: SubmissionPayload, status: AssessmentStatus) -> str:
        try:
            assessment_id = await self.token.run(submit(payload))
        except SessionCancelledError:
            raise
        except Exception as e:
            logger.error(f"Failed to submit {status.value} assessment: {e}")
            raise
        self.header = self.header.model_copy(update={"id": assessment_id or self.header.id, "status": status})
        self.has_unsaved_changes = False
        logger.info(f"Assessment '{self.header.id}' saved as {status.value}")
        return self.header.id

    # --- Teardown ---

    def close(self) -> None:
        """Cancels the session's outstanding backend calls."""
        self.token.cancel()
