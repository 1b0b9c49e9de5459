"""
Builds engine models from backend documents and static YAML catalogs.

Backend documents use the admin API's field names (`_id`, `question`,
`type`, `answers`, `title`, `fullName`); this module is the only place that
knows them on the way in.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

import yaml

from .models import (
    AssessmentStatus,
    CatalogValidationError,
    DomainSection,
    LoadedAssessment,
    QuestionDefinition,
    QuestionKind,
    RawAnswerPair,
)

logger = logging.getLogger(__name__)

CHOICE_KINDS = (QuestionKind.RADIO, QuestionKind.CHECKBOX)


def _kind_from_document(value: Any, question_id: str) -> QuestionKind:
    if not value:
        return QuestionKind.TEXT
    try:
        return QuestionKind(str(value).lower())
    except ValueError:
        logger.warning(f"Unknown question type '{value}' for question '{question_id}', treating it as text")
        return QuestionKind.TEXT


def question_from_document(doc: Dict[str, Any]) -> QuestionDefinition:
    """Maps a backend question document onto a QuestionDefinition."""
    question_id = doc.get("_id") or doc.get("id")
    if not question_id:
        raise CatalogValidationError(f"Question document without an id: {doc!r}")
    question_id = str(question_id)
    return QuestionDefinition(
        id=question_id,
        text=doc.get("question") or doc.get("text") or "",
        kind=_kind_from_document(doc.get("type"), question_id),
        # Catalog questions are required unless the document says otherwise
        required=bool(doc.get("required", True)),
        allowed_answers=tuple(str(a) for a in (doc.get("answers") or ())),
        min=doc.get("min"),
        max=doc.get("max"),
    )


def section_from_documents(
    domain_doc: Dict[str, Any],
    question_docs: Iterable[Dict[str, Any]] = (),
) -> DomainSection:
    """Builds a DomainSection from a backend domain document and its question documents."""
    domain_id = domain_doc.get("_id") or domain_doc.get("id")
    if not domain_id:
        raise CatalogValidationError(f"Domain document without an id: {domain_doc!r}")
    return DomainSection(
        id=str(domain_id),
        name=domain_doc.get("title") or domain_doc.get("name") or "",
        description=domain_doc.get("description") or "",
        icon=domain_doc.get("icon") or "category",
        questions=tuple(question_from_document(d) for d in question_docs),
    )


def _raw_pair_from_document(doc: Any) -> RawAnswerPair:
    if not isinstance(doc, dict):
        logger.warning(f"Skipping malformed answer entry: {doc!r}")
        return RawAnswerPair()
    question = doc.get("question")
    if not isinstance(question, (str, dict)):
        # Some records only carry the reference field
        question = doc.get("questionRef") if isinstance(doc.get("questionRef"), str) else None
    return RawAnswerPair(question=question, answer=doc.get("answer"))


def loaded_assessment_from_document(doc: Dict[str, Any]) -> LoadedAssessment:
    """Maps a backend assessment document onto a LoadedAssessment."""
    domain = doc.get("domain")
    domain_id: Optional[str] = None
    domain_title = ""
    if isinstance(domain, dict):
        domain_id = domain.get("_id")
        domain_title = domain.get("title") or ""
    elif isinstance(domain, str):
        domain_id = domain

    status = doc.get("status")
    try:
        status = AssessmentStatus(status) if status else None
    except ValueError:
        logger.warning(f"Unknown assessment status '{status}', ignoring it")
        status = None

    return LoadedAssessment(
        id=doc.get("_id"),
        name=doc.get("title") or "",
        description=doc.get("description") or "",
        full_name=doc.get("fullName") or "",
        domain_id=domain_id,
        domain_title=domain_title,
        status=status,
        raw_answer_pairs=[_raw_pair_from_document(q) for q in (doc.get("questions") or [])],
    )


def load_catalog_data(data: Dict[str, Any]) -> List[DomainSection]:
    """
    Validates raw catalog data (the `domains` list of a catalog file) and
    performs checks the pydantic models do not cover.
    """
    if not isinstance(data, dict) or not isinstance(data.get("domains"), list):
        raise CatalogValidationError("Catalog data must contain a 'domains' list")

    # Schema problems surface as pydantic.ValidationError
    sections = [DomainSection.model_validate(d) for d in data["domains"]]

    section_ids = set()
    question_ids = set()
    for section in sections:
        if section.id in section_ids:
            raise CatalogValidationError(f"Duplicate domain ID found: {section.id}")
        section_ids.add(section.id)

        for question in section.questions:
            if question.id in question_ids:
                raise CatalogValidationError(f"Duplicate question ID '{question.id}' in domain '{section.id}'")
            question_ids.add(question.id)

            if question.kind in CHOICE_KINDS and not question.allowed_answers:
                raise CatalogValidationError(
                    f"{question.kind.value.capitalize()} question '{question.id}' has no answers to choose from"
                )
            if len(set(question.allowed_answers)) != len(question.allowed_answers):
                raise CatalogValidationError(f"Duplicate answers in question '{question.id}'")

    return sections


def load_catalog_from_file(file_path: str) -> List[DomainSection]:
    """Loads a question catalog from a YAML file and validates it."""
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise CatalogValidationError(f"File not found: {file_path}")
    except yaml.YAMLError as e:
        raise CatalogValidationError(f"Error parsing YAML file {file_path}: {e}")

    if data is None:
        raise CatalogValidationError(f"YAML file is empty or invalid: {file_path}")

    return load_catalog_data(data)
