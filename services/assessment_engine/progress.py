"""
Progress and completability of domain sections.

Everything here is a pure function of (section(s), answers), where answers is
any mapping of question id -> canonical value (an AnswerStore in practice).
Optional questions always count as satisfied: progress measures "nothing
required is left", not "everything is filled in".
"""
from typing import Any, List, Mapping, Sequence

from . import codec
from .models import DomainSection, ProgressSnapshot, QuestionDefinition, SectionProgress


def is_counted(question: QuestionDefinition, answers: Mapping[str, Any]) -> bool:
    if not question.required:
        return True
    return codec.is_answered(question.kind, answers.get(question.id))


def domain_progress(domain: DomainSection, answers: Mapping[str, Any]) -> float:
    total = len(domain.questions)
    if total == 0:
        return 0.0
    counted = sum(1 for q in domain.questions if is_counted(q, answers))
    return counted / total * 100


def unanswered_required(domain: DomainSection, answers: Mapping[str, Any]) -> List[str]:
    return [
        q.id for q in domain.questions
        if q.required and not codec.is_answered(q.kind, answers.get(q.id))
    ]


def can_complete_domain(domain: DomainSection, answers: Mapping[str, Any]) -> bool:
    return not unanswered_required(domain, answers)


def is_domain_complete(domain: DomainSection, answers: Mapping[str, Any]) -> bool:
    return domain_progress(domain, answers) == 100 and can_complete_domain(domain, answers)


def overall_progress(sections: Sequence[DomainSection], answers: Mapping[str, Any]) -> float:
    if not sections:
        return 0.0
    return sum(domain_progress(s, answers) for s in sections) / len(sections)


def compute_progress(sections: Sequence[DomainSection], answers: Mapping[str, Any]) -> ProgressSnapshot:
    return ProgressSnapshot(
        sections=[
            SectionProgress(
                section_id=s.id,
                progress=domain_progress(s, answers),
                completed=is_domain_complete(s, answers),
            )
            for s in sections
        ],
        overall_progress=overall_progress(sections, answers),
    )
