"""Audit report — read-only statistics derived from stored criterion results.

Everything below ``ReportService`` is pure: it takes the audit, its result
rows and the criteria catalog, and returns an ``AuditReport``.

Two normalization bases are used on purpose:
  - per-page percentages divide by the catalog size (every criterion could
    be judged on every page);
  - per-topic percentages divide by the number of results in that topic.
"""


import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from rgaa_audit.core.criteria import CriteriaCatalog, get_catalog
from rgaa_audit.domain.audit import Audit, TestEnvironment
from rgaa_audit.domain.enums import CriterionResultStatus, CriterionResultUserImpact, Platform
from rgaa_audit.domain.result import CriterionResult
from rgaa_audit.repositories.result import CriterionResultRepository
from rgaa_audit.schemas.report import (
    AuditReport,
    Count,
    Distribution,
    PageDistribution,
    ReportContext,
    ReportEnvironment,
    ReportSample,
    ReportTool,
    TopicDistribution,
)
from rgaa_audit.schemas.result import CriterionResultOut
from rgaa_audit.services.audit import AuditService

logger = logging.getLogger(__name__)

_COMPLIANT = CriterionResultStatus.COMPLIANT.value
_NOT_COMPLIANT = CriterionResultStatus.NOT_COMPLIANT.value
_NOT_APPLICABLE = CriterionResultStatus.NOT_APPLICABLE.value

# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CriteriaSummary:
    applicable: int
    compliant: int
    # None when no criterion is applicable
    accessibility_rate: int | None


def summarize_criteria(results: Iterable[CriterionResult]) -> CriteriaSummary:
    """Group results by (topic, criterion) and compute the accessibility rate.

    A group is applicable when at least one result is not NOT_APPLICABLE, and
    compliant when every result is COMPLIANT or NOT_APPLICABLE.
    """
    groups: dict[tuple[int, int], list[str]] = defaultdict(list)
    for r in results:
        groups[(r.topic, r.criterion)].append(r.status)

    applicable = [
        statuses for statuses in groups.values()
        if any(s != _NOT_APPLICABLE for s in statuses)
    ]
    compliant = [
        statuses for statuses in applicable
        if all(s in (_COMPLIANT, _NOT_APPLICABLE) for s in statuses)
    ]
    rate = round(100 * len(compliant) / len(applicable)) if applicable else None
    return CriteriaSummary(applicable=len(applicable), compliant=len(compliant), accessibility_rate=rate)


def _count(results: Sequence[CriterionResult], status: str, denominator: int) -> Count:
    raw = sum(1 for r in results if r.status == status)
    return Count(raw=raw, percentage=(raw / denominator * 100) if denominator else 0.0)


def distribution(results: Sequence[CriterionResult], denominator: int) -> Distribution:
    return Distribution(
        compliant=_count(results, _COMPLIANT, denominator),
        not_applicable=_count(results, _NOT_APPLICABLE, denominator),
        not_compliant=_count(results, _NOT_COMPLIANT, denominator),
    )


def _partition(
    results: Iterable[CriterionResult], key: Callable[[CriterionResult], object]
) -> dict[object, list[CriterionResult]]:
    buckets: dict[object, list[CriterionResult]] = defaultdict(list)
    for r in results:
        buckets[key(r)].append(r)
    return buckets


def _environments(environments: Iterable[TestEnvironment], platform: Platform) -> list[ReportEnvironment]:
    return [
        ReportEnvironment.model_validate(e)
        for e in environments
        if e.platform == platform.value
    ]


def build_report(audit: Audit, results: Sequence[CriterionResult], catalog: CriteriaCatalog) -> AuditReport:
    summary = summarize_criteria(results)
    total = len(catalog)
    by_page = _partition(results, lambda r: r.page_id)
    by_topic = _partition(results, lambda r: r.topic)

    page_distributions = []
    for page in audit.pages:
        dist = distribution(by_page.get(page.id, []), total)
        page_distributions.append(PageDistribution(name=page.name, **dict(dist)))

    topic_distributions = []
    for topic in catalog.topics:
        topic_results = by_topic.get(topic.number, [])
        dist = distribution(topic_results, len(topic_results))
        topic_distributions.append(TopicDistribution(name=topic.title, **dict(dist)))

    not_compliant = [r for r in results if r.status == _NOT_COMPLIANT]
    blocking = [
        r for r in not_compliant if r.user_impact == CriterionResultUserImpact.BLOCKING.value
    ]

    context = ReportContext(
        auditor_name=audit.auditor_name,
        auditor_email=audit.auditor_email,
        referential=catalog.referential,
        desktop_environments=_environments(audit.environments, Platform.DESKTOP),
        mobile_environments=_environments(audit.environments, Platform.MOBILE),
        samples=[
            ReportSample(number=index, name=page.name, url=page.url)
            for index, page in enumerate(audit.pages, start=1)
        ],
        tools=[ReportTool.model_validate(t) for t in audit.tools],
        technologies=list(audit.technologies or []),
    )

    return AuditReport(
        consult_unique_id=audit.consult_unique_id,
        contact_form_url=audit.contact_form_url,
        procedure_initiator=audit.initiator,
        procedure_name=audit.procedure_name,
        procedure_url=audit.procedure_url,
        audit_type=audit.audit_type,
        publish_date=audit.publication_date,
        update_date=audit.edition_date,
        not_compliant_content=audit.not_compliant_content,
        derogated_content=audit.derogated_content,
        not_in_scope_content=audit.not_in_scope_content,
        error_count=len(not_compliant),
        blocking_error_count=len(blocking),
        total_criteria_count=total,
        applicable_criteria_count=summary.applicable,
        accessibility_rate=summary.accessibility_rate,
        context=context,
        page_distributions=page_distributions,
        result_distribution=distribution(results, len(results)),
        topic_distributions=topic_distributions,
        results=[CriterionResultOut.model_validate(r) for r in results],
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ReportService:
    def __init__(self, session: AsyncSession):
        self._audits = AuditService(session)
        self._results = CriterionResultRepository(session)

    async def get_report(self, consult_id: str) -> AuditReport:
        audit = await self._audits.get_audit_by_consult_id(consult_id)
        results = await self._results.list_for_audit(audit.id)
        logger.debug("Building report for audit %s from %d result(s)", audit.id, len(results))
        return build_report(audit, results, get_catalog())
