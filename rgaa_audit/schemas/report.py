"""Public audit report schemas (derived data, never persisted)."""


from datetime import datetime

from rgaa_audit.domain.enums import AuditType
from rgaa_audit.schemas.common import CamelModel
from rgaa_audit.schemas.result import CriterionResultOut

class Count(CamelModel):
    raw: int
    percentage: float

class Distribution(CamelModel):
    compliant: Count
    not_applicable: Count
    not_compliant: Count

class PageDistribution(Distribution):
    name: str

class TopicDistribution(Distribution):
    name: str

class ReportEnvironment(CamelModel):
    operating_system: str
    operating_system_version: str
    assistive_technology: str
    assistive_technology_version: str
    browser: str
    browser_version: str

class ReportSample(CamelModel):
    number: int
    name: str
    url: str

class ReportTool(CamelModel):
    name: str
    function: str
    url: str

class ReportContext(CamelModel):
    auditor_name: str
    auditor_email: str
    referential: str
    desktop_environments: list[ReportEnvironment]
    mobile_environments: list[ReportEnvironment]
    samples: list[ReportSample]
    tools: list[ReportTool]
    technologies: list[str]

class AuditReport(CamelModel):
    consult_unique_id: str
    contact_form_url: str | None = None
    procedure_initiator: str
    procedure_name: str
    procedure_url: str | None = None
    audit_type: AuditType | None = None
    publish_date: datetime | None = None
    update_date: datetime | None = None

    not_compliant_content: str | None = None
    derogated_content: str | None = None
    not_in_scope_content: str | None = None

    error_count: int
    blocking_error_count: int
    total_criteria_count: int
    applicable_criteria_count: int
    # None when no criterion is applicable
    accessibility_rate: int | None = None

    context: ReportContext
    page_distributions: list[PageDistribution]
    result_distribution: Distribution
    topic_distributions: list[TopicDistribution]
    results: list[CriterionResultOut]
