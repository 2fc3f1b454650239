"""Audit Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from pydantic import Field

from rgaa_audit.domain.enums import AuditType, Platform
from rgaa_audit.schemas.common import CamelModel

# ---------------------------------------------------------------------------
# Nested collections
# ---------------------------------------------------------------------------

class RecipientIn(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)

class RecipientOut(RecipientIn):
    id: str

class ToolIn(CamelModel):
    name: str = Field(min_length=1)
    function: str
    url: str

class ToolOut(ToolIn):
    id: str

class EnvironmentIn(CamelModel):
    platform: Platform
    operating_system: str
    operating_system_version: str
    assistive_technology: str
    assistive_technology_version: str
    browser: str
    browser_version: str

class EnvironmentOut(EnvironmentIn):
    id: str

class PageIn(CamelModel):
    """An audited page. Items without ``id`` are created, items with one are updated."""

    id: str | None = None
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)

class PageOut(CamelModel):
    id: str
    name: str
    url: str
    order: int

# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------

class AuditCreate(CamelModel):
    procedure_name: str = Field(min_length=1)
    procedure_url: str | None = None
    initiator: str = Field(min_length=1)
    auditor_name: str = Field(min_length=1)
    auditor_email: str = Field(min_length=3)
    contact_name: str | None = None
    contact_email: str | None = None
    contact_form_url: str | None = None
    technologies: list[str] = Field(default_factory=list)
    audit_type: AuditType | None = None
    recipients: list[RecipientIn] = Field(default_factory=list)
    pages: list[PageIn] = Field(default_factory=list)

class AuditUpdate(CamelModel):
    """Full desired state of an audit: every collection replaces the stored one."""

    procedure_name: str = Field(min_length=1)
    procedure_url: str | None = None
    initiator: str = Field(min_length=1)
    auditor_name: str = Field(min_length=1)
    auditor_email: str = Field(min_length=3)
    contact_name: str | None = None
    contact_email: str | None = None
    contact_form_url: str | None = None
    technologies: list[str] = Field(default_factory=list)
    audit_type: AuditType | None = None
    not_compliant_content: str | None = None
    derogated_content: str | None = None
    not_in_scope_content: str | None = None

    recipients: list[RecipientIn] = Field(default_factory=list)
    tools: list[ToolIn] = Field(default_factory=list)
    environments: list[EnvironmentIn] = Field(default_factory=list)
    pages: list[PageIn] = Field(min_length=1)

class AuditOut(CamelModel):
    id: str
    edit_unique_id: str
    consult_unique_id: str
    procedure_name: str
    procedure_url: str | None = None
    initiator: str
    auditor_name: str
    auditor_email: str
    contact_name: str | None = None
    contact_email: str | None = None
    contact_form_url: str | None = None
    technologies: list[str]
    audit_type: AuditType | None = None
    not_compliant_content: str | None = None
    derogated_content: str | None = None
    not_in_scope_content: str | None = None
    publication_date: datetime | None = None
    edition_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

    recipients: list[RecipientOut]
    tools: list[ToolOut]
    environments: list[EnvironmentOut]
    pages: list[PageOut]
    transverse_page: PageOut
