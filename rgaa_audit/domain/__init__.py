"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  audit.py    — Audit, its owned collections (recipients, tools, environments, pages)
                and the permanent AuditTrace
  result.py   — CriterionResult rows and their ExampleImage attachments
  enums.py    — status / impact / audit type enumerations
  mixins.py   — Shared UUIDPrimaryKeyMixin, TimestampMixin
"""

from rgaa_audit.domain.audit import Audit, AuditedPage, AuditTrace, Recipient, TestEnvironment, Tool
from rgaa_audit.domain.result import CriterionResult, ExampleImage

__all__ = [
    "Audit",
    "AuditedPage",
    "AuditTrace",
    "CriterionResult",
    "ExampleImage",
    "Recipient",
    "TestEnvironment",
    "Tool",
]
