"""Enumerations shared by ORM models, schemas and services.

Columns store the enum *value* as a plain string; schemas validate against
these classes.
"""

import enum


class AuditType(str, enum.Enum):
    FULL = "FULL"
    COMPLEMENTARY = "COMPLEMENTARY"
    FAST = "FAST"


class CriterionResultStatus(str, enum.Enum):
    NOT_TESTED = "NOT_TESTED"
    COMPLIANT = "COMPLIANT"
    NOT_COMPLIANT = "NOT_COMPLIANT"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class CriterionResultUserImpact(str, enum.Enum):
    MINOR = "MINOR"
    MAJOR = "MAJOR"
    BLOCKING = "BLOCKING"


class Platform(str, enum.Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"
