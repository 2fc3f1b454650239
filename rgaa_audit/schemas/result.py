"""Criterion result Pydantic schemas."""


from pydantic import Field, computed_field

from rgaa_audit.core.config import settings
from rgaa_audit.domain.enums import CriterionResultStatus, CriterionResultUserImpact
from rgaa_audit.schemas.common import CamelModel

class ExampleImageOut(CamelModel):
    id: str
    filename: str
    content_type: str
    size_bytes: int
    storage_key: str = Field(exclude=True)

    @computed_field
    @property
    def url(self) -> str:
        return f"{settings.storage_url.rstrip('/')}/{self.storage_key}"

class CriterionResultOut(CamelModel):
    """One cell of the (page x criterion) matrix; ``id`` is None for placeholders."""

    id: str | None = None
    page_id: str
    topic: int
    criterion: int
    status: CriterionResultStatus = CriterionResultStatus.NOT_TESTED
    compliant_comment: str | None = None
    error_description: str | None = None
    not_applicable_comment: str | None = None
    recommendation: str | None = None
    user_impact: CriterionResultUserImpact | None = None
    quick_win: bool = False
    example_images: list[ExampleImageOut] = Field(default_factory=list)

class CriterionResultUpdate(CamelModel):
    page_id: str
    topic: int = Field(ge=1)
    criterion: int = Field(ge=1)
    status: CriterionResultStatus
    compliant_comment: str | None = None
    error_description: str | None = None
    not_applicable_comment: str | None = None
    recommendation: str | None = None
    user_impact: CriterionResultUserImpact | None = None
    quick_win: bool = False

class ResultsUpdate(CamelModel):
    data: list[CriterionResultUpdate]
