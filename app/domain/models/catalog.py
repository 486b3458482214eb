from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

PageType = Literal["template", "full-image"]


class CatalogPage(BaseModel):
    """One landscape page of a client-facing hamper catalog."""

    id: str
    type: PageType = "template"
    gh_id: Optional[str] = None
    title: str = ""
    image: Optional[str] = None
    description: str = ""
    items: list[str] = Field(default_factory=list)
    plastic_percent: str = ""
    carbon_percent: str = ""
    pre_tax_price: Optional[Decimal] = None


class CatalogBuildResult(BaseModel):
    pages: list[CatalogPage] = Field(default_factory=list)
    failed_gh_ids: list[str] = Field(default_factory=list)
