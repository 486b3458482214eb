from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

BudgetMode = Literal["total", "per-hamper"]
PriorityMode = Literal["balanced", "budget", "fast", "premium"]
HeroPreference = Literal[
    "no-preference",
    "chocolates",
    "dry-fruits",
    "wellness",
    "beverages",
    "stationery",
    "custom",
]
Badge = Literal["LOW STOCK", "FAST DELIVERY", "PREMIUM"]
Feasibility = Literal["green", "yellow", "red"]


class Questionnaire(BaseModel):
    # Client & context
    client_name: str = ""
    company: str = ""
    contact: str = ""
    delivery_date: Optional[date] = None

    # Budget & quantity
    budget_mode: BudgetMode = "per-hamper"
    budget: Decimal = Field(default=Decimal("2000"), ge=0)
    quantity: int = Field(default=10, ge=0)

    # Theme
    hero_preference: HeroPreference = "no-preference"

    # Constraints
    must_have_items: list[str] = Field(default_factory=list)
    forbidden_categories: list[str] = Field(default_factory=list)
    dietary_notes: str = ""
    packaging_type: str = "standard"
    max_lead_time_days: int = Field(default=7, ge=0)

    # Intent
    priority_mode: PriorityMode = "balanced"


class HamperItem(BaseModel):
    name: str
    qty: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(ge=0)


class GeneratedHamper(BaseModel):
    id: str
    name: str
    hero_product: str
    side_items: list[str] = Field(default_factory=list)
    items: list[HamperItem] = Field(default_factory=list)
    total_price: Decimal = Field(default=Decimal("0"))
    image: str = ""
    badges: list[Badge] = Field(default_factory=list)
    gst_percent: Decimal = Field(default=Decimal("12"))
    why_chosen: list[str] = Field(default_factory=list)
    is_backup: bool = False

    # Filled in by the scorer on every generation run
    confidence: int = Field(default=0, ge=0, le=100)
    feasibility: Feasibility = "red"
    within_budget: bool = False
