# app/domain/services/hamper_designer.py
"""
Gift-hamper recommendation from a client questionnaire.

This is a heuristic sampler, not an optimiser: five candidates are drawn from
a fixed per-category item pool, then labelled against the per-hamper budget.

Scoring rules:
  within budget   total_price <= budget * 1.15
  confidence      within budget → random value in [70, 95]
                  over budget   → max(40, 55 - 5 * rank_index)
  feasibility     green  within budget, rank_index < 3
                  yellow within budget, rank_index >= 3
                  red    over budget

Candidates come back sorted by confidence (highest first, stable on ties).
The random source is injectable; pass ``random.Random(seed)`` for
reproducible runs.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol, TypeVar

from app.domain.models.hamper import GeneratedHamper, HamperItem, Questionnaire
from app.domain.models.invoice import InvoiceTotals, LineItem
from app.domain.services.invoice_totals import compute_invoice_totals

logger = logging.getLogger("hamper_designer")

T = TypeVar("T")


class RandomSource(Protocol):
    def random(self) -> float: ...

    def sample(self, population: Sequence[T], k: int) -> list[T]: ...


BUDGET_TOLERANCE = Decimal("1.15")
CANDIDATE_COUNT = 5
GREEN_RANK_LIMIT = 3

CONFIDENCE_MIN_WITHIN = 70
CONFIDENCE_MAX_WITHIN = 95
CONFIDENCE_SPREAD = 25
CONFIDENCE_OVER_START = 55
CONFIDENCE_OVER_STEP = 5
CONFIDENCE_FLOOR = 40

# ── Item pool per preference ────────────────────────────────────────
ITEM_POOL: dict[str, list[tuple[str, int]]] = {
    "chocolates": [
        ("Artisan Chocolate Box", 550),
        ("Belgian Truffles", 680),
        ("Almond Brittle", 180),
        ("Dark Chocolate Bar Set", 320),
        ("Chocolate Coated Almonds", 240),
    ],
    "dry-fruits": [
        ("Premium Cashew Tin", 480),
        ("Mixed Dry Fruits Box", 520),
        ("Dried Cranberries Pack", 140),
        ("Pistachio Gift Pack", 560),
        ("Trail Mix Jar", 190),
    ],
    "wellness": [
        ("Organic Superfood Mix", 680),
        ("Lavender Candle", 350),
        ("Herbal Soap Set", 370),
        ("Bamboo Tumbler", 420),
        ("Essential Oil Set", 450),
    ],
    "beverages": [
        ("Green Tea Tin", 180),
        ("Masala Chai Box", 220),
        ("Cold Brew Kit", 480),
        ("Specialty Coffee Beans", 390),
        ("Herbal Infusion Set", 310),
    ],
    "stationery": [
        ("Leather Notebook", 450),
        ("Premium Pen Set", 380),
        ("Desk Organizer", 520),
        ("Sticky Notes Collection", 120),
        ("Eco Pencil Kit", 160),
    ],
    "general": [
        ("Honey Jar", 220),
        ("Scented Candles Set", 280),
        ("Cookie Tin", 300),
        ("Mug", 200),
        ("Fig Jam", 180),
    ],
}

IMAGES = [
    "https://images.unsplash.com/photo-1549465220-1a8b9238f0b0?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1607083206869-4c7672e72a8a?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1513558161293-cdaf765ed2fd?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1558618666-fcd25c85f82e?w=400&h=300&fit=crop",
    "https://images.unsplash.com/photo-1576618148400-f54bed99fcfd?w=400&h=300&fit=crop",
]

HAMPER_NAMES = [
    "Classic Delight Hamper",
    "Premium Wellness Box",
    "Festive Joy Hamper",
    "Executive Gift Set",
    "Artisan Curated Basket",
]

WHY_CHOSEN_POOL = [
    "Matches budget range perfectly",
    "Hero product aligns with preference",
    "Fastest delivery option available",
    "Best value per item ratio",
    "Premium packaging included",
    "Popular choice for corporate clients",
    "Meets dietary requirements",
    "Eco-friendly packaging option",
    "High client satisfaction rating",
    "Seasonal bestseller",
]


# ──────────────────────────────────────────────────────────────
# Scoring
# ──────────────────────────────────────────────────────────────

def is_within_budget(total_price: Decimal | int | float, budget: Decimal | int | float) -> bool:
    """True when the price fits inside the 15% tolerance band over budget."""
    return Decimal(str(total_price)) <= Decimal(str(budget)) * BUDGET_TOLERANCE


def _random_confidence(rng: RandomSource) -> int:
    bump = Decimal(str(rng.random() * CONFIDENCE_SPREAD)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return min(CONFIDENCE_MAX_WITHIN, CONFIDENCE_MIN_WITHIN + int(bump))


def score_candidate(
    candidate: GeneratedHamper,
    rank_index: int,
    budget: Decimal | int | float,
    rng: RandomSource,
) -> GeneratedHamper:
    within = is_within_budget(candidate.total_price, budget)
    if within:
        confidence = _random_confidence(rng)
        feasibility = "green" if rank_index < GREEN_RANK_LIMIT else "yellow"
    else:
        confidence = max(CONFIDENCE_FLOOR, CONFIDENCE_OVER_START - rank_index * CONFIDENCE_OVER_STEP)
        feasibility = "red"

    return candidate.model_copy(
        update={"within_budget": within, "confidence": confidence, "feasibility": feasibility}
    )


def score_candidates(
    candidates: Sequence[GeneratedHamper],
    budget: Decimal | int | float,
    rng: RandomSource | None = None,
) -> list[GeneratedHamper]:
    """Label candidates (in generation order) and return them by confidence, highest first."""
    rng = rng or random.Random()
    scored = [score_candidate(c, i, budget, rng) for i, c in enumerate(candidates)]
    return sort_by_confidence(scored)


def sort_by_confidence(candidates: Sequence[GeneratedHamper]) -> list[GeneratedHamper]:
    # sorted() is stable, so equal confidences keep generation order
    return sorted(candidates, key=lambda c: c.confidence, reverse=True)


# ──────────────────────────────────────────────────────────────
# Generation
# ──────────────────────────────────────────────────────────────

def per_hamper_budget(questionnaire: Questionnaire) -> Decimal:
    if questionnaire.budget_mode == "total":
        share = questionnaire.budget / max(questionnaire.quantity, 1)
        return share.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return questionnaire.budget


def _preference_key(questionnaire: Questionnaire) -> str:
    if questionnaire.hero_preference in ("no-preference", "custom"):
        return "general"
    return questionnaire.hero_preference


def generate_hampers(
    questionnaire: Questionnaire,
    rng: RandomSource | None = None,
) -> list[GeneratedHamper]:
    """Sample five hamper candidates for the questionnaire and score them."""
    rng = rng or random.Random()
    pref = _preference_key(questionnaire)
    premium = questionnaire.priority_mode == "premium"

    hero_pool = ITEM_POOL.get(pref) or ITEM_POOL["general"]
    side_pool = list(ITEM_POOL["general"])
    if pref == "general":
        side_pool += ITEM_POOL["chocolates"]

    budget = per_hamper_budget(questionnaire)

    candidates: list[GeneratedHamper] = []
    for i in range(CANDIDATE_COUNT):
        hero_name, hero_price = hero_pool[i % len(hero_pool)]
        eligible = [s for s in side_pool if s[0] != hero_name]
        sides = rng.sample(eligible, min(3 + i % 2, len(eligible)))

        items = [HamperItem(name=hero_name, qty=1, unit_price=Decimal(hero_price))]
        items += [HamperItem(name=name, qty=1, unit_price=Decimal(price)) for name, price in sides]
        total_price = sum((it.unit_price * it.qty for it in items), Decimal("0"))

        badges = []
        if i == 0:
            badges.append("FAST DELIVERY")
        if premium or i == 1:
            badges.append("PREMIUM")
        if i >= 3:
            badges.append("LOW STOCK")

        candidates.append(
            GeneratedHamper(
                id=f"gen-{i}",
                name=HAMPER_NAMES[i],
                hero_product=hero_name,
                side_items=[name for name, _ in sides],
                items=items,
                total_price=total_price,
                image=IMAGES[i],
                badges=badges,
                gst_percent=Decimal("18") if premium else Decimal("12"),
                why_chosen=rng.sample(WHY_CHOSEN_POOL, 2 + (1 if i < GREEN_RANK_LIMIT else 0)),
                is_backup=i >= 3,
            )
        )

    scored = score_candidates(candidates, budget, rng)
    logger.info(
        "Generated %d hampers for %s (pref=%s, mode=%s, per-hamper budget=%s)",
        len(scored), questionnaire.company or questionnaire.client_name or "-",
        pref, questionnaire.priority_mode, budget,
    )
    return scored


# ──────────────────────────────────────────────────────────────
# Pricing
# ──────────────────────────────────────────────────────────────

def price_hamper(
    hamper: GeneratedHamper,
    qty_overrides: Mapping[str, int] | None = None,
) -> InvoiceTotals:
    """Price a hamper at its GST rate, with optional per-item quantity overrides (min 1)."""
    overrides = qty_overrides or {}
    lines = [
        LineItem(
            id=item.name,
            name=item.name,
            pre_tax_price=item.unit_price,
            quantity=max(1, int(overrides.get(item.name, item.qty))),
            gst_percent=hamper.gst_percent,
        )
        for item in hamper.items
    ]
    return compute_invoice_totals(lines)
