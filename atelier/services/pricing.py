"""CPQ pricing: service tiers, quote price breakdown, discounts and tier
recommendation for architecture projects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from atelier.services.spend import round_half_up


@dataclass(frozen=True)
class PricingTier:
    id: str
    name: str
    description: str
    base_price: int
    features: tuple[str, ...]
    delivery_time: int  # days
    revisions: int
    team_size: int


PRICING_TIERS: tuple[PricingTier, ...] = (
    PricingTier(
        id="core",
        name="Core",
        description="Diseño arquitectónico fundamental para proyectos residenciales básicos",
        base_price=85000,
        features=(
            "Planos arquitectónicos básicos",
            "Renders exteriores (2)",
            "Planos estructurales",
            "Especificaciones técnicas básicas",
            "Documentación para permisos",
            "Acompañamiento inicial",
        ),
        delivery_time=45,
        revisions=2,
        team_size=2,
    ),
    PricingTier(
        id="signature",
        name="Signature",
        description="Solución integral para proyectos comerciales y residenciales premium",
        base_price=185000,
        features=(
            "Planos arquitectónicos completos",
            "Renders exteriores e interiores (5)",
            "Planos estructurales y MEP",
            "Especificaciones técnicas detalladas",
            "Documentación completa para permisos",
            "Diseño de interiores básico",
            "Acompañamiento en construcción",
            "Modelado 3D/BIM",
            "Análisis de sostenibilidad",
        ),
        delivery_time=75,
        revisions=4,
        team_size=4,
    ),
    PricingTier(
        id="masterpiece",
        name="Masterpiece",
        description="Experiencia arquitectónica excepcional para proyectos únicos e institucionales",
        base_price=350000,
        features=(
            "Diseño arquitectónico completamente personalizado",
            "Renders fotorrealistas ilimitados",
            "Planos ejecutivos completos (ARQ, EST, MEP)",
            "Especificaciones técnicas premium",
            "Documentación completa y gestión de permisos",
            "Diseño de interiores completo",
            "Supervisión de obra dedicada",
            "Modelado BIM avanzado",
            "Certificaciones de sostenibilidad",
            "Consultoría en innovación",
            "Recorridos virtuales VR/AR",
            "Mobiliario y paisajismo personalizado",
        ),
        delivery_time=120,
        revisions=8,
        team_size=8,
    ),
)

CUSTOMIZATION_PRICING: dict[str, int] = {
    "renders_adicionales": 8500,
    "recorrido_virtual": 25000,
    "modelado_avanzado": 35000,
    "certificacion_leed": 45000,
    "diseño_paisajismo": 28000,
    "mobiliario_personalizado": 40000,
    "consultoria_feng_shui": 15000,
    "automatizacion_hogar": 55000,
    "sistema_seguridad": 32000,
    "paneles_solares": 18000,
}

SIZE_PREMIUM_RATE = 0.7

URGENCY_MULTIPLIERS: dict[str, float] = {
    "normal": 0.0,
    "expedito": 0.25,
    "expedited": 0.25,
    "urgente": 0.5,
    "urgent": 0.5,
}

MAX_DISCOUNT = 0.25


@dataclass(frozen=True)
class QuotePrice:
    base_price: float
    customization_cost: float
    size_premium: float
    urgency_premium: float
    total_price: int
    tier: PricingTier | None


@dataclass(frozen=True)
class DiscountConditions:
    is_return_client: bool = False
    project_count: int | None = None
    payment_terms: str | None = None  # "contado" | "30_dias" | "60_dias"
    seasonality: str | None = None  # "alta" | "media" | "baja"


@dataclass(frozen=True)
class DiscountResult:
    discount_percentage: float
    discount_amount: int
    final_price: int
    applied_discounts: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TierRecommendation:
    recommended_tier: str
    alternatives: list[str]
    reasoning: list[str]


def get_tier(tier_id: str) -> PricingTier | None:
    for tier in PRICING_TIERS:
        if tier.id == tier_id:
            return tier
    return None


def calculate_quote_price(
    tier_id: str,
    customizations: Sequence[str] = (),
    project_size: float = 1,
    urgency: str = "normal",
) -> QuotePrice:
    """Price a quote for *tier_id*.

    An unknown tier yields an all-zero breakdown with ``tier=None`` rather
    than raising.  Unknown customizations and urgency levels add nothing.
    """
    tier = get_tier(tier_id)
    if tier is None:
        return QuotePrice(
            base_price=0,
            customization_cost=0,
            size_premium=0,
            urgency_premium=0,
            total_price=0,
            tier=None,
        )

    base_price = tier.base_price
    customization_cost = sum(CUSTOMIZATION_PRICING.get(c, 0) for c in customizations)
    size_premium = base_price * (project_size - 1) * SIZE_PREMIUM_RATE if project_size > 1 else 0
    urgency_premium = base_price * URGENCY_MULTIPLIERS.get(urgency, 0.0)

    total_price = base_price + customization_cost + size_premium + urgency_premium

    return QuotePrice(
        base_price=base_price,
        customization_cost=customization_cost,
        size_premium=size_premium,
        urgency_premium=urgency_premium,
        total_price=int(round_half_up(total_price)),
        tier=tier,
    )


def calculate_discount(base_price: float, conditions: DiscountConditions) -> DiscountResult:
    total_discount = 0.0
    applied: list[str] = []

    if conditions.is_return_client:
        total_discount += 0.05
        applied.append("Cliente recurrente: 5%")

    if conditions.project_count and conditions.project_count > 1:
        volume_discount = min(0.15, conditions.project_count * 0.03)
        total_discount += volume_discount
        applied.append(
            f"Volumen ({conditions.project_count} proyectos): "
            f"{int(round_half_up(volume_discount * 100))}%"
        )

    if conditions.payment_terms == "contado":
        total_discount += 0.08
        applied.append("Pago de contado: 8%")

    if conditions.seasonality == "baja":
        total_discount += 0.10
        applied.append("Temporada baja: 10%")
    elif conditions.seasonality == "alta":
        # High season raises the price, so it counts against the discount
        total_discount -= 0.05
        applied.append("Temporada alta: -5%")

    total_discount = max(0.0, min(MAX_DISCOUNT, total_discount))

    discount_amount = base_price * total_discount
    final_price = base_price - discount_amount

    return DiscountResult(
        discount_percentage=round_half_up(total_discount * 100, 2),
        discount_amount=int(round_half_up(discount_amount)),
        final_price=int(round_half_up(final_price)),
        applied_discounts=applied,
    )


def recommend_tier(
    project_type: str,
    budget: float,
    timeline: int,
    requirements: Sequence[str] = (),
) -> TierRecommendation:
    """Suggest a tier from project type and budget, then fit it to the timeline.

    ``requirements`` is accepted for forward compatibility and currently
    does not influence the choice.
    """
    reasoning: list[str] = []

    if project_type == "institucional":
        recommended = "masterpiece"
        reasoning.append("Proyectos institucionales requieren máxima calidad y personalización")
    elif project_type == "comercial":
        recommended = "masterpiece" if budget > 200000 else "signature"
        reasoning.append("Proyectos comerciales se benefician de diseño diferenciado")
    elif budget > 300000:
        recommended = "masterpiece"
        reasoning.append("Presupuesto permite experiencia premium completa")
    elif budget > 150000:
        recommended = "signature"
        reasoning.append("Presupuesto adecuado para solución integral")
    else:
        recommended = "core"
        reasoning.append("Solución optimizada para presupuesto disponible")

    selected = get_tier(recommended)
    if selected is not None and timeline < selected.delivery_time:
        reasoning.append(
            f"Timeline requiere optimización: {timeline} días vs "
            f"{selected.delivery_time} días estándar"
        )
        faster = [t for t in PRICING_TIERS if t.delivery_time <= timeline]
        if faster:
            # Most complete tier that still meets the deadline
            recommended = faster[-1].id
            reasoning.append(f"Ajustado a tier {recommended} para cumplir timeline")

    alternatives = [
        tier.id
        for tier in PRICING_TIERS
        if tier.id != recommended and tier.base_price <= budget * 1.2
    ]

    return TierRecommendation(
        recommended_tier=recommended,
        alternatives=alternatives,
        reasoning=reasoning,
    )
