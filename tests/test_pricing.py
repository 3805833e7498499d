"""Tests for CPQ pricing, discounts and tier recommendation."""

from __future__ import annotations

import pytest

from atelier.services.pricing import (
    PRICING_TIERS,
    DiscountConditions,
    calculate_discount,
    calculate_quote_price,
    get_tier,
    recommend_tier,
)


# ---------------------------------------------------------------------------
# Quote price
# ---------------------------------------------------------------------------


class TestQuotePrice:
    def test_unknown_tier_returns_null_sentinel(self):
        result = calculate_quote_price("nonexistent-tier", [])
        assert result.tier is None
        assert result.base_price == 0
        assert result.customization_cost == 0
        assert result.size_premium == 0
        assert result.urgency_premium == 0
        assert result.total_price == 0

    def test_base_tier_only(self):
        result = calculate_quote_price("core")
        assert result.tier is get_tier("core")
        assert result.base_price == 85000
        assert result.total_price == 85000

    def test_full_breakdown(self):
        result = calculate_quote_price(
            "signature",
            ["recorrido_virtual", "paneles_solares", "no_existe"],
            project_size=2,
            urgency="urgente",
        )
        assert result.customization_cost == 43000
        assert result.size_premium == pytest.approx(129500)
        assert result.urgency_premium == 92500
        assert result.total_price == 450000

    def test_fractional_project_size(self):
        result = calculate_quote_price("core", project_size=1.5)
        assert result.size_premium == pytest.approx(29750)
        assert result.total_price == 114750

    def test_size_below_one_has_no_premium(self):
        assert calculate_quote_price("core", project_size=0.5).size_premium == 0

    def test_urgency_aliases(self):
        assert calculate_quote_price("core", urgency="expedito").urgency_premium == 21250
        assert calculate_quote_price("core", urgency="expedited").urgency_premium == 21250
        assert calculate_quote_price("core", urgency="urgent").urgency_premium == 42500

    def test_unknown_urgency_adds_nothing(self):
        assert calculate_quote_price("core", urgency="ayer").total_price == 85000


# ---------------------------------------------------------------------------
# Discounts
# ---------------------------------------------------------------------------


class TestDiscount:
    def test_return_client_paying_upfront(self):
        result = calculate_discount(
            100000, DiscountConditions(is_return_client=True, payment_terms="contado")
        )
        assert result.discount_percentage == 13
        assert result.discount_amount == 13000
        assert result.final_price == 87000
        assert result.applied_discounts == ["Cliente recurrente: 5%", "Pago de contado: 8%"]

    def test_volume_discount(self):
        result = calculate_discount(200000, DiscountConditions(project_count=3))
        assert result.discount_percentage == 9
        assert result.final_price == 182000
        assert result.applied_discounts == ["Volumen (3 proyectos): 9%"]

    def test_volume_discount_capped(self):
        result = calculate_discount(100000, DiscountConditions(project_count=10))
        assert result.discount_percentage == 15
        assert result.applied_discounts == ["Volumen (10 proyectos): 15%"]

    def test_single_project_gets_no_volume_discount(self):
        result = calculate_discount(100000, DiscountConditions(project_count=1))
        assert result.discount_percentage == 0
        assert result.applied_discounts == []

    def test_total_capped_at_25_percent(self):
        result = calculate_discount(
            100000,
            DiscountConditions(
                is_return_client=True,
                project_count=6,
                payment_terms="contado",
                seasonality="baja",
            ),
        )
        assert result.discount_percentage == 25
        assert result.final_price == 75000
        assert len(result.applied_discounts) == 4

    def test_high_season_never_goes_negative(self):
        result = calculate_discount(100000, DiscountConditions(seasonality="alta"))
        assert result.discount_percentage == 0
        assert result.discount_amount == 0
        assert result.final_price == 100000
        assert result.applied_discounts == ["Temporada alta: -5%"]

    def test_high_season_offsets_other_discounts(self):
        result = calculate_discount(
            100000, DiscountConditions(payment_terms="contado", seasonality="alta")
        )
        assert result.discount_percentage == 3
        assert result.final_price == 97000


# ---------------------------------------------------------------------------
# Tier recommendation
# ---------------------------------------------------------------------------


class TestRecommendTier:
    def test_tiers_are_ordered_by_delivery_time(self):
        times = [tier.delivery_time for tier in PRICING_TIERS]
        assert times == sorted(times)

    def test_institutional_goes_masterpiece(self):
        result = recommend_tier("institucional", 500000, 200)
        assert result.recommended_tier == "masterpiece"
        assert result.alternatives == ["core", "signature"]
        assert len(result.reasoning) == 1

    def test_residential_small_budget(self):
        result = recommend_tier("residencial", 100000, 60)
        assert result.recommended_tier == "core"
        assert result.alternatives == []

    def test_residential_budget_bands(self):
        assert recommend_tier("residencial", 320000, 365).recommended_tier == "masterpiece"
        assert recommend_tier("residencial", 160000, 365).recommended_tier == "signature"

    def test_commercial_downgraded_for_timeline(self):
        result = recommend_tier("comercial", 150000, 60)
        assert result.recommended_tier == "core"
        assert result.reasoning[1] == "Timeline requiere optimización: 60 días vs 75 días estándar"
        assert result.reasoning[2] == "Ajustado a tier core para cumplir timeline"

    def test_no_tier_fits_timeline_keeps_choice(self):
        result = recommend_tier("comercial", 250000, 30)
        assert result.recommended_tier == "masterpiece"
        assert len(result.reasoning) == 2
