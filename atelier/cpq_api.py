"""FastAPI router for CPQ pricing, discounts and stored quotes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from atelier.db import get_db
from atelier.models import Quote
from atelier.schemas import (
    DiscountOut,
    DiscountRequest,
    PricingTierOut,
    QuoteCreate,
    QuoteOut,
    QuotePriceOut,
    QuotePriceRequest,
    QuoteStatusUpdate,
    RecommendTierRequest,
    TierRecommendationOut,
)
from atelier.services.pricing import (
    PRICING_TIERS,
    DiscountConditions,
    calculate_discount,
    calculate_quote_price,
    recommend_tier,
)
from atelier.services.quotes import create_quote, update_quote_status
from atelier.settings import settings

cpq_router = APIRouter(prefix="/cpq", tags=["cpq"])


def _quote_out(quote: Quote) -> QuoteOut:
    return QuoteOut(
        id=quote.id,
        lead_id=quote.lead_id,
        tier=quote.tier,
        customizations=list(quote.customizations_json or []),
        project_size=float(quote.project_size),
        urgency=quote.urgency,
        total_price=quote.total_price,
        status=quote.status,
        valid_until=quote.valid_until,
        created_at=quote.created_at,
    )


@cpq_router.get("/tiers", response_model=list[PricingTierOut])
def list_tiers():
    return [PricingTierOut.model_validate(tier) for tier in PRICING_TIERS]


@cpq_router.post("/price", response_model=QuotePriceOut)
def quote_price(payload: QuotePriceRequest):
    """Price breakdown; an unknown tier returns ``tier: null`` with zeros, not a 404."""
    result = calculate_quote_price(
        payload.tier_id, payload.customizations, payload.project_size, payload.urgency
    )
    return QuotePriceOut.model_validate(result)


@cpq_router.post("/discount", response_model=DiscountOut)
def discount(payload: DiscountRequest):
    result = calculate_discount(
        payload.base_price, DiscountConditions(**payload.conditions.model_dump())
    )
    return DiscountOut.model_validate(result)


@cpq_router.post("/recommend-tier", response_model=TierRecommendationOut)
def tier_recommendation(payload: RecommendTierRequest):
    result = recommend_tier(
        payload.project_type, payload.budget, payload.timeline, payload.requirements
    )
    return TierRecommendationOut.model_validate(result)


@cpq_router.post("/quotes", response_model=QuoteOut)
def save_quote(payload: QuoteCreate, db: Session = Depends(get_db)):
    try:
        result = create_quote(
            db,
            lead_id=payload.lead_id,
            tier_id=payload.tier_id,
            customizations=payload.customizations,
            project_size=payload.project_size,
            urgency=payload.urgency,
            validity_days=settings.QUOTE_VALIDITY_DAYS,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _quote_out(result.quote)


@cpq_router.get("/quotes/{quote_id}", response_model=QuoteOut)
def get_quote(quote_id: uuid.UUID, db: Session = Depends(get_db)):
    quote = db.get(Quote, quote_id)
    if quote is None:
        raise HTTPException(status_code=404, detail="Quote not found")
    return _quote_out(quote)


@cpq_router.patch("/quotes/{quote_id}", response_model=QuoteOut)
def set_quote_status(quote_id: uuid.UUID, payload: QuoteStatusUpdate, db: Session = Depends(get_db)):
    try:
        quote = update_quote_status(db, quote_id, payload.status)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _quote_out(quote)
