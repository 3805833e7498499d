from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Sequence

from sqlalchemy.orm import Session

from atelier.models import Quote
from atelier.services.pricing import QuotePrice, calculate_quote_price

QUOTE_STATUSES = ("borrador", "enviada", "aceptada", "rechazada")


@dataclass(frozen=True)
class QuoteResult:
    quote: Quote
    price: QuotePrice


def create_quote(
    db: Session,
    *,
    lead_id: str,
    tier_id: str,
    customizations: Sequence[str] = (),
    project_size: float = 1,
    urgency: str = "normal",
    validity_days: int = 30,
    now: datetime | None = None,
) -> QuoteResult:
    """Price and persist a draft quote.

    Unlike the bare calculator, an unknown tier is an error here: there is
    nothing meaningful to store.
    """
    price = calculate_quote_price(tier_id, customizations, project_size, urgency)
    if price.tier is None:
        raise ValueError(f"Unknown pricing tier: {tier_id}")

    now = now or datetime.now(tz=timezone.utc)
    quote = Quote(
        lead_id=lead_id,
        tier=tier_id,
        customizations_json=list(customizations),
        project_size=project_size,
        urgency=urgency,
        total_price=price.total_price,
        status="borrador",
        valid_until=now + timedelta(days=validity_days),
    )
    db.add(quote)
    db.commit()
    db.refresh(quote)
    return QuoteResult(quote=quote, price=price)


def update_quote_status(db: Session, quote_id: uuid.UUID, status: str) -> Quote:
    if status not in QUOTE_STATUSES:
        raise ValueError(f"Invalid quote status: {status}")
    quote = db.get(Quote, quote_id)
    if quote is None:
        raise LookupError("Quote not found")
    quote.status = status
    db.commit()
    db.refresh(quote)
    return quote
