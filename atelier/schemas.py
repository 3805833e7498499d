"""Pydantic request/response schemas for the HTTP API."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Urgency = Literal["normal", "expedito", "urgente", "expedited", "urgent"]
PaymentTerms = Literal["contado", "30_dias", "60_dias"]
Seasonality = Literal["alta", "media", "baja"]
ProjectType = Literal["residencial", "comercial", "institucional"]
QuoteStatus = Literal["borrador", "enviada", "aceptada", "rechazada"]


# ---------------------------------------------------------------------------
# Spend engine
# ---------------------------------------------------------------------------


class OptimizationTargetsIn(BaseModel):
    leads: float = 0
    conversion: float = 0
    cost_per_lead: float = 0


class OptimizationConstraintsIn(BaseModel):
    min_budget_per_channel: float = Field(ge=0)
    max_budget_per_channel: float = Field(ge=0)


class OptimizeSpendRequest(BaseModel):
    channels: list[str]
    budgets: list[float]
    targets: OptimizationTargetsIn = Field(default_factory=OptimizationTargetsIn)
    constraints: OptimizationConstraintsIn

    @field_validator("channels")
    @classmethod
    def channels_unique(cls, value: list[str]) -> list[str]:
        if len(set(value)) != len(value):
            raise ValueError("channels must be unique")
        return value


class OptimizationResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    channel: str
    recommended_budget: int
    expected_leads: int
    expected_cost_per_lead: float
    efficiency_score: float
    confidence: float


class ROIRequest(BaseModel):
    investment: float = Field(ge=0)
    leads: float = Field(default=0, ge=0)
    conversions: float = Field(default=0, ge=0)
    avg_project_value: float = Field(default=0, ge=0)


class ROIOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    roi: float
    cost_per_lead: float
    cost_per_acquisition: float
    conversion_rate: float


class RecommendationsRequest(BaseModel):
    cost_per_lead: float | None = None
    conversion_rate: float | None = None
    roi: float | None = None


class RecommendationsOut(BaseModel):
    recommendations: list[str]


# ---------------------------------------------------------------------------
# CPQ
# ---------------------------------------------------------------------------


class PricingTierOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    base_price: int
    features: list[str]
    delivery_time: int
    revisions: int
    team_size: int


class QuotePriceRequest(BaseModel):
    tier_id: str
    customizations: list[str] = Field(default_factory=list)
    project_size: float = Field(default=1, gt=0)
    urgency: Urgency = "normal"


class QuotePriceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    base_price: float
    customization_cost: float
    size_premium: float
    urgency_premium: float
    total_price: int
    tier: PricingTierOut | None = None


class DiscountConditionsIn(BaseModel):
    is_return_client: bool = False
    project_count: int | None = Field(default=None, ge=0)
    payment_terms: PaymentTerms | None = None
    seasonality: Seasonality | None = None


class DiscountRequest(BaseModel):
    base_price: float = Field(ge=0)
    conditions: DiscountConditionsIn = Field(default_factory=DiscountConditionsIn)


class DiscountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    discount_percentage: float
    discount_amount: int
    final_price: int
    applied_discounts: list[str]


class RecommendTierRequest(BaseModel):
    project_type: ProjectType
    budget: float = Field(ge=0)
    timeline: int = Field(ge=0)
    requirements: list[str] = Field(default_factory=list)


class TierRecommendationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    recommended_tier: str
    alternatives: list[str]
    reasoning: list[str]


class QuoteCreate(BaseModel):
    lead_id: str
    tier_id: str
    customizations: list[str] = Field(default_factory=list)
    project_size: float = Field(default=1, gt=0)
    urgency: Urgency = "normal"


class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus


class QuoteOut(BaseModel):
    id: uuid.UUID
    lead_id: str
    tier: str
    customizations: list[str]
    project_size: float
    urgency: str
    total_price: int
    status: str
    valid_until: datetime
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------


class AuditEntryCreate(BaseModel):
    action: str
    user_id: str | None = None
    user_name: str | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    entity_title: str | None = None
    reasoning: str | None = None
    expected_impact: dict[str, Any] | None = None
    tags: list[str] = Field(default_factory=list)


class AuditEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    timestamp: str
    user_id: str
    user_name: str
    action: str
    entity_type: str
    entity_id: str | None = None
    entity_title: str | None = None
    reasoning: str | None = None
    expected_impact: dict[str, Any] | None = None
    tags: list[str] = Field(default_factory=list)


class AuditRecordResponse(BaseModel):
    success: bool
    entry: AuditEntryOut


class AuditSummaryOut(BaseModel):
    total_decisions: int
    acceptance_rate: float
    recent_entries: list[AuditEntryOut]
    by_action: dict[str, int]


class AuditListResponse(BaseModel):
    entries: list[AuditEntryOut]
    summary: AuditSummaryOut


# ---------------------------------------------------------------------------
# Auth & members
# ---------------------------------------------------------------------------


class AuthUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class SignUpRequest(BaseModel):
    email: str
    password: str
    confirm_password: str


class SignInRequest(BaseModel):
    email: str
    password: str


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    access_token: str
    user: AuthUserOut


class MembershipOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    org_id: str
    role: str


class AcceptInviteRequest(BaseModel):
    token: str
    password: str
    confirm_password: str


class AcceptInviteResponse(BaseModel):
    user: AuthUserOut
    membership: MembershipOut


class InviteRequest(BaseModel):
    email: str = ""
    role: str = ""
    org_id: str = ""
    org_name: str | None = None


class InviteResponse(BaseModel):
    success: bool
    message: str
    invite_url: str


class AuthStatusOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enabled: bool
    feature_flag: bool
    has_credentials: bool
    message: str | None = None
