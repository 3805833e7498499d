"""FastAPI router for the spend allocation and ROI calculators."""

from __future__ import annotations

from fastapi import APIRouter

from atelier.schemas import (
    OptimizationResultOut,
    OptimizeSpendRequest,
    RecommendationsOut,
    RecommendationsRequest,
    ROIOut,
    ROIRequest,
)
from atelier.services.spend import (
    OptimizationConstraints,
    OptimizationInput,
    OptimizationTargets,
    calculate_channel_roi,
    generate_optimization_recommendations,
    optimize_spend,
)

engine_router = APIRouter(prefix="/engine", tags=["engine"])


@engine_router.post("/optimize-spend", response_model=list[OptimizationResultOut])
def optimize_spend_endpoint(payload: OptimizeSpendRequest):
    results = optimize_spend(
        OptimizationInput(
            channels=payload.channels,
            budgets=payload.budgets,
            targets=OptimizationTargets(**payload.targets.model_dump()),
            constraints=OptimizationConstraints(
                min_budget_per_channel=payload.constraints.min_budget_per_channel,
                max_budget_per_channel=payload.constraints.max_budget_per_channel,
            ),
        )
    )
    return [OptimizationResultOut.model_validate(r) for r in results]


@engine_router.post("/roi", response_model=ROIOut)
def channel_roi(payload: ROIRequest):
    result = calculate_channel_roi(
        investment=payload.investment,
        leads=payload.leads,
        conversions=payload.conversions,
        avg_project_value=payload.avg_project_value,
    )
    return ROIOut.model_validate(result)


@engine_router.post("/recommendations", response_model=RecommendationsOut)
def recommendations(payload: RecommendationsRequest):
    performance = payload.model_dump(exclude_none=True)
    return RecommendationsOut(recommendations=generate_optimization_recommendations(performance))
