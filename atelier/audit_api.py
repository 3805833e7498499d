"""FastAPI router for the in-memory decision audit log."""

from __future__ import annotations

import time
from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from atelier.deps import get_audit_store
from atelier.schemas import (
    AuditEntryCreate,
    AuditEntryOut,
    AuditListResponse,
    AuditRecordResponse,
    AuditSummaryOut,
)
from atelier.services.audit import AuditLogStore, summarize, to_csv
from atelier.settings import settings

audit_router = APIRouter(prefix="/predictor", tags=["audit"])


@audit_router.post("/audit", response_model=AuditRecordResponse)
def record_audit_entry(
    payload: AuditEntryCreate, store: AuditLogStore = Depends(get_audit_store)
):
    entry = store.record(payload.model_dump())
    return AuditRecordResponse(success=True, entry=AuditEntryOut.model_validate(entry))


@audit_router.get("/audit", response_model=AuditListResponse)
def list_audit_entries(
    format: Literal["json", "csv"] = "json",
    limit: int = Query(default=settings.AUDIT_DEFAULT_LIMIT, ge=1),
    store: AuditLogStore = Depends(get_audit_store),
):
    entries = store.recent(limit)

    if format == "csv":
        filename = f"audit-log-{int(time.time() * 1000)}.csv"
        return Response(
            content=to_csv(entries),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    summary = summarize(entries)
    return AuditListResponse(
        entries=[AuditEntryOut.model_validate(e) for e in entries],
        summary=AuditSummaryOut(
            total_decisions=summary["total_decisions"],
            acceptance_rate=summary["acceptance_rate"],
            recent_entries=[AuditEntryOut.model_validate(e) for e in summary["recent_entries"]],
            by_action=summary["by_action"],
        ),
    )
