from fastapi import FastAPI

from atelier.audit_api import audit_router
from atelier.auth_api import auth_router
from atelier.cpq_api import cpq_router
from atelier.engine_api import engine_router
from atelier.services.audit import AuditLogStore
from atelier.services.mailer import DryRunMailer
from atelier.settings import settings

app = FastAPI(title="Atelier Growth Service", version="0.1.0")
app.state.audit_store = AuditLogStore(capacity=settings.AUDIT_LOG_CAPACITY)
app.state.mailer = DryRunMailer(default_from=settings.EMAIL_FROM)
app.include_router(engine_router)
app.include_router(cpq_router)
app.include_router(audit_router)
app.include_router(auth_router)
