from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from tasklane.api.errors import register_error_handlers
from tasklane.api.routes.invitations import router as invitations_router
from tasklane.api.routes.notifications import router as notifications_router
from tasklane.api.routes.organizations import router as organizations_router
from tasklane.api.routes.tasks import router as tasks_router
import tasklane.models  # ensure models load for Alembic
from tasklane.logging_config import configure_logging
from prometheus_fastapi_instrumentator import Instrumentator
from tasklane.tracing import configure_tracing
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

# ------------------------------------------------------------------
# Configure Observability
# ------------------------------------------------------------------
configure_logging()
configure_tracing()

app = FastAPI(title="Tasklane")

register_error_handlers(app)

app.include_router(organizations_router, prefix="/api")
app.include_router(invitations_router, prefix="/api")
app.include_router(tasks_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")

# ------------------------------------------------------------------
# Observability
# ------------------------------------------------------------------
FastAPIInstrumentor.instrument_app(app)
Instrumentator().instrument(app).expose(app)

# ------------------------------------------------------------------
# Health Check
# ------------------------------------------------------------------
@app.get("/health")
def health_check():
    return {"status": "ok"}
