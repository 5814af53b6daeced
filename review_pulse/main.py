import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sentry_sdk.integrations.asgi import SentryAsgiMiddleware

from review_pulse.api.v1 import analysis
from review_pulse.core.config import settings
from review_pulse.services.analysis_context import AnalysisContext
from review_pulse.services.collaborators.sheet_logger import SheetLogger
from review_pulse.services.orchestrator import Orchestrator
from review_pulse.utils.logger import configure_logging, get_logger

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="Review Pulse",
    description=(
        "Samples product reviews, classifies their sentiment and decides "
        "the follow-up business action"
    ),
    version="1.0.0",
)

# Initialize Sentry if DSN is provided
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.APP_ENV,
        traces_sample_rate=0.1,
    )
    app.add_middleware(SentryAsgiMiddleware)
    logger.info(
        "Sentry initialized with SentryAsgiMiddleware", environment=settings.APP_ENV
    )
else:
    logger.info("Sentry not configured (SENTRY_DSN not set)")

allowed_origins = settings.CORS_ALLOW_ORIGINS or ["http://localhost:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis.router, prefix="/api/v1")

# Initialize Prometheus metrics
instrumentator = Instrumentator(
    should_group_status_codes=False,
    excluded_handlers=["/metrics"],  # Don't monitor the metrics endpoint itself
)
instrumentator.instrument(app).expose(app)


@app.on_event("startup")
async def startup_event():
    """Build the analysis session unless one was installed already."""
    logger.info(
        "Review Pulse starting up",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        inference_mode=settings.INFERENCE_MODE,
    )
    if getattr(app.state, "orchestrator", None) is None:
        sheet_logger = SheetLogger()
        app.state.sheet_logger = sheet_logger
        app.state.orchestrator = Orchestrator(
            AnalysisContext.from_settings(),
            listeners=[sheet_logger] if sheet_logger.enabled else [],
        )


@app.on_event("shutdown")
async def shutdown_event():
    orchestrator = getattr(app.state, "orchestrator", None)
    if orchestrator is not None:
        await orchestrator.aclose()
    sheet_logger = getattr(app.state, "sheet_logger", None)
    if sheet_logger is not None:
        await sheet_logger.aclose()


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint"""
    logger.info("Health check requested")
    return {"status": "ok"}
