from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from govrelay.config import common_settings as settings
from govrelay.routers import deps
from govrelay.routers.fastapi_router import router as api_router
from govrelay.utils.logger import logger
from govrelay.utils.startup_validation import missing_required_vars, validate_startup

# Run startup validation
logger.info("Governance relay starting up...")
if not validate_startup():
    logger.error("Startup validation failed. Please check configuration.")
    # Keep serving so /healthz can report what is missing

app = FastAPI(title="Governance Relay", version="0.1.0")

if settings.ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info(f"✅ CORS middleware configured for {settings.ALLOWED_ORIGINS}")


@app.get("/healthz")
def healthz() -> dict:
    """Health check with orchestrator and configuration status."""
    health_status = {"status": "ok"}

    orchestrator = deps.peek_orchestrator()
    health_status["proposals_in_flight"] = orchestrator.in_flight if orchestrator else 0
    health_status["proposals_tracked"] = len(orchestrator.list_runs()) if orchestrator else 0
    health_status["daos_bound"] = len(deps.get_directory())

    missing_vars = missing_required_vars()
    if missing_vars:
        health_status["config"] = f"missing: {', '.join(missing_vars)}"
        health_status["status"] = "error"
    else:
        health_status["config"] = "ok"

    return health_status


@app.on_event("startup")
async def startup_event():
    """Create the orchestrator inside the serving event loop."""
    logger.info("Starting governance relay...")
    try:
        deps.get_message_handler()
    except Exception as e:
        logger.warning(f"Failed to initialize message handling: {e}")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop in-flight proposals; their timers do not survive the process."""
    logger.info("Shutting down governance relay...")
    orchestrator = deps.peek_orchestrator()
    if orchestrator is not None:
        await orchestrator.shutdown()


# Mount API routes
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("govrelay.main:app", host=settings.API_HOST, port=settings.API_PORT)
