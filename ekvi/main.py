import time
import asyncio
import logging
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from ekvi.core.config import settings
from ekvi.core.db import init_models
from ekvi.core.exceptions import EkviError
from ekvi.core.logging import setup_logging, request_id_ctx
from ekvi.api.router import api_router
from ekvi.modules.webhooks.router import router as webhooks_router
from ekvi.modules.events.outbox import run_outbox_relay
from ekvi.modules.videos.cleanup import run_cleanup_schedule
from ekvi.platform.provider_registry import registry


setup_logging()
app = FastAPI(title=settings.APP_NAME)
logger = logging.getLogger(__name__)

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id", "-")
    request_id_ctx.set(rid)
    response = await call_next(request)
    return response

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    process_time = (time.time() - start_time) * 1000
    logger.info(
        f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {process_time:.2f}ms"
    )

    return response

@app.exception_handler(EkviError)
async def ekvi_exception_handler(request: Request, exc: EkviError):
    logger.warning(f"{request.method} {request.url.path} failed with {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "An internal server error occurred."},
    )


@app.on_event("startup")
async def on_startup():
    await init_models()
    app.state.background_tasks = []
    if settings.OUTBOX_RELAY_ENABLED:
        app.state.background_tasks.append(asyncio.create_task(run_outbox_relay()))
    if settings.CLEANUP_ENABLED:
        app.state.background_tasks.append(asyncio.create_task(run_cleanup_schedule()))

@app.on_event("shutdown")
async def on_shutdown():
    for task in getattr(app.state, "background_tasks", []):
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
    if settings.OUTBOX_RELAY_ENABLED:
        await registry.event_bus().close()


app.include_router(webhooks_router, tags=["webhooks"])
app.include_router(api_router, prefix=settings.API_PREFIX)
