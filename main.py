# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Team Service
============
Governs how competition teams are assembled from role-tagged members:
team creation, direct membership, the join request workflow and the
attendance ledger.

Join request state machine:
    pending ─► approved   (creates the membership)
    pending ─► rejected

Port: 8005
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from team_engine.controllers import (
    attendance_controller,
    join_request_controller,
    system_controller,
    team_controller,
)
from team_engine.controllers.common import ServiceRejection, rejection_handler
from team_engine.core.config import settings
from team_engine.core.dependencies import get_store
from team_engine.core.logging import get_logger
from team_engine.middleware import MetricsMiddleware, RequestIDMiddleware

logger = get_logger(settings.SERVICE_NAME)


@asynccontextmanager
async def lifespan(application: FastAPI):
    logger.info("Starting %s v%s (%s store)", settings.SERVICE_NAME,
                settings.SERVICE_VERSION, type(get_store()).__name__)
    yield
    store = get_store()
    if hasattr(store, "dispose"):
        store.dispose()
    logger.info("Shutting down")


app = FastAPI(
    title="Team Service",
    description="Team composition, join requests and attendance for the hackathon portal.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)

app.add_exception_handler(ServiceRejection, rejection_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(status_code=500, content={"error": "internal_server_error", "detail": str(exc)})


app.include_router(system_controller.router)
app.include_router(team_controller.router)
app.include_router(join_request_controller.router)
app.include_router(attendance_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.SERVICE_PORT)
