import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resourcio import config
from resourcio.services.repository import build_repository

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Resourcio API")

# --- Register routers ---
from resourcio.routers.auth import router as auth_router
from resourcio.routers.resources import router as resources_router
from resourcio.routers.projects import router as projects_router
from resourcio.routers.allocations import router as allocations_router
from resourcio.routers.time_logging import router as time_logging_router
from resourcio.routers.dashboard import router as dashboard_router
from resourcio.routers.rbac import router as rbac_router
from resourcio.routers.departments import router as departments_router

app.include_router(auth_router)
app.include_router(resources_router)
app.include_router(projects_router)
app.include_router(allocations_router)
app.include_router(time_logging_router)
app.include_router(dashboard_router)
app.include_router(rbac_router)
app.include_router(departments_router)

# Read backend for resources/projects/allocations. None means a SqlRepository per request.
app.state.repository = build_repository(config.DATA_BACKEND)
logger.info("Resourcio starting: data_backend=%s auth_mode=%s", config.DATA_BACKEND, config.AUTH_MODE)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {"ok": True, "dataBackend": config.DATA_BACKEND}
