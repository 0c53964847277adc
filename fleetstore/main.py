"""
fleetstore/main.py
============================================
FastAPI Application for the Fleet Event Store
============================================

HTTP surface over the event persistence core: time-range retrieval of
device events, report distances, device-group membership and retention
sweeps.

Architecture Overview:
---------------------
- REST API: thin routers over repositories and services
- Core services: range selector, retention eraser, distance accumulator
- Persistence: SQLAlchemy sessions, one per request

Error Mapping:
-------------
- NotFound          -> 404
- StoreUnavailable  -> 503
"""

# Environment Configuration
from dotenv import load_dotenv
import os
load_dotenv()

# FastAPI Core
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from fleetstore.Core.config import settings
from fleetstore.Core.errors import NotFound, StoreUnavailable
from fleetstore.Controller.Routes import events, groups

# Database
from fleetstore.DB.database import test_db_connection


def _parse_origins(csv_value: str):
    """
    Parse comma-separated origin values into a list for CORS configuration.

    Examples:
        "*" → ["*"]
        "https://app.com,https://admin.app.com" → ["https://app.com", "https://admin.app.com"]
        "" → []
    """
    if not csv_value:
        return []
    return [origin.strip() for origin in csv_value.split(",") if origin.strip()]


# ============================================================
# APPLICATION LIFESPAN MANAGEMENT
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: verify the database answers.
    Shutdown: nothing to release; sessions are per request.
    """
    if test_db_connection():
        print("[STARTUP] ✅ Database connection verified")
    else:
        print("[STARTUP] ⚠️  Database not reachable, requests will answer 503")

    print("[STARTUP] ✅ Application initialization complete")

    yield

    print("[SHUTDOWN] 🛑 Application shutdown initiated")


# ============================================================
# APPLICATION INSTANCE CREATION
# ============================================================
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_origins(os.getenv("HTTP_ALLOWED_ORIGINS", "*")),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# DOMAIN ERROR HANDLERS
# ============================================================
@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    print(f"[API] ❌ {exc}")
    return JSONResponse(status_code=503, content={"detail": str(exc)})


# ============================================================
# HEALTH CHECK ENDPOINT
# ============================================================
@app.get("/health")
def health():
    """
    Returns:
        dict: {"status": "ok"} while the process is serving
    """
    return {"status": "ok"}


# ============================================================
# REST API ROUTE REGISTRATION
# ============================================================
app.include_router(events.router, prefix="/events", tags=["events"])
app.include_router(groups.router, prefix="/groups", tags=["groups"])
