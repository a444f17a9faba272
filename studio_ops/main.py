"""Studio Operations Web Application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import NoResultFound
from sqlmodel import Session

from studio_ops.core.config import settings
from studio_ops.core.database import create_db_and_tables, engine, seed_reference_data
from studio_ops.core.errors import EventWindowError
from studio_ops.core.scheduler import shutdown_scheduler, start_scheduler
from studio_ops.routes import calendar, events

# Configure logging
log_dir = Path.home() / ".logs" / "studio_ops"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting Studio Operations application")
    create_db_and_tables()
    with Session(engine) as session:
        seed_reference_data(session)
    start_scheduler()
    yield
    # Shutdown
    shutdown_scheduler()
    logger.info("Studio Operations application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Shoot calendar, crew rescheduling and client notifications for a video production studio",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(calendar.router)
app.include_router(events.router)


@app.exception_handler(NoResultFound)
async def not_found_handler(request: Request, exc: NoResultFound):
    """Repository lookups raise NoResultFound for missing or cancelled rows."""
    logger.info(f"Not found: {request.method} {request.url.path}")
    return JSONResponse(status_code=404, content={"detail": "Not found"})


@app.exception_handler(EventWindowError)
async def event_window_handler(request: Request, exc: EventWindowError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/")
async def root(request: Request):
    """Redirect root to the calendar."""
    rp = request.scope.get("root_path", "")
    return RedirectResponse(f"{rp}/calendar")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


def run():
    """Serve the app on the configured host and port."""
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
