"""Dining Companions: post a dining request, find people to share the meal."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.scheduler import shutdown_scheduler, start_scheduler
from app.routes import auth, history, profile, requests
from app.routes.deps import NotSignedIn, wants_json

APP_DIR = Path(__file__).resolve().parent
LOG_FILE = Path.home() / ".logs" / "dining" / "latest.log"


def configure_logging():
    """Send application logs to ~/.logs/dining/latest.log."""
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        filename=str(LOG_FILE),
    )


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables, then run the close-out job while the app is up."""
    logger.info(f"Starting {settings.app_name}")
    create_db_and_tables()
    if settings.scheduler_enabled:
        start_scheduler()
    yield
    shutdown_scheduler()
    logger.info(f"{settings.app_name} shut down")


app = FastAPI(
    title=settings.app_name,
    description="Post dining requests and find companions to share a meal with",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Holds the signed-in user id and queued notices
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key, same_site="lax")

app.mount("/static", StaticFiles(directory=str(APP_DIR / "static")), name="static")

for router_module in (auth, requests, history, profile):
    app.include_router(router_module.router)


@app.exception_handler(NotSignedIn)
async def not_signed_in(request: Request, exc: NotSignedIn):
    """Send anonymous page requests to sign-in, answer 401 to AJAX calls."""
    if wants_json(request):
        return JSONResponse({"detail": "Not signed in"}, status_code=401)
    return RedirectResponse("/auth/signin", status_code=303)


@app.get("/")
async def root(request: Request):
    """Redirect root to the browse page."""
    rp = request.scope.get("root_path", "")
    return RedirectResponse(f"{rp}/requests")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
