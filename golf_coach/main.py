import json
import logging
import os
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

logger = logging.getLogger(__name__)

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import load_settings
from .gemini import AnalysisClient
from .lifecycle import ControllerRegistry, LifecycleController, SubmissionInProgress
from .renderer import Renderer
from .schemas import Club, Frequency

PACKAGE_DIR = Path(__file__).parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
STATIC_DIR = PACKAGE_DIR / "static"
SESSION_COOKIE = "golf_coach_session"

# --- Rate limiting ---
RATE_LIMIT_PER_IP = os.getenv("RATE_LIMIT_PER_IP", "10/minute")

limiter = Limiter(key_func=get_remote_address)
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    logger.info("Starting golf coach with %r", settings)

    client = AnalysisClient(
        settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
    )
    app.state.controllers = ControllerRegistry(
        lambda: LifecycleController(client, Renderer(templates)),
        max_sessions=settings.max_sessions,
    )
    yield


app = FastAPI(title="Golf Level Coach", lifespan=lifespan)
app.state.limiter = limiter
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


def _valid_session_id(value: str | None) -> bool:
    if not value:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


@app.middleware("http")
async def session_cookie(request: Request, call_next):
    """Give every browser its own session id, and so its own form state."""
    session_id = request.cookies.get(SESSION_COOKIE)
    is_new = not _valid_session_id(session_id)
    if is_new:
        session_id = str(uuid.uuid4())
    request.state.session_id = session_id

    response = await call_next(request)
    if is_new:
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return response


def _controller(request: Request) -> LifecycleController:
    return request.app.state.controllers.get(request.state.session_id)


def _page(request: Request, status_code: int = 200):
    controller = _controller(request)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "state": controller.state,
            "output": controller.renderer.html(),
            "frequencies": list(Frequency),
            "clubs": list(Club),
        },
        status_code=status_code,
    )


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def _error_response(request: Request, detail: str, status_code: int):
    """JSON for HTMX requests, the error page for everything else."""
    if request.headers.get("HX-Request"):
        return Response(
            content=json.dumps({"detail": detail}),
            status_code=status_code,
            media_type="application/json",
        )
    return templates.TemplateResponse(
        request,
        "error.html",
        {"detail": detail, "status_code": status_code},
        status_code=status_code,
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return _error_response(
        request, "Rate limit exceeded. Please slow down and try again later.", 429
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error_response(request, exc.detail, exc.status_code)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return _page(request)


@app.post("/analyze", response_class=HTMLResponse)
@limiter.limit(RATE_LIMIT_PER_IP)
async def analyze(request: Request):
    form = await request.form()
    controller = _controller(request)

    try:
        await controller.submit(form)
    except SubmissionInProgress as exc:
        raise HTTPException(
            status_code=409,
            detail="An analysis is already in progress. Please wait for it to finish.",
        ) from exc

    # HTMX swaps just the output region; a plain form post gets the whole page.
    if request.headers.get("HX-Request"):
        return HTMLResponse(controller.renderer.html())
    return _page(request)


@app.get("/status")
async def status(request: Request):
    state = _controller(request).state
    return JSONResponse({"state": state.phase.value, "busy": state.busy})
