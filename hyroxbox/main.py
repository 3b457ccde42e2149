# hyroxbox/main.py
import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from hyroxbox.api.v1.admin import router as admin_router
from hyroxbox.api.v1.auth import router as auth_router
from hyroxbox.api.v1.health import router as health_router
from hyroxbox.api.v1.pages import router as pages_router
from hyroxbox.core.config import get_settings
from hyroxbox.core.deps import templates
from hyroxbox.db.migrations import run_minimal_migrations
from hyroxbox.db.session import get_engine, init_db

# -----------------------------------------------------------------------------
# Logging: make sure we see clear startup errors in the console
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
log = logging.getLogger("hyroxbox")

# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------
app = FastAPI(title="HyroxBox Finder", debug=get_settings().DEBUG)

# -----------------------------------------------------------------------------
# Static files
# -----------------------------------------------------------------------------
STATIC_DIR = Path(__file__).resolve().parent / "static"
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

# -----------------------------------------------------------------------------
# Routers
# -----------------------------------------------------------------------------
app.include_router(health_router, prefix="/api/v1", tags=["health"])

app.include_router(pages_router, include_in_schema=False)
app.include_router(admin_router, tags=["admin"])
app.include_router(auth_router, include_in_schema=False)


# -----------------------------------------------------------------------------
# Startup: create tables if missing (non-destructive) + minimal migrations
# -----------------------------------------------------------------------------
@app.on_event("startup")
def _startup() -> None:
    """
    On startup, ensure that all SQLModel tables exist and run minimal migrations.

    - init_db() calls SQLModel.metadata.create_all(engine) and, when
      SEED_DEMO_DATA is set, seeds an empty database once.
    - run_minimal_migrations(engine) then upgrades tables created by older
      schema versions in an idempotent way.
    """
    try:
        engine = get_engine()
        init_db()
        run_minimal_migrations(engine)
        log.info("DB init + minimal migrations completed.")
    except Exception as e:
        # Never crash the app on init errors; log and allow /ping to work.
        log.exception("DB init or migrations failed: %s", e)


# -----------------------------------------------------------------------------
# Minimal health endpoint
# -----------------------------------------------------------------------------
@app.get("/ping")
def ping():
    """Simple liveness check."""
    return {"ok": True}


# -----------------------------------------------------------------------------
# Exception handlers
# -----------------------------------------------------------------------------
def _wants_json(request) -> bool:
    return (
        request.headers.get("X-Requested-With") == "XMLHttpRequest"
        or request.url.path.startswith("/api/")
        or "application/json" in request.headers.get("accept", "")
    )


@app.exception_handler(StarletteHTTPException)
async def custom_http_exception_handler(request, exc):
    """
    HTTP errors: JSON for API/AJAX callers, otherwise rendered pages.

    401 from a browser becomes a redirect to the login page.
    """
    if _wants_json(request):
        return JSONResponse(
            {"ok": False, "error": exc.detail}, status_code=exc.status_code
        )

    if exc.status_code == 401:
        target = quote(request.url.path, safe="/")
        return RedirectResponse(url=f"/auth/login?next={target}", status_code=303)

    # 404 page
    if exc.status_code == 404:
        return templates.TemplateResponse(
            request,
            "404.html",
            {"path": request.url.path},
            status_code=404,
        )
    # other HTTP errors
    return templates.TemplateResponse(
        request,
        "error.html",
        {"code": exc.status_code, "detail": exc.detail},
        status_code=exc.status_code,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Nice page for validation errors (422)."""
    if _wants_json(request):
        return JSONResponse(
            {
                "ok": False,
                "error": "Validation error",
                "errors": jsonable_encoder(exc.errors()),
            },
            status_code=422,
        )
    return templates.TemplateResponse(
        request,
        "error.html",
        {
            "code": 422,
            "detail": "Validation error",
            "errors": exc.errors(),
        },
        status_code=422,
    )
