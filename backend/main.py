import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import load_settings
from rate_limit import SlidingWindowRateLimiter
from routers import explain
from routers.explain import METHOD_NOT_ALLOWED, error_response
from services.completion import OpenAICompletionClient

#venv\Scripts\uvicorn main:app --reload --port 8000

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

if not settings.openai_api_key:
    logger.warning(
        "OPENAI_API_KEY is not set. Explanation requests will fail with 500 until "
        "it is configured in the environment or backend/.env."
    )

app = FastAPI(title="Snippet Explainer API")

# Constructed once per process; routers read these through dependencies.
app.state.rate_limiter = SlidingWindowRateLimiter(
    limit=settings.rate_limit,
    window_ms=settings.rate_limit_window_ms,
)
app.state.completion_client = OpenAICompletionClient(
    api_key=settings.openai_api_key,
    base_url=settings.openai_base_url,
    timeout=settings.openai_timeout,
)

# --- CORS ---
# The extension calls from its own origin, so every response (errors and
# preflight included) carries the same permissive headers.
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-Extension-Version",
}


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


app.include_router(explain.router)


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    # Verbs the explain route does not list are rejected by the router itself.
    if exc.status_code == 405:
        return error_response(405, METHOD_NOT_ALLOWED)
    return await http_exception_handler(request, exc)
