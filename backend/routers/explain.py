"""
Explain router: the single endpoint the browser extension calls.

Stages run in order and stop at the first failure:
method gate → per-client rate limit → body validation → completion call.
CORS headers are added to every response by the middleware in main.py.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from models.schemas import ErrorResponse, ExplainRequest
from rate_limit import SlidingWindowRateLimiter, client_identifier, get_rate_limiter
from services.completion import INSUFFICIENT_QUOTA, RATE_LIMIT_EXCEEDED, CompletionClient
from services.explainer import generate_explanation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["explain"])

# Common verbs are routed here; any other verb gets the same 405 body from
# the handler registered in main.py.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

METHOD_NOT_ALLOWED = "Method not allowed"
RATE_LIMITED = "Rate limit exceeded. Please try again later."
INVALID_BODY = "Invalid request body"
EXPLANATION_FAILED = "Failed to get explanation. Please try again."

_UPSTREAM_ERRORS = {
    INSUFFICIENT_QUOTA: (503, "Service temporarily unavailable. Please try again later."),
    RATE_LIMIT_EXCEEDED: (429, "Service is busy. Please try again in a moment."),
}


def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion_client


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def _read_body(request: Request) -> dict:
    """Parsed JSON object body; anything else reads as an empty object."""
    try:
        payload = await request.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _validation_message(exc: ValidationError) -> str:
    # Errors are listed in field order, so a bad `text` always comes first.
    first = exc.errors()[0]
    cause = first.get("ctx", {}).get("error")
    if isinstance(cause, ValueError):
        return str(cause)
    return INVALID_BODY


@router.api_route("/explain", methods=_ALL_METHODS)
async def explain(
    request: Request,
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
    completion_client: CompletionClient = Depends(get_completion_client),
):
    """Explains a text snippet, optionally in light of its surrounding context."""
    if request.method == "OPTIONS":
        return Response(status_code=200)
    if request.method != "POST":
        return error_response(405, METHOD_NOT_ALLOWED)

    client_id = client_identifier(request)
    if not limiter.admit(client_id):
        logger.warning("Rate limit exceeded for client '%s'", client_id)
        return error_response(429, RATE_LIMITED)

    try:
        explain_request = ExplainRequest.model_validate(await _read_body(request))
    except ValidationError as exc:
        return error_response(400, _validation_message(exc))

    try:
        result = await generate_explanation(explain_request, completion_client)
    except Exception as exc:
        code = getattr(exc, "code", None)
        logger.exception("Explanation failed for client '%s' (code=%s)", client_id, code)
        status_code, message = _UPSTREAM_ERRORS.get(code if isinstance(code, str) else None, (500, EXPLANATION_FAILED))
        return error_response(status_code, message)

    logger.info(
        "Explained %d chars for client '%s' (extension %s, %d tokens)",
        len(explain_request.text),
        client_id,
        request.headers.get("x-extension-version", "n/a"),
        result.usage.total_tokens,
    )
    return result
