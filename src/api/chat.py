"""Completion relay endpoint.

Accepts ``{"messages": [...]}``, forwards it to the completion provider and
returns the provider JSON verbatim. Every failure collapses into a 500 with a
generic ``{"error": ...}`` envelope. Only the CORS preflight method is handled
differently; all other methods go through the same path.
"""

import logging

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.models.schemas import ErrorEnvelope, RelayRequest
from src.relay.completion import UpstreamError, get_completion_relay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["chat"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

INVALID_MESSAGES_ERROR = "Invalid messages format"
INTERNAL_ERROR = "Internal server error"

RELAY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorEnvelope(error=message).model_dump(),
        headers=CORS_HEADERS,
    )


async def _parse_relay_request(request: Request) -> RelayRequest:
    """Read and validate the relay body.

    Raises:
        ValueError: If the body is not JSON or ``messages`` is missing or not an array.
    """
    try:
        body = await request.json()
    except ValueError as e:
        raise ValueError(INVALID_MESSAGES_ERROR) from e

    try:
        return RelayRequest.model_validate(body)
    except ValidationError as e:
        raise ValueError(INVALID_MESSAGES_ERROR) from e


@router.api_route("/chat", methods=RELAY_METHODS, response_model=None)
async def relay_chat(request: Request) -> Response:
    """Relay a conversation to the completion provider.

    Args:
        request: Incoming request; the body must carry a ``messages`` array.

    Returns:
        Provider JSON on success, empty 200 for preflight, or a 500 error envelope.
    """
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)

    try:
        relay_request = await _parse_relay_request(request)
    except ValueError as e:
        logger.warning(f"Rejected relay request: {e}")
        return _error_response(str(e))

    try:
        relay = get_completion_relay()
        data = await relay.complete(relay_request.messages)
    except UpstreamError as e:
        logger.error(f"Error in chat relay: {e}")
        return _error_response(str(e))
    except Exception as e:
        logger.exception(f"Unexpected error in chat relay: {e}")
        return _error_response(INTERNAL_ERROR)

    return JSONResponse(content=data, headers=CORS_HEADERS)
