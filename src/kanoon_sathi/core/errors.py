"""
Error Taxonomy & Global Error Handling

This module defines the application-wide exception hierarchy and the FastAPI
exception handlers registered by the application factory.

Taxonomy
--------
- UpstreamServiceError: a model, embedding or search call failed.
- StageTimeoutError: a pipeline stage exceeded its time budget.
- CorpusConfigurationError: unknown corpus or embedding dimensionality
  mismatch. Always fatal, never retried.
- ChatNotFoundError: persisted chat missing or owned by someone else.

Empty results (no passages, no history) are never errors.

Design Goals
------------
- Never leak internal exception details to clients
- Always return deterministic, machine-readable error responses
- Log full stack traces internally for debugging
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("kanoon.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class KanoonError(RuntimeError):
    """Base class for all application errors."""


class UpstreamServiceError(KanoonError):
    """Raised when a hosted model, embedding or search call fails."""


class StageTimeoutError(UpstreamServiceError):
    """Raised when a pipeline stage does not complete within its timeout."""

    def __init__(self, stage: str, timeout: float) -> None:
        super().__init__(f"Stage '{stage}' timed out after {timeout:.1f}s")
        self.stage = stage
        self.timeout = timeout


class CorpusConfigurationError(KanoonError):
    """Raised for unknown corpora or embedding dimensionality mismatches."""


class ChatNotFoundError(KanoonError):
    """Raised when a chat does not exist or is not owned by the caller."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def chat_not_found_handler(
    request: Request,
    exc: ChatNotFoundError,
) -> JSONResponse:
    """Translate a missing or foreign chat into a 404."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "detail": "Chat not found"},
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "detail": "Internal server error",
    }

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=payload,
    )
