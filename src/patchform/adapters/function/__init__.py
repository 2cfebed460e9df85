"""Public interface for the function envelope adapter."""

from __future__ import annotations

from .schema import RunFunctionRequest, RunFunctionResponse
from .translator import build_response, parse_request

__all__ = [
    "RunFunctionRequest",
    "RunFunctionResponse",
    "build_response",
    "parse_request",
]
