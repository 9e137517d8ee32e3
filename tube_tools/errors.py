"""Tool error taxonomy.

Every exception raised inside a tool's execute() is funnelled through
classify_error() at the run() boundary and becomes a failure envelope.
"""

import asyncio

import httpx
from pydantic import ValidationError as PydanticValidationError


class ToolError(Exception):
    """Base exception for tool execution."""

    kind = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ToolValidationError(ToolError):
    """Malformed caller input. Raised before any upstream call."""

    kind = "validation"


class ParameterConflictError(ToolValidationError):
    """A high-level filter disagrees with an explicit low-level parameter."""

    kind = "conflict"


class UpstreamError(ToolError):
    """The upstream API call failed (network, auth, quota, server)."""

    kind = "upstream"


class ToolNotFoundError(ToolError):
    """Unknown tool name, or a referenced resource does not exist."""

    kind = "not_found"


class InternalToolError(ToolError):
    """Any other unexpected failure."""

    kind = "internal"


class ToolRegistrationError(Exception):
    """A tool descriptor or class failed registry validation."""

    pass


class DuplicateToolError(ToolRegistrationError):
    """A second tool tried to register under an existing name."""

    pass


def _format_pydantic_error(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "input"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "Invalid parameters: " + "; ".join(parts)


def classify_error(error: BaseException, operation: str | None = None) -> ToolError:
    """Map an arbitrary exception onto the tool error taxonomy.

    Messages stay human readable; tracebacks are never included.
    """
    if isinstance(error, ToolError):
        return error

    prefix = f"{operation}: " if operation else ""

    if isinstance(error, PydanticValidationError):
        return ToolValidationError(_format_pydantic_error(error))
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return UpstreamError(f"{prefix}operation timed out")
    if isinstance(error, httpx.HTTPError):
        return UpstreamError(f"{prefix}upstream request failed: {error}")

    return InternalToolError(
        f"{prefix}unexpected {type(error).__name__} during tool execution"
    )
