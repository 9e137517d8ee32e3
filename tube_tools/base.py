"""Tool Interface & Envelope.

A tool is a class with a static ToolDescriptor and an async execute(). The
registry builds one instance per class, bound to the shared client; callers
only ever see run(), which always returns a ToolResponse.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from tube_obs.logging import get_logger
from tube_tools.errors import InternalToolError, classify_error
from tube_tools.quota import QuotaLedger

logger = get_logger(__name__)

DEFAULT_SOURCE = "YouTube Data API v3"


class ToolDescriptor(BaseModel):
    """Static description of a tool, published to callers."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    name: str
    description: str
    input_schema: dict[str, Any]
    quota_cost: float | None = Field(None, ge=0)
    requires_registry: bool = False
    version: str = "1.0.0"
    capabilities: tuple[str, ...] = ()

    @field_validator("name", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @field_validator("input_schema")
    @classmethod
    def _object_schema(cls, schema: dict[str, Any]) -> dict[str, Any]:
        if schema.get("type") != "object":
            raise ValueError("inputSchema.type must be 'object'")
        properties = schema.get("properties")
        if not isinstance(properties, Mapping):
            raise ValueError("inputSchema.properties must be an object")
        required = schema.get("required", [])
        if not isinstance(required, list):
            raise ValueError("inputSchema.required must be an array")
        missing = [key for key in required if key not in properties]
        if missing:
            raise ValueError(f"inputSchema.required names unknown properties: {', '.join(missing)}")
        return schema

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def tool_descriptor(
    name: str,
    description: str,
    input_model: type[BaseModel],
    quota_cost: float | None = None,
    requires_registry: bool = False,
    capabilities: tuple[str, ...] = (),
    version: str = "1.0.0",
) -> ToolDescriptor:
    """Build a descriptor whose input schema is the model's camelCase JSON Schema."""
    return ToolDescriptor(
        name=name,
        description=description,
        input_schema=input_model.model_json_schema(by_alias=True),
        quota_cost=quota_cost,
        requires_registry=requires_registry,
        capabilities=capabilities,
        version=version,
    )


# ============================================================================
# ENVELOPE
# ============================================================================


class ResponseMetadata(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    quota_used: float = Field(0, ge=0)
    request_time: float = Field(0, ge=0, description="Wall-clock milliseconds")
    source: str = DEFAULT_SOURCE
    estimated_quota: float | None = Field(None, ge=0)


class ToolResponse(BaseModel):
    """Uniform result envelope.

    success implies data is present; failure implies a non-empty error
    and no data.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    data: Any = None
    error: str | None = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    @model_validator(mode="after")
    def _check_outcome(self) -> "ToolResponse":
        if self.success:
            if self.data is None:
                raise ValueError("successful response must carry data")
            if self.error:
                raise ValueError("successful response cannot carry an error")
        else:
            if not self.error or not self.error.strip():
                raise ValueError("failed response must carry a non-empty error")
            if self.data is not None:
                raise ValueError("failed response cannot carry data")
        return self

    @classmethod
    def ok(cls, data: Any, metadata: ResponseMetadata) -> "ToolResponse":
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, metadata: ResponseMetadata) -> "ToolResponse":
        return cls(success=False, error=error, metadata=metadata)

    def to_dict(self) -> dict[str, Any]:
        payload = self.model_dump(by_alias=True)
        if payload["metadata"].get("estimatedQuota") is None:
            payload["metadata"].pop("estimatedQuota", None)
        return payload


@dataclass
class ExecutionContext:
    """Per-call state handed to execute()."""

    tool_name: str
    source: str = DEFAULT_SOURCE
    ledger: QuotaLedger = field(default_factory=QuotaLedger)
    started_at: float = field(default_factory=time.perf_counter)
    estimated_quota: float | None = None

    @property
    def elapsed_ms(self) -> float:
        return max((time.perf_counter() - self.started_at) * 1000, 0.0)

    def metadata(self) -> ResponseMetadata:
        return ResponseMetadata(
            quota_used=self.ledger.total,
            request_time=self.elapsed_ms,
            source=self.source,
            estimated_quota=self.estimated_quota,
        )


# ============================================================================
# BASE TOOL
# ============================================================================


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, exclude_none=True)
    return data


class BaseTool(ABC):
    """Base class for every registered tool.

    Subclasses set `descriptor` and `input_model` and implement execute().
    """

    descriptor: ClassVar[ToolDescriptor]
    input_model: ClassVar[type[BaseModel]]
    source: ClassVar[str] = DEFAULT_SOURCE

    def __init__(self, client: Any, registry: Any = None):
        """Bind the tool to the shared client (and registry, for workflows)."""
        self.client = client
        self.registry = registry

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def description(self) -> str:
        return self.descriptor.description

    def parse_input(self, input_data: Any) -> BaseModel:
        if isinstance(input_data, self.input_model):
            return input_data
        return self.input_model.model_validate(input_data if input_data is not None else {})

    async def run(self, input_data: Any, timeout: float | None = None) -> ToolResponse:
        """Validate input, execute, and wrap the outcome in an envelope.

        Never raises. Partial quota spent before a failure is still reported.
        """
        ctx = ExecutionContext(tool_name=self.name, source=self.source)
        try:
            params = self.parse_input(input_data)
            if timeout is not None:
                data = await asyncio.wait_for(self.execute(ctx, params), timeout)
            else:
                data = await self.execute(ctx, params)
            if data is None:
                raise InternalToolError(f"{self.name} returned no data")
        except Exception as exc:
            error = classify_error(exc, operation=self.name)
            if isinstance(error, InternalToolError):
                logger.exception("tool_failed", tool=self.name, kind=error.kind)
            else:
                logger.warning(
                    "tool_failed",
                    tool=self.name,
                    kind=error.kind,
                    error=error.message,
                    quota_used=ctx.ledger.total,
                )
            return ToolResponse.fail(error.message, ctx.metadata())

        logger.debug("tool_succeeded", tool=self.name, quota_used=ctx.ledger.total)
        return ToolResponse.ok(_dump(data), ctx.metadata())

    @abstractmethod
    async def execute(self, ctx: ExecutionContext, input_data: Any) -> Any:
        """Execute tool action.

        Args:
            ctx: Per-call context; charge upstream calls to ctx.ledger
            input_data: Validated instance of input_model

        Returns:
            Output model or JSON-compatible data
        """
        ...
