"""Tool Registry.

Single process-wide name -> tool instance map, built once from an explicit
manifest. Tool execution is observed here: one span, one counter increment
and one duration sample per call.
"""

import time
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from tube_config.settings import get_settings
from tube_obs.logging import get_logger
from tube_obs.metrics import quota_units_total, tool_execution_duration, tool_executions_total
from tube_obs.tracing import get_tracer
from tube_tools.base import BaseTool, ResponseMetadata, ToolDescriptor, ToolResponse
from tube_tools.errors import DuplicateToolError, ToolNotFoundError, ToolRegistrationError, classify_error

logger = get_logger(__name__)
tracer = get_tracer(__name__)


def validate_tool_class(tool_class: Any) -> ToolDescriptor:
    """Check a manifest entry and return its validated descriptor."""
    if not isinstance(tool_class, type) or not issubclass(tool_class, BaseTool):
        raise ToolRegistrationError(f"{tool_class!r} is not a BaseTool subclass")

    raw = getattr(tool_class, "descriptor", None)
    if raw is None:
        raise ToolRegistrationError(f"{tool_class.__name__} has no descriptor")
    if isinstance(raw, ToolDescriptor):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, Mapping):
        raise ToolRegistrationError(f"{tool_class.__name__}.descriptor must be a ToolDescriptor or mapping")

    try:
        descriptor = ToolDescriptor.model_validate(raw)
    except ValidationError as e:
        raise ToolRegistrationError(f"{tool_class.__name__} has an invalid descriptor: {e}") from e

    if getattr(tool_class, "input_model", None) is None:
        raise ToolRegistrationError(f"{tool_class.__name__} has no input_model")
    return descriptor


class ToolRegistry:
    """Tool registry with name and capability lookup."""

    def __init__(self):
        self._tools: dict[str, BaseTool] = {}
        self._loaded = False

    def register(self, tool: BaseTool) -> None:
        """Register a tool instance. Names are unique."""
        name = tool.descriptor.name
        if name in self._tools:
            raise DuplicateToolError(f"Tool already registered: {name}")
        self._tools[name] = tool

    def load_all_tools(self, client: Any, manifest: Iterable[type] | None = None) -> int:
        """Instantiate every manifest entry against the shared client.

        Malformed entries, including ones whose constructor raises, are
        logged and skipped. A second call is a no-op. Duplicate names
        propagate DuplicateToolError.

        Returns:
            Number of registered tools
        """
        if self._loaded:
            return self.tool_count

        if manifest is None:
            from tube_tools.manifest import TOOL_CLASSES

            manifest = TOOL_CLASSES

        for tool_class in manifest:
            try:
                descriptor = validate_tool_class(tool_class)
            except ToolRegistrationError as e:
                logger.warning("tool_skipped", entry=repr(tool_class), reason=str(e))
                continue

            registry = self if descriptor.requires_registry else None
            try:
                tool = tool_class(client, registry=registry)
            except Exception as e:
                logger.warning(
                    "tool_skipped",
                    entry=repr(tool_class),
                    reason=f"{type(e).__name__} during construction: {e}",
                )
                continue

            self.register(tool)
            logger.debug("tool_registered", tool=descriptor.name, quota_cost=descriptor.quota_cost)

        self._loaded = True
        logger.info("tools_loaded", count=self.tool_count)
        return self.tool_count

    def list_tools(self) -> tuple[ToolDescriptor, ...]:
        """Immutable snapshot of every registered descriptor."""
        return tuple(tool.descriptor for tool in self._tools.values())

    def get_tool(self, name: str) -> ToolDescriptor | None:
        """Get a tool's descriptor by name."""
        tool = self._tools.get(name)
        return tool.descriptor if tool is not None else None

    def get(self, name: str) -> BaseTool | None:
        """Get tool instance by name."""
        return self._tools.get(name)

    def filter_by_capability(self, capability: str) -> list[BaseTool]:
        """Filter tools by capability tag."""
        return [t for t in self._tools.values() if capability in t.descriptor.capabilities]

    def has_tools(self) -> bool:
        return bool(self._tools)

    @property
    def tool_count(self) -> int:
        return len(self._tools)

    async def execute_tool(
        self,
        name: str,
        input_data: Any,
        client: Any = None,
        timeout: float | None = None,
    ) -> ToolResponse:
        """Run a tool by name and return its envelope. Never raises.

        Args:
            name: Registered tool name
            input_data: Tool parameters (camelCase mapping or input model)
            client: Optional client override; the tool is rebuilt against it
            timeout: Per-call timeout in seconds (default TOOL_TIMEOUT_SECONDS)
        """
        started = time.perf_counter()
        tool = self._tools.get(name)
        if tool is None:
            tool_executions_total.labels(tool_name="unknown", status="not_found").inc()
            logger.warning("tool_not_found", tool=name)
            error = ToolNotFoundError(f"Tool not found: {name}")
            return ToolResponse.fail(
                error.message,
                ResponseMetadata(request_time=(time.perf_counter() - started) * 1000, source="registry"),
            )

        if timeout is None:
            timeout = get_settings().TOOL_TIMEOUT_SECONDS

        with tracer.start_as_current_span("tool.execute") as span:
            span.set_attribute("tool.name", name)
            try:
                if client is not None and client is not tool.client:
                    registry = self if tool.descriptor.requires_registry else None
                    tool = type(tool)(client, registry=registry)
                response = await tool.run(input_data, timeout=timeout)
            except Exception as exc:
                error = classify_error(exc, operation=name)
                logger.exception("tool_dispatch_failed", tool=name)
                response = ToolResponse.fail(
                    error.message,
                    ResponseMetadata(request_time=(time.perf_counter() - started) * 1000),
                )
            span.set_attribute("tool.success", response.success)
            span.set_attribute("tool.quota_used", response.metadata.quota_used)

        status = "success" if response.success else "failure"
        tool_executions_total.labels(tool_name=name, status=status).inc()
        tool_execution_duration.labels(tool_name=name).observe(time.perf_counter() - started)
        if response.metadata.quota_used:
            quota_units_total.labels(tool_name=name).inc(response.metadata.quota_used)

        return response
