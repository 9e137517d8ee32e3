"""
Tube-Scout Observability Package.

Provides:
- Structured logging (structlog)
- Metrics (Prometheus)
- Distributed tracing (OpenTelemetry)
"""

__all__ = ["logging", "metrics", "tracing"]
