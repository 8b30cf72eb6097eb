"""OpenTelemetry tracing support for codeforge workflows.

Only the OpenTelemetry API is used here. Without a configured SDK the tracer
is a no-op; an application that installs a TracerProvider gets real spans.
"""

from opentelemetry import trace

_TRACER_NAME = "codeforge"


def get_tracer() -> trace.Tracer:
    """Get the OpenTelemetry tracer for codeforge spans."""
    return trace.get_tracer(_TRACER_NAME)
