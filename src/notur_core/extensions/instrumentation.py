"""Tracing for extension lifecycle phases."""

from collections.abc import Iterator
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

tracer = trace.get_tracer("notur_core.extensions")


@contextmanager
def instrument_phase(phase: str, extension_id: str) -> Iterator[Span]:
    """Span around one extension's register or boot.

    Errors raised inside the block are recorded on the span and re-raised.
    """
    with tracer.start_as_current_span(
        f"notur.{phase}", record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute("notur.extension_id", extension_id)
        span.set_attribute("notur.phase", phase)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
