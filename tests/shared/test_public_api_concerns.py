"""Unit tests for public API instrumentation concerns and the decorator."""

from __future__ import annotations

from opentelemetry.trace import StatusCode

from packages.tincture_shared.envelope import (
    EnvelopeKind,
    EnvelopeMeta,
    failure,
    new_meta,
    success,
)
from packages.tincture_shared.errors import validation_error
from packages.tincture_shared.logging import (
    CompletionContext,
    InvocationContext,
    PublicApiMetricsConcern,
    PublicApiTracingConcern,
    public_api_instrumented,
)


class _FakeCounter:
    """In-memory fake counter recording each add call."""

    def __init__(self) -> None:
        self.calls: list[tuple[int | float, dict[str, str]]] = []

    def add(self, amount: int | float, attributes: dict[str, str]) -> None:
        self.calls.append((amount, dict(attributes)))


class _FakeHistogram:
    """In-memory fake histogram recording each sample."""

    def __init__(self) -> None:
        self.samples: list[tuple[float, dict[str, str]]] = []

    def record(self, amount: float, attributes: dict[str, str]) -> None:
        self.samples.append((amount, dict(attributes)))


class _FakeSpan:
    """In-memory fake span capturing attributes and lifecycle updates."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.attributes: dict[str, object] = {}
        self.statuses: list[object] = []
        self.ended = False

    def set_attribute(self, key: str, value: object) -> None:
        self.attributes[key] = value

    def set_status(self, status: object) -> None:
        self.statuses.append(status)

    def end(self) -> None:
        self.ended = True


class _FakeTracer:
    def __init__(self) -> None:
        self.spans: list[_FakeSpan] = []

    def start_span(self, name: str) -> _FakeSpan:
        span = _FakeSpan(name)
        self.spans.append(span)
        return span


class _RecordingConcern:
    """Concern capturing every invocation and completion it sees."""

    def __init__(self) -> None:
        self.invocations: list[InvocationContext] = []
        self.completions: list[CompletionContext] = []

    def on_invocation(self, context: InvocationContext) -> None:
        self.invocations.append(context)

    def on_completion(self, context: CompletionContext) -> None:
        self.completions.append(context)


class _ExplodingConcern:
    def on_invocation(self, context: InvocationContext) -> None:
        raise RuntimeError("concern down")

    def on_completion(self, context: CompletionContext) -> None:
        raise RuntimeError("concern down")


class _FakeLogger:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))


def _meta() -> EnvelopeMeta:
    return new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="operator")


def _invocation(component_id: str = "service_identifier_registry") -> InvocationContext:
    return InvocationContext(
        component_id=component_id,
        api_name="rename",
        trace_id="trace-1",
        envelope_id="env-1",
        principal="operator",
        references={"sequence_id": "3"},
    )


def test_metrics_concern_emits_calls_and_duration_for_success() -> None:
    calls = _FakeCounter()
    durations = _FakeHistogram()
    errors = _FakeCounter()
    concern = PublicApiMetricsConcern(
        calls_total=calls, duration_ms=durations, errors_total=errors
    )

    concern.on_completion(
        CompletionContext(
            invocation=_invocation(),
            success=True,
            duration_ms=12.5,
            errors=[],
            error_categories=[],
        )
    )

    expected = {
        "component_id": "service_identifier_registry",
        "api_name": "rename",
        "outcome": "success",
    }
    assert calls.calls == [(1, expected)]
    assert durations.samples == [(12.5, expected)]
    assert errors.calls == []


def test_metrics_concern_counts_failures_by_category() -> None:
    errors = _FakeCounter()
    concern = PublicApiMetricsConcern(
        calls_total=_FakeCounter(), duration_ms=_FakeHistogram(), errors_total=errors
    )

    concern.on_completion(
        CompletionContext(
            invocation=_invocation(),
            success=False,
            duration_ms=1.0,
            errors=["NAME_TAKEN: display name already reserved"],
            error_categories=["conflict"],
        )
    )

    assert errors.calls == [
        (
            1,
            {
                "component_id": "service_identifier_registry",
                "api_name": "rename",
                "error_category": "conflict",
            },
        )
    ]


def test_tracing_concern_opens_and_ends_one_span() -> None:
    """Completion should set standard attributes and end the span."""
    tracer = _FakeTracer()
    concern = PublicApiTracingConcern(tracer=tracer)  # type: ignore[arg-type]
    invocation = _invocation()

    concern.on_invocation(invocation)
    concern.on_completion(
        CompletionContext(
            invocation=invocation,
            success=False,
            duration_ms=3.0,
            errors=["NOT_HOLDER: caller does not hold this identifier"],
            error_categories=["policy"],
        )
    )

    span = tracer.spans[0]
    assert span.name == "public_api.service_identifier_registry.rename"
    assert span.attributes["reference.sequence_id"] == "3"
    assert span.attributes["success"] is False
    assert span.attributes["errors.count"] == 1
    assert span.statuses[0].status_code is StatusCode.ERROR
    assert span.ended is True


def test_decorator_reports_envelope_outcome_to_concerns() -> None:
    recorder = _RecordingConcern()

    class _Service:
        @public_api_instrumented(
            component_id="service_identifier_registry",
            id_fields=("sequence_id",),
            concerns=(recorder,),
        )
        def rename(self, *, meta: EnvelopeMeta, sequence_id: int, new_name: str):
            if new_name == "":
                return failure(
                    meta=meta,
                    errors=[validation_error("new_name is required")],
                )
            return success(meta=meta, payload=new_name)

    meta = _meta()
    _Service().rename(meta=meta, sequence_id=3, new_name="Sky")
    _Service().rename(meta=meta, sequence_id=4, new_name="")

    first, second = recorder.completions
    assert recorder.invocations[0].api_name == "rename"
    assert recorder.invocations[0].trace_id == meta.trace_id
    assert recorder.invocations[0].references == {"sequence_id": "3"}
    assert first.success is True
    assert second.success is False
    assert second.error_categories == ["validation"]
    assert second.errors == ["VALIDATION_ERROR: new_name is required"]


def test_decorator_survives_failing_concern_and_logs_it() -> None:
    """A broken concern never changes the wrapped call's result."""
    logger = _FakeLogger()

    @public_api_instrumented(
        component_id="service_identifier_registry",
        concerns=(_ExplodingConcern(),),
        logger=logger,
    )
    def health(*, meta: EnvelopeMeta):
        return success(meta=meta, payload="ok")

    result = health(meta=_meta())

    assert result.value == "ok"
    assert ("warning", "Public API instrumentation concern failed") in logger.messages
    assert ("info", "Public API completion") in logger.messages
