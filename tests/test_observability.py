"""Tests for the Tracer context manager and PipelineMetrics."""
import pytest

from core.observability import PipelineMetrics, OperationTrace, Tracer, metrics


class TestTracer:

    def test_success_is_recorded(self):
        before = metrics.total_requests
        with Tracer("UnitOp", "input") as trace:
            pass

        assert trace.success is True
        assert trace.duration_ms is not None
        assert trace.input_summary == "input"
        assert metrics.total_requests == before + 1

    def test_exceptions_are_not_suppressed(self):
        before = metrics.failed_requests
        with pytest.raises(ValueError):
            with Tracer("FailingOp"):
                raise ValueError("boom")
        assert metrics.failed_requests == before + 1


class TestPipelineMetrics:

    def test_summary(self):
        pm = PipelineMetrics()
        ok = OperationTrace(operation="LLMCall")
        ok.complete(success=True)
        failed = OperationTrace(operation="ApprovalCommit")
        failed.complete(success=False, error="db down")

        pm.record(ok)
        pm.record(failed)
        pm.plans_generated = 2

        summary = pm.summary()
        assert summary["total_requests"] == 2
        assert summary["success_rate"] == "50.0%"
        assert set(summary["operation_avg_latency"]) == {"LLMCall", "ApprovalCommit"}
        assert summary["plans_generated"] == 2

    def test_empty_metrics(self):
        assert PipelineMetrics().success_rate == 0.0
        assert PipelineMetrics().avg_latency_ms == 0.0
