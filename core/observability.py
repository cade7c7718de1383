"""Observability Module - Logging, Tracing, and Metrics

This module provides:
1. Structured logging configuration
2. Tracing of the blocking operations (LLM calls, plan commits)
3. Per-turn metrics collection
"""
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(name)s | %(levelname)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger("fitcoach")


@dataclass
class OperationTrace:
    """Represents a single traced operation."""
    operation: str
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    duration_ms: Optional[float] = None
    input_summary: str = ""
    success: bool = True
    error: Optional[str] = None

    def complete(self, success: bool = True, error: str = None):
        """Mark trace as complete."""
        self.end_time = datetime.now()
        self.duration_ms = (self.end_time - self.start_time).total_seconds() * 1000
        self.success = success
        self.error = error


@dataclass
class PipelineMetrics:
    """Aggregated metrics for traced operations and conversation turns."""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: float = 0
    operation_latencies: Dict[str, list] = field(default_factory=dict)
    plans_generated: int = 0
    plans_approved: int = 0

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests

    @property
    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests

    def record(self, trace: OperationTrace):
        """Record a trace into metrics."""
        self.total_requests += 1
        if trace.success:
            self.successful_requests += 1
        else:
            self.failed_requests += 1

        if trace.duration_ms is not None:
            self.total_latency_ms += trace.duration_ms
            self.operation_latencies.setdefault(trace.operation, []).append(trace.duration_ms)

    def summary(self) -> Dict[str, Any]:
        """Return metrics summary."""
        op_avg = {
            op: sum(latencies) / len(latencies)
            for op, latencies in self.operation_latencies.items()
            if latencies
        }
        return {
            "total_requests": self.total_requests,
            "success_rate": f"{self.success_rate:.1%}",
            "avg_latency_ms": f"{self.avg_latency_ms:.0f}ms",
            "operation_avg_latency": op_avg,
            "plans_generated": self.plans_generated,
            "plans_approved": self.plans_approved,
        }


# Global metrics instance
metrics = PipelineMetrics()


class Tracer:
    """Context manager for tracing a blocking operation."""

    def __init__(self, operation: str, input_data: Any = None):
        self.trace = OperationTrace(operation=operation)
        if input_data:
            self.trace.input_summary = str(input_data)[:200]

    def __enter__(self):
        logger.info(f"▶ {self.trace.operation} started")
        return self.trace

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.trace.complete(success=False, error=str(exc_val))
            logger.error(f"✖ {self.trace.operation} failed: {exc_val}")
        else:
            self.trace.complete(success=True)
            logger.info(f"✔ {self.trace.operation} completed in {self.trace.duration_ms:.0f}ms")

        metrics.record(self.trace)
        return False  # Don't suppress exceptions


def get_metrics_summary() -> Dict[str, Any]:
    """Get current metrics summary for dashboard/API."""
    return metrics.summary()
