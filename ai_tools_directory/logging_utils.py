"""Helpers for structured task logging."""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Dict
from typing import Optional

SUMMARY_PREFIX = "PIPELINE_SUMMARY"


@dataclass
class _PipelineSummaryState:
    pipeline: str
    logger: logging.Logger
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    start_monotonic: float = field(default_factory=time.perf_counter)
    status: str = "success"
    attributes: Dict[str, Any] = field(default_factory=dict)
    metrics: Dict[str, float] = field(default_factory=dict)
    error_type: Optional[str] = None

    def add_metric(self, name: str, value: Optional[float]) -> None:
        """Record a numeric metric if a value is provided."""
        if value is None:
            return
        if isinstance(value, bool):  # treat bools as integers
            value = int(value)
        try:
            numeric = float(value)
        except (TypeError, ValueError):
            return
        self.metrics[name] = int(numeric) if numeric.is_integer() else numeric

    def add_attribute(self, name: str, value: Any) -> None:
        if value is None:
            return
        if isinstance(value, (str, int, float, bool)):
            self.attributes[name] = value
        else:
            self.attributes[name] = str(value)

    def mark_failed(self, *, error_type: Optional[str] = None) -> None:
        self.status = "error"
        if error_type:
            self.error_type = error_type

    def payload(self) -> Dict[str, Any]:
        finished_at = datetime.now(timezone.utc)
        duration = max(0.0, time.perf_counter() - self.start_monotonic)
        payload: Dict[str, Any] = {
            "pipeline": self.pipeline,
            "status": self.status,
            "started_at": self.started_at.isoformat(),
            "finished_at": finished_at.isoformat(),
            "duration_seconds": round(duration, 3),
        }
        if self.attributes:
            payload["attributes"] = self.attributes
        if self.metrics:
            payload["metrics"] = self.metrics
        if self.error_type:
            payload["error_type"] = self.error_type
        return payload

    def finalize(self) -> None:
        self.logger.info(f"{SUMMARY_PREFIX} {json.dumps(self.payload(), sort_keys=True)}")


@contextmanager
def pipeline_summary(pipeline: str, *, logger_name: Optional[str] = None):
    """Context manager that logs a structured summary for a task run."""

    logger = logging.getLogger(logger_name or f"pipeline_summary.{pipeline}")
    state = _PipelineSummaryState(pipeline=pipeline, logger=logger)
    try:
        yield state
    except Exception as exc:  # noqa: BLE001
        state.mark_failed(error_type=exc.__class__.__name__)
        state.finalize()
        raise
    else:
        state.finalize()
