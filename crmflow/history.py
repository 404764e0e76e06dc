"""Execution history queries and analytics."""

from __future__ import annotations

import logging
import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .constants import DEFAULT_DATE_RANGE, EXECUTION_ENTITY
from .contracts import WorkflowAnalytics, WorkflowExecution
from .errors import PersistenceError
from .serialization import execution_from_record, utcnow
from .store import EntityStore

_RANGE_PATTERN = re.compile(r"^(\d+)([dwy])$")
_RANGE_UNITS = {"d": 1, "w": 7, "y": 365}


def parse_date_range(date_range: str) -> Optional[timedelta]:
    """Translate ``"7d"``, ``"4w"``, ``"1y"`` style ranges into a timedelta.

    ``"all"`` yields ``None`` (no lower bound).
    """
    if date_range == "all":
        return None
    match = _RANGE_PATTERN.match(date_range or "")
    if not match:
        raise ValueError(f"Unsupported date range: {date_range!r}")
    amount, unit = match.groups()
    return timedelta(days=int(amount) * _RANGE_UNITS[unit])


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def compute_analytics(executions: list[WorkflowExecution]) -> WorkflowAnalytics:
    total = len(executions)
    successful = sum(1 for e in executions if e.status == "completed")
    failed = sum(1 for e in executions if e.status == "failed")

    durations = [
        e.duration
        for e in executions
        if e.status != "running" and e.duration is not None
    ]
    by_day = Counter(
        _aware(e.started_at).date().isoformat()
        for e in executions
        if e.started_at is not None
    )

    return WorkflowAnalytics(
        total_executions=total,
        successful_executions=successful,
        failed_executions=failed,
        success_rate=f"{successful / total * 100:.1f}" if total > 0 else 0,
        average_execution_time=(
            round(sum(durations) / len(durations), 3) if durations else 0
        ),
        executions_by_day=dict(sorted(by_day.items())),
    )


class ExecutionHistory:
    """Reads recorded executions and summarizes them."""

    def __init__(
        self,
        store: EntityStore,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._logger = logger or logging.getLogger(__name__)
        self._clock = clock

    async def get_executions(self, workflow_id: str) -> list[WorkflowExecution]:
        """Return executions of ``workflow_id``, most recent first."""
        try:
            records = await self._store.list(
                EXECUTION_ENTITY, {"workflow_id": workflow_id}, "-started_at"
            )
        except Exception as e:
            self._logger.error(f"Failed to fetch executions for {workflow_id}: {e}")
            raise PersistenceError("list", EXECUTION_ENTITY, str(e)) from e
        return [execution_from_record(r, self._logger) for r in records]

    async def get_analytics(
        self, workflow_id: str, date_range: str = DEFAULT_DATE_RANGE
    ) -> WorkflowAnalytics:
        """Summarize executions of ``workflow_id`` started within ``date_range``."""
        window = parse_date_range(date_range)
        executions = await self.get_executions(workflow_id)
        if window is not None:
            cutoff = self._clock() - window
            executions = [
                e
                for e in executions
                if e.started_at is not None and _aware(e.started_at) >= cutoff
            ]
        return compute_analytics(executions)
