"""Run logger for recording publication and listing runs to JSON files."""

import dataclasses
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel


class StageRecord(BaseModel):
    """Record of a single stage execution."""

    stage: str
    component: str
    input: Any = None
    output: Any = None
    error: str | None = None
    timestamp: str = ""
    duration_seconds: float = 0.0


class RunRecord(BaseModel):
    """Record of a complete publication or listing run."""

    run_id: str
    run_type: str
    input: Any = None
    started_at: str
    completed_at: str | None = None
    stages: list[StageRecord] = []
    outcome: str | None = None
    result: Any = None


def _serialize(obj: Any) -> Any:
    """Serialize an object to JSON-compatible format.

    Handles dataclasses, Pydantic models, enums, exceptions, lists, tuples,
    dicts, and primitives.
    """
    if obj is None:
        return None
    if isinstance(obj, BaseException):
        return f"{type(obj).__name__}: {obj}"
    if isinstance(obj, Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _serialize(dataclasses.asdict(obj))
    if isinstance(obj, BaseModel):
        return obj.model_dump()
    if isinstance(obj, (list, tuple)):
        return [_serialize(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _serialize(v) for k, v in obj.items()}
    if isinstance(obj, Path):
        return str(obj)
    return obj


class RunTrace:
    """Stage records of one run. Obtained from ``RunLogger.start_run``.

    A trace from a disabled logger ignores every call.
    """

    def __init__(self, logger: "RunLogger", record: RunRecord | None) -> None:
        self._logger = logger
        self._record = record

    @property
    def record(self) -> RunRecord | None:
        return self._record

    def log_stage(
        self,
        stage: str,
        component: str,
        input_data: Any,
        output_data: Any,
        duration_seconds: float,
        error: BaseException | None = None,
    ) -> None:
        """Append a stage record to the run.

        Args:
            stage: Stage name (e.g. "verifying", "ledger_fanout").
            component: Component class name.
            input_data: Stage input (will be serialized).
            output_data: Stage output (will be serialized).
            duration_seconds: Wall-clock time for this stage.
            error: The exception the stage ended with, if any.
        """
        if self._record is None:
            return

        self._record.stages.append(
            StageRecord(
                stage=stage,
                component=component,
                input=_serialize(input_data),
                output=_serialize(output_data),
                error=_serialize(error),
                timestamp=datetime.now(tz=UTC).isoformat(),
                duration_seconds=round(duration_seconds, 4),
            )
        )

    def finish(self, outcome: str, result: Any = None) -> Path | None:
        """Write the run record to a JSON file.

        Args:
            outcome: Final state of the run (e.g. "done", "failed").
            result: Final result of the run (will be serialized).

        Returns:
            Path to the written JSON file, or None if logging is disabled.
        """
        if self._record is None:
            return None

        self._record.completed_at = datetime.now(tz=UTC).isoformat()
        self._record.outcome = outcome
        self._record.result = _serialize(result)
        return self._logger.write(self._record)


class RunLogger:
    """Writes one JSON log file per publication or listing run.

    When ``enabled=False``, every trace it hands out is a no-op.

    Args:
        log_dir: Directory to write JSON log files.
        enabled: If False, all methods become no-ops.
    """

    def __init__(self, log_dir: Path, *, enabled: bool = True) -> None:
        self._log_dir = log_dir
        self._enabled = enabled
        self._last_log_path: Path | None = None

    @property
    def enabled(self) -> bool:
        """Whether logging is active."""
        return self._enabled

    @property
    def last_log_path(self) -> Path | None:
        """Path to the last written log file, or None."""
        return self._last_log_path

    def start_run(self, run_type: str, input_data: Any = None) -> RunTrace:
        """Begin a new run record.

        Args:
            run_type: Kind of run (e.g. "publish", "list").
            input_data: The run input.
        """
        if not self._enabled:
            return RunTrace(self, None)

        record = RunRecord(
            run_id=str(uuid.uuid4()),
            run_type=run_type,
            input=_serialize(input_data),
            started_at=datetime.now(tz=UTC).isoformat(),
        )
        return RunTrace(self, record)

    def write(self, record: RunRecord) -> Path:
        self._log_dir.mkdir(parents=True, exist_ok=True)

        # run_publish_2026-02-12T14-30-00_<id8>.json (colons -> dashes)
        ts = record.started_at.replace(":", "-")
        ts = ts.split(".")[0].split("+")[0]
        filepath = self._log_dir / f"run_{record.run_type}_{ts}_{record.run_id[:8]}.json"

        filepath.write_text(record.model_dump_json(indent=2))
        self._last_log_path = filepath
        return filepath


def disabled_run_logger() -> RunLogger:
    """A logger whose traces record nothing."""
    return RunLogger(Path("logs"), enabled=False)
