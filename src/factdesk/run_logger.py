"""One JSON file per refresh or ingestion run, for replaying what happened."""

import dataclasses
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


def to_jsonable(obj: Any) -> Any:
    """Reduce pipeline values to plain JSON types.

    ``to_dict`` wins when an object has one, so records match the shapes the
    CLI prints.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in obj]
    return str(obj)


class StageRecord(BaseModel):
    stage: str
    component: str
    input: Any = None
    output: Any = None
    usage: dict[str, Any] | None = None
    at: datetime
    duration_seconds: float = 0.0


class RunRecord(BaseModel):
    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    run_type: str
    params: dict[str, Any] = Field(default_factory=dict)
    started_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    completed_at: datetime | None = None
    stages: list[StageRecord] = Field(default_factory=list)
    result: Any = None
    total_usage: dict[str, Any] | None = None

    @property
    def filename(self) -> str:
        """``ingestion_20260302T120000_1a2b3c4d.json``"""
        return f"{self.run_type}_{self.started_at:%Y%m%dT%H%M%S}_{self.run_id[:8]}.json"


class RunLogger:
    """Collects stage records for the current run and writes them on finish.

    Calls outside a started run are ignored, so the orchestrator can log
    unconditionally once it holds a logger.
    """

    def __init__(self, log_dir: Path) -> None:
        self._log_dir = log_dir
        self._record: RunRecord | None = None
        self._last_log_path: Path | None = None

    @property
    def last_log_path(self) -> Path | None:
        return self._last_log_path

    def start_run(self, run_type: str, params: dict[str, Any]) -> None:
        self._record = RunRecord(run_type=run_type, params=to_jsonable(params))

    def log_stage(
        self,
        stage: str,
        component: str,
        *,
        input_data: Any = None,
        output_data: Any = None,
        usage: Any = None,
        duration_seconds: float = 0.0,
    ) -> None:
        if self._record is None:
            return
        self._record.stages.append(
            StageRecord(
                stage=stage,
                component=component,
                input=to_jsonable(input_data),
                output=to_jsonable(output_data),
                usage=to_jsonable(usage),
                at=datetime.now(tz=UTC),
                duration_seconds=round(duration_seconds, 4),
            )
        )

    def finish_run(self, result: Any, usage: Any = None) -> Path | None:
        """Write the current run and forget it.

        Returns:
            The written file, or None when no run was started.
        """
        record, self._record = self._record, None
        if record is None:
            return None
        record.completed_at = datetime.now(tz=UTC)
        record.result = to_jsonable(result)
        record.total_usage = to_jsonable(usage)

        self._log_dir.mkdir(parents=True, exist_ok=True)
        path = self._log_dir / record.filename
        path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        self._last_log_path = path
        return path
