"""Structured provisioning logs.

Stages log through a ``StageLog`` bound to their stage and operation name, so
every record carries both without each stage repeating them. Records stay in
memory until exported as JSON lines.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

Level = Literal["debug", "info", "warning", "error"]


@dataclass(slots=True)
class StructuredLogger:
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        stage: str | None,
        step: str | None,
        message: str,
        level: Level = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "stage": stage,
            "step": step,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)

    def for_stage(self, stage: str, *, operation: str) -> StageLog:
        return StageLog(logger=self, stage=stage, operation=operation)

    def records_for_stage(self, stage: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("stage") == stage]

    def steps(self, stage: str) -> list[str]:
        """Return the step names logged by *stage*, in order."""
        return [record["step"] for record in self.records_for_stage(stage)]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path


@dataclass(frozen=True, slots=True)
class StageLog:
    logger: StructuredLogger
    stage: str
    operation: str

    def __call__(
        self,
        step: str,
        message: str,
        *,
        level: Level = "info",
        **extra: Any,
    ) -> None:
        self.logger.log(
            operation=self.operation,
            stage=self.stage,
            step=step,
            message=message,
            level=level,
            extra=extra or None,
        )
