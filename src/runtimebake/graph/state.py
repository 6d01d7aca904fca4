"""Immutable build graph state.

A ``GraphState`` describes a filesystem image as a source plus a linear
history of operations. Every transformation returns a new state; the input
is never modified, so intermediate states can be shared freely between
subgraphs.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import PurePosixPath
from typing import Self

from runtimebake.errors import ErrorCode, ValidationError
from runtimebake.graph.ops import CopyOp, EnvOp, MkdirOp, MkfileOp, Operation, RunOp, Source

DEFAULT_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


@dataclass(frozen=True, slots=True)
class GraphState:
    source: Source
    operations: tuple[Operation, ...] = ()
    environment: tuple[tuple[str, str], ...] = ()

    @classmethod
    def image(cls, ref: str) -> GraphState:
        if not ref:
            raise ValidationError("image() requires a non-empty reference.")
        return cls(source=Source(kind="image", ref=ref), environment=(("PATH", DEFAULT_PATH),))

    @classmethod
    def local(cls, path: str) -> GraphState:
        if not path:
            raise ValidationError("local() requires a non-empty path.")
        return cls(source=Source(kind="local", ref=path))

    @classmethod
    def scratch(cls) -> GraphState:
        return cls(source=Source(kind="scratch"))

    @property
    def env(self) -> dict[str, str]:
        return dict(self.environment)

    def get_env(self, key: str) -> str | None:
        return self.env.get(key)

    def commands(self) -> tuple[RunOp, ...]:
        """Return the run operations of this state's own history, in order."""
        return tuple(op for op in self.operations if isinstance(op, RunOp))

    def run(
        self,
        *argv: str,
        name: str,
        failure: ErrorCode = ErrorCode.TOOL_INSTALL,
    ) -> Self:
        if not argv or not all(argv):
            raise ValidationError("run() requires a non-empty argv.", context={"name": name})
        op = RunOp(
            argv=tuple(argv),
            name=name,
            environment=tuple(sorted(self.environment)),
            failure=failure,
        )
        return self._append(op)

    def copy(self, source: GraphState, src: str, dest: str, *, name: str) -> Self:
        if not src or not dest:
            raise ValidationError("copy() requires source and destination paths.")
        return self._append(CopyOp(source=source, src=src, dest=dest, name=name))

    def mkdir(self, path: str, *, name: str, mode: int = 0o755, parents: bool = True) -> Self:
        _require_absolute(path, operation="mkdir")
        return self._append(MkdirOp(path=path, name=name, mode=mode, parents=parents))

    def mkfile(self, path: str, content: str, *, name: str, mode: int = 0o644) -> Self:
        _require_absolute(path, operation="mkfile")
        return self._append(MkfileOp(path=path, content=content, name=name, mode=mode))

    def add_env(self, key: str, value: str) -> Self:
        if not key or "=" in key:
            raise ValidationError("add_env() requires a valid variable name.", context={"key": key})
        env = self.env
        env[key] = value
        return replace(
            self,
            operations=(*self.operations, EnvOp(key=key, value=value, name=f"env {key}")),
            environment=tuple(env.items()),
        )

    def append_path(self, directory: str) -> Self:
        """Append *directory* to ``PATH``; a no-op when it is already present."""
        _require_absolute(directory, operation="append_path")
        current = self.get_env("PATH") or ""
        entries = [entry for entry in current.split(":") if entry]
        if directory in entries:
            return self
        return self.add_env("PATH", ":".join([*entries, directory]))

    def _append(self, op: Operation) -> Self:
        return replace(self, operations=(*self.operations, op))


def _require_absolute(path: str, *, operation: str) -> None:
    if not path or not PurePosixPath(path).is_absolute():
        raise ValidationError(
            f"{operation}() requires an absolute path.",
            context={"operation": operation, "path": path},
        )
