"""Operation records that make up a build graph's linear history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from runtimebake.errors import ErrorCode

if TYPE_CHECKING:
    from runtimebake.graph.state import GraphState

SourceKind = Literal["image", "local", "scratch"]


@dataclass(frozen=True, slots=True)
class Source:
    kind: SourceKind
    ref: str = ""


@dataclass(frozen=True, slots=True)
class RunOp:
    argv: tuple[str, ...]
    name: str
    environment: tuple[tuple[str, str], ...] = ()
    failure: ErrorCode = ErrorCode.TOOL_INSTALL

    @property
    def command(self) -> str:
        return " ".join(self.argv)

    @property
    def env(self) -> dict[str, str]:
        return dict(self.environment)


@dataclass(frozen=True, slots=True)
class CopyOp:
    source: GraphState
    src: str
    dest: str
    name: str
    failure: ErrorCode = ErrorCode.FETCH


@dataclass(frozen=True, slots=True)
class MkdirOp:
    path: str
    name: str
    mode: int = 0o755
    parents: bool = True
    failure: ErrorCode = ErrorCode.CONFIG_WRITE


@dataclass(frozen=True, slots=True)
class MkfileOp:
    path: str
    content: str
    name: str
    mode: int = 0o644
    failure: ErrorCode = ErrorCode.CONFIG_WRITE


@dataclass(frozen=True, slots=True)
class EnvOp:
    key: str
    value: str
    name: str = ""
    failure: ErrorCode = ErrorCode.VALIDATION


Operation = RunOp | CopyOp | MkdirOp | MkfileOp | EnvOp

__all__ = ["CopyOp", "EnvOp", "MkdirOp", "MkfileOp", "Operation", "RunOp", "Source", "SourceKind"]
