"""Immutable build graph description consumed by an external executor."""

from .encode import digest, to_cbor, to_json, to_payload
from .ops import CopyOp, EnvOp, MkdirOp, MkfileOp, Operation, RunOp, Source
from .state import DEFAULT_PATH, GraphState

__all__ = [
    "CopyOp",
    "DEFAULT_PATH",
    "EnvOp",
    "GraphState",
    "MkdirOp",
    "MkfileOp",
    "Operation",
    "RunOp",
    "Source",
    "digest",
    "to_cbor",
    "to_json",
    "to_payload",
]
