"""Canonical graph encoding for executors and cache keys."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import cbor2

from runtimebake.graph.ops import CopyOp, EnvOp, MkdirOp, MkfileOp, Operation, RunOp
from runtimebake.graph.state import GraphState

SCHEMA_VERSION = 1


def to_payload(state: GraphState) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "source": {"kind": state.source.kind, "ref": state.source.ref},
        "operations": [_operation_payload(op) for op in state.operations],
        "env": dict(sorted(state.environment)),
    }


def to_json(state: GraphState, path: str | Path | None = None) -> str:
    encoded = json.dumps(to_payload(state), indent=2, sort_keys=True) + "\n"
    if path is not None:
        Path(path).write_text(encoded, encoding="utf-8")
    return encoded


def to_cbor(state: GraphState, path: str | Path | None = None) -> bytes:
    encoded = cbor2.dumps(to_payload(state), canonical=True)
    if path is not None:
        Path(path).write_bytes(encoded)
    return encoded


def digest(state: GraphState) -> str:
    return hashlib.sha256(to_cbor(state)).hexdigest()


def _operation_payload(op: Operation) -> dict[str, Any]:
    if isinstance(op, RunOp):
        return {
            "op": "run",
            "name": op.name,
            "argv": list(op.argv),
            "env": dict(op.environment),
            "failure": op.failure.value,
        }
    if isinstance(op, CopyOp):
        return {
            "op": "copy",
            "name": op.name,
            "source": to_payload(op.source),
            "src": op.src,
            "dest": op.dest,
            "failure": op.failure.value,
        }
    if isinstance(op, MkdirOp):
        return {
            "op": "mkdir",
            "name": op.name,
            "path": op.path,
            "mode": op.mode,
            "parents": op.parents,
            "failure": op.failure.value,
        }
    if isinstance(op, MkfileOp):
        return {
            "op": "mkfile",
            "name": op.name,
            "path": op.path,
            "content": op.content,
            "mode": op.mode,
            "failure": op.failure.value,
        }
    if isinstance(op, EnvOp):
        return {"op": "env", "key": op.key, "value": op.value}
    raise TypeError(f"Unsupported graph operation: {type(op).__name__}")
