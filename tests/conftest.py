"""Shared test fixtures."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from runtimebake import GraphState, RuntimeDistribution

BASE_IMAGE = "docker.io/library/ubuntu:22.04"


@pytest.fixture
def root() -> GraphState:
    return GraphState.image(BASE_IMAGE)


@pytest.fixture
def local_distribution(tmp_path: Path) -> RuntimeDistribution:
    """A distribution served from a local file so fetches stay offline."""
    archive = tmp_path / "upstream" / "julia.tar.gz"
    archive.parent.mkdir(parents=True)
    payload = b"fake julia archive"
    archive.write_bytes(payload)
    return RuntimeDistribution(
        url=archive.as_uri(),
        sha256=hashlib.sha256(payload).hexdigest(),
        archive_name="julia.tar.gz",
        install_root="/opt/julia",
        bin_dir="/opt/julia/bin",
    )
