import hashlib
from pathlib import Path

import pytest

from runtimebake.errors import FetchError, IntegrityError, PolicyError, ValidationError
from runtimebake.fetch import UnverifiedFetchWarning, fetch, sha256_file
from runtimebake.policy import Policy


def test_fetch_requires_sha256(tmp_path: Path) -> None:
    source = tmp_path / "source.txt"
    source.write_text("payload", encoding="utf-8")

    with pytest.raises(ValidationError):
        fetch(source.as_uri(), sha256="", cache_dir=tmp_path / "cache")


def test_fetch_caches_by_content_hash(tmp_path: Path) -> None:
    source = tmp_path / "julia.tar.gz"
    payload = b"runtime archive"
    source.write_bytes(payload)
    digest = hashlib.sha256(payload).hexdigest()

    first = fetch(source.as_uri(), sha256=digest, cache_dir=tmp_path / "cache")
    source.write_bytes(b"mutated upstream content")
    second = fetch(source.as_uri(), sha256=digest, cache_dir=tmp_path / "cache")

    assert first == second
    assert first.name == digest
    assert second.read_bytes() == payload


def test_fetch_raises_integrity_error_on_hash_mismatch(tmp_path: Path) -> None:
    source = tmp_path / "julia.tar.gz"
    source.write_bytes(b"mismatch")

    with pytest.raises(IntegrityError) as excinfo:
        fetch(source.as_uri(), sha256="0" * 64, cache_dir=tmp_path / "cache")

    assert excinfo.value.context["expected"] == "0" * 64
    assert not (tmp_path / "cache" / ("0" * 64)).exists()


def test_fetch_detects_tampered_cache_entry(tmp_path: Path) -> None:
    source = tmp_path / "julia.tar.gz"
    payload = b"runtime archive"
    source.write_bytes(payload)
    digest = hashlib.sha256(payload).hexdigest()
    cached = fetch(source.as_uri(), sha256=digest, cache_dir=tmp_path / "cache")
    cached.write_bytes(b"tampered")

    with pytest.raises(IntegrityError):
        fetch(source.as_uri(), sha256=digest, cache_dir=tmp_path / "cache")


def test_fetch_wraps_missing_source_in_fetch_error(tmp_path: Path) -> None:
    missing = tmp_path / "missing.tar.gz"

    with pytest.raises(FetchError):
        fetch(missing.as_uri(), sha256="a" * 64, cache_dir=tmp_path / "cache")


def test_fetch_wraps_schemeless_url_in_fetch_error(tmp_path: Path) -> None:
    with pytest.raises(FetchError) as excinfo:
        fetch("julia.tar.gz", sha256="a" * 64, cache_dir=tmp_path / "cache")

    assert excinfo.value.context["url"] == "julia.tar.gz"


def test_fetch_refuses_offline_policy(tmp_path: Path) -> None:
    with pytest.raises(PolicyError):
        fetch(
            "https://example.com/julia.tar.gz",
            sha256="a" * 64,
            cache_dir=tmp_path / "cache",
            policy=Policy(network_mode="offline"),
        )


def test_fetch_without_integrity_warns(tmp_path: Path) -> None:
    source = tmp_path / "julia.tar.gz"
    source.write_bytes(b"unverified")

    with pytest.warns(UnverifiedFetchWarning):
        path = fetch(
            source.as_uri(),
            sha256="0" * 64,
            cache_dir=tmp_path / "cache",
            policy=Policy(require_integrity=False),
        )

    assert path.read_bytes() == b"unverified"
    assert sha256_file(path) == path.name
