import json
from pathlib import Path

import pytest

from runtimebake import ConfigError, parse_config, read_config
from runtimebake.models import JULIA_DOWNLOAD_URL


def test_parse_config_reads_groups_policy_and_mirror() -> None:
    raw = json.dumps(
        {
            "packages": [["JSON", "HTTP"], ["CSV"]],
            "policy": {"mirror_mode": "on-demand", "require_integrity": False},
            "mirror": {"persist_service": True},
        }
    )

    config = parse_config(raw)

    assert config.groups == (("JSON", "HTTP"), ("CSV",))
    assert config.policy.mirror_mode == "on-demand"
    assert config.policy.require_integrity is False
    assert config.policy.network_mode == "online"
    assert config.mirror.persist_service is True
    assert config.distribution.url == JULIA_DOWNLOAD_URL


def test_empty_config_uses_defaults() -> None:
    config = parse_config("{}")

    assert config.groups == ()
    assert config.policy.mirror_mode == "always"
    assert config.mirror.persist_service is False


def test_runtime_override_is_validated() -> None:
    raw = json.dumps({"runtime": {"url": "https://example.com/j.tar.gz", "sha256": "short"}})

    with pytest.raises(ConfigError) as excinfo:
        parse_config(raw)

    assert excinfo.value.code == "E_CONFIG"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        '{"packages": ["JSON"]}',
        '{"packages": [["bad name"]]}',
        '{"policy": {"mirror_mode": "sometimes"}}',
        '{"policy": {"require_integrity": "yes"}}',
        '{"mirror": []}',
        '{"mirror": {"persist_service": 1}}',
    ],
)
def test_invalid_config_raises_config_error(raw: str) -> None:
    with pytest.raises(ConfigError):
        parse_config(raw)


def test_read_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        read_config(tmp_path / "missing.json")


def test_read_config_from_file(tmp_path: Path) -> None:
    path = tmp_path / "runtime.json"
    path.write_text('{"packages": [["JSON"]]}', encoding="utf-8")

    assert read_config(path).groups == (("JSON",),)
