"""Declarative provisioning config parser."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from runtimebake.errors import ConfigError, ValidationError
from runtimebake.models import MirrorConfig, PackageGroup, RuntimeDistribution, normalize_groups
from runtimebake.policy import Policy

_NETWORK_MODES = ("online", "offline")
_MIRROR_MODES = ("always", "on-demand")


@dataclass(frozen=True, slots=True)
class ProvisionConfig:
    groups: tuple[PackageGroup, ...] = ()
    policy: Policy = field(default_factory=Policy)
    mirror: MirrorConfig = field(default_factory=MirrorConfig)
    distribution: RuntimeDistribution = field(default_factory=RuntimeDistribution.julia)


def parse_config(raw: str) -> ProvisionConfig:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError("Invalid provisioning config JSON.", hint=str(exc)) from exc
    if not isinstance(payload, dict):
        raise ConfigError("Invalid provisioning config payload type.")

    groups_raw = payload.get("packages", [])
    if not isinstance(groups_raw, list) or not all(isinstance(g, list) for g in groups_raw):
        raise ConfigError("Invalid config `packages` value.", hint="Use a list of name lists.")
    try:
        groups = normalize_groups(groups_raw)
        distribution = _parse_distribution(_optional_dict(payload, "runtime"))
    except ValidationError as exc:
        raise ConfigError(exc.args[0], hint=exc.hint, context=exc.context) from exc

    return ProvisionConfig(
        groups=groups,
        policy=_parse_policy(_optional_dict(payload, "policy")),
        mirror=_parse_mirror(_optional_dict(payload, "mirror")),
        distribution=distribution,
    )


def read_config(path: str | Path) -> ProvisionConfig:
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(
            "Provisioning config does not exist.",
            context={"path": str(config_path)},
        ) from exc
    return parse_config(raw)


def _parse_policy(payload: dict[str, Any]) -> Policy:
    defaults = Policy()
    require_integrity = payload.get("require_integrity", defaults.require_integrity)
    if not isinstance(require_integrity, bool):
        raise ConfigError("Invalid config `policy.require_integrity` value.")
    network_mode = _choice(payload, "network_mode", _NETWORK_MODES, defaults.network_mode)
    mirror_mode = _choice(payload, "mirror_mode", _MIRROR_MODES, defaults.mirror_mode)
    return Policy(
        require_integrity=require_integrity,
        network_mode=network_mode,
        mirror_mode=mirror_mode,
    )


def _parse_mirror(payload: dict[str, Any]) -> MirrorConfig:
    persist_service = payload.get("persist_service", False)
    if not isinstance(persist_service, bool):
        raise ConfigError("Invalid config `mirror.persist_service` value.")
    return MirrorConfig(persist_service=persist_service)


def _parse_distribution(payload: dict[str, Any]) -> RuntimeDistribution:
    default = RuntimeDistribution.julia()
    if not payload:
        return default
    url = payload.get("url", default.url)
    sha256 = payload.get("sha256", default.sha256)
    if not isinstance(url, str) or not isinstance(sha256, str):
        raise ConfigError("Invalid config `runtime` value.")
    return RuntimeDistribution(
        url=url,
        sha256=sha256,
        archive_name=default.archive_name,
        install_root=default.install_root,
        bin_dir=default.bin_dir,
    )


def _optional_dict(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"Invalid config `{key}` value.")
    return value


def _choice(payload: dict[str, Any], key: str, allowed: tuple[str, ...], default: str) -> Any:
    value = payload.get(key, default)
    if value not in allowed:
        raise ConfigError(
            f"Invalid config `policy.{key}` value.",
            hint=f"Expected one of: {', '.join(allowed)}.",
        )
    return value
