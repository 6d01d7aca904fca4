"""Policy configuration and enforcement helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from runtimebake.errors import PolicyError

NetworkMode = Literal["online", "offline"]
MirrorMode = Literal["always", "on-demand"]


@dataclass(frozen=True, slots=True)
class Policy:
    require_integrity: bool = True
    network_mode: NetworkMode = "online"
    mirror_mode: MirrorMode = "always"


def ensure_network_allowed(*, policy: Policy, operation: str) -> None:
    if policy.network_mode == "offline":
        raise PolicyError(
            "Network operations are disabled by policy.",
            hint="Switch policy.network_mode to 'online' for this operation.",
            context={"operation": operation},
        )


def mirror_required(*, policy: Policy, has_packages: bool) -> bool:
    return policy.mirror_mode == "always" or has_packages
