"""Core typed dataclasses for runtime distributions, mirrors, and provisioning state."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Literal
from urllib.parse import urlsplit

from .assets import (
    MIRROR_URL,
    REGISTRY_SCRIPT,
    REGISTRY_SCRIPT_NAME,
    SERVER_SCRIPT,
    SERVER_SCRIPT_NAME,
)
from .errors import ValidationError

RestartPolicy = Literal["always", "on-failure", "no"]
PackageGroup = tuple[str, ...]

SHA256_PATTERN = re.compile(r"^[0-9a-f]{64}$")
PACKAGE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
URL_SCHEMES = frozenset({"http", "https", "file"})

JULIA_ROOT_DIR = "/opt/julia"
JULIA_BIN_DIR = "/opt/julia/bin"
JULIA_DEPOT_DIR = "/opt/julia/user_packages"
JULIA_MIRROR_DIR = "/opt/julia/mirror"
JULIA_DOWNLOAD_URL = (
    "https://julialang-s3.julialang.org/bin/linux/x64/1.8/julia-1.8.3-linux-x86_64.tar.gz"
)
JULIA_ARCHIVE_SHA256 = "33c3b09356ffaa25d3331c3646b1f2d4b09944e8f93fcb994957801b8bbf58a9"
JULIA_ARCHIVE_NAME = "julia.tar.gz"

DEPOT_PATH_ENV = "JULIA_DEPOT_PATH"
PKG_SERVER_ENV = "JULIA_PKG_SERVER"


@dataclass(frozen=True, slots=True)
class RuntimeDistribution:
    url: str
    sha256: str
    archive_name: str
    install_root: str
    bin_dir: str
    executable_name: str = "julia"

    def __post_init__(self) -> None:
        if urlsplit(self.url).scheme not in URL_SCHEMES:
            raise ValidationError(
                "RuntimeDistribution requires an http, https or file URL.",
                context={"url": self.url},
            )
        if not SHA256_PATTERN.fullmatch(self.sha256):
            raise ValidationError(
                "RuntimeDistribution requires a lowercase hex sha256 digest.",
                context={"sha256": self.sha256},
            )
        if not self.archive_name or "/" in self.archive_name:
            raise ValidationError(
                "Archive name must be a bare file name.",
                context={"archive_name": self.archive_name},
            )
        for label, value in (("install_root", self.install_root), ("bin_dir", self.bin_dir)):
            if not PurePosixPath(value).is_absolute():
                raise ValidationError(
                    f"RuntimeDistribution {label} must be an absolute path.",
                    context={label: value},
                )

    @classmethod
    def julia(cls) -> RuntimeDistribution:
        return cls(
            url=JULIA_DOWNLOAD_URL,
            sha256=JULIA_ARCHIVE_SHA256,
            archive_name=JULIA_ARCHIVE_NAME,
            install_root=JULIA_ROOT_DIR,
            bin_dir=JULIA_BIN_DIR,
        )

    @property
    def executable(self) -> str:
        return f"{self.bin_dir}/{self.executable_name}"

    @property
    def staging_path(self) -> str:
        return f"/tmp/{self.archive_name}"


@dataclass(frozen=True, slots=True)
class MirrorConfig:
    install_dir: str = JULIA_MIRROR_DIR
    registry_script: str = REGISTRY_SCRIPT
    server_script: str = SERVER_SCRIPT
    git_user_name: str = "runtimebake"
    git_user_email: str = "runtimebake@localhost"
    persist_service: bool = False

    @property
    def url(self) -> str:
        return MIRROR_URL

    @property
    def registry_script_path(self) -> str:
        return f"{self.install_dir}/{REGISTRY_SCRIPT_NAME}"

    @property
    def server_script_path(self) -> str:
        return f"{self.install_dir}/{SERVER_SCRIPT_NAME}"

    @property
    def server_log_path(self) -> str:
        return f"{self.install_dir}/server.log"


@dataclass(frozen=True, slots=True)
class ServiceSpec:
    name: str
    exec: tuple[str, ...] = ()
    restart: RestartPolicy = "on-failure"
    after: tuple[str, ...] = ()


@dataclass(slots=True)
class ProvisioningState:
    """Bookkeeping read by the image finalizer once provisioning completes."""

    environment_exports: dict[str, str] = field(default_factory=dict)
    writable_directories: list[str] = field(default_factory=list)
    services: list[ServiceSpec] = field(default_factory=list)

    def export_env(self, key: str, value: str) -> None:
        self.environment_exports[key] = value

    def add_writable_directory(self, path: str) -> None:
        if path not in self.writable_directories:
            self.writable_directories.append(path)

    def add_service(self, spec: ServiceSpec) -> None:
        if all(existing.name != spec.name for existing in self.services):
            self.services.append(spec)

    def to_dict(self) -> dict[str, object]:
        return {
            "environment_exports": dict(sorted(self.environment_exports.items())),
            "writable_directories": list(self.writable_directories),
            "services": [
                {
                    "name": service.name,
                    "exec": list(service.exec),
                    "restart": service.restart,
                    "after": list(service.after),
                }
                for service in self.services
            ],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True) + "\n"


def normalize_groups(groups: Iterable[Sequence[str]]) -> tuple[PackageGroup, ...]:
    """Validate package groups, preserving group and name order."""
    normalized: list[PackageGroup] = []
    for index, group in enumerate(groups):
        if isinstance(group, str):
            raise ValidationError(
                "Package groups must be sequences of names, not strings.",
                context={"group": str(index)},
            )
        names = tuple(group)
        if not names:
            raise ValidationError(
                "Package groups must be non-empty.",
                context={"group": str(index)},
            )
        for name in names:
            if not isinstance(name, str) or not PACKAGE_NAME_PATTERN.fullmatch(name):
                raise ValidationError(
                    "Invalid package name.",
                    hint="Use the bare package name without a .jl suffix.",
                    context={"group": str(index), "package": str(name)},
                )
        normalized.append(names)
    return tuple(normalized)


__all__ = [
    "DEPOT_PATH_ENV",
    "JULIA_ARCHIVE_NAME",
    "JULIA_ARCHIVE_SHA256",
    "JULIA_BIN_DIR",
    "JULIA_DEPOT_DIR",
    "JULIA_DOWNLOAD_URL",
    "JULIA_MIRROR_DIR",
    "JULIA_ROOT_DIR",
    "MirrorConfig",
    "PKG_SERVER_ENV",
    "PackageGroup",
    "ProvisioningState",
    "RestartPolicy",
    "RuntimeDistribution",
    "ServiceSpec",
    "normalize_groups",
]
