"""Runtime installation stage.

Fetches the runtime archive in a staging graph, verifies its checksum,
copies it into the target graph, unpacks it under the install root and puts
the runtime's binary directory on ``PATH``.
"""

from __future__ import annotations

import shlex
import warnings
from dataclasses import dataclass, field
from pathlib import Path

from runtimebake.errors import ErrorCode
from runtimebake.fetch import UnverifiedFetchWarning, fetch
from runtimebake.graph import GraphState
from runtimebake.models import RuntimeDistribution
from runtimebake.observability import StageLog, StructuredLogger
from runtimebake.policy import Policy

BUILDER_IMAGE = "docker.io/curlimages/curl:7.86.0"
STAGE = "runtime"


def verify_command(sha256: str, archive: str) -> str:
    """Render a ``sha256sum -c`` check that exits non-zero on mismatch."""
    return f"echo {shlex.quote(f'{sha256}  {archive}')} | sha256sum -c -"


def unpack_command(archive: str, install_root: str) -> str:
    """Render the extraction that strips the archive's top-level directory."""
    tar = shlex.join(["tar", "zxf", archive, "--strip-components", "1", "-C", install_root])
    return f"{tar} && {shlex.join(['rm', archive])}"


@dataclass(slots=True)
class RuntimeInstaller:
    distribution: RuntimeDistribution = field(default_factory=RuntimeDistribution.julia)
    policy: Policy = field(default_factory=Policy)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    cache_dir: Path | None = None

    @property
    def log(self) -> StageLog:
        return self.logger.for_stage(STAGE, operation="install_runtime")

    def install(self, base: GraphState) -> GraphState:
        """Return *base* with the runtime unpacked and on ``PATH``."""
        dist = self.distribution
        staging, archive = self._staging()

        state = base.copy(
            staging,
            archive,
            dist.staging_path,
            name=f"[internal] copying {dist.archive_name} to /tmp",
        )
        state = state.mkdir(
            dist.install_root,
            mode=0o755,
            parents=True,
            name=f"[internal] creating {dist.install_root} folder for runtime binary",
        )
        state = state.run(
            "bash",
            "-c",
            unpack_command(dist.staging_path, dist.install_root),
            name=f"[internal] unpack runtime archive under {dist.install_root}",
            failure=ErrorCode.EXTRACTION,
        )
        state = state.append_path(dist.bin_dir)
        self.log("unpack", f"Runtime unpacked under {dist.install_root}.")
        return state

    def _staging(self) -> tuple[GraphState, str]:
        """Return the graph holding the fetched archive and the archive path inside it."""
        dist = self.distribution
        if self.cache_dir is not None:
            # Raises before any graph transformation when the hash does not match.
            cached = fetch(
                dist.url,
                sha256=dist.sha256,
                cache_dir=self.cache_dir,
                policy=self.policy,
            )
            if self.policy.require_integrity:
                self.log(
                    "verify",
                    "Runtime archive verified in-process.",
                    sha256=dist.sha256,
                    path=str(cached),
                )
            else:
                self.log(
                    "verify",
                    "Runtime archive prefetched unverified; checksum disabled by policy.",
                    level="warning",
                    path=str(cached),
                )
            return GraphState.local(str(cached.parent)), cached.name

        archive = dist.staging_path
        staging = GraphState.image(BUILDER_IMAGE).run(
            "curl",
            "-fsSL",
            dist.url,
            "-o",
            archive,
            name="[internal] downloading runtime binary",
            failure=ErrorCode.FETCH,
        )
        self.log("fetch", "Runtime download declared.", url=dist.url)

        if not self.policy.require_integrity:
            warnings.warn(
                f"Runtime archive {dist.archive_name} will not be verified.",
                UnverifiedFetchWarning,
                stacklevel=3,
            )
            self.log("verify", "Checksum verification disabled by policy.", level="warning")
            return staging, archive

        staging = staging.run(
            "sh",
            "-c",
            verify_command(dist.sha256, archive),
            name="[internal] verifying checksum of runtime binary",
            failure=ErrorCode.INTEGRITY,
        )
        self.log("verify", "Checksum verification declared.", sha256=dist.sha256)
        return staging, archive
