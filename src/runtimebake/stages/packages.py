"""User package installation stage."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from runtimebake.graph import GraphState
from runtimebake.models import (
    DEPOT_PATH_ENV,
    JULIA_DEPOT_DIR,
    PKG_SERVER_ENV,
    MirrorConfig,
    PackageGroup,
    ProvisioningState,
    RuntimeDistribution,
    normalize_groups,
)
from runtimebake.observability import StageLog, StructuredLogger

STAGE = "packages"
REGISTRY_ADD_COMMAND = 'using Pkg; Pkg.Registry.add("General")'


def install_command(group: PackageGroup) -> str:
    """Render the batched ``Pkg.add`` expression for one group, order preserved."""
    quoted = '","'.join(group)
    return f'using Pkg; Pkg.add(["{quoted}"])'


def export_env(root: GraphState, state: ProvisioningState, key: str, value: str) -> GraphState:
    """Set *key* on the build graph and in the runtime exports together."""
    state.export_env(key, value)
    return root.add_env(key, value)


@dataclass(slots=True)
class PackageInstaller:
    distribution: RuntimeDistribution = field(default_factory=RuntimeDistribution.julia)
    mirror: MirrorConfig = field(default_factory=MirrorConfig)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    depot_dir: str = JULIA_DEPOT_DIR

    @property
    def log(self) -> StageLog:
        return self.logger.for_stage(STAGE, operation="install_packages")

    def install(
        self,
        root: GraphState,
        groups: Iterable[Sequence[str]],
        state: ProvisioningState,
    ) -> GraphState:
        """Install each package group in order and record runtime side effects.

        An empty *groups* returns *root* unchanged and leaves *state* untouched.
        """
        normalized = normalize_groups(groups)
        if not normalized:
            self.log("skip", "No packages requested.")
            return root

        julia = self.distribution.executable
        root = root.mkdir(
            self.depot_dir,
            mode=0o755,
            parents=True,
            name="[internal] creating folder for runtime packages",
        )
        root = root.append_path(self.distribution.bin_dir)
        root = export_env(root, state, DEPOT_PATH_ENV, self.depot_dir)
        root = export_env(root, state, PKG_SERVER_ENV, self.mirror.url)

        root = root.run(
            julia, "-e", REGISTRY_ADD_COMMAND,
            name=f"[internal] adding package registry through {self.mirror.url}",
        )
        state.add_writable_directory(self.depot_dir)

        for group in normalized:
            root = root.run(
                julia, "-e", install_command(group),
                name=f"[internal] installing packages: {' '.join(group)}",
            )
            self.log("install", "Package group declared.", packages=list(group))
        return root
