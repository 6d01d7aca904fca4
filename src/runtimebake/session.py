"""Provisioning session: threads one graph through runtime, mirror and package stages."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .config import ProvisionConfig
from .graph import GraphState
from .models import (
    MirrorConfig,
    PackageGroup,
    ProvisioningState,
    RuntimeDistribution,
    normalize_groups,
)
from .observability import StructuredLogger
from .policy import Policy, mirror_required
from .stages import PackageInstaller, RegistryMirror, RuntimeInstaller


@dataclass(slots=True)
class ProvisioningSession:
    """Owns the provisioning state for one environment build.

    The session is the only writer of ``state``; stages receive it as an
    argument. After ``provision()`` returns, ``finalizer_input()`` is what the
    image finalizer consumes.
    """

    distribution: RuntimeDistribution = field(default_factory=RuntimeDistribution.julia)
    mirror: MirrorConfig = field(default_factory=MirrorConfig)
    policy: Policy = field(default_factory=Policy)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    cache_dir: Path | None = None
    groups: tuple[PackageGroup, ...] = ()
    state: ProvisioningState = field(default_factory=ProvisioningState)

    @classmethod
    def from_config(
        cls,
        config: ProvisionConfig,
        *,
        cache_dir: str | Path | None = None,
    ) -> ProvisioningSession:
        return cls(
            distribution=config.distribution,
            mirror=config.mirror,
            policy=config.policy,
            cache_dir=Path(cache_dir) if cache_dir is not None else None,
            groups=config.groups,
        )

    def provision(
        self,
        root: GraphState,
        groups: Iterable[Sequence[str]] | None = None,
    ) -> GraphState:
        """Thread *root* through the stages; *groups* defaults to the session's own."""
        normalized = normalize_groups(self.groups if groups is None else groups)
        self.logger.log(
            operation="provision",
            stage=None,
            step="start",
            message="Provisioning runtime.",
            extra={"groups": len(normalized), "mirror_mode": self.policy.mirror_mode},
        )

        graph = self.runtime_installer().install(root)
        if mirror_required(policy=self.policy, has_packages=bool(normalized)):
            graph = self.registry_mirror().configure(graph, self.state)
        graph = self.package_installer().install(graph, normalized, self.state)

        self.logger.log(
            operation="provision",
            stage=None,
            step="done",
            message="Provisioning graph assembled.",
            extra={"operations": len(graph.operations)},
        )
        return graph

    def runtime_installer(self) -> RuntimeInstaller:
        return RuntimeInstaller(
            distribution=self.distribution,
            policy=self.policy,
            logger=self.logger,
            cache_dir=self.cache_dir,
        )

    def registry_mirror(self) -> RegistryMirror:
        return RegistryMirror(distribution=self.distribution, config=self.mirror, logger=self.logger)

    def package_installer(self) -> PackageInstaller:
        return PackageInstaller(
            distribution=self.distribution,
            mirror=self.mirror,
            logger=self.logger,
        )

    def finalizer_input(self) -> dict[str, object]:
        return self.state.to_dict()


def provision(
    root: GraphState,
    groups: Iterable[Sequence[str]] = (),
    *,
    policy: Policy | None = None,
) -> tuple[GraphState, ProvisioningState]:
    """Run a one-off session and return the graph and its provisioning state."""
    session = ProvisioningSession(policy=policy or Policy())
    graph = session.provision(root, groups)
    return graph, session.state
