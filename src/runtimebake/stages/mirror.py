"""Local package mirror stage.

Installs git and the mirror tooling, writes the bundled registry and server
scripts, generates the local registry and starts the package server in the
background. The server is a build-time cache unless ``persist_service`` asks
the finalizer to run it as a supervised service in the runtime image.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field

from runtimebake.graph import GraphState
from runtimebake.models import MirrorConfig, ProvisioningState, RuntimeDistribution, ServiceSpec
from runtimebake.observability import StageLog, StructuredLogger

STAGE = "mirror"
MIRROR_SERVICE_NAME = "pkg-mirror"
MIRROR_TOOLS_COMMAND = (
    'using Pkg; Pkg.add("LocalRegistry"); '
    'Pkg.add(url="https://github.com/JuliaPackaging/PkgServer.jl")'
)
# Run commands appended by ``RegistryMirror.configure``.
MIRROR_SETUP_COMMANDS = 6


@dataclass(slots=True)
class RegistryMirror:
    distribution: RuntimeDistribution = field(default_factory=RuntimeDistribution.julia)
    config: MirrorConfig = field(default_factory=MirrorConfig)
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    @property
    def log(self) -> StageLog:
        return self.logger.for_stage(STAGE, operation="configure_mirror")

    def configure(self, root: GraphState, state: ProvisioningState) -> GraphState:
        """Return *root* with the mirror installed, seeded, and started."""
        config = self.config
        julia = self.distribution.executable

        root = root.run(
            "bash",
            "-c",
            "apt-get update && apt-get install -y --no-install-recommends git"
            " && rm -rf /var/lib/apt/lists/*",
            name="[internal] installing git for the package mirror",
        )
        root = root.run(
            "git", "config", "--global", "user.name", config.git_user_name,
            name="[internal] setting git user name",
        )
        root = root.run(
            "git", "config", "--global", "user.email", config.git_user_email,
            name="[internal] setting git user email",
        )
        root = root.run(
            julia, "-e", MIRROR_TOOLS_COMMAND,
            name="[internal] installing registry and mirror tooling",
        )
        self.log("tooling", "Mirror tooling declared.")

        root = root.mkdir(
            config.install_dir,
            mode=0o755,
            parents=True,
            name=f"[internal] creating {config.install_dir} for mirror configuration",
        )
        root = root.mkfile(
            config.registry_script_path,
            config.registry_script,
            name="[internal] writing registry generator script",
        )
        root = root.mkfile(
            config.server_script_path,
            config.server_script,
            name="[internal] writing mirror server script",
        )
        state.add_writable_directory(config.install_dir)
        self.log("configure", "Mirror scripts written.", dir=config.install_dir)

        root = root.run(
            julia, config.registry_script_path,
            name="[internal] generating local package registry",
        )
        server = shlex.join([julia, config.server_script_path])
        root = root.run(
            "bash",
            "-c",
            f"nohup {server} > {shlex.quote(config.server_log_path)} 2>&1 &",
            name=f"[internal] starting package mirror at {config.url}",
        )

        if config.persist_service:
            state.add_service(
                ServiceSpec(name=MIRROR_SERVICE_NAME, exec=(julia, config.server_script_path))
            )
            self.log("start", "Mirror server recorded as a runtime service.")
        else:
            self.log("start", "Mirror server started for build-time caching only.")
        return root
