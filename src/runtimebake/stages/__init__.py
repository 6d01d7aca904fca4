"""Provisioning stages, applied in order: runtime, mirror, packages."""

from .mirror import MIRROR_SETUP_COMMANDS, RegistryMirror
from .packages import PackageInstaller, export_env, install_command
from .runtime import BUILDER_IMAGE, RuntimeInstaller

__all__ = [
    "BUILDER_IMAGE",
    "MIRROR_SETUP_COMMANDS",
    "PackageInstaller",
    "RegistryMirror",
    "RuntimeInstaller",
    "export_env",
    "install_command",
]
