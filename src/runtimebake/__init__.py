"""Public package entrypoint for runtime provisioning graphs."""

from .config import ProvisionConfig, parse_config, read_config
from .errors import (
    ConfigError,
    ConfigWriteError,
    ErrorCode,
    ExtractionError,
    FetchError,
    IntegrityError,
    PolicyError,
    ProvisioningError,
    ToolInstallError,
    ValidationError,
)
from .graph import GraphState
from .models import MirrorConfig, ProvisioningState, RuntimeDistribution, ServiceSpec
from .observability import StructuredLogger
from .policy import Policy
from .session import ProvisioningSession, provision
from .stages import PackageInstaller, RegistryMirror, RuntimeInstaller

__all__ = [
    "ConfigError",
    "ConfigWriteError",
    "ErrorCode",
    "ExtractionError",
    "FetchError",
    "GraphState",
    "IntegrityError",
    "MirrorConfig",
    "PackageInstaller",
    "Policy",
    "PolicyError",
    "ProvisionConfig",
    "ProvisioningError",
    "ProvisioningSession",
    "ProvisioningState",
    "RegistryMirror",
    "RuntimeDistribution",
    "RuntimeInstaller",
    "ServiceSpec",
    "StructuredLogger",
    "ToolInstallError",
    "ValidationError",
    "parse_config",
    "provision",
    "read_config",
]
