import json

import pytest

from runtimebake.errors import (
    ConfigError,
    ConfigWriteError,
    ErrorCode,
    ExtractionError,
    FetchError,
    IntegrityError,
    PolicyError,
    ToolInstallError,
    ValidationError,
    error_for,
)
from runtimebake.graph import GraphState
from runtimebake.models import (
    JULIA_ARCHIVE_SHA256,
    MirrorConfig,
    ProvisioningState,
    RuntimeDistribution,
    ServiceSpec,
    normalize_groups,
)


def test_error_codes_are_stable_and_machine_readable() -> None:
    errors = [
        ValidationError("bad input"),
        ConfigError("bad config"),
        PolicyError("denied"),
        FetchError("no network"),
        IntegrityError("hash mismatch"),
        ExtractionError("bad archive"),
        ToolInstallError("apt failed"),
        ConfigWriteError("read-only fs"),
    ]
    assert [error.code for error in errors] == [
        ErrorCode.VALIDATION.value,
        ErrorCode.CONFIG.value,
        ErrorCode.POLICY.value,
        ErrorCode.FETCH.value,
        ErrorCode.INTEGRITY.value,
        ErrorCode.EXTRACTION.value,
        ErrorCode.TOOL_INSTALL.value,
        ErrorCode.CONFIG_WRITE.value,
    ]


def test_error_to_dict_includes_hint_and_context() -> None:
    error = IntegrityError("mismatch", hint="refetch", context={"expected": "abc"})

    payload = error.to_dict()

    assert payload["code"] == "E_INTEGRITY"
    assert payload["hint"] == "refetch"
    assert payload["context"] == {"expected": "abc"}
    assert "expected: abc" in str(error)


def test_error_for_maps_operation_failure_category() -> None:
    state = (
        GraphState.image("ubuntu:22.04")
        .run("tar", "zxf", "a.tgz", name="unpack", failure=ErrorCode.EXTRACTION)
        .mkdir("/opt/mirror", name="mirror dir")
    )
    unpack, mirror_dir = state.operations

    extraction = error_for(unpack, "tar exited with status 2", context={"exit_code": "2"})
    write = error_for(mirror_dir, "permission denied")

    assert isinstance(extraction, ExtractionError)
    assert extraction.context == {"operation": "unpack", "exit_code": "2"}
    assert isinstance(write, ConfigWriteError)


def test_julia_distribution_defaults() -> None:
    dist = RuntimeDistribution.julia()

    assert dist.install_root == "/opt/julia"
    assert dist.bin_dir == "/opt/julia/bin"
    assert dist.executable == "/opt/julia/bin/julia"
    assert dist.staging_path == "/tmp/julia.tar.gz"
    assert dist.sha256 == JULIA_ARCHIVE_SHA256


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("sha256", "not-a-digest"),
        ("install_root", "opt/julia"),
        ("archive_name", "nested/julia.tar.gz"),
        ("url", ""),
        ("url", "julia.tar.gz"),
        ("url", "ftp://example.com/julia.tar.gz"),
    ],
)
def test_distribution_rejects_invalid_values(field: str, value: str) -> None:
    kwargs = {
        "url": "https://example.com/julia.tar.gz",
        "sha256": "a" * 64,
        "archive_name": "julia.tar.gz",
        "install_root": "/opt/julia",
        "bin_dir": "/opt/julia/bin",
    }
    kwargs[field] = value

    with pytest.raises(ValidationError):
        RuntimeDistribution(**kwargs)


def test_mirror_config_paths_and_url() -> None:
    config = MirrorConfig()

    assert config.url == "http://127.0.0.1:9999"
    assert config.registry_script_path == "/opt/julia/mirror/registry.jl"
    assert config.server_script_path == "/opt/julia/mirror/server.jl"


def test_provisioning_state_deduplicates_directories_and_services() -> None:
    state = ProvisioningState()

    state.add_writable_directory("/opt/julia/mirror")
    state.add_writable_directory("/opt/julia/user_packages")
    state.add_writable_directory("/opt/julia/mirror")
    state.add_service(ServiceSpec(name="pkg-mirror", exec=("julia", "server.jl")))
    state.add_service(ServiceSpec(name="pkg-mirror", exec=("other",)))

    assert state.writable_directories == ["/opt/julia/mirror", "/opt/julia/user_packages"]
    assert len(state.services) == 1


def test_provisioning_state_json_export() -> None:
    state = ProvisioningState()
    state.export_env("JULIA_DEPOT_PATH", "/opt/julia/user_packages")
    state.add_writable_directory("/opt/julia/user_packages")

    payload = json.loads(state.to_json())

    assert payload == {
        "environment_exports": {"JULIA_DEPOT_PATH": "/opt/julia/user_packages"},
        "writable_directories": ["/opt/julia/user_packages"],
        "services": [],
    }


def test_normalize_groups_preserves_order() -> None:
    groups = normalize_groups([["JSON", "HTTP"], ("CSV",)])

    assert groups == (("JSON", "HTTP"), ("CSV",))


@pytest.mark.parametrize(
    "groups",
    [
        [[]],
        ["JSON"],
        [["JSON.jl"]],
        [['JSON"]); run(`rm -rf /`); (["']],
        [[""]],
    ],
)
def test_normalize_groups_rejects_invalid_input(groups: list[object]) -> None:
    with pytest.raises(ValidationError):
        normalize_groups(groups)  # type: ignore[arg-type]
