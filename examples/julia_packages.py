"""Provision Julia with a couple of package groups and print the finalizer input."""

from __future__ import annotations

import sys

from runtimebake import GraphState, ProvisioningSession
from runtimebake.graph import digest, to_json


def main() -> None:
    session = ProvisioningSession()
    graph = session.provision(
        GraphState.image("docker.io/library/ubuntu:22.04"),
        [["JSON", "HTTP"], ["DataFrames"]],
    )
    sys.stdout.write(to_json(graph))
    sys.stdout.write(session.state.to_json())
    print(f"graph digest: {digest(graph)}")


if __name__ == "__main__":
    main()
