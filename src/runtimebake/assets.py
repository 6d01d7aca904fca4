"""Static mirror scripts bundled with the package.

Both scripts are written verbatim into the image; neither is read from disk
at run time. They resolve their working paths relative to their own location,
so they stay valid wherever the mirror directory is placed.
"""

from __future__ import annotations

from textwrap import dedent

MIRROR_HOST = "127.0.0.1"
MIRROR_PORT = 9999
MIRROR_URL = f"http://{MIRROR_HOST}:{MIRROR_PORT}"
MIRROR_UPSTREAM = "https://pkg.julialang.org"

REGISTRY_SCRIPT_NAME = "registry.jl"
SERVER_SCRIPT_NAME = "server.jl"

REGISTRY_SCRIPT = dedent("""\
    # Generates the local package registry read by the mirror server.
    using LocalRegistry

    const REGISTRY_DIR = joinpath(@__DIR__, "registry")

    if !isdir(REGISTRY_DIR)
        create_registry(
            REGISTRY_DIR,
            "file://" * REGISTRY_DIR;
            description = "Local package mirror registry",
            push = false,
        )
    end
""")

SERVER_SCRIPT = dedent(f"""\
    # Serves package metadata and artifacts from a local cache.
    using PkgServer
    using Sockets

    PkgServer.start(;
        listen_addr = Sockets.InetAddr(ip"{MIRROR_HOST}", {MIRROR_PORT}),
        storage_root = joinpath(@__DIR__, "storage"),
        storage_servers = ["{MIRROR_UPSTREAM}"],
    )
""")
