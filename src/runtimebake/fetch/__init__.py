"""Integrity-checked retrieval of runtime distributions."""

from .http import UnverifiedFetchWarning, fetch, sha256_file

__all__ = ["UnverifiedFetchWarning", "fetch", "sha256_file"]
