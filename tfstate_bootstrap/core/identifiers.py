"""Resource naming.

Only the bucket gets a random suffix (bucket names are global). Every other
name is a deterministic function of the configured ``name``, so re-running
with the same config collides on the service account and secret instead of
silently creating duplicates.
"""

from __future__ import annotations

import base64
import secrets

SUFFIX_BYTES = 6


def random_suffix() -> str:
    """Return 10 characters from ``[a-z2-7]`` drawn from a CSPRNG."""
    encoded = base64.b32encode(secrets.token_bytes(SUFFIX_BYTES)).decode("ascii")
    return encoded.rstrip("=").lower()


def bucket_name(name: str) -> str:
    return f"{name}-tf-state-{random_suffix()}"


def service_account_name(name: str) -> str:
    return f"{name}-tf-state-manager"


def lockbox_secret_name(name: str) -> str:
    return f"{service_account_name(name)}-sa-access-key"
