from __future__ import annotations

import shutil

from textreel.exceptions import DependencyMissingError


def require_binary(binary: str) -> str:
    """Return the resolved path of `binary` or raise if it is not on PATH."""
    resolved = shutil.which(binary)
    if resolved is None:
        raise DependencyMissingError(
            f"Missing required dependency '{binary}'. Install it and try again."
        )
    return resolved

