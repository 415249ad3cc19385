"""Runtime environment detection shared by settings and the auth middleware."""

from __future__ import annotations

import os
from pathlib import Path


def is_docker_environment() -> bool:
    """Detect if running inside a Docker container."""
    if Path("/.dockerenv").exists():
        return True
    if os.getenv("DOCKER_CONTAINER") == "true":
        return True
    try:
        with open("/proc/1/cgroup") as f:
            return "docker" in f.read()
    except (FileNotFoundError, PermissionError):
        pass
    return False


def is_github_actions() -> bool:
    """Detect if running in GitHub Actions CI (both CI and GITHUB_ACTIONS set)."""
    return os.getenv("CI") == "true" and os.getenv("GITHUB_ACTIONS") == "true"
