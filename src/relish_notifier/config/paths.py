from __future__ import annotations

import sys
from pathlib import Path


def app_base_dir() -> Path:
    """
    Returns the base directory for runtime files (.env, screenshots).

    - From source: the repo root (relative to this file)
    - Frozen executable: directory containing the executable
    - Installed package: the current working directory
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent

    # .../src/relish_notifier/config/paths.py -> repo root is 3 parents up
    root = Path(__file__).resolve().parents[3]
    if (root / "pyproject.toml").exists():
        return root
    return Path.cwd()


def env_file_path() -> Path:
    return app_base_dir() / ".env"
