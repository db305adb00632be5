"""
Lightweight environment variable loader for local development.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional


def load_env_if_present(candidate_paths: Iterable[Path]) -> None:
    """Load key=value pairs from the first .env-style file that exists."""
    for env_path in candidate_paths:
        if not env_path.exists() or not env_path.is_file():
            continue
        try:
            lines = env_path.read_text().splitlines()
        except (OSError, UnicodeDecodeError):
            # Explicit environment variables take precedence anyway.
            continue
        for line in lines:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or "=" not in stripped:
                continue
            key, value = stripped.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export ") :].strip()
            value = value.strip().strip("'\"")
            if key and key not in os.environ:
                os.environ[key] = value
        break


def load_default_env() -> None:
    """Load from common locations: cwd/.env and project root .env."""
    cwd = Path.cwd()
    default_candidates = [
        cwd / ".env",
        Path(__file__).resolve().parents[2] / ".env",
    ]
    load_env_if_present(default_candidates)


def resolve_api_key(api_key: Optional[str], env_var: str) -> Optional[str]:
    """Return ``api_key`` if given, else the value of ``env_var`` (after loading .env)."""
    if api_key:
        return api_key
    load_default_env()
    return os.getenv(env_var) or None


__all__ = ["load_default_env", "load_env_if_present", "resolve_api_key"]
