"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, uniqctl.toml only contains
overrides. Rules live in ``[rules.<name>]`` tables (see settings).
"""

from __future__ import annotations

from pydantic import BaseModel


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str = "sqlite:///uniqctl.db"
    echo: bool = False
