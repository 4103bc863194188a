"""Settings loader: parse and validate toolsmith.yaml."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from contracts.errors import SettingsError
from contracts.settings import ToolSettings, ToolsmithSettings

__all__ = ["ToolSettings", "ToolsmithSettings", "configure_logging", "load_settings"]


def load_settings(path: str | Path) -> ToolsmithSettings:
    """Load a toolsmith.yaml file and return validated settings.

    Relative ``project.root`` and ``audit.path`` values are resolved
    against the settings file's directory.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Settings not found: {path}")

    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsError(f"Settings must be a YAML mapping, got {type(data).__name__}")

    settings = ToolsmithSettings(**data)
    base = p.resolve().parent
    return settings.model_copy(
        update={
            "project": settings.project.model_copy(
                update={"root": str((base / settings.project.root).resolve())}
            ),
            "audit": settings.audit.model_copy(
                update={"path": str(base / settings.audit.path)}
            ),
        }
    )


def configure_logging(settings: ToolsmithSettings) -> None:
    logging.basicConfig(
        level=settings.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
