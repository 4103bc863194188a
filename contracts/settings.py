"""Settings (toolsmith.yaml) schema: Pydantic models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator

from contracts.tool_sdk import ToolFeatures


# ── Sections ─────────────────────────────────────────────────────────


class ProjectSettings(BaseModel):
    root: str = "."
    id: str = "default"


class AuditSettings(BaseModel):
    path: str = "toolsmith-audit.jsonl"
    enabled: bool = True


class LoggingSettings(BaseModel):
    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return value


# ── Per-tool settings ────────────────────────────────────────────────


_FEATURE_NAMES = {
    info.alias or name for name, info in ToolFeatures.model_fields.items()
} | set(ToolFeatures.model_fields)


class ToolSettings(BaseModel):
    enabled: bool = True
    config: dict[str, Any] = {}
    features: dict[str, bool] = {}  # overrides of the tool's declared flags

    @field_validator("features")
    @classmethod
    def _known_features(cls, value: dict[str, bool]) -> dict[str, bool]:
        unknown = sorted(set(value) - _FEATURE_NAMES)
        if unknown:
            raise ValueError(f"Unknown tool features: {', '.join(unknown)}")
        return value

    def apply_features(self, base: ToolFeatures) -> ToolFeatures:
        """Return *base* with this tool's overrides merged in."""
        overrides = {("async" if k == "async_" else k): v for k, v in self.features.items()}
        return ToolFeatures.model_validate({**base.model_dump(by_alias=True), **overrides})


# ── Root settings ────────────────────────────────────────────────────


class ToolsmithSettings(BaseModel):
    project: ProjectSettings = ProjectSettings()
    audit: AuditSettings = AuditSettings()
    logging: LoggingSettings = LoggingSettings()
    tools: dict[str, ToolSettings] = {}

    def tool(self, name: str) -> ToolSettings:
        return self.tools.get(name, ToolSettings())
