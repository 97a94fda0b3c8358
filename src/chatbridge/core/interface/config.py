"""Engine configuration — default model names and numeric defaults per format."""

import os
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, Field, ValidationError

from chatbridge.core.errors import ConfigError

DEFAULT_MODELS: dict[str, str] = {
    "claude": "claude-3-sonnet-20240229",
    "openai": "gpt-3.5-turbo",
    "gemini": "gemini-pro",
    "ollama": "llama2",
}


class EngineConfig(BaseModel):
    """Defaults applied when a source payload omits a value the target needs.

    ``default_models`` maps a format id to the model name attached when the
    source request carries none.
    """

    default_models: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MODELS))
    default_max_tokens: int = 4096
    gemini_top_p: float = 0.95
    gemini_top_k: int = 64

    def model_for(self, fmt: str) -> str | None:
        """Return the default model name for *fmt*, if one is configured."""
        return self.default_models.get(fmt)


def load_config(path: Path) -> EngineConfig:
    """Read an EngineConfig from a YAML file.

    ``${VAR}`` references are expanded from the environment before parsing.
    Keys missing from ``default_models`` keep their built-in values.

    Raises:
        ConfigError: On read, YAML parse, or validation failures.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Config YAML must be a mapping")

    settings = cast(dict[str, Any], data)
    models = settings.get("default_models")
    if isinstance(models, dict):
        settings["default_models"] = {**DEFAULT_MODELS, **cast(dict[str, str], models)}

    try:
        return EngineConfig.model_validate(settings)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
