from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping

from pydantic import ValidationError

from locator_engine.config.schema import SuiteConfig
from locator_engine.core.exceptions import ConfigurationError

ENVIRONMENT_OVERRIDES = {
    "BASE_URL": "base_url",
    "BROWSER": "browser",
    "HEADLESS": "headless",
}


class ConfigLoader:
    """Loads and validates the JSON suite configuration."""

    @staticmethod
    def load(path: str | Path, env: Mapping[str, str] | None = None) -> SuiteConfig:
        config_path = Path(path)
        try:
            with config_path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(f"Could not read suite configuration {config_path}: {exc}") from exc
        return ConfigLoader.from_payload(payload, env)

    @staticmethod
    def from_payload(payload: dict, env: Mapping[str, str] | None = None) -> SuiteConfig:
        environment = dict(payload.get("environment") or {})
        for variable, field_name in ENVIRONMENT_OVERRIDES.items():
            value = (os.environ if env is None else env).get(variable)
            if value:
                environment[field_name] = value
        try:
            return SuiteConfig.model_validate({**payload, "environment": environment})
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid suite configuration: {exc}") from exc
