from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from locator_engine.core.catalog import SelfHealingCatalog
from locator_engine.core.exceptions import ConfigurationError
from locator_engine.core.metadata import (
    ResolutionOptions,
    RetryOptions,
    SelfHealingEntry,
    coerce_strategy,
)


class EnvironmentConfig(BaseModel):
    base_url: str = "http://localhost:3000"
    browser: str = "chrome"
    headless: bool = True
    default_timeout_seconds: int = 30
    window_width: int = 1440
    window_height: int = 1200

    @field_validator("browser")
    @classmethod
    def validate_browser(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {"chrome", "firefox"}:
            raise ValueError(f"Unsupported browser: {value}")
        return normalized


class ResolverConfig(BaseModel):
    strategy: str = "first"
    timeout_ms: float = Field(default=5000, ge=0)
    throw_on_not_found: bool = True

    @field_validator("strategy")
    @classmethod
    def validate_strategy(cls, value: str) -> str:
        try:
            return coerce_strategy(value).value
        except ConfigurationError as exc:
            raise ValueError(exc.message) from exc

    def to_options(self) -> ResolutionOptions:
        return ResolutionOptions(
            strategy=coerce_strategy(self.strategy),
            timeout_ms=self.timeout_ms,
            throw_on_not_found=self.throw_on_not_found,
        )


class RetryConfig(BaseModel):
    max_retries: int = Field(default=2, ge=1)
    delay_ms: float = Field(default=1000, ge=0)

    def to_options(self) -> RetryOptions:
        return RetryOptions(max_retries=self.max_retries, delay_ms=self.delay_ms)


class SuiteConfig(BaseModel):
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    use_self_healing: bool = False
    locators: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_locators(self) -> SuiteConfig:
        try:
            self.build_catalog()
        except ConfigurationError as exc:
            raise ValueError(str(exc)) from exc
        return self

    def build_catalog(self) -> SelfHealingCatalog:
        return SelfHealingCatalog(self.locators)

    def get_locator(self, key: str) -> SelfHealingEntry:
        catalog = self.build_catalog()
        if key not in catalog:
            raise KeyError(f"Unknown locator key: {key}")
        return catalog[key]
