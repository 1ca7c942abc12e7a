from __future__ import annotations

from pathlib import Path

import pytest

from locator_engine.config.loader import ConfigLoader
from locator_engine.core.metadata import ResolutionOptions, RetryOptions


@pytest.fixture()
def suite_config():
    config_path = Path(__file__).resolve().parents[1] / "config" / "test_suite.json"
    return ConfigLoader.load(config_path, env={})


@pytest.fixture()
def instant_options():
    return ResolutionOptions(timeout_ms=0)


@pytest.fixture()
def fast_retry():
    return RetryOptions(max_retries=2, delay_ms=0)
