from __future__ import annotations

import re
from pathlib import Path

import pytest

from locator_engine.core.actions import WebActions
from locator_engine.core.catalog import SelfHealingCatalog
from locator_engine.core.exceptions import (
    AssertionFailedError,
    ConfigurationError,
    ElementNotFoundError,
    HealingError,
    NavigationError,
    WaitTimeoutError,
)
from locator_engine.core.metadata import LogicalKey, Strategy
from tests.helpers import DelayedCandidateSource, FakeCandidate, FakeCandidateSource, reference_layout

CATALOG = SelfHealingCatalog(
    {
        "common": {
            "navigation": {
                "homeLink": {"selectors": ["a[href='/']", "a.nav-home", "[data-testid='home-link']"]},
            }
        }
    }
)


@pytest.fixture()
def make_actions(instant_options, fast_retry):
    def factory(elements=None, source=None, **kwargs) -> tuple[WebActions, FakeCandidateSource]:
        source = source or FakeCandidateSource(elements or {})
        kwargs.setdefault("defaults", instant_options)
        kwargs.setdefault("retry_options", fast_retry)
        return WebActions(source, kwargs.pop("catalog", CATALOG), **kwargs), source

    return factory


def test_click_acts_on_the_resolved_candidate(make_actions):
    candidates = reference_layout()
    actions, _ = make_actions({".item": candidates})
    actions.click(".item", {"strategy": Strategy.LAST})
    assert candidates[2].calls == [("click",)]
    assert candidates[0].calls == []


def test_primitive_actions_delegate_to_the_candidate(make_actions, tmp_path):
    field = FakeCandidate("field")
    actions, _ = make_actions({"#field": [field]})
    actions.fill("#field", "hello")
    actions.hover("#field")
    actions.double_click("#field")
    actions.check("#field")
    actions.uncheck("#field")
    actions.select_option("#field", ["red", "blue"])
    upload = tmp_path / "avatar.png"
    actions.set_input_files("#field", upload)
    assert field.calls == [
        ("fill", "hello"),
        ("hover",),
        ("double_click",),
        ("check",),
        ("uncheck",),
        ("select_option", ["red", "blue"]),
        ("set_input_files", [str(Path(upload).resolve())]),
    ]
    assert field.value == "hello"


def test_getters_read_the_resolved_candidate(make_actions):
    link = FakeCandidate(
        "link",
        text="About us",
        attributes={"href": "/about"},
        value="typed",
        enabled=False,
    )
    actions, _ = make_actions({"a.about": [link]})
    assert actions.get_text("a.about") == "About us"
    assert actions.get_attribute("a.about", "href") == "/about"
    assert actions.get_input_value("a.about") == "typed"
    assert actions.is_visible("a.about") is True
    assert actions.is_enabled("a.about") is False


def test_non_throwing_mode_turns_actions_into_no_ops(make_actions):
    actions, source = make_actions({})
    options = {"throw_on_not_found": False}
    assert actions.resolve("#missing", options) is None
    actions.click("#missing", options)
    actions.fill("#missing", "ignored", options)
    assert actions.get_text("#missing", options) is None
    assert actions.is_visible("#missing", options) is False
    assert source.queries == ["#missing"] * 5


def test_is_visible_reports_missing_elements_as_not_visible(make_actions):
    hidden = FakeCandidate("hidden", visible=False)
    actions, source = make_actions({"#hidden": [hidden]})
    assert actions.effective_options().throw_on_not_found is True
    assert actions.is_visible("#absent") is False
    assert actions.is_visible("#hidden") is False
    assert source.queries == ["#absent", "#hidden"]


def test_not_found_is_retried_then_raised(make_actions):
    actions, source = make_actions({})
    with pytest.raises(ElementNotFoundError) as excinfo:
        actions.click("#missing")
    assert excinfo.value.attempts == 2
    assert excinfo.value.selector == "#missing"
    assert "after 2 attempts" in excinfo.value.message
    assert isinstance(excinfo.value.cause, ElementNotFoundError)
    assert source.queries == ["#missing", "#missing"]


def test_transient_action_failure_re_resolves_and_retries(make_actions):
    button = FakeCandidate("button", failures=[RuntimeError("stale element")])
    actions, source = make_actions({"#buy": [button]})
    actions.click("#buy")
    assert button.calls == [("click",)]
    assert source.queries == ["#buy", "#buy"]


def test_configuration_errors_fail_on_first_attempt(make_actions):
    actions, source = make_actions({".item": reference_layout()})
    with pytest.raises(ConfigurationError):
        actions.click(".item", {"strategy": Strategy.INDEX})
    assert source.queries == [".item"]


def test_self_healing_clicks_the_first_live_fallback(make_actions):
    fallback = FakeCandidate("fallback")
    actions, source = make_actions({"a.nav-home": [fallback]}, use_self_healing=True)
    actions.click(LogicalKey("common.navigation.homeLink"))
    assert fallback.calls == [("click",)]
    assert source.counts == ["a[href='/']", "a.nav-home"]
    assert actions.locate(LogicalKey("common.navigation.homeLink")) == "a.nav-home"


def test_self_healing_exhaustion_stays_a_healing_error(make_actions):
    actions, source = make_actions({}, use_self_healing=True)
    with pytest.raises(HealingError) as excinfo:
        actions.click(LogicalKey("common.navigation.homeLink"))
    assert not isinstance(excinfo.value, ElementNotFoundError)
    assert excinfo.value.attempts == 2
    assert excinfo.value.selector == "common.navigation.homeLink"
    assert len(source.counts) == 6
    assert source.queries == []


def test_navigation_is_retried(make_actions):
    actions, source = make_actions()
    source.navigation_failures = [RuntimeError("net::ERR_CONNECTION_RESET")]
    actions.navigate("https://shop.example.com")
    assert source.visited == ["https://shop.example.com"]

    source.navigation_failures = [RuntimeError("down"), RuntimeError("still down")]
    with pytest.raises(NavigationError) as excinfo:
        actions.navigate("https://shop.example.com/cart")
    assert excinfo.value.selector == "https://shop.example.com/cart"
    assert "Navigation failed for: https://shop.example.com/cart" in excinfo.value.message


def test_expect_helpers_pass_for_matching_state(make_actions):
    heading = FakeCandidate("heading", text="  Welcome   back \n", value="alice")
    hidden = FakeCandidate("hidden", visible=False, enabled=False)
    actions, _ = make_actions({"h1": [heading], "#spinner": [hidden]})
    actions.expect_visible("h1")
    actions.expect_enabled("h1")
    actions.expect_text("h1", "Welcome back")
    actions.expect_text("h1", re.compile(r"Welcome\s+back"))
    actions.expect_value("h1", "alice")
    actions.expect_hidden("#spinner")
    actions.expect_hidden("#absent")
    actions.expect_disabled("#spinner")


@pytest.mark.parametrize(
    ("method", "args"),
    [
        ("expect_visible", ()),
        ("expect_hidden", ()),
        ("expect_disabled", ()),
        ("expect_text", ("Goodbye",)),
        ("expect_value", ("bob",)),
    ],
)
def test_expect_helpers_raise_assertion_failures(make_actions, method, args):
    heading = FakeCandidate("heading", visible=True, text="Welcome", value="alice")
    actions, _ = make_actions({"h1": [heading]})
    with pytest.raises(AssertionFailedError) as excinfo:
        if method == "expect_visible":
            actions.expect_visible("#absent")
        else:
            getattr(actions, method)("h1", *args)
    assert isinstance(excinfo.value, AssertionError)


def test_wait_for_element(make_actions):
    late = FakeCandidate("late")
    source = DelayedCandidateSource({"#late": [late]}, empty_queries=2)
    actions, _ = make_actions(source=source, poll_interval_ms=1)
    assert actions.wait_for_element("#late", timeout_ms=2000) is late

    hidden = FakeCandidate("hidden", visible=False)
    actions, _ = make_actions({"#hidden": [hidden]})
    assert actions.wait_for_element("#hidden", visible=False) is hidden
    with pytest.raises(WaitTimeoutError):
        actions.wait_for_element("#hidden")


def test_exists(make_actions):
    actions, source = make_actions({"#present": [FakeCandidate()], "a.nav-home": [FakeCandidate()]})
    assert actions.exists("#present") is True
    assert actions.exists("#absent") is False
    assert actions.exists(FakeCandidate()) is True
    assert actions.exists(LogicalKey("common.navigation.homeLink")) is False
    healing, _ = make_actions(source=source, use_self_healing=True)
    assert healing.exists(LogicalKey("common.navigation.homeLink")) is True


def test_from_config_uses_suite_defaults(suite_config):
    fallback = FakeCandidate("home")
    source = FakeCandidateSource({"a.nav-home": [fallback]})
    actions = WebActions.from_config(source, suite_config)
    assert actions.effective_options().timeout_ms == 0
    assert actions.retry_options.delay_ms == 0
    assert actions.resolve(LogicalKey("common.navigation.homeLink")) is fallback
