from __future__ import annotations

from typing import Sequence

from selenium.common.exceptions import InvalidSelectorException, NoSuchElementException
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.by import By
from selenium.webdriver.support.select import Select

from locator_engine.core.exceptions import InvalidSelectorError
from locator_engine.utils.geometry import BoundingBox, Viewport
from locator_engine.utils.selectors import infer_selector_type

BOUNDING_BOX_SCRIPT = """
const rect = arguments[0].getBoundingClientRect();
return {x: rect.x, y: rect.y, width: rect.width, height: rect.height};
"""

VIEWPORT_SCRIPT = """
return {width: window.innerWidth, height: window.innerHeight};
"""


class SeleniumCandidate:
    """Wraps one Selenium WebElement as a resolution candidate."""

    def __init__(self, driver, element) -> None:
        self.driver = driver
        self.element = element

    @property
    def visible(self) -> bool:
        return self.element.is_displayed()

    def bounding_box(self) -> BoundingBox | None:
        if not self.element.is_displayed():
            return None
        return BoundingBox.from_mapping(self.driver.execute_script(BOUNDING_BOX_SCRIPT, self.element))

    def text_content(self) -> str | None:
        return self.element.get_property("textContent")

    def get_attribute(self, name: str) -> str | None:
        return self.element.get_dom_attribute(name)

    def input_value(self) -> str | None:
        return self.element.get_property("value")

    def is_enabled(self) -> bool:
        return self.element.is_enabled()

    def click(self) -> None:
        self.element.click()

    def double_click(self) -> None:
        ActionChains(self.driver).double_click(self.element).perform()

    def fill(self, value: str) -> None:
        self.element.clear()
        self.element.send_keys(value)

    def hover(self) -> None:
        ActionChains(self.driver).move_to_element(self.element).perform()

    def check(self) -> None:
        if not self.element.is_selected():
            self.element.click()

    def uncheck(self) -> None:
        if self.element.is_selected():
            self.element.click()

    def select_option(self, value: str | Sequence[str]) -> None:
        select = Select(self.element)
        values = [value] if isinstance(value, str) else list(value)
        for item in values:
            try:
                select.select_by_value(item)
            except NoSuchElementException:
                select.select_by_visible_text(item)

    def set_input_files(self, paths: Sequence[str]) -> None:
        self.element.send_keys("\n".join(paths))


class SeleniumCandidateSource:
    """Candidate source backed by a live Selenium WebDriver."""

    def __init__(self, driver) -> None:
        self.driver = driver

    def query(self, selector: str) -> list[SeleniumCandidate]:
        return [SeleniumCandidate(self.driver, element) for element in self._find(selector)]

    def count(self, selector: str) -> int:
        return len(self._find(selector))

    def viewport_size(self) -> Viewport | None:
        return Viewport.from_mapping(self.driver.execute_script(VIEWPORT_SCRIPT))

    def navigate(self, url: str) -> None:
        self.driver.get(url)

    def _find(self, selector: str) -> list:
        try:
            return self.driver.find_elements(self._by(selector), selector)
        except InvalidSelectorException as exc:
            raise InvalidSelectorError(f"Invalid selector: {selector}", selector=selector, cause=exc) from exc

    @staticmethod
    def _by(selector: str) -> str:
        return By.XPATH if infer_selector_type(selector) == "xpath" else By.CSS_SELECTOR
