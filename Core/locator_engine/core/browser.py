from __future__ import annotations

from selenium import webdriver
from selenium.webdriver import ChromeOptions, FirefoxOptions

from locator_engine.config.schema import EnvironmentConfig


class BrowserSession:
    """Creates browser instances using Selenium Manager."""

    def __init__(self, environment: EnvironmentConfig) -> None:
        self.environment = environment

    def start(self, browser_name: str | None = None):
        normalized = (browser_name or self.environment.browser).lower()
        width, height = self.environment.window_width, self.environment.window_height
        if normalized == "chrome":
            options = ChromeOptions()
            if self.environment.headless:
                options.add_argument("--headless=new")
            options.add_argument(f"--window-size={width},{height}")
            driver = webdriver.Chrome(options=options)
        elif normalized == "firefox":
            options = FirefoxOptions()
            if self.environment.headless:
                options.add_argument("-headless")
            driver = webdriver.Firefox(options=options)
            driver.set_window_size(width, height)
        else:
            raise ValueError(f"Unsupported browser: {browser_name}")
        driver.set_page_load_timeout(self.environment.default_timeout_seconds)
        driver.implicitly_wait(0)
        return driver
