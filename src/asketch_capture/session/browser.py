"""
Headless browser session using Pyppeteer.

One session owns one Chromium process and one page for the whole run.
In debug mode the browser is started headed and is left open when the run
ends, so the page can be inspected by hand.
"""

import asyncio
from typing import Optional

from pyppeteer import launch
from pyppeteer.browser import Browser
from pyppeteer.errors import PyppeteerError
from pyppeteer.page import Page

from ..config import LaunchOptions
from ..errors import BrowserLaunchError, NavigationError


class BrowserSession:
    """A launched browser and its single page."""

    def __init__(self, browser: Browser, options: LaunchOptions, debug: bool = False):
        self.browser = browser
        self.options = options
        self.debug = debug
        self.page: Optional[Page] = None
        self._closed = False

    @classmethod
    async def launch(cls, options: LaunchOptions, debug: bool = False) -> 'BrowserSession':
        """
        Start Chromium with the given launch options.

        Raises:
            BrowserLaunchError: if the process cannot be started
        """
        launch_args = {
            'headless': not debug,
            'args': list(options.args),
            'handleSIGINT': False,
            'handleSIGTERM': False,
            'handleSIGHUP': False,
            # Keep the debug browser alive after the run exits
            'autoClose': not debug,
        }
        if options.executable_path:
            launch_args['executablePath'] = str(options.executable_path)
        if options.user_data_dir:
            launch_args['userDataDir'] = str(options.user_data_dir)

        print(f"[Browser] Launching browser (headless={not debug})...", flush=True)

        try:
            browser = await launch(**launch_args)
        except (PyppeteerError, OSError) as e:
            raise BrowserLaunchError(f"Could not launch browser: {e}") from e

        return cls(browser, options, debug=debug)

    async def new_page(self) -> Page:
        """Open the session's page."""
        try:
            page = await self.browser.newPage()
        except PyppeteerError as e:
            raise BrowserLaunchError(f"Could not open a page: {e}") from e

        if self.debug:
            await page.bringToFront()
            page.on('console', lambda msg: print(f"PAGE LOG: {msg.text}", flush=True))

        self.page = page
        return page

    async def navigate(self, url: str) -> None:
        """
        Load ``url`` and wait for the configured load event.

        Raises:
            NavigationError: on timeout or network failure
        """
        if self.page is None:
            await self.new_page()

        print(f"[Browser] Navigating to {url} (waitUntil={self.options.wait_until})...", flush=True)

        try:
            await self.page.goto(url, {
                'waitUntil': self.options.wait_until,
                'timeout': int(self.options.navigation_timeout * 1000),
            })
        except PyppeteerError as e:
            raise NavigationError(f"Could not load {url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise NavigationError(f"Timed out loading {url}: {e}") from e

    async def close(self) -> None:
        """Close the browser. Left open in debug mode."""
        if self._closed:
            return
        if self.debug:
            print("[Browser] Debug mode: leaving browser open", flush=True)
            return

        self._closed = True
        await self.browser.close()
        print("[Browser] Closed", flush=True)
