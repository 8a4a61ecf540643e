"""
Browser-driven retrieval of PUN bundles from mercatoelettrico.org.

The GME download portal has no API: the data form only becomes usable after
accepting two legal/cookie checkboxes, and the bundle is delivered as a
browser download. This module drives a Chromium session through Playwright
to perform that sequence under a single overall deadline:

    1. launch Chromium (headless unless show_browser)
    2. open the portal entry URL
    3. tick both consent checkboxes and confirm
    4. register a download observer
    5. fill the start/end dates (DD/MM/YYYY) and press download
    6. wait for the download to complete
    7. save it into a temporary directory under the server-assigned name

The browser is closed and the temporary directory removed on every exit path.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ...config import RetrievalConfig
from ...exceptions import RetrievalError, RetrievalTimeoutError

PORTAL_URL = (
    "https://www.mercatoelettrico.org/En/Tools/Accessodati.aspx"
    "?ReturnUrl=%2fEn%2fDownload%2fDownloadDati.aspx%3fval%3dMGP_Prezzi&val=MGP_Prezzi"
)
ACCEPT_BOX_1 = "#ContentPlaceHolder1_CBAccetto1"
ACCEPT_BOX_2 = "#ContentPlaceHolder1_CBAccetto2"
ACCEPT_BUTTON = "#ContentPlaceHolder1_Button1"
START_DATE_INPUT = "#ContentPlaceHolder1_tbDataStart"
END_DATE_INPUT = "#ContentPlaceHolder1_tbDataStop"
DOWNLOAD_BUTTON = "#ContentPlaceHolder1_btnScarica"
PORTAL_DATE_FORMAT = "%d/%m/%Y"
TEMP_DIR_PREFIX = "punapi"


class BundleFetcher(ABC):
    """Anything that can produce a bundle for a date range."""

    @abstractmethod
    def fetch_bundle(self, start: date, end: date):
        """
        Context manager yielding the path of a bundle covering start..end
        (inclusive). The file is only valid inside the context.
        """
        pass


class BrowserRetrievalController(BundleFetcher):
    """
    Downloads PUN bundles from the GME portal with a Playwright browser.

    One instance can be shared between threads; each call to fetch_bundle()
    runs its own browser session.
    """

    def __init__(self, config: RetrievalConfig = None):
        self.config = config or RetrievalConfig()
        self.logger = logging.getLogger(__name__)

    @contextmanager
    def fetch_bundle(self, start: date, end: date) -> Iterator[str]:
        """
        Download the bundle for start..end and yield its path.

        Raises:
            RetrievalTimeoutError: the sequence did not finish within config.timeout
            RetrievalError: any other browser or portal failure
        """
        workdir = tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX)
        try:
            yield self._download(start, end, workdir)
        finally:
            self.logger.info(f"Removing temporary directory '{workdir}'")
            try:
                shutil.rmtree(workdir)
            except OSError as e:
                self.logger.error(
                    f"Failed to remove temporary directory '{workdir}': {e}")

    def _download(self, start: date, end: date, workdir: str) -> str:
        timeout = self.config.timeout
        self.logger.info(
            f"Retrieving PUN bundle for {start.isoformat()}..{end.isoformat()} (timeout {timeout}s)")
        try:
            return asyncio.run(asyncio.wait_for(
                self._retrieve(start, end, workdir), timeout=timeout))
        except PlaywrightTimeoutError as e:
            raise RetrievalTimeoutError(f"Timed out waiting for the portal: {e}") from e
        except asyncio.TimeoutError as e:
            raise RetrievalTimeoutError(
                f"Retrieval did not complete within {timeout} seconds") from e
        except PlaywrightError as e:
            raise RetrievalError(f"Browser interaction failed: {e}") from e

    def launch_options(self, workdir: str) -> Dict[str, Any]:
        """Chromium launch keyword arguments derived from the configuration."""
        args = []
        if self.config.show_browser:
            args.extend(["--no-first-run", "--no-default-browser-check"])
        if self.config.disable_gpu:
            args.append("--disable-gpu")

        options: Dict[str, Any] = {
            "headless": not self.config.show_browser,
            "downloads_path": workdir,
            "args": args,
        }
        if self.config.chrome_path:
            options["executable_path"] = self.config.chrome_path
        if self.config.proxy:
            options["proxy"] = {"server": self.config.proxy}
        return options

    async def _retrieve(self, start: date, end: date, workdir: str) -> str:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(**self.launch_options(workdir))
            try:
                context = await browser.new_context(accept_downloads=True)
                page = await context.new_page()
                page.set_default_timeout(self.config.timeout * 1000)
                if self.config.debug:
                    page.on("console", lambda msg: self.logger.debug(f"console: {msg.text}"))
                    page.on("framenavigated", lambda frame: self.logger.debug(f"navigated: {frame.url}"))

                self.logger.info(f"Navigating to {PORTAL_URL}")
                await page.goto(PORTAL_URL)

                for selector in (ACCEPT_BOX_1, ACCEPT_BOX_2, ACCEPT_BUTTON):
                    await self._click(page, selector)

                page.on("download", lambda d: self.logger.info(
                    f"Download started: '{d.suggested_filename}'"))
                async with page.expect_download() as download_info:
                    await self._fill(page, START_DATE_INPUT, start.strftime(PORTAL_DATE_FORMAT))
                    await self._fill(page, END_DATE_INPUT, end.strftime(PORTAL_DATE_FORMAT))
                    await self._click(page, DOWNLOAD_BUTTON)
                download = await download_info.value

                failure = await download.failure()
                if failure:
                    raise RetrievalError(f"Download failed: {failure}")

                bundle = os.path.join(workdir, download.suggested_filename)
                await download.save_as(bundle)
                self.logger.info(f"Download finished. File name is '{bundle}'")
                return bundle
            finally:
                await browser.close()

    async def _click(self, page, selector: str) -> None:
        locator = page.locator(selector)
        await locator.wait_for(state="visible")
        await locator.click()

    async def _fill(self, page, selector: str, value: str) -> None:
        locator = page.locator(selector)
        await locator.wait_for(state="visible")
        await locator.fill(value)
