"""Headless browser snapshot capture using Playwright."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, sync_playwright

from core.capture.models import Snapshot
from core.utils.errors import AcquisitionError, PageLoadError
from core.utils.log_events import log_event

logger = logging.getLogger("ssrdiag.capture")

ConsoleHook = Callable[[str, str], None]

_DOM_SERIALIZE_JS = "() => document.documentElement.outerHTML"
_LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]
_DEFAULT_SETTLE_MS = 500


class PlaywrightSnapshotSource:
    """Load a page in headless Chromium and capture both DOM states."""

    def __init__(
        self,
        *,
        settle_ms: int = _DEFAULT_SETTLE_MS,
        on_console: ConsoleHook | None = None,
    ) -> None:
        self._settle_ms = settle_ms
        self._on_console = on_console

    def capture(self, url: str) -> Snapshot:
        try:
            with sync_playwright() as playwright:
                browser = playwright.chromium.launch(headless=True, args=_LAUNCH_ARGS)
                try:
                    page = browser.new_page()
                    return capture_page(
                        page,
                        url,
                        settle_ms=self._settle_ms,
                        on_console=self._on_console,
                    )
                finally:
                    browser.close()
        except PlaywrightError as exc:
            raise AcquisitionError(f"Browser automation failed: {exc}", stage="browser") from exc


def capture_page(
    page: Page,
    url: str,
    *,
    settle_ms: int = _DEFAULT_SETTLE_MS,
    on_console: ConsoleHook | None = None,
) -> Snapshot:
    """Navigate page to url and return server body plus hydrated DOM.

    Rules:
    - server_html is the literal HTTP response body, not a re-serialization
    - client_html is read after networkidle plus a fixed settle delay
    - console "log" lines and "error" lines are collected; uncaught page
      errors count as errors
    """

    console_messages: list[str] = []
    page_errors: list[str] = []

    def _handle_console(message: Any) -> None:
        kind = message.type
        text = message.text
        if kind == "log":
            console_messages.append(text)
        elif kind == "error":
            page_errors.append(text)
        else:
            return
        if on_console is not None:
            on_console(kind, text)

    def _handle_page_error(error: Any) -> None:
        text = str(error)
        page_errors.append(text)
        if on_console is not None:
            on_console("error", text)

    page.on("console", _handle_console)
    page.on("pageerror", _handle_page_error)

    response = page.goto(url, wait_until="networkidle")
    if response is None:
        raise PageLoadError(f"Failed to load page (no response): {url}", url=url)
    if response.status >= 400:
        raise PageLoadError(
            f"Failed to load page (status {response.status}): {url}",
            url=url,
            status=response.status,
        )
    server_html = response.text()

    if settle_ms > 0:
        page.wait_for_timeout(settle_ms)
    client_html = page.evaluate(_DOM_SERIALIZE_JS)

    log_event(
        logger,
        logging.INFO,
        "page_captured",
        url=url,
        status=response.status,
        server_chars=len(server_html),
        client_chars=len(client_html),
        page_errors=len(page_errors),
    )
    return Snapshot(
        url=url,
        status=response.status,
        server_html=server_html,
        client_html=client_html,
        console_messages=console_messages,
        page_errors=page_errors,
    )
