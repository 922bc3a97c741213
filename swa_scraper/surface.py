"""Rendering surface port and its Camoufox (Playwright) implementation

The search logic only talks to ``RenderingSurface``; anything that can
navigate, wait, type, click and read text can drive it, including the test
doubles in ``tests/``.
"""

from contextlib import AsyncExitStack
from pathlib import Path
from typing import List, Optional, Protocol

from loguru import logger
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import NAVIGATION_TIMEOUT_MS
from .exceptions import ResourceTimeoutError


class SurfaceElement(Protocol):
    """An element handle returned by the surface"""

    async def text_content(self) -> Optional[str]: ...

    async def get_attribute(self, name: str) -> Optional[str]: ...

    async def query_text(self, selector: str) -> Optional[str]:
        """Text of the first descendant matching selector, None if absent"""
        ...

    async def query_all_text(self, selector: str) -> List[str]:
        """Texts of all descendants matching selector, in document order"""
        ...


class RenderingSurface(Protocol):
    """Capabilities the scraper needs from a browser tab"""

    async def navigate(self, url: str) -> None: ...

    async def set_viewport(self, width: int, height: int) -> None: ...

    async def wait_for_selector(
        self, selector: str, timeout: Optional[float] = None
    ) -> Optional[SurfaceElement]:
        """Wait for selector to render; raises ResourceTimeoutError on timeout"""
        ...

    async def click(self, selector: str, delay: float = 0) -> None: ...

    async def type(self, selector: str, text: str, delay: float = 0) -> None: ...

    async def focus(self, selector: str) -> None: ...

    async def press_key(self, key: str) -> None: ...

    async def evaluate_text(self, selector: str) -> Optional[str]: ...

    async def evaluate_attribute(self, selector: str, name: str) -> Optional[str]: ...

    async def input_value(self, selector: str) -> str: ...

    async def query(self, selector: str) -> Optional[SurfaceElement]: ...

    async def query_all(self, selector: str) -> List[SurfaceElement]: ...

    async def screenshot(self, path: Path) -> None: ...

    async def close(self) -> None: ...


class PageElement:
    """SurfaceElement backed by a Playwright ElementHandle"""

    def __init__(self, handle):
        self.handle = handle

    async def text_content(self) -> Optional[str]:
        return await self.handle.text_content()

    async def get_attribute(self, name: str) -> Optional[str]:
        return await self.handle.get_attribute(name)

    async def query_text(self, selector: str) -> Optional[str]:
        child = await self.handle.query_selector(selector)
        if child is None:
            return None
        return await child.text_content()

    async def query_all_text(self, selector: str) -> List[str]:
        return await self.handle.eval_on_selector_all(
            selector, "els => els.map(el => el.textContent)"
        )


class CamoufoxSurface:
    """
    RenderingSurface over a single Camoufox tab.

    The browser is opened by ``launch`` and released by ``close``; one tab is
    reused for every search.
    """

    def __init__(self, page, stack: Optional[AsyncExitStack] = None):
        self.page = page
        self._stack = stack

    @classmethod
    async def launch(cls, headless: bool = True) -> "CamoufoxSurface":
        """Start Camoufox and open the tab used for the whole run"""
        from camoufox.async_api import AsyncCamoufox

        stack = AsyncExitStack()
        try:
            browser = await stack.enter_async_context(AsyncCamoufox(headless=headless))
            page = await browser.new_page()
        except BaseException:
            await stack.aclose()
            raise

        logger.info(f"🦊 Camoufox started (headless={headless})")
        return cls(page, stack)

    async def navigate(self, url: str) -> None:
        try:
            await self.page.goto(url, timeout=NAVIGATION_TIMEOUT_MS)
        except PlaywrightTimeoutError as e:
            raise ResourceTimeoutError(url, NAVIGATION_TIMEOUT_MS) from e

    async def set_viewport(self, width: int, height: int) -> None:
        await self.page.set_viewport_size({"width": width, "height": height})

    async def wait_for_selector(
        self, selector: str, timeout: Optional[float] = None
    ) -> Optional[PageElement]:
        try:
            handle = await self.page.wait_for_selector(selector, timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise ResourceTimeoutError(selector, timeout) from e
        return PageElement(handle) if handle is not None else None

    async def click(self, selector: str, delay: float = 0) -> None:
        # Playwright counts the press-to-release delay against the action timeout
        timeout = delay + NAVIGATION_TIMEOUT_MS
        try:
            await self.page.click(selector, delay=delay, timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise ResourceTimeoutError(selector, timeout) from e

    async def type(self, selector: str, text: str, delay: float = 0) -> None:
        await self.page.locator(selector).press_sequentially(text, delay=delay)

    async def focus(self, selector: str) -> None:
        await self.page.focus(selector)

    async def press_key(self, key: str) -> None:
        await self.page.keyboard.press(key)

    async def evaluate_text(self, selector: str) -> Optional[str]:
        handle = await self.page.query_selector(selector)
        if handle is None:
            return None
        return await handle.text_content()

    async def evaluate_attribute(self, selector: str, name: str) -> Optional[str]:
        handle = await self.page.query_selector(selector)
        if handle is None:
            return None
        return await handle.get_attribute(name)

    async def input_value(self, selector: str) -> str:
        return await self.page.input_value(selector)

    async def query(self, selector: str) -> Optional[PageElement]:
        handle = await self.page.query_selector(selector)
        return PageElement(handle) if handle is not None else None

    async def query_all(self, selector: str) -> List[PageElement]:
        return [PageElement(h) for h in await self.page.query_selector_all(selector)]

    async def screenshot(self, path: Path) -> None:
        await self.page.screenshot(path=str(path), full_page=True)

    async def close(self) -> None:
        if self._stack is not None:
            await self._stack.aclose()
            self._stack = None
            logger.info("Browser closed")
