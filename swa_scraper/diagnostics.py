"""Debug-mode helpers: failure screenshots and the interactive console"""

import asyncio
import code
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import DEFAULT_SCREENSHOT_DIR


class ScreenshotRecorder:
    """
    Saves timestamped screenshots of the surface on failures and throttles.

    Disabled recorders do nothing, so callers can always invoke ``capture``.
    A screenshot that cannot be taken is logged and otherwise ignored; it must
    not replace the error being diagnosed.
    """

    def __init__(self, enabled: bool = False, directory: Path = DEFAULT_SCREENSHOT_DIR):
        self.enabled = enabled
        self.directory = Path(directory)

    async def capture(self, surface, label: str = "failure") -> Optional[Path]:
        if not self.enabled:
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        path = self.directory / f"{timestamp}_{label}.png"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            await surface.screenshot(path)
        except Exception as e:
            logger.warning(f"Could not save screenshot {path}: {e}")
            return None

        logger.info(f"📸 Screenshot saved: {path}")
        return path


class DebugConsole:
    """
    Interactive Python console over the live browser tab.

    The console runs in a worker thread so the event loop keeps serving the
    page; ``run(coro)`` executes a coroutine on that loop and returns its
    result, e.g. ``run(page.title())``.
    """

    banner = (
        "SWA scraper debug console\n"
        "  surface, page, error are available\n"
        "  run(coro) awaits a coroutine on the browser loop\n"
        "  exit() or Ctrl-D to finish"
    )

    async def __call__(self, surface, error: BaseException) -> None:
        loop = asyncio.get_running_loop()

        def run(coro):
            return asyncio.run_coroutine_threadsafe(coro, loop).result()

        namespace = {
            "surface": surface,
            "page": getattr(surface, "page", None),
            "error": error,
            "run": run,
        }
        logger.info("Entering debug console")
        await asyncio.to_thread(self._interact, namespace)
        logger.info("Debug console closed")

    def _interact(self, namespace) -> None:
        try:
            code.interact(banner=self.banner, local=namespace, exitmsg="")
        except SystemExit:
            # exit() inside the console ends the session, not the scraper
            pass
