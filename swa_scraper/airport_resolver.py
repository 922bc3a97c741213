"""Airport code entry through the booking form's autocomplete widget"""

import random
from typing import Awaitable, Callable, List, Optional

from loguru import logger

from .config import FIELD_CLEAR_DELETIONS
from .exceptions import AmbiguousMatchError, InputMismatchError
from .models import AutocompleteCandidate, SearchSettings
from .retry import retry


class AirportResolver:
    """
    Types an airport code into a field and commits the matching suggestion.

    A suggestion list can be stale or only partly rendered right after
    typing, so the whole clear/type/select cycle is retried as one unit.
    """

    def __init__(
        self,
        surface,
        settings: SearchSettings,
        keystroke_delay: Optional[Callable[[], float]] = None,
        on_failure: Optional[Callable[[int, Exception], Awaitable[None]]] = None,
    ):
        """
        Args:
            surface: RenderingSurface holding the booking form
            settings: Run settings (attempts, typing pace, popup timeout)
            keystroke_delay: Returns the delay in ms for the next keystroke;
                defaults to a uniform draw from settings.keystroke_delay_ms
            on_failure: Hook awaited after each failed attempt
        """
        self.surface = surface
        self.settings = settings
        self.keystroke_delay = keystroke_delay or self._random_keystroke_delay
        self.on_failure = on_failure

    def _random_keystroke_delay(self) -> float:
        low, high = self.settings.keystroke_delay_ms
        return random.uniform(low, high)

    async def resolve(self, code: str, field_id: str) -> str:
        """Commit code into the field with DOM id field_id and return it"""
        return await retry(
            lambda: self._resolve_once(code, field_id),
            max_attempts=self.settings.effective_max_attempts,
            on_failure=self.on_failure,
            description=f"Resolve {code} in #{field_id}",
        )

    async def _resolve_once(self, code: str, field_id: str) -> str:
        field_selector = f"#{field_id}"

        await self._clear_field(field_selector)

        for char in code:
            await self.surface.type(field_selector, char, delay=self.keystroke_delay())

        candidate_selector = f'[id^="{field_id}--item-"]'
        await self.surface.wait_for_selector(
            candidate_selector, timeout=self.settings.autocomplete_timeout_ms
        )

        candidates = await self._read_candidates(candidate_selector)
        matches = [c for c in candidates if c.matches(code)]
        logger.debug(
            f"#{field_id}: {len(candidates)} suggestions, {len(matches)} ending in {code}"
        )
        if len(matches) != 1:
            raise AmbiguousMatchError(code, len(matches))

        await self.surface.click(f"#{matches[0].element_id}")

        committed = await self.surface.input_value(field_selector)
        if committed != code:
            raise InputMismatchError(code, committed)

        return code

    async def _clear_field(self, field_selector: str) -> None:
        await self.surface.focus(field_selector)
        await self.surface.press_key("End")
        for _ in range(FIELD_CLEAR_DELETIONS):
            await self.surface.press_key("Backspace")

    async def _read_candidates(self, selector: str) -> List[AutocompleteCandidate]:
        candidates = []
        for element in await self.surface.query_all(selector):
            element_id = await element.get_attribute("id")
            if not element_id:
                continue
            text = await element.text_content()
            candidates.append(AutocompleteCandidate(element_id, text or ""))
        return candidates
