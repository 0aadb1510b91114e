"""
Motivational quotes with an explicit fallback.

Fetching never raises: a QuoteResult always carries a usable quote, and
`error` tells whether it came from the remote source or the fallback list.
"""

import asyncio
import contextlib
import logging
import random
from dataclasses import dataclass
from typing import Optional

from focusflow.errors import FocusFlowError
from focusflow.models.quote import DEFAULT_QUOTE, Quote
from focusflow.sessions import SessionsAPI

logger = logging.getLogger(__name__)

FALLBACK_QUOTES = (
    DEFAULT_QUOTE,
    Quote(text="Success is not final, failure is not fatal.", author="Winston Churchill"),
    Quote(text="The only way to do great work is to love what you do.", author="Steve Jobs"),
    Quote(text="It always seems impossible until it's done.", author="Nelson Mandela"),
    Quote(text="Focus on being productive instead of busy.", author="Tim Ferriss"),
    Quote(text="Well done is better than well said.", author="Benjamin Franklin"),
)


@dataclass(frozen=True)
class QuoteResult:
    quote: Quote
    error: Optional[FocusFlowError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class QuoteProvider:
    def __init__(self, sessions_api: SessionsAPI, rng: Optional[random.Random] = None):
        self._api = sessions_api
        self._rng = rng or random.Random()
        self._current = DEFAULT_QUOTE
        self._refresh_task: Optional[asyncio.Task[QuoteResult]] = None

    @property
    def current(self) -> Quote:
        """Most recently fetched quote (or a fallback); never blocks."""
        return self._current

    def fallback(self) -> Quote:
        return self._rng.choice(FALLBACK_QUOTES)

    async def fetch(self) -> QuoteResult:
        try:
            quote = await self._api.quote()
        except FocusFlowError as e:
            logger.info("Quote fetch failed, using fallback: %s", e)
            result = QuoteResult(quote=self.fallback(), error=e)
        else:
            result = QuoteResult(quote=quote)
        self._current = result.quote
        return result

    def refresh_in_background(self) -> "asyncio.Task[QuoteResult]":
        """Start a fetch without awaiting it; an in-flight fetch is reused."""
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.get_running_loop().create_task(self.fetch())
        return self._refresh_task

    async def stop(self) -> None:
        if self._refresh_task is None or self._refresh_task.done():
            return
        self._refresh_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._refresh_task
