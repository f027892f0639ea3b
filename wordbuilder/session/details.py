"""
Word Details - Best-effort lookup of pronunciation, meaning and image.

Details are supplementary. A lookup failure is logged and replaced by the
"unavailable" placeholder; it never reaches the user as an error.
"""

from __future__ import annotations
import logging

from ..api.client import DictionaryClient
from ..api.schemas import BuilderState, WordDetails

logger = logging.getLogger(__name__)

MIN_DETAIL_LENGTH = 2


def should_fetch_details(state: BuilderState | None) -> bool:
    """Details exist only for valid words longer than one letter."""
    if state is None:
        return False
    return state.is_valid_word and len(state.answer) >= MIN_DETAIL_LENGTH


class WordDetailsFetcher:
    """Fetches details for confirmed words, swallowing every failure."""

    def __init__(self, client: DictionaryClient):
        self.client = client

    def should_fetch(self, state: BuilderState | None) -> bool:
        return should_fetch_details(state)

    async def fetch(self, word: str) -> WordDetails:
        try:
            return await self.client.get_complete_details(word)
        except Exception as e:
            logger.warning("Word details unavailable for %r: %s", word, e)
            return WordDetails.unavailable()

    async def aclose(self) -> None:
        await self.client.aclose()
