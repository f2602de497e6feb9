"""
Drives the resolver page by page for an infinite-scroll feed.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from unreplied.config import CONVERSATION_FETCH_TIMEOUT
from unreplied.conversations.resolver import DEFAULT_PAGE_SIZE, ConversationResolver
from unreplied.errors import ValidationError
from unreplied.models.conversation_models import Conversation, ConversationsResponse

logger = logging.getLogger(__name__)

DAY_FILTERS = {"today": 1, "3days": 3, "7days": 7, "all": None}


class PaginationController:
    """
    Keeps the continuation cursor for one feed session.

    Only one page fetch runs at a time; a `next_page` call made while another
    is pending returns None without fetching. Once a page comes back empty,
    `has_more` stays False until `reset()`.
    """

    def __init__(
        self,
        resolver: ConversationResolver,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float = CONVERSATION_FETCH_TIMEOUT,
    ):
        self.resolver = resolver
        self.page_size = page_size
        self.timeout = timeout
        self.filters: Dict[str, Any] = {}
        self.cursor: Optional[str] = None
        self.has_more = True
        self.items: List[Conversation] = []
        self._seen = set()
        self._in_flight = False
        self._generation = 0

    @property
    def is_loading(self) -> bool:
        return self._in_flight

    async def next_page(self, user_fid: int) -> Optional[ConversationsResponse]:
        if self._in_flight:
            logger.debug(f"Page fetch for FID {user_fid} already in flight - dropping request")
            return None
        if not self.has_more:
            return ConversationsResponse()

        self._in_flight = True
        generation = self._generation
        try:
            page = await asyncio.wait_for(
                self.resolver.resolve(
                    user_fid,
                    page_size=self.page_size,
                    cursor=self.cursor,
                    window_days=self.filters.get("window_days"),
                ),
                self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Conversation page for FID {user_fid} timed out after {self.timeout}s")
            page = ConversationsResponse()
        finally:
            self._in_flight = False

        if generation != self._generation:
            logger.info("Filters changed while a page was loading - discarding stale page")
            return None

        if not page.conversations:
            self.has_more = False
            return page

        for conversation in page.conversations:
            if conversation.rootCastHash not in self._seen:
                self._seen.add(conversation.rootCastHash)
                self.items.append(conversation)

        self.cursor = page.nextCursor
        if page.nextCursor is None:
            self.has_more = False
        return page

    def reset(self) -> None:
        self._generation += 1
        self.cursor = None
        self.has_more = True
        self.items = []
        self._seen = set()

    def update_filters(self, day_filter: Optional[str] = None, **filters: Any) -> None:
        """Apply a new day-range filter or resolver window; resets when anything changes."""
        if day_filter is not None:
            if day_filter not in DAY_FILTERS:
                raise ValidationError(f"Unknown day filter: {day_filter}")
            filters["window_days"] = DAY_FILTERS[day_filter]
        new_filters = {key: value for key, value in filters.items() if value is not None}
        if new_filters != self.filters:
            self.filters = new_filters
            self.reset()
