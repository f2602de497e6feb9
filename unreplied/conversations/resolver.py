"""
Resolves a user's unreplied conversations from the cast store.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from unreplied.config import (
    CONVERSATION_FETCH_TIMEOUT,
    CONVERSATION_WINDOW_DAYS,
    EXCLUDE_ANSWERED_THREADS,
)
from unreplied.conversations.query_builder import (
    UnrepliedQuery,
    unreplied_conversations_query,
    window_bounds_query,
)
from unreplied.db.postgres import SimpleSQL
from unreplied.errors import QueryExecutionError
from unreplied.models.conversation_models import Cast, Conversation, ConversationsResponse
from unreplied.utils.helpers import decode_cursor, encode_cursor, utcnow, validate_fid

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25


class ConversationResolver:
    """
    Finds root casts by the user whose earliest reply from someone else has not
    been answered.

    Each call is a pure read. Query failures (database unavailable, SQL error,
    timeout) are logged and reported as an empty page; an empty feed is an
    acceptable degraded state. Malformed input raises before any I/O.
    """

    def __init__(
        self,
        sql: Optional[SimpleSQL],
        window_days: int = CONVERSATION_WINDOW_DAYS,
        timeout: float = CONVERSATION_FETCH_TIMEOUT,
        exclude_answered: bool = EXCLUDE_ANSWERED_THREADS,
        count_replies: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.sql = sql
        self.window_days = window_days
        self.timeout = timeout
        self.exclude_answered = exclude_answered
        self.count_replies = count_replies
        self._clock = clock

    async def resolve(
        self,
        user_fid: int,
        page_size: int = DEFAULT_PAGE_SIZE,
        cursor: Optional[str] = None,
        window_days: Optional[int] = None,
    ) -> ConversationsResponse:
        validate_fid(user_fid)
        before = decode_cursor(cursor) if cursor else None
        days = window_days or self.window_days

        params = UnrepliedQuery(
            user_fid=user_fid,
            since=self._clock() - timedelta(days=days),
            page_size=page_size,
            before=before,
            exclude_answered=self.exclude_answered,
        )

        if self.sql is None:
            logger.error("PostgreSQL not initialized - returning empty conversation list")
            return ConversationsResponse()

        try:
            bounds, rows = await asyncio.wait_for(
                asyncio.to_thread(
                    self.sql.execute_queries,
                    [window_bounds_query(params), unreplied_conversations_query(params)],
                ),
                self.timeout,
            )
        except QueryExecutionError as e:
            logger.error(f"Unreplied conversation query failed for FID {user_fid}: {e}")
            return ConversationsResponse()
        except asyncio.TimeoutError:
            logger.error(f"Unreplied conversation query for FID {user_fid} timed out after {self.timeout}s")
            return ConversationsResponse()

        conversations = [self._to_conversation(row) for row in rows]
        next_cursor = None
        if bounds and bounds[0]["window_size"] >= params.limit:
            next_cursor = encode_cursor(bounds[0]["timestamp"], bounds[0]["hash"])

        logger.info(f"Resolved {len(conversations)} unreplied conversations for FID {user_fid}")
        return ConversationsResponse(
            conversations=conversations,
            nextCursor=next_cursor,
            totalCount=len(conversations),
        )

    def _to_conversation(self, row: Dict[str, Any]) -> Conversation:
        root = Cast(
            fid=row["root_fid"],
            hash=row["root_hash"],
            timestamp=row["root_timestamp"],
            text=row["root_text"] or "",
            parentCastHash=None,
        )
        reply = Cast(
            fid=row["reply_fid"],
            hash=row["reply_hash"],
            timestamp=row["reply_timestamp"],
            text=row["reply_text"] or "",
            parentCastHash=row["reply_parent_hash"],
        )
        return Conversation(
            rootCastHash=root.hash,
            rootCast=root,
            firstReply=reply,
            replyCount=row["reply_count"] if self.count_replies else 1,
            firstReplyAuthorFid=reply.fid,
        )

