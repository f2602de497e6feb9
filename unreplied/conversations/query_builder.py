"""
SQL for the "first unreplied reply" feed, built with SQLAlchemy Core.

The statement is assembled as

    user_casts      the user's recent root casts that have a reply from someone
                    else (and, by default, none from the user), newest first,
                    one page
    ranked_replies  replies by other users joined to those roots, numbered per
                    root by ascending timestamp
    final select    rank 1 only, most recent first reply first

so the same construct runs on PostgreSQL and on the SQLite fixture store.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import and_, exists, func, or_, select
from sqlalchemy.sql import Select

from unreplied.db.schema import casts

MAX_PAGE_SIZE = 50


@dataclass(frozen=True)
class UnrepliedQuery:
    """Parameters of one resolver page."""
    user_fid: int
    since: datetime
    page_size: int
    before: Optional[Tuple[datetime, str]] = None
    exclude_answered: bool = True

    @property
    def limit(self) -> int:
        return max(1, min(self.page_size, MAX_PAGE_SIZE))


def user_root_casts(params: UnrepliedQuery) -> Select:
    """The page of candidate root casts the user posted inside the window."""
    candidate = casts.alias("candidate_reply")
    conditions = [
        casts.c.fid == params.user_fid,
        casts.c.parent_cast_hash.is_(None),
        casts.c.deleted_at.is_(None),
        casts.c.timestamp >= params.since,
        exists().where(
            candidate.c.parent_cast_hash == casts.c.hash,
            candidate.c.fid != params.user_fid,
            candidate.c.deleted_at.is_(None),
            candidate.c.timestamp.is_not(None),
        ),
    ]
    if params.exclude_answered:
        own = casts.alias("own_reply")
        conditions.append(
            ~exists().where(
                own.c.parent_cast_hash == casts.c.hash,
                own.c.fid == params.user_fid,
                own.c.deleted_at.is_(None),
            )
        )
    if params.before is not None:
        ts, cast_hash = params.before
        conditions.append(
            or_(
                casts.c.timestamp < ts,
                and_(casts.c.timestamp == ts, casts.c.hash < cast_hash),
            )
        )

    return (
        select(casts.c.fid, casts.c.hash, casts.c.timestamp, casts.c.text)
        .where(*conditions)
        .order_by(casts.c.timestamp.desc(), casts.c.hash.desc())
        .limit(params.limit)
    )


def window_bounds_query(params: UnrepliedQuery) -> Select:
    """Oldest root cast of the page and the page's size, for the continuation cursor."""
    user_casts = user_root_casts(params).cte("user_casts")
    return (
        select(
            user_casts.c.hash,
            user_casts.c.timestamp,
            func.count().over().label("window_size"),
        )
        .order_by(user_casts.c.timestamp.asc(), user_casts.c.hash.asc())
        .limit(1)
    )


def unreplied_conversations_query(params: UnrepliedQuery) -> Select:
    """First reply by someone else to each root cast of the page."""
    user_casts = user_root_casts(params).cte("user_casts")
    reply = casts.alias("reply")

    conditions = [
        reply.c.fid != params.user_fid,
        reply.c.deleted_at.is_(None),
        reply.c.timestamp.is_not(None),
    ]

    ranked = (
        select(
            user_casts.c.hash.label("root_hash"),
            user_casts.c.fid.label("root_fid"),
            user_casts.c.timestamp.label("root_timestamp"),
            user_casts.c.text.label("root_text"),
            reply.c.fid.label("reply_fid"),
            reply.c.hash.label("reply_hash"),
            reply.c.timestamp.label("reply_timestamp"),
            reply.c.text.label("reply_text"),
            reply.c.parent_cast_hash.label("reply_parent_hash"),
            func.row_number().over(
                partition_by=user_casts.c.hash,
                order_by=(reply.c.timestamp.asc(), reply.c.hash.asc()),
            ).label("reply_rank"),
            func.count().over(partition_by=user_casts.c.hash).label("reply_count"),
        )
        .select_from(user_casts.join(reply, reply.c.parent_cast_hash == user_casts.c.hash))
        .where(*conditions)
        .cte("ranked_replies")
    )

    return (
        select(ranked)
        .where(ranked.c.reply_rank == 1)
        .order_by(ranked.c.reply_timestamp.desc(), ranked.c.reply_hash.desc())
    )
