"""
Read-only Farcaster tables as SQLAlchemy Core metadata.
"""
from sqlalchemy import JSON, BigInteger, Column, DateTime, Index, MetaData, Table, Text
from sqlalchemy.dialects.postgresql import JSONB

metadata = MetaData()

# JSONB on PostgreSQL, plain JSON elsewhere (the SQLite fixture store)
JsonType = JSON().with_variant(JSONB(), "postgresql")

casts = Table(
    "casts",
    metadata,
    Column("fid", BigInteger, nullable=False),
    Column("hash", Text, nullable=False),
    Column("timestamp", DateTime),
    Column("embeds", JsonType),
    Column("parent_cast_url", Text),
    Column("parent_cast_fid", BigInteger),
    Column("parent_cast_hash", Text),
    Column("text", Text),
    Column("mentions", JsonType),
    Column("mentions_positions", JsonType),
    Column("deleted_at", DateTime),
    Index("casts_hash_idx", "hash"),
    Index("casts_fid_idx", "fid"),
    Index("casts_parent_hash_idx", "parent_cast_hash"),
    Index("casts_timestamp_idx", "timestamp"),
)

profiles = Table(
    "profiles",
    metadata,
    Column("fid", BigInteger, nullable=False),
    Column("data", JsonType),
    Column("custody_address", Text),
    Column("last_updated_at", DateTime),
    Index("profiles_fid_idx", "fid"),
)

links = Table(
    "links",
    metadata,
    Column("fid", BigInteger, nullable=False),
    Column("timestamp", DateTime),
    Column("target_fid", BigInteger, nullable=False),
    Column("type", Text, nullable=False),
    Column("deleted_at", DateTime),
    Index("links_fid_idx", "fid"),
    Index("links_target_fid_idx", "target_fid"),
)

reactions = Table(
    "reactions",
    metadata,
    Column("fid", BigInteger, nullable=False),
    Column("timestamp", DateTime),
    Column("target_cast_fid", BigInteger),
    Column("target_cast_hash", Text, nullable=False),
    Column("type", Text, nullable=False),
    Column("deleted_at", DateTime),
    Index("reactions_fid_idx", "fid"),
    Index("reactions_target_cast_hash_idx", "target_cast_hash"),
)

verifications = Table(
    "verifications",
    metadata,
    Column("fid", BigInteger, nullable=False),
    Column("address", Text, nullable=False),
    Column("timestamp", DateTime),
    Column("deleted_at", DateTime),
    Index("verifications_fid_idx", "fid"),
    Index("verifications_address_idx", "address"),
)
