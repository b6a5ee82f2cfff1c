"""SQLAlchemy Core tables of the persistent caches."""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Index, MetaData, String, Table, UniqueConstraint

metadata = MetaData()

tier_response_table = Table(
    "tier_responses",
    metadata,
    Column("genus", String, primary_key=True),
    Column("species", String, primary_key=True),
    Column("field_id", String, primary_key=True),
    Column("tier", String, primary_key=True),
    Column("prompt_hash", String(64), primary_key=True),
    Column("answer", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

lookup_cache_table = Table(
    "lookup_cache",
    metadata,
    Column("namespace", String, nullable=False),
    Column("genus", String, nullable=False),
    Column("species", String, nullable=False),
    Column("value", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("namespace", "genus", "species"),
    Index("ix_lookup_cache_entity", "genus", "species"),
)
