"""Database integration utilities."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterable, Iterator, Optional, Sequence

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    insert,
    select,
    text,
)
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .models import (
    AllocationTargets,
    AssetClass,
    Line,
    Profile,
    Provider,
    Role,
    Snapshot,
    Symbol,
    SymbolMetrics,
)


metadata = MetaData()

LOGGER = logging.getLogger(__name__)

symbols = Table(
    "symbols",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("symbol", String(32), nullable=False),
    Column("provider", String(32), nullable=False),
    Column("asset_class", String(16), nullable=False),
    Column("style", String(255), nullable=True),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("expense_ratio", Float, nullable=True),
    UniqueConstraint("provider", "symbol", name="uq_symbols_provider_symbol"),
)

symbol_scores = Table(
    "symbol_scores",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("asof_date", Date, nullable=False),
    Column("symbol", String(32), nullable=False),
    Column("score", Float, nullable=True),
    Column("ret_1d", Float, nullable=True),
    Column("ret_21d", Float, nullable=True),
    Column("ret_63d", Float, nullable=True),
    Column("vol_21d", Float, nullable=True),
    Column("trend_margin", Float, nullable=True),
    Column(
        "updated_at", DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    ),
    UniqueConstraint("asof_date", "symbol", name="uq_symbol_scores_asof_symbol"),
)

allocation_targets = Table(
    "allocation_targets",
    metadata,
    Column("profile", String(32), primary_key=True),
    Column("equity", Float, nullable=False),
    Column("bond", Float, nullable=False),
    Column("cash", Float, nullable=False, default=0.0),
)

model_snapshots = Table(
    "model_snapshots",
    metadata,
    Column("snapshot_id", String(64), primary_key=True),
    Column("asof_date", Date, nullable=False),
    Column("provider", String(32), nullable=False),
    Column("profile", String(32), nullable=False),
    Column("is_approved", Boolean, nullable=False, default=False),
    Column("notes", Text, nullable=True),
    Column("created_at", DateTime, nullable=False, default=datetime.utcnow),
)

model_snapshot_lines = Table(
    "model_snapshot_lines",
    metadata,
    Column(
        "snapshot_id",
        ForeignKey("model_snapshots.snapshot_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("rank", Integer, primary_key=True),
    Column("symbol", String(32), nullable=False),
    Column("weight", Float, nullable=False),
    Column("role", String(16), nullable=True),
)

rebuild_schedule = Table(
    "rebuild_schedule",
    metadata,
    Column("id", Integer, primary_key=True, default=1),
    Column("hour", Integer, nullable=False),
    Column("minute", Integer, nullable=False),
    Column("timezone", String(64), nullable=False, default="UTC"),
    Column("created_at", DateTime, nullable=False, default=datetime.utcnow),
    Column(
        "updated_at", DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    ),
)


DEFAULT_SCHEDULE = {"hour": 6, "minute": 0, "timezone": "UTC"}


def create_db_engine(database_url: str) -> Engine:
    """Create a SQLAlchemy engine."""

    LOGGER.debug("Creating database engine")
    return create_engine(database_url, future=True, pool_pre_ping=True)


@contextmanager
def session(engine: Engine) -> Iterator[Connection]:
    """Provide a transactional scope around a series of operations."""

    with engine.begin() as conn:
        yield conn


def ensure_schema(engine: Engine) -> None:
    """Create tables if they do not exist."""

    LOGGER.debug("Ensuring database schema is present")
    metadata.create_all(engine)


def database_healthy(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        LOGGER.exception("Database health check failed")
        return False
    return True


def _upsert(conn: Connection, table: Table):
    """Dialect specific INSERT that supports ``on_conflict_do_*``."""

    if conn.dialect.name == "sqlite":
        return sqlite_insert(table)
    return pg_insert(table)


def upsert_symbols(engine: Engine, rows: Iterable[Symbol]) -> int:
    """Insert or refresh reference data for provider symbols."""

    count = 0
    with session(engine) as conn:
        for row in rows:
            stmt = _upsert(conn, symbols).values(
                symbol=row.symbol,
                provider=row.provider.value,
                asset_class=row.asset_class.value,
                style=row.style,
                is_active=row.is_active,
                expense_ratio=row.expense_ratio,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[symbols.c.provider, symbols.c.symbol],
                set_={
                    "asset_class": stmt.excluded.asset_class,
                    "style": stmt.excluded.style,
                    "is_active": stmt.excluded.is_active,
                    "expense_ratio": stmt.excluded.expense_ratio,
                },
            )
            conn.execute(stmt)
            count += 1
    LOGGER.info("Upserted %d symbol rows", count)
    return count


def load_active_symbols(engine: Engine, provider: Provider) -> list[Symbol]:
    """Return the provider's active symbols in insertion order."""

    stmt = (
        select(symbols)
        .where(symbols.c.provider == provider.value, symbols.c.is_active.is_(True))
        .order_by(symbols.c.id)
    )
    with engine.connect() as conn:
        rows = conn.execute(stmt).all()
    return [
        Symbol(
            symbol=row.symbol,
            provider=Provider(row.provider),
            asset_class=AssetClass(row.asset_class),
            style=row.style,
            is_active=bool(row.is_active),
            expense_ratio=row.expense_ratio,
        )
        for row in rows
    ]


def list_active_tickers(engine: Engine) -> list[str]:
    stmt = (
        select(symbols.c.symbol)
        .where(symbols.c.is_active.is_(True))
        .distinct()
        .order_by(symbols.c.symbol)
    )
    with engine.connect() as conn:
        return list(conn.execute(stmt).scalars())


def upsert_scores(engine: Engine, rows: Iterable[SymbolMetrics]) -> int:
    """Store metrics and scores, replacing any existing row for the same date."""

    metric_columns = ("score", "ret_1d", "ret_21d", "ret_63d", "vol_21d", "trend_margin")
    count = 0
    with session(engine) as conn:
        for row in rows:
            stmt = _upsert(conn, symbol_scores).values(
                asof_date=row.asof_date,
                symbol=row.symbol,
                **{column: getattr(row, column) for column in metric_columns},
            )
            updates = {column: getattr(stmt.excluded, column) for column in metric_columns}
            updates["updated_at"] = datetime.utcnow()
            stmt = stmt.on_conflict_do_update(
                index_elements=[symbol_scores.c.asof_date, symbol_scores.c.symbol],
                set_=updates,
            )
            conn.execute(stmt)
            count += 1
    LOGGER.info("Stored %d symbol score rows", count)
    return count


def load_scores(engine: Engine, asof: date, tickers: Sequence[str]) -> dict[str, Optional[float]]:
    """Return ``{symbol: score}`` for the given tickers on ``asof``."""

    if not tickers:
        return {}
    stmt = select(symbol_scores.c.symbol, symbol_scores.c.score).where(
        symbol_scores.c.asof_date == asof,
        symbol_scores.c.symbol.in_(list(tickers)),
    )
    with engine.connect() as conn:
        return {row.symbol: row.score for row in conn.execute(stmt)}


def load_allocation_targets(engine: Engine, profile: Profile) -> Optional[AllocationTargets]:
    stmt = select(allocation_targets).where(allocation_targets.c.profile == profile.value)
    with engine.connect() as conn:
        row = conn.execute(stmt).first()
    if row is None:
        return None
    return AllocationTargets(equity=row.equity, bond=row.bond, cash=row.cash)


def upsert_allocation_targets(engine: Engine, profile: Profile, targets: AllocationTargets) -> None:
    with session(engine) as conn:
        stmt = _upsert(conn, allocation_targets).values(
            profile=profile.value,
            equity=targets.equity,
            bond=targets.bond,
            cash=targets.cash,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[allocation_targets.c.profile],
            set_={
                "equity": stmt.excluded.equity,
                "bond": stmt.excluded.bond,
                "cash": stmt.excluded.cash,
            },
        )
        conn.execute(stmt)


def save_snapshot(engine: Engine, snapshot: Snapshot) -> None:
    """Persist a snapshot header and its ranked lines in one transaction."""

    with session(engine) as conn:
        conn.execute(
            insert(model_snapshots).values(
                snapshot_id=snapshot.snapshot_id,
                asof_date=snapshot.asof_date,
                provider=snapshot.provider.value,
                profile=snapshot.profile.value,
                is_approved=snapshot.is_approved,
                notes=snapshot.notes,
            )
        )
        if snapshot.lines:
            conn.execute(
                insert(model_snapshot_lines),
                [
                    {
                        "snapshot_id": snapshot.snapshot_id,
                        "rank": line.rank if line.rank is not None else position,
                        "symbol": line.symbol,
                        "weight": line.weight,
                        "role": line.role.value,
                    }
                    for position, line in enumerate(snapshot.lines, start=1)
                ],
            )
    LOGGER.info(
        "Saved snapshot %s (%s/%s, %d lines)",
        snapshot.snapshot_id,
        snapshot.provider.value,
        snapshot.profile.value,
        len(snapshot.lines),
    )


def fetch_latest_approved(engine: Engine, provider: Provider, profile: Profile) -> Optional[Snapshot]:
    """Return the most recent approved snapshot for a provider/profile pair."""

    LOGGER.debug("Loading latest approved %s/%s model", provider.value, profile.value)
    head_stmt = (
        select(model_snapshots)
        .where(
            model_snapshots.c.provider == provider.value,
            model_snapshots.c.profile == profile.value,
            model_snapshots.c.is_approved.is_(True),
        )
        .order_by(model_snapshots.c.asof_date.desc(), model_snapshots.c.created_at.desc())
        .limit(1)
    )
    with engine.connect() as conn:
        head = conn.execute(head_stmt).first()
        if head is None:
            return None
        line_stmt = (
            select(model_snapshot_lines)
            .where(model_snapshot_lines.c.snapshot_id == head.snapshot_id)
            .order_by(model_snapshot_lines.c.rank)
        )
        rows = conn.execute(line_stmt).all()

    return Snapshot(
        snapshot_id=head.snapshot_id,
        asof_date=head.asof_date,
        provider=provider,
        profile=profile,
        notes=head.notes,
        is_approved=bool(head.is_approved),
        lines=tuple(
            Line(
                symbol=row.symbol.upper().strip(),
                weight=float(row.weight),
                role=Role(row.role) if row.role else Role.SATELLITE,
                rank=int(row.rank),
            )
            for row in rows
        ),
    )


def get_or_create_schedule(engine: Engine) -> dict[str, int | str]:
    """Fetch the current rebuild schedule, seeding defaults when missing."""

    LOGGER.debug("Fetching rebuild schedule")
    with session(engine) as conn:
        row = conn.execute(select(rebuild_schedule)).first()
        if row is not None:
            data = row._mapping
            return {
                "hour": data["hour"],
                "minute": data["minute"],
                "timezone": data["timezone"],
            }

        stmt = _upsert(conn, rebuild_schedule).values(
            id=1,
            hour=DEFAULT_SCHEDULE["hour"],
            minute=DEFAULT_SCHEDULE["minute"],
            timezone=DEFAULT_SCHEDULE["timezone"],
        )
        stmt = stmt.on_conflict_do_nothing()
        conn.execute(stmt)
        LOGGER.info(
            "Seeded default schedule %02d:%02d %s",
            DEFAULT_SCHEDULE["hour"],
            DEFAULT_SCHEDULE["minute"],
            DEFAULT_SCHEDULE["timezone"],
        )
        return dict(DEFAULT_SCHEDULE)


def update_schedule(engine: Engine, hour: int, minute: int, timezone: str = "UTC") -> dict[str, int | str]:
    """Persist a new rebuild schedule."""

    LOGGER.debug("Persisting schedule change to %02d:%02d %s", hour, minute, timezone)
    with session(engine) as conn:
        stmt = _upsert(conn, rebuild_schedule).values(
            id=1,
            hour=hour,
            minute=minute,
            timezone=timezone,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[rebuild_schedule.c.id],
            set_={
                "hour": stmt.excluded.hour,
                "minute": stmt.excluded.minute,
                "timezone": stmt.excluded.timezone,
                "updated_at": datetime.utcnow(),
            },
        )
        conn.execute(stmt)

    return {"hour": hour, "minute": minute, "timezone": timezone}


__all__ = [
    "create_db_engine",
    "ensure_schema",
    "database_healthy",
    "upsert_symbols",
    "load_active_symbols",
    "list_active_tickers",
    "upsert_scores",
    "load_scores",
    "load_allocation_targets",
    "upsert_allocation_targets",
    "save_snapshot",
    "fetch_latest_approved",
    "get_or_create_schedule",
    "update_schedule",
    "metadata",
    "symbols",
    "symbol_scores",
    "allocation_targets",
    "model_snapshots",
    "model_snapshot_lines",
    "rebuild_schedule",
    "DEFAULT_SCHEDULE",
]
