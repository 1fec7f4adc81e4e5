"""Command line entry point for the daily model rebuild."""
from __future__ import annotations

import argparse
import json
import logging
from datetime import date, datetime, timezone
from typing import Iterable, List, Sequence

import requests
from sqlalchemy.engine import Engine

from .config import Settings
from .db import (
    create_db_engine,
    ensure_schema,
    list_active_tickers,
    save_snapshot,
    upsert_allocation_targets,
    upsert_scores,
    upsert_symbols,
)
from .logging_utils import configure_logging
from .metrics import compute_metrics
from .modeling import build_snapshot
from .models import DEFAULT_TARGETS, Profile, Provider, Snapshot, SymbolMetrics
from .sources import AlphaVantageClient, DatabaseSource, MarketDataError, seed_universe
from .sources.utils import parse_date

LOGGER = logging.getLogger(__name__)


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def seed_reference_data(engine: Engine) -> None:
    """Load the bundled provider universe and default targets."""

    upsert_symbols(engine, seed_universe())
    for profile, targets in DEFAULT_TARGETS.items():
        upsert_allocation_targets(engine, profile, targets)


def refresh_scores(engine: Engine, client: AlphaVantageClient, asof: date) -> List[SymbolMetrics]:
    """Fetch closes for every active ticker and store metrics for ``asof``.

    A ticker the vendor cannot price still gets an empty row so it ranks as
    least preferred.
    """

    rows: List[SymbolMetrics] = []
    for ticker in list_active_tickers(engine):
        try:
            bars = client.fetch_daily_closes(ticker)
        except (requests.RequestException, MarketDataError) as exc:
            LOGGER.warning("Failed to fetch prices for %s: %s", ticker, exc)
            bars = []
        rows.append(compute_metrics(ticker, bars, asof))
    upsert_scores(engine, rows)
    return rows


def run_rebuild(
    settings: Settings,
    asof: date | None = None,
    providers: Sequence[Provider] = tuple(Provider),
    profiles: Sequence[Profile] = tuple(Profile),
    *,
    engine: Engine | None = None,
    persist: bool = True,
) -> List[Snapshot]:
    """Build and store one snapshot per provider/profile pair.

    Storage or data-access errors propagate; nothing is retried here.
    """

    asof = asof or today_utc()
    engine = engine or create_db_engine(settings.database_url)
    ensure_schema(engine)
    source = DatabaseSource(engine)

    built: List[Snapshot] = []
    for provider in providers:
        for profile in profiles:
            snapshot = build_snapshot(asof, provider, profile, source, settings.policy)
            if persist:
                save_snapshot(engine, snapshot)
            built.append(snapshot)
    LOGGER.info("Rebuilt %d models as of %s", len(built), asof.isoformat())
    return built


def snapshot_payload(snapshot: Snapshot) -> dict[str, object]:
    return {
        "snapshot_id": snapshot.snapshot_id,
        "asof": snapshot.asof_date.isoformat(),
        "provider": snapshot.provider.value,
        "profile": snapshot.profile.value,
        "notes": snapshot.notes,
        "lines": [
            {"rank": line.rank, "symbol": line.symbol, "weight": line.weight, "role": line.role.value}
            for line in snapshot.lines
        ],
    }


def parse_args(args: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--asof", type=parse_date, default=None, help="As-of date (YYYY-MM-DD), default today UTC")
    parser.add_argument(
        "--provider",
        action="append",
        choices=[p.value for p in Provider],
        help="Limit the rebuild to a provider (repeatable)",
    )
    parser.add_argument(
        "--profile",
        action="append",
        choices=[p.value for p in Profile],
        help="Limit the rebuild to a profile (repeatable)",
    )
    parser.add_argument("--seed", action="store_true", help="Load bundled symbols and default targets first")
    parser.add_argument(
        "--refresh-scores",
        action="store_true",
        help="Fetch prices and recompute scores before building",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print snapshots as JSON instead of saving them")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging output",
    )
    return parser.parse_args(args=args)


def main(argv: Iterable[str] | None = None) -> None:
    options = parse_args(argv)
    configure_logging("DEBUG" if options.verbose else None)
    settings = Settings.load()
    asof = options.asof or today_utc()

    engine = create_db_engine(settings.database_url)
    ensure_schema(engine)
    if options.seed:
        seed_reference_data(engine)
    if options.refresh_scores:
        client = AlphaVantageClient(settings.alpha_vantage_api_key or "")
        refresh_scores(engine, client, asof)

    providers = [Provider(p) for p in options.provider] if options.provider else list(Provider)
    profiles = [Profile(p) for p in options.profile] if options.profile else list(Profile)
    snapshots = run_rebuild(
        settings, asof, providers, profiles, engine=engine, persist=not options.dry_run
    )
    if options.dry_run:
        print(json.dumps([snapshot_payload(s) for s in snapshots], indent=2))


if __name__ == "__main__":  # pragma: no cover
    main()
