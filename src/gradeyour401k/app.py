"""FastAPI application exposing models, grading and rebuild scheduling."""
from __future__ import annotations

import logging
import secrets
from typing import Any, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi import FastAPI, Header, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.engine import Engine

from .config import Settings
from .db import (
    create_db_engine,
    database_healthy,
    ensure_schema,
    fetch_latest_approved,
    get_or_create_schedule,
    update_schedule,
)
from .funds import label_for
from .grade import compute_grade, format_grade
from .logging_utils import configure_logging
from .models import Holding, Profile, Provider
from .providers import PROVIDER_DISPLAY, normalize_provider_key, validate_symbol
from .runner import run_rebuild, snapshot_payload, today_utc

LOGGER = logging.getLogger(__name__)

JOB_ID = "daily-model-rebuild"
GRADE_PROFILES = ("Aggressive Growth", "Growth", "Balanced", "Conservative")


class HoldingIn(BaseModel):
    symbol: str
    weight: float = Field(ge=0, le=100)


class GradeRequest(BaseModel):
    profile: str
    provider: Optional[str] = None
    holdings: List[HoldingIn] = Field(default_factory=list)


class ScheduleRequest(BaseModel):
    time: str
    timezone: str = "UTC"


def _format_schedule(schedule: dict[str, Any]) -> str:
    return f"{int(schedule['hour']):02d}:{int(schedule['minute']):02d}"


def _parse_time(value: str) -> Tuple[int, int]:
    value = value.strip()
    if not value or ":" not in value:
        raise ValueError("Time must be in HH:MM format")
    hour_str, minute_str = value.split(":", 1)
    try:
        hour = int(hour_str)
        minute = int(minute_str)
    except ValueError as exc:
        raise ValueError("Time must be in HH:MM format") from exc
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError("Hours must be 0-23 and minutes 0-59")
    return hour, minute


def _parse_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {value}") from exc
    return value


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    """Build the application; run with ``uvicorn gradeyour401k.app:create_app --factory``."""

    configure_logging()
    settings = settings or Settings.load()
    engine = engine or create_db_engine(settings.database_url)
    scheduler = AsyncIOScheduler()

    def rebuild_job() -> None:
        """Wrapper for running the rebuild within the scheduler."""

        LOGGER.info("Running scheduled model rebuild")
        try:
            run_rebuild(settings, engine=engine)
        except Exception:  # pragma: no cover - scheduler must keep running
            LOGGER.exception("Scheduled model rebuild failed")
        else:
            LOGGER.info("Scheduled model rebuild completed successfully")

    def configure_job(schedule: dict[str, Any]) -> None:
        """Ensure the APScheduler job reflects the configured schedule."""

        trigger = CronTrigger(
            hour=schedule["hour"],
            minute=schedule["minute"],
            timezone=ZoneInfo(schedule["timezone"]),
        )
        if scheduler.get_job(JOB_ID):
            scheduler.reschedule_job(JOB_ID, trigger=trigger)
            verb = "Rescheduled"
        else:
            scheduler.add_job(rebuild_job, trigger=trigger, id=JOB_ID, replace_existing=True)
            verb = "Scheduled"
        LOGGER.info(
            "%s daily model rebuild for %s %s", verb, _format_schedule(schedule), schedule["timezone"]
        )

    def require_cron_secret(authorization: Optional[str]) -> None:
        if not settings.cron_secret:
            return
        expected = f"Bearer {settings.cron_secret}"
        if not authorization or not secrets.compare_digest(authorization, expected):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    app = FastAPI(title="GradeYour401k Models")
    app.state.settings = settings
    app.state.engine = engine
    app.state.scheduler = scheduler

    @app.on_event("startup")
    async def startup_event() -> None:
        LOGGER.info("Starting model service")
        ensure_schema(engine)
        if not settings.scheduler_enabled:
            LOGGER.info("Scheduler disabled by configuration")
            return
        configure_job(get_or_create_schedule(engine))
        if not scheduler.running:
            scheduler.start()
            LOGGER.info("Scheduler started")

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        if scheduler.running:
            scheduler.shutdown()
            LOGGER.info("Scheduler shut down")

    @app.get("/api/health")
    def health() -> dict[str, Any]:
        return {"ok": True, "database": database_healthy(engine)}

    @app.get("/api/models/latest")
    def latest_model(provider: str = Query(""), profile: str = Query("")) -> dict[str, Any]:
        try:
            provider_value = Provider(provider)
            profile_value = Profile(profile)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid provider or profile") from None

        snapshot = fetch_latest_approved(engine, provider_value, profile_value)
        if snapshot is None:
            raise HTTPException(status_code=404, detail="No approved model found")
        return {"ok": True, **snapshot_payload(snapshot)}

    @app.post("/api/grade")
    def grade(request: GradeRequest) -> dict[str, Any]:
        if request.profile not in GRADE_PROFILES:
            raise HTTPException(status_code=400, detail=f"Unknown profile: {request.profile}")
        provider_key = normalize_provider_key(request.provider or "")
        holdings = [Holding(h.symbol, h.weight) for h in request.holdings]
        value = compute_grade(request.profile, holdings)
        return {
            "ok": True,
            "grade": value,
            "grade_label": format_grade(value),
            "provider": provider_key,
            "provider_name": PROVIDER_DISPLAY[provider_key],
            "holdings": [
                {
                    "symbol": h.symbol.upper().strip(),
                    "weight": h.weight,
                    "label": label_for(h.symbol),
                    "status": validate_symbol(provider_key, h.symbol),
                }
                for h in holdings
            ],
        }

    @app.post("/api/rebuild-models")
    def rebuild_models(authorization: Optional[str] = Header(None)) -> dict[str, Any]:
        require_cron_secret(authorization)
        asof = today_utc()
        snapshots = run_rebuild(settings, asof, engine=engine)
        return {"ok": True, "asof": asof.isoformat(), "built": len(snapshots)}

    @app.get("/api/schedule")
    def show_schedule() -> dict[str, Any]:
        schedule = get_or_create_schedule(engine)
        return {"time": _format_schedule(schedule), "timezone": schedule["timezone"]}

    @app.post("/api/schedule")
    def change_schedule(request: ScheduleRequest) -> dict[str, Any]:
        try:
            hour, minute = _parse_time(request.time)
            timezone = _parse_timezone(request.timezone)
        except ValueError as exc:
            LOGGER.warning("Invalid schedule submitted: %s", exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        schedule = update_schedule(engine, hour, minute, timezone)
        if scheduler.running:
            configure_job(schedule)
        LOGGER.info("Updated schedule to %s %s", _format_schedule(schedule), timezone)
        return {"time": _format_schedule(schedule), "timezone": timezone, "updated": True}

    return app


__all__ = ["create_app"]
