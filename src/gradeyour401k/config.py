"""Application configuration helpers."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
import os
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import quote_plus

from .modeling.policy import DEFAULT_POLICY, ModelPolicy


ENV_PREFIX = "GY4K_"
POLICY_PREFIX = f"{ENV_PREFIX}POLICY_"
TRUTHY = {"1", "true", "yes", "on"}


def _resolve_env_file(candidate: str) -> Path | None:
    """Return the first matching environment file path if it exists."""

    path = Path(candidate)
    if path.is_absolute() and path.exists():
        return path

    search_roots = [Path.cwd(), Path(__file__).resolve().parent]
    search_roots.extend(Path(__file__).resolve().parents)

    seen: set[Path] = set()
    for root in search_roots:
        root = root.resolve()
        if root in seen:
            continue
        seen.add(root)
        potential = root / candidate
        if potential.exists():
            return potential
    return None


def _parse_env_file(path: Path) -> dict[str, str]:
    """Parse a dotenv-style file into a mapping."""

    variables: dict[str, str] = {}
    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        variables[key.strip()] = value.strip().strip('"').strip("'")
    return variables


def _load_profile_env(env: Mapping[str, str]) -> dict[str, str]:
    """Load environment variables from the selected profile file."""

    explicit_file = env.get(f"{ENV_PREFIX}ENV_FILE")
    profile = env.get(f"{ENV_PREFIX}ENV", "local")
    candidate = explicit_file or f".env.{profile}"
    path = _resolve_env_file(candidate)
    return _parse_env_file(path) if path is not None else {}


def _build_database_url(env: Mapping[str, str]) -> str | None:
    """Construct a SQLAlchemy URL from discrete environment variables."""

    host = env.get(f"{ENV_PREFIX}DB_HOST")
    if not host:
        return None

    username = env.get(f"{ENV_PREFIX}DB_USERNAME")
    if not username:
        raise RuntimeError(f"{ENV_PREFIX}DB_USERNAME must be set when using discrete database settings")
    if f"{ENV_PREFIX}DB_PASSWORD" not in env:
        raise RuntimeError(f"{ENV_PREFIX}DB_PASSWORD must be set when using discrete database settings")

    password = env.get(f"{ENV_PREFIX}DB_PASSWORD", "")
    port = env.get(f"{ENV_PREFIX}DB_PORT", "5432")
    database = env.get(f"{ENV_PREFIX}DB_NAME", "gradeyour401k")
    driver = env.get(f"{ENV_PREFIX}DB_DRIVER", "postgresql+psycopg")

    auth = f"{quote_plus(username)}:{quote_plus(password)}"
    port_part = f":{port}" if port else ""
    return f"{driver}://{auth}@{host}{port_part}/{database}"


def _policy_overrides(env: Mapping[str, str]) -> dict[str, str]:
    names = {f.name for f in fields(ModelPolicy)}
    overrides: dict[str, str] = {}
    for key, value in env.items():
        if not key.startswith(POLICY_PREFIX):
            continue
        name = key[len(POLICY_PREFIX) :].lower()
        if name not in names:
            raise RuntimeError(f"{key} does not name a model policy setting")
        overrides[name] = value
    return overrides


@dataclass(frozen=True)
class Settings:
    """Runtime configuration."""

    database_url: str
    alpha_vantage_api_key: Optional[str] = None
    cron_secret: Optional[str] = None
    scheduler_enabled: bool = True
    policy: ModelPolicy = field(default=DEFAULT_POLICY)

    @staticmethod
    def load(env: Mapping[str, str] | None = None) -> "Settings":
        """Load settings from environment variables."""

        base_env = dict(env if env is not None else os.environ)
        file_env = _load_profile_env(base_env)
        # Environment variables set in the shell take precedence over the file.
        merged_env = {**file_env, **base_env}

        database_url = merged_env.get(f"{ENV_PREFIX}DATABASE_URL") or _build_database_url(merged_env)
        if not database_url:
            raise RuntimeError(
                f"{ENV_PREFIX}DATABASE_URL must be set or provide discrete database settings via the env file"
            )

        try:
            policy = DEFAULT_POLICY.with_overrides(_policy_overrides(merged_env))
        except ValueError as exc:
            raise RuntimeError(f"Invalid model policy override: {exc}") from exc

        scheduler = merged_env.get(f"{ENV_PREFIX}SCHEDULER_ENABLED", "true").strip().lower()
        return Settings(
            database_url=database_url,
            alpha_vantage_api_key=merged_env.get(f"{ENV_PREFIX}ALPHA_VANTAGE_API_KEY") or None,
            cron_secret=merged_env.get(f"{ENV_PREFIX}CRON_SECRET") or None,
            scheduler_enabled=scheduler in TRUTHY,
            policy=policy,
        )


__all__ = ["Settings", "ENV_PREFIX"]
