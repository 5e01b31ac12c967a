from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


def _load_env() -> None:
    # Centralized dotenv loading; safe if .env missing
    load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Core/runtime
    db_path: str
    log_level: str

    # Outbound automation webhooks (lead batches, company batches)
    lead_webhook_url: str | None
    company_webhook_url: str | None
    default_client_id: str

    # Batching / pacing
    ingest_batch_size: int
    ingest_batch_delay_ms: int
    notification_batch_size: int

    # HTTP
    http_timeout_seconds: int
    website_user_agent: str

    # Website quality policy; score must be strictly greater than this
    website_min_score: int

    # Optional wall-clock limit for a single ingestion run (None = unbounded)
    run_deadline_seconds: float | None = None

    # Backfill jobs
    backfill_limit: int = 500

    # Skip the website check entirely (local fixtures, demos)
    skip_website_check: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    deadline_raw = os.getenv("RUN_DEADLINE_SECONDS")
    return Settings(
        db_path=os.getenv("DB_PATH", "leads.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        lead_webhook_url=os.getenv("LEAD_WEBHOOK_URL") or None,
        company_webhook_url=os.getenv("COMPANY_WEBHOOK_URL") or None,
        default_client_id=os.getenv("DEFAULT_CLIENT_ID", "default"),
        ingest_batch_size=int(os.getenv("INGEST_BATCH_SIZE", "50")),
        ingest_batch_delay_ms=int(os.getenv("INGEST_BATCH_DELAY_MS", "500")),
        notification_batch_size=int(os.getenv("NOTIFICATION_BATCH_SIZE", "50")),
        http_timeout_seconds=int(os.getenv("HTTP_TIMEOUT_SECONDS", "20")),
        website_user_agent=os.getenv(
            "WEBSITE_USER_AGENT", "Mozilla/5.0 (compatible; LeadValidator/1.0)"
        ),
        website_min_score=int(os.getenv("WEBSITE_MIN_SCORE", "60")),
        run_deadline_seconds=float(deadline_raw) if deadline_raw else None,
        backfill_limit=min(int(os.getenv("BACKFILL_LIMIT", "500")), 500),
        skip_website_check=_as_bool(os.getenv("SKIP_WEBSITE_CHECK")),
    )
