"""
runner.config
-------------
Runtime settings read from the environment (and `.env`, via python-dotenv).

Environment
-----------
SUPABASE_URL                    edge-function host (required)
SUPABASE_KEY / SUPABASE_ANON_KEY  bearer key for the functions gateway (required)
APIFY_TOKEN                     token forwarded in request bodies
HTTP_TIMEOUT                    seconds for list / schema / token calls
RUN_TIMEOUT                     seconds for run-actor (unset = no client timeout)
HISTORY_CAPACITY                run-history size
LOG_LEVEL                       logging level for the app
"""
from __future__ import annotations

import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from runner.errors import ConfigError

BACKEND_TOKEN = "backend-handled"   # functions fall back to their own APIFY_API_TOKEN


class Settings(BaseModel):
    supabase_url:     str
    supabase_key:     str
    apify_token:      str = BACKEND_TOKEN
    http_timeout:     float = 10.0
    run_timeout:      Optional[float] = None
    history_capacity: int = Field(default=10, ge=1)
    log_level:        str = "INFO"

    @property
    def functions_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/functions/v1"


def _opt_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from `env` (defaults to os.environ after loading .env)."""
    if env is None:
        load_dotenv()
        env = os.environ

    url = env.get("SUPABASE_URL")
    key = env.get("SUPABASE_KEY") or env.get("SUPABASE_ANON_KEY")
    if not url or not key:
        raise ConfigError("SUPABASE_URL / SUPABASE_KEY missing")

    try:
        return Settings(
            supabase_url=url,
            supabase_key=key,
            apify_token=env.get("APIFY_TOKEN") or BACKEND_TOKEN,
            http_timeout=_opt_float(env.get("HTTP_TIMEOUT")) or 10.0,
            run_timeout=_opt_float(env.get("RUN_TIMEOUT")),
            history_capacity=int(env.get("HISTORY_CAPACITY") or 10),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
    except (ValidationError, ValueError) as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc
