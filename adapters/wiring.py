"""
Adapter wiring factory.

Single place to build configured adapters (respecting DRY_RUN, environment
keys and injected clients) for use by the API and CLI.
"""
from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any, Optional

from .brevo_adapter import BrevoAdapter, EmailSender
from .http_client import DEFAULT_TIMEOUT_SECONDS, HTTPClientProtocol, HttpxJSONClient
from .supabase_adapter import SupabaseGateway


@dataclass
class Env:
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    BREVO_API_KEY: Optional[str] = None
    EMAIL_SENDER_NAME: str = "Love&Pixels"
    EMAIL_SENDER_ADDRESS: str = ""
    APP_URL: str = "http://localhost:3000"
    HTTP_TIMEOUT_SECONDS: float = DEFAULT_TIMEOUT_SECONDS
    DRY_RUN: bool = False


def _as_bool(value: Optional[str]) -> bool:
    if value is None:
        return False
    v = value.strip().lower()
    return v in {"1", "true", "t", "yes", "y"}


def _as_float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value else default
    except ValueError:
        return default


def load_env() -> Env:
    """Load environment variables into a typed structure.

    DRY_RUN is parsed from strings like "true"/"1" (default False).
    """
    return Env(
        SUPABASE_URL=os.getenv("SUPABASE_URL"),
        SUPABASE_SERVICE_ROLE_KEY=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
        BREVO_API_KEY=os.getenv("BREVO_API_KEY"),
        EMAIL_SENDER_NAME=os.getenv("EMAIL_SENDER_NAME") or "Love&Pixels",
        EMAIL_SENDER_ADDRESS=os.getenv("EMAIL_SENDER_ADDRESS") or "",
        APP_URL=os.getenv("APP_URL") or "http://localhost:3000",
        HTTP_TIMEOUT_SECONDS=_as_float(os.getenv("HTTP_TIMEOUT_SECONDS"), DEFAULT_TIMEOUT_SECONDS),
        DRY_RUN=_as_bool(os.getenv("DRY_RUN")),
    )


def build_gateway(env: Env, client: Optional[Any] = None) -> SupabaseGateway:
    """Construct the Supabase gateway, creating a client from env when none is injected."""
    if client is None:
        if not env.SUPABASE_URL or not env.SUPABASE_SERVICE_ROLE_KEY:
            raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
        from supabase import create_client

        client = create_client(env.SUPABASE_URL, env.SUPABASE_SERVICE_ROLE_KEY)
    return SupabaseGateway(client)


def build_email(env: Env, http_client: Optional[HTTPClientProtocol] = None) -> BrevoAdapter:
    """Construct the Brevo adapter respecting DRY_RUN."""
    if http_client is None and not env.DRY_RUN:
        http_client = HttpxJSONClient(timeout=env.HTTP_TIMEOUT_SECONDS)
    return BrevoAdapter(
        env.BREVO_API_KEY,
        sender=EmailSender(name=env.EMAIL_SENDER_NAME, email=env.EMAIL_SENDER_ADDRESS),
        app_url=env.APP_URL,
        http_client=http_client,
        dry_run=env.DRY_RUN,
    )
