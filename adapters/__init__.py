"""Integration adapters for Supabase and Brevo."""
from .brevo_adapter import BrevoAdapter, EmailResult, EmailSender
from .http_client import HTTPClientProtocol, HttpxJSONClient
from .supabase_adapter import SupabaseGateway

__all__ = [
    "BrevoAdapter",
    "EmailResult",
    "EmailSender",
    "HTTPClientProtocol",
    "HttpxJSONClient",
    "SupabaseGateway",
]
