# stockforum/api/deps.py
"""
Request-scoped dependencies: database session, the acting user and the
price importer collaborators. Tests override these through
app.dependency_overrides.
"""
from typing import Optional

from fastapi import Header, Request

from stockforum.api.security import bearer_token, decode_access_token
from stockforum.domain.actors import Actor, Anonymous, Registered, anonymous_from
from stockforum.infrastructure.db.session import AsyncSessionLocal, get_async_session
from stockforum.infrastructure.quote_client import TwelveDataClient
from stockforum.services.price_service import ImportPolicy

get_db = get_async_session

SESSION_HEADER = "X-Session-Id"


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def get_anonymous_identity(
    request: Request,
    x_session_id: Optional[str] = Header(default=None, alias=SESSION_HEADER),
) -> Anonymous:
    return anonymous_from(x_session_id, client_ip(request))


def get_actor(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    x_session_id: Optional[str] = Header(default=None, alias=SESSION_HEADER),
) -> Actor:
    """Registered when a valid bearer token is sent, anonymous otherwise."""
    token = bearer_token(authorization)
    if token:
        return Registered(decode_access_token(token))
    return anonymous_from(x_session_id, client_ip(request))


def get_session_factory():
    return AsyncSessionLocal


def get_quote_client_factory():
    return TwelveDataClient.from_settings


def get_import_policy() -> ImportPolicy:
    return ImportPolicy.from_settings()
