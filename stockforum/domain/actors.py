# stockforum/domain/actors.py
"""
Who is acting on a request.

A registered actor is identified by user id. Anyone else is anonymous and
identified by a session token (an explicit session header, or the client
IP as a fallback), so anonymous votes are only deduplicated per session.
"""
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Registered:
    user_id: int

    @property
    def key(self) -> str:
        return str(self.user_id)

    is_anonymous = False


@dataclass(frozen=True)
class Anonymous:
    session_token: str

    @property
    def key(self) -> str:
        return self.session_token

    is_anonymous = True


Actor = Union[Registered, Anonymous]


def anonymous_from(session_id: str = None, client_ip: str = None) -> Anonymous:
    token = (session_id or "").strip() or (client_ip or "").strip() or "anonymous"
    return Anonymous(token)
