"""Valve Source Engine server queries (A2S_INFO and A2S_PLAYER)."""

__version__ = "1.0.0"

from .errors import ChallengeError, InvalidAddress, InvalidSettings, MalformedResponse, QueryError, TransportError
from .models import PlayerInfo, ServerInfo
from .query import (
    A2S_INFO,
    A2S_PLAYERS,
    QueryResult,
    QueryStatus,
    SourceQuery,
    info,
    players,
    query_info,
    query_players,
    request,
    resolve_address,
)

__all__ = [
    "A2S_INFO",
    "A2S_PLAYERS",
    "ChallengeError",
    "InvalidAddress",
    "InvalidSettings",
    "MalformedResponse",
    "PlayerInfo",
    "QueryError",
    "QueryResult",
    "QueryStatus",
    "ServerInfo",
    "SourceQuery",
    "TransportError",
    "info",
    "players",
    "query_info",
    "query_players",
    "request",
    "resolve_address",
]
