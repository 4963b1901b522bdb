class QueryError(Exception):
    """Base class for every failure a server query can end with."""


class TransportError(QueryError):
    """Socket creation, send or receive failed, or the server never answered."""


class ChallengeError(TransportError):
    """The server did not answer with a well-formed challenge datagram."""


class MalformedResponse(QueryError):
    """The response buffer ended early or held an unterminated string."""


class InvalidAddress(QueryError):
    """The caller supplied an address that can't be turned into (host, port)."""


class InvalidSettings(QueryError):
    """A timeout or string bound, passed in or configured, is unusable."""
