"""Source Engine A2S queries over UDP.

Every query is one challenge/response round-trip on its own socket:

    request template -> challenge -> patched request -> response

``info()`` and ``players()`` return ``None`` whenever anything goes wrong,
so "server offline", "server sent garbage" and "bad address" all look the
same to the caller. Use ``query_info()`` / ``query_players()`` to get a
:class:`QueryResult` that says which of those it was.

No timeout is applied unless one is passed in or configured (see
``sourcequery.settings``); without one a silent server blocks the call
forever.
"""

import enum
import logging
import socket
from dataclasses import dataclass
from typing import Any, Optional

from .codec import decode_info, decode_players
from .errors import ChallengeError, InvalidAddress, InvalidSettings, MalformedResponse, QueryError, TransportError
from .settings import Settings

logger = logging.getLogger(__name__)

# the last 4 bytes of each request are replaced by the challenge token
A2S_INFO = b'\xFF\xFF\xFF\xFFTSource Engine Query\x00\xFF\xFF\xFF\xFF'
A2S_PLAYERS = b'\xFF\xFF\xFF\xFF\x55\xFF\xFF\xFF\xFF'

S2C_CHALLENGE = b'\xFF\xFF\xFF\xFF\x41'

CHALLENGE_SIZE = 9
TOKEN_SIZE = 4
BUFFER_SIZE = 4096

DEFAULT_PORT = 27015

# use whatever Settings.get() says
DEFAULT = object()


class QueryStatus(enum.Enum):
    OK = 'ok'
    TRANSPORT_FAILURE = 'transport failure'
    MALFORMED_RESPONSE = 'malformed response'
    INVALID_ADDRESS = 'invalid address'
    INVALID_SETTINGS = 'invalid settings'


# most specific first
_STATUSES = (
    (InvalidAddress, QueryStatus.INVALID_ADDRESS),
    (InvalidSettings, QueryStatus.INVALID_SETTINGS),
    (MalformedResponse, QueryStatus.MALFORMED_RESPONSE),
    (TransportError, QueryStatus.TRANSPORT_FAILURE),
)


@dataclass(frozen=True)
class QueryResult:
    status: QueryStatus
    value: Any = None
    error: Optional[QueryError] = None

    @property
    def ok(self):
        return self.status is QueryStatus.OK

    def unwrap(self):
        """The decoded value, or ``None`` if the query failed."""
        return self.value if self.ok else None

    @classmethod
    def failure(cls, error):
        for error_type, status in _STATUSES:
            if isinstance(error, error_type):
                return cls(status, error=error)
        return cls(QueryStatus.TRANSPORT_FAILURE, error=error)


def resolve_address(address, port=None):
    """Turn ``"host:port"``, ``(host, port)`` or ``host, port`` into ``(host, int)``."""
    if port is None:
        if isinstance(address, tuple):
            if len(address) != 2:
                raise InvalidAddress(f'expected (host, port), got {address!r}')
            address, port = address
        elif isinstance(address, str) and ':' in address:
            address, port = address.split(':', 1)
        else:
            raise InvalidAddress(f'no port in address {address!r}')

    if not isinstance(address, str) or not address:
        raise InvalidAddress(f'invalid host {address!r}')

    if isinstance(port, bool):
        raise InvalidAddress(f'invalid port {port!r}')
    if isinstance(port, str):
        try:
            port = int(port.strip())
        except ValueError:
            raise InvalidAddress(f'port {port!r} is not an integer') from None
    if not isinstance(port, int) or not 0 <= port <= 0xFFFF:
        raise InvalidAddress(f'port {port!r} out of range')

    return address, port


def request(address, payload, timeout=None):
    """Run the challenge handshake for ``payload`` and return the raw response.

    The full receive buffer is returned, unused trailing bytes included;
    the decoders find the end of the data themselves.
    Raises :class:`TransportError` on any socket failure and
    :class:`InvalidSettings` for a timeout that is not ``None`` or positive.
    """
    check_timeout(timeout)

    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)
            sock.connect(address)

            sock.send(payload)
            logger.debug('%s:%d <- %d byte request', *address, len(payload))

            challenge = bytearray(CHALLENGE_SIZE)
            size = sock.recv_into(challenge)
            if size < CHALLENGE_SIZE or not challenge.startswith(S2C_CHALLENGE):
                raise ChallengeError(f'unexpected challenge {bytes(challenge[:size]).hex()}')
            logger.debug('%s:%d -> challenge %s', *address, challenge[-TOKEN_SIZE:].hex())

            sock.send(payload[:-TOKEN_SIZE] + bytes(challenge[-TOKEN_SIZE:]))

            response = bytearray(BUFFER_SIZE)
            size = sock.recv_into(response)
            logger.debug('%s:%d -> %d byte response', *address, size)

            return bytes(response)
    except OSError as e:
        raise TransportError(f'{address[0]}:{address[1]}: {e}') from e


def check_timeout(timeout):
    # 0 would turn the socket non-blocking, so only None or a positive deadline
    if timeout is None:
        return
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or not timeout > 0:
        raise InvalidSettings(f'timeout must be None or a positive number, got {timeout!r}')


def check_max_string(max_string):
    if isinstance(max_string, bool) or not isinstance(max_string, int) or max_string < 1:
        raise InvalidSettings(f'max_string must be a positive integer, got {max_string!r}')


def _settings(timeout, max_string):
    if timeout is DEFAULT or max_string is None:
        try:
            settings = Settings.get()
        except (ValueError, TypeError, OSError) as e:
            raise InvalidSettings(f'unusable settings: {e}') from e
        if timeout is DEFAULT:
            timeout = settings['timeout']
        if max_string is None:
            max_string = settings['max_string']

    check_timeout(timeout)
    check_max_string(max_string)
    return timeout, max_string


def _query(payload, decoder, address, port, timeout, max_string):
    try:
        timeout, max_string = _settings(timeout, max_string)
        target = resolve_address(address, port)
        data = request(target, payload, timeout)
        return QueryResult(QueryStatus.OK, decoder(data, max_string))
    except QueryError as e:
        result = QueryResult.failure(e)
        logger.warning('query %r failed (%s): %s', address, result.status.value, e)
        return result


def query_info(address, port=None, timeout=DEFAULT, max_string=None):
    """A2S_INFO as a :class:`QueryResult` holding a :class:`ServerInfo`."""
    return _query(A2S_INFO, decode_info, address, port, timeout, max_string)


def query_players(address, port=None, timeout=DEFAULT, max_string=None):
    """A2S_PLAYER as a :class:`QueryResult`.

    An empty server is a success whose value is ``None``.
    """
    return _query(A2S_PLAYERS, decode_players, address, port, timeout, max_string)


def info(address, port=None, timeout=DEFAULT, max_string=None):
    return query_info(address, port, timeout, max_string).unwrap()


def players(address, port=None, timeout=DEFAULT, max_string=None):
    return query_players(address, port, timeout, max_string).unwrap()


class SourceQuery(object):
    def __init__(self, address, port=None, timeout=DEFAULT):
        # a bare host gets the default query port, "host:port" keeps its own
        if port is None and isinstance(address, str) and ':' not in address:
            port = DEFAULT_PORT
        self.address, self.port, self.timeout = address, port, timeout

    def queryInfo(self):
        return query_info(self.address, self.port, self.timeout)

    def queryPlayers(self):
        return query_players(self.address, self.port, self.timeout)

    def getInfo(self):
        return self.queryInfo().unwrap()

    def getPlayers(self):
        return self.queryPlayers().unwrap()
