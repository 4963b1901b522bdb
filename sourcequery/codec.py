"""Decoders for A2S_INFO and A2S_PLAYER response payloads.

Every worker function takes the remaining buffer and returns
``(value, rest)``, so a decoder reads top to bottom in wire order.
Reading past the end of the buffer raises :class:`MalformedResponse`.
"""

import struct

from .errors import MalformedResponse
from .models import PlayerInfo, ServerInfo

MAX_STRING = 256

# extra data flags
EDF_PORT = 0x80
EDF_STEAM_ID = 0x10
EDF_SOURCE_TV = 0x40
EDF_TAGS = 0x20
EDF_GAME_ID = 0x01

MARKER_SIZE = 4


# WORKER FUNCTIONS #

def _unpack(fmt, data):
    size = struct.calcsize(fmt)
    if len(data) < size:
        raise MalformedResponse(f'need {size} bytes for {fmt!r}, {len(data)} left')
    return struct.unpack_from(fmt, data)[0], data[size:]


def getByte(data):
    return _unpack('<B', data)


def getShort(data):
    return _unpack('<H', data)


def getLong(data):
    return _unpack('<l', data)


def getLongLong(data):
    return _unpack('<Q', data)


def getFloat(data):
    return _unpack('<f', data)


def getBool(data):
    value, data = getByte(data)
    return value == 1, data


def getString(data, limit=MAX_STRING):
    # the terminator has to show up within the first `limit` bytes
    end = data.find(b'\x00', 0, limit)
    if end < 0:
        raise MalformedResponse(f'no string terminator within {limit} bytes')
    return str(data[:end], encoding='utf-8', errors='replace'), data[end + 1:]


def skipMarker(data):
    if len(data) < MARKER_SIZE:
        raise MalformedResponse('response shorter than its packet marker')
    return data[MARKER_SIZE:]


# DECODERS #

def decode_info(data, max_string=MAX_STRING):
    """Parse an A2S_INFO response buffer into a :class:`ServerInfo`."""
    data = skipMarker(bytes(data))

    header, data = getByte(data)
    protocol, data = getByte(data)
    name, data = getString(data, max_string)
    map_name, data = getString(data, max_string)
    folder, data = getString(data, max_string)
    game, data = getString(data, max_string)
    app_id, data = getShort(data)
    player_count, data = getByte(data)
    max_players, data = getByte(data)
    bot_count, data = getByte(data)
    server_type, data = getByte(data)
    environment, data = getByte(data)
    password_protected, data = getBool(data)
    vac_secured, data = getBool(data)
    version, data = getString(data, max_string)
    edf, data = getByte(data)

    extra = {}
    if edf & EDF_PORT:
        extra['port'], data = getShort(data)
    if edf & EDF_STEAM_ID:
        extra['steam_id'], data = getLongLong(data)
    if edf & EDF_SOURCE_TV:
        extra['source_tv_port'], data = getShort(data)
        extra['source_tv_name'], data = getString(data, max_string)
    if edf & EDF_TAGS:
        extra['tags'], data = getString(data, max_string)
    if edf & EDF_GAME_ID:
        extra['game_id'], data = getLongLong(data)

    return ServerInfo(
        header=header,
        protocol=protocol,
        name=name,
        map_name=map_name,
        folder=folder,
        game=game,
        app_id=app_id,
        player_count=player_count,
        max_players=max_players,
        bot_count=bot_count,
        server_type=server_type,
        environment=environment,
        password_protected=password_protected,
        vac_secured=vac_secured,
        version=version,
        edf=edf,
        **extra,
    )


def decode_players(data, max_string=MAX_STRING):
    """Parse an A2S_PLAYER response buffer.

    Returns a tuple in wire order, or ``None`` when the server reports
    no players at all.
    """
    data = skipMarker(bytes(data))

    header, data = getByte(data)
    count, data = getByte(data)

    players = []
    for _ in range(count):
        index, data = getByte(data)
        name, data = getString(data, max_string)
        score, data = getLong(data)
        duration, data = getFloat(data)
        players.append(PlayerInfo(index, name, score, duration))

    if not players:
        return None

    return tuple(players)
