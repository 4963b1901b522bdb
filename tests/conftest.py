import socket
import struct
import threading

import pytest

MARKER = b'\xFF\xFF\xFF\xFF'
CHALLENGE = MARKER + b'\x41\x01\x02\x03\x04'

INFO_FIELDS = {
    'header': 0x49,
    'protocol': 17,
    'name': 'Test Server #1',
    'map_name': 'de_dust2',
    'folder': 'csgo',
    'game': 'Counter-Strike: Global Offensive',
    'app_id': 730,
    'player_count': 12,
    'max_players': 24,
    'bot_count': 2,
    'server_type': ord('d'),
    'environment': ord('l'),
    'password_protected': False,
    'vac_secured': True,
    'version': '1.38.7.9',
    'edf': 0,
    'port': 27015,
    'steam_id': 90071992547409920,
    'source_tv_port': 27020,
    'source_tv_name': 'SourceTV',
    'tags': 'secure,competitive,128tick',
    'game_id': 730,
}


def pack_string(value):
    return value.encode('utf-8') + b'\x00'


def build_info(**overrides):
    """Encode an A2S_INFO response; optional fields follow the ``edf`` bits."""
    fields = dict(INFO_FIELDS, **overrides)
    edf = fields['edf']

    data = MARKER + struct.pack('<BB', fields['header'], fields['protocol'])
    for key in ('name', 'map_name', 'folder', 'game'):
        data += pack_string(fields[key])
    data += struct.pack(
        '<HBBBBBBB',
        fields['app_id'],
        fields['player_count'],
        fields['max_players'],
        fields['bot_count'],
        fields['server_type'],
        fields['environment'],
        int(fields['password_protected']),
        int(fields['vac_secured']),
    )
    data += pack_string(fields['version'])
    data += struct.pack('<B', edf)

    if edf & 0x80:
        data += struct.pack('<H', fields['port'])
    if edf & 0x10:
        data += struct.pack('<Q', fields['steam_id'])
    if edf & 0x40:
        data += struct.pack('<H', fields['source_tv_port']) + pack_string(fields['source_tv_name'])
    if edf & 0x20:
        data += pack_string(fields['tags'])
    if edf & 0x01:
        data += struct.pack('<Q', fields['game_id'])
    return data


def build_players(players, count=None, header=0x44):
    data = MARKER + struct.pack('<BB', header, len(players) if count is None else count)
    for index, name, score, duration in players:
        data += struct.pack('<B', index) + pack_string(name) + struct.pack('<lf', score, duration)
    return data


class FakeServer:
    """Answers one challenge handshake on 127.0.0.1 from a background thread.

    ``challenge=None`` never answers the first request, ``response=None``
    never answers the second one.
    """

    def __init__(self, challenge=CHALLENGE, response=b''):
        self.challenge, self.response = challenge, response
        self.received = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(('127.0.0.1', 0))
        self.sock.settimeout(2)
        self.thread = threading.Thread(target=self.serve, daemon=True)

    @property
    def address(self):
        return self.sock.getsockname()

    def serve(self):
        try:
            data, peer = self.sock.recvfrom(4096)
            self.received.append(data)
            if self.challenge is None:
                return
            self.sock.sendto(self.challenge, peer)

            data, peer = self.sock.recvfrom(4096)
            self.received.append(data)
            if self.response is None:
                return
            self.sock.sendto(self.response, peer)
        except OSError:
            pass

    def start(self):
        self.thread.start()
        return self

    def close(self):
        self.thread.join(timeout=3)
        self.sock.close()


@pytest.fixture
def udp_server():
    servers = []

    def start(**kwargs):
        server = FakeServer(**kwargs).start()
        servers.append(server)
        return server

    yield start

    for server in servers:
        server.close()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    monkeypatch.delenv('SOURCEQUERY_TIMEOUT', raising=False)
    monkeypatch.delenv('SOURCEQUERY_MAX_STRING', raising=False)
    monkeypatch.setenv('SOURCEQUERY_SETTINGS', str(tmp_path / 'missing.json'))
