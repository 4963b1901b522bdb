from dataclasses import asdict, dataclass
from typing import Optional, Tuple

# server type byte -> readable name
SERVER_TYPES = {
    ord('d'): 'Dedicated',
    ord('l'): 'Listen',
    ord('p'): 'SourceTV',
}

# environment byte -> readable name
ENVIRONMENTS = {
    ord('l'): 'Linux',
    ord('w'): 'Windows',
    ord('m'): 'Mac',
    ord('o'): 'Mac',
}


@dataclass(frozen=True)
class ServerInfo:
    """A single A2S_INFO snapshot.

    The six trailing fields are only sent when their bit is set in ``edf``;
    when the bit is clear the field is ``None``. ``0`` is a real value for
    ``port`` and ``game_id`` and never stands in for "not sent".
    """
    header: int
    protocol: int
    name: str
    map_name: str
    folder: str
    game: str
    app_id: int
    player_count: int
    max_players: int
    bot_count: int
    server_type: int
    environment: int
    password_protected: bool
    vac_secured: bool
    version: str
    edf: int
    port: Optional[int] = None
    steam_id: Optional[int] = None
    source_tv_port: Optional[int] = None
    source_tv_name: Optional[str] = None
    tags: Optional[str] = None
    game_id: Optional[int] = None

    @property
    def server_type_name(self) -> str:
        return SERVER_TYPES.get(self.server_type, 'Unknown')

    @property
    def environment_name(self) -> str:
        return ENVIRONMENTS.get(self.environment, 'Unknown')

    @property
    def keywords(self) -> Tuple[str, ...]:
        if not self.tags:
            return ()
        return tuple(tag for tag in self.tags.split(',') if tag)

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class PlayerInfo:
    """One entry of an A2S_PLAYER list.

    ``index`` is the position in the wire list, not a player id; the same
    value can belong to someone else on the next query.
    """
    index: int
    name: str
    score: int
    duration: float

    def to_dict(self):
        return asdict(self)
