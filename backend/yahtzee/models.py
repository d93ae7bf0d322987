import random
import string
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from yahtzee.errors import (
    GameInProgress,
    NotHost,
    NotInRoom,
    RoomFull,
    RoomNotFound,
    WrongPlayerCount,
)
from yahtzee.services.games.session import GameSession

# No I, O, 0 or 1: they are easy to misread when a code is read aloud
ROOM_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'
PLAYER_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_room_code(length=6, rng=None, taken=()):
    """Generate a room code that is not in ``taken``."""
    rng = rng or random
    while True:
        code = ''.join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(length))
        if code not in taken:
            return code


def generate_player_id(rng=None):
    rng = rng or random
    return 'p' + ''.join(rng.choice(PLAYER_ID_ALPHABET) for _ in range(9))


@dataclass
class Member:
    player_id: str
    name: str
    sid: str

    def to_dict(self):
        return {'id': self.player_id, 'name': self.name}


@dataclass
class Room:
    code: str
    capacity: int
    host_id: str
    members: List[Member] = field(default_factory=list)
    session: Optional[GameSession] = None

    @property
    def in_progress(self) -> bool:
        return self.session is not None and not self.session.game_over

    @property
    def is_full(self) -> bool:
        return len(self.members) >= self.capacity

    def member(self, player_id: str) -> Optional[Member]:
        for m in self.members:
            if m.player_id == player_id:
                return m
        return None

    def to_dict(self, include_session=True):
        data = {
            'code': self.code,
            'hostId': self.host_id,
            'maxPlayers': self.capacity,
            'inProgress': self.in_progress,
            'players': [m.to_dict() for m in self.members],
        }
        if include_session:
            data['session'] = self.session.to_dict() if self.session else None
        return data


@dataclass
class LeaveResult:
    room: Room
    member: Member
    room_closed: bool
    host_changed: bool


class RoomRegistry:
    """All active rooms, keyed by code, plus the connection -> room index.

    Owned by the Flask app (``app.extensions['room_registry']``). Mutations
    are serialized by one lock; rooms never share state with each other.
    """

    def __init__(self, default_capacity=3, min_capacity=2, max_capacity=4, code_length=6, rng=None):
        self.default_capacity = default_capacity
        self.min_capacity = min_capacity
        self.max_capacity = max_capacity
        self.code_length = code_length
        self._rng = rng or random.Random()
        self._rooms: Dict[str, Room] = {}
        self._by_sid: Dict[str, Tuple[str, str]] = {}
        self.lock = threading.RLock()

    @classmethod
    def from_config(cls, config) -> 'RoomRegistry':
        return cls(
            default_capacity=int(config.get('MAX_PLAYERS', 3)),
            min_capacity=int(config.get('MIN_PLAYERS', 2)),
            max_capacity=int(config.get('MAX_ROOM_CAPACITY', 4)),
            code_length=int(config.get('ROOM_CODE_LENGTH', 6)),
        )

    # ---- lookups ----

    def get(self, code: str) -> Optional[Room]:
        return self._rooms.get((code or '').strip().upper())

    def active_rooms(self) -> List[Room]:
        with self.lock:
            return list(self._rooms.values())

    def room_for(self, sid: str) -> Optional[Room]:
        entry = self._by_sid.get(sid)
        return self._rooms.get(entry[0]) if entry else None

    def member_for(self, sid: str) -> Optional[Member]:
        entry = self._by_sid.get(sid)
        room = self._rooms.get(entry[0]) if entry else None
        return room.member(entry[1]) if room else None

    def require(self, sid: str) -> Tuple[Room, Member]:
        with self.lock:
            room = self.room_for(sid)
            member = self.member_for(sid)
            if not room or not member:
                raise NotInRoom()
            return room, member

    # ---- lifecycle ----

    def check_capacity(self, max_players=None) -> int:
        """Capacity for a new room, or WrongPlayerCount if out of bounds."""
        capacity = self.default_capacity if max_players is None else max_players
        if not self.min_capacity <= capacity <= self.max_capacity:
            raise WrongPlayerCount(
                f'Rooms hold {self.min_capacity} to {self.max_capacity} players')
        return capacity

    def joinable(self, code: str) -> Room:
        """The room for ``code`` if a new member may join it now."""
        with self.lock:
            room = self.get(code)
            if not room:
                raise RoomNotFound()
            if room.is_full:
                raise RoomFull()
            if room.in_progress:
                raise GameInProgress()
            return room

    def create_room(self, sid: str, name: str, max_players=None) -> Tuple[Room, Member]:
        capacity = self.check_capacity(max_players)
        with self.lock:
            if sid in self._by_sid:
                self.leave(sid)
            code = generate_room_code(self.code_length, self._rng, taken=self._rooms)
            member = Member(generate_player_id(self._rng), name, sid)
            room = Room(code=code, capacity=capacity, host_id=member.player_id, members=[member])
            self._rooms[code] = room
            self._by_sid[sid] = (code, member.player_id)
            return room, member

    def join_room(self, sid: str, name: str, code: str) -> Tuple[Room, Member]:
        with self.lock:
            room = self.joinable(code)
            if sid in self._by_sid:
                self.leave(sid)
            member = Member(generate_player_id(self._rng), name, sid)
            room.members.append(member)
            self._by_sid[sid] = (room.code, member.player_id)
            return room, member

    def leave(self, sid: str) -> Optional[LeaveResult]:
        """Remove the connection from its room. Returns None if it had none."""
        with self.lock:
            entry = self._by_sid.pop(sid, None)
            if not entry:
                return None
            code, player_id = entry
            room = self._rooms.get(code)
            if not room:
                return None
            member = room.member(player_id)
            room.members = [m for m in room.members if m.player_id != player_id]
            if not room.members:
                del self._rooms[code]
                return LeaveResult(room, member, room_closed=True, host_changed=False)
            host_changed = room.host_id == player_id
            if host_changed:
                # members are kept in join order
                room.host_id = room.members[0].player_id
            return LeaveResult(room, member, room_closed=False, host_changed=host_changed)

    def start_game(self, sid: str, code: Optional[str] = None, rng=None) -> Room:
        """Start the sender's room. ``code``, when given, must match it."""
        with self.lock:
            room, member = self.require(sid)
            if code and room.code != code.strip().upper():
                raise RoomNotFound()
            if member.player_id != room.host_id:
                raise NotHost()
            if room.in_progress:
                raise GameInProgress()
            if len(room.members) != room.capacity:
                raise WrongPlayerCount(f'Need exactly {room.capacity} players to start')
            room.session = GameSession.from_roster(
                ((m.player_id, m.name) for m in room.members), rng=rng)
            return room

    def end_game(self, room: Room, final_scores=None) -> None:
        with self.lock:
            if room.session is not None:
                room.session.finish(final_scores)
