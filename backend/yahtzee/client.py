"""Client side of the sync protocol.

The acting client is authoritative for its own turn: it rolls and scores
on its local ``GameSession`` and then reports the resulting facts. Facts
reported by other members arrive as server messages and are applied to the
same session as a mirror.
"""

import logging
from typing import Callable, List, Optional

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from config import Config
from yahtzee import protocol as proto
from yahtzee.errors import GameNotStarted, MalformedMessage, TransportUnavailable
from yahtzee.services.games import sync
from yahtzee.services.games.session import GameSession

logger = logging.getLogger(__name__)


class GameClient:
    def __init__(self, url: Optional[str] = None, namespace: Optional[str] = None, transport=None, rng=None):
        self.url = url or Config.SERVER_URL
        self.namespace = namespace or Config.SOCKETIO_NAMESPACE
        self.transport = transport if transport is not None else socketio.Client(reconnection=False)
        self.offline = False
        self.room_code: Optional[str] = None
        self.player_id: Optional[str] = None
        self.host_id: Optional[str] = None
        self.players: List[proto.PlayerInfo] = []
        self.max_players = 3
        self.session: Optional[GameSession] = None
        self.final_scores: Optional[list] = None
        self.last_error: Optional[str] = None
        self._rng = rng
        self._message_listeners: List[Callable] = []
        for message_type in proto.SERVER_MESSAGE_TYPES:
            self.transport.on(message_type, self._receiver(message_type), namespace=namespace)

    # ---- transport ----

    @property
    def connected(self) -> bool:
        return bool(getattr(self.transport, 'connected', False))

    def connect(self) -> None:
        """Connect once. On failure the client goes offline; there is no retry."""
        try:
            self.transport.connect(self.url, namespaces=[self.namespace])
        except SocketConnectionError as exc:
            self.offline = True
            logger.warning('[connect-failed] url=%s error=%s', self.url, exc)
            raise TransportUnavailable() from exc
        self.offline = False
        logger.info('[connected] url=%s', self.url)

    def disconnect(self) -> None:
        if self.connected:
            self.transport.disconnect()

    def send(self, message) -> bool:
        """Fire-and-forget. Skipped when the transport is not open."""
        if not self.connected:
            logger.debug('[send-skip] type=%s not connected', message.type)
            return False
        self.transport.emit(message.type, message.to_wire(), namespace=self.namespace)
        return True

    def on_message(self, listener: Callable) -> None:
        """Call ``listener(message)`` after each server message is applied."""
        self._message_listeners.append(listener)

    # ---- lobby ----

    @property
    def is_host(self) -> bool:
        return self.player_id is not None and self.player_id == self.host_id

    def create_room(self, player_name: str, max_players: int = 3) -> bool:
        return self.send(proto.CreateRoom(player_name=player_name, max_players=max_players))

    def join_room(self, player_name: str, room_code: str) -> bool:
        return self.send(proto.JoinRoom(player_name=player_name, room_code=room_code.strip().upper()))

    def leave_room(self) -> bool:
        sent = self.send(proto.LeaveRoom(room_code=self.room_code))
        self._reset_room()
        return sent

    def start_game(self) -> bool:
        return self.send(proto.StartGame(room_code=self.room_code))

    def _reset_room(self):
        self.room_code = None
        self.player_id = None
        self.host_id = None
        self.players = []
        self.session = None
        self.final_scores = None

    # ---- own turn ----

    def _require_session(self) -> GameSession:
        if self.session is None:
            raise GameNotStarted()
        return self.session

    def is_my_turn(self) -> bool:
        session = self.session
        return (session is not None and not session.game_over
                and session.current_player.player_id == self.player_id)

    def roll(self) -> List[int]:
        session = self._require_session()
        dice = session.roll(self.player_id)
        self.send(proto.RollDice(room_code=self.room_code, dice=dice, rolls_left=session.rolls_remaining))
        return dice

    def toggle_hold(self, index: int) -> bool:
        # holds are local until the next roll reports the dice
        return self._require_session().toggle_hold(index, self.player_id)

    def score(self, category) -> int:
        session = self._require_session()
        points = session.score_category(category, self.player_id)
        self.send(proto.SelectScore(room_code=self.room_code, category=category, score=points))
        if session.game_over:
            self.final_scores = session.final_scores
            self.send(proto.EndGame(room_code=self.room_code, final_scores=session.final_scores))
        else:
            self.send(proto.NextTurn(room_code=self.room_code,
                                     current_player_index=session.current_player_index))
        return points

    # ---- server messages ----

    def _receiver(self, message_type):
        def receive(data=None):
            if isinstance(data, dict):
                data = {**data, 'type': message_type}
            self.handle(data)
        return receive

    def handle(self, data) -> None:
        """Apply one server message to local state. Malformed input is logged and dropped."""
        try:
            message = proto.parse_server_message(data)
        except MalformedMessage as exc:
            logger.warning('[malformed] %s', exc.message)
            return
        handler = self._handlers.get(type(message))
        if handler is None:
            return
        handler(self, message)
        for listener in list(self._message_listeners):
            listener(message)

    def _on_room_entered(self, message):
        self.room_code = message.room_code
        self.player_id = message.player_id
        self.host_id = message.host_id
        self.players = list(message.players)
        self.max_players = message.max_players
        self.session = None
        self.final_scores = None
        self.last_error = None

    def _on_player_joined(self, message):
        self.players = list(message.players)
        self.max_players = message.max_players
        # the host starts the game as soon as the room fills up
        if self.is_host and len(self.players) == self.max_players:
            self.start_game()

    def _on_player_left(self, message):
        self.players = list(message.players)
        self.host_id = message.host_id

    def _on_game_start(self, message):
        self.players = list(message.players)
        self.final_scores = None
        self.session = GameSession.from_roster(((p.id, p.name) for p in message.players), rng=self._rng)
        if message.current_player_index:
            sync.apply_turn(self.session, message.current_player_index)

    def _on_dice_rolled(self, message):
        if self.session is None or message.player_id == self.player_id:
            return
        sync.apply_dice(self.session, message.dice, message.rolls_left)

    def _on_score_selected(self, message):
        if self.session is None or message.player_id == self.player_id:
            return
        sync.apply_score(self.session, message.player_id, message.category, message.score)

    def _on_turn_update(self, message):
        if self.session is None:
            return
        if message.current_player_index >= len(self.session.players):
            logger.warning('[turn-skip] index=%s out of range', message.current_player_index)
            return
        sync.apply_turn(self.session, message.current_player_index)

    def _on_game_over(self, message):
        self.final_scores = [s.to_wire() for s in message.final_scores]
        if self.session is not None:
            sync.apply_game_over(self.session, self.final_scores or None)

    def _on_error(self, message):
        self.last_error = message.message
        logger.warning('[server-error] %s', message.message)

    _handlers = {
        proto.RoomCreated: _on_room_entered,
        proto.RoomJoined: _on_room_entered,
        proto.PlayerJoined: _on_player_joined,
        proto.PlayerLeft: _on_player_left,
        proto.GameStart: _on_game_start,
        proto.DiceRolled: _on_dice_rolled,
        proto.ScoreSelected: _on_score_selected,
        proto.TurnUpdate: _on_turn_update,
        proto.GameOver: _on_game_over,
        proto.Error: _on_error,
    }
