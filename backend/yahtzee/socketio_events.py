"""Socket.IO side of the sync protocol.

The server owns room membership, the host role and the turn index. Game
facts (dice, scores, final totals) are computed by the acting client; the
server stores them in its session mirror and relays them to the other
members of the room without re-checking them.
"""

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from yahtzee import get_registry, socketio
from yahtzee import protocol as proto
from yahtzee.errors import GameNotStarted, MalformedMessage, YahtzeeError
from yahtzee.services.games import sync


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _room_key(code: str) -> str:
    return f"room:{code}"


def _reply(message) -> None:
    emit(message.type, message.to_wire())


def _to_room(room, message, include_self=True) -> None:
    emit(message.type, message.to_wire(), to=_room_key(room.code), include_self=include_self)


def _playing_room(sid):
    room, member = get_registry().require(sid)
    if not room.in_progress:
        raise GameNotStarted()
    return room, member


def _leave(sid, disconnecting=False) -> None:
    result = get_registry().leave(sid)
    if not result:
        return
    room = result.room
    if not disconnecting:
        leave_room(_room_key(room.code))
    if result.room_closed:
        current_app.logger.info(f"[room-closed] code={room.code}")
        return
    if result.host_changed:
        current_app.logger.info(f"[host-transfer] code={room.code} host={room.host_id}")
    current_app.logger.info(f"[player-left] code={room.code} player={result.member.player_id}")
    _to_room(room, proto.PlayerLeft(
        player_id=result.member.player_id,
        host_id=room.host_id,
        players=proto.roster(room.members),
    ), include_self=False)


# ---- connection lifecycle ----

def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}")
    registry = get_registry()
    with registry.lock:
        _leave(sid, disconnecting=True)


# ---- lobby ----

def _create_room(message: proto.CreateRoom):
    sid = _get_sid()
    registry = get_registry()
    # a rejected request must leave the sender seated where they were
    registry.check_capacity(message.max_players)
    if registry.room_for(sid):
        _leave(sid)
    room, member = registry.create_room(sid, message.player_name, message.max_players)
    join_room(_room_key(room.code))
    current_app.logger.info(f"[room-created] code={room.code} player={member.player_id} capacity={room.capacity}")
    _reply(proto.RoomCreated(
        room_code=room.code,
        player_id=member.player_id,
        host_id=room.host_id,
        players=proto.roster(room.members),
        max_players=room.capacity,
    ))


def _join_room(message: proto.JoinRoom):
    sid = _get_sid()
    registry = get_registry()
    current = registry.room_for(sid)
    if current and current.code == message.room_code.strip().upper():
        raise MalformedMessage('You are already in this room')
    registry.joinable(message.room_code)
    if current:
        _leave(sid)
    room, member = registry.join_room(sid, message.player_name, message.room_code)
    join_room(_room_key(room.code))
    current_app.logger.info(f"[room-joined] code={room.code} player={member.player_id} members={len(room.members)}")
    players = proto.roster(room.members)
    _reply(proto.RoomJoined(
        room_code=room.code,
        player_id=member.player_id,
        host_id=room.host_id,
        players=players,
        max_players=room.capacity,
    ))
    _to_room(room, proto.PlayerJoined(
        player_id=member.player_id,
        player_name=member.name,
        players=players,
        max_players=room.capacity,
    ), include_self=False)


def _leave_room(message: proto.LeaveRoom):
    _leave(_get_sid())


def _start_game(message: proto.StartGame):
    room = get_registry().start_game(_get_sid(), message.room_code)
    session = room.session
    current_app.logger.info(f"[game-start] code={room.code} players={len(room.members)}")
    _to_room(room, proto.GameStart(
        players=proto.roster(session.players),
        current_player_index=session.current_player_index,
        max_players=room.capacity,
    ))


# ---- relayed game facts ----

def _roll_dice(message: proto.RollDice):
    room, member = _playing_room(_get_sid())
    sync.apply_dice(room.session, message.dice, message.rolls_left)
    _to_room(room, proto.DiceRolled(
        player_id=member.player_id,
        dice=message.dice,
        rolls_left=message.rolls_left,
    ), include_self=False)


def _select_score(message: proto.SelectScore):
    room, member = _playing_room(_get_sid())
    stored = sync.apply_score(room.session, member.player_id, message.category, message.score)
    current_app.logger.info(
        f"[score] code={room.code} player={member.player_id} category={message.category.value} "
        f"score={message.score} stored={stored}"
    )
    _to_room(room, proto.ScoreSelected(
        player_id=member.player_id,
        category=message.category,
        score=message.score,
    ), include_self=False)


def _next_turn(message: proto.NextTurn):
    room, member = _playing_room(_get_sid())
    if message.current_player_index >= len(room.session.players):
        raise MalformedMessage('Invalid player index')
    sync.apply_turn(room.session, message.current_player_index)
    _to_room(room, proto.TurnUpdate(current_player_index=message.current_player_index), include_self=False)


def _end_game(message: proto.EndGame):
    room, member = _playing_room(_get_sid())
    final_scores = [s.to_wire() for s in message.final_scores]
    get_registry().end_game(room, final_scores or None)
    current_app.logger.info(f"[game-over] code={room.code} reported_by={member.player_id}")
    _to_room(room, proto.GameOver(final_scores=message.final_scores), include_self=False)


_HANDLERS = {
    proto.CreateRoom: _create_room,
    proto.JoinRoom: _join_room,
    proto.LeaveRoom: _leave_room,
    proto.StartGame: _start_game,
    proto.RollDice: _roll_dice,
    proto.SelectScore: _select_score,
    proto.NextTurn: _next_turn,
    proto.EndGame: _end_game,
}


def dispatch(data) -> None:
    """Parse one client message and run its handler.

    Protocol and room errors go back to the sender only; nothing here may
    take the server down or close the connection.
    """
    sid = _get_sid()
    try:
        message = proto.parse_client_message(data)
    except MalformedMessage as exc:
        current_app.logger.warning(f"[malformed] sid={sid} {exc.message}")
        _reply(proto.Error(message=exc.message))
        return

    registry = get_registry()
    try:
        with registry.lock:
            _HANDLERS[type(message)](message)
    except YahtzeeError as exc:
        current_app.logger.info(f"[rejected] sid={sid} type={message.type} reason={exc.message}")
        _reply(proto.Error(message=exc.message))
    except Exception:
        current_app.logger.exception(f"[handler-error] sid={sid} type={message.type}")


def handle_message(data=None):
    """Generic ``message`` event: a JSON object carrying its own ``type``."""
    dispatch(data)


def _typed_handler(message_type):
    def handler(data=None):
        if data is None:
            data = {}
        if isinstance(data, dict):
            data = {**data, 'type': message_type}
        dispatch(data)
    handler.__name__ = f"handle_{message_type}"
    return handler


def register_socketio_handlers(namespace: str = '/ws', testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Handlers go on ``namespace``. When testing is True they are mirrored on
    the default namespace '/' to accommodate the test harness.
    """
    namespaces = [namespace]
    if testing and namespace != '/':
        namespaces.append('/')
    for ns in namespaces:
        socketio.on_event('connect', handle_connect, namespace=ns)
        socketio.on_event('disconnect', handle_disconnect, namespace=ns)
        socketio.on_event('message', handle_message, namespace=ns)
        for message_type in proto.CLIENT_MESSAGE_TYPES:
            socketio.on_event(message_type, _typed_handler(message_type), namespace=ns)
