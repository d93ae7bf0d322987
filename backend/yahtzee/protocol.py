"""Wire messages.

Every message is a JSON object with a ``type`` discriminator and camelCase
fields. Each message type is its own pydantic model; ``ClientMessage`` and
``ServerMessage`` are tagged unions over them, so parsing yields exactly
one typed variant.

Client to server::

    create_room  {playerName, maxPlayers}
    join_room    {playerName, roomCode}
    leave_room   {roomCode}
    start_game   {roomCode}
    roll_dice    {roomCode, dice, rollsLeft}
    select_score {roomCode, category, score}
    next_turn    {roomCode, currentPlayerIndex}
    end_game     {roomCode, finalScores}

Server to client: room_created, room_joined, player_joined, player_left,
game_start, turn_update, dice_rolled, score_selected, game_over, error.
"""

import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from yahtzee.errors import MalformedMessage, YahtzeeError
from yahtzee.services.games.scoring import Category, validate_dice


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)


class PlayerInfo(WireModel):
    id: str
    name: str


class FinalScore(WireModel):
    id: str
    name: str = ''
    score: int = Field(ge=0)


class _Dice(WireModel):
    dice: List[int]

    @field_validator('dice')
    @classmethod
    def _check_dice(cls, value):
        try:
            return validate_dice(value)
        except YahtzeeError as exc:
            raise ValueError(exc.message) from None


# ---- client -> server ----

class CreateRoom(WireModel):
    type: Literal['create_room'] = 'create_room'
    player_name: str = Field(min_length=1, max_length=32)
    max_players: int = 3


class JoinRoom(WireModel):
    type: Literal['join_room'] = 'join_room'
    player_name: str = Field(min_length=1, max_length=32)
    room_code: str = Field(min_length=1)


class LeaveRoom(WireModel):
    type: Literal['leave_room'] = 'leave_room'
    room_code: Optional[str] = None


class StartGame(WireModel):
    type: Literal['start_game'] = 'start_game'
    room_code: Optional[str] = None


class RollDice(_Dice):
    type: Literal['roll_dice'] = 'roll_dice'
    room_code: Optional[str] = None
    rolls_left: int = Field(ge=0, le=3)


class SelectScore(WireModel):
    type: Literal['select_score'] = 'select_score'
    room_code: Optional[str] = None
    category: Category
    score: int = Field(ge=0)


class NextTurn(WireModel):
    type: Literal['next_turn'] = 'next_turn'
    room_code: Optional[str] = None
    current_player_index: int = Field(ge=0)


class EndGame(WireModel):
    type: Literal['end_game'] = 'end_game'
    room_code: Optional[str] = None
    final_scores: List[FinalScore] = Field(default_factory=list)


ClientMessage = Annotated[
    Union[CreateRoom, JoinRoom, LeaveRoom, StartGame, RollDice, SelectScore, NextTurn, EndGame],
    Field(discriminator='type'),
]

# ---- server -> client ----

class RoomCreated(WireModel):
    type: Literal['room_created'] = 'room_created'
    room_code: str
    player_id: str
    host_id: str
    players: List[PlayerInfo]
    max_players: int


class RoomJoined(WireModel):
    type: Literal['room_joined'] = 'room_joined'
    room_code: str
    player_id: str
    host_id: str
    players: List[PlayerInfo]
    max_players: int


class PlayerJoined(WireModel):
    type: Literal['player_joined'] = 'player_joined'
    player_id: str
    player_name: str
    players: List[PlayerInfo]
    max_players: int


class PlayerLeft(WireModel):
    type: Literal['player_left'] = 'player_left'
    player_id: str
    host_id: str
    players: List[PlayerInfo]


class GameStart(WireModel):
    type: Literal['game_start'] = 'game_start'
    players: List[PlayerInfo]
    current_player_index: int = 0
    max_players: int


class TurnUpdate(WireModel):
    type: Literal['turn_update'] = 'turn_update'
    current_player_index: int = Field(ge=0)


class DiceRolled(_Dice):
    type: Literal['dice_rolled'] = 'dice_rolled'
    player_id: str
    rolls_left: int = Field(ge=0, le=3)


class ScoreSelected(WireModel):
    type: Literal['score_selected'] = 'score_selected'
    player_id: str
    category: Category
    score: int = Field(ge=0)


class GameOver(WireModel):
    type: Literal['game_over'] = 'game_over'
    final_scores: List[FinalScore] = Field(default_factory=list)


class Error(WireModel):
    type: Literal['error'] = 'error'
    message: str


ServerMessage = Annotated[
    Union[RoomCreated, RoomJoined, PlayerJoined, PlayerLeft, GameStart,
          TurnUpdate, DiceRolled, ScoreSelected, GameOver, Error],
    Field(discriminator='type'),
]

CLIENT_MESSAGE_TYPES = ('create_room', 'join_room', 'leave_room', 'start_game',
                        'roll_dice', 'select_score', 'next_turn', 'end_game')
SERVER_MESSAGE_TYPES = ('room_created', 'room_joined', 'player_joined', 'player_left',
                        'game_start', 'turn_update', 'dice_rolled', 'score_selected',
                        'game_over', 'error')

_client_adapter = TypeAdapter(ClientMessage)
_server_adapter = TypeAdapter(ServerMessage)


def _load(data):
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except ValueError:
            raise MalformedMessage('Message is not valid JSON') from None
    if not isinstance(data, dict):
        raise MalformedMessage('Message must be a JSON object')
    if 'type' not in data:
        raise MalformedMessage('Message has no type')
    return data


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    where = '.'.join(str(part) for part in first.get('loc', ()))
    return f"Invalid {where}: {first.get('msg')}" if where else first.get('msg', 'Malformed message')


def parse_client_message(data):
    """Parse a dict or JSON string into one client message variant."""
    data = _load(data)
    try:
        return _client_adapter.validate_python(data)
    except ValidationError as exc:
        raise MalformedMessage(_describe(exc)) from None


def parse_server_message(data):
    """Parse a dict or JSON string into one server message variant."""
    data = _load(data)
    try:
        return _server_adapter.validate_python(data)
    except ValidationError as exc:
        raise MalformedMessage(_describe(exc)) from None


def roster(members) -> List[PlayerInfo]:
    """PlayerInfo list for anything with ``player_id`` and ``name``."""
    return [PlayerInfo(id=m.player_id, name=m.name) for m in members]
