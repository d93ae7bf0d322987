import logging
import random
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from yahtzee.errors import (
    CategoryAlreadySet,
    GameAlreadyOver,
    InvalidDieIndex,
    NoRollsLeft,
    NoRollYet,
    NotYourTurn,
    WrongPlayerCount,
)
from . import events
from .events import GameEvent
from .records import PlayerRecord
from .scoring import DICE_COUNT, Category, score, score_all

logger = logging.getLogger(__name__)

MAX_ROLLS = 3
MIN_PLAYERS = 2
MAX_PLAYERS = 4

Listener = Callable[[GameEvent], None]


class Phase(str, Enum):
    AWAITING_ROLL = 'awaiting_roll'
    MID_TURN = 'mid_turn'
    TURN_COMPLETE = 'turn_complete'
    FINISHED = 'finished'


class GameSession:
    """Turn order, roll budget and scoring for one game.

    The same class drives a local game (actions called directly, without a
    player id) and the mirror of an online game (see ``sync``). Every action
    either succeeds or raises a ``RuleViolation`` without touching state.
    """

    def __init__(self, players: Iterable[PlayerRecord], rng: Optional[random.Random] = None):
        players = tuple(players)
        if not MIN_PLAYERS <= len(players) <= MAX_PLAYERS:
            raise WrongPlayerCount(f'A game needs {MIN_PLAYERS} to {MAX_PLAYERS} players')
        self.players: Tuple[PlayerRecord, ...] = players
        self._rng = rng or random.Random()
        self._listeners: List[Listener] = []
        self.current_player_index = 0
        self.rolls_remaining = MAX_ROLLS
        self.dice = [0] * DICE_COUNT
        self.held = [False] * DICE_COUNT
        self.game_over = False
        self.phase = Phase.AWAITING_ROLL
        self.final_scores: Optional[list] = None
        self._has_rolled = False

    @classmethod
    def from_roster(cls, roster: Iterable[Tuple[str, str]], rng: Optional[random.Random] = None) -> 'GameSession':
        """Build a session from ``(player_id, name)`` pairs in seat order."""
        return cls((PlayerRecord(pid, name) for pid, name in roster), rng=rng)

    @classmethod
    def local(cls, names: Iterable[str], rng: Optional[random.Random] = None) -> 'GameSession':
        return cls.from_roster(((f'local-{i + 1}', name) for i, name in enumerate(names)), rng=rng)

    # ---- observers ----

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return _unsubscribe

    def _emit(self, kind: str, data=None) -> None:
        event = GameEvent(kind, data or {})
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception('[listener-error] event=%s', kind)

    # ---- queries ----

    @property
    def current_player(self) -> PlayerRecord:
        return self.players[self.current_player_index]

    @property
    def rolls_used(self) -> int:
        return MAX_ROLLS - self.rolls_remaining

    def player(self, player_id: str) -> Optional[PlayerRecord]:
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def preview(self) -> dict:
        """Potential scores for the current player's open categories."""
        if self.rolls_used == 0 or self.game_over:
            return {}
        open_categories = set(self.current_player.open_categories())
        return {c: pts for c, pts in score_all(self.dice).items() if c in open_categories}

    def standings(self) -> List[PlayerRecord]:
        return sorted(self.players, key=lambda p: p.total_score, reverse=True)

    def winner(self) -> PlayerRecord:
        # max() returns the first maximal element, so ties go to the earlier seat
        return max(self.players, key=lambda p: p.total_score)

    # ---- actions ----

    def _check_actor(self, player_id: Optional[str]) -> None:
        if self.game_over:
            raise GameAlreadyOver()
        if player_id is not None and player_id != self.current_player.player_id:
            raise NotYourTurn()

    def roll(self, player_id: Optional[str] = None) -> List[int]:
        """Re-roll every die that is not held. Returns the dice."""
        self._check_actor(player_id)
        if self.rolls_remaining <= 0:
            raise NoRollsLeft()

        if not self._has_rolled:
            self._has_rolled = True
            self._emit(events.FIRST_ROLL, {'isFirstRoll': True, 'player': self.current_player.name})

        for i in range(DICE_COUNT):
            if not self.held[i]:
                self.dice[i] = self._rng.randint(1, 6)
        self.rolls_remaining -= 1
        self.phase = Phase.MID_TURN
        self._emit(events.DICE_ROLLED, {
            'playerId': self.current_player.player_id,
            'dice': list(self.dice),
            'held': list(self.held),
            'rollsLeft': self.rolls_remaining,
        })
        return list(self.dice)

    def toggle_hold(self, index: int, player_id: Optional[str] = None) -> bool:
        """Flip the held flag of one die. Returns the new flag."""
        self._check_actor(player_id)
        if self.rolls_used == 0:
            raise NoRollYet()
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < DICE_COUNT:
            raise InvalidDieIndex()
        self.held[index] = not self.held[index]
        self._emit(events.HOLD_TOGGLED, {'index': index, 'held': list(self.held)})
        return self.held[index]

    def score_category(self, category, player_id: Optional[str] = None) -> int:
        """Score the current dice in ``category`` and end the turn."""
        category = Category.parse(category)
        self._check_actor(player_id)
        if self.rolls_used == 0:
            raise NoRollYet()
        player = self.current_player
        if player.is_set(category):
            raise CategoryAlreadySet()

        points = score(category, self.dice)
        previous_totals = {p.player_id: p.total_score for p in self.players}
        roll_number = self.rolls_used
        player.set_score(category, points)
        self.phase = Phase.TURN_COMPLETE
        self._emit(events.SCORE_COMMITTED, events.build_event_data(
            self.players, player, previous_totals,
            category=category.value,
            score=points,
            rollNumber=roll_number,
            dice=list(self.dice),
        ))

        if all(p.is_complete for p in self.players):
            self.finish()
        else:
            self.start_turn((self.current_player_index + 1) % len(self.players))
        return points

    # ---- transitions shared with remote application ----

    def start_turn(self, index: int) -> None:
        """Hand the turn to ``index`` with a fresh roll budget."""
        if not 0 <= index < len(self.players):
            raise IndexError(f'player index {index} out of range')
        self.current_player_index = index
        self.rolls_remaining = MAX_ROLLS
        self.dice = [0] * DICE_COUNT
        self.held = [False] * DICE_COUNT
        self.phase = Phase.AWAITING_ROLL
        self._emit(events.TURN_CHANGED, {
            'currentPlayerIndex': index,
            'playerId': self.current_player.player_id,
        })

    def finish(self, final_scores: Optional[list] = None) -> None:
        """Mark the game over. Has no effect on a finished game."""
        if self.game_over:
            return
        self.game_over = True
        self.phase = Phase.FINISHED
        self.final_scores = final_scores or [
            {'id': p.player_id, 'name': p.name, 'score': p.total_score} for p in self.players
        ]
        self._emit(events.GAME_OVER, events.build_game_over_data(self.players))

    def to_dict(self):
        return {
            'players': [p.to_dict() for p in self.players],
            'currentPlayerIndex': self.current_player_index,
            'rollsLeft': self.rolls_remaining,
            'dice': list(self.dice),
            'held': list(self.held),
            'phase': self.phase.value,
            'gameOver': self.game_over,
            'finalScores': self.final_scores,
        }
