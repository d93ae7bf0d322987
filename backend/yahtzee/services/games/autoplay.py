from typing import Optional

from .records import PlayerRecord
from .scoring import UPPER_CATEGORIES, Category, score
from .session import GameSession


def choose_category(player: PlayerRecord, dice) -> Category:
    """Greedy pick: the open category worth the most for these dice.

    Upper categories get a small nudge so the bonus stays reachable; ties
    go to the first category on the sheet.
    """
    best: Optional[Category] = None
    best_value = float('-inf')
    for category in player.open_categories():
        value = score(category, dice)
        if category in UPPER_CATEGORIES and value >= 3 * category.face:
            value += 0.5
        if category is Category.CHANCE:
            value -= 10
        if value > best_value:
            best, best_value = category, value
    return best


def choose_holds(dice) -> list:
    """Hold every die showing the most common face (highest face on ties)."""
    counts = {face: dice.count(face) for face in set(dice)}
    target = max(counts, key=lambda face: (counts[face], face))
    return [d == target for d in dice]


def play_turn(session: GameSession) -> int:
    """Roll up to three times, then score the greedy category."""
    session.roll()
    while session.rolls_remaining > 0:
        wanted = choose_holds(session.dice)
        for i, hold in enumerate(wanted):
            if session.held[i] != hold:
                session.toggle_hold(i)
        session.roll()
    category = choose_category(session.current_player, session.dice)
    return session.score_category(category)


def play_game(session: GameSession) -> GameSession:
    while not session.game_over:
        play_turn(session)
    return session
