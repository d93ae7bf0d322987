"""Apply facts reported by another participant to a local session mirror.

The acting client computes dice and scores itself and only the results
travel over the wire. These helpers store those results without
re-running the rules: the mirror trusts the reporter. The one guard kept
is that a category already set in the mirror is never overwritten.
"""

import logging
from typing import Iterable, Optional

from yahtzee.errors import CategoryAlreadySet
from .scoring import Category, validate_dice
from .session import MAX_ROLLS, GameSession, Phase

logger = logging.getLogger(__name__)


def apply_dice(session: GameSession, dice: Iterable[int], rolls_left: int) -> None:
    session.dice = validate_dice(dice)
    session.rolls_remaining = max(0, min(MAX_ROLLS, int(rolls_left)))
    if session.rolls_remaining < MAX_ROLLS and not session.game_over:
        session.phase = Phase.MID_TURN


def apply_score(session: GameSession, player_id: str, category, points: int) -> bool:
    """Store a reported score. Returns False when the mirror kept its value."""
    category = Category.parse(category)
    player = session.player(player_id)
    if player is None:
        logger.warning('[mirror-skip] unknown player=%s category=%s', player_id, category.value)
        return False
    try:
        player.set_score(category, points)
    except CategoryAlreadySet:
        logger.warning('[mirror-skip] player=%s category=%s already set to %s',
                       player_id, category.value, player.get(category))
        return False
    return True


def apply_turn(session: GameSession, index: int) -> None:
    session.start_turn(index)


def apply_game_over(session: GameSession, final_scores: Optional[list] = None) -> None:
    session.finish(final_scores)
