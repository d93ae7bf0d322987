"""Notifications emitted by a game session.

Rendering and rule-trigger layers subscribe to a session and receive
``GameEvent`` objects. Scoring and game-over events carry an event-data
snapshot built here; the keys match the placeholders used by message
templates (``player``, ``totalScore``, ``margin`` ...).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

from .records import PlayerRecord
from .scoring import Category, YAHTZEE_SCORE

FIRST_ROLL = 'first_roll'
DICE_ROLLED = 'dice_rolled'
HOLD_TOGGLED = 'hold_toggled'
SCORE_COMMITTED = 'score_committed'
TURN_CHANGED = 'turn_changed'
GAME_OVER = 'game_over'


@dataclass
class GameEvent:
    kind: str
    data: Dict[str, Any] = field(default_factory=dict)


def _leader_total(players: Sequence[PlayerRecord], totals: Mapping[str, int], exclude: str) -> int:
    others = [totals.get(p.player_id, 0) for p in players if p.player_id != exclude]
    return max(others) if others else 0


def build_event_data(players: Sequence[PlayerRecord], player: PlayerRecord,
                     previous_totals: Optional[Mapping[str, int]] = None, **extra) -> Dict[str, Any]:
    """Snapshot of ``player`` relative to the rest of the table."""
    scores = player.scores
    current = {p.player_id: p.total_score for p in players}

    took_lead = False
    if len(players) > 1 and player.total_score > 0:
        leads_now = player.total_score > _leader_total(players, current, player.player_id)
        if previous_totals is None:
            took_lead = leads_now
        else:
            led_before = previous_totals.get(player.player_id, 0) > _leader_total(
                players, previous_totals, player.player_id)
            took_lead = leads_now and not led_before

    data = {
        'playerId': player.player_id,
        'player': player.name,
        'totalScore': player.total_score,
        'upperSectionTotal': player.upper_section_total,
        'upperBonus': player.upper_bonus,
        'categoriesRemaining': player.categories_remaining,
        'yahtzeeCount': 1 if scores[Category.YAHTZEE] == YAHTZEE_SCORE else 0,
        'straightCount': sum(1 for c in (Category.SMALL_STRAIGHT, Category.LARGE_STRAIGHT) if scores[c]),
        'allScores': {c.value: v for c, v in scores.items()},
        'tookLead': took_lead,
    }
    data.update(extra)
    return data


def build_game_over_data(players: Sequence[PlayerRecord]) -> Dict[str, Any]:
    """Snapshot of the winner, with the margin over the runner-up."""
    # sorted() is stable, so ties keep seat order
    ranked = sorted(players, key=lambda p: p.total_score, reverse=True)
    winner = ranked[0]
    margin = winner.total_score - ranked[1].total_score if len(ranked) > 1 else 0
    data = build_event_data(players, winner)
    data.update({
        'gameOver': True,
        'winnerId': winner.player_id,
        'margin': margin,
        'standings': [{'id': p.player_id, 'name': p.name, 'score': p.total_score} for p in ranked],
    })
    return data
