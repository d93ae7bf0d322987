"""Rules of the dice game with no transport attached.

``scoring`` values a roll, ``records`` holds one player's sheet and
``session`` runs the turn loop. Socket handlers and the client only ever
go through these modules to change game state.
"""

from .records import PlayerRecord
from .scoring import ALL_CATEGORIES, Category, score, score_all
from .session import GameSession, Phase

__all__ = ['ALL_CATEGORIES', 'Category', 'GameSession', 'Phase', 'PlayerRecord', 'score', 'score_all']
