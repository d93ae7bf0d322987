from typing import Dict, List, Optional

from yahtzee.errors import CategoryAlreadySet
from .scoring import (
    ALL_CATEGORIES,
    LOWER_CATEGORIES,
    UPPER_BONUS,
    UPPER_BONUS_THRESHOLD,
    UPPER_CATEGORIES,
    Category,
)


class PlayerRecord:
    """One player's score sheet.

    Each of the 13 categories starts unset (None) and may be set exactly
    once. The upper bonus and total are always derived from the sheet.
    """

    def __init__(self, player_id: str, name: str):
        self._player_id = player_id
        self._name = name
        self._scores: Dict[Category, Optional[int]] = {c: None for c in ALL_CATEGORIES}

    @property
    def player_id(self) -> str:
        return self._player_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def scores(self) -> Dict[Category, Optional[int]]:
        return dict(self._scores)

    def get(self, category) -> Optional[int]:
        return self._scores[Category.parse(category)]

    def is_set(self, category) -> bool:
        return self.get(category) is not None

    def set_score(self, category, points: int) -> None:
        category = Category.parse(category)
        if self._scores[category] is not None:
            raise CategoryAlreadySet(f'{category.value} already scored for {self._name}')
        if isinstance(points, bool) or not isinstance(points, int) or points < 0:
            raise ValueError(f'score must be a non-negative integer, got {points!r}')
        self._scores[category] = points

    def open_categories(self) -> List[Category]:
        return [c for c in ALL_CATEGORIES if self._scores[c] is None]

    @property
    def upper_section_total(self) -> int:
        return sum(self._scores[c] or 0 for c in UPPER_CATEGORIES)

    @property
    def lower_section_total(self) -> int:
        return sum(self._scores[c] or 0 for c in LOWER_CATEGORIES)

    @property
    def upper_bonus(self) -> int:
        return UPPER_BONUS if self.upper_section_total >= UPPER_BONUS_THRESHOLD else 0

    @property
    def total_score(self) -> int:
        return self.upper_section_total + self.lower_section_total + self.upper_bonus

    @property
    def categories_remaining(self) -> int:
        return len(self.open_categories())

    @property
    def is_complete(self) -> bool:
        return self.categories_remaining == 0

    def to_dict(self):
        return {
            'id': self._player_id,
            'name': self._name,
            'scores': {c.value: v for c, v in self._scores.items()},
            'upperBonus': self.upper_bonus,
            'totalScore': self.total_score,
        }

    def __repr__(self):
        return f'<PlayerRecord {self._player_id} {self._name!r} total={self.total_score}>'
