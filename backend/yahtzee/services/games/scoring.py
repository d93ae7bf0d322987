from collections import Counter
from enum import Enum
from typing import Dict, Sequence

from yahtzee.errors import InvalidCategory, InvalidDice

DICE_COUNT = 5
FACES = range(1, 7)

UPPER_BONUS = 35
UPPER_BONUS_THRESHOLD = 63

FULL_HOUSE_SCORE = 25
SMALL_STRAIGHT_SCORE = 30
LARGE_STRAIGHT_SCORE = 40
YAHTZEE_SCORE = 50

_SMALL_STRAIGHTS = ({1, 2, 3, 4}, {2, 3, 4, 5}, {3, 4, 5, 6})
_LARGE_STRAIGHTS = ([1, 2, 3, 4, 5], [2, 3, 4, 5, 6])


class Category(str, Enum):
    ONES = 'ones'
    TWOS = 'twos'
    THREES = 'threes'
    FOURS = 'fours'
    FIVES = 'fives'
    SIXES = 'sixes'
    THREE_OF_A_KIND = 'three_of_a_kind'
    FOUR_OF_A_KIND = 'four_of_a_kind'
    FULL_HOUSE = 'full_house'
    SMALL_STRAIGHT = 'small_straight'
    LARGE_STRAIGHT = 'large_straight'
    YAHTZEE = 'yahtzee'
    CHANCE = 'chance'

    @classmethod
    def parse(cls, value) -> 'Category':
        """Return the Category for a Category or its wire name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidCategory(f'Unknown scoring category: {value!r}') from None

    @property
    def is_upper(self) -> bool:
        return self in UPPER_CATEGORIES

    @property
    def face(self) -> int:
        """Face value counted by an upper-section category."""
        return UPPER_CATEGORIES.index(self) + 1


UPPER_CATEGORIES = (
    Category.ONES, Category.TWOS, Category.THREES,
    Category.FOURS, Category.FIVES, Category.SIXES,
)
LOWER_CATEGORIES = (
    Category.THREE_OF_A_KIND, Category.FOUR_OF_A_KIND, Category.FULL_HOUSE,
    Category.SMALL_STRAIGHT, Category.LARGE_STRAIGHT, Category.YAHTZEE,
    Category.CHANCE,
)
ALL_CATEGORIES = UPPER_CATEGORIES + LOWER_CATEGORIES


def validate_dice(dice: Sequence[int]) -> list:
    """Return the dice as a list, or raise InvalidDice."""
    try:
        values = list(dice)
    except TypeError:
        raise InvalidDice() from None
    if len(values) != DICE_COUNT:
        raise InvalidDice()
    for value in values:
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or value not in FACES:
            raise InvalidDice()
    return values


def score(category, dice: Sequence[int]) -> int:
    """Points the dice are worth in the given category.

    Pure and deterministic. Raises InvalidCategory for an unknown category
    and InvalidDice for anything other than five values in 1..6.
    """
    category = Category.parse(category)
    dice = validate_dice(dice)
    counts = Counter(dice)
    total = sum(dice)

    if category.is_upper:
        return sum(d for d in dice if d == category.face)
    if category is Category.THREE_OF_A_KIND:
        return total if max(counts.values()) >= 3 else 0
    if category is Category.FOUR_OF_A_KIND:
        return total if max(counts.values()) >= 4 else 0
    if category is Category.FULL_HOUSE:
        return FULL_HOUSE_SCORE if sorted(counts.values()) == [2, 3] else 0
    if category is Category.SMALL_STRAIGHT:
        faces = set(dice)
        return SMALL_STRAIGHT_SCORE if any(s <= faces for s in _SMALL_STRAIGHTS) else 0
    if category is Category.LARGE_STRAIGHT:
        return LARGE_STRAIGHT_SCORE if sorted(dice) in _LARGE_STRAIGHTS else 0
    if category is Category.YAHTZEE:
        return YAHTZEE_SCORE if len(counts) == 1 else 0
    # chance
    return total


def score_all(dice: Sequence[int]) -> Dict[Category, int]:
    """Potential score of the dice in every category."""
    return {category: score(category, dice) for category in ALL_CATEGORIES}
