from itertools import product

import pytest

from yahtzee.errors import InvalidCategory, InvalidDice
from yahtzee.services.games.scoring import (
    ALL_CATEGORIES,
    UPPER_CATEGORIES,
    Category,
    score,
    score_all,
)

ALL_DICE = [list(d) for d in product(range(1, 7), repeat=5)]


def test_four_fives_and_a_two():
    dice = [5, 5, 5, 5, 2]
    assert score('fives', dice) == 20
    assert score('full_house', dice) == 0
    assert score('yahtzee', dice) == 0
    assert score('chance', dice) == 22
    assert score('four_of_a_kind', dice) == 22
    assert score('three_of_a_kind', dice) == 22


def test_all_ones():
    dice = [1, 1, 1, 1, 1]
    assert score('yahtzee', dice) == 50
    assert score('ones', dice) == 5
    assert score('three_of_a_kind', dice) == 5
    # five of a kind is not a full house
    assert score('full_house', dice) == 0


def test_straights():
    assert score('large_straight', [1, 2, 3, 4, 5]) == 40
    assert score('small_straight', [1, 2, 3, 4, 5]) == 30
    assert score('large_straight', [6, 2, 4, 3, 5]) == 40
    assert score('small_straight', [3, 4, 5, 6, 6]) == 30
    assert score('small_straight', [1, 2, 3, 5, 6]) == 0
    assert score('large_straight', [1, 2, 3, 4, 6]) == 0


def test_full_house():
    assert score(Category.FULL_HOUSE, [2, 2, 3, 3, 3]) == 25
    assert score(Category.FULL_HOUSE, [2, 2, 3, 3, 4]) == 0


def test_upper_sums_only_matching_faces():
    assert score('threes', [3, 3, 1, 2, 3]) == 9
    assert score('sixes', [1, 2, 3, 4, 5]) == 0


def test_unknown_category_rejected():
    with pytest.raises(InvalidCategory):
        score('bonus', [1, 2, 3, 4, 5])


@pytest.mark.parametrize('dice', [[1, 2, 3, 4], [1, 2, 3, 4, 7], [0, 1, 2, 3, 4], 'abcde', [1, 2, 3, 4, True]])
def test_bad_dice_rejected(dice):
    with pytest.raises(InvalidDice):
        score('chance', dice)


def test_scores_stay_in_range_for_every_roll():
    fixed = {
        Category.FULL_HOUSE: {0, 25},
        Category.SMALL_STRAIGHT: {0, 30},
        Category.LARGE_STRAIGHT: {0, 40},
        Category.YAHTZEE: {0, 50},
    }
    for dice in ALL_DICE:
        scores = score_all(dice)
        assert set(scores) == set(ALL_CATEGORIES)
        for category in UPPER_CATEGORIES:
            assert 0 <= scores[category] <= category.face * 5
            assert scores[category] % category.face == 0
        for category, allowed in fixed.items():
            assert scores[category] in allowed
        assert 5 <= scores[Category.CHANCE] <= 30
        for category in (Category.THREE_OF_A_KIND, Category.FOUR_OF_A_KIND):
            assert scores[category] == 0 or 5 <= scores[category] <= 30


def test_score_is_deterministic():
    dice = [2, 3, 3, 5, 6]
    assert score_all(dice) == score_all(list(dice))


def test_category_parse():
    assert Category.parse('yahtzee') is Category.YAHTZEE
    assert Category.parse(Category.ONES) is Category.ONES
    assert Category.FOURS.face == 4
    assert Category.CHANCE.is_upper is False
