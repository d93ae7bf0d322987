import pytest

from yahtzee.errors import CategoryAlreadySet, InvalidCategory
from yahtzee.services.games.records import PlayerRecord
from yahtzee.services.games.scoring import ALL_CATEGORIES


def _record_with_upper(values):
    record = PlayerRecord('p1', 'Ann')
    for category, value in zip(('ones', 'twos', 'threes', 'fours', 'fives', 'sixes'), values):
        record.set_score(category, value)
    return record


def test_new_record_is_blank():
    record = PlayerRecord('p1', 'Ann')
    assert len(record.scores) == 13
    assert all(v is None for v in record.scores.values())
    assert record.total_score == 0
    assert record.categories_remaining == 13
    assert not record.is_complete


def test_upper_bonus_at_exactly_63():
    # 3 of each face: 3 + 6 + 9 + 12 + 15 + 18 = 63
    record = _record_with_upper([3, 6, 9, 12, 15, 18])
    assert record.upper_section_total == 63
    assert record.upper_bonus == 35
    assert record.total_score == 98


def test_no_upper_bonus_at_62():
    record = _record_with_upper([2, 6, 9, 12, 15, 18])
    assert record.upper_section_total == 62
    assert record.upper_bonus == 0
    assert record.total_score == 62


def test_total_is_recomputed_on_each_read():
    record = PlayerRecord('p1', 'Ann')
    record.set_score('chance', 22)
    record.set_score('yahtzee', 50)
    assert record.total_score == 72
    assert record.total_score == 72
    record.set_score('fives', 20)
    assert record.total_score == 92


def test_category_set_only_once():
    record = PlayerRecord('p1', 'Ann')
    record.set_score('full_house', 25)
    with pytest.raises(CategoryAlreadySet):
        record.set_score('full_house', 0)
    assert record.get('full_house') == 25


def test_rejects_bad_values():
    record = PlayerRecord('p1', 'Ann')
    with pytest.raises(InvalidCategory):
        record.set_score('bonus', 5)
    with pytest.raises(ValueError):
        record.set_score('chance', -1)
    assert record.get('chance') is None


def test_complete_sheet():
    record = PlayerRecord('p1', 'Ann')
    for category in ALL_CATEGORIES:
        record.set_score(category, 0)
    assert record.is_complete
    assert record.open_categories() == []


def test_to_dict_uses_wire_names():
    record = PlayerRecord('p1', 'Ann')
    record.set_score('small_straight', 30)
    data = record.to_dict()
    assert data['id'] == 'p1'
    assert data['scores']['small_straight'] == 30
    assert data['scores']['ones'] is None
    assert data['totalScore'] == 30
    assert data['upperBonus'] == 0
