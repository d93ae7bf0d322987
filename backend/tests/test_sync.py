import pytest

from yahtzee.errors import InvalidDice
from yahtzee.services.games import events, sync
from yahtzee.services.games.session import GameSession, Phase


@pytest.fixture()
def mirror():
    return GameSession.from_roster([('pa', 'Ann'), ('pb', 'Bob'), ('pc', 'Cat')])


def test_apply_dice_stores_reported_values(mirror):
    sync.apply_dice(mirror, [6, 6, 6, 2, 2], 1)
    assert mirror.dice == [6, 6, 6, 2, 2]
    assert mirror.rolls_remaining == 1
    assert mirror.phase is Phase.MID_TURN


def test_apply_dice_rejects_impossible_dice(mirror):
    with pytest.raises(InvalidDice):
        sync.apply_dice(mirror, [7, 1, 1, 1, 1], 2)
    assert mirror.dice == [0] * 5


def test_apply_score_trusts_the_reporter(mirror):
    # 50 in chance is impossible, but the mirror does not re-check facts
    assert sync.apply_score(mirror, 'pb', 'chance', 50) is True
    assert mirror.player('pb').get('chance') == 50
    assert mirror.player('pb').total_score == 50


def test_apply_score_never_overwrites(mirror):
    sync.apply_score(mirror, 'pa', 'yahtzee', 50)
    assert sync.apply_score(mirror, 'pa', 'yahtzee', 0) is False
    assert mirror.player('pa').get('yahtzee') == 50


def test_apply_score_unknown_player(mirror):
    assert sync.apply_score(mirror, 'nobody', 'ones', 3) is False


def test_apply_turn_resets_turn_state(mirror):
    seen = []
    mirror.subscribe(seen.append)
    sync.apply_dice(mirror, [1, 2, 3, 4, 5], 0)
    mirror.held[2] = True
    sync.apply_turn(mirror, 2)
    assert mirror.current_player_index == 2
    assert mirror.rolls_remaining == 3
    assert mirror.held == [False] * 5
    assert mirror.dice == [0] * 5
    assert [e.kind for e in seen] == [events.TURN_CHANGED]


def test_apply_turn_out_of_range(mirror):
    with pytest.raises(IndexError):
        sync.apply_turn(mirror, 3)
    assert mirror.current_player_index == 0


def test_apply_game_over_keeps_reported_scores(mirror):
    reported = [{'id': 'pa', 'name': 'Ann', 'score': 120}]
    sync.apply_game_over(mirror, reported)
    assert mirror.game_over
    assert mirror.final_scores == reported
    # a second game_over is ignored
    sync.apply_game_over(mirror, [])
    assert mirror.final_scores == reported
