import random

import pytest

from conftest import make_track
from norster.models import Phase, PlayerConfig, Verdict
from norster.services.games import (
    EmptyCatalog, GameEngine, InsufficientTokens, InvalidAction, InvalidSetup,
    validate_player_config,
)


def _engine(tracks, names=('A', 'B'), tokens=3, **kwargs):
    kwargs.setdefault('rng', random.Random(1))
    return GameEngine(tracks, PlayerConfig(names=names, starting_tokens=tokens), **kwargs)


def _play_round(engine, correct=True):
    track = engine.draw()
    engine.reveal()
    engine.resolve_placement(correct)
    return track


def _deck_ids(engine):
    ids = [t.id for t in engine.deck.queue] + [t.id for t in engine.deck.used]
    if engine.phase == Phase.PLAYING:
        ids.append(engine.current_track.id)
    return ids


def test_round_walkthrough(engine):
    snap = engine.snapshot()
    assert snap.phase == Phase.IDLE
    assert snap.current_track is None
    assert [p.tokens for p in snap.players] == [3, 3]

    track = engine.draw()
    assert engine.phase == Phase.PLAYING
    assert engine.current_track == track

    engine.reveal()
    assert engine.phase == Phase.REVEALED
    assert track in engine.deck.used

    engine.resolve_placement(True)
    snap = engine.snapshot()
    assert snap.players[0].score == 1
    assert snap.active_player_index == 1
    assert snap.phase == Phase.IDLE
    assert snap.current_track is None


def test_wrong_placement_advances_without_scoring(engine):
    _play_round(engine, correct=False)
    assert engine.players[0].score == 0
    assert engine.active_player_index == 1
    _play_round(engine, correct=False)
    assert engine.active_player_index == 0


def test_no_repeats_within_a_pass():
    tracks = [make_track(f't{i}', f'{1980 + i}-01-01') for i in range(6)]
    engine = _engine(tracks)
    first_pass = [_play_round(engine, correct=False).id for _ in range(6)]
    assert sorted(first_pass) == sorted(t.id for t in tracks)
    second_pass = [_play_round(engine, correct=False).id for _ in range(6)]
    assert sorted(second_pass) == sorted(t.id for t in tracks)


def test_empty_catalog_leaves_engine_idle():
    engine = _engine([])
    with pytest.raises(EmptyCatalog):
        engine.draw()
    assert engine.phase == Phase.IDLE
    assert engine.current_track is None


def test_skip_costs_one_token_and_draws_a_different_card(engine, three_tracks):
    skipped = engine.draw()
    replacement = engine.skip()
    assert engine.players[0].tokens == 2
    assert engine.phase == Phase.PLAYING
    assert replacement != skipped
    assert skipped in engine.deck.used
    ids = _deck_ids(engine)
    assert sorted(ids) == sorted(t.id for t in three_tracks)


def test_skip_without_tokens_is_rejected_and_changes_nothing(engine):
    engine.adjust_tokens(0, -100)
    held = engine.draw()
    queue_before = list(engine.deck.queue)
    used_before = list(engine.deck.used)

    with pytest.raises(InsufficientTokens):
        engine.skip()

    assert engine.phase == Phase.PLAYING
    assert engine.current_track == held
    assert engine.deck.queue == queue_before
    assert engine.deck.used == used_before
    assert [p.score for p in engine.players] == [0, 0]
    assert engine.players[0].tokens == 0


def test_skip_with_a_single_track_redraws_it():
    only = make_track('solo', '1977-05-25')
    engine = _engine([only])
    engine.draw()
    assert engine.skip() == only
    assert engine.players[0].tokens == 2
    assert engine.deck.used == []


def test_skip_after_queue_exhausted_reshuffles_used_pile():
    first, second = make_track('a', '1990'), make_track('b', '1991')
    engine = _engine([first, second])
    played = _play_round(engine, correct=False)
    held = engine.draw()
    assert engine.deck.queue == []
    replacement = engine.skip()
    assert replacement == played
    assert engine.deck.used == [held]


def test_tokens_never_go_negative(engine):
    assert engine.adjust_tokens(1, -100) == 0
    assert engine.players[1].tokens == 0
    assert engine.adjust_tokens(1, 7) == 7
    assert engine.adjust_tokens(0, 50) == 53


def test_adjust_tokens_rejects_unknown_player(engine):
    with pytest.raises(InvalidAction):
        engine.adjust_tokens(5, 1)
    with pytest.raises(InvalidAction):
        engine.adjust_tokens(-1, 1)


class TestYearGuess:

    @pytest.fixture()
    def revealed(self):
        engine = _engine([make_track('x', '1994-03-21')])
        engine.draw()
        engine.reveal()
        return engine

    def test_correct_guess_grants_a_token(self, revealed):
        record = revealed.check_year_guess(' 1994 ', 1)
        assert record.verdict == Verdict.CORRECT
        assert record.guesser_index == 1
        assert revealed.players[1].tokens == 4
        assert revealed.players[0].tokens == 3
        assert [p.score for p in revealed.players] == [0, 0]

    def test_wrong_guess_changes_nothing(self, revealed):
        record = revealed.check_year_guess('1993')
        assert record.verdict == Verdict.WRONG
        assert record.guesser_index == 0
        assert [p.tokens for p in revealed.players] == [3, 3]

    def test_second_guess_is_a_no_op(self, revealed):
        revealed.check_year_guess('1994')
        again = revealed.check_year_guess('1994', 1)
        assert again.guesser_index == 0
        assert [p.tokens for p in revealed.players] == [4, 3]
        assert revealed.check_year_guess('').verdict == Verdict.CORRECT

    def test_blank_guess_is_not_evaluated(self, revealed):
        with pytest.raises(InvalidAction):
            revealed.check_year_guess('   ')
        assert revealed.bonus_guess is None

    def test_unknown_guesser_is_rejected(self, revealed):
        with pytest.raises(InvalidAction):
            revealed.check_year_guess('1994', 9)
        assert revealed.bonus_guess is None

    def test_next_draw_clears_the_record(self, revealed):
        revealed.check_year_guess('1994')
        revealed.resolve_placement(False)
        revealed.draw()
        assert revealed.bonus_guess is None
        revealed.reveal()
        assert revealed.check_year_guess('1994', 1).verdict == Verdict.CORRECT
        assert revealed.players[1].tokens == 4

    def test_guess_before_reveal_is_rejected(self):
        engine = _engine([make_track('x', '1994-03-21')])
        engine.draw()
        with pytest.raises(InvalidAction):
            engine.check_year_guess('1994')


@pytest.mark.parametrize('action', ['reveal', 'skip'])
def test_round_actions_require_a_card(engine, action):
    with pytest.raises(InvalidAction):
        getattr(engine, action)()
    assert engine.phase == Phase.IDLE


def test_out_of_order_actions_are_rejected(engine):
    with pytest.raises(InvalidAction):
        engine.resolve_placement(True)
    engine.draw()
    with pytest.raises(InvalidAction):
        engine.draw()
    with pytest.raises(InvalidAction):
        engine.resolve_placement(True)
    engine.reveal()
    with pytest.raises(InvalidAction):
        engine.reveal()
    with pytest.raises(InvalidAction):
        engine.skip()
    assert engine.phase == Phase.REVEALED


def test_reaching_win_score_freezes_the_game(engine):
    engine.players[0].score = 9
    track = engine.draw()
    engine.reveal()
    engine.resolve_placement(True)

    snap = engine.snapshot()
    assert snap.winner == 'A'
    assert snap.phase == Phase.WON
    assert snap.active_player_index == 0
    assert snap.current_track == track

    for call in (engine.draw, engine.reveal, engine.skip,
                 lambda: engine.check_year_guess('1999'),
                 lambda: engine.resolve_placement(True),
                 lambda: engine.adjust_tokens(0, 1)):
        with pytest.raises(InvalidAction):
            call()
    assert engine.snapshot() == snap


def test_wrong_placement_never_wins(engine):
    engine.players[0].score = 10
    _play_round(engine, correct=False)
    assert engine.winner is None
    assert engine.active_player_index == 1


def test_custom_win_score(three_tracks):
    engine = _engine(three_tracks, win_score=2)
    _play_round(engine)
    _play_round(engine)
    _play_round(engine)
    assert engine.winner == 'A'
    assert engine.players[0].score == 2


def test_new_game_replaces_everything(engine, three_tracks):
    engine.players[0].score = 9
    _play_round(engine)
    assert engine.winner == 'A'

    engine.new_game(PlayerConfig(names=('C', 'D', 'E'), starting_tokens=1))
    snap = engine.snapshot()
    assert snap.phase == Phase.IDLE
    assert snap.winner is None
    assert snap.active_player_index == 0
    assert [(p.name, p.score, p.tokens) for p in snap.players] == [('C', 0, 1), ('D', 0, 1), ('E', 0, 1)]
    assert sorted(t.id for t in engine.deck.queue) == sorted(t.id for t in three_tracks)
    assert engine.deck.used == []


def test_new_game_defaults_to_current_roster(engine):
    engine.adjust_tokens(1, 4)
    engine.new_game()
    assert [(p.name, p.tokens) for p in engine.players] == [('A', 3), ('B', 3)]


def test_rejected_new_game_keeps_current_game(engine):
    engine.draw()
    with pytest.raises(InvalidSetup):
        engine.new_game(PlayerConfig(names=('Solo',), starting_tokens=3))
    assert engine.phase == Phase.PLAYING


def test_snapshot_is_detached(engine):
    snap = engine.snapshot()
    snap.players[0].tokens = 99
    assert engine.players[0].tokens == 3


def test_same_seed_same_deck(three_tracks):
    first = _engine(three_tracks, rng=random.Random(42))
    second = _engine(three_tracks, rng=random.Random(42))
    assert [_play_round(first).id for _ in range(3)] == [_play_round(second).id for _ in range(3)]


@pytest.mark.parametrize('names, tokens', [
    (['A'], 3),
    (['A', '   '], 3),
    ([f'P{i}' for i in range(11)], 3),
    (['A', 'A'], 3),
    (['A', 'B' * 21], 3),
    (['A', 'B'], 0),
    (['A', 'B'], 6),
    (['A', 'B'], True),
    (['A', 'B'], '3'),
    ('AB', 3),
])
def test_invalid_setup(names, tokens, three_tracks):
    with pytest.raises(InvalidSetup):
        GameEngine(three_tracks, PlayerConfig(names=names, starting_tokens=tokens))


def test_setup_trims_and_drops_blank_names():
    config = validate_player_config([' Ann ', '', 'Bo', '  '], 5)
    assert config.names == ('Ann', 'Bo')
    assert config.starting_tokens == 5


def test_duplicate_track_ids_are_dealt_once():
    twin = make_track('t1', '1999-01-01')
    engine = _engine([twin, make_track('t1', '1999-01-01'), make_track('t2', '2005')])
    assert engine.deck.remaining == 2
    assert sorted([_play_round(engine, correct=False).id for _ in range(2)]) == ['t1', 't2']


@pytest.mark.parametrize('result', ['false', 1, None])
def test_resolve_requires_a_boolean(engine, result):
    engine.draw()
    engine.reveal()
    with pytest.raises(InvalidAction):
        engine.resolve_placement(result)
    assert engine.phase == Phase.REVEALED
    assert engine.players[0].score == 0
    assert engine.active_player_index == 0
