import pytest

from Darkroller.rules.dice import DiceRNG, RecordingRNG, ScriptedRNG, ScriptExhaustedError
from Darkroller.rules.engine import CodRuleset
from Darkroller.rules.types import RollRequest


def test_d10_in_range():
    rng = DiceRNG()
    for _ in range(200):
        assert 1 <= rng.d10() <= 10


def test_seeded_rng_is_reproducible():
    a = DiceRNG(seed=42)
    b = DiceRNG(seed=42)
    assert [a.d10() for _ in range(20)] == [b.d10() for _ in range(20)]


def test_scripted_rng_replays_then_exhausts():
    rng = ScriptedRNG([3, 10])
    assert rng.d10() == 3
    assert rng.remaining == 1
    assert rng.d10() == 10
    with pytest.raises(ScriptExhaustedError):
        rng.d10()


def test_recording_rng_keeps_draws():
    rec = RecordingRNG(ScriptedRNG([4, 5, 6]))
    assert [rec.d10(), rec.d10()] == [4, 5]
    assert rec.draws == [4, 5]
    assert [rec.replay().d10(), rec.replay().d10()] == [4, 4]


def test_ruleset_records_last_draws():
    rs = CodRuleset(rng=ScriptedRNG([10, 2, 7, 1]))
    res = rs.roll_pool(RollRequest(pool_size=2))
    assert res.values == [10, 2, 7]
    assert rs.last_draws == [10, 2, 7]


def test_ruleset_records_draws_even_when_roll_fails():
    rs = CodRuleset(rng=ScriptedRNG([10, 10]), max_explosions=1)
    with pytest.raises(ScriptExhaustedError):
        rs.roll_pool(RollRequest(pool_size=3))
    assert rs.last_draws == [10, 10]


def test_seeded_ruleset_is_deterministic():
    req = RollRequest(pool_size=8, nine_again=True)
    assert CodRuleset(seed=7).roll_pool(req) == CodRuleset(seed=7).roll_pool(req)
