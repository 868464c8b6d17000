from hypothesis import given
from hypothesis import strategies as st

from Darkroller.rules.dice import DiceRNG, RecordingRNG
from Darkroller.rules.pool import resolve
from Darkroller.rules.types import DieOrigin, RollRequest

seeds = st.integers(min_value=0, max_value=2**32 - 1)
pools = st.integers(min_value=1, max_value=30)
requests = st.builds(
    RollRequest,
    pool_size=st.integers(min_value=-5, max_value=30),
    rote=st.booleans(),
    nine_again=st.booleans(),
    eight_again=st.booleans(),
    no_explode=st.booleans(),
)


@given(requests, seeds)
def test_result_invariants(req: RollRequest, seed: int):
    res = resolve(req, DiceRNG(seed))

    assert res.dice
    assert all(1 <= d.value <= 10 for d in res.dice)
    threshold = 10 if res.is_chance_die else 8
    assert res.successes == sum(1 for d in res.dice if d.value >= threshold)
    assert res.exploded_count == sum(1 for d in res.dice if d.origin is DieOrigin.EXPLOSION)
    assert res.is_chance_die == (req.pool_size <= 0)
    if not res.is_chance_die:
        assert not res.is_botch
    # Children always come after the die that spawned them
    for i, d in enumerate(res.dice):
        if d.origin is DieOrigin.INITIAL:
            assert d.trigger is None
        else:
            assert d.trigger is not None and d.trigger < i


@given(pools, seeds)
def test_plain_pool_without_explosion_keeps_its_size(pool: int, seed: int):
    res = resolve(RollRequest(pool_size=pool, no_explode=True), DiceRNG(seed))
    assert len(res.dice) == pool
    assert res.successes == sum(1 for v in res.values if v >= 8)


@given(st.integers(min_value=-10, max_value=0), seeds)
def test_chance_die_rules(pool: int, seed: int):
    res = resolve(RollRequest(pool_size=pool), DiceRNG(seed))
    (die,) = res.dice
    assert res.is_botch == (die.value == 1)
    assert res.successes == (1 if die.value == 10 else 0)


@given(pools, seeds)
def test_rote_adds_one_die_per_initial_failure(pool: int, seed: int):
    res = resolve(RollRequest(pool_size=pool, rote=True, no_explode=True), DiceRNG(seed))
    initial = res.dice[:pool]
    failures = sum(1 for d in initial if d.value < 8)
    rerolls = [d for d in res.dice if d.origin is DieOrigin.ROTE_REROLL]
    assert len(rerolls) == failures
    assert len(res.dice) == 2 * failures + (pool - failures)
    assert [d.trigger for d in rerolls] == [i for i, d in enumerate(initial) if d.value < 8]


@given(pools, st.booleans(), seeds)
def test_nine_again_spawns_exactly_one_die_per_nine_or_ten(pool: int, rote: bool, seed: int):
    res = resolve(RollRequest(pool_size=pool, rote=rote, nine_again=True), DiceRNG(seed))
    children: dict[int, int] = {}
    for d in res.dice:
        if d.origin is DieOrigin.EXPLOSION:
            children[d.trigger] = children.get(d.trigger, 0) + 1
    for i, d in enumerate(res.dice):
        assert children.get(i, 0) == (1 if d.value >= 9 else 0)


@given(requests, seeds)
def test_no_explode_never_explodes(req: RollRequest, seed: int):
    req = RollRequest(
        pool_size=req.pool_size,
        rote=req.rote,
        nine_again=req.nine_again,
        eight_again=req.eight_again,
        no_explode=True,
    )
    assert resolve(req, DiceRNG(seed)).exploded_count == 0


@given(requests, seeds)
def test_replaying_recorded_draws_reproduces_the_result(req: RollRequest, seed: int):
    recorder = RecordingRNG(DiceRNG(seed))
    first = resolve(req, recorder)
    assert resolve(req, recorder.replay()) == first
