"""Unit tests for roll command parsing."""

import pytest

from Darkroller.roll_parser import RollParseError, parse_pool, parse_roll, split_pool_and_flags
from Darkroller.rules.types import RollRequest


class TestParsePool:
    def test_single_number(self) -> None:
        assert parse_pool("5") == 5

    def test_chance(self) -> None:
        assert parse_pool("chance") == 0

    def test_sum_with_spaces(self) -> None:
        assert parse_pool("3 + 2 - 1") == 4

    def test_sum_without_spaces(self) -> None:
        assert parse_pool("3+2-1") == 4

    def test_negative_result(self) -> None:
        assert parse_pool("2 - 5") == -3

    def test_leading_minus(self) -> None:
        assert parse_pool("-1") == -1

    def test_trailing_operator(self) -> None:
        with pytest.raises(RollParseError, match="ends with an operator"):
            parse_pool("3 +")

    @pytest.mark.parametrize("expr", ["5 - - 3", "5--3", "5+-3", "--2"])
    def test_consecutive_operators(self, expr: str) -> None:
        with pytest.raises(RollParseError, match="Two operators in a row"):
            parse_pool(expr)

    def test_missing_operator(self) -> None:
        with pytest.raises(RollParseError, match="Missing operator"):
            parse_pool("3 2")

    def test_not_a_number(self) -> None:
        with pytest.raises(RollParseError):
            parse_pool("strength")


class TestSplit:
    def test_pool_and_flags(self) -> None:
        assert split_pool_and_flags("3 + 2 rote 9again") == ("3 + 2", ["rote", "9again"])

    def test_flags_after_pool_only(self) -> None:
        with pytest.raises(RollParseError, match="after modifiers"):
            split_pool_and_flags("rote 5")

    def test_empty(self) -> None:
        with pytest.raises(RollParseError):
            split_pool_and_flags("   ")

    def test_flags_without_pool(self) -> None:
        with pytest.raises(RollParseError, match="Missing dice pool"):
            split_pool_and_flags("9again")


class TestParseRoll:
    def test_plain(self) -> None:
        assert parse_roll("5") == RollRequest(pool_size=5)

    def test_case_insensitive_flags(self) -> None:
        assert parse_roll("10 9AGAIN Rote") == RollRequest(pool_size=10, nine_again=True, rote=True)

    def test_eight_again_alias(self) -> None:
        assert parse_roll("4 eight-again").eight_again

    def test_no_ten_again(self) -> None:
        req = parse_roll("4 no10again")
        assert req.no_explode
        assert req.explosion_threshold is None

    def test_ten_again_is_default(self) -> None:
        assert parse_roll("4 10again") == RollRequest(pool_size=4)

    def test_chance_keyword(self) -> None:
        req = parse_roll("chance")
        assert req.pool_size == 0
        assert req.is_chance_die

    def test_negative_sum_is_chance_die(self) -> None:
        assert parse_roll("1 - 3 rote").is_chance_die

    def test_chance_cannot_be_summed(self) -> None:
        with pytest.raises(RollParseError, match="cannot be combined"):
            parse_roll("chance + 2")

    def test_unknown_flag(self) -> None:
        with pytest.raises(RollParseError, match="Unknown modifier"):
            parse_roll("5 7again")

    def test_too_many_dice(self) -> None:
        with pytest.raises(RollParseError, match="Too many dice"):
            parse_roll("101")

    def test_custom_max_pool(self) -> None:
        assert parse_roll("20", max_pool=20).pool_size == 20
        with pytest.raises(RollParseError):
            parse_roll("21", max_pool=20)

    def test_both_again_flags_kept(self) -> None:
        req = parse_roll("6 9again 8again")
        assert req.nine_again and req.eight_again
        assert req.explosion_threshold == 8
