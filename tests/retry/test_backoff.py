from unittest.mock import Mock

import pytest

from restwire import ExponentialBackoff, FixedBackoff, LinearBackoff


class TestFixedBackoff:
    @pytest.mark.parametrize("attempt", [0, 1, 5, 50])
    def test_constant(self, attempt: int) -> None:
        assert FixedBackoff(500).get_delay_ms(attempt) == 500


class TestLinearBackoff:
    @pytest.mark.parametrize("attempt", range(6))
    def test_increments(self, attempt: int) -> None:
        assert LinearBackoff(1000, 1000).get_delay_ms(attempt) == 1000 * (attempt + 1)

    def test_cap(self) -> None:
        backoff = LinearBackoff(1000, 1000, max_delay_ms=2500)

        assert [backoff.get_delay_ms(n) for n in range(4)] == [1000, 2000, 2500, 2500]


class TestExponentialBackoff:
    @pytest.mark.parametrize("attempt", range(6))
    def test_doubles(self, attempt: int) -> None:
        assert ExponentialBackoff(1000, 2.0).get_delay_ms(attempt) == 1000 * 2**attempt

    @pytest.mark.parametrize("attempt", range(20))
    def test_cap(self, attempt: int) -> None:
        backoff = ExponentialBackoff(1000, 2.0, max_delay_ms=5000)

        assert backoff.get_delay_ms(attempt) <= 5000

    @pytest.mark.parametrize("attempt", [1024, 1100, 100_000])
    def test_cap_holds_for_huge_attempt_numbers(self, attempt: int) -> None:
        backoff = ExponentialBackoff(1000, 2.0, max_delay_ms=5000)

        assert backoff.get_delay_ms(attempt) == 5000

    def test_jitter_with_huge_attempt_number_stays_under_cap(self) -> None:
        backoff = ExponentialBackoff(1000, 2.0, max_delay_ms=5000, jitter=True)

        assert 0 <= backoff.get_delay_ms(5000) <= 5000

    def test_full_jitter_range(self) -> None:
        backoff = ExponentialBackoff(100, 2.0, jitter=True)

        for attempt in range(4):
            uncapped = 100 * 2**attempt
            samples = [backoff.get_delay_ms(attempt) for _ in range(200)]
            assert all(0 <= sample <= uncapped for sample in samples)

    def test_jitter_applies_after_cap(self) -> None:
        backoff = ExponentialBackoff(1000, 2.0, max_delay_ms=1500, jitter=True)

        samples = [backoff.get_delay_ms(10) for _ in range(200)]

        assert all(0 <= sample <= 1500 for sample in samples)


class TestTenacityWait:
    def test_strategy_is_a_wait_callable(self) -> None:
        retry_state = Mock(attempt_number=3)

        assert LinearBackoff(100, 100)(retry_state) == pytest.approx(0.3)
