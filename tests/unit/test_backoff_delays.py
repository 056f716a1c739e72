from __future__ import annotations

import pytest

from safetry.backoff import compute_delay
from safetry.config import BackoffConfig

pytestmark = pytest.mark.unit


def _delays(config: BackoffConfig, n: int, **kwargs) -> list[float]:
    return [compute_delay(config, attempt, **kwargs) for attempt in range(1, n + 1)]


def test_linear_backoff_grows_by_base() -> None:
    assert _delays(BackoffConfig(base_delay_ms=100), 4) == [100, 200, 300, 400]


def test_exponential_backoff_doubles() -> None:
    config = BackoffConfig(base_delay_ms=100, exponential=True)
    assert _delays(config, 5) == [100, 200, 400, 800, 1600]


@pytest.mark.parametrize(
    ("exponential", "expected"),
    [
        (False, [100, 200, 250, 250]),
        (True, [100, 200, 250, 250]),
    ],
)
def test_delays_are_capped_by_max_delay(exponential: bool, expected: list[float]) -> None:
    config = BackoffConfig(base_delay_ms=100, exponential=exponential, max_delay_ms=250)
    assert _delays(config, 4) == expected


def test_default_cap_is_thirty_seconds() -> None:
    config = BackoffConfig(base_delay_ms=10_000, exponential=True)
    assert _delays(config, 4) == [10_000, 20_000, 30_000, 30_000]


def test_default_cap_can_be_supplied() -> None:
    config = BackoffConfig(base_delay_ms=10_000)
    assert compute_delay(config, 3, default_max_delay_ms=15_000) == 15_000


def test_no_base_delay_means_no_pause() -> None:
    assert compute_delay(BackoffConfig(), 3) == 0.0
    assert compute_delay(BackoffConfig(base_delay_ms=0, jitter=True), 1) == 0.0


def test_jitter_is_added_after_the_cap() -> None:
    config = BackoffConfig(base_delay_ms=500, max_delay_ms=500, jitter=True)

    delay = compute_delay(config, 3, rng=lambda: 0.5)

    assert delay == 500 + 0.5 * 1000


def test_jitter_span_is_configurable() -> None:
    config = BackoffConfig(base_delay_ms=100, jitter=True)
    assert compute_delay(config, 1, rng=lambda: 0.25, jitter_ms=200) == 150


def test_jitter_uses_random_when_no_rng_given(monkeypatch) -> None:
    monkeypatch.setattr("safetry.backoff.random.random", lambda: 0.1)
    config = BackoffConfig(base_delay_ms=100, jitter=True)
    assert compute_delay(config, 1) == pytest.approx(200)
