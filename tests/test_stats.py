from __future__ import annotations

import pytest

from netpick.stats import compute_stats


def test_empty_values() -> None:
    stats = compute_stats([])
    assert stats.avg == 0.0 and stats.jitter == 0.0


def test_summary() -> None:
    stats = compute_stats([10.0, 14.0, 12.0])
    assert stats.min == 10.0
    assert stats.max == 14.0
    assert stats.avg == pytest.approx(12.0)
    assert stats.median == pytest.approx(12.0)
    assert stats.jitter == pytest.approx(3.0)


def test_single_value_has_no_jitter() -> None:
    stats = compute_stats([7.5])
    assert stats.median == 7.5
    assert stats.jitter == 0.0
