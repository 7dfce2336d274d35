from __future__ import annotations

import pytest

from netpick.errors import NoReachableServersError
from netpick.models import ProbeResult, ServerClass
from netpick.scoring import quality_score, score_candidates, select_servers


@pytest.fixture
def reference_set(make_candidate):
    regional = make_candidate("regional-a", ServerClass.REGIONAL, distance_km=15, name="RegionalA")
    global_cdn = make_candidate("global-cdn", ServerClass.GLOBAL, distance_km=5000, name="GlobalCDN")
    backup = make_candidate("backup", ServerClass.BACKUP, distance_km=2000, name="Backup")
    probes = {
        "regional-a": ProbeResult("regional-a", success=True, latency_ms=8.0),
        "global-cdn": ProbeResult("global-cdn", success=True, latency_ms=30.0),
        "backup": ProbeResult("backup", success=True, latency_ms=50.0),
    }
    return [backup, global_cdn, regional], probes


def test_reference_scores_are_ordered(reference_set) -> None:
    candidates, probes = reference_set
    scores = {s.candidate.name: s.quality for s in score_candidates(candidates, probes)}

    assert scores["RegionalA"] == pytest.approx(10000 / 9)
    assert scores["GlobalCDN"] == pytest.approx(5000 / 80)
    assert scores["Backup"] == pytest.approx(3000 / 70)
    assert scores["RegionalA"] > scores["GlobalCDN"] > scores["Backup"]


def test_reference_selection_order(reference_set) -> None:
    candidates, probes = reference_set
    selected = select_servers(score_candidates(candidates, probes), max_count=3)

    assert [s.name for s in selected] == ["RegionalA", "GlobalCDN", "Backup"]


def test_score_is_monotonic() -> None:
    base = quality_score(1.0, 500, 20)
    assert quality_score(1.0, 500, 40) < base
    assert quality_score(1.0, 900, 20) < base
    assert quality_score(0.5, 500, 20) < base


def test_penalties_have_a_floor() -> None:
    assert quality_score(1.0, 0.0, 0.0) == pytest.approx(5000.0)
    assert quality_score(1.0, 50.0, 0.5) == quality_score(1.0, 0.0, 1.0)


def test_only_reachable_candidates_are_returned(make_candidate) -> None:
    candidates = [make_candidate(f"s{i}", distance_km=100 * i) for i in range(5)]
    probes = {
        "s0": ProbeResult("s0", success=False),
        "s1": ProbeResult("s1", success=True, latency_ms=12.0),
        "s2": ProbeResult("s2", success=False),
        "s3": ProbeResult("s3", success=True, latency_ms=9.0),
    }

    selected = select_servers(score_candidates(candidates, probes), max_count=3)

    assert sorted(s.candidate.id for s in selected) == ["s1", "s3"]


def test_no_reachable_candidates_is_fatal(make_candidate) -> None:
    candidates = [make_candidate("a"), make_candidate("b")]
    probes = {"a": ProbeResult("a", success=False), "b": ProbeResult("b", success=False)}

    with pytest.raises(NoReachableServersError):
        select_servers(score_candidates(candidates, probes), max_count=3)


def test_ties_break_on_latency_then_name(make_candidate) -> None:
    # Identical scores: weight and penalty sums match
    fast = make_candidate("fast", distance_km=2000, name="Zulu")
    slow = make_candidate("slow", distance_km=1000, name="Alpha")
    twin = make_candidate("twin", distance_km=2000, name="Bravo")
    probes = {
        "fast": ProbeResult("fast", success=True, latency_ms=10.0),
        "slow": ProbeResult("slow", success=True, latency_ms=20.0),
        "twin": ProbeResult("twin", success=True, latency_ms=10.0),
    }

    selected = select_servers(score_candidates([fast, slow, twin], probes), max_count=3)

    assert [s.name for s in selected] == ["Bravo", "Zulu", "Alpha"]


def test_max_count_truncates(reference_set) -> None:
    candidates, probes = reference_set
    selected = select_servers(score_candidates(candidates, probes), max_count=1)
    assert [s.name for s in selected] == ["RegionalA"]


def test_max_count_must_be_positive(reference_set) -> None:
    candidates, probes = reference_set
    with pytest.raises(ValueError):
        select_servers(score_candidates(candidates, probes), max_count=0)
