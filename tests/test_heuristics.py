# tests/test_heuristics.py
import json
import random

import pytest

from democracy_lens.heuristics import (
    BiasTable,
    heuristic_political_score,
    load_bias_table,
    source_based_score,
    source_type_for,
)

EXACT = BiasTable(jitter=0.0)


def test_known_source_uses_table_value():
    assert source_based_score("Fox News", "Budget vote", "Lawmakers debate", table=EXACT) == pytest.approx(7.2)
    assert source_based_score("MSNBC", "Budget vote", "", table=EXACT) == pytest.approx(-7.8)

def test_unknown_source_starts_at_zero():
    assert source_based_score("Some Blog", "Weather today", "", table=EXACT) == 0.0

def test_keywords_nudge_each_way():
    left = source_based_score("Reuters", "Climate change and equity", "", table=EXACT)
    right = source_based_score("Reuters", "Tax cuts and family values", "", table=EXACT)
    assert left == pytest.approx(0.3 - 1.0)
    assert right == pytest.approx(0.3 + 1.0)

def test_repeated_keyword_counts_once():
    once = heuristic_political_score("", "freedom", table=EXACT)
    many = heuristic_political_score("", "freedom freedom freedom", table=EXACT)
    assert once == many == pytest.approx(0.5)

def test_matching_is_case_insensitive():
    assert source_based_score("", "PROGRESSIVE Agenda", "", table=EXACT) == pytest.approx(-0.5)

def test_result_is_clamped():
    table = BiasTable(source_bias={"Extreme": 9.9}, jitter=0.0)
    text = "traditional freedom liberty tax cuts small government family values"
    assert heuristic_political_score("Extreme", text, table=table) == 10.0
    table = BiasTable(source_bias={"Extreme": -9.9}, jitter=0.0)
    text = "progressive equity climate change social justice diversity inclusion"
    assert heuristic_political_score("Extreme", text, table=table) == -10.0

def test_scores_always_in_range_with_jitter():
    rng = random.Random(1234)
    sources = ["Breitbart", "MSNBC", "CNN", "Reuters", "unknown"]
    texts = ["", "freedom liberty tax cuts", "equity inclusion diversity"]
    for _ in range(200):
        s = heuristic_political_score(rng.choice(sources), rng.choice(texts), rng=rng)
        assert -10.0 <= s <= 10.0

def test_jitter_stays_within_one_point():
    rng = random.Random(99)
    for _ in range(50):
        s = heuristic_political_score("BBC", "", rng=rng)
        assert -2.2 <= s <= -0.2

@pytest.mark.parametrize("score,expected", [
    (-10, "left"), (-3, "left"), (-2.99, "center"), (0, "center"),
    (2.99, "center"), (3, "right"), (10, "right"), (None, "center"),
])
def test_source_type_thresholds(score, expected):
    assert source_type_for(score) == expected

def test_load_bias_table_overrides_and_keeps_defaults(tmp_path):
    path = tmp_path / "bias.json"
    path.write_text(json.dumps({"source_bias": {"Local Gazette": 2.0}, "jitter": 0}))
    table = load_bias_table(path)
    assert table.source_bias == {"Local Gazette": 2.0}
    assert "freedom" in table.right_keywords
    assert heuristic_political_score("Local Gazette", "freedom", table=table) == pytest.approx(2.5)
