from itertools import permutations, product

from analysis.compare import compare_values, sort_by, sort_key
from analysis.dates import parse_date


MIXED = [None, float("nan"), 3, "10", 2.5, "-1", "2020-01", "2019-06-15", 1e12,
         "apple", "Banana", "", "zebra", "1 March 2020"]


def test_antisymmetric():
    for a, b in product(MIXED, repeat=2):
        assert compare_values(a, b) == -compare_values(b, a)


def test_transitive():
    for a, b, c in permutations(MIXED, 3):
        if compare_values(a, b) <= 0 and compare_values(b, c) <= 0:
            assert compare_values(a, c) <= 0


def test_nulls_first_then_numbers_then_text():
    ordered = sort_by(["b", 2, None, "1", "a"], key=lambda v: v)
    assert ordered[0] is None
    assert ordered[1:3] == ["1", 2]
    assert set(ordered[3:]) == {"a", "b"}


def test_numeric_text_orders_numerically():
    assert sort_by(["10", "9", "100"], key=lambda v: v) == ["9", "10", "100"]


def test_dates_order_chronologically():
    values = ["2020-03", "2019-12", "2020-01-15"]
    assert sort_by(values, key=lambda v: v) == ["2019-12", "2020-01-15", "2020-03"]


def test_dates_share_the_numeric_timeline():
    timestamp = parse_date("2020-01")
    assert compare_values("2020-01", timestamp) == 0
    assert compare_values("2020-01", timestamp + 1) == -1


def test_sort_is_stable():
    items = [{"x": 1, "i": 0}, {"x": "1", "i": 1}, {"x": 1.0, "i": 2}]
    assert [item["i"] for item in sort_by(items, key=lambda item: item["x"])] == [0, 1, 2]


def test_sort_key_bands():
    assert sort_key(None)[0] < sort_key(-5)[0] < sort_key("text")[0]
