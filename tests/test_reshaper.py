import copy
from datetime import datetime

import pytest

from execution.reshaper import ALL_DATA_SERIES, DEFAULT_SERIES, reshape_dataset


def test_single_series_sorted_by_x():
    records = [{"x": "3", "y": "30"}, {"x": "1", "y": "10"}, {"x": "2", "y": "na"}]

    dataset = reshape_dataset(records, "x", "y")

    assert list(dataset) == [ALL_DATA_SERIES]
    assert dataset[ALL_DATA_SERIES] == [
        {"x": "1", "y": 10.0},
        {"x": "2", "y": "na"},
        {"x": "3", "y": 30.0},
    ]


def test_series_split(resale_records):
    dataset = reshape_dataset(resale_records, "year", "resale_price", "town")

    assert sorted(dataset) == ["Bedok", "Bishan", "Clementi", "Tampines"]
    for points in dataset.values():
        assert [point["year"] for point in points] == [2019, 2020, 2021]
        assert set(points[0]) == {"year", "resale_price"}


def test_missing_series_values_use_default():
    records = [{"x": 1, "y": 1, "s": None}, {"x": 2, "y": 2, "s": ""}, {"x": 3, "y": 3, "s": 1.0}]

    dataset = reshape_dataset(records, "x", "y", "s")

    assert sorted(dataset) == ["1", DEFAULT_SERIES]
    assert len(dataset[DEFAULT_SERIES]) == 2


def test_sum_preserves_totals(resale_records):
    dataset = reshape_dataset(resale_records, "year", "resale_price", sum_data=True)

    assert list(dataset) == [DEFAULT_SERIES]
    points = dataset[DEFAULT_SERIES]
    assert [point["year"] for point in points] == [2019, 2020, 2021]
    assert sum(point["resale_price"] for point in points) == sum(r["resale_price"] for r in resale_records)


def test_sum_per_series():
    records = [
        {"month": "2020-01", "flat": "3 ROOM", "sold": "2"},
        {"month": "2020-01", "flat": "3 ROOM", "sold": "3"},
        {"month": "2020-01", "flat": "4 ROOM", "sold": "7"},
        {"month": "2020-02", "flat": "3 ROOM", "sold": "1"},
    ]

    dataset = reshape_dataset(records, "month", "sold", "flat", sum_data=True)

    assert [point["sold"] for point in dataset["3 ROOM"]] == [5.0, 1.0]
    assert [point["sold"] for point in dataset["4 ROOM"]] == [7.0]


def test_sum_ignores_text_placeholders():
    records = [{"x": 1, "y": "na"}, {"x": 1, "y": "5"}, {"x": 1, "y": "-"}]

    dataset = reshape_dataset(records, "x", "y", sum_data=True)

    assert dataset[DEFAULT_SERIES] == [{"x": 1, "y": 5.0}]


def test_sum_is_idempotent(resale_records):
    once = reshape_dataset(resale_records, "year", "resale_price", sum_data=True)
    again = reshape_dataset(once[DEFAULT_SERIES], "year", "resale_price", sum_data=True)

    assert again == once


def test_date_x_becomes_timestamps():
    records = [{"month": "2020-02", "v": 2}, {"month": "2020-01", "v": 1}]

    points = reshape_dataset(records, "month", "v")[ALL_DATA_SERIES]

    assert [point["month"] for point in points] == [
        datetime(2020, 1, 1).timestamp() * 1000,
        datetime(2020, 2, 1).timestamp() * 1000,
    ]


def test_numeric_x_is_not_converted():
    records = [{"year": "2021", "v": 1}, {"year": "2020", "v": 2}]

    points = reshape_dataset(records, "year", "v")[ALL_DATA_SERIES]

    assert [point["year"] for point in points] == ["2020", "2021"]


def test_input_records_untouched():
    records = [{"month": "2020-02", "v": "2"}, {"month": "2020-01", "v": "1"}]
    original = copy.deepcopy(records)

    reshape_dataset(records, "month", "v", sum_data=True)

    assert records == original


@pytest.mark.parametrize("sum_data", [False, True])
def test_empty_records(sum_data):
    assert reshape_dataset([], "x", "y", sum_data=sum_data) == ({} if sum_data else {ALL_DATA_SERIES: []})
