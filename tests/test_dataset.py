import numpy as np
import pandas as pd
import pytest

from core.dataset import DatasetSnapshot, Field, coerce_fields, convert_to_json_serializable
from core.errors import InvalidInputError


def test_field_coercion():
    assert Field.coerce("year") == Field("year")
    assert Field.coerce({"id": "year", "type": "numeric"}) == Field("year", "numeric")
    assert Field.coerce({"id": 5}).id == "5"
    assert coerce_fields([Field("a"), "b"]) == [Field("a"), Field("b")]


@pytest.mark.parametrize("value", [{"type": "text"}, {"id": ""}, 3])
def test_field_without_id(value):
    with pytest.raises(InvalidInputError):
        Field.coerce(value)


def test_from_payload_validates_shape():
    snapshot = DatasetSnapshot.from_payload({
        "fields": [{"id": "a", "type": "text", "info": {"label": "A"}}, {"id": 2}],
        "records": [{"a": 1, "2": "x"}],
    })

    assert snapshot.field_ids == ["a", "2"]


@pytest.mark.parametrize("payload", [
    None,
    {"fields": [{"id": "a"}]},
    {"fields": [{"type": "text"}], "records": []},
    {"fields": [{"id": "a"}], "records": [1, 2]},
])
def test_from_payload_rejects_malformed(payload):
    with pytest.raises(InvalidInputError):
        DatasetSnapshot.from_payload(payload)


def test_from_dataframe():
    df = pd.DataFrame({
        "when": pd.to_datetime(["2020-01-01", "2020-02-01"]),
        "value": [1.0, np.nan],
        "label": ["a", "b"],
    })

    snapshot = DatasetSnapshot.from_dataframe(df)

    assert [f.type for f in snapshot.fields] == ["datetime", "numeric", "text"]
    assert snapshot.records[1]["value"] is None
    assert snapshot.records[0]["when"] == "2020-01-01T00:00:00"


def test_convert_to_json_serializable():
    converted = convert_to_json_serializable({
        "n": np.int64(3),
        "f": np.float32(1.5),
        "nan": float("nan"),
        "inf": float("-inf"),
        "flag": np.bool_(True),
        "arr": np.array([1, 2]),
        1: "key",
    })

    assert converted == {"n": 3, "f": 1.5, "nan": None, "inf": None, "flag": True, "arr": [1, 2], "1": "key"}

