import os
import sys

import pytest

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


@pytest.fixture
def resale_records():
    """Three years of prices for four towns."""
    towns = ["Bedok", "Bishan", "Clementi", "Tampines"]
    records = []
    for offset, year in enumerate([2019, 2020, 2021]):
        for index, town in enumerate(towns):
            records.append({
                "year": year,
                "town": town,
                "resale_price": 400000 + offset * 10000 + index * 2500,
            })
    return records


@pytest.fixture
def resale_fields():
    return [{"id": "year"}, {"id": "town"}, {"id": "resale_price"}]
