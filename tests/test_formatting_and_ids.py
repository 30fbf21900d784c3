from __future__ import annotations

import pytest

from orderassist.utils.formatting import format_number_id, format_percent, format_rupiah
from orderassist.utils.ids import ID_ALPHABET, generate_id


@pytest.mark.parametrize(
    "value,expected",
    [
        (90000, "90.000"),
        (1500000.0, "1.500.000"),
        (1350000.5, "1.350.000,5"),
        (999, "999"),
        (0, "0"),
        (12.3456, "12,346"),
    ],
)
def test_format_number_id(value, expected):
    assert format_number_id(value) == expected


def test_format_rupiah_and_missing_values():
    assert format_rupiah(90000) == "Rp90.000"
    assert format_rupiah(None) == "RpNaN"
    assert format_rupiah(float("nan")) == "RpNaN"


def test_format_percent_drops_trailing_zero():
    assert format_percent(10.0) == "10"
    assert format_percent(12.5) == "12.5"


def test_generate_id_shape():
    ids = {generate_id() for _ in range(50)}

    assert all(len(value) == 8 for value in ids)
    assert all(set(value) <= set(ID_ALPHABET) for value in ids)
    assert len(ids) > 1
