from __future__ import annotations

import math


def format_number_id(value: float | None) -> str:
    """Group digits the id-ID way: ``1350000.5`` -> ``1.350.000,5``.

    At most three fraction digits, trailing zeros dropped.
    """
    if value is None or math.isnan(value):
        return "NaN"
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text.replace(",", "X").replace(".", ",").replace("X", ".")


def format_rupiah(value: float | None) -> str:
    return f"Rp{format_number_id(value)}"


def format_percent(value: float) -> str:
    return f"{value:g}"
