"""Rule-based rug pricing.

Cleaning is charged per unit of area at a rate that depends on the rug
material. Order totals are always derived from the current item rows and are
never stored.
"""
import re
from dataclasses import dataclass
from typing import Iterable, Optional

DEFAULT_RATE = 20.0

MATERIAL_RATES = {
    "Wool": 20.0,
    "Silk": 50.0,
    "Synthetic": 15.0,
    "Cotton": 20.0,
    "Blend": 15.0,
    "Unknown": 20.0,
}

# Leading decimal number, the rest of the text is ignored ("3.5m" -> 3.5)
_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass
class OrderTotals:
    """Derived money totals for one order."""
    cleaning_total: float = 0.0
    repair_total: float = 0.0
    grand_total: float = 0.0

    def to_dict(self):
        return {
            "cleaning_total": self.cleaning_total,
            "repair_total": self.repair_total,
            "grand_total": self.grand_total,
        }


def parse_measurement(value) -> Optional[float]:
    """Interpret a free-text measurement, returning None when it has no number."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER_PREFIX.match(str(value))
    if not match:
        return None
    return float(match.group(1))


def rate_for(material: Optional[str]) -> float:
    """Cleaning rate per unit area; unrecognised materials use the default."""
    if hasattr(material, "value"):
        material = material.value
    return MATERIAL_RATES.get(material, DEFAULT_RATE)


def cleaning_cost(length, width, material) -> float:
    """
    Price a rug cleaning.

    Returns 0 when either dimension is missing, non-numeric or not positive;
    such a rug is simply not priced yet.
    """
    area_l = parse_measurement(length)
    area_w = parse_measurement(width)
    if area_l is None or area_w is None or area_l <= 0 or area_w <= 0:
        return 0.0
    return round(area_l * area_w * rate_for(material), 2)


def order_totals(items: Iterable) -> OrderTotals:
    """Sum cleaning and repair costs over an order's items."""
    cleaning_total = 0.0
    repair_total = 0.0
    for item in items:
        cleaning_total += item.cleaning_cost or 0.0
        repair_total += item.repair_cost or 0.0
    cleaning_total = round(cleaning_total, 2)
    repair_total = round(repair_total, 2)
    return OrderTotals(
        cleaning_total=cleaning_total,
        repair_total=repair_total,
        grand_total=round(cleaning_total + repair_total, 2),
    )
