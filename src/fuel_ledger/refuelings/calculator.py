from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

CONSUMPTION_PRECISION = Decimal("0.01")


def round_half_away(value: float, precision: Decimal = CONSUMPTION_PRECISION) -> float:
    """Round to ``precision`` with halves going away from zero.

    Goes through the shortest repr of the float so that 2.675 rounds to 2.68
    rather than to the binary neighbour below it.
    """
    return float(Decimal(repr(value)).quantize(precision, rounding=ROUND_HALF_UP))


def compute_consumption(
    preceding_odometer: Optional[float],
    current_odometer: float,
    current_liters: float,
) -> Optional[float]:
    """Distance per litre since the preceding refueling.

    None for the first refueling of a vehicle and for a non-positive distance,
    which is treated as unmeasurable rather than an error.
    """
    if preceding_odometer is None:
        return None

    distance = current_odometer - preceding_odometer
    if distance <= 0:
        return None

    if current_liters <= 0:
        raise ValueError(f"liters must be positive, got {current_liters}")

    return round_half_away(distance / current_liters)
