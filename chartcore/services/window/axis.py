"""
Y-axis tick label generation.

Indicator panels use "nice" steps (1, 2 or 5 times a power of ten);
the price panel uses evenly spaced grid lines.
"""

import math

from chartcore.services.base import InvalidParameterError

NICE_MULTIPLIERS = (1.0, 2.0, 5.0, 10.0)


def nice_step(value_range: float, target_steps: int = 4, reference: float = 0.0) -> float:
    """
    Smallest 1/2/5/10 x 10^k step that splits `value_range` into at most
    `target_steps` intervals.

    A zero range has no scale of its own, so the magnitude of `reference`
    (the value being labelled) is used, or 1.0 when that is zero too.
    """
    if target_steps <= 0:
        raise InvalidParameterError(f"target_steps must be positive, got {target_steps}")
    if not math.isfinite(value_range) or not math.isfinite(reference):
        raise InvalidParameterError("axis range must be finite")

    if value_range <= 0:
        if reference == 0:
            return 1.0
        return 10.0 ** math.floor(math.log10(abs(reference)))

    rough = value_range / target_steps
    magnitude = 10.0 ** math.floor(math.log10(rough))
    for multiplier in NICE_MULTIPLIERS:
        if multiplier * magnitude >= rough:
            return multiplier * magnitude
    return magnitude * 10


def _decimals(step: float) -> int:
    return max(0, -math.floor(math.log10(step)))


def axis_labels(min_value: float, max_value: float, target_steps: int = 4) -> list[float]:
    """
    Multiples of a nice step between min_value and max_value.

    Always returns at least two labels: when fewer fall inside the range,
    one step is added below (if the first label sits above min_value) or
    above.
    """
    if min_value > max_value:
        raise InvalidParameterError(f"axis min {min_value} is above max {max_value}")

    step = nice_step(
        max_value - min_value,
        target_steps,
        reference=max(abs(min_value), abs(max_value)),
    )
    decimals = _decimals(step)
    eps = step * 1e-9

    first = math.ceil((min_value - eps) / step)
    last = math.floor((max_value + eps) / step)
    labels = [round(k * step, decimals) for k in range(first, last + 1)]

    while len(labels) < 2:
        if not labels:
            labels.append(round(math.floor(min_value / step) * step, decimals))
        elif labels[0] > min_value:
            labels.insert(0, round(labels[0] - step, decimals))
        else:
            labels.append(round(labels[-1] + step, decimals))

    return labels


def linear_labels(min_value: float, max_value: float, count: int = 4) -> list[float]:
    """`count` evenly spaced grid values from min to max; none when count <= 2."""
    if count <= 2:
        return []
    if min_value > max_value:
        raise InvalidParameterError(f"axis min {min_value} is above max {max_value}")

    step = (max_value - min_value) / (count - 1)
    return [min_value + i * step for i in range(count - 1)] + [max_value]
