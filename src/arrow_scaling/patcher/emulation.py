"""Emulation of actor value multipliers with range-gated constant multipliers.

MULTIPLY_SCALED (value *= AV * k) and MULTIPLY_ONE_PLUS_SCALED
(value *= 1 + AV * k) can't be inverted with a single entry point: the
inverse of AV * k isn't of either form. Instead the actor value axis is cut
into N segments,

    T[0] = -inf < T[1] < ... < T[N-1] < T[N] = +inf

and each segment [T[i], T[i+1]) gets a plain MULTIPLY entry point pair whose
factor is the original function evaluated at a representative value A[i].
Segment 0 covers everything below T[1] and uses A[0] = 0; the last segment is
open-ended and uses its lower threshold.
"""

from __future__ import annotations

from arrow_scaling.engine.settings import EmulationSettings
from arrow_scaling.models.constants import ActorValueModification, ValueModification
from arrow_scaling.models.perk import ActorValueModifier, ValueModifier, to_value_modifier
from arrow_scaling.patcher.bounds import ensure_bounds, is_zero, power, reciprocal
from arrow_scaling.patcher.rewriter import add_actor_value_range


def segment_count(emulation: EmulationSettings) -> int:
    return emulation.max_actor_value // emulation.accuracy + 1


def segment_thresholds(emulation: EmulationSettings) -> list[int | None]:
    """Return N+1 thresholds; None marks the unbounded ends."""
    n = segment_count(emulation)
    maximum = emulation.max_actor_value
    thresholds: list[int | None] = [None] * (n + 1)
    for i in range(1, n):
        thresholds[i] = int(round(maximum / (n - 1) * i))
    return thresholds


def representative_values(emulation: EmulationSettings) -> list[int]:
    """Actor value each segment's factor is computed at (N+1 entries)."""
    thresholds = segment_thresholds(emulation)
    n = len(thresholds) - 1
    values = [0] * (n + 1)
    for i in range(1, n):
        values[i] = thresholds[i]
    values[n] = emulation.max_actor_value
    return values


def segment_base(modification: int, actor_value: int, coefficient: float) -> float:
    if modification == ActorValueModification.MULTIPLY_ONE_PLUS_SCALED:
        return 1.0 + actor_value * coefficient
    return actor_value * coefficient


def emulate(
    scale_all: ActorValueModifier,
    scale_complement: ActorValueModifier,
    scaling_factor: float,
    emulation: EmulationSettings,
) -> list[ValueModifier]:
    """Build the segment pairs replacing an actor value multiplier.

    Returns [all_0, complement_0, all_1, complement_1, ...] for every segment
    whose factor is not 1. Segments that wouldn't change anything are left
    out, so the result may be empty.
    """
    thresholds = segment_thresholds(emulation)
    values = representative_values(emulation)
    actor_value = scale_complement.actor_value
    coefficient = scale_complement.value

    result: list[ValueModifier] = []
    for i in range(len(thresholds) - 1):
        factor = ensure_bounds(power(
            segment_base(scale_complement.modification, values[i], coefficient),
            scaling_factor,
        ))
        if is_zero(factor - 1):
            continue

        seg_all = to_value_modifier(scale_all)
        seg_complement = to_value_modifier(scale_complement)
        for seg in (seg_all, seg_complement):
            add_actor_value_range(seg, actor_value, thresholds[i], thresholds[i + 1])
            seg.modification = ValueModification.MULTIPLY
        seg_all.value = factor
        seg_complement.value = ensure_bounds(reciprocal(factor))
        result.append(seg_all)
        result.append(seg_complement)
    return result
