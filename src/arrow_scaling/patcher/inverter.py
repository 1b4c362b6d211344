"""Turn a bow damage entry point into an arrow-only equivalent.

The patcher hands over two copies of the same entry point:

  - scale_all: no weapon conditions, applies to bows *and* arrows
  - scale_complement: applies to everything except arrows

invert() rewrites their values so that scale_complement cancels scale_all
everywhere but on arrows. The net result is the original effect applied to
arrows only, scaled by the scaling factor:

    ADD d:       +d*SF on everything, -d*SF on non-arrows
    MULTIPLY m:  *m^SF on everything, *1/m on non-arrows
"""

from __future__ import annotations

import logging

from arrow_scaling.engine.settings import EmulationSettings
from arrow_scaling.models.constants import ActorValueModification, ValueModification
from arrow_scaling.models.perk import (
    ActorValueModifier,
    Modifier,
    ValueModifier,
    describe_modifier,
)
from arrow_scaling.patcher.bounds import ensure_bounds, is_zero, power, reciprocal
from arrow_scaling.patcher.emulation import emulate


logger = logging.getLogger(__name__)


def _invert_value(
    scale_all: ValueModifier,
    scale_complement: ValueModifier,
    scaling_factor: float,
) -> list[Modifier] | None:
    if scale_complement.modification == ValueModification.ADD:
        if is_zero(scale_complement.value):
            # There is no damage modification
            return None
        scale_all.value = ensure_bounds(scale_all.value * scaling_factor)
        scale_complement.value = ensure_bounds(-scale_complement.value * scaling_factor)
        return [scale_all, scale_complement]

    if scale_complement.modification == ValueModification.MULTIPLY:
        scale_all.value = ensure_bounds(power(scale_all.value, scaling_factor))
        scale_complement.value = ensure_bounds(reciprocal(scale_complement.value))
        return [scale_all, scale_complement]

    return None


def _invert_actor_value(
    scale_all: ActorValueModifier,
    scale_complement: ActorValueModifier,
    scaling_factor: float,
    emulation: EmulationSettings,
) -> list[Modifier] | None:
    modification = scale_complement.modification

    if modification == ActorValueModification.ADD_SCALED:
        if is_zero(scale_complement.value):
            return None
        scale_all.value = ensure_bounds(scale_all.value * scaling_factor)
        scale_complement.value = ensure_bounds(-scale_complement.value * scaling_factor)
        return [scale_all, scale_complement]

    if modification == ActorValueModification.MULTIPLY_ONE_PLUS_SCALED:
        if is_zero(scale_complement.value):
            return None
    elif modification != ActorValueModification.MULTIPLY_SCALED:
        return None

    if not emulation.enabled:
        logger.debug("Actor value emulation disabled, skipping %s", describe_modifier(scale_complement))
        return None
    return list(emulate(scale_all, scale_complement, scaling_factor, emulation))


def invert(
    scale_all: Modifier,
    scale_complement: Modifier,
    scaling_factor: float,
    emulation: EmulationSettings,
) -> list[Modifier] | None:
    """Compute the entry points to add for an arrow-only copy of an effect.

    Both arguments are mutated and may be part of the result. Returns None if
    the effect's function type isn't supported; an empty list means the
    effect is supported but emulation found nothing worth adding.
    """
    if isinstance(scale_all, ValueModifier) and isinstance(scale_complement, ValueModifier):
        return _invert_value(scale_all, scale_complement, scaling_factor)
    if isinstance(scale_all, ActorValueModifier) and isinstance(scale_complement, ActorValueModifier):
        return _invert_actor_value(scale_all, scale_complement, scaling_factor, emulation)
    return None
