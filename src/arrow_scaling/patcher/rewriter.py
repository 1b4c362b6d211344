"""Condition edits applied to copied entry points.

All helpers mutate the modifier they get; callers pass copies. New conditions
are prepended, so they are evaluated before whatever the tab already held.
"""

from arrow_scaling.engine.targets import PatchTargets
from arrow_scaling.models.constants import ComparisonOperator, ConditionTab
from arrow_scaling.models.perk import Condition, ConditionGroup, Modifier, find_group


def _ensure_group(modifier: Modifier, tab_index: int) -> ConditionGroup:
    group = find_group(modifier, tab_index)
    if group is None:
        group = ConditionGroup(tab_index=tab_index)
        modifier.condition_groups.append(group)
    return group


def strip_class_selector(modifier: Modifier) -> None:
    """Remove all weapon tab conditions."""
    modifier.condition_groups[:] = [
        group for group in modifier.condition_groups
        if group.tab_index != ConditionTab.WEAPON
    ]


def add_complement_selector(modifier: Modifier, targets: PatchTargets) -> None:
    """Restrict *modifier* to everything except arrows.

    HasKeyword(X) == 0 OR HasKeyword(X) != 0 looks trivially true, but arrows
    are not weapon records and fail every weapon tab HasKeyword check, so
    the pair is false exactly for arrows. Unarmed attacks still pass.
    """
    group = _ensure_group(modifier, ConditionTab.WEAPON)
    group.conditions[0:0] = [
        Condition.has_keyword(
            targets.neutral_keyword, ComparisonOperator.EQUAL, 0.0, is_or=True
        ),
        Condition.has_keyword(
            targets.neutral_keyword, ComparisonOperator.NOT_EQUAL, 0.0
        ),
    ]


def add_owner_only(modifier: Modifier, targets: PatchTargets) -> None:
    """Restrict *modifier* to perk owners carrying the owner keyword (the player)."""
    group = _ensure_group(modifier, ConditionTab.OWNER)
    group.conditions.insert(
        0,
        Condition.has_keyword(targets.owner_keyword, ComparisonOperator.EQUAL, 1.0),
    )


def add_actor_value_range(
    modifier: Modifier,
    actor_value: int,
    minimum: int | None,
    maximum: int | None,
) -> None:
    """Restrict *modifier* to owners with minimum <= AV < maximum.

    None means unbounded on that side. Bounds are shifted by -0.5 so that
    integral actor values compare safely as floats.
    """
    group = _ensure_group(modifier, ConditionTab.OWNER)
    if minimum is not None:
        group.conditions.insert(
            0,
            Condition.actor_value(actor_value, ComparisonOperator.GREATER_EQUAL, minimum - 0.5),
        )
    if maximum is not None:
        group.conditions.insert(
            0,
            Condition.actor_value(actor_value, ComparisonOperator.LESS, maximum - 0.5),
        )
