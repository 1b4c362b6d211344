"""Static evaluation of weapon tab conditions.

The question answered here is "does this condition list hold for every bow,
no matter the situation?" Only a proof counts: conditions we can't reason
about are treated as possibly false, which keeps the entry point out of the
patch instead of scaling arrows by something that doesn't apply to bows.

CTDA evaluation order: consecutive OR'ed conditions form a block, blocks are
AND'ed. A condition without the OR flag closes the current block, so

    A OR, B, C OR, D OR       ==  (A or B) and (C or D)
"""

from arrow_scaling.engine.targets import PatchTargets
from arrow_scaling.models.constants import (
    ComparisonOperator,
    ConditionFunction,
    ConditionTab,
    RunOnType,
)
from arrow_scaling.models.perk import Condition, ConditionGroup


def is_atomic_tautology(condition: Condition, targets: PatchTargets) -> bool:
    """True if *condition* holds for every bow.

    Only HasKeyword on the subject is understood:
      - HasKeyword(host) == 1 / != 0: bows have the host keyword
      - HasKeyword(other) == 0 / != 1: unrelated keywords are assumed absent
    """
    data = condition.function
    if data.function != ConditionFunction.HAS_KEYWORD or data.run_on != RunOnType.SUBJECT:
        return False
    op = condition.operator
    value = condition.value
    if data.record == targets.host_keyword:
        return (
            (op == ComparisonOperator.EQUAL and value == 1.0)
            or (op == ComparisonOperator.NOT_EQUAL and value == 0.0)
        )
    return (
        (op == ComparisonOperator.EQUAL and value == 0.0)
        or (op == ComparisonOperator.NOT_EQUAL and value == 1.0)
    )


def or_blocks(conditions: list[Condition]) -> list[list[Condition]]:
    """Split *conditions* into OR blocks, in order."""
    blocks: list[list[Condition]] = [[]]
    for cond in conditions:
        blocks[-1].append(cond)
        if not cond.is_or:
            blocks.append([])
    if not blocks[-1]:
        blocks.pop()
    return blocks


def is_tautology_for_class(conditions: list[Condition], targets: PatchTargets) -> bool:
    """True if the condition list holds for every bow in every situation."""
    # An empty list always returns true.
    for block in or_blocks(conditions):
        if not any(is_atomic_tautology(cond, targets) for cond in block):
            return False
    return True


def affects_host_class(groups: list[ConditionGroup], targets: PatchTargets) -> bool:
    """True if the weapon tab (if any) is satisfied by every bow."""
    for group in groups:
        if group.tab_index == ConditionTab.WEAPON:
            return is_tautology_for_class(group.conditions, targets)
    return True
