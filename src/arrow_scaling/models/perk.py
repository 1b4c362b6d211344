"""Perk data model: conditions, condition tabs, and entry point effects.

Entry point effects come in two shapes that share their bookkeeping fields
(entry point, priority, rank, conditions) but not their payload:

  - ValueModifier: works on the raw value (set/add/multiply by a constant)
  - ActorValueModifier: works with a coefficient scaled by an owner actor value

They are kept as two sibling dataclasses; code that needs to tell them apart
checks with isinstance(). Anything else a perk can carry is a RawEffect.
"""

import copy
from dataclasses import dataclass, field

from arrow_scaling.models.constants import (
    ACTOR_VALUE_NAMES,
    ActorValueModification,
    ConditionFunction,
    RunOnType,
    ValueModification,
)


@dataclass(slots=True)
class FunctionData:
    """The queried game fact of a condition.

    Examples: HasKeyword(WeapTypeBow), GetActorValue(Archery)
    """
    function: int                # ConditionFunction index
    run_on: int = RunOnType.SUBJECT
    param1: int | None = None    # numeric parameter (e.g. an ActorValue)
    record: str | None = None    # referenced record, by editor ID


@dataclass(slots=True)
class Condition:
    """A single CTDA condition."""
    operator: int                # ComparisonOperator
    value: float
    function: FunctionData
    is_or: bool = False          # True if OR'ed with the next condition

    @classmethod
    def has_keyword(
        cls,
        keyword: str,
        operator: int,
        value: float,
        is_or: bool = False,
    ) -> "Condition":
        return cls(
            operator=operator,
            value=value,
            function=FunctionData(
                function=ConditionFunction.HAS_KEYWORD,
                run_on=RunOnType.SUBJECT,
                record=keyword,
            ),
            is_or=is_or,
        )

    @classmethod
    def actor_value(cls, actor_value: int, operator: int, value: float) -> "Condition":
        return cls(
            operator=operator,
            value=value,
            function=FunctionData(
                function=ConditionFunction.GET_ACTOR_VALUE,
                run_on=RunOnType.SUBJECT,
                param1=int(actor_value),
            ),
        )


@dataclass(slots=True)
class ConditionGroup:
    """Conditions of one tab (0 = owner, 1 = weapon, 2 = target)."""
    tab_index: int
    conditions: list[Condition] = field(default_factory=list)


@dataclass(slots=True)
class ValueModifier:
    """Entry point effect that sets, adds to, or multiplies the value."""
    entry_point: int
    modification: int            # ValueModification
    value: float
    priority: int = 0
    rank: int = 0
    condition_groups: list[ConditionGroup] = field(default_factory=list)


@dataclass(slots=True)
class ActorValueModifier:
    """Entry point effect scaled by an actor value of the perk owner."""
    entry_point: int
    modification: int            # ActorValueModification
    actor_value: int             # ActorValue index
    value: float                 # coefficient k
    priority: int = 0
    rank: int = 0
    condition_groups: list[ConditionGroup] = field(default_factory=list)


@dataclass(slots=True)
class RawEffect:
    """A perk effect we don't patch (ability, quest stage, other functions).

    Stored so overrides keep the perk's effect list intact.
    """
    kind: str
    priority: int = 0
    rank: int = 0
    data: dict = field(default_factory=dict)


Modifier = ValueModifier | ActorValueModifier
PerkEffect = ValueModifier | ActorValueModifier | RawEffect


@dataclass(slots=True)
class Perk:
    """A PERK record, reduced to what the patcher reads and writes."""
    editor_id: str
    name: str = ""
    effects: list[PerkEffect] = field(default_factory=list)


def to_value_modifier(modifier: ActorValueModifier) -> ValueModifier:
    """Return an actor-value-free copy of *modifier*.

    Entry point, priority, rank, and conditions carry over; the result is a
    SET 0 placeholder the caller fills in.
    """
    return ValueModifier(
        entry_point=modifier.entry_point,
        modification=ValueModification.SET,
        value=0.0,
        priority=modifier.priority,
        rank=modifier.rank,
        condition_groups=copy.deepcopy(modifier.condition_groups),
    )


def find_group(modifier: Modifier, tab_index: int) -> ConditionGroup | None:
    for group in modifier.condition_groups:
        if group.tab_index == tab_index:
            return group
    return None


def describe_modifier(modifier: Modifier) -> str:
    """Compact one-line description, used in log messages."""
    if isinstance(modifier, ActorValueModifier):
        kind = _kind_name(ActorValueModification, modifier.modification)
        av = ACTOR_VALUE_NAMES.get(modifier.actor_value, str(int(modifier.actor_value)))
        return f"{kind}(av={av}, k={modifier.value:g})"
    kind = _kind_name(ValueModification, modifier.modification)
    return f"{kind}({modifier.value:g})"


def _kind_name(enum_cls, value: int) -> str:
    try:
        return enum_cls(value).name
    except ValueError:
        return f"FUNC{value}"

