"""Read and write perks as JSON-ready dicts.

Rule file layout:

    {"perks": [
        {"editor_id": "Overdraw",
         "name": "Overdraw",
         "effects": [
            {"type": "value", "entry_point": "mod_attack_damage",
             "modification": "multiply", "value": 1.2,
             "priority": 0, "rank": 0,
             "conditions": [
                {"tab": 1, "conditions": [
                    {"function": "has_keyword", "run_on": "subject",
                     "record": "WeapTypeBow", "operator": "==", "value": 1,
                     "or": false}]}]}]}]}

Enum fields accept lowercase names, integers, or hex strings ("0x23"); the
comparison operator also accepts its symbol. Output always uses names.
"""

from __future__ import annotations

import json
from enum import IntEnum
from pathlib import Path
from typing import Any

from arrow_scaling.models.constants import (
    COMPARISON_SYMBOLS,
    ActorValue,
    ActorValueModification,
    ComparisonOperator,
    ConditionFunction,
    EntryPoint,
    RunOnType,
    ValueModification,
)
from arrow_scaling.models.perk import (
    ActorValueModifier,
    Condition,
    ConditionGroup,
    FunctionData,
    Perk,
    PerkEffect,
    RawEffect,
    ValueModifier,
)


SYMBOL_TO_OPERATOR = {symbol: op for op, symbol in COMPARISON_SYMBOLS.items()}


def _parse_int_like(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("bool is not a valid integer value")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip(), 0)
    raise ValueError(f"Expected integer-like value, got: {value!r}")


def _parse_enum(enum_cls: type[IntEnum], value: Any, *, strict: bool = False) -> int:
    """Parse an enum member name or raw index.

    Unknown raw indices pass through unless *strict*; record formats know
    more codes than we name.
    """
    if isinstance(value, str):
        text = value.strip()
        key = text.upper().replace(" ", "_").replace("-", "_")
        if key in enum_cls.__members__:
            return enum_cls[key]
        try:
            value = int(text, 0)
        except ValueError:
            raise ValueError(f"Unknown {enum_cls.__name__}: {text!r}") from None
    value = _parse_int_like(value)
    try:
        return enum_cls(value)
    except ValueError:
        if strict:
            raise ValueError(f"Unknown {enum_cls.__name__}: {value!r}") from None
        return value


def _enum_name(enum_cls: type[IntEnum], value: int) -> str | int:
    try:
        return enum_cls(value).name.lower()
    except ValueError:
        return int(value)


def _parse_operator(value: Any) -> int:
    if isinstance(value, str) and value.strip() in SYMBOL_TO_OPERATOR:
        return ComparisonOperator(SYMBOL_TO_OPERATOR[value.strip()])
    return _parse_enum(ComparisonOperator, value, strict=True)


def _parse_float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"{name} must be a number, got: {value!r}")
    return float(value)


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"{name} must be true or false, got: {value!r}")


def _require_dict(entry: Any, what: str) -> dict[str, Any]:
    if not isinstance(entry, dict):
        raise ValueError(f"Each {what} entry must be an object")
    return entry


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def condition_from_dict(data: dict[str, Any]) -> Condition:
    data = _require_dict(data, "condition")
    param1 = data.get("param1")
    if param1 is not None:
        param1 = _parse_enum(ActorValue, param1)
    return Condition(
        operator=_parse_operator(data.get("operator", "==")),
        value=_parse_float(data.get("value", 0.0), "value"),
        function=FunctionData(
            function=_parse_enum(ConditionFunction, data["function"]),
            run_on=_parse_enum(RunOnType, data.get("run_on", "subject")),
            param1=param1,
            record=data.get("record"),
        ),
        is_or=_parse_bool(data.get("or", False), "or"),
    )


def _groups_from_list(raw: Any) -> list[ConditionGroup]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("conditions must be a list of condition tabs")
    groups: list[ConditionGroup] = []
    for entry in raw:
        entry = _require_dict(entry, "condition tab")
        groups.append(ConditionGroup(
            tab_index=_parse_int_like(entry["tab"]),
            conditions=[condition_from_dict(c) for c in entry.get("conditions", [])],
        ))
    return groups


def effect_from_dict(data: dict[str, Any]) -> PerkEffect:
    data = _require_dict(data, "effect")
    kind = str(data.get("type", "value")).strip().lower()
    priority = _parse_int_like(data.get("priority", 0))
    rank = _parse_int_like(data.get("rank", 0))

    if kind == "value":
        return ValueModifier(
            entry_point=_parse_enum(EntryPoint, data["entry_point"]),
            modification=_parse_enum(ValueModification, data["modification"]),
            value=_parse_float(data.get("value", 0.0), "value"),
            priority=priority,
            rank=rank,
            condition_groups=_groups_from_list(data.get("conditions")),
        )
    if kind == "actor_value":
        return ActorValueModifier(
            entry_point=_parse_enum(EntryPoint, data["entry_point"]),
            modification=_parse_enum(ActorValueModification, data["modification"]),
            actor_value=_parse_enum(ActorValue, data["actor_value"]),
            value=_parse_float(data.get("value", 0.0), "value"),
            priority=priority,
            rank=rank,
            condition_groups=_groups_from_list(data.get("conditions")),
        )
    extra = {
        k: v for k, v in data.items()
        if k not in ("type", "priority", "rank")
    }
    return RawEffect(kind=kind, priority=priority, rank=rank, data=extra)


def perk_from_dict(data: dict[str, Any]) -> Perk:
    data = _require_dict(data, "perks")
    editor_id = str(data["editor_id"])
    effects = data.get("effects", [])
    if not isinstance(effects, list):
        raise ValueError(f"effects of {editor_id} must be a list")
    return Perk(
        editor_id=editor_id,
        name=str(data.get("name") or editor_id),
        effects=[effect_from_dict(e) for e in effects],
    )


def perks_from_payload(payload: Any) -> list[Perk]:
    if not isinstance(payload, dict):
        raise ValueError("Rule file payload must be an object")
    raw = payload.get("perks", [])
    if not isinstance(raw, list):
        raise ValueError("perks must be a list")
    return [perk_from_dict(p) for p in raw]


def load_rule_file(path: Path) -> list[Perk]:
    return perks_from_payload(json.loads(path.read_text()))


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def condition_to_dict(cond: Condition) -> dict[str, Any]:
    data = cond.function
    out: dict[str, Any] = {
        "function": _enum_name(ConditionFunction, data.function),
        "run_on": _enum_name(RunOnType, data.run_on),
    }
    if data.param1 is not None:
        out["param1"] = _enum_name(ActorValue, data.param1)
    if data.record is not None:
        out["record"] = data.record
    out["operator"] = COMPARISON_SYMBOLS.get(cond.operator, int(cond.operator))
    out["value"] = cond.value
    out["or"] = cond.is_or
    return out


def _groups_to_list(groups: list[ConditionGroup]) -> list[dict[str, Any]]:
    return [
        {"tab": group.tab_index, "conditions": [condition_to_dict(c) for c in group.conditions]}
        for group in groups
    ]


def effect_to_dict(effect: PerkEffect) -> dict[str, Any]:
    if isinstance(effect, RawEffect):
        return {"type": effect.kind, "priority": effect.priority, "rank": effect.rank, **effect.data}
    out: dict[str, Any] = {
        "type": "actor_value" if isinstance(effect, ActorValueModifier) else "value",
        "entry_point": _enum_name(EntryPoint, effect.entry_point),
    }
    if isinstance(effect, ActorValueModifier):
        out["modification"] = _enum_name(ActorValueModification, effect.modification)
        out["actor_value"] = _enum_name(ActorValue, effect.actor_value)
    else:
        out["modification"] = _enum_name(ValueModification, effect.modification)
    out["value"] = effect.value
    out["priority"] = effect.priority
    out["rank"] = effect.rank
    out["conditions"] = _groups_to_list(effect.condition_groups)
    return out


def perk_to_dict(perk: Perk) -> dict[str, Any]:
    return {
        "editor_id": perk.editor_id,
        "name": perk.name,
        "effects": [effect_to_dict(e) for e in perk.effects],
    }


def dump_perks(perks: list[Perk]) -> dict[str, Any]:
    return {"perks": [perk_to_dict(p) for p in perks]}
