"""Skyrim entry points, condition functions, actor values, and operators.

Numeric codes match the values stored in PERK records (PRKE/EPFT/CTDA), so
rule files exported from the game's tooling can be read without translation.
"""

from enum import IntEnum


class EntryPoint(IntEnum):
    """Perk entry point indices (subset relevant to damage)."""
    CALCULATE_WEAPON_DAMAGE = 0
    MOD_SNEAK_ATTACK_MULT = 18
    MOD_POWER_ATTACK_DAMAGE = 28
    MOD_ATTACK_DAMAGE = 35
    MOD_INCOMING_DAMAGE = 36


# Entry points whose result feeds the damage dealt by the weapon (and its ammo).
DAMAGE_ENTRY_POINTS = frozenset({
    EntryPoint.CALCULATE_WEAPON_DAMAGE,
    EntryPoint.MOD_ATTACK_DAMAGE,
})


class ConditionTab(IntEnum):
    """Condition tabs of a damage entry point."""
    OWNER = 0
    WEAPON = 1      # class selector
    TARGET = 2


class ValueModification(IntEnum):
    """EPFT function types that work on the raw entry point value."""
    SET = 1
    ADD = 2
    MULTIPLY = 3


class ActorValueModification(IntEnum):
    """EPFT function types scaled by one of the owner's actor values."""
    ADD_SCALED = 5                  # value += AV * k
    SET_SCALED = 12                 # value = AV * k
    MULTIPLY_SCALED = 13            # value *= AV * k
    MULTIPLY_ONE_PLUS_SCALED = 14   # value *= 1 + AV * k


class ConditionFunction(IntEnum):
    """Condition function indices used in CTDA subrecords."""
    GET_ACTOR_VALUE = 14
    GET_IS_ID = 72
    GET_LEVEL = 80
    HAS_PERK = 448
    HAS_KEYWORD = 560


class RunOnType(IntEnum):
    SUBJECT = 0
    TARGET = 1
    REFERENCE = 2
    COMBAT_TARGET = 3
    LINKED_REFERENCE = 4


class ActorValue(IntEnum):
    """Actor value indices. Skills are 6-23 in Skyrim."""
    ONE_HANDED = 6
    TWO_HANDED = 7
    ARCHERY = 8
    BLOCK = 9
    SMITHING = 10
    HEAVY_ARMOR = 11
    LIGHT_ARMOR = 12
    PICKPOCKET = 13
    LOCKPICKING = 14
    SNEAK = 15
    ALCHEMY = 16
    SPEECH = 17
    ALTERATION = 18
    CONJURATION = 19
    DESTRUCTION = 20
    ILLUSION = 21
    RESTORATION = 22
    ENCHANTING = 23
    HEALTH = 24
    MAGICKA = 25
    STAMINA = 26


# Friendly display names
ACTOR_VALUE_NAMES: dict[int, str] = {
    6: "One-Handed",
    7: "Two-Handed",
    8: "Archery",
    9: "Block",
    10: "Smithing",
    11: "Heavy Armor",
    12: "Light Armor",
    13: "Pickpocket",
    14: "Lockpicking",
    15: "Sneak",
    16: "Alchemy",
    17: "Speech",
    18: "Alteration",
    19: "Conjuration",
    20: "Destruction",
    21: "Illusion",
    22: "Restoration",
    23: "Enchanting",
    24: "Health",
    25: "Magicka",
    26: "Stamina",
}


class ComparisonOperator(IntEnum):
    """Comparison operators encoded in the CTDA type byte (bits 5-7)."""
    EQUAL = 0          # ==
    NOT_EQUAL = 1      # !=
    GREATER = 2        # >
    GREATER_EQUAL = 3  # >=
    LESS = 4           # <
    LESS_EQUAL = 5     # <=


COMPARISON_SYMBOLS: dict[int, str] = {
    0: "==",
    1: "!=",
    2: ">",
    3: ">=",
    4: "<",
    5: "<=",
}
