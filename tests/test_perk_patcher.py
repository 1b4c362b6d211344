"""End-to-end PerkPatcher runs over an in-memory store."""

import pytest

from arrow_scaling.engine.settings import (
    BalancingSettings,
    EmulationSettings,
    PatchSettings,
)
from arrow_scaling.engine.targets import PatchTargets
from arrow_scaling.models.constants import (
    ActorValue,
    ActorValueModification,
    ComparisonOperator as Op,
    ConditionFunction,
    EntryPoint,
    ValueModification,
)
from arrow_scaling.models.perk import (
    ActorValueModifier,
    Condition,
    ConditionGroup,
    Perk,
    RawEffect,
    ValueModifier,
    find_group,
)
from arrow_scaling.patcher.conditions import or_blocks
from arrow_scaling.patcher.perk_patcher import PerkPatcher, run_patch
from arrow_scaling.store.perk_store import InMemoryPerkStore


def _settings(**kwargs) -> PatchSettings:
    """Settings without any global knobs, so only source perks are patched."""
    settings = PatchSettings(
        owner_only=kwargs.pop("owner_only", False),
        emulation=EmulationSettings(skill_scaling=0.0),
    )
    for key, value in kwargs.items():
        setattr(settings, key, value)
    return settings


def _bow_only(modification: int, value: float, entry_point: int = EntryPoint.MOD_ATTACK_DAMAGE):
    return ValueModifier(
        entry_point=entry_point,
        modification=modification,
        value=value,
        condition_groups=[ConditionGroup(
            tab_index=1,
            conditions=[Condition.has_keyword("WeapTypeBow", Op.EQUAL, 1.0)],
        )],
    )


def _designated() -> Perk:
    return Perk(editor_id="AllowShoutingPerk")


# --- A tiny damage simulator -----------------------------------------------
#
# Weapons answer HasKeyword from their keyword set. Arrows are not weapon
# records, so every weapon tab condition is false for them. The owner tab is
# assumed to hold for the player.

def _weapon_tab_holds(conditions: list[Condition], keywords: set[str] | None) -> bool:
    def holds(cond: Condition) -> bool:
        if keywords is None:
            return False
        assert cond.function.function == ConditionFunction.HAS_KEYWORD
        has = 1.0 if cond.function.record in keywords else 0.0
        if cond.operator == Op.EQUAL:
            return has == cond.value
        if cond.operator == Op.NOT_EQUAL:
            return has != cond.value
        raise AssertionError(f"unexpected operator {cond.operator}")

    return all(any(holds(c) for c in block) for block in or_blocks(conditions))


def _net_multiplier(effects, keywords: set[str] | None) -> float:
    result = 1.0
    for effect in effects:
        assert effect.modification == ValueModification.MULTIPLY
        group = find_group(effect, 1)
        if group is None or _weapon_tab_holds(group.conditions, keywords):
            result *= effect.value
    return result


# --- Scenarios ---------------------------------------------------------------

def test_bow_multiplier_scenario():
    store = InMemoryPerkStore([Perk("Overdraw", effects=[_bow_only(ValueModification.MULTIPLY, 1.5)])])
    PerkPatcher(store, _settings(scaling_factor=1.0)).run()

    (override,) = store.overrides()
    assert override.editor_id == "Overdraw"
    original, scale_all, scale_complement = override.effects
    assert original.value == 1.5
    assert scale_all.value == 1.5
    assert find_group(scale_all, 1) is None
    assert scale_complement.value == pytest.approx(1 / 1.5)
    assert find_group(scale_complement, 1).conditions[0].function.record == "ActivatorLever"

    bow = {"WeapTypeBow"}
    sword = {"WeapTypeSwords"}
    arrow = None
    assert _net_multiplier(override.effects, bow) == pytest.approx(1.5)
    assert _net_multiplier(override.effects, arrow) == pytest.approx(1.5)
    assert _net_multiplier(override.effects, sword) == pytest.approx(1.0)


def test_source_perk_is_not_mutated():
    source = Perk("Overdraw", effects=[_bow_only(ValueModification.ADD, 3.0)])
    store = InMemoryPerkStore([source])
    PerkPatcher(store, _settings()).run()
    assert len(source.effects) == 1
    assert len(store.resolve("Overdraw").effects) == 3
    assert find_group(source.effects[0], 1) is not None


def test_additive_bow_perk():
    store = InMemoryPerkStore([Perk("Overdraw", effects=[_bow_only(ValueModification.ADD, 3.0)])])
    report = PerkPatcher(store, _settings()).run()
    _, scale_all, scale_complement = store.resolve("Overdraw").effects
    assert (scale_all.value, scale_complement.value) == (3.0, -3.0)
    assert report.effects_added == 2
    assert report.patched_perks == ["Overdraw"]


def test_non_bow_effect_is_skipped():
    sword = ValueModifier(
        entry_point=EntryPoint.MOD_ATTACK_DAMAGE,
        modification=ValueModification.MULTIPLY,
        value=1.2,
        condition_groups=[ConditionGroup(
            tab_index=1,
            conditions=[Condition.has_keyword("WeapTypeSword", Op.EQUAL, 1.0)],
        )],
    )
    store = InMemoryPerkStore([Perk("Armsman", effects=[sword])])
    report = PerkPatcher(store, _settings()).run()
    assert store.overrides() == []
    assert report.effects_considered == 0


def test_non_damage_entry_point_is_skipped():
    effect = _bow_only(ValueModification.MULTIPLY, 1.5, entry_point=EntryPoint.MOD_INCOMING_DAMAGE)
    store = InMemoryPerkStore([Perk("Block", effects=[effect, RawEffect(kind="ability")])])
    PerkPatcher(store, _settings()).run()
    assert store.overrides() == []


def test_unsupported_effect_creates_no_override():
    store = InMemoryPerkStore([Perk("Odd", effects=[_bow_only(ValueModification.SET, 5.0)])])
    report = PerkPatcher(store, _settings()).run()
    assert store.overrides() == []
    assert report.effects_considered == 1
    assert report.effects_unsupported == 1


def test_calculate_weapon_damage_is_patched():
    effect = _bow_only(ValueModification.MULTIPLY, 2.0, entry_point=EntryPoint.CALCULATE_WEAPON_DAMAGE)
    store = InMemoryPerkStore([Perk("Smithing", effects=[effect])])
    PerkPatcher(store, _settings()).run()
    assert len(store.resolve("Smithing").effects) == 3


def test_owner_only_adds_player_condition():
    store = InMemoryPerkStore([
        Perk("Overdraw", effects=[_bow_only(ValueModification.ADD, 3.0)]),
        _designated(),
    ])
    PerkPatcher(store, _settings(owner_only=True)).run()
    _, scale_all, scale_complement = store.resolve("Overdraw").effects
    for effect in (scale_all, scale_complement):
        owner = find_group(effect, 0)
        assert owner.conditions[0].function.record == "PlayerKeyword"


def test_redirected_perk_patches_designated_perk():
    boosts = Perk("AlchemySkillBoosts", effects=[_bow_only(ValueModification.MULTIPLY, 1.25)])
    store = InMemoryPerkStore([boosts, _designated()])
    PerkPatcher(store, _settings(owner_only=True)).run()

    assert [p.editor_id for p in store.overrides()] == ["AllowShoutingPerk"]
    # Added once, not patched again when the designated perk comes up.
    assert len(store.resolve("AllowShoutingPerk").effects) == 2


def test_no_redirect_without_owner_only():
    boosts = Perk("AlchemySkillBoosts", effects=[_bow_only(ValueModification.MULTIPLY, 1.25)])
    store = InMemoryPerkStore([boosts, _designated()])
    PerkPatcher(store, _settings(owner_only=False)).run()
    assert [p.editor_id for p in store.overrides()] == ["AlchemySkillBoosts"]


def test_explicit_redirect_table():
    store = InMemoryPerkStore([
        Perk("Overdraw", effects=[_bow_only(ValueModification.ADD, 3.0)]),
        Perk("Collector"),
    ])
    PerkPatcher(store, _settings(), redirects={"Overdraw": "Collector"}).run()
    assert [p.editor_id for p in store.overrides()] == ["Collector"]


def test_one_override_per_perk():
    effects = [_bow_only(ValueModification.ADD, 3.0), _bow_only(ValueModification.MULTIPLY, 1.1)]
    store = InMemoryPerkStore([Perk("Overdraw", effects=effects)])
    PerkPatcher(store, _settings()).run()
    assert len(store.overrides()) == 1
    assert len(store.resolve("Overdraw").effects) == 6


def test_actor_value_effect_is_emulated():
    effect = ActorValueModifier(
        entry_point=EntryPoint.MOD_ATTACK_DAMAGE,
        modification=ActorValueModification.MULTIPLY_ONE_PLUS_SCALED,
        actor_value=ActorValue.ALCHEMY,
        value=0.01,
    )
    store = InMemoryPerkStore([Perk("Fortify", effects=[effect])])
    PerkPatcher(store, _settings()).run()
    added = store.resolve("Fortify").effects[1:]
    assert len(added) == 32
    assert all(isinstance(e, ValueModifier) for e in added)
    upper = find_group(added[0], 0).conditions[0]
    assert upper.function.param1 == ActorValue.ALCHEMY


def test_emulation_without_segments_creates_no_override():
    # Every segment factor is within ZERO of 1 at this scaling factor.
    effect = ActorValueModifier(
        entry_point=EntryPoint.MOD_ATTACK_DAMAGE,
        modification=ActorValueModification.MULTIPLY_ONE_PLUS_SCALED,
        actor_value=ActorValue.ARCHERY,
        value=0.00005,
    )
    store = InMemoryPerkStore([Perk("Steady", effects=[effect])])
    report = PerkPatcher(store, _settings(scaling_factor=0.001)).run()
    assert report.effects_considered == 1
    assert report.effects_unsupported == 0
    assert report.effects_added == 0
    assert report.patched_perks == []
    assert store.overrides() == []


# --- Global knobs ------------------------------------------------------------

def test_dummy_effects_are_removed_but_derivatives_kept():
    settings = PatchSettings(
        owner_only=True,
        emulation=EmulationSettings(skill_scaling=0.005),
        balancing=BalancingSettings(dependent_factor=2.0, dependent_offset=3.0),
    )
    store = InMemoryPerkStore([_designated()])
    patcher = PerkPatcher(store, settings)
    patcher.run()

    effects = store.resolve("AllowShoutingPerk").effects
    # 16 skill segment pairs + factor pair + offset pair
    assert len(effects) == 36
    assert not any(isinstance(e, ActorValueModifier) for e in effects)
    assert effects[0].value == pytest.approx(1.05)
    assert (effects[32].value, effects[33].value) == (2.0, 0.5)
    assert (effects[34].value, effects[35].value) == (3.0, -3.0)
    assert effects[34].priority == 255
    assert find_group(effects[35], 1) is not None


def test_dummy_skill_scaling_targets_host_skill():
    patcher = PerkPatcher(InMemoryPerkStore(), PatchSettings())
    (dummy,) = patcher.dummy_effects()
    assert dummy.actor_value == ActorValue.ARCHERY
    assert dummy.modification == ActorValueModification.MULTIPLY_ONE_PLUS_SCALED
    assert dummy.priority == 20


def test_zero_scaling_factor_skips_main_pass():
    settings = PatchSettings(scaling_factor=0.0)
    store = InMemoryPerkStore([
        Perk("Overdraw", effects=[_bow_only(ValueModification.ADD, 3.0)]),
        _designated(),
    ])
    report = PerkPatcher(store, settings).run()
    assert report.perks_scanned == 0
    assert "Overdraw" not in [p.editor_id for p in store.overrides()]
    assert store.resolve("AllowShoutingPerk").effects == []


def test_host_knobs_are_bow_only():
    settings = _settings(owner_only=True)
    settings.balancing = BalancingSettings(host_factor=1.2, host_offset=2.0)
    store = InMemoryPerkStore([_designated()])
    PerkPatcher(store, settings).run()

    factor, offset = store.resolve("AllowShoutingPerk").effects
    assert (factor.modification, factor.value, factor.priority) == (ValueModification.MULTIPLY, 1.2, 0)
    assert (offset.modification, offset.value, offset.priority) == (ValueModification.ADD, 2.0, 255)
    for effect in (factor, offset):
        (cond,) = find_group(effect, 1).conditions
        assert (cond.function.record, cond.operator, cond.value) == ("WeapTypeBow", Op.EQUAL, 1.0)
        assert find_group(effect, 0).conditions[0].function.record == "PlayerKeyword"


def test_missing_designated_perk_raises():
    store = InMemoryPerkStore([])
    with pytest.raises(KeyError, match="AllowShoutingPerk"):
        PerkPatcher(store, PatchSettings()).run()


def test_custom_targets():
    targets = PatchTargets(host_keyword="WeapTypeCrossbow", designated_perk="Collector")
    effect = ValueModifier(
        entry_point=EntryPoint.MOD_ATTACK_DAMAGE,
        modification=ValueModification.MULTIPLY,
        value=1.5,
        condition_groups=[ConditionGroup(
            tab_index=1,
            conditions=[Condition.has_keyword("WeapTypeCrossbow", Op.EQUAL, 1.0)],
        )],
    )
    store = InMemoryPerkStore([Perk("Crossbows", effects=[effect])])
    PerkPatcher(store, _settings(), targets).run()
    assert len(store.resolve("Crossbows").effects) == 3


# --- run_patch ---------------------------------------------------------------

def test_run_patch_rejects_invalid_settings():
    store = InMemoryPerkStore([Perk("Overdraw", effects=[_bow_only(ValueModification.ADD, 3.0)])])
    settings = PatchSettings(scaling_factor=-1.0)
    settings.emulation.accuracy = 0
    with pytest.raises(ValueError, match="scaling_factor.*accuracy"):
        run_patch(store, settings)
    assert store.overrides() == []


def test_run_patch_is_repeatable():
    def build():
        return InMemoryPerkStore([
            Perk("Overdraw", effects=[_bow_only(ValueModification.MULTIPLY, 1.5)]),
            _designated(),
        ])

    first, second = build(), build()
    run_patch(first)
    run_patch(second)
    assert first.overrides() == second.overrides()
