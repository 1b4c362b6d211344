"""Patch perks so bow damage entry points also scale arrow damage.

Arrow damage is computed from the arrow record, and perk entry points with
weapon conditions (HasKeyword WeapTypeBow) never match it. For every damage
entry point that applies to all bows, the patcher adds an arrow-only
equivalent built from two copies of the entry point (see inverter.invert).

Global knobs ride along the same pipeline: dummy entry points are attached to
the designated perk before the run so the patcher derives their arrow-only
versions, then removed again. Bow-only knobs are appended afterwards.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field

from arrow_scaling.engine.settings import PatchSettings, validate_settings
from arrow_scaling.engine.targets import PatchTargets, build_redirects
from arrow_scaling.models.constants import (
    DAMAGE_ENTRY_POINTS,
    ActorValueModification,
    ComparisonOperator,
    ConditionTab,
    EntryPoint,
    ValueModification,
)
from arrow_scaling.models.perk import (
    ActorValueModifier,
    Condition,
    ConditionGroup,
    Modifier,
    Perk,
    PerkEffect,
    ValueModifier,
    describe_modifier,
)
from arrow_scaling.patcher.conditions import affects_host_class
from arrow_scaling.patcher.inverter import invert
from arrow_scaling.patcher.rewriter import (
    add_complement_selector,
    add_owner_only,
    strip_class_selector,
)
from arrow_scaling.store.perk_store import PerkStore


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PatchReport:
    """What a run did, for logging and the CLI summary."""

    perks_scanned: int = 0
    effects_considered: int = 0
    effects_unsupported: int = 0
    effects_added: int = 0
    patched_perks: list[str] = field(default_factory=list)


def is_damage_modifier(effect: PerkEffect) -> bool:
    return (
        isinstance(effect, (ValueModifier, ActorValueModifier))
        and effect.entry_point in DAMAGE_ENTRY_POINTS
    )


class PerkPatcher:
    """Runs the arrow damage patch over a PerkStore.

    The redirection table maps source perk editor IDs to the perk that
    receives their new entry points; it defaults to build_redirects().
    """

    __slots__ = ("_store", "_settings", "_targets", "_redirects", "_report")

    def __init__(
        self,
        store: PerkStore,
        settings: PatchSettings | None = None,
        targets: PatchTargets | None = None,
        redirects: dict[str, str] | None = None,
    ) -> None:
        self._store = store
        self._settings = settings or PatchSettings()
        self._targets = targets or PatchTargets()
        if redirects is None:
            redirects = build_redirects(self._settings, self._targets)
        self._redirects = dict(redirects)
        self._report = PatchReport()

    @property
    def report(self) -> PatchReport:
        return self._report

    # --- Building blocks ---------------------------------------------------

    def _patch_target(self, perk: Perk) -> Perk:
        """Override that receives the new entry points of *perk*."""
        editor_id = self._redirects.get(perk.editor_id)
        if editor_id is not None:
            return self._store.get_or_add_override(self._store.resolve(editor_id))
        return self._store.get_or_add_override(perk)

    def _designated_override(self) -> Perk:
        return self._store.get_or_add_override(
            self._store.resolve(self._targets.designated_perk)
        )

    def derive_arrow_effects(self, effect: Modifier) -> list[Modifier] | None:
        """Return the entry points to add for *effect*, or None if unsupported."""
        scale_all = copy.deepcopy(effect)
        scale_complement = copy.deepcopy(effect)

        strip_class_selector(scale_all)
        strip_class_selector(scale_complement)
        if self._settings.owner_only:
            add_owner_only(scale_all, self._targets)
            add_owner_only(scale_complement, self._targets)
        add_complement_selector(scale_complement, self._targets)

        return invert(
            scale_all,
            scale_complement,
            self._settings.scaling_factor,
            self._settings.emulation,
        )

    def patch_perk(self, perk: Perk, effects: list[PerkEffect] | None = None) -> int:
        """Patch one perk; returns the number of entry points added.

        *effects* defaults to the perk's current effects. The override is
        only created once something is actually added.
        """
        if effects is None:
            effects = list(perk.effects)
        target: Perk | None = None
        added = 0
        for effect in effects:
            if not is_damage_modifier(effect):
                continue
            if not affects_host_class(effect.condition_groups, self._targets):
                logger.debug("%s: %s does not affect all bows", perk.editor_id, describe_modifier(effect))
                continue
            self._report.effects_considered += 1

            new_effects = self.derive_arrow_effects(effect)
            if new_effects is None:
                self._report.effects_unsupported += 1
                logger.debug("%s: %s is not supported", perk.editor_id, describe_modifier(effect))
                continue
            if not new_effects:
                continue

            if target is None:
                target = self._patch_target(perk)
            target.effects.extend(new_effects)
            added += len(new_effects)

        if target is not None:
            self._report.patched_perks.append(perk.editor_id)
            self._report.effects_added += added
            logger.debug("%s: added %d entry points to %s", perk.editor_id, added, target.editor_id)
        return added

    # --- Global knobs ------------------------------------------------------

    def dummy_effects(self) -> list[Modifier]:
        """Entry points whose arrow-only derivatives implement the arrow knobs."""
        emulation = self._settings.emulation
        balancing = self._settings.balancing
        dummies: list[Modifier] = []

        # Bow skill scaling is a game setting, so arrows miss out on it.
        if emulation.skill_scaling != 0:
            dummies.append(ActorValueModifier(
                entry_point=EntryPoint.MOD_ATTACK_DAMAGE,
                modification=ActorValueModification.MULTIPLY_ONE_PLUS_SCALED,
                actor_value=self._targets.skill_actor_value,
                value=emulation.skill_scaling,
                priority=20,
            ))

        if balancing.dependent_factor != 1:
            dummies.append(ValueModifier(
                entry_point=EntryPoint.MOD_ATTACK_DAMAGE,
                modification=ValueModification.MULTIPLY,
                value=balancing.dependent_factor,
                priority=0,
            ))

        if balancing.dependent_offset != 0:
            dummies.append(ValueModifier(
                entry_point=EntryPoint.MOD_ATTACK_DAMAGE,
                modification=ValueModification.ADD,
                value=balancing.dependent_offset,
                priority=255,
            ))
        return dummies

    def host_effects(self) -> list[ValueModifier]:
        """Bow-only entry points for the host knobs; never inverted."""
        balancing = self._settings.balancing
        effects: list[ValueModifier] = []
        if balancing.host_factor != 1:
            effects.append(ValueModifier(
                entry_point=EntryPoint.MOD_ATTACK_DAMAGE,
                modification=ValueModification.MULTIPLY,
                value=balancing.host_factor,
                priority=0,
            ))
        if balancing.host_offset != 0:
            effects.append(ValueModifier(
                entry_point=EntryPoint.MOD_ATTACK_DAMAGE,
                modification=ValueModification.ADD,
                value=balancing.host_offset,
                priority=255,
            ))
        for effect in effects:
            if self._settings.owner_only:
                add_owner_only(effect, self._targets)
            effect.condition_groups.append(ConditionGroup(
                tab_index=ConditionTab.WEAPON,
                conditions=[Condition.has_keyword(
                    self._targets.host_keyword, ComparisonOperator.EQUAL, 1.0
                )],
            ))
        return effects

    # --- Run ---------------------------------------------------------------

    def run(self) -> PatchReport:
        """Patch every perk in the store once."""
        dummies = self.dummy_effects()
        designated: Perk | None = None
        if dummies:
            designated = self._designated_override()
            designated.effects.extend(dummies)

        if self._settings.scaling_factor != 0:
            # Snapshot first: entry points added during the run must not be
            # patched again when their (redirect) perk comes up later.
            pending = [(perk, list(perk.effects)) for perk in self._store.winning_overrides()]
            for perk, effects in pending:
                self._report.perks_scanned += 1
                self.patch_perk(perk, effects)

        if designated is not None:
            for dummy in dummies:
                for i, effect in enumerate(designated.effects):
                    if effect is dummy:
                        del designated.effects[i]
                        break

        host_effects = self.host_effects()
        if host_effects:
            designated = self._designated_override()
            designated.effects.extend(host_effects)
            self._report.effects_added += len(host_effects)

        logger.info(
            "Scanned %d perks: %d damage entry points considered, %d unsupported, "
            "%d entry points added to %d perks",
            self._report.perks_scanned,
            self._report.effects_considered,
            self._report.effects_unsupported,
            self._report.effects_added,
            len(self._report.patched_perks),
        )
        return self._report


def run_patch(
    store: PerkStore,
    settings: PatchSettings | None = None,
    targets: PatchTargets | None = None,
) -> PatchReport:
    """Validate *settings* and patch every perk in *store*."""
    settings = settings or PatchSettings()
    validate_settings(settings)
    return PerkPatcher(store, settings, targets).run()
