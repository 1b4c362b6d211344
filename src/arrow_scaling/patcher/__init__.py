"""Perk patching: condition analysis, inversion, and the patch run."""

from arrow_scaling.patcher.conditions import affects_host_class, is_tautology_for_class
from arrow_scaling.patcher.inverter import invert
from arrow_scaling.patcher.perk_patcher import PatchReport, PerkPatcher, run_patch

__all__ = [
    "PatchReport",
    "PerkPatcher",
    "affects_host_class",
    "invert",
    "is_tautology_for_class",
    "run_patch",
]
