"""Records the patcher refers to, named by editor ID.

Defaults are the vanilla Skyrim records: bows are marked by WeapTypeBow, the
player by PlayerKeyword, and AllowShoutingPerk is a perk only the player has,
which makes it a safe home for player-only entry points.
"""

from dataclasses import dataclass

from arrow_scaling.engine.settings import PatchSettings
from arrow_scaling.models.constants import ActorValue


@dataclass(frozen=True, slots=True)
class PatchTargets:
    host_keyword: str = "WeapTypeBow"
    # Keyword no weapon cares about; HasKeyword on it is only used for its
    # side effect of failing on records that aren't weapons (arrows).
    neutral_keyword: str = "ActivatorLever"
    owner_keyword: str = "PlayerKeyword"
    designated_perk: str = "AllowShoutingPerk"
    # Perks some mods hand out to NPCs as well. Their arrow entry points go to
    # designated_perk instead so NPCs don't pay for extra entry points.
    redirected_perks: tuple[str, ...] = ("AlchemySkillBoosts", "PerkSkillBoosts")
    skill_actor_value: int = ActorValue.ARCHERY


def build_redirects(settings: PatchSettings, targets: PatchTargets) -> dict[str, str]:
    """Map source perk editor IDs to the perk that receives their new effects.

    Redirection only keeps effects equivalent when they are player-only, so
    the table is empty unless owner_only is set.
    """
    if not settings.owner_only:
        return {}
    return {editor_id: targets.designated_perk for editor_id in targets.redirected_perks}
