"""Patcher settings, their JSON loader, and validation.

Defaults match the recommended setup: player-only, true 1:1 scaling, actor
value emulation on with 10-point segments up to 160.

Validation collects every problem before giving up so a user fixing a
settings file sees all of them at once; see check_settings().
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EmulationSettings:
    """Emulation of actor value based entry points by range-gated segments."""

    enabled: bool = True
    accuracy: int = 10            # actor value range covered by one segment
    max_actor_value: int = 160    # emulated up to this value, open-ended above
    skill_scaling: float = 0.005  # arrow damage bonus per skill point


@dataclass(slots=True)
class BalancingSettings:
    """Global damage knobs.

    The dependent_* knobs reach arrows through the regular inversion pipeline;
    the host_* knobs are applied to bows directly.
    """

    dependent_offset: float = 0.0
    dependent_factor: float = 1.0
    host_offset: float = 0.0
    host_factor: float = 1.0


@dataclass(slots=True)
class PatchSettings:
    scaling_factor: float = 1.0
    owner_only: bool = True
    emulation: EmulationSettings = field(default_factory=EmulationSettings)
    balancing: BalancingSettings = field(default_factory=BalancingSettings)


def check_settings(settings: PatchSettings) -> list[str]:
    """Return every validation error; an empty list means the settings are usable."""
    errors: list[str] = []
    if settings.scaling_factor < 0:
        errors.append("scaling_factor must not be negative.")
    emulation = settings.emulation
    if emulation.enabled:
        if emulation.accuracy < 1:
            errors.append("accuracy must be at least 1.")
        if emulation.max_actor_value < emulation.accuracy:
            errors.append("accuracy cannot be larger than max_actor_value.")
        if emulation.skill_scaling < 0:
            errors.append("skill_scaling must not be negative.")
    return errors


def validate_settings(settings: PatchSettings) -> None:
    """Raise ValueError listing all problems if *settings* are not usable."""
    errors = check_settings(settings)
    if not errors:
        return
    for error in errors:
        logger.error("Invalid setting: %s", error)
    raise ValueError(
        "At least one of the provided settings was not valid: " + " ".join(errors)
    )


# ---------------------------------------------------------------------------
# JSON loading
# ---------------------------------------------------------------------------

_CAMEL_ALIASES = {
    "scalingFactor": "scaling_factor",
    "ownerOnly": "owner_only",
    "playerOnly": "owner_only",
    "maxActorValue": "max_actor_value",
    "maximumActorValue": "max_actor_value",
    "skillScaling": "skill_scaling",
    "dependentOffset": "dependent_offset",
    "dependentFactor": "dependent_factor",
    "hostOffset": "host_offset",
    "hostFactor": "host_factor",
    "emulateActorValueEntryPoints": "emulation",
}


def _normalized_keys(data: dict[str, Any], known: set[str], where: str) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in data.items():
        name = _CAMEL_ALIASES.get(key, key)
        if name not in known:
            raise ValueError(f"Unknown setting {where}{key!r}")
        result[name] = value
    return result


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"{name} must be true or false, got: {value!r}")


def _parse_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name}: bool is not a valid integer value")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip(), 0)
    raise ValueError(f"{name} must be an integer, got: {value!r}")


def _parse_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{name}: bool is not a valid number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise ValueError(f"{name} must be a number, got: {value!r}")


def _section(data: Any, name: str) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{name} must be an object")
    return data


def _emulation_from_dict(data: dict[str, Any]) -> EmulationSettings:
    known = {f.name for f in fields(EmulationSettings)}
    data = _normalized_keys(data, known, "emulation.")
    result = EmulationSettings()
    if "enabled" in data:
        result.enabled = _parse_bool(data["enabled"], "enabled")
    if "accuracy" in data:
        result.accuracy = _parse_int(data["accuracy"], "accuracy")
    if "max_actor_value" in data:
        result.max_actor_value = _parse_int(data["max_actor_value"], "max_actor_value")
    if "skill_scaling" in data:
        result.skill_scaling = _parse_float(data["skill_scaling"], "skill_scaling")
    return result


def _balancing_from_dict(data: dict[str, Any]) -> BalancingSettings:
    known = {f.name for f in fields(BalancingSettings)}
    data = _normalized_keys(data, known, "balancing.")
    result = BalancingSettings()
    for name, value in data.items():
        setattr(result, name, _parse_float(value, name))
    return result


def settings_from_dict(data: dict[str, Any]) -> PatchSettings:
    """Build PatchSettings from a parsed JSON object.

    Keys may be snake_case or camelCase; missing keys keep their defaults.
    """
    if not isinstance(data, dict):
        raise ValueError("Settings payload must be an object")
    known = {f.name for f in fields(PatchSettings)}
    data = _normalized_keys(data, known, "")
    settings = PatchSettings()
    if "scaling_factor" in data:
        settings.scaling_factor = _parse_float(data["scaling_factor"], "scaling_factor")
    if "owner_only" in data:
        settings.owner_only = _parse_bool(data["owner_only"], "owner_only")
    settings.emulation = _emulation_from_dict(_section(data.get("emulation"), "emulation"))
    settings.balancing = _balancing_from_dict(_section(data.get("balancing"), "balancing"))
    return settings


def load_settings(path: Path | None) -> PatchSettings:
    """Read settings from a JSON file; no path means defaults."""
    if path is None:
        return PatchSettings()
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    return settings_from_dict(json.loads(path.read_text()))
