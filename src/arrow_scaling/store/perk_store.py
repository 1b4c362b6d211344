"""Perk storage the patcher reads from and writes overrides into.

The patcher only needs three things from its host: the winning version of
every perk, a copy-on-write override per perk, and lookup by editor ID.
PerkStore describes that; InMemoryPerkStore implements it over parsed rule
files merged in load order ("last wins").
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator
from typing import Protocol

from arrow_scaling.models.perk import Perk


logger = logging.getLogger(__name__)


class PerkStore(Protocol):
    def winning_overrides(self) -> Iterable[Perk]:
        """One authoritative version of every perk, overrides first."""
        ...

    def get_or_add_override(self, perk: Perk) -> Perk:
        """Mutable override of *perk*; the same object on every call."""
        ...

    def resolve(self, editor_id: str) -> Perk:
        """Winning version of the perk *editor_id*; KeyError if unknown."""
        ...


class InMemoryPerkStore:
    """PerkStore over plain Perk objects.

    Source perks are never mutated. Overrides are deep copies made on first
    request and kept in the order they were created.
    """

    __slots__ = ("_sources", "_overrides")

    def __init__(self, perks: Iterable[Perk] = ()) -> None:
        self._sources: dict[str, Perk] = {}
        self._overrides: dict[str, Perk] = {}
        for perk in perks:
            self._sources[perk.editor_id] = perk

    @classmethod
    def from_plugins(cls, plugins: Iterable[Iterable[Perk]]) -> InMemoryPerkStore:
        """Merge perks from several plugins in load order.

        Later plugins replace earlier definitions of the same editor ID but
        keep the position where the perk first appeared.
        """
        merged: dict[str, Perk] = {}
        for plugin in plugins:
            for perk in plugin:
                if perk.editor_id in merged:
                    logger.debug("Perk %s overridden by a later plugin", perk.editor_id)
                merged[perk.editor_id] = perk
        return cls(merged.values())

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, editor_id: object) -> bool:
        return editor_id in self._sources or editor_id in self._overrides

    def winning_overrides(self) -> Iterator[Perk]:
        for editor_id, perk in self._sources.items():
            yield self._overrides.get(editor_id, perk)
        for editor_id, perk in self._overrides.items():
            if editor_id not in self._sources:
                yield perk

    def get_or_add_override(self, perk: Perk) -> Perk:
        override = self._overrides.get(perk.editor_id)
        if override is None:
            override = copy.deepcopy(perk)
            self._overrides[perk.editor_id] = override
            logger.debug("Created override for %s", perk.editor_id)
        return override

    def resolve(self, editor_id: str) -> Perk:
        if editor_id in self._overrides:
            return self._overrides[editor_id]
        try:
            return self._sources[editor_id]
        except KeyError:
            raise KeyError(f"Perk {editor_id!r} not found") from None

    def overrides(self) -> list[Perk]:
        """All overrides created so far, in creation order."""
        return list(self._overrides.values())
