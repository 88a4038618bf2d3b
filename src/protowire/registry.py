"""Extension registry with entry-point auto-discovery.

An :class:`ExtensionRegistry` maps ``(host message type, field number)`` to
an :class:`~protowire.message.ExtensionDescriptor`. Registries are built
once, optionally frozen, and passed explicitly into decode calls.

Independently declared extension sets compose by merging::

    registry = ExtensionRegistry(FILE_A_EXTENSIONS) | ExtensionRegistry(FILE_B_EXTENSIONS)

Third-party packages can publish extension sets under the
``protowire.extensions`` entry-point group; see
:meth:`ExtensionRegistry.from_entry_points`.
"""

from __future__ import annotations

import importlib.metadata
import logging
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from protowire.exceptions import ExtensionConflict, RegistryFrozenError, UnsupportedFieldNumber
from protowire.message.extensions import ExtensionDescriptor

if TYPE_CHECKING:
    from protowire.message.base import Message

logger = logging.getLogger("protowire")

_ENTRY_POINT_GROUP = "protowire.extensions"


class ExtensionRegistry:
    """Lookup table of extension descriptors.

    Registration validates each descriptor immediately:

    - the field number must lie in one of the host's extension ranges
      (:class:`~protowire.exceptions.UnsupportedFieldNumber` otherwise);
    - the ``(host, number)`` slot and the full name must be free
      (:class:`~protowire.exceptions.ExtensionConflict` otherwise).
      Re-registering an equal descriptor is a no-op.

    Lookups are dictionary reads. A registry is not locked: populate it
    from one thread, then :meth:`freeze` it before sharing.

    Args:
        extensions: Descriptors (or another registry) to register.
    """

    def __init__(self, extensions: Iterable[ExtensionDescriptor] = ()) -> None:
        self._by_key: dict[tuple[type[Message], int], ExtensionDescriptor] = {}
        self._by_name: dict[str, ExtensionDescriptor] = {}
        self._frozen = False
        self.add_all(extensions)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> ExtensionRegistry:
        """Reject all further registration. Returns ``self`` for chaining."""
        self._frozen = True
        return self

    def add(self, descriptor: ExtensionDescriptor) -> None:
        """Register one extension descriptor.

        Args:
            descriptor: The extension to register.

        Raises:
            RegistryFrozenError: If the registry has been frozen.
            UnsupportedFieldNumber: If the number is outside the host's
                extension ranges.
            ExtensionConflict: If the slot or full name is already taken by
                a different descriptor.
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register {descriptor.full_name}: registry is frozen"
            )
        host = descriptor.extendee
        if not host.in_extension_range(descriptor.number):
            ranges = ", ".join(f"[{s}, {e})" for s, e in host.extension_ranges) or "none"
            raise UnsupportedFieldNumber(
                f"Extension {descriptor.full_name} uses field {descriptor.number}, "
                f"outside the extension ranges of {host.full_name} ({ranges})"
            )

        key = (host, descriptor.number)
        existing = self._by_key.get(key)
        if existing is not None:
            if existing == descriptor:
                return
            raise ExtensionConflict(
                f"Field {descriptor.number} of {host.full_name} is claimed by both "
                f"{existing.full_name} and {descriptor.full_name}"
            )
        named = self._by_name.get(descriptor.full_name)
        if named is not None:
            raise ExtensionConflict(
                f"Extension name {descriptor.full_name} is already registered "
                f"for field {named.number} of {named.extendee.full_name}"
            )

        self._by_key[key] = descriptor
        self._by_name[descriptor.full_name] = descriptor
        logger.debug(
            "Registered extension %s (field %d of %s)",
            descriptor.full_name,
            descriptor.number,
            host.full_name,
        )

    def add_all(self, extensions: Iterable[ExtensionDescriptor]) -> None:
        for descriptor in extensions:
            self.add(descriptor)

    def find(self, host: type[Message], number: int) -> ExtensionDescriptor | None:
        """Return the descriptor for field *number* of *host*, if registered."""
        return self._by_key.get((host, number))

    def find_by_name(self, full_name: str) -> ExtensionDescriptor | None:
        return self._by_name.get(full_name)

    def extensions_for(self, host: type[Message]) -> list[ExtensionDescriptor]:
        """Return all extensions of *host* in ascending field-number order."""
        return sorted(
            (d for (h, _), d in self._by_key.items() if h is host),
            key=lambda d: d.number,
        )

    def merge(self, *others: Iterable[ExtensionDescriptor]) -> ExtensionRegistry:
        """Return a new, unfrozen registry holding the union of all inputs.

        Raises:
            ExtensionConflict: If two inputs claim the same slot or name
                with different descriptors.
        """
        merged = ExtensionRegistry(self)
        for other in others:
            merged.add_all(other)
        return merged

    def __or__(self, other: ExtensionRegistry) -> ExtensionRegistry:
        if not isinstance(other, ExtensionRegistry):
            return NotImplemented
        return self.merge(other)

    def __contains__(self, descriptor: object) -> bool:
        if not isinstance(descriptor, ExtensionDescriptor):
            return False
        return self._by_key.get((descriptor.extendee, descriptor.number)) == descriptor

    def __iter__(self) -> Iterator[ExtensionDescriptor]:
        return iter(
            sorted(self._by_key.values(), key=lambda d: (d.extendee.full_name, d.number))
        )

    def __len__(self) -> int:
        return len(self._by_key)

    def __repr__(self) -> str:
        state = ", frozen" if self._frozen else ""
        return f"ExtensionRegistry({len(self)} extensions{state})"

    @classmethod
    def from_entry_points(cls, group: str = _ENTRY_POINT_GROUP) -> ExtensionRegistry:
        """Build a registry from extension sets published as entry points.

        Each entry point must load to an :class:`ExtensionDescriptor` or an
        iterable of them (an :class:`ExtensionRegistry` included). Entry
        points that fail to load are logged as warnings and skipped;
        conflicts between the loaded sets are raised.

        Args:
            group: Entry-point group to scan.

        Returns:
            A new, unfrozen registry.

        Raises:
            ExtensionConflict: If two published sets collide.
            UnsupportedFieldNumber: If a published descriptor is out of range.
        """
        registry = cls()
        try:
            eps = importlib.metadata.entry_points(group=group)
        except Exception:  # Intentional: must not crash on broken metadata
            logger.warning("Failed to load entry points for %s", group, exc_info=True)
            return registry

        for ep in eps:
            try:
                loaded = ep.load()
            except Exception:  # Intentional: one bad plugin must not block others
                logger.warning(
                    "Failed to load extension entry point %r: %s",
                    ep.name,
                    ep.value,
                    exc_info=True,
                )
                continue
            if isinstance(loaded, ExtensionDescriptor):
                registry.add(loaded)
            else:
                registry.add_all(loaded)
            logger.debug("Loaded extensions %r from entry point", ep.name)
        return registry
