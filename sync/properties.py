"""Per-entity-type property tables.

A registry maps a property name to how it is read from and written into a
wire snapshot. Registries are built once, when the owning context class is
defined, and are read-only afterwards.
"""

import operator
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Flag
from types import MappingProxyType
from typing import Any, Callable, Iterator, Optional

from pydantic import BaseModel


@dataclass(frozen=True)
class Property:
    """How one named property maps onto a snapshot.

    Attributes:
        source: Snapshot attribute that must be present in an incoming
            snapshot for the property to take part in a merge.
        getter: Reads the raw value from a snapshot.
        setter: Writes a raw value into a snapshot.
        field: Field-selection flag that makes a fetch populate the property.
        include: Query parameter that requests the property as a nested
            sub-resource instead of a plain field.
        resolver: Turns the raw value into a domain object, given the
            owning context (used for references resolved through the
            identity cache).
        equals: Equality used when diffing during a merge.
    """
    source: str
    getter: Callable[[Any], Any]
    setter: Callable[[Any, Any], None]
    field: Optional[Flag] = None
    include: Optional[str] = None
    resolver: Optional[Callable[[Any, Any], Any]] = None
    equals: Callable[[Any, Any], bool] = operator.eq

    @classmethod
    def attribute(cls, name: str, **kwargs: Any) -> "Property":
        """Property backed directly by a snapshot attribute."""
        return cls(
            source=name,
            getter=operator.attrgetter(name),
            setter=lambda snapshot, value: setattr(snapshot, name, value),
            **kwargs,
        )

    def is_present(self, snapshot: BaseModel) -> bool:
        return self.source in snapshot.model_fields_set


class PropertyRegistry(Mapping):
    """Immutable name -> Property table for one snapshot type."""

    def __init__(self, snapshot_type: type[BaseModel], properties: dict[str, Property]):
        for name, prop in properties.items():
            if prop.source not in snapshot_type.model_fields:
                raise ValueError(
                    f"{snapshot_type.__name__} has no field {prop.source!r} for property {name!r}"
                )
        self._snapshot_type = snapshot_type
        self._properties = MappingProxyType(dict(properties))

    def __getitem__(self, name: str) -> Property:
        return self._properties[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    @property
    def snapshot_type(self) -> type[BaseModel]:
        return self._snapshot_type

    def wire_name(self, name: str) -> str:
        """Key the property's source attribute uses on the wire."""
        source = self._properties[name].source
        info = self._snapshot_type.model_fields[source]
        return info.alias or source

    def names_for(self, selection: Flag) -> list[str]:
        """Property names a fetch with ``selection`` populates."""
        return [
            name for name, prop in self._properties.items()
            if prop.field is not None and prop.field & selection
        ]

    def fetch_params(self, selection: Flag) -> dict[str, str]:
        """Build fetch query parameters for a field selection.

        Plain fields are listed in ``fields``; nested sub-resources are
        switched on or off explicitly so the server does not send more than
        was asked for.
        """
        fields: list[str] = []
        params: dict[str, str] = {}
        for name, prop in self._properties.items():
            if prop.field is None:
                continue
            selected = bool(prop.field & selection)
            if prop.include:
                params[prop.include] = "true" if selected else "false"
            elif selected:
                wire = self.wire_name(name)
                if wire not in fields:
                    fields.append(wire)
        params["fields"] = ",".join(fields)
        return params
