"""Outward capability surface for one TV.

A TV exposes one power capability, one "current selection" capability and
one tuner input per qualifying favourite. Inputs are keyed by a subtype
derived from the channel number, so renaming a favourite updates the
existing input instead of creating a duplicate.
"""

from dataclasses import dataclass, asdict

from models.types import Favourite, RebuildResult
from models.utils import normalise_channel_number, is_tunable_number

ACTIVE = 'active'
ACTIVE_IDENTIFIER = 'active_identifier'
INPUT_KIND_TUNER = 'tuner'


def input_subtype(number: str) -> str:
    """Stable subtype for a favourite's input."""
    return f"fav:{number}"


@dataclass
class InputSource:
    """One selectable input."""
    subtype: str
    name: str
    identifier: int
    configured: bool = True
    visible: bool = True
    kind: str = INPUT_KIND_TUNER

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'InputSource':
        return cls(
            subtype=str(data['subtype']),
            name=str(data['name']),
            identifier=int(data['identifier']),
            configured=bool(data.get('configured', True)),
            visible=bool(data.get('visible', True)),
            kind=str(data.get('kind', INPUT_KIND_TUNER)),
        )


class CapabilitySet:
    """Power, current selection and input capabilities of one TV."""

    def __init__(self, inputs: list[InputSource] | None = None,
                 active: bool = False, active_identifier: int = 0):
        self.active = active
        self.active_identifier = active_identifier
        self.inputs: dict[str, InputSource] = {}
        self.identifier_to_channel: dict[int, str] = {}

        for source in inputs or []:
            self.inputs[source.subtype] = source
            self.identifier_to_channel[source.identifier] = str(source.identifier)

    def rebuild(self, favourites: list[Favourite]) -> RebuildResult:
        """Rebuild inputs and the identifier table from a favourites list.

        Inputs still present are updated in place (the name may change, the
        identifier never does). Inputs no longer in the list are removed.
        Favourites outside 1-999 are dropped; a repeated channel number keeps
        its first favourite.

        Returns:
            RebuildResult listing added, updated and removed subtypes
        """
        result = RebuildResult()
        inputs: dict[str, InputSource] = {}
        table: dict[int, str] = {}

        for favourite in favourites:
            number = normalise_channel_number(favourite.number)
            if number is None or not is_tunable_number(number):
                continue

            subtype = input_subtype(number)
            if subtype in inputs:
                continue

            identifier = int(number)
            existing = self.inputs.get(subtype)
            if existing is not None:
                existing.name = favourite.name
                existing.identifier = identifier
                existing.configured = True
                existing.visible = True
                existing.kind = INPUT_KIND_TUNER
                inputs[subtype] = existing
                result.updated.append(subtype)
            else:
                inputs[subtype] = InputSource(subtype=subtype, name=favourite.name,
                                              identifier=identifier)
                result.added.append(subtype)

            table[identifier] = number

        result.removed = [subtype for subtype in self.inputs if subtype not in inputs]

        self.inputs = inputs
        self.identifier_to_channel = table
        return result

    def channel_for(self, identifier: int) -> str | None:
        """Look up the channel number behind an input identifier."""
        return self.identifier_to_channel.get(identifier)

    def to_dict(self) -> dict:
        return {
            ACTIVE: self.active,
            ACTIVE_IDENTIFIER: self.active_identifier,
            'inputs': [source.to_dict() for source in self.inputs.values()],
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> 'CapabilitySet':
        data = data or {}
        return cls(
            inputs=[InputSource.from_dict(item) for item in data.get('inputs', [])],
            active=bool(data.get(ACTIVE, False)),
            active_identifier=int(data.get(ACTIVE_IDENTIFIER, 0) or 0),
        )
