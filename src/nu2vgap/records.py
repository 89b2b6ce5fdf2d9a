"""
Typed Records

Dataclasses for the entities the converter reads out of a Nu document.
Field names match the document keys so that a record can be built from a
mapping generically; missing keys take the coerced default (0 or "").
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from nu2vgap.binfmt import to_int, to_text

R = TypeVar("R", bound="Record")


class Record:
    """Mixin that builds a dataclass from a document mapping."""

    @classmethod
    def from_value(cls: Type[R], value: Optional[Mapping[str, Any]]) -> R:
        value = value or {}
        kwargs: Dict[str, Any] = {}
        for f in dataclasses.fields(cls):
            raw = value.get(f.name)
            if f.type is int:
                kwargs[f.name] = to_int(raw)
            elif f.type is str:
                kwargs[f.name] = to_text(raw)
            elif f.type is bool:
                kwargs[f.name] = bool(to_int(raw))
        return cls(**kwargs)


@dataclass
class Player(Record):
    """A participant of the game; ``id`` is the internal owner id."""
    id: int = 0
    raceid: int = 0


@dataclass
class Ship(Record):
    id: int = 0
    ownerid: int = 0
    name: str = ""
    friendlycode: str = ""
    warp: int = 0
    x: int = 0
    y: int = 0
    targetx: int = 0
    targety: int = 0
    heading: int = 0
    mass: int = 0
    engineid: int = 0
    hullid: int = 0
    beamid: int = 0
    beams: int = 0
    bays: int = 0
    torpedoid: int = 0
    ammo: int = 0
    torps: int = 0
    mission: int = 0
    mission1target: int = 0
    enemy: int = 0
    damage: int = 0
    crew: int = 0
    clans: int = 0
    neutronium: int = 0
    tritanium: int = 0
    duranium: int = 0
    molybdenum: int = 0
    supplies: int = 0
    megacredits: int = 0
    transfertargettype: int = 0
    transfertargetid: int = 0
    transferneutronium: int = 0
    transfertritanium: int = 0
    transferduranium: int = 0
    transfermolybdenum: int = 0
    transferclans: int = 0
    transfersupplies: int = 0
    transfermegacredits: int = 0
    transferammo: int = 0


@dataclass
class Planet(Record):
    id: int = 0
    ownerid: int = 0
    name: str = ""
    friendlycode: str = ""
    x: int = 0
    y: int = 0
    mines: int = 0
    factories: int = 0
    defense: int = 0
    neutronium: int = 0
    tritanium: int = 0
    duranium: int = 0
    molybdenum: int = 0
    clans: int = 0
    supplies: int = 0
    megacredits: int = 0
    groundneutronium: int = 0
    groundtritanium: int = 0
    groundduranium: int = 0
    groundmolybdenum: int = 0
    densityneutronium: int = 0
    densitytritanium: int = 0
    densityduranium: int = 0
    densitymolybdenum: int = 0
    colonisttaxrate: int = 0
    nativetaxrate: int = 0
    colonisthappypoints: int = 0
    nativehappypoints: int = 0
    nativegovernment: int = 0
    nativeclans: int = 0
    nativetype: int = 0
    temp: int = 0
    buildingstarbase: int = 0


@dataclass
class Starbase(Record):
    id: int = 0
    planetid: int = 0
    defense: int = 0
    damage: int = 0
    enginetechlevel: int = 0
    hulltechlevel: int = 0
    beamtechlevel: int = 0
    torptechlevel: int = 0
    fighters: int = 0
    targetshipid: int = 0
    shipmission: int = 0
    mission: int = 0
    isbuilding: bool = False
    buildhullid: int = 0
    buildengineid: int = 0
    buildbeamid: int = 0
    buildbeamcount: int = 0
    buildtorpedoid: int = 0
    buildtorpcount: int = 0


@dataclass
class StockEntry(Record):
    """Parts or ammunition stored at a starbase."""
    starbaseid: int = 0
    stocktype: int = 0
    stockid: int = 0
    amount: int = 0


@dataclass
class Combatant(Record):
    """One side of a combat recording."""
    name: str = ""
    objectid: int = 0
    raceid: int = 0
    damage: int = 0
    crew: int = 0
    shield: int = 0
    mass: int = 0
    temperature: int = 0
    hullid: int = 0
    beamid: int = 0
    beamcount: int = 0
    baycount: int = 0
    torpedoid: int = 0
    torpedos: int = 0
    fighters: int = 0
    launchercount: int = 0


@dataclass
class CombatRecording(Record):
    seed: int = 0
    battletype: int = 0
    left: Combatant = field(default_factory=Combatant)
    right: Combatant = field(default_factory=Combatant)

    @classmethod
    def from_value(cls, value: Optional[Mapping[str, Any]]) -> "CombatRecording":
        value = value or {}
        return cls(
            seed=to_int(value.get("seed")),
            battletype=to_int(value.get("battletype")),
            left=Combatant.from_value(value.get("left")),
            right=Combatant.from_value(value.get("right")),
        )


@dataclass
class Message(Record):
    id: int = 0
    messagetype: int = 0
    headline: str = ""
    body: str = ""
    target: int = 0
    x: int = 0
    y: int = 0


@dataclass
class Score(Record):
    ownerid: int = 0
    turn: int = 0
    planets: int = 0
    capitalships: int = 0
    freighters: int = 0
    starbases: int = 0
    militaryscore: int = 0
    inventoryscore: int = 0
    prioritypoints: int = 0


@dataclass
class IonStorm(Record):
    id: int = 0
    x: int = 0
    y: int = 0
    voltage: int = 0
    heading: int = 0
    warp: int = 0
    radius: int = 0
    isgrowing: int = 0


@dataclass
class Minefield(Record):
    id: int = 0
    ownerid: int = 0
    x: int = 0
    y: int = 0
    units: int = 0
    isweb: bool = False
    infoturn: int = 0
