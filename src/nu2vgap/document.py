"""
Game Document

Wraps the value tree of a Nu result ("Nu RST") and provides typed access
to the entities the encoders need, plus the lookups shared between them:

- owner id -> race id mapping (via the players list)
- starbase -> owning player (via the planet the base sits on)
- the current player's 20-slot hull roster
- the legacy 18-character host timestamp
"""

import logging
import re
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from nu2vgap.binfmt import to_int, to_text
from nu2vgap.errors import SchemaError
from nu2vgap.parser import parse_document, parse_file
from nu2vgap.records import (
    CombatRecording,
    IonStorm,
    Message,
    Minefield,
    Planet,
    Player,
    Score,
    Ship,
    Starbase,
    StockEntry,
)

logger = logging.getLogger(__name__)

NUM_RACES = 11
HULL_SLOTS = 20
TIMESTAMP_LENGTH = 18

_TIMESTAMP_SPLIT_RE = re.compile(r"[/: ]+")


def host_timestamp(hoststart: Any) -> str:
    """
    Convert a Nu host time to the legacy timestamp format.

    Nu reports times like ``8/12/2011 9:00:13 PM``; the result file wants
    ``08-12-201121:00:13`` (month-day-year, 24-hour time, no separator).
    """
    parts = _TIMESTAMP_SPLIT_RE.split(to_text(hoststart))
    while parts and parts[-1] == "":
        parts.pop()

    if len(parts) != 7:
        logger.warning("unable to figure out a reliable timestamp from %r", hoststart)
        parts += ["0"] * (7 - len(parts))
        numbers = [to_int(p) for p in parts[:6]]
    else:
        numbers = [to_int(p) for p in parts[:6]]
        if numbers[3] == 12:
            numbers[3] = 0
        # The AM/PM marker is the 7th field; reading the 6th (the seconds)
        # never matched, so PM times used to stay 12 hours early
        if parts[6].upper() == "PM":
            numbers[3] += 12

    text = "%02d-%02d-%04d%02d:%02d:%02d" % tuple(numbers)
    return text[:TIMESTAMP_LENGTH]


class GameDocument:
    """
    A validated Nu result document.

    Usage:
        doc = GameDocument.from_file("c2rst.txt")
        for ship in doc.ships():
            ...
    """

    def __init__(self, root: Any):
        self.root = root
        self.validate()

    @classmethod
    def from_bytes(cls, data: Union[bytes, str], filename: str = "<document>") -> "GameDocument":
        return cls(parse_document(data, filename))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "GameDocument":
        return cls(parse_file(path))

    def validate(self) -> None:
        """Check the player identity; raises SchemaError on inconsistencies."""
        if not isinstance(self.root, dict) or not isinstance(self.root.get("rst"), dict):
            raise SchemaError("no result file received")
        player = self.rst.get("player")
        if not isinstance(player, dict) or not to_int(player.get("raceid")):
            raise SchemaError("result does not contain player name")
        if to_text(player.get("savekey")) != to_text(self.root.get("savekey")):
            raise SchemaError("received two different savekeys")

    # -------------------------------------------------------------------------
    # Raw sections
    # -------------------------------------------------------------------------

    @property
    def rst(self) -> Dict[str, Any]:
        return self.root["rst"]

    @property
    def player(self) -> Dict[str, Any]:
        return self.rst["player"]

    @property
    def player_id(self) -> int:
        """Internal id of the player this result belongs to."""
        return to_int(self.player.get("id"))

    @property
    def race_id(self) -> int:
        return to_int(self.player.get("raceid"))

    @property
    def savekey(self) -> str:
        return to_text(self.root.get("savekey"))

    def mapping(self, key: str) -> Dict[str, Any]:
        """A free-form mapping section such as ``settings`` or ``game``."""
        value = self.rst.get(key)
        return value if isinstance(value, dict) else {}

    def items(self, key: str) -> List[Dict[str, Any]]:
        """The mapping entries of a collection section; missing sections are empty."""
        value = self.rst.get(key)
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @property
    def settings(self) -> Dict[str, Any]:
        return self.mapping("settings")

    @property
    def game(self) -> Dict[str, Any]:
        return self.mapping("game")

    @property
    def turn(self) -> int:
        return to_int(self.settings.get("turn"))

    @property
    def game_name(self) -> str:
        return to_text(self.settings.get("name"))

    @cached_property
    def timestamp(self) -> str:
        return host_timestamp(self.settings.get("hoststart"))

    # -------------------------------------------------------------------------
    # Typed entities
    # -------------------------------------------------------------------------

    def players(self) -> List[Player]:
        return [Player.from_value(v) for v in self.items("players")]

    def ships(self) -> List[Ship]:
        return [Ship.from_value(v) for v in self.items("ships")]

    def planets(self) -> List[Planet]:
        return [Planet.from_value(v) for v in self.items("planets")]

    def starbases(self) -> List[Starbase]:
        return [Starbase.from_value(v) for v in self.items("starbases")]

    def stock(self) -> List[StockEntry]:
        return [StockEntry.from_value(v) for v in self.items("stock")]

    def vcrs(self) -> List[CombatRecording]:
        return [CombatRecording.from_value(v) for v in self.items("vcrs")]

    def messages(self) -> List[Message]:
        return [Message.from_value(v) for v in self.items("messages")]

    def scores(self) -> List[Score]:
        return [Score.from_value(v) for v in self.items("scores")]

    def ion_storms(self) -> List[IonStorm]:
        return [IonStorm.from_value(v) for v in self.items("ionstorms")]

    def minefields(self) -> List[Minefield]:
        return [Minefield.from_value(v) for v in self.items("minefields")]

    def race_hulls(self) -> List[int]:
        """The hull ids the current race can build, padded to 20 slots."""
        hulls = self.rst.get("racehulls")
        hulls = [to_int(h) for h in hulls] if isinstance(hulls, list) else []
        return (hulls + [0] * HULL_SLOTS)[:HULL_SLOTS]

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @cached_property
    def _race_by_owner(self) -> Dict[int, int]:
        result: Dict[int, int] = {}
        for player in self.players():
            result.setdefault(player.id, player.raceid)
        return result

    @cached_property
    def _owner_by_planet(self) -> Dict[int, int]:
        result: Dict[int, int] = {}
        for planet in self.planets():
            result.setdefault(planet.id, planet.ownerid)
        return result

    def map_owner_to_race(self, owner_id: int) -> int:
        """Map an internal owner id to the race id; 0 if the owner is unknown."""
        return self._race_by_owner.get(to_int(owner_id), 0)

    def base_owner(self, base: Union[Starbase, Mapping[str, Any]]) -> int:
        """
        Owner of a starbase, from the planet it orbits.

        Allied bases are sent in the same collection as our own, so the base
        record alone does not tell whose it is. 0 if the planet is unknown.
        """
        planet_id = base.planetid if isinstance(base, Starbase) else to_int(base.get("planetid"))
        return self._owner_by_planet.get(planet_id, 0)
