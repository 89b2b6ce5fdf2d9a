"""
Result File Sections

One encoder per section of the legacy result file. Every encoder takes the
document and the internal id of the current player and returns the packed
section, which (except for the ship position grid) starts with a 16-bit
record count.

Record sizes: ship 107, target 34, planet 85, base 156, combat 100 bytes.
"""

import logging
from typing import Dict, List, Sequence, Tuple

from nu2vgap.binfmt import checksum, pack, pack_counted, pack_words
from nu2vgap.document import NUM_RACES, GameDocument
from nu2vgap.records import Combatant, Planet, Ship, Starbase

logger = logging.getLogger(__name__)

# Values of Ship.transfertargettype
TRANSFER_UNLOAD = 1
TRANSFER_SHIP = 2

# Nu missions using mission1target as their parameter
MISSION_TOW = 6
MISSION_INTERCEPT = 7

DEFAULT_FRIENDLY_CODE = "???"

# Planet fields in record order. A planet is only reported if its friendly
# code is set or one of these is positive; Nu sends every planet it knows.
PLANET_FIELDS = (
    "mines", "factories", "defense",
    "neutronium", "tritanium", "duranium", "molybdenum",
    "clans", "supplies", "megacredits",
    "groundneutronium", "groundtritanium", "groundduranium", "groundmolybdenum",
    "densityneutronium", "densitytritanium", "densityduranium", "densitymolybdenum",
    "colonisttaxrate", "nativetaxrate",
    "colonisthappypoints", "nativehappypoints",
    "nativegovernment",
    "nativeclans",
    "nativetype",
)

TRANSFER_FIELDS = (
    "transferneutronium", "transfertritanium", "transferduranium",
    "transfermolybdenum", "transferclans", "transfersupplies",
    "transfertargetid",
)

# Starbase stock blocks in record order: (stock type, number of slots).
# Type 1 (hulls) is indexed by the race hull roster instead of 1..n.
STOCK_ENGINES = 2
STOCK_HULLS = 1
STOCK_BEAMS = 3
STOCK_LAUNCHERS = 4
STOCK_TORPEDOES = 5

SHIPXY_COUNT = 999

# Sent in place of the password in the generation block
NO_PASSWORD = "NOPASSWORD"

# Signature word of combat records ("NU")
VCR_SIGNATURE = 0x554E


# =============================================================================
# SHIPS
# =============================================================================

def encode_mission(mission: int) -> int:
    """Nu missions are 0-based, legacy missions 1-based; negative values pass."""
    return mission + 1 if mission >= 0 else mission


def _transfer_block(ship: Ship, transfer_type: int) -> bytes:
    if ship.transfertargettype != transfer_type:
        return b"\0" * 14
    return pack("<7H", *(getattr(ship, name) for name in TRANSFER_FIELDS))


def pack_ship(doc: GameDocument, ship: Ship) -> bytes:
    if ship.transfermegacredits or ship.transferammo:
        logger.warning(
            "ship %d: transfer of megacredits and/or ammo cannot be represented", ship.id
        )
    return b"".join([
        pack("<2H3s3H", ship.id, doc.map_owner_to_race(ship.ownerid), ship.friendlycode,
             ship.warp, ship.targetx - ship.x, ship.targety - ship.y),
        pack("<10H", ship.x, ship.y, ship.engineid, ship.hullid, ship.beamid,
             ship.beams, ship.bays, ship.torpedoid, ship.ammo, ship.torps),
        pack("<3H", encode_mission(ship.mission), doc.map_owner_to_race(ship.enemy),
             ship.mission1target if ship.mission == MISSION_TOW else 0),
        pack("<3H20s5H", ship.damage, ship.crew, ship.clans, ship.name,
             ship.neutronium, ship.tritanium, ship.duranium, ship.molybdenum, ship.supplies),
        _transfer_block(ship, TRANSFER_UNLOAD),
        _transfer_block(ship, TRANSFER_SHIP),
        pack("<2H", ship.mission1target if ship.mission == MISSION_INTERCEPT else 0,
             ship.megacredits),
    ])


def encode_ships(doc: GameDocument, player_id: int) -> bytes:
    """Ships owned by the current player."""
    return pack_counted([
        pack_ship(doc, ship) for ship in doc.ships() if ship.ownerid == player_id
    ])


def encode_targets(doc: GameDocument, player_id: int) -> bytes:
    """Foreign ships visible to the current player."""
    return pack_counted([
        pack("<7H20s", ship.id, doc.map_owner_to_race(ship.ownerid), ship.warp,
             ship.x, ship.y, ship.hullid, ship.heading, ship.name)
        for ship in doc.ships() if ship.ownerid != player_id
    ])


# =============================================================================
# PLANETS
# =============================================================================

def is_planet_reported(planet: Planet) -> bool:
    return (planet.friendlycode != DEFAULT_FRIENDLY_CODE
            or any(getattr(planet, name) > 0 for name in PLANET_FIELDS))


def encode_temperature(temp: int) -> int:
    return 100 - temp if temp >= 0 else -1


def pack_planet(doc: GameDocument, planet: Planet) -> bytes:
    # Mines, factories and defense are reported after building, supplies after
    # supply sale; a partially played turn cannot be undone from these values.
    values = [getattr(planet, name) for name in PLANET_FIELDS]
    return (
        pack("<2H3s3H11I9HIH", doc.map_owner_to_race(planet.ownerid), planet.id,
             planet.friendlycode, *values)
        + pack("<2H", encode_temperature(planet.temp), planet.buildingstarbase)
    )


def encode_planets(doc: GameDocument, player_id: int) -> bytes:
    return pack_counted([
        pack_planet(doc, planet) for planet in doc.planets() if is_planet_reported(planet)
    ])


# =============================================================================
# STARBASES
# =============================================================================

def _stock_index(doc: GameDocument) -> Dict[Tuple[int, int, int], int]:
    index: Dict[Tuple[int, int, int], int] = {}
    for entry in doc.stock():
        index.setdefault((entry.starbaseid, entry.stocktype, entry.stockid), entry.amount)
    return index


def build_slot(base: Starbase, roster: Sequence[int]) -> int:
    """1-based roster slot of the hull being built, 0 if none or not buildable."""
    if not base.isbuilding:
        return 0
    for slot, hull_id in enumerate(roster, 1):
        if base.buildhullid == hull_id:
            return slot
    logger.warning("base %d is building a ship that you cannot build", base.planetid)
    return 0


def pack_base(base: Starbase, race: int, roster: Sequence[int],
              stock: Dict[Tuple[int, int, int], int]) -> bytes:
    def stock_block(stock_type: int, ids: Sequence[int]) -> bytes:
        return pack_words(stock.get((base.id, stock_type, i), 0) for i in ids)

    return b"".join([
        pack("<8H", base.planetid, race, base.defense, base.damage,
             base.enginetechlevel, base.hulltechlevel, base.beamtechlevel,
             base.torptechlevel),
        stock_block(STOCK_ENGINES, range(1, 10)),
        stock_block(STOCK_HULLS, roster),
        stock_block(STOCK_BEAMS, range(1, 11)),
        stock_block(STOCK_LAUNCHERS, range(1, 11)),
        stock_block(STOCK_TORPEDOES, range(1, 11)),
        pack("<4H", base.fighters, base.targetshipid, base.shipmission, base.mission),
        pack("<7H", build_slot(base, roster), base.buildengineid, base.buildbeamid,
             base.buildbeamcount, base.buildtorpedoid, base.buildtorpcount, 0),
    ])


def encode_bases(doc: GameDocument, player_id: int) -> bytes:
    """Starbases of the current player; allied bases are skipped."""
    race = doc.map_owner_to_race(player_id)
    roster = doc.race_hulls()
    stock = _stock_index(doc)
    return pack_counted([
        pack_base(base, race, roster, stock)
        for base in doc.starbases() if doc.base_owner(base) == player_id
    ])


# =============================================================================
# SHIP POSITIONS
# =============================================================================

def encode_ship_positions(doc: GameDocument, player_id: int) -> bytes:
    """Direct-index table of x, y, race, mass for ship ids 1..999."""
    grid = [0] * (SHIPXY_COUNT * 4)
    for ship in doc.ships():
        if 0 < ship.id <= SHIPXY_COUNT:
            pos = (ship.id - 1) * 4
            grid[pos:pos + 4] = [ship.x, ship.y, doc.map_owner_to_race(ship.ownerid), ship.mass]
    return pack_words(grid)


# =============================================================================
# GENERATION BLOCK
# =============================================================================

def score_grid(doc: GameDocument) -> List[int]:
    """Planets, capital ships, freighters, bases per race for the current turn."""
    grid = [0] * (NUM_RACES * 4)
    turn = doc.turn
    for score in doc.scores():
        if 0 < score.ownerid <= NUM_RACES and score.turn == turn:
            race = doc.map_owner_to_race(score.ownerid)
            if not 0 < race <= NUM_RACES:
                continue
            pos = (race - 1) * 4
            grid[pos:pos + 4] = [score.planets, score.capitalships, score.freighters,
                                 score.starbases]
    return grid


def encode_generation(doc: GameDocument, player_id: int, ships: bytes, planets: bytes,
                      bases: bytes) -> bytes:
    """
    Turn metadata block.

    ``ships``, ``planets`` and ``bases`` are the already encoded sections;
    their checksums skip the leading record count.
    """
    timestamp = doc.timestamp
    return b"".join([
        pack("<18s", timestamp),
        pack_words(score_grid(doc)),
        pack("<H20s", doc.map_owner_to_race(player_id), NO_PASSWORD),
        pack("<3I", checksum(ships[2:]), checksum(planets[2:]), checksum(bases[2:])),
        pack("<2H", doc.turn, checksum(timestamp.encode("latin-1"))),
    ])


# =============================================================================
# COMBAT RECORDINGS
# =============================================================================

def pack_combatant(side: Combatant) -> bytes:
    ammo = side.torpedos if side.torpedoid else side.fighters
    return pack(
        "<20s11H", side.name, side.damage, side.crew, side.objectid, side.raceid,
        256 * side.hullid + 1, side.beamid, side.beamcount, side.baycount,
        side.torpedoid, ammo, side.launchercount,
    )


def encode_vcrs(doc: GameDocument, player_id: int) -> bytes:
    records = []
    for vcr in doc.vcrs():
        records.append(b"".join([
            pack("<6H", vcr.seed, VCR_SIGNATURE, vcr.right.temperature, vcr.battletype,
                 vcr.left.mass, vcr.right.mass),
            pack_combatant(vcr.left),
            pack_combatant(vcr.right),
            pack("<2H", vcr.left.shield, vcr.right.shield),
        ]))
    return pack_counted(records)
