"""
Auxiliary Status File

Writes ``util<race>.dat``, a stream of typed records carrying data the
result file has no room for: scores, ion storms, current minefields and
allied starbases.

Each record is ``(u16 type, u16 length, payload)``.
"""

import logging
from pathlib import Path
from typing import List, Union

from nu2vgap.binfmt import pack
from nu2vgap.document import NUM_RACES, GameDocument

logger = logging.getLogger(__name__)

RECORD_MINEFIELD = 0
RECORD_ALLIED_BASE = 11
RECORD_HEADER = 13
RECORD_ION_STORM = 17
RECORD_SCORE = 51

# Host version claimed in the header record
HOST_VERSION = (3, 0)

# (score key, score id, title)
SCORE_KINDS = (
    ("militaryscore", 1000, "Military Score (Nu)"),
    ("inventoryscore", 1001, "Inventory Score (Nu)"),
    ("prioritypoints", 2, "Build Points (Nu)"),
)


def status_record(record_type: int, payload: bytes) -> bytes:
    return pack("<2H", record_type, len(payload)) + payload


def header_record(doc: GameDocument, race: int) -> bytes:
    major, minor = HOST_VERSION
    # Digests of the spec files are not filled in
    return status_record(RECORD_HEADER, pack(
        "<18s2H2B8I32s", doc.timestamp, doc.turn, race, major, minor,
        *[0] * 8, doc.game_name,
    ))


def score_record(doc: GameDocument, key: str, score_id: int, title: str) -> bytes:
    scores = [-1] * NUM_RACES
    for entry in doc.items("scores"):
        race = doc.map_owner_to_race(entry.get("ownerid"))
        if 0 < race <= NUM_RACES:
            scores[race - 1] = entry.get(key)
    return status_record(RECORD_SCORE, pack(
        "<50s2H12I", title, score_id, -1, -1, *scores,
    ))


def storm_class(voltage: int) -> int:
    """Storm class 1..5 from voltage; the division truncates toward zero."""
    return int((voltage + 49) / 50)


def ion_storm_records(doc: GameDocument) -> List[bytes]:
    return [
        status_record(RECORD_ION_STORM, pack(
            "<9H", storm.id, storm.x, storm.y, storm.voltage, storm.heading,
            storm.warp, storm.radius, storm_class(storm.voltage), storm.isgrowing,
        ))
        for storm in doc.ion_storms()
    ]


def minefield_records(doc: GameDocument) -> List[bytes]:
    """Minefields seen this turn; older sightings are kept by the client."""
    turn = doc.turn
    return [
        status_record(RECORD_MINEFIELD, pack(
            "<4HIH", field.id, field.x, field.y, doc.map_owner_to_race(field.ownerid),
            field.units, 1 if field.isweb else 0,
        ))
        for field in doc.minefields() if field.infoturn == turn
    ]


def allied_base_records(doc: GameDocument, player_id: int) -> List[bytes]:
    records = []
    for base in doc.starbases():
        owner = doc.base_owner(base)
        if owner != 0 and owner != player_id:
            records.append(status_record(RECORD_ALLIED_BASE, pack(
                "<2H", base.planetid, doc.map_owner_to_race(owner),
            )))
    return records


def encode_status(doc: GameDocument, player_id: int) -> bytes:
    race = doc.map_owner_to_race(player_id)
    records = [header_record(doc, race)]
    records += [score_record(doc, *kind) for kind in SCORE_KINDS]
    records += ion_storm_records(doc)
    records += minefield_records(doc)
    records += allied_base_records(doc, player_id)
    return b"".join(records)


def write_status_file(doc: GameDocument, player_id: int, path: Union[str, Path]) -> Path:
    path = Path(path)
    logger.info("Making %s...", path.name)
    path.write_bytes(encode_status(doc, player_id))
    return path
