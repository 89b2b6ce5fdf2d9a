"""
Converter

Drives a conversion run: updates the spec tables in the output directory,
then writes the result file, the status file, or the combat recordings.

Stages run in order and each writes its own files; if a later stage fails,
the files of the earlier stages stay on disk.
"""

import logging
from pathlib import Path
from typing import List, Union

from nu2vgap import spectables
from nu2vgap.config import ConverterConfig
from nu2vgap.document import GameDocument
from nu2vgap.messages import build_messages, encode_message_section
from nu2vgap.result import ResultFileAssembler, SectionSlot
from nu2vgap.sections import (
    encode_bases,
    encode_generation,
    encode_planets,
    encode_ship_positions,
    encode_ships,
    encode_targets,
    encode_vcrs,
)
from nu2vgap.status import write_status_file

logger = logging.getLogger(__name__)


def load_document(path: Union[str, Path]) -> GameDocument:
    logger.info("Parsing result...")
    return GameDocument.from_file(path)


def update_spec_files(doc: GameDocument, config: ConverterConfig) -> List[Path]:
    """
    Patch the spec tables, hull functions and race hull table.

    Baselines are taken from the output directory first, then from the
    root directory. Returns the files written.
    """
    out = config.output_dir
    out.mkdir(parents=True, exist_ok=True)
    written = []
    for layout in spectables.SPEC_LAYOUTS:
        logger.info("Making %s...", layout.filename)
        table = spectables.load_table(layout, out, config.root_dir)
        table.patch(doc.items(layout.source))
        written.append(table.save(out / layout.filename))

    logger.info("Making %s...", spectables.HULLFUNC_FILE)
    written.append(spectables.write_hullfunc(doc.items("hulls"), out / spectables.HULLFUNC_FILE))

    logger.info("Making %s...", spectables.TRUEHULL_FILE)
    truehull = spectables.load_truehull(out, config.root_dir)
    spectables.merge_truehull(truehull, doc.race_hulls(), doc.race_id)
    written.append(truehull.save(out / spectables.TRUEHULL_FILE))
    return written


def write_result(doc: GameDocument, config: ConverterConfig) -> Path:
    """Write ``player<race>.rst`` and drop a turn file made for the old result."""
    player = doc.player_id
    race = doc.map_owner_to_race(player)
    path = config.output_dir / f"player{race}.rst"
    logger.info("Making %s...", path.name)

    ships = encode_ships(doc, player)
    planets = encode_planets(doc, player)
    bases = encode_bases(doc, player)

    with ResultFileAssembler(path) as rst:
        rst.write_section(SectionSlot.SHIPS, ships)
        rst.write_section(SectionSlot.TARGETS, encode_targets(doc, player))
        rst.write_section(SectionSlot.PLANETS, planets)
        rst.write_section(SectionSlot.BASES, bases)
        rst.write_section(SectionSlot.MESSAGES,
                          encode_message_section(build_messages(doc), rst.position + 1))
        rst.write_section(SectionSlot.SHIPXY, encode_ship_positions(doc, player))
        rst.write_section(SectionSlot.GEN, encode_generation(doc, player, ships, planets, bases))
        rst.write_section(SectionSlot.VCR, encode_vcrs(doc, player))

    if config.remove_stale_turn:
        turn = config.output_dir / f"player{race}.trn"
        try:
            turn.unlink()
        except FileNotFoundError:
            pass
        else:
            logger.info("Removed %s.", turn.name)
    return path


def write_status(doc: GameDocument, config: ConverterConfig) -> Path:
    race = doc.map_owner_to_race(doc.player_id)
    return write_status_file(doc, doc.player_id, config.output_dir / f"util{race}.dat")


def write_vcr_file(doc: GameDocument, config: ConverterConfig) -> Path:
    # Named after the internal player id, not the race
    path = config.output_dir / f"vcr{doc.player_id}.dat"
    logger.info("Making %s...", path.name)
    path.write_bytes(encode_vcrs(doc, doc.player_id))
    return path


def convert_result(doc: GameDocument, config: ConverterConfig) -> List[Path]:
    """Full conversion: spec files, result file, status file."""
    written = update_spec_files(doc, config)
    written.append(write_result(doc, config))
    written.append(write_status(doc, config))
    return written


def convert_vcr(doc: GameDocument, config: ConverterConfig) -> List[Path]:
    """Spec files and combat recordings only."""
    written = update_spec_files(doc, config)
    written.append(write_vcr_file(doc, config))
    return written
