"""
Specification Tables

Fixed-count, fixed-width baseline files (beamspec.dat, hullspec.dat, ...)
that describe static properties of game objects.

A Nu result only carries some of the fields the legacy files hold (hull
pictures, for instance, are missing entirely). Tables are therefore never
regenerated from scratch: the existing file is loaded (working directory
first, then the configured root directory), only fields named in the
table's layout are overwritten, and the result is written back. If no
baseline exists anywhere, a table of default records is synthesized.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from nu2vgap.binfmt import RecordFormat, pack_words, record_format, to_int
from nu2vgap.errors import SchemaError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class TableLayout:
    """Shape of a spec table: file name, record count, record format, field names."""
    filename: str
    count: int
    fmt: str
    fields: Tuple[str, ...]
    # Document collection the rows are taken from
    source: str = ""

    @property
    def record_format(self) -> RecordFormat:
        return record_format(self.fmt)

    @property
    def record_size(self) -> int:
        return self.record_format.size

    def default_record(self, number: int) -> List[Any]:
        """A synthesized record: zeros, with ``name`` set to ``#<number>``."""
        record: List[Any] = [0] * len(self.fields)
        if "name" in self.fields:
            record[self.fields.index("name")] = f"#{number}"
        return record


BEAMSPEC = TableLayout(
    "beamspec.dat", 10, "<20s8H",
    ("name", "cost", "tritanium", "duranium", "molybdenum", "mass",
     "techlevel", "crewkill", "damage"),
    source="beams",
)

TORPSPEC = TableLayout(
    "torpspec.dat", 10, "<20s9H",
    ("name", "torpedocost", "launchercost", "tritanium", "duranium",
     "molybdenum", "mass", "techlevel", "crewkill", "damage"),
    source="torpedos",
)

ENGSPEC = TableLayout(
    "engspec.dat", 9, "<20s5H9I",
    ("name", "cost", "tritanium", "duranium", "molybdenum", "techlevel",
     "warp1", "warp2", "warp3", "warp4", "warp5", "warp6", "warp7", "warp8",
     "warp9"),
    source="engines",
)

# zzimage and zzunused never appear in the document, so pictures survive
HULLSPEC = TableLayout(
    "hullspec.dat", 105, "<30s15H",
    ("name", "zzimage", "zzunused", "tritanium", "duranium", "molybdenum",
     "fueltank", "crew", "engines", "mass", "techlevel", "cargo",
     "fighterbays", "launchers", "beams", "cost"),
    source="hulls",
)

XYPLAN = TableLayout(
    "xyplan.dat", 500, "<3H",
    ("x", "y", "ownerid"),
    source="planets",
)

PLANETNM = TableLayout(
    "planet.nm", 500, "<20s",
    ("name",),
    source="planets",
)

SPEC_LAYOUTS: Tuple[TableLayout, ...] = (BEAMSPEC, TORPSPEC, ENGSPEC, HULLSPEC, XYPLAN, PLANETNM)

TRUEHULL_FILE = "truehull.dat"
TRUEHULL_SLOTS = 20
TRUEHULL_RACES = 11

HULLFUNC_FILE = "hullfunc.txt"


def find_baseline(filename: str, search_dirs: Sequence[Optional[PathLike]]) -> Optional[bytes]:
    """Read the first readable copy of ``filename`` from ``search_dirs``."""
    for directory in search_dirs:
        if directory is None:
            continue
        path = Path(directory) / filename
        try:
            data = path.read_bytes()
        except OSError:
            continue
        logger.debug("Using baseline %s", path)
        return data
    return None


@dataclass
class SpecTable:
    """A loaded spec table; ``records`` holds one value list per record."""
    layout: TableLayout
    records: List[List[Any]] = field(default_factory=list)
    # True if the table was synthesized rather than loaded
    synthesized: bool = False

    @classmethod
    def defaults(cls, layout: TableLayout) -> "SpecTable":
        records = [layout.default_record(n) for n in range(1, layout.count + 1)]
        return cls(layout, records, synthesized=True)

    @classmethod
    def from_bytes(cls, layout: TableLayout, data: bytes) -> "SpecTable":
        fmt = layout.record_format
        size = fmt.size
        records = [fmt.unpack(data[i * size:(i + 1) * size]) for i in range(layout.count)]
        return cls(layout, records)

    def __len__(self) -> int:
        return len(self.records)

    def row(self, number: int) -> Dict[str, Any]:
        """Record ``number`` (1-based) as a field -> value mapping."""
        return dict(zip(self.layout.fields, self.records[number - 1]))

    def patch(self, rows: Iterable[Mapping[str, Any]]) -> "SpecTable":
        """
        Overwrite the fields supplied by ``rows``, keyed by their ``id``.

        Rows outside 1..count are ignored; fields absent from a row, and
        fields not in the layout, are left untouched.
        """
        slots = {name: i for i, name in enumerate(self.layout.fields)}
        for row in rows:
            number = to_int(row.get("id"))
            if not 0 < number <= self.layout.count:
                continue
            record = self.records[number - 1]
            for key, value in row.items():
                if key in slots:
                    record[slots[key]] = value
        return self

    def to_bytes(self) -> bytes:
        fmt = self.layout.record_format
        return b"".join(fmt.pack(*record) for record in self.records)

    def save(self, path: PathLike) -> Path:
        path = Path(path)
        path.write_bytes(self.to_bytes())
        return path


def load_table(layout: TableLayout, work_dir: PathLike = ".",
               root_dir: Optional[PathLike] = None) -> SpecTable:
    """
    Load a spec table from the working directory or the root directory.

    Never fails because of a missing file: without a baseline a default
    table is synthesized.
    """
    data = find_baseline(layout.filename, [work_dir, root_dir])
    if data is not None:
        return SpecTable.from_bytes(layout, data)

    if layout is HULLSPEC:
        logger.warning(
            "'%s' created from scratch; it will not contain image references. "
            "Copy a pre-existing '%s' into the working directory and process "
            "the result again to have images.",
            layout.filename, layout.filename,
        )
    return SpecTable.defaults(layout)


def patch(table: SpecTable, rows: Iterable[Mapping[str, Any]]) -> SpecTable:
    return table.patch(rows)


def save(table: SpecTable, path: PathLike) -> Path:
    return table.save(path)


# =============================================================================
# TRUEHULL
# =============================================================================

@dataclass
class TruehullTable:
    """Hull ids buildable per race: 11 rows of 20 slots."""
    hulls: List[int] = field(default_factory=lambda: [0] * (TRUEHULL_SLOTS * TRUEHULL_RACES))

    @classmethod
    def from_bytes(cls, data: bytes) -> "TruehullTable":
        size = TRUEHULL_SLOTS * TRUEHULL_RACES
        data = data[:size * 2].ljust(size * 2, b"\0")
        return cls(list(record_format(f"<{size}H").unpack(data)))

    def row(self, race_id: int) -> List[int]:
        start = (race_id - 1) * TRUEHULL_SLOTS
        return self.hulls[start:start + TRUEHULL_SLOTS]

    def to_bytes(self) -> bytes:
        return pack_words(self.hulls)

    def save(self, path: PathLike) -> Path:
        path = Path(path)
        path.write_bytes(self.to_bytes())
        return path


def load_truehull(work_dir: PathLike = ".", root_dir: Optional[PathLike] = None) -> TruehullTable:
    data = find_baseline(TRUEHULL_FILE, [work_dir, root_dir])
    if data is None:
        return TruehullTable()
    return TruehullTable.from_bytes(data)


def merge_truehull(table: TruehullTable, race_hulls: Sequence[Any], race_id: int) -> TruehullTable:
    """Replace the row of ``race_id`` with ``race_hulls``; other rows are kept."""
    if not 0 < race_id <= TRUEHULL_RACES:
        raise SchemaError(f"race id {race_id} out of range")
    start = (race_id - 1) * TRUEHULL_SLOTS
    for i in range(TRUEHULL_SLOTS):
        table.hulls[start + i] = to_int(race_hulls[i]) if i < len(race_hulls) else 0
    return table


# =============================================================================
# HULLFUNC
# =============================================================================

def hullfunc_text(hulls: Iterable[Mapping[str, Any]]) -> str:
    """
    Hull function definitions for a Nu game.

    Nu stores only cloaking as structured data; every other hull function
    is free-form text. All hulls lose Cloak, then each cloak-capable hull
    gets it back. Everything else keeps the host defaults.
    """
    lines = [
        "# Hull function definitions for 'nu' game",
        "",
        "%hullfunc",
        "",
        "Init = Default",
        "Function = Cloak",
        "Hull = *",
        "RacesAllowed = -",
    ]
    for hull in hulls:
        if to_int(hull.get("cancloak")):
            lines.append(f"Hull = {to_int(hull.get('id'))}")
            lines.append("RacesAllowed = +")
    return "\n".join(lines) + "\n"


def write_hullfunc(hulls: Iterable[Mapping[str, Any]], path: PathLike) -> Path:
    path = Path(path)
    path.write_text(hullfunc_text(hulls), encoding="latin-1", newline="\n")
    return path
