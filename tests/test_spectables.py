"""
Tests for spec table patching, truehull merging and hull functions.
"""

import logging

import pytest
from nu2vgap.errors import SchemaError
from nu2vgap.spectables import (
    BEAMSPEC,
    ENGSPEC,
    HULLSPEC,
    PLANETNM,
    SPEC_LAYOUTS,
    TORPSPEC,
    XYPLAN,
    SpecTable,
    TruehullTable,
    hullfunc_text,
    load_table,
    load_truehull,
    merge_truehull,
    patch,
    save,
    write_hullfunc,
)


class TestLayouts:

    @pytest.mark.parametrize("layout,size,count", [
        (BEAMSPEC, 36, 10),
        (TORPSPEC, 38, 10),
        (ENGSPEC, 66, 9),
        (HULLSPEC, 60, 105),
        (XYPLAN, 6, 500),
        (PLANETNM, 20, 500),
    ])
    def test_record_sizes(self, layout, size, count):
        assert layout.record_size == size
        assert layout.count == count
        assert len(layout.record_format) == len(layout.fields)

    def test_all_layouts_listed(self):
        assert len(SPEC_LAYOUTS) == 6


class TestDefaults:

    def test_default_names(self):
        table = SpecTable.defaults(BEAMSPEC)
        assert table.synthesized
        assert table.row(1)["name"] == "#1"
        assert table.row(10)["name"] == "#10"
        assert table.row(3)["cost"] == 0

    def test_default_without_name(self):
        assert SpecTable.defaults(XYPLAN).row(1) == {"x": 0, "y": 0, "ownerid": 0}

    def test_saved_size(self, tmp_path):
        path = save(SpecTable.defaults(HULLSPEC), tmp_path / "hullspec.dat")
        assert path.stat().st_size == 105 * 60


class TestPatch:
    """Only fields supplied by the document overwrite the baseline."""

    def test_overwrites_present_fields(self):
        table = patch(SpecTable.defaults(BEAMSPEC), [{"id": 2, "name": "X-Ray", "cost": 5}])
        assert table.row(2)["name"] == "X-Ray"
        assert table.row(2)["cost"] == 5
        assert table.row(2)["damage"] == 0
        assert table.row(1)["name"] == "#1"

    def test_preserves_unknown_fields(self):
        """Hull pictures are never part of the document."""
        baseline = SpecTable.defaults(HULLSPEC)
        baseline.records[0][HULLSPEC.fields.index("zzimage")] = 42
        table = SpecTable.from_bytes(HULLSPEC, baseline.to_bytes())

        table.patch([{"id": 1, "name": "Outrider", "zzimage_typo": 1, "cost": 50}])
        row = table.row(1)
        assert row["zzimage"] == 42
        assert row["name"] == "Outrider"
        assert row["cost"] == 50

    def test_ids_out_of_range_ignored(self):
        table = SpecTable.defaults(ENGSPEC)
        before = table.to_bytes()
        table.patch([{"id": 0, "cost": 1}, {"id": 10, "cost": 1}, {"cost": 1}])
        assert table.to_bytes() == before

    def test_idempotent(self):
        rows = [{"id": 1, "name": "Mark 1", "torpedocost": 2, "damage": 5}]
        once = SpecTable.defaults(TORPSPEC).patch(rows).to_bytes()
        twice = SpecTable.defaults(TORPSPEC).patch(rows).patch(rows).to_bytes()
        assert once == twice

    def test_survives_save(self):
        table = SpecTable.defaults(BEAMSPEC).patch([{"id": 1, "name": "Laser", "damage": 3}])
        reloaded = SpecTable.from_bytes(BEAMSPEC, table.to_bytes())
        assert reloaded.row(1)["name"] == "Laser"
        assert reloaded.row(1)["damage"] == 3


class TestLoad:

    def test_work_dir_first(self, tmp_path):
        work, root = tmp_path / "work", tmp_path / "root"
        work.mkdir()
        root.mkdir()
        SpecTable.defaults(BEAMSPEC).patch([{"id": 1, "name": "Work"}]).save(work / "beamspec.dat")
        SpecTable.defaults(BEAMSPEC).patch([{"id": 1, "name": "Root"}]).save(root / "beamspec.dat")

        assert load_table(BEAMSPEC, work, root).row(1)["name"] == "Work"

    def test_root_dir_fallback(self, tmp_path):
        root = tmp_path / "root"
        root.mkdir()
        SpecTable.defaults(BEAMSPEC).patch([{"id": 1, "name": "Root"}]).save(root / "beamspec.dat")

        table = load_table(BEAMSPEC, tmp_path / "empty", root)
        assert not table.synthesized
        assert table.row(1)["name"] == "Root"

    def test_short_file_padded(self, tmp_path):
        (tmp_path / "xyplan.dat").write_bytes(b"\x0a\x00\x14\x00")
        table = load_table(XYPLAN, tmp_path)
        assert len(table) == 500
        assert table.row(1) == {"x": 10, "y": 20, "ownerid": 0}
        assert table.row(2) == {"x": 0, "y": 0, "ownerid": 0}

    def test_missing_hullspec_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            table = load_table(HULLSPEC, tmp_path, None)
        assert table.synthesized
        assert "image references" in caplog.text

    def test_missing_beamspec_silent(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            load_table(BEAMSPEC, tmp_path, None)
        assert caplog.text == ""


class TestTruehull:

    def test_merge_replaces_row(self):
        table = merge_truehull(TruehullTable(), [15, 16, 17], 3)
        assert table.row(3) == [15, 16, 17] + [0] * 17

    def test_merge_preserves_other_rows(self):
        table = TruehullTable(list(range(220)))
        merge_truehull(table, [1] * 25, 2)
        assert table.row(2) == [1] * 20
        assert table.row(1) == list(range(20))
        assert table.row(3) == list(range(40, 60))

    def test_merge_idempotent(self):
        once = merge_truehull(TruehullTable(), [5, 6], 4).to_bytes()
        twice = merge_truehull(merge_truehull(TruehullTable(), [5, 6], 4), [5, 6], 4).to_bytes()
        assert once == twice

    @pytest.mark.parametrize("race", [0, 12, -1])
    def test_race_out_of_range(self, race):
        with pytest.raises(SchemaError):
            merge_truehull(TruehullTable(), [1], race)

    def test_load_and_save(self, tmp_path):
        merge_truehull(TruehullTable(), [9], 11).save(tmp_path / "truehull.dat")
        assert (tmp_path / "truehull.dat").stat().st_size == 440
        assert load_truehull(tmp_path).row(11)[0] == 9

    def test_load_missing(self, tmp_path):
        assert load_truehull(tmp_path, None).hulls == [0] * 220


class TestHullfunc:

    def test_header_only(self):
        assert hullfunc_text([]) == (
            "# Hull function definitions for 'nu' game\n"
            "\n"
            "%hullfunc\n"
            "\n"
            "Init = Default\n"
            "Function = Cloak\n"
            "Hull = *\n"
            "RacesAllowed = -\n"
        )

    def test_cloakers_listed(self, tmp_path):
        hulls = [
            {"id": 21, "cancloak": True},
            {"id": 22, "cancloak": False},
            {"id": 29, "cancloak": True},
        ]
        text = write_hullfunc(hulls, tmp_path / "hullfunc.txt").read_text()
        assert text.endswith(
            "Hull = 21\nRacesAllowed = +\nHull = 29\nRacesAllowed = +\n"
        )
        assert "Hull = 22" not in text
