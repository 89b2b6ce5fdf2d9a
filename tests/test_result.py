"""
Tests for the result file assembler.
"""

import struct

import pytest
from nu2vgap.result import (
    HEADER_SIZE,
    RESULT_SIGNATURE,
    AssemblerState,
    AssemblerStateError,
    ResultFileAssembler,
    SectionSlot,
    pack_header,
)

WRITTEN_SLOTS = list(SectionSlot)[:8]


def read_offsets(data: bytes):
    offsets = list(struct.unpack_from("<8I", data, 0))
    kore, zero, skore = struct.unpack_from("<3I", data, 40)
    return offsets, (kore, zero, skore)


class TestHeader:

    def test_size(self):
        assert len(pack_header([0] * 10)) == HEADER_SIZE == 52

    def test_signature(self):
        assert pack_header([0] * 10)[32:40] == RESULT_SIGNATURE

    def test_trailing_slots(self):
        header = pack_header(list(range(1, 11)))
        assert struct.unpack_from("<3I", header, 40) == (9, 0, 10)


class TestAssembler:

    def test_offsets(self, tmp_path):
        """Each offset is 1 + the number of bytes before the section."""
        sections = [bytes([i]) * (i * 3 + 1) for i in range(8)]
        path = tmp_path / "player3.rst"
        with ResultFileAssembler(path) as rst:
            for slot, data in zip(WRITTEN_SLOTS, sections):
                rst.write_section(slot, data)

        data = path.read_bytes()
        offsets, trailer = read_offsets(data)
        expected = HEADER_SIZE + 1
        for offset, section in zip(offsets, sections):
            assert offset == expected
            assert data[offset - 1:offset - 1 + len(section)] == section
            expected += len(section)
        assert trailer == (0, 0, 0)
        assert len(data) == expected - 1

    def test_write_returns_offset(self, tmp_path):
        rst = ResultFileAssembler(tmp_path / "a.rst")
        rst.begin()
        assert rst.write_section(SectionSlot.SHIPS, b"\0\0") == 53
        assert rst.position == 54
        rst.abort()

    def test_temporary_until_finish(self, tmp_path):
        path = tmp_path / "a.rst"
        rst = ResultFileAssembler(path)
        rst.begin()
        assert not path.exists()
        assert rst.temp_path.exists()
        for slot in WRITTEN_SLOTS:
            rst.write_section(slot, b"")
        assert rst.finish() == path
        assert path.exists()
        assert not rst.temp_path.exists()
        assert rst.state is AssemblerState.FINALIZED

    def test_replaces_existing(self, tmp_path):
        path = tmp_path / "a.rst"
        path.write_bytes(b"old")
        with ResultFileAssembler(path) as rst:
            for slot in WRITTEN_SLOTS:
                rst.write_section(slot, b"\0\0")
        assert path.read_bytes()[:4] == struct.pack("<I", 53)


class TestStateErrors:

    def test_write_before_begin(self, tmp_path):
        with pytest.raises(AssemblerStateError):
            ResultFileAssembler(tmp_path / "a.rst").write_section(SectionSlot.SHIPS, b"")

    def test_out_of_order(self, tmp_path):
        rst = ResultFileAssembler(tmp_path / "a.rst")
        rst.begin()
        with pytest.raises(AssemblerStateError):
            rst.write_section(SectionSlot.PLANETS, b"")
        rst.abort()

    def test_repeated_section(self, tmp_path):
        rst = ResultFileAssembler(tmp_path / "a.rst")
        rst.begin()
        rst.write_section(SectionSlot.SHIPS, b"")
        with pytest.raises(AssemblerStateError):
            rst.write_section(SectionSlot.SHIPS, b"")
        rst.abort()

    def test_unwritable_slots(self, tmp_path):
        rst = ResultFileAssembler(tmp_path / "a.rst")
        rst.begin()
        for slot in WRITTEN_SLOTS:
            rst.write_section(slot, b"")
        with pytest.raises(AssemblerStateError):
            rst.write_section(SectionSlot.KORE, b"")
        rst.abort()

    def test_write_after_finish(self, tmp_path):
        with ResultFileAssembler(tmp_path / "a.rst") as rst:
            for slot in WRITTEN_SLOTS:
                rst.write_section(slot, b"")
        with pytest.raises(AssemblerStateError):
            rst.write_section(SectionSlot.SHIPS, b"")

    def test_finish_incomplete(self, tmp_path):
        """Sections are never omitted."""
        path = tmp_path / "a.rst"
        with pytest.raises(AssemblerStateError):
            with ResultFileAssembler(path) as rst:
                rst.write_section(SectionSlot.SHIPS, b"")
        assert not path.exists()
        assert not rst.temp_path.exists()

    def test_begin_twice(self, tmp_path):
        rst = ResultFileAssembler(tmp_path / "a.rst")
        rst.begin()
        with pytest.raises(AssemblerStateError):
            rst.begin()
        rst.abort()


class TestAbort:
    """The result file is either absent or complete."""

    def test_exception_leaves_no_file(self, tmp_path):
        path = tmp_path / "a.rst"
        with pytest.raises(RuntimeError):
            with ResultFileAssembler(path) as rst:
                rst.write_section(SectionSlot.SHIPS, b"\0\0")
                raise RuntimeError("encoder failed")
        assert not path.exists()
        assert not rst.temp_path.exists()

    def test_exception_keeps_previous_result(self, tmp_path):
        path = tmp_path / "a.rst"
        path.write_bytes(b"previous")
        with pytest.raises(RuntimeError):
            with ResultFileAssembler(path):
                raise RuntimeError("encoder failed")
        assert path.read_bytes() == b"previous"
