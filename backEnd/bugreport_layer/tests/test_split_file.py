"""
Tests for size-based artifact splitting.

Concatenating the segments in order must reproduce the source exactly.
"""

from pathlib import Path

import pytest

from bugreport_layer.src.errors import SplitError
from bugreport_layer.src.split_file import (
    MIB,
    SPLIT_THRESHOLD_BYTES,
    compute_part_count,
    segment_name,
    split_file,
)

PRIME_SIZE = 10485767  # first prime above 10 MiB


def write_pattern(path: Path, size: int) -> bytes:
    """Write a non-repeating-per-segment byte pattern of the given size."""
    block = bytes(range(251)) * ((size // 251) + 1)
    data = block[:size]
    path.write_bytes(data)
    return data


def concat(directory: Path, names: list[str]) -> bytes:
    return b"".join((directory / name).read_bytes() for name in names)


class TestComputePartCount:
    """Tests for the partition count policy."""

    def test_below_threshold(self):
        assert compute_part_count(0) is None
        assert compute_part_count(SPLIT_THRESHOLD_BYTES - 1) is None

    def test_at_threshold(self):
        assert compute_part_count(SPLIT_THRESHOLD_BYTES) == 10

    def test_floor_at_ten(self):
        assert compute_part_count(55 * MIB) == 10
        assert compute_part_count(109 * MIB) == 10

    def test_linear_range(self):
        assert compute_part_count(110 * MIB) == 11
        assert compute_part_count(555 * MIB) == 55

    def test_saturates_at_hundred(self):
        assert compute_part_count(1000 * MIB) == 100
        assert compute_part_count(2048 * MIB) == 100


class TestSegmentName:
    """Tests for segment naming."""

    def test_keeps_extension(self):
        assert segment_name("bugreport.txt", 3) == "bugreport_sub3.txt"

    def test_last_dot_only(self):
        assert segment_name("bugreport-1.2.txt", 1) == "bugreport-1.2_sub1.txt"

    def test_no_extension(self):
        assert segment_name("bugreport", 10) == "bugreport_sub10"


class TestSplitFile:
    """Tests for split_file."""

    def test_small_file_not_split(self, tmp_path):
        path = tmp_path / "bugreport.txt"
        write_pattern(path, 1024)
        assert split_file(path) is None
        assert sorted(p.name for p in tmp_path.iterdir()) == ["bugreport.txt"]

    def test_empty_file_not_split(self, tmp_path):
        path = tmp_path / "bugreport.txt"
        path.write_bytes(b"")
        assert split_file(path) is None

    @pytest.mark.parametrize(
        "size",
        [SPLIT_THRESHOLD_BYTES, SPLIT_THRESHOLD_BYTES + 1, PRIME_SIZE],
    )
    def test_round_trip(self, tmp_path, size):
        path = tmp_path / "bugreport.txt"
        data = write_pattern(path, size)

        names = split_file(path, buffer_size=4096)

        assert names == [f"bugreport_sub{i}.txt" for i in range(1, 11)]
        assert concat(tmp_path, names) == data
        assert path.read_bytes() == data

    def test_segment_sizes(self, tmp_path):
        path = tmp_path / "bugreport.txt"
        write_pattern(path, PRIME_SIZE)

        names = split_file(path)

        bytes_per_part = PRIME_SIZE // 10
        sizes = [(tmp_path / n).stat().st_size for n in names]
        assert sizes[:-1] == [bytes_per_part] * 9
        assert sizes[-1] == PRIME_SIZE - bytes_per_part * 9
        assert bytes_per_part <= sizes[-1] < bytes_per_part + 10

    def test_missing_source(self, tmp_path):
        with pytest.raises(SplitError):
            split_file(tmp_path / "missing.txt")

    def test_existing_segment_name_is_not_overwritten(self, tmp_path):
        path = tmp_path / "bugreport.txt"
        write_pattern(path, SPLIT_THRESHOLD_BYTES)
        (tmp_path / "bugreport_sub3.txt").write_bytes(b"earlier artifact")

        with pytest.raises(SplitError, match="bugreport_sub3.txt"):
            split_file(path)

        assert (tmp_path / "bugreport_sub3.txt").read_bytes() == b"earlier artifact"
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "bugreport.txt",
            "bugreport_sub3.txt",
        ]

    def test_failed_split_removes_partial_segments(self, tmp_path, monkeypatch):
        """A source that shrinks mid-copy leaves no segments behind."""
        path = tmp_path / "bugreport.txt"
        write_pattern(path, SPLIT_THRESHOLD_BYTES)

        import bugreport_layer.src.split_file as split_module

        monkeypatch.setattr(
            split_module, "_file_size", lambda p: SPLIT_THRESHOLD_BYTES * 2
        )

        with pytest.raises(SplitError):
            split_file(path)

        assert sorted(p.name for p in tmp_path.iterdir()) == ["bugreport.txt"]
