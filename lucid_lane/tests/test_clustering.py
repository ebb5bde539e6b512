"""Tests for connected-region grouping of frame pixels into Blobs."""

from __future__ import annotations

import pytest

from lucid_lane.analysis import blob_table, find_blobs
from lucid_lane.models import Blob, Frame, Pixel, pack_pixel_key


def _frame(coords) -> Frame:
    return Frame.from_pixels([Pixel(x, y) for x, y in coords])


def test_empty_frame_has_no_blobs() -> None:
    assert find_blobs(Frame()) == []


def test_separate_regions() -> None:
    f = _frame([(0, 0), (0, 1), (10, 10), (11, 10), (200, 3)])
    blobs = find_blobs(f)
    assert [len(b) for b in blobs] == [2, 2, 1]
    assert blobs[0].keys() == (pack_pixel_key(0, 0), pack_pixel_key(0, 1))
    assert blobs[2].keys() == (pack_pixel_key(200, 3),)


def test_diagonal_connectivity() -> None:
    f = _frame([(5, 5), (6, 6)])
    assert len(find_blobs(f, connectivity=8)) == 1
    assert len(find_blobs(f, connectivity=4)) == 2


def test_breadth_first_key_order() -> None:
    # L shape seeded at (3, 3)
    f = _frame([(3, 3), (3, 4), (4, 3), (5, 3)])
    (blob,) = find_blobs(f, connectivity=4)
    expected = Blob()
    for x, y in [(3, 3), (4, 3), (3, 4), (5, 3)]:
        expected.add_pixel(Pixel(x, y))
    assert blob == expected


def test_edge_pixels() -> None:
    f = _frame([(255, 255), (255, 254), (0, 255)])
    blobs = find_blobs(f)
    assert sorted(len(b) for b in blobs) == [1, 2]


def test_invalid_connectivity() -> None:
    with pytest.raises(ValueError):
        find_blobs(Frame(), connectivity=6)


def test_blob_table() -> None:
    f = _frame([(0, 0), (0, 2), (1, 1), (50, 60)])
    df = blob_table(find_blobs(f))
    assert list(df.columns) == ["blob_index", "n_pixels", "centroid_x", "centroid_y"]
    assert df["n_pixels"].tolist() == [3, 1]
    assert df.loc[1, "centroid_x"] == pytest.approx(50.0)
    assert df.loc[1, "centroid_y"] == pytest.approx(60.0)


def test_blob_table_empty() -> None:
    df = blob_table([])
    assert df.empty
    assert list(df.columns) == ["blob_index", "n_pixels", "centroid_x", "centroid_y"]
