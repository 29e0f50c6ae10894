from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest
from PIL import Image

from galaxy_export import (
    display_centre,
    rasterize,
    to_pixel_sequence,
    to_text_lines,
    write_csv,
    write_image,
    write_text,
)
from galaxygen import (
    Galaxy,
    GalaxyConfigError,
    GalaxyExportError,
    GalaxyType,
    NumpyRandomSource,
    Sector,
    Star,
    generate_spiral,
)


@pytest.fixture
def tiny():
    stars = (
        Star(10.0, -5.7, Sector.CORE, 0.5),
        Star(2.7, 3.2, Sector.OUTER_CORE, 1.0),
        Star(-8.0, 0.0, Sector.BRANCH, 0.0),
    )
    return Galaxy(GalaxyType.SPIRAL, 40, 30, stars, requested_count=3)


# ---------------------------------------------------------------------------
# Pixels
# ---------------------------------------------------------------------------

def test_display_centre(tiny):
    assert display_centre(tiny) == (20, 15)


def test_pixels_flip_and_offset_generation_space(tiny):
    pixels = to_pixel_sequence(tiny)
    assert [(x, y) for x, y, _ in pixels] == [(10, 20), (17, 11), (28, 15)]


def test_alpha_follows_luminosity(tiny):
    alphas = [color[3] for _, _, color in to_pixel_sequence(tiny)]
    assert alphas == [127, 255, 0]


def test_sector_only_stars_are_opaque():
    galaxy = Galaxy(GalaxyType.ELLIPTICAL, 20, 20, (Star(0.0, 0.0, Sector.CORE),))
    assert to_pixel_sequence(galaxy) == [(10, 10, (255, 255, 255, 255))]


def test_random_gray_mode(tiny):
    pixels = to_pixel_sequence(tiny, color_mode="random_gray",
                               rng=NumpyRandomSource(seed=1, integral=True))
    for _, _, (r, g, b, a) in pixels:
        assert r == g == b
        assert 100 <= r <= 255
        assert a == 255


def test_random_gray_reaches_both_ends_with_real_source():
    stars = tuple(Star(0.0, 0.0, Sector.CORE) for _ in range(20_000))
    galaxy = Galaxy(GalaxyType.ELLIPTICAL, 4, 4, stars)
    grays = {c[0] for _, _, c in to_pixel_sequence(
        galaxy, color_mode="random_gray", rng=NumpyRandomSource(seed=7))}
    assert min(grays) == 100
    assert max(grays) == 255


def test_random_gray_uses_whole_number_draws(tiny, scripted):
    source = scripted([0.0, 1.0, 0.5])
    pixels = to_pixel_sequence(tiny, color_mode="random_gray", rng=source)
    assert [c[0] for _, _, c in pixels] == [100, 255, 178]


def test_random_gray_without_source(tiny):
    assert len(to_pixel_sequence(tiny, color_mode="random_gray")) == 3


def test_unknown_color_mode(tiny):
    with pytest.raises(GalaxyConfigError):
        to_pixel_sequence(tiny, color_mode="sepia")


def test_raster_is_last_write_wins():
    stars = (
        Star(0.0, 0.0, Sector.CORE, 1.0),
        Star(-0.4, -0.3, Sector.BRANCH, 0.2),  # same pixel after truncation
        Star(500.0, 0.0, Sector.BRANCH, 1.0),  # off canvas
    )
    galaxy = Galaxy(GalaxyType.ELLIPTICAL, 20, 12, stars)
    buf = rasterize(galaxy)
    assert buf.shape == (12, 20, 4)
    assert buf.dtype == np.uint8
    assert tuple(buf[6, 10]) == (255, 255, 255, 51)
    assert tuple(buf[0, 0]) == (0, 0, 0, 255)
    assert int((buf[:, :, 0] > 0).sum()) == 1


def test_write_image_round_trip(tmp_path, tiny):
    path = write_image(tiny, str(tmp_path / "galaxy.png"))
    with Image.open(path) as img:
        assert img.size == (40, 30)
        assert img.mode == "RGBA"
        assert img.getpixel((10, 20)) == (255, 255, 255, 127)


def test_write_image_failure_is_reported(tmp_path, tiny):
    with pytest.raises(GalaxyExportError) as info:
        write_image(tiny, str(tmp_path / "missing" / "galaxy.png"))
    assert isinstance(info.value, OSError)
    assert "missing" in info.value.path


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

def test_simple_text_lines(tiny):
    assert to_text_lines(tiny, "simple") == [
        "10, -5 Core",
        "2, 3 Outer_Core",
        "-8, 0 Branch",
    ]


def test_extended_text_lines(tiny):
    assert to_text_lines(tiny, "extended") == [
        "3",
        "10, -5 0.500000 0",
        "2, 3 1.000000 1",
        "-8, 0 0.000000 2",
    ]


def test_extended_header_reports_truncated_count():
    galaxy = generate_spiral(800, 600, 6, 10_000, 0.01, NumpyRandomSource(seed=2))
    lines = to_text_lines(galaxy)
    assert lines[0] == "9997"
    assert len(lines) == 9998


def test_unknown_text_format(tiny):
    with pytest.raises(GalaxyConfigError):
        to_text_lines(tiny, "yaml")


def test_write_text_newline_terminated(tmp_path, tiny):
    path = write_text(tiny, str(tmp_path / "galaxy.txt"), text_format="simple")
    with open(path, encoding="utf-8") as f:
        content = f.read()
    assert content == "10, -5 Core\n2, 3 Outer_Core\n-8, 0 Branch\n"


def test_write_text_failure_leaves_galaxy_intact(tmp_path, tiny):
    with pytest.raises(GalaxyExportError):
        write_text(tiny, str(tmp_path))   # a directory, not a file
    assert tiny.stars_count == 3
    assert to_text_lines(tiny, "simple")[0] == "10, -5 Core"


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

def test_frame_columns(tiny):
    frame = tiny.to_frame()
    assert list(frame.columns) == [
        "id", "x", "y", "r", "theta", "sector", "sector_name", "luminosity",
    ]
    assert frame["sector_name"].tolist() == ["Core", "Outer_Core", "Branch"]
    assert frame.loc[2, "theta"] == pytest.approx(math.pi)


def test_frame_marks_missing_luminosity():
    galaxy = Galaxy(GalaxyType.ELLIPTICAL, 20, 20, (Star(1.0, 1.0, Sector.CORE),))
    assert galaxy.to_frame()["luminosity"].isna().all()


def test_write_csv(tmp_path, tiny):
    path = write_csv(tiny, str(tmp_path / "stars.csv"))
    frame = pd.read_csv(path)
    assert len(frame) == 3
    assert frame["sector"].tolist() == [0, 1, 2]
    assert frame["luminosity"].tolist() == pytest.approx([0.5, 1.0, 0.0])


def test_write_csv_failure_is_reported(tmp_path, tiny, monkeypatch):
    def refuse(self, *args, **kwargs):
        raise ValueError("unsupported")

    monkeypatch.setattr(pd.DataFrame, "to_csv", refuse)
    path = str(tmp_path / "stars.csv")
    with pytest.raises(GalaxyExportError) as info:
        write_csv(tiny, path)
    assert info.value.path == path
    assert isinstance(info.value.cause, ValueError)
