"""
galaxygen.py
============
Core procedural star-field generator.

Places stars into concentric sectors (core, outer core, branch) around the
origin of a 2-D generation space, perturbs every star with a small random
jitter and, for spiral galaxies, sweeps wedge-shaped branches to evenly spaced
angles before twisting the whole field with a radius-dependent "spin".

Every star carries:
  • x, y        – position in generation space (galaxy centre = (0, 0))
  • sector      – Core / Outer_Core / Branch, the region that produced it
  • luminosity  – uniform draw in [0, 1] (None in sector-only mode)

Topologies
----------
1. Elliptical:  three concentric disks (core, outer core, diffuse halo).
2. Spiral:      core + outer core disks, then ``n_branches`` wedges at
                angles ``2πi / n_branches``, spun by ``r * spin_factor``.
3. Ring:        declared but not implemented; requesting it is an error.

Usage (importable)
------------------
    from galaxygen import GalaxyConfig, GalaxyGenerator
    cfg = GalaxyConfig(n_stars=10_000, n_branches=6, seed=7)
    gen = GalaxyGenerator(cfg)
    galaxy = gen.run()

Usage (script, uses all defaults)
----------------------------------
    python galaxygen.py
"""

from __future__ import annotations

import dataclasses
import enum
import math
import os
import time
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd


Point = Tuple[float, float]

# Display names written by the text exporter, indexed by Sector value.
SECTOR_NAMES = ("Core", "Outer_Core", "Branch")

ARM_REACH_MODES = ("fixed", "random")
TEXT_FORMATS = ("simple", "extended")
COLOR_MODES = ("luminosity", "random_gray")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class GalaxyError(Exception):
    """Base class for every error raised by the generator and its exporters."""


class GalaxyConfigError(GalaxyError, ValueError):
    """Rejected request: invalid dimensions, branch count, or option value."""


class GalaxyResourceError(GalaxyError, MemoryError):
    """Not enough memory to hold the requested number of stars."""


class GalaxyExportError(GalaxyError, OSError):
    """An export adapter could not write its output file."""

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"could not write {path}: {cause}")
        self.path = path
        self.cause = cause


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

class Sector(enum.IntEnum):
    CORE = 0
    OUTER_CORE = 1
    BRANCH = 2

    @property
    def label(self) -> str:
        return SECTOR_NAMES[self.value]


class GalaxyType(enum.Enum):
    ELLIPTICAL = "elliptical"
    RING = "ring"       # reserved; no generator produces it
    SPIRAL = "spiral"


@dataclasses.dataclass(frozen=True)
class Star:
    """A single generated star."""

    x: float
    y: float
    sector: Sector
    luminosity: Optional[float] = None  # None in sector-only mode

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    @property
    def r(self) -> float:
        return math.hypot(self.x, self.y)

    def moved_to(self, x: float, y: float) -> "Star":
        return dataclasses.replace(self, x=x, y=y)


@dataclasses.dataclass(frozen=True)
class Galaxy:
    """The generated star field. Built once by a composer, then read-only.

    ``stars`` is ordered core stars first, then outer-core stars, then branch
    stars (branch by branch for spirals).  ``requested_count`` is what the
    caller asked for; ``stars_count`` is what was actually produced, which is
    smaller for spirals whose branch budget does not divide evenly.
    """

    type: GalaxyType
    width: int
    height: int
    stars: Tuple[Star, ...]
    requested_count: int = 0

    @property
    def stars_count(self) -> int:
        return len(self.stars)

    def sector_counts(self) -> dict:
        counts = {sector: 0 for sector in Sector}
        for star in self.stars:
            counts[star.sector] += 1
        return counts

    def to_frame(self) -> pd.DataFrame:
        """Tabular view of the stars: id, x, y, r, theta, sector, sector_name, luminosity."""
        n = len(self.stars)
        xy = np.array([s.position for s in self.stars], dtype=float).reshape(n, 2)
        lum = np.array(
            [np.nan if s.luminosity is None else s.luminosity for s in self.stars],
            dtype=float,
        )
        return pd.DataFrame({
            "id":          np.arange(n, dtype=np.int64),
            "x":           xy[:, 0],
            "y":           xy[:, 1],
            "r":           np.hypot(xy[:, 0], xy[:, 1]),
            "theta":       np.mod(np.arctan2(xy[:, 1], xy[:, 0]), 2.0 * math.pi),
            "sector":      np.array([int(s.sector) for s in self.stars], dtype=np.int64),
            "sector_name": [s.sector.label for s in self.stars],
            "luminosity":  lum,
        })


# ---------------------------------------------------------------------------
# Random source
# ---------------------------------------------------------------------------

class RandomSource:
    """Interface every sampler draws from.

    Subclasses implement ``next_in_range``; tests substitute a scripted stub.
    """

    def next_in_range(self, lo: float, hi: float) -> float:
        raise NotImplementedError

    def next_unit(self) -> float:
        """Real draw in [0, 1], used for luminosity."""
        return self.next_in_range(0.0, 1.0)

    def next_int(self, lo: int, hi: int) -> int:
        """Whole-number draw in [lo, hi], both ends included."""
        return int(round(self.next_in_range(lo, hi)))


class NumpyRandomSource(RandomSource):
    """``numpy.random.Generator`` backed source.

    Parameters
    ----------
    seed     : seed for ``np.random.default_rng``; None draws fresh entropy.
    integral : when True, draws are whole numbers inclusive of both bounds
               (bounds are rounded inward), matching integer pixel placement.
    """

    def __init__(self, seed: Optional[int] = None, integral: bool = False) -> None:
        self.seed = seed
        self.integral = integral
        self._rng = np.random.default_rng(seed)

    def next_in_range(self, lo: float, hi: float) -> float:
        if lo > hi:
            lo, hi = hi, lo
        if not self.integral:
            return float(self._rng.uniform(lo, hi))
        lo_i = math.ceil(lo)
        hi_i = math.floor(hi)
        if lo_i > hi_i:
            # No whole number inside the interval
            return float(round((lo + hi) / 2.0))
        return float(self._rng.integers(lo_i, hi_i, endpoint=True))

    def next_unit(self) -> float:
        return float(self._rng.random())

    def next_int(self, lo: int, hi: int) -> int:
        return int(self._rng.integers(lo, hi, endpoint=True))


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------

def distance(a, b) -> Union[float, np.ndarray]:
    """Euclidean distance between ``a`` and ``b``.

    Works on single points (2-tuples) and on ``(N, 2)`` arrays, in which case
    an ``(N,)`` array is returned.  A missing operand (None) yields ``0.0``;
    callers treat that as a sentinel, not a measurement.
    """
    if a is None or b is None:
        return 0.0
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
        return np.hypot(b[..., 0] - a[..., 0], b[..., 1] - a[..., 1])
    return math.hypot(b[0] - a[0], b[1] - a[1])


def rotate_about(point, origin, angle):
    """Rotate ``point`` about ``origin`` by ``angle`` radians (counter-clockwise).

    Parameters
    ----------
    point  : 2-tuple, or ndarray of shape ``(2,)`` or ``(N, 2)``
    origin : 2-tuple or ndarray ``(2,)``
    angle  : float, or ndarray ``(N,)`` giving one angle per point

    Returns
    -------
    A new 2-tuple for tuple input, otherwise an ndarray shaped like ``point``.
    """
    if isinstance(point, np.ndarray) or isinstance(angle, np.ndarray):
        p = np.asarray(point, dtype=float)
        o = np.asarray(origin, dtype=float)
        dx = p[..., 0] - o[0]
        dy = p[..., 1] - o[1]
        c = np.cos(angle)
        s = np.sin(angle)
        return np.stack([dx * c - dy * s + o[0], dx * s + dy * c + o[1]], axis=-1)

    dx = point[0] - origin[0]
    dy = point[1] - origin[1]
    c = math.cos(angle)
    s = math.sin(angle)
    return (dx * c - dy * s + origin[0], dx * s + dy * c + origin[1])


# ---------------------------------------------------------------------------
# Star sampling
# ---------------------------------------------------------------------------

ORIGIN: Point = (0.0, 0.0)


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise GalaxyConfigError(f"{name} must be >= 0 (got {value})")


def sample_disk_position(rng: RandomSource, max_radius: float) -> Point:
    """Rejection-sample a point inside the disk of radius ``max_radius``.

    Candidates are drawn in the bounding square and discarded until one lies
    within the circle.  The square draw is kept as-is even though it is not
    area-uniform; the resulting density profile is part of the look.
    """
    _check_non_negative("max_radius", max_radius)
    if max_radius == 0:
        return ORIGIN
    while True:
        x = rng.next_in_range(-max_radius, max_radius)
        y = rng.next_in_range(-max_radius, max_radius)
        if distance(ORIGIN, (x, y)) <= max_radius:
            return (x, y)


def sample_wedge_position(
    rng: RandomSource, max_radius: float, max_width: float
) -> Point:
    """Rejection-sample a point in the half-strip along +y, clipped to the disk.

    ``x ∈ [-max_width, max_width]``, ``y ∈ [0, max_radius]``.
    """
    _check_non_negative("max_radius", max_radius)
    _check_non_negative("max_width", max_width)
    if max_radius == 0:
        return ORIGIN
    while True:
        x = rng.next_in_range(-max_width, max_width)
        y = rng.next_in_range(0, max_radius)
        if distance(ORIGIN, (x, y)) <= max_radius:
            return (x, y)


def jitter_position(rng: RandomSource, position: Point, magnitude: float) -> Point:
    """Move each coordinate to a uniform draw within ``±magnitude`` of itself.

    Unbounded: a jittered star may leave the region it was sampled in.
    """
    _check_non_negative("jitter", magnitude)
    if magnitude == 0:
        return position
    x, y = position
    return (
        rng.next_in_range(x - magnitude, x + magnitude),
        rng.next_in_range(y - magnitude, y + magnitude),
    )


def _luminosity(rng: RandomSource, with_luminosity: bool) -> Optional[float]:
    return rng.next_unit() if with_luminosity else None


def sample_star(
    rng: RandomSource,
    max_radius: float,
    sector: Sector,
    jitter: float = 10.0,
    with_luminosity: bool = True,
) -> Star:
    """One star from the disk of radius ``max_radius``, jittered."""
    x, y = jitter_position(rng, sample_disk_position(rng, max_radius), jitter)
    return Star(x=x, y=y, sector=Sector(sector),
                luminosity=_luminosity(rng, with_luminosity))


def sample_branch_star(
    rng: RandomSource,
    max_radius: float,
    max_width: float,
    angle: float,
    jitter: float = 10.0,
    with_luminosity: bool = True,
) -> Star:
    """One branch star: wedge sample along +y, jitter, then rotate by ``angle``."""
    position = jitter_position(rng, sample_wedge_position(rng, max_radius, max_width), jitter)
    x, y = rotate_about(position, ORIGIN, angle)
    return Star(x=x, y=y, sector=Sector.BRANCH,
                luminosity=_luminosity(rng, with_luminosity))


# ---------------------------------------------------------------------------
# Region generators
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class DiskRegion:
    """Circular region centred on the origin (core, outer core, halo)."""

    max_radius: float
    count: int
    sector: Sector
    jitter: float = 10.0


@dataclasses.dataclass(frozen=True)
class BranchRegion:
    """Wedge of half-width ``max_width`` swept to ``angle``; one spiral arm."""

    max_radius: float
    max_width: float
    count: int
    angle: float
    jitter: float = 10.0


Region = Union[DiskRegion, BranchRegion]


def generate_region(
    region: Region, rng: RandomSource, with_luminosity: bool = True
) -> List[Star]:
    """Draw ``region.count`` stars for ``region``, in draw order."""
    if not isinstance(region, (DiskRegion, BranchRegion)):
        raise TypeError(f"unknown region kind: {type(region).__name__}")
    if region.count < 0:
        raise GalaxyConfigError(f"star count must be >= 0 (got {region.count})")

    if isinstance(region, DiskRegion):
        return [
            sample_star(rng, region.max_radius, region.sector,
                        region.jitter, with_luminosity)
            for _ in range(region.count)
        ]
    return [
        sample_branch_star(rng, region.max_radius, region.max_width,
                           region.angle, region.jitter, with_luminosity)
        for _ in range(region.count)
    ]


def generate_disk_region(
    rng: RandomSource,
    max_radius: float,
    count: int,
    sector: Sector,
    jitter: float = 10.0,
    with_luminosity: bool = True,
) -> List[Star]:
    return generate_region(DiskRegion(max_radius, count, Sector(sector), jitter),
                           rng, with_luminosity)


def generate_branch_region(
    rng: RandomSource,
    max_radius: float,
    max_width: float,
    count: int,
    angle: float,
    jitter: float = 10.0,
    with_luminosity: bool = True,
) -> List[Star]:
    return generate_region(BranchRegion(max_radius, max_width, count, angle, jitter),
                           rng, with_luminosity)


# ---------------------------------------------------------------------------
# Spin transform
# ---------------------------------------------------------------------------

def spin_positions(xy: np.ndarray, centre, spin_factor: float) -> np.ndarray:
    """Rotate every point about ``centre`` by ``distance * spin_factor``.

    Outer points turn further than inner ones, which bends straight radial
    branches into trailing spiral arms.  The sign of ``spin_factor`` sets the
    winding direction.

    Parameters
    ----------
    xy          : ndarray ``(N, 2)``
    centre      : 2-tuple or ndarray ``(2,)``
    spin_factor : radians of rotation per unit of distance

    Returns
    -------
    ndarray ``(N, 2)``
    """
    xy = np.asarray(xy, dtype=float).reshape(-1, 2)
    centre = np.asarray(centre, dtype=float)
    angles = distance(xy, centre) * spin_factor
    return rotate_about(xy, centre, angles)


def spin(stars: Sequence[Star], centre=ORIGIN, spin_factor: float = 0.01) -> List[Star]:
    """Spun copies of ``stars``, same order, sectors and luminosities."""
    if not stars:
        return []
    xy = np.array([s.position for s in stars], dtype=float)
    spun = spin_positions(xy, centre, spin_factor)
    return [s.moved_to(float(x), float(y)) for s, (x, y) in zip(stars, spun)]


# ---------------------------------------------------------------------------
# Galaxy composers
# ---------------------------------------------------------------------------

DEFAULT_MAX_STARS = 5_000_000


def _check_dimensions(width: int, height: int) -> int:
    if width <= 0 or height <= 0:
        raise GalaxyConfigError(f"width and height must be > 0 (got {width}x{height})")
    min_dim = min(width, height)
    if min_dim <= 10:
        raise GalaxyConfigError(
            f"smallest dimension must exceed 10 pixels (got {min_dim})"
        )
    return min_dim


def _check_star_budget(star_count: int, max_stars: int) -> None:
    if star_count < 0:
        raise GalaxyConfigError(f"star count must be >= 0 (got {star_count})")
    if star_count > max_stars:
        raise GalaxyResourceError(
            f"{star_count:,} stars requested; the limit is {max_stars:,}"
        )


def sector_radii(galaxy_type: GalaxyType, width: int, height: int) -> dict:
    """Nominal radius of each sector for a canvas of ``width`` × ``height``.

    The ``BRANCH`` entry is the halo radius for ellipticals and the fixed arm
    reach for spirals.
    """
    min_dim = min(width, height)
    outer_div = 5 if galaxy_type is GalaxyType.SPIRAL else 3
    return {
        Sector.CORE:       min_dim // 10 // 2,
        Sector.OUTER_CORE: min_dim // outer_div // 2,
        Sector.BRANCH:     (min_dim - 10) // 2,
    }


def generate_elliptical(
    width: int,
    height: int,
    star_count: int,
    rng: RandomSource,
    *,
    jitter: float = 10.0,
    with_luminosity: bool = True,
    max_stars: int = DEFAULT_MAX_STARS,
) -> Galaxy:
    """Three concentric disks: core, outer core, and a diffuse halo.

    Sizes for the smallest canvas dimension ``d``:

    ==========  =================  ====================
    sector      radius             stars
    ==========  =================  ====================
    core        ``d // 10 // 2``   ``n // 10``
    outer core  ``d // 3 // 2``    ``n // 10``
    halo        ``(d - 10) // 2``  remainder
    ==========  =================  ====================

    The halo stars carry the ``BRANCH`` tag.  No spin is applied, and the
    galaxy always holds exactly ``star_count`` stars.
    """
    min_dim = _check_dimensions(width, height)
    _check_star_budget(star_count, max_stars)
    _check_non_negative("jitter", jitter)

    core_count = star_count // 10
    outer_count = star_count // 10
    halo_count = star_count - core_count - outer_count

    radii = sector_radii(GalaxyType.ELLIPTICAL, width, height)
    regions = [
        DiskRegion(radii[Sector.CORE], core_count, Sector.CORE, jitter),
        DiskRegion(radii[Sector.OUTER_CORE], outer_count, Sector.OUTER_CORE, jitter),
        DiskRegion(radii[Sector.BRANCH], halo_count, Sector.BRANCH, jitter),
    ]
    try:
        stars: List[Star] = []
        for region in regions:
            stars.extend(generate_region(region, rng, with_luminosity))
    except MemoryError as exc:
        raise GalaxyResourceError(
            f"out of memory while generating {star_count:,} stars"
        ) from exc

    return Galaxy(GalaxyType.ELLIPTICAL, width, height, tuple(stars), star_count)


def _branch_reach(rng: RandomSource, min_dim: int, arm_reach: str) -> float:
    if arm_reach == "fixed":
        return (min_dim - 10) // 2
    return (min_dim - rng.next_in_range(0, min_dim / 4)) / 2


def generate_spiral(
    width: int,
    height: int,
    branches: int,
    star_count: int,
    spin_factor: float,
    rng: RandomSource,
    *,
    arm_reach: str = "random",
    jitter: float = 10.0,
    branch_jitter: float = 50.0,
    with_luminosity: bool = True,
    max_stars: int = DEFAULT_MAX_STARS,
) -> Galaxy:
    """Core and outer-core disks plus ``branches`` arms, twisted by ``spin``.

    Core radius ``d // 10 // 2`` with ``n // 10`` stars; outer core radius
    ``d // 5 // 2`` with ``n // 30`` stars.  The rest of the budget is split
    evenly across the branches with integer division, so the galaxy may hold
    slightly fewer stars than requested; ``stars_count`` reports the real
    total.

    Branch ``i`` is a wedge of half-width ``d / branches / 3`` swept to
    ``2πi / branches``.  Its reach is ``(d - 10) // 2`` when ``arm_reach`` is
    ``"fixed"``, or ``(d - U(0, d/4)) / 2`` drawn per branch when it is
    ``"random"``.  The whole star list, core included, is then spun about
    the origin.
    """
    if branches < 1:
        raise GalaxyConfigError(f"a spiral needs at least one branch (got {branches})")
    if arm_reach not in ARM_REACH_MODES:
        raise GalaxyConfigError(
            f"arm_reach must be one of {ARM_REACH_MODES} (got {arm_reach!r})"
        )
    min_dim = _check_dimensions(width, height)
    _check_star_budget(star_count, max_stars)
    _check_non_negative("jitter", jitter)
    _check_non_negative("branch_jitter", branch_jitter)

    core_count = star_count // 10
    outer_count = star_count // 30
    per_branch = (star_count - core_count - outer_count) // branches

    angle_step = 2.0 * math.pi / branches
    arm_width = min_dim / branches / 3
    radii = sector_radii(GalaxyType.SPIRAL, width, height)

    try:
        stars: List[Star] = []
        stars.extend(generate_region(
            DiskRegion(radii[Sector.CORE], core_count, Sector.CORE, jitter),
            rng, with_luminosity,
        ))
        stars.extend(generate_region(
            DiskRegion(radii[Sector.OUTER_CORE], outer_count, Sector.OUTER_CORE, jitter),
            rng, with_luminosity,
        ))
        for i in range(branches):
            reach = _branch_reach(rng, min_dim, arm_reach)
            stars.extend(generate_region(
                BranchRegion(reach, arm_width, per_branch, i * angle_step, branch_jitter),
                rng, with_luminosity,
            ))
        stars = spin(stars, ORIGIN, spin_factor)
    except MemoryError as exc:
        raise GalaxyResourceError(
            f"out of memory while generating {star_count:,} stars"
        ) from exc

    return Galaxy(GalaxyType.SPIRAL, width, height, tuple(stars), star_count)


def expected_star_count(
    galaxy_type: GalaxyType, star_count: int, branches: int = 1
) -> int:
    """Number of stars a composer will actually produce for ``star_count``."""
    if galaxy_type is GalaxyType.SPIRAL:
        core = star_count // 10
        outer = star_count // 30
        return (star_count - core - outer) // branches * branches + core + outer
    return star_count


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class GalaxyConfig:
    """All tunable parameters for galaxy generation and export.

    Spatial units
    -------------
    Distances are canvas pixels.  Sector radii are derived from the smaller
    of ``width`` and ``height``; nothing else about the canvas matters to the
    generator.

    Notes on variants
    -----------------
    ``arm_reach="fixed"`` with ``branch_jitter=10`` reproduces the plain
    spiral (every arm the same length).  The defaults give the richer look:
    arms of uneven reach with a wider jitter.  ``with_luminosity=False``
    produces sector-only stars; pair it with ``color_mode="random_gray"``
    for the matching image export.
    """

    # ---- topology ----
    galaxy_type: str = "spiral"   # "spiral" | "elliptical" | "ring" (unimplemented)

    # ---- canvas ----
    width: int = 800
    height: int = 600

    # ---- star budget ----
    n_stars: int = 10_000
    max_stars: int = DEFAULT_MAX_STARS   # refuse larger requests up front

    # ---- spiral parameters ----
    n_branches: int = 6
    spin_factor: float = 0.01     # radians per pixel of radius; sign = winding
    arm_reach: str = "random"     # "fixed" | "random"

    # ---- jitter ----
    jitter: float = 10.0          # disk regions (core, outer core, halo)
    branch_jitter: float = 50.0   # spiral arms

    # ---- star attributes ----
    with_luminosity: bool = True
    integral_coords: bool = False  # whole-number draws (pixel-grid placement)

    # ---- reproducibility ----
    seed: Optional[int] = 7

    # ---- output ----
    out_dir: str = "output"
    image_name: str = "galaxy.png"
    text_name: str = "galaxy.txt"
    text_format: str = "extended"     # "simple" | "extended"
    color_mode: str = "luminosity"    # "luminosity" | "random_gray"
    write_image: bool = True
    write_text: bool = True
    write_csv: bool = True
    verbose: bool = True

    def validate(self) -> None:
        """Raise ``GalaxyConfigError`` for any unusable combination."""
        try:
            kind = GalaxyType(self.galaxy_type)
        except ValueError:
            raise GalaxyConfigError(
                f"unknown galaxy type {self.galaxy_type!r}; "
                f"expected one of {[t.value for t in GalaxyType]}"
            ) from None
        if kind is GalaxyType.RING:
            raise GalaxyConfigError("ring galaxies are not implemented")
        _check_dimensions(self.width, self.height)
        if self.n_stars < 0:
            raise GalaxyConfigError(f"n_stars must be >= 0 (got {self.n_stars})")
        if kind is GalaxyType.SPIRAL and self.n_branches < 1:
            raise GalaxyConfigError(
                f"a spiral needs at least one branch (got {self.n_branches})"
            )
        _check_non_negative("jitter", self.jitter)
        _check_non_negative("branch_jitter", self.branch_jitter)
        for name, value, allowed in (
            ("arm_reach", self.arm_reach, ARM_REACH_MODES),
            ("text_format", self.text_format, TEXT_FORMATS),
            ("color_mode", self.color_mode, COLOR_MODES),
        ):
            if value not in allowed:
                raise GalaxyConfigError(
                    f"{name} must be one of {allowed} (got {value!r})"
                )

    @property
    def kind(self) -> GalaxyType:
        return GalaxyType(self.galaxy_type)

    def make_rng(self) -> NumpyRandomSource:
        return NumpyRandomSource(self.seed, integral=self.integral_coords)


def generate_galaxy(cfg: GalaxyConfig, rng: Optional[RandomSource] = None) -> Galaxy:
    """Validate ``cfg`` and run the composer for its galaxy type."""
    cfg.validate()
    if rng is None:
        rng = cfg.make_rng()

    if cfg.kind is GalaxyType.ELLIPTICAL:
        return generate_elliptical(
            cfg.width, cfg.height, cfg.n_stars, rng,
            jitter=cfg.jitter,
            with_luminosity=cfg.with_luminosity,
            max_stars=cfg.max_stars,
        )
    return generate_spiral(
        cfg.width, cfg.height, cfg.n_branches, cfg.n_stars, cfg.spin_factor, rng,
        arm_reach=cfg.arm_reach,
        jitter=cfg.jitter,
        branch_jitter=cfg.branch_jitter,
        with_luminosity=cfg.with_luminosity,
        max_stars=cfg.max_stars,
    )


# ---------------------------------------------------------------------------
# Main generator class
# ---------------------------------------------------------------------------

def make_out_dir(out_dir: str) -> None:
    """Create ``out_dir`` if needed; failures become ``GalaxyExportError``."""
    try:
        os.makedirs(out_dir, exist_ok=True)
    except OSError as exc:
        raise GalaxyExportError(out_dir, exc) from exc


class GalaxyGenerator:
    """Generate a galaxy from a ``GalaxyConfig`` and write its exports.

    Parameters
    ----------
    cfg : GalaxyConfig
        All tunable parameters.  Defaults produce a six-armed 10 000-star
        spiral on an 800×600 canvas in well under a second.
    rng : RandomSource, optional
        Source for every draw.  Defaults to a ``NumpyRandomSource`` seeded
        from ``cfg.seed``.
    """

    def __init__(self, cfg: GalaxyConfig, rng: Optional[RandomSource] = None) -> None:
        cfg.validate()
        self.cfg = cfg
        self._rng = rng if rng is not None else cfg.make_rng()

    def _say(self, msg: str = "") -> None:
        if self.cfg.verbose:
            print(msg)

    def generate(self) -> Galaxy:
        return generate_galaxy(self.cfg, self._rng)

    # ------------------------------------------------------------------
    # Summary checks
    # ------------------------------------------------------------------

    def _run_checks(self, galaxy: Galaxy) -> None:
        """Print a short summary of the generated galaxy against its config."""
        cfg = self.cfg
        expected = expected_star_count(galaxy.type, cfg.n_stars, cfg.n_branches)
        sep = "─" * 52

        self._say(f"\n{sep}")
        self._say("  SUMMARY")
        self._say(sep)
        ok = "OK" if galaxy.stars_count == expected else "MISMATCH"
        self._say(f"  Star count : {galaxy.stars_count:>7,}  "
                  f"(requested {cfg.n_stars:,}, expected {expected:,})  {ok}")
        for sector, count in galaxy.sector_counts().items():
            self._say(f"  {sector.label:<11}: {count:>7,}")
        if galaxy.stars:
            r_max = max(s.r for s in galaxy.stars)
            self._say(f"  Max r      : {r_max:>9.2f}  "
                      f"(canvas half-size {min(galaxy.width, galaxy.height) / 2:.0f})")
        self._say(sep + "\n")

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(self) -> Galaxy:
        """Generate the galaxy, write the enabled exports, and return it.

        Stages
        ------
        A – sample stars sector by sector (and spin, for spirals).
        B – print the summary checks.
        C – write image, text dump, and CSV into ``cfg.out_dir``.

        Export failures propagate as ``GalaxyExportError`` after the galaxy
        has been generated; the returned galaxy is never partially built.
        """
        import galaxy_export

        cfg = self.cfg
        t_start = time.perf_counter()

        # ── Stage A ──────────────────────────────────────────────────
        self._say(f"Stage A: sampling {cfg.galaxy_type} galaxy …")
        t0 = time.perf_counter()
        galaxy = self.generate()
        self._say(f"  {galaxy.stars_count:,} stars sampled in "
                  f"{time.perf_counter() - t0:.2f}s")

        # ── Stage B ──────────────────────────────────────────────────
        self._run_checks(galaxy)

        # ── Stage C ──────────────────────────────────────────────────
        if cfg.write_image or cfg.write_text or cfg.write_csv:
            make_out_dir(cfg.out_dir)
            self._say("Stage C: writing exports …")

        if cfg.write_image:
            path = os.path.join(cfg.out_dir, cfg.image_name)
            galaxy_export.write_image(galaxy, path, color_mode=cfg.color_mode,
                                      rng=self._rng)
            self._say(f"  Wrote {path}")
        if cfg.write_text:
            path = os.path.join(cfg.out_dir, cfg.text_name)
            galaxy_export.write_text(galaxy, path, text_format=cfg.text_format)
            self._say(f"  Wrote {path}")
        if cfg.write_csv:
            path = os.path.join(cfg.out_dir, "stars.csv")
            galaxy_export.write_csv(galaxy, path)
            self._say(f"  Wrote {path}")

        self._say(f"\nTotal time: {time.perf_counter() - t_start:.2f}s")
        return galaxy


# ---------------------------------------------------------------------------
# Script entry point (uses all GalaxyConfig defaults)
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    GalaxyGenerator(GalaxyConfig()).run()
