"""
run_generate.py
===============
CLI entrypoint for the procedural star-field generator.

All parameters are optional; unspecified parameters fall back to the defaults
defined in ``GalaxyConfig``.

Quick start
-----------
    python run_generate.py

With custom parameters (matching the default preset)::

    python run_generate.py \\
        --galaxy_type spiral \\
        --width 800 \\
        --height 600 \\
        --n_stars 10000 \\
        --n_branches 6 \\
        --spin_factor 0.01 \\
        --arm_reach random \\
        --branch_jitter 50 \\
        --seed 7 \\
        --out_dir output

The plain variant (fixed arm reach, narrow jitter, sector-only stars)::

    python run_generate.py --arm_reach fixed --branch_jitter 10 \\
        --no_luminosity --color_mode random_gray --text_format simple

Then visualise the result::

    python plot_debug.py
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from galaxygen import (
    GalaxyConfig,
    GalaxyConfigError,
    GalaxyError,
    GalaxyExportError,
    GalaxyGenerator,
    make_out_dir,
)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="run_generate.py",
        description=(
            "Procedural star-field generator.\n"
            "Produces galaxy.png, galaxy.txt, stars.csv and params.json in OUT_DIR."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Topology ──────────────────────────────────────────────────────────
    p.add_argument(
        "--galaxy_type", choices=["spiral", "elliptical", "ring"], default="spiral",
        help="Galaxy layout.  'ring' is reserved and currently rejected.",
    )

    # ── Canvas ────────────────────────────────────────────────────────────
    p.add_argument(
        "--width", type=int, default=800,
        metavar="W",
        help="Canvas width in pixels.",
    )
    p.add_argument(
        "--height", type=int, default=600,
        metavar="H",
        help="Canvas height in pixels.  Sector radii scale with min(W, H).",
    )

    # ── Star budget ───────────────────────────────────────────────────────
    p.add_argument(
        "--n_stars", type=int, default=10_000,
        metavar="N",
        help=(
            "Requested number of stars.  Spirals may produce slightly fewer "
            "when the branch budget does not divide evenly."
        ),
    )
    p.add_argument(
        "--max_stars", type=int, default=5_000_000,
        metavar="N",
        help="Refuse requests larger than this.",
    )

    # ── Spiral parameters ─────────────────────────────────────────────────
    p.add_argument(
        "--n_branches", type=int, default=6,
        metavar="B",
        help="Number of spiral branches (>= 1).",
    )
    p.add_argument(
        "--spin_factor", type=float, default=0.01,
        metavar="F",
        help="Rotation in radians per pixel of radius; the sign sets the winding.",
    )
    p.add_argument(
        "--arm_reach", choices=["fixed", "random"], default="random",
        help="Branch length: the same for every arm, or randomised per arm.",
    )

    # ── Jitter ────────────────────────────────────────────────────────────
    p.add_argument(
        "--jitter", type=float, default=10.0,
        metavar="J",
        help="Jitter magnitude for core, outer-core and halo stars.",
    )
    p.add_argument(
        "--branch_jitter", type=float, default=50.0,
        metavar="J",
        help="Jitter magnitude for spiral-branch stars.",
    )

    # ── Star attributes ───────────────────────────────────────────────────
    p.add_argument(
        "--no_luminosity", action="store_true",
        help="Generate sector-only stars (no luminosity draw).",
    )
    p.add_argument(
        "--integral_coords", action="store_true",
        help="Draw whole-number coordinates, as on a pixel grid.",
    )

    # ── Reproducibility ───────────────────────────────────────────────────
    p.add_argument(
        "--seed", type=int, default=7,
        metavar="S",
        help="Random seed for reproducible output.",
    )
    p.add_argument(
        "--unseeded", action="store_true",
        help="Ignore --seed and draw fresh entropy.",
    )

    # ── Output ────────────────────────────────────────────────────────────
    p.add_argument(
        "--out_dir", type=str, default="output",
        metavar="DIR",
        help="Directory to write output files (created if absent).",
    )
    p.add_argument(
        "--image_name", type=str, default="galaxy.png",
        metavar="FILE",
        help="Image file name inside OUT_DIR.",
    )
    p.add_argument(
        "--text_name", type=str, default="galaxy.txt",
        metavar="FILE",
        help="Text dump file name inside OUT_DIR.",
    )
    p.add_argument(
        "--text_format", choices=["simple", "extended"], default="extended",
        help="'simple': x, y SectorName.  'extended': count line, then x, y luminosity sector.",
    )
    p.add_argument(
        "--color_mode", choices=["luminosity", "random_gray"], default="luminosity",
        help="Pixel colour: alpha from luminosity, or a random gray per star.",
    )
    p.add_argument("--no_image", action="store_true", help="Skip the image export.")
    p.add_argument("--no_text",  action="store_true", help="Skip the text export.")
    p.add_argument("--no_csv",   action="store_true", help="Skip stars.csv.")
    p.add_argument("--quiet",    action="store_true", help="Suppress progress output.")

    return p


def config_from_args(args: argparse.Namespace) -> GalaxyConfig:
    return GalaxyConfig(
        galaxy_type     = args.galaxy_type,
        width           = args.width,
        height          = args.height,
        n_stars         = args.n_stars,
        max_stars       = args.max_stars,
        n_branches      = args.n_branches,
        spin_factor     = args.spin_factor,
        arm_reach       = args.arm_reach,
        jitter          = args.jitter,
        branch_jitter   = args.branch_jitter,
        with_luminosity = not args.no_luminosity,
        integral_coords = args.integral_coords,
        seed            = None if args.unseeded else args.seed,
        out_dir         = args.out_dir,
        image_name      = args.image_name,
        text_name       = args.text_name,
        text_format     = args.text_format,
        color_mode      = args.color_mode,
        write_image     = not args.no_image,
        write_text      = not args.no_text,
        write_csv       = not args.no_csv,
        verbose         = not args.quiet,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args   = parser.parse_args(argv)
    cfg    = config_from_args(args)

    try:
        cfg.validate()
    except GalaxyConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    # Print config so the user can confirm parameters before waiting
    if cfg.verbose:
        print("Configuration")
        print("─" * 40)
        for field in cfg.__dataclass_fields__:
            print(f"  {field:<16} = {getattr(cfg, field)}")
        print()

    params_path = os.path.join(cfg.out_dir, "params.json")
    try:
        galaxy = GalaxyGenerator(cfg).run()

        # Persist generation parameters so plot_debug.py can read them automatically
        make_out_dir(cfg.out_dir)
        params = {field: getattr(cfg, field) for field in cfg.__dataclass_fields__}
        params["stars_count"] = galaxy.stars_count
        try:
            with open(params_path, "w") as f:
                json.dump(params, f, indent=2)
        except OSError as exc:
            raise GalaxyExportError(params_path, exc) from exc
    except GalaxyConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except GalaxyError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if cfg.verbose:
        print(f"Wrote {params_path}")
        print(
            f"\nNext steps:\n"
            f"  • Preview : python plot_debug.py --out_dir {cfg.out_dir}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
