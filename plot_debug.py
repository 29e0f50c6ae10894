"""
plot_debug.py
=============
Matplotlib preview of a saved star field.

Shows:
  • Nominal sector circles (core, outer core, halo / arm reach)
  • Stars coloured by sector, luminosity, radius, or a uniform colour
  • Optional view rotation about the galaxy centre (--rotate)

Stars are drawn in the orientation of the exported galaxy.png (x mirrored,
y up), so the preview and the image line up.

Usage
-----
    # Default: use ./output/, colour by sector
    python plot_debug.py

    # Colour stars by luminosity
    python plot_debug.py --color_by luminosity

    # Turn the view by 30 degrees
    python plot_debug.py --rotate 30

    # Uniform star colour (no gradient)
    python plot_debug.py --color_by none --star_color "#ffffff"

    # Save to PNG instead of opening an interactive window
    python plot_debug.py --save galaxy_preview.png

    # Save as SVG (vector, scales to any size)
    python plot_debug.py --svg

    # Point at a different output directory
    python plot_debug.py --out_dir my_run

Canvas size and galaxy type are read from params.json (written by
run_generate.py); pass --width / --height / --galaxy_type to override.
"""

from __future__ import annotations

import argparse
import json
import math
import os
import sys

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.colors import LinearSegmentedColormap
import numpy as np
import pandas as pd

from galaxygen import GalaxyType, Sector, rotate_about, sector_radii


SECTOR_COLORS = {
    Sector.CORE:       "#ffe8a0",
    Sector.OUTER_CORE: "#ffb060",
    Sector.BRANCH:     "#9fc4ff",
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="plot_debug.py",
        description="Preview plot for the star-field generator.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Output location
    p.add_argument("--out_dir",  default="output",
                   help="Directory containing stars.csv and params.json.")
    p.add_argument("--save",     default=None, metavar="FILE",
                   help="Save figure to FILE (png/pdf/svg) instead of displaying.")
    p.add_argument("--svg",      nargs="?", const="galaxy.svg", default=None,
                   metavar="FILE",
                   help="Save figure as SVG (vector format).  "
                        "FILE defaults to 'galaxy.svg' when omitted.  "
                        "Overrides --save when both are given.")

    # View
    p.add_argument("--rotate", type=float, default=0.0, metavar="DEG",
                   help="Rotate the view about the galaxy centre.")
    p.add_argument("--no_circles", action="store_true",
                   help="Skip the nominal sector circles.")
    p.add_argument("--color_by",
                   choices=["sector", "luminosity", "r", "none"],
                   default="sector",
                   help="Star colouring scheme.")

    # Star appearance
    p.add_argument("--star_size",  type=float, default=1.0,
                   help="Scatter marker size.")
    p.add_argument("--star_color", default="#ffffff",
                   help="Uniform star colour used when --color_by none.")
    p.add_argument("--gradient_low_color",  default="#1a1a40",
                   help="Gradient colour at low data values.")
    p.add_argument("--gradient_high_color", default="#ffffff",
                   help="Gradient colour at high data values.")

    # Canvas – auto-loaded from params.json when present;
    # explicit CLI values always take precedence.
    p.add_argument("--width",       type=int, default=None)
    p.add_argument("--height",      type=int, default=None)
    p.add_argument("--galaxy_type", choices=["spiral", "elliptical"], default=None)

    return p


# ---------------------------------------------------------------------------
# Plot
# ---------------------------------------------------------------------------

def _load_params(args: argparse.Namespace) -> None:
    """Fill unset canvas arguments from params.json, then from defaults."""
    defaults = {"width": 800, "height": 600, "galaxy_type": "spiral"}
    saved = {}
    params_path = os.path.join(args.out_dir, "params.json")
    if os.path.exists(params_path):
        with open(params_path) as f:
            saved = json.load(f)
    for key, fallback in defaults.items():
        if getattr(args, key, None) is None:
            setattr(args, key, saved.get(key, fallback))


def draw_galaxy(args: argparse.Namespace) -> plt.Figure:
    """Load stars.csv and draw the preview.

    Parameters
    ----------
    args : parsed argparse Namespace (see ``build_parser``)

    Returns
    -------
    matplotlib Figure
    """
    _load_params(args)

    stars_path = os.path.join(args.out_dir, "stars.csv")
    if not os.path.exists(stars_path):
        raise FileNotFoundError(
            f"stars.csv not found in '{args.out_dir}'.  "
            "Run run_generate.py first."
        )
    stars = pd.read_csv(stars_path)

    xy = stars[["x", "y"]].values.astype(float)
    if args.rotate:
        xy = rotate_about(xy, (0.0, 0.0), math.radians(args.rotate))
    # Same orientation as the exported image, which maps x to cx - x.
    xy[:, 0] = -xy[:, 0]

    # ── Figure setup ─────────────────────────────────────────────────────
    fig, ax = plt.subplots(figsize=(10, 10 * args.height / args.width))
    ax.set_aspect("equal", adjustable="datalim")

    BG = "#000000"
    ax.set_facecolor(BG)
    fig.patch.set_facecolor(BG)

    half_w, half_h = args.width / 2, args.height / 2
    ax.set_xlim(-half_w, half_w)
    ax.set_ylim(-half_h, half_h)
    ax.autoscale(False)

    # ── Sector circles ───────────────────────────────────────────────────
    kind = GalaxyType(args.galaxy_type)
    radii = sector_radii(kind, args.width, args.height)
    if not args.no_circles:
        for sector, radius in radii.items():
            ax.add_patch(plt.Circle(
                (0, 0), radius,
                fill=False, edgecolor=SECTOR_COLORS[sector],
                linewidth=0.8, linestyle="--", alpha=0.5, zorder=2,
            ))

    # ── Stars ────────────────────────────────────────────────────────────
    grad_cmap = LinearSegmentedColormap.from_list(
        "user_gradient", [args.gradient_low_color, args.gradient_high_color]
    )

    color_by = args.color_by
    clabel = None
    cmap = None
    vmin_val = vmax_val = None

    if color_by == "sector" and "sector" in stars.columns:
        c = [SECTOR_COLORS[Sector(int(s))] for s in stars["sector"].values]
    elif color_by == "luminosity" and stars["luminosity"].notna().any():
        c, cmap, clabel = stars["luminosity"].fillna(1.0).values, grad_cmap, "Luminosity"
        vmin_val, vmax_val = 0.0, 1.0
    elif color_by == "r":
        c, cmap, clabel = np.hypot(xy[:, 0], xy[:, 1]), grad_cmap, "Radius"
    else:
        c = args.star_color

    sc = ax.scatter(
        xy[:, 0], xy[:, 1],
        c=c, cmap=cmap,
        vmin=vmin_val, vmax=vmax_val,
        s=args.star_size,
        linewidths=0,
        zorder=6,
    )

    if clabel and cmap:
        cbar = plt.colorbar(sc, ax=ax, pad=0.01, fraction=0.03, shrink=0.85)
        cbar.set_label(clabel, color="white", fontsize=9)
        cbar.ax.yaxis.set_tick_params(color="white", labelsize=7)
        plt.setp(plt.getp(cbar.ax.axes, "yticklabels"), color="white")
    # Re-lock limits after colorbar; colorbar resizes ax but must not shift data coords.
    ax.set_xlim(-half_w, half_w)
    ax.set_ylim(-half_h, half_h)

    # ── Decorations ──────────────────────────────────────────────────────
    title = f"{kind.value.capitalize()} galaxy  |  {len(stars):,} stars"
    if args.rotate:
        title += f"  |  view rotated {args.rotate:g}°"
    ax.set_title(title, color="white", fontsize=11, pad=10)

    for spine in ax.spines.values():
        spine.set_edgecolor("#2a2a3a")
    ax.tick_params(colors="#555566", labelsize=7)

    if color_by == "sector":
        legend_patches = [
            mpatches.Patch(facecolor=SECTOR_COLORS[s],
                           label=f"{s.label} (r={radii[s]})")
            for s in Sector
        ]
        ax.legend(
            handles=legend_patches,
            loc="upper right",
            fontsize=8,
            facecolor="#111122",
            edgecolor="#333355",
            labelcolor="white",
        )

    return fig


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    parser = build_parser()
    args   = parser.parse_args()

    try:
        fig = draw_galaxy(args)
    except FileNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.svg:
        fig.savefig(args.svg, format="svg", bbox_inches="tight",
                    facecolor=fig.get_facecolor())
        print(f"Saved figure to {args.svg}")
    elif args.save:
        fig.savefig(args.save, dpi=150, bbox_inches="tight",
                    facecolor=fig.get_facecolor())
        print(f"Saved figure to {args.save}")
    else:
        plt.show()


if __name__ == "__main__":
    main()
