"""
2D matplotlib previews of flowers and of the garden plane.

These are inspection tools, not the production renderer: each flower is
drawn as its halo, outer ring, inner ring and core disc using the palette of
its render profile.
"""

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Circle, Polygon

from bloom.garden import Garden
from bloom.lifecycle import RenderHints
from bloom.profile import ProfileCache, RenderProfile

BACKGROUND = "#0d1117"
LABEL_COLOR = "#e6edf3"
WITHER_COLOR = "#6b5a3e"


def draw_flower(
    ax: plt.Axes,
    profile: RenderProfile,
    center: tuple[float, float] = (0.0, 0.0),
    size: float = 1.0,
    hints: RenderHints | None = None,
) -> None:
    """
    Draw one flower onto existing axes.

    Args:
        ax: Target axes
        profile: Render profile (rings are in unit radius)
        center: Flower centre in axes coordinates
        size: Radius of the widest petal in axes units
        hints: Optional lifecycle hints; scale and alpha are applied
    """
    scale = size
    alpha = 1.0
    if hints is not None:
        scale *= hints.scale
        alpha = hints.alpha

    origin = np.asarray(center, dtype=float)
    pal = profile.palette

    ax.add_patch(
        Circle(origin, profile.halo_radius * scale * 0.5, color=pal.core_glow, alpha=0.18 * alpha, lw=0)
    )
    ax.add_patch(
        Polygon(
            origin + profile.outer_points * scale,
            closed=True,
            facecolor=pal.outer,
            edgecolor=pal.edge,
            linewidth=profile.stroke_weight,
            alpha=alpha,
        )
    )
    ax.add_patch(
        Polygon(
            origin + profile.inner_points * scale,
            closed=True,
            facecolor=pal.inner,
            edgecolor=pal.line,
            linewidth=profile.stroke_weight * 0.6,
            alpha=alpha,
        )
    )
    ax.add_patch(Circle(origin, profile.core_radius * scale, color=pal.core, alpha=alpha, lw=0))

    if hints is not None and hints.wither_overlay > 0:
        ax.add_patch(
            Polygon(
                origin + profile.outer_points * scale,
                closed=True,
                facecolor=WITHER_COLOR,
                edgecolor="none",
                alpha=0.6 * hints.wither_overlay,
            )
        )


def render_flower(
    profile: RenderProfile, figsize: tuple = (4, 4)
) -> tuple[plt.Figure, plt.Axes]:
    """
    Render a single flower centred on a dark background.

    Returns:
        (figure, axes) tuple
    """
    fig, ax = plt.subplots(figsize=figsize)
    fig.patch.set_facecolor(BACKGROUND)
    ax.set_facecolor(BACKGROUND)
    ax.set_xlim(-1.3, 1.3)
    ax.set_ylim(-1.3, 1.3)
    ax.set_aspect("equal")
    ax.axis("off")

    draw_flower(ax, profile)
    return fig, ax


def save_flower(filepath: str, profile: RenderProfile, dpi: int = 150, figsize: tuple = (4, 4)):
    """Render and save a flower to file."""
    fig, _ = render_flower(profile, figsize)
    fig.savefig(filepath, dpi=dpi, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    print(f"Saved to {filepath}")


def render_garden(
    garden: Garden,
    now: float,
    cache: ProfileCache,
    figsize: tuple = (8, 8),
    show_labels: bool = True,
) -> tuple[plt.Figure, plt.Axes]:
    """
    Render every live flower of a garden at time `now`.

    Returns:
        (figure, axes) tuple
    """
    size = garden.config.size
    fig, ax = plt.subplots(figsize=figsize)
    fig.patch.set_facecolor(BACKGROUND)
    ax.set_facecolor(BACKGROUND)
    ax.set_xlim(0, size)
    ax.set_ylim(size, 0)  # Screen coordinates
    ax.set_aspect("equal")
    ax.axis("off")

    for inst, hints in garden.snapshot(now):
        profile = cache.get(inst.traits, inst.color)
        draw_flower(ax, profile, (inst.x, inst.y), garden.config.footprint_radius, hints)
        if show_labels and inst.word:
            dx, dy = inst.label_offset
            ax.text(
                inst.x + dx,
                inst.y + dy,
                inst.word,
                color=LABEL_COLOR,
                alpha=hints.alpha,
                fontsize=8,
                ha="center",
                va="center",
            )

    return fig, ax


def save_garden(
    filepath: str,
    garden: Garden,
    now: float,
    cache: ProfileCache,
    dpi: int = 150,
    figsize: tuple = (8, 8),
):
    """Render and save the garden to file."""
    fig, _ = render_garden(garden, now, cache, figsize)
    fig.savefig(filepath, dpi=dpi, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    print(f"Saved to {filepath}")
