"""Toxicity color policy & legend utilities.

Single source of truth for how a toxicity level is colored. The 2-D views
(table badge, bar/pie charts, legend) use the CSS hex token, the 3-D viewer
uses the RGB triple; both come from the same table so they cannot drift.
Unknown or missing levels map to a neutral grey instead of raising.
"""
from __future__ import annotations

import html
from typing import List, Optional, Tuple

import streamlit as st

from data.models import Toxicity

Rgb = Tuple[int, int, int]

TOXICITY_PALETTE = {
    Toxicity.LOW: "#22C55E",       # green
    Toxicity.MODERATE: "#F59E0B",  # amber
    Toxicity.HIGH: "#EF4444",      # red
}

FALLBACK_COLOR = "#9CA3AF"


def hex_to_rgb(color: str) -> Rgb:
    value = color.lstrip('#')
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


FALLBACK_RGB: Rgb = hex_to_rgb(FALLBACK_COLOR)


def color_for(toxicity) -> str:
    """CSS color token for a toxicity level (fallback grey for anything else)."""
    level = Toxicity.parse(toxicity)
    if level is None:
        return FALLBACK_COLOR
    return TOXICITY_PALETTE[level]


def rgb_for(toxicity) -> Rgb:
    """RGB triple for the 3-D engine; agrees with color_for."""
    return hex_to_rgb(color_for(toxicity))


def badge_html(toxicity, opacity: float = 1.0) -> str:
    """Colored pill for a toxicity value; the label is HTML-escaped."""
    if isinstance(toxicity, Toxicity):
        label = toxicity.value
    else:
        label = toxicity if isinstance(toxicity, str) and toxicity else "Unknown"
    return (
        f"<span style='background:{color_for(toxicity)};opacity:{opacity};color:#fff;"
        "padding:2px 10px;border-radius:12px;font-size:0.75rem;font-weight:600;"
        "border:1px solid rgba(0,0,0,0.15);"
        f"font-family:system-ui,Segoe UI,Roboto,sans-serif;'>{html.escape(label)}</span>"
    )


def legend_chips(selected: Optional[Toxicity] = None, unclassified: Optional[str] = None) -> List[str]:
    """Badge per level, the applied one at full opacity.

    An ``unclassified`` value (structure painted with the fallback color) dims
    every level and adds its own highlighted fallback chip.
    """
    if unclassified is not None:
        chips = [badge_html(level, opacity=0.35) for level in TOXICITY_PALETTE]
        chips.append(badge_html(unclassified))
        return chips
    return [
        badge_html(level, opacity=1.0 if selected is None or level == selected else 0.35)
        for level in TOXICITY_PALETTE
    ]


def render_toxicity_legend(selected: Optional[Toxicity] = None, unclassified: Optional[str] = None,
                           title: str = "Toxicity Legend"):
    """Render a compact legend of toxicity levels.

    Args:
        selected: Level currently applied to the structure (others dimmed)
        unclassified: Out-of-range value currently applied, if any
        title: Legend caption
    """
    st.caption(title)
    st.markdown(
        '<div style="display:flex;flex-wrap:wrap;gap:6px;">'
        + ''.join(legend_chips(selected, unclassified))
        + '</div>',
        unsafe_allow_html=True,
    )
