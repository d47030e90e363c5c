"""Toxicity color policy: stable distinct colors, neutral fallback."""
from data.models import Toxicity
from ui.components.toxicity_palette import (
    FALLBACK_COLOR,
    FALLBACK_RGB,
    TOXICITY_PALETTE,
    badge_html,
    color_for,
    hex_to_rgb,
    legend_chips,
    rgb_for,
)


def test_each_level_has_distinct_stable_color():
    colors = [color_for(level) for level in ("Low", "Moderate", "High")]
    assert len(set(colors)) == 3
    assert colors == [color_for("Low"), color_for("Moderate"), color_for("High")]
    assert FALLBACK_COLOR not in colors


def test_enum_and_string_inputs_agree():
    for level in Toxicity:
        assert color_for(level) == color_for(level.value) == TOXICITY_PALETTE[level]


def test_unknown_values_fall_back():
    for value in ("low", "Severe", "", None, float("nan"), 3):
        assert color_for(value) == FALLBACK_COLOR
        assert rgb_for(value) == FALLBACK_RGB


def test_rgb_agrees_with_css_token():
    for level in Toxicity:
        assert rgb_for(level) == hex_to_rgb(color_for(level))
    r, g, b = rgb_for("Low")
    assert g > r and g > b  # green
    r, g, b = rgb_for("High")
    assert r > g and r > b  # red
    r, g, b = rgb_for("Moderate")
    assert r > b and g > b  # amber


def test_badge_html_uses_level_color():
    html = badge_html("Moderate")
    assert color_for("Moderate") in html
    assert ">Moderate<" in html
    assert ">Low<" in badge_html(Toxicity.LOW)
    assert FALLBACK_COLOR in badge_html("bogus")


def test_badge_html_escapes_csv_values():
    html = badge_html("<b>Severe</b>")
    assert "<b>" not in html
    assert "&lt;b&gt;Severe&lt;/b&gt;" in html


def test_legend_highlights_applied_level():
    chips = legend_chips(selected=Toxicity.HIGH)
    assert len(chips) == 3
    assert "opacity:1.0" in chips[2] and ">High<" in chips[2]
    assert all("opacity:0.35" in chip for chip in chips[:2])


def test_legend_shows_unclassified_fallback_as_applied():
    chips = legend_chips(selected=Toxicity.LOW, unclassified="Severe")
    assert len(chips) == 4
    assert all("opacity:0.35" in chip for chip in chips[:3])
    assert FALLBACK_COLOR in chips[3]
    assert "opacity:1.0" in chips[3] and ">Severe<" in chips[3]
