import pytest

from amor_presente.kernel.errors import ValidationError
from amor_presente.sites.theme import build_theme, hex_to_hsl, theme_catalog, validate_theme_ids

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "hex_color,expected",
    [
        ("#D4AF37", "46 65% 52%"),
        ("#000000", "0 0% 0%"),
        ("#ffffff", "0 0% 100%"),
        ("#fff", "0 0% 100%"),
        ("#4A90E2", "212 72% 59%"),
    ],
)
def test_hex_to_hsl(hex_color, expected):
    assert hex_to_hsl(hex_color) == expected


def test_build_theme_known_ids():
    theme = build_theme("romantic-pink", "dancing", "gold")
    assert theme["color_scheme"] == "romantic-pink"
    assert theme["--font-family"] == "Dancing Script, cursive"
    assert theme["--font-color"] == "#D4AF37"


def test_build_theme_falls_back_to_defaults():
    theme = build_theme("neon", None, "unknown")
    assert theme["color_scheme"] == "elegant-gold"
    assert theme["font_family_id"] == "playfair"
    assert theme["font_color_id"] == "default"
    assert theme["--primary"] == "46 65% 52%"


def test_validate_theme_ids():
    validate_theme_ids(color_scheme="modern-blue", font_family=None, font_color="rose")
    with pytest.raises(ValidationError) as exc:
        validate_theme_ids(font_family="comic-sans")
    assert exc.value.code == "site.invalid_font_family"


def test_catalog_lists_every_option():
    catalog = theme_catalog()
    assert len(catalog["color_schemes"]) == 7
    assert len(catalog["font_families"]) == 5
    assert len(catalog["font_colors"]) == 8
    assert catalog["color_schemes"][0]["colors"] == ["#D4AF37", "#F5F5DC", "#8B4513"]
