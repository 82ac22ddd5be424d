"""
Site theme catalogs.

Colors are stored as ids on the site row; `build_theme` resolves them into
the CSS custom properties the public page applies. `--primary`,
`--background` and `--accent` use the `H S% L%` form so they compose with
`hsl(var(--primary))`.
"""

from __future__ import annotations

from dataclasses import dataclass

from amor_presente.kernel.errors import ValidationError

DEFAULT_COLOR_SCHEME = "elegant-gold"
DEFAULT_FONT_FAMILY = "playfair"
DEFAULT_FONT_COLOR = "default"


@dataclass(frozen=True)
class ColorScheme:
    id: str
    name: str
    primary: str
    background: str
    accent: str

    @property
    def colors(self) -> list[str]:
        return [self.primary, self.background, self.accent]


@dataclass(frozen=True)
class ThemeOption:
    id: str
    name: str
    value: str


COLOR_SCHEMES: dict[str, ColorScheme] = {
    scheme.id: scheme
    for scheme in (
        ColorScheme("elegant-gold", "Elegante Dourado", "#D4AF37", "#F5F5DC", "#8B4513"),
        ColorScheme("romantic-pink", "Rosa Romântico", "#FFB6C1", "#FFF0F5", "#8B4B61"),
        ColorScheme("modern-blue", "Azul Moderno", "#4A90E2", "#E8F4FD", "#2C5AA0"),
        ColorScheme("natural-green", "Verde Natural", "#90EE90", "#F0FFF0", "#228B22"),
        ColorScheme("classic-navy", "Azul Marinho Clássico", "#000080", "#F0F8FF", "#483D8B"),
        ColorScheme("dark-elegance", "Elegância Escura", "#1a1a1a", "#2d2d2d", "#f5f5f5"),
        ColorScheme("midnight-black", "Preto Midnight", "#000000", "#1c1c1c", "#ffffff"),
    )
}

FONT_FAMILIES: dict[str, ThemeOption] = {
    option.id: option
    for option in (
        ThemeOption("inter", "Inter (Moderna)", "Inter, sans-serif"),
        ThemeOption("playfair", "Playfair Display (Elegante)", "Playfair Display, serif"),
        ThemeOption("dancing", "Dancing Script (Manuscrita)", "Dancing Script, cursive"),
        ThemeOption("sloop", "Sloop Script Pro (Premium)", "Sloop Script Pro, cursive"),
        ThemeOption("montserrat", "Montserrat (Clean)", "Montserrat, sans-serif"),
    )
}

FONT_COLORS: dict[str, ThemeOption] = {
    option.id: option
    for option in (
        ThemeOption("default", "Padrão", "var(--foreground)"),
        ThemeOption("primary", "Primária", "var(--primary)"),
        ThemeOption("secondary", "Secundária", "var(--muted-foreground)"),
        ThemeOption("accent", "Destaque", "var(--accent-foreground)"),
        ThemeOption("white", "Branco", "#ffffff"),
        ThemeOption("black", "Preto", "#000000"),
        ThemeOption("gold", "Dourado", "#D4AF37"),
        ThemeOption("rose", "Rosa", "#E91E63"),
    )
}


def hex_to_hsl(hex_color: str) -> str:
    """'#D4AF37' -> '46 65% 52%'."""
    value = hex_color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    r, g, b = (int(value[i:i + 2], 16) / 255 for i in (0, 2, 4))

    high, low = max(r, g, b), min(r, g, b)
    lightness = (high + low) / 2
    if high == low:
        hue = saturation = 0.0
    else:
        delta = high - low
        saturation = delta / (2 - high - low) if lightness > 0.5 else delta / (high + low)
        if high == r:
            hue = ((g - b) / delta + (6 if g < b else 0)) / 6
        elif high == g:
            hue = ((b - r) / delta + 2) / 6
        else:
            hue = ((r - g) / delta + 4) / 6

    return f"{round(hue * 360)} {round(saturation * 100)}% {round(lightness * 100)}%"


def build_theme(
    color_scheme: str | None,
    font_family: str | None,
    font_color: str | None,
) -> dict[str, str]:
    """Resolve theme ids into CSS custom properties. Unknown ids fall back to defaults."""
    scheme = COLOR_SCHEMES.get(color_scheme or "", COLOR_SCHEMES[DEFAULT_COLOR_SCHEME])
    font = FONT_FAMILIES.get(font_family or "", FONT_FAMILIES[DEFAULT_FONT_FAMILY])
    color = FONT_COLORS.get(font_color or "", FONT_COLORS[DEFAULT_FONT_COLOR])
    return {
        "color_scheme": scheme.id,
        "font_family_id": font.id,
        "font_color_id": color.id,
        "--primary": hex_to_hsl(scheme.primary),
        "--background": hex_to_hsl(scheme.background),
        "--accent": hex_to_hsl(scheme.accent),
        "--font-family": font.value,
        "--font-color": color.value,
    }


def validate_theme_ids(
    *,
    color_scheme: str | None = None,
    font_family: str | None = None,
    font_color: str | None = None,
) -> None:
    """Reject unknown ids on update. None means "not being changed"."""
    if color_scheme is not None and color_scheme not in COLOR_SCHEMES:
        raise ValidationError(
            message=f"Esquema de cores desconhecido: {color_scheme}",
            code="site.invalid_color_scheme",
        )
    if font_family is not None and font_family not in FONT_FAMILIES:
        raise ValidationError(
            message=f"Fonte desconhecida: {font_family}",
            code="site.invalid_font_family",
        )
    if font_color is not None and font_color not in FONT_COLORS:
        raise ValidationError(
            message=f"Cor de fonte desconhecida: {font_color}",
            code="site.invalid_font_color",
        )


def theme_catalog() -> dict[str, list[dict]]:
    return {
        "color_schemes": [
            {"id": s.id, "name": s.name, "colors": s.colors} for s in COLOR_SCHEMES.values()
        ],
        "font_families": [
            {"id": f.id, "name": f.name, "value": f.value} for f in FONT_FAMILIES.values()
        ],
        "font_colors": [
            {"id": c.id, "name": c.name, "value": c.value} for c in FONT_COLORS.values()
        ],
    }
