"""Built-in dashboard themes."""

from __future__ import annotations

from .models import ThemeConfig

DEFAULT_THEME_NAME = "Midnight"

THEMES: dict[str, ThemeConfig] = {
    "Midnight": ThemeConfig(
        name="Midnight",
        background="#121212",
        card_bg="#1E1E1E",
        tile_bg="#2C2C2C",
        bar_bg="#333333",
        ok="#00C851",
        info="#33B5E5",
        critical="#FF4444",
        text_primary="#FFFFFF",
        text_secondary="#888888",
    ),
    "Neon Slate": ThemeConfig(
        name="Neon Slate",
        background="#0A0F1D",
        card_bg="#131B33",
        tile_bg="#1A253F",
        bar_bg="#26314F",
        ok="#8CFFB5",
        info="#35D9FF",
        critical="#FF5C7A",
        text_primary="#F4F7FF",
        text_secondary="#A9B5D1",
    ),
    "Solar Drift": ThemeConfig(
        name="Solar Drift",
        background="#1A140E",
        card_bg="#362315",
        tile_bg="#473022",
        bar_bg="#5A3D2B",
        ok="#FFD166",
        info="#FFB347",
        critical="#FF6B3D",
        text_primary="#FFF7E8",
        text_secondary="#E3CFA8",
    ),
}


def list_themes() -> list[str]:
    return sorted(THEMES.keys())


def get_theme(name: str | None) -> ThemeConfig:
    if not name:
        return THEMES[DEFAULT_THEME_NAME]
    return THEMES.get(name, THEMES[DEFAULT_THEME_NAME])
