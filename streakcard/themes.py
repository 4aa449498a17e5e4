"""
Theme and layout definitions for streak badges.
"""
from typing import Dict, List, Optional, Tuple


class Theme:
    """Badge color theme."""

    def __init__(
        self,
        id: str,
        name: str,
        is_dark: bool,
        bg_start: str,
        bg_end: str,
        card_fill: str,
        card_stroke: str,
        text_title: str,
        text_muted: str,
        text_label: str,
        text_value: str,
        accent_color: str,
        accent_color_light: str,
        error_color: str,
    ):
        self.id = id
        self.name = name
        self.is_dark = is_dark
        self.bg_start = bg_start
        self.bg_end = bg_end
        self.card_fill = card_fill
        self.card_stroke = card_stroke
        self.text_title = text_title
        self.text_muted = text_muted
        self.text_label = text_label
        self.text_value = text_value
        self.accent_color = accent_color
        self.accent_color_light = accent_color_light
        self.error_color = error_color


class Layout:
    """
    Which metrics a badge shows and where.

    ``cards`` are rendered as large stat cards in one row, ``footer`` as a
    single line of inline values underneath. Both hold keys of
    ``streakcard.badges.METRICS``.
    """

    def __init__(self, id: str, name: str, cards: Tuple[str, ...], footer: Tuple[str, ...] = ()):
        self.id = id
        self.name = name
        self.cards = cards
        self.footer = footer


# Theme registry
THEMES: Dict[str, Theme] = {
    'midnight': Theme(
        id='midnight',
        name='Midnight',
        is_dark=True,
        bg_start='#0f172a',
        bg_end='#1e293b',
        card_fill='#334155',
        card_stroke='rgba(255,255,255,0.1)',
        text_title='#f1f5f9',
        text_muted='#94a3b8',
        text_label='#cbd5e1',
        text_value='#f1f5f9',
        accent_color='#38bdf8',
        accent_color_light='#818cf8',
        error_color='#f87171',
    ),
    'neon_dark': Theme(
        id='neon_dark',
        name='Neon Dark',
        is_dark=True,
        bg_start='#0a0e27',
        bg_end='#141b2d',
        card_fill='#1a2332',
        card_stroke='#374151',
        text_title='#f3f4f6',
        text_muted='#9ca3af',
        text_label='#d1d5db',
        text_value='#f3f4f6',
        accent_color='#00d4ff',
        accent_color_light='#33dfff',
        error_color='#ff6b6b',
    ),
    'solar_dark': Theme(
        id='solar_dark',
        name='Solar Dark',
        is_dark=True,
        bg_start='#111827',
        bg_end='#1f2937',
        card_fill='#1f2937',
        card_stroke='#374151',
        text_title='#f3f4f6',
        text_muted='#9ca3af',
        text_label='#d1d5db',
        text_value='#f3f4f6',
        accent_color='#fdb44b',
        accent_color_light='#fdc66b',
        error_color='#ff6b6b',
    ),
    'light_clean': Theme(
        id='light_clean',
        name='Light Clean',
        is_dark=False,
        bg_start='#f6fbff',
        bg_end='#eef7ff',
        card_fill='#ffffff',
        card_stroke='#e5e7eb',
        text_title='#111827',
        text_muted='#6b7280',
        text_label='#4b5563',
        text_value='#111827',
        accent_color='#2563eb',
        accent_color_light='#60a5fa',
        error_color='#dc2626',
    ),
    'classic': Theme(
        id='classic',
        name='Classic',
        is_dark=False,
        bg_start='#ffffff',
        bg_end='#ffffff',
        card_fill='#ffffff',
        card_stroke='#e4e2e2',
        text_title='#2f80ed',
        text_muted='#666666',
        text_label='#2f80ed',
        text_value='#333333',
        accent_color='#2f80ed',
        accent_color_light='#2f80ed',
        error_color='#ff0000',
    ),
}

# Layout registry
LAYOUTS: Dict[str, Layout] = {
    'streak': Layout(
        id='streak',
        name='Streak',
        cards=('current_streak', 'total_contributions'),
    ),
    'cards': Layout(
        id='cards',
        name='Cards',
        cards=('current_streak', 'most_productive_day', 'average_weekly_in_year'),
        footer=('max_streak_in_year', 'total_contributions', 'highest_committed_month'),
    ),
    'consistency': Layout(
        id='consistency',
        name='Consistency',
        cards=('current_streak', 'consistency_90', 'highest_committed_month'),
        footer=('max_streak_in_year', 'average_weekly_in_year', 'total_contributions'),
    ),
}

DEFAULT_THEME = 'midnight'
DEFAULT_LIGHT_THEME = 'light_clean'
DEFAULT_LAYOUT = 'cards'


def get_theme(theme_id: Optional[str]) -> Theme:
    """Get a theme by ID, returning default if not found."""
    return THEMES.get(theme_id, THEMES[DEFAULT_THEME])


def get_all_themes() -> List[Theme]:
    """Get all available themes."""
    return list(THEMES.values())


def get_theme_for_color_scheme(color_scheme: Optional[str]) -> Theme:
    """Pick the default theme matching a Sec-CH-Prefers-Color-Scheme hint."""
    if color_scheme and color_scheme.strip('"').lower() == 'dark':
        return THEMES[DEFAULT_THEME]
    return THEMES[DEFAULT_LIGHT_THEME]


def get_layout(layout_id: Optional[str]) -> Layout:
    """Get a layout by ID, returning default if not found."""
    return LAYOUTS.get(layout_id, LAYOUTS[DEFAULT_LAYOUT])
