"""
SVG rendering for streak badges.
"""
from typing import Callable, Dict, NamedTuple

from django.utils.html import escape

from .services.stats_engine import StatsSnapshot
from .themes import Layout, Theme

FONT_STACK = "'Segoe UI', Roboto, Helvetica, Arial, sans-serif"


class Metric(NamedTuple):
    label: str
    value: Callable[[StatsSnapshot], str]
    unit: Callable[[StatsSnapshot], str]


def format_number(num) -> str:
    if num >= 1000000:
        return f"{num/1000000:.1f}M"
    if num >= 1000:
        return f"{num/1000:.1f}k"
    return str(num)


def _month_value(stats: StatsSnapshot) -> str:
    month = stats.highest_committed_month
    return f"{month.label} ({month.count})" if month else month.label


METRICS: Dict[str, Metric] = {
    'current_streak': Metric(
        label='Current Streak',
        value=lambda s: str(s.current_streak),
        unit=lambda s: 'consecutive days',
    ),
    'max_streak_in_year': Metric(
        label='Year Max Streak',
        value=lambda s: str(s.max_streak_in_year),
        unit=lambda s: f'days in {s.year}',
    ),
    'most_productive_day': Metric(
        label='Most Productive',
        value=lambda s: format_number(s.most_productive_day.count),
        unit=lambda s: f'on {s.most_productive_day.label}',
    ),
    'average_weekly_in_year': Metric(
        label='Weekly Avg (YTD)',
        value=lambda s: f'{s.average_weekly_in_year:.1f}',
        unit=lambda s: 'contributions / wk',
    ),
    'consistency_90': Metric(
        label='Consistency',
        value=lambda s: f'{s.consistency_90}%',
        unit=lambda s: 'active days, last 90',
    ),
    'highest_committed_month': Metric(
        label='Best Month',
        value=_month_value,
        unit=lambda s: 'contributions',
    ),
    'total_contributions': Metric(
        label='Total',
        value=lambda s: format_number(s.total_contributions),
        unit=lambda s: 'contributions, last 12 months',
    ),
}


def _card_value(key: str, stats: StatsSnapshot) -> str:
    # Best month reads better as the month name with the count underneath
    if key == 'highest_committed_month':
        return stats.highest_committed_month.label
    return METRICS[key].value(stats)


def _card_unit(key: str, stats: StatsSnapshot) -> str:
    if key == 'highest_committed_month':
        return f'{format_number(stats.highest_committed_month.count)} contributions'
    return METRICS[key].unit(stats)


def render_badge(stats: StatsSnapshot, username: str, theme: Theme, layout: Layout) -> str:
    """Render a StatsSnapshot as an SVG badge."""
    safe_username = escape(username)

    width = 720
    padding = 24
    card_gap = 18
    card_height = 130
    header_height = 70
    columns = max(1, len(layout.cards))
    card_width = (width - padding * 2 - card_gap * (columns - 1)) // columns
    footer_height = 40 if layout.footer else 0
    height = padding * 2 + header_height + card_height + footer_height

    cards = []
    for index, key in enumerate(layout.cards):
        x = index * (card_width + card_gap)
        cards.append(f'''
        <g transform="translate({x},0)" filter="url(#shadow)">
            <rect width="{card_width}" height="{card_height}" rx="16" fill="url(#cardSurface)" stroke="{theme.card_stroke}" stroke-width="1"/>
            <g transform="translate(20, 25)">
                <text class="label">{escape(METRICS[key].label)}</text>
                <text class="stat-big" x="0" y="45">{escape(_card_value(key, stats))}</text>
                <text class="stat-unit" x="0" y="68">{escape(_card_unit(key, stats))}</text>
            </g>
        </g>''')

    footer = ''
    if layout.footer:
        parts = []
        for index, key in enumerate(layout.footer):
            metric = METRICS[key]
            if index:
                parts.append('<tspan dx="15" opacity="0.5">&#8226;</tspan>')
            parts.append(
                f'<tspan dx="{15 if index else 0}">{escape(metric.label)}: '
                f'<tspan fill="{theme.text_value}" font-weight="600">{escape(metric.value(stats))}</tspan></tspan>'
            )
        footer_markup = ''.join(parts)
        footer = f'''
    <g transform="translate(10, {header_height + card_height + 28})">
        <text class="muted">{footer_markup}</text>
    </g>'''

    cards_markup = ''.join(cards)
    return f'''<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" viewBox="0 0 {width} {height}">
    <defs>
        <linearGradient id="bgGrad" x1="0" y1="0" x2="0" y2="1">
            <stop offset="0%" stop-color="{theme.bg_start}"/>
            <stop offset="100%" stop-color="{theme.bg_end}"/>
        </linearGradient>
        <linearGradient id="accentGrad" x1="0" y1="0" x2="1" y2="0">
            <stop offset="0%" stop-color="{theme.accent_color}"/>
            <stop offset="100%" stop-color="{theme.accent_color_light}"/>
        </linearGradient>
        <linearGradient id="cardSurface" x1="0" y1="0" x2="0" y2="1">
            <stop offset="0%" stop-color="{theme.card_fill}" stop-opacity="{0.6 if theme.is_dark else 1}"/>
            <stop offset="100%" stop-color="{theme.bg_end}" stop-opacity="{0.8 if theme.is_dark else 1}"/>
        </linearGradient>
        <filter id="shadow" x="-10%" y="-10%" width="120%" height="120%">
            <feDropShadow dx="0" dy="4" stdDeviation="3" flood-opacity="{0.3 if theme.is_dark else 0.08}"/>
        </filter>
        <style>
            .font-base {{ font-family: {FONT_STACK}; }}
            .title {{ font-weight: 700; font-size: 15px; fill: {theme.text_title}; }}
            .muted {{ font-weight: 400; font-size: 12px; fill: {theme.text_muted}; }}
            .label {{ font-weight: 600; font-size: 12px; fill: {theme.text_label}; letter-spacing: 0.5px; text-transform: uppercase; }}
            .stat-big {{ font-weight: 800; font-size: 30px; fill: url(#accentGrad); }}
            .stat-unit {{ font-weight: 600; font-size: 13px; fill: {theme.text_muted}; }}
        </style>
    </defs>

    <rect width="100%" height="100%" fill="url(#bgGrad)" rx="12"/>

    <g transform="translate({padding}, {padding})" class="font-base">
        <g transform="translate(10, 5)">
            <circle cx="20" cy="20" r="20" fill="url(#accentGrad)" opacity="0.3"/>
            <text x="20" y="27" font-size="18" text-anchor="middle">&#128293;</text>
            <text class="title" x="56" y="16">GitHub Contributions: {safe_username}</text>
            <text class="muted" x="56" y="34">Live metrics updated from GitHub</text>
        </g>

        <g transform="translate(0, {header_height})">{cards_markup}
        </g>{footer}
    </g>
</svg>'''


def render_error_badge(message: str, theme: Theme) -> str:
    """Render an error message as an SVG so <img> embeds never break."""
    return f'''<svg xmlns="http://www.w3.org/2000/svg" width="400" height="100">
    <defs>
        <linearGradient id="errorGrad" x1="0%" y1="0%" x2="100%" y2="100%">
            <stop offset="0%" stop-color="{theme.bg_start}"/>
            <stop offset="100%" stop-color="{theme.bg_end}"/>
        </linearGradient>
    </defs>
    <rect width="400" height="100" fill="url(#errorGrad)" stroke="{theme.card_stroke}" rx="12"/>
    <text x="200" y="55" font-family="{FONT_STACK}" font-size="14" fill="{theme.error_color}" text-anchor="middle" font-weight="600">{escape(message[:60])}</text>
</svg>'''
