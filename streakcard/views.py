"""
Views for the streak card app.
"""
import logging

from django.conf import settings
from django.http import HttpResponse
from django.views.decorators.http import require_http_methods

from .badges import render_badge, render_error_badge
from .exceptions import InvalidInput, MissingParameter, UpstreamFailure, UserNotFound
from .services.github_client import GitHubClient
from .services.stats_engine import build_snapshot
from .themes import get_layout, get_theme, get_theme_for_color_scheme

logger = logging.getLogger(__name__)

SVG_CONTENT_TYPE = 'image/svg+xml'


def _require_param(request, name: str) -> str:
    value = (request.GET.get(name) or '').strip()
    if not value:
        raise MissingParameter(name)
    return value


def _select_theme(request):
    theme_id = request.GET.get('theme')
    if theme_id:
        return get_theme(theme_id)

    color_scheme = request.headers.get('Sec-CH-Prefers-Color-Scheme')
    if color_scheme:
        return get_theme_for_color_scheme(color_scheme)
    return get_theme(getattr(settings, 'STREAKCARD_DEFAULT_THEME', None))


def _select_layout(request):
    layout_id = request.GET.get('layout') or getattr(settings, 'STREAKCARD_DEFAULT_LAYOUT', None)
    return get_layout(layout_id)


def _error_response(message: str, theme, status: int) -> HttpResponse:
    response = HttpResponse(render_error_badge(message, theme), content_type=SVG_CONTENT_TYPE, status=status)
    response['Cache-Control'] = 'no-cache'
    return response


def _badge_response(request, username: str) -> HttpResponse:
    """Fetch, compute and render; every failure still answers with an SVG."""
    theme = _select_theme(request)
    layout = _select_layout(request)

    try:
        client = GitHubClient()
        calendar = client.get_contribution_calendar(username)
        stats = build_snapshot(calendar.days, calendar.total_contributions)
        svg = render_badge(stats, username, theme, layout)
    except UserNotFound:
        return _error_response("User not found", theme, status=404)
    except UpstreamFailure as e:
        logger.warning("Upstream failure for %s: %s", username, e)
        return _error_response("GitHub is unavailable, try again later", theme, status=502)
    except InvalidInput as e:
        logger.error("Malformed calendar for %s: %s", username, e)
        return _error_response("Could not read contribution data", theme, status=500)
    except Exception:
        logger.exception("Unexpected error rendering badge for %s", username)
        return _error_response("Internal Server Error", theme, status=500)

    max_age = getattr(settings, 'BADGE_CACHE_SECONDS', 3600)
    response = HttpResponse(svg, content_type=SVG_CONTENT_TYPE)
    response['Cache-Control'] = (
        f'public, max-age={max_age}, s-maxage={max_age}, stale-while-revalidate={max_age}'
    )
    return response


@require_http_methods(["GET"])
def streak_badge_view(request):
    """
    Streak badge for ``?user=<login>``.
    Supports ``theme`` and ``layout`` parameters via query string.
    """
    try:
        username = _require_param(request, 'user')
    except MissingParameter as e:
        return HttpResponse(str(e), content_type='text/plain; charset=utf-8', status=400)

    return _badge_response(request, username)


@require_http_methods(["GET"])
def badge_view(request, username):
    """Path-style alias: /badge/<login>.svg"""
    return _badge_response(request, username)
