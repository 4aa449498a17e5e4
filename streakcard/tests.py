"""
Tests for the streak card app.
"""
from dataclasses import FrozenInstanceError
from datetime import date, timedelta
from unittest.mock import MagicMock, patch

import requests
from django.core.cache import cache
from django.test import Client, SimpleTestCase, TestCase, override_settings

from .badges import METRICS, render_badge, render_error_badge
from .exceptions import InvalidInput, UpstreamFailure, UserNotFound
from .services.github_client import ContributionCalendar, GitHubClient, calendar_cache_key
from .services.stats_engine import (
    NO_BEST_DAY,
    NO_BEST_MONTH,
    ActivityDay,
    BestDay,
    average_weekly_in_year,
    build_snapshot,
    consistency_90,
    current_streak,
    highest_committed_month,
    max_streak_in_year,
    most_productive_day,
    parse_calendar,
)
from .themes import (
    DEFAULT_LAYOUT,
    DEFAULT_THEME,
    LAYOUTS,
    get_all_themes,
    get_layout,
    get_theme,
    get_theme_for_color_scheme,
)


def make_days(start, counts):
    """Consecutive ActivityDays beginning at ``start``."""
    return [ActivityDay(start + timedelta(days=i), count) for i, count in enumerate(counts)]


class CurrentStreakTests(SimpleTestCase):
    """Tests for current_streak."""

    def test_empty_calendar(self):
        self.assertEqual(current_streak([], date(2024, 1, 1)), 0)

    def test_zero_day_breaks_streak(self):
        """Jan 2 breaks the streak so Jan 1 is never reached."""
        calendar = [("2024-01-01", 1), ("2024-01-02", 0), ("2024-01-03", 2)]
        self.assertEqual(current_streak(calendar, "2024-01-03"), 1)

    def test_only_today_with_zero(self):
        self.assertEqual(current_streak([("2024-06-10", 0)], "2024-06-10"), 0)

    def test_today_with_zero_is_skipped(self):
        calendar = [("2024-06-08", 3), ("2024-06-09", 2), ("2024-06-10", 0)]
        self.assertEqual(current_streak(calendar, "2024-06-10"), 2)

    def test_zero_on_past_last_day_is_a_break(self):
        calendar = [("2024-06-08", 3), ("2024-06-09", 2), ("2024-06-10", 0)]
        self.assertEqual(current_streak(calendar, "2024-06-11"), 0)

    def test_last_entry_in_the_past(self):
        calendar = [("2024-06-08", 1), ("2024-06-09", 4)]
        self.assertEqual(current_streak(calendar, date(2024, 6, 20)), 2)

    def test_appending_active_day_extends_streak(self):
        days = make_days(date(2024, 3, 1), [0, 1, 1, 1])
        before = current_streak(days, date(2024, 3, 5))
        days += make_days(date(2024, 3, 5), [2])
        self.assertEqual(current_streak(days, date(2024, 3, 5)), before + 1)

    def test_appending_zero_day_resets_streak(self):
        days = make_days(date(2024, 3, 1), [1, 1, 1, 0])
        self.assertEqual(current_streak(days, date(2024, 3, 5)), 0)

    def test_appending_zero_today_leaves_streak_unchanged(self):
        days = make_days(date(2024, 3, 1), [1, 1, 1])
        before = current_streak(days, date(2024, 3, 4))
        days += make_days(date(2024, 3, 4), [0])
        self.assertEqual(current_streak(days, date(2024, 3, 4)), before)

    def test_streak_crosses_year_boundary(self):
        days = make_days(date(2023, 12, 30), [1, 1, 1, 1])
        self.assertEqual(current_streak(days, date(2024, 1, 2)), 4)


class MaxStreakInYearTests(SimpleTestCase):
    """Tests for max_streak_in_year."""

    def setUp(self):
        self.calendar = [
            ("2023-12-30", 1),
            ("2023-12-31", 1),
            ("2024-01-01", 1),
            ("2024-01-02", 0),
            ("2024-01-03", 1),
            ("2024-01-04", 1),
        ]

    def test_empty_calendar(self):
        self.assertEqual(max_streak_in_year([], 2024), 0)

    def test_runs_do_not_cross_year_boundary(self):
        self.assertEqual(max_streak_in_year(self.calendar, 2024), 2)
        self.assertEqual(max_streak_in_year(self.calendar, 2023), 2)

    def test_year_without_entries(self):
        self.assertEqual(max_streak_in_year(self.calendar, 2022), 0)

    def test_never_decreases_when_active_days_are_appended(self):
        days = make_days(date(2024, 5, 1), [1, 1, 1, 0, 1])
        previous = max_streak_in_year(days, 2024)
        for offset in range(5):
            days += make_days(date(2024, 5, 6) + timedelta(days=offset), [1])
            current = max_streak_in_year(days, 2024)
            self.assertGreaterEqual(current, previous)
            previous = current
        self.assertEqual(previous, 6)


class MostProductiveDayTests(SimpleTestCase):
    """Tests for most_productive_day."""

    def test_empty_calendar_returns_sentinel(self):
        best = most_productive_day([])
        self.assertIs(best, NO_BEST_DAY)
        self.assertFalse(best)
        self.assertEqual(best.label, "N/A")

    def test_ties_resolve_to_earliest_date(self):
        calendar = [("2024-01-01", 3), ("2024-01-02", 5), ("2024-01-03", 5)]
        self.assertEqual(most_productive_day(calendar), BestDay(date(2024, 1, 2), 5))

    def test_all_zero_calendar_is_not_the_sentinel(self):
        best = most_productive_day([("2024-01-01", 0), ("2024-01-02", 0)])
        self.assertTrue(best)
        self.assertNotEqual(best, NO_BEST_DAY)
        self.assertEqual(best, BestDay(date(2024, 1, 1), 0))

    def test_scans_whole_calendar(self):
        calendar = [("2022-07-04", 40), ("2024-01-02", 5)]
        self.assertEqual(most_productive_day(calendar).label, "2022-07-04")


class AverageWeeklyInYearTests(SimpleTestCase):
    """Tests for average_weekly_in_year."""

    def test_empty_calendar(self):
        self.assertEqual(average_weekly_in_year([], 2024), 0)

    def test_ten_days_of_five(self):
        """sum 50 over ceil(10 / 7) = 2 weeks"""
        days = make_days(date(2024, 1, 1), [5] * 10)
        self.assertEqual(average_weekly_in_year(days, 2024), 50 / 2)

    def test_partial_week_counts_as_one(self):
        days = make_days(date(2024, 1, 1), [1, 2, 4])
        self.assertEqual(average_weekly_in_year(days, 2024), 7.0)

    def test_rounds_half_up(self):
        """sum 1 over 4 weeks is 0.25, which rounds up to 0.3."""
        days = make_days(date(2024, 1, 1), [1] + [0] * 21)
        self.assertEqual(average_weekly_in_year(days, 2024), 0.3)

    def test_ignores_other_years(self):
        days = make_days(date(2023, 12, 25), [100] * 7) + make_days(date(2024, 1, 1), [2] * 7)
        self.assertEqual(average_weekly_in_year(days, 2024), 14.0)

    def test_scale_consistent(self):
        counts = [3, 0, 1, 4, 1, 5, 9, 2, 6]
        single = average_weekly_in_year(make_days(date(2024, 2, 1), counts), 2024)
        doubled = average_weekly_in_year(make_days(date(2024, 2, 1), [c * 2 for c in counts]), 2024)
        self.assertAlmostEqual(doubled, single * 2, delta=0.1)


class Consistency90Tests(SimpleTestCase):
    """Tests for consistency_90."""

    def test_empty_calendar(self):
        self.assertEqual(consistency_90([]), 0)

    def test_trailing_window_only(self):
        counts = [1] * 110 + [0] * 80 + [1] * 10
        days = make_days(date(2024, 1, 1), counts)
        self.assertEqual(len(days), 200)
        self.assertEqual(consistency_90(days), 11)

    def test_all_active(self):
        self.assertEqual(consistency_90(make_days(date(2024, 1, 1), [2] * 120)), 100)
        self.assertEqual(consistency_90(make_days(date(2024, 1, 1), [1] * 5)), 100)

    def test_all_idle(self):
        self.assertEqual(consistency_90(make_days(date(2024, 1, 1), [0] * 90)), 0)

    def test_rounding(self):
        self.assertEqual(consistency_90(make_days(date(2024, 1, 1), [1, 1, 0])), 67)
        self.assertEqual(consistency_90(make_days(date(2024, 1, 1), [1] + [0] * 7)), 13)

    def test_bounded(self):
        for counts in ([0], [1], [0, 1] * 70, [5, 0, 0] * 40):
            value = consistency_90(make_days(date(2024, 1, 1), counts))
            self.assertGreaterEqual(value, 0)
            self.assertLessEqual(value, 100)


class HighestCommittedMonthTests(SimpleTestCase):
    """Tests for highest_committed_month."""

    def test_empty_calendar_returns_sentinel(self):
        best = highest_committed_month([])
        self.assertIs(best, NO_BEST_MONTH)
        self.assertFalse(best)
        self.assertEqual(best.label, "N/A")

    def test_sums_per_month(self):
        calendar = [("2024-01-30", 3), ("2024-01-31", 4), ("2024-02-01", 2), ("2024-03-15", 10)]
        best = highest_committed_month(calendar)
        self.assertEqual((best.year, best.month, best.count), (2024, 3, 10))
        self.assertEqual(best.label, "Mar 2024")

    def test_ties_resolve_to_earliest_month(self):
        calendar = [("2023-12-31", 7), ("2024-01-01", 3), ("2024-01-02", 4)]
        self.assertEqual(highest_committed_month(calendar).label, "Dec 2023")

    def test_same_month_in_different_years(self):
        calendar = [("2023-05-01", 2), ("2024-05-01", 3)]
        self.assertEqual(highest_committed_month(calendar).label, "May 2024")


class ParseCalendarTests(SimpleTestCase):
    """Tests for calendar validation."""

    def test_accepts_pairs_mappings_and_days(self):
        days = parse_calendar([
            ("2024-01-01", 1),
            {"date": "2024-01-02", "count": 2},
            {"date": "2024-01-03", "contributionCount": 3},
            ActivityDay(date(2024, 1, 4), 4),
        ])
        self.assertEqual(days, make_days(date(2024, 1, 1), [1, 2, 3, 4]))

    def test_rejects_malformed_entries(self):
        malformed = [
            [("2024-01-01", "5")],
            [("2024-01-01", -1)],
            [("2024-01-01", 1.5)],
            [("2024-01-01", True)],
            [("2024-13-01", 1)],
            [("2024-1-5", 1)],
            [("2024-01-05T00:00:00", 1)],
            [(" 2024-01-05", 1)],
            [("not-a-date", 1)],
            [(20240101, 1)],
            [("2024-01-01", 1, 2)],
            [{"count": 1}],
            [{"date": "2024-01-01"}],
            [None],
        ]
        for calendar in malformed:
            with self.subTest(calendar=calendar):
                with self.assertRaises(InvalidInput):
                    parse_calendar(calendar)

    def test_rejects_non_sequences(self):
        for calendar in (None, 42, "2024-01-01", {"date": "2024-01-01", "count": 1}):
            with self.subTest(calendar=calendar):
                with self.assertRaises(InvalidInput):
                    parse_calendar(calendar)

    def test_operations_raise_invalid_input(self):
        with self.assertRaises(InvalidInput):
            current_streak([("2024-01-01", "x")], "2024-01-01")
        with self.assertRaises(InvalidInput):
            highest_committed_month([("garbage", 1)])

    def test_invalid_input_is_a_value_error(self):
        self.assertTrue(issubclass(InvalidInput, ValueError))


class BuildSnapshotTests(SimpleTestCase):
    """Tests for build_snapshot."""

    def test_empty_calendar(self):
        stats = build_snapshot([], 0, today=date(2024, 6, 1))
        self.assertEqual(stats.current_streak, 0)
        self.assertEqual(stats.max_streak_in_year, 0)
        self.assertEqual(stats.average_weekly_in_year, 0)
        self.assertEqual(stats.consistency_90, 0)
        self.assertIs(stats.most_productive_day, NO_BEST_DAY)
        self.assertIs(stats.highest_committed_month, NO_BEST_MONTH)
        self.assertEqual(stats.year, 2024)

    def test_full_snapshot(self):
        days = make_days(date(2024, 1, 1), [5] * 10)
        stats = build_snapshot(days, 321, today="2024-01-10")
        self.assertEqual(stats.current_streak, 10)
        self.assertEqual(stats.max_streak_in_year, 10)
        self.assertEqual(stats.most_productive_day, BestDay(date(2024, 1, 1), 5))
        self.assertEqual(stats.average_weekly_in_year, 25.0)
        self.assertEqual(stats.consistency_90, 100)
        self.assertEqual(stats.highest_committed_month.label, "Jan 2024")
        self.assertEqual(stats.total_contributions, 321)

    def test_explicit_year(self):
        days = make_days(date(2023, 12, 29), [1, 1, 1, 0, 1])
        stats = build_snapshot(days, 4, today=date(2024, 1, 2), year=2023)
        self.assertEqual(stats.year, 2023)
        self.assertEqual(stats.max_streak_in_year, 3)

    @patch('streakcard.services.stats_engine.timezone.localdate')
    def test_today_defaults_to_local_date(self, mock_localdate):
        mock_localdate.return_value = date(2024, 6, 10)
        stats = build_snapshot([("2024-06-09", 2), ("2024-06-10", 0)], 2)
        self.assertEqual(stats.current_streak, 1)
        self.assertEqual(stats.year, 2024)

    def test_rejects_invalid_total(self):
        with self.assertRaises(InvalidInput):
            build_snapshot([], "12", today=date(2024, 1, 1))

    def test_snapshot_is_immutable(self):
        stats = build_snapshot([], 0, today=date(2024, 1, 1))
        with self.assertRaises(FrozenInstanceError):
            stats.current_streak = 3


def graphql_payload(weeks, total=0):
    return {
        'data': {
            'user': {
                'contributionsCollection': {
                    'contributionCalendar': {
                        'totalContributions': total,
                        'weeks': [
                            {'contributionDays': [{'date': d, 'contributionCount': c} for d, c in week]}
                            for week in weeks
                        ],
                    }
                }
            }
        }
    }


def mock_response(payload=None, status_code=200, headers=None):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    else:
        response.raise_for_status = MagicMock()
    return response


class GitHubClientTests(TestCase):
    """Tests for GitHub client."""

    def setUp(self):
        cache.clear()

    @patch('streakcard.services.github_client.requests.post')
    def test_get_contribution_calendar_success(self, mock_post):
        """Test successful calendar retrieval."""
        mock_post.return_value = mock_response(graphql_payload(
            [[("2024-01-01", 1), ("2024-01-02", 0)], [("2024-01-03", 4)]],
            total=5,
        ))

        client = GitHubClient(token='secret')
        calendar = client.get_contribution_calendar('testuser')

        self.assertEqual(calendar.username, 'testuser')
        self.assertEqual(calendar.total_contributions, 5)
        self.assertEqual(calendar.days, make_days(date(2024, 1, 1), [1, 0, 4]))

        _, kwargs = mock_post.call_args
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer secret')
        self.assertEqual(kwargs['json']['variables'], {'userName': 'testuser'})

    @patch('streakcard.services.github_client.requests.post')
    def test_calendar_is_cached(self, mock_post):
        """Test that a second lookup is served from the cache."""
        mock_post.return_value = mock_response(graphql_payload([[("2024-01-01", 2)]], total=2))

        client = GitHubClient(token='secret')
        first = client.get_contribution_calendar('TestUser')
        second = client.get_contribution_calendar('testuser')

        self.assertEqual(mock_post.call_count, 1)
        self.assertEqual(first.days, second.days)
        self.assertEqual(second.total_contributions, 2)

    @override_settings(GITHUB_TOKEN='from-settings')
    def test_token_from_settings(self):
        client = GitHubClient()
        self.assertEqual(client.headers['Authorization'], 'Bearer from-settings')

    @patch('streakcard.services.github_client.requests.post')
    def test_user_not_found(self, mock_post):
        """Test handling of user not found."""
        mock_post.return_value = mock_response({
            'data': {'user': None},
            'errors': [{'type': 'NOT_FOUND', 'message': "Could not resolve to a User"}],
        })

        client = GitHubClient(token='secret')
        with self.assertRaises(UserNotFound):
            client.get_contribution_calendar('nonexistent')

    @patch('streakcard.services.github_client.requests.post')
    def test_null_user_without_errors(self, mock_post):
        mock_post.return_value = mock_response({'data': {'user': None}})

        with self.assertRaises(UserNotFound):
            GitHubClient(token='secret').get_contribution_calendar('ghost')

    @patch('streakcard.services.github_client.requests.post')
    def test_other_graphql_errors(self, mock_post):
        mock_post.return_value = mock_response({
            'data': None,
            'errors': [{'type': 'INTERNAL', 'message': 'Something went wrong'}],
        })

        with self.assertRaises(UpstreamFailure) as ctx:
            GitHubClient(token='secret').get_contribution_calendar('testuser')
        self.assertIn('Something went wrong', str(ctx.exception))

    @patch('streakcard.services.github_client.requests.post')
    def test_http_error(self, mock_post):
        mock_post.return_value = mock_response(status_code=502)

        with self.assertRaises(UpstreamFailure) as ctx:
            GitHubClient(token='secret').get_contribution_calendar('testuser')
        self.assertEqual(ctx.exception.status_code, 502)

    @patch('streakcard.services.github_client.requests.post')
    def test_rate_limited(self, mock_post):
        mock_post.return_value = mock_response(status_code=403, headers={
            'X-RateLimit-Remaining': '0',
            'X-RateLimit-Reset': '1700000000',
        })

        with self.assertRaises(UpstreamFailure) as ctx:
            GitHubClient(token='secret').get_contribution_calendar('testuser')
        self.assertIn('rate limit', str(ctx.exception))
        self.assertIn('Resets at', str(ctx.exception))

    @patch('streakcard.services.github_client.requests.post')
    def test_timeout(self, mock_post):
        mock_post.side_effect = requests.exceptions.Timeout()

        with self.assertRaises(UpstreamFailure):
            GitHubClient(token='secret').get_contribution_calendar('testuser')

    @patch('streakcard.services.github_client.requests.post')
    def test_network_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError('connection refused')

        with self.assertRaises(UpstreamFailure):
            GitHubClient(token='secret').get_contribution_calendar('testuser')

    @patch('streakcard.services.github_client.requests.post')
    def test_non_json_body(self, mock_post):
        response = mock_response()
        response.json.side_effect = ValueError('Expecting value')
        mock_post.return_value = response

        with self.assertRaises(UpstreamFailure):
            GitHubClient(token='secret').get_contribution_calendar('testuser')

    @patch('streakcard.services.github_client.requests.post')
    def test_malformed_day(self, mock_post):
        mock_post.return_value = mock_response(graphql_payload([[("2024-01-01", "lots")]]))

        with self.assertRaises(InvalidInput):
            GitHubClient(token='secret').get_contribution_calendar('testuser')
        self.assertIsNone(cache.get(calendar_cache_key('testuser')))

    @patch('streakcard.services.github_client.requests.post')
    def test_missing_calendar(self, mock_post):
        mock_post.return_value = mock_response({'data': {'user': {'contributionsCollection': {}}}})

        with self.assertRaises(InvalidInput):
            GitHubClient(token='secret').get_contribution_calendar('testuser')

    @patch('streakcard.services.github_client.requests.post')
    def test_errors_field_not_a_list(self, mock_post):
        """Test that a malformed errors field is reported as an upstream failure."""
        mock_post.return_value = mock_response({'errors': {'message': 'boom'}})

        with self.assertRaises(UpstreamFailure):
            GitHubClient(token='secret').get_contribution_calendar('testuser')

    @patch('streakcard.services.github_client.requests.post')
    def test_data_field_not_a_dict(self, mock_post):
        mock_post.return_value = mock_response({'data': ['unexpected']})

        with self.assertRaises(UpstreamFailure):
            GitHubClient(token='secret').get_contribution_calendar('testuser')

    @patch('streakcard.services.github_client.requests.post')
    def test_malformed_week(self, mock_post):
        """Test that a week which is not an object is rejected as invalid data."""
        payload = graphql_payload([[("2024-01-01", 1)]], total=1)
        payload['data']['user']['contributionsCollection']['contributionCalendar']['weeks'].append('oops')
        mock_post.return_value = mock_response(payload)

        with self.assertRaises(InvalidInput):
            GitHubClient(token='secret').get_contribution_calendar('testuser')

    @patch('streakcard.services.github_client.requests.post')
    def test_malformed_contribution_days(self, mock_post):
        payload = graphql_payload([], total=0)
        payload['data']['user']['contributionsCollection']['contributionCalendar']['weeks'] = [
            {'contributionDays': 'oops'},
        ]
        mock_post.return_value = mock_response(payload)

        with self.assertRaises(InvalidInput):
            GitHubClient(token='secret').get_contribution_calendar('testuser')

    @patch('streakcard.services.github_client.requests.post')
    def test_rate_limited_with_unreadable_reset(self, mock_post):
        """Test that a garbled reset header still yields an upstream failure."""
        mock_post.return_value = mock_response(status_code=403, headers={
            'X-RateLimit-Remaining': '0',
            'X-RateLimit-Reset': 'soon',
        })

        with self.assertRaises(UpstreamFailure) as ctx:
            GitHubClient(token='secret').get_contribution_calendar('testuser')
        self.assertIn('rate limit', str(ctx.exception))
        self.assertNotIn('Resets at', str(ctx.exception))
        self.assertEqual(ctx.exception.status_code, 403)

    @patch('streakcard.services.github_client.requests.post')
    def test_cache_key_accepts_any_username(self, mock_post):
        """Test that usernames with spaces or great length still cache cleanly."""
        mock_post.return_value = mock_response(graphql_payload([[("2024-01-01", 2)]], total=2))
        username = 'some user ' + 'x' * 300

        key = calendar_cache_key(username)
        self.assertLessEqual(len(key), 250)
        self.assertNotIn(' ', key)
        self.assertEqual(key, calendar_cache_key(username.upper()))

        client = GitHubClient(token='secret')
        client.get_contribution_calendar(username)
        client.get_contribution_calendar(username)
        self.assertEqual(mock_post.call_count, 1)


class ThemeTests(SimpleTestCase):
    """Tests for theme and layout registries."""

    def test_get_theme_default(self):
        """Test getting default theme."""
        theme = get_theme('neon_dark')
        self.assertEqual(theme.id, 'neon_dark')
        self.assertEqual(theme.name, 'Neon Dark')

    def test_get_theme_invalid(self):
        """Test getting invalid theme returns default."""
        self.assertEqual(get_theme('invalid_theme').id, DEFAULT_THEME)
        self.assertEqual(get_theme(None).id, DEFAULT_THEME)

    def test_get_all_themes(self):
        """Test getting all themes."""
        themes = get_all_themes()
        self.assertGreater(len(themes), 0)
        self.assertTrue(all(isinstance(t, type(get_theme('neon_dark'))) for t in themes))

    def test_color_scheme_hint(self):
        self.assertTrue(get_theme_for_color_scheme('dark').is_dark)
        self.assertTrue(get_theme_for_color_scheme('"dark"').is_dark)
        self.assertFalse(get_theme_for_color_scheme('light').is_dark)
        self.assertFalse(get_theme_for_color_scheme(None).is_dark)

    def test_get_layout(self):
        self.assertEqual(get_layout('streak').id, 'streak')
        self.assertEqual(get_layout('bogus').id, DEFAULT_LAYOUT)

    def test_layouts_only_reference_known_metrics(self):
        for layout in LAYOUTS.values():
            for key in layout.cards + layout.footer:
                self.assertIn(key, METRICS)


class BadgeRenderingTests(SimpleTestCase):
    """Tests for SVG rendering."""

    def setUp(self):
        self.stats = build_snapshot(
            make_days(date(2024, 3, 1), [2, 0, 7, 3]),
            1234,
            today=date(2024, 3, 4),
        )

    def test_render_cards_layout(self):
        svg = render_badge(self.stats, 'testuser', get_theme('midnight'), get_layout('cards'))
        self.assertTrue(svg.startswith('<svg'))
        self.assertIn('testuser', svg)
        self.assertIn('Current Streak', svg)
        self.assertIn('on 2024-03-03', svg)
        self.assertIn('1.2k', svg)
        self.assertIn('Mar 2024 (12)', svg)

    def test_layout_selects_fields(self):
        svg = render_badge(self.stats, 'testuser', get_theme('classic'), get_layout('streak'))
        self.assertIn('Current Streak', svg)
        self.assertNotIn('Most Productive', svg)
        self.assertNotIn('Consistency', svg)

        svg = render_badge(self.stats, 'testuser', get_theme('classic'), get_layout('consistency'))
        self.assertIn('Consistency', svg)
        self.assertIn('75%', svg)

    def test_empty_stats_render_placeholders(self):
        stats = build_snapshot([], 0, today=date(2024, 1, 1))
        svg = render_badge(stats, 'newbie', get_theme('light_clean'), get_layout('cards'))
        self.assertIn('on N/A', svg)
        self.assertIn('N/A', svg)

    def test_username_is_escaped(self):
        svg = render_badge(self.stats, '<b>&', get_theme('midnight'), get_layout('cards'))
        self.assertIn('&lt;b&gt;&amp;', svg)
        self.assertNotIn('<b>', svg)

    def test_render_error_badge(self):
        svg = render_error_badge('User <not> found', get_theme('midnight'))
        self.assertIn('User &lt;not&gt; found', svg)


class ViewTests(TestCase):
    """Tests for views."""

    def setUp(self):
        self.client = Client()
        self.calendar = ContributionCalendar(
            username='testuser',
            total_contributions=500,
            days=make_days(date(2024, 1, 1), [1, 2, 3]),
        )

    def mock_github(self, mock_client_class, result=None, error=None):
        mock_client = MagicMock()
        if error is not None:
            mock_client.get_contribution_calendar.side_effect = error
        else:
            mock_client.get_contribution_calendar.return_value = result or self.calendar
        mock_client_class.return_value = mock_client
        return mock_client

    @patch('streakcard.views.GitHubClient')
    def test_streak_badge_success(self, mock_client_class):
        """Test badge SVG generation."""
        mock_client = self.mock_github(mock_client_class)

        response = self.client.get('/api/streak', {'user': 'testuser'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'image/svg+xml')
        self.assertIn('testuser', response.content.decode())
        self.assertIn('public', response['Cache-Control'])
        self.assertIn('max-age=3600', response['Cache-Control'])
        self.assertIn('stale-while-revalidate', response['Cache-Control'])
        mock_client.get_contribution_calendar.assert_called_once_with('testuser')

    @override_settings(BADGE_CACHE_SECONDS=60)
    @patch('streakcard.views.GitHubClient')
    def test_cache_lifetime_from_settings(self, mock_client_class):
        self.mock_github(mock_client_class)
        response = self.client.get('/api/streak', {'user': 'testuser'})
        self.assertIn('max-age=60', response['Cache-Control'])

    def test_missing_user(self):
        response = self.client.get('/api/streak')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.content.decode(), 'Missing "user" query parameter')

    def test_blank_user(self):
        response = self.client.get('/api/streak', {'user': '   '})
        self.assertEqual(response.status_code, 400)

    def test_post_not_allowed(self):
        response = self.client.post('/api/streak', {'user': 'testuser'})
        self.assertEqual(response.status_code, 405)

    @patch('streakcard.views.GitHubClient')
    def test_user_not_found(self, mock_client_class):
        """Test badge view with user not found."""
        self.mock_github(mock_client_class, error=UserNotFound('ghost'))

        response = self.client.get('/api/streak', {'user': 'ghost'})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response['Content-Type'], 'image/svg+xml')
        self.assertIn('User not found', response.content.decode())

    @patch('streakcard.views.GitHubClient')
    def test_upstream_failure(self, mock_client_class):
        self.mock_github(mock_client_class, error=UpstreamFailure('GitHub API error: 502', status_code=502))

        response = self.client.get('/api/streak', {'user': 'testuser'})

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response['Content-Type'], 'image/svg+xml')
        self.assertEqual(response['Cache-Control'], 'no-cache')

    @patch('streakcard.views.GitHubClient')
    def test_invalid_calendar(self, mock_client_class):
        self.mock_github(mock_client_class, error=InvalidInput('bad count'))

        response = self.client.get('/api/streak', {'user': 'testuser'})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response['Content-Type'], 'image/svg+xml')

    @patch('streakcard.views.GitHubClient')
    def test_unexpected_error(self, mock_client_class):
        self.mock_github(mock_client_class, error=RuntimeError('boom'))

        with self.assertLogs('streakcard.views', level='ERROR'):
            response = self.client.get('/api/streak', {'user': 'testuser'})

        self.assertEqual(response.status_code, 500)
        self.assertIn('Internal Server Error', response.content.decode())

    @patch('streakcard.views.GitHubClient')
    def test_path_style_badge(self, mock_client_class):
        self.mock_github(mock_client_class)

        response = self.client.get('/badge/testuser.svg')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'image/svg+xml')

    @patch('streakcard.views.GitHubClient')
    def test_theme_and_layout_parameters(self, mock_client_class):
        self.mock_github(mock_client_class)

        response = self.client.get('/api/streak', {'user': 'testuser', 'theme': 'classic', 'layout': 'streak'})
        content = response.content.decode()

        self.assertIn('#2f80ed', content)
        self.assertNotIn('Most Productive', content)

    @patch('streakcard.views.GitHubClient')
    def test_color_scheme_header_picks_default_theme(self, mock_client_class):
        self.mock_github(mock_client_class)

        response = self.client.get(
            '/api/streak', {'user': 'testuser'}, HTTP_SEC_CH_PREFERS_COLOR_SCHEME='light',
        )
        self.assertIn(get_theme('light_clean').bg_start, response.content.decode())

        response = self.client.get('/api/streak', {'user': 'testuser'})
        self.assertIn(get_theme(DEFAULT_THEME).bg_start, response.content.decode())

    @patch('streakcard.views.GitHubClient')
    def test_username_is_escaped(self, mock_client_class):
        self.mock_github(mock_client_class)

        response = self.client.get('/api/streak', {'user': '<script>'})
        content = response.content.decode()

        self.assertIn('&lt;script&gt;', content)
        self.assertNotIn('<script>', content)
