"""
GitHub API client for fetching contribution calendars.
"""
import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

import requests
from django.conf import settings
from django.core.cache import cache

from ..exceptions import InvalidInput, UpstreamFailure, UserNotFound
from .stats_engine import ActivityDay, parse_calendar

logger = logging.getLogger(__name__)

CALENDAR_QUERY = """
query($userName: String!) {
  user(login: $userName) {
    contributionsCollection {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            date
          }
        }
      }
    }
  }
}
"""


@dataclass
class ContributionCalendar:
    """Data transfer object for a user's contribution calendar."""
    username: str
    total_contributions: int
    days: List[ActivityDay] = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps({
            'username': self.username,
            'total_contributions': self.total_contributions,
            'days': [{'date': day.date.isoformat(), 'count': day.count} for day in self.days],
        })

    @classmethod
    def from_json(cls, raw: str) -> 'ContributionCalendar':
        data = json.loads(raw)
        return cls(
            username=data['username'],
            total_contributions=data['total_contributions'],
            days=parse_calendar(data['days']),
        )


def calendar_cache_key(username: str) -> str:
    """Cache key for a login; hashed so any path segment is a valid key."""
    digest = hashlib.sha256(username.lower().encode('utf-8')).hexdigest()
    return f"streak_calendar_{digest}"


class GitHubClient:
    """Client for the GitHub GraphQL API."""

    GRAPHQL_URL = "https://api.github.com/graphql"

    def __init__(self, token: Optional[str] = None, timeout: Optional[float] = None):
        self.token = token or getattr(settings, 'GITHUB_TOKEN', None)
        self.timeout = timeout or getattr(settings, 'GITHUB_TIMEOUT', 10)
        self.headers = {
            'Accept': 'application/json',
            'User-Agent': 'streakcard/1.0',
        }
        if self.token:
            self.headers['Authorization'] = f'Bearer {self.token}'
        else:
            logger.warning("GITHUB_TOKEN is not set; GitHub GraphQL requests will be rejected")

    def _post(self, query: str, variables: Dict) -> Dict:
        """Run a GraphQL query and return the decoded response body."""
        response = requests.post(
            self.GRAPHQL_URL,
            json={'query': query, 'variables': variables},
            headers=self.headers,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def get_contribution_calendar(self, username: str) -> ContributionCalendar:
        """
        Fetch the contribution calendar for a user.
        Uses caching to avoid excessive API calls.
        """
        cache_key = calendar_cache_key(username)
        cached = cache.get(cache_key)
        if cached:
            logger.debug("Calendar cache hit for %s", username)
            return ContributionCalendar.from_json(cached)

        try:
            payload = self._post(CALENDAR_QUERY, {'userName': username})
        except requests.exceptions.HTTPError as e:
            raise self._http_failure(e)
        except requests.exceptions.Timeout:
            logger.warning("GitHub request for %s timed out after %ss", username, self.timeout)
            raise UpstreamFailure("GitHub API timed out")
        except ValueError:
            raise UpstreamFailure("GitHub API returned a non-JSON response")
        except requests.exceptions.RequestException as e:
            logger.warning("Network error fetching %s: %s", username, e)
            raise UpstreamFailure(f"Network error: {e}")

        calendar = self._parse_payload(username, payload)

        cache_timeout = getattr(settings, 'GITHUB_CACHE_TIMEOUT', 1800)
        cache.set(cache_key, calendar.to_json(), cache_timeout)

        return calendar

    def _http_failure(self, error: requests.exceptions.HTTPError) -> UpstreamFailure:
        response = error.response
        status_code = getattr(response, 'status_code', None)
        if status_code is None:
            return UpstreamFailure(f"GitHub API error: {error}")

        message = f"GitHub API error: {status_code}"
        if status_code in (401, 403):
            headers = getattr(response, 'headers', None) or {}
            if headers.get('X-RateLimit-Remaining') == '0':
                message = "GitHub API rate limit exceeded."
                reset = headers.get('X-RateLimit-Reset')
                if reset:
                    try:
                        reset_time = datetime.fromtimestamp(int(reset), tz=timezone.utc)
                    except (ValueError, OverflowError, OSError):
                        logger.debug("Ignoring unreadable X-RateLimit-Reset header: %r", reset)
                    else:
                        message += f" Resets at {reset_time.strftime('%H:%M:%S UTC')}"
            elif not self.token:
                message += " (no GITHUB_TOKEN configured)"

        logger.warning(message)
        return UpstreamFailure(message, status_code=status_code)

    def _parse_payload(self, username: str, payload: Dict) -> ContributionCalendar:
        """Turn a GraphQL response body into a ContributionCalendar."""
        if not isinstance(payload, dict):
            raise UpstreamFailure("GitHub API returned an unexpected response")

        errors = payload.get('errors') or []
        if not isinstance(errors, list):
            raise UpstreamFailure(f"GitHub API returned malformed errors: {errors!r}")
        if any(error.get('type') == 'NOT_FOUND' for error in errors if isinstance(error, dict)):
            raise UserNotFound(username)
        if errors:
            messages = '; '.join(str(error.get('message', error)) for error in errors[:3] if isinstance(error, dict))
            logger.warning("GraphQL errors for %s: %s", username, messages)
            raise UpstreamFailure(f"GitHub GraphQL errors: {messages or errors[:3]}")

        data = payload.get('data') or {}
        if not isinstance(data, dict):
            raise UpstreamFailure("GitHub API returned an unexpected data field")
        user = data.get('user')
        if user is None:
            raise UserNotFound(username)

        try:
            calendar = user['contributionsCollection']['contributionCalendar']
            weeks = calendar['weeks']
            total = calendar['totalContributions']
        except (KeyError, TypeError):
            raise InvalidInput("GitHub response is missing the contribution calendar")
        if not isinstance(weeks, list):
            raise InvalidInput("GitHub response has a malformed weeks list")

        entries = []
        for week in weeks:
            if not isinstance(week, dict):
                raise InvalidInput(f"GitHub response has a malformed week: {week!r}")
            week_days = week.get('contributionDays') or []
            if not isinstance(week_days, list):
                raise InvalidInput(f"GitHub response has malformed contribution days: {week_days!r}")
            entries.extend(week_days)
        days = parse_calendar(entries)
        if isinstance(total, bool) or not isinstance(total, int):
            raise InvalidInput(f"Total contributions must be an integer, got {total!r}")

        return ContributionCalendar(username=username, total_contributions=total, days=days)
