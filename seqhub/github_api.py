from collections.abc import Mapping
from typing import Any
from typing import NamedTuple

import httpx


CONTRIBUTIONS_SELECTION = """
    contributionsCollection {
      startedAt
      contributionCalendar {
        weeks {
          contributionDays {
            contributionCount
          }
        }
      }
    }
"""


class RawContributions(NamedTuple):
    """Contribution calendar as returned by GitHub, weeks in chronological order."""

    start_date: str
    weeks: list[list[int]]


def build_contributions_query(username: str) -> tuple[str, dict[str, str] | None]:
    """Return the GraphQL query and its variables for viewer or named user scope."""

    if not username:
        return f"query {{ viewer {{ {CONTRIBUTIONS_SELECTION} }} }}", None

    query = (
        "query($username: String!) { "
        f"user(login: $username) {{ {CONTRIBUTIONS_SELECTION} }} }}"
    )
    return query, {"username": username}


def fetch_contributions(
    username: str,
    token: str,
    graphql_url: str,
    timeout: float = 20.0,
    user_agent: str = "seqhub",
) -> RawContributions:
    """Fetch the contribution calendar for a user, or for the token owner."""

    if not token:
        raise ValueError("GitHub token is required for GraphQL requests")

    query, variables = build_contributions_query(username)
    body: dict[str, Any] = {"query": query}
    if variables is not None:
        body["variables"] = variables

    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "User-Agent": user_agent,
    }

    response = httpx.post(graphql_url, json=body, headers=headers, timeout=timeout)
    if response.status_code != 200:
        raise httpx.HTTPStatusError(
            f"GitHub GraphQL returned HTTP {response.status_code}",
            request=response.request,
            response=response,
        )

    payload: Any = response.json()
    if not isinstance(payload, Mapping):
        raise ValueError("GitHub GraphQL response is invalid")

    if payload.get("errors"):
        raise ValueError("GitHub GraphQL returned errors")

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise ValueError("GitHub GraphQL data is missing")

    scope = "user" if username else "viewer"
    owner = data.get(scope)
    if not isinstance(owner, Mapping):
        raise ValueError(f"GitHub {scope} not found")

    collection = owner.get("contributionsCollection")
    if not isinstance(collection, Mapping):
        raise ValueError("GitHub contributionsCollection is missing")

    start_date = collection.get("startedAt")
    if not isinstance(start_date, str):
        raise ValueError("GitHub startedAt is missing")

    calendar = collection.get("contributionCalendar")
    if not isinstance(calendar, Mapping):
        raise ValueError("GitHub contributionCalendar is missing")

    raw_weeks = calendar.get("weeks")
    if not isinstance(raw_weeks, list):
        raise ValueError("GitHub contribution weeks are missing")

    weeks: list[list[int]] = []
    for week in raw_weeks:
        if not isinstance(week, Mapping):
            raise ValueError("GitHub contribution week is invalid")
        contribution_days = week.get("contributionDays")
        if not isinstance(contribution_days, list):
            raise ValueError("GitHub contributionDays are missing")

        counts: list[int] = []
        for item in contribution_days:
            raw_count = item.get("contributionCount") if isinstance(item, Mapping) else None
            if (
                not isinstance(raw_count, int)
                or isinstance(raw_count, bool)
                or raw_count < 0
            ):
                raise ValueError("GitHub contributionCount is invalid")
            counts.append(raw_count)
        weeks.append(counts)

    return RawContributions(start_date=start_date, weeks=weeks)
