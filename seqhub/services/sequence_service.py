import httpx

from seqhub.core.security import Credential
from seqhub.github_api import fetch_contributions
from seqhub.settings import Settings
from seqhub.state import ModuleState


WINDOW_DAYS = 360
MAX_INTENSITY = 10.0


class FetchError(Exception):
    """Raised when a contribution fetch fails for any reason."""

    kind = "unknown"


class TransportError(FetchError):
    """Raised when GitHub cannot be reached (DNS, connect, TLS, timeout)."""

    kind = "transport"


class HttpError(FetchError):
    """Raised when GitHub answers with a status other than 200."""

    kind = "http"

    def __init__(self, status_code: int) -> None:
        super().__init__(f"GitHub responded with HTTP {status_code}")
        self.status_code = status_code


class DecodeError(FetchError):
    """Raised when the GitHub response is not the expected JSON shape."""

    kind = "decode"


def normalize_window(weeks: list[list[int]]) -> tuple[float, ...]:
    """Turn a weekly calendar into the most recent days scaled to 0..10.

    Days are collected newest first until the window is full, then the
    window is zero padded, reversed to read oldest to newest and scaled by
    its maximum. A window without any contributions is all zeros.
    """

    collected: list[int] = []
    max_count = 0
    for week in reversed(weeks):
        for count in reversed(week):
            if len(collected) == WINDOW_DAYS:
                break
            collected.append(count)
            max_count = max(max_count, count)
        if len(collected) == WINDOW_DAYS:
            break

    collected.extend([0] * (WINDOW_DAYS - len(collected)))
    collected.reverse()

    if max_count == 0:
        return (0.0,) * WINDOW_DAYS
    return tuple(count / max_count * MAX_INTENSITY for count in collected)


def fetch_module_state(credential: Credential, settings: Settings) -> ModuleState:
    """Fetch contributions for `credential` and build the resulting module state."""

    try:
        raw = fetch_contributions(
            username=credential.username,
            token=credential.token,
            graphql_url=settings.github_graphql_url,
            timeout=settings.request_timeout_seconds,
            user_agent=settings.user_agent,
        )
    except httpx.HTTPStatusError as exc:
        raise HttpError(exc.response.status_code) from exc
    except httpx.RequestError as exc:
        raise TransportError(str(exc) or type(exc).__name__) from exc
    except ValueError as exc:
        raise DecodeError(str(exc)) from exc
    except Exception as exc:
        raise FetchError(str(exc) or type(exc).__name__) from exc

    return ModuleState(
        start_date=raw.start_date,
        contributions=normalize_window(raw.weeks),
    )
