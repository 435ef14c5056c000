import httpx
import pytest

from seqhub.core.security import Credential
from seqhub.github_api import RawContributions
from seqhub.services.sequence_service import DecodeError
from seqhub.services.sequence_service import FetchError
from seqhub.services.sequence_service import HttpError
from seqhub.services.sequence_service import TransportError
from seqhub.services.sequence_service import WINDOW_DAYS
from seqhub.services.sequence_service import fetch_module_state
from seqhub.services.sequence_service import normalize_window
from seqhub.settings import Settings


def test_normalize_single_week_scales_by_maximum() -> None:
    values = normalize_window([[0, 1, 2, 3, 4, 5, 6]])

    assert len(values) == WINDOW_DAYS
    assert values[:353] == (0.0,) * 353
    assert [round(value, 2) for value in values[353:]] == [
        0.0,
        1.67,
        3.33,
        5.0,
        6.67,
        8.33,
        10.0,
    ]


def test_normalize_all_zero_counts_returns_zeros() -> None:
    values = normalize_window([[0] * 7 for _ in range(60)])

    assert values == (0.0,) * WINDOW_DAYS


def test_normalize_empty_calendar_returns_zeros() -> None:
    assert normalize_window([]) == (0.0,) * WINDOW_DAYS


def test_normalize_keeps_only_most_recent_days_in_order() -> None:
    # 53 weeks of 7 days numbered 1..371 oldest to newest.
    counts = list(range(1, 372))
    weeks = [counts[index : index + 7] for index in range(0, len(counts), 7)]

    values = normalize_window(weeks)

    assert len(values) == WINDOW_DAYS
    expected = [count / 371 * 10.0 for count in range(12, 372)]
    assert values == pytest.approx(expected)
    assert list(values) == sorted(values)


def test_normalize_handles_partial_weeks() -> None:
    values = normalize_window([[4], [0, 2, 8]])

    assert values[-4:] == (5.0, 0.0, 2.5, 10.0)
    assert all(0.0 <= value <= 10.0 for value in values)


def test_fetch_module_state_normalizes_response(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def fake_fetch_contributions(**kwargs) -> RawContributions:
        assert kwargs["username"] == "octocat"
        assert kwargs["token"] == "ghp_abc"
        return RawContributions(start_date="2025-10-19T00:00:00Z", weeks=[[1, 2]])

    monkeypatch.setattr(
        "seqhub.services.sequence_service.fetch_contributions",
        fake_fetch_contributions,
    )

    state = fetch_module_state(Credential("octocat", "ghp_abc"), Settings())

    assert state.start_date == "2025-10-19T00:00:00Z"
    assert state.contributions[-2:] == (5.0, 10.0)
    assert len(state.contributions) == WINDOW_DAYS


def _raise(exc: Exception):
    def fake_fetch_contributions(**kwargs) -> RawContributions:
        raise exc

    return fake_fetch_contributions


def test_fetch_module_state_maps_http_status_errors(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    request = httpx.Request("POST", "https://api.github.com/graphql")
    response = httpx.Response(401, request=request)
    monkeypatch.setattr(
        "seqhub.services.sequence_service.fetch_contributions",
        _raise(httpx.HTTPStatusError("unauthorized", request=request, response=response)),
    )

    with pytest.raises(HttpError) as exc_info:
        fetch_module_state(Credential("", "bad"), Settings())

    assert exc_info.value.status_code == 401
    assert exc_info.value.kind == "http"


def test_fetch_module_state_maps_transport_errors(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(
        "seqhub.services.sequence_service.fetch_contributions",
        _raise(httpx.ConnectTimeout("timed out")),
    )

    with pytest.raises(TransportError):
        fetch_module_state(Credential("", "ghp_abc"), Settings())


def test_fetch_module_state_maps_decode_errors(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(
        "seqhub.services.sequence_service.fetch_contributions",
        _raise(ValueError("GitHub GraphQL data is missing")),
    )

    with pytest.raises(DecodeError, match="data is missing"):
        fetch_module_state(Credential("", "ghp_abc"), Settings())


def test_fetch_module_state_wraps_unexpected_errors(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(
        "seqhub.services.sequence_service.fetch_contributions",
        _raise(RuntimeError("boom")),
    )

    with pytest.raises(FetchError):
        fetch_module_state(Credential("", "ghp_abc"), Settings())
