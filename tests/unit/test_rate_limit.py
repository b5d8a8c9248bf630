"""Unit tests for rate-limit key functions."""

from __future__ import annotations

from starlette.requests import Request

from sponsor_api.core.rate_limit import rate_limit_ip_key, rate_limit_user_or_ip_key


def _request(authorization: str | None = None) -> Request:
    headers = [(b"authorization", authorization.encode())] if authorization else []
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/",
            "headers": headers,
            "client": ("203.0.113.9", 5000),
        }
    )


def test_ip_key() -> None:
    assert rate_limit_ip_key(_request()) == "ip:203.0.113.9"


def test_user_key_from_valid_token(issue_token) -> None:
    token = issue_token({"sub": "42"})

    assert rate_limit_user_or_ip_key(_request(f"Bearer {token}")) == "user:42"


def test_invalid_token_falls_back_to_ip() -> None:
    assert rate_limit_user_or_ip_key(_request("Bearer garbage")) == "ip:203.0.113.9"


def test_other_scheme_falls_back_to_ip(issue_token) -> None:
    token = issue_token({"sub": "42"})

    assert rate_limit_user_or_ip_key(_request(f"Basic {token}")) == "ip:203.0.113.9"


def test_token_without_subject_falls_back_to_ip(issue_token) -> None:
    token = issue_token({"scope": "read"})

    assert rate_limit_user_or_ip_key(_request(f"Bearer {token}")) == "ip:203.0.113.9"
