"""Integration tests for the creator-facing newsletter and issue endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from fastapi import status
from httpx import AsyncClient

from sponsor_api.api.schemas import DeletedResponse, IssueResponse, NewsletterResponse
from sponsor_api.db.models import Sponsorship


def _payload(now: datetime, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "name": "Weekly Digest",
        "slug": "weekly-digest",
        "interval_days": 7,
        "sponsor_in_days": 30,
        "sponsor_before_days": 2,
        "next_issue_at": (now + timedelta(days=10)).isoformat(),
    }
    payload.update(overrides)
    return payload


class TestAuthentication:
    """Test that creator endpoints require a valid bearer token."""

    @pytest.mark.asyncio
    async def test_missing_token(self, async_http_client: AsyncClient) -> None:
        response = await async_http_client.get("/api/newsletters")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_token_for_unknown_user(
        self, async_http_client: AsyncClient, issue_token
    ) -> None:
        token = issue_token({"sub": "424242"})

        response = await async_http_client.get(
            "/api/newsletters", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {
            "error": "unauthorized",
            "message": "Could not validate credentials",
        }
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_garbage_token(self, async_http_client: AsyncClient) -> None:
        response = await async_http_client.get(
            "/api/newsletters", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestNewsletterEndpoints:
    """Test newsletter CRUD over HTTP."""

    @pytest.mark.asyncio
    async def test_create_newsletter_schedules_issues(
        self, async_http_client: AsyncClient, make_user, auth_headers, clock
    ) -> None:
        """Test that creating a newsletter returns it and lists its first issues."""
        # Arrange
        user = await make_user()
        headers = auth_headers(user)

        # Act
        response = await async_http_client.post(
            "/api/newsletters", json=_payload(clock.now), headers=headers
        )

        # Assert
        assert response.status_code == status.HTTP_201_CREATED
        newsletter = NewsletterResponse.model_validate(response.json())
        assert newsletter.user_id == user.id
        assert newsletter.slug == "weekly-digest"

        issues_response = await async_http_client.get(
            f"/api/newsletters/{newsletter.id}/issues", headers=headers
        )
        assert issues_response.status_code == status.HTTP_200_OK
        issues = [IssueResponse.model_validate(i) for i in issues_response.json()]
        assert len(issues) == 5
        assert issues[0].due_at == clock.now + timedelta(days=10)

    @pytest.mark.asyncio
    async def test_create_newsletter_field_errors(
        self, async_http_client: AsyncClient, make_user, auth_headers, clock
    ) -> None:
        user = await make_user()

        response = await async_http_client.post(
            "/api/newsletters",
            json=_payload(clock.now, name="", interval_days=0),
            headers=auth_headers(user),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
        assert response.json() == {
            "error": "validation_error",
            "message": "Validation failed",
            "details": {
                "name": ["can't be blank"],
                "interval_days": ["must be greater than 0"],
            },
        }

    @pytest.mark.asyncio
    async def test_create_newsletter_rejects_oversized_cadence(
        self, async_http_client: AsyncClient, make_user, auth_headers, clock
    ) -> None:
        user = await make_user()

        response = await async_http_client.post(
            "/api/newsletters",
            json=_payload(clock.now, interval_days=400_000, sponsor_in_days=800_000),
            headers=auth_headers(user),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
        assert response.json()["details"] == {
            "interval_days": ["Input should be less than or equal to 3650"],
            "sponsor_in_days": ["Input should be less than or equal to 3650"],
        }

    @pytest.mark.asyncio
    async def test_create_newsletter_cadence_errors(
        self, async_http_client: AsyncClient, make_user, auth_headers, clock
    ) -> None:
        user = await make_user()

        response = await async_http_client.post(
            "/api/newsletters",
            json=_payload(clock.now, interval_days=0, sponsor_in_days=1, sponsor_before_days=1),
            headers=auth_headers(user),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
        assert set(response.json()["details"]) == {"interval_days", "sponsor_in_days"}

    @pytest.mark.asyncio
    async def test_malformed_body(
        self, async_http_client: AsyncClient, make_user, auth_headers
    ) -> None:
        user = await make_user()

        response = await async_http_client.post(
            "/api/newsletters", json={"name": "No dates"}, headers=auth_headers(user)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
        assert response.json()["message"] == "Request validation failed"

    @pytest.mark.asyncio
    async def test_list_only_own_newsletters(
        self, async_http_client: AsyncClient, make_user, make_newsletter, auth_headers
    ) -> None:
        owner = await make_user()
        other = await make_user()
        mine = await make_newsletter(owner)
        await make_newsletter(other)

        response = await async_http_client.get("/api/newsletters", headers=auth_headers(owner))

        assert response.status_code == status.HTTP_200_OK
        assert [n["id"] for n in response.json()] == [mine.id]

    @pytest.mark.asyncio
    async def test_other_creators_newsletter_is_not_found(
        self, async_http_client: AsyncClient, make_user, make_newsletter, auth_headers
    ) -> None:
        """Test that another creator's newsletter looks exactly like a missing one."""
        owner = await make_user()
        other = await make_user()
        newsletter = await make_newsletter(owner)

        foreign = await async_http_client.get(
            f"/api/newsletters/{newsletter.id}", headers=auth_headers(other)
        )
        missing = await async_http_client.get(
            f"/api/newsletters/{newsletter.id + 1000}", headers=auth_headers(other)
        )

        assert foreign.status_code == missing.status_code == status.HTTP_404_NOT_FOUND
        assert foreign.json() == missing.json() == {
            "error": "not_found",
            "message": "Resource not found",
        }

    @pytest.mark.asyncio
    async def test_update_newsletter(
        self, async_http_client: AsyncClient, make_user, make_newsletter, auth_headers
    ) -> None:
        owner = await make_user()
        newsletter = await make_newsletter(owner)

        response = await async_http_client.put(
            f"/api/newsletters/{newsletter.id}",
            json={"name": "Renamed", "interval_days": 14},
            headers=auth_headers(owner),
        )

        assert response.status_code == status.HTTP_200_OK
        body = NewsletterResponse.model_validate(response.json())
        assert body.name == "Renamed"
        assert body.interval_days == 14
        assert body.slug == "weekly-digest"

    @pytest.mark.asyncio
    async def test_update_newsletter_to_taken_slug(
        self, async_http_client: AsyncClient, make_user, make_newsletter, auth_headers
    ) -> None:
        owner = await make_user()
        await make_newsletter(owner, slug="first")
        second = await make_newsletter(owner, slug="second")

        response = await async_http_client.put(
            f"/api/newsletters/{second.id}", json={"slug": "first"}, headers=auth_headers(owner)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
        assert response.json()["details"] == {"slug": ["has already been taken"]}

    @pytest.mark.asyncio
    async def test_delete_newsletter(
        self, async_http_client: AsyncClient, make_user, make_newsletter, auth_headers
    ) -> None:
        """Test that a deleted newsletter is gone from every read."""
        # Arrange
        owner = await make_user()
        newsletter = await make_newsletter(owner)
        headers = auth_headers(owner)

        # Act
        response = await async_http_client.delete(
            f"/api/newsletters/{newsletter.id}", headers=headers
        )

        # Assert
        assert response.status_code == status.HTTP_200_OK
        assert DeletedResponse.model_validate(response.json()).id == newsletter.id
        after = await async_http_client.get(f"/api/newsletters/{newsletter.id}", headers=headers)
        assert after.status_code == status.HTTP_404_NOT_FOUND
        listing = await async_http_client.get("/api/newsletters", headers=headers)
        assert listing.json() == []


class TestIssueEndpoints:
    """Test issue CRUD nested under a newsletter."""

    @pytest.mark.asyncio
    async def test_create_and_get_issue(
        self, async_http_client: AsyncClient, make_user, make_newsletter, auth_headers, clock
    ) -> None:
        owner = await make_user()
        newsletter = await make_newsletter(owner)
        headers = auth_headers(owner)
        due_at = clock.now + timedelta(days=3)

        created = await async_http_client.post(
            f"/api/newsletters/{newsletter.id}/issues",
            json={"name": "Special", "due_at": due_at.isoformat()},
            headers=headers,
        )

        assert created.status_code == status.HTTP_201_CREATED
        issue = IssueResponse.model_validate(created.json())
        assert issue.newsletter_id == newsletter.id
        assert issue.due_at == due_at
        fetched = await async_http_client.get(
            f"/api/newsletters/{newsletter.id}/issues/{issue.id}", headers=headers
        )
        assert IssueResponse.model_validate(fetched.json()) == issue

    @pytest.mark.asyncio
    async def test_create_issue_blank_name(
        self, async_http_client: AsyncClient, make_user, make_newsletter, auth_headers, clock
    ) -> None:
        owner = await make_user()
        newsletter = await make_newsletter(owner)

        response = await async_http_client.post(
            f"/api/newsletters/{newsletter.id}/issues",
            json={"name": "  ", "due_at": clock.now.isoformat()},
            headers=auth_headers(owner),
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
        assert response.json()["details"] == {"name": ["can't be blank"]}

    @pytest.mark.asyncio
    async def test_issue_of_other_creator_not_found(
        self, async_http_client: AsyncClient, make_user, make_newsletter, auth_headers, clock
    ) -> None:
        owner = await make_user()
        other = await make_user()
        newsletter = await make_newsletter(owner)

        response = await async_http_client.post(
            f"/api/newsletters/{newsletter.id}/issues",
            json={"name": "Intrusion", "due_at": clock.now.isoformat()},
            headers=auth_headers(other),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_update_and_delete_issue(
        self, async_http_client: AsyncClient, make_user, make_newsletter, auth_headers
    ) -> None:
        # Arrange
        owner = await make_user()
        newsletter = await make_newsletter(owner)
        headers = auth_headers(owner)
        base = f"/api/newsletters/{newsletter.id}/issues"
        issue_id = (await async_http_client.get(base, headers=headers)).json()[0]["id"]

        # Act
        updated = await async_http_client.put(
            f"{base}/{issue_id}", json={"name": "Holiday special"}, headers=headers
        )
        deleted = await async_http_client.delete(f"{base}/{issue_id}", headers=headers)

        # Assert
        assert updated.status_code == status.HTTP_200_OK
        assert updated.json()["name"] == "Holiday special"
        assert deleted.status_code == status.HTTP_200_OK
        assert deleted.json() == {"id": issue_id, "deleted": True}
        remaining = (await async_http_client.get(base, headers=headers)).json()
        assert issue_id not in {i["id"] for i in remaining}
        gone = await async_http_client.get(f"{base}/{issue_id}", headers=headers)
        assert gone.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_offers_on_issue(
        self,
        async_http_client: AsyncClient,
        db_session,
        make_user,
        make_newsletter,
        auth_headers,
    ) -> None:
        """Test that the creator sees the offers made on one of their issues."""
        creator = await make_user()
        sponsor = await make_user()
        newsletter = await make_newsletter(creator)
        headers = auth_headers(creator)
        base = f"/api/newsletters/{newsletter.id}/issues"
        issue_id = (await async_http_client.get(base, headers=headers)).json()[0]["id"]
        offer = Sponsorship(issue_id=issue_id, user_id=sponsor.id, ad_copy="Try our API")
        db_session.add(offer)
        await db_session.commit()

        response = await async_http_client.get(f"{base}/{issue_id}/sponsorships", headers=headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == [
            {"id": offer.id, "issue_id": issue_id, "user_id": sponsor.id, "ad_copy": "Try our API"}
        ]
