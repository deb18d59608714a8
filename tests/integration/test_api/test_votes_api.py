"""Integration tests for the voting endpoints (units, votable polls, ballots)."""

import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from condo_voting.api.errors import register_error_handlers
from condo_voting.api.v1.votes import votes_router
from condo_voting.core.dependencies import get_async_session, get_current_user
from condo_voting.core.errors import AlreadyVotedError, InvalidSelectionError, WindowClosedError
from condo_voting.lib.ledger import VoteChannel


def _mock_user() -> MagicMock:
    user = MagicMock()
    user.id = uuid.uuid4()
    user.role = "resident"
    user.council_member = False
    return user


def _mock_unit(number: str) -> MagicMock:
    unit = MagicMock()
    unit.id = uuid.uuid4()
    unit.number = number
    unit.created_at = datetime.now(UTC)
    return unit


def _mock_ballot(poll_id: uuid.UUID, unit_id: uuid.UUID, option_id: uuid.UUID) -> MagicMock:
    ballot = MagicMock()
    ballot.id = uuid.uuid4()
    ballot.poll_id = poll_id
    ballot.unit_id = unit_id
    ballot.option_id = option_id
    ballot.option_ids = [str(option_id)]
    ballot.voter_user_id = None
    ballot.channel = "web"
    ballot.cast_at = datetime.now(UTC)
    return ballot


@pytest.fixture
def resident_user() -> MagicMock:
    return _mock_user()


@pytest.fixture
async def client(resident_user: MagicMock) -> AsyncClient:
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(votes_router, prefix="/api/v1")
    app.dependency_overrides[get_async_session] = lambda: AsyncMock()
    app.dependency_overrides[get_current_user] = lambda: resident_user
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestMyUnits:
    """Tests for GET /api/v1/me/units."""

    @pytest.mark.asyncio
    async def test_lists_linked_units(self, client: AsyncClient) -> None:
        units = [_mock_unit("101"), _mock_unit("201")]
        with patch(
            "condo_voting.api.v1.votes.resolve_eligible_units",
            new_callable=AsyncMock,
            return_value=units,
        ):
            resp = await client.get("/api/v1/me/units")
        assert resp.status_code == 200
        assert [unit["number"] for unit in resp.json()] == ["101", "201"]

    @pytest.mark.asyncio
    async def test_no_units_is_an_empty_list(self, client: AsyncClient) -> None:
        with patch("condo_voting.api.v1.votes.resolve_eligible_units", new_callable=AsyncMock, return_value=[]):
            resp = await client.get("/api/v1/me/units")
        assert resp.status_code == 200
        assert resp.json() == []


class TestMyPolls:
    """Tests for GET /api/v1/me/polls."""

    @pytest.mark.asyncio
    async def test_lists_votable_polls(self, client: AsyncClient) -> None:
        poll = MagicMock()
        poll.id = uuid.uuid4()
        poll.title = "Troca do portao"
        poll.end_at = datetime.now(UTC) + timedelta(days=1)
        with (
            patch("condo_voting.api.v1.votes.is_unit_eligible", new_callable=AsyncMock, return_value=True),
            patch("condo_voting.api.v1.votes.list_votable_polls", new_callable=AsyncMock, return_value=[poll]),
        ):
            resp = await client.get("/api/v1/me/polls", params={"unit_id": str(uuid.uuid4())})
        assert resp.status_code == 200
        assert resp.json()[0]["title"] == "Troca do portao"

    @pytest.mark.asyncio
    async def test_foreign_unit_is_403(self, client: AsyncClient) -> None:
        with patch("condo_voting.api.v1.votes.is_unit_eligible", new_callable=AsyncMock, return_value=False):
            resp = await client.get("/api/v1/me/polls", params={"unit_id": str(uuid.uuid4())})
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_unit_id_is_required(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/me/polls")
        assert resp.status_code == 422


class TestCastVote:
    """Tests for POST /api/v1/polls/{poll_id}/votes."""

    @pytest.mark.asyncio
    async def test_ballot_is_cast_for_caller(self, client: AsyncClient, resident_user: MagicMock) -> None:
        poll_id, unit_id, option_id = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        with (
            patch("condo_voting.api.v1.votes.is_unit_eligible", new_callable=AsyncMock, return_value=True),
            patch(
                "condo_voting.api.v1.votes.cast_vote",
                new_callable=AsyncMock,
                return_value=_mock_ballot(poll_id, unit_id, option_id),
            ) as cast_mock,
        ):
            resp = await client.post(
                f"/api/v1/polls/{poll_id}/votes",
                json={"unit_id": str(unit_id), "option_ids": [str(option_id)]},
            )

        assert resp.status_code == 201
        assert resp.json()["option_ids"] == [str(option_id)]
        request = cast_mock.call_args.args[1]
        assert request.poll_id == poll_id
        assert request.voter_user_id == resident_user.id
        assert request.channel is VoteChannel.WEB

    @pytest.mark.asyncio
    async def test_unit_not_linked_is_403(self, client: AsyncClient) -> None:
        with (
            patch("condo_voting.api.v1.votes.is_unit_eligible", new_callable=AsyncMock, return_value=False),
            patch("condo_voting.api.v1.votes.cast_vote", new_callable=AsyncMock) as cast_mock,
        ):
            resp = await client.post(
                f"/api/v1/polls/{uuid.uuid4()}/votes",
                json={"unit_id": str(uuid.uuid4()), "option_ids": [str(uuid.uuid4())]},
            )
        assert resp.status_code == 403
        cast_mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_selection_is_422(self, client: AsyncClient) -> None:
        resp = await client.post(
            f"/api/v1/polls/{uuid.uuid4()}/votes",
            json={"unit_id": str(uuid.uuid4()), "option_ids": []},
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "status_code", "code"),
        [
            (AlreadyVotedError("This unit has already voted in this poll"), 409, "already_voted"),
            (WindowClosedError("Voting period ended"), 422, "window_closed"),
            (InvalidSelectionError("Single choice polls take exactly one option, got 2"), 422, "invalid_selection"),
        ],
    )
    async def test_registrar_errors(self, client: AsyncClient, error: Exception, status_code: int, code: str) -> None:
        with (
            patch("condo_voting.api.v1.votes.is_unit_eligible", new_callable=AsyncMock, return_value=True),
            patch("condo_voting.api.v1.votes.cast_vote", new_callable=AsyncMock, side_effect=error),
        ):
            resp = await client.post(
                f"/api/v1/polls/{uuid.uuid4()}/votes",
                json={"unit_id": str(uuid.uuid4()), "option_ids": [str(uuid.uuid4())]},
            )
        assert resp.status_code == status_code
        assert resp.json()["code"] == code


class TestUnitVoteStatus:
    """Tests for GET /api/v1/polls/{poll_id}/votes/{unit_id}."""

    @pytest.mark.asyncio
    async def test_not_voted_is_404(self, client: AsyncClient) -> None:
        with (
            patch("condo_voting.api.v1.votes.is_unit_eligible", new_callable=AsyncMock, return_value=True),
            patch("condo_voting.api.v1.votes.get_unit_ballot", new_callable=AsyncMock, return_value=None),
        ):
            resp = await client.get(f"/api/v1/polls/{uuid.uuid4()}/votes/{uuid.uuid4()}")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_returns_ballot(self, client: AsyncClient) -> None:
        poll_id, unit_id, option_id = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        with (
            patch("condo_voting.api.v1.votes.is_unit_eligible", new_callable=AsyncMock, return_value=True),
            patch(
                "condo_voting.api.v1.votes.get_unit_ballot",
                new_callable=AsyncMock,
                return_value=_mock_ballot(poll_id, unit_id, option_id),
            ),
        ):
            resp = await client.get(f"/api/v1/polls/{poll_id}/votes/{unit_id}")
        assert resp.status_code == 200
        assert resp.json()["option_id"] == str(option_id)
