"""
Tests for the delete confirmation workflow.
"""

import pytest

from parkadmin.client import AdminAPIClient, AdminSession, APIError, DeleteState, DeleteWorkflow, InvalidTransition
from parkadmin.client.workflow import describe_rows
from parkadmin.core.security import create_access_token


class RecordingAPI:
    """Counts delete calls; optionally fails them."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    async def delete(self, resource, ids):
        self.calls.append((resource, list(ids)))
        if self.error:
            raise self.error
        return {"deleted": list(ids), "missing": []}


ROWS = [
    {"id": "a" * 32, "seq": 4},
    {"id": "b" * 32, "seq": 7},
    {"id": "c" * 32, "seq": 9},
]


def test_describe_rows():
    assert describe_rows(ROWS[:2], "highlight") == "Delete 2 highlights (seq 4, 7)?"
    assert describe_rows([{"id": "x"}], "category") == "Delete 1 category?"


@pytest.mark.asyncio
class TestDeleteWorkflow:

    async def test_confirm_issues_one_request_and_updates_rows(self):
        api = RecordingAPI()
        rows = list(ROWS)
        workflow = DeleteWorkflow(api, "highlights", rows=rows)

        pending = workflow.request(rows[:2])
        assert pending.description == "Delete 2 highlights (seq 4, 7)?"
        assert workflow.state is DeleteState.CONFIRM_PENDING

        assert await workflow.confirm() is True

        assert api.calls == [("highlights", ["a" * 32, "b" * 32])]
        assert rows == [ROWS[2]]
        assert workflow.state is DeleteState.IDLE
        assert workflow.history == [
            DeleteState.IDLE,
            DeleteState.CONFIRM_PENDING,
            DeleteState.DELETING,
            DeleteState.SUCCEEDED,
            DeleteState.IDLE,
        ]

    async def test_cancel_sends_nothing(self):
        api = RecordingAPI()
        workflow = DeleteWorkflow(api, "press_releases")

        workflow.request(ROWS[:1])
        workflow.cancel()

        assert api.calls == []
        assert workflow.state is DeleteState.IDLE
        assert DeleteState.CANCELLED in workflow.history

    async def test_failure_keeps_error_until_dismissed(self):
        api = RecordingAPI(error=APIError(502, "Could not delete highlight"))
        rows = list(ROWS)
        workflow = DeleteWorkflow(api, "highlights", rows=rows)

        workflow.request(rows[:1])
        assert await workflow.confirm() is False

        assert workflow.state is DeleteState.FAILED
        assert workflow.error == "Could not delete highlight"
        assert rows == ROWS
        with pytest.raises(InvalidTransition):
            workflow.request(rows[:1])

        workflow.dismiss_error()
        assert workflow.state is DeleteState.IDLE
        assert workflow.error is None

    async def test_async_refresh_callback(self):
        refreshed = []

        async def refetch(ids):
            refreshed.extend(ids)

        workflow = DeleteWorkflow(RecordingAPI(), "subscribers", on_success=refetch)
        workflow.request(ROWS[:1])
        await workflow.confirm()

        assert refreshed == ["a" * 32]

    async def test_failing_refresh_still_returns_to_idle(self):
        async def refetch(ids):
            raise RuntimeError("refetch failed")

        api = RecordingAPI()
        workflow = DeleteWorkflow(api, "highlights", on_success=refetch)
        workflow.request(ROWS[:1])

        with pytest.raises(RuntimeError, match="refetch failed"):
            await workflow.confirm()

        assert workflow.state is DeleteState.IDLE
        assert workflow.history[-2:] == [DeleteState.SUCCEEDED, DeleteState.IDLE]
        assert workflow.pending is None

        workflow.request(ROWS[1:2])
        assert workflow.state is DeleteState.CONFIRM_PENDING

    async def test_unexpected_delete_error_is_a_failure(self):
        workflow = DeleteWorkflow(RecordingAPI(error=RuntimeError("socket closed")), "highlights")
        workflow.request(ROWS[:1])

        assert await workflow.confirm() is False

        assert workflow.state is DeleteState.FAILED
        assert workflow.error == "Delete failed: socket closed"
        workflow.dismiss_error()
        assert workflow.state is DeleteState.IDLE

    async def test_invalid_transitions(self):
        workflow = DeleteWorkflow(RecordingAPI(), "highlights")

        with pytest.raises(InvalidTransition):
            await workflow.confirm()
        with pytest.raises(InvalidTransition):
            workflow.cancel()
        with pytest.raises(ValueError):
            workflow.request([])

    async def test_against_the_api(self, client, editor):
        session = AdminSession()
        session.login(create_access_token({"sub": editor.id}), {"email": editor.email, "is_allowed": True})
        api = AdminAPIClient(client, session)

        for title in ("One", "Two", "Three"):
            await api.create("highlights", {"title": title, "content": "C"})
        rows = (await api.list("highlights", sort="seq", order="asc")).items

        workflow = DeleteWorkflow(api, "highlights", rows=rows)
        workflow.request(rows[:2])
        assert await workflow.confirm() is True

        assert workflow.result["message"] == "2 highlights deleted successfully"
        assert [row["title"] for row in rows] == ["Three"]
        assert (await api.list("highlights")).total == 1
