"""
Delete confirmation workflow for the admin tables.

State machine:

    IDLE ──request()──▶ CONFIRM_PENDING ──cancel()──▶ CANCELLED ─▶ IDLE
                              │
                          confirm()
                              ▼
                          DELETING ──ok──▶ SUCCEEDED ─▶ IDLE
                              │
                            error
                              ▼
                           FAILED ──dismiss_error()──▶ IDLE

One confirmed batch issues exactly one DELETE request carrying every
selected id. Calling a method from the wrong state raises
InvalidTransition.
"""

import enum
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from parkadmin.client.api import AdminAPIClient, APIError

RefreshCallback = Callable[[List[str]], Union[None, Awaitable[None]]]


class DeleteState(str, enum.Enum):
    IDLE = "idle"
    CONFIRM_PENDING = "confirm_pending"
    CANCELLED = "cancelled"
    DELETING = "deleting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class InvalidTransition(Exception):
    """Raised when a workflow method is called from a state that does not allow it."""


@dataclass(frozen=True)
class PendingDelete:
    ids: List[str]
    description: str


def _field(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def _plural(label: str) -> str:
    if label.endswith("y"):
        return label[:-1] + "ies"
    return label + "s"


def _singular(resource: str) -> str:
    noun = resource.replace("_", " ")
    if noun.endswith("ies"):
        return noun[:-3] + "y"
    return noun.rstrip("s")


def describe_rows(rows: Sequence[Any], label: str) -> str:
    """Human-readable confirmation text, e.g. "Delete 2 highlights (seq 4, 7)?"."""
    count = len(rows)
    noun = label if count == 1 else _plural(label)
    seqs = [str(_field(row, "seq")) for row in rows if _field(row, "seq") is not None]
    if seqs:
        return f"Delete {count} {noun} (seq {', '.join(seqs)})?"
    return f"Delete {count} {noun}?"


class DeleteWorkflow:
    """
    Drives the two-phase delete of selected table rows.

    Args:
        api: REST client
        resource: Resource key ("highlights", "press_releases", ...)
        rows: Current table rows; deleted ids are removed from it locally
              when no refresh callback is given
        on_success: Called with the deleted ids (sync or async), typically
                    to refetch the table
    """

    def __init__(
        self,
        api: AdminAPIClient,
        resource: str,
        rows: Optional[List[Any]] = None,
        on_success: Optional[RefreshCallback] = None,
        label: Optional[str] = None,
    ):
        self.api = api
        self.resource = resource
        self.rows = rows if rows is not None else []
        self.on_success = on_success
        self.label = label or _singular(resource)

        self.state = DeleteState.IDLE
        self.history: List[DeleteState] = [DeleteState.IDLE]
        self.pending: Optional[PendingDelete] = None
        self.error: Optional[str] = None
        self.result: Optional[Dict[str, Any]] = None

    # ========================================
    # Transitions
    # ========================================

    def request(self, rows: Sequence[Any]) -> PendingDelete:
        """IDLE → CONFIRM_PENDING for the selected rows."""
        self._expect(DeleteState.IDLE, "request")
        ids = [str(_field(row, "id")) for row in rows if _field(row, "id")]
        if not ids:
            raise ValueError("Select at least one row to delete")

        self.pending = PendingDelete(ids=ids, description=describe_rows(rows, self.label))
        self.error = None
        self.result = None
        self._move(DeleteState.CONFIRM_PENDING)
        return self.pending

    def cancel(self) -> None:
        """CONFIRM_PENDING → CANCELLED → IDLE without any request."""
        self._expect(DeleteState.CONFIRM_PENDING, "cancel")
        self._move(DeleteState.CANCELLED)
        self.pending = None
        self._move(DeleteState.IDLE)

    async def confirm(self) -> bool:
        """
        CONFIRM_PENDING → DELETING → SUCCEEDED → IDLE, or → FAILED.

        The workflow is back in IDLE even when the refresh callback raises;
        that exception is re-raised to the caller.

        Returns:
            True when the delete succeeded
        """
        self._expect(DeleteState.CONFIRM_PENDING, "confirm")
        pending = self.pending
        self._move(DeleteState.DELETING)

        try:
            self.result = await self.api.delete(self.resource, pending.ids)
        except APIError as e:
            self.error = e.message
            self._move(DeleteState.FAILED)
            return False
        except Exception as e:
            self.error = f"Delete failed: {e}"
            self._move(DeleteState.FAILED)
            return False

        self._move(DeleteState.SUCCEEDED)
        deleted = list(self.result.get("deleted") or pending.ids)
        try:
            await self._refresh(deleted)
        finally:
            self.pending = None
            self._move(DeleteState.IDLE)
        return True

    def dismiss_error(self) -> None:
        """FAILED → IDLE once the operator has seen the message."""
        self._expect(DeleteState.FAILED, "dismiss_error")
        self.error = None
        self.pending = None
        self._move(DeleteState.IDLE)

    # ========================================
    # Internals
    # ========================================

    async def _refresh(self, deleted: List[str]) -> None:
        if self.on_success is not None:
            outcome = self.on_success(deleted)
            if inspect.isawaitable(outcome):
                await outcome
            return
        gone = set(deleted)
        self.rows[:] = [row for row in self.rows if str(_field(row, "id")) not in gone]

    def _expect(self, state: DeleteState, action: str) -> None:
        if self.state is not state:
            raise InvalidTransition(f"Cannot {action} while {self.state}")

    def _move(self, state: DeleteState) -> None:
        self.state = state
        self.history.append(state)
