"""
Python admin client.

The pieces the admin frontend needs, without the frontend: an explicit
session, a REST client, the next-seq loader for forms and the delete
confirmation workflow.
"""

from parkadmin.client.api import AdminAPIClient, APIError, ListPage
from parkadmin.client.sequence import NOT_READY, NextSequence
from parkadmin.client.session import AdminSession, NotAuthenticated
from parkadmin.client.workflow import DeleteState, DeleteWorkflow, InvalidTransition, PendingDelete

__all__ = [
    "AdminAPIClient",
    "APIError",
    "ListPage",
    "NOT_READY",
    "NextSequence",
    "AdminSession",
    "NotAuthenticated",
    "DeleteState",
    "DeleteWorkflow",
    "InvalidTransition",
    "PendingDelete",
]
