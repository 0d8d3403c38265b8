"""
Next-sequence loader for create/edit forms.

A form needs the ``seq`` to display before it can be submitted:

- EDIT: the record's existing seq, available immediately, no request
- CREATE: a preview fetched from ``GET /{resource}/next-seq``

While the preview is loading the value is the NOT_READY sentinel and the
form is not submittable. A failed load is an explicit error state; the
value never falls back to 1.
"""

from typing import Optional, Union

from parkadmin.client.api import AdminAPIClient, APIError
from parkadmin.services.sequence import FormMode


class _NotReady:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_READY"

    def __bool__(self) -> bool:
        return False


NOT_READY = _NotReady()


class NextSequence:
    """Sequence value for one form instance."""

    def __init__(
        self,
        api: AdminAPIClient,
        resource: str,
        mode: FormMode,
        existing_seq: Optional[int] = None,
    ):
        self.api = api
        self.resource = resource
        self.mode = FormMode(mode)
        self.error: Optional[str] = None
        self.loading = False
        self.value: Union[int, _NotReady] = NOT_READY

        if self.mode is FormMode.EDIT:
            if existing_seq is None:
                raise ValueError("existing_seq is required in edit mode")
            self.value = existing_seq

    @property
    def ready(self) -> bool:
        return self.value is not NOT_READY

    @property
    def submittable(self) -> bool:
        return self.ready and self.error is None and not self.loading

    async def load(self) -> Union[int, _NotReady]:
        """Fetch the preview (CREATE only). Returns the value or NOT_READY on error."""
        if self.mode is FormMode.EDIT:
            return self.value

        self.loading = True
        self.error = None
        self.value = NOT_READY
        try:
            self.value = await self.api.next_seq(self.resource)
        except APIError as e:
            self.error = e.message
        finally:
            self.loading = False
        return self.value
