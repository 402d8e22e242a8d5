"""Abstract base class for the content backend.

The backend stores pages and diagram attachments. Only the endpoints the
pipeline needs are modelled: template fetch, page creation and diagram
upload.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from docforge.interfaces.diagram import DiagramRecord


@dataclass(frozen=True)
class PageContent:
    """A page fetched from the backend.

    Attributes:
        page_id: Backend identifier of the page.
        title: Page title.
        storage_body: Storage-format markup of the page.
        view_body: Rendered HTML view, when requested.
    """

    page_id: str
    title: str
    storage_body: str
    view_body: str = ""


@dataclass(frozen=True)
class CreatedPage:
    """A page created by the backend."""

    page_id: str
    title: str
    web_url: str | None = None


class BaseContentBackend(ABC):
    """Abstract base class for content backends."""

    @abstractmethod
    async def fetch_page(self, page_id: str) -> PageContent:
        """Fetch a page with its storage-format body.

        Raises:
            ValueError: If page_id is empty.
            BackendError: On transport failure or non-2xx status.
        """

    @abstractmethod
    async def create_page(
        self,
        title: str,
        document: str,
        space_key: str,
        parent_id: str | None = None,
    ) -> CreatedPage:
        """Create a page from an already prepared document.

        Raises:
            ValueError: If space_key is empty.
            BackendError: On transport failure or non-2xx status.
        """

    @abstractmethod
    async def upload_diagram(self, record: DiagramRecord, page_id: str) -> None:
        """Upload one rendered diagram to a page.

        Raises:
            DiagramUploadError: If the backend answers with a non-2xx status.
        """


class BackendError(Exception):
    """Exception raised when the backend request fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DiagramUploadError(BackendError):
    """Non-2xx answer from the diagram upload endpoint."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"HTTP {status_code}: {body}", status_code=status_code)
        self.body = body
