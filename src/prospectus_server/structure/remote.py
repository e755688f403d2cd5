"""Client for the server-side table-of-contents extraction service."""

import os
import time

import httpx
from pydantic import ValidationError

from ..logger import logger
from .models import TOCResponse

DEFAULT_SERVICE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 60.0
UPLOAD_PATH = "/api/v1/upload-pdf"


class UpstreamServiceError(RuntimeError):
    """Raised when the extraction service is unreachable or rejects a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    """Best human-readable message for a failed upload.

    Prefers the service's JSON ``detail``; otherwise falls back to the
    status reason, followed by the raw body when there is one.
    """
    message = f"Failed to upload PDF: {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    if body is None and response.text:
        message += f" - {response.text}"
    return message


class TOCServiceClient:
    """Uploads PDFs to the extraction service and returns its TOC."""

    def __init__(self, base_url: str | None = None, timeout: float | None = None):
        """Initialize the client.

        Args:
            base_url: Service root URL. If not provided, uses the
                TOC_SERVICE_URL env var, then http://localhost:8000.
            timeout: Request timeout in seconds. If not provided, uses the
                TOC_SERVICE_TIMEOUT env var, then 60 seconds.
        """
        base_url = base_url or os.getenv("TOC_SERVICE_URL", DEFAULT_SERVICE_URL)
        self.base_url = base_url.rstrip("/")
        if timeout is None:
            timeout = float(os.getenv("TOC_SERVICE_TIMEOUT", DEFAULT_TIMEOUT))
        self.timeout = timeout

    def absolute_url(self, path: str) -> str:
        """Resolve a service-relative path against the base URL."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path}"

    def upload_pdf(self, data: bytes, file_name: str) -> TOCResponse:
        """Upload a PDF and return the service's table of contents.

        Args:
            data: Raw PDF bytes.
            file_name: Original file name sent with the upload.

        Returns:
            Parsed TOCResponse.

        Raises:
            UpstreamServiceError: On network failure, a non-success status,
                or a response body that is not a valid TOC.
        """
        url = self.absolute_url(UPLOAD_PATH)
        start = time.perf_counter()

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(
                    url,
                    files={"file": (file_name, data, "application/pdf")},
                )
        except httpx.TimeoutException as e:
            logger.error("toc service timed out", url=url, timeout=self.timeout)
            raise UpstreamServiceError(
                f"Extraction service timed out after {self.timeout}s"
            ) from e
        except httpx.RequestError as e:
            logger.error("toc service unreachable", url=url, error=str(e))
            raise UpstreamServiceError(
                f"Extraction service unreachable: {e}"
            ) from e

        if not response.is_success:
            message = _error_message(response)
            logger.error(
                "toc service rejected upload",
                url=url,
                status_code=response.status_code,
                error=message,
            )
            raise UpstreamServiceError(message, status_code=response.status_code)

        try:
            toc = TOCResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamServiceError(
                f"Extraction service returned an invalid response: {e}",
                status_code=response.status_code,
            ) from e

        logger.info(
            "toc received",
            document_id=toc.document_id,
            entries=len(toc.toc),
            files=len(toc.files),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return toc
