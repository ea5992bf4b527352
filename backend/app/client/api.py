"""
HTTP client for the review endpoints, as used by the listing page.

Which backend paths are used is decided once from ``ClientConfig.hosted``
rather than by looking at the page's hostname or port.
"""
import logging

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

CLIENT_TIMEOUT_SECONDS = 10.0

HOSTED_PREFIX = "/.netlify/functions"
LOCAL_PREFIX = "/api"


class ClientConfig(BaseModel):
    base_url: str = "http://localhost:8000"
    # True on Netlify (functions paths), False for the local Next.js routes
    hosted: bool = False
    # Write to Netlify Forms first and to the database second
    dual_write: bool = False
    # List from Netlify Forms instead of the database
    list_from_forms: bool = False
    refresh_delay: float = 1.0
    reset_delay: float = 5.0
    poll_interval: float | None = None

    @property
    def prefix(self) -> str:
        return HOSTED_PREFIX if self.hosted else LOCAL_PREFIX


class ReviewApiError(Exception):
    """A write the server did not accept, with a message fit for the page."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ReviewListing(BaseModel):
    """
    Outcome of a list refresh.

    ``available`` is False when the backend is simply not set up; the page
    then shows an empty list without an error. ``error`` is only set for
    genuine failures.
    """

    reviews: list[dict] = []
    available: bool = True
    notice: str | None = None
    error: str | None = None


def _envelope_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    return body.get("message") or body.get("error") or body.get("details")


class ReviewApiClient:
    def __init__(self, config: ClientConfig, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=CLIENT_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "ReviewApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _url(self, endpoint: str) -> str:
        return f"{self.config.prefix}/{endpoint}"

    async def _post(self, endpoint: str, **kwargs) -> dict:
        try:
            response = await self._client.post(self._url(endpoint), **kwargs)
        except httpx.RequestError as exc:
            raise ReviewApiError("Could not reach the server, please try again") from exc

        if not response.is_success:
            message = _envelope_message(response) or f"Submission failed with status {response.status_code}"
            raise ReviewApiError(message, response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise ReviewApiError("Server returned an unexpected response", response.status_code) from exc
        return body if isinstance(body, dict) else {"data": body}

    async def submit_review(self, fields: dict[str, str]) -> dict:
        """Send a submission to the database write endpoint as JSON."""
        return await self._post("submit-review", json=fields)

    async def submit_to_forms(self, fields: dict[str, str]) -> dict:
        """Send a submission to the forms endpoint, URL-encoded like a browser form."""
        return await self._post("forms", data=fields)

    async def fetch_reviews(self) -> ReviewListing:
        endpoint = "form-submissions" if self.config.list_from_forms else "get-reviews"
        try:
            response = await self._client.get(self._url(endpoint), headers={"Cache-Control": "no-cache"})
        except httpx.RequestError as exc:
            logger.warning("Review listing request failed: %s", exc)
            return ReviewListing(error="Could not reach the server to load reviews")

        if response.status_code == 401:
            return ReviewListing(available=False)

        if not response.is_success:
            message = _envelope_message(response) or f"status {response.status_code}"
            return ReviewListing(error=f"Failed to load reviews: {message}")

        content_type = response.headers.get("content-type", "")
        try:
            if "json" not in content_type:
                raise ValueError(content_type)
            body = response.json()
        except ValueError:
            # An HTML page here means the endpoint is not deployed.
            return ReviewListing(available=False, error="Reviews are not available right now")

        if isinstance(body, list):
            return ReviewListing(reviews=[r for r in body if isinstance(r, dict)])

        if isinstance(body, dict) and isinstance(body.get("submissions"), list):
            reviews = [r for r in body["submissions"] if isinstance(r, dict)]
            if not reviews and body.get("message"):
                return ReviewListing(available=False, notice=body.get("message"))
            return ReviewListing(reviews=reviews)

        return ReviewListing(available=False, error="Reviews are not available right now")
