"""
Netlify Forms Service
─────────────────────
Wraps the Netlify Forms REST API, the secondary place reviews can live.

Flow:
  1. POST /forms forwards a submission to the deployed site as a regular
     URL-encoded form post (Netlify captures it server-side).
  2. GET /form-submissions lists the site's forms, finds the review form
     and pulls its submissions.
  3. A form that does not exist yet (nobody ever submitted) is reported
     as an empty state, not an error.
"""
import logging
from datetime import datetime, timezone

import httpx

from app.core.config import settings
from app.schemas.reviews import format_submitted_at

logger = logging.getLogger(__name__)

NETLIFY_TIMEOUT_SECONDS = 10.0


class FormsConfigError(Exception):
    """Raised when the forms client is used without the settings it needs."""


class FormsUpstreamError(Exception):
    """Raised for non-recoverable Netlify request/response errors."""


class FormNotFoundError(Exception):
    """Raised when the review form has not been created on the site yet."""

    def __init__(self, form_name: str, available: list[str]) -> None:
        super().__init__(f"Form {form_name!r} not found")
        self.form_name = form_name
        self.available = available


class NetlifyFormsService:
    """
    Thin async wrapper around the Netlify Forms API.
    *transport* exists so tests can swap in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        site_id: str | None = None,
        access_token: str | None = None,
        site_url: str | None = None,
        form_name: str | None = None,
        api_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.site_id = site_id if site_id is not None else settings.NETLIFY_SITE_ID
        self.access_token = access_token if access_token is not None else settings.NETLIFY_ACCESS_TOKEN
        self.site_url = (site_url if site_url is not None else settings.NETLIFY_SITE_URL).rstrip("/")
        self.form_name = form_name or settings.NETLIFY_FORM_NAME
        self.api_url = (api_url or settings.NETLIFY_API_URL).rstrip("/")
        self._transport = transport

    def _client(self, **kwargs) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=NETLIFY_TIMEOUT_SECONDS,
            transport=self._transport,
            **kwargs,
        )

    def _require_api_credentials(self) -> None:
        missing = [
            name
            for name, value in (
                ("NETLIFY_SITE_ID", self.site_id),
                ("NETLIFY_ACCESS_TOKEN", self.access_token),
            )
            if not value
        ]
        if missing:
            raise FormsConfigError(f"Missing configuration: {', '.join(missing)}")

    async def _get_json(self, path: str, what: str) -> list | dict:
        headers = {"Authorization": f"Bearer {self.access_token}"}
        try:
            async with self._client(headers=headers) as client:
                response = await client.get(f"{self.api_url}{path}")
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FormsUpstreamError(
                f"Netlify {what} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            raise FormsUpstreamError(f"Netlify {what} request failed") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise FormsUpstreamError(f"Netlify {what} returned a non-JSON body") from exc

    async def list_forms(self) -> list[dict]:
        """Return the forms Netlify detected on the site."""
        self._require_api_credentials()
        payload = await self._get_json(f"/sites/{self.site_id}/forms", "forms lookup")
        if not isinstance(payload, list):
            return []
        return [f for f in payload if isinstance(f, dict)]

    async def list_submissions(self) -> list[dict]:
        """
        Return the review form's submissions in display shape, newest first.

        Raises FormNotFoundError when the form is not provisioned yet.
        """
        forms = await self.list_forms()
        form = next((f for f in forms if f.get("name") == self.form_name), None)
        if form is None:
            available = [f.get("name") for f in forms if f.get("name")]
            raise FormNotFoundError(self.form_name, available)

        payload = await self._get_json(f"/forms/{form['id']}/submissions", "submissions lookup")
        rows = [row for row in payload if isinstance(row, dict)] if isinstance(payload, list) else []
        rows.sort(key=self._created_at, reverse=True)
        return [self._map_submission(row) for row in rows]

    async def submit(self, fields: dict[str, str]) -> None:
        """Forward a validated submission to the site so Netlify records it."""
        if not self.site_url:
            raise FormsConfigError("Missing configuration: NETLIFY_SITE_URL")

        data = {"form-name": self.form_name, **fields}
        try:
            async with self._client() as client:
                response = await client.post(f"{self.site_url}/", data=data)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FormsUpstreamError(
                f"Netlify form post failed with status {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            raise FormsUpstreamError("Netlify form post request failed") from exc

        logger.info("Forwarded submission to Netlify form %r", self.form_name)

    @staticmethod
    def _created_at(raw: dict) -> datetime:
        value = raw.get("created_at")
        if not value:
            return datetime.min
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return datetime.min
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    def _map_submission(self, raw: dict) -> dict:
        """Normalize a Netlify submission row into the listing shape."""
        data = raw.get("data")
        if not isinstance(data, dict):
            data = {}
        created_at = raw.get("created_at")
        try:
            submitted_at = format_submitted_at(created_at) if created_at else None
        except ValueError:
            submitted_at = str(created_at)
        return {
            "id": raw.get("id") or raw.get("number"),
            "name": data.get("name") or raw.get("name") or "",
            "movieName": data.get("movie-name") or "",
            "movieReview": data.get("movie-review") or "",
            "submittedAt": submitted_at,
        }
