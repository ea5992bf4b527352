"""
Submission lifecycle for the review form.

    idle ──submit──▶ submitting ──▶ success ──(refresh_delay, list refresh)──▶ idle
                                 └─▶ error   ──(reset_delay)──────────────────▶ idle

Delayed transitions run as scheduled asyncio tasks owned by the
controller; ``close()`` cancels whatever is still pending.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from app.client.api import ClientConfig, ReviewApiClient, ReviewApiError, ReviewListing

logger = logging.getLogger(__name__)

FORM_FIELDS = ("name", "movie-name", "movie-review")


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class ReviewFormController:
    def __init__(
        self,
        api: ReviewApiClient,
        config: ClientConfig | None = None,
        on_change: Callable[["ReviewFormController"], None] | None = None,
    ) -> None:
        self.api = api
        self.config = config or api.config
        self.on_change = on_change

        self.fields: dict[str, str] = {field: "" for field in FORM_FIELDS}
        self.status = SubmissionStatus.IDLE
        self.status_message: str | None = None
        self.reviews: list[dict] = []
        self.list_message: str | None = None

        self._timers: set[asyncio.Task] = set()
        self._poll_task: asyncio.Task | None = None
        self._closed = False

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def form_disabled(self) -> bool:
        return self.status is SubmissionStatus.SUBMITTING

    def set_field(self, name: str, value: str) -> None:
        if name not in self.fields:
            raise KeyError(name)
        self.fields[name] = value

    def _transition(self, status: SubmissionStatus, message: str | None = None) -> None:
        logger.debug("Form status %s -> %s", self.status.value, status.value)
        self.status = status
        self.status_message = message
        self._notify()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    # ── Timers ────────────────────────────────────────────────────────────────

    def _schedule(self, delay: float, callback: Callable[[], Awaitable[None]]) -> asyncio.Task:
        async def run() -> None:
            await asyncio.sleep(delay)
            await callback()

        task = asyncio.get_running_loop().create_task(run())
        self._timers.add(task)
        task.add_done_callback(self._timers.discard)
        return task

    def _cancel_timers(self) -> None:
        for task in list(self._timers):
            task.cancel()

    async def wait_for_timers(self) -> None:
        """Wait until every scheduled transition has run."""
        while self._timers:
            await asyncio.gather(*list(self._timers), return_exceptions=True)

    def close(self) -> None:
        """Cancel pending transitions and polling; call when the page goes away."""
        self._closed = True
        self._cancel_timers()
        if self._poll_task is not None:
            self._poll_task.cancel()

    # ── Actions ───────────────────────────────────────────────────────────────

    async def submit(self) -> bool:
        """
        Submit the current fields. Returns True on success.

        In dual-write mode Netlify Forms is the primary write and must
        succeed; the database write is secondary and only logged on failure.
        """
        if self.status is SubmissionStatus.SUBMITTING or self._closed:
            return False

        self._cancel_timers()
        self._transition(SubmissionStatus.SUBMITTING)
        payload = dict(self.fields)

        try:
            if self.config.dual_write:
                await self.api.submit_to_forms(payload)
                try:
                    await self.api.submit_review(payload)
                except ReviewApiError as exc:
                    logger.warning("Secondary database write failed: %s", exc.message)
            else:
                await self.api.submit_review(payload)
        except ReviewApiError as exc:
            self._transition(SubmissionStatus.ERROR, exc.message)
            self._schedule(self.config.reset_delay, self._reset)
            return False

        self.fields = {field: "" for field in FORM_FIELDS}
        self._transition(SubmissionStatus.SUCCESS, "Thanks! Your review has been submitted.")
        self._schedule(self.config.refresh_delay, self._refresh_then_reset)
        return True

    async def refresh(self) -> ReviewListing:
        listing = await self.api.fetch_reviews()
        self.reviews = listing.reviews
        self.list_message = listing.error or listing.notice
        self._notify()
        return listing

    async def _reset(self) -> None:
        self._transition(SubmissionStatus.IDLE)

    async def _refresh_then_reset(self) -> None:
        await self.refresh()
        self._transition(SubmissionStatus.IDLE)

    def start_polling(self) -> asyncio.Task | None:
        """Refresh the list every ``poll_interval`` seconds until closed."""
        interval = self.config.poll_interval
        if not interval or self._poll_task is not None:
            return self._poll_task

        async def poll() -> None:
            while not self._closed:
                await self.refresh()
                await asyncio.sleep(interval)

        self._poll_task = asyncio.get_running_loop().create_task(poll())
        return self._poll_task
