import asyncio
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from app.client.api import ClientConfig, ReviewApiError, ReviewListing
from app.client.controller import ReviewFormController, SubmissionStatus
from tests.support import VALID_REVIEW

ROW = {"id": 1, "name": "Ann", "movieName": "Dune", "movieReview": "Great pacing", "submittedAt": "x"}


def _fake_api(**overrides) -> SimpleNamespace:
    api = SimpleNamespace(
        config=ClientConfig(refresh_delay=0, reset_delay=0),
        submit_review=AsyncMock(return_value={"success": True}),
        submit_to_forms=AsyncMock(return_value={"success": True}),
        fetch_reviews=AsyncMock(return_value=ReviewListing(reviews=[ROW])),
    )
    for name, value in overrides.items():
        setattr(api, name, value)
    return api


def _controller(api, **config) -> tuple[ReviewFormController, list[SubmissionStatus]]:
    seen: list[SubmissionStatus] = []
    controller = ReviewFormController(
        api,
        config=ClientConfig(refresh_delay=0, reset_delay=0, **config),
        on_change=lambda c: seen.append(c.status),
    )
    for name, value in VALID_REVIEW.items():
        controller.set_field(name, value)
    return controller, seen


class TestReviewFormController(unittest.IsolatedAsyncioTestCase):
    async def test_success_clears_form_refreshes_and_returns_to_idle(self) -> None:
        api = _fake_api()
        controller, seen = _controller(api)

        self.assertTrue(await controller.submit())
        self.assertEqual(controller.status, SubmissionStatus.SUCCESS)
        self.assertEqual(controller.fields, {"name": "", "movie-name": "", "movie-review": ""})

        await controller.wait_for_timers()

        api.submit_review.assert_awaited_once_with(VALID_REVIEW)
        api.fetch_reviews.assert_awaited_once()
        self.assertEqual(controller.reviews, [ROW])
        self.assertEqual(controller.status, SubmissionStatus.IDLE)
        self.assertEqual(seen[0], SubmissionStatus.SUBMITTING)
        self.assertEqual(seen[1], SubmissionStatus.SUCCESS)
        self.assertEqual(seen[-1], SubmissionStatus.IDLE)

    async def test_failure_keeps_fields_and_resets_to_idle(self) -> None:
        api = _fake_api(submit_review=AsyncMock(side_effect=ReviewApiError("Database unavailable", 500)))
        controller, seen = _controller(api)

        self.assertFalse(await controller.submit())
        self.assertEqual(controller.status, SubmissionStatus.ERROR)
        self.assertEqual(controller.status_message, "Database unavailable")
        self.assertEqual(controller.fields, VALID_REVIEW)

        await controller.wait_for_timers()

        self.assertEqual(controller.status, SubmissionStatus.IDLE)
        api.fetch_reviews.assert_not_awaited()
        self.assertEqual(seen, [SubmissionStatus.SUBMITTING, SubmissionStatus.ERROR, SubmissionStatus.IDLE])

    async def test_form_is_disabled_while_submitting(self) -> None:
        release = asyncio.Event()
        observed = []

        async def slow_submit(fields):
            observed.append(controller.form_disabled)
            await release.wait()
            return {"success": True}

        api = _fake_api(submit_review=AsyncMock(side_effect=slow_submit))
        controller, _ = _controller(api)

        first = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)
        self.assertFalse(await controller.submit())  # ignored while in flight
        release.set()
        self.assertTrue(await first)

        self.assertEqual(observed, [True])
        self.assertFalse(controller.form_disabled)
        api.submit_review.assert_awaited_once()
        controller.close()

    async def test_dual_write_tolerates_secondary_failure(self) -> None:
        api = _fake_api(submit_review=AsyncMock(side_effect=ReviewApiError("db down", 500)))
        controller, _ = _controller(api, dual_write=True)

        self.assertTrue(await controller.submit())

        api.submit_to_forms.assert_awaited_once_with(VALID_REVIEW)
        api.submit_review.assert_awaited_once_with(VALID_REVIEW)
        self.assertEqual(controller.status, SubmissionStatus.SUCCESS)
        controller.close()

    async def test_dual_write_primary_failure_is_fatal(self) -> None:
        api = _fake_api(submit_to_forms=AsyncMock(side_effect=ReviewApiError("forms down", 500)))
        controller, _ = _controller(api, dual_write=True)

        self.assertFalse(await controller.submit())

        api.submit_review.assert_not_awaited()
        self.assertEqual(controller.status, SubmissionStatus.ERROR)
        controller.close()

    async def test_close_cancels_pending_reset(self) -> None:
        api = _fake_api(submit_review=AsyncMock(side_effect=ReviewApiError("nope")))
        controller = ReviewFormController(api, config=ClientConfig(reset_delay=60))

        await controller.submit()
        controller.close()
        await controller.wait_for_timers()

        self.assertEqual(controller.status, SubmissionStatus.ERROR)

    async def test_refresh_exposes_unavailable_notice_without_error(self) -> None:
        api = _fake_api(fetch_reviews=AsyncMock(
            return_value=ReviewListing(available=False, notice="Database not configured")
        ))
        controller, _ = _controller(api)

        listing = await controller.refresh()

        self.assertIsNone(listing.error)
        self.assertEqual(controller.reviews, [])
        self.assertEqual(controller.list_message, "Database not configured")

    async def test_polling_refreshes_until_closed(self) -> None:
        api = _fake_api()
        controller, _ = _controller(api, poll_interval=0.01)

        task = controller.start_polling()
        await asyncio.sleep(0.05)
        controller.close()
        with self.assertRaises(asyncio.CancelledError):
            await task

        self.assertGreaterEqual(api.fetch_reviews.await_count, 2)
