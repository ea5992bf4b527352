"""
Reviews API — database-backed endpoints
───────────────────────────────────────
Endpoints:
  POST /submit-review   — Validate and store one review
  GET  /get-reviews     — Every stored review, newest first

Both are mounted under /api and /.netlify/functions (see app.main).
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.api.errors import NO_CACHE, empty_state_response, error_response
from app.db.session import get_db
from app.deps.forms import get_forms_service
from app.schemas.reviews import (
    EmptyStateResponse,
    ErrorResponse,
    ReviewOut,
    ReviewSubmission,
    SubmitResponse,
)
from app.services.forms_service import FormsConfigError, FormsUpstreamError, NetlifyFormsService
from app.services.review_service import (
    SubmissionInvalidError,
    UnsupportedMediaTypeError,
    build_echo_dict,
    get_all_reviews,
    parse_submission,
    save_review,
)
from app.services.review_store import (
    ReadFailedError,
    StoreNotConfiguredError,
    StoreUnavailableError,
    WriteFailedError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

SUBMIT_ERRORS = {
    400: {"model": ErrorResponse},
    405: {"model": ErrorResponse},
    415: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


async def read_submission(request: Request) -> ReviewSubmission:
    """Parse the request body; raises the review_service parse errors."""
    return parse_submission(request.headers.get("content-type"), await request.body())


def submission_error_response(exc: Exception):
    if isinstance(exc, UnsupportedMediaTypeError):
        return error_response(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            "Unsupported media type",
            details=str(exc),
            message="Submit the form as JSON or URL-encoded data",
        )
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Missing required fields",
        details=exc.details if isinstance(exc, SubmissionInvalidError) else str(exc),
        message="Name, movie name and movie review are all required",
    )


async def forward_or_echo(
    submission: ReviewSubmission,
    forms: NetlifyFormsService | None,
):
    """
    Handle a submission when no database is configured.

    Netlify Forms takes it if any Netlify setting is present; otherwise
    the submission is only logged and echoed back (development mode).
    """
    data = build_echo_dict(submission)

    if forms is None:
        logger.info("Form submission received (dev mode): %s", data)
        return {
            "success": True,
            "message": "Form submitted successfully (development mode)",
            "data": data,
        }

    try:
        await forms.submit(submission.to_form_fields())
    except FormsConfigError as exc:
        logger.error("Netlify Forms misconfigured: %s", exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Forms service not configured",
            details=str(exc),
            message="Set NETLIFY_SITE_URL to forward submissions",
        )
    except FormsUpstreamError as exc:
        logger.error("Netlify form post failed: %s", exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to submit form",
            details=str(exc),
            message="The forms service did not accept the submission",
        )

    return {
        "success": True,
        "message": "Form submitted successfully",
        "data": data,
    }


# ── Routes ────────────────────────────────────────────────────────────────────

@router.post("/submit-review", response_model=SubmitResponse, responses=SUBMIT_ERRORS)
async def submit_review(
    request: Request,
    db: Session | None = Depends(get_db),
    forms: NetlifyFormsService | None = Depends(get_forms_service),
):
    """
    Store one review.

    Not idempotent: the same content submitted twice produces two rows.
    """
    try:
        submission = await read_submission(request)
    except (UnsupportedMediaTypeError, SubmissionInvalidError) as exc:
        return submission_error_response(exc)

    if db is None:
        return await forward_or_echo(submission, forms)

    try:
        data = await run_in_threadpool(save_review, db, submission)
    except StoreUnavailableError as exc:
        logger.error("Database unavailable while saving review: %s", exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Database unavailable",
            details=str(exc),
            message="Your review was not saved, please try again",
        )
    except WriteFailedError as exc:
        logger.error("Failed to save review: %s", exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to save review",
            details=str(exc),
            message="Your review was not saved, please try again",
        )

    return {
        "success": True,
        "message": "Review submitted successfully",
        "data": data,
    }


@router.get(
    "/get-reviews",
    response_model=list[ReviewOut],
    responses={405: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_reviews(response: Response, db: Session | None = Depends(get_db)):
    """Every stored review in display shape, newest first. Never cached."""
    response.headers.update(NO_CACHE)

    try:
        return await run_in_threadpool(get_all_reviews, db)
    except StoreNotConfiguredError:
        empty = EmptyStateResponse(
            message="Database not configured",
            info="Set DATABASE_URL to store and list reviews",
        )
        return empty_state_response(empty)
    except (StoreUnavailableError, ReadFailedError) as exc:
        logger.error("Failed to fetch reviews: %s", exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to fetch reviews",
            details=str(exc),
            message="Reviews could not be loaded",
            headers=NO_CACHE,
        )
