"""
Forms API — Netlify Forms endpoints
───────────────────────────────────
Endpoints:
  POST /forms              — Forward one review to Netlify Forms
  GET  /form-submissions   — Reviews collected by Netlify Forms

Without any Netlify setting both answer in development mode instead of
failing, so the page works locally.
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status

from app.api.errors import NO_CACHE, empty_state_response, error_response
from app.api.reviews import SUBMIT_ERRORS, forward_or_echo, read_submission, submission_error_response
from app.deps.forms import get_forms_service
from app.schemas.reviews import EmptyStateResponse, ErrorResponse, FormSubmissionsResponse, SubmitResponse
from app.services.forms_service import (
    FormNotFoundError,
    FormsConfigError,
    FormsUpstreamError,
    NetlifyFormsService,
)
from app.services.review_service import SubmissionInvalidError, UnsupportedMediaTypeError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/forms", response_model=SubmitResponse, responses=SUBMIT_ERRORS)
async def submit_form(
    request: Request,
    forms: NetlifyFormsService | None = Depends(get_forms_service),
):
    try:
        submission = await read_submission(request)
    except (UnsupportedMediaTypeError, SubmissionInvalidError) as exc:
        return submission_error_response(exc)

    return await forward_or_echo(submission, forms)


@router.get(
    "/form-submissions",
    response_model=FormSubmissionsResponse,
    responses={405: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def list_form_submissions(
    response: Response,
    forms: NetlifyFormsService | None = Depends(get_forms_service),
):
    """
    List Netlify Forms submissions, newest first.

    A form nobody has submitted yet does not exist on Netlify; that is
    reported as an empty state together with the forms that do exist.
    """
    response.headers.update(NO_CACHE)

    if forms is None:
        return empty_state_response(EmptyStateResponse(
            message="Running in development mode",
            info="Form submissions will be available when deployed to Netlify",
        ))

    try:
        submissions = await forms.list_submissions()
    except FormNotFoundError as exc:
        logger.info("Form %r not provisioned yet; available: %s", exc.form_name, exc.available)
        return empty_state_response(EmptyStateResponse(
            message="No submissions yet",
            info=f"The {exc.form_name!r} form is created on its first submission",
            availableForms=exc.available,
        ))
    except FormsConfigError as exc:
        logger.error("Netlify Forms misconfigured: %s", exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Forms service not configured",
            details=str(exc),
            message="Set NETLIFY_SITE_ID and NETLIFY_ACCESS_TOKEN",
            headers=NO_CACHE,
        )
    except FormsUpstreamError as exc:
        logger.error("Failed to fetch form submissions: %s", exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Failed to fetch form submissions",
            details=str(exc),
            message="Submissions could not be loaded",
            headers=NO_CACHE,
        )

    return {"submissions": submissions}
