"""
Movie review business logic: body parsing, validation, reshaping.
"""
import json
from urllib.parse import parse_qs

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.db.models import MovieReview
from app.schemas.reviews import REQUIRED_FIELDS, ReviewSubmission, format_submitted_at
from app.services.review_store import ensure_schema, insert_review, list_reviews

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class UnsupportedMediaTypeError(Exception):
    """Raised when the request body is neither JSON nor URL-encoded."""


class SubmissionInvalidError(ValueError):
    """Raised when the body cannot be parsed or a required field is missing."""

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details


def _media_type(content_type: str | None) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def _decode_body(content_type: str | None, body: bytes) -> dict:
    media_type = _media_type(content_type)

    if media_type == JSON_CONTENT_TYPE:
        try:
            data = json.loads(body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise SubmissionInvalidError("Request body is not valid JSON") from exc
        if not isinstance(data, dict):
            raise SubmissionInvalidError("Request body must be a JSON object")
        return data

    if media_type == FORM_CONTENT_TYPE:
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SubmissionInvalidError("Request body is not valid UTF-8") from exc
        parsed = parse_qs(text, keep_blank_values=True)
        return {key: values[0] for key, values in parsed.items()}

    raise UnsupportedMediaTypeError(
        f"Unsupported content type {media_type or '(none)'}; "
        f"use {JSON_CONTENT_TYPE} or {FORM_CONTENT_TYPE}"
    )


def parse_submission(content_type: str | None, body: bytes) -> ReviewSubmission:
    """
    Parse and validate a review submission.

    Unknown keys (such as Netlify's ``form-name`` or ``bot-field``) are
    ignored. The first offending required field is named in the error.
    """
    data = _decode_body(content_type, body)
    try:
        return ReviewSubmission.model_validate(data)
    except ValidationError as exc:
        missing = []
        for err in exc.errors():
            field = str(err["loc"][0]) if err["loc"] else "body"
            if field not in missing:
                missing.append(field)
        missing.sort(key=lambda f: REQUIRED_FIELDS.index(f) if f in REQUIRED_FIELDS else len(REQUIRED_FIELDS))
        raise SubmissionInvalidError(
            ", ".join(f"{field} is required" for field in missing)
        ) from exc


def build_review_dict(review: MovieReview) -> dict:
    return {
        "id": review.id,
        "name": review.name,
        "movieName": review.movie_name,
        "movieReview": review.movie_review,
        "submittedAt": format_submitted_at(review.submitted_at),
    }


def build_echo_dict(submission: ReviewSubmission) -> dict:
    return {
        "name": submission.name,
        "movieName": submission.movie_name,
        "movieReview": submission.movie_review,
    }


def save_review(db: Session | None, submission: ReviewSubmission) -> dict:
    """Persist one submission. Identical resubmissions create new rows."""
    ensure_schema(db)
    review = insert_review(db, submission.name, submission.movie_name, submission.movie_review)
    return build_review_dict(review)


def get_all_reviews(db: Session | None) -> list[dict]:
    """All stored reviews in display shape, newest first."""
    ensure_schema(db)
    return [build_review_dict(review) for review in list_reviews(db)]
