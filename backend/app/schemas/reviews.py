"""
Review request/response schemas.

Incoming form fields use the hyphenated HTML names (``movie-name``);
responses use the camelCase names the listing page renders.
"""
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_FIELDS = ("name", "movie-name", "movie-review")


def format_submitted_at(value: datetime | str | None) -> str | None:
    """
    Render a timestamp the way ``Date.toLocaleString('en-US')`` does,
    e.g. ``10/19/2026, 3:04:05 PM``. Aware datetimes are shown in UTC.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return (
        f"{value.month}/{value.day}/{value.year}, "
        f"{hour}:{value.minute:02d}:{value.second:02d} {meridiem}"
    )


class ReviewSubmission(BaseModel):
    """A submitted review form. All three fields are required and non-blank."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    movie_name: str = Field(..., alias="movie-name")
    movie_review: str = Field(..., alias="movie-review")

    @field_validator("name", "movie_name", "movie_review")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    def to_form_fields(self) -> dict[str, str]:
        return {
            "name": self.name,
            "movie-name": self.movie_name,
            "movie-review": self.movie_review,
        }


class ReviewOut(BaseModel):
    """A stored review in display shape."""

    id: int | str
    name: str
    movieName: str
    movieReview: str
    submittedAt: str | None = None


class SubmissionEcho(BaseModel):
    """What development mode echoes back when nothing is persisted."""

    name: str
    movieName: str
    movieReview: str


class SubmitResponse(BaseModel):
    success: bool = True
    message: str
    data: ReviewOut | SubmissionEcho


class ErrorResponse(BaseModel):
    """Shared error envelope for every endpoint."""

    error: str
    details: str | None = None
    message: str | None = None


class EmptyStateResponse(BaseModel):
    """Informational answer when a backend is not provisioned yet."""

    message: str
    info: str | None = None
    availableForms: list[str] | None = None
    submissions: list[ReviewOut] = []


class FormSubmissionsResponse(BaseModel):
    submissions: list[ReviewOut]
