"""Job application models."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class JobApplicationCreate(BaseModel):
    """Data submitted with a job application form.

    Required fields are validated by the service rather than by pydantic so
    that blank values produce the same "missing fields" error as absent ones.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str | None = None
    job_role: str | None = None
    how_found: str | None = None
    cover_letter: str | None = None

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "first_name",
        "last_name",
        "email",
        "phone",
        "address",
        "city",
        "postal_code",
        "country",
        "job_role",
        "how_found",
    )

    def missing_fields(self) -> list[str]:
        """Return the names of required fields that are absent or blank."""
        return [name for name in self.REQUIRED_FIELDS if not getattr(self, name)]


class JobApplicationResult(BaseModel):
    """Response for a stored job application."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "Application submitted successfully"
    application_id: int = Field(..., alias="applicationId")
