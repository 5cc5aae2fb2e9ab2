"""Unit tests for JobApplicationService."""

import io
import re
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from shared.models.application import JobApplicationCreate
from shared.models.errors import ApiError, ErrorCode
from shared.models.tables import job_applications
from shared.services.application_service import (
    JobApplicationService,
    check_resume_type,
    resume_file_name,
)
from shared.services.database import DatabaseService, StoreUnavailableError


# === Test Configuration ===

PDF_BYTES = b"%PDF-1.4\n" + b"0" * 2048
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


# === Test Fixtures ===


@pytest.fixture
def application() -> JobApplicationCreate:
    return JobApplicationCreate(
        first_name="Ada",
        last_name="Obi",
        email="ada@example.com",
        phone="+234 800 000 0000",
        address="12 Marina Road",
        city="Lagos",
        postal_code="101001",
        country="Nigeria",
        job_role="Tailor",
        how_found="Instagram",
        cover_letter="I have ten years of experience.",
    )


@pytest.fixture
def service(database: DatabaseService, upload_dir: Path) -> JobApplicationService:
    return JobApplicationService(database, upload_dir=upload_dir, max_upload_bytes=4096)


def _stored_row(database: DatabaseService, application_id: int) -> dict:
    return database.fetch_one(
        select(job_applications).where(job_applications.c.ApplicationID == application_id)
    )


# === Validation ===


class TestRequiredFields:
    def test_missing_fields_listed(self) -> None:
        form = JobApplicationCreate(first_name="Ada", email="ada@example.com")

        assert form.missing_fields() == [
            "last_name",
            "phone",
            "address",
            "city",
            "postal_code",
            "country",
            "job_role",
            "how_found",
        ]

    def test_blank_counts_as_missing(self, application) -> None:
        form = application.model_copy(update={"city": ""})

        assert form.missing_fields() == ["city"]

    def test_whitespace_stripped(self) -> None:
        form = JobApplicationCreate(city="   ")

        assert form.city == ""
        assert "city" in form.missing_fields()

    def test_cover_letter_optional(self, application) -> None:
        form = application.model_copy(update={"cover_letter": None})

        assert form.missing_fields() == []

    def test_submit_rejects_missing(self, service, database) -> None:
        with pytest.raises(ApiError) as exc_info:
            service.submit(JobApplicationCreate(first_name="Ada"))

        assert exc_info.value.code is ErrorCode.MISSING_REQUIRED_FIELDS
        assert exc_info.value.message == "Missing required fields"
        assert "last_name" in exc_info.value.details["missing"]


# === Resume checks ===


class TestResumeType:
    @pytest.mark.parametrize(
        ("name", "content_type"),
        [
            ("cv.pdf", "application/pdf"),
            ("CV.PDF", "application/pdf"),
            ("cv.doc", "application/msword"),
            ("cv.docx", DOCX_TYPE),
            ("cv.pdf", None),
        ],
    )
    def test_allowed(self, name: str, content_type: str | None) -> None:
        check_resume_type(name, content_type)

    @pytest.mark.parametrize(
        ("name", "content_type"),
        [
            ("cv.exe", "application/octet-stream"),
            ("cv.txt", "text/plain"),
            ("cv", "application/pdf"),
            ("cv.pdf", "image/png"),
            ("cv.docx", "application/pdf"),
        ],
    )
    def test_rejected(self, name: str, content_type: str) -> None:
        with pytest.raises(ApiError) as exc_info:
            check_resume_type(name, content_type)

        assert exc_info.value.code is ErrorCode.INVALID_FILE_TYPE

    def test_stored_name_keeps_extension(self) -> None:
        name = resume_file_name("My Resume.DOCX")

        assert re.fullmatch(r"cv-\d+-\d+\.docx", name)

    def test_stored_names_unique(self) -> None:
        assert len({resume_file_name("cv.pdf") for _ in range(50)}) == 50


# === Submission ===


class TestSubmit:
    def test_without_resume(self, service, application, database) -> None:
        application_id = service.submit(application)

        row = _stored_row(database, application_id)
        assert row["FirstName"] == "Ada"
        assert row["JobRole"] == "Tailor"
        assert row["CoverLetter"] == "I have ten years of experience."
        assert row["CVFileName"] is None

    def test_with_resume(self, service, application, database, upload_dir) -> None:
        application_id = service.submit(
            application,
            resume_name="resume.pdf",
            resume_stream=io.BytesIO(PDF_BYTES),
            resume_content_type="application/pdf",
        )

        stored = _stored_row(database, application_id)["CVFileName"]
        assert re.fullmatch(r"cv-\d+-\d+\.pdf", stored)
        assert (upload_dir / stored).read_bytes() == PDF_BYTES

    def test_ids_increase(self, service, application) -> None:
        first = service.submit(application)
        second = service.submit(application)

        assert second > first

    def test_invalid_type_writes_nothing(self, service, application, database, upload_dir) -> None:
        with pytest.raises(ApiError) as exc_info:
            service.submit(
                application,
                resume_name="resume.exe",
                resume_stream=io.BytesIO(b"MZ"),
                resume_content_type="application/octet-stream",
            )

        assert exc_info.value.code is ErrorCode.INVALID_FILE_TYPE
        assert not upload_dir.exists() or not any(upload_dir.iterdir())
        assert database.fetch_one(select(job_applications)) is None

    def test_too_large_removes_partial_file(self, service, application, database, upload_dir) -> None:
        with pytest.raises(ApiError) as exc_info:
            service.submit(
                application,
                resume_name="resume.pdf",
                resume_stream=io.BytesIO(b"x" * 4097),
                resume_content_type="application/pdf",
            )

        assert exc_info.value.code is ErrorCode.FILE_TOO_LARGE
        assert list(upload_dir.iterdir()) == []
        assert database.fetch_one(select(job_applications)) is None

    def test_exact_limit_accepted(self, service, application, upload_dir) -> None:
        service.submit(
            application,
            resume_name="resume.pdf",
            resume_stream=io.BytesIO(b"x" * 4096),
            resume_content_type="application/pdf",
        )

        assert len(list(upload_dir.iterdir())) == 1

    def test_store_failure_removes_resume(self, application, upload_dir) -> None:
        db = MagicMock(spec=DatabaseService)
        db.insert.side_effect = StoreUnavailableError("connection refused")
        service = JobApplicationService(db, upload_dir=upload_dir)

        with pytest.raises(StoreUnavailableError):
            service.submit(
                application,
                resume_name="resume.pdf",
                resume_stream=io.BytesIO(PDF_BYTES),
                resume_content_type="application/pdf",
            )

        assert list(upload_dir.iterdir()) == []
