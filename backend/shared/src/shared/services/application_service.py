"""Job application submission with optional resume upload.

Resumes are written to a single upload directory under a generated name
(cv-<epoch ms>-<random><ext>); only the file name is stored with the
application row.
"""

import secrets
import time
from pathlib import Path
from typing import BinaryIO

from sqlalchemy import insert

from shared.models.application import JobApplicationCreate
from shared.models.errors import ApiError, ErrorCode
from shared.models.tables import job_applications
from shared.services.database import DatabaseService
from shared.utils.logging import get_logger

logger = get_logger(__name__)

ALLOWED_RESUME_TYPES: dict[str, set[str]] = {
    ".pdf": {"application/pdf"},
    ".doc": {"application/msword"},
    ".docx": {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
}

_CHUNK_SIZE = 64 * 1024


def resume_file_name(original_name: str) -> str:
    """Generate a unique stored name that keeps the original extension."""
    suffix = Path(original_name).suffix.lower()
    return f"cv-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"


def check_resume_type(original_name: str, content_type: str | None) -> None:
    """Reject anything that is not a PDF or Word document.

    Raises:
        ApiError: INVALID_FILE_TYPE
    """
    suffix = Path(original_name).suffix.lower()
    allowed = ALLOWED_RESUME_TYPES.get(suffix)
    if allowed is None or (content_type and content_type.split(";")[0].strip() not in allowed):
        raise ApiError(
            code=ErrorCode.INVALID_FILE_TYPE,
            details={"filename": original_name, "content_type": content_type or ""},
        )


class JobApplicationService:
    """Stores job applications and their resumes."""

    def __init__(
        self,
        db: DatabaseService,
        upload_dir: str | Path,
        max_upload_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self._db = db
        self._upload_dir = Path(upload_dir)
        self._max_upload_bytes = max_upload_bytes

    def _save_resume(self, original_name: str, stream: BinaryIO) -> str:
        """Copy an upload to disk, enforcing the size limit while streaming."""
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        stored_name = resume_file_name(original_name)
        target = self._upload_dir / stored_name

        written = 0
        try:
            with target.open("wb") as out:
                while chunk := stream.read(_CHUNK_SIZE):
                    written += len(chunk)
                    if written > self._max_upload_bytes:
                        raise ApiError(
                            code=ErrorCode.FILE_TOO_LARGE,
                            details={"max_bytes": str(self._max_upload_bytes)},
                        )
                    out.write(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise

        logger.info("Stored resume %s (%d bytes)", stored_name, written)
        return stored_name

    def submit(
        self,
        application: JobApplicationCreate,
        resume_name: str | None = None,
        resume_stream: BinaryIO | None = None,
        resume_content_type: str | None = None,
    ) -> int:
        """Validate and store an application.

        Args:
            application: Submitted form fields
            resume_name: Original file name of the uploaded resume, if any
            resume_stream: Readable binary stream with the resume contents
            resume_content_type: MIME type reported by the client

        Returns:
            New ApplicationID

        Raises:
            ApiError: Missing fields, bad file type or file too large.
            DatabaseServiceError: The insert failed.
        """
        missing = application.missing_fields()
        if missing:
            raise ApiError(
                code=ErrorCode.MISSING_REQUIRED_FIELDS,
                details={"missing": ", ".join(missing)},
            )

        cv_file_name = None
        if resume_name and resume_stream is not None:
            check_resume_type(resume_name, resume_content_type)
            cv_file_name = self._save_resume(resume_name, resume_stream)

        statement = insert(job_applications).values(
            FirstName=application.first_name,
            LastName=application.last_name,
            Email=application.email,
            Phone=application.phone,
            Address=application.address,
            City=application.city,
            PostalCode=application.postal_code,
            Country=application.country,
            JobRole=application.job_role,
            HowFound=application.how_found,
            CoverLetter=application.cover_letter or None,
            CVFileName=cv_file_name,
        )
        try:
            application_id = self._db.insert(statement)
        except Exception:
            if cv_file_name:
                (self._upload_dir / cv_file_name).unlink(missing_ok=True)
            raise

        logger.info("Job application %s stored for role %s", application_id, application.job_role)
        return application_id
