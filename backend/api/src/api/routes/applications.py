"""Job application endpoint.

Accepts the careers form as multipart/form-data with an optional resume
file (PDF, DOC or DOCX, at most 5 MB by default).
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.status import HTTP_201_CREATED

from api.dependencies import get_application_service
from shared.models.application import JobApplicationCreate, JobApplicationResult
from shared.models.errors import ToolError
from shared.services.application_service import JobApplicationService

router = APIRouter(tags=["applications"])


@router.post(
    "/applications",
    summary="Submit a job application",
    response_model=JobApplicationResult,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"description": "Missing required fields or unsupported file type", "model": ToolError},
        413: {"description": "Resume file too large", "model": ToolError},
        500: {"description": "Application could not be saved", "model": ToolError},
    },
)
def submit_application(
    first_name: str | None = Form(default=None, alias="firstName"),
    last_name: str | None = Form(default=None, alias="lastName"),
    email: str | None = Form(default=None),
    phone: str | None = Form(default=None),
    address: str | None = Form(default=None),
    city: str | None = Form(default=None),
    postal_code: str | None = Form(default=None, alias="postalCode"),
    country: str | None = Form(default=None),
    job_role: str | None = Form(default=None, alias="jobRole"),
    how_found: str | None = Form(default=None, alias="howFound"),
    cover_letter: str | None = Form(default=None, alias="coverLetter"),
    resume: UploadFile | None = File(default=None),
    service: JobApplicationService = Depends(get_application_service),
) -> JobApplicationResult:
    """Validate the form, store the resume and insert the application."""
    application = JobApplicationCreate(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        address=address,
        city=city,
        postal_code=postal_code,
        country=country,
        job_role=job_role,
        how_found=how_found,
        cover_letter=cover_letter,
    )

    if resume is not None and resume.filename:
        application_id = service.submit(
            application,
            resume_name=resume.filename,
            resume_stream=resume.file,
            resume_content_type=resume.content_type,
        )
    else:
        application_id = service.submit(application)

    return JobApplicationResult(application_id=application_id)
