"""Job postings (admin CRUD) and applications (public)."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from apps.backend.client import BackendClient, unwrap

JOBS = "jobs"
JOBS_APPLY = "jobs/apply"

STATUSES = ("Published", "Draft", "Closed", "Archived")
EMPLOYMENT_TYPES = ("Full-time", "Part-time", "Contract", "Temporary", "Internship", "Volunteer")

APPLICATION_FIELDS = (
    "firstName",
    "lastName",
    "email",
    "phone",
    "coverLetter",
    "position",
    "education",
    "dateOfBirth",
    "gender",
)


def list_jobs(client: BackendClient, *, page: int = 1, limit: int = 20, **filters: Any) -> Any:
    return client.get(JOBS, {"page": page, "limit": limit, **filters})


def get_job(client: BackendClient, job_id: str) -> Any:
    return unwrap(client.get(f"{JOBS}/{job_id}"))


def create_job(client: BackendClient, payload: Mapping[str, Any]) -> Any:
    return client.post(JOBS, dict(payload))


def update_job(client: BackendClient, job_id: str, payload: Mapping[str, Any]) -> Any:
    return client.put(f"{JOBS}/{job_id}", dict(payload))


def update_job_status(client: BackendClient, job_id: str, status: str) -> Any:
    return client.put(f"{JOBS}/{job_id}/status", {"status": status})


def delete_job(client: BackendClient, job_id: str) -> Any:
    return client.delete(f"{JOBS}/{job_id}")


def job_stats(client: BackendClient) -> Any:
    return unwrap(client.get(f"{JOBS}/stats"))


def apply(
    client: BackendClient,
    fields: Mapping[str, Any],
    *,
    resume: Any = None,
    cover_letter_file: Any = None,
    opportunity_id: Optional[str] = None,
) -> Any:
    """
    Submit an application as multipart form data.

    The resume is sent under both ``resume`` and ``cv`` because backend
    versions disagree on the field name.
    """
    data = {key: fields[key] for key in APPLICATION_FIELDS if fields.get(key) not in (None, "")}
    files = {}
    if resume is not None:
        content = _read(resume)
        files["resume"] = (resume.name, content, _content_type(resume))
        files["cv"] = (resume.name, content, _content_type(resume))
    if cover_letter_file is not None:
        files["coverLetterFile"] = (
            cover_letter_file.name,
            _read(cover_letter_file),
            _content_type(cover_letter_file),
        )
    endpoint = f"opportunity/{opportunity_id}/apply" if opportunity_id else JOBS_APPLY
    return client.upload(endpoint, data, files)


def _read(upload: Any) -> bytes:
    if hasattr(upload, "seek"):
        upload.seek(0)
    return upload.read()


def _content_type(upload: Any) -> str:
    return getattr(upload, "content_type", None) or "application/octet-stream"
