from pydantic import BaseModel, Field


class ApplicationCreate(BaseModel):
    # Presence of job_id/proposal is checked in the handler (400, not 422)
    job_id: str | None = Field(default=None, alias="jobId")
    proposal: str | None = None
    resume_id: str | None = Field(default=None, alias="resumeId")

    class Config:
        populate_by_name = True


class JobApplyRequest(BaseModel):
    proposal: str | None = None
    resume_id: str | None = Field(default=None, alias="resumeId")

    class Config:
        populate_by_name = True


class ApplicationStatusUpdate(BaseModel):
    status: str | None = None
