from pydantic import BaseModel, Field


class RefineJobRequest(BaseModel):
    role: str | None = None
    current_description: str | None = Field(default=None, alias="currentDescription")
    current_requirements: str | None = Field(default=None, alias="currentRequirements")
    duration: str | None = None
    compensation: str | None = None
    type: str | None = None
    generate_from_role: bool = Field(default=False, alias="generateFromRole")

    class Config:
        populate_by_name = True


class JobIdRequest(BaseModel):
    job_id: str | None = Field(default=None, alias="jobId")

    class Config:
        populate_by_name = True
