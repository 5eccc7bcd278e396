from pydantic import BaseModel, Field


class BookmarkCreate(BaseModel):
    job_id: str | None = Field(default=None, alias="jobId")

    class Config:
        populate_by_name = True
