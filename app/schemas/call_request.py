from datetime import datetime

from pydantic import BaseModel, Field


class CallRequestCreate(BaseModel):
    job_id: str | None = Field(default=None, alias="jobId")
    receiver_id: str | None = Field(default=None, alias="receiverId")
    message: str | None = None

    class Config:
        populate_by_name = True


class CallRequestAccept(BaseModel):
    scheduled_time: datetime | None = Field(default=None, alias="scheduledTime")

    class Config:
        populate_by_name = True


class CallRequestReject(BaseModel):
    reason: str | None = None
