from pydantic import BaseModel


class JobModerationRequest(BaseModel):
    action: str | None = None  # "approve" | "reject"
    reason: str | None = None
