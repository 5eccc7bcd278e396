from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class CallRequest(Base):
    """Video interview request from an applicant to a job owner."""

    __tablename__ = "call_requests"

    id = Column(String, primary_key=True, index=True)
    job_id = Column(String, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    requester_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text)
    status = Column(String, nullable=False, default="PENDING")
    scheduled_time = Column(DateTime(timezone=True))
    room_id = Column(String)
    room_name = Column(String)
    room_code = Column(String)
    accepted_at = Column(DateTime(timezone=True))
    rejected_at = Column(DateTime(timezone=True))
    reject_reason = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    job = relationship("Job", back_populates="call_requests")
    requester = relationship("Profile", back_populates="sent_call_requests", foreign_keys=[requester_id])
    receiver = relationship("Profile", back_populates="received_call_requests", foreign_keys=[receiver_id])
