from sqlalchemy import Column, String, Boolean, DateTime, Float, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String, primary_key=True, index=True)
    created_by_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    requirements = Column(Text)
    duration = Column(String)
    compensation = Column(String)
    location = Column(String)
    team_size = Column(String)
    tags = Column(ARRAY(String), nullable=False, default=list)

    # Moderation: PENDING -> APPROVED | REJECTED
    status = Column(String, nullable=False, default="PENDING", index=True)
    is_draft = Column(Boolean, default=False)
    is_published = Column(Boolean, default=False, index=True)
    published_at = Column(DateTime(timezone=True))
    is_filled = Column(Boolean, default=False)
    filled_at = Column(DateTime(timezone=True))
    approved_at = Column(DateTime(timezone=True))
    approved_by = Column(String)
    rejection_reason = Column(Text)

    views = Column(Integer, default=0)
    applications_count = Column(Integer, default=0)

    is_paid = Column(Boolean, default=False)
    payment_amount = Column(Float)
    payment_currency = Column(String)
    stripe_payment_id = Column(String)
    paid_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    created_by = relationship("Profile", back_populates="jobs")
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")
    bookmarks = relationship("Bookmark", back_populates="job", cascade="all, delete-orphan")
    call_requests = relationship("CallRequest", back_populates="job", cascade="all, delete-orphan")
