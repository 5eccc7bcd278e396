from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Profile(Base):
    """Marketplace identity of a user. One per user."""

    __tablename__ = "profiles"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    avatar_url = Column(String)
    bio = Column(Text)
    skills = Column(ARRAY(String), nullable=False, default=list)
    interests = Column(ARRAY(String), nullable=False, default=list)
    role = Column(String, nullable=False, default="SEEKER")  # FINDER | SEEKER
    department = Column(String)
    year = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="profile")
    jobs = relationship("Job", back_populates="created_by", cascade="all, delete-orphan")
    applications = relationship("Application", back_populates="applicant", cascade="all, delete-orphan")
    bookmarks = relationship("Bookmark", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    resumes = relationship("Resume", back_populates="user", cascade="all, delete-orphan")
    sent_call_requests = relationship(
        "CallRequest",
        back_populates="requester",
        foreign_keys="CallRequest.requester_id",
        cascade="all, delete-orphan",
    )
    received_call_requests = relationship(
        "CallRequest",
        back_populates="receiver",
        foreign_keys="CallRequest.receiver_id",
        cascade="all, delete-orphan",
    )
