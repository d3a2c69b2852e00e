from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, PROJECT_ID_MAX_LENGTH


class Project(Base):
    """
    Generated static site.

    The id is a lowercase-alphanumeric token that doubles as the preview
    subdomain label, so it is assigned by the application rather than the DB.
    """
    __tablename__ = "projects"

    __table_args__ = (
        Index('ix_projects_user_updated', 'user_id', 'updated_at'),  # list-by-owner ordered by recency
    )

    id = Column(String(PROJECT_ID_MAX_LENGTH), primary_key=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="projects")

    def __repr__(self):
        return f"<Project {self.id}>"
