"""
hackhub/orm/resource.py
Learning resources (guides, starter kits, API docs) shared with participants
"""
from sqlalchemy import Column, String, DateTime, Text

from hackhub.core.db_types import new_uuid, utcnow
from hackhub.orm.base import Base


class Resource(Base):
    __tablename__ = "resources"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    content_url = Column(String(500), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "content_url": self.content_url,
            "category": self.category,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
