"""Page model"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


class Page(Base):
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, index=True)
    # unicité insensible à la casse garantie par la recherche, pas par la DB
    name = Column(String, nullable=False, index=True)
    content = Column(Text, nullable=False, default="")
    last_modified_utc = Column(DateTime, default=datetime.utcnow, nullable=False)

    attachments = relationship(
        "Attachment",
        back_populates="page",
        order_by="Attachment.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True)
    page_id = Column(Integer, ForeignKey("pages.id"), nullable=False, index=True)
    file_id = Column(String, nullable=False, unique=True, index=True)  # clé du blob dans "files"
    file_name = Column(String, nullable=False)
    mime_type = Column(String, nullable=False, default="application/octet-stream")
    last_modified_utc = Column(DateTime, default=datetime.utcnow, nullable=False)

    page = relationship("Page", back_populates="attachments")
