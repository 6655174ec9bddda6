from sqlalchemy import Column, Integer, String, DateTime, LargeBinary
from datetime import datetime
from app.core.database import Base

class StoredFile(Base):
    __tablename__ = "files"

    id = Column(String, primary_key=True)  # = Attachment.file_id
    filename = Column(String, nullable=False)
    mime_type = Column(String, nullable=False)
    length = Column(Integer, nullable=False, default=0)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    data = Column(LargeBinary, nullable=False)
