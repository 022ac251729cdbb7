"""Favicon asset model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from aicon.database import Base


class FaviconAsset(Base):
    """One generated variant stored in the content store."""

    __tablename__ = "favicon_assets"

    id = Column(String(32), primary_key=True)
    favicon_id = Column(String(32), ForeignKey("favicons.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(16), nullable=False)  # PNG, ICO, SVG
    size = Column(String(16), nullable=True)  # 32x32, MULTI
    format = Column(String(8), nullable=False)  # .png, .ico
    storage_key = Column(String(1000), nullable=False)
    mime_type = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    favicon = relationship("Favicon", back_populates="assets")

    def __repr__(self):
        return f"<FaviconAsset(id={self.id}, size={self.size}, favicon_id={self.favicon_id})>"
