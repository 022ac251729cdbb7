"""Favicon model."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from aicon.database import Base


class Favicon(Base):
    """Favicon record: one source image and its generation lifecycle."""

    __tablename__ = "favicons"
    __table_args__ = (
        CheckConstraint("source_type IN ('UPLOAD', 'CANVAS')", name="ck_favicons_source_type"),
        CheckConstraint(
            "generation_status IN ('PENDING', 'SUCCESS', 'FAILED')",
            name="ck_favicons_generation_status",
        ),
        Index("idx_favicons_hash_size", "source_hash", "source_size"),
    )

    id = Column(String(32), primary_key=True)
    slug = Column(String(32), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=True)
    target_domain = Column(String(256), nullable=True, index=True)
    published_url = Column(String(64), nullable=False, index=True)
    source_type = Column(String(16), nullable=False)
    source_original_mime = Column(String(100), nullable=True)
    # Content fingerprint, null for records created before dedup existed
    source_hash = Column(String(32), nullable=True)
    source_size = Column(Integer, nullable=True)
    is_published = Column(Boolean, nullable=False, default=True, index=True)
    generation_status = Column(String(16), nullable=False, default="PENDING")
    # Status: PENDING, SUCCESS, FAILED
    generation_error = Column(Text, nullable=True)
    embedded_metadata = Column(String(256), nullable=True)
    has_steganography = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    generated_at = Column(DateTime, nullable=True)

    # Relationships
    assets = relationship(
        "FaviconAsset",
        back_populates="favicon",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FaviconAsset.created_at",
    )

    def __repr__(self):
        return f"<Favicon(id={self.id}, slug={self.slug}, status={self.generation_status})>"
