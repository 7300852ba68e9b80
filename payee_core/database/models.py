"""SQLAlchemy models for classification database."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.ext.declarative import declarative_base

Base = declarative_base()


class PayeeClassificationRecord(Base):
    """Model for storing one classified payee row.

    A row is identified by (payee_name, row_index, batch_id); saving the
    same batch again updates the existing rows in place.
    """

    __tablename__ = "payee_classifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    batch_id = Column(String(36), nullable=False, default="", index=True)  # "" for ad-hoc saves
    payee_name = Column(String(500), nullable=False, index=True)
    row_index = Column(Integer, nullable=False)
    classification = Column(String(20), nullable=False)  # Business / Individual
    confidence = Column(Integer, nullable=False)
    processing_tier = Column(String(20), nullable=False)
    processing_method = Column(String(100), nullable=True)
    reasoning = Column(Text, nullable=True)
    matching_rules = Column(JSON, nullable=True)
    keyword_exclusion = Column(JSON, nullable=True)
    similarity_scores = Column(JSON, nullable=True)
    sic_code = Column(String(4), nullable=True)
    sic_description = Column(String(255), nullable=True)
    original_data = Column(JSON, nullable=True)
    classified_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("payee_name", "row_index", "batch_id", name="uq_payee_row_batch"),
        Index("idx_payee_sic", "payee_name", "sic_code"),
    )

    def __repr__(self):
        return (
            f"<PayeeClassificationRecord(payee={self.payee_name}, row={self.row_index}, "
            f"classification={self.classification})>"
        )


class ExclusionKeyword(Base):
    """Model for custom exclusion keywords managed by users."""

    __tablename__ = "exclusion_keywords"

    id = Column(Integer, primary_key=True, autoincrement=True)
    keyword = Column(String(100), nullable=False, unique=True, index=True)  # Uppercase, trimmed
    category = Column(String(50), nullable=False, default="custom")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "keyword": self.keyword,
            "category": self.category,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<ExclusionKeyword(keyword={self.keyword}, active={self.is_active})>"
