"""
Outfit scan, detected item and analysis process models.
"""
from sqlalchemy import Column, Integer, String, Text, JSON, DateTime, ForeignKey, Index

from .base import Base, TimestampMixin


class OutfitScan(TimestampMixin, Base):
    """One-shot image analysis result"""
    __tablename__ = "outfit_scans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    image_path = Column(String(512), nullable=False)
    vision = Column(JSON, nullable=True)
    analysis = Column(JSON, nullable=True)
    score = Column(Integer, nullable=True)


class OutfitAnalysisProcess(TimestampMixin, Base):
    """Audit record of one end-to-end analysis attempt"""
    __tablename__ = "outfit_analysis_processes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = Column(String(32), nullable=False)  # scan_analyze | chat_analyze
    status = Column(String(32), nullable=False, default="processing")

    image_path = Column(String(512), nullable=True)
    intake = Column(JSON, nullable=True)
    ai_preferences = Column(JSON, nullable=True)

    vision = Column(JSON, nullable=True)
    analysis = Column(JSON, nullable=True)
    context_feedback = Column(JSON, nullable=True)
    assistant_text = Column(Text, nullable=True)
    timings = Column(JSON, nullable=True)

    chat_session_id = Column(Integer, ForeignKey("outfit_chat_sessions.id", ondelete="SET NULL"), nullable=True)
    scan_id = Column(Integer, ForeignKey("outfit_scans.id", ondelete="SET NULL"), nullable=True)

    error_status = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)

    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)


class OutfitDetectedItem(TimestampMixin, Base):
    """Garment label extracted from a vision call"""
    __tablename__ = "outfit_detected_items"
    __table_args__ = (
        Index("ix_detected_items_source", "user_id", "source_type", "source_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    source_type = Column(String(32), nullable=False)  # scan | chat_session
    source_id = Column(Integer, nullable=False)
    process_id = Column(Integer, ForeignKey("outfit_analysis_processes.id", ondelete="SET NULL"), nullable=True)
    label = Column(String(255), nullable=False)
    category = Column(String(64), nullable=True)
    colors = Column(JSON, nullable=True)
    meta = Column(JSON, nullable=True)
