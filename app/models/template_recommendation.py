from sqlalchemy import DECIMAL, JSON, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class TemplateRecommendation(Base):
    __tablename__ = "template_recommendations"

    template_id = Column(String(36), ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)
    trainee_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    coach_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(DECIMAL(5, 2), nullable=False)
    confidence = Column(DECIMAL(5, 2), nullable=False)
    reason = Column(Text, nullable=False)
    matching_details = Column(JSON, nullable=False)
    viewed = Column(Boolean, default=False, nullable=False)
    accepted = Column(Boolean, default=False, nullable=False)
    dismissed = Column(Boolean, default=False, nullable=False)
    coach_feedback = Column(Text)
    is_auto_generated = Column(Boolean, default=True, nullable=False)
    expires_at = Column(DateTime)
    viewed_at = Column(DateTime)
    accepted_at = Column(DateTime)
    dismissed_at = Column(DateTime)

    template = relationship("Template")
    trainee = relationship("User", foreign_keys=[trainee_id])
    coach = relationship("User", foreign_keys=[coach_id])
