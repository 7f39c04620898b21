from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from exam_engine.core.database import Base


class UserAchievement(Base):
    __tablename__ = "user_achievements"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    achievement_type = Column(String(32), nullable=False)
    achievement_name = Column(String(100), nullable=False)
    achievement_description = Column(Text)
    exam_id = Column(String(64))
    earned_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "achievement_type", name="uq_user_achievement_type"),
    )
