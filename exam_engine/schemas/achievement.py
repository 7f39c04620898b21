from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class AchievementType(str, Enum):
    PERFECT_SCORE = "perfect_score"
    FIRST_EXAM = "first_exam"
    SPEED_DEMON = "speed_demon"


class Achievement(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    user_id: str
    type: AchievementType
    name: str
    description: str
    exam_id: Optional[str] = None
    earned_at: datetime
