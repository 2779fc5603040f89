from enum import Enum
from typing import Optional
import datetime

from pydantic import BaseModel, Field


class ChangelogCategory(str, Enum):
    FEATURES = "Features"
    IMPROVEMENTS = "Improvements"
    BUG_FIXES = "Bug Fixes"
    PERFORMANCE = "Performance"
    SECURITY = "Security"


class ChangelogEntry(BaseModel):
    id: int
    version: str
    title: str
    category: ChangelogCategory
    content: str
    releaseDate: Optional[datetime.date] = Field(default=None)

    model_config = {"frozen": True}
