from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field

ClockType = Literal["0", "1", "2"]

# backend timer type -> Classic clockType
CLOCK_TYPES: Dict[str, ClockType] = {
    "countdown": "0",
    "countdown_to_time": "1",
    "elapsed": "2",
}


class ClockFormat(BaseModel):
    clockTimePeriodFormat: int = 0  # 24h


class Clock(BaseModel):
    clockName: str
    clockDuration: str = "00:00:00"
    clockEndTime: str = ""
    clockTime: str = "00:00:00"
    clockFormat: ClockFormat = Field(default_factory=ClockFormat)
    clockIsPM: bool = False
    clockOverrun: bool = False
    clockIndex: str
    clockType: ClockType = "2"
    clockState: bool = False


class ClockTime(BaseModel):
    clockTime: str = "00:00:00"
    clockIndex: str = "0"


class Message(BaseModel):
    messageIndex: str
    messageName: str = ""
    messageComponents: List[Any] = Field(default_factory=list)


class StageScreen(BaseModel):
    stageScreenUUID: str = ""
    stageScreenName: str = ""
    stageLayoutSelectedLayoutUUID: str = ""


class StageLayout(BaseModel):
    stageLayoutUUID: str = ""
    stageLayoutName: str = ""
