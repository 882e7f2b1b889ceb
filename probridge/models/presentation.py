from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

# presentationDestination values understood by the remote
DESTINATION_PRESENTATION = 0
DESTINATION_ANNOUNCEMENT = 1


class Slide(BaseModel):
    slideEnabled: bool = True
    slideNotes: str = ""
    slideText: str = ""
    slideLabel: Optional[str] = None
    slideImage: str = ""
    # global position inside the presentation, not inside the group
    slideIndex: int


class SlideGroup(BaseModel):
    groupName: str = ""
    groupColor: str = ""
    groupSlides: List[Slide] = Field(default_factory=list)


class Presentation(BaseModel):
    presentationName: str = ""
    presentationPath: str
    presentationSlideGroups: List[SlideGroup] = Field(default_factory=list)
    presentationDestination: Optional[int] = None

    def slide_count(self) -> int:
        return sum(len(g.groupSlides) for g in self.presentationSlideGroups)
