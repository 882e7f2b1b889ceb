from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from probridge.models.controls import Clock, ClockTime, Message, StageLayout, StageScreen
from probridge.models.playlist import AudioPlaylist, PlaylistNode
from probridge.models.presentation import Presentation

# Classic message vocabulary delivered to the remote.


class AuthenticateMessage(BaseModel):
    action: Literal["authenticate"] = "authenticate"
    authenticated: str = "1"


class LibraryMessage(BaseModel):
    action: Literal["libraryRequest"] = "libraryRequest"
    library: List[str] = Field(default_factory=list)


class PlaylistAllMessage(BaseModel):
    action: Literal["playlistRequestAll"] = "playlistRequestAll"
    playlistAll: List[PlaylistNode] = Field(default_factory=list)


class AudioPlaylistMessage(BaseModel):
    action: Literal["audioRequest"] = "audioRequest"
    audioPlaylist: List[AudioPlaylist] = Field(default_factory=list)


class AudioCurrentSongMessage(BaseModel):
    action: Literal["audioCurrentSong"] = "audioCurrentSong"
    audioName: str = ""
    audioArtist: str = ""
    audioUuid: Optional[str] = None


class PresentationCurrentMessage(BaseModel):
    action: Literal["presentationCurrent"] = "presentationCurrent"
    presentationPath: str
    presentation: Presentation
    presentationUUID: Optional[str] = None


class SlideIndexMessage(BaseModel):
    action: Literal["presentationSlideIndex"] = "presentationSlideIndex"
    slideIndex: int
    presentationPath: Optional[str] = None


class TriggerIndexMessage(BaseModel):
    action: Literal["presentationTriggerIndex"] = "presentationTriggerIndex"
    slideIndex: Union[int, str] = "0"
    presentationPath: str = ""
    presentationDestination: Union[int, str] = 0


class ClockRequestMessage(BaseModel):
    action: Literal["clockRequest"] = "clockRequest"
    clockInfo: List[Clock] = Field(default_factory=list)


class ClockCurrentTimesMessage(BaseModel):
    action: Literal["clockCurrentTimes"] = "clockCurrentTimes"
    clockTimes: List[ClockTime] = Field(default_factory=list)


class MessageRequestMessage(BaseModel):
    action: Literal["messageRequest"] = "messageRequest"
    messages: List[Message] = Field(default_factory=list)


class StageDisplaySetsMessage(BaseModel):
    action: Literal["stageDisplaySets"] = "stageDisplaySets"
    stageScreens: List[StageScreen] = Field(default_factory=list)
    stageLayouts: List[StageLayout] = Field(default_factory=list)
