from __future__ import annotations

from typing import List, Literal, Union

from pydantic import BaseModel, Field

PlaylistType = Literal["playlistTypePlaylist", "playlistTypeGroup"]

PlaylistItemType = Literal[
    "playlistItemTypePresentation",
    "playlistItemTypeHeader",
    "playlistItemTypePlaceholder",
    "playlistItemTypeVideo",
    "playlistItemTypeAudio",
]

ITEM_TYPES = {
    "presentation": "playlistItemTypePresentation",
    "header": "playlistItemTypeHeader",
    "placeholder": "playlistItemTypePlaceholder",
    "video": "playlistItemTypeVideo",
    "audio": "playlistItemTypeAudio",
}


def map_item_type(raw: str | None) -> str:
    return ITEM_TYPES.get(raw or "presentation", ITEM_TYPES["presentation"])


class PlaylistItem(BaseModel):
    playlistItemType: PlaylistItemType = "playlistItemTypePresentation"
    # unique per entry; duplicates of one presentation differ here
    playlistItemLocation: str = ""
    playlistItemName: str = ""
    playlistItemThumbnail: str = ""
    # the real presentation id, used for API calls
    presentationUUID: str = ""


class PlaylistNode(BaseModel):
    """
    A playlist (flat list of items) or a group (list of resolved child nodes).
    """

    playlistLocation: str = ""
    playlistName: str = ""
    playlistType: PlaylistType = "playlistTypePlaylist"
    playlist: List[Union[PlaylistItem, "PlaylistNode"]] = Field(default_factory=list)

    def is_group(self) -> bool:
        return self.playlistType == "playlistTypeGroup"

    def leaves(self) -> List["PlaylistNode"]:
        if not self.is_group():
            return [self]
        out: List[PlaylistNode] = []
        for child in self.playlist:
            if isinstance(child, PlaylistNode):
                out.extend(child.leaves())
        return out


class AudioPlaylistItem(BaseModel):
    # "<playlistUUID>:<itemUUID>", consumed by audioStartCue
    playlistItemLocation: str
    playlistItemName: str = ""
    playlistItemType: str = "audio"


class AudioPlaylist(BaseModel):
    playlistLocation: str
    playlistName: str = ""
    playlistType: PlaylistType = "playlistTypePlaylist"
    playlist: List[AudioPlaylistItem] = Field(default_factory=list)
    playlistIndex: int = 0


PlaylistNode.model_rebuild()
