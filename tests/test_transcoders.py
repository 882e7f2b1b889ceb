from __future__ import annotations

import asyncio

import httpx

from probridge.services.transcoders.audio import (
    emit_audio_current,
    toggle_play_pause,
    transcode_audio_playlists,
)
from probridge.services.transcoders.clock import transcode_clock_times, transcode_clocks
from probridge.services.transcoders.library import transcode_library
from probridge.services.transcoders.message import transcode_messages
from probridge.services.transcoders.playlist import resolve_node, transcode_playlists
from probridge.services.transcoders.presentation import transcode_presentation
from probridge.services.transcoders.stage import transcode_stage_display


def _run(coro):
    return asyncio.run(coro)


# =========================
# PRESENTATION
# =========================


def test_slide_indices_are_global_across_groups(sink, make_ctx):
    raw = {
        "presentation": {
            "id": {"uuid": "p-1", "name": "Amazing Grace"},
            "groups": [
                {"name": "Verse", "color": {"red": 1, "green": 0, "blue": 0.5}, "slides": [{}, {}]},
                {"name": "Chorus", "color": "#00FF00", "slides": [{"text": "x"}]},
                {"name": "Tag", "color": {"hex": "#123456"}, "slides": [{}, {}, {"enabled": False}]},
            ],
        }
    }

    async def _go():
        ctx = make_ctx()
        await transcode_presentation(ctx, raw, {"action": "presentationRequest", "presentationPath": "p-1"})
        return ctx

    ctx = _run(_go())

    (message,) = sink.messages
    groups = message["presentation"]["presentationSlideGroups"]
    assert [s["slideIndex"] for g in groups for s in g["groupSlides"]] == [0, 1, 2, 3, 4, 5]
    assert [g["groupColor"] for g in groups] == ["#ff0080", "#00FF00", "#123456"]
    assert groups[2]["groupSlides"][2]["slideEnabled"] is False
    assert groups[1]["groupSlides"][0]["slideImage"] == (
        "http://propresenter.test:50001/v1/presentation/p-1/thumbnail/2?quality=200"
    )
    assert "presentationDestination" not in message["presentation"]
    assert ctx.state.presentations["p-1"].slide_count() == 6


def test_presentation_without_groups_gets_one_implicit_group(sink, make_ctx):
    raw = {"presentation": {"id": {"uuid": "p-2"}, "groups": [], "slide_count": 3}}

    async def _go():
        ctx = make_ctx(thumbnail_base_url="https://public.example/pp")
        await transcode_presentation(ctx, raw, {"presentationSlideQuality": "400"})

    _run(_go())

    (group,) = sink.messages[0]["presentation"]["presentationSlideGroups"]
    assert [s["slideIndex"] for s in group["groupSlides"]] == [0, 1, 2]
    assert group["groupSlides"][1]["slideImage"] == (
        "https://public.example/pp/v1/presentation/p-2/thumbnail/1?quality=400"
    )


def test_presentation_showing_on_announcement_layer_is_tagged(sink, make_ctx):
    async def _go():
        ctx = make_ctx()
        ctx.state.current_announcement_uuid = "ann"
        await transcode_presentation(ctx, {"presentation": {"id": {"uuid": "ann"}}}, {})

    _run(_go())
    assert sink.messages[0]["presentation"]["presentationDestination"] == 1


# =========================
# LIBRARY / PLAYLISTS
# =========================


def test_library_fans_out_and_keeps_library_order(fake_pp, sink, make_ctx):
    fake_pp.get(
        "/v1/library/lib-a",
        {"items": [{"id": {"uuid": "a1", "name": "Song A1"}}, {"id": {"uuid": "a2", "name": "Song A2"}}]},
    )
    fake_pp.get("/v1/library/lib-b", 500)
    fake_pp.get("/v1/library/lib-c", {"items": [{"id": {"uuid": "c1", "name": "Song C1"}}]})

    libraries = [
        {"uuid": "lib-a", "name": "Alpha"},
        {"uuid": "lib-b", "name": "Broken"},
        {"uuid": "lib-c", "name": "Gamma"},
    ]

    async def _go():
        await transcode_library(make_ctx(), libraries, {})

    _run(_go())

    assert sink.messages == [
        {
            "action": "libraryRequest",
            "library": [
                "OpenAPI/Libraries/Alpha/Song A1/a1",
                "OpenAPI/Libraries/Alpha/Song A2/a2",
                "OpenAPI/Libraries/Gamma/Song C1/c1",
            ],
        }
    ]


def test_playlist_tree_keeps_every_leaf(fake_pp, sink, make_ctx):
    fake_pp.get(
        "/v1/playlist/pl-1",
        {
            "items": [
                {"id": {"uuid": "i-1", "name": "Welcome"}, "type": "presentation",
                 "presentation_info": {"presentation_uuid": "p-1"}},
                {"id": {"uuid": "i-2", "name": "Worship"}, "type": "header"},
            ]
        },
    )
    fake_pp.get("/v1/playlist/pl-2", 500)

    def _refuse(request):
        raise httpx.ConnectError("refused", request=request)

    fake_pp.get("/v1/playlist/pl-4", _refuse)
    fake_pp.get("/v1/playlist/pl-3", {"items": []})

    tree = [
        {"id": {"uuid": "pl-1", "name": "Sunday"}, "field_type": "playlist"},
        {
            "id": {"uuid": "g-1", "name": "Events"},
            "field_type": "group",
            "children": [
                {"id": {"uuid": "pl-2", "name": "Broken"}, "field_type": "playlist"},
                {
                    "id": {"uuid": "g-2", "name": "Nested"},
                    "field_type": "group",
                    "children": [
                        {"id": {"uuid": "pl-3", "name": "Empty"}, "field_type": "playlist"},
                        {"id": {"uuid": "pl-4", "name": "Offline"}, "field_type": "playlist"},
                    ],
                },
            ],
        },
        {"field_type": "playlist", "name": "no id"},
    ]

    async def _go():
        await transcode_playlists(make_ctx(), tree, {})

    _run(_go())

    (message,) = sink.messages
    top = message["playlistAll"]
    assert [p["playlistName"] for p in top] == ["Sunday", "Events"]

    sunday = top[0]
    assert [i["playlistItemType"] for i in sunday["playlist"]] == [
        "playlistItemTypePresentation",
        "playlistItemTypeHeader",
    ]
    assert sunday["playlist"][0]["presentationUUID"] == "p-1"
    assert sunday["playlist"][0]["playlistItemLocation"] == "i-1"

    events = top[1]
    assert events["playlistType"] == "playlistTypeGroup"
    broken, nested = events["playlist"]
    assert broken["playlist"] == []
    assert [c["playlistName"] for c in nested["playlist"]] == ["Empty", "Offline"]
    assert [c["playlist"] for c in nested["playlist"]] == [[], []]


def test_bad_playlist_nodes_are_skipped_without_failing_the_tree(fake_pp, sink, make_ctx):
    fake_pp.get("/v1/playlist/pl-1", {"items": []})
    tree = [
        {"id": {"uuid": "pl-1", "name": "Sunday"}, "field_type": "playlist"},
        {"field_type": "playlist", "name": "no id"},
        {"id": {"uuid": "x-1", "name": "Odd"}, "field_type": "smart_folder"},
    ]

    async def _go():
        await transcode_playlists(make_ctx(), tree, {})

    _run(_go())

    (message,) = sink.of("playlistRequestAll")
    assert [p["playlistName"] for p in message["playlistAll"]] == ["Sunday"]


def test_group_resolves_to_every_nested_leaf(fake_pp, make_ctx):
    fake_pp.get("/v1/playlist/pl-1", {"items": [{"id": {"uuid": "i-1", "name": "Welcome"}}]})
    fake_pp.get("/v1/playlist/pl-2", 500)
    group = {
        "id": {"uuid": "g-1", "name": "Events"},
        "field_type": "group",
        "children": [
            {"id": {"uuid": "pl-1", "name": "Ok"}, "field_type": "playlist"},
            {
                "id": {"uuid": "g-2", "name": "Nested"},
                "field_type": "group",
                "children": [
                    {"id": {"uuid": "pl-2", "name": "Broken"}, "field_type": "playlist"},
                    {"id": {"uuid": "pl-3", "name": "Missing"}, "field_type": "playlist"},
                ],
            },
        ],
    }

    node = _run(resolve_node(make_ctx(), group))

    assert node.is_group()
    leaves = node.leaves()
    assert [leaf.playlistName for leaf in leaves] == ["Ok", "Broken", "Missing"]
    assert [len(leaf.playlist) for leaf in leaves] == [1, 0, 0]
    assert not any(leaf.is_group() for leaf in leaves)


# =========================
# AUDIO
# =========================


def test_audio_playlists_sorted_by_backend_index(fake_pp, sink, make_ctx):
    fake_pp.get("/v1/audio/playlist/ap-2", {"items": [{"id": {"uuid": "s-1", "name": "Intro"}, "type": "audio"}]})
    fake_pp.get("/v1/audio/playlist/ap-1", {"items": []})
    fake_pp.get("/v1/audio/playlist/ap-3", 500)

    data = [
        {"id": {"uuid": "ap-2", "name": "Second", "index": 1}},
        {"id": {"uuid": "ap-3", "name": "Broken", "index": 2}},
        {"id": {"uuid": "ap-1", "name": "First", "index": 0}},
    ]

    async def _go():
        await transcode_audio_playlists(make_ctx(), data, {})

    _run(_go())

    playlists = sink.messages[0]["audioPlaylist"]
    assert [p["playlistName"] for p in playlists] == ["First", "Second"]
    assert playlists[1]["playlist"][0]["playlistItemLocation"] == "ap-2:s-1"


def test_audio_current_dedup_per_field(sink, make_ctx):
    ctx = make_ctx()
    track = {"uuid": "u", "name": "Song", "artist": "Band"}

    emit_audio_current(ctx, track)
    emit_audio_current(ctx, dict(track))
    assert len(sink.messages) == 1

    emit_audio_current(ctx, dict(track, artist="Other Band"))
    assert len(sink.messages) == 2

    emit_audio_current(ctx, {})
    emit_audio_current(ctx, None)
    assert sink.messages[-1] == {"action": "audioCurrentSong", "audioName": "", "audioArtist": ""}
    assert len(sink.messages) == 3


def test_play_pause_reads_transport_back(fake_pp, sink, make_ctx):
    fake_pp.get("/v1/transport/audio/pause", 204)
    fake_pp.get("/v1/transport/audio/current", {"name": "Song", "is_playing": False})

    async def _go():
        await toggle_play_pause(make_ctx(), {"name": "Song", "is_playing": True}, {})

    _run(_go())

    assert fake_pp.calls == [("GET", "/v1/transport/audio/pause"), ("GET", "/v1/transport/audio/current")]
    assert sink.messages == [{"action": "audioIsPlaying", "audioIsPlaying": "Pause"}]


# =========================
# CLOCKS / MESSAGES / STAGE
# =========================


def test_clocks_and_current_times(sink, make_ctx):
    timers = [
        {"id": {"uuid": "t-1", "name": "Countdown"}, "type": "countdown", "duration": "00:10:00",
         "allows_overrun": True, "is_running": True},
        {"id": {"uuid": "t-2", "name": "Doors"}, "type": "countdown_to_time"},
        {"id": {"uuid": "t-3", "name": "Service"}},
    ]

    async def _go():
        ctx = make_ctx()
        await transcode_clocks(ctx, timers, {})
        await transcode_clock_times(ctx, [{"id": {"uuid": "t-1"}, "time": "00:09:59"}], {})
        await transcode_clock_times(ctx, {"unexpected": True}, {})

    _run(_go())

    clocks = sink.messages[0]["clockInfo"]
    assert [c["clockType"] for c in clocks] == ["0", "1", "2"]
    assert [c["clockIndex"] for c in clocks] == ["t-1", "t-2", "t-3"]
    assert clocks[0]["clockOverrun"] is True and clocks[0]["clockState"] is True
    assert sink.messages[1] == {
        "action": "clockCurrentTimes",
        "clockTimes": [{"clockTime": "00:09:59", "clockIndex": "t-1"}],
    }
    assert len(sink.messages) == 2


def test_messages(sink, make_ctx):
    async def _go():
        await transcode_messages(
            make_ctx(), [{"id": {"uuid": "m-1", "name": "Parking"}, "tokens": [{"name": "Plate"}]}], {}
        )

    _run(_go())
    assert sink.messages[0]["messages"] == [
        {"messageIndex": "m-1", "messageName": "Parking", "messageComponents": [{"name": "Plate"}]}
    ]


def test_stage_display_without_layouts(fake_pp, sink, make_ctx):
    fake_pp.get("/v1/stage/layouts", 500)
    screens = [{"id": {"uuid": "s-1", "name": "Stage Left"}, "layout_id": {"uuid": "l-9"}}]

    async def _go():
        await transcode_stage_display(make_ctx(), screens, {})

    _run(_go())
    assert sink.messages == [
        {
            "action": "stageDisplaySets",
            "stageScreens": [
                {"stageScreenUUID": "s-1", "stageScreenName": "Stage Left", "stageLayoutSelectedLayoutUUID": "l-9"}
            ],
            "stageLayouts": [],
        }
    ]
