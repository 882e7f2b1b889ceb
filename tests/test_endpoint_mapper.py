from __future__ import annotations

from probridge.services.endpoint_mapper import ROUTES, map_command
from probridge.services.paths import extract_uuid, library_path, presentation_identity
from probridge.state.bridge_state import BridgeState


def _map(command, state=None):
    return map_command(command, state or BridgeState())


def test_library_path_uuid_is_a_fixed_point():
    for composite in (
        library_path("Default", "Sunday Service", "abc-123"),
        "OpenAPI/Libraries/Songs/With/Slashes/u-1",
        "plain-uuid",
    ):
        once = extract_uuid(composite)
        assert extract_uuid(once) == once

    assert extract_uuid("OpenAPI/Libraries/Default/Sunday/abc-123") == "abc-123"


def test_presentation_uuid_wins_over_path():
    command = {
        "presentationUUID": "real-uuid",
        "presentationPath": "OpenAPI/Libraries/Default/Song/item-uuid",
    }
    assert presentation_identity(command) == "real-uuid"
    assert presentation_identity({"presentationPath": "OpenAPI/Libraries/A/B/p-1"}) == "p-1"
    assert presentation_identity({}) is None


def test_presentation_request_paths():
    assert _map({"action": "presentationRequest"}).path == "/v1/presentation/active"

    endpoint = _map(
        {"action": "presentationRequest", "presentationPath": "OpenAPI/Libraries/L/N/u-9"}
    )
    assert endpoint.method == "GET"
    assert endpoint.path == "/v1/presentation/u-9"
    assert endpoint.handler is not None


def test_trigger_routes_to_presentation_or_announcement():
    endpoint = _map(
        {"action": "presentationTriggerIndex", "presentationPath": "p-1", "slideIndex": 4}
    )
    assert endpoint.path == "/v1/presentation/p-1/4/trigger"

    assert _map({"action": "presentationTriggerIndex"}).path == "/v1/presentation/active/trigger"

    # the announcement layer never takes a uuid
    endpoint = _map(
        {
            "action": "presentationTriggerIndex",
            "presentationPath": "p-1",
            "presentationDestination": "1",
            "slideIndex": 2,
        }
    )
    assert endpoint.path == "/v1/announcement/active/2/trigger"

    endpoint = _map({"action": "presentationTriggerIndex", "presentationDestination": 1})
    assert endpoint.path == "/v1/announcement/active/trigger"


def test_clear_all_needs_the_resolved_group():
    state = BridgeState()
    assert _map({"action": "clearAll"}, state).path is None

    state.resolve_clear_all("group-1")
    assert _map({"action": "clearAll"}, state).path == "/v1/clear/group/group-1/trigger"


def test_clear_layers():
    expected = {
        "clearAudio": "audio",
        "clearMessages": "messages",
        "clearProps": "props",
        "clearAnnouncements": "announcements",
        "clearText": "messages",
        "clearVideo": "media",
        "clearSlide": "slide",
    }
    for action, layer in expected.items():
        assert _map({"action": action}).path == f"/v1/clear/layer/{layer}"


def test_audio_cue_needs_playlist_and_item():
    endpoint = _map({"action": "audioStartCue", "audioChildPath": "pl-1:item-2"})
    assert endpoint.path == "/v1/audio/playlist/pl-1/item-2/trigger"

    assert _map({"action": "audioStartCue", "audioChildPath": "pl-1"}).path is None
    assert _map({"action": "audioStartCue"}).path is None


def test_clock_update_body_by_type():
    countdown = _map(
        {
            "action": "clockUpdate",
            "clockIndex": "t-1",
            "clockType": "0",
            "clockName": "Walk-in",
            "clockTime": "00:05:00",
            "clockOverrun": "1",
        }
    )
    assert countdown.method == "PUT"
    assert countdown.path == "/v1/timer/t-1"
    assert countdown.body == {
        "name": "Walk-in",
        "type": "countdown",
        "duration": "00:05:00",
        "allows_overrun": True,
    }

    to_time = _map(
        {
            "action": "clockUpdate",
            "clockIndex": "t-2",
            "clockType": 1,
            "clockName": "Doors",
            "clockElapsedTime": "18:30:00",
        }
    )
    assert to_time.body == {"name": "Doors", "type": "countdown_to_time", "time_of_day": "18:30:00"}

    elapsed = _map({"action": "clockUpdate", "clockIndex": "t-3", "clockType": "2", "clockName": "Up"})
    assert elapsed.body == {"name": "Up", "type": "elapsed"}


def test_clock_commands_without_index_are_not_ready():
    assert _map({"action": "clockStart", "clockIndex": "7"}).path == "/v1/timer/7/start"
    assert _map({"action": "clockReset", "clockIndex": 0}).path == "/v1/timer/0/reset"
    assert _map({"action": "clockStop"}).path is None


def test_message_send_zips_keys_and_values():
    endpoint = _map(
        {
            "action": "messageSend",
            "messageIndex": "m-1",
            "messageKeys": ["Name", "Room"],
            "messageValues": ["Alex", "B12"],
        }
    )
    assert endpoint.method == "POST"
    assert endpoint.path == "/v1/message/m-1/trigger"
    assert endpoint.body == {"Name": "Alex", "Room": "B12"}


def test_stage_commands():
    send = _map({"action": "stageDisplaySendMessage", "stageDisplayMessage": "Wrap up"})
    assert (send.method, send.path, send.body) == ("PUT", "/v1/stage/message", {"message": "Wrap up"})

    hide = _map({"action": "stageDisplayHideMessage"})
    assert (hide.method, hide.path) == ("DELETE", "/v1/stage/message")

    layout = _map(
        {"action": "stageDisplayChangeLayout", "stageScreenUUID": "s-1", "stageLayoutUUID": "l-2"}
    )
    assert layout.path == "/v1/stage/screen/s-1/layout/l-2"


def test_unknown_and_local_actions_map_to_nothing():
    assert _map({"action": "doesNotExist"}) is None
    assert _map({}) is None
    assert _map({"action": "authenticate"}) is None
    assert _map({"action": "clockStopSendingCurrentTime"}) is None


def test_every_route_resolves_without_io():
    state = BridgeState()
    for action, route in ROUTES.items():
        endpoint = map_command({"action": action}, state)
        if route is None:
            assert endpoint is None
        else:
            assert endpoint.method in ("GET", "PUT", "POST", "DELETE")
