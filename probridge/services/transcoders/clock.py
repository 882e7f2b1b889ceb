from __future__ import annotations

from typing import Any, Dict

from probridge.models.controls import CLOCK_TYPES, Clock, ClockTime
from probridge.models.events import ClockCurrentTimesMessage, ClockRequestMessage
from probridge.services.context import BridgeContext
from probridge.services.paths import id_of


def _text(value: Any, default: str) -> str:
    return default if value in (None, "") else str(value)


async def transcode_clocks(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    clocks = []
    for i, timer in enumerate(data if isinstance(data, list) else []):
        if not isinstance(timer, dict):
            continue
        ident = timer.get("id") if isinstance(timer.get("id"), dict) else {}
        clocks.append(
            Clock(
                clockName=timer.get("name") or ident.get("name") or f"Timer {i}",
                clockDuration=_text(timer.get("duration"), "00:00:00"),
                clockEndTime=_text(timer.get("end_time"), ""),
                clockTime=_text(timer.get("current_time"), "00:00:00"),
                clockOverrun=bool(timer.get("allows_overrun")),
                clockIndex=id_of(timer, str(i)),
                clockType=CLOCK_TYPES.get(timer.get("type"), "2"),
                clockState=bool(timer.get("is_running")),
            )
        )
    ctx.synth.emit(ClockRequestMessage(clockInfo=clocks))


async def transcode_clock_times(ctx: BridgeContext, data: Any, command: Dict[str, Any]) -> None:
    if not isinstance(data, list):
        return
    ctx.synth.emit(
        ClockCurrentTimesMessage(
            clockTimes=[
                ClockTime(clockTime=_text(t.get("time"), "00:00:00"), clockIndex=id_of(t, "0"))
                for t in data
                if isinstance(t, dict)
            ]
        )
    )
