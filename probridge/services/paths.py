from __future__ import annotations

from typing import Any, Dict, Optional

# Classic libraries are file paths; OpenAPI ones are faked as
# "OpenAPI/Libraries/<library>/<presentation>/<uuid>".
LIBRARY_PATH_PREFIX = "OpenAPI/Libraries/"

ACTIVE = "active"


def library_path(library: str, presentation: str, uuid: str) -> str:
    return f"{LIBRARY_PATH_PREFIX}{library}/{presentation}/{uuid}"


def extract_uuid(identity: str) -> str:
    """Trailing uuid of a library path; anything else is returned as is."""
    if identity.startswith(LIBRARY_PATH_PREFIX):
        return identity.rsplit("/", 1)[-1]
    return identity


def presentation_identity(command: Dict[str, Any]) -> Optional[str]:
    """
    Which presentation a command points at.

    presentationUUID wins over presentationPath: duplicated playlist entries
    share the presentation but each carries its own item uuid in the path.
    """
    identity = command.get("presentationUUID") or command.get("presentationPath")
    if not identity:
        return None
    return extract_uuid(str(identity))


def requested_presentation_id(command: Dict[str, Any]) -> str:
    return presentation_identity(command) or ACTIVE


# =========================
# BACKEND FIELD ACCESS
# =========================


def id_of(obj: Any, default: str = "") -> str:
    """uuid from `{id: {uuid}}`, `{id: "<uuid>"}` or `{uuid}`."""
    if not isinstance(obj, dict):
        return default
    ident = obj.get("id")
    if isinstance(ident, dict):
        return str(ident.get("uuid") or default)
    if ident:
        return str(ident)
    return str(obj.get("uuid") or default)


def name_of(obj: Any, default: str = "") -> str:
    if not isinstance(obj, dict):
        return default
    ident = obj.get("id")
    if isinstance(ident, dict) and ident.get("name"):
        return str(ident["name"])
    return str(obj.get("name") or default)


def ref_uuid(ref: Any) -> str:
    if isinstance(ref, dict):
        return str(ref.get("uuid") or "")
    return str(ref or "")


def color_to_hex(color: Any) -> str:
    if not color:
        return ""
    if isinstance(color, str):
        return color
    if isinstance(color, dict):
        if color.get("hex"):
            return str(color["hex"])
        if all(k in color for k in ("red", "green", "blue")):
            channels = (color["red"], color["green"], color["blue"])
            return "#" + "".join(
                f"{max(0, min(255, round(float(c) * 255))):02x}" for c in channels
            )
    return ""
