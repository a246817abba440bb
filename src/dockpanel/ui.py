"""
Display line formatting for the resource panels and viewers.

Rows are single-line `Field:value | Field:value` summaries with a fixed field
order per resource kind. They are meant for reading only: values are not
escaped, so a `|` inside a value is indistinguishable from a separator.
"""

from typing import Any, Dict

from .model import ContainerInfo, ImageInfo, NetworkInfo, VolumeInfo

SHORT_ID = 12


def short_id(value: str) -> str:
    return value[:SHORT_ID]


def short_image_id(image_id: str) -> str:
    """`sha256:0123456789abcdef...` -> `0123456789ab`."""
    if len(image_id) <= SHORT_ID:
        return ""
    return image_id.split(':', 1)[-1][:SHORT_ID]


def format_container_row(c: ContainerInfo) -> str:
    return f"ID:{short_id(c.id)} | Image:{c.image} | Status:{c.status}"


def format_image_row(i: ImageInfo) -> str:
    tags = " ".join(i.tags)
    return f"ID:{short_image_id(i.id)} | Tags:[{tags}] | Size:{i.size}"


def format_volume_row(v: VolumeInfo) -> str:
    return f"Name:{v.name} | Driver:{v.driver} | Mountpoint:{v.mountpoint}"


def format_network_row(n: NetworkInfo) -> str:
    return f"Name:{n.name} | ID:{short_id(n.id)} | Scope:{n.scope} | Driver:{n.driver}"


def format_inspect(info: Dict[str, Any]) -> str:
    config = info.get('Config') or {}
    state = info.get('State') or {}
    state_text = " ".join(f"{k}={v}" for k, v in state.items())
    return (
        f"ID: {info.get('Id', '')}\n"
        f"Image: {info.get('Image', '')}\n"
        f"Cmd: {config.get('Cmd')}\n"
        f"State: {state_text}\n"
    )
