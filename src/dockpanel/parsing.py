"""
Input syntax of the creation dialogs.

All parsers are lenient: a malformed entry is dropped, never reported.

  - env:   "KEY=value,FOO=bar"  -> ["KEY=value", "FOO=bar"]
  - ports: "8080:80,8443:443"   -> {"80/tcp": "8080", "443/tcp": "8443"}
  - command: whitespace separated words
  - memory (MB) / CPU shares: positive integers, otherwise omitted
"""

from typing import Dict, List

from .model import ContainerSpec


def parse_env(text: str) -> List[str]:
    # Entries are kept verbatim: no trimming, no escaping, "A=b=c" stays whole.
    if not text:
        return []
    return text.split(",")


def parse_ports(text: str) -> Dict[str, str]:
    bindings: Dict[str, str] = {}
    if not text:
        return bindings
    for entry in text.split(","):
        parts = entry.strip().split(":")
        if len(parts) != 2:
            continue
        host_port, container_port = parts
        bindings[f"{container_port}/tcp"] = host_port
    return bindings


def parse_command(text: str) -> List[str]:
    return text.split()


def parse_positive_int(text: str) -> int:
    """Return the integer in ``text`` if it is positive, else 0."""
    try:
        value = int(text.strip())
    except (ValueError, AttributeError):
        return 0
    return value if value > 0 else 0


def parse_memory_mb(text: str) -> int:
    """Memory limit in MB to bytes; 0 means unlimited."""
    return parse_positive_int(text) * 1024 * 1024


def build_container_spec(image: str, command: str = "", env: str = "", ports: str = "",
                         memory_mb: str = "", cpu_shares: str = "",
                         privileged: bool = False) -> ContainerSpec:
    return ContainerSpec(
        image=image.strip(),
        command=parse_command(command),
        environment=parse_env(env),
        ports=parse_ports(ports),
        mem_limit=parse_memory_mb(memory_mb),
        cpu_shares=parse_positive_int(cpu_shares),
        privileged=privileged,
    )
