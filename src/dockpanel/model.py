"""
Data models for dockpanel.

Data Classes:
  - ContainerInfo / ImageInfo / VolumeInfo / NetworkInfo: one record of a
    resource listing, as projected from the engine's list endpoint
  - ConnectionConfig: host URI plus optional mutual-TLS material
  - ContainerSpec: everything the run-container dialog collects
  - StatsSample: the counters of one one-shot stats read
  - Selection: what the user picked in a panel
"""

from dataclasses import dataclass, field
from typing import Dict, List

DEFAULT_DOCKER_HOST = "unix:///var/run/docker.sock"


@dataclass
class ContainerInfo:
    id: str
    image: str
    status: str
    name: str = ""

    @property
    def key(self) -> str:
        return self.id


@dataclass
class ImageInfo:
    id: str
    tags: List[str]
    size: int

    @property
    def key(self) -> str:
        return self.id


@dataclass
class VolumeInfo:
    name: str
    driver: str
    mountpoint: str

    @property
    def key(self) -> str:
        return self.name


@dataclass
class NetworkInfo:
    id: str
    name: str
    scope: str
    driver: str

    @property
    def key(self) -> str:
        return self.id


@dataclass
class ConnectionConfig:
    host: str = DEFAULT_DOCKER_HOST
    ca_cert: str = ""
    client_cert: str = ""
    client_key: str = ""
    timeout: int = 60

    def uses_tls(self) -> bool:
        # Partial TLS material is ignored rather than rejected.
        return bool(self.ca_cert and self.client_cert and self.client_key)


@dataclass
class ContainerSpec:
    image: str
    command: List[str] = field(default_factory=list)
    environment: List[str] = field(default_factory=list)
    ports: Dict[str, str] = field(default_factory=dict)  # "80/tcp" -> "8080"
    mem_limit: int = 0  # bytes, 0 = unlimited
    cpu_shares: int = 0
    privileged: bool = False


@dataclass
class StatsSample:
    cpu_total: int = 0
    precpu_total: int = 0
    system_total: int = 0
    presystem_total: int = 0
    online_cpus: int = 1
    mem_usage: int = 0
    mem_limit: int = 0


@dataclass
class Selection:
    index: int = -1
    key: str = ""

    @property
    def is_empty(self) -> bool:
        return self.index < 0

