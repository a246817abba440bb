"""
Docker API wrapper and backend operations.

This module provides a high-level interface to Docker operations via the
docker-py library. Every method issues its engine call(s) through a lease on
the current client of a ClientRegistry, so a reconnect never pulls the client
out from under a call in flight.

  - Listing resources (containers, images, volumes, networks) with one list
    call each, projected into model records
  - Container actions (start, stop, remove, inspect, logs, one-shot stats)
  - Creating resources (pull image, create volume/network, run container)

Error Handling:
  - docker-py and transport errors are logged and re-raised as EngineError
    (NotFoundError for 404s); callers decide how to surface them
  - No client connected -> EngineUnavailable

Key Classes:
  - DockerBackend: Main API wrapper over a ClientRegistry
"""

import logging
import functools
from typing import Any, Callable, Dict, List, Optional

import docker
import docker.errors
import requests

from .connection import ClientRegistry
from .errors import EngineError, NotFoundError
from .model import ContainerInfo, ContainerSpec, ImageInfo, NetworkInfo, StatsSample, VolumeInfo
from .stats import sample_from_raw

logger = logging.getLogger(__name__)

ALPINE_IMAGE = "alpine"
ALPINE_COMMAND = ["echo", "Hello from Alpine!"]


def engine_call(func: Callable) -> Callable:
    """
    Decorator for Docker API methods.

    Logs failures and converts docker-py/requests exceptions into EngineError
    so the UI handles a single exception family.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        try:
            return func(*args, **kwargs)
        except EngineError:
            raise
        except docker.errors.NotFound as e:
            logger.error(f"Docker operation failed in {func.__name__}: {e}")
            raise NotFoundError(_explain(e)) from e
        except (docker.errors.DockerException, requests.exceptions.RequestException) as e:
            logger.error(f"Docker operation failed in {func.__name__}: {e}", exc_info=True)
            raise EngineError(_explain(e)) from e
    return wrapper


def _explain(e: Exception) -> str:
    explanation = getattr(e, 'explanation', None)
    return str(explanation or e)


def _container_name(names: Optional[List[str]]) -> str:
    if not names:
        return ""
    return names[0].lstrip('/')


class DockerBackend:
    def __init__(self, registry: ClientRegistry):
        self.registry = registry

    # --- LISTING ---

    @engine_call
    def get_containers(self) -> List[ContainerInfo]:
        with self.registry.lease() as client:
            raw = client.api.containers(all=True)
        return [
            ContainerInfo(
                id=c.get('Id', ''),
                image=c.get('Image', ''),
                status=c.get('Status', ''),
                name=_container_name(c.get('Names')),
            )
            for c in raw
        ]

    @engine_call
    def get_images(self) -> List[ImageInfo]:
        with self.registry.lease() as client:
            raw = client.api.images()
        return [
            ImageInfo(id=i.get('Id', ''), tags=i.get('RepoTags') or [], size=i.get('Size', 0))
            for i in raw
        ]

    @engine_call
    def get_volumes(self) -> List[VolumeInfo]:
        with self.registry.lease() as client:
            raw = client.api.volumes()
        return [
            VolumeInfo(name=v.get('Name', ''), driver=v.get('Driver', ''), mountpoint=v.get('Mountpoint', ''))
            for v in (raw or {}).get('Volumes') or []
        ]

    @engine_call
    def get_networks(self) -> List[NetworkInfo]:
        with self.registry.lease() as client:
            raw = client.api.networks()
        return [
            NetworkInfo(id=n.get('Id', ''), name=n.get('Name', ''), scope=n.get('Scope', ''), driver=n.get('Driver', ''))
            for n in raw
        ]

    # --- CONTAINER ACTIONS ---

    @engine_call
    def start_container(self, container_id: str) -> None:
        with self.registry.lease() as client:
            client.api.start(container_id)
        logger.info(f"Started container {container_id[:12]}")

    @engine_call
    def stop_container(self, container_id: str) -> None:
        with self.registry.lease() as client:
            client.api.stop(container_id)
        logger.info(f"Stopped container {container_id[:12]}")

    @engine_call
    def remove_container(self, container_id: str) -> None:
        with self.registry.lease() as client:
            client.api.remove_container(container_id, force=True)
        logger.info(f"Removed container {container_id[:12]}")

    @engine_call
    def inspect_container(self, container_id: str) -> Dict[str, Any]:
        with self.registry.lease() as client:
            return client.api.inspect_container(container_id)

    @engine_call
    def get_logs(self, container_id: str, tail: int = 100) -> str:
        with self.registry.lease() as client:
            logs_bytes = client.api.logs(container_id, stdout=True, stderr=True, tail=tail)
        return logs_bytes.decode('utf-8', errors='replace')

    @engine_call
    def get_container_stats(self, container_id: str) -> StatsSample:
        with self.registry.lease() as client:
            raw = client.api.stats(container_id, stream=False)
        return sample_from_raw(raw)

    # --- IMAGES ---

    @engine_call
    def pull_image(self, image: str) -> None:
        with self.registry.lease() as client:
            client.images.pull(image)
        logger.info(f"Pulled image {image}")

    @engine_call
    def remove_image(self, image_id: str) -> None:
        with self.registry.lease() as client:
            client.api.remove_image(image_id, force=True)
        logger.info(f"Removed image {image_id}")

    # --- VOLUMES ---

    @engine_call
    def create_volume(self, name: str) -> None:
        with self.registry.lease() as client:
            client.api.create_volume(name=name)
        logger.info(f"Created volume {name}")

    @engine_call
    def remove_volume(self, name: str) -> None:
        with self.registry.lease() as client:
            client.api.remove_volume(name, force=True)
        logger.info(f"Removed volume {name}")

    # --- NETWORKS ---

    @engine_call
    def create_network(self, name: str, driver: str = "bridge", macvlan_parent: str = "") -> str:
        options = {}
        if driver == "macvlan" and macvlan_parent:
            options["parent"] = macvlan_parent
        with self.registry.lease() as client:
            resp = client.api.create_network(name, driver=driver, options=options)
        network_id = (resp or {}).get('Id', '')
        logger.info(f"Created network {name} ({network_id[:12]})")
        return network_id

    @engine_call
    def remove_network(self, network_id: str) -> None:
        with self.registry.lease() as client:
            client.api.remove_network(network_id)
        logger.info(f"Removed network {network_id[:12]}")

    # --- RUN ---

    def run_container(self, spec: ContainerSpec) -> str:
        """
        Pull, create and start a container; returns the new container ID.

        Each step raises on failure and the remaining steps are skipped. A
        container that was created but failed to start is left in place.
        """
        self.pull_image(spec.image)
        container_id = self.create_container(spec)
        self.start_container(container_id)
        return container_id

    def run_alpine(self) -> str:
        return self.run_container(ContainerSpec(image=ALPINE_IMAGE, command=list(ALPINE_COMMAND)))

    @engine_call
    def create_container(self, spec: ContainerSpec) -> str:
        exposed = [tuple(port.split('/', 1)) for port in spec.ports]
        with self.registry.lease() as client:
            host_config = client.api.create_host_config(
                port_bindings=spec.ports or None,
                mem_limit=spec.mem_limit or None,
                cpu_shares=spec.cpu_shares or None,
                privileged=spec.privileged,
            )
            resp = client.api.create_container(
                spec.image,
                command=spec.command or None,
                environment=spec.environment or None,
                ports=exposed or None,
                host_config=host_config,
            )
        container_id = resp.get('Id', '')
        logger.info(f"Created container {container_id[:12]} from {spec.image}")
        return container_id
