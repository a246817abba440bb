"""
Engine client construction and the process-wide client registry.

Exactly one client generation is current at a time. Callers borrow it with
``registry.lease()``; replacing the connection settings retires the current
generation, and a retired client is closed when its last lease is returned.
Calls that started before a reconnect therefore finish on the client they
started with.
"""

import threading
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

import docker
import docker.tls

from .errors import ConnectionSetupError, EngineUnavailable
from .model import ConnectionConfig

logger = logging.getLogger(__name__)


def create_client(config: ConnectionConfig) -> docker.DockerClient:
    """Build a DockerClient for ``config`` and negotiate the API version."""
    tls_config = None
    try:
        if config.uses_tls():
            tls_config = docker.tls.TLSConfig(
                ca_cert=config.ca_cert,
                client_cert=(config.client_cert, config.client_key),
                verify=True,
            )
        return docker.DockerClient(
            base_url=config.host,
            tls=tls_config,
            version="auto",
            timeout=config.timeout,
        )
    except Exception as e:
        raise ConnectionSetupError(f"Failed to connect to Docker at {config.host}: {e}") from e


class _Generation:
    def __init__(self, number: int, client: docker.DockerClient):
        self.number = number
        self.client = client
        self.leases = 0
        self.retired = False


class ClientRegistry:
    """Thread-safe holder of the current engine client."""

    def __init__(self, factory: Callable[[ConnectionConfig], docker.DockerClient] = create_client):
        self._factory = factory
        self._lock = threading.Lock()
        self._current: Optional[_Generation] = None
        self._counter = 0
        self.config = ConnectionConfig()

    @property
    def generation(self) -> int:
        """Number of the current generation, 0 when no client is live."""
        with self._lock:
            return self._current.number if self._current else 0

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._current is not None

    def connect(self, config: ConnectionConfig) -> int:
        """
        Replace the connection settings and rebuild the client.

        The previous client is retired before the new one is built, so a
        failed reconnect leaves no live client (there is no rollback to the
        last working settings). Raises ConnectionSetupError on failure.
        """
        with self._lock:
            self.config = config
            old = self._current
            self._current = None
        if old is not None:
            self._retire(old)

        client = self._factory(config)

        with self._lock:
            self._counter += 1
            self._current = _Generation(self._counter, client)
            number = self._counter
        logger.info(f"Engine client generation {number} connected to {config.host}")
        return number

    @contextmanager
    def lease(self) -> Iterator[docker.DockerClient]:
        """Borrow the current client for the duration of one engine call."""
        with self._lock:
            gen = self._current
            if gen is None:
                raise EngineUnavailable("Docker client is not connected")
            gen.leases += 1
        try:
            yield gen.client
        finally:
            with self._lock:
                gen.leases -= 1
                release = gen.retired and gen.leases == 0
            if release:
                self._close(gen)

    def close(self) -> None:
        with self._lock:
            old = self._current
            self._current = None
        if old is not None:
            self._retire(old)

    def _retire(self, gen: _Generation) -> None:
        with self._lock:
            gen.retired = True
            release = gen.leases == 0
        if release:
            self._close(gen)
        else:
            logger.debug(f"Generation {gen.number} retired with {gen.leases} call(s) in flight")

    def _close(self, gen: _Generation) -> None:
        try:
            gen.client.close()
            logger.debug(f"Closed engine client generation {gen.number}")
        except Exception as e:
            logger.warning(f"Closing engine client generation {gen.number} failed: {e}")
