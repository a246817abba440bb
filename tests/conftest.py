"""
Shared fixtures: an in-memory stand-in for the engine's low-level API.

Only the calls the backend makes are modelled. Two backends built on the
same FakeEngine behave like two clients talking to one daemon.
"""

import docker.errors
import pytest

from dockpanel.backend import DockerBackend
from dockpanel.connection import ClientRegistry
from dockpanel.model import ConnectionConfig


class FakeApi:
    def __init__(self):
        self.container_records = []
        self.volume_records = []
        self.started = []
        self.stopped = []

    def containers(self, all=False):
        return [dict(c) for c in self.container_records]

    def images(self):
        return []

    def networks(self):
        return []

    def volumes(self):
        return {'Volumes': [dict(v) for v in self.volume_records]}

    def start(self, container_id):
        self._find(container_id)
        self.started.append(container_id)

    def stop(self, container_id):
        self._find(container_id)
        self.stopped.append(container_id)

    def remove_container(self, container_id, force=False):
        self.container_records.remove(self._find(container_id))

    def logs(self, container_id, stdout=True, stderr=True, tail='all'):
        self._find(container_id)
        return b"listening on :80\n"

    def inspect_container(self, container_id):
        record = self._find(container_id)
        return {
            'Id': record['Id'],
            'Image': record['Image'],
            'Config': {'Cmd': ['nginx', '-g', 'daemon off;']},
            'State': {'Status': 'running', 'Running': True},
        }

    def stats(self, container_id, stream=False):
        self._find(container_id)
        return {
            'cpu_stats': {'cpu_usage': {'total_usage': 1200}, 'system_cpu_usage': 11000, 'online_cpus': 2},
            'precpu_stats': {'cpu_usage': {'total_usage': 1000}, 'system_cpu_usage': 10000},
            'memory_stats': {'usage': 50000000, 'limit': 100000000},
        }

    def create_volume(self, name=None, driver=None, driver_opts=None, labels=None):
        record = {'Name': name, 'Driver': driver or 'local', 'Mountpoint': f'/var/lib/docker/volumes/{name}/_data'}
        self.volume_records.append(record)
        return record

    def _find(self, container_id):
        for record in self.container_records:
            if record['Id'] == container_id:
                return record
        raise docker.errors.NotFound(f"No such container: {container_id}")


class FakeClient:
    def __init__(self, api):
        self.api = api
        self.closed = False

    def close(self):
        self.closed = True


class FakeEngine:
    def __init__(self):
        self.api = FakeApi()

    def add_container(self, container_id, image="nginx:latest", status="Up 1 minute"):
        self.api.container_records.append(
            {'Id': container_id, 'Image': image, 'Status': status, 'Names': [f'/{container_id[:6]}']}
        )

    def client(self):
        return FakeClient(self.api)

    def connect(self):
        registry = ClientRegistry(factory=lambda config: self.client())
        registry.connect(ConnectionConfig())
        return DockerBackend(registry)


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def backend(engine):
    return engine.connect()
