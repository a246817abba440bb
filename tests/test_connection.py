import pytest
from unittest.mock import MagicMock, patch

from dockpanel.connection import ClientRegistry, create_client
from dockpanel.errors import ConnectionSetupError, EngineUnavailable
from dockpanel.model import ConnectionConfig


@patch("dockpanel.connection.docker.tls.TLSConfig")
@patch("dockpanel.connection.docker.DockerClient")
def test_create_client_with_full_tls(mock_client_cls, mock_tls_cls):
    config = ConnectionConfig(host="tcp://10.0.0.5:2376", ca_cert="ca.pem", client_cert="cert.pem", client_key="key.pem")

    create_client(config)

    mock_tls_cls.assert_called_once_with(ca_cert="ca.pem", client_cert=("cert.pem", "key.pem"), verify=True)
    mock_client_cls.assert_called_once_with(
        base_url="tcp://10.0.0.5:2376", tls=mock_tls_cls.return_value, version="auto", timeout=60,
    )


@patch("dockpanel.connection.docker.tls.TLSConfig")
@patch("dockpanel.connection.docker.DockerClient")
def test_partial_tls_material_is_ignored(mock_client_cls, mock_tls_cls):
    create_client(ConnectionConfig(host="tcp://10.0.0.5:2376", ca_cert="ca.pem", client_cert="cert.pem"))

    mock_tls_cls.assert_not_called()
    assert mock_client_cls.call_args.kwargs['tls'] is None


@patch("dockpanel.connection.docker.DockerClient")
def test_create_client_failure(mock_client_cls):
    mock_client_cls.side_effect = Exception("Error while fetching server API version")
    with pytest.raises(ConnectionSetupError, match="unix:///var/run/docker.sock"):
        create_client(ConnectionConfig())


def test_missing_tls_files_raise_setup_error(tmp_path):
    missing = tmp_path / "nope"
    config = ConnectionConfig(
        host="tcp://127.0.0.1:2376",
        ca_cert=str(missing / "ca.pem"),
        client_cert=str(missing / "cert.pem"),
        client_key=str(missing / "key.pem"),
    )
    with pytest.raises(ConnectionSetupError, match="tcp://127.0.0.1:2376"):
        create_client(config)


def test_connect_increments_generation():
    registry = ClientRegistry(factory=lambda config: MagicMock())
    assert registry.generation == 0
    assert registry.connect(ConnectionConfig()) == 1
    assert registry.connect(ConnectionConfig(host="tcp://other:2375")) == 2
    assert registry.config.host == "tcp://other:2375"


def test_replaced_client_is_closed_when_idle():
    first, second = MagicMock(), MagicMock()
    registry = ClientRegistry(factory=MagicMock(side_effect=[first, second]))
    registry.connect(ConnectionConfig())
    registry.connect(ConnectionConfig())
    first.close.assert_called_once()
    second.close.assert_not_called()


def test_in_flight_lease_keeps_old_client_open():
    first, second = MagicMock(), MagicMock()
    registry = ClientRegistry(factory=MagicMock(side_effect=[first, second]))
    registry.connect(ConnectionConfig())

    with registry.lease() as client:
        registry.connect(ConnectionConfig())
        assert client is first
        first.close.assert_not_called()
        with registry.lease() as newer:
            assert newer is second

    first.close.assert_called_once()
    second.close.assert_not_called()


def test_failed_reconnect_leaves_no_client():
    good = MagicMock()
    factory = MagicMock(side_effect=[good, ConnectionSetupError("bad TLS material")])
    registry = ClientRegistry(factory=factory)
    registry.connect(ConnectionConfig())

    with pytest.raises(ConnectionSetupError):
        registry.connect(ConnectionConfig(host="tcp://broken:2376"))

    assert registry.connected is False
    good.close.assert_called_once()
    with pytest.raises(EngineUnavailable):
        with registry.lease():
            pass


def test_close():
    client = MagicMock()
    registry = ClientRegistry(factory=lambda config: client)
    registry.connect(ConnectionConfig())
    registry.close()
    client.close.assert_called_once()
    assert registry.generation == 0
