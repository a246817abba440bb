import yaml

from dockpanel.config import ConfigManager, TRACK_BY_ID, TRACK_BY_INDEX
from dockpanel.model import DEFAULT_DOCKER_HOST


def test_missing_file_is_created_with_defaults(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    cm = ConfigManager(path)
    assert path.exists()
    saved = yaml.safe_load(path.read_text())
    assert saved['selection']['track_by'] == TRACK_BY_INDEX
    assert cm.get_logs_tail() == 100


def test_user_values_override_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        'connection': {'host': 'tcp://remote:2376', 'ca_cert': '/certs/ca.pem'},
        'selection': {'track_by': 'id'},
        'logging': {'level': 'debug'},
        'unknown_section': {'x': 1},
    }))
    cm = ConfigManager(path)
    conn = cm.get_connection_config()
    assert conn.host == 'tcp://remote:2376'
    assert conn.ca_cert == '/certs/ca.pem'
    assert conn.uses_tls() is False
    assert cm.get_track_by() == TRACK_BY_ID
    assert cm.get_log_level() == 'DEBUG'


def test_invalid_track_by_falls_back(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("selection:\n  track_by: name\n")
    assert ConfigManager(path).get_track_by() == TRACK_BY_INDEX


def test_broken_yaml_uses_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("connection: [unclosed\n")
    cm = ConfigManager(path)
    assert cm.get_config().connection.host == ""


def test_host_falls_back_to_docker_host_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DOCKER_HOST", "tcp://from-env:2375")
    cm = ConfigManager(tmp_path / "config.yaml")
    assert cm.get_connection_config().host == "tcp://from-env:2375"


def test_host_default_socket(tmp_path, monkeypatch):
    monkeypatch.delenv("DOCKER_HOST", raising=False)
    cm = ConfigManager(tmp_path / "config.yaml")
    assert cm.get_connection_config().host == DEFAULT_DOCKER_HOST


def test_config_location_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("DOCKPANEL_CONFIG", str(tmp_path / "custom.yaml"))
    cm = ConfigManager()
    assert cm.config_file == tmp_path / "custom.yaml"
