from dockpanel.parsing import (
    build_container_spec, parse_command, parse_env, parse_memory_mb, parse_ports, parse_positive_int,
)


def test_env_two_entries():
    assert parse_env("KEY=value,FOO=bar") == ["KEY=value", "FOO=bar"]


def test_env_keeps_interior_equals():
    assert parse_env("A=b=c") == ["A=b=c"]


def test_env_empty():
    assert parse_env("") == []


def test_ports_single_pair():
    assert parse_ports("8080:80") == {"80/tcp": "8080"}


def test_ports_multiple_pairs_with_spaces():
    assert parse_ports("8080:80, 8443:443") == {"80/tcp": "8080", "443/tcp": "8443"}


def test_ports_malformed_entry_is_dropped():
    assert parse_ports("abc") == {}
    assert parse_ports("1:2:3,8080:80") == {"80/tcp": "8080"}


def test_command_splits_on_whitespace():
    assert parse_command("  echo   hello world ") == ["echo", "hello", "world"]


def test_positive_int():
    assert parse_positive_int("1024") == 1024
    assert parse_positive_int("abc") == 0
    assert parse_positive_int("-5") == 0
    assert parse_positive_int("") == 0


def test_memory_mb_to_bytes():
    assert parse_memory_mb("256") == 256 * 1024 * 1024
    assert parse_memory_mb("lots") == 0


def test_build_container_spec_drops_bad_numbers():
    spec = build_container_spec("alpine", "echo hi", "A=1", "abc", memory_mb="x", cpu_shares="512")
    assert spec.image == "alpine"
    assert spec.command == ["echo", "hi"]
    assert spec.environment == ["A=1"]
    assert spec.ports == {}
    assert spec.mem_limit == 0
    assert spec.cpu_shares == 512
    assert spec.privileged is False
