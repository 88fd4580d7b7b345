import uuid

import pytest

from signedlic.client.infrastructure import device
from signedlic.client.infrastructure.device import (
    StaticDeviceIdentifierProvider,
    SystemDeviceIdentifierProvider,
    format_device_id,
    parse_device_id,
)

MACHINE_ID = "9cae2aa432684af7a75d7b176251f0a7"


def test_parse_machine_id():
    """Test the 32-hex form used by /etc/machine-id."""
    assert parse_device_id(MACHINE_ID + "\n") == uuid.UUID(MACHINE_ID).bytes


def test_parse_uuid_string():
    raw = "9CAE2AA4-3268-4AF7-A75D-7B176251F0A7"
    assert parse_device_id(raw) == uuid.UUID(raw).bytes


@pytest.mark.parametrize("raw", [None, "", "not-a-uuid", "1234"])
def test_parse_invalid_identifier(raw):
    assert parse_device_id(raw) is None


def test_format_device_id():
    device_id = uuid.UUID(MACHINE_ID).bytes
    assert format_device_id(device_id) == "9CAE2AA4-3268-4AF7-A75D-7B176251F0A7"


def test_system_provider_resolves_once(monkeypatch):
    calls = []

    def fake_read():
        calls.append(1)
        return MACHINE_ID

    monkeypatch.setattr(
        SystemDeviceIdentifierProvider, "read_raw_identifier", staticmethod(fake_read)
    )
    provider = SystemDeviceIdentifierProvider()

    assert provider.resolve() == uuid.UUID(MACHINE_ID).bytes
    assert provider.resolve() == uuid.UUID(MACHINE_ID).bytes
    assert len(calls) == 1


def test_system_provider_without_identifier(monkeypatch):
    monkeypatch.setattr(
        SystemDeviceIdentifierProvider, "read_raw_identifier", staticmethod(lambda: None)
    )
    assert SystemDeviceIdentifierProvider().resolve() is None


def test_linux_machine_id_paths(tmp_path, monkeypatch):
    first = tmp_path / "machine-id"
    first.write_text("\n")
    second = tmp_path / "dbus-machine-id"
    second.write_text(MACHINE_ID + "\n")
    monkeypatch.setattr(
        device, "LINUX_MACHINE_ID_PATHS", (str(tmp_path / "missing"), str(first), str(second))
    )

    assert device._read_machine_id_linux() == MACHINE_ID


def test_static_provider():
    device_id = bytes(range(16))
    assert StaticDeviceIdentifierProvider(device_id).resolve() == device_id
    assert StaticDeviceIdentifierProvider(None).resolve() is None


def test_static_provider_rejects_wrong_length():
    with pytest.raises(ValueError, match="16 bytes"):
        StaticDeviceIdentifierProvider(b"short")
