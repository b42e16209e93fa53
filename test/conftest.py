"""pytest configuration and fixtures for stx-usb tests.

Provides:
- MockSerialPort: pyserial-like port that answers writes through a responder
- MockPortFactory: port factory for PortSession, one MockSerialPort per open,
  with a shared event log for interleaving checks
- FakeRegistry: minimal stand-in for the winreg module
- Markers for unit tests
"""

import threading
import time
from collections.abc import Callable

import pytest

from common.protocol import LineConfig

Responder = Callable[[bytes], bytes]


def ok_responder(frame: bytes) -> bytes:
    """Answer every command with OK."""
    return b"OK\r"


def silent_responder(frame: bytes) -> bytes:
    """Never answer (simulates a read timeout)."""
    return b""


class MockSerialPort:
    """Mock serial port for unit testing.

    Bytes returned by the factory's responder for each write become readable.
    read_until() returns whatever is buffered when the expected delimiter is
    missing, like pyserial does when its read timeout expires.
    """

    def __init__(self, factory: "MockPortFactory", endpoint: str, config: LineConfig) -> None:
        self._factory = factory
        self.endpoint = endpoint
        self.config = config
        self.is_open = True
        self._rx = bytearray(factory.stale)
        factory.stale = b""
        factory.record("open")

    def write(self, data: bytes, /) -> int:
        if self._factory.write_error is not None:
            raise self._factory.write_error
        self._factory.record("write")
        self._factory.writes.append(bytes(data))
        if self._factory.write_delay_s:
            time.sleep(self._factory.write_delay_s)
        self._rx += self._factory.responder(bytes(data))
        return len(data)

    def read(self, size: int = 1, /) -> bytes:
        self._factory.record("read")
        data = bytes(self._rx[:size])
        del self._rx[:size]
        return data

    def read_until(self, expected: bytes = b"\n", size: int | None = None) -> bytes:
        self._factory.record("read")
        idx = self._rx.find(expected)
        end = len(self._rx) if idx < 0 else idx + len(expected)
        data = bytes(self._rx[:end])
        del self._rx[:end]
        return data

    @property
    def in_waiting(self) -> int:
        return len(self._rx)

    def close(self) -> None:
        self._factory.record("close")
        self._factory.close_count += 1
        self.is_open = False


class MockPortFactory:
    """PortSession port factory that hands out MockSerialPorts.

    Every event (open, write, read, close) is appended to `events` as
    (thread_name, event) under a lock, in the order it happened.
    """

    def __init__(self, responder: Responder = ok_responder) -> None:
        self.responder = responder
        self.events: list[tuple[str, str]] = []
        self.writes: list[bytes] = []
        self.ports: list[MockSerialPort] = []
        self.open_count = 0
        self.close_count = 0
        self.open_error: Exception | None = None
        self.write_error: Exception | None = None
        self.write_delay_s = 0.0
        self.stale = b""  # Bytes waiting in the input buffer at next open
        self._lock = threading.Lock()

    def __call__(self, endpoint: str, config: LineConfig) -> MockSerialPort:
        if self.open_error is not None:
            raise self.open_error
        self.open_count += 1
        port = MockSerialPort(self, endpoint, config)
        self.ports.append(port)
        return port

    def record(self, event: str) -> None:
        with self._lock:
            self.events.append((threading.current_thread().name, event))

    @property
    def event_names(self) -> list[str]:
        return [event for _, event in self.events]


class _FakeKey:
    """Registry key handle backed by a nested dict.

    Subkeys are dict values; registry values live under the "" entry as a
    list of (name, data) pairs to keep enumeration order.
    """

    def __init__(self, node: dict) -> None:
        self.node = node

    def __enter__(self) -> "_FakeKey":
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None


class FakeRegistry:
    """Minimal winreg replacement for RegistryLocator tests."""

    HKEY_LOCAL_MACHINE = "HKLM"
    REG_SZ = 1

    def __init__(self, tree: dict) -> None:
        self._root = _FakeKey(tree)

    def OpenKey(self, key: object, sub_key: str) -> _FakeKey:
        node = self._root.node if key == self.HKEY_LOCAL_MACHINE else key.node  # type: ignore[attr-defined]
        for part in sub_key.split("\\"):
            child = node.get(part)
            if not isinstance(child, dict):
                raise FileNotFoundError(f"Registry key not found: {sub_key}")
            node = child
        return _FakeKey(node)

    def EnumKey(self, key: _FakeKey, index: int) -> str:
        names = [name for name, child in key.node.items() if name and isinstance(child, dict)]
        if index >= len(names):
            raise OSError("No more data is available")
        return names[index]

    def EnumValue(self, key: _FakeKey, index: int) -> tuple[str, object, int]:
        values = key.node.get("", [])
        if index >= len(values):
            raise OSError("No more data is available")
        name, data = values[index]
        return name, data, self.REG_SZ

    def QueryValueEx(self, key: _FakeKey, name: str) -> tuple[object, int]:
        for value_name, data in key.node.get("", []):
            if value_name == name:
                return data, self.REG_SZ
        raise FileNotFoundError(f"Registry value not found: {name}")


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")


@pytest.fixture
def port_factory() -> MockPortFactory:
    """Port factory answering every command with OK."""
    return MockPortFactory()


@pytest.fixture
def make_port_factory() -> Callable[..., MockPortFactory]:
    """Build a MockPortFactory with a custom responder."""
    return MockPortFactory


@pytest.fixture
def fake_registry() -> Callable[[dict], FakeRegistry]:
    """Build a FakeRegistry from a nested dict tree."""
    return FakeRegistry


@pytest.fixture
def silent_port_factory() -> MockPortFactory:
    """Port factory whose device never answers."""
    return MockPortFactory(silent_responder)
