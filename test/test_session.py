"""Unit tests for the port session, command outcomes and reporting."""

import pytest
import serial

from common.errors import (
    CommandFailedError,
    ConnectFailedError,
    ReplyTimeoutError,
    UnknownCommandError,
)
from common.protocol import LineConfig
from common.report import DiscoveryReport
from session.port import PortSession
from session.report import OutcomeReport
from session.result import CommandOutcome


@pytest.mark.unit
class TestPortSession:
    """Tests for PortSession lifecycle."""

    def test_starts_closed(self, port_factory) -> None:
        session = PortSession("/dev/ttyUSB0", port_factory=port_factory)
        assert not session.is_open
        assert port_factory.open_count == 0

    def test_open_close(self, port_factory) -> None:
        session = PortSession("/dev/ttyUSB0", port_factory=port_factory)
        session.open()
        assert session.is_open
        session.close()
        assert not session.is_open
        assert port_factory.event_names == ["open", "close"]

    def test_open_twice_is_noop(self, port_factory) -> None:
        session = PortSession("/dev/ttyUSB0", port_factory=port_factory)
        session.open()
        session.open()
        assert port_factory.open_count == 1

    def test_close_is_idempotent(self, port_factory) -> None:
        session = PortSession("/dev/ttyUSB0", port_factory=port_factory)
        session.close()
        session.open()
        session.close()
        session.close()
        assert port_factory.close_count == 1

    def test_config_passed_to_factory(self, port_factory) -> None:
        config = LineConfig(read_timeout_s=0.25)
        PortSession("COM3", config, port_factory=port_factory).probe()
        port = port_factory.ports[0]
        assert port.endpoint == "COM3"
        assert port.config.read_timeout_s == 0.25
        assert port.config.baudrate == 115200
        assert port.config.exclusive

    @pytest.mark.parametrize(
        "error",
        [
            serial.SerialException("could not open port: [Errno 16] Device or resource busy"),
            PermissionError(13, "Permission denied"),
            ValueError("Not a valid baudrate"),
        ],
    )
    def test_open_failure_raises_connect_failed(self, port_factory, error: Exception) -> None:
        port_factory.open_error = error
        session = PortSession("/dev/ttyUSB0", port_factory=port_factory)
        with pytest.raises(ConnectFailedError) as exc_info:
            session.open()
        assert exc_info.value.endpoint == "/dev/ttyUSB0"
        assert exc_info.value.__cause__ is error
        assert not session.is_open

    def test_probe_opens_and_closes(self, port_factory) -> None:
        session = PortSession("/dev/ttyUSB0", port_factory=port_factory)
        session.probe()
        assert port_factory.event_names == ["open", "close"]
        assert not session.is_open

    def test_transfer_returns_result(self, port_factory) -> None:
        session = PortSession("/dev/ttyUSB0", port_factory=port_factory)
        assert session.transfer(lambda port: port.write(b">04\r")) == 4
        assert port_factory.event_names == ["open", "write", "close"]

    def test_transfer_closes_on_error(self, port_factory) -> None:
        session = PortSession("/dev/ttyUSB0", port_factory=port_factory)

        def fail(port) -> None:
            raise OSError("device removed")

        with pytest.raises(OSError):
            session.transfer(fail)
        assert port_factory.close_count == 1
        assert not session.is_open
        # Lock released: the next transfer proceeds
        session.probe()
        assert port_factory.open_count == 2

    def test_transfer_closes_port_opened_by_caller(self, port_factory) -> None:
        session = PortSession("/dev/ttyUSB0", port_factory=port_factory)
        session.open()
        session.transfer(lambda port: port.write(b">03\r"))
        assert not session.is_open
        assert port_factory.open_count == 1
        assert port_factory.event_names == ["open", "write", "close"]

    def test_context_manager_closes(self, port_factory) -> None:
        with PortSession("/dev/ttyUSB0", port_factory=port_factory) as session:
            session.open()
        assert port_factory.close_count == 1


@pytest.mark.unit
class TestCommandOutcome:
    """Tests for CommandOutcome."""

    def test_success(self) -> None:
        outcome = CommandOutcome(code="04", success=True, reply="000123")
        assert outcome.error is None
        assert not outcome.timed_out
        assert not outcome.rejected

    def test_failure_requires_error(self) -> None:
        with pytest.raises(ValueError):
            CommandOutcome(code="04", success=False)

    def test_success_forbids_error(self) -> None:
        with pytest.raises(ValueError):
            CommandOutcome(code="04", success=True, error=CommandFailedError("04", "x"))

    def test_timed_out(self) -> None:
        outcome = CommandOutcome(code="04", success=False, error=ReplyTimeoutError("04", "t"))
        assert outcome.timed_out
        assert not outcome.rejected

    def test_rejected(self) -> None:
        outcome = CommandOutcome(code="99", success=False, error=UnknownCommandError("99"))
        assert outcome.rejected
        assert not outcome.timed_out


@pytest.mark.unit
class TestReports:
    """Tests for console reports."""

    def test_outcome_reply_line(self, capsys: pytest.CaptureFixture[str]) -> None:
        report = OutcomeReport(CommandOutcome(code="04", success=True, reply="000123"))
        report.print()
        assert capsys.readouterr().out == "04: 000123\n\n"
        assert report.success()

    def test_outcome_error_line(self) -> None:
        error = ReplyTimeoutError("04", "no reply within 1.0s")
        report = OutcomeReport(CommandOutcome(code="04", success=False, error=error))
        assert report.line() == "04: ERROR Command 04 failed: no reply within 1.0s"
        assert not report.success()

    def test_outcome_verbose_timing(self) -> None:
        outcome = CommandOutcome(code="01", success=True, reply="OK", elapsed_s=0.0125)
        assert OutcomeReport(outcome, verbose=True).line() == "01: OK (12.5ms)"

    def test_discovery_connected(self, capsys: pytest.CaptureFixture[str]) -> None:
        report = DiscoveryReport(connected=True, endpoint="COM3")
        report.print()
        assert capsys.readouterr().out == "Device: connected on COM3\n"
        assert report.success()

    def test_discovery_failed_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        DiscoveryReport(connected=False, error=ConnectFailedError("COM3", "busy")).print()
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "Device: FAILED (Could not open COM3: busy)\n"

    def test_discovery_connected_requires_endpoint(self) -> None:
        with pytest.raises(ValueError):
            DiscoveryReport(connected=True)
