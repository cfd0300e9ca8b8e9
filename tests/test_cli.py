"""Tests for rttdash CLI."""

import json
import logging

import pytest
from click.testing import CliRunner

from rttdash import PACKAGE_LOGGER, __version__
from rttdash import cli as cli_module
from rttdash.cli import cli
from rttdash.detect import ProbeInfo


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop the handlers each invocation attaches to the package logger."""
    yield
    logger = logging.getLogger("rttdash")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_config(tmp_path, fake_backend):
    """Config file selecting the in-memory transport."""
    path = tmp_path / "board.py"
    path.write_text(
        'TRANSPORT = "fake"\n'
        'TARGET = "board"\n'
        f'LOG_PATH = {str(tmp_path / "logs")!r}\n'
    )
    return path


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert 'RTT Channel Dashboard' in result.output

    def test_cli_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_attach_help(self, runner):
        result = runner.invoke(cli, ['attach', '--help'])
        assert result.exit_code == 0
        assert '--frame-decoder' in result.output
        assert '--timestamps / --no-timestamps' in result.output


class TestProbeCommands:
    """Test probe listing."""

    def test_probes_none(self, runner, monkeypatch):
        monkeypatch.setattr(cli_module, "list_probes", lambda: [])
        result = runner.invoke(cli, ['probes'])
        assert result.exit_code == 0
        assert 'No debug probes detected' in result.output

    def test_probes_table(self, runner, monkeypatch):
        probe = ProbeInfo(unique_id="0669FF55", description="STM32 STLink")
        monkeypatch.setattr(cli_module, "list_probes", lambda: [probe])

        result = runner.invoke(cli, ['-v', 'probes'])

        assert result.exit_code == 0
        assert '0669FF55' in result.output
        assert 'STM32 STLink' in result.output

    def test_probes_json(self, runner, monkeypatch):
        probe = ProbeInfo(unique_id="0669FF55", description="STM32 STLink", vendor="STMicroelectronics")
        monkeypatch.setattr(cli_module, "list_probes", lambda: [probe])

        result = runner.invoke(cli, ['probes', '--json'])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[0]["unique_id"] == "0669FF55"
        assert data[0]["vendor"] == "STMicroelectronics"


class TestChannelsCommand:
    """Test listing channels on the target."""

    def test_lists_channels(self, runner, fake_config):
        result = runner.invoke(cli, ['channels', '-c', str(fake_config)])

        assert result.exit_code == 0
        assert 'fake probe' in result.output
        assert 'Terminal' in result.output
        assert 'IMU' in result.output

    def test_unknown_transport(self, runner, tmp_path):
        path = tmp_path / "bad.py"
        path.write_text('TRANSPORT = "carrier-pigeon"\n')

        result = runner.invoke(cli, ['channels', '-c', str(path)])

        assert result.exit_code == 1
        assert "Unknown transport 'carrier-pigeon'" in result.output


class TestAttachCommand:
    """Test the attach flow with the TUI replaced."""

    def test_session_logs_written(self, runner, fake_config, tmp_path, monkeypatch):
        """Test that channel output is saved after the dashboard exits."""
        seen = {}

        def fake_run_tui(dashboard, poll_interval):
            dashboard.tabs[0].up.chunks.append(b"hello\n")
            dashboard.poll()
            seen["tabs"] = dashboard.tab_names()
            dashboard.quit()

        monkeypatch.setattr("rttdash.tui.app.run_tui", fake_run_tui)

        result = runner.invoke(cli, [
            'attach', '-c', str(fake_config), '--log', '--no-timestamps', '--session', 'run1',
        ])

        assert result.exit_code == 0, result.output
        assert seen["tabs"] == ["Terminal", "IMU"]
        log = tmp_path / "logs" / "run1_channel0.txt"
        assert log.read_text() == "hello\n"
        assert 'Saved' in result.output

    def test_logs_written_when_tui_fails(self, runner, fake_config, tmp_path, monkeypatch):
        def crashing_run_tui(dashboard, poll_interval):
            dashboard.tabs[0].messages.append("before crash")
            raise RuntimeError("terminal gone")

        monkeypatch.setattr("rttdash.tui.app.run_tui", crashing_run_tui)

        result = runner.invoke(cli, ['attach', '-c', str(fake_config), '--log', '--session', 'run2'])

        assert isinstance(result.exception, RuntimeError)
        assert (tmp_path / "logs" / "run2_channel0.txt").read_text() == "before crash\n"

    def test_structured_without_decoder(self, runner, tmp_path, fake_backend):
        path = tmp_path / "structured.py"
        path.write_text(
            'TRANSPORT = "fake"\n'
            'CHANNELS = [{"up": 0, "format": "defmt"}]\n'
        )

        result = runner.invoke(cli, ['attach', '-c', str(path)])

        assert result.exit_code == 1
        assert 'Error:' in result.output
        assert 'no frame decoder' in result.output

    def test_bad_frame_decoder(self, runner, fake_config):
        result = runner.invoke(cli, ['attach', '-c', str(fake_config), '--frame-decoder', 'nocolon'])
        assert result.exit_code == 1
        assert "module:factory" in result.output

    def test_missing_configured_channel(self, runner, tmp_path, fake_backend):
        """Test that a configured channel absent on the target aborts before the TUI."""
        path = tmp_path / "ghost.py"
        path.write_text(
            'TRANSPORT = "fake"\n'
            'CHANNELS = [{"up": 7, "name": "ghost"}, {"up": 0}]\n'
        )

        result = runner.invoke(cli, ['attach', '-c', str(path)])

        assert result.exit_code == 1
        assert "'ghost' (up=7, down=None) not found on target" in result.output


class TestLogging:
    """Test diagnostics handler setup."""

    def test_log_file_handler_replaced(self, runner, tmp_path, monkeypatch):
        """Test that repeated invocations keep a single file handler."""
        monkeypatch.setattr(cli_module, "list_probes", lambda: [])
        first = tmp_path / "first.log"
        second = tmp_path / "second.log"

        runner.invoke(cli, ['--log-file', str(first), 'probes'])
        result = runner.invoke(cli, ['--log-file', str(second), 'probes'])

        assert result.exit_code == 0
        file_handlers = [
            h for h in logging.getLogger(PACKAGE_LOGGER).handlers
            if isinstance(h, logging.FileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].baseFilename == str(second)

    def test_no_log_file_removes_handler(self, runner, tmp_path, monkeypatch):
        monkeypatch.setattr(cli_module, "list_probes", lambda: [])

        runner.invoke(cli, ['--log-file', str(tmp_path / "a.log"), 'probes'])
        runner.invoke(cli, ['probes'])

        assert not any(
            isinstance(h, logging.FileHandler) for h in logging.getLogger(PACKAGE_LOGGER).handlers
        )
