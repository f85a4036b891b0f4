import dataclasses
import logging

import pytest
from typer.testing import CliRunner
from unittest import mock

from cli import _apply_overrides, app, run_sync_loop
from config.sync_config import ConfigurationError
from core.dependencies import DependencyContainer
from services.sync_types import SyncOutcome
from utils.logger_setup import setup_logging

from conftest import make_config

runner = CliRunner()


@pytest.fixture
def container():
    with mock.patch('cli.DependencyContainer') as mock_container_cls:
        yield mock_container_cls.return_value


@mock.patch('cli.run_sync_loop', new_callable=mock.AsyncMock)
@mock.patch('cli.EnvironmentConfig.load')
def test_sync_once_success(mock_load, mock_run, container):
    """Test a single successful cycle exits with code 0."""
    mock_load.return_value = make_config(secondary_count=2)
    mock_run.return_value = SyncOutcome.SUCCESS

    result = runner.invoke(app, ["sync", "--once"])

    mock_run.assert_called_once_with(container)
    assert "Syncing 2 secondary host(s) once." in result.stdout
    assert "Sync completed." in result.stdout
    assert result.exit_code == 0


@pytest.mark.parametrize("outcome", [
    SyncOutcome.PARTIAL_FAILURE,
    SyncOutcome.TOTAL_FAILURE,
    SyncOutcome.FATAL_ERROR,
])
@mock.patch('cli.run_sync_loop', new_callable=mock.AsyncMock)
@mock.patch('cli.EnvironmentConfig.load')
def test_sync_once_failure_exit_code(mock_load, mock_run, outcome, container):
    """Test any non-success outcome exits with code 1."""
    mock_load.return_value = make_config()
    mock_run.return_value = outcome

    result = runner.invoke(app, ["sync", "--once"])

    assert result.exit_code == 1
    assert "Sync completed." not in result.stdout


@mock.patch('cli.DependencyContainer')
@mock.patch('cli.run_sync_loop', new_callable=mock.AsyncMock)
@mock.patch('cli.EnvironmentConfig.load')
def test_sync_overrides_are_applied(mock_load, mock_run, mock_container_cls):
    """Test command line options override environment values."""
    mock_load.return_value = make_config()
    mock_run.return_value = SyncOutcome.SUCCESS

    runner.invoke(app, ["sync", "--loop", "--interval", "5", "-v"])

    config = mock_container_cls.call_args.args[0]
    assert config.run_once is False
    assert config.interval_minutes == 5
    assert config.verbose is True


@mock.patch('cli.run_sync_loop', new_callable=mock.AsyncMock)
@mock.patch('cli.EnvironmentConfig.load')
def test_sync_configuration_error(mock_load, mock_run):
    """Test a configuration error exits before any sync is attempted."""
    mock_load.side_effect = ConfigurationError("PRIMARY_HOST_BASE_URL is required")

    result = runner.invoke(app, ["sync"])

    mock_run.assert_not_called()
    assert "Configuration error: PRIMARY_HOST_BASE_URL is required" in result.output
    assert result.exit_code == 1


def test_apply_overrides_without_options():
    config = make_config()
    assert _apply_overrides(config, None, None, False) is config


class TestRunSyncLoop:
    """Test the run loop around sync cycles."""

    @pytest.mark.asyncio
    async def test_run_once_returns_first_outcome(self):
        container = mock.Mock()
        container.config = make_config()
        container.sync_service.return_value.perform = mock.AsyncMock(return_value=SyncOutcome.TOTAL_FAILURE)

        with mock.patch("asyncio.sleep", new_callable=mock.AsyncMock) as mock_sleep:
            outcome = await run_sync_loop(container)

        assert outcome is SyncOutcome.TOTAL_FAILURE
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_loop_keeps_going_after_failures(self):
        container = mock.Mock()
        container.config = dataclasses.replace(make_config(), run_once=False, interval_minutes=0.5)
        container.sync_service.return_value.perform = mock.AsyncMock(
            side_effect=[SyncOutcome.FATAL_ERROR, SyncOutcome.SUCCESS, RuntimeError("stop")]
        )

        with mock.patch("asyncio.sleep", new_callable=mock.AsyncMock) as mock_sleep:
            with pytest.raises(RuntimeError, match="stop"):
                await run_sync_loop(container)

        assert mock_sleep.await_args_list == [mock.call(30.0), mock.call(30.0)]
        container.logger.info.assert_called_with("Waiting 0.5 minutes...")


class TestDependencyContainer:

    def test_notifier_is_shared_between_cycles(self, tmp_path):
        container = DependencyContainer(make_config(), logger_name="tests.container", log_dir=tmp_path)

        first = container.sync_service()
        second = container.sync_service()

        assert first is not second
        assert first.notify is second.notify
        assert (tmp_path / "tests_container.log").exists()

    def test_verbose_enables_debug_logging(self, tmp_path):
        config = dataclasses.replace(make_config(), verbose=True)

        container = DependencyContainer(config, logger_name="tests.verbose", file_output=False)

        assert container.logger.level == logging.DEBUG


def test_setup_logging_reuses_configured_logger():
    logger = setup_logging("tests.reuse", file_output=False)
    again = setup_logging("tests.reuse", log_level=logging.WARNING, file_output=False)

    assert again is logger
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_setup_logging_writes_formatted_file(tmp_path):
    logger = setup_logging("tests.format", log_dir=tmp_path, console_output=False)

    logger.info("Backup restored on http://10.0.0.3")
    for handler in logger.handlers:
        handler.flush()

    contents = (tmp_path / "tests_format.log").read_text(encoding="utf-8")
    assert "INFO    [tests.format] Backup restored on http://10.0.0.3" in contents
