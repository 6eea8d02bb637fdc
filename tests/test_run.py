"""Tests for the run.py command-line entry point."""

from unittest.mock import patch, MagicMock

import pytest

import run


def _orchestrator(valid=True, success=True, retention_days=0):
    orch = MagicMock()
    orch.domain = "tenant.example.com"
    orch.debug = False
    orch.output_manager.retention_days = retention_days
    orch.output_manager.cleanup_old_exports.return_value = 0
    orch.validate_config.return_value = valid
    orch.run.return_value = {"success": success}
    return orch


def test_success_exits_normally():
    orch = _orchestrator()
    with patch("run.ExportOrchestrator", return_value=orch):
        run.main(["guild"])
    orch.run.assert_called_once_with(user_type="guild", role_id=None)


def test_omitted_user_type_exports_all():
    orch = _orchestrator()
    with patch("run.ExportOrchestrator", return_value=orch):
        run.main([])
    orch.run.assert_called_once_with(user_type=None, role_id=None)


def test_failed_run_exits_nonzero():
    orch = _orchestrator(success=False)
    with patch("run.ExportOrchestrator", return_value=orch):
        with pytest.raises(SystemExit) as exc_info:
            run.main(["ap"])
    assert exc_info.value.code == 1


def test_invalid_config_exits_before_run():
    orch = _orchestrator(valid=False)
    with patch("run.ExportOrchestrator", return_value=orch):
        with pytest.raises(SystemExit) as exc_info:
            run.main([])
    assert exc_info.value.code == 1
    orch.run.assert_not_called()


def test_unknown_user_type_rejected():
    with pytest.raises(SystemExit) as exc_info:
        run.main(["staff"])
    assert exc_info.value.code == 2


def test_role_option():
    orch = _orchestrator()
    with patch("run.ExportOrchestrator", return_value=orch):
        run.main(["--role", "rol_abc"])
    orch.validate_config.assert_called_once_with(None, "rol_abc")
    orch.run.assert_called_once_with(user_type=None, role_id="rol_abc")


def test_role_with_user_type_rejected():
    with pytest.raises(SystemExit) as exc_info:
        run.main(["guild", "--role", "rol_abc"])
    assert exc_info.value.code == 2


def test_retention_cleanup_runs_when_enabled():
    orch = _orchestrator(retention_days=30)
    with patch("run.ExportOrchestrator", return_value=orch):
        run.main([])
    orch.output_manager.cleanup_old_exports.assert_called_once()


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc_info:
        run.main(["--version"])
    assert exc_info.value.code == 0
    assert run.VERSION in capsys.readouterr().out
