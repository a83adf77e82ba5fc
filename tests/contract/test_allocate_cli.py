"""Contract tests for the allocate command-line entry point."""

import json
import logging

import pytest

from src.cli.allocate import main


@pytest.fixture
def cli_env(monkeypatch, tmp_path, session_factory):
    """Point the CLI at the test database and a temporary log file."""
    monkeypatch.setenv("CLI_LOG_FILE", str(tmp_path / "allocate.log"))
    monkeypatch.setattr("src.services.SessionLocal", session_factory)

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers.copy()
    original_level = root_logger.level
    yield tmp_path
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


class TestAllocateCli:
    def test_prints_allocation_as_json(self, cli_env, capsys, units, equal_rule, add_expense):
        expense = add_expense("100.00")

        exit_code = main([str(expense.id)])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output == {
            "expenseId": expense.id,
            "lines": [
                {"unitId": units[0].id, "amount": "33.34"},
                {"unitId": units[1].id, "amount": "33.33"},
                {"unitId": units[2].id, "amount": "33.33"},
            ],
        }

    def test_writes_log_file(self, cli_env, units, equal_rule, add_expense):
        expense = add_expense("9.00")

        main([str(expense.id)])

        assert "Allocated expense" in (cli_env / "allocate.log").read_text()

    def test_missing_expense_exits_with_error(self, cli_env, capsys, equal_rule):
        exit_code = main(["999"])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert captured.out == ""
        assert captured.err.count("Expense 999 not found") == 1
        assert "Traceback" not in captured.err

    def test_failure_is_written_to_log_file(self, cli_env, capsys, equal_rule):
        main(["999"])

        assert "Allocation of expense 999 failed: Expense 999 not found" in (
            cli_env / "allocate.log"
        ).read_text()

    def test_non_integer_argument(self, cli_env, capsys):
        assert main(["forty-two"]) == 1
        assert "invalid int value" in capsys.readouterr().err

    def test_missing_argument(self, cli_env, capsys):
        assert main([]) == 1
        assert "expense_id" in capsys.readouterr().err

    def test_help_exits_zero(self, cli_env, capsys):
        assert main(["--help"]) == 0
        assert "Allocate one expense" in capsys.readouterr().out
