"""
Tests for the stock-ledger command-line front end.

Each test drives ``main()`` with an argv list against a data file in
tmp_path, so every invocation reloads and re-saves the snapshot exactly
as separate processes would.
"""

import io
import json

import pytest

from scripts.cli.main import build_parser, main
from scripts.cli.util import fmt_price
from stock_config.loader import CONFIG_ENV_VAR, DATA_FILE_ENV_VAR, LOG_LEVEL_ENV_VAR, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (CONFIG_ENV_VAR, DATA_FILE_ENV_VAR, LOG_LEVEL_ENV_VAR):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data.json"


@pytest.fixture
def cli(tmp_path, data_file, deterministic_clock):
    """Run one CLI invocation; returns the exit status."""

    def _run(*argv, stdin=None):
        args = ["--config", str(tmp_path / "absent.yaml"), "--data-file", str(data_file), *argv]
        return main(args, clock=deterministic_clock, stdin=stdin)

    return _run


@pytest.fixture
def stocked(cli):
    """Hub (1), point of sale (2), one medicine, 100 units imported and 40 moved to the counter."""
    assert cli("warehouse", "add", "Central Hub") == 0
    assert cli("warehouse", "add", "Counter", "--type", "pos") == 0
    assert cli("medicine", "add", "Amoxicillin 250mg") == 0
    assert cli("import", "1", "1", "100", "4.50", "2025-03-01") == 0
    assert cli("transfer", "1", "2", "40") == 0
    return cli


class TestMutationsPersist:

    def test_warehouse_add_saves_snapshot(self, cli, data_file, capsys):
        assert cli("warehouse", "add", "Central Hub") == 0
        assert "Warehouse 1 added: Central Hub (hub)" in capsys.readouterr().out
        doc = json.loads(data_file.read_text())
        assert doc["warehouses"] == [{"id": 1, "name": "Central Hub", "type": "hub"}]

    def test_import_uses_catalog_name(self, stocked, data_file):
        doc = json.loads(data_file.read_text())
        assert doc["batches"][0]["medicine_name"] == "Amoxicillin 250mg"
        assert doc["batches"][0]["quantity"] == 60
        assert doc["batches"][1]["source_batch_id"] == 1

    def test_import_with_explicit_name_and_supplier(self, cli, data_file):
        cli("warehouse", "add", "Hub")
        cli("supplier", "add", "MedSupply Ltd", "--contact", "orders@medsupply.example")
        assert cli("import", "5", "1", "10", "2.00", "2025-06-01", "--name", "Aspirin", "--supplier", "1") == 0
        doc = json.loads(data_file.read_text())
        assert doc["import_log"][0]["supplier_id"] == 1
        assert doc["import_log"][0]["medicine_name"] == "Aspirin"

    def test_sell_prints_receipt(self, stocked, capsys):
        capsys.readouterr()
        assert stocked("sell", "1", "7") == 0
        out = capsys.readouterr().out
        assert "Sold 7 x Amoxicillin 250mg" in out
        assert "4.50 avg" in out
        assert "batch     2:" in out

    def test_read_only_command_does_not_write(self, cli, data_file):
        assert cli("warehouse", "list") == 0
        assert not data_file.exists()

    def test_warehouse_edit(self, cli, capsys):
        cli("warehouse", "add", "Hub")
        assert cli("warehouse", "edit", "1", "--name", "North Hub", "--type", "point_of_sale") == 0
        assert "North Hub (point_of_sale)" in capsys.readouterr().out

    def test_medicine_rename_and_delete(self, cli, capsys):
        cli("medicine", "add", "Amox")
        assert cli("medicine", "rename", "1", "Amoxicillin") == 0
        assert cli("medicine", "delete", "1") == 0
        capsys.readouterr()
        cli("medicine", "list")
        assert "No medicines" in capsys.readouterr().out


class TestErrors:

    def test_ledger_error_exit_one(self, stocked, capsys):
        capsys.readouterr()
        assert stocked("sell", "1", "1000") == 1
        err = capsys.readouterr().err
        assert "error [INSUFFICIENT_STOCK]" in err

    def test_failed_command_leaves_file_alone(self, stocked, data_file):
        before = data_file.read_text()
        assert stocked("transfer", "1", "1", "5") == 1
        assert data_file.read_text() == before

    def test_import_unknown_catalog_medicine(self, cli, capsys):
        cli("warehouse", "add", "Hub")
        assert cli("import", "9", "1", "1", "1.00", "2025-06-01") == 1
        assert "MEDICINE_NOT_FOUND" in capsys.readouterr().err

    def test_bad_price(self, cli, capsys):
        cli("warehouse", "add", "Hub")
        assert cli("import", "1", "1", "1", "free", "2025-06-01", "--name", "x") == 1
        assert "INVALID_PRICE" in capsys.readouterr().err

    def test_argparse_error_exit_two(self, cli):
        with pytest.raises(SystemExit) as exc_info:
            cli("sell", "one", "2")
        assert exc_info.value.code == 2

    def test_save_failure_exit_one(self, cli, data_file, capsys):
        data_file.mkdir()
        assert cli("warehouse", "add", "Hub") == 1
        assert "could not save" in capsys.readouterr().err
        assert list(data_file.parent.iterdir()) == [data_file]

    def test_bad_log_level_flag(self, cli):
        with pytest.raises(SystemExit) as exc_info:
            cli("--log-level", "LOUD", "summary")
        assert exc_info.value.code == 2


class TestViews:

    def test_batches(self, stocked, capsys):
        capsys.readouterr()
        assert stocked("batches", "--warehouse", "2") == 0
        out = capsys.readouterr().out
        assert "STOCK BATCHES" in out
        assert "2025-03-01" in out
        assert "Total: 1 batches" in out

    def test_expiring_uses_days(self, stocked, capsys):
        capsys.readouterr()
        stocked("expiring", "--days", "30")
        assert "Nothing expires within 30 days" in capsys.readouterr().out
        stocked("expiring", "--days", "60")
        assert "EXPIRING WITHIN 60 DAYS" in capsys.readouterr().out

    def test_expiring_default_from_settings(self, stocked, capsys):
        capsys.readouterr()
        stocked("expiring")
        assert "EXPIRING WITHIN 90 DAYS" in capsys.readouterr().out

    def test_logs(self, stocked, capsys):
        stocked("sell", "1", "3")
        capsys.readouterr()
        for stream in ("import", "export", "transfer"):
            assert stocked("log", stream) == 0
        out = capsys.readouterr().out
        assert "4.50" in out
        assert "No " not in out

    def test_summary(self, stocked, capsys):
        capsys.readouterr()
        stocked("summary")
        out = capsys.readouterr().out
        assert "Amoxicillin 250mg" in out
        assert "60" in out and "40" in out


class TestShell:

    def test_runs_until_cancel_keyword(self, cli, data_file, capsys):
        stdin = io.StringIO("warehouse add Hub\n\nwarehouse list\ncancel\nwarehouse add Never\n")
        assert cli("shell", stdin=stdin) == 0
        out = capsys.readouterr().out
        assert "Goodbye." in out
        doc = json.loads(data_file.read_text())
        assert [w["name"] for w in doc["warehouses"]] == ["Hub"]

    def test_ends_on_eof(self, cli, data_file):
        assert cli("shell", stdin=io.StringIO("supplier add Acme\n")) == 0
        assert json.loads(data_file.read_text())["suppliers"][0]["name"] == "Acme"

    def test_errors_do_not_end_session(self, cli, data_file, capsys):
        stdin = io.StringIO("sell 1 1\nbogus\nwarehouse add 'Main Street'\n")
        assert cli("shell", stdin=stdin) == 0
        err = capsys.readouterr().err
        assert "NO_POINT_OF_SALE" in err
        assert json.loads(data_file.read_text())["warehouses"][0]["name"] == "Main Street"

    def test_nested_shell_refused(self, cli, capsys):
        assert cli("shell", stdin=io.StringIO("shell\n")) == 2
        assert "'shell' is not available inside the shell" in capsys.readouterr().err

    def test_config_refused_in_shell(self, cli, tmp_path, capsys):
        assert cli("shell", stdin=io.StringIO("config init\n")) == 2
        assert "'config' is not available" in capsys.readouterr().err
        assert not (tmp_path / "absent.yaml").exists()

    def test_save_failure_keeps_session_alive(self, cli, data_file, capsys):
        data_file.mkdir()
        stdin = io.StringIO("warehouse add Hub\nwarehouse list\n")
        assert cli("shell", stdin=stdin) == 0
        captured = capsys.readouterr()
        assert f"could not save {data_file}" in captured.err
        assert "Hub" in captured.out
        assert "Goodbye." in captured.out

    def test_custom_cancel_keyword(self, tmp_path, data_file, deterministic_clock):
        config = tmp_path / "stock_ledger.yaml"
        config.write_text("cancel_keyword: quit\n")
        stdin = io.StringIO("warehouse add A\nquit\nwarehouse add B\n")
        main(["--config", str(config), "--data-file", str(data_file), "shell"],
             clock=deterministic_clock, stdin=stdin)
        assert len(json.loads(data_file.read_text())["warehouses"]) == 1


class TestConfigCommand:

    @pytest.fixture
    def config_file(self, tmp_path):
        return tmp_path / "stock_ledger.yaml"

    def test_init_writes_effective_settings(self, config_file, data_file, capsys):
        assert main(["--config", str(config_file), "--data-file", str(data_file), "config", "init"]) == 0
        assert f"Settings written to {config_file}" in capsys.readouterr().out
        settings = load_settings(config_file)
        assert settings.data_file == str(data_file)
        assert settings.cancel_keyword == "cancel"

    def test_later_runs_use_written_file(self, config_file, data_file, deterministic_clock):
        main(["--config", str(config_file), "--data-file", str(data_file), "config", "init"])
        assert main(["--config", str(config_file), "warehouse", "add", "Hub"], clock=deterministic_clock) == 0
        assert json.loads(data_file.read_text())["warehouses"][0]["name"] == "Hub"

    def test_init_refuses_to_overwrite(self, config_file, capsys):
        config_file.write_text("cancel_keyword: quit\n")
        assert main(["--config", str(config_file), "config", "init"]) == 1
        assert "already exists" in capsys.readouterr().err
        assert config_file.read_text() == "cancel_keyword: quit\n"

    def test_init_force_overwrites(self, config_file):
        config_file.write_text("cancel_keyword: quit\n")
        assert main(["--config", str(config_file), "--log-level", "debug", "config", "init", "--force"]) == 0
        settings = load_settings(config_file)
        assert settings.cancel_keyword == "quit"
        assert settings.log_level == "DEBUG"

    def test_show(self, config_file, capsys):
        assert main(["--config", str(config_file), "config", "show"]) == 0
        out = capsys.readouterr().out
        assert "SETTINGS" in out
        assert "expiry_alert_days" in out and "90" in out
        assert "not found, defaults" in out
        assert not config_file.exists()


class TestParserAndFormatting:

    def test_subcommands_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    @pytest.mark.parametrize(
        "value, expected",
        [("4.5", "4.50"), ("1234.567", "1,234.57"), ("0.005", "0.01"), ("17.142857", "17.14")],
    )
    def test_fmt_price(self, value, expected):
        assert fmt_price(value) == expected
