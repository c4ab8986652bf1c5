import pytest

import main
from utils import app_config


@pytest.fixture()
def run(tmp_path, capsys):
    db_path = str(tmp_path / "cli.db")

    def _run(*argv):
        code = main.main(["--db", db_path, *argv])
        out = capsys.readouterr()
        return code, out.out, out.err

    return _run


def test_add_recurring_and_show_series(run):
    code, out, _ = run("add", "50", "--date", "2024-01-15", "--category", "Bills",
                       "--note", "Gym", "--recur", "monthly", "--end-date", "2024-04-15")
    assert code == 0
    assert "-$50.00" in out
    assert "Scheduled 3 more (every month until 2024-04-15)" in out

    code, out, _ = run("series", "1")
    assert code == 0
    assert [line.split()[1] for line in out.strip().splitlines()] == [
        "2024-01-15", "2024-02-15", "2024-03-15", "2024-04-15",
    ]


def test_edit_apply_to_future(run):
    run("add", "-20", "--date", "2024-01-01", "--recur", "monthly", "--end-date", "2024-06-01")
    code, out, _ = run("edit", "3", "--amount", "-25", "--recur", "biweekly",
                       "--end-date", "2024-04-01", "--apply-to-future")
    assert code == 0
    assert "Series regenerated: 3 removed, 2 created" in out

    _, out, _ = run("series", "1")
    dates = [line.split()[1] for line in out.strip().splitlines()]
    assert dates == ["2024-01-01", "2024-02-01", "2024-03-01", "2024-03-15", "2024-03-29"]


def test_edit_end_date_only_keeps_the_rule(run):
    run("add", "-50", "--date", "2024-01-15", "--category", "Bills", "--recur", "monthly")
    code, out, _ = run("edit", "1", "--end-date", "2024-03-15", "--apply-to-future")
    assert code == 0
    assert "[every month until 2024-03-15]" in out
    assert "Series regenerated: 12 removed, 2 created" in out

    _, out, _ = run("series", "1")
    dates = [line.split()[1] for line in out.strip().splitlines()]
    assert dates == ["2024-01-15", "2024-02-15", "2024-03-15"]


def test_edit_interval_only_keeps_frequency_and_end_date(run):
    run("add", "-50", "--date", "2024-01-15", "--recur", "monthly", "--end-date", "2024-05-15")
    code, out, _ = run("edit", "1", "--interval", "2", "--apply-to-future")
    assert code == 0

    _, out, _ = run("series", "1")
    dates = [line.split()[1] for line in out.strip().splitlines()]
    assert dates == ["2024-01-15", "2024-03-15", "2024-05-15"]


def test_custom_rule_with_default_end(run):
    code, out, _ = run("add", "-5", "--date", "2024-01-01", "--frequency", "weekly",
                       "--interval", "3", "--default-end")
    assert code == 0
    assert "every 3 weeks until 2024-09-09" in out
    assert "Scheduled 12 more" in out


def test_list_with_category_filter(run):
    run("add", "12", "--date", "2024-03-02", "--category", "Dining")
    run("add", "900", "--date", "2024-03-01", "--category", "Income")
    code, out, _ = run("list", "--month", "2024-03", "--category", "Dining")
    assert code == 0
    assert "March 2024" in out
    assert "Dining" in out
    assert "Income" not in out.split("\n", 1)[1]
    assert "spent $12.00" in out


def test_budget_commands(run):
    run("add", "1800", "--date", "2024-03-01", "--category", "Income")
    run("add", "100", "--date", "2024-03-03", "--category", "Dining")
    code, out, _ = run("budget", "set", "150", "--category", "Dining", "--month", "2024-03")
    assert code == 0
    assert "Dining" in out and "$100.00 of $150.00" in out

    _, out, _ = run("budget", "sync", "on", "--month", "2024-03")
    assert "budget $1,800.00 (synced with income)" in out


def test_chart_writes_png(run, tmp_path):
    run("add", "40", "--date", "2024-03-03", "--category", "Transport")
    out_file = tmp_path / "chart.png"
    code, out, _ = run("chart", "--month", "2024-03", "--out", str(out_file))
    assert code == 0
    assert out_file.read_bytes()[:4] == b"\x89PNG"


def test_validation_errors_exit_nonzero(run):
    code, _, err = run("add", "10", "--category", "Nope")
    assert code == 1
    assert "Unknown category: Nope" in err

    code, _, err = run("delete", "42")
    assert code == 1
    assert "not found" in err


def test_duplicate_and_delete(run):
    run("add", "-7", "--date", "2024-02-02", "--note", "Snacks")
    code, out, _ = run("duplicate", "1")
    assert code == 0 and "#2" in out
    code, out, _ = run("delete", "1")
    assert code == 0
    _, out, _ = run("list", "--month", "2024-02")
    assert "#2" in out and "#1 " not in out


def test_budget_delete(run):
    run("budget", "set", "150", "--category", "Dining", "--month", "2024-03")
    code, out, _ = run("budget", "delete", "--category", "Dining", "--month", "2024-03")
    assert code == 0
    assert "Dining" not in out

    code, _, err = run("budget", "delete", "--category", "Dining", "--month", "2024-03")
    assert code == 1
    assert "No budget" in err


def test_db_path_is_saved_to_config(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(app_config, "CONFIG_FILE", tmp_path / "config.json")
    target = str(tmp_path / "books.db")

    assert main.main(["db-path", target]) == 0
    assert capsys.readouterr().out.strip() == target
    assert app_config.get_db_path() == target

    assert main.main(["db-path", "--reset"]) == 0
    assert capsys.readouterr().out.strip() == "spenderplus.db"
