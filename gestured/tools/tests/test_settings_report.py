from gestured.core.settings import GestureActions
from gestured.main import reload_main
from gestured.tools.settings_report import format_row, main, rows


CONFIG = """
[swipe.up]
3 = "ctrl+t"

[firefox.swipe.up]
3 = "ctrl+y"

[chrome.swipe.up]
3 = ""
"""


def test_rows_for_app():
    a = GestureActions.from_mapping({"swipe.up.3": "ctrl+t", "chrome.swipe.up.3": ""})
    by_key = {s.config: s for s in rows(a, "chrome")}
    assert format_row(by_key["chrome.swipe.up.3"]).endswith("(disabled)")
    assert format_row(by_key["chrome.swipe.down.3"]).endswith("- (inherited)")

    by_key = {s.config: s for s in rows(a)}
    assert format_row(by_key["swipe.up.3"]).endswith("ctrl+t")


def test_cli_lists_apps(tmp_path, capsys):
    p = tmp_path / "config.toml"
    p.write_text(CONFIG)
    assert main(["--config", str(p), "--apps"]) == 0
    assert capsys.readouterr().out.split() == ["chrome", "firefox"]


def test_cli_missing_config(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "missing.toml")]) == 1
    assert "not found" in capsys.readouterr().err


def test_reload_cli_without_daemon(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(tmp_path))
    assert reload_main(["--timeout", "0.5"]) == 2
    assert "not running" in capsys.readouterr().err
