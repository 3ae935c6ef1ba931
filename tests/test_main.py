import io

import pytest

from statekeeper.main import StateConsole, main


@pytest.fixture
def console(state):
    return StateConsole(state, out=io.StringIO())


def test_console_sets_states(console, state):
    console.run(["OK", "NOT_OK {error: bad}", "?"])
    assert state.is_(state.NOT_OK)
    assert state.NOT_OK == {"error": "bad"}
    assert console.out.getvalue() == "NOT_OK {'error': 'bad'}\n"


def test_console_skips_comments_and_stops_on_quit(console, state):
    console.run(["# comment", "", "OK", "quit", "NOT_OK"])
    assert state.is_(state.OK)


def test_console_unsubscribes_when_done(console, state):
    assert len(state.internal.subscribers) == 1
    console.run([])
    assert state.internal.subscribers == []


def test_console_reports_errors_and_continues(console, state, caplog):
    console.run(["MISSING", "OK {unclosed", "OK"])
    assert state.is_(state.OK)
    assert "Unknown state: MISSING" in caplog.text
    assert "Bad context for OK" in caplog.text


def test_console_logs_transitions(console, caplog):
    caplog.set_level("INFO", logger="statekeeper.main")
    console.execute("NOT_OK")
    assert "State → NOT_OK {'id': 2}" in caplog.text


def test_main(tmp_path, monkeypatch, capsys):
    path = tmp_path / "states.yaml"
    path.write_text("states:\n  IDLE:\n  BUSY: {jobs: 1}\n")
    monkeypatch.setattr("sys.stdin", io.StringIO("BUSY\n?\n"))

    assert main([str(path)]) == 0
    out = capsys.readouterr().out
    assert "BUSY {'jobs': 1}" in out
    assert "Final state: BUSY" in out


def test_main_without_states(tmp_path, capsys):
    assert main([str(tmp_path / "missing.yaml")]) == 1
    assert "Could not build state" in capsys.readouterr().out


@pytest.mark.parametrize("text", [
    "states:\n  - IDLE\n",
    "states: {IDLE: [unclosed\n",
])
def test_main_with_unusable_config(tmp_path, capsys, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text)
    assert main([str(path)]) == 1
    assert "Could not build state" in capsys.readouterr().out


def test_main_with_bad_max_depth(tmp_path, monkeypatch, capsys):
    path = tmp_path / "states.yaml"
    path.write_text("states:\n  IDLE:\n")
    monkeypatch.setenv("STATEKEEPER_MAX_DEPTH", "lots")
    assert main([str(path)]) == 1
    assert "max_depth must be an integer" in capsys.readouterr().out
