import json

import pytest

from jsonlens import __version__
from jsonlens.cli import EXIT_INVALID, EXIT_OK, EXIT_USAGE, main
from jsonlens.core.preferences import DEFAULT_PREFERENCES, save_preferences


@pytest.fixture
def run(tmp_path):
    runtime = tmp_path / "runtime"

    def _run(*args):
        return main(["--runtime-dir", str(runtime), *args])

    _run.runtime = runtime
    return _run


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_check_valid_with_metrics(run, tmp_path, capsys):
    path = _write(tmp_path, "ok.json", '{"a":{"b":[1,2]}}')
    assert run("check", path, "--metrics") == EXIT_OK
    out = capsys.readouterr().out
    assert out.startswith("Valid JSON")
    assert "Depth    3" in out
    assert "Keys     2" in out


def test_check_invalid_prints_context(run, tmp_path, capsys, missing_comma_text):
    path = _write(tmp_path, "bad.json", missing_comma_text)
    assert run("check", path) == EXIT_INVALID
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "Comma error: Missing comma separator (line 3, column 3)"
    assert '> 3 |   "b": 2' in out
    assert "  1 | {" in out
    assert (run.runtime / "operations.log").exists()
    assert "category=CommaError" in (run.runtime / "jsonlens_diagnostics.log").read_text(encoding="utf-8")


def test_check_hint_and_snippet(run, tmp_path, capsys):
    path = _write(tmp_path, "typo.json", '{\n  "a": flase\n}')
    snippet = tmp_path / "err.png"
    assert run("check", path, "--snippet", str(snippet)) == EXIT_INVALID
    out = capsys.readouterr().out
    assert "hint: Did you mean `false`?" in out
    assert snippet.exists()


def test_no_log_leaves_runtime_dir_untouched(run, tmp_path):
    path = _write(tmp_path, "ok.json", "[]")
    assert run("--no-log", "check", path) == EXIT_OK
    assert not (run.runtime / "operations.log").exists()


def test_metrics_json(run, tmp_path, capsys):
    path = _write(tmp_path, "m.json", "[1,\n[2]]")
    assert run("metrics", path, "--json") == EXIT_OK
    payload = json.loads(capsys.readouterr().out)
    assert payload == {"lines": 2, "chars": 8, "bytes": 8, "depth": 2, "objects": 0, "arrays": 2, "keys": 0}


def test_metrics_skip_structure(run, tmp_path, capsys):
    path = _write(tmp_path, "m.json", "[[1]]")
    assert run("metrics", path, "--json", "--skip-structure") == EXIT_OK
    assert json.loads(capsys.readouterr().out)["arrays"] == 0


def test_format_to_file(run, tmp_path):
    path = _write(tmp_path, "f.json", '{"a":1}')
    out = tmp_path / "out.json"
    assert run("format", path, "--indent", "4", "--no-trailing-newline", "-o", str(out)) == EXIT_OK
    assert out.read_text(encoding="utf-8") == '{\n    "a": 1\n}'


def test_format_invalid(run, tmp_path, capsys):
    path = _write(tmp_path, "f.json", "[1 2]")
    assert run("format", path) == EXIT_INVALID
    assert "Missing comma separator" in capsys.readouterr().err


def test_minify_with_stats(run, tmp_path, capsys):
    path = _write(tmp_path, "m.json", '{ "a" : [1, 2] }')
    assert run("minify", path, "--stats") == EXIT_OK
    captured = capsys.readouterr()
    assert captured.out == '{"a":[1,2]}\n'
    assert "saved" in captured.err


def test_logs_stats_and_clear(run, tmp_path, capsys):
    good = _write(tmp_path, "ok.json", "[]")
    bad = _write(tmp_path, "bad.json", "[")
    run("check", good)
    run("check", bad)
    capsys.readouterr()

    assert run("logs", "--limit", "1") == EXIT_OK
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1
    assert "validate" in lines[0] and "error" in lines[0]

    assert run("stats") == EXIT_OK
    out = capsys.readouterr().out
    assert "operations  2" in out
    assert "success     1 (50.0%)" in out

    assert run("logs", "--diag") == EXIT_OK
    assert "category=UnexpectedEof" in capsys.readouterr().out

    assert run("logs", "--clear") == EXIT_OK
    capsys.readouterr()
    run("logs")
    assert capsys.readouterr().out == ""


def test_missing_file(run, tmp_path, capsys):
    assert run("check", str(tmp_path / "absent.json")) == EXIT_USAGE
    assert "jsonlens:" in capsys.readouterr().err


def test_version(capsys):
    with pytest.raises(SystemExit):
        main(["--version"])
    assert __version__ in capsys.readouterr().out


def test_preference_file_size_limit(run, tmp_path, capsys):
    prefs = DEFAULT_PREFERENCES.with_changes(max_file_size=4)
    assert save_preferences(str(run.runtime / "preferences.json"), prefs)
    path = _write(tmp_path, "big.json", "[1, 2, 3]")
    assert run("check", path) == EXIT_INVALID
    assert "limit" in capsys.readouterr().err
