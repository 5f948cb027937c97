import importlib.util
import io
import json
from pathlib import Path


SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "repair_llm_json.py"


def _load_script():
    module_spec = importlib.util.spec_from_file_location("repair_llm_json", SCRIPT_PATH)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_repairs_file(tmp_path, capsys) -> None:
    module = _load_script()
    source = tmp_path / "response.txt"
    source.write_text('Here you go: {"name": "Foo",}', encoding="utf-8")

    assert module.run(str(source), show_steps=True) == 0
    captured = capsys.readouterr()
    assert json.loads(captured.out) == {"name": "Foo"}
    assert "step=remove_trailing_commas" in captured.err


def test_reads_stdin(monkeypatch, capsys) -> None:
    module = _load_script()
    monkeypatch.setattr("sys.stdin", io.StringIO('{"a": [1,2,3}'))

    assert module.run("-", indent=0) == 0
    assert json.loads(capsys.readouterr().out) == {"a": [1, 2, 3]}


def test_no_json_exit_code(tmp_path, capsys) -> None:
    module = _load_script()
    source = tmp_path / "response.txt"
    source.write_text("no payload at all", encoding="utf-8")

    assert module.run(str(source)) == 1
    assert "error=no_json_content" in capsys.readouterr().err


def test_main_parses_arguments(tmp_path, monkeypatch, capsys) -> None:
    module = _load_script()
    monkeypatch.setattr(module, "setup_logging", lambda **kwargs: None)
    source = tmp_path / "response.txt"
    source.write_text('{"a": 1 2 3}', encoding="utf-8")

    assert module.main([str(source), "--indent", "0"]) == 1
    captured = capsys.readouterr()
    assert captured.out.strip() == '{"a": 1 2 3}'
    assert "error=unparseable_after_repair" in captured.err
