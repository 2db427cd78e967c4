"""welcomekit CLI over a JSON slot file."""
import io

from welcomekit.application.dialogs import OpenDialogConfiguration, SaveDialogConfiguration
from welcomekit.cli.main import PromptDialogPort, main


def _run(capsys, storage, *args):
    code = main(["--storage", str(storage), "--log-level", "ERROR", *args])
    return code, capsys.readouterr().out


def test_open_list_remove_clear(capsys, tmp_path, make_file):
    storage = tmp_path / "recents.json"
    a, b = make_file("a.txt"), make_file("b.txt")
    assert _run(capsys, storage, "open", str(a))[0] == 0
    assert _run(capsys, storage, "open", str(b))[0] == 0
    code, out = _run(capsys, storage, "list")
    assert code == 0
    assert out.splitlines() == [str(b), str(a)]
    _run(capsys, storage, "remove", str(b))
    assert _run(capsys, storage, "list")[1].splitlines() == [str(a)]
    _run(capsys, storage, "clear")
    assert _run(capsys, storage, "list")[1] == ""


def test_open_missing_file_fails(capsys, tmp_path):
    code, out = _run(capsys, tmp_path / "recents.json", "open", str(tmp_path / "nope.txt"))
    assert code == 1
    assert out.startswith("ERROR:")


def test_create_package_from_prompt(capsys, tmp_path, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt="": "Journal")
    storage = tmp_path / "recents.json"
    code, out = _run(capsys, storage, "create", "--package", "-d", str(tmp_path))
    expected = tmp_path.resolve() / "Journal" / "Journal.txt"
    assert code == 0
    assert expected.is_file()
    assert _run(capsys, storage, "list")[1].splitlines() == [str(expected)]


def test_open_prompt_eof_cancels(capsys, tmp_path, monkeypatch):
    def eof(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)
    code, out = _run(capsys, tmp_path / "recents.json", "open")
    assert code == 0
    assert "Cancelled." in out


def test_prompt_port_relative_and_default_names(tmp_path):
    port = PromptDialogPort(stream=io.StringIO("notes.txt\n\n"))
    chosen = port.present_open(OpenDialogConfiguration(directory=tmp_path)).result()
    assert chosen == tmp_path / "notes.txt"
    default = port.present_save(SaveDialogConfiguration(directory=tmp_path, default_file_name="Untitled")).result()
    assert default == tmp_path / "Untitled.txt"
    assert port.present_open(OpenDialogConfiguration(directory=tmp_path)).result() is None


def test_prompt_port_save_suffix_follows_default_kind(tmp_path):
    port = PromptDialogPort(stream=io.StringIO("notes\nnotes.md\nAlbum\n"))
    config = SaveDialogConfiguration(directory=tmp_path)
    assert port.present_save(config).result() == tmp_path / "notes.txt"
    assert port.present_save(config).result() == tmp_path / "notes.md"
    package = SaveDialogConfiguration(directory=tmp_path, allowed_kinds=())
    assert port.present_save(package).result() == tmp_path / "Album"


def test_create_file_gets_default_extension(capsys, tmp_path, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt="": "todo")
    code, out = _run(capsys, tmp_path / "recents.json", "create", "-d", str(tmp_path))
    assert code == 0
    assert (tmp_path / "todo.txt").is_file()
    assert not (tmp_path / "todo").exists()


def test_open_recovers_truncated_storage(capsys, tmp_path, make_file):
    storage = tmp_path / "recents.json"
    storage.write_text('{"recentProjectBookmarks": "[]"', encoding="utf-8")
    a = make_file("a.txt")
    assert _run(capsys, storage, "open", str(a))[0] == 0
    assert _run(capsys, storage, "list")[1].splitlines() == [str(a)]


def test_bad_dialog_config_exits_2(capsys, tmp_path):
    override = tmp_path / "wk.yaml"
    override.write_text("dialogs:\n  open:\n    allowed_kinds: [mp3]\n", encoding="utf-8")
    code = main(["--storage", str(tmp_path / "r.json"), "--config", str(override), "--log-level", "ERROR", "list"])
    assert code == 2
    assert "Unknown content kind" in capsys.readouterr().out
