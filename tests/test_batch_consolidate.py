from pathlib import Path

import batch_consolidate
from tests.workbooks import ifr_bytes, open_output, template_bytes


def _setup(tmp_path: Path, names):
    template = tmp_path / "template.xlsx"
    template.write_bytes(template_bytes())
    folder = tmp_path / "ifr"
    folder.mkdir()
    for name in names:
        (folder / name).write_bytes(ifr_bytes())
    return template, folder


def test_batch_writes_output_workbook(tmp_path, monkeypatch, capsys) -> None:
    template, folder = _setup(tmp_path, ["2 B.xlsx", "~$2 B.xlsx", "notes.txt", "NOID.xlsx"])
    (folder / "notes.txt").write_text("ignore me")
    monkeypatch.chdir(tmp_path)

    code = batch_consolidate.main([str(template), str(folder), "--output", "OUT", "--ia", "X"])

    assert code == 0
    out = tmp_path / "OUT.xlsx"
    assert out.exists()
    assert open_output(out.read_bytes())["C2"].value == "DELACRUZ"
    printed = capsys.readouterr().out
    assert "Consolidated 1 file(s), skipped 1" in printed
    assert "[NOID.xlsx] skipped" in printed


def test_batch_reports_fatal_failure(tmp_path, monkeypatch, capsys) -> None:
    template, folder = _setup(tmp_path, ["NOID.xlsx"])
    monkeypatch.chdir(tmp_path)

    code = batch_consolidate.main([str(template), str(folder)])

    assert code == 2
    assert "Consolidation failed" in capsys.readouterr().out


def test_batch_rejects_missing_folder(tmp_path) -> None:
    template, _ = _setup(tmp_path, [])

    assert batch_consolidate.main([str(template), str(tmp_path / "missing")]) == 1
