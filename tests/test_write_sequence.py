from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from ukirt_sequence.errors import ExhaustedNamesError, FileAccessError
from ukirt_sequence.naming import MAX_COUNTER, exec_names, exec_stem, instrument_file_label
from ukirt_sequence.sequence import SequenceDocument


TS = datetime(2005, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


def test_exec_stem_and_labels():
    assert exec_stem("ufti", TS) == "UFTI_20050102030405678"
    assert exec_stem("MICHELLE", TS) == "Michelle_20050102030405"
    assert instrument_file_label("michelle") == "Michelle"
    assert instrument_file_label("WFCAM") == "WFCAM"


def test_exec_stem_converts_to_utc():
    hst = timezone(timedelta(hours=-10))
    assert exec_stem("UIST", TS.astimezone(hst)) == "UIST_20050102030405678"


def test_exec_names_are_numbered():
    names = list(exec_names("UFTI_x"))
    assert len(names) == MAX_COUNTER
    assert names[0] == "UFTI_x000.exec"
    assert names[-1] == "UFTI_x999.exec"


def test_write_picks_next_free_name(tmp_path: Path) -> None:
    seq = SequenceDocument(["set_inst UFTI", "setHeader MSBID abc", "do 1 _observe"])
    p1 = seq.write_sequence(tmp_path, timestamp=TS)
    p2 = seq.write_sequence(tmp_path, timestamp=TS)
    assert p1.name == "UFTI_20050102030405678000.exec"
    assert p2.name == "UFTI_20050102030405678001.exec"
    assert p1.read_text(encoding="utf-8") == "set_inst UFTI\nsetHeader MSBID abc\ndo 1 _observe\n"


def test_michelle_name_has_no_millis(tmp_path: Path) -> None:
    seq = SequenceDocument(["set_inst michelle"])
    p = seq.write_sequence(tmp_path, timestamp=TS)
    assert p.name == "Michelle_20050102030405000.exec"


def test_written_exec_reads_back(tmp_path: Path) -> None:
    seq = SequenceDocument(["set_inst UIST", 'setHeader MSBTITLE "M 31"', "startGroup", "endGroup"])
    seq.set_header_item("PROJECT", "u/05a/1")
    out = seq.write_sequence(tmp_path, timestamp=TS)

    again = SequenceDocument.from_file(out)
    assert again.lines == seq.lines
    assert again.get_project_id() == "u/05a/1"
    assert again.get_msb_title() == "M 31"
    assert again.input_dir == str(tmp_path)


def test_all_names_taken(tmp_path: Path) -> None:
    stem = exec_stem("UFTI", TS)
    for name in exec_names(stem):
        (tmp_path / name).touch()
    seq = SequenceDocument(["set_inst UFTI"])
    with pytest.raises(ExhaustedNamesError) as e:
        seq.write_sequence(tmp_path, timestamp=TS)
    assert stem in str(e.value)


def test_missing_output_dir(tmp_path: Path) -> None:
    seq = SequenceDocument(["set_inst UFTI"])
    with pytest.raises(FileAccessError):
        seq.write_sequence(tmp_path / "does" / "not" / "exist", timestamp=TS)


def test_queue_hooks_do_nothing():
    seq = SequenceDocument(["set_inst UFTI"])
    seq.fixup()
    seq.verify()
    assert seq.lines == ["set_inst UFTI"]
    assert not seq.modified
