from __future__ import annotations

from pathlib import Path

import pytest

from ukirt_sequence.configs import split_lines
from ukirt_sequence.errors import (
    BadArgumentError,
    ConfigNotFoundError,
    FileAccessError,
    StateError,
    UnrecognizedConfigFormatError,
)
from ukirt_sequence.paths import config_candidates
from ukirt_sequence.sequence import SequenceDocument


TEL_CONFIG_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<TCS_CONFIG TELESCOPE="UKIRT">
  <BASE TYPE="SCIENCE">
    <target>
      <targetName>NGC 1068</targetName>
      <spherSystem SYSTEM="J2000">
        <c1>02:42:40.71</c1>
        <c2>-00:00:47.8</c2>
      </spherSystem>
    </target>
  </BASE>
  <BASE TYPE="GUIDE">
    <target>
      <targetName>GSC 0123</targetName>
      <spherSystem SYSTEM="J2000">
        <c1>02:42:45.00</c1>
        <c2>-00:01:30.0</c2>
      </spherSystem>
    </target>
  </BASE>
</TCS_CONFIG>
"""


@pytest.fixture()
def layout(tmp_path: Path) -> dict[str, Path]:
    """<root>/execs for execs, <root>/configs for shared configs."""
    execs = tmp_path / "execs"
    configs = tmp_path / "configs"
    execs.mkdir()
    configs.mkdir()
    return {"execs": execs, "configs": configs}


def _write_exec(d: Path, lines: list[str], name: str = "UFTI_20050101_001.exec") -> Path:
    p = d / name
    p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return p


def test_exec_dir_wins_over_configs_dir(layout):
    (layout["execs"] / "c1.conf").write_text("filter = J\n", encoding="utf-8")
    (layout["configs"] / "c1.conf").write_text("filter = K\n", encoding="utf-8")
    seq = SequenceDocument.from_file(_write_exec(layout["execs"], ["loadConfig c1"]))
    assert seq.get_config_item("filter") == ["J"]
    assert seq.get_config("c1").filename == str(layout["execs"] / "c1.conf")


def test_lowercase_fallback(layout):
    (layout["execs"] / "uist_im.conf").write_text("filter = H\n", encoding="utf-8")
    seq = SequenceDocument.from_file(_write_exec(layout["execs"], ["loadConfig UIST_IM"]))
    assert seq.config_order == ("UIST_IM",)
    assert seq.get_config_item("filter") == ["H"]


def test_shared_configs_dir_fallback(layout):
    (layout["configs"] / "c2.aim").write_text("K filter\n", encoding="utf-8")
    seq = SequenceDocument.from_file(_write_exec(layout["execs"], ["loadConfig c2"]))
    assert seq.get_config_item("filter") == ["K"]


def test_exact_name_with_suffix(layout):
    (layout["execs"] / "c3.conf").write_text("filter = Z\n", encoding="utf-8")
    seq = SequenceDocument.from_file(_write_exec(layout["execs"], ["loadConfig c3.conf"]))
    assert seq.config_order == ("c3.conf",)


def test_missing_config_lists_every_candidate(layout):
    with pytest.raises(ConfigNotFoundError) as e:
        SequenceDocument.from_file(_write_exec(layout["execs"], ["loadConfig Mixed"]))
    assert len(e.value.candidates) == 12
    assert e.value.candidates[0] == str(layout["execs"] / "Mixed")
    assert "Mixed" in str(e.value)


def test_lowercase_name_candidates_are_deduplicated(layout):
    cands = config_candidates("lower", layout["execs"])
    assert len(cands) == 6
    assert [c.name for c in cands] == ["lower", "lower.conf", "lower.aim"] * 2


def test_unrecognized_config_suffix(layout):
    (layout["execs"] / "c1.txt").write_text("filter = J\n", encoding="utf-8")
    with pytest.raises(UnrecognizedConfigFormatError):
        SequenceDocument.from_file(_write_exec(layout["execs"], ["loadConfig c1.txt"]))


def test_config_order_is_first_reference_order(layout):
    for name, filt in (("c1", "J"), ("c2", "H")):
        (layout["execs"] / f"{name}.conf").write_text(f"filter = {filt}\ncamera = imaging\n", encoding="utf-8")
    seq = SequenceDocument.from_file(
        _write_exec(layout["execs"], ["loadConfig c2", "do 1 _observe", "loadConfig c1", "loadConfig c2"])
    )
    assert seq.config_order == ("c2", "c1")
    assert seq.get_config_item("filter") == ["H", "J"]
    assert seq.get_config_item("nosuch") == [None, None]
    assert set(seq.configs) == {"c1", "c2"}
    assert seq.get_config("missing") is None

    with pytest.raises(StateError):
        seq.set_config_order(["c1", "c2"])


def test_config_order_must_match_configs():
    seq = SequenceDocument(["set_inst UFTI"])
    assert seq.config_order == ()
    with pytest.raises(BadArgumentError):
        seq.set_config_order(["c1"])


def test_set_lines_does_not_reparse(layout):
    (layout["execs"] / "c1.conf").write_text("filter = J\n", encoding="utf-8")
    seq = SequenceDocument.from_file(_write_exec(layout["execs"], ["set_inst UFTI", "loadConfig c1"]))
    seq.set_lines(["set_inst CGS4"])
    assert seq.lines == ["set_inst CGS4"]
    assert seq.config_order == ("c1",)
    assert seq.get_instrument() == "CGS4"
    assert not seq.modified


def test_input_file_and_dir(layout):
    p = _write_exec(layout["execs"], ["set_inst UFTI"])
    seq = SequenceDocument.from_file(p)
    assert seq.input_file == str(p)
    assert seq.input_dir == str(layout["execs"])
    assert seq.lines == ["set_inst UFTI"]


def test_missing_exec_is_file_access_error(tmp_path: Path) -> None:
    with pytest.raises(FileAccessError):
        SequenceDocument.from_file(tmp_path / "nope.exec")


def test_needs_no_input():
    seq = SequenceDocument()
    assert seq.lines == []
    assert seq.get_target() is None
    assert seq.get_target_name() == "NONE"


def test_legacy_target_lines():
    seq = SequenceDocument(
        [
            "SET_TARGET NGC1068 J2000 02:42:40.71 -00:00:47.8 0 0",
            "SET_TARGET Other J2000 10:00:00 +10:00:00 0 0",
            "SET_GUIDE GSC123 J2000 02:42:45.00 -00:01:30.0",
            "SET_SKY Sky1 B1950 02:40:00.0 -00:10:00 0 0",
        ]
    )
    assert seq.uses_legacy_coordinates
    target = seq.get_target()
    assert target is not None
    assert target.name == "NGC1068"
    assert target.ra.deg == pytest.approx(40.6696, abs=1e-3)
    assert target.dec.deg == pytest.approx(-0.01328, abs=1e-4)
    # six tokens: not a coordinate line
    assert seq.get_guide() is None
    assert seq.get_guide_name() is None
    assert seq.get_coords("sky").system == "B1950"
    assert seq.get_coords("TARGET") is target


def test_legacy_bad_coordinates_abort():
    with pytest.raises(BadArgumentError):
        SequenceDocument(["SET_TARGET X J2000 notanangle -00:00:47.8 0 0"])


def test_tel_config_from_shared_configs_dir(layout):
    (layout["configs"] / "tcs.xml").write_text(TEL_CONFIG_XML, encoding="utf-8")
    seq = SequenceDocument.from_file(
        _write_exec(
            layout["execs"],
            ["SET_TARGET Legacy J2000 10:00:00 +10:00:00 0 0", "telConfig tcs.xml", "set_inst UFTI"],
        )
    )
    assert not seq.uses_legacy_coordinates
    assert seq.coordinates.tcs.telescope == "UKIRT"
    assert seq.coordinates.filename == str(layout["execs"] / ".." / "configs" / "tcs.xml")
    assert seq.get_target_name() == "NGC 1068"
    assert seq.get_guide_name() == "GSC 0123"
    assert seq.get_target().ra.deg == pytest.approx(40.6696, abs=1e-3)


def test_malformed_tel_config(layout):
    (layout["execs"] / "bad.xml").write_text("<TCS_CONFIG><BASE>", encoding="utf-8")
    with pytest.raises(FileAccessError):
        SequenceDocument.from_file(_write_exec(layout["execs"], ["telConfig bad.xml"]))


def test_missing_tel_config(layout):
    with pytest.raises(ConfigNotFoundError) as e:
        SequenceDocument.from_file(_write_exec(layout["execs"], ["telConfig gone.xml"]))
    assert len(e.value.candidates) == 2


def test_lines_accept_text():
    seq = SequenceDocument("set_inst UFTI\nsetHeader MSBID x\n")
    assert seq.lines == ["set_inst UFTI", "setHeader MSBID x"]
    assert seq.get_msb_id() == "x"
    assert "SequenceDocument(" in repr(seq)


def test_indented_directives_are_ignored(layout):
    (layout["execs"] / "c1.conf").write_text("filter = J\n", encoding="utf-8")
    seq = SequenceDocument.from_file(
        _write_exec(
            layout["execs"],
            [
                "loadConfig c1",
                "  loadConfig missing",
                "\ttelConfig missing.xml",
                " SET_TARGET X J2000 10:00:00 +10:00:00 0 0",
            ],
        )
    )
    assert seq.config_order == ("c1",)
    assert seq.coordinates is None
    assert seq.get_target_name() == "NONE"


def test_only_line_breaks_split_lines(layout):
    lines = ["set_inst UFTI", "setHeader MSBTITLE page\x0cbreak", "do 1 _observe x"]
    p = layout["execs"] / "UFTI_ff.exec"
    p.write_text("\r\n".join(lines) + "\r\n", encoding="utf-8", newline="")
    seq = SequenceDocument.from_file(p)
    assert seq.lines == lines
    assert seq.get_msb_title() == "page\x0cbreak"
    assert SequenceDocument("\n".join(lines)).lines == lines

    out = seq.write_sequence(layout["execs"])
    assert SequenceDocument.from_file(out).lines == lines


def test_split_lines():
    assert split_lines("") == []
    assert split_lines("a\n") == ["a"]
    assert split_lines("a\r\nb\rc") == ["a", "b", "c"]
    assert split_lines("a\n\n") == ["a", ""]
    assert split_lines("a\x0bb\x1cc") == ["a\x0bb\x1cc"]
