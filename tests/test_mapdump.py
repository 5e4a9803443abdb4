import json

import pytest

from mapdump import dump_mappings, main

MAPPINGS = "AAAA,EAAEA;;ACCC"

EXPECTED = [
    "================",
    "Line 0",
    "   column 0",
    "   source #0",
    "   orig line 0",
    "   orig column 0",
    "",
    "   column 2",
    "   source #0",
    "   orig line 0",
    "   orig column 2",
    "   name #0",
    "",
    "",
    "================",
    "Line 1",
    "",
    "================",
    "Line 2",
    "   column 0",
    "   source #1",
    "   orig line 1",
    "   orig column 3",
    "",
    "",
]


def test_dump_mappings():
    assert list(dump_mappings(MAPPINGS)) == EXPECTED


def test_dump_column_resets_per_line():
    lines = list(dump_mappings("E;E"))
    assert lines.count("   column 2") == 2


def test_main_mappings(capsys):
    assert main([MAPPINGS]) == 0
    assert capsys.readouterr().out.splitlines() == EXPECTED


def test_main_file(tmp_path, capsys):
    path = tmp_path / "out.js.map"
    smap = {"version": 3, "sources": ["a.js", "b.js"], "names": ["foo"], "mappings": MAPPINGS}
    path.write_text(json.dumps(smap))
    assert main(["--file", str(path)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[3] == "   source #0 a.js"
    assert out[11] == "   name #0 foo"
    assert out[20] == "   source #1 b.js"
    assert len(out) == len(EXPECTED)


def test_main_bad_mappings(capsys):
    assert main(["AAg"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error while decoding mappings" in captured.err


@pytest.mark.parametrize(
    "content",
    ["{not json", json.dumps({"version": 3}), json.dumps(["mappings"])],
)
def test_main_bad_file(tmp_path, capsys, content):
    path = tmp_path / "out.js.map"
    path.write_text(content)
    assert main(["--file", str(path)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error while reading source map" in captured.err


def test_main_missing_file(tmp_path, capsys):
    assert main(["--file", str(tmp_path / "missing.map")]) == 1
    assert "Error while reading source map" in capsys.readouterr().err


def test_main_permissive(capsys):
    mappings = "/" * 12 + "Q"
    assert main([mappings]) == 1
    capsys.readouterr()
    assert main(["--permissive", mappings]) == 0
    assert f"   column {-((1 << 59) - 1)}" in capsys.readouterr().out
