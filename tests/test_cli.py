import json
import sys

import pytest

from xmlskim.__main__ import EXIT_BAD_SELECTOR, EXIT_MALFORMED_DOCUMENT, EXIT_NO_MATCHES, main

DOC = '<feed><entry id="1"><link href="/1"/></entry><entry id="2" draft/></feed>'


@pytest.fixture
def doc_path(tmp_path):
    path = tmp_path / "feed.xml"
    path.write_text(DOC, encoding="utf-8")
    return path


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["xmlskim", *map(str, args)])
    main()


def test_prints_matching_start_tags(monkeypatch, capsys, doc_path):
    _run(monkeypatch, doc_path, "-s", "entry")
    assert capsys.readouterr().out == '<entry id="1">\n<entry id="2" draft/>\n'


def test_json_format(monkeypatch, capsys, doc_path):
    _run(monkeypatch, doc_path, "-s", "entry > link", "--format", "json")
    record = json.loads(capsys.readouterr().out)
    assert record == {"selector": "entry > link", "name": "link", "attrs": {"href": "/1"}, "depth": 2}


def test_name_format_and_first(monkeypatch, capsys, doc_path):
    _run(monkeypatch, doc_path, "-s", "entry", "--format", "name", "--first")
    assert capsys.readouterr().out == "entry\n"


def test_count_per_selector(monkeypatch, capsys, doc_path):
    _run(monkeypatch, doc_path, "-s", "entry", "-s", "entry[draft]", "-s", "missing", "--count")
    assert capsys.readouterr().out == "2\tentry\n1\tentry[draft]\n0\tmissing\n"


def test_no_matches_exit_code(monkeypatch, capsys, doc_path):
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, doc_path, "-s", "missing")
    assert excinfo.value.code == EXIT_NO_MATCHES
    assert capsys.readouterr().out == ""


def test_bad_selector_exit_code(monkeypatch, capsys, doc_path):
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, doc_path, "-s", "entry.x")
    assert excinfo.value.code == EXIT_BAD_SELECTOR
    assert "unsupported-selector" in capsys.readouterr().err


def test_malformed_document_exit_code(monkeypatch, capsys, tmp_path):
    path = tmp_path / "bad.xml"
    path.write_text("<feed><entry></feed>", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, path, "-s", "entry")
    assert excinfo.value.code == EXIT_MALFORMED_DOCUMENT
    captured = capsys.readouterr()
    assert captured.out == "<entry>\n"
    assert "unexpected-end-tag" in captured.err


def test_missing_selector_prints_help(monkeypatch, capsys, doc_path):
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, doc_path)
    assert excinfo.value.code == 1
    assert "usage:" in capsys.readouterr().err
