# === NAVMAP v1 ===
# {
#   "module": "tests.doxygen_runner.test_doxyfile",
#   "purpose": "Directive mapping and directive file persistence tests.",
#   "sections": [
#     {"id": "tests", "name": "Test Cases", "anchor": "TST", "kind": "tests"}
#   ]
# }
# === /NAVMAP ===

"""Directive mapping and directive file persistence tests.

Covers the option-to-directive mapping table, the ``KEY = value`` file
format and its round trip, and the XML folder reset performed before each
run so stale artefacts never leak into a new run."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from RenderDocs.DoxygenRunner.doxyfile import (
    build_directives,
    prepare,
    read_doxyfile,
    write_doxyfile,
)
from RenderDocs.DoxygenRunner.settings import AccessLevel


@pytest.mark.parametrize(
    ("extensions", "expected"),
    [([".h"], ".h"), ([".h", ".cpp"], ".h .cpp")],
)
def test_file_patterns_are_space_joined(make_options, extensions, expected) -> None:
    directives = build_directives(make_options(file_extensions=extensions))

    assert directives["FILE_PATTERNS"] == expected


def test_private_access_enables_private_extraction(make_options) -> None:
    private = build_directives(make_options(access_level="private"))
    public = build_directives(make_options(access_level=AccessLevel.PUBLIC))

    assert private["EXTRACT_PRIVATE"] == "YES"
    assert public["EXTRACT_PRIVATE"] == "NO"
    assert private["EXTRACT_STATIC"] == public["EXTRACT_STATIC"] == "NO"


def test_fixed_directives(make_options, source_tree: Path) -> None:
    options = make_options(exclude="*/test/*")
    directives = build_directives(options)

    assert list(directives) == [
        "INPUT",
        "RECURSIVE",
        "GENERATE_HTML",
        "GENERATE_LATEX",
        "GENERATE_XML",
        "XML_OUTPUT",
        "CASE_SENSE_NAMES",
        "FILE_PATTERNS",
        "EXCLUDE_PATTERNS",
        "EXTRACT_PRIVATE",
        "EXTRACT_STATIC",
        "QUIET",
        "WARN_NO_PARAMDOC",
        "WARN_AS_ERROR",
        "ENABLE_PREPROCESSING",
    ]
    assert directives["INPUT"] == str(source_tree)
    assert directives["RECURSIVE"] == "YES"
    assert directives["GENERATE_HTML"] == directives["GENERATE_LATEX"] == "NO"
    assert directives["GENERATE_XML"] == "YES"
    assert directives["XML_OUTPUT"] == str(options.xml_folder)
    assert directives["CASE_SENSE_NAMES"] == "NO"
    assert directives["EXCLUDE_PATTERNS"] == "*/test/*"
    assert directives["WARN_NO_PARAMDOC"] == "YES"
    assert directives["WARN_AS_ERROR"] == "FAIL_ON_WARNINGS"
    assert directives["ENABLE_PREPROCESSING"] == "NO"


def test_quiet_mode_follows_debug_flag(make_options) -> None:
    assert build_directives(make_options(debug=False))["QUIET"] == "YES"
    assert build_directives(make_options(debug=True))["QUIET"] == "NO"


def test_missing_exclude_maps_to_empty_value(make_options) -> None:
    assert build_directives(make_options())["EXCLUDE_PATTERNS"] == ""


def test_xml_generation_toggle(make_options) -> None:
    assert build_directives(make_options(output_xml=False))["GENERATE_XML"] == "NO"


def test_same_options_produce_same_directives(make_options) -> None:
    options = make_options(file_extensions=[".h", ".hpp"], exclude="*/extern/*")

    assert build_directives(options) == build_directives(options.model_copy())


def test_directive_file_round_trip(make_options, tmp_path: Path) -> None:
    source = tmp_path / "my sources"
    source.mkdir()
    directives = build_directives(make_options(source_folder=source, file_extensions=[".h", ".cpp"]))
    path = write_doxyfile(directives, tmp_path / "nested" / "Doxyfile")

    text = path.read_text(encoding="utf-8")
    assert f'INPUT = "{source}"' in text
    assert "FILE_PATTERNS = .h .cpp" in text
    assert "EXCLUDE_PATTERNS =\n" in text
    assert read_doxyfile(path) == directives


def test_prepare_overwrites_previous_directive_file(make_options, test_logger) -> None:
    options = make_options()
    options.config_file.parent.mkdir(parents=True)
    options.config_file.write_text("GENERATE_HTML = YES\nSTALE = 1\n")

    prepare(options, test_logger)

    assert read_doxyfile(options.config_file) == build_directives(options)


def test_prepare_clears_stale_xml_output(make_options, test_logger) -> None:
    options = make_options()
    stale_dir = options.xml_folder / "old"
    stale_dir.mkdir(parents=True)
    (stale_dir / "class_old.xml").write_text("<stale/>")
    (options.xml_folder / "index.xml").write_text("<stale/>")

    prepare(options, test_logger)

    assert options.xml_folder.is_dir()
    assert list(options.xml_folder.iterdir()) == []


def test_prepare_creates_missing_xml_folder(make_options, test_logger) -> None:
    options = make_options()
    assert not options.xml_folder.exists()

    prepare(options, test_logger)

    assert options.xml_folder.is_dir()


def test_prepare_leaves_xml_folder_alone_without_xml_output(make_options, test_logger) -> None:
    options = make_options(output_xml=False)
    options.xml_folder.mkdir(parents=True)
    keep = options.xml_folder / "keep.xml"
    keep.write_text("<keep/>")

    prepare(options, test_logger)

    assert keep.exists()


def test_prepare_logs_config_creation_only_in_debug(make_options, test_logger, caplog) -> None:
    with caplog.at_level(logging.INFO, logger=test_logger.name):
        prepare(make_options(debug=False, output_xml=False), test_logger)
    assert not any("Creating Doxygen config file" in r.getMessage() for r in caplog.records)

    caplog.clear()
    with caplog.at_level(logging.INFO, logger=test_logger.name):
        prepare(make_options(debug=True, output_xml=False), test_logger)
    assert any("Creating Doxygen config file" in r.getMessage() for r in caplog.records)
