"""Tests for the JSON tree export and design file writer."""

import json
import os

import pytest

from dialogue_studio.constants import VERSION
from dialogue_studio.exporter import (
    export,
    export_design_file,
    export_design_files,
    export_dialogues,
    generate_design_files,
    generate_file_structure,
    layout_summary,
)
from dialogue_studio.models import ContractViolation, Narration
from conftest import FIXED_TIMESTAMP, make_document


def test_export_dialogues_strips_metadata(sample_nodes):
    data = export_dialogues(make_document(dialogues=sample_nodes))
    assert list(data) == ["dialogues"]
    assert data["dialogues"][0] == {"type": "narration", "text": "The fog rolled in."}
    assert data["dialogues"][2]["targetSequences"] == ["A", "B"]


def test_export_dialogues_requires_document():
    with pytest.raises(ContractViolation):
        export_dialogues(None)


def test_generate_file_structure(sample_documents):
    """One file per scene/sequence pair; repeated pairs are merged."""
    structure = generate_file_structure(sample_documents)
    assert list(structure) == [
        "SCENE_01/SEQUENCE_01/dialogue.json",
        "SCENE_01/SEQUENCE_05A/dialogue.json",
        "SCENE_02/SEQUENCE_01/dialogue.json",
    ]
    merged = structure["SCENE_01/SEQUENCE_01/dialogue.json"]["dialogues"]
    assert len(merged) == 4
    assert merged[-1]["speaker"] == "Watson"
    assert structure["SCENE_01/SEQUENCE_05A/dialogue.json"] == {"dialogues": []}


def test_export_writes_tree_and_manifest(sample_documents, tmp_path):
    out = str(tmp_path / "Dialogues")
    manifest_path = export(sample_documents, out)

    assert manifest_path == os.path.join(out, "manifest.json")
    with open(os.path.join(out, "SCENE_02", "SEQUENCE_01", "dialogue.json")) as f:
        assert json.load(f) == {"dialogues": [{"type": "narration", "text": "Steam."}]}

    with open(manifest_path) as f:
        manifest = json.load(f)
    assert manifest["studio_version"] == VERSION
    assert manifest["stats"] == {"scenes": 2, "sequences": 3, "dialogues": 5}
    assert manifest["files"] == sorted(manifest["files"])
    assert "generated_at" in manifest


def test_export_preserves_non_ascii(tmp_path):
    doc = make_document(dialogues=[Narration(text="Café • brouillard")])
    export([doc], str(tmp_path))
    with open(tmp_path / "SCENE_01" / "SEQUENCE_01" / "dialogue.json", encoding="utf-8") as f:
        assert "Café • brouillard" in f.read()


def test_export_empty_list(tmp_path):
    manifest_path = export([], str(tmp_path / "out"))
    with open(manifest_path) as f:
        manifest = json.load(f)
    assert manifest["files"] == []
    assert manifest["stats"]["dialogues"] == 0


def test_export_design_file(sample_documents, tmp_path):
    path = export_design_file(sample_documents, str(tmp_path / "nested" / "design.json"), name="Test")
    with open(path) as f:
        design = json.load(f)
    assert design["name"] == "Test"
    assert design["document"]["children"][0]["name"] == "All Scenes"


def test_layout_summary(sample_documents):
    counts = layout_summary(sample_documents)
    assert counts["PAGE"] == 1
    assert counts["FRAME"] > 0
    assert counts["TEXT"] > counts["RECTANGLE"]


def test_generate_design_files_paths(sample_documents):
    """One design file per merged scene/sequence, named after it."""
    files = generate_design_files(sample_documents, generated_at=FIXED_TIMESTAMP)
    assert list(files) == [
        "SCENE_01/SEQUENCE_01/dialogue.figma.json",
        "SCENE_01/SEQUENCE_05A/dialogue.figma.json",
        "SCENE_02/SEQUENCE_01/dialogue.figma.json",
    ]
    merged = files["SCENE_01/SEQUENCE_01/dialogue.figma.json"]
    assert merged["name"] == "SCENE_01_SEQUENCE_01_dialogue"
    container = merged["document"]["children"][0]["children"][1]
    assert len(container["children"]) == 4


def test_export_design_files(sample_documents, tmp_path):
    paths = export_design_files(sample_documents, str(tmp_path))
    assert len(paths) == 3
    with open(tmp_path / "SCENE_02" / "SEQUENCE_01" / "dialogue.figma.json") as f:
        design = json.load(f)
    assert design["document"]["name"] == "SCENE_02 - SEQUENCE_01"
