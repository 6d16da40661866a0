"""Tests for artifact reading and writing."""

import json
import logging
import os

import pytest

from dialogue_studio.artifacts import (
    document_filename,
    load_document,
    load_documents,
    slug_from_path,
    write_artifact,
)
from dialogue_studio.models import ContractViolation
from conftest import make_document


def test_slug_from_path():
    """Various filenames produce clean slugs."""
    assert slug_from_path("Baker Street.txt") == "baker_street"
    assert slug_from_path("/path/to/Scene-2 Draft.txt") == "scene_2_draft"
    assert slug_from_path("script.txt") == "script"


def test_document_filename():
    doc = make_document("SCENE_02", "SEQUENCE_05A")
    assert document_filename(doc) == "SCENE_02_SEQUENCE_05A.json"


def test_write_artifact_creates_directory(tmp_path):
    path = write_artifact(str(tmp_path / "a" / "b"), "doc.json", {"key": "value"})
    assert path == str(tmp_path / "a" / "b" / "doc.json")
    with open(path) as f:
        assert json.load(f) == {"key": "value"}


def test_load_document_round_trip(tmp_path, sample_nodes):
    doc = make_document(dialogues=sample_nodes)
    path = write_artifact(str(tmp_path), "doc.json", doc.to_dict())
    assert load_document(path) == doc


def test_load_document_rejects_bad_shape(tmp_path):
    path = write_artifact(str(tmp_path), "bad.json", {"dialogues": []})
    with pytest.raises(ContractViolation):
        load_document(path)


def test_load_document_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(json.JSONDecodeError):
        load_document(str(path))


def test_load_documents_keeps_order_and_skips_missing(tmp_path, caplog):
    first = make_document("SCENE_02", "SEQUENCE_01")
    second = make_document("SCENE_01", "SEQUENCE_01")
    a = write_artifact(str(tmp_path), "a.json", first.to_dict())
    b = write_artifact(str(tmp_path), "b.json", second.to_dict())
    missing = os.path.join(str(tmp_path), "missing.json")

    with caplog.at_level(logging.WARNING, logger="dialogue_studio.artifacts"):
        docs = load_documents([a, missing, b])
    assert docs == [first, second]
    assert "missing.json" in caplog.text
