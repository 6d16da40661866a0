"""Tests for document assembly and branch target generation."""

import logging

import pytest

from dialogue_studio.assembler import (
    assemble,
    branch_targets,
    canonical_scene,
    canonical_sequence,
    with_branch_targets,
)
from dialogue_studio.models import Character, Choice, ContractViolation, Narration
from conftest import make_document


def test_assemble_metadata():
    """Scene is padded, sequence kept verbatim, title defaulted."""
    doc = assemble([Narration(text="Fog.")], "2", "05A", "")
    assert doc.metadata.scene == "SCENE_02"
    assert doc.metadata.sequence == "SEQUENCE_05A"
    assert doc.metadata.title == "Dialogue 2-05A"
    assert doc.dialogues == (Narration(text="Fog."),)


def test_assemble_keeps_given_title_and_timestamp():
    doc = assemble([], "1", "01", title="Opening", timestamp="2024-01-01T00:00:00+00:00")
    assert doc.metadata.title == "Opening"
    assert doc.metadata.timestamp == "2024-01-01T00:00:00+00:00"


def test_assemble_default_timestamp_is_utc_iso():
    doc = assemble([], "1", "01")
    assert doc.metadata.timestamp.endswith("+00:00")


def test_assemble_empty_nodes():
    doc = assemble([], "3", "02")
    assert doc.dialogues == ()
    assert doc.to_dict()["dialogues"] == []


def test_assemble_preserves_order(sample_nodes):
    doc = assemble(sample_nodes, "1", "01")
    assert list(doc.dialogues) == sample_nodes


def test_assemble_logs_target_mismatch(caplog):
    """Mismatched choices are kept and logged, not rejected."""
    choice = Choice(options=("a", "b"), target_sequences=("A",))
    with caplog.at_level(logging.WARNING, logger="dialogue_studio.assembler"):
        doc = assemble([choice], "1", "04")
    assert doc.dialogues == (choice,)
    assert "2 options but 1 target sequences" in caplog.text


@pytest.mark.parametrize("nodes", [None, "Holmes: hi", {"type": "narration"}, [{"type": "narration"}]])
def test_assemble_contract_violations(nodes):
    with pytest.raises(ContractViolation):
        assemble(nodes, "1", "01")


def test_assemble_rejects_non_string_ids():
    with pytest.raises(ContractViolation):
        assemble([], 2, "01")


@pytest.mark.parametrize("raw, expected", [
    ("2", "SCENE_02"),
    ("12", "SCENE_12"),
    ("123", "SCENE_123"),
    (" 7 ", "SCENE_07"),
    ("SCENE_04", "SCENE_04"),
])
def test_canonical_scene(raw, expected):
    assert canonical_scene(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("05A", "SEQUENCE_05A"),
    ("1", "SEQUENCE_1"),
    ("SEQUENCE_06B", "SEQUENCE_06B"),
])
def test_canonical_sequence(raw, expected):
    assert canonical_sequence(raw) == expected


def test_branch_targets():
    assert branch_targets("SCENE_01", "SEQUENCE_05", 3) == [
        "SCENE_01/SEQUENCE_05A",
        "SCENE_01/SEQUENCE_05B",
        "SCENE_01/SEQUENCE_05C",
    ]


def test_branch_targets_past_z():
    targets = branch_targets("SCENE_01", "SEQUENCE_01", 28)
    assert targets[25] == "SCENE_01/SEQUENCE_01Z"
    assert targets[26] == "SCENE_01/SEQUENCE_01AA"
    assert targets[27] == "SCENE_01/SEQUENCE_01AB"


def test_with_branch_targets_fills_only_missing():
    filled = Choice(options=("a",), target_sequences=("X",))
    empty = Choice(options=("a", "b"))
    doc = make_document("SCENE_01", "SEQUENCE_05", dialogues=[Character("H", "x"), empty, filled])

    result = with_branch_targets(doc)
    assert result.dialogues[0] == Character("H", "x")
    assert result.dialogues[1].target_sequences == ("SCENE_01/SEQUENCE_05A", "SCENE_01/SEQUENCE_05B")
    assert result.dialogues[2] is filled
    assert doc.dialogues[1].target_sequences == ()


def test_with_branch_targets_requires_document():
    with pytest.raises(ContractViolation):
        with_branch_targets([])
