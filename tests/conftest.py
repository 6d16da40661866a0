"""Shared fixtures for dialogue studio tests."""

import pytest

from dialogue_studio.models import Character, Choice, DialogueDocument, Metadata, Narration

FIXED_TIMESTAMP = "2024-03-01T12:00:00+00:00"


def make_document(scene="SCENE_01", sequence="SEQUENCE_01", title="Test", dialogues=()):
    """Build a document with a fixed timestamp."""
    return DialogueDocument(
        metadata=Metadata(scene=scene, sequence=sequence, title=title, timestamp=FIXED_TIMESTAMP),
        dialogues=tuple(dialogues),
    )


@pytest.fixture
def sample_nodes():
    """One of each dialogue kind."""
    return [
        Narration(text="The fog rolled in."),
        Character(speaker="Holmes", text='"The game is afoot."'),
        Choice(options=('"Yes"', '"No"'), target_sequences=("A", "B"), question="Proceed?"),
    ]


@pytest.fixture
def sample_documents(sample_nodes):
    """Two scenes, with SCENE_01/SEQUENCE_01 split across two documents."""
    return [
        make_document("SCENE_01", "SEQUENCE_01", "Opening", sample_nodes),
        make_document("SCENE_02", "SEQUENCE_01", "Station", [Narration(text="Steam.")]),
        make_document("SCENE_01", "SEQUENCE_01", "Opening, cont.", [
            Character(speaker="Watson", text='"Indeed."'),
        ]),
        make_document("SCENE_01", "SEQUENCE_05A", "Branch A", []),
    ]
