"""Wrap parsed dialogue nodes with scene/sequence metadata."""

import logging
import re
import string
from dataclasses import replace
from datetime import datetime, timezone

from dialogue_studio.constants import SCENE_DIGITS, SCENE_PREFIX, SEQUENCE_PREFIX
from dialogue_studio.models import (
    DIALOGUE_NODE_TYPES,
    Choice,
    ContractViolation,
    DialogueDocument,
    DialogueNode,
    Metadata,
    require_document,
)

logger = logging.getLogger(__name__)


def canonical_scene(scene: str) -> str:
    """"2" → "SCENE_02". An existing SCENE_ prefix is accepted."""
    number = scene.strip()
    if number.startswith(SCENE_PREFIX):
        number = number[len(SCENE_PREFIX):]
    return f"{SCENE_PREFIX}{number.zfill(SCENE_DIGITS)}"


def canonical_sequence(sequence_raw: str) -> str:
    """"05A" → "SEQUENCE_05A". No padding: branch suffixes must survive as given."""
    ident = sequence_raw.strip()
    if ident.startswith(SEQUENCE_PREFIX):
        ident = ident[len(SEQUENCE_PREFIX):]
    return f"{SEQUENCE_PREFIX}{ident}"


def assemble(
    nodes: list[DialogueNode],
    scene: str,
    sequence_raw: str,
    title: str = "",
    timestamp: str | None = None,
) -> DialogueDocument:
    """Build a DialogueDocument from parsed nodes.

    An empty node list is valid and yields a document with no dialogues.
    Choices whose targets don't line up with their options are kept as-is
    and logged.
    """
    if nodes is None or isinstance(nodes, (str, bytes, dict)):
        raise ContractViolation(f"expected a list of dialogue nodes, got {type(nodes).__name__}")
    nodes = tuple(nodes)
    for node in nodes:
        if not isinstance(node, DIALOGUE_NODE_TYPES):
            raise ContractViolation(f"not a dialogue node: {node!r}")
    if not isinstance(scene, str) or not isinstance(sequence_raw, str):
        raise ContractViolation("scene and sequence must be strings")

    metadata = Metadata(
        scene=canonical_scene(scene),
        sequence=canonical_sequence(sequence_raw),
        title=title or f"Dialogue {scene}-{sequence_raw}",
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
    )

    for i, node in enumerate(nodes, start=1):
        if isinstance(node, Choice) and node.targets_mismatched:
            logger.warning(
                "%s/%s dialogue %d: %d options but %d target sequences",
                metadata.scene, metadata.sequence, i,
                len(node.options), len(node.target_sequences),
            )

    return DialogueDocument(metadata=metadata, dialogues=nodes)


def _branch_suffix(index: int) -> str:
    """0 → "A", 25 → "Z", 26 → "AA"."""
    letters = string.ascii_uppercase
    suffix = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, len(letters))
        suffix = letters[rem] + suffix
    return suffix


def branch_targets(scene: str, sequence: str, count: int) -> list[str]:
    """Target sequence ids for a choice with `count` options.

    branch_targets("SCENE_01", "SEQUENCE_05", 3)
    → ["SCENE_01/SEQUENCE_05A", "SCENE_01/SEQUENCE_05B", "SCENE_01/SEQUENCE_05C"]
    """
    base = re.sub(r"[^A-Z0-9_]", "", sequence)
    return [f"{scene}/{base}{_branch_suffix(i)}" for i in range(count)]


def with_branch_targets(document: DialogueDocument) -> DialogueDocument:
    """Return a copy where choices without targets get generated branch targets.

    Choices that already carry targets are left alone, mismatched or not.
    """
    document = require_document(document)
    meta = document.metadata
    dialogues = []
    for node in document.dialogues:
        if isinstance(node, Choice) and node.options and not node.target_sequences:
            targets = branch_targets(meta.scene, meta.sequence, len(node.options))
            node = replace(node, target_sequences=tuple(targets))
        dialogues.append(node)
    return replace(document, dialogues=tuple(dialogues))
