"""Export dialogue documents as clean JSON trees and design files."""

import json
import os
from datetime import datetime, timezone

from dialogue_studio.constants import DESIGN_FILE_NAME, DOC_DESIGN_FILENAME, VERSION
from dialogue_studio.layout import (
    build_design_file,
    group_documents,
    layout_all,
    sequence_design_file,
)
from dialogue_studio.models import DialogueDocument, require_document


def export_dialogues(document: DialogueDocument) -> dict:
    """Clean export shape: {"dialogues": [...]} with no metadata."""
    document = require_document(document)
    return {"dialogues": [d.to_dict() for d in document.dialogues]}


def generate_file_structure(documents: list[DialogueDocument]) -> dict[str, dict]:
    """Map "SCENE_NN/SEQUENCE_XX/dialogue.json" → clean dialogues.

    Documents sharing scene+sequence are merged in input order, the same way
    the layout engine merges them.
    """
    structure = {}
    for scene in group_documents(documents):
        for sequence in scene.sequences:
            path = f"{sequence.scene}/{sequence.sequence}/dialogue.json"
            structure[path] = {"dialogues": [d.to_dict() for d in sequence.dialogues]}
    return structure


def _write_json(path: str, data: dict) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export(documents: list[DialogueDocument], output_dir: str) -> str:
    """Write the scene/sequence tree plus a manifest.

    Creates:
      - <output_dir>/SCENE_NN/SEQUENCE_XX/dialogue.json (one per merged sequence)
      - <output_dir>/manifest.json (provenance and counts)

    Returns path to the manifest.
    """
    structure = generate_file_structure(documents)
    for rel_path, data in structure.items():
        _write_json(os.path.join(output_dir, *rel_path.split("/")), data)

    groups = group_documents(documents)
    manifest = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "studio_version": VERSION,
        "files": sorted(structure),
        "stats": {
            "scenes": len(groups),
            "sequences": sum(len(g.sequences) for g in groups),
            "dialogues": sum(g.dialogue_count for g in groups),
        },
    }
    manifest_path = os.path.join(output_dir, "manifest.json")
    _write_json(manifest_path, manifest)
    return manifest_path


def export_design_file(
    documents: list[DialogueDocument],
    output_path: str,
    name: str = DESIGN_FILE_NAME,
) -> str:
    """Write the design-tool layout for all documents to output_path."""
    _write_json(output_path, build_design_file(documents, name=name))
    return output_path


def generate_design_files(documents: list[DialogueDocument], generated_at: str | None = None) -> dict[str, dict]:
    """Map "SCENE_NN/SEQUENCE_XX/dialogue.figma.json" → single-sequence design file.

    Documents sharing scene+sequence are merged first, as in generate_file_structure.
    """
    files = {}
    for scene in group_documents(documents):
        for sequence in scene.sequences:
            path = f"{sequence.scene}/{sequence.sequence}/{DOC_DESIGN_FILENAME}"
            files[path] = sequence_design_file(sequence, generated_at)
    return files


def export_design_files(documents: list[DialogueDocument], output_dir: str) -> list[str]:
    """Write one design file per scene/sequence under output_dir. Returns the paths written."""
    paths = []
    for rel_path, design in generate_design_files(documents).items():
        path = os.path.join(output_dir, *rel_path.split("/"))
        _write_json(path, design)
        paths.append(path)
    return paths


def layout_summary(documents: list[DialogueDocument]) -> dict:
    """Counts of layout nodes by type, for CLI reporting."""
    counts: dict[str, int] = {}
    for node in layout_all(documents).walk():
        counts[node.kind] = counts.get(node.kind, 0) + 1
    return counts
