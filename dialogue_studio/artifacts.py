"""Reading and writing JSON artifacts for the CLI."""

import json
import logging
import os
import re

from dialogue_studio.models import DialogueDocument, document_from_dict

logger = logging.getLogger(__name__)


def slug_from_path(script_path: str) -> str:
    """Convert script filename to an output slug.

    "Baker Street.txt" → "baker_street"
    "/path/to/Scene-2 Draft.txt" → "scene_2_draft"
    """
    basename = os.path.splitext(os.path.basename(script_path))[0]
    slug = re.sub(r"[^a-zA-Z0-9]+", "_", basename).strip("_").lower()
    return slug


def document_filename(document: DialogueDocument) -> str:
    """"SCENE_02_SEQUENCE_05A.json" for a document's scene and sequence."""
    return f"{document.metadata.scene}_{document.metadata.sequence}.json"


def write_artifact(directory: str, filename: str, data: dict) -> str:
    """Write JSON artifact to directory/filename.

    Returns path to the written file.
    """
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, filename)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return path


def load_document(path: str) -> DialogueDocument:
    """Load a full document JSON file (metadata + dialogues)."""
    with open(path, encoding="utf-8") as f:
        return document_from_dict(json.load(f))


def load_documents(paths: list[str]) -> list[DialogueDocument]:
    """Load documents in the given order. Missing files are skipped with a warning."""
    documents = []
    for path in paths:
        if not os.path.exists(path):
            logger.warning("Document not found: %s, skipping", path)
            continue
        documents.append(load_document(path))
    return documents
