"""Data models for dialogue documents and layout trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union

from dialogue_studio.constants import DOCUMENT_VERSION


class ContractViolation(TypeError):
    """A structurally wrong value was passed where a model was required.

    Raised only for programming errors (None instead of a document, a node
    list holding non-nodes, option lists on non-choice nodes). Malformed
    dialogue scripts never raise; they are dropped or diagnosed instead.
    """


@dataclass(frozen=True)
class Narration:
    type: ClassVar[str] = "narration"
    text: str

    def to_dict(self) -> dict:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class Character:
    type: ClassVar[str] = "character"
    speaker: str
    text: str

    def to_dict(self) -> dict:
        return {"type": self.type, "speaker": self.speaker, "text": self.text}


@dataclass(frozen=True)
class Choice:
    type: ClassVar[str] = "choice"
    options: tuple[str, ...]
    target_sequences: tuple[str, ...] = ()
    question: str | None = None    # only set when the input supplied one

    @property
    def targets_mismatched(self) -> bool:
        """True when targets were supplied but don't line up with options."""
        return bool(self.target_sequences) and len(self.target_sequences) != len(self.options)

    def to_dict(self) -> dict:
        data = {"type": self.type}
        if self.question is not None:
            data["question"] = self.question
        data["options"] = list(self.options)
        data["targetSequences"] = list(self.target_sequences)
        return data


@dataclass(frozen=True)
class RawDialogue:
    """A node with a tag this package doesn't know, kept as loaded."""
    type: str
    fields: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"type": self.type, **self.fields}


DialogueNode = Union[Narration, Character, Choice, RawDialogue]
DIALOGUE_NODE_TYPES = (Narration, Character, Choice, RawDialogue)


@dataclass(frozen=True)
class Metadata:
    scene: str          # canonical "SCENE_NN"
    sequence: str       # "SEQUENCE_" + caller's identifier, e.g. "SEQUENCE_05A"
    title: str
    timestamp: str      # ISO-8601
    version: str = DOCUMENT_VERSION

    def to_dict(self) -> dict:
        return {
            "scene": self.scene,
            "sequence": self.sequence,
            "title": self.title,
            "timestamp": self.timestamp,
            "version": self.version,
        }


@dataclass(frozen=True)
class DialogueDocument:
    metadata: Metadata
    dialogues: tuple[DialogueNode, ...] = ()

    def to_dict(self) -> dict:
        return {
            "metadata": self.metadata.to_dict(),
            "dialogues": [d.to_dict() for d in self.dialogues],
        }


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class LayoutNode:
    id: str
    kind: str           # DOCUMENT | PAGE | FRAME | RECTANGLE | TEXT
    name: str
    bounding_box: BoundingBox
    children: list[LayoutNode] = field(default_factory=list)
    content: str | None = None
    style: dict | None = None
    fills: list | None = None

    def walk(self):
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        data = {"id": self.id, "name": self.name, "type": self.kind}
        if self.content is not None:
            data["characters"] = self.content
        if self.style is not None:
            data["style"] = dict(self.style)
        if self.fills is not None:
            data["fills"] = list(self.fills)
        data["absoluteBoundingBox"] = self.bounding_box.to_dict()
        data["children"] = [c.to_dict() for c in self.children]
        return data


def _require_str(data: dict, key: str, node_type: str) -> str:
    value = data.get(key, "")
    if not isinstance(value, str):
        raise ContractViolation(f"{node_type} field '{key}' must be a string, got {type(value).__name__}")
    return value


def _require_str_list(data: dict, key: str) -> tuple[str, ...]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ContractViolation(f"choice field '{key}' must be a list of strings")
    return tuple(value)


def dialogue_from_dict(data: dict) -> DialogueNode:
    """Build a dialogue node from its JSON form.

    Unknown tags become RawDialogue. The legacy "dialogue" tag is read as a
    character line.
    """
    if not isinstance(data, dict):
        raise ContractViolation(f"dialogue node must be a dict, got {type(data).__name__}")
    node_type = data.get("type")
    if not isinstance(node_type, str) or not node_type:
        raise ContractViolation(f"dialogue node has no type tag: {data!r}")

    if node_type == Choice.type:
        question = data.get("question")
        if question is not None and not isinstance(question, str):
            raise ContractViolation("choice field 'question' must be a string")
        return Choice(
            options=_require_str_list(data, "options"),
            target_sequences=_require_str_list(data, "targetSequences"),
            question=question,
        )

    if node_type in (Narration.type, Character.type, "dialogue"):
        if "options" in data or "targetSequences" in data:
            raise ContractViolation(f"'{node_type}' node carries choice fields")
        if node_type == Narration.type:
            return Narration(text=_require_str(data, "text", node_type))
        return Character(
            speaker=_require_str(data, "speaker", node_type),
            text=_require_str(data, "text", node_type),
        )

    fields = {k: v for k, v in data.items() if k != "type"}
    return RawDialogue(type=node_type, fields=fields)


def document_from_dict(data: dict) -> DialogueDocument:
    """Build a DialogueDocument from its full JSON form (metadata + dialogues)."""
    if not isinstance(data, dict):
        raise ContractViolation(f"document must be a dict, got {type(data).__name__}")
    meta = data.get("metadata")
    if not isinstance(meta, dict):
        raise ContractViolation("document has no metadata object")
    dialogues = data.get("dialogues", [])
    if not isinstance(dialogues, list):
        raise ContractViolation("document 'dialogues' must be a list")

    metadata = Metadata(
        scene=str(meta.get("scene", "")),
        sequence=str(meta.get("sequence", "")),
        title=str(meta.get("title", "")),
        timestamp=str(meta.get("timestamp", "")),
        version=str(meta.get("version", DOCUMENT_VERSION)),
    )
    return DialogueDocument(
        metadata=metadata,
        dialogues=tuple(dialogue_from_dict(d) for d in dialogues),
    )


def require_document(value) -> DialogueDocument:
    """Return value if it is a DialogueDocument, else raise ContractViolation."""
    if not isinstance(value, DialogueDocument):
        raise ContractViolation(f"expected DialogueDocument, got {type(value).__name__}")
    return value
