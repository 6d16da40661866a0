"""Compute a design-tool layout tree from dialogue documents.

Documents are grouped by scene, then by sequence (both in first-seen order),
and stacked top-down in a single column:

  [MASTER HEADER] [SCENE [header] [SEQUENCE [header] [item] [item] ...] ...] ... [MASTER FOOTER]

A single document can also be laid out on its own page:

  [HEADER] [DIALOGUE CONTAINER [item] [item] ...] [FOOTER]

Every size is a constant per node kind; text is never measured, so the same
documents in the same order always produce the same geometry.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone

from dialogue_studio.constants import (
    PAGE_WIDTH,
    MIN_PAGE_HEIGHT,
    MASTER_HEADER_HEIGHT,
    MASTER_HEADER_GAP,
    MASTER_FOOTER_HEIGHT,
    SCENE_X,
    SCENE_WIDTH,
    SCENE_HEADER_HEIGHT,
    SCENE_HEADER_BAR_HEIGHT,
    SCENE_SPACING,
    SEQUENCE_X,
    SEQUENCE_WIDTH,
    SEQUENCE_HEADER_HEIGHT,
    SEQUENCE_HEADER_BAR_HEIGHT,
    SEQUENCE_PADDING,
    SEQUENCE_SPACING,
    DIALOGUE_ITEM_HEIGHT,
    ITEM_X,
    ITEM_WIDTH,
    ITEM_FRAME_HEIGHT,
    ITEM_TEXT_INSET,
    CHOICE_OPTION_SPACING,
    CHOICE_OPTION_INDENT,
    FONT_FAMILY,
    BULLET,
    COLOR_MASTER_HEADER,
    COLOR_MASTER_FOOTER,
    COLOR_SCENE,
    COLOR_SCENE_HEADER,
    COLOR_SEQUENCE,
    COLOR_CHARACTER,
    COLOR_NARRATION,
    COLOR_CHOICE,
    COLOR_GENERIC,
    COLOR_CONTAINER,
    TEXT_STYLE_COLORS,
    STUDIO_NAME,
    DESIGN_FILE_NAME,
    DESIGN_FILE_VERSION,
    DESIGN_SCHEMA_VERSION,
    DOC_PAGE_WIDTH,
    DOC_MIN_PAGE_HEIGHT,
    DOC_HEADER_HEIGHT,
    DOC_CONTAINER_PADDING,
    DOC_ITEM_SLOT,
    DOC_ITEM_X,
    DOC_ITEM_WIDTH,
    DOC_FOOTER_HEIGHT,
)
from dialogue_studio.models import (
    BoundingBox,
    Character,
    Choice,
    ContractViolation,
    DialogueDocument,
    DialogueNode,
    LayoutNode,
    Narration,
    require_document,
)


@dataclass(frozen=True)
class SequenceGroup:
    scene: str
    sequence: str
    title: str
    timestamp: str
    dialogues: tuple[DialogueNode, ...]


@dataclass(frozen=True)
class SceneGroup:
    scene: str
    sequences: tuple[SequenceGroup, ...]

    @property
    def dialogue_count(self) -> int:
        return sum(len(s.dialogues) for s in self.sequences)


def group_documents(documents: list[DialogueDocument]) -> list[SceneGroup]:
    """Group by scene, then merge documents sharing scene+sequence.

    Both levels keep first-seen order. A merged sequence takes its title and
    timestamp from the first document and concatenates dialogues in input order.
    """
    if documents is None or isinstance(documents, (DialogueDocument, str, dict)):
        raise ContractViolation(f"expected a list of documents, got {type(documents).__name__}")

    scenes: dict[str, dict[str, list[DialogueDocument]]] = {}
    for doc in documents:
        doc = require_document(doc)
        sequences = scenes.setdefault(doc.metadata.scene, {})
        sequences.setdefault(doc.metadata.sequence, []).append(doc)

    groups = []
    for scene, sequences in scenes.items():
        merged = []
        for sequence, docs in sequences.items():
            first = docs[0].metadata
            merged.append(SequenceGroup(
                scene=scene,
                sequence=sequence,
                title=first.title,
                timestamp=first.timestamp,
                dialogues=tuple(node for d in docs for node in d.dialogues),
            ))
        groups.append(SceneGroup(scene=scene, sequences=tuple(merged)))
    return groups


# --- Geometry ---

def sequence_height(group: SequenceGroup) -> int:
    return SEQUENCE_HEADER_HEIGHT + len(group.dialogues) * DIALOGUE_ITEM_HEIGHT + SEQUENCE_PADDING


def scene_height(group: SceneGroup) -> int:
    return (
        sum(sequence_height(s) for s in group.sequences)
        + len(group.sequences) * SEQUENCE_SPACING
        + SCENE_HEADER_HEIGHT
    )


def page_height(groups: list[SceneGroup]) -> int:
    content = sum(scene_height(g) + SCENE_SPACING for g in groups)
    total = MASTER_HEADER_HEIGHT + MASTER_HEADER_GAP + content + MASTER_FOOTER_HEIGHT
    return max(MIN_PAGE_HEIGHT, total)


# --- Primitive builders ---

def _fills(color: tuple) -> list[dict]:
    r, g, b, a = color
    return [{"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": a}}]


def _text(
    node_id: str,
    name: str,
    content: str,
    box: BoundingBox,
    font_size: int,
    font_weight: int = 400,
    fill_style: str = "default-text",
    italic: bool = False,
) -> LayoutNode:
    style = {
        "fontFamily": FONT_FAMILY,
        "fontSize": font_size,
        "fontWeight": font_weight,
        "fillStyleId": fill_style,
    }
    if italic:
        style["fontStyle"] = "italic"
    return LayoutNode(id=node_id, kind="TEXT", name=name, bounding_box=box, content=content, style=style)


def _rect(node_id: str, name: str, box: BoundingBox, color: tuple) -> LayoutNode:
    return LayoutNode(id=node_id, kind="RECTANGLE", name=name, bounding_box=box, fills=_fills(color))


def _frame(node_id: str, name: str, box: BoundingBox, children: list[LayoutNode], color=None) -> LayoutNode:
    return LayoutNode(
        id=node_id,
        kind="FRAME",
        name=name,
        bounding_box=box,
        children=children,
        fills=_fills(color) if color else None,
    )


# --- Dialogue item builders, keyed by node class ---
# Each takes the item's top edge and the column (x, width) it sits in.

def _character_item(node: Character, item_id: str, y: int, x: int, width: int) -> LayoutNode:
    text_x = x + ITEM_TEXT_INSET
    text_width = width - 2 * ITEM_TEXT_INSET
    box = BoundingBox(x, y, width, ITEM_FRAME_HEIGHT)
    return _frame(item_id, f"Character Dialogue - {node.speaker}", box, [
        _text(f"{item_id}-speaker", "Speaker", node.speaker,
              BoundingBox(text_x, y + 10, 200, 24), 16, 700, "character-text"),
        _text(f"{item_id}-text", "Dialogue Text", node.text,
              BoundingBox(text_x, y + 40, text_width, 40), 14),
    ], COLOR_CHARACTER)


def _narration_item(node: Narration, item_id: str, y: int, x: int, width: int) -> LayoutNode:
    box = BoundingBox(x, y, width, ITEM_FRAME_HEIGHT)
    return _frame(item_id, "Narration", box, [
        _text(f"{item_id}-text", "Narration Text", node.text,
              BoundingBox(x + ITEM_TEXT_INSET, y + 15, width - 2 * ITEM_TEXT_INSET, 60),
              14, 400, "narration-text", italic=True),
    ], COLOR_NARRATION)


def _choice_item(node: Choice, item_id: str, y: int, x: int, width: int) -> LayoutNode:
    text_x = x + ITEM_TEXT_INSET
    text_width = width - 2 * ITEM_TEXT_INSET
    children = [
        _text(f"{item_id}-question", "Choice Question", node.question or "",
              BoundingBox(text_x, y + 10, text_width, 24), 16, 600, "choice-text"),
    ]
    for i, option in enumerate(node.options):
        children.append(_text(
            f"{item_id}-option-{i}", f"Choice Option {i + 1}", f"{BULLET} {option}",
            BoundingBox(text_x + CHOICE_OPTION_INDENT, y + 40 + i * CHOICE_OPTION_SPACING,
                        text_width - CHOICE_OPTION_INDENT, 20),
            14, 400, "choice-text",
        ))
    height = ITEM_FRAME_HEIGHT + len(node.options) * CHOICE_OPTION_SPACING
    return _frame(item_id, "Choice Block", BoundingBox(x, y, width, height), children, COLOR_CHOICE)


def _dump(node) -> str:
    to_dict = getattr(node, "to_dict", None)
    data = to_dict() if callable(to_dict) else {"value": repr(node)}
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _generic_item(node, item_id: str, y: int, x: int, width: int) -> LayoutNode:
    box = BoundingBox(x, y, width, ITEM_FRAME_HEIGHT)
    return _frame(item_id, "Generic Dialogue", box, [
        _text(f"{item_id}-text", "Generic Text", _dump(node),
              BoundingBox(x + ITEM_TEXT_INSET, y + 15, width - 2 * ITEM_TEXT_INSET, 60), 12),
    ], COLOR_GENERIC)


ITEM_BUILDERS = {
    Character: _character_item,
    Narration: _narration_item,
    Choice: _choice_item,
}


def dialogue_item(node, item_id: str, y: int, x: int = ITEM_X, width: int = ITEM_WIDTH) -> LayoutNode:
    """Build the sub-tree for one dialogue node; unknown kinds use the generic dump."""
    builder = ITEM_BUILDERS.get(type(node), _generic_item)
    return builder(node, item_id, y, x, width)


# --- Section builders ---

def _item_id(prefix: str, index: int, node) -> str:
    """Ids are built from positions only; scene and sequence names go in `name`."""
    return f"{prefix}-{index}-{getattr(node, 'type', 'item')}"


def _format_date(timestamp: str) -> str:
    # fromisoformat only accepts a "Z" suffix from 3.11 on
    if timestamp.endswith("Z"):
        timestamp = timestamp[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(timestamp).date().isoformat()
    except ValueError:
        return "No date"


def _sequence_frame(group: SequenceGroup, y: int, key: str) -> LayoutNode:
    header = _frame(f"sequence-header-{key}", "Sequence Header",
                    BoundingBox(SEQUENCE_X, y, SEQUENCE_WIDTH, SEQUENCE_HEADER_BAR_HEIGHT), [
        _text(f"sequence-title-{key}", "Sequence Title", f"{group.sequence}: {group.title or 'Untitled'}",
              BoundingBox(SEQUENCE_X + 15, y + 10, 800, 25), 18, 600, "character-text"),
        _text(f"sequence-meta-{key}", "Sequence Metadata", _format_date(group.timestamp),
              BoundingBox(SEQUENCE_X + SEQUENCE_WIDTH - 220, y + 12, 200, 15), 12, 400, "narration-text"),
    ])

    items_y = y + SEQUENCE_HEADER_HEIGHT
    items = [
        dialogue_item(node, _item_id(key, i, node), items_y + i * DIALOGUE_ITEM_HEIGHT)
        for i, node in enumerate(group.dialogues)
    ]
    box = BoundingBox(SEQUENCE_X, y, SEQUENCE_WIDTH, sequence_height(group))
    return _frame(f"sequence-{key}", f"Sequence: {group.sequence}", box, [header, *items], COLOR_SEQUENCE)


def _scene_frame(group: SceneGroup, y: int, index: int) -> LayoutNode:
    scene = group.scene
    bar = BoundingBox(SCENE_X, y, SCENE_WIDTH, SCENE_HEADER_BAR_HEIGHT)
    header = _frame(f"scene-header-{index}", f"Scene Header: {scene}", bar, [
        _rect(f"scene-header-bg-{index}", "Scene Header Background", bar, COLOR_SCENE_HEADER),
        _text(f"scene-title-{index}", "Scene Title", scene,
              BoundingBox(SCENE_X + 20, y + 15, 400, 30), 24, 700, "white-text"),
        _text(f"scene-sequence-count-{index}", "Sequence Count", f"{len(group.sequences)} sequences",
              BoundingBox(SCENE_X + SCENE_WIDTH - 360, y + 20, 200, 20), 16, 400, "white-text"),
    ])

    children = [header]
    current_y = y + SCENE_HEADER_HEIGHT
    for seq_index, sequence in enumerate(group.sequences):
        children.append(_sequence_frame(sequence, current_y, f"{index}-{seq_index}"))
        current_y += sequence_height(sequence) + SEQUENCE_SPACING

    box = BoundingBox(SCENE_X, y, SCENE_WIDTH, scene_height(group))
    return _frame(f"scene-{index}", f"Scene: {scene}", box, children, COLOR_SCENE)


def _master_header(groups: list[SceneGroup]) -> LayoutNode:
    box = BoundingBox(0, 0, PAGE_WIDTH, MASTER_HEADER_HEIGHT)
    total = sum(g.dialogue_count for g in groups)
    return _frame("master-header", "Master Header", box, [
        _rect("master-header-bg", "Master Header Background", box, COLOR_MASTER_HEADER),
        _text("master-title", "Master Title", f"{STUDIO_NAME} - All Scenes",
              BoundingBox(40, 20, 600, 40), 32, 800, "white-text"),
        _text("master-stats", "Scene Count", f"{len(groups)} scenes {BULLET} {total} total dialogues",
              BoundingBox(40, 60, 400, 20), 16, 400, "white-text"),
    ], COLOR_MASTER_HEADER)


def _master_footer(groups: list[SceneGroup], height: int) -> LayoutNode:
    y = height - MASTER_FOOTER_HEIGHT
    box = BoundingBox(0, y, PAGE_WIDTH, MASTER_FOOTER_HEIGHT)
    sequences = sum(len(g.sequences) for g in groups)
    return _frame("master-footer", "Master Footer", box, [
        _rect("master-footer-bg", "Master Footer Background", box, COLOR_MASTER_FOOTER),
        _text("footer-info", "Footer Info",
              f"{STUDIO_NAME} {BULLET} {len(groups)} scenes {BULLET} {sequences} sequences",
              BoundingBox(40, y + 20, 600, 20), 14),
    ])


def layout_all(documents: list[DialogueDocument]) -> LayoutNode:
    """Lay out every document on one page. Returns the PAGE node."""
    groups = group_documents(documents)
    height = page_height(groups)

    children = [_master_header(groups)]
    current_y = MASTER_HEADER_HEIGHT + MASTER_HEADER_GAP
    for index, group in enumerate(groups):
        children.append(_scene_frame(group, current_y, index))
        current_y += scene_height(group) + SCENE_SPACING
    children.append(_master_footer(groups, height))

    return LayoutNode(
        id="0:1",
        kind="PAGE",
        name="All Scenes",
        bounding_box=BoundingBox(0, 0, PAGE_WIDTH, height),
        children=children,
    )


def _styles() -> dict:
    return {
        key: {
            "id": f"{key}-style",
            "name": key.replace("-", " ").title(),
            "type": "TEXT",
            "fills": _fills(color),
        }
        for key, color in TEXT_STYLE_COLORS.items()
    }


def _envelope(name: str, document: LayoutNode, generated_at: str | None) -> dict:
    return {
        "name": name,
        "lastModified": generated_at or datetime.now(timezone.utc).isoformat(),
        "version": DESIGN_FILE_VERSION,
        "document": document.to_dict(),
        "components": {
            "dialogue-item": {
                "id": "dialogue-item-component",
                "name": "Dialogue Item",
                "type": "COMPONENT",
                "description": "Reusable dialogue item component",
            },
        },
        "styles": _styles(),
        "schemaVersion": DESIGN_SCHEMA_VERSION,
    }


def build_design_file(
    documents: list[DialogueDocument],
    name: str = DESIGN_FILE_NAME,
    generated_at: str | None = None,
) -> dict:
    """Wrap the page layout in a DOCUMENT node and the design-file envelope.

    Only `lastModified` depends on the clock; pass generated_at to pin it.
    """
    page = layout_all(documents)
    document = LayoutNode(
        id="0:0",
        kind="DOCUMENT",
        name="All Dialogues",
        bounding_box=page.bounding_box,
        children=[page],
    )
    return _envelope(name, document, generated_at)


# --- Single-document pages ---

def document_page_height(dialogue_count: int) -> int:
    footer_y = DOC_HEADER_HEIGHT + _container_height(dialogue_count) + DOC_CONTAINER_PADDING
    return max(DOC_MIN_PAGE_HEIGHT, footer_y + DOC_FOOTER_HEIGHT)


def _container_height(dialogue_count: int) -> int:
    return dialogue_count * DOC_ITEM_SLOT + 2 * DOC_CONTAINER_PADDING


def _document_header(group: SequenceGroup) -> LayoutNode:
    box = BoundingBox(0, 0, DOC_PAGE_WIDTH, DOC_HEADER_HEIGHT)
    return _frame("header", "Header", box, [
        _rect("header-bg", "Header Background", box, COLOR_SCENE_HEADER),
        _text("scene-title", "Scene Title", f"{group.scene} - {group.sequence}",
              BoundingBox(40, 20, 400, 40), 24, 700, "white-text"),
        _text("dialogue-title", "Dialogue Title", group.title or "Untitled Dialogue",
              BoundingBox(40, 50, 600, 20), 16, 400, "white-text"),
    ], COLOR_SCENE_HEADER)


def _document_footer(group: SequenceGroup) -> LayoutNode:
    y = DOC_HEADER_HEIGHT + _container_height(len(group.dialogues)) + DOC_CONTAINER_PADDING
    box = BoundingBox(0, y, DOC_PAGE_WIDTH, DOC_FOOTER_HEIGHT)
    return _frame("footer", "Footer", box, [
        _rect("footer-bg", "Footer Background", box, COLOR_MASTER_FOOTER),
        _text("timestamp", "Timestamp", f"Created: {_format_date(group.timestamp)}",
              BoundingBox(40, y + 20, 300, 16), 12),
        _text("scene-info", "Scene Info", f"{group.scene} - {group.sequence}",
              BoundingBox(800, y + 20, 300, 16), 12),
    ])


def _sequence_document(group: SequenceGroup) -> LayoutNode:
    count = len(group.dialogues)
    first_y = DOC_HEADER_HEIGHT + DOC_CONTAINER_PADDING
    container = _frame(
        "dialogue-container", "Dialogue Container",
        BoundingBox(0, DOC_HEADER_HEIGHT, DOC_PAGE_WIDTH, _container_height(count)),
        [
            dialogue_item(node, _item_id("dialogue", i, node), first_y + i * DOC_ITEM_SLOT,
                          DOC_ITEM_X, DOC_ITEM_WIDTH)
            for i, node in enumerate(group.dialogues)
        ],
        COLOR_CONTAINER,
    )
    page_box = BoundingBox(0, 0, DOC_PAGE_WIDTH, document_page_height(count))
    page = LayoutNode(
        id="0:1",
        kind="PAGE",
        name="Page 1",
        bounding_box=page_box,
        children=[_document_header(group), container, _document_footer(group)],
    )
    return LayoutNode(
        id="0:0",
        kind="DOCUMENT",
        name=f"{group.scene} - {group.sequence}",
        bounding_box=page_box,
        children=[page],
    )


def _as_group(document: DialogueDocument) -> SequenceGroup:
    meta = require_document(document).metadata
    return SequenceGroup(meta.scene, meta.sequence, meta.title, meta.timestamp, document.dialogues)


def layout_document(document: DialogueDocument) -> LayoutNode:
    """Lay out one document on its own page. Returns the DOCUMENT node."""
    return _sequence_document(_as_group(document))


def sequence_design_file(group: SequenceGroup, generated_at: str | None = None) -> dict:
    """Design file for one scene/sequence, named "<SCENE>_<SEQUENCE>_dialogue"."""
    return _envelope(f"{group.scene}_{group.sequence}_dialogue", _sequence_document(group), generated_at)


def build_document_design_file(document: DialogueDocument, generated_at: str | None = None) -> dict:
    return sequence_design_file(_as_group(document), generated_at)
