"""Advisory checks over raw dialogue text and assembled documents.

Nothing here raises or changes parser behavior: diagnostics are plain strings
for the caller to show, whether or not it parses anyway.
"""

from dialogue_studio.classifier import LineKind, classify_line
from dialogue_studio.models import (
    Choice,
    ContractViolation,
    DialogueDocument,
    RawDialogue,
    require_document,
)

NO_TEXT = "No dialogue text provided"
NO_VALID_DIALOGUE = (
    "No valid dialogue found. Use 'Speaker: text' lines, NARRATION: lines "
    "or CHOICE: ... END_CHOICE blocks."
)


def _choice_diagnostics(line_no: int, options: int, targets: int) -> list[str]:
    """Check a closed choice block. A block without options gets one message only."""
    if options == 0:
        return [f"Line {line_no}: Choice block must have at least one option"]
    if targets == 0:
        return [f"Line {line_no}: Choice block must have at least one target"]
    if options != targets:
        return [f"Line {line_no}: Choice block has {options} options but {targets} targets"]
    return []


def validate_dialogue_text(text: str) -> list[str]:
    """Return human-readable diagnostics for raw screenplay text.

    Lines are re-classified independently of the parser. Line numbers are
    1-indexed physical lines, blank lines included.
    """
    if not isinstance(text, str):
        raise ContractViolation(f"expected text, got {type(text).__name__}")
    if not text.strip():
        return [NO_TEXT]

    errors = []
    has_dialogue = False
    in_choice = False
    speaker_open = False
    choice_line = 0
    options = targets = 0
    empty_text_line = None      # character line waiting for a continuation

    def settle_empty_text():
        nonlocal empty_text_line
        if empty_text_line is not None:
            errors.append(f"Line {empty_text_line}: Empty dialogue text")
            empty_text_line = None

    for line_no, line in enumerate(text.splitlines(), start=1):
        token = classify_line(line, in_choice=in_choice, speaker_open=speaker_open)
        kind = token.kind

        if kind is LineKind.BLANK:
            continue

        if in_choice:
            if kind is LineKind.CHOICE_OPTION:
                options += 1
                if not token.text:
                    errors.append(f"Line {line_no}: Empty option text")
            elif kind is LineKind.CHOICE_TARGET:
                targets += 1
                if not token.text:
                    errors.append(f"Line {line_no}: Empty target sequence")
            elif kind is LineKind.CHOICE_CLOSE:
                errors.extend(_choice_diagnostics(choice_line, options, targets))
                in_choice = False
            else:
                errors.append(
                    f"Line {line_no}: Unexpected line inside choice block "
                    f"(expected OPTION:, TARGET: or END_CHOICE)"
                )
            continue

        if kind is LineKind.CONTINUATION:
            empty_text_line = None
            continue

        settle_empty_text()

        if kind is LineKind.CHOICE_OPEN:
            has_dialogue = True
            speaker_open = False
            in_choice = True
            choice_line = line_no
            options = targets = 0
        elif kind is LineKind.NARRATION:
            has_dialogue = True
            speaker_open = False
            if not token.text:
                errors.append(f"Line {line_no}: Empty narration text")
        elif kind is LineKind.CHARACTER:
            has_dialogue = True
            speaker_open = True
            if not token.speaker:
                errors.append(f"Line {line_no}: Empty speaker name")
            if not token.text:
                empty_text_line = line_no
        else:
            errors.append(
                f"Line {line_no}: Unrecognized line "
                f"(expected 'Speaker: text', NARRATION: or CHOICE:)"
            )

    settle_empty_text()
    if in_choice:
        errors.append(f"Line {choice_line}: Choice block is never closed with END_CHOICE")
    if not has_dialogue:
        errors.append(NO_VALID_DIALOGUE)
    return errors


def check_document(document: DialogueDocument) -> list[str]:
    """Data-quality checks over an assembled document."""
    document = require_document(document)
    where = f"{document.metadata.scene}/{document.metadata.sequence}"
    errors = []
    for i, node in enumerate(document.dialogues, start=1):
        if isinstance(node, Choice):
            if not node.options:
                errors.append(f"{where} dialogue {i}: choice has no options")
            elif node.targets_mismatched:
                errors.append(
                    f"{where} dialogue {i}: choice has {len(node.options)} options "
                    f"but {len(node.target_sequences)} target sequences"
                )
        elif isinstance(node, RawDialogue):
            errors.append(f"{where} dialogue {i}: unrecognized dialogue type '{node.type}'")
    return errors
