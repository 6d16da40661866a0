"""Classify single lines of screenplay text into token kinds.

Shared by the parser and the validator so both apply the same rules.
"""

from dataclasses import dataclass
from enum import Enum

from dialogue_studio.constants import (
    NARRATION_PREFIX,
    CHOICE_PREFIX,
    OPTION_PREFIX,
    TARGET_PREFIX,
    END_CHOICE_PREFIX,
    HEADER_WORD,
)


class LineKind(Enum):
    BLANK = "blank"
    NARRATION = "narration"
    CHOICE_OPEN = "choice-open"
    CHOICE_OPTION = "choice-option"
    CHOICE_TARGET = "choice-target"
    CHOICE_CLOSE = "choice-close"
    CHARACTER = "character"
    CONTINUATION = "continuation"
    INVALID = "invalid"


@dataclass(frozen=True)
class Token:
    kind: LineKind
    text: str = ""
    speaker: str = ""


def _payload(line: str, prefix: str) -> str:
    return line[len(prefix):].strip()


def classify_line(line: str, in_choice: bool = False, speaker_open: bool = False) -> Token:
    """Classify one line given the current parse mode.

    Rules apply in priority order: blank, choice-block contents, CHOICE:,
    NARRATION:, "Speaker: text", continuation of an open speaker, invalid.
    """
    line = line.strip()
    if not line:
        return Token(LineKind.BLANK)

    if in_choice:
        if line.startswith(END_CHOICE_PREFIX):
            return Token(LineKind.CHOICE_CLOSE)
        if line.startswith(OPTION_PREFIX):
            return Token(LineKind.CHOICE_OPTION, text=_payload(line, OPTION_PREFIX))
        if line.startswith(TARGET_PREFIX):
            return Token(LineKind.CHOICE_TARGET, text=_payload(line, TARGET_PREFIX))
        return Token(LineKind.INVALID, text=line)

    if line.startswith(CHOICE_PREFIX):
        return Token(LineKind.CHOICE_OPEN, text=_payload(line, CHOICE_PREFIX))

    if line.startswith(NARRATION_PREFIX):
        return Token(LineKind.NARRATION, text=_payload(line, NARRATION_PREFIX))

    if ":" in line and not line.startswith(HEADER_WORD):
        speaker, _, text = line.partition(":")
        return Token(LineKind.CHARACTER, text=text.strip(), speaker=speaker.strip())

    if speaker_open:
        return Token(LineKind.CONTINUATION, text=line)

    return Token(LineKind.INVALID, text=line)
