"""Parse screenplay-style text into dialogue nodes.

The parser is a state machine folded over classified lines. Each transition
is a pure function of (state, token), so it can be exercised one step at a
time; parse_dialogue() just threads the state through every line.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum

from dialogue_studio.classifier import LineKind, Token, classify_line
from dialogue_studio.models import Character, Choice, ContractViolation, DialogueNode, Narration

logger = logging.getLogger(__name__)


class ParseMode(Enum):
    IDLE = "idle"
    CHARACTER = "character"     # accumulating a speaker's line
    CHOICE = "choice"           # inside CHOICE: ... END_CHOICE


@dataclass(frozen=True)
class ParserState:
    mode: ParseMode = ParseMode.IDLE
    speaker: str = ""
    text: str = ""
    question: str | None = None
    options: tuple[str, ...] = ()
    targets: tuple[str, ...] = ()

    @property
    def in_choice(self) -> bool:
        return self.mode is ParseMode.CHOICE

    @property
    def speaker_open(self) -> bool:
        return self.mode is ParseMode.CHARACTER


IDLE = ParserState()


def quote(text: str) -> str:
    """Wrap text in literal double quotes unless it already is."""
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text
    return f'"{text}"'


def _flush_character(state: ParserState) -> list[DialogueNode]:
    """Emit the pending character line, if there is one worth emitting."""
    if not state.speaker_open:
        return []
    if not state.speaker or not state.text:
        logger.debug("Dropping character line with empty speaker or text: %r", state.speaker)
        return []
    return [Character(speaker=state.speaker, text=quote(state.text))]


def step(state: ParserState, token: Token) -> tuple[ParserState, list[DialogueNode]]:
    """Apply one token. Returns the next state and any nodes it emits."""
    kind = token.kind

    if state.in_choice:
        if kind is LineKind.CHOICE_OPTION:
            return replace(state, options=state.options + (quote(token.text),)), []
        if kind is LineKind.CHOICE_TARGET:
            return replace(state, targets=state.targets + (token.text,)), []
        if kind is LineKind.CHOICE_CLOSE:
            if not state.options:
                logger.debug("Dropping choice with no options: %r", state.question)
                return IDLE, []
            choice = Choice(
                options=state.options,
                target_sequences=state.targets,
                question=state.question,
            )
            return IDLE, [choice]
        return state, []

    if kind is LineKind.CHOICE_OPEN:
        emitted = _flush_character(state)
        return ParserState(mode=ParseMode.CHOICE, question=token.text or None), emitted

    if kind is LineKind.NARRATION:
        emitted = _flush_character(state)
        if token.text:
            emitted.append(Narration(text=token.text))
        else:
            logger.debug("Dropping empty narration")
        return IDLE, emitted

    if kind is LineKind.CHARACTER:
        emitted = _flush_character(state)
        return ParserState(mode=ParseMode.CHARACTER, speaker=token.speaker, text=token.text), emitted

    if kind is LineKind.CONTINUATION and state.speaker_open:
        text = f"{state.text} {token.text}" if state.text else token.text
        return replace(state, text=text), []

    return state, []


def finish(state: ParserState) -> list[DialogueNode]:
    """Flush whatever is pending at end of input.

    An unclosed choice block is dropped like an empty one.
    """
    if state.in_choice:
        logger.debug("Dropping unclosed choice block: %r", state.question)
        return []
    return _flush_character(state)


def parse_dialogue(text: str) -> list[DialogueNode]:
    """Parse screenplay text into an ordered list of dialogue nodes.

    Never raises on malformed scripts: empty choices, orphaned lines and
    unrecognized lines are skipped.
    """
    if not isinstance(text, str):
        raise ContractViolation(f"expected text, got {type(text).__name__}")
    state = IDLE
    nodes: list[DialogueNode] = []
    for line in text.splitlines():
        token = classify_line(line, in_choice=state.in_choice, speaker_open=state.speaker_open)
        state, emitted = step(state, token)
        nodes.extend(emitted)
    nodes.extend(finish(state))
    return nodes
