"""
Structured output parser for flashcard generation.

Models do not always honour the requested JSON schema, so the reply is
matched against an ordered chain of shape parsers; the first one that
yields a list wins:

    1. a bare array                      [{"front": ..., "back": ...}]
    2. an object with a flashcards array  {"flashcards": [...]}
    3. a single card                      {"front": ..., "back": ...}
    4. the first array-valued key         {"cards": [...]}

If the content is not JSON (or matches no shape), a regex fallback looks
for the first {...} block mentioning "flashcards", then for the first
[...] block. Each shape parser is a pure function returning the card
list or None.
"""
import re
import json
import logging
from typing import Any, Callable, List, Optional, Sequence

from core.errors import ValidationError
from .config import (
    FLASHCARD_FRONT_MAX_CHARS,
    FLASHCARD_BACK_MAX_CHARS,
    FLASHCARD_SOURCE_AI_FULL,
)
from .schemas import FlashcardProposal

logger = logging.getLogger(__name__)

ShapeParser = Callable[[Any], Optional[List[Any]]]

_FLASHCARDS_OBJECT_RE = re.compile(r'\{[\s\S]*"flashcards"[\s\S]*\}')
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


# =====================
# Shape Parsers
# =====================

def parse_as_list(value: Any) -> Optional[List[Any]]:
    if isinstance(value, list):
        return value
    return None


def parse_as_wrapped(value: Any) -> Optional[List[Any]]:
    if isinstance(value, dict) and isinstance(value.get("flashcards"), list):
        return value["flashcards"]
    return None


def parse_as_single_card(value: Any) -> Optional[List[Any]]:
    if isinstance(value, dict) and value.get("front") and value.get("back"):
        return [value]
    return None


def parse_as_first_array(value: Any) -> Optional[List[Any]]:
    if isinstance(value, dict):
        for item in value.values():
            if isinstance(item, list):
                return item
    return None


SHAPE_PARSERS: Sequence[ShapeParser] = (
    parse_as_list,
    parse_as_wrapped,
    parse_as_single_card,
    parse_as_first_array,
)


def match_shape(value: Any, parsers: Sequence[ShapeParser] = SHAPE_PARSERS) -> Optional[List[Any]]:
    """Return the result of the first parser that recognises `value`."""
    for parser in parsers:
        cards = parser(value)
        if cards is not None:
            return cards
    return None


# =====================
# Text Extraction
# =====================

def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return None


def parse_direct(content: str) -> Optional[List[Any]]:
    """Parse the whole content as JSON and match it against the shapes."""
    parsed = _loads(content)
    if parsed is None:
        return None
    return match_shape(parsed)


def parse_embedded(content: str) -> Optional[List[Any]]:
    """Find JSON embedded in surrounding prose or code fences."""
    match = _FLASHCARDS_OBJECT_RE.search(content)
    if match:
        cards = parse_as_wrapped(_loads(match.group(0)))
        if cards is not None:
            return cards

    match = _ARRAY_RE.search(content)
    if match:
        return parse_as_list(_loads(match.group(0)))
    return None


def extract_card_list(content: str) -> List[Any]:
    """
    Extract the raw card list from model output.

    Raises:
        ValidationError: if no strategy finds a card list
    """
    cards = parse_direct(content)
    if cards is not None:
        return cards

    logger.warning(
        f"[FLASHCARD_PARSER] Direct JSON parse failed, trying regex extraction | "
        f"preview={content[:200]!r}"
    )
    cards = parse_embedded(content)
    if cards is not None:
        return cards

    logger.error(f"[FLASHCARD_PARSER] Unparseable model output | preview={content[:500]!r}")
    raise ValidationError("Could not parse the AI response. Please try again.")


# =====================
# Post-processing
# =====================

def normalize_proposals(cards: List[Any]) -> List[FlashcardProposal]:
    """
    Keep entries with non-blank string front/back; truncate long ones.

    Over-long sides are truncated, never rejected. Kept text is not trimmed.
    """
    proposals = []
    for card in cards:
        if not isinstance(card, dict):
            continue
        front = card.get("front")
        back = card.get("back")
        if not isinstance(front, str) or not isinstance(back, str):
            continue
        if not front.strip() or not back.strip():
            continue
        proposals.append(FlashcardProposal(
            front=front[:FLASHCARD_FRONT_MAX_CHARS],
            back=back[:FLASHCARD_BACK_MAX_CHARS],
            source=FLASHCARD_SOURCE_AI_FULL,
        ))

    skipped = len(cards) - len(proposals)
    if skipped:
        logger.info(f"[FLASHCARD_PARSER] Skipped invalid entries | skipped={skipped} | kept={len(proposals)}")
    return proposals


def parse_flashcard_proposals(content: str) -> List[FlashcardProposal]:
    """
    Turn raw model output into validated flashcard proposals.

    Raises:
        ValidationError: if the output cannot be parsed or yields no
            valid flashcards (an empty list is never returned)
    """
    proposals = normalize_proposals(extract_card_list(content))
    if not proposals:
        raise ValidationError("The AI did not produce any valid flashcards. Try a different text.")
    return proposals
