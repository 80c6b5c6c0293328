"""Recover a JSON object from free-form model output.

Models that do not honour a JSON-only instruction wrap the object in prose,
markdown fences or both. Candidates are tried in a fixed order and the first
one that parses to a JSON object wins; nothing is merged or scored.
"""

import json
import logging
import re
from typing import Any, Iterator

from siemgen.errors import ExtractionError

logger = logging.getLogger("siemgen.extraction")

# Object spanning from the first brace to a closing brace at end of text.
TRAILING_OBJECT_RE = re.compile(r"\{.*\}\s*$", re.DOTALL)

# Opening ``` or ```json fence directly followed by an object.
FENCE_OPEN_RE = re.compile(r"```(?:json)?\s*(?=\{)", re.IGNORECASE)

# Closing brace followed by a closing fence.
FENCE_CLOSE_RE = re.compile(r"\}\s*```")

# Object introduced by a lead-in phrase.
INTRO_OBJECT_RE = re.compile(r"(?:Here is|Here's|Response:|JSON:).*?(\{.*\})", re.DOTALL)


def _trailing_object(text: str) -> Iterator[str]:
    match = TRAILING_OBJECT_RE.search(text)
    if match:
        yield match.group(0)


def _fenced_object(text: str) -> Iterator[str]:
    # String values may themselves contain "} ```", so every closing fence
    # after an opening one is a candidate, nearest first.
    for opening in FENCE_OPEN_RE.finditer(text):
        start = opening.end()
        for closing in FENCE_CLOSE_RE.finditer(text, start):
            yield text[start:closing.start() + 1]


def _introduced_object(text: str) -> Iterator[str]:
    match = INTRO_OBJECT_RE.search(text)
    if match:
        yield match.group(1)


def _verbatim(text: str) -> Iterator[str]:
    yield text


STRATEGIES = (
    ("trailing-object", _trailing_object),
    ("fenced-block", _fenced_object),
    ("introduced-object", _introduced_object),
    ("verbatim", _verbatim),
)


def iter_candidates(text: str) -> Iterator[tuple[str, str]]:
    """Yield (strategy_name, candidate) pairs in strategy order."""
    for name, strategy in STRATEGIES:
        for candidate in strategy(text):
            yield name, candidate.strip()


def extract_json(text: str) -> dict[str, Any]:
    """
    Extract the first JSON object recoverable from text.

    Raises:
        ExtractionError: if no strategy yields a parseable JSON object
    """
    for name, candidate in iter_candidates(text or ""):
        try:
            parsed = json.loads(candidate)
        except (ValueError, RecursionError):
            continue
        if isinstance(parsed, dict):
            logger.debug("Extracted JSON object using %s strategy", name)
            return parsed

    raise ExtractionError(
        "Model returned invalid JSON format. The response did not match the expected JSON format."
    )
