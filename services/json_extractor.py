"""
Best-effort JSON extraction from free-text LLM responses.

Each strategy takes the raw response and returns the decoded array/object
or None. ``extract_json`` tries them in order and stops at the first hit.
"""
import json
import re
from typing import Any, Callable, Iterator, List, Optional, Union

from models import MalformedOutputError

JSONValue = Union[list, dict]
Strategy = Callable[[str], Optional[JSONValue]]

_FENCED_BLOCK = re.compile(r'```(?:json|JSON)?[ \t]*\n?([\s\S]*?)```')


class JSONExtractionError(MalformedOutputError):
    """No strategy could recover JSON from the response."""


def _loads_container(text: str) -> Optional[JSONValue]:
    try:
        value = json.loads(text)
    except (TypeError, ValueError):
        return None
    return value if isinstance(value, (list, dict)) else None


def parse_direct(content: str) -> Optional[JSONValue]:
    """The whole response is JSON."""
    return _loads_container(content.strip())


def parse_fenced_block(content: str) -> Optional[JSONValue]:
    """JSON wrapped in a markdown code fence."""
    for match in _FENCED_BLOCK.finditer(content):
        value = _loads_container(match.group(1).strip())
        if value is not None:
            return value
    return None


_PAIRS = {'[': ']', '{': '}'}


def _balanced_spans(content: str) -> Iterator[str]:
    """Yield, in order of position, each ``[``/``{`` through its matching closer.

    String literals are skipped so brackets inside them do not count.
    """
    for start, first in enumerate(content):
        if first not in _PAIRS:
            continue
        opener, closer = first, _PAIRS[first]
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(content)):
            char = content[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == opener:
                depth += 1
            elif char == closer:
                depth -= 1
                if depth == 0:
                    yield content[start:index + 1]
                    break


def parse_bracketed(content: str) -> Optional[JSONValue]:
    """First balanced array or object that decodes."""
    for span in _balanced_spans(content):
        value = _loads_container(span)
        if value is not None:
            return value
    return None


DEFAULT_STRATEGIES: List[Strategy] = [parse_direct, parse_fenced_block, parse_bracketed]


def extract_json(content: str, strategies: List[Strategy] = None) -> Any:
    """
    Recover a JSON array or object from ``content``.

    Raises:
        JSONExtractionError: if every strategy fails
    """
    if content:
        for strategy in strategies or DEFAULT_STRATEGIES:
            value = strategy(content)
            if value is not None:
                return value
    raise JSONExtractionError("Could not extract JSON from response")
