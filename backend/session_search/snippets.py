"""
Display text and context snippets for matched session events
"""

import json
from typing import Any, List, Optional

SNIPPET_CONTEXT_CHARS = 60
ELLIPSIS = '...'


def extract_text_from_event(line: str) -> str:
    """
    Extract the human readable text of one JSON event line

    Tries message.content first (assistant/user messages), then a top level
    content string (system events), then summary (summary events). Anything
    that is not a JSON object falls back to the raw line.
    """
    try:
        event = json.loads(line)
    except (ValueError, RecursionError):
        return line

    if not isinstance(event, dict):
        return line

    message = event.get('message')
    if isinstance(message, dict) and 'content' in message:
        text = extract_text_from_content(message['content'])
        if text is not None:
            return text

    content = event.get('content')
    if isinstance(content, str):
        return content

    summary = event.get('summary')
    if isinstance(summary, str):
        return summary

    return line


def extract_text_from_content(content: Any) -> Optional[str]:
    """Content is either a plain string or a list of typed content blocks"""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return None

    blocks = [block for block in content if isinstance(block, dict)]

    for block in blocks:
        if block.get('type') == 'text' and isinstance(block.get('text'), str):
            return block['text']

    for block in blocks:
        if block.get('type') == 'thinking' and isinstance(block.get('thinking'), str):
            return block['thinking']

    for block in blocks:
        if block.get('type') == 'tool_use' and isinstance(block.get('name'), str):
            if 'input' in block:
                tool_input = json.dumps(block['input'], separators=(',', ':'), ensure_ascii=False)
                return f"[{block['name']}] {tool_input}"
            return f"[{block['name']}]"

    return None


def _clamp(text: str, index: int) -> int:
    # str indices are code points, so any in-range index is a character boundary
    return max(0, min(index, len(text)))


def find_earliest_term(text_lower: str, terms: List[str]) -> Optional[int]:
    earliest = None
    for term in terms:
        pos = text_lower.find(term)
        if pos != -1 and (earliest is None or pos < earliest):
            earliest = pos
    return earliest


def build_snippet(text: str, terms: List[str], context_chars: int = SNIPPET_CONTEXT_CHARS) -> str:
    """
    Build a snippet with context around the earliest matched term

    The window spans context_chars on each side of the match and is widened
    to whole words. "..." marks text cut off at either end.
    """
    earliest = find_earliest_term(text.lower(), terms)
    # Fallback to the start if no term is found
    pos = earliest if earliest is not None else 0

    # Lower-casing can change the length of some strings, clamp back into text
    pos = _clamp(text, pos)
    start = _clamp(text, pos - context_chars)
    end = _clamp(text, pos + context_chars)

    # Widen to word boundaries
    space = text.rfind(' ', 0, start)
    if space != -1:
        start = space + 1
    space = text.find(' ', end)
    if space != -1:
        end = space

    start = _clamp(text, start)
    end = _clamp(text, end)

    snippet = text[start:end].strip()
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(text):
        snippet = snippet + ELLIPSIS
    return snippet
