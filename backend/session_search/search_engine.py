"""
Session Search Engine - boolean event search over session JSONL logs
Streams one file line by line, never loading it whole, and degrades every
I/O or data problem to a well-formed (possibly empty) response
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from session_locator import SessionLocator
from session_search.query import SearchExpr, collect_terms, matches, parse_query
from session_search.snippets import SNIPPET_CONTEXT_CHARS, build_snippet, extract_text_from_event

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10000


@dataclass
class SearchMatch:
    sequence: int       # 0-indexed line number, same as event sequence
    byte_offset: int    # offset of the line's first byte, for loading the full event
    snippet: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sequence': self.sequence,
            'byteOffset': self.byte_offset,
            'snippet': self.snippet,
        }


@dataclass
class SearchResponse:
    matches: List[SearchMatch] = field(default_factory=list)
    total_searched: int = 0
    truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matches': [m.to_dict() for m in self.matches],
            'totalSearched': self.total_searched,
            'truncated': self.truncated,
        }


def _strip_line_ending(raw: bytes) -> bytes:
    if raw.endswith(b'\n'):
        raw = raw[:-1]
        if raw.endswith(b'\r'):
            raw = raw[:-1]
    return raw


def search_file(file_path: Path, expr: SearchExpr, max_results: Optional[int] = None,
                context_chars: int = SNIPPET_CONTEXT_CHARS) -> SearchResponse:
    """
    Search one JSONL file for lines matching expr

    Matches come back in ascending sequence order. Lines that are not valid
    UTF-8 are skipped and not counted, but byte offsets stay exact.
    """
    if max_results is None:
        max_results = DEFAULT_MAX_RESULTS
    max_results = max(max_results, 1)

    try:
        f = open(file_path, 'rb')
    except OSError as e:
        logger.debug(f"Cannot open {file_path}: {e}")
        return SearchResponse()

    response = SearchResponse()
    terms = collect_terms(expr)
    byte_offset = 0

    with f:
        try:
            for sequence, raw in enumerate(f):
                line_start = byte_offset
                byte_offset += len(raw)

                try:
                    line = _strip_line_ending(raw).decode('utf-8')
                except UnicodeDecodeError:
                    continue

                response.total_searched += 1

                if not matches(expr, line):
                    continue

                text = extract_text_from_event(line)
                response.matches.append(SearchMatch(
                    sequence=sequence,
                    byte_offset=line_start,
                    snippet=build_snippet(text, terms, context_chars),
                ))

                if len(response.matches) >= max_results:
                    response.truncated = True
                    logger.info(f"Search of {file_path} truncated at {max_results} matches")
                    return response
        except OSError as e:
            logger.warning(f"Read error in {file_path} after {response.total_searched} lines: {e}")

    return response


class SessionSearchEngine:
    """
    Search entry points for session and sub-agent logs

    Holds no per-search state, so concurrent searches are independent.
    """

    def __init__(self, locator: SessionLocator, context_chars: int = SNIPPET_CONTEXT_CHARS,
                 default_max_results: int = DEFAULT_MAX_RESULTS):
        self.locator = locator
        self.context_chars = context_chars
        self.default_max_results = default_max_results

    def _search(self, expr: SearchExpr, file_path: Optional[Path],
                max_results: Optional[int]) -> SearchResponse:
        if file_path is None:
            return SearchResponse()
        if max_results is None:
            max_results = self.default_max_results
        response = search_file(file_path, expr, max_results, self.context_chars)
        logger.debug(f"Searched {file_path} for {expr}: {len(response.matches)} matches "
                     f"in {response.total_searched} lines")
        return response

    def search_session(self, project_path: str, session_id: str, query: str,
                       max_results: Optional[int] = None) -> SearchResponse:
        """Search a session file for matching events, oldest first"""
        expr = parse_query(query)
        if expr is None:
            return SearchResponse()
        file_path = self.locator.session_file(project_path, session_id)
        return self._search(expr, file_path, max_results)

    def search_subagent(self, project_path: str, agent_id: str, query: str,
                        max_results: Optional[int] = None) -> SearchResponse:
        """Search a sub-agent file for matching events, oldest first"""
        expr = parse_query(query)
        if expr is None:
            return SearchResponse()
        file_path = self.locator.subagent_file(project_path, agent_id)
        return self._search(expr, file_path, max_results)

    async def search_session_async(self, project_path: str, session_id: str, query: str,
                                   max_results: Optional[int] = None) -> SearchResponse:
        # Run in a worker thread to avoid blocking the event loop
        return await asyncio.to_thread(self.search_session, project_path, session_id,
                                       query, max_results)

    async def search_subagent_async(self, project_path: str, agent_id: str, query: str,
                                    max_results: Optional[int] = None) -> SearchResponse:
        return await asyncio.to_thread(self.search_subagent, project_path, agent_id,
                                       query, max_results)
