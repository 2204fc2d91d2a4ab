"""
Random-access and paged reads of session JSONL logs
Search results carry byte offsets; these helpers load the full event behind them
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles

logger = logging.getLogger(__name__)


def _parse_event(raw: bytes) -> Optional[Dict[str, Any]]:
    """Decode one raw line. Non-JSON lines come back as {"raw": line}, undecodable ones as None"""
    try:
        line = raw.rstrip(b'\r\n').decode('utf-8')
    except UnicodeDecodeError:
        return None
    try:
        event = json.loads(line)
    except (ValueError, RecursionError):
        return {'raw': line}
    if isinstance(event, dict):
        return event
    return {'raw': line}


async def read_event_at(file_path: Path, byte_offset: int) -> Optional[Dict[str, Any]]:
    """Load the event whose line starts at byte_offset"""
    if byte_offset < 0:
        return None
    async with aiofiles.open(file_path, 'rb') as f:
        await f.seek(byte_offset)
        raw = await f.readline()
    if not raw:
        return None
    return _parse_event(raw)


async def read_events(file_path: Path, offset: int = 0, limit: int = 100) -> Dict[str, Any]:
    """
    Page through events starting at line `offset`

    Every entry keeps its sequence and byte offset so the viewer can line
    pages up with search results.
    """
    events = []
    has_more = False
    byte_offset = 0

    async with aiofiles.open(file_path, 'rb') as f:
        sequence = 0
        async for raw in f:
            if sequence >= offset:
                if len(events) >= limit:
                    has_more = True
                    break
                events.append({
                    'sequence': sequence,
                    'byteOffset': byte_offset,
                    'event': _parse_event(raw),
                })
            byte_offset += len(raw)
            sequence += 1

    return {
        'events': events,
        'offset': offset,
        'linesReturned': len(events),
        'hasMore': has_more,
    }
