"""Source map decoding, backed by the ``sourcemap`` library.

Positions follow the usual source-map convention: lines are 1-based,
columns 0-based. The library indexes lines from 0, so lookups shift
by one in both directions.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Any, Protocol

import sourcemap

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """Malformed map, uncovered position, or missing embedded source."""


@dataclass(frozen=True)
class OriginalPosition:
    source: str
    line: int
    column: int


class Decoder(Protocol):
    def original_position_for(
        self, line: int, column: int
    ) -> OriginalPosition: ...
    def source_content_for(self, source: str) -> str: ...


class SourceMapDecoder:
    """Decoder over a parsed ``sourcemap.SourceMapIndex``."""

    def __init__(self, index: Any) -> None:
        self._index = index
        raw: dict[str, Any] = index.raw
        contents = raw.get("sourcesContent") or []
        root = raw.get("sourceRoot")
        self._contents: dict[str, str | None] = {}
        for i, name in enumerate(raw.get("sources") or []):
            content = contents[i] if i < len(contents) else None
            self._contents[name] = content
            if root:
                self._contents[posixpath.join(root, name)] = content

    def original_position_for(
        self, line: int, column: int
    ) -> OriginalPosition:
        if line < 1 or column < 0:
            raise DecodeError(
                f"Invalid generated position {line}:{column}"
            )
        try:
            token = self._index.lookup(line=line - 1, column=column)
        except IndexError as exc:
            raise DecodeError(
                f"No mapping covers generated position {line}:{column}"
            ) from exc
        if token.src is None:
            raise DecodeError(
                f"Mapping at {line}:{column} has no original source"
            )
        return OriginalPosition(
            source=token.src,
            line=token.src_line + 1,
            column=token.src_col,
        )

    def source_content_for(self, source: str) -> str:
        content = self._contents.get(source)
        if content is None:
            raise DecodeError(
                f"Source map has no embedded content for {source}"
            )
        return content


def parse(text: str) -> Decoder:
    """Parse serialized source map text into a Decoder."""
    try:
        index = sourcemap.loads(text)
    except (
        ValueError,
        KeyError,
        TypeError,
        IndexError,
        AssertionError,
        AttributeError,
    ) as exc:
        # SourceMapDecodeError and json errors are ValueErrors; a segment
        # decoding to a negative position fails an internal assert whose
        # handler then raises AttributeError on Python 3
        raise DecodeError(f"Malformed source map: {exc}") from exc
    logger.debug(
        "event=sourcemap_parsed tokens=%d", len(index.tokens)
    )
    return SourceMapDecoder(index)
