"""Tests for position resolution and context rendering."""

from __future__ import annotations

from sourcemap_doctor.constants import DiagnosticKind
from sourcemap_doctor.diagnosis.resolver import (
    ResolvedPosition,
    render_context,
    resolve,
)
from sourcemap_doctor.diagnosis.result import Err, Ok
from sourcemap_doctor.sourcemaps.decoder import OriginalPosition
from tests.conftest import FakeDecoder


class TestRenderContext:
    def test_window_and_marker(self) -> None:
        text = "\n".join(f"line{i}" for i in range(1, 11))
        rendered = render_context(text, 5, 3).split("\n")
        assert rendered == [
            "line2",
            "line3",
            "line4",
            "line5",
            "   ^",
            "line6",
            "line7",
            "line8",
        ]

    def test_clipped_at_file_start(self) -> None:
        rendered = render_context("a\nb\nc\nd", 1, 0).split("\n")
        assert rendered == ["a", "^", "b", "c", "d"]

    def test_clipped_at_file_end(self) -> None:
        rendered = render_context("a\nb\nc\n", 3, 1)
        assert rendered == "a\nb\nc\n ^\n"

    def test_marker_column_zero(self) -> None:
        rendered = render_context("only", 1, 0).split("\n")
        assert rendered == ["only", "^"]


class TestResolve:
    def test_resolves_position(self, decoder: FakeDecoder) -> None:
        result = resolve("{}", 10, 4, lambda _text: decoder)
        assert result == Ok(
            ResolvedPosition(
                source="app.ts",
                line=3,
                column=1,
                source_text="a\nb\nc\n",
            )
        )
        assert decoder.lookups == [(10, 4)]

    def test_decode_error_becomes_diagnostic(self) -> None:
        failing = FakeDecoder(error="mapping out of range")
        result = resolve("{}", 10, 4, lambda _text: failing)
        assert isinstance(result, Err)
        assert result.diagnostic.kind == DiagnosticKind.RESOLUTION_FAILURE
        assert "mapping out of range" in result.diagnostic.reason

    def test_missing_source_content(self) -> None:
        no_content = FakeDecoder(
            position=OriginalPosition(source="app.ts", line=1, column=0)
        )
        result = resolve("{}", 1, 0, lambda _text: no_content)
        assert isinstance(result, Err)
        assert "no content for app.ts" in result.diagnostic.reason

    def test_malformed_map_with_real_decoder(self) -> None:
        result = resolve("not json", 1, 0)
        assert isinstance(result, Err)
        assert result.diagnostic.kind == DiagnosticKind.RESOLUTION_FAILURE

    def test_frame_without_column(self, decoder: FakeDecoder) -> None:
        result = resolve("{}", 10, None, lambda _text: decoder)
        assert isinstance(result, Err)
        assert decoder.lookups == []
