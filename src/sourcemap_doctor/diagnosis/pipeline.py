"""Diagnosis orchestration: every step in order, first failure wins.

Steps run strictly one after another; no fetch starts before the
previous step's result is available. Verification steps return
``Ok``/``Err`` directly; fetch steps convert TransportError into an
``Err`` so the whole run has a single failure path.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from sourcemap_doctor.client.errors import TransportError
from sourcemap_doctor.client.protocols import ReleaseSource
from sourcemap_doctor.constants import DiagnosticKind, Severity, StepProgress
from sourcemap_doctor.diagnosis import checks
from sourcemap_doctor.diagnosis.locator import locate
from sourcemap_doctor.diagnosis.path_matcher import match_artifact
from sourcemap_doctor.diagnosis.resolver import (
    DecoderFactory,
    ResolvedPosition,
    render_context,
    resolve,
)
from sourcemap_doctor.diagnosis.result import (
    Diagnostic,
    Err,
    Ok,
    StepResult,
    fail,
)
from sourcemap_doctor.logger import RunLogger
from sourcemap_doctor.resilience.errors import classify_error, is_retryable
from sourcemap_doctor.services.events import ProgressCallback, StepEvent
from sourcemap_doctor.sourcemaps.decoder import parse

logger = logging.getLogger(__name__)


@dataclass
class StepStatus:
    """Status of a pipeline step."""

    name: str
    ok: bool
    duration_ms: float = 0.0
    diagnostic: Diagnostic | None = None


@dataclass
class PipelineOutcome:
    """Full result of a diagnosis run."""

    event_id: str
    steps: list[StepStatus] = field(
        default_factory=lambda: list[StepStatus]()
    )
    diagnostic: Diagnostic | None = None
    position: ResolvedPosition | None = None
    context: str | None = None
    total_duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.diagnostic is None and self.context is not None

    @property
    def failed_step(self) -> str | None:
        for step in self.steps:
            if not step.ok:
                return step.name
        return None


def _transport_failure(exc: TransportError) -> Err:
    error_class = classify_error(exc)
    tips: list[str] = []
    if is_retryable(exc):
        tips.append("The failure looks transient, re-running may succeed.")
    return fail(
        DiagnosticKind.TRANSPORT_ERROR,
        f"{exc} ({error_class.value})",
        *tips,
    )


@dataclass
class DiagnosisContext:
    """Per-run bookkeeping: timing, progress events and the step log."""

    event_id: str
    on_progress: ProgressCallback | None = None
    run_logger: RunLogger | None = None
    step_delay_seconds: float = 0.0
    outcome: PipelineOutcome = field(init=False)

    def __post_init__(self) -> None:
        self.outcome = PipelineOutcome(event_id=self.event_id)

    def report(self, event: StepEvent) -> None:
        """Emit a progress event if callback is set."""
        if self.on_progress:
            self.on_progress(event)

    async def check[T](
        self,
        name: str,
        fn: Callable[..., StepResult[T]],
        *args: Any,
        done: Callable[[T], str] | None = None,
    ) -> StepResult[T]:
        """Run a verification step."""

        async def _thunk() -> StepResult[T]:
            return fn(*args)

        return await self._run(name, _thunk, done)

    async def fetch[T](
        self,
        name: str,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        done: Callable[[T], str] | None = None,
    ) -> StepResult[T]:
        """Run an external fetch, turning transport failures into ``Err``."""

        async def _thunk() -> StepResult[T]:
            try:
                return Ok(await fn(*args))
            except TransportError as exc:
                logger.warning(
                    "event=fetch_failed step=%s error=%s", name, exc
                )
                return _transport_failure(exc)

        return await self._run(name, _thunk, done)

    async def _run[T](
        self,
        name: str,
        thunk: Callable[[], Awaitable[StepResult[T]]],
        done: Callable[[T], str] | None,
    ) -> StepResult[T]:
        self.report(StepEvent(name=name, status=StepProgress.RUNNING))
        start = time.monotonic()
        result = await thunk()
        elapsed = (time.monotonic() - start) * 1000

        if self.step_delay_seconds:
            await asyncio.sleep(self.step_delay_seconds)

        match result:
            case Ok(value=value):
                status = StepStatus(name=name, ok=True, duration_ms=elapsed)
                progress = StepProgress.DONE
                message = done(value) if done else ""
            case Err(diagnostic=diagnostic):
                status = StepStatus(
                    name=name,
                    ok=False,
                    duration_ms=elapsed,
                    diagnostic=diagnostic,
                )
                progress = (
                    StepProgress.WARNING
                    if diagnostic.severity == Severity.WARNING
                    else StepProgress.ERROR
                )
                message = diagnostic.reason

        self.outcome.steps.append(status)
        self.report(
            StepEvent(
                name=name,
                status=progress,
                message=message,
                duration_ms=elapsed,
            )
        )
        if self.run_logger:
            self.run_logger.log_step(self.event_id, name, progress, elapsed)
        return result

    def halt(self, err: Err) -> PipelineOutcome:
        """Finish the run with the first failure."""
        self.outcome.diagnostic = err.diagnostic
        logger.info(
            "event=diagnosis_halted event_id=%s step=%s kind=%s",
            self.event_id,
            self.outcome.failed_step,
            err.diagnostic.kind,
        )
        if self.run_logger:
            self.run_logger.log_diagnostic(
                self.event_id,
                self.outcome.failed_step or "",
                err.diagnostic,
            )
        return self.outcome


async def run_diagnosis(
    event_id: str,
    source: ReleaseSource,
    *,
    decoder_factory: DecoderFactory = parse,
    check_already_mapped: bool = False,
    step_delay_seconds: float = 0.0,
    on_progress: ProgressCallback | None = None,
    run_logger: RunLogger | None = None,
) -> PipelineOutcome:
    """Diagnose source map resolution for a single event.

    Steps:
      1. Event: fetch, release, exception, (already mapped), stacktrace,
         deepest in-app frame
      2. Source artifact: fetch artifacts, non-empty, match frame, dist
      3. Source map: fetch file + metadata, locate reference, match, dist
      4. Resolution: fetch source map, resolve position, render context
    """
    ctx = DiagnosisContext(
        event_id=event_id,
        on_progress=on_progress,
        run_logger=run_logger,
        step_delay_seconds=step_delay_seconds,
    )
    t0 = time.monotonic()
    try:
        return await _diagnose(
            ctx, source, decoder_factory, check_already_mapped
        )
    finally:
        ctx.outcome.total_duration_ms = (time.monotonic() - t0) * 1000


async def _diagnose(
    ctx: DiagnosisContext,
    source: ReleaseSource,
    decoder_factory: DecoderFactory,
    check_already_mapped: bool,
) -> PipelineOutcome:
    # ── 1. Event ─────────────────────────────────────────
    r_event = await ctx.fetch(
        "fetch_event",
        source.fetch_event,
        ctx.event_id,
        done=lambda _: "Event fetched successfully",
    )
    if isinstance(r_event, Err):
        return ctx.halt(r_event)
    event = r_event.value

    r_release = await ctx.check(
        "verify_release",
        checks.verify_release,
        event,
        done=lambda release: f"Event has release name set to: {release}",
    )
    if isinstance(r_release, Err):
        return ctx.halt(r_release)
    release = r_release.value

    r_exception = await ctx.check(
        "verify_exception",
        checks.verify_exception,
        event,
        done=lambda _: "Event exception present",
    )
    if isinstance(r_exception, Err):
        return ctx.halt(r_exception)
    exception = r_exception.value

    if check_already_mapped:
        r_unmapped = await ctx.check(
            "verify_not_mapped",
            checks.verify_not_already_mapped,
            exception,
            done=lambda _: "Event is not source mapped yet, proceeding",
        )
        if isinstance(r_unmapped, Err):
            return ctx.halt(r_unmapped)

    r_stacktrace = await ctx.check(
        "verify_stacktrace",
        checks.verify_stacktrace,
        exception,
        done=lambda _: "Event exception stacktrace present",
    )
    if isinstance(r_stacktrace, Err):
        return ctx.halt(r_stacktrace)

    r_frame = await ctx.check(
        "verify_frame_path",
        checks.verify_frame_path,
        r_stacktrace.value,
        done=lambda f: f"Event has a valid stacktrace frame: {f.abs_path}",
    )
    if isinstance(r_frame, Err):
        return ctx.halt(r_frame)
    frame = r_frame.value
    abs_path = frame.abs_path or ""

    # ── 2. Source artifact ───────────────────────────────
    r_artifacts = await ctx.fetch(
        "fetch_artifacts",
        source.fetch_release_artifacts,
        release,
        done=lambda a: f"Fetched {len(a)} artifacts for release {release}",
    )
    if isinstance(r_artifacts, Err):
        return ctx.halt(r_artifacts)
    artifacts = r_artifacts.value

    r_present = await ctx.check(
        "verify_artifacts",
        checks.verify_artifacts,
        artifacts,
        done=lambda _: "Release has artifacts present",
    )
    if isinstance(r_present, Err):
        return ctx.halt(r_present)

    r_source = await ctx.check(
        "match_source_artifact",
        match_artifact,
        artifacts,
        abs_path,
        done=lambda a: f"Artifacts include required file: {a.name}",
    )
    if isinstance(r_source, Err):
        return ctx.halt(r_source)
    source_artifact = r_source.value

    r_source_dist = await ctx.check(
        "verify_source_dist",
        checks.verify_dist,
        source_artifact,
        event.dist,
        done=lambda _: "Release artifact distribution set correctly",
    )
    if isinstance(r_source_dist, Err):
        return ctx.halt(r_source_dist)

    # ── 3. Source map ────────────────────────────────────
    r_file = await ctx.fetch(
        "fetch_source_file",
        source.fetch_release_artifact_file,
        release,
        source_artifact,
        done=lambda _: f"Release file {source_artifact.name} fetched",
    )
    if isinstance(r_file, Err):
        return ctx.halt(r_file)

    r_metadata = await ctx.fetch(
        "fetch_source_metadata",
        source.fetch_release_artifact_file_metadata,
        release,
        source_artifact,
        done=lambda _: "Release file metadata fetched",
    )
    if isinstance(r_metadata, Err):
        return ctx.halt(r_metadata)

    r_location = await ctx.check(
        "locate_sourcemap",
        locate,
        r_file.value,
        r_metadata.value,
        done=lambda loc: f"Source maps url discovered: {loc}",
    )
    if isinstance(r_location, Err):
        return ctx.halt(r_location)

    r_map = await ctx.check(
        "match_sourcemap_artifact",
        match_artifact,
        artifacts,
        r_location.value,
        done=lambda a: f"Artifacts include required source map: {a.name}",
    )
    if isinstance(r_map, Err):
        return ctx.halt(r_map)
    sourcemap_artifact = r_map.value

    r_map_dist = await ctx.check(
        "verify_sourcemap_dist",
        checks.verify_dist,
        sourcemap_artifact,
        event.dist,
        done=lambda _: "Source map artifact distribution set correctly",
    )
    if isinstance(r_map_dist, Err):
        return ctx.halt(r_map_dist)

    # ── 4. Resolution ────────────────────────────────────
    r_map_text = await ctx.fetch(
        "fetch_sourcemap_file",
        source.fetch_release_artifact_file,
        release,
        sourcemap_artifact,
        done=lambda _: f"Source map {sourcemap_artifact.name} fetched",
    )
    if isinstance(r_map_text, Err):
        return ctx.halt(r_map_text)

    r_position = await ctx.check(
        "resolve_position",
        resolve,
        r_map_text.value,
        frame.lineno,
        frame.colno,
        decoder_factory,
        done=lambda p: f"Source maps position resolved: {p.source}:{p.line}",
    )
    if isinstance(r_position, Err):
        return ctx.halt(r_position)
    position = r_position.value

    ctx.outcome.position = position
    ctx.outcome.context = render_context(
        position.source_text, position.line, position.column
    )
    logger.info(
        "event=diagnosis_resolved event_id=%s source=%s line=%d",
        ctx.event_id,
        position.source,
        position.line,
    )
    if ctx.run_logger:
        ctx.run_logger.log_resolved(
            ctx.event_id, position.source, position.line, position.column
        )
    return ctx.outcome
