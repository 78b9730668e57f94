"""
Composition orchestrator for SlideCast.

Owns the session state machine (selecting -> editing -> rendering) and runs the
render pipeline: probe, extract frames, derive durations, assemble the slide
video, resolve the output path and compose the final video.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from loguru import logger

from slidecast.configs.config import Config, config
from slidecast.core.errors import (
    InputNotReadyError,
    MediaIOError,
    PipelineCancelledError,
    SlideCastError,
    TimingValidationError,
)
from slidecast.core.progress import ProgressCounter, units_for_pages
from slidecast.core.schedule import Schedule
from slidecast.core.session import CompositionSession, PipelinePhase, RunStatus
from slidecast.media import (
    FfmpegCompositor,
    FfmpegDurationProber,
    FrameWorkspace,
    MoviepySlideAssembler,
    PdfDocument,
)
from slidecast.media.interfaces import (
    Compositor,
    DurationProber,
    FrameStore,
    PageCounter,
    Rasterizer,
    SlideVideoAssembler,
)
from slidecast.schemas.composition import (
    MAX_OVERLAY_WIDTH,
    MIN_OVERLAY_WIDTH,
    CompositionRequest,
    OverlayMedia,
    OverlayPosition,
    QualityProfile,
)
from slidecast.timing.deriver import derive_durations
from slidecast.timing.engine import compute_uniform_schedule

from .helpers import (
    RENDER_STEPS,
    SOFT_STEPS,
    resolve_output_path,
    step_display_name,
)
from .results import Fatal, Ok, SoftFail, StepResult

ProgressCallback = Callable[[ProgressCounter, str], None]

SLIDE_VIDEO_NAME = "slides.mp4"


@dataclass
class RenderRun:
    """Per-run snapshot; edits made while rendering never reach a running run."""

    token: int
    session: CompositionSession
    schedule: Schedule
    track_duration: float | None = None
    working_dir: Path | None = None
    durations: list[float] = field(default_factory=list)
    slides_video: Path | None = None
    output_path: str | None = None


class CompositionOrchestrator:
    """Drives one operator session from input selection to the final video."""

    def __init__(
        self,
        page_counter: PageCounter | None = None,
        rasterizer: Rasterizer | None = None,
        frame_store: FrameStore | None = None,
        prober: DurationProber | None = None,
        assembler: SlideVideoAssembler | None = None,
        compositor: Compositor | None = None,
        on_progress: ProgressCallback | None = None,
        settings: Config | None = None,
    ) -> None:
        self.config = settings or config
        self.page_counter, self.rasterizer = self._document_collaborators(
            page_counter, rasterizer
        )
        self.frame_store = frame_store or FrameWorkspace()
        self.prober = prober or FfmpegDurationProber()
        self.assembler = assembler or MoviepySlideAssembler()
        self.compositor = compositor or FfmpegCompositor()
        self.on_progress = on_progress

        self.phase = PipelinePhase.SELECTING
        self.run_status = RunStatus.IDLE
        self.session = CompositionSession()
        self.schedule = Schedule()
        self.progress = ProgressCounter()
        self.track_duration: float | None = None
        self.status_message = ""
        self.last_error: str | None = None
        self.last_result: StepResult | None = None

        self._run_token = 0
        self._active_task: asyncio.Task | None = None
        self._step_map: dict[str, Callable[[RenderRun], Any]] = {
            "probe_track": self._probe_track,
            "allocate_workspace": self._allocate_workspace,
            "extract_frames": self._extract_frames,
            "derive_durations": self._derive_durations,
            "assemble_slides": self._assemble_slides,
            "resolve_output": self._resolve_output,
            "compose_final": self._compose_final,
        }

    def _document_collaborators(
        self, page_counter: PageCounter | None, rasterizer: Rasterizer | None
    ) -> tuple[PageCounter, Rasterizer]:
        if page_counter is not None and rasterizer is not None:
            return page_counter, rasterizer
        document = PdfDocument()
        return page_counter or document, rasterizer or document

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    async def select_document(self, path: str | Path) -> bool:
        if self._reject_while_rendering("change the slide document"):
            return False
        self.session.document_path = str(path)
        self.session.page_count = None
        self.schedule = Schedule()

        try:
            page_count = await self.page_counter.count_pages(Path(path))
        except Exception as e:
            logger.error(f"Failed to read slide document {path}: {e}")
            self._set_message(f"Failed to read slide document: {e}")
            return False

        if page_count <= 0:
            self._set_message("Slide document has no pages")
            return False

        self.session.page_count = page_count
        self._seed_schedule()
        self._set_message(f"Loaded {page_count} slides from {Path(path).name}")
        return True

    async def select_narration(self, path: str | Path) -> bool:
        if self._reject_while_rendering("change the narration video"):
            return False
        self.session.narration_path = str(path)
        self.track_duration = None

        try:
            self.track_duration = await self.prober.probe_duration(Path(path))
        except Exception as e:
            logger.warning(f"Could not probe narration {path}: {e}")
            self._set_message(f"Narration selected; length unknown ({e})")
        else:
            self._set_message(
                f"Narration selected ({self.track_duration:.1f}s)"
            )
        self._seed_schedule()
        return True

    def set_output(
        self,
        directory: str | None = None,
        base_name: str | None = None,
        extension: str | None = None,
        raw_path: str | None = None,
    ) -> None:
        if directory is not None:
            self.session.output_dir = directory
        if base_name is not None:
            self.session.output_name = base_name
        if extension is not None:
            self.session.container_ext = extension.lstrip(".")
        if raw_path is not None:
            self.session.raw_output_path = raw_path

    def configure_overlay(
        self,
        position: OverlayPosition | str | None = None,
        relative_width: float | None = None,
        media: OverlayMedia | str | None = None,
        quality: QualityProfile | str | None = None,
    ) -> None:
        if relative_width is not None and not (
            MIN_OVERLAY_WIDTH <= relative_width <= MAX_OVERLAY_WIDTH
        ):
            raise ValueError(
                f"overlay width must be between {MIN_OVERLAY_WIDTH} "
                f"and {MAX_OVERLAY_WIDTH}, got {relative_width}"
            )
        if position is not None:
            self.session.overlay_position = OverlayPosition(position)
        if relative_width is not None:
            self.session.overlay_relative_width = float(relative_width)
        if media is not None:
            self.session.overlay_media = OverlayMedia(media)
        if quality is not None:
            self.session.quality = QualityProfile(quality)

    # ------------------------------------------------------------------
    # Phase transitions and schedule edits
    # ------------------------------------------------------------------

    def enter_editing(self) -> bool:
        if self._reject_while_rendering("open the schedule editor"):
            return False
        try:
            self._require_inputs()
        except InputNotReadyError as e:
            self._set_message(str(e))
            return False

        if len(self.schedule) != self.session.page_count:
            self._seed_schedule()
        self.phase = PipelinePhase.EDITING
        self._set_message(f"Editing schedule for {len(self.schedule)} slides")
        return True

    def leave_editing(self) -> None:
        # Any in-flight run is now stale
        self._run_token += 1
        if self.phase == PipelinePhase.RENDERING:
            logger.info("Leaving the editor; the running render will be discarded")
            self.run_status = RunStatus.IDLE
        self.phase = PipelinePhase.SELECTING
        self._set_message("Back to input selection")

    def set_slide_time(self, slide_index: int, time_seconds: float) -> bool:
        if self.phase != PipelinePhase.EDITING:
            self._set_message("Slide times can only be edited in the schedule editor")
            return False
        self.schedule.set_time(slide_index, time_seconds)
        return True

    def reset_schedule(self) -> bool:
        if self.phase != PipelinePhase.EDITING:
            self._set_message("The schedule can only be reset in the schedule editor")
            return False
        self._seed_schedule()
        self._set_message("Schedule reset to uniform timings")
        return True

    def _require_inputs(self) -> None:
        missing = self.session.missing_inputs()
        if missing:
            raise InputNotReadyError(f"Select {', '.join(missing)} first")

    def _seed_schedule(self) -> None:
        page_count = self.session.page_count
        if not page_count:
            return
        total = self.track_duration or page_count * self.config.fallback_tail_seconds
        self.schedule = compute_uniform_schedule(page_count, total)

    def _reject_while_rendering(self, action: str) -> bool:
        if self.phase == PipelinePhase.RENDERING:
            self._set_message(f"Cannot {action} while rendering")
            return True
        return False

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def generate(self) -> asyncio.Task | None:
        """Start a render on the running loop; ``None`` when rejected or inert."""
        # Raises RuntimeError before any state changes when no loop is running
        loop = asyncio.get_running_loop()
        token = self._begin_run()
        if token is None:
            return None
        self._active_task = loop.create_task(
            self._run(token), name=f"slidecast-render-{token}"
        )
        return self._active_task

    async def render(self) -> StepResult | None:
        """Run a render to completion and return its final step result."""
        token = self._begin_run()
        if token is None:
            return None
        return await self._run(token)

    def _begin_run(self) -> int | None:
        if self.phase == PipelinePhase.RENDERING:
            logger.info("Generate ignored: a render is already running")
            return None
        if self.phase != PipelinePhase.EDITING:
            self._set_message("Open the schedule editor before generating")
            return None
        try:
            self._require_inputs()
        except InputNotReadyError as e:
            self._set_message(str(e))
            return None

        self._run_token += 1
        self.phase = PipelinePhase.RENDERING
        self.run_status = RunStatus.RUNNING
        self.last_error = None
        return self._run_token

    async def _run(self, token: int) -> StepResult | None:
        run = RenderRun(
            token=token,
            session=replace(self.session),
            schedule=self.schedule.copy(),
        )
        logger.info(
            f"Render {token} started: {run.session.page_count} slides, "
            f"narration {run.session.narration_path}"
        )

        result: StepResult | None = None
        try:
            for step_name in RENDER_STEPS:
                result = await self._execute_step(run, step_name)
                if isinstance(result, Fatal):
                    self._fail(result)
                    return result
                if isinstance(result, SoftFail):
                    logger.warning(
                        f"{step_display_name(step_name)} failed, continuing: "
                        f"{result.message}"
                    )
        except PipelineCancelledError as cancelled:
            logger.info(str(cancelled))
            return None
        except BaseException:
            self._abort(run)
            raise

        self._finish(run)
        self.last_result = result
        return result

    async def _execute_step(self, run: RenderRun, step_name: str) -> StepResult:
        """Execute a single render step and tag its outcome."""
        self._ensure_current(run)
        display_name = step_display_name(step_name)
        logger.info(f"=== Render {run.token} - Executing: {display_name} ===")
        self._set_message(f"{display_name}...")

        try:
            value = await self._step_map[step_name](run)
        except PipelineCancelledError:
            raise
        except Exception as e:
            self._ensure_current(run)
            if step_name in SOFT_STEPS:
                return SoftFail(step_name, e)
            if isinstance(e, SlideCastError):
                logger.error(f"Step {step_name} failed: {e}")
            else:
                logger.exception(f"Step {step_name} failed unexpectedly")
            return Fatal(step_name, e)

        self._ensure_current(run)
        return Ok(step_name, value)

    def _ensure_current(self, run: RenderRun) -> None:
        if run.token != self._run_token:
            raise PipelineCancelledError(
                f"Render {run.token} is stale; discarding its results"
            )

    def _fail(self, result: Fatal) -> None:
        self.phase = PipelinePhase.EDITING
        self.run_status = RunStatus.FAILED
        self.last_error = result.message
        self.last_result = result
        self._set_message(f"{step_display_name(result.step)} failed: {result.message}")

    def _abort(self, run: RenderRun) -> None:
        """Hand the session back to editing after a cancelled or crashed run."""
        if run.token != self._run_token or self.phase != PipelinePhase.RENDERING:
            return
        logger.warning(f"Render {run.token} aborted")
        self.phase = PipelinePhase.EDITING
        self.run_status = RunStatus.FAILED
        self.last_error = "render aborted"
        self._set_message("Render aborted")

    def _finish(self, run: RenderRun) -> None:
        self.phase = PipelinePhase.EDITING
        self.run_status = RunStatus.DONE
        logger.info(f"Render {run.token} finished: {run.output_path}")
        self._set_message(f"Done: {run.output_path}")

    def _set_message(self, message: str) -> None:
        self.status_message = message
        if self.on_progress is not None:
            self.on_progress(self.progress, message)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _probe_track(self, run: RenderRun) -> float:
        assert run.session.narration_path is not None
        duration = await self.prober.probe_duration(Path(run.session.narration_path))
        self._ensure_current(run)
        run.track_duration = duration
        self.track_duration = duration
        return duration

    async def _allocate_workspace(self, run: RenderRun) -> Path:
        assert run.session.page_count is not None
        self.progress.reset(units_for_pages(run.session.page_count))
        self._set_message(f"Progress {self.progress}")
        run.working_dir = await self.frame_store.allocate_working_dir(
            self.config.work_dir_prefix
        )
        return run.working_dir

    async def _extract_frames(self, run: RenderRun) -> int:
        assert run.session.document_path is not None
        assert run.session.page_count is not None
        assert run.working_dir is not None
        document_path = Path(run.session.document_path)
        try:
            document = await asyncio.to_thread(document_path.read_bytes)
        except OSError as e:
            raise MediaIOError(f"could not read {document_path}: {e}") from e
        self._ensure_current(run)

        page_count = run.session.page_count
        for page_number in range(1, page_count + 1):
            surface = await self.rasterizer.rasterize_page(
                document, page_number, self.config.render_scale
            )
            self._ensure_current(run)
            await self.frame_store.export_frame(
                run.working_dir, page_number - 1, surface
            )
            self._ensure_current(run)
            self.progress.advance()
            self._set_message(f"Extracted slide {page_number}/{page_count}")
        return page_count

    async def _derive_durations(self, run: RenderRun) -> list[float]:
        page_count = run.session.page_count
        if len(run.schedule) != page_count or not run.schedule.is_contiguous():
            raise TimingValidationError(
                f"schedule covers {len(run.schedule)} slides "
                f"but the document has {page_count} pages"
            )
        run.durations = derive_durations(
            run.schedule,
            fallback_tail_seconds=self.config.fallback_tail_seconds,
            ceiling_seconds=run.track_duration,
        )
        return run.durations

    async def _assemble_slides(self, run: RenderRun) -> Path:
        assert run.working_dir is not None
        run.slides_video = run.working_dir / SLIDE_VIDEO_NAME
        await self.assembler.assemble(run.working_dir, run.durations, run.slides_video)
        self._ensure_current(run)
        self.progress.advance()
        self._set_message(f"Slide video ready ({self.progress})")
        return run.slides_video

    async def _resolve_output(self, run: RenderRun) -> str:
        session = run.session
        run.output_path = resolve_output_path(
            session.output_dir,
            session.output_name,
            session.container_ext,
            session.raw_output_path,
            default_name=self.config.default_output_name,
            default_extension=self.config.default_container,
        )
        return run.output_path

    async def _compose_final(self, run: RenderRun) -> str:
        session = run.session
        assert session.narration_path is not None
        assert run.output_path is not None
        request = CompositionRequest(
            primary_path=session.narration_path,
            secondary_path=str(run.slides_video),
            output_path=run.output_path,
            overlay_position=session.overlay_position,
            overlay_relative_width=session.overlay_relative_width,
            overlay_media=session.overlay_media,
            quality=session.quality,
            fps=self.config.ffmpeg_fps,
            output_width=self.config.output_width,
            output_height=self.config.output_height,
            expected_duration_sec=run.track_duration,
            timings=run.schedule.ordered(),
        )
        await self.compositor.compose(request)
        self._ensure_current(run)
        self.progress.complete()
        return request.output_path
