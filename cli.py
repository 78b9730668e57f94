#!/usr/bin/env python3
"""
Command line interface for SlideCast.

Commands:
- schedule: print the uniform schedule for a slide deck
- compose: run the full pipeline and write the composed video
- preview: render one slide to an image at preview scale
- encoder: show, set or clear the persisted ffmpeg path
"""

from __future__ import annotations

import argparse
import asyncio
import math
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from slidecast.configs.config import config
from slidecast.configs.encoder_store import encoder_store, resolve_ffmpeg_path
from slidecast.configs.logging_config import setup_logging
from slidecast.core.errors import SlideCastError
from slidecast.core.progress import ProgressCounter
from slidecast.core.session import RunStatus
from slidecast.media import FfmpegDurationProber, PdfDocument
from slidecast.pipeline import CompositionOrchestrator
from slidecast.schemas.composition import OverlayMedia, OverlayPosition, QualityProfile
from slidecast.timing import compute_uniform_schedule, derive_durations

console = Console()
err_console = Console(stderr=True)

RUN_STATUS_STYLES = {
    RunStatus.IDLE: "dim",
    RunStatus.RUNNING: "bold cyan",
    RunStatus.DONE: "bold green",
    RunStatus.FAILED: "bold red",
}


def status_label(label: str, style: str) -> Text:
    return Text(f"[{label}]", style=style)


def run_status_label(status: RunStatus) -> Text:
    return status_label(status.value.upper(), RUN_STATUS_STYLES.get(status, "white"))


def parse_times(raw: str) -> list[float]:
    """Parse ``"0,12.5,30"`` into slide start times."""
    values = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            value = float(part)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid slide time: {part!r}") from None
        if not math.isfinite(value) or value < 0:
            raise argparse.ArgumentTypeError(
                f"slide times must be finite and >= 0: {part}"
            )
        values.append(value)
    if not values:
        raise argparse.ArgumentTypeError("no slide times given")
    return values


def _fail(message: str) -> None:
    err_console.print(Text.assemble(status_label("ERROR", "bold red"), f" {message}"))
    sys.exit(1)


def _print_progress(progress: ProgressCounter, message: str) -> None:
    if progress.total_units:
        err_console.print(f"[dim]{progress.percentage:3d}%[/] {message}")
    else:
        err_console.print(message)


async def cmd_schedule(args: argparse.Namespace) -> None:
    document = PdfDocument()
    try:
        page_count = await document.count_pages(Path(args.pdf))
        if args.duration is not None:
            total = args.duration
        else:
            total = await FfmpegDurationProber().probe_duration(Path(args.video))
    except SlideCastError as exc:
        _fail(str(exc))
        return

    schedule = compute_uniform_schedule(page_count, total)
    if not schedule:
        _fail(f"cannot schedule {page_count} pages over {total}s")
        return
    durations = derive_durations(schedule, ceiling_seconds=total)

    if args.json:
        console.print_json(
            data=[
                {**timing, "duration_seconds": round(duration, 3)}
                for timing, duration in zip(schedule.as_list(), durations)
            ]
        )
        return

    table = Table(
        title=f"{page_count} slide(s) over {total:.2f}s",
        header_style="bold cyan",
    )
    table.add_column("Slide", style="bold white", justify="right")
    table.add_column("Starts at (s)", justify="right")
    table.add_column("Duration (s)", justify="right")
    for timing, duration in zip(schedule, durations):
        table.add_row(
            str(timing.slide_index + 1),
            f"{timing.time_seconds:.3f}",
            f"{duration:.3f}",
        )
    console.print(table)


async def cmd_compose(args: argparse.Namespace) -> None:
    orchestrator = CompositionOrchestrator(on_progress=_print_progress)

    if not await orchestrator.select_document(args.pdf):
        _fail(orchestrator.status_message)
    await orchestrator.select_narration(args.video)
    orchestrator.set_output(
        directory=args.output_dir,
        base_name=args.name,
        extension=args.ext,
        raw_path=args.output,
    )
    try:
        orchestrator.configure_overlay(
            position=args.position,
            relative_width=args.overlay_width,
            media=args.overlay,
            quality=args.quality,
        )
    except ValueError as exc:
        _fail(str(exc))

    if not orchestrator.enter_editing():
        _fail(orchestrator.status_message)

    if args.times is not None:
        if len(args.times) != orchestrator.session.page_count:
            _fail(
                f"--times has {len(args.times)} values but the deck has "
                f"{orchestrator.session.page_count} slides"
            )
        for index, seconds in enumerate(args.times):
            orchestrator.set_slide_time(index, seconds)

    await orchestrator.render()

    if orchestrator.run_status != RunStatus.DONE:
        _fail(orchestrator.status_message)
    console.print(
        Text.assemble(
            run_status_label(orchestrator.run_status),
            " ",
            Text(orchestrator.status_message, style="bold white"),
        )
    )


async def cmd_preview(args: argparse.Namespace) -> None:
    document = PdfDocument()
    scale = args.scale if args.scale is not None else config.preview_scale
    try:
        data = Path(args.pdf).read_bytes()
        surface = await document.rasterize_page(data, args.page, scale)
        surface.save(args.output)
    except OSError as exc:
        _fail(f"could not write preview: {exc}")
        return
    except SlideCastError as exc:
        _fail(str(exc))
        return
    console.print(
        Text.assemble(
            status_label("OK", "bold green"),
            f" Page {args.page} ({surface.width}x{surface.height}) -> {args.output}",
        )
    )


def cmd_encoder(args: argparse.Namespace) -> None:
    if args.action == "set":
        encoder_store.set_configured(args.path)
    elif args.action == "clear":
        encoder_store.set_configured(None)

    table = Table(header_style="bold cyan", show_header=False)
    table.add_column("Key", style="bold cyan")
    table.add_column("Value", style="white")
    table.add_row("Config file", str(encoder_store.config_file))
    table.add_row("Configured", encoder_store.get_configured() or "-")
    table.add_row("Resolved", resolve_ffmpeg_path(encoder_store))
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SlideCast: narrated slide videos from a PDF and a recording",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cli.py schedule deck.pdf --duration 300
  cli.py compose deck.pdf talk.mp4 --output-dir out --name talk
  cli.py compose deck.pdf talk.mp4 --times 0,12.5,40 --overlay primary
  cli.py preview deck.pdf 3 slide3.png
  cli.py encoder set /opt/ffmpeg/bin/ffmpeg
        """,
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: {config.log_level})",
    )
    sub = parser.add_subparsers(dest="command")

    schedule_parser = sub.add_parser("schedule", help="Print the uniform schedule")
    schedule_parser.add_argument("pdf", help="Slide document (PDF)")
    source = schedule_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--duration", type=float, help="Total duration in seconds")
    source.add_argument("--video", help="Narration video to probe for its duration")
    schedule_parser.add_argument("--json", action="store_true", help="Output JSON")

    compose_parser = sub.add_parser("compose", help="Render the composed video")
    compose_parser.add_argument("pdf", help="Slide document (PDF)")
    compose_parser.add_argument("video", help="Narration video")
    compose_parser.add_argument(
        "--times",
        type=parse_times,
        help="Comma-separated slide start times in seconds",
    )
    compose_parser.add_argument("--output-dir", help="Output directory")
    compose_parser.add_argument("--name", help="Output base name")
    compose_parser.add_argument(
        "--ext", help=f"Container extension (default: {config.default_container})"
    )
    compose_parser.add_argument(
        "--output", help="Full output path, used when no --output-dir is given"
    )
    compose_parser.add_argument(
        "--position", choices=[p.value for p in OverlayPosition], help="Overlay corner"
    )
    compose_parser.add_argument(
        "--overlay-width",
        type=float,
        help="Overlay width as a fraction of the output width (0.05-0.5)",
    )
    compose_parser.add_argument(
        "--overlay",
        choices=[m.value for m in OverlayMedia],
        help="Which video is shrunk into the overlay",
    )
    compose_parser.add_argument(
        "--quality", choices=[q.value for q in QualityProfile], help="Encoder profile"
    )

    preview_parser = sub.add_parser("preview", help="Render one slide to an image")
    preview_parser.add_argument("pdf", help="Slide document (PDF)")
    preview_parser.add_argument("page", type=int, help="1-based page number")
    preview_parser.add_argument("output", help="Image file to write")
    preview_parser.add_argument(
        "--scale",
        type=float,
        help=f"Render scale (default: {config.preview_scale})",
    )

    encoder_parser = sub.add_parser("encoder", help="Manage the ffmpeg path")
    encoder_sub = encoder_parser.add_subparsers(dest="action", required=True)
    encoder_sub.add_parser("get", help="Show the configured and resolved path")
    set_parser = encoder_sub.add_parser("set", help="Persist an ffmpeg path")
    set_parser.add_argument("path", help="Path to the ffmpeg binary")
    encoder_sub.add_parser("clear", help="Forget the persisted path")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    setup_logging(args.log_level)

    try:
        if args.command == "schedule":
            asyncio.run(cmd_schedule(args))
        elif args.command == "compose":
            asyncio.run(cmd_compose(args))
        elif args.command == "preview":
            asyncio.run(cmd_preview(args))
        elif args.command == "encoder":
            cmd_encoder(args)
        else:
            parser.print_help()
    except KeyboardInterrupt:
        err_console.print("[bold yellow]Interrupted.[/]")
        sys.exit(130)
    except SlideCastError as exc:
        _fail(str(exc))


def run() -> None:
    main()


if __name__ == "__main__":
    run()
