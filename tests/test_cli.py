import argparse
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

import cli
from slidecast.configs.encoder_store import EncoderPathStore


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "setup_logging", lambda level=None: None)


def test_parse_times() -> None:
    assert cli.parse_times("0, 12.5,30") == [0.0, 12.5, 30.0]
    assert cli.parse_times("4,") == [4.0]


@pytest.mark.parametrize("raw", ["", "a,b", "1,-2", "0,inf,20", "nan", "-inf"])
def test_parse_times_rejects(raw: str) -> None:
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_times(raw)


def test_run_status_label() -> None:
    label = cli.run_status_label(cli.RunStatus.FAILED)
    assert label.plain == "[FAILED]"
    assert str(label.style) == "bold red"


def test_compose_arguments() -> None:
    args = cli.build_parser().parse_args(
        [
            "compose",
            "deck.pdf",
            "talk.mp4",
            "--times",
            "0,5",
            "--overlay",
            "primary",
            "--quality",
            "draft",
            "--output-dir",
            "out",
        ]
    )
    assert args.times == [0.0, 5.0]
    assert args.overlay == "primary"
    assert args.quality == "draft"
    assert args.output_dir == "out"
    assert args.position is None


def test_schedule_requires_a_duration_source() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["schedule", "deck.pdf"])


def test_schedule_prints_uniform_timings(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli.PdfDocument, "count_pages", AsyncMock(return_value=4))
    cli.main(["schedule", "deck.pdf", "--duration", "40", "--json"])
    out = capsys.readouterr().out
    assert '"slide_index": 3' in out
    assert '"time_seconds": 30.0' in out


def test_schedule_unreadable_document(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli.PdfDocument,
        "count_pages",
        AsyncMock(side_effect=cli.SlideCastError("failed to read pdf")),
    )
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["schedule", "deck.pdf", "--duration", "40"])
    assert excinfo.value.code == 1


def test_encoder_set_and_clear(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = EncoderPathStore(config_dir=tmp_path)
    monkeypatch.setattr(cli, "encoder_store", store)
    monkeypatch.delenv("SLIDECAST_FFMPEG", raising=False)

    cli.main(["encoder", "set", "/opt/ffmpeg/bin/ffmpeg"])
    assert store.get_configured() == "/opt/ffmpeg/bin/ffmpeg"

    cli.main(["encoder", "clear"])
    assert store.get_configured() is None
