"""
whisperline.cli - Typer CLI entry point.

Provides commands to write a config file, check the environment and
transcribe audio files.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from whisperline import __version__
from whisperline.config import (
    CONFIG_FILENAME,
    WhisperConfig,
    WhisperlineConfig,
    build_config,
    create_default_config,
    load_config,
    merge_config,
    write_config,
)
from whisperline.exceptions import ConfigError, DependencyError, WhisperlineError
from whisperline.logging import configure_logging
from whisperline.utils import format_timestamp

app = typer.Typer(
    name="whisperline",
    help="Typed speech-to-text over an embedded faster-whisper script.",
    add_completion=False,
)
console = Console()


def find_config_file() -> Path | None:
    """Find whisperline.yaml in the current directory or its parents."""
    current = Path.cwd()
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists():
            return current / CONFIG_FILENAME
        current = current.parent
    return None


def resolve_config(config_path: Path | None, preset: str | None) -> WhisperlineConfig:
    """Load the explicit or discovered config file, or fall back to defaults."""
    path = config_path or find_config_file()
    if path is None:
        return build_config({"preset": preset or "default"})
    return load_config(path, preset=preset)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"whisperline {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Whisperline - typed speech-to-text over an embedded faster-whisper script."""
    pass


@app.command("init")
def init_config(
    path: str = typer.Option(".", "--path", "-d", help="Directory to write whisperline.yaml in"),
    preset: str = typer.Option(
        "default",
        "--preset",
        "-p",
        help="Preset: default, fast, accurate, or vad",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Write a whisperline.yaml with default settings."""
    config_file = Path(path) / CONFIG_FILENAME

    if config_file.exists() and not force:
        console.print(f"[red]Error: '{config_file}' already exists[/red]")
        raise typer.Exit(1)

    try:
        config = create_default_config(preset)
        write_config(config, config_file)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Wrote {config_file} with preset '{preset}'")


@app.command("check")
def check(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to whisperline.yaml"),
) -> None:
    """Check faster-whisper availability and config validity."""
    from whisperline.validation import check_faster_whisper

    passed = True

    try:
        fw_version = check_faster_whisper()
        console.print(f"[green]✓[/green] faster-whisper: {fw_version}")
    except DependencyError as e:
        console.print(f"[red]✗[/red] {e}")
        if e.install_hint:
            console.print(f"[dim]  {e.install_hint}[/dim]")
        passed = False

    try:
        config = resolve_config(config_path, None)
        source = config.config_path or "built-in defaults"
        console.print(
            f"[green]✓[/green] config: {config.model} on {config.device} "
            f"({config.compute_type}) from {source}"
        )
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]✗[/red] config: {e}")
        passed = False

    if not passed:
        raise typer.Exit(1)


@app.command("transcribe")
def transcribe(
    audio: Path = typer.Argument(..., help="Audio file to transcribe"),
    model: str | None = typer.Option(None, "--model", "-m", help="Whisper model name"),
    device: str | None = typer.Option(None, "--device", help="Device: cpu, cuda, or auto"),
    compute_type: str | None = typer.Option(
        None, "--compute-type", help="Compute precision, e.g. int8 or float16"
    ),
    language: str | None = typer.Option(
        None, "--language", "-l", help="Language code (auto-detect if not set)"
    ),
    prompt: str | None = typer.Option(None, "--prompt", help="Initial prompt text"),
    beam_size: int | None = typer.Option(None, "--beam-size", help="Beam size"),
    vad: bool | None = typer.Option(None, "--vad/--no-vad", help="Enable voice activity detection"),
    preset: str | None = typer.Option(None, "--preset", "-p", help="Preset overriding the config"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to whisperline.yaml"),
    persistent: bool | None = typer.Option(
        None, "--persistent/--ephemeral", help="Keep the model loaded across calls"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write result JSON to file"),
    show_segments: bool = typer.Option(False, "--segments", "-s", help="Print a segment table"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Transcribe an audio file."""
    configure_logging(verbose)

    from whisperline.io import write_json
    from whisperline.transcribe import WhisperModel, WhisperTranscriber
    from whisperline.validation import validate_audio_file

    try:
        settings = resolve_config(config_path, preset)
        overrides = {
            "language": language,
            "starting_prompt": prompt,
            "beam_size": beam_size,
            "vad": {"active": vad} if vad is not None else None,
        }
        config = WhisperConfig(
            **merge_config(overrides, settings.transcription.model_dump())
        )
    except (ConfigError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    model_name = model or settings.model
    device_name = device or settings.device
    precision = compute_type or settings.compute_type
    use_persistent = settings.persistent if persistent is None else persistent

    try:
        validate_audio_file(audio)

        console.print(f"[cyan]Transcribing {audio.name} with {model_name} ({device_name}, {precision})...[/cyan]")

        if use_persistent:
            with WhisperModel(model_name, device_name, precision, config) as whisper:
                result = whisper.transcribe(audio)
        else:
            result = WhisperTranscriber(model_name, device_name, precision, config).transcribe(audio)
    except WhisperlineError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if show_segments:
        table = Table(title=audio.name)
        table.add_column("#", style="dim")
        table.add_column("Start", style="cyan")
        table.add_column("End", style="cyan")
        table.add_column("Text")
        table.add_column("Log prob", style="green")
        for segment in result.segments:
            table.add_row(
                str(segment.id),
                format_timestamp(segment.start),
                format_timestamp(segment.end),
                escape(segment.text.strip()),
                f"{segment.avg_logprob:.2f}",
            )
        console.print(table)
    else:
        console.print(str(result).strip(), markup=False)

    if output:
        write_json(output, result.to_dict())
        console.print(f"[dim]  Wrote {output}[/dim]")

    console.print(f"\n[green]✓[/green] {len(result)} segments")


if __name__ == "__main__":
    app()
