"""Command-line interface for Note Track.

Provides commands for:
- listen: Track the microphone live and drive a MIDI port
- analyze: Run an audio file through the tracker and list the note events
- config: Show the effective detection configuration
"""

import json
import time
import warnings
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from .config import DetectionConfig, load_config
from .core import NoteTrackError, DeviceUnavailable, note_name
from .output import NoteConsumer

app = typer.Typer(
    name="notetrack",
    help="Microphone pitch to note events",
    rich_markup_mode="markdown",
)
console = Console()


class LiveStatus(NoteConsumer):
    """Shows the current note in a rich Live display."""

    def __init__(self, live: Live):
        self.live = live
        self.current = "-"
        self.frequency = 0.0
        self.bend = 0.0

    def _render(self) -> None:
        text = Text()
        text.append(f"{self.current:>4}", style="bold green" if self.current != "-" else "dim")
        if self.frequency:
            text.append(f"  {self.frequency:7.2f} Hz", style="cyan")
        text.append(f"  bend {self.bend:+.3f}", style="magenta")
        self.live.update(text)

    def note_on(self, note: int, velocity: int) -> None:
        self.current = note_name(note)
        self._render()

    def note_off(self, note: int) -> None:
        if self.current == note_name(note):
            self.current = "-"
            self.frequency = 0.0
        self._render()

    def pitch_bend(self, value: float) -> None:
        self.bend = value
        self._render()

    def status(self, note_name: str, frequency: float) -> None:
        self.frequency = frequency
        self._render()


def _build_config(config_file: Optional[Path], **overrides) -> DetectionConfig:
    """Load the config file (if any) and apply non-None CLI overrides."""
    try:
        config = load_config(str(config_file)) if config_file else DetectionConfig()
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(config, **changes).validate()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def listen(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file"),
    device: Optional[str] = typer.Option(None, "--device", "-d", help="Audio input device"),
    input_rate: int = typer.Option(44100, "--input-rate", help="Capture sample rate (Hz)"),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Learned estimator: crepe:tiny or a TorchScript file"
    ),
    midi_port: Optional[str] = typer.Option(None, "--midi-port", help="MIDI output port name"),
    virtual: bool = typer.Option(False, "--virtual", help="Create a virtual MIDI port"),
    sustain: bool = typer.Option(False, "--sustain", help="Start with sustain engaged"),
    energy_gate: Optional[float] = typer.Option(None, "--energy-gate", help="Minimum RMS"),
    min_freq: Optional[float] = typer.Option(None, "--min-freq", help="Lowest pitch (Hz)"),
    max_freq: Optional[float] = typer.Option(None, "--max-freq", help="Highest pitch (Hz)"),
    tolerance: Optional[float] = typer.Option(None, "--tolerance", help="Note snap window (%)"),
    bend_range: Optional[float] = typer.Option(None, "--bend-range", help="Pitch bend range (semitones)"),
    duration: float = typer.Option(0.0, "--duration", help="Stop after N seconds (0 = Ctrl+C)"),
):
    """Track the microphone in real time.

    **Examples:**

        notetrack listen

        notetrack listen --midi-port "IAC Driver Bus 1" --model crepe:tiny
    """
    from .engine import NoteTracker
    from .input import MicrophoneSource
    from .output import MidiPortOutput

    config = _build_config(
        config_file,
        model_path=model,
        energy_gate=energy_gate,
        min_freq=min_freq,
        max_freq=max_freq,
        percent_tolerance=tolerance,
        pitch_bend_range_semitones=bend_range,
    )

    consumers: List[NoteConsumer] = []
    if midi_port is not None or virtual:
        try:
            consumers.append(MidiPortOutput(midi_port, virtual=virtual))
        except DeviceUnavailable as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    live = Live(Text("-", style="dim"), console=console, refresh_per_second=15)
    consumers.append(LiveStatus(live))

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        tracker = NoteTracker(config, consumers, threaded_output=True)
    for w in caught:
        console.print(f"[yellow]Warning: {w.message}[/yellow]")

    estimator = "learned" if tracker.selector.learned_active else "YIN"
    console.print(f"[blue]Listening[/blue] ({estimator}, {config.min_freq:.0f}-{config.max_freq:.0f} Hz)")
    if sustain:
        tracker.set_sustain(True)

    source = MicrophoneSource(device=device, sample_rate=input_rate).connect(tracker.push_audio)
    try:
        with live:
            tracker.start()
            source.start()
            started = time.monotonic()
            while duration <= 0 or time.monotonic() - started < duration:
                time.sleep(0.1)
    except DeviceUnavailable as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\nStopping.")
    finally:
        source.stop()
        tracker.close()

    if tracker.dropped_frames or tracker.assembler.dropped_samples:
        console.print(
            f"[dim]Dropped {tracker.dropped_frames} frames, "
            f"{tracker.assembler.dropped_samples} samples[/dim]"
        )


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file"),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="Learned estimator: crepe:tiny or a TorchScript file"
    ),
    start: float = typer.Option(0.0, "--start", help="Start offset (seconds)"),
    duration: Optional[float] = typer.Option(None, "--duration", help="Seconds to analyze"),
    block_size: int = typer.Option(512, "--block-size", help="Samples per pushed block"),
    midi_out: Optional[Path] = typer.Option(None, "--midi-out", "-o", help="Write notes to a MIDI file"),
    show_bends: bool = typer.Option(False, "--bends", help="Include pitch bends in the table"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON (for scripting)"),
):
    """Run an audio file through the tracker and list the note events.

    **Examples:**

        notetrack analyze melody.wav

        notetrack analyze melody.wav -o melody.mid --json
    """
    from .engine import NoteTracker
    from .input import ArraySource, AudioLoader
    from .output import EventLog, PerformanceRecorder

    config = _build_config(config_file, model_path=model)

    try:
        audio, sr = AudioLoader().load(str(input_file), start=start, duration=duration)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    position = {"samples": 0}

    def clock() -> float:
        return start + position["samples"] / sr

    log = EventLog(clock=clock)
    recorder = PerformanceRecorder(clock=clock)
    tracker = NoteTracker(config, [log, recorder])

    def feed(block, rate) -> None:
        position["samples"] += len(block)
        tracker.push_audio(block, rate)

    if not json_output:
        console.print(f"[blue]Analyzing:[/blue] {input_file} ({len(audio) / sr:.2f}s @ {sr}Hz)")

    ArraySource(audio, sr, block_size=block_size).connect(feed).start()
    tracker.close()

    if midi_out is not None:
        recorder.export_midi(str(midi_out))

    entries = log.to_list()
    if json_output:
        result: Dict[str, Any] = {
            "input": str(input_file),
            "duration": len(audio) / sr,
            "estimator": tracker.selector.active_name,
            "frames": tracker.frames_processed,
            "notes": [
                {"pitch": n.pitch, "name": n.pitch_name, "onset": n.onset,
                 "offset": n.offset, "velocity": n.velocity}
                for n in recorder.notes
            ],
            "events": entries,
        }
        if midi_out is not None:
            result["midi"] = str(midi_out)
        console.print_json(data=result)
        return

    _show_events_table(entries, show_bends)
    console.print(f"  {len(recorder.notes)} notes from {tracker.frames_processed} frames")
    if midi_out is not None:
        console.print(f"[green]Wrote {midi_out}[/green]")


@app.command()
def config(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON config file"),
):
    """Show the effective detection configuration as JSON."""
    console.print_json(json.dumps(_build_config(config_file).to_dict()))


def _show_events_table(entries: List[Dict[str, Any]], show_bends: bool) -> None:
    """Display note events in a table."""
    table = Table(title="Note Events")
    table.add_column("Time", style="yellow")
    table.add_column("Event", style="cyan")
    table.add_column("Note", style="green")
    table.add_column("Value", style="magenta")

    for entry in entries:
        if entry["type"] == "bend":
            if show_bends:
                table.add_row(f"{entry['time']:.3f}s", "bend", "", f"{entry['value']:+.3f}")
            continue
        value = str(entry.get("velocity", ""))
        table.add_row(f"{entry['time']:.3f}s", entry["type"], entry["name"], value)

    console.print(table)


def main():
    """Entry point."""
    try:
        app()
    except NoteTrackError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
