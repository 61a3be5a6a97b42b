"""Main entry point for the Melody Echo CLI."""

import sys
from typing import List, Optional

import click

from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_utils import frequency_to_note, split_note

logger = get_logger(__name__)


def parse_sequence(value: Optional[str]) -> Optional[List[str]]:
    """Parse 'C/4,D/4,E4' into notation keys, validating every note."""
    if value is None:
        return None

    notes = []
    for item in value.replace(" ", ",").split(","):
        if not item:
            continue
        pitch_class, octave = split_note(item)
        notes.append(f"{pitch_class}/{octave}")

    if not notes:
        raise ValueError("The sequence is empty")
    return notes


def _sequence_callback(_ctx, _param, value):
    try:
        return parse_sequence(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx, debug):
    """Melody Echo - hear a melody, sing it back, get note-by-note feedback."""
    setup_logging(level="DEBUG" if debug else None)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option(
    "--ui",
    type=click.Choice(["pygame", "console"]),
    default="pygame",
    help="UI backend to use (default: pygame).",
)
@click.option(
    "--sequence",
    callback=_sequence_callback,
    help="Comma-separated notes to practise, e.g. 'C/4,D/4,E/4'.",
)
@click.option("--device", type=int, default=None, help="Audio input device ID.")
@click.option(
    "--wav",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read pitches from a WAV recording instead of the microphone.",
)
@click.option("--config-dir", default=None, help="Directory holding the JSON settings.")
@click.option(
    "--play/--no-play",
    default=True,
    help="Console UI: play the melody before listening (default: play).",
)
@click.option(
    "--timeout", type=float, default=None, help="Console UI: give up after this many seconds."
)
def run(ui, sequence, device, wav, config_dir, play, timeout):
    """Start the ear-training exercise."""
    # Audio backends are only imported when an exercise is actually run
    from ..core.config import ConfigManager
    from ..core.factory import ComponentFactory

    factory = ComponentFactory(ConfigManager(config_dir))

    if wav:
        sampler = factory.create_pitch_sampler("wav", file_path=wav)
    elif device is not None:
        sampler = factory.create_pitch_sampler("microphone", device_id=device)
    else:
        sampler = factory.create_pitch_sampler("microphone")

    exercise = factory.create_exercise(
        sampler=sampler,
        synthesizer=factory.create_synthesizer(),
        sequence=sequence,
    )

    if ui == "console":
        from ..ui.console import ConsoleUI

        console = ConsoleUI(
            play_first=play,
            timeout=timeout,
            source_finished=(lambda: sampler.finished) if wav else (lambda: False),
        )
        completed = console.run(exercise)
        sys.exit(0 if completed else 1)

    from ..ui.pygame_ui import PygameUI

    try:
        PygameUI().run(exercise)
    except Exception:
        logger.exception("An unhandled error occurred in the main application.")
        raise
    finally:
        logger.info("Melody Echo is shutting down.")


@cli.command()
@click.argument("frequencies", nargs=-1, type=float, required=True)
def classify(frequencies):
    """Print the note label for each frequency (Hz)."""
    for frequency in frequencies:
        label = frequency_to_note(frequency)
        click.echo(f"{frequency:g} Hz -> {label or 'no note'}")


@cli.command()
def devices():
    """List audio input devices."""
    from ..audio.microphone import list_input_devices

    for device_id, device in list_input_devices():
        click.echo(
            f"[{device_id}] {device['name']} (inputs: {device['max_input_channels']})"
        )


@cli.command()
@click.argument("section", type=click.Choice(["exercise", "pitch_sampler", "synthesizer"]))
@click.option("--set", "updates", multiple=True, metavar="KEY=VALUE", help="Update a setting.")
@click.option("--reset", is_flag=True, help="Restore the section's defaults.")
@click.option("--config-dir", default=None, help="Directory holding the JSON settings.")
def config(section, updates, reset, config_dir):
    """Show or change a configuration section."""
    import json

    from ..core.config import ConfigManager

    manager = ConfigManager(config_dir)

    if reset:
        manager.reset_config(section)

    if updates:
        changes = {}
        for update in updates:
            key, sep, raw = update.partition("=")
            if not sep:
                raise click.BadParameter(f"Expected KEY=VALUE, got {update!r}")
            try:
                changes[key] = json.loads(raw)
            except ValueError:
                changes[key] = raw
        manager.update_config(section, changes)

    click.echo(json.dumps(manager.get_config(section), indent=2))


if __name__ == "__main__":
    cli(prog_name="melody-echo")
