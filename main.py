"""
Main entry point for the key/mouse macro runner.

Commands
--------
- run <config>: listen for trigger chords and play scripts (default command)
- event:        print the names of released keys and buttons
- point:        print cursor coordinates on demand
- record:       record live input as a script event list
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer

from config_manager import ConfigManager, MacroConfiguration
from input_tools import EventPrinter, PointTracker, Recorder, parse_tool_key
from logger import StatusLogger
from macros.actions import PynputActionSink
from macros.engine import ScriptInstance, ScriptRuntime
from macros.errors import ConfigError, ListenError
from macros.listener import EventPump, InputListener
from macros.router import TriggerRouter

app = typer.Typer(
    name="kmm",
    help="Key/mouse macro scripts bound to trigger chords (may need elevated privileges to capture input).",
    add_completion=False,
    no_args_is_help=True,
)

COMMANDS = ("run", "event", "point", "record")


def _listen(listener: InputListener, logger: StatusLogger) -> None:
    try:
        listener.start()
    except ListenError as exc:
        logger.log_error(f"Failed to listen for input: {exc}")
        raise typer.Exit(code=1)
    listener.join()


def _open_overlay(configuration: MacroConfiguration, logger: StatusLogger):
    if not configuration.overlay.enabled:
        return None
    try:
        import tkinter as tk
        from status_overlay import StatusOverlay
        root = tk.Tk()
    except Exception as exc:  # pragma: no cover - display dependent
        logger.log_warning(f"Overlay disabled: {exc}")
        return None
    overlay = StatusOverlay(root, configuration.overlay)
    overlay.show()
    return overlay


@app.command()
def run(
    config: Path = typer.Argument(..., help="Path to the JSON macro configuration"),
    no_overlay: bool = typer.Option(False, "--no-overlay", help="Do not show the running-scripts window"),
) -> None:
    """Run the scripts of a configuration file."""
    logger = StatusLogger()
    try:
        configuration = ConfigManager(config).load()
    except ConfigError as exc:
        logger.log_error(f"Failed to load config: {exc}")
        raise typer.Exit(code=1)

    if no_overlay:
        configuration.overlay.enabled = False
    overlay = _open_overlay(configuration, logger)

    def report(title: str, running: bool) -> None:
        logger.report_script(title, running)
        if overlay is not None:
            overlay.report(title, running)

    runtime = ScriptRuntime(
        PynputActionSink(),
        configuration.delay_ms,
        status_callback=report,
        logger=logger.log_warning,
    )
    instances = [ScriptInstance(definition) for definition in configuration.scripts]
    router = TriggerRouter(instances, runtime.fire)
    pump = EventPump(router.handle, logger=logger.log_error)
    listener = InputListener(pump.submit, logger=logger.log_warning)

    logger.update_status(
        f"Loaded {len(instances)} script(s) from {config}; listening on {len(router.members)} trigger key(s)"
    )
    pump.start()
    try:
        listener.start()
    except ListenError as exc:
        logger.log_error(f"Failed to listen for input: {exc}")
        pump.stop()
        if overlay is not None:
            overlay.close()
        raise typer.Exit(code=1)

    try:
        if overlay is None:
            listener.join()
        else:
            overlay.mainloop()
    except KeyboardInterrupt:
        logger.log_info("Interrupted")
    finally:
        listener.stop()
        runtime.stop_all()
        pump.stop()


@app.command()
def event() -> None:
    """Print the names of released keys and mouse buttons."""
    logger = StatusLogger()
    listener = InputListener(EventPrinter(), logger=logger.log_warning)
    try:
        _listen(listener, logger)
    except KeyboardInterrupt:
        listener.stop()


@app.command()
def point(
    print_key: str = typer.Option("alt_gr", "--print-key", help="Key that prints the cursor position"),
    clear_key: str = typer.Option("esc", "--clear-key", help="Key that clears the terminal"),
) -> None:
    """Print cursor coordinates whenever the print key is released."""
    logger = StatusLogger()
    tracker = PointTracker(parse_tool_key(print_key), parse_tool_key(clear_key))
    listener = InputListener(tracker, logger=logger.log_warning)
    try:
        _listen(listener, logger)
    except KeyboardInterrupt:
        listener.stop()


@app.command()
def record(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the events to this file"),
) -> None:
    """Record input until the pointer touches the top-left screen corner."""
    logger = StatusLogger()

    def finished(_events) -> None:
        listener.stop()

    recorder = Recorder(on_finished=finished)
    listener = InputListener(recorder, logger=logger.log_warning)

    logger.log_info("Recording; move the pointer to the top-left corner to finish")
    try:
        _listen(listener, logger)
    except KeyboardInterrupt:
        listener.stop()

    payload = recorder.export()
    if output is None:
        typer.echo(payload)
    else:
        output.write_text(payload + "\n", encoding="utf-8")
        logger.log_info(f"Wrote {len(recorder.events)} event(s) to {output}")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Application entry point.

    A first argument that is not a command name is taken as the config path
    of the ``run`` command.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] not in COMMANDS and not args[0].startswith("-"):
        args.insert(0, "run")
    app(args=args, prog_name="kmm")


if __name__ == "__main__":
    main()
