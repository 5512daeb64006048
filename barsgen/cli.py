"""Thin CLI entry point — builds a PatternConfig and calls the engine."""

import argparse
import shlex
import sys
from pathlib import Path

from barsgen import engine, ffutil, profiles
from barsgen.config import (
    DEFAULT_DURATION,
    DEFAULT_FRAMERATE,
    DEFAULT_PROFILE,
    load_config,
    make_config,
)
from barsgen.profiles import ProfileNotFoundError, load_profiles


class _ArgumentParser(argparse.ArgumentParser):
    """argparse with usage errors exiting 1 instead of 2."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    # -h is the header flag, so help is long-form only
    parser = _ArgumentParser(
        prog="barsgen",
        description="Generate an SMPTE bars test pattern with clock, timecode, "
        "shuttle and sync beep via ffmpeg.",
        add_help=False,
    )
    parser.add_argument("output_format", nargs="?", metavar="FORMAT", help="ffmpeg output format, e.g. mp4, mpegts, flv")
    parser.add_argument("output_target", nargs="?", metavar="TARGET", help="Output file or URL")
    parser.add_argument("-d", "--duration", help=f"Duration in seconds or [HH:]MM:SS; 0 runs until stopped (default {DEFAULT_DURATION})")
    parser.add_argument("-h", "--header", help="Header text (default: short hostname)")
    parser.add_argument("-f", "--framerate", help=f"Frame rate, e.g. 25, 29.97, 30000/1001 (default {DEFAULT_FRAMERATE})")
    parser.add_argument("-l", "--logo", type=Path, help="Logo image shown in the header")
    parser.add_argument("-p", "--profile", help=f"Encoding profile (default {DEFAULT_PROFILE})")
    parser.add_argument("-profiles", dest="list_profiles", action="store_true", help="List encoding profiles and exit")
    parser.add_argument("-s", "--size", help="Frame size WIDTHxHEIGHT (default 1920x1080)")
    parser.add_argument("--fontfile", type=Path, help="Font file for all text overlays")
    parser.add_argument("--realtime", action="store_true", default=None, help="Pace output in real time (for live targets)")
    parser.add_argument("-c", "--config", type=Path, help="JSON config file supplying defaults")
    parser.add_argument("-n", "--dry-run", action="store_true", help="Print the ffmpeg command instead of running it")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print the ffmpeg command before running it")
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    base: dict = {}
    extra_profiles = {}
    if args.config:
        try:
            cfg = load_config(args.config)
            extra_profiles = load_profiles(cfg.profiles)
        except (OSError, ValueError) as e:
            print(f"Error: cannot load config {args.config}: {e}", file=sys.stderr)
            sys.exit(1)
        base = cfg.values

    if args.list_profiles:
        sys.exit(profiles.main(extra_profiles))

    config = make_config(
        base,
        output_format=args.output_format,
        output_target=args.output_target,
        duration=args.duration,
        framerate=args.framerate,
        header=args.header,
        logo=args.logo,
        profile=args.profile,
        size=args.size,
        fontfile=args.fontfile,
        realtime=args.realtime,
    )

    if not config.output_format or not config.output_target:
        parser.error("the following arguments are required: FORMAT, TARGET")

    def on_command(command: list[str]) -> None:
        if args.verbose:
            print(shlex.join(command), file=sys.stderr)

    try:
        if args.dry_run:
            print(shlex.join(engine.prepare(config, extra_profiles)))
            sys.exit(0)
        result = engine.generate(config, extra_profiles, on_command=on_command)
    except (
        engine.MissingFileError,
        ProfileNotFoundError,
        ffutil.FFmpegNotFoundError,
        ValueError,
    ) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(ffutil.exit_status(result.returncode))


def serve(argv: list[str] | None = None) -> None:
    """Launch the JSON job API (the ``barsgen-web`` command)."""
    parser = argparse.ArgumentParser(prog="barsgen-web", description="barsgen job API server.")
    parser.add_argument("--port", type=int, default=8322, help="Port to listen on")
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--work-dir", type=Path, help="Directory for file outputs")
    args = parser.parse_args(argv)

    from barsgen.web import create_app
    app = create_app(work_dir=args.work_dir)
    print(f"barsgen API: http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=False)


def list_profiles() -> None:
    """Entry point for ``barsgen-profiles``."""
    sys.exit(profiles.main())
