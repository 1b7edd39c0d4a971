import argparse
import dataclasses
import json
import logging
import sys

from svganim import (
    AnimationSettings,
    AnimationType,
    PreviewCache,
    animation_names,
    detect,
    embed,
    ensure_namespace,
    strip_owned_artifacts,
)


def _iteration(value: str) -> int | str:
    return int(value) if value.isdigit() else value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Manage animations embedded in SVG icons")
    parser.add_argument(
        "--loglevel",
        metavar="LEVEL",
        default="WARNING",
        help="Logging level, default WARNING",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_io(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "input", metavar="INPUT", type=str, help="Input SVG file, or - for stdin"
        )
        subparser.add_argument(
            "-o",
            "--output",
            metavar="PATH",
            type=str,
            default="-",
            help="Output file, default stdout.",
        )

    embed_parser = subparsers.add_parser("embed", help="Embed an animation.")
    add_io(embed_parser)
    embed_parser.add_argument(
        "-t",
        "--type",
        dest="animation",
        choices=animation_names(),
        required=True,
        help="Animation preset.",
    )
    embed_parser.add_argument(
        "--duration", type=float, default=None, help="Duration in seconds."
    )
    embed_parser.add_argument(
        "--timing", type=str, default=None, help="CSS easing, e.g. linear."
    )
    embed_parser.add_argument(
        "--iteration",
        type=_iteration,
        default=None,
        help="Iteration count or 'infinite'.",
    )
    embed_parser.add_argument(
        "--direction",
        choices=["normal", "reverse", "alternate", "alternate-reverse"],
        default=None,
        help="Animation direction.",
    )
    embed_parser.add_argument(
        "--delay", type=float, default=None, help="Start delay in seconds."
    )

    add_io(subparsers.add_parser("clean", help="Remove embedded animations."))
    add_io(subparsers.add_parser("namespace", help="Fix the SVG namespace declaration."))

    detect_parser = subparsers.add_parser(
        "detect", help="Print the embedded animation as JSON."
    )
    detect_parser.add_argument(
        "input", metavar="INPUT", type=str, help="Input SVG file, or - for stdin"
    )

    preview_parser = subparsers.add_parser(
        "preview", help="Write a preview copy and print its path."
    )
    preview_parser.add_argument("name", metavar="NAME", type=str, help="Icon name.")
    preview_parser.add_argument(
        "input", metavar="INPUT", type=str, help="Input SVG file, or - for stdin"
    )
    return parser.parse_args(argv)


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def _write(path: str, text: str) -> None:
    if path == "-":
        sys.stdout.write(text)
        return
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def _settings(args: argparse.Namespace) -> AnimationSettings | None:
    """Merge command line overrides into the defaults of the chosen type."""
    values = {
        key: getattr(args, key)
        for key in ("duration", "timing", "iteration", "direction", "delay")
        if getattr(args, key) is not None
    }
    if not values:
        return None
    defaults = AnimationSettings.defaults_for(AnimationType(args.animation))
    return dataclasses.replace(defaults, **values)


def main(argv: list[str] | None = None) -> int:
    """Main function of the svganim command."""
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.loglevel.upper(), "WARNING"))

    svg = _read(args.input)
    if args.command == "embed":
        _write(args.output, embed(svg, args.animation, _settings(args)))
    elif args.command == "clean":
        _write(args.output, strip_owned_artifacts(svg))
    elif args.command == "namespace":
        _write(args.output, ensure_namespace(svg))
    elif args.command == "detect":
        detected = detect(svg)
        print(json.dumps(detected.to_dict() if detected else None))
    elif args.command == "preview":
        try:
            print(PreviewCache().materialize(args.name, svg))
        except OSError as e:
            print(f"Preview unavailable: {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
