import argparse
import json
import sys
from pathlib import Path

from . import __version__
from .catalog import Catalog
from .config import Settings
from .env import load_env
from .errors import DatasetError, InvalidPathError, RequestError
from .generator import ChatRationaleGenerator
from .logger import get_logger
from .models import PATHS
from .recommend import recommend
from .schema import parse_recommend_request, validate_request


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _read_json(path_arg: str):
    input_path = Path(path_arg)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Input file is not valid JSON: {e}")


def cmd_recommend(args: argparse.Namespace) -> None:
    if args.input:
        body = _read_json(args.input)
    else:
        body = {
            "path": args.path,
            "country": args.country or "",
            "age": args.age,
            "skills": [s.strip() for s in args.skills.split(",") if s.strip()] if args.skills else [],
            "language": args.language,
            "equityFlag": args.equity,
        }

    settings = args.settings
    generator = ChatRationaleGenerator.from_settings(settings) if args.ai else None
    try:
        request = parse_recommend_request(body)
        response = recommend(request, catalog=Catalog(settings), generator=generator)
    except InvalidPathError as e:
        print(f"{e}. Use one of: {', '.join(PATHS)}", file=sys.stderr)
        raise SystemExit(2)
    except RequestError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except DatasetError as e:
        raise SystemExit(str(e))
    _print_json(response.to_dict())


def cmd_validate(args: argparse.Namespace) -> None:
    body = _read_json(args.input)
    errors = validate_request(body)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_countries(args: argparse.Namespace) -> None:
    try:
        countries = Catalog(args.settings).get_countries()
    except DatasetError as e:
        raise SystemExit(str(e))
    _print_json({"countries": [c.to_dict() for c in countries]})


def cmd_news(args: argparse.Namespace) -> None:
    try:
        items = Catalog(args.settings).get_news(country=args.country, topic=args.topic)
    except DatasetError as e:
        raise SystemExit(str(e))
    _print_json({"items": [item.to_dict() for item in items]})


def main(argv=None):
    # Load .env if present (RATIONALE_API_KEY, VOLUNTEERMATCH_DATA_DIR, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="volunteermatch", description="Match volunteers to climate resilience roles")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--data-dir", help="Directory holding the JSON datasets (or set VOLUNTEERMATCH_DATA_DIR)")

    subparsers = parser.add_subparsers(dest="command")
    rec = subparsers.add_parser("recommend", help="Rank the top roles for a volunteer profile")
    rec.add_argument("--input", help="Path to a request JSON body (overrides the flags below)")
    rec.add_argument("--path", choices=PATHS, help="Impact path")
    rec.add_argument("--country", help="Country name, matched case-insensitively")
    rec.add_argument("--age", type=float, default=0, help="Volunteer age")
    rec.add_argument("--skills", help="Comma-separated skills. Example: \"first aid,communication\"")
    rec.add_argument("--language", help="Preferred language for generated rationale")
    rec.add_argument("--equity", action="store_true", help="Apply the equity boost")
    rec.add_argument("--ai", action="store_true", help="Ask the external rationale service (needs RATIONALE_API_KEY)")
    rec.set_defaults(func=cmd_recommend)

    val = subparsers.add_parser("validate", help="Validate a recommendation request JSON")
    val.add_argument("--input", required=True, help="Path to request JSON input")
    val.set_defaults(func=cmd_validate)

    ctr = subparsers.add_parser("countries", help="List the country directory")
    ctr.set_defaults(func=cmd_countries)

    nws = subparsers.add_parser("news", help="List news items, optionally filtered")
    nws.add_argument("--country", help="Country name filter")
    nws.add_argument("--topic", help="Topic filter (climate, disaster, training)")
    nws.set_defaults(func=cmd_news)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise SystemExit(str(e))
    if args.data_dir:
        settings.data_dir = Path(args.data_dir)
    args.settings = settings
    get_logger(level=settings.log_level, log_dir=settings.log_dir)

    if hasattr(args, "func"):
        if args.command == "recommend" and not args.input and not args.path:
            raise SystemExit("Provide --path or --input.")
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
