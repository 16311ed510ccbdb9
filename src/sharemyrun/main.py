import argparse
import json
import logging
import sys
from configparser import Error as ConfigError
from pathlib import Path

import requests

from sharemyrun.config import DEFAULT_CONFIG, Settings
from sharemyrun.errors import NotFound, UploadRejected
from sharemyrun.render import render_text
from sharemyrun.sharing import open_shared_workout, prepare_for_import, share_workout, shared_from_bytes

logger = logging.getLogger("sharemyrun")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    if not verbose:
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def _cmd_show(args, settings: Settings) -> int:
    path = Path(args.target)
    if path.is_file():
        shared = shared_from_bytes(path.stem, path.read_bytes(), path.suffix)
    else:
        shared = open_shared_workout(settings.make_store(), args.target)

    if args.json:
        print(json.dumps(shared.workout.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(render_text(shared))
    return 0


def _cmd_upload(args, settings: Settings) -> int:
    path = Path(args.file)
    workout_id, url = share_workout(
        settings.make_store(),
        path.name,
        path.read_bytes(),
        max_bytes=settings.max_upload_bytes,
    )
    print(f"{settings.public_url}{url}")
    logger.debug("Stored as %s", workout_id)
    return 0


def _cmd_prepare(args, settings: Settings) -> int:
    path = Path(args.file)
    try:
        document = json.loads(path.read_text(encoding="utf-8-sig"))
    except ValueError as e:
        raise UploadRejected("Invalid JSON file") from e
    if not isinstance(document, dict):
        raise UploadRejected("Invalid Garmin workout JSON")

    out = json.dumps(prepare_for_import(document), indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(out + "\n", encoding="utf-8")
        logger.info("Wrote %s", args.output)
    else:
        print(out)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Share structured running workouts")
    parser.add_argument("-c", "--config", type=Path, default=DEFAULT_CONFIG, help="Path to config.ini")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Show a workout by id or from a .fit/.json file")
    show.add_argument("target", help="Workout id, or path to a workout file")
    show.add_argument("--json", action="store_true", help="Print the parsed workout as JSON")
    show.set_defaults(func=_cmd_show)

    upload = sub.add_parser("upload", help="Store a .fit/.json workout and print its share link")
    upload.add_argument("file")
    upload.set_defaults(func=_cmd_upload)

    prepare = sub.add_parser("prepare", help="Strip ids from a Garmin workout JSON for re-import")
    prepare.add_argument("file")
    prepare.add_argument("-o", "--output", help="Write here instead of stdout")
    prepare.set_defaults(func=_cmd_prepare)

    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    try:
        settings = Settings.load(args.config)
        return args.func(args, settings)
    except NotFound:
        print("Workout not found", file=sys.stderr)
        return 1
    except UploadRejected as e:
        print(str(e), file=sys.stderr)
        return 2
    except (ConfigError, ValueError) as e:
        print(f"Bad configuration: {e}", file=sys.stderr)
        return 3
    except requests.RequestException as e:
        print(f"Storage request failed: {e}", file=sys.stderr)
        return 4


if __name__ == "__main__":
    sys.exit(main())
