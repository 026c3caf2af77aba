"""Allow running HustleQuest as a module: python -m hustlequest.

    python -m hustlequest status
    python -m hustlequest --user alex log dm
"""

import argparse
import json
import logging
import sys

from .app import HustleQuest
from .errors import HustleQuestError
from .settings import load_settings


def _build_parser(default_user: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hustlequest")
    parser.add_argument("--user", default=default_user, help="user key (default: %(default)s)")
    commands = parser.add_subparsers(dest="command")
    commands.add_parser("status", help="show XP, level and league")
    log = commands.add_parser("log", help="log an action and show the new state")
    log.add_argument("action_type", help="dm, loom, call, client, content or system")
    return parser


def main(argv=None) -> int:
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = _build_parser(settings.default_user_id).parse_args(argv)

    quest = HustleQuest.from_settings(settings)
    try:
        if args.command == "log":
            quest.log_action(args.user, args.action_type)
        print(json.dumps(quest.game_state(args.user), indent=2, ensure_ascii=False))
    except HustleQuestError as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
