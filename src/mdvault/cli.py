"""``mdvault`` command line."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time

from mdvault.api import get_note, list_notes
from mdvault.config import default_config_path, load_config, setup_logging
from mdvault.errors import ConfigurationError, ScanError
from mdvault.service import VaultService

log = logging.getLogger("mdvault")


def _dumps(data: dict) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _serve(service: VaultService) -> int:
    try:
        while service.watcher is not None and service.watcher.is_alive:
            time.sleep(0.5)
    except KeyboardInterrupt:
        log.info("Shutting down")
        return 0
    if service.watch_error is not None:
        log.error("Watcher stopped, index is no longer updated: %s", service.watch_error)
        return 1
    return 0


def main(argv=None) -> int:
    p = argparse.ArgumentParser(prog="mdvault")
    p.add_argument("--config", default=None, help="Path to config.yaml (default: $MDVAULT_CONFIG or ./config.yaml)")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("serve", help="Index the vault and keep the index updated until interrupted")
    ls = sub.add_parser("list", help="Index the vault once and print the note listing as JSON")
    ls.add_argument("--public-only", action="store_true", help="Only public notes and links between them")
    show = sub.add_parser("show", help="Index the vault once and print one note as JSON")
    show.add_argument("note_id", help="Note id or relative path")

    args = p.parse_args(argv)

    try:
        config = load_config(args.config or default_config_path())
    except ConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    setup_logging(config.log_level)

    service = VaultService(config, watch=args.cmd == "serve")
    try:
        service.start()
    except ScanError as exc:
        log.error("Initial scan failed, not starting: %s", exc)
        return 1

    try:
        if args.cmd == "serve":
            return _serve(service)
        if args.cmd == "list":
            print(_dumps(list_notes(service.store, public_only=args.public_only).to_dict()))
            return 0
        lookup = get_note(service.store, args.note_id, config.private)
        print(_dumps(lookup.to_dict()))
        return 0 if lookup.found else 1
    finally:
        service.stop()


if __name__ == "__main__":
    sys.exit(main())
