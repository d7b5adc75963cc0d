import argparse
import json
import os
import sys
from typing import List, Optional

from .client import StorageClient
from .models import FileRecord
from .session import EventBus, FileActions, FileListStore, InlineRunner, Failed, Ready, describe, error_message
from .utils import DEBUG_ENV, format_bytes


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog='zencloud')
    p.add_argument('--base-url', help='file server origin (default: $ZENCLOUD_BASE_URL or http://localhost:8080)')
    p.add_argument('--debug', action='store_true')
    sub = p.add_subparsers(dest='cmd', required=True)

    ls = sub.add_parser('ls')
    ls.add_argument('--json', action='store_true')

    put = sub.add_parser('put')
    put.add_argument('path')
    put.add_argument('--name')

    get = sub.add_parser('get')
    get.add_argument('file_id')
    get.add_argument('--out')

    rm = sub.add_parser('rm')
    rm.add_argument('file_id')

    return p


def _print_state(store: FileListStore) -> int:
    lines = describe(store.state)
    if isinstance(store.state, Failed):
        print(lines[0], file=sys.stderr)
        return 1
    for line in lines:
        print(line)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.debug:
        os.environ[DEBUG_ENV] = "1"

    client = StorageClient(base_url=args.base_url)
    bus = EventBus()
    runner = InlineRunner()
    store = FileListStore(client, bus, runner)
    actions = FileActions(client, bus, runner)
    errors: List[Exception] = []

    try:
        if args.cmd == 'ls':
            store.refresh()
            if args.json and isinstance(store.state, Ready):
                print(json.dumps([record.to_dict() for record in store.state.files], indent=2))
                return 0
            return _print_state(store)

        if args.cmd == 'put':
            actions.upload(
                args.path,
                name=args.name,
                on_success=lambda result: print(f"ID: {result.id}"),
                on_error=errors.append,
            )
            if errors:
                print(f"Error: {error_message(errors[0])}", file=sys.stderr)
                return 1
            # The upload itself succeeded; a failed re-listing is reported but does not change the status.
            _print_state(store)
            return 0

        if args.cmd == 'get':
            store.refresh()
            record = next((f for f in store.files if f.id == args.file_id), None)
            record = record or FileRecord(id=args.file_id, filename="")
            actions.download(
                record,
                args.out or os.getcwd(),
                on_success=lambda saved: print(f"Saved {saved} ({format_bytes(saved.stat().st_size)})"),
                on_error=errors.append,
            )
            if errors:
                print(f"Error: {error_message(errors[0])}", file=sys.stderr)
                return 1
            return 0

        if args.cmd == 'rm':
            actions.delete(
                FileRecord(id=args.file_id, filename=""),
                on_success=lambda _record: print('OK'),
                on_error=errors.append,
            )
            if errors:
                print(f"Error: {error_message(errors[0])}", file=sys.stderr)
                return 1
            return _print_state(store)
    finally:
        store.close()
        client.close()

    return 1


if __name__ == '__main__':
    raise SystemExit(main())
