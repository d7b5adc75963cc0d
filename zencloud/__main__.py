import sys


def main() -> int:
    args = [a for a in sys.argv[1:] if a]
    if args and args[0] not in ("--gui", "gui"):
        from .cli import main as cli_main

        return cli_main(args)

    from .ui.qt_main import main as qt_main

    return qt_main()


if __name__ == "__main__":
    raise SystemExit(main())
