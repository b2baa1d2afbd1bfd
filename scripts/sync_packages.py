#!/usr/bin/env python3
"""Reconcile installed TikZ packages from the command line.

Usage
-----
::

    export PYTIKZ_PACKAGES_DIR=~/.local/share/pytikz/packages
    python scripts/sync_packages.py pgfplots amsmath   # install/remove to match
    python scripts/sync_packages.py --list             # show installed packages (also the default)
    python scripts/sync_packages.py --disable          # uninstall everything
    python scripts/sync_packages.py --clear-cache      # drop cached SVGs

Options::

    --list               Re-query and print installed packages
    --disable            Turn custom packages off (uninstalls all)
    --clear-cache        Clear the rendered SVG cache
    --json               Print the result as JSON
    -v, --verbose        Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pytikz import InvalidCharactersError, PackageManager, PytikzConfig  # noqa: E402


class _PrintNotifier:
    def notify(self, message: str, duration: float) -> None:
        print(message, file=sys.stderr)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("packages", nargs="*", help="Desired package names")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--list", action="store_true", help="Print installed packages")
    group.add_argument("--disable", action="store_true", help="Uninstall all custom packages")
    group.add_argument("--clear-cache", action="store_true", help="Clear cached SVGs")
    parser.add_argument("--json", action="store_true", help="Machine-readable output")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    config = PytikzConfig.from_env()
    async with PackageManager(config, notifier=_PrintNotifier()) as manager:
        if args.clear_cache:
            return 0 if (await manager.clear_cache()).ok else 1
        if args.disable:
            return 0 if await manager.set_custom_packages_enabled(False) else 1
        if args.list or not args.packages:
            installed = await manager.refresh()
            print(json.dumps(list(installed.names)) if args.json else installed.as_text())
            return 0

        if not manager.settings.enable_custom_packages:
            await manager.set_custom_packages_enabled(True)
        manager.edit_packages(" ".join(args.packages))
        try:
            result = await manager.update_packages()
        except InvalidCharactersError:
            return 2
        if args.json:
            print(result.model_dump_json(indent=2))
        else:
            print(result.installed.as_text())
        return 0 if result.ok else 1


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
