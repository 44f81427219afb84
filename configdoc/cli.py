"""Command line of the configuration reference extractor."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from .categories import CategoryOverrides
from .errors import ConfigDocError, SettingsError
from .log import configure_logging
from .model import ConfigBlock
from .roots import RootBlockRegistry
from .settings import (
    DEFAULT_ENV_PREFIX,
    Settings,
    SettingsMetadata,
    dump_defaults,
    explain,
    load_settings,
    resolve_object,
    show_sources,
)
from .walker import describe


def _describe(settings: Settings, target: Optional[str], roots: Optional[str]) -> List[ConfigBlock]:
    config_type = resolve_object(target or settings.target)
    registry = resolve_object(roots or settings.roots)
    if not isinstance(registry, RootBlockRegistry):
        raise SettingsError(f"{roots or settings.roots} is not a root block registry")
    logger.debug("Describing {} with {} root blocks", config_type, len(registry))
    return describe(
        config_type,
        roots=registry,
        categories=CategoryOverrides(settings.category_overrides),
    )


def _render_json(blocks: Sequence[ConfigBlock]) -> str:
    payload = {"blocks": [block.to_dict() for block in blocks]}
    return json.dumps(payload, indent=2, ensure_ascii=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="configdoc",
        description="Extract a reference of configuration sections and their flags",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", type=Path, help="Path to the TOML settings file")
    parser.add_argument(
        "--env-prefix",
        default=DEFAULT_ENV_PREFIX,
        help="Environment variable prefix (e.g. CONFIGDOC__LOGGING__LEVEL)",
    )
    parser.add_argument(
        "--roots",
        metavar="MODULE:ATTR",
        help="Root block registry used with --describe",
    )
    actions = parser.add_mutually_exclusive_group(required=True)
    actions.add_argument(
        "--describe",
        nargs="?",
        const="",
        metavar="MODULE:ATTR",
        help="Print the documentation model of a section type as JSON",
    )
    actions.add_argument("--validate", action="store_true", help="Validate the active settings")
    actions.add_argument("--dump-defaults", action="store_true", help="Print built-in defaults as TOML")
    actions.add_argument("--show-sources", action="store_true", help="Show settings source precedence")
    actions.add_argument("--explain", metavar="KEY", help="Explain where a settings value originates")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.dump_defaults:
            sys.stdout.write(dump_defaults())
            return 0

        settings = load_settings(args.config, env_prefix=args.env_prefix)
        configure_logging(settings.logging)
        metadata: SettingsMetadata | None = getattr(settings, "_metadata", None)

        if args.validate:
            print("Settings OK")
            return 0
        if args.show_sources:
            if metadata is None:
                raise SettingsError("Metadata unavailable for source display")
            print(show_sources(metadata))
            return 0
        if args.explain:
            print(explain(settings, args.explain))
            return 0
        if args.describe is not None:
            print(_render_json(_describe(settings, args.describe, args.roots)))
            return 0
    except ConfigDocError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI entry point
    raise SystemExit(main())
