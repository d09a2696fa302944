"""Command line interface for media_uploader."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from rich.logging import RichHandler

from . import __version__
from .cli_progress import SingleFileUploadProgress, render_configuration_summary
from .errors import UploadError
from .models import MiB, UploadCandidate, UploadConfig
from .orchestrator.core import DEFAULT_API_URL, UploadOrchestrator
from .utils.events import FALLBACK, PART_UPLOADED, PROGRESS, EventEmitter

logger = logging.getLogger(__name__)


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug, --log-level or LOG_LEVEL is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    env_level = os.getenv("LOG_LEVEL")
    if silent or (not debug and not log_level and not env_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, (log_level or env_level).upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _build_config(args: argparse.Namespace) -> UploadConfig:
    config = UploadConfig()
    overrides = {}
    if args.chunk_size_mb is not None:
        if args.chunk_size_mb <= 0:
            raise CLIError("--chunk-size-mb must be positive")
        overrides["chunk_size"] = int(args.chunk_size_mb * MiB)
    if args.no_fallback:
        overrides["enable_fallback"] = False
    if args.no_abort:
        overrides["abort_on_failure"] = False
    if args.no_validate:
        overrides["validate_media"] = False
    return replace(config, **overrides) if overrides else config


async def _upload_one(orchestrator: UploadOrchestrator, path: Path, live: bool) -> bool:
    candidate = UploadCandidate.from_path(path)
    display = SingleFileUploadProgress(candidate, live=live)

    events = EventEmitter()
    events.on(PROGRESS, display.on_progress)
    events.on(PART_UPLOADED, display.on_part_uploaded)
    events.on(FALLBACK, display.on_fallback)

    display.start()
    try:
        result = await orchestrator.upload(candidate, events=events)
    except UploadError as exc:
        logger.debug("Upload of %s failed", path, exc_info=True)
        display.complete(error=str(exc))
        return False

    display.complete(result=result)
    return True


async def _run_upload(
    sources: List[Path],
    api_url: str,
    token: Optional[str],
    config: UploadConfig,
    live: bool,
) -> int:
    failures = 0
    async with UploadOrchestrator(api_url, config=config, token=token) as orchestrator:
        for source in sources:
            if not await _upload_one(orchestrator, source, live):
                failures += 1
    return 0 if failures == 0 else 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="media-up",
        description="Upload menu images and videos directly to object storage.",
    )
    parser.add_argument("sources", nargs="*", type=Path, help="Files to upload")
    parser.add_argument(
        "--api-url",
        default=None,
        help=f"Application API base URL (default from MEDIA_API_URL or {DEFAULT_API_URL})",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Bearer token for the application API (default from MEDIA_API_TOKEN)",
    )
    parser.add_argument(
        "--chunk-size-mb",
        type=float,
        default=None,
        help="Multipart part size in MiB (default 5)",
    )
    parser.add_argument("--no-fallback", action="store_true", help="Disable server-proxied fallback")
    parser.add_argument(
        "--no-abort",
        action="store_true",
        help="Do not abort multipart sessions after a failure",
    )
    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip media type and size checks",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print results")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"media-up {__version__}",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if not args.sources:
        parser.print_help()
        return 0

    sources = [Path(source).expanduser() for source in args.sources]
    for source in sources:
        if not source.is_file():
            print(f"ERROR: not a file: {source}", file=sys.stderr)
            return 1

    try:
        config = _build_config(args)
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    api_url = args.api_url or os.getenv("MEDIA_API_URL") or DEFAULT_API_URL
    token = args.token or os.getenv("MEDIA_API_TOKEN")

    if not args.silent:
        render_configuration_summary(
            {
                "Files": len(sources),
                "API": api_url,
                "Token": "set" if token else "-",
                "Chunk Size": f"{config.chunk_size / MiB:g} MiB",
                "Fallback": "on" if config.enable_fallback else "off",
                "Abort On Failure": "on" if config.abort_on_failure else "off",
                "Validation": "on" if config.validate_media else "off",
                "Env File": str(used_env_file) if used_env_file else "-",
                "Logging": effective_log_mode,
            }
        )

    try:
        return asyncio.run(
            _run_upload(
                sources,
                api_url=api_url,
                token=token,
                config=config,
                live=sys.stdout.isatty() and effective_log_mode == "silent",
            )
        )
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
