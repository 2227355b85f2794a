from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from .config import load_config, resolve_runtime_secrets
from .csv_export import write_export
from .errors import ConfigError, ExportError, FeedApiError, RecordShapeError
from .export import ExportRequest, run_export
from .neynar_client import NeynarFeedClient
from .pager import coerce_page_count
from .run_log import RunLogger

_OFFLINE_API_KEY = "offline"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="farcaster_export")

    subparsers = parser.add_subparsers(dest="command", required=True)

    export = subparsers.add_parser(
        "export",
        help="Download a channel feed from Neynar and write it as CSV.",
    )
    export.add_argument(
        "--channel",
        required=True,
        help="Farcaster channel id, e.g. 'farcaster'.",
    )
    export.add_argument(
        "--pages",
        default=None,
        help="Maximum number of feed pages to fetch (values below 1 mean 1).",
    )
    export.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file. Defaults apply when omitted.",
    )
    export.add_argument(
        "--out",
        default=None,
        help="Output directory for the CSV file (overrides export.out_dir).",
    )
    export.add_argument(
        "--log",
        default=None,
        help="Path of the JSONL run log. Defaults to <out>/export.log.",
    )
    export.add_argument(
        "--offline",
        action="store_true",
        help="Use a small stub feed instead of calling Neynar.",
    )
    export.set_defaults(_handler=_cmd_export)

    return parser


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def _log_path(args: argparse.Namespace, out_dir: Path) -> Path:
    return Path(args.log) if args.log else out_dir / "export.log"


def _log_started(log: RunLogger, args: argparse.Namespace) -> None:
    log.info(
        "export_command_started",
        channel=str(args.channel),
        config_path=str(args.config) if args.config else None,
        offline=bool(args.offline),
    )


def _cmd_export(args: argparse.Namespace) -> int:
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        # Without a config there is no export.out_dir; fall back to --out or the cwd.
        with RunLogger.open(_log_path(args, Path(args.out or ".")), overwrite=True) as log:
            _log_started(log, args)
            log.exception("export_command_failed", exc=e)
        raise

    out_dir = Path(args.out or cfg.export.out_dir)
    log_path = _log_path(args, out_dir)

    with RunLogger.open(log_path, overwrite=True) as log:
        _log_started(log, args)

        try:
            max_pages = (
                coerce_page_count(args.pages) if args.pages is not None else cfg.export.max_pages
            )

            if args.offline:
                from .offline import OfflineFeedClient

                api_key = _OFFLINE_API_KEY
                source = OfflineFeedClient()
            else:
                api_key = resolve_runtime_secrets(cfg).neynar_api_key
                source = NeynarFeedClient(api_key, neynar=cfg.neynar, logger=log)

            log.info(
                "config_loaded",
                api_key_env=cfg.neynar.api_key_env,
                base_url=cfg.neynar.base_url,
                max_pages=max_pages,
                out_dir=str(out_dir),
            )

            request = ExportRequest(channel_id=args.channel, api_key=api_key, max_pages=max_pages)
            with source:
                result = run_export(request, source, logger=log)

            if result.failure is not None:
                _eprint(f"Export failed during {result.failure.stage}: {result.failure.message}")
                return 3

            document = result.document
            if document is None:
                raise ExportError("Export finished without a document")

            csv_path = write_export(document, out_dir)
            log.info("export_written", path=str(csv_path), records=document.record_count)

            print(f"channel_id={document.channel_id}")
            print(f"pages_fetched={result.pages_fetched}")
            print(f"records={document.record_count}")
            print(f"csv_path={csv_path}")
            print(f"run_log={log_path}")

            return 0
        except Exception as e:
            log.exception("export_command_failed", exc=e)
            raise


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        handler = getattr(args, "_handler")
        return int(handler(args))
    except ConfigError as e:
        _eprint(str(e))
        return 2
    except (FeedApiError, RecordShapeError, ExportError) as e:
        _eprint(str(e))
        return 3
    except KeyboardInterrupt:
        _eprint("Interrupted")
        return 130
    except Exception as e:
        _eprint(f"Unexpected error: {e}")
        return 1
