"""
Command-line entry point for the LockDrop server.

Usage:
    python -m lockdrop --port 8080 --upload-dir ./uploads

Every flag falls back to its environment variable (see lockdrop.config).
"""

import argparse
import logging
from typing import Optional, Sequence

from .config import AppConfig
from .core.service import ShareService
from .core.sweeper import ExpirySweeper
from .logging_config import configure_logging
from .web.app import create_app


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lockdrop", description="Password-protected file drop server"
    )
    parser.add_argument("--host", help="interface to bind (LOCKDROP_HOST)")
    parser.add_argument("--port", type=int, help="port to listen on (PORT)")
    parser.add_argument(
        "--upload-dir", help="directory sealed blobs are stored in (LOCKDROP_UPLOAD_DIR)"
    )
    parser.add_argument("--log-level", help="logging level (LOCKDROP_LOG_LEVEL)")
    return parser


def load_config(argv: Optional[Sequence[str]] = None) -> AppConfig:
    args = build_parser().parse_args(argv)
    return AppConfig.from_env().with_overrides(
        host=args.host,
        port=args.port,
        upload_dir=args.upload_dir,
        log_level=args.log_level.upper() if args.log_level else None,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    config = load_config(argv)
    configure_logging(config.log_level)

    service = ShareService(config)
    sweeper = ExpirySweeper(service.storage, config.sweep_interval)
    app = create_app(config, service)

    sweeper.start()
    logger.info("Starting server at http://%s:%d", config.host, config.port)
    try:
        app.run(host=config.host, port=config.port, threaded=True)
    finally:
        sweeper.stop()
        service.shutdown()
