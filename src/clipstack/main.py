#!/usr/bin/env python3

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import FastAPI

from clipstack.api.app import create_app
from clipstack.config import STORAGE_BACKENDS, AppConfig, HistorySettings
from clipstack.database import HistoryStorage, JsonHistoryStorage, RedisHistoryStorage
from clipstack.services.history_service import HistoryService

logger = logging.getLogger(__name__)


class ClipStackApp:
    """Composition root: config -> storage -> history service -> HTTP app."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.settings = HistorySettings.from_config(config)
        self.storage: Optional[HistoryStorage] = None
        self.service: Optional[HistoryService] = None
        self.app: Optional[FastAPI] = None

    def _create_storage(self) -> HistoryStorage:
        storage = self.config.create_storage()
        if isinstance(storage, RedisHistoryStorage) and not storage.ping():
            logger.warning(
                f"Redis unavailable, falling back to JSON storage in {self.config.data_dir}")
            storage.close()
            return JsonHistoryStorage(self.config.data_dir)
        return storage

    def build(self) -> FastAPI:
        if self.app is not None:
            return self.app

        self.storage = self._create_storage()
        self.service = HistoryService(
            self.storage, history_limit=self.settings.get_history_limit)
        self.app = create_app(self.service, self.settings)
        logger.info(
            f"History ready: {len(self.service)} entries, "
            f"limit {self.settings.history_limit}, storage {type(self.storage).__name__}")
        return self.app

    def stop(self) -> None:
        if self.service is not None:
            self.service.close()
            self.service = None
        self.app = None

    def run_forever(self) -> None:
        app = self.build()
        try:
            uvicorn.run(app, host=self.config.api_host, port=self.config.api_port)
        finally:
            self.stop()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="ClipStack - clipboard history store"
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="API bind address (default: CLIPSTACK_API_HOST or 127.0.0.1)"
    )

    parser.add_argument(
        "-p", "--port",
        type=int,
        default=None,
        help="API port (default: CLIPSTACK_API_PORT or 3001)"
    )

    parser.add_argument(
        "-l", "--limit",
        type=int,
        default=None,
        help="Maximum number of unpinned entries kept (default: 50)"
    )

    parser.add_argument(
        "-s", "--storage",
        choices=STORAGE_BACKENDS,
        default=None,
        help="Persistence backend (default: json)"
    )

    parser.add_argument(
        "-d", "--data-dir",
        type=Path,
        default=None,
        help="Directory for the JSON history file (default: ~/.clipstack)"
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose debug logging"
    )

    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> AppConfig:
    config = AppConfig.from_env(env_path=args.env_file)
    overrides = {
        "api_host": args.host,
        "api_port": args.port,
        "history_limit": args.limit,
        "storage_backend": args.storage,
        "data_dir": args.data_dir,
    }
    return dataclasses.replace(
        config, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s')

    try:
        config = config_from_args(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    app = ClipStackApp(config)
    try:
        app.run_forever()
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
