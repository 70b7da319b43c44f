#!/usr/bin/env python3
"""
Run the disperse/collect API with uvicorn.

Host and port come from config/app_config.yml, overridden by API_HOST / PORT
(or the command line).
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from disperse_collect.utils.config_loader import load_app_config


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the disperse/collect API")
    parser.add_argument("--config", type=Path, default=None, help="Path to app_config.yml")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(args.verbose)
    if args.config is not None:
        os.environ["APP_CONFIG_PATH"] = str(args.config)
    cfg = load_app_config()

    uvicorn.run(
        "disperse_collect.api.main:create_app",
        factory=True,
        host=args.host or cfg.host,
        port=args.port or cfg.port,
        log_level="debug" if args.verbose else "info",
    )


if __name__ == "__main__":
    main()
