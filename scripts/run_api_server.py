#!/usr/bin/env python3
"""Start the Wizard Chess engine API server."""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wizardchess.config import load_config


def main():
    parser = argparse.ArgumentParser(description="Wizard Chess Engine API Server")
    parser.add_argument(
        "--config", default="configs/engine.yaml",
        help="Path to engine config YAML (default: configs/engine.yaml)",
    )
    parser.add_argument("--host", default=None, help="Override host")
    parser.add_argument("--port", type=int, default=None, help="Override port")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    config = load_config(args.config)

    server_cfg = config.get("server", {})
    host = args.host or server_cfg.get("host", "127.0.0.1")
    port = args.port or server_cfg.get("port", 8000)

    try:
        import uvicorn
    except ImportError:
        print("uvicorn not installed. Run: pip install -e '.[api]'", file=sys.stderr)
        sys.exit(1)

    from wizardchess.api.server import app
    from wizardchess.api.dependencies import init_app

    init_app(app, config)

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
