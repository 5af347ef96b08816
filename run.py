# -*- coding: utf-8 -*-
import sys
import os
import signal
import argparse
import logging
from logging.handlers import RotatingFileHandler

# Add the current directory to sys.path to make the 'tracker' package importable
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from tracker.core.config import default_config


# --- Logging Setup ---
def setup_logging(log_file=None):
    log_file = log_file or default_config()['LOG_FILE']
    os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)

    # Configure root logger
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)

    # File Handler (Rotating)
    # Max size 5MB, keep 3 backups
    file_handler = RotatingFileHandler(
        log_file, maxBytes=5*1024*1024, backupCount=3, encoding='utf-8'
    )
    file_formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(processName)s %(name)s: %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)

    # Console Handler
    console_handler = logging.StreamHandler()
    console_formatter = logging.Formatter(
        '[%(levelname)s] %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    print(f"Logging initialized. Log file: {log_file}")


def force_exit(signum, frame):
    print("\nShutting down...")
    os._exit(1)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Project tracker dashboard server")
    parser.add_argument('--host', default=None, help="bind address (default: TRACKER_HOST or 0.0.0.0)")
    parser.add_argument('--port', type=int, default=None, help="port (default: TRACKER_PORT or 3000)")
    parser.add_argument('--log-file', default=None, help="rotating log file path")
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = parse_args()
    setup_logging(args.log_file)

    signal.signal(signal.SIGINT, force_exit)
    signal.signal(signal.SIGTERM, force_exit)

    from tracker.services.web_server import run_server
    run_server(host=args.host, port=args.port)
