# -*- coding: utf-8 -*-
import os
import time


def get_app_paths():
    """
    获取应用的关键路径
    Returns:
        tuple: (base_dir, data_dir)
        base_dir: 源码根目录
        data_dir: 数据目录 (projects.json 与日志文件所在位置)
    """
    # config.py 在 tracker/core/config.py，向上回溯 3 层到项目根目录
    current_file = os.path.abspath(__file__)
    base_dir = os.path.dirname(os.path.dirname(os.path.dirname(current_file)))
    data_dir = os.path.join(base_dir, 'tracker', 'data', 'storage')

    return base_dir, data_dir


BASE_DIR, DATA_DIR = get_app_paths()

if not os.path.exists(DATA_DIR):
    try:
        os.makedirs(DATA_DIR)
    except OSError as e:
        print(f"Warning: Could not create data directory {DATA_DIR}: {e}")


# Display names for known agents, keyed by lower-cased session label.
DEFAULT_AGENT_NAMES = {
    'cipher': 'Cipher (You)',
    'main': 'Main Session',
}


def _env_int(name, default):
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        print(f"Warning: {name}={value!r} is not an integer, using {default}")
        return default


def _env_float(name, default):
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        return float(value)
    except ValueError:
        print(f"Warning: {name}={value!r} is not a number, using {default}")
        return default


def now_ms() -> int:
    """Wall clock in epoch milliseconds."""
    return int(time.time() * 1000)


def default_config() -> dict:
    """
    Settings read from the environment. create_app() merges this dict into
    Flask's app.config, so any key can be overridden per app instance.
    """
    return {
        'HOST': os.getenv('TRACKER_HOST', '0.0.0.0'),
        'PORT': _env_int('TRACKER_PORT', 3000),
        'PROJECTS_FILE': os.getenv('TRACKER_PROJECTS_FILE', os.path.join(DATA_DIR, 'projects.json')),
        'LOG_FILE': os.getenv('TRACKER_LOG_FILE', os.path.join(DATA_DIR, 'app.log')),

        # Upstream session source: "mock" or "gateway"
        'SESSION_SOURCE': os.getenv('SESSION_SOURCE', 'mock'),
        'GATEWAY_URL': os.getenv('OPENCLAW_GATEWAY_URL', 'http://127.0.0.1:18789/api/sessions/list'),
        'GATEWAY_TOKEN': os.getenv('OPENCLAW_GATEWAY_TOKEN', ''),
        'GATEWAY_TIMEOUT': _env_float('GATEWAY_TIMEOUT', 10.0),
        'SESSIONS_ACTIVE_MINUTES': _env_int('SESSIONS_ACTIVE_MINUTES', 120),
        'SESSIONS_LIMIT': _env_int('SESSIONS_LIMIT', 10),
        'SESSIONS_MESSAGE_LIMIT': _env_int('SESSIONS_MESSAGE_LIMIT', 3),

        'POLL_INTERVAL_MS': _env_int('POLL_INTERVAL_MS', 10000),
        'WORKING_THRESHOLD_MINUTES': _env_float('WORKING_THRESHOLD_MINUTES', 5.0),
        'AGENT_NAMES': dict(DEFAULT_AGENT_NAMES),
        'CLOCK': now_ms,
        # A ready-made session source instance; built from SESSION_SOURCE when None
        'SESSION_SOURCE_OBJ': None,
    }
