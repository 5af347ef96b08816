import logging

import requests

from tracker.core.config import now_ms
from tracker.core.errors import SessionSourceError

logger = logging.getLogger(__name__)

DEFAULT_ACTIVE_MINUTES = 120
DEFAULT_LIMIT = 10
DEFAULT_MESSAGE_LIMIT = 3


class MockSessionSource:
    """
    Stand-in for the gateway: one chat session whose last message is a minute
    old. Timestamps follow the injected clock.
    """

    def __init__(self, clock=None):
        self.clock = clock or now_ms

    def list_sessions(self, active_minutes=DEFAULT_ACTIVE_MINUTES, limit=DEFAULT_LIMIT,
                      message_limit=DEFAULT_MESSAGE_LIMIT):
        now = self.clock()
        sessions = [
            {
                'sessionKey': 'main',
                'kind': 'chat',
                'label': 'Cipher (Main Session)',
                'lastMessage': {'timestamp': now - 60000},
                'messages': [
                    {
                        'role': 'user',
                        'content': 'Integrate real OpenClaw session data',
                        'timestamp': now - 60000,
                    },
                    {
                        'role': 'assistant',
                        'content': 'Building API integration for live agent tracking in project tracker',
                        'timestamp': now - 50000,
                    },
                ],
            }
        ]
        for s in sessions:
            s['messages'] = s['messages'][-message_limit:] if message_limit > 0 else []
        return sessions[:limit]


class GatewaySessionSource:
    """
    Calls the session gateway's list endpoint:
    POST {"activeMinutes", "limit", "messageLimit"} -> [session, ...]
    """

    def __init__(self, url: str, token: str = None, timeout: float = 10, http=None):
        self.url = url
        self.token = token
        self.timeout = timeout
        self.http = http or requests.Session()

    def list_sessions(self, active_minutes=DEFAULT_ACTIVE_MINUTES, limit=DEFAULT_LIMIT,
                      message_limit=DEFAULT_MESSAGE_LIMIT):
        payload = {
            'activeMinutes': active_minutes,
            'limit': limit,
            'messageLimit': message_limit,
        }
        headers = {'Authorization': f"Bearer {self.token}"} if self.token else {}
        try:
            resp = self.http.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise SessionSourceError(f"session gateway request failed: {e}") from e
        except ValueError as e:
            raise SessionSourceError(f"session gateway returned invalid JSON: {e}") from e

        sessions = self._extract_sessions(data)
        logger.debug("Gateway returned %d sessions", len(sessions))
        return sessions

    def _extract_sessions(self, data):
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            if isinstance(data.get('sessions'), list):
                return data['sessions']
            result = data.get('result')
            if isinstance(result, dict) and isinstance(result.get('sessions'), list):
                return result['sessions']
        raise SessionSourceError("session gateway response has no session list")


def build_session_source(config):
    """根据配置 SESSION_SOURCE 选择会话来源: mock / gateway"""
    kind = (config.get('SESSION_SOURCE') or 'mock').lower()
    if kind == 'mock':
        return MockSessionSource(clock=config.get('CLOCK'))
    if kind == 'gateway':
        return GatewaySessionSource(
            url=config['GATEWAY_URL'],
            token=config.get('GATEWAY_TOKEN') or None,
            timeout=config.get('GATEWAY_TIMEOUT', 10),
        )
    raise ValueError(f"unknown SESSION_SOURCE: {kind!r} (expected 'mock' or 'gateway')")
