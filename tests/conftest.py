import json

import pytest

from tracker.services.web_server import create_app

# 2026-01-14T08:00:00.000Z
NOW_MS = 1768377600000


class FakeSessionSource:
    """Returns canned sessions and records the query it was called with."""

    def __init__(self, sessions):
        self.sessions = sessions
        self.calls = []

    def list_sessions(self, active_minutes=120, limit=10, message_limit=3):
        self.calls.append({'active_minutes': active_minutes, 'limit': limit, 'message_limit': message_limit})
        return self.sessions


class BrokenSessionSource:
    def list_sessions(self, **kwargs):
        raise ConnectionError("gateway unreachable")


def make_project(**overrides):
    project = {
        'id': 'p1',
        'name': 'Project One',
        'status': 'in-progress',
        'description': 'test project',
        'progress': 50,
        'hoursSpent': 10,
        'estimatedHoursRemaining': 5,
        'revenueModel': 'Subscription',
        'estimatedMonthlyRevenue': 100,
        'actualMonthlyRevenue': 0,
        'priority': 'medium',
        'blockers': [],
        'nextSteps': ['Ship it'],
    }
    project.update(overrides)
    return project


@pytest.fixture
def now_ms():
    return NOW_MS


@pytest.fixture
def clock():
    return lambda: NOW_MS


@pytest.fixture
def projects_file(tmp_path):
    path = tmp_path / 'projects.json'
    document = {
        'lastUpdated': '2026-01-10T00:00:00.000Z',
        'projects': [
            make_project(id='a', progress=100, hoursSpent=12.5, priority='critical'),
            make_project(id='b', status='dormant', progress=0, hoursSpent=3, estimatedMonthlyRevenue=50),
        ],
    }
    path.write_text(json.dumps(document), encoding='utf-8')
    return path


@pytest.fixture
def session_source(now_ms):
    return FakeSessionSource([
        {
            'sessionKey': 'agent:main',
            'kind': 'chat',
            'label': 'Cipher',
            'lastMessage': {'timestamp': now_ms - 60000},
            'messages': [
                {'role': 'user', 'content': 'please wire it up'},
                {'role': 'assistant', 'content': 'Building API integration for live agent tracking'},
            ],
        }
    ])


@pytest.fixture
def app(tmp_path, clock, session_source, projects_file):
    app = create_app({
        'TESTING': True,
        'CLOCK': clock,
        'SESSION_SOURCE_OBJ': session_source,
        'PROJECTS_FILE': str(projects_file),
        'LOG_FILE': str(tmp_path / 'app.log'),
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()
