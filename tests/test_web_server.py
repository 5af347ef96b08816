"""Tests for the JSON endpoints."""

import json
import os

import pytest
from flask import Flask

from tracker.core.config import DATA_DIR, default_config
from tracker.services.snapshot import build_agents_snapshot, build_projects_snapshot
from tracker.services.web_server import create_app, run_server

from conftest import NOW_MS, BrokenSessionSource, FakeSessionSource


def _client(tmp_path, **config):
    base = {
        'TESTING': True,
        'CLOCK': lambda: NOW_MS,
        'PROJECTS_FILE': str(tmp_path / 'missing.json'),
        'SESSION_SOURCE_OBJ': FakeSessionSource([]),
    }
    base.update(config)
    return create_app(base).test_client()


def test_index_and_health(client):
    assert client.get('/').status_code == 200
    resp = client.get('/api/health')
    assert resp.status_code == 200
    assert resp.get_json()['status'] == 'ok'


def test_client_config(client):
    assert client.get('/api/config').get_json() == {
        'pollIntervalMs': 10000,
        'workingThresholdMinutes': 5.0,
    }


def test_agents_live(client, session_source):
    resp = client.get('/api/agents')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['source'] == 'openclaw-sessions'
    assert body['timestamp'] == NOW_MS
    assert body['lastUpdated'] == '2026-01-14T08:00:00.000Z'
    [agent] = body['agents']
    assert agent['status'] == 'working'
    assert agent['name'] == 'Cipher (You)'
    assert agent['sessionKey'] == 'agent:main'
    assert 'Building API integration for live agent tracking' in agent['currentActivity']
    assert session_source.calls == [{'active_minutes': 120, 'limit': 10, 'message_limit': 3}]


def test_agents_uses_configured_query_and_names(tmp_path):
    source = FakeSessionSource([{'sessionKey': 'k', 'label': 'Ops', 'lastMessage': {'timestamp': NOW_MS}}])
    client = _client(
        tmp_path,
        SESSION_SOURCE_OBJ=source,
        AGENT_NAMES={'ops': 'Operations Bot'},
        SESSIONS_ACTIVE_MINUTES=15,
        SESSIONS_LIMIT=4,
        SESSIONS_MESSAGE_LIMIT=1,
    )
    [agent] = client.get('/api/agents').get_json()['agents']
    assert agent['name'] == 'Operations Bot'
    assert agent['currentActivity'] == 'No recent activity'
    assert source.calls == [{'active_minutes': 15, 'limit': 4, 'message_limit': 1}]


def test_agents_no_sessions_returns_offline_placeholder(tmp_path):
    body = _client(tmp_path).get('/api/agents').get_json()
    assert body['source'] == 'openclaw-sessions'
    [agent] = body['agents']
    assert agent['status'] == 'offline'
    assert agent['currentActivity'] == 'No active sessions'


def test_agents_upstream_failure_falls_back(tmp_path, caplog):
    resp = _client(tmp_path, SESSION_SOURCE_OBJ=BrokenSessionSource()).get('/api/agents')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['source'] == 'fallback'
    [agent] = body['agents']
    assert agent['status'] == 'offline'
    assert agent['currentActivity'] == 'Unable to fetch real-time data'
    assert agent['recentWork'] == ['Check OpenClaw gateway connection']
    assert 'Error fetching agent activity' in caplog.text


def test_agents_default_mock_source(tmp_path):
    app = create_app({'TESTING': True, 'CLOCK': lambda: NOW_MS, 'SESSION_SOURCE': 'mock'})
    body = app.test_client().get('/api/agents').get_json()
    [agent] = body['agents']
    assert agent['id'] == 'cipher (main session)'
    assert agent['name'] == 'Cipher (Main Session)'
    assert agent['status'] == 'working'


def test_projects(client):
    resp = client.get('/api/projects')
    assert resp.status_code == 200
    assert resp.headers['Cache-Control'] == 'no-store, must-revalidate'
    body = resp.get_json()
    assert body['source'] == 'projects-file'
    assert body['lastUpdated'] == '2026-01-10T00:00:00.000Z'
    assert [p['id'] for p in body['projects']] == ['a', 'b']
    assert body['dashboard'] == {
        'totalHours': 15.5,
        'averageProgress': 50,
        'estimatedTotalMonthlyRevenue': 150,
        'activeProjectCount': 1,
    }
    # no metadata in the file, so it is derived
    assert body['metadata']['criticalProjects'] == ['a']
    assert body['metadata']['totalHoursSpent'] == 15.5


def test_projects_metadata_served_verbatim(tmp_path):
    path = tmp_path / 'projects.json'
    metadata = {'totalHoursSpent': 999, 'totalEstimatedHours': 1, 'estimatedTotalMonthlyRevenue': 2,
                'criticalProjects': ['x'], 'nextMilestones': ['y']}
    path.write_text(json.dumps({'projects': [], 'metadata': metadata}), encoding='utf-8')
    body = _client(tmp_path, PROJECTS_FILE=str(path)).get('/api/projects').get_json()
    assert body['metadata'] == metadata
    assert body['dashboard']['averageProgress'] == 0


def test_projects_read_failure_falls_back(tmp_path):
    resp = _client(tmp_path).get('/api/projects')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['source'] == 'fallback'
    assert body['projects'] == []
    assert body['metadata'] == {
        'totalHoursSpent': 0,
        'totalEstimatedHours': 0,
        'estimatedTotalMonthlyRevenue': 0,
        'criticalProjects': [],
        'nextMilestones': [],
    }
    assert body['dashboard'] == {
        'totalHours': 0,
        'averageProgress': 0,
        'estimatedTotalMonthlyRevenue': 0,
        'activeProjectCount': 0,
    }


def test_project_metrics_endpoint(client, tmp_path):
    body = client.get('/api/projects/metrics').get_json()
    assert body['source'] == 'projects-file'
    assert body['dashboard']['averageProgress'] == 50
    assert _client(tmp_path).get('/api/projects/metrics').get_json()['source'] == 'fallback'


def test_snapshot_outcomes(tmp_path):
    live = build_agents_snapshot(FakeSessionSource([]), clock=lambda: NOW_MS)
    assert not live.degraded and live.error is None

    degraded = build_agents_snapshot(BrokenSessionSource(), clock=lambda: NOW_MS)
    assert degraded.degraded
    assert degraded.source == 'fallback'
    assert 'gateway unreachable' in degraded.error

    missing = build_projects_snapshot(str(tmp_path / 'nope.json'), clock=lambda: NOW_MS)
    assert missing.degraded
    assert missing.payload['timestamp'] == NOW_MS


def test_projects_with_non_finite_fields_stay_live(tmp_path):
    path = tmp_path / 'projects.json'
    path.write_text(
        '{"projects": ['
        '{"id": "good", "status": "in-progress", "progress": 40, "hoursSpent": 4},'
        '{"id": "bad", "status": "dormant", "progress": NaN, "hoursSpent": -Infinity}'
        ']}',
        encoding='utf-8',
    )
    resp = _client(tmp_path, PROJECTS_FILE=str(path)).get('/api/projects')
    assert resp.status_code == 200
    # strict parse: the body must not carry NaN/Infinity tokens
    body = json.loads(resp.get_data(as_text=True), parse_constant=lambda name: pytest.fail(name))
    assert body['source'] == 'projects-file'
    assert [p['id'] for p in body['projects']] == ['good', 'bad']
    assert body['dashboard']['averageProgress'] == 20
    assert body['dashboard']['totalHours'] == 4


def test_default_projects_file_is_bundled(monkeypatch):
    monkeypatch.delenv('TRACKER_PROJECTS_FILE', raising=False)
    path = default_config()['PROJECTS_FILE']
    assert path == os.path.join(DATA_DIR, 'projects.json')
    assert os.path.isfile(path)


def test_run_server_keeps_explicit_port_zero(monkeypatch):
    calls = []
    monkeypatch.setattr(Flask, 'run', lambda self, **kwargs: calls.append(kwargs))
    run_server(host='127.0.0.1', port=0)
    assert calls[0]['port'] == 0
    assert calls[0]['host'] == '127.0.0.1'
