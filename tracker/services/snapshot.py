# -*- coding: utf-8 -*-
"""
快照构建: 每次请求都重新计算一份完整的快照。

Each builder returns a Snapshot whether or not the upstream read worked. A
failed read produces a degraded snapshot with source "fallback" and the error
text; the web layer serves either one with a 200.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from tracker.core.config import DEFAULT_AGENT_NAMES, now_ms
from tracker.data.dao.project_dao import load_projects_document
from tracker.data.services.activity_service import (
    WORKING_THRESHOLD_MINUTES, aggregate_agents, iso_from_ms, offline_agent
)
from tracker.data.services.project_service import (
    compute_dashboard_metrics, derive_metadata, empty_metadata, parse_projects
)

logger = logging.getLogger(__name__)

SOURCE_SESSIONS = 'openclaw-sessions'
SOURCE_PROJECTS = 'projects-file'
SOURCE_FALLBACK = 'fallback'

UNABLE_TO_FETCH = 'Unable to fetch real-time data'
CHECK_GATEWAY = 'Check OpenClaw gateway connection'


@dataclass
class Snapshot:
    payload: dict
    source: str
    degraded: bool = False
    error: Optional[str] = None


def build_agents_snapshot(session_source, clock=None, agent_names=None,
                          threshold_minutes=WORKING_THRESHOLD_MINUTES,
                          active_minutes=120, limit=10, message_limit=3) -> Snapshot:
    clock = clock or now_ms
    names = agent_names if agent_names is not None else DEFAULT_AGENT_NAMES
    try:
        sessions = session_source.list_sessions(
            active_minutes=active_minutes, limit=limit, message_limit=message_limit
        )
        now = clock()
        agents = aggregate_agents(sessions, now, agent_names=names, threshold_minutes=threshold_minutes)
        return Snapshot(payload=_agents_payload(agents, now, SOURCE_SESSIONS), source=SOURCE_SESSIONS)
    except Exception as e:
        logger.exception("Error fetching agent activity")
        now = clock()
        placeholder = offline_agent(now, current_activity=UNABLE_TO_FETCH, recent_work=[CHECK_GATEWAY])
        return Snapshot(
            payload=_agents_payload([placeholder], now, SOURCE_FALLBACK),
            source=SOURCE_FALLBACK,
            degraded=True,
            error=str(e),
        )


def _agents_payload(agents, now, source) -> dict:
    return {
        'agents': [a.to_dict() for a in agents],
        'lastUpdated': iso_from_ms(now),
        'timestamp': int(now),
        'source': source,
    }


def build_projects_snapshot(path=None, clock=None) -> Snapshot:
    clock = clock or now_ms
    try:
        document = load_projects_document(path)
        raw_projects = document.get('projects', [])
        projects = parse_projects(raw_projects)
        metadata = document.get('metadata')
        if not isinstance(metadata, dict):
            metadata = derive_metadata(projects)
        now = clock()
        payload = {
            'lastUpdated': document.get('lastUpdated') or iso_from_ms(now),
            'projects': raw_projects,
            'metadata': metadata,
            'dashboard': compute_dashboard_metrics(projects).to_dict(),
            'timestamp': int(now),
            'source': SOURCE_PROJECTS,
        }
        return Snapshot(payload=payload, source=SOURCE_PROJECTS)
    except Exception as e:
        logger.exception("Error loading projects")
        now = clock()
        payload = {
            'lastUpdated': iso_from_ms(now),
            'projects': [],
            'metadata': empty_metadata(),
            'dashboard': compute_dashboard_metrics([]).to_dict(),
            'timestamp': int(now),
            'source': SOURCE_FALLBACK,
        }
        return Snapshot(payload=payload, source=SOURCE_FALLBACK, degraded=True, error=str(e))
