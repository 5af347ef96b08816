# -*- coding: utf-8 -*-
import re
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional

from tracker.core.config import DEFAULT_AGENT_NAMES
from tracker.data.models import AgentActivity, Session

WORKING = 'working'
IDLE = 'idle'
OFFLINE = 'offline'

WORKING_THRESHOLD_MINUTES = 5.0

# 按优先级顺序匹配，而不是按在文本中出现的位置
WORK_PHRASES = (
    'Building',
    'Created',
    'Deployed',
    'Fixed',
    'Updated',
    'Integrating',
    'Developing',
    'Setting up',
    'Configuring',
    'Testing',
    'Debugging',
)
_PHRASE_PATTERNS = [re.compile(re.escape(p), re.IGNORECASE) for p in WORK_PHRASES]
SUMMARY_LENGTH = 100
RECENT_WORK_LIMIT = 3

NO_RECENT_ACTIVITY = 'No recent activity'
NO_ACTIVE_SESSIONS = 'No active sessions'
UNKNOWN_AGENT = 'Unknown Agent'

# Placeholder identity used whenever no live agent can be reported
FALLBACK_AGENT_ID = 'cipher'
FALLBACK_AGENT_NAME = 'Cipher (You)'
FALLBACK_SESSION_KEY = 'main'


def classify_recency(last_activity_ms: Optional[float], now_ms: float,
                     threshold_minutes: float = WORKING_THRESHOLD_MINUTES) -> str:
    """working if the last activity is less than threshold_minutes old, else idle."""
    if last_activity_ms is None:
        return IDLE
    minutes_ago = (now_ms - last_activity_ms) / 1000 / 60
    return WORKING if minutes_ago < threshold_minutes else IDLE


def summarize_text(text: Optional[str]) -> str:
    """
    提取一段简短的活动描述:
    找到第一个命中的关键词 (按 WORK_PHRASES 顺序，忽略大小写)，从命中位置截取 100 个字符；
    都没命中则取开头 100 个字符。
    """
    if not text:
        return ''
    for pattern in _PHRASE_PATTERNS:
        match = pattern.search(text)
        if match:
            start = match.start()
            return text[start:start + SUMMARY_LENGTH].strip()
    return text[:SUMMARY_LENGTH].strip()


def iso_from_ms(ms: float) -> str:
    """Epoch milliseconds -> '2026-01-14T08:00:00.000Z'."""
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def offline_agent(now_ms: float, current_activity: str = NO_ACTIVE_SESSIONS,
                  recent_work: Optional[List[str]] = None) -> AgentActivity:
    return AgentActivity(
        id=FALLBACK_AGENT_ID,
        name=FALLBACK_AGENT_NAME,
        status=OFFLINE,
        current_activity=current_activity,
        last_updated=iso_from_ms(now_ms),
        session_key=FALLBACK_SESSION_KEY,
        recent_work=list(recent_work or []),
    )


def _resolve_timestamp(session: Session, now_ms: float) -> float:
    ts = session.last_message_at
    if not ts:
        return now_ms
    try:
        iso_from_ms(ts)
    except (OverflowError, OSError, ValueError):
        # out of the representable date range
        return now_ms
    return ts


def _to_agent(session: Session, now_ms: float, agent_names: Mapping[str, str],
              threshold_minutes: float) -> AgentActivity:
    last_ts = _resolve_timestamp(session, now_ms)
    agent_id = session.label.lower() if session.label else 'unknown'
    name = agent_names.get(agent_id) or session.label or UNKNOWN_AGENT

    if session.messages:
        current = summarize_text(session.messages[-1].content)
    else:
        current = NO_RECENT_ACTIVITY

    assistant_msgs = [m for m in session.messages if m.role == 'assistant']
    recent = [summarize_text(m.content) for m in assistant_msgs[-RECENT_WORK_LIMIT:]]

    return AgentActivity(
        id=agent_id,
        name=name,
        status=classify_recency(last_ts, now_ms, threshold_minutes),
        current_activity=current,
        last_updated=iso_from_ms(last_ts),
        session_key=session.session_key,
        recent_work=[w for w in recent if w],
    )


def aggregate_agents(sessions: Iterable, now_ms: float,
                     agent_names: Optional[Mapping[str, str]] = None,
                     threshold_minutes: float = WORKING_THRESHOLD_MINUTES) -> List[AgentActivity]:
    """
    把会话列表转换为 Agent 活动列表，保持输入顺序。

    Sessions without a lastMessage are left out entirely. Entries may be raw
    JSON dicts or Session objects; anything else is skipped. When nothing is
    left, a single offline placeholder is returned so callers always get at
    least one agent.
    """
    names = agent_names if agent_names is not None else DEFAULT_AGENT_NAMES
    agents = []
    for raw in sessions:
        session = raw if isinstance(raw, Session) else Session.from_dict(raw)
        if session is None or not session.has_last_message:
            continue
        agents.append(_to_agent(session, now_ms, names, threshold_minutes))

    if not agents:
        agents.append(offline_agent(now_ms))
    return agents
