# -*- coding: utf-8 -*-
"""
数据模型: 会话 (Session)、Agent 活动 (AgentActivity)、项目 (Project) 与看板指标

Inputs arrive as JSON objects with camelCase keys. from_dict() never raises:
missing or wrongly-typed optional fields fall back to safe defaults.
"""
import math
from dataclasses import dataclass, field
from typing import List, Optional


def _is_number(value) -> bool:
    # NaN and Infinity are valid for Python's json module but not for the browser
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large to convert to float
        return False


def _as_number(value, default=0):
    return value if _is_number(value) else default


def _as_text(value, default=""):
    return value if isinstance(value, str) else default


def _as_text_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _content_text(content) -> str:
    # Gateway transcripts may carry content as a list of blocks: [{"type": "text", "text": ...}]
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and isinstance(block.get('text'), str):
                parts.append(block['text'])
        return "\n".join(parts)
    return ""


@dataclass
class Message:
    role: str
    content: str
    timestamp: Optional[float] = None

    @classmethod
    def from_dict(cls, raw) -> "Message":
        if not isinstance(raw, dict):
            return cls(role="", content="")
        ts = raw.get('timestamp')
        return cls(
            role=_as_text(raw.get('role')),
            content=_content_text(raw.get('content')),
            timestamp=ts if _is_number(ts) else None,
        )


@dataclass
class Session:
    session_key: str
    kind: str = ""
    agent_id: Optional[str] = None
    label: Optional[str] = None
    # lastMessage present at all, even without a usable timestamp
    has_last_message: bool = False
    last_message_at: Optional[float] = None
    messages: List[Message] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw) -> Optional["Session"]:
        """Returns None for entries that are not JSON objects."""
        if not isinstance(raw, dict):
            return None
        last_message = raw.get('lastMessage')
        has_last = isinstance(last_message, dict)
        last_at = last_message.get('timestamp') if has_last else None
        messages = raw.get('messages')
        label = raw.get('label')
        agent_id = raw.get('agentId')
        return cls(
            session_key=_as_text(raw.get('sessionKey')),
            kind=_as_text(raw.get('kind')),
            agent_id=agent_id if isinstance(agent_id, str) else None,
            label=label if isinstance(label, str) else None,
            has_last_message=has_last,
            last_message_at=last_at if _is_number(last_at) else None,
            messages=[Message.from_dict(m) for m in messages] if isinstance(messages, list) else [],
        )


@dataclass
class AgentActivity:
    id: str
    name: str
    status: str
    current_activity: str
    last_updated: str
    session_key: str
    recent_work: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status,
            'currentActivity': self.current_activity,
            'lastUpdated': self.last_updated,
            'sessionKey': self.session_key,
            'recentWork': list(self.recent_work),
        }


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    status: str
    description: str = ""
    progress: float = 0
    hours_spent: float = 0
    estimated_hours_remaining: float = 0
    revenue_model: str = ""
    estimated_monthly_revenue: float = 0
    actual_monthly_revenue: float = 0
    priority: str = "medium"
    blockers: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw) -> Optional["Project"]:
        if not isinstance(raw, dict):
            return None
        return cls(
            id=_as_text(raw.get('id')),
            name=_as_text(raw.get('name')),
            status=_as_text(raw.get('status')),
            description=_as_text(raw.get('description')),
            progress=_as_number(raw.get('progress')),
            hours_spent=_as_number(raw.get('hoursSpent')),
            estimated_hours_remaining=_as_number(raw.get('estimatedHoursRemaining')),
            revenue_model=_as_text(raw.get('revenueModel')),
            estimated_monthly_revenue=_as_number(raw.get('estimatedMonthlyRevenue')),
            actual_monthly_revenue=_as_number(raw.get('actualMonthlyRevenue')),
            priority=_as_text(raw.get('priority'), 'medium'),
            blockers=_as_text_list(raw.get('blockers')),
            next_steps=_as_text_list(raw.get('nextSteps')),
        )


@dataclass
class DashboardMetrics:
    total_hours: float = 0
    average_progress: int = 0
    estimated_total_monthly_revenue: float = 0
    active_project_count: int = 0

    def to_dict(self) -> dict:
        return {
            'totalHours': self.total_hours,
            'averageProgress': self.average_progress,
            'estimatedTotalMonthlyRevenue': self.estimated_total_monthly_revenue,
            'activeProjectCount': self.active_project_count,
        }
