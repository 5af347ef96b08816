# tracker/data/__init__.py
# 统一暴露数据层接口，方便外部调用

from .models import AgentActivity, DashboardMetrics, Message, Project, Session
from .dao.project_dao import load_projects_document
from .services.activity_service import aggregate_agents, classify_recency, summarize_text
from .services.project_service import compute_dashboard_metrics, derive_metadata

__all__ = [
    'AgentActivity',
    'DashboardMetrics',
    'Message',
    'Project',
    'Session',
    'load_projects_document',
    'aggregate_agents',
    'classify_recency',
    'summarize_text',
    'compute_dashboard_metrics',
    'derive_metadata',
]
