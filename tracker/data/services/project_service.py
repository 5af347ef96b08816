# -*- coding: utf-8 -*-
import math
from typing import Iterable, List

from tracker.data.models import DashboardMetrics, Project

IN_PROGRESS = 'in-progress'
CRITICAL = 'critical'


def parse_projects(raw_projects) -> List[Project]:
    """Raw JSON list -> Project list; non-object entries are skipped."""
    if not isinstance(raw_projects, list):
        return []
    projects = []
    for raw in raw_projects:
        project = raw if isinstance(raw, Project) else Project.from_dict(raw)
        if project is not None:
            projects.append(project)
    return projects


def _finite(value):
    # sums of very large values can overflow to inf
    try:
        return value if math.isfinite(value) else 0
    except OverflowError:
        return 0


def _mean_half_up(total, count: int) -> int:
    try:
        mean = total / count
    except OverflowError:
        return 0
    if not math.isfinite(mean):
        return 0
    return int(math.floor(mean + 0.5))


def compute_dashboard_metrics(projects: Iterable) -> DashboardMetrics:
    """
    看板头部的汇总指标：总时长、平均进度、预计月收入合计、进行中项目数

    An empty collection yields averageProgress 0 rather than an undefined mean.
    """
    items = parse_projects(list(projects))

    total_hours = sum(p.hours_spent for p in items)
    total_progress = sum(p.progress for p in items)
    revenue = sum(p.estimated_monthly_revenue for p in items)
    active = sum(1 for p in items if p.status == IN_PROGRESS)

    average = _mean_half_up(total_progress, len(items)) if items else 0

    return DashboardMetrics(
        total_hours=_finite(total_hours),
        average_progress=average,
        estimated_total_monthly_revenue=_finite(revenue),
        active_project_count=active,
    )


def derive_metadata(projects: Iterable) -> dict:
    """Metadata block for documents that do not ship one."""
    items = parse_projects(list(projects))
    milestones = []
    for p in items:
        if p.status == IN_PROGRESS and p.next_steps:
            milestones.append({'projectId': p.id, 'step': p.next_steps[0]})

    return {
        'totalHoursSpent': _finite(sum(p.hours_spent for p in items)),
        'totalEstimatedHours': _finite(sum(p.hours_spent + p.estimated_hours_remaining for p in items)),
        'estimatedTotalMonthlyRevenue': _finite(sum(p.estimated_monthly_revenue for p in items)),
        'criticalProjects': [p.id for p in items if p.priority == CRITICAL],
        'nextMilestones': milestones,
    }


def empty_metadata() -> dict:
    return {
        'totalHoursSpent': 0,
        'totalEstimatedHours': 0,
        'estimatedTotalMonthlyRevenue': 0,
        'criticalProjects': [],
        'nextMilestones': [],
    }
