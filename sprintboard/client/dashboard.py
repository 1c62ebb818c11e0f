"""Dashboard numbers: progress buckets and filtered counts over sprint cards."""
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from sprintboard.client.projection import Card, Sprint

ALL = "all"


@dataclass
class DashboardFilters:
    search_term: str = ""
    priority: str = ALL
    assignee: str = ALL
    module: str = ALL
    target: str = ALL


@dataclass
class DashboardStats:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    todo: int = 0


def progress_bucket(progress: Optional[int]) -> str:
    """100 is complete, anything above 0 is in progress, 0 or missing is todo."""
    if progress == 100:
        return "completed"
    if progress:
        return "in_progress"
    return "todo"


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle.lower() in value.lower()


def matches(card: Card, filters: DashboardFilters) -> bool:
    term = filters.search_term
    if term and not (
        _contains(card.title, term) or _contains(card.task_id, term) or _contains(card.description, term)
    ):
        return False
    if filters.priority != ALL and card.priority != filters.priority:
        return False
    if filters.assignee != ALL and not _contains(card.assignee, filters.assignee):
        return False
    if filters.module != ALL and not _contains(card.module, filters.module):
        return False
    if filters.target != ALL and not _contains(card.target, filters.target):
        return False
    return True


def compute_stats(
    sprints: Sequence[Sprint],
    current_sprint: Optional[Sprint] = None,
    filters: Optional[DashboardFilters] = None,
) -> DashboardStats:
    """Count matching sprint tasks by progress bucket.

    Scope is the selected sprint (looked up by id, so a stale selection
    counts the latest copy) or every sprint when nothing is selected.
    """
    filters = filters or DashboardFilters()
    if current_sprint is not None:
        scope = [s for s in sprints if s.id == current_sprint.id]
    else:
        scope = list(sprints)

    stats = DashboardStats()
    for sprint in scope:
        for card in sprint.tasks:
            if not matches(card, filters):
                continue
            stats.total += 1
            bucket = progress_bucket(card.progress)
            setattr(stats, bucket, getattr(stats, bucket) + 1)
    return stats


def sprint_progress(sprint: Sprint) -> Tuple[int, int]:
    """(completed, total) tasks of one sprint."""
    completed = sum(1 for t in sprint.tasks if progress_bucket(t.progress) == "completed")
    return completed, len(sprint.tasks)
