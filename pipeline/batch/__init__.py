"""pipeline.batch

Multi-project runs: discover HTML projects, run each one, summarize.
"""

from .discovery import discover_projects, entry_document
from .model import Project, ProjectOutcome, project_status
from .runner import BatchResult, BatchRunner

__all__ = [
    "BatchResult",
    "BatchRunner",
    "Project",
    "ProjectOutcome",
    "discover_projects",
    "entry_document",
    "project_status",
]
