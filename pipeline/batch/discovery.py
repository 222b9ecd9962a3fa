"""pipeline.batch.discovery

Find HTML projects under an input directory.

Rules
-----
- The input directory itself holds ``*.html``: it is one project, named
  ``project``.
- Otherwise every direct subdirectory holding ``*.html`` is a project,
  named after the subdirectory, sorted by name.
- Nothing found: the bundled default test project, if it exists.

Entry document per project: ``book.html``, then ``index.html``, then the
first ``*.html`` alphabetically.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pipeline.core import DEFAULT_TEST_PROJECT, HTML_ENTRY_PREFERENCE

from .model import Project

ROOT_PROJECT_NAME = "project"


def _html_files(directory: Path) -> List[Path]:
    return sorted(p for p in directory.glob("*.html") if p.is_file())


def entry_document(directory: Path) -> Optional[Path]:
    directory = Path(directory)
    for name in HTML_ENTRY_PREFERENCE:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    files = _html_files(directory)
    return files[0] if files else None


def discover_projects(input_dir: Path, *, default_project: Optional[Path] = DEFAULT_TEST_PROJECT) -> List[Project]:
    input_dir = Path(input_dir)
    projects: List[Project] = []

    if input_dir.is_dir():
        root_entry = entry_document(input_dir)
        if root_entry is not None:
            return [Project(ROOT_PROJECT_NAME, root_entry)]

        for sub in sorted(p for p in input_dir.iterdir() if p.is_dir()):
            entry = entry_document(sub)
            if entry is not None:
                projects.append(Project(sub.name, entry))

    if not projects and default_project is not None:
        entry = entry_document(default_project) if Path(default_project).is_dir() else None
        if entry is not None:
            print(f"⚠️  No projects found in {input_dir}; using bundled test project {default_project.name}")
            projects.append(Project(Path(default_project).name, entry))

    return projects
