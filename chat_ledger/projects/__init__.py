from chat_ledger.projects.assignment import (
    NO_PROJECT,
    NO_PROJECT_ID,
    NO_PROJECT_NAME,
    CrossCheckReport,
    ProjectGroup,
    apply_project_map,
    cross_check,
    group_into_projects,
    project_from_tag,
    resolve_project,
)
from chat_ledger.projects.membership import ProjectMembership, manual_project_id

__all__ = [
    "NO_PROJECT",
    "NO_PROJECT_ID",
    "NO_PROJECT_NAME",
    "CrossCheckReport",
    "ProjectGroup",
    "ProjectMembership",
    "apply_project_map",
    "cross_check",
    "group_into_projects",
    "manual_project_id",
    "project_from_tag",
    "resolve_project",
]
