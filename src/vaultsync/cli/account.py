"""Account commands: verify the API token and list projects."""

import asyncio
from pathlib import Path

from ..models import Project
from ..services import ConfigService
from ..todoist import TodoistClient, TodoistClientError
from .output import error, header, info, success


def run_verify(vault_root: Path) -> int:
    """Check that the configured Todoist token is accepted.

    Returns:
        Exit code (0 if the token is valid, 1 otherwise)
    """
    config = ConfigService(vault_root).get_config()
    client = TodoistClient.from_environment(config.api_token)
    if not client.is_configured:
        asyncio.run(client.aclose())
        error("No Todoist API token configured")
        info("Run 'vaultsync config --token TOKEN' or set TODOIST_API_TOKEN")
        return 1

    try:
        valid = asyncio.run(_verify(client))
    except TodoistClientError as e:
        error(f"Could not reach Todoist: {e}")
        return 1

    if valid:
        success("Todoist API token is valid")
        return 0
    error("Todoist rejected the API token")
    return 1


def run_projects(vault_root: Path) -> int:
    """List Todoist projects, marking the Inbox and the default project.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    config = ConfigService(vault_root).get_config()
    client = TodoistClient.from_environment(config.api_token)
    if not client.is_configured:
        asyncio.run(client.aclose())
        error("No Todoist API token configured")
        return 1

    try:
        projects = asyncio.run(_projects(client))
    except TodoistClientError as e:
        error(f"Failed to list projects: {e}")
        return 1

    header("Todoist projects:")
    for project in projects:
        print(_format_project(project, config.project_id))
    return 0


def _format_project(project: Project, default_id: str | None) -> str:
    tags = []
    if project.is_inbox:
        tags.append("inbox")
    if project.id == default_id or (default_id is None and project.is_inbox):
        tags.append("default")
    suffix = f" ({', '.join(tags)})" if tags else ""
    return f"  {project.id}  {project.name}{suffix}"


async def _verify(client: TodoistClient) -> bool:
    async with client:
        return await client.verify_credential()


async def _projects(client: TodoistClient) -> list[Project]:
    async with client:
        return await client.list_projects()
