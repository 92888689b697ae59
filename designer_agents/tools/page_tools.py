"""Page management tools."""

import re
from typing import Any, Dict, Optional, Union

from designer_agents.tools.context import Page, ToolContext
from designer_agents.tools.registry import AgentTool, ToolResult


def slugify_route(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"/{slug}" if slug else "/"


def find_page(context: ToolContext, page_id: Optional[str] = None, name: Optional[str] = None) -> Optional[Page]:
    """Find a page by id, or by case-insensitive name."""
    for page in context.pages:
        if page_id and page.id == page_id:
            return page
    if name:
        wanted = name.strip().lower()
        for page in context.pages:
            if page.name.lower() == wanted:
                return page
    return None


def create_page(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    name = params.get("name") or ""
    if not isinstance(name, str):
        return ToolResult.bad_argument("name", "a string", name)
    name = name.strip()
    if not name:
        return ToolResult.fail("A page name is required", error="Missing name")

    route = params.get("route") or slugify_route(name)
    if not isinstance(route, str):
        return ToolResult.bad_argument("route", "a string", route)
    page_id = context.create_page(name, route)
    context.set_current_page(page_id)

    return ToolResult.ok(
        f'Created new page "{name}" and switched to it',
        page_id=page_id,
        name=name,
        route=route,
    )


def _target_page(params: Dict[str, Any], context: ToolContext) -> Union[Page, ToolResult]:
    name = params.get("name")
    if name is not None and not isinstance(name, str):
        return ToolResult.bad_argument("name", "a string", name)

    page = find_page(context, params.get("page_id"), name)
    if page is None:
        target = params.get("page_id") or name
        return ToolResult.fail(f'Page "{target}" not found', error="Page not found")
    return page


def switch_page(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    page = _target_page(params, context)
    if isinstance(page, ToolResult):
        return page

    context.set_current_page(page.id)
    return ToolResult.ok(f'Switched to page "{page.name}"', page_id=page.id, page_name=page.name)


def delete_page(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    page = _target_page(params, context)
    if isinstance(page, ToolResult):
        return page

    if len(context.pages) <= 1:
        return ToolResult.fail("Cannot delete the only page", error="Last page")

    context.delete_page(page.id)
    return ToolResult.ok(f'Deleted page "{page.name}"', page_id=page.id, page_name=page.name)


_PAGE_REF = {
    "page_id": {"type": "string", "description": "ID of the page"},
    "name": {"type": "string", "description": "Name of the page (used when the ID is unknown)"},
}

PAGE_TOOLS = [
    AgentTool(
        name="create_page",
        description="Create a new page in the application and automatically switch to it",
        function=create_page,
        parameters={
            "name": {"type": "string", "description": "Name of the new page"},
            "route": {"type": "string", "description": "URL route; derived from the name when omitted"},
        },
        required=["name"],
    ),
    AgentTool(
        name="switch_page",
        description="Switch to an existing page by ID or name",
        function=switch_page,
        parameters=dict(_PAGE_REF),
    ),
    AgentTool(
        name="delete_page",
        description="Delete a page by ID or name. The last remaining page cannot be deleted",
        function=delete_page,
        parameters=dict(_PAGE_REF),
    ),
]
