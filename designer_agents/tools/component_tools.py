"""Component creation and modification tools.

Lookups that fail or match more than one component return a failed
``ToolResult`` whose message tells the model how to be more specific.
"""

import copy
from typing import Any, Dict, List, Optional, Union

from designer_agents.tools.context import ComponentNode, ToolContext, content_preview, find_parent, walk_tree
from designer_agents.tools.heuristics import get_relevant_heuristics
from designer_agents.tools.markup import MarkupError, generate_node_id, parse_markup
from designer_agents.tools.registry import AgentTool, ToolResult

TABLE_TEMPLATES: Dict[str, Dict[str, List[Dict[str, Any]]]] = {
    "users": {
        "columns": [
            {"id": "name", "label": "Name"},
            {"id": "email", "label": "Email"},
            {"id": "role", "label": "Role"},
            {"id": "status", "label": "Status"},
        ],
        "sample_data": [
            {"id": 1, "name": "Sarah Johnson", "email": "sarah@example.com", "role": "Admin", "status": "Active"},
            {"id": 2, "name": "Michael Chen", "email": "michael@example.com", "role": "Editor", "status": "Active"},
            {"id": 3, "name": "Emily Davis", "email": "emily@example.com", "role": "Member", "status": "Active"},
        ],
    },
    "orders": {
        "columns": [
            {"id": "orderId", "label": "Order ID"},
            {"id": "customer", "label": "Customer"},
            {"id": "total", "label": "Total"},
            {"id": "status", "label": "Status"},
        ],
        "sample_data": [
            {"id": 1, "orderId": "#ORD-1001", "customer": "John Smith", "total": "$245.00", "status": "Completed"},
            {"id": 2, "orderId": "#ORD-1002", "customer": "Emma Wilson", "total": "$189.50", "status": "Processing"},
            {"id": 3, "orderId": "#ORD-1003", "customer": "Robert Brown", "total": "$320.00", "status": "Shipped"},
        ],
    },
    "products": {
        "columns": [
            {"id": "name", "label": "Product Name"},
            {"id": "sku", "label": "SKU"},
            {"id": "price", "label": "Price"},
            {"id": "stock", "label": "Stock"},
        ],
        "sample_data": [
            {"id": 1, "name": "Wireless Headphones", "sku": "WH-001", "price": "$89.99", "stock": 45},
            {"id": 2, "name": "Smart Watch", "sku": "SW-002", "price": "$199.99", "stock": 23},
            {"id": 3, "name": "Laptop Stand", "sku": "LS-003", "price": "$49.99", "stock": 67},
        ],
    },
    "tasks": {
        "columns": [
            {"id": "task", "label": "Task"},
            {"id": "assignee", "label": "Assignee"},
            {"id": "priority", "label": "Priority"},
            {"id": "status", "label": "Status"},
        ],
        "sample_data": [
            {"id": 1, "task": "Update homepage design", "assignee": "Sarah J.", "priority": "High",
             "status": "In Progress"},
            {"id": 2, "task": "Fix login bug", "assignee": "Michael C.", "priority": "Critical",
             "status": "In Progress"},
            {"id": 3, "task": "Write API documentation", "assignee": "Emily D.", "priority": "Medium",
             "status": "To Do"},
        ],
    },
    "invoices": {
        "columns": [
            {"id": "invoice", "label": "Invoice #"},
            {"id": "client", "label": "Client"},
            {"id": "amount", "label": "Amount"},
            {"id": "status", "label": "Status"},
        ],
        "sample_data": [
            {"id": 1, "invoice": "INV-2025-001", "client": "Acme Corp", "amount": "$2,450.00", "status": "Paid"},
            {"id": 2, "invoice": "INV-2025-002", "client": "TechStart Inc", "amount": "$1,890.00",
             "status": "Pending"},
            {"id": 3, "invoice": "INV-2025-003", "client": "Global Industries", "amount": "$5,200.00",
             "status": "Paid"},
        ],
    },
}

TABLE_VIEW_TYPES = ("table", "grid", "list")


# =============================================================================
# Creation
# =============================================================================

def build_from_markup(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    markup = params.get("markup") or ""
    parent_id = params.get("parent_id")
    if not isinstance(markup, str):
        return ToolResult.bad_argument("markup", "a string", markup)

    if parent_id and context.get_node_by_id(parent_id) is None:
        return ToolResult.fail(f'Parent component "{parent_id}" not found', error="Parent not found")

    try:
        nodes = parse_markup(markup)
    except MarkupError as e:
        return ToolResult.fail(f"Invalid markup: {e}", error=e.reason, line=e.line, column=e.column)

    for node in nodes:
        context.add_component(node, parent_id)

    component_ids = [node.id for node in nodes]
    total = sum(1 for _ in walk_tree(nodes))
    return ToolResult.ok(
        f"Built {total} component(s) from markup",
        component_ids=component_ids,
        component_id=component_ids[0],
        count=total,
    )


def table_create(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    template = params.get("template") or ""
    if not isinstance(template, str):
        return ToolResult.bad_argument("template", "a string", template)
    template = template.strip().lower()
    view_type = params.get("view_type") or "table"
    items_per_page = params.get("items_per_page") or 10
    parent_id = params.get("parent_id")

    if view_type not in TABLE_VIEW_TYPES:
        return ToolResult.fail(
            f'Unknown view type "{view_type}". Use one of: {", ".join(TABLE_VIEW_TYPES)}',
            error="Invalid view type",
        )

    if template == "custom":
        columns = params.get("columns")
        data = params.get("data")
        if not columns or data is None:
            return ToolResult.fail(
                'Custom template requires both "columns" and "data" parameters',
                error="Missing parameters",
            )
        if not isinstance(columns, list):
            return ToolResult.bad_argument("columns", "a list", columns)
        if not isinstance(data, list):
            return ToolResult.bad_argument("data", "a list", data)
    elif template in TABLE_TEMPLATES:
        columns = TABLE_TEMPLATES[template]["columns"]
        data = TABLE_TEMPLATES[template]["sample_data"]
    else:
        available = ", ".join(TABLE_TEMPLATES)
        return ToolResult.fail(
            f'Unknown template "{template}". Available: {available}, custom',
            error="Invalid template",
        )

    node = ComponentNode(
        id=generate_node_id(),
        type="DataViews",
        props={
            "dataSource": "custom",
            "data": copy.deepcopy(data),
            "columns": copy.deepcopy(columns),
            "viewType": view_type,
            "itemsPerPage": items_per_page,
        },
    )
    context.add_component(node, parent_id)

    return ToolResult.ok(
        f"Created {template} table with {len(data)} rows and {len(columns)} columns",
        component_id=node.id,
        template=template,
        rows=len(data),
        columns=len(columns),
    )


def design_get_heuristics(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    design_context = params.get("context")
    if not design_context or not isinstance(design_context, str):
        return ToolResult.fail("Please provide a context description of what you're designing")
    return ToolResult.ok(get_relevant_heuristics(design_context))


# =============================================================================
# Selection
# =============================================================================

def _selector_text(selector: Dict[str, Any], key: str) -> str:
    value = selector.get(key)
    return "" if value is None else str(value).lower()


def search_components(selector: Dict[str, Any], context: ToolContext) -> List[ComponentNode]:
    """Find nodes matching a selector of {type, containing, in, index}."""
    wanted_type = _selector_text(selector, "type")
    containing = _selector_text(selector, "containing")
    inside = _selector_text(selector, "in")
    matches: List[ComponentNode] = []

    def visit(nodes: List[ComponentNode], parent_label: str) -> None:
        for node in nodes:
            is_match = True
            if wanted_type and node.type.lower() != wanted_type:
                is_match = False
            if is_match and containing and containing not in content_preview(node, limit=500).lower():
                is_match = False
            if is_match and inside:
                is_match = (
                    inside in parent_label.lower()
                    or inside in node.name.lower()
                    or inside in node.type.lower()
                )
            if is_match:
                matches.append(node)
            visit(node.children, node.name or node.type)

    visit(context.tree, "")

    index = selector.get("index")
    if isinstance(index, int) and 0 <= index < len(matches):
        return [matches[index]]
    return matches


def describe(node: ComponentNode) -> str:
    preview = content_preview(node)
    return f'{node.type} "{preview}"' if preview else node.type


def _resolve_one(params: Dict[str, Any], context: ToolContext, verb: str) -> Union[ComponentNode, ToolResult]:
    component_id = params.get("component_id")
    selector = params.get("selector")

    if component_id:
        node = context.get_node_by_id(component_id)
        if node is None:
            return ToolResult.fail(f'Component "{component_id}" not found', error="Component not found")
        return node

    if not selector:
        return ToolResult.fail(
            f"Please provide either component_id or selector to identify the component to {verb}",
            error="Missing component identifier",
        )
    if not isinstance(selector, dict):
        return ToolResult.bad_argument("selector", "an object", selector)

    matches = search_components(selector, context)
    if not matches:
        return ToolResult.fail("No components found matching criteria", error="No matches found")
    if len(matches) > 1:
        options = "\n".join(f"{i}. {describe(n)} ({n.id})" for i, n in enumerate(matches, start=1))
        return ToolResult.fail(
            f"Found {len(matches)} components matching your criteria. Which one?\n\n{options}\n\n"
            "Please be more specific, or call again with the specific component_id.",
            error="Ambiguous selector",
            options=[n.id for n in matches],
        )
    return matches[0]


# =============================================================================
# Modification
# =============================================================================

def component_update(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    text = params.get("text")
    props = params.get("props") or {}
    if not isinstance(props, dict):
        return ToolResult.bad_argument("props", "an object", props)
    if text is not None and not isinstance(text, str):
        return ToolResult.bad_argument("text", "a string", text)

    node = _resolve_one(params, context, "update")
    if isinstance(node, ToolResult):
        return node

    if not text and not props:
        return ToolResult.fail(
            'No updates provided. Please specify either "text" or "props" to update.',
            error="No updates provided",
        )

    changes: Dict[str, Any] = dict(props)
    if text:
        # Buttons keep their label in "text", everything else in "children"
        changes["text" if node.type == "Button" else "children"] = text

    context.update_component_props(node.id, changes)
    return ToolResult.ok(
        f"Updated {describe(node)}: {', '.join(changes)}",
        component_id=node.id,
        component_type=node.type,
        changes=changes,
    )


def component_delete(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    if params.get("component_id"):
        node = context.get_node_by_id(params["component_id"])
        if node is None:
            return ToolResult.fail(f'Component "{params["component_id"]}" not found', error="Component not found")
        targets = [node]
    elif params.get("selector"):
        if not isinstance(params["selector"], dict):
            return ToolResult.bad_argument("selector", "an object", params["selector"])
        targets = search_components(params["selector"], context)
        if not targets:
            return ToolResult.fail("No components found matching criteria", error="No matches found")
        if len(targets) > 1 and not params.get("confirm"):
            listing = "\n".join(f"{i}. {describe(n)}" for i, n in enumerate(targets, start=1))
            return ToolResult.fail(
                f"Found {len(targets)} components to delete. Set confirm=true to proceed.\n\n{listing}",
                error="Confirmation required",
                count=len(targets),
            )
    else:
        return ToolResult.fail("Please provide either component_id or selector", error="Missing component identifier")

    for node in targets:
        context.remove_component(node.id)

    ids = [node.id for node in targets]
    return ToolResult.ok(
        f"Deleted {len(ids)} component(s)",
        component_ids=ids,
        component_id=ids[0],
        component_type=targets[0].type,
        count=len(ids),
    )


def component_move(params: Dict[str, Any], context: ToolContext) -> ToolResult:
    node = _resolve_one(params, context, "move")
    if isinstance(node, ToolResult):
        return node

    target = params.get("to") or {}
    if not isinstance(target, dict):
        return ToolResult.bad_argument("to", "an object", target)
    parent_id: Optional[str] = target.get("parent_id")
    if parent_id is not None and not isinstance(parent_id, str):
        return ToolResult.bad_argument("to.parent_id", "a string", parent_id)
    if parent_id is not None and context.get_node_by_id(parent_id) is None:
        return ToolResult.fail(f'Target parent "{parent_id}" not found', error="Target parent not found")
    if parent_id == node.id or (parent_id and any(n.id == parent_id for n in walk_tree(node.children))):
        return ToolResult.fail("Cannot move a component inside itself", error="Invalid target")

    position = target.get("position", "end")
    if isinstance(position, int) and not isinstance(position, bool):
        index: Optional[int] = position
    elif position == "start":
        index = 0
    else:
        index = None

    old_parent = find_parent(context.tree, node.id)
    context.move_component(node.id, parent_id, index)

    return ToolResult.ok(
        f"Moved {describe(node)} to {parent_id or 'page root'}",
        component_id=node.id,
        component_type=node.type,
        from_parent_id=old_parent.id if old_parent else None,
        to_parent_id=parent_id,
        position=position,
    )


_SELECTOR = {
    "type": "object",
    "description": 'Search criteria: {"type": "Button", "containing": "Sign Up", "in": "hero", "index": 0}',
}

COMPONENT_TOOLS = [
    AgentTool(
        name="build_from_markup",
        description=(
            "Create components from JSX-like markup, e.g. "
            '<Card><CardHeader><Heading level={3}>Title</Heading></CardHeader></Card>'
        ),
        function=build_from_markup,
        parameters={
            "markup": {"type": "string", "description": "JSX-like markup for the components"},
            "parent_id": {"type": "string", "description": "Parent component ID; defaults to the page root"},
        },
        required=["markup"],
    ),
    AgentTool(
        name="table_create",
        description=(
            "Create a data table (DataViews) in one call. "
            f"Templates: {', '.join(TABLE_TEMPLATES)}, or custom with columns and data"
        ),
        function=table_create,
        parameters={
            "template": {"type": "string", "description": "Table template name or 'custom'"},
            "columns": {"type": "array", "description": "Array of {id, label} (custom template only)"},
            "data": {"type": "array", "description": "Array of row objects (custom template only)"},
            "parent_id": {"type": "string", "description": "Parent component ID"},
            "view_type": {"type": "string", "description": "table (default), grid or list"},
            "items_per_page": {"type": "integer", "description": "Rows per page (default 10)"},
        },
        required=["template"],
    ),
    AgentTool(
        name="design_get_heuristics",
        description=(
            "Get design heuristics before generating markup when you need guidance on spacing, "
            "hierarchy or composition"
        ),
        function=design_get_heuristics,
        category="context",
        parameters={
            "context": {"type": "string", "description": 'What you are designing, e.g. "pricing cards in grid"'},
        },
        required=["context"],
    ),
    AgentTool(
        name="component_update",
        description="Update component text or props, selecting it by ID or selector",
        function=component_update,
        parameters={
            "component_id": {"type": "string", "description": "Component ID, if known"},
            "selector": _SELECTOR,
            "text": {"type": "string", "description": "New text content"},
            "props": {"type": "object", "description": "Props to update"},
        },
    ),
    AgentTool(
        name="component_delete",
        description="Delete component(s) by ID or selector. Deleting several requires confirm=true",
        function=component_delete,
        parameters={
            "component_id": {"type": "string", "description": "Component ID to delete"},
            "selector": _SELECTOR,
            "confirm": {"type": "boolean", "description": "Required for deleting more than one component"},
        },
    ),
    AgentTool(
        name="component_move",
        description="Move a component to a new parent or position",
        function=component_move,
        parameters={
            "component_id": {"type": "string", "description": "Component ID to move"},
            "selector": _SELECTOR,
            "to": {
                "type": "object",
                "description": '{"parent_id": "...", "position": "start" | "end" | number}',
            },
        },
        required=["to"],
    ),
]
