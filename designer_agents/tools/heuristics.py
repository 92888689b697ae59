"""Design guidance returned by the ``design_get_heuristics`` context tool.

Only the rule groups relevant to the described design are returned, which
keeps the follow-up prompt small.
"""

from typing import Dict, List

HEURISTICS: Dict[str, List[str]] = {
    "structural": [
        "Card Anatomy: Cards contain CardHeader, CardBody and/or CardFooter as direct children. "
        "Never place Heading, Text or Button directly in Card",
        "Primary Actions in Footer: Primary calls to action belong in CardFooter, not CardBody",
        "Headers Contain Identifiers: CardHeader holds the title (Heading) and optional navigation affordances",
    ],
    "spacing": [
        "4px Grid System: All spacing uses multiples of 4px. spacing={1} = 4px, spacing={2} = 8px, spacing={4} = 16px",
        "Tight Proximity (1-2): Use spacing={1-2} for icon+text pairs, button groups or label+value pairs",
        "Normal Spacing (3-4): Use spacing={3-4} for form fields, list items and vertical content stacks",
        "Relaxed Spacing (5-6): Use spacing={5-6} between distinct content sections within a container",
        "Loose Spacing (8+): Use spacing={8} or more for major section breaks",
        "Grid Gap Scales with Columns: gap={4} for 3-column layouts, gap={6} for 2-column layouts",
    ],
    "hierarchy": [
        "Heading Level Hierarchy: level={3} for card titles, level={4} for subsections, level={5} for labels. "
        "Never skip levels",
        "Muted Variant for Metadata: Use variant='muted' on Text for timestamps, descriptions and labels",
        "Primary Action Emphasis: The most important action uses variant='primary', others variant='secondary'",
    ],
    "composition": [
        "Stretch Alignment for Forms: Forms use VStack with alignment='stretch' so fields share one width",
        "Grid Column Math: For N items in a 12-column grid each gets gridColumnSpan={12/N}",
        "VStack for Vertical Flow: VStack is the default container for top-to-bottom content",
        "HStack for Horizontal Grouping: Use HStack for toolbars, breadcrumbs and icon+label pairs",
    ],
    "interaction": [
        "Chevron Indicates Navigation: A chevronRight icon at the trailing edge signals a navigable card",
        "Badge for Contextual Tags: Use Badge next to prices or titles for discounts and status",
    ],
    "typography": [
        "Text vs Heading Distinction: Text for body content and metadata, Heading for titles and values",
    ],
}

_HIERARCHY_WORDS = ("dashboard", "metric", "pricing", "content", "feature", "hero")
_COMPOSITION_WORDS = ("grid", "layout", "form", "vertical", "horizontal", "stack")
_INTERACTION_WORDS = ("navigation", "clickable", "button", "action", "link", "menu")


def get_relevant_heuristics(design_context: str) -> str:
    """Select heuristics for a short description of what is being designed."""
    text = design_context.lower()
    relevant: List[str] = []

    if "card" in text:
        relevant.extend(HEURISTICS["structural"])

    relevant.extend(HEURISTICS["spacing"][:4])
    if "grid" in text or "column" in text:
        relevant.append(HEURISTICS["spacing"][5])

    if any(word in text for word in _HIERARCHY_WORDS):
        relevant.extend(HEURISTICS["hierarchy"])
    if any(word in text for word in _COMPOSITION_WORDS):
        relevant.extend(HEURISTICS["composition"])
    if any(word in text for word in _INTERACTION_WORDS):
        relevant.extend(HEURISTICS["interaction"])

    relevant.extend(HEURISTICS["typography"])
    return format_heuristics(relevant)


def format_heuristics(rules: List[str]) -> str:
    unique = list(dict.fromkeys(rules))
    lines = "\n".join(f"{i}. {rule}" for i, rule in enumerate(unique, start=1))
    return (
        "DESIGN HEURISTICS FOR YOUR TASK:\n\n"
        f"{lines}\n\n"
        "Apply these rules when generating markup."
    )
