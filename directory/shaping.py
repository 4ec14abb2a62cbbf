"""
Menu shaping helpers.

Pure functions over menu item records already fetched from DynamoDB:
grouping items into display categories and parsing the
comma-separated ``tags`` column.
"""

from django.utils.text import slugify

UNCATEGORIZED = "Uncategorized"
DEFAULT_CATEGORY_SORT_ORDER = 100


def effective_category(item):
    """The item's category, or "Uncategorized" when null/blank."""
    return item.get("category") or UNCATEGORIZED


def category_sort_key(item):
    value = item.get("category_sort_order")
    return DEFAULT_CATEGORY_SORT_ORDER if value is None else value


def group_menu_items(items):
    """
    Group menu items for sequential display.

    Returns ``(categories, groups)``:
      - groups:     {category label: [items sorted by name]}
      - categories: labels ordered by the smallest category_sort_order
                    found among their items, then by label

    Empty input gives ``([], {})``.
    """
    groups = {}
    for item in items:
        groups.setdefault(effective_category(item), []).append(item)

    # sorted() is stable, so same-name items keep their input order
    groups = {
        label: sorted(members, key=lambda i: i.get("name") or "")
        for label, members in groups.items()
    }

    keys = {
        label: min(category_sort_key(i) for i in members)
        for label, members in groups.items()
    }
    categories = sorted(groups, key=lambda label: (keys[label], label))

    return categories, groups


def category_anchor(label):
    """Fragment id used by the sidebar to jump to a category section."""
    return "category-" + (slugify(label) or "other")


def existing_categories(items):
    """Distinct non-empty category labels in first-seen order."""
    seen = []
    for item in items:
        label = item.get("category")
        if label and label not in seen:
            seen.append(label)
    return seen


def parse_tags(tags):
    """
    "Spicy, Sweet, , Vegan " -> ["Spicy", "Sweet", "Vegan"]

    Duplicates are kept as entered.
    """
    if not tags:
        return []
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


def format_tags(tags):
    """Normalised storage form of a tags string, or None when empty."""
    parsed = parse_tags(tags)
    return ", ".join(parsed) if parsed else None
