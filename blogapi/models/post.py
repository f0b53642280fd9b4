# blogapi/models/post.py
"""Field rules shared by the post and category services.

These mirror the schema-level constraints of the store: lengths, the status
enum, defaults for optional fields and the derived excerpt.
"""
from typing import Optional, List, Union, Iterable

TITLE_MAX_LENGTH = 200
EXCERPT_MAX_LENGTH = 300
EXCERPT_SOURCE_LENGTH = 200
EXCERPT_SUFFIX = '...'

DEFAULT_AUTHOR = 'Anonymous'
DEFAULT_CATEGORY = 'General'
DEFAULT_STATUS = 'draft'
POST_STATUSES = ('draft', 'published')
PUBLISHED = 'published'

CATEGORY_NAME_MAX_LENGTH = 50
CATEGORY_DESCRIPTION_MAX_LENGTH = 200


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim a text field; blank values count as not supplied."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def derive_excerpt(content: str) -> str:
    """First 200 characters of the content, with '...' when it was cut."""
    if len(content) > EXCERPT_SOURCE_LENGTH:
        return content[:EXCERPT_SOURCE_LENGTH] + EXCERPT_SUFFIX
    return content


def parse_tags(value: Union[str, Iterable[str], None], default: Optional[List[str]] = None) -> List[str]:
    """Accept tags as "a, b, c" or as a list.

    Entries are trimmed and blank entries dropped; order and duplicates are
    kept. ``None`` and the empty string fall back to ``default``.
    """
    if value is None or value == '':
        return list(default) if default else []
    if isinstance(value, str):
        items = value.split(',')
    else:
        items = value
    return [tag.strip() for tag in items if tag and tag.strip()]


def check_post_constraints(title: str, excerpt: str, status: str) -> List[str]:
    """Return the list of constraint violations for a post record."""
    errors = []
    if len(title) > TITLE_MAX_LENGTH:
        errors.append(f'Title cannot exceed {TITLE_MAX_LENGTH} characters')
    if len(excerpt) > EXCERPT_MAX_LENGTH:
        errors.append(f'Excerpt cannot exceed {EXCERPT_MAX_LENGTH} characters')
    if status not in POST_STATUSES:
        errors.append(f"Status must be one of: {', '.join(POST_STATUSES)} (got '{status}')")
    return errors


def check_category_constraints(name: str, description: str) -> List[str]:
    errors = []
    if len(name) > CATEGORY_NAME_MAX_LENGTH:
        errors.append(f'Category name cannot exceed {CATEGORY_NAME_MAX_LENGTH} characters')
    if len(description) > CATEGORY_DESCRIPTION_MAX_LENGTH:
        errors.append(f'Description cannot exceed {CATEGORY_DESCRIPTION_MAX_LENGTH} characters')
    return errors
