# blogapi/query_builder.py
"""Translate a listing filter into a store predicate and sort specification.

Building a query needs no store: ``build_query`` is pure, and ``render_where``
/ ``render_order_by`` turn the result into SQL for a given dialect.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple, List, Union, Any

from blogapi.config import DEFAULT_PAGE, DEFAULT_LIMIT
from blogapi.database import POSTGRES, POSTGRES_FOLD, SQLITE_FOLD

logger = logging.getLogger(__name__)

ALL_CATEGORIES = 'all'
DEFAULT_SORT_BY = 'createdAt'
DEFAULT_SORT_ORDER = 'desc'

# API sort key -> column
SORT_COLUMNS = {
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
    'title': 'title',
    'author': 'author',
    'category': 'category',
    'status': 'status',
    'viewCount': 'view_count',
}

LIKE_ESCAPE = '\\'


@dataclass(frozen=True)
class ListFilter:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    category: Optional[str] = None
    search: Optional[str] = None
    status: Optional[str] = 'published'
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = DEFAULT_SORT_ORDER

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Equals:
    column: str
    value: str


@dataclass(frozen=True)
class MatchesText:
    """Case-insensitive substring match on title, content or any tag."""
    text: str
    columns: Tuple[str, ...] = ('title', 'content')
    include_tags: bool = True


Condition = Union[Equals, MatchesText]


@dataclass(frozen=True)
class SortSpec:
    column: str
    descending: bool


@dataclass(frozen=True)
class PostQuery:
    conditions: Tuple[Condition, ...] = ()
    sort: SortSpec = SortSpec(SORT_COLUMNS[DEFAULT_SORT_BY], True)


def build_query(list_filter: ListFilter) -> PostQuery:
    conditions: List[Condition] = []

    if list_filter.status:
        conditions.append(Equals('status', list_filter.status))

    if list_filter.category and list_filter.category != ALL_CATEGORIES:
        conditions.append(Equals('category', list_filter.category))

    search = (list_filter.search or '').strip()
    if search:
        conditions.append(MatchesText(search))

    column = SORT_COLUMNS.get(list_filter.sort_by)
    if column is None:
        logger.debug(f"Unknown sort key '{list_filter.sort_by}', falling back to {DEFAULT_SORT_BY}")
        column = SORT_COLUMNS[DEFAULT_SORT_BY]

    return PostQuery(
        conditions=tuple(conditions),
        sort=SortSpec(column, list_filter.sort_order == 'desc'),
    )


def like_pattern(text: str) -> str:
    """Wrap text for a literal substring LIKE match."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace('%', LIKE_ESCAPE + '%')
        .replace('_', LIKE_ESCAPE + '_')
    )
    return f'%{escaped}%'


def _fold(dialect: str) -> str:
    return POSTGRES_FOLD if dialect == POSTGRES else SQLITE_FOLD


def _like_sql(expression: str, dialect: str) -> str:
    fold = _fold(dialect)
    return f"{fold}({expression}) LIKE {fold}(?) ESCAPE '{LIKE_ESCAPE}'"


def _tag_match_sql(dialect: str) -> str:
    if dialect == POSTGRES:
        return (
            "EXISTS (SELECT 1 FROM json_array_elements_text(posts.tags::json) AS tag(value) "
            f"WHERE {_like_sql('tag.value', dialect)})"
        )
    return (
        "EXISTS (SELECT 1 FROM json_each(posts.tags) "
        f"WHERE {_like_sql('json_each.value', dialect)})"
    )


def render_where(query: PostQuery, dialect: str) -> Tuple[str, List[Any]]:
    """Render the predicate as a WHERE clause with ``?`` placeholders."""
    clauses = []
    params: List[Any] = []

    for condition in query.conditions:
        if isinstance(condition, Equals):
            clauses.append(f"{condition.column} = ?")
            params.append(condition.value)
        elif isinstance(condition, MatchesText):
            pattern = like_pattern(condition.text)
            alternatives = []
            for column in condition.columns:
                alternatives.append(_like_sql(column, dialect))
                params.append(pattern)
            if condition.include_tags:
                alternatives.append(_tag_match_sql(dialect))
                params.append(pattern)
            clauses.append('(' + ' OR '.join(alternatives) + ')')

    if not clauses:
        return '', params
    return 'WHERE ' + ' AND '.join(clauses), params


def render_order_by(sort: SortSpec) -> str:
    direction = 'DESC' if sort.descending else 'ASC'
    # id breaks ties so that pages never overlap
    return f"ORDER BY {sort.column} {direction}, id {direction}"
