"""
Filter collaborator: turns declarative ``FilterCriterion`` lists and a
free-text search term into SQLAlchemy WHERE clauses.

Criteria are ANDed.  Values arrive as strings (they come from a JSON
query parameter) and are coerced to the Python type of the target
column before being bound, so comparisons on dates, numbers and UUIDs
behave as they would for typed input.
"""
import json
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from pydantic import ValidationError
from sqlalchemy import Select, and_, or_

from emr.exceptions import FILTERS_INVALID, ApplicationError
from emr.fields import resolve_column, string_columns
from emr.schemas import FilterCriterion, FilterOperator

_TRUE_WORDS = frozenset({"1", "true", "yes", "y"})
_FALSE_WORDS = frozenset({"0", "false", "no", "n"})

# Pattern operators only apply to text columns.
_TEXT_OPERATORS = frozenset(
    {FilterOperator.CONTAINS, FilterOperator.STARTS_WITH, FilterOperator.ENDS_WITH}
)


def _bad_value(column_key: str) -> ApplicationError:
    return ApplicationError(f"Invalid filter value for '{column_key}'")


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------

def _column_python_type(column):
    try:
        return column.property.columns[0].type.python_type
    except NotImplementedError:
        return None


def _coerce_bool(column_key: str, value):
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise _bad_value(column_key)


def _coerce_number(column_key: str, value, python_type):
    if isinstance(value, bool):
        raise _bad_value(column_key)
    text = str(value).strip().replace(",", ".")
    try:
        if python_type is int:
            return int(text)
        if python_type is float:
            return float(text)
        return Decimal(text)
    except (ValueError, InvalidOperation):
        raise _bad_value(column_key)


def _coerce_date(column_key: str, value):
    text = str(value).strip()
    try:
        if "T" in text or " " in text:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise _bad_value(column_key)


def _coerce_datetime(column_key: str, value):
    text = str(value).strip()
    try:
        if len(text) == 10 and "T" not in text:
            parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
        else:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise _bad_value(column_key)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def coerce_value(column, value):
    """Convert a raw filter value to the Python type of *column*."""
    python_type = _column_python_type(column)
    if python_type is None or python_type is str:
        return str(value)
    if python_type is uuid.UUID:
        try:
            return uuid.UUID(str(value).strip())
        except ValueError:
            raise _bad_value(column.key)
    if python_type is bool:
        return _coerce_bool(column.key, value)
    if python_type in (int, float, Decimal):
        return _coerce_number(column.key, value, python_type)
    if python_type is datetime:
        return _coerce_datetime(column.key, value)
    if python_type is date:
        return _coerce_date(column.key, value)
    return value


# ---------------------------------------------------------------------------
# Clause construction
# ---------------------------------------------------------------------------

def _criterion_clause(model, criterion: FilterCriterion):
    column = resolve_column(model, criterion.property_name)
    if column is None:
        raise ApplicationError(f"Invalid filter property '{criterion.property_name}'")

    op = criterion.operator
    if op is FilterOperator.IS_NULL:
        return column.is_(None)
    if op is FilterOperator.IS_NOT_NULL:
        return column.is_not(None)
    if criterion.value is None:
        raise _bad_value(column.key)

    if op in _TEXT_OPERATORS and column.key not in string_columns(model):
        raise _bad_value(column.key)
    if op is FilterOperator.CONTAINS:
        return column.icontains(str(criterion.value), autoescape=True)
    if op is FilterOperator.STARTS_WITH:
        return column.istartswith(str(criterion.value), autoescape=True)
    if op is FilterOperator.ENDS_WITH:
        return column.iendswith(str(criterion.value), autoescape=True)
    if op is FilterOperator.IN:
        items = [part.strip() for part in str(criterion.value).split(",") if part.strip()]
        return column.in_([coerce_value(column, part) for part in items])

    value = coerce_value(column, criterion.value)
    if op is FilterOperator.EQUAL:
        return column == value
    if op is FilterOperator.NOT_EQUAL:
        return column != value
    if op is FilterOperator.GREATER_THAN:
        return column > value
    if op is FilterOperator.GREATER_THAN_OR_EQUAL:
        return column >= value
    if op is FilterOperator.LESS_THAN:
        return column < value
    return column <= value


def _search_clause(model, search_term: str):
    term = search_term.strip()
    columns = [getattr(model, key) for key in string_columns(model)]
    if not columns:
        return None
    return or_(*(col.icontains(term, autoescape=True) for col in columns))


def apply_filter(
    stmt: Select,
    model,
    filters: list[FilterCriterion] | None = None,
    search_term: str | None = None,
) -> Select:
    """Narrow *stmt* by *filters* (ANDed) and an optional free-text *search_term*."""
    clauses = [_criterion_clause(model, f) for f in filters or []]
    if search_term and search_term.strip():
        search = _search_clause(model, search_term)
        if search is not None:
            clauses.append(search)
    if clauses:
        stmt = stmt.where(and_(*clauses))
    return stmt


def parse_filters(raw: str | None) -> list[FilterCriterion] | None:
    """
    Parse the ``filters`` query parameter, a JSON array of
    ``{"PropertyName", "Operator", "Value"}`` objects.

    Returns None for a missing or blank parameter.
    """
    if raw is None or not raw.strip():
        return None
    try:
        payload = json.loads(raw)
    except ValueError:
        raise ApplicationError(FILTERS_INVALID)
    if not isinstance(payload, list):
        raise ApplicationError(FILTERS_INVALID)
    try:
        return [FilterCriterion.model_validate(item) for item in payload]
    except ValidationError:
        raise ApplicationError(FILTERS_INVALID)
