"""Translate list-endpoint query strings into filtered, sorted, paginated queries.

A request such as::

    GET /listings?category=Seeds&price[gte]=100&sort=-price&page=2&limit=5

is parsed into a :class:`ListQuery` holding typed :class:`FilterExpression`
objects, a sort order, an optional field projection and pagination bounds.
Comparison operators come from the ``field[op]`` key syntax only; values are
never scanned for operator tokens.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy.orm import load_only

from agromart.errors import ValidationFailed
from agromart.utils import parse_bool, parse_date, parse_datetime, parse_decimal, parse_int

logger = logging.getLogger(__name__)

RESERVED_KEYS = ("page", "sort", "limit", "fields")
DEFAULT_SORT = "-created_at"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_KEY_PATTERN = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_]*)(?:\[(?P<op>[a-z]+)\])?$")


class Comparison(Enum):
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"

    def apply(self, column, value):
        if self is Comparison.EQ:
            return column == value
        if self is Comparison.NE:
            return column != value
        if self is Comparison.GT:
            return column > value
        if self is Comparison.GTE:
            return column >= value
        if self is Comparison.LT:
            return column < value
        if self is Comparison.LTE:
            return column <= value
        return column.in_(value)


@dataclass(frozen=True)
class FilterExpression:
    field: str
    op: Comparison
    value: object

    def to_clause(self, model):
        return self.op.apply(getattr(model, self.field), self.value)


def _document_value(value):
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_document_value(v) for v in value]
    return value


@dataclass
class ListQuery:
    filters: list = field(default_factory=list)
    sort: list = field(default_factory=list)
    fields: tuple = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    extras: dict = field(default_factory=dict)

    @property
    def skip(self):
        return (self.page - 1) * self.limit

    def filter_document(self):
        """Render the filters in store-native form, e.g. ``{"price": {"$gte": 100}}``."""
        document = {}
        for expression in self.filters:
            value = _document_value(expression.value)
            if expression.op is Comparison.EQ:
                document[expression.field] = value
                continue
            operators = document.get(expression.field)
            if not isinstance(operators, dict):
                operators = {}
                document[expression.field] = operators
            operators[f"${expression.op.value}"] = value
        return document


@dataclass
class Page:
    items: list
    total: int
    page: int
    limit: int
    fields: tuple = None

    @property
    def pages(self):
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self):
        return {
            "success": True,
            "count": len(self.items),
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
            "limit": self.limit,
            "has_next": self.page < self.pages,
            "has_prev": self.page > 1,
            "data": [item.to_dict(fields=self.fields) for item in self.items],
        }


def _positive_int_or_default(raw, default):
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


class QueryBuilder:
    def __init__(self, model, default_limit=DEFAULT_LIMIT, max_limit=100, extra_reserved=()):
        self.model = model
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.reserved = set(RESERVED_KEYS) | set(extra_reserved)
        self.extra_reserved = tuple(extra_reserved)

    @property
    def columns(self):
        return {name for name in self.model.public_fields if name in self.model.__table__.columns}

    @property
    def selectable(self):
        return set(self.model.public_fields) | set(self.model.computed_fields)

    def _coerce(self, name, raw):
        python_type = self.model.__table__.columns[name].type.python_type
        label = name.replace("_", " ").capitalize()
        if python_type is bool:
            return parse_bool(raw, label)
        if python_type is int:
            return parse_int(raw, label)
        if python_type is Decimal:
            return parse_decimal(raw, label)
        if python_type is datetime:
            return parse_datetime(raw, label)
        if python_type is date:
            return parse_date(raw, label)
        return str(raw)

    def _parse_filter(self, key, raw):
        match = _KEY_PATTERN.match(key)
        if not match:
            raise ValidationFailed(f"Invalid filter parameter: {key}")
        name = match.group("field")
        if name not in self.columns:
            raise ValidationFailed(f"Cannot filter on field: {name}")
        try:
            op = Comparison(match.group("op") or "eq")
        except ValueError as exc:
            raise ValidationFailed(f"Unsupported filter operator in: {key}") from exc
        if op is Comparison.IN:
            value = tuple(self._coerce(name, part) for part in str(raw).split(",") if part.strip())
        else:
            value = self._coerce(name, raw)
        return FilterExpression(name, op, value)

    def _parse_sort(self, raw):
        sort = []
        for token in (raw or DEFAULT_SORT).split(","):
            token = token.strip()
            descending = token.startswith("-")
            name = token.lstrip("-+")
            if name in self.columns:
                sort.append((name, descending))
        return sort or [("created_at", True)]

    def _parse_fields(self, raw):
        if not raw:
            return None
        requested = [name.strip() for name in raw.split(",") if name.strip()]
        selected = ["id"] + [name for name in requested if name in self.selectable and name != "id"]
        return tuple(selected)

    def parse(self, args):
        filters = []
        extras = {}
        pairs = args.items(multi=True) if hasattr(args, "getlist") else args.items()
        for key, raw in pairs:
            if key in self.reserved:
                if key in self.extra_reserved:
                    extras[key] = raw
                continue
            filters.append(self._parse_filter(key, raw))

        limit = min(_positive_int_or_default(args.get("limit"), self.default_limit), self.max_limit)
        return ListQuery(
            filters=filters,
            sort=self._parse_sort(args.get("sort")),
            fields=self._parse_fields(args.get("fields")),
            page=_positive_int_or_default(args.get("page"), DEFAULT_PAGE),
            limit=limit,
            extras=extras,
        )

    def apply_filters(self, query, list_query):
        for expression in list_query.filters:
            query = query.filter(expression.to_clause(self.model))
        return query

    def execute(self, list_query, base_query=None):
        query = base_query if base_query is not None else self.model.query
        query = self.apply_filters(query, list_query)
        total = query.order_by(None).count()

        ordering = []
        for name, descending in list_query.sort:
            column = getattr(self.model, name)
            ordering.append(column.desc() if descending else column.asc())
        # Stable order across pages when sort keys tie.
        ordering.append(self.model.id.asc())

        if list_query.fields:
            loadable = [getattr(self.model, name) for name in list_query.fields if name in self.columns]
            query = query.options(load_only(*loadable))

        items = query.order_by(*ordering).offset(list_query.skip).limit(list_query.limit).all()
        logger.debug(
            "%s query filter=%s page=%s limit=%s total=%s",
            self.model.__tablename__,
            list_query.filter_document(),
            list_query.page,
            list_query.limit,
            total,
        )
        return Page(items=items, total=total, page=list_query.page, limit=list_query.limit, fields=list_query.fields)
