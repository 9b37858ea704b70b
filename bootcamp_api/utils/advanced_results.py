# bootcamp_api/utils/advanced_results.py
# Generic list helper shared by the list routes: filtering with comparison
# operators, field selection, sorting, pagination and relation population.
#
#   GET /api/v1/bootcamps?averageCost[lte]=10000&select=name,averageCost&sort=-name&page=2&limit=5

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from pymongo import ASCENDING, DESCENDING

from bootcamp_api.core.exceptions import BadRequestError
from bootcamp_api.database import Database
from bootcamp_api.utils.documents import serialize

RESERVED_PARAMS = ("select", "sort", "page", "limit")
DEFAULT_SORT = [("createdAt", DESCENDING)]
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25

_OPERATOR_KEY = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<op>gt|gte|lt|lte|in)\]$")
# field name -> cast applied to its query-string values
FieldTypes = Mapping[str, Callable[[str], Any]]


@dataclass(frozen=True)
class Populate:
    """
    Relation expansion for a list or single-document response.

    Forward (``reverse=False``): replace ``doc[field]`` (an id) with the
    referenced document from ``collection``.
    Reverse (``reverse=True``): set ``doc[field]`` to the list of documents in
    ``collection`` whose ``foreign_field`` points at ``doc["_id"]``.
    """

    field: str
    collection: str
    select: tuple[str, ...] | None = None
    reverse: bool = False
    foreign_field: str | None = None


def cast_value(field: str, raw: str, field_types: FieldTypes) -> Any:
    """
    Cast a query-string value to the stored type of ``field``.

    Fields without an entry stay strings. Malformed ids raise InvalidId
    (404, like any bad id); other bad values are a 400.
    """
    caster = field_types.get(field)
    if caster is None:
        return raw
    try:
        return caster(raw)
    except (ValueError, TypeError) as e:
        raise BadRequestError(f"Invalid value for {field}: {raw}") from e


def build_filter(params: Mapping[str, str], field_types: FieldTypes | None = None) -> dict:
    """Turn non-reserved query parameters into a MongoDB filter document."""
    field_types = field_types or {}
    query: dict[str, Any] = {}
    for key, raw in params.items():
        if key in RESERVED_PARAMS or key.startswith("$"):
            continue
        match = _OPERATOR_KEY.match(key)
        if not match:
            query[key] = cast_value(key, raw, field_types)
            continue
        field, op = match.group("field"), match.group("op")
        if op == "in":
            value = [cast_value(field, v.strip(), field_types) for v in raw.split(",") if v.strip()]
        else:
            value = cast_value(field, raw, field_types)
        condition = query.get(field)
        if not isinstance(condition, dict):
            condition = {}
        condition[f"${op}"] = value
        query[field] = condition
    return query


def parse_projection(select: str | None) -> dict | None:
    if not select:
        return None
    fields = [f.strip() for f in select.split(",") if f.strip()]
    return {f: 1 for f in fields} or None


def parse_sort(sort: str | None) -> list[tuple[str, int]]:
    if not sort:
        return list(DEFAULT_SORT)
    spec = []
    for field in (f.strip() for f in sort.split(",")):
        if not field:
            continue
        if field.startswith("-"):
            spec.append((field[1:], DESCENDING))
        else:
            spec.append((field.lstrip("+"), ASCENDING))
    return spec or list(DEFAULT_SORT)


def _positive_int(raw: str | None, default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value > 0 else default


def parse_pagination(params: Mapping[str, str]) -> tuple[int, int]:
    return (
        _positive_int(params.get("page"), DEFAULT_PAGE),
        _positive_int(params.get("limit"), DEFAULT_LIMIT),
    )


def build_pagination(page: int, limit: int, total: int) -> dict:
    pagination = {}
    start_index = (page - 1) * limit
    end_index = page * limit
    if end_index < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if start_index > 0:
        pagination["prev"] = {"page": page - 1, "limit": limit}
    return pagination


async def populate_documents(db: Database, docs: list[dict], populate: Populate) -> list[dict]:
    projection = None
    if populate.select:
        projection = {f: 1 for f in populate.select}
    collection = db.db[populate.collection]

    if populate.reverse:
        ids = [d["_id"] for d in docs if "_id" in d]
        if not ids:
            return docs
        foreign = populate.foreign_field
        related = await collection.find({foreign: {"$in": ids}}, projection).to_list(length=None)
        grouped: dict[Any, list] = {}
        for item in related:
            grouped.setdefault(item.get(foreign), []).append(item)
        for d in docs:
            d[populate.field] = grouped.get(d.get("_id"), [])
        return docs

    ids = list({d[populate.field] for d in docs if d.get(populate.field) is not None})
    if not ids:
        return docs
    related = await collection.find({"_id": {"$in": ids}}, projection).to_list(length=None)
    by_id = {item["_id"]: item for item in related}
    for d in docs:
        ref = d.get(populate.field)
        if ref is not None:
            d[populate.field] = by_id.get(ref)
    return docs


async def advanced_results(
    db: Database,
    collection_name: str,
    params: Mapping[str, str],
    populate: Populate | None = None,
    field_types: FieldTypes | None = None,
) -> dict:
    """
    Run a filtered, sorted, projected and paginated query.

    ``field_types`` casts filter values to the collection's stored types.

    Returns the response body list routes send as-is:
    ``{"success", "count", "pagination", "data"}``.
    """
    collection = db.db[collection_name]
    query = build_filter(params, field_types)
    projection = parse_projection(params.get("select"))
    sort = parse_sort(params.get("sort"))
    page, limit = parse_pagination(params)

    total = await collection.count_documents(query)
    cursor = collection.find(query, projection).sort(sort).skip((page - 1) * limit).limit(limit)
    results = await cursor.to_list(length=limit)

    if populate:
        results = await populate_documents(db, results, populate)

    return {
        "success": True,
        "count": len(results),
        "pagination": build_pagination(page, limit, total),
        "data": serialize(results),
    }
