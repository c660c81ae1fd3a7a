"""
Query API request builders -- selectRows and executeSql.

Parameters are assembled here and sent through ``transport.request``:

  query/getQuery.api     region-scoped parameters (filters, sort, paging)
  query/executeSql.api   JSON body with the SQL text
"""
from __future__ import annotations

from typing import Any, Literal

import httpx
from pydantic import BaseModel, Field, field_validator

from tabquery.client.action_url import build_url
from tabquery.client.transport import FailureCallback, SuccessCallback, get_method, request
from tabquery.core.errors import InvalidArgument
from tabquery.core.logging import get_logger
from tabquery.core.utils import ensure_region_name, is_sequence
from tabquery.filters.filter import append_filter_params
from tabquery.keys.query_key import QueryKey, SchemaKey, key_strings

logger = get_logger(__name__)

ShowRows = Literal["all", "none", "paginated", "selected", "unselected"]


# ── Shared parameter building ────────────────────────────

def build_query_params(
    schema_name: str | SchemaKey,
    query_name: str,
    filters: list[Any] | None = None,
    sort: str | None = None,
    region_name: str | None = None,
) -> dict[str, Any]:
    """Base parameters for a region-scoped query request, filters included."""
    region = ensure_region_name(region_name)
    params: dict[str, Any] = {
        "dataRegionName": region,
        f"{region}.queryName": query_name,
        "schemaName": str(schema_name),
    }
    if sort:
        params[f"{region}.sort"] = sort
    return append_filter_params(params, filters, region)


# ── selectRows ───────────────────────────────────────────

class SelectRowsOptions(BaseModel):
    """Options for ``select_rows``; only schema and query names are required."""

    schema_name: str = Field(..., description="Schema, e.g. 'lists' or SchemaKey.from_parts('assay', 'General')")
    query_name: str = Field(..., description="Query or table name")
    columns: str | list[str] | None = Field(None, description="Columns to return")
    filters: list[Any] = Field(default_factory=list, description="Filters from filter.create()")
    sort: str | None = Field(None, description="Comma-separated sort, '-' prefix for descending")
    region_name: str | None = None
    show_rows: ShowRows | None = None
    max_rows: int | None = Field(None, description="Negative returns all rows")
    offset: int | None = None
    view_name: str | None = None
    selection_key: str | None = None
    ignore_filter: bool = False
    parameters: dict[str, Any] = Field(default_factory=dict, description="Parameterised query values")
    required_version: int | float | str | None = None
    container_filter: str | None = None
    include_total_count: bool | None = None
    include_details_column: bool | None = None
    include_update_column: bool | None = None
    include_style: bool | None = None
    container_path: str | None = None
    method: str | None = None
    timeout: float | None = None

    @field_validator("schema_name", mode="before")
    @classmethod
    def _schema_key_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, QueryKey) else v

    @field_validator("columns", mode="before")
    @classmethod
    def _field_keys_to_str(cls, v: Any) -> Any:
        if is_sequence(v):
            return key_strings(v)
        return str(v) if isinstance(v, QueryKey) else v


def build_select_rows_params(options: SelectRowsOptions) -> dict[str, Any]:
    if not options.schema_name:
        raise InvalidArgument("You must specify a schema_name")
    if not options.query_name:
        raise InvalidArgument("You must specify a query_name")

    params = build_query_params(
        options.schema_name,
        options.query_name,
        options.filters,
        options.sort,
        options.region_name,
    )
    region = params["dataRegionName"]

    if not options.show_rows or options.show_rows == "paginated":
        if options.offset:
            params[f"{region}.offset"] = options.offset
        if options.max_rows is not None:
            if options.max_rows < 0:
                params[f"{region}.showRows"] = "all"
            else:
                params[f"{region}.maxRows"] = options.max_rows
    else:
        params[f"{region}.showRows"] = options.show_rows

    if options.view_name:
        params[f"{region}.viewName"] = options.view_name
    if options.columns:
        columns = options.columns
        params[f"{region}.columns"] = columns if isinstance(columns, str) else ",".join(columns)
    if options.selection_key:
        params[f"{region}.selectionKey"] = options.selection_key
    if options.ignore_filter:
        params[f"{region}.ignoreFilter"] = 1
    for name, value in options.parameters.items():
        params[f"{region}.param.{name}"] = value

    if options.required_version:
        params["apiVersion"] = options.required_version
    if options.container_filter:
        params["containerFilter"] = options.container_filter
    for flag, param_name in (
        ("include_total_count", "includeTotalCount"),
        ("include_details_column", "includeDetailsColumn"),
        ("include_update_column", "includeUpdateColumn"),
        ("include_style", "includeStyle"),
    ):
        if getattr(options, flag):
            params[param_name] = getattr(options, flag)

    return params


def select_rows(
    options: SelectRowsOptions,
    success: SuccessCallback | None = None,
    failure: FailureCallback | None = None,
    client: httpx.Client | None = None,
) -> Any:
    """Select rows from a schema/query via ``query/getQuery.api``."""
    params = build_select_rows_params(options)
    logger.info("selectRows schema=%s query=%s", options.schema_name, options.query_name)
    return request(
        build_url("query", "getQuery.api", options.container_path),
        method=get_method(options.method),
        params=params,
        success=success,
        failure=failure,
        timeout=options.timeout,
        client=client,
    )


# ── executeSql ───────────────────────────────────────────

def build_execute_sql_body(
    schema_name: str | SchemaKey,
    sql: str,
    max_rows: int | None = None,
    offset: int | None = None,
    container_filter: str | None = None,
    parameters: dict[str, Any] | None = None,
    save_in_session: bool | None = None,
    include_total_count: bool | None = None,
) -> dict[str, Any]:
    if not str(schema_name):
        raise InvalidArgument("You must specify a schema_name")
    if not sql:
        raise InvalidArgument("You must specify sql")

    body: dict[str, Any] = {"schemaName": str(schema_name), "sql": sql}
    if max_rows is not None:
        body["maxRows"] = max_rows
    if offset is not None:
        body["offset"] = offset
    if container_filter:
        body["containerFilter"] = container_filter
    if parameters:
        body["parameters"] = parameters
    if save_in_session is not None:
        body["saveInSession"] = save_in_session
    if include_total_count is not None:
        body["includeTotalCount"] = include_total_count
    return body


def execute_sql(
    schema_name: str | SchemaKey,
    sql: str,
    success: SuccessCallback | None = None,
    failure: FailureCallback | None = None,
    container_path: str | None = None,
    timeout: float | None = None,
    client: httpx.Client | None = None,
    **body_options: Any,
) -> Any:
    """Run SQL against *schema_name* via ``query/executeSql.api``.

    Extra keyword arguments are forwarded to ``build_execute_sql_body``.
    """
    body = build_execute_sql_body(schema_name, sql, **body_options)
    logger.info("executeSql schema=%s (%d chars)", body["schemaName"], len(sql))
    return request(
        build_url("query", "executeSql.api", container_path),
        method="POST",
        json_data=body,
        success=success,
        failure=failure,
        timeout=timeout,
        client=client,
    )
