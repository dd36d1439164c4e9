"""Ad account tools: listing, details, activities and raw pagination."""

from __future__ import annotations

from typing import Any

from ads_bridge._exceptions import UpstreamAPIError
from ads_bridge.graph_api import GraphAPIClient
from ads_bridge.types import ToolResult, json_result

from ._validation import (
    AccountDetailsArgs,
    ActivitiesArgs,
    NoArguments,
    PaginationArgs,
    validate_args,
)

__all__ = [
    "list_ad_accounts",
    "fetch_pagination_url",
    "get_account_details",
    "get_account_activities",
]


async def list_ad_accounts(graph: GraphAPIClient, args: dict[str, Any]) -> ToolResult:
    validate_args(NoArguments, args)

    user = await graph.get("/me", {"fields": "id"})
    user_id = user.get("id") if isinstance(user, dict) else None
    if not user_id:
        raise UpstreamAPIError("Facebook API did not return a user id for /me")

    accounts = await graph.get(f"/{user_id}/adaccounts", {"fields": "name,id"})
    return json_result({"adaccounts": accounts, "id": user_id})


async def fetch_pagination_url(graph: GraphAPIClient, args: dict[str, Any]) -> ToolResult:
    params = validate_args(PaginationArgs, args)
    return json_result(await graph.get_url(params.url))


async def get_account_details(graph: GraphAPIClient, args: dict[str, Any]) -> ToolResult:
    params = validate_args(AccountDetailsArgs, args)
    query = {"fields": params.fields} if params.fields else None
    return json_result(await graph.get(f"/{params.act_id}", query))


async def get_account_activities(graph: GraphAPIClient, args: dict[str, Any]) -> ToolResult:
    params = validate_args(ActivitiesArgs, args)
    query = params.model_dump(exclude={"act_id", "fields"})
    if params.fields:
        query["fields"] = params.fields
    return json_result(await graph.get(f"/{params.act_id}/activities", query))
