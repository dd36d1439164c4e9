"""
Facebook Ads tool handlers and the default registry.

Handlers take the Graph client (or token store) as their first argument;
``build_registry`` binds those with ``functools.partial`` so every registered
handler has the uniform ``async (args) -> ToolResult`` shape.
"""

from __future__ import annotations

from functools import partial
from typing import Optional

from ads_bridge.graph_api import GraphAPIClient
from ads_bridge.registry import ToolHandler, ToolRegistry, verify_tool_tables
from ads_bridge.schemas import TOOL_DESCRIPTIONS, TOOL_SCHEMAS
from ads_bridge.token_storage import TokenStore

from . import accounts, auth, creatives, insights

__all__ = ["build_registry"]


def build_registry(
    graph: GraphAPIClient,
    token_store: TokenStore,
    *,
    access_token: Optional[str] = None,
    ad_account_id: Optional[str] = None,
) -> ToolRegistry:
    """Register every Facebook Ads tool and check the tool tables agree."""
    handlers: dict[str, ToolHandler] = {
        "facebook_check_auth": partial(auth.check_auth, token_store, fallback_token=access_token),
        "facebook_logout": partial(auth.logout, token_store),
        "facebook_list_ad_accounts": partial(accounts.list_ad_accounts, graph),
        "facebook_fetch_pagination_url": partial(accounts.fetch_pagination_url, graph),
        "facebook_get_details_of_ad_account": partial(accounts.get_account_details, graph),
        "facebook_get_adaccount_insights": partial(insights.get_adaccount_insights, graph),
        "facebook_get_activities_by_adaccount": partial(accounts.get_account_activities, graph),
        "facebook_get_ad_creatives": partial(creatives.get_ad_creatives, graph),
        "facebook_get_ad_thumbnails": partial(
            creatives.get_ad_thumbnails, graph, ad_account_id=ad_account_id
        ),
    }

    registry = ToolRegistry()
    for name, handler in handlers.items():
        registry.register(
            name,
            handler,
            TOOL_SCHEMAS.get(name, {"type": "object", "properties": {}}),
            TOOL_DESCRIPTIONS.get(name, ""),
        )

    verify_tool_tables(registry, TOOL_SCHEMAS, TOOL_DESCRIPTIONS)
    return registry
