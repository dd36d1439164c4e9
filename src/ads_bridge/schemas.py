"""
The shared tool tables.

``TOOL_SCHEMAS`` is the single source of truth for tool input shapes and
``TOOL_DESCRIPTIONS`` the single name -> description lookup. Every adapter
derives its protocol-native tool list from these two tables; their key sets
must match the registry exactly (see ``registry.verify_tool_tables``).
"""

from __future__ import annotations

from typing import Final

from .types.tool import ParametersSchema

_TIME_RANGE: Final[dict] = {
    "type": "object",
    "properties": {
        "since": {"type": "string", "description": "Start date (YYYY-MM-DD)"},
        "until": {"type": "string", "description": "End date (YYYY-MM-DD)"},
    },
    "required": ["since", "until"],
    "description": "Custom time range with since/until dates",
}

TOOL_SCHEMAS: Final[dict[str, ParametersSchema]] = {
    "facebook_check_auth": {
        "type": "object",
        "properties": {},
        "required": [],
        "additionalProperties": False,
    },
    "facebook_logout": {
        "type": "object",
        "properties": {},
        "required": [],
        "additionalProperties": False,
    },
    "facebook_list_ad_accounts": {
        "type": "object",
        "properties": {},
        "required": [],
        "additionalProperties": False,
    },
    "facebook_fetch_pagination_url": {
        "type": "object",
        "properties": {
            "url": {
                "type": "string",
                "description": "The complete pagination URL",
            },
        },
        "required": ["url"],
        "additionalProperties": False,
    },
    "facebook_get_details_of_ad_account": {
        "type": "object",
        "properties": {
            "act_id": {
                "type": "string",
                "description": "The act ID of the ad account, example: act_1234567890",
            },
            "fields": {
                "type": "array",
                "items": {"type": "string"},
                "description": (
                    "Fields to retrieve. Available: name, business_name, age, "
                    "account_status, balance, amount_spent, attribution_spec, "
                    "account_id, business, business_city, "
                    "brand_safety_content_filter_levels, currency, created_time, id"
                ),
            },
        },
        "required": ["act_id"],
        "additionalProperties": False,
    },
    "facebook_get_adaccount_insights": {
        "type": "object",
        "properties": {
            "act_id": {
                "type": "string",
                "description": "The target ad account ID, prefixed with act_",
            },
            "fields": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Performance metrics to retrieve",
            },
            "date_preset": {
                "type": "string",
                "description": "Predefined time range: last_7d, last_30d, last_90d, etc.",
            },
            "level": {
                "type": "string",
                "enum": ["account", "campaign", "adset", "ad"],
                "description": "Aggregation level",
            },
            "action_attribution_windows": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Attribution windows for actions",
            },
            "action_breakdowns": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Breakdown dimensions for actions",
            },
            "breakdowns": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Result breakdown dimensions",
            },
            "time_range": _TIME_RANGE,
            "time_increment": {
                "type": "string",
                "description": "Days per row (1 for daily), or 'monthly' / 'all_days'",
            },
            "limit": {
                "type": "integer",
                "description": "Maximum results per page",
            },
            "sort": {
                "type": "string",
                "description": "Sort field and direction",
            },
            "after": {
                "type": "string",
                "description": "Pagination cursor for next page",
            },
            "before": {
                "type": "string",
                "description": "Pagination cursor for previous page",
            },
        },
        "required": ["act_id", "fields"],
        "additionalProperties": False,
    },
    "facebook_get_activities_by_adaccount": {
        "type": "object",
        "properties": {
            "act_id": {
                "type": "string",
                "description": "Ad account ID prefixed with act_",
            },
            "fields": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Activity fields to retrieve",
            },
            "since": {
                "type": "string",
                "description": "Start date in YYYY-MM-DD format",
            },
            "until": {
                "type": "string",
                "description": "End date in YYYY-MM-DD format",
            },
            "time_range": _TIME_RANGE,
            "limit": {
                "type": "integer",
                "description": "Maximum activities per page",
            },
            "after": {"type": "string", "description": "Pagination cursor"},
            "before": {"type": "string", "description": "Pagination cursor"},
        },
        "required": ["act_id"],
        "additionalProperties": False,
    },
    "facebook_get_ad_creatives": {
        "type": "object",
        "properties": {
            "ad_ids": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Ad IDs whose creatives should be fetched",
            },
            "include_images": {
                "type": "boolean",
                "description": "Download the best creative image and embed it (default true)",
            },
        },
        "required": ["ad_ids"],
        "additionalProperties": False,
    },
    "facebook_get_ad_thumbnails": {
        "type": "object",
        "properties": {
            "ad_ids": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Ad IDs whose thumbnails should be fetched",
            },
            "resolution": {
                "type": "string",
                "enum": ["thumbnail", "full", "all"],
                "description": "Which image variants to embed (default all)",
            },
            "include_ad_details": {
                "type": "boolean",
                "description": "Include dynamic-creative counts in the summary",
            },
            "max_image_size_mb": {
                "type": "number",
                "description": "Skip images larger than this many megabytes (0.1 - 10, default 5)",
            },
        },
        "required": ["ad_ids"],
        "additionalProperties": False,
    },
}

TOOL_DESCRIPTIONS: Final[dict[str, str]] = {
    "facebook_check_auth": "Check current Facebook authentication status and token validity",
    "facebook_logout": "Logout from Facebook and clear stored credentials",
    "facebook_list_ad_accounts": "List all Facebook ad accounts accessible with the provided credentials",
    "facebook_fetch_pagination_url": "Fetch data from a Facebook Graph API pagination URL",
    "facebook_get_details_of_ad_account": "Get details of a specific ad account as per the fields provided",
    "facebook_get_adaccount_insights": "Retrieves performance insights for a specified Facebook ad account",
    "facebook_get_activities_by_adaccount": "Retrieves activities for a Facebook ad account",
    "facebook_get_ad_creatives": "Get ad creatives (headline, body, call to action) with optional embedded images",
    "facebook_get_ad_thumbnails": "Get thumbnails for specific Facebook ad IDs with embedded images",
}

__all__ = ["TOOL_SCHEMAS", "TOOL_DESCRIPTIONS"]
