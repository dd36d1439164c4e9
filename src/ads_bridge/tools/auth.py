from __future__ import annotations

import logging
from typing import Any, Optional

from ads_bridge.token_storage import TokenStore
from ads_bridge.types import ToolResult, text_result

from ._validation import NoArguments, validate_args

__all__ = ["check_auth", "logout"]

logger = logging.getLogger(__name__)

_AVAILABLE_TOOLS = (
    "facebook_list_ad_accounts",
    "facebook_get_details_of_ad_account",
    "facebook_get_adaccount_insights",
    "facebook_get_activities_by_adaccount",
    "facebook_fetch_pagination_url",
    "facebook_get_ad_creatives",
    "facebook_get_ad_thumbnails",
)


async def check_auth(
    token_store: TokenStore,
    args: dict[str, Any],
    *,
    fallback_token: Optional[str] = None,
) -> ToolResult:
    validate_args(NoArguments, args)
    info = token_store.token_info()
    tools = "\n".join(f"- {name}" for name in _AVAILABLE_TOOLS)

    if not info["hasToken"]:
        if fallback_token:
            return text_result(
                "Authenticated with FACEBOOK_ACCESS_TOKEN from the environment.\n\n"
                f"You can now use all Facebook Ads tools:\n{tools}"
            )
        return text_result(
            "Not logged in to Facebook.\n\n"
            "Store an access token or set FACEBOOK_ACCESS_TOKEN to access your Facebook Ads data."
        )

    if info["isExpired"]:
        return text_result(
            "Your Facebook token has expired.\n\n"
            f"Token was stored: {info['storedAt']}\n"
            f"Token expired: {info['expiresAt']}\n\n"
            "Please log in again to get a new token."
        )

    return text_result(
        "Successfully authenticated with Facebook!\n\n"
        f"Token stored: {info['storedAt']}\n"
        f"Token expires: {info['expiresAt']}\n\n"
        f"You can now use all Facebook Ads tools:\n{tools}"
    )


async def logout(token_store: TokenStore, args: dict[str, Any]) -> ToolResult:
    validate_args(NoArguments, args)

    if not token_store.has_valid_token():
        return text_result("You are not currently logged in to Facebook.")

    if not token_store.clear_token():
        logger.warning("Token file vanished before it could be cleared")
        return text_result(
            "Failed to logout. There may have been an issue clearing your stored credentials."
        )

    return text_result(
        "Successfully logged out from Facebook!\n\n"
        "Your access token has been removed from storage."
    )
