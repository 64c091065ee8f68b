"""Sweep&Go tool implementations.

Each handler receives validated arguments and the downstream client and
returns the text placed in the tool's content item. Downstream failures
propagate as exceptions and are shaped by the dispatcher.
"""

import asyncio
import json
from typing import Any

from sng_gateway.gateway.proxy import DownstreamClient

from .models import ToolHandler

PRICE_REGISTRATION_PATH = "/api/v2/client_on_boarding/price_registration_form"
PACKAGES_LIST_PATH = "/api/v2/packages_list"
RESIDENTIAL_ONBOARDING_PATH = "/api/v1/residential/onboarding"

MAX_CROSS_SELLS = 5


def render_json(data: Any) -> str:
    """Render downstream data as indented JSON, passing text through."""
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2)


async def get_onboarding_price(client: DownstreamClient, arguments: dict[str, Any]) -> str:
    data = await client.send(PRICE_REGISTRATION_PATH, method="POST", body=arguments)
    return render_json(data)


async def get_packages_list(client: DownstreamClient, arguments: dict[str, Any]) -> str:
    data = await client.send(PACKAGES_LIST_PATH, method="GET")
    return render_json(data)


def _first_present(data: Any, *keys: str) -> Any:
    if not isinstance(data, dict):
        return None
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def summarize_quote(arguments: dict[str, Any], price_info: Any, packages_info: Any) -> str:
    """Build the human-readable quote summary for an assistant to relay."""
    base = _first_present(price_info, "regular_price", "price")
    initial = _first_present(price_info, "initial_cleanup_price")
    recommended_frequency = _first_present(price_info, "recommended_frequency")

    lines = [
        f"Here is a summary based on {arguments['number_of_dogs']} dog(s) "
        f"in zip {arguments['zip_code']}."
    ]
    if base is not None:
        lines.append(f"- Regular visit estimate: {base}")
    if initial is not None:
        lines.append(f"- Initial cleanup estimate: {initial}")
    if recommended_frequency:
        lines.append(f"- Recommended frequency: {recommended_frequency}")

    cross_sells = _first_present(packages_info, "cross_sells", "packages") or []
    if isinstance(cross_sells, list) and cross_sells:
        lines.append("")
        lines.append("Cross-sell ideas you can mention:")
        for package in cross_sells[:MAX_CROSS_SELLS]:
            package = package if isinstance(package, dict) else {}
            name = package.get("name") or "Package"
            description = package.get("description") or ""
            lines.append(f"- {name}: {description}".strip())

    return "\n".join(lines)


async def get_quote_recommendations(client: DownstreamClient, arguments: dict[str, Any]) -> str:
    calls = [
        asyncio.create_task(client.send(PRICE_REGISTRATION_PATH, method="POST", body=arguments)),
        asyncio.create_task(client.send(PACKAGES_LIST_PATH, method="GET")),
    ]
    try:
        price_info, packages_info = await asyncio.gather(*calls)
    except BaseException:
        # gather leaves the sibling running when one call fails.
        for call in calls:
            call.cancel()
        await asyncio.gather(*calls, return_exceptions=True)
        raise
    return summarize_quote(arguments, price_info, packages_info)


async def create_client(client: DownstreamClient, arguments: dict[str, Any]) -> str:
    data = await client.send(RESIDENTIAL_ONBOARDING_PATH, method="PUT", body=arguments)
    return "Client created in Sweep&Go.\n\nResponse:\n" + render_json(data)


HANDLERS: dict[str, ToolHandler] = {
    "get_onboarding_price": get_onboarding_price,
    "get_packages_list": get_packages_list,
    "get_quote_recommendations": get_quote_recommendations,
    "create_client": create_client,
}
