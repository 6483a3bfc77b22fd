"""Aggregation of cursor-paginated list endpoints."""

import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from ytapi.api.client import ApiClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

ContinuationPredicate = Callable[[list[Any]], bool | Awaitable[bool]]


def always_continue(fetched_items: list[Any]) -> bool:
    """Default continuation predicate: fetch every page."""
    return True


async def list_all(
    api_client: ApiClient,
    path: str,
    parameters: Mapping[str, Any],
    should_continue: ContinuationPredicate = always_continue,
    authorized: bool = False,
    process: Callable[[dict[str, Any]], T] | None = None,
) -> list[T]:
    """Fetch every page of a paginated list endpoint.

    This function:
    1. Requests a page with ``parameters`` (plus ``pageToken`` after the first)
    2. Appends the page's items, in response order, to the result
    3. Stops when the page has no ``nextPageToken`` or ``should_continue``
       returns False for the items just fetched

    Any request failure propagates and the partial result is discarded.

    Args:
        api_client: Client used to send the list requests
        path: Path of the list endpoint, for example "playlistItems"
        parameters: Query parameters of every request, without ``pageToken``
        should_continue: Called with the items of the page just fetched;
            may be a plain function or a coroutine function
        authorized: Whether to send the requests with an OAuth token
        process: Optional conversion applied to every raw item before it is
            accumulated and handed to ``should_continue``

    Returns:
        All accumulated items, in the order the server returned them
    """
    items: list[T] = []
    page_token: str | None = None
    pages = 0

    while True:
        page_parameters = dict(parameters)
        if page_token:
            page_parameters["pageToken"] = page_token

        response = await api_client.list(path, page_parameters, authorized)
        pages += 1

        raw_items = response.get("items") or []
        fetched = [process(item) for item in raw_items] if process else list(raw_items)
        items.extend(fetched)
        logger.debug(f"{path}: page {pages} returned {len(fetched)} items")

        page_token = response.get("nextPageToken")
        if not page_token:
            break

        decision = should_continue(fetched)
        if inspect.isawaitable(decision):
            decision = await decision
        if not decision:
            break

    logger.debug(f"{path}: fetched {len(items)} items in {pages} pages")
    return items
