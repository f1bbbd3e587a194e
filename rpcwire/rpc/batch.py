"""Batch request processing.

Each element of a batch is handled on its own: a non-object element gets an
Invalid Request error with ``id: null``, any other element is processed as
a single request in a context of its own. Notification results are left
out and element order is preserved.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from rpcwire.rpc.dispatch_core import RequestContext, encode_response
from rpcwire.rpc.errors import InvalidRequest
from rpcwire.rpc.protocol import make_error_response
from rpcwire.rpc.types import TransportRejection

logger = logging.getLogger(__name__)

ItemHandler = Callable[[RequestContext], "str | TransportRejection | None"]


def process_batch(
    context: RequestContext,
    handle_item: ItemHandler,
) -> str | TransportRejection | None:
    """Process every element of the batch held in ``context.payload``.

    Args:
        context: Context whose payload is the (non-empty) batch list.
        handle_item: Processes one request context; see handle_single().

    Returns:
        The encoded response array, None if no element produced a
        response, or the first TransportRejection met (which ends the
        whole batch).
    """
    items = context.payload
    logger.debug("Processing batch of %d items", len(items))

    responses: list[str] = []
    for item in items:
        if not isinstance(item, dict):
            responses.append(
                encode_response(make_error_response(None, InvalidRequest().to_error_object()))
            )
            continue

        outcome = handle_item(context.for_payload(item))
        if isinstance(outcome, TransportRejection):
            return outcome
        if outcome:
            responses.append(outcome)

    if not responses:
        return None
    return "[" + ",".join(responses) + "]"
