"""
Module: puller.py
Description: Long-poll the queue until at least one valid message arrives.

Each pull runs a small state machine:

    POLLING -> (nothing valid) -> WAITING -> POLLING -> ... -> DELIVERING

An empty receive, or a receive whose entries are all invalid, is the
only condition retried; transport errors surface immediately. The
backoff is max(wait, 1) seconds and is the single suspension point
besides the receive itself. A CancellationToken checked at every
iteration lets callers abort a pull that would otherwise block until a
message shows up.

Invalid messages are destroyed in detached tasks when remove_invalid is
enabled. Their outcome is logged and never awaited by the pull.

Dependencies: asyncio, tenacity, errors, cancellation, logger
"""

import asyncio
import enum
from typing import Any, Callable, Awaitable, Dict, List, Optional, Set, Union

from tenacity import AsyncRetrying, retry_if_result, wait_fixed

from workqueue.models.message import QueueMessage
from workqueue.models.options import ClientOptions
from workqueue.transport.base import QueueTransport
from workqueue.utils.batch_helpers import merge_params
from workqueue.utils.cancellation import CancellationToken
from workqueue.utils.errors import mapped_errors
from workqueue.utils.logger import get_logger

logger = get_logger(__name__)

PullResult = Union[QueueMessage, List[QueueMessage]]

# Raw ReceiveMessage keys accepted in params, folded onto the fields the
# pull cycle reads.
RECEIVE_PARAM_ALIASES = {
    "QueueUrl": "url",
    "MaxNumberOfMessages": "max_messages",
    "VisibilityTimeout": "visibility",
    "WaitTimeSeconds": "wait",
    "MessageAttributeNames": "attribute_names",
}


class PullState(str, enum.Enum):
    POLLING = "polling"
    WAITING = "waiting"
    DELIVERING = "delivering"


def normalize_receive_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Rename raw receive keys in params to their pull cycle field names."""
    if not params:
        return params
    return {RECEIVE_PARAM_ALIASES.get(key, key): value for key, value in params.items()}


def backoff_seconds(wait: int) -> int:
    """Delay before re-polling after an empty receive."""
    return max(int(wait), 1)


class PullCycle:
    """
    State of one pull call across its receive attempts.

    Attributes:
        params: Effective receive parameters, fixed for the whole cycle
        token: Cancellation token checked at every iteration
        state: Current PullState
        attempts: Number of receive requests issued
    """

    def __init__(self, params: Dict[str, Any], token: CancellationToken):
        self.params = params
        self.token = token
        self.state = PullState.POLLING
        self.attempts = 0

    @property
    def url(self) -> str:
        return self.params["url"]

    @property
    def single(self) -> bool:
        return self.params["max_messages"] == 1

    def transition(self, state: PullState) -> None:
        if state is not self.state:
            logger.debug(
                "Pull state changed",
                queue_url=self.url,
                previous=self.state.value,
                state=state.value,
                attempts=self.attempts
            )
        self.state = state


class Puller:
    """
    Pulls messages for a QueueClient.

    Attributes:
        options: Client options supplying receive defaults
        transport: Queue transport
        sleep: Optional backoff coroutine; defaults to the cycle token's
            sleep, which returns early on cancellation
    """

    def __init__(
        self,
        options: ClientOptions,
        transport: QueueTransport,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None
    ):
        self.options = options
        self.transport = transport
        self.sleep = sleep
        self.logger = logger.bind(queue=options.logger)
        self._cleanup_tasks: Set[asyncio.Task] = set()

    def build_params(
        self,
        params: Optional[Dict[str, Any]] = None,
        **overrides: Any
    ) -> Dict[str, Any]:
        """
        Merge receive parameters.

        Precedence, last wins: option defaults, ClientOptions.params,
        call-level params, explicit keyword overrides. Raw receive keys
        such as MaxNumberOfMessages are renamed to their field names
        before merging.

        Raises:
            ValueError: If the merged parameters have no queue url
        """
        o = self.options
        merged = merge_params(
            {
                "url": o.url,
                "max_messages": o.messages,
                "visibility": o.visibility,
                "wait": o.wait,
                "attribute_names": ["All"],
            },
            normalize_receive_params(o.params),
            normalize_receive_params(params),
            overrides,
        )
        if not merged.get("url") or not isinstance(merged["url"], str):
            raise ValueError("queue url must be a non-empty string")
        return merged

    async def pull(
        self,
        params: Optional[Dict[str, Any]] = None,
        cancel_token: Optional[CancellationToken] = None,
        **overrides: Any
    ) -> PullResult:
        """
        Block until at least one valid message is received.

        Args:
            params: Call-level receive parameters
            cancel_token: Token that aborts the pull when cancelled
            **overrides: url, max_messages, visibility, wait

        Returns:
            One QueueMessage when max_messages is 1, else a non-empty list
            in transport order

        Raises:
            TransportError: If a receive request fails
            PullCancelledError: If cancel_token fires
        """
        cycle = PullCycle(self.build_params(params, **overrides), cancel_token or CancellationToken())
        backoff = backoff_seconds(cycle.params["wait"])

        def before_sleep(retry_state) -> None:
            cycle.transition(PullState.WAITING)
            self.logger.debug(
                "No messages received, waiting before next poll",
                queue_url=cycle.url,
                backoff_seconds=backoff,
                attempts=cycle.attempts
            )

        retrying = AsyncRetrying(
            retry=retry_if_result(lambda items: not items),
            wait=wait_fixed(backoff),
            sleep=self.sleep or cycle.token.sleep,
            before_sleep=before_sleep,
        )
        items = await retrying(self._poll_once, cycle)

        cycle.transition(PullState.DELIVERING)
        self.logger.debug(
            "Messages pulled",
            queue_url=cycle.url,
            count=len(items),
            attempts=cycle.attempts
        )
        return items[0] if cycle.single else items

    async def _poll_once(self, cycle: PullCycle) -> List[QueueMessage]:
        cycle.token.raise_if_cancelled()
        cycle.transition(PullState.POLLING)
        cycle.attempts += 1

        request = dict(cycle.params)
        url = request.pop("url")
        with mapped_errors("receive", queue_url=url):
            entries = await cycle.token.guard(
                self.transport.receive(
                    url,
                    request.pop("max_messages"),
                    request.pop("visibility"),
                    request.pop("wait"),
                    request.pop("attribute_names"),
                    **request
                )
            )

        valid = []
        for entry in entries or []:
            message = QueueMessage(entry, url, self.transport)
            if message.valid:
                valid.append(message)
            elif self.options.remove_invalid:
                self._discard(message)
            else:
                self.logger.debug("Dropped invalid message", message_id=message.id, queue_url=url)
        return valid

    def _discard(self, message: QueueMessage) -> None:
        """Destroy an invalid message without blocking the pull."""
        if not message.receipt:
            self.logger.debug("Dropped invalid message without receipt", message_id=message.id)
            return
        task = asyncio.ensure_future(message.destroy())
        self._cleanup_tasks.add(task)
        task.add_done_callback(lambda t: self._cleanup_done(message, t))

    def _cleanup_done(self, message: QueueMessage, task: asyncio.Task) -> None:
        self._cleanup_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.warning(
                "Failed to destroy invalid message",
                message_id=message.id or "unknown",
                error=str(error)
            )
            return
        self.logger.debug("Destroyed invalid message", message_id=message.id)

    @property
    def pending_cleanups(self) -> int:
        return len(self._cleanup_tasks)

    async def drain(self) -> None:
        """Wait for outstanding invalid-message cleanups to finish."""
        if self._cleanup_tasks:
            await asyncio.gather(*list(self._cleanup_tasks), return_exceptions=True)
