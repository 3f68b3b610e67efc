"""Best-effort notifier: renders a template and delivers it off the request path.

notify() returns immediately. Delivery runs as a background task; a
failure is logged and never reaches the operation that asked for it.
DeferredNotifier holds one request's messages until its transaction commits.
"""

from __future__ import annotations

import asyncio
from typing import Any

from libris.application.interfaces.services import INotificationDispatcher, INotifier
from libris.infrastructure.external.email.templates import EmailTemplateRenderer
from libris.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class BestEffortNotifier:
    """INotifier backed by a dispatcher. One instance per process."""

    def __init__(
        self,
        dispatcher: INotificationDispatcher,
        renderer: EmailTemplateRenderer,
    ) -> None:
        self.dispatcher = dispatcher
        self.renderer = renderer
        self._tasks: set[asyncio.Task[None]] = set()

    async def connect(self) -> None:
        """Open the transport; a failure leaves the notifier usable (send reconnects)."""
        try:
            await self.dispatcher.connect()
        except Exception:
            logger.exception("Email transport connect failed; will retry on first send")

    def notify(self, to_address: str, template_key: str, context: dict[str, Any]) -> None:
        task = asyncio.create_task(self._deliver(to_address, template_key, dict(context)))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, to_address: str, template_key: str, context: dict[str, Any]) -> None:
        try:
            subject, html = self.renderer.render(template_key, context)
            await self.dispatcher.send(to_address, subject, html)
            logger.info("Email %s sent to %s", template_key, to_address)
        except Exception:
            logger.exception("Email %s to %s failed", template_key, to_address)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.drain()
        await self.dispatcher.close()


class DeferredNotifier:
    """Per-request INotifier that holds messages until the transaction commits.

    release() forwards everything held to the process notifier; discard()
    drops it. Held messages may carry tokens or temporary passwords that are
    only valid once the transaction is stored.
    """

    def __init__(self, notifier: INotifier) -> None:
        self._notifier = notifier
        self._held: list[tuple[str, str, dict[str, Any]]] = []

    def notify(self, to_address: str, template_key: str, context: dict[str, Any]) -> None:
        self._held.append((to_address, template_key, dict(context)))

    @property
    def held(self) -> int:
        return len(self._held)

    def release(self) -> None:
        held, self._held = self._held, []
        for to_address, template_key, context in held:
            self._notifier.notify(to_address, template_key, context)

    def discard(self) -> None:
        if self._held:
            logger.warning("Dropping %d email(s): request transaction did not commit", len(self._held))
        self._held = []
