"""Interactive, time-bounded browsing of a result set fetched page by page.

A :class:`Paginator` owns one :class:`PaginatorSession`. It asks a data source
for the total item count once, posts the first rendered page through a
channel, then consumes Previous/Next events from that channel until its
deadline passes. The channel is duck-typed and must provide::

    async post(payload, controls) -> handle
    async update(handle, payload_or_None, controls)
    control_events(handle) -> async iterator of ControlEvent
    async notify_actor(event, message)
    async report_error(handle, message)
"""

import asyncio
import contextlib
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from constants import DEFERRED_SESSION_TIMEOUT
from logger import get_logger

log = get_logger("paginator")

# listener tasks are only weakly referenced by the event loop
_listeners = set()

NOT_AUTHORIZED_NOTICE = "You can't use these buttons."
PAGE_ERROR_NOTICE = "Couldn't load that page, please try again."


class PaginatorError(Exception):
    pass


class ConstructionError(PaginatorError, ValueError):
    pass


class DeliveryError(PaginatorError):
    pass


class TransientRenderError(PaginatorError):
    pass


class Control(Enum):
    PREVIOUS = "previous"
    NEXT = "next"


class SessionState(Enum):
    STARTING = "starting"
    AWAITING = "awaiting"
    CLOSED = "closed"


class EventOutcome(Enum):
    ACCEPTED = "accepted"
    UNCHANGED = "unchanged"
    UNAUTHORIZED = "unauthorized"
    STALE = "stale"
    FAILED = "failed"


@dataclass(frozen=True)
class PageRequest:
    offset: int
    limit: int

    @classmethod
    def for_page(cls, page_index: int, page_size: int) -> "PageRequest":
        return cls(offset=page_index * page_size, limit=page_size)


@dataclass
class PageResult:
    items: list
    total_count: int
    offset: int = 0


@dataclass(frozen=True)
class Controls:
    page_index: int
    total_pages: int
    previous_disabled: bool
    next_disabled: bool
    closed: bool = False

    @property
    def label(self) -> str:
        return f"Page {self.page_index + 1}/{self.total_pages}"


@dataclass(frozen=True)
class ControlEvent:
    actor_id: Any
    control: Control
    ack: Optional[Callable[[], Awaitable[Any]]] = None
    origin: Any = None


def count_pages(total_count: int, page_size: int) -> int:
    return max(1, -(-total_count // page_size))


@dataclass
class PaginatorSession:
    owner_id: Any
    total_count: int = 0
    total_pages: int = 1
    current_page_index: int = 0
    deadline: Optional[float] = None
    state: SessionState = SessionState.STARTING

    @property
    def active(self) -> bool:
        return self.state is SessionState.AWAITING

    def target_index(self, control: Control, wrap: bool) -> int:
        """Index that ``control`` leads to; the session itself is not changed."""
        index, pages = self.current_page_index, self.total_pages
        if wrap:
            step = -1 if control is Control.PREVIOUS else 1
            return (index + step + pages) % pages
        if control is Control.PREVIOUS:
            return max(0, index - 1)
        return min(pages - 1, index + 1)

    def controls(self, closed: bool = False, wrap: bool = False) -> Controls:
        """Button states for the current page.

        With ``wrap`` both buttons stay live on every page of a multi-page set.
        """
        index, last = self.current_page_index, self.total_pages - 1
        at_start, at_end = index == 0, index == last
        if wrap and last > 0:
            at_start = at_end = False
        return Controls(
            page_index=index,
            total_pages=self.total_pages,
            previous_disabled=closed or at_start,
            next_disabled=closed or at_end,
            closed=closed,
        )


async def _resolve(value):
    if inspect.isawaitable(value):
        return await value
    return value


class Paginator:
    """Drives one pagination session over ``channel``.

    ``fetch_count()`` and ``fetch_page(PageRequest)`` may be plain or async
    callables. ``render(page, page_index, total_pages)`` must be pure; its
    return value is handed to the channel untouched.

    The page count is taken once in :meth:`start`. Rows added or removed while
    the session is open are not reflected in it, so the last page can come
    back short or empty.
    """

    def __init__(
        self,
        channel,
        fetch_count: Callable[[], Any],
        fetch_page: Callable[[PageRequest], Any],
        render: Callable[[PageResult, int, int], Any],
        owner_id,
        page_size: int = 10,
        session_timeout: float = DEFERRED_SESSION_TIMEOUT,
        wrap_navigation: bool = False,
        restrict_to_owner: bool = True,
    ):
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
            raise ConstructionError(f"page_size must be a positive integer, got {page_size!r}")
        if (
            isinstance(session_timeout, bool)
            or not isinstance(session_timeout, (int, float))
            or session_timeout <= 0
        ):
            raise ConstructionError(
                f"session_timeout must be a positive number of seconds, got {session_timeout!r}"
            )

        self.channel = channel
        self.fetch_count = fetch_count
        self.fetch_page = fetch_page
        self.render = render
        self.page_size = page_size
        self.session_timeout = session_timeout
        self.wrap_navigation = wrap_navigation
        self.restrict_to_owner = restrict_to_owner

        self.session = PaginatorSession(owner_id=owner_id)
        self.handle = None
        self._lock = asyncio.Lock()
        self._closed = asyncio.Event()
        self._listener: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self.session.active

    async def start(self):
        session = self.session
        if session.state is not SessionState.STARTING:
            raise PaginatorError("Paginator sessions can only be started once")

        loop = asyncio.get_running_loop()
        session.deadline = loop.time() + self.session_timeout
        try:
            total_count = max(0, int(await _resolve(self.fetch_count())))
            session.total_count = total_count
            session.total_pages = count_pages(total_count, self.page_size)
            session.current_page_index = 0
            payload = await self._render_page(0)
        except BaseException:
            self._mark_closed()
            raise

        try:
            self.handle = await self.channel.post(payload, self._controls())
        except Exception as e:
            self._mark_closed()
            raise DeliveryError(f"Couldn't deliver the first page: {e}") from e

        session.state = SessionState.AWAITING
        log.debug(
            "Session for %s started: %d items over %d pages",
            session.owner_id,
            session.total_count,
            session.total_pages,
        )
        self._listener = asyncio.create_task(self._listen())
        _listeners.add(self._listener)
        self._listener.add_done_callback(_listeners.discard)
        return self.handle

    async def handle_event(self, actor_id, control, ack=None, origin=None) -> EventOutcome:
        event = ControlEvent(actor_id, Control(control), ack, origin)
        session = self.session

        if not session.active or self._expired():
            log.debug("Dropped %s from %s: session closed", event.control.value, actor_id)
            return EventOutcome.STALE

        if self.restrict_to_owner and actor_id != session.owner_id:
            log.debug("Rejected %s from %s: not the owner", event.control.value, actor_id)
            await self._best_effort(
                self.channel.notify_actor(event, NOT_AUTHORIZED_NOTICE), "notify actor"
            )
            return EventOutcome.UNAUTHORIZED

        async with self._lock:
            if not session.active:
                return EventOutcome.STALE
            if ack is not None:
                await self._best_effort(ack(), "acknowledge event")

            shown = session.current_page_index
            target = session.target_index(event.control, self.wrap_navigation)
            if target == shown:
                return EventOutcome.UNCHANGED

            session.current_page_index = target
            try:
                await self._show(target)
            except asyncio.CancelledError:
                # cancelled mid-navigation, the message still shows the old page
                session.current_page_index = shown
                raise
            except Exception as e:
                session.current_page_index = shown
                error = TransientRenderError(f"Couldn't show page {target + 1}: {e}")
                log.warning("%s", error, exc_info=e)
                await self._best_effort(
                    self.channel.report_error(self.handle, PAGE_ERROR_NOTICE), "report error"
                )
                return EventOutcome.FAILED
            return EventOutcome.ACCEPTED

    async def on_timeout(self) -> bool:
        return await self._close("timed out")

    async def stop(self) -> bool:
        listener = self._listener
        if listener is not None and not listener.done() and listener is not asyncio.current_task():
            listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await listener
        return await self._close("stopped")

    async def wait_closed(self):
        await self._closed.wait()

    def _controls(self, closed: bool = False) -> Controls:
        return self.session.controls(closed, self.wrap_navigation)

    def _expired(self) -> bool:
        deadline = self.session.deadline
        return deadline is not None and asyncio.get_running_loop().time() >= deadline

    async def _listen(self):
        try:
            async with asyncio.timeout_at(self.session.deadline):
                async for event in self.channel.control_events(self.handle):
                    await self.handle_event(event.actor_id, event.control, event.ack, event.origin)
        except TimeoutError:
            await self.on_timeout()
        else:
            await self._close("event stream ended")

    async def _render_page(self, page_index: int):
        request = PageRequest.for_page(page_index, self.page_size)
        items = await _resolve(self.fetch_page(request))
        page = PageResult(list(items), self.session.total_count, request.offset)
        return self.render(page, page_index, self.session.total_pages)

    async def _show(self, page_index: int):
        payload = await self._render_page(page_index)
        await self.channel.update(self.handle, payload, self._controls())

    async def _close(self, reason: str) -> bool:
        session = self.session
        if session.state is SessionState.CLOSED:
            return False
        was_started = session.state is SessionState.AWAITING
        session.state = SessionState.CLOSED
        if was_started:
            async with self._lock:
                try:
                    await self.channel.update(self.handle, None, self._controls(closed=True))
                except Exception as e:
                    log.info("Couldn't disable controls after session %s: %s", reason, e)
        log.debug("Session for %s %s", session.owner_id, reason)
        self._closed.set()
        return True

    def _mark_closed(self):
        self.session.state = SessionState.CLOSED
        self._closed.set()

    async def _best_effort(self, awaitable, action: str):
        try:
            await awaitable
        except Exception as e:
            log.info("Couldn't %s: %s", action, e)
