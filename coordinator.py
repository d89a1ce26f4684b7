"""
spawns the two groups of actors, starts the proposals and keeps the
live match set until nothing has happened for idle_timeout seconds
"""

import asyncio
import enum
import logging
from collections import namedtuple

from actors import ProposerActor, Registry, ReviewerActor
from preferences import PROPOSER, REVIEWER, validate_tables

logger = logging.getLogger(__name__)

# seconds without any event before the matching is declared stable
IDLE_TIMEOUT = 0.1


class EventKind(str, enum.Enum):
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    IMPOSSIBLE = "impossible"


class CoordinatorState(enum.Enum):
    CREATED = "created"
    RUNNING = "running"
    QUIESCENT = "quiescent"


Event = namedtuple("Event", ["kind", "proposer", "reviewer", "at"])


class Coordinator:
    def __init__(
        self, prefP, prefR, idle_timeout=IDLE_TIMEOUT, balanced=True, on_event=None
    ):
        self.prefP, self.prefR = validate_tables(prefP, prefR, balanced)
        self.idle_timeout = idle_timeout
        self.on_event = on_event

        self.proposers = Registry(PROPOSER)
        self.reviewers = Registry(REVIEWER)
        for p, pr in self.prefP.items():
            self.proposers.register(ProposerActor(p, pr, self.reviewers, self.report))
        for r, pr in self.prefR.items():
            self.reviewers.register(ReviewerActor(r, pr, self.proposers))

        self.state = CoordinatorState.CREATED
        self.matching = {}
        self.events = []
        self.impossible = []
        self.late_events = []
        self.quiescent_at = None
        self._inbox = None

    def report(self, kind, proposer, reviewer=None):
        """called by the proposers, the event is handled later by run()"""
        kind = EventKind(kind)
        if self.state is not CoordinatorState.RUNNING:
            logger.warning(
                "%s event for %r after quiescence, ignored", kind.value, proposer
            )
            self.late_events.append((kind, proposer, reviewer))
            return
        self._inbox.put_nowait((kind, proposer, reviewer))

    def launch(self):
        for proposer in self.proposers:
            proposer.tell("run")
        logger.info("launched %d proposers", len(self.proposers))

    async def run(self):
        if self.state is not CoordinatorState.CREATED:
            raise RuntimeError("coordinator already {}".format(self.state.value))

        loop = asyncio.get_running_loop()
        self._inbox = asyncio.Queue()
        for actor in (*self.reviewers, *self.proposers):
            actor.start()
        self.state = CoordinatorState.RUNNING
        try:
            self.launch()
            while True:
                try:
                    kind, proposer, reviewer = await asyncio.wait_for(
                        self._inbox.get(), self.idle_timeout
                    )
                except asyncio.TimeoutError:
                    break
                self.handle(Event(kind, proposer, reviewer, loop.time()))
            self.on_idle_timeout(loop.time())
        finally:
            await self.stop()
        return dict(self.matching)

    def handle(self, event):
        self.events.append(event)
        if event.kind is EventKind.MATCHED:
            self.matching[event.proposer] = event.reviewer
        elif event.kind is EventKind.UNMATCHED:
            self.matching.pop(event.proposer, None)
        else:
            self.impossible.append(event.proposer)
        if self.on_event is not None:
            try:
                self.on_event(event)
            except Exception:
                logger.exception("event listener failed on %s", event)

    def on_idle_timeout(self, now):
        self.state = CoordinatorState.QUIESCENT
        self.quiescent_at = now
        logger.info(
            "quiescent after %d events: %d matched, %d impossible",
            len(self.events),
            len(self.matching),
            len(self.impossible),
        )

    async def stop(self):
        for actor in (*self.proposers, *self.reviewers):
            await actor.stop()

    def match(self):
        return asyncio.run(self.run())


def match(prefP, prefR, **params):
    """run the actors to quiescence and return the final proposer -> reviewer dict"""
    return Coordinator(prefP, prefR, **params).match()
