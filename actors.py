"""
proposers and reviewers as independent asyncio actors

Each actor owns a mailbox drained by a single task, so its messages are
handled one at a time in arrival order. Actors only talk through messages:
tell() posts and returns at once, ask() posts and returns a future that only
the caller awaits.
"""

import asyncio
import enum
import logging
from collections import deque

from da import prefers
from errors import Unavailable, UnknownActor
from preferences import PROPOSER, REVIEWER, validate_preference_list

logger = logging.getLogger(__name__)

ACCEPT, REJECT = "accept", "reject"


class ProposerStatus(enum.Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    MATCHED = "matched"
    EXHAUSTED_UNMATCHED = "exhausted_unmatched"


class Registry:
    """id -> actor table for one of the two groups"""

    def __init__(self, name):
        self.name = name
        self._actors = {}

    def register(self, actor):
        if actor.actor_id in self._actors:
            raise ValueError(
                "{} {!r} registered twice".format(self.name, actor.actor_id)
            )
        self._actors[actor.actor_id] = actor
        return actor

    def lookup(self, actor_id):
        try:
            return self._actors[actor_id]
        except KeyError:
            raise UnknownActor(actor_id) from None

    def __iter__(self):
        return iter(self._actors.values())

    def __len__(self):
        return len(self._actors)

    def __contains__(self, actor_id):
        return actor_id in self._actors

    def ids(self):
        return set(self._actors)


class Actor:
    def __init__(self, actor_id):
        self.actor_id = actor_id
        self._mailbox = None
        self._task = None
        self._stopped = False

    def __repr__(self):
        return "{}({!r})".format(type(self).__name__, self.actor_id)

    @property
    def running(self):
        return self._task is not None and not self._stopped

    def start(self):
        if self._task is not None:
            return
        self._mailbox = asyncio.Queue()
        self._task = asyncio.get_running_loop().create_task(
            self._drain(), name=repr(self)
        )

    def tell(self, message, *args):
        self._post(message, args, None)

    def ask(self, message, *args):
        reply = asyncio.get_running_loop().create_future()
        self._post(message, args, reply)
        return reply

    def _post(self, message, args, reply):
        if not self.running:
            if reply is not None:
                reply.set_exception(Unavailable(self.actor_id))
            else:
                logger.debug("%r is not running, dropping %s%r", self, message, args)
            return
        self._mailbox.put_nowait((message, args, reply))

    async def _drain(self):
        while True:
            message, args, reply = await self._mailbox.get()
            try:
                result = await getattr(self, "on_" + message)(*args)
            except Exception as e:
                logger.exception("%r failed on %s%r", self, message, args)
                if reply is not None and not reply.done():
                    reply.set_exception(e)
            else:
                if reply is not None and not reply.done():
                    reply.set_result(result)

    async def stop(self):
        if self._task is None or self._stopped:
            return
        self._stopped = True
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        # whoever is still waiting on us will never get an answer
        while not self._mailbox.empty():
            message, args, reply = self._mailbox.get_nowait()
            if reply is not None and not reply.done():
                reply.set_exception(Unavailable(self.actor_id))


class ProposerActor(Actor):
    """walks down its own preference list until some reviewer keeps it

    report(kind, proposer, reviewer) is how state changes reach the coordinator

    start() raises InvalidPreferenceList unless pref is a permutation of the
    registered reviewers; an empty registry is not checked
    """

    def __init__(self, actor_id, pref, reviewers, report):
        super().__init__(actor_id)
        self.pref = tuple(pref)
        self.reviewers = reviewers
        self.report = report
        # untried reviewers, consumed from the left and never refilled
        self.remaining = deque(self.pref)
        self.match = None
        self.status = ProposerStatus.IDLE
        self.proposed = []

    def start(self):
        if self.reviewers:
            validate_preference_list(
                self.actor_id, self.pref, self.reviewers.ids(), PROPOSER
            )
        super().start()

    async def on_run(self):
        if self.status in (ProposerStatus.MATCHED, ProposerStatus.EXHAUSTED_UNMATCHED):
            logger.debug("%r ignores run while %s", self, self.status.value)
            return

        if not self.remaining:
            self.status = ProposerStatus.EXHAUSTED_UNMATCHED
            logger.debug("%r rejected by everybody", self)
            self.report("impossible", self.actor_id, None)
            return

        self.status = ProposerStatus.SEARCHING
        r = self.remaining.popleft()
        self.proposed.append(r)
        try:
            answer = await self.reviewers.lookup(r).ask("propose", self.actor_id)
        except Unavailable:
            logger.warning("%r: reviewer %r unavailable, counted as a rejection", self, r)
            answer = REJECT

        if answer == ACCEPT:
            self.match = r
            self.status = ProposerStatus.MATCHED
            logger.debug("%r accepted by %r", self, r)
            self.report("matched", self.actor_id, r)
        else:
            logger.debug("%r rejected by %r", self, r)
            self.tell("run")

    async def on_rejected_by(self, reviewer):
        if self.status is not ProposerStatus.MATCHED or self.match != reviewer:
            logger.debug("%r ignores stale rejection from %r", self, reviewer)
            return

        logger.debug("%r dropped by %r", self, reviewer)
        self.report("unmatched", self.actor_id, reviewer)
        self.match = None
        self.status = ProposerStatus.SEARCHING
        self.tell("run")


class ReviewerActor(Actor):
    """keeps the best proposer seen so far and releases the previous one"""

    def __init__(self, actor_id, pref, proposers):
        super().__init__(actor_id)
        self.pref = tuple(pref)
        self.proposers = proposers
        self.match = None
        # successive matches, each strictly preferred to the one before
        self.history = []

    def start(self):
        if self.proposers:
            validate_preference_list(
                self.actor_id, self.pref, self.proposers.ids(), REVIEWER
            )
        super().start()

    async def on_propose(self, proposer):
        current = self.match
        if current is not None and not prefers(self.pref, proposer, current):
            return REJECT

        if current is not None:
            self.proposers.lookup(current).tell("rejected_by", self.actor_id)
            logger.debug("%r trades %r for %r", self, current, proposer)
        self.match = proposer
        self.history.append(proposer)
        return ACCEPT
