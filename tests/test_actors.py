"""Tests for the proposer and reviewer actors on their own."""

import asyncio

import pytest

from actors import (
    ACCEPT,
    REJECT,
    ProposerActor,
    ProposerStatus,
    Registry,
    ReviewerActor,
)
from errors import InvalidPreferenceList, Unavailable, UnknownActor


async def settle():
    await asyncio.sleep(0.05)


def build(prefP, prefR):
    reports = []
    proposers, reviewers = Registry("proposer"), Registry("reviewer")
    for p, pr in prefP.items():
        proposers.register(
            ProposerActor(p, pr, reviewers, lambda *event: reports.append(event))
        )
    for r, pr in prefR.items():
        reviewers.register(ReviewerActor(r, pr, proposers))
    return proposers, reviewers, reports


class TestRegistry:
    def test_lookup_unknown(self):
        registry = Registry("reviewer")
        with pytest.raises(UnknownActor) as excinfo:
            registry.lookup("nobody")
        assert excinfo.value.actor_id == "nobody"
        assert isinstance(excinfo.value, KeyError)

    def test_register_twice(self):
        registry = Registry("reviewer")
        registry.register(ReviewerActor("x", ["a"], None))
        with pytest.raises(ValueError):
            registry.register(ReviewerActor("x", ["a"], None))
        assert "x" in registry
        assert len(registry) == 1


class TestReviewer:
    def test_accepts_first_and_trades_up(self):
        async def scenario():
            proposers, reviewers, reports = build(
                {"a": ["x"], "b": ["x"], "c": ["x"]}, {"x": ["b", "a", "c"]}
            )
            for actor in (*proposers, *reviewers):
                actor.start()
            x = reviewers.lookup("x")
            a = proposers.lookup("a")
            # a pretends to have already proposed to x and been accepted
            a.remaining.clear()
            a.match, a.status = "x", ProposerStatus.MATCHED

            answers = [
                await x.ask("propose", "a"),
                await x.ask("propose", "c"),
                await x.ask("propose", "b"),
            ]
            await settle()
            for actor in (*proposers, *reviewers):
                await actor.stop()
            return x, a, answers, reports

        x, a, answers, reports = asyncio.run(scenario())
        assert answers == [ACCEPT, REJECT, ACCEPT]
        assert x.match == "b"
        assert x.history == ["a", "b"]
        # a was told about it and went back to searching, with nobody left
        assert ("unmatched", "a", "x") in reports
        assert ("impossible", "a", None) in reports
        assert a.match is None

    def test_stopped_reviewer_is_unavailable(self):
        async def scenario():
            x = ReviewerActor("x", ["a"], Registry("proposer"))
            x.start()
            await x.stop()
            with pytest.raises(Unavailable):
                await x.ask("propose", "a")

        asyncio.run(scenario())

    def test_reviewer_never_started_is_unavailable(self):
        async def scenario():
            x = ReviewerActor("x", ["a"], Registry("proposer"))
            with pytest.raises(Unavailable):
                await x.ask("propose", "a")

        asyncio.run(scenario())


class TestProposer:
    def test_proposes_down_the_list_until_accepted(self):
        async def scenario():
            proposers, reviewers, reports = build(
                {"a": ["x", "y", "z"], "b": ["x", "y", "z"]},
                {"x": ["b", "a"], "y": ["b", "a"], "z": ["a", "b"]},
            )
            for actor in (*proposers, *reviewers):
                actor.start()
            # x and y are already taken by someone they like better
            reviewers.lookup("x").match = "b"
            reviewers.lookup("y").match = "b"
            a = proposers.lookup("a")
            a.tell("run")
            await settle()
            for actor in (*proposers, *reviewers):
                await actor.stop()
            return a, reports

        a, reports = asyncio.run(scenario())
        assert a.proposed == ["x", "y", "z"]
        assert a.match == "z"
        assert a.status is ProposerStatus.MATCHED
        assert list(a.remaining) == []
        assert reports == [("matched", "a", "z")]

    def test_exhausted_reports_impossible_once(self):
        async def scenario():
            proposers, reviewers, reports = build(
                {"a": ["x"], "b": ["x"]}, {"x": ["b", "a"]}
            )
            for actor in (*proposers, *reviewers):
                actor.start()
            reviewers.lookup("x").match = "b"
            a = proposers.lookup("a")
            a.tell("run")
            await settle()
            a.tell("run")
            await settle()
            for actor in (*proposers, *reviewers):
                await actor.stop()
            return a, reports

        a, reports = asyncio.run(scenario())
        assert a.status is ProposerStatus.EXHAUSTED_UNMATCHED
        assert reports == [("impossible", "a", None)]

    def test_unavailable_reviewer_counts_as_rejection(self):
        async def scenario():
            proposers, reviewers, reports = build(
                {"a": ["x", "y"]}, {"x": ["a"], "y": ["a"]}
            )
            proposers.lookup("a").start()
            # x is never started
            reviewers.lookup("y").start()
            a = proposers.lookup("a")
            a.tell("run")
            await settle()
            for actor in (*proposers, *reviewers):
                await actor.stop()
            return a, reports

        a, reports = asyncio.run(scenario())
        assert a.proposed == ["x", "y"]
        assert a.match == "y"
        assert reports == [("matched", "a", "y")]

    def test_stale_rejection_is_ignored(self):
        async def scenario():
            proposers, reviewers, reports = build({"a": ["x", "y"]}, {"x": ["a"], "y": ["a"]})
            a = proposers.lookup("a")
            a.start()
            a.match, a.status = "y", ProposerStatus.MATCHED
            a.tell("rejected_by", "x")
            await settle()
            await a.stop()
            return a, reports

        a, reports = asyncio.run(scenario())
        assert a.match == "y"
        assert reports == []


class TestStart:
    def test_proposer_list_must_cover_every_reviewer(self):
        async def scenario():
            proposers, reviewers, _ = build(
                {"a": ["x"]}, {"x": ["a"], "y": ["a"]}
            )
            with pytest.raises(InvalidPreferenceList) as excinfo:
                proposers.lookup("a").start()
            return proposers.lookup("a"), excinfo.value

        a, error = asyncio.run(scenario())
        assert error.side == "proposer"
        assert error.actor_id == "a"
        assert not a.running

    def test_reviewer_list_must_not_name_strangers(self):
        async def scenario():
            proposers, reviewers, _ = build({"a": ["x"]}, {"x": ["a", "b"]})
            with pytest.raises(InvalidPreferenceList) as excinfo:
                reviewers.lookup("x").start()
            return excinfo.value

        error = asyncio.run(scenario())
        assert error.side == "reviewer"
        assert "unknown" in error.reason
