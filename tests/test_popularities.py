"""Tests for the random preference profiles."""

import numpy as np

import popularities as pop
import preferences


def test_logpop_shape_and_popular_first():
    logpop = pop.generate_logpop(5, 4, rng=0, percent=0)
    assert logpop.shape == (5, 4)
    # without shared interests, low indices are the most popular on both sides
    assert np.all(np.diff(logpop, axis=0) < 0)
    assert np.all(np.diff(logpop, axis=1) < 0)


def test_draw_pref_is_a_permutation():
    logpop = np.zeros(6)
    pref = pop.draw_pref(logpop, rng=1)
    assert sorted(pref) == list(range(6))


def test_draw_pref_follows_large_gaps():
    logpop = np.array([0.0, -50.0, -100.0])
    assert pop.draw_pref(logpop, rng=3) == [0, 1, 2]


def test_profile_is_complete_and_strict():
    logpop, prefP, prefR = pop.random_profile(8, seed=2)
    assert logpop.shape == (8, 8)
    assert list(prefP) == pop.proposer_ids(8)
    assert list(prefR) == pop.reviewer_ids(8)
    preferences.validate_tables(prefP, prefR)


def test_same_seed_same_profile():
    assert pop.random_profile(6, seed=9)[1:] == pop.random_profile(6, seed=9)[1:]
