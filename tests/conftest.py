import pytest


@pytest.fixture
def literal_profile():
    """3x3 profile with two stable matchings

    proposer-optimal: a->x, b->y, c->z
    reviewer-optimal: a->y, b->x, c->z
    """
    prefP = {
        "a": ["x", "y", "z"],
        "b": ["y", "x", "z"],
        "c": ["x", "y", "z"],
    }
    prefR = {
        "x": ["b", "a", "c"],
        "y": ["a", "b", "c"],
        "z": ["a", "b", "c"],
    }
    return prefP, prefR
