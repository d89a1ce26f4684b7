"""
validation and csv storage of the two preference tables

file format, one row per actor:
    side;id;ranking
    proposer;a;x,y,z
    reviewer;x;b,a,c
"""

import logging

import pandas as pd

from da import rank
from errors import InvalidPreferenceList

logger = logging.getLogger(__name__)

PROPOSER, REVIEWER = "proposer", "reviewer"


def validate_preference_list(actor_id, pref, universe, side):
    seen = set()
    for other in pref:
        if other in seen:
            raise InvalidPreferenceList(side, actor_id, "{!r} ranked twice".format(other))
        if other not in universe:
            raise InvalidPreferenceList(side, actor_id, "unknown id {!r}".format(other))
        seen.add(other)
    missing = set(universe) - seen
    if missing:
        raise InvalidPreferenceList(
            side, actor_id, "missing {}".format(sorted(missing, key=str))
        )
    return tuple(pref)


def validate_tables(prefP, prefR, balanced=True):
    """check both tables and return them frozen as id -> tuple

    every list must be a permutation of the whole opposite group, and
    with balanced=True both groups must have the same size
    """
    if not prefP:
        raise InvalidPreferenceList(PROPOSER, None, "no proposers")
    if not prefR:
        raise InvalidPreferenceList(REVIEWER, None, "no reviewers")
    if balanced and len(prefP) != len(prefR):
        raise InvalidPreferenceList(
            PROPOSER,
            None,
            "{} proposers for {} reviewers".format(len(prefP), len(prefR)),
        )

    proposers, reviewers = set(prefP), set(prefR)
    frozenP = {
        p: validate_preference_list(p, pr, reviewers, PROPOSER)
        for p, pr in prefP.items()
    }
    frozenR = {
        r: validate_preference_list(r, pr, proposers, REVIEWER)
        for r, pr in prefR.items()
    }
    return frozenP, frozenR


def load(filename):
    df = pd.read_csv(filename, sep=";", dtype=str, keep_default_na=False)
    expected = {"side", "id", "ranking"}
    if not expected.issubset(df.columns):
        raise ValueError(
            "{}: expected columns {}, got {}".format(
                filename, sorted(expected), list(df.columns)
            )
        )

    tables = {PROPOSER: {}, REVIEWER: {}}
    for side, actor_id, ranking in zip(df["side"], df["id"], df["ranking"]):
        side = side.strip().lower()
        if side not in tables:
            raise ValueError("{}: unknown side {!r}".format(filename, side))
        ranking = [x.strip() for x in ranking.split(",") if x.strip()]
        tables[side][actor_id.strip()] = ranking

    logger.info(
        "loaded %d proposers and %d reviewers from %s",
        len(tables[PROPOSER]),
        len(tables[REVIEWER]),
        filename,
    )
    return tables[PROPOSER], tables[REVIEWER]


def serialize(prefP, prefR, filename):
    rows = [(PROPOSER, p, ",".join(pr)) for p, pr in prefP.items()]
    rows += [(REVIEWER, r, ",".join(pr)) for r, pr in prefR.items()]
    df = pd.DataFrame(rows, columns=["side", "id", "ranking"])
    df.to_csv(filename, sep=";", index=False)


def matching_frame(matching, prefP, prefR):
    """one row per proposer, with the rank each side gives its partner (1 = favourite)"""
    rows = []
    for p in prefP:
        r = matching.get(p)
        if r is None:
            rows.append((p, None, None, None))
        else:
            rows.append((p, r, 1 + rank(prefP[p], r), 1 + rank(prefR[r], p)))
    return pd.DataFrame(
        rows, columns=["proposer", "reviewer", "rank_proposer", "rank_reviewer"]
    )


def save_matching(matching, prefP, prefR, filename):
    matching_frame(matching, prefP, prefR).to_csv(filename, sep=";", index=False)
