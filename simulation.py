import logging
import os
import sys

import numpy as np

import da
import popularities as pop
import preferences
from coordinator import IDLE_TIMEOUT, Coordinator
from errors import InvalidPreferenceList

logger = logging.getLogger(__name__)

"""size of the random profile used when no preference file is given"""
DEFAULT_SIZE = 20

"""rank of a matched partner in a preference list, 1 is the favourite"""


def ranks(matching, prefP, prefR):
    rank_p = [1 + da.rank(prefP[p], r) for p, r in matching.items()]
    rank_r = [1 + da.rank(prefR[r], p) for p, r in matching.items()]
    return np.array(rank_p), np.array(rank_r)


def statistics(matching, prefP, prefR, nb_proposals=None):
    rank_p, rank_r = ranks(matching, prefP, prefR)
    nb_matched = len(matching)
    return {
        "nb_proposers": len(prefP),
        "nb_reviewers": len(prefR),
        "nb_matched": nb_matched,
        "nb_proposals": nb_proposals,
        "matched_to_favourite": int(np.sum(rank_p == 1)),
        "matched_to_favourites": int(np.sum(rank_p <= 3)),
        "avg_rank_proposers": float(np.average(rank_p)) if nb_matched else None,
        "avg_rank_reviewers": float(np.average(rank_r)) if nb_matched else None,
    }


def print_result(matching, prefP, prefR, stats, impossible):
    print("\n\n****************************************************************")
    print("Model parameters")
    print(
        "\t{} proposers and {} reviewers, complete strict preferences.".format(
            stats["nb_proposers"], stats["nb_reviewers"]
        )
    )
    print(
        "\tEach proposer is an actor walking down its own list, "
        + "each reviewer an actor keeping the best proposal so far."
    )

    print("\n")
    print("Efficiency")
    print(
        "\tNumber of proposers matched {} / {}.".format(
            stats["nb_matched"], stats["nb_proposers"]
        )
    )
    if stats["nb_proposals"] is not None:
        print("\tNumber of proposals sent {}.".format(stats["nb_proposals"]))
    if impossible:
        print("\tProposers rejected by every reviewer {}.".format(sorted(impossible)))

    print("\n")
    print("Proposers preferences")
    print(
        "\tNumber of proposers matched to their favourite {}.".format(
            stats["matched_to_favourite"]
        )
    )
    print(
        "\tNumber of proposers matched to one of their three favourites {}.".format(
            stats["matched_to_favourites"]
        )
    )
    if stats["avg_rank_proposers"] is not None:
        print(
            "\tAverage rank of the match in the proposers lists {:.2f}.".format(
                stats["avg_rank_proposers"]
            )
        )
        print(
            "\tAverage rank of the match in the reviewers lists {:.2f}.".format(
                stats["avg_rank_reviewers"]
            )
        )

    print("\n")
    print("Matching:\n")
    frame = preferences.matching_frame(matching, prefP, prefR)
    print(frame.to_string(index=False))


def run_experiment(prefP, prefR, params, silent):
    coordinator = Coordinator(
        prefP,
        prefR,
        idle_timeout=params.get("idle_timeout", IDLE_TIMEOUT),
        balanced=params.get("balanced", True),
    )
    matching = coordinator.match()

    # the actors must agree with the sequential algorithm
    expected, _ = da.deferred_acceptance(coordinator.prefP, coordinator.prefR)
    expected = {p: r for p, r in expected.items() if r is not None}
    if matching != expected:
        logger.error("actor matching differs from deferred acceptance")
    blocking = da.blocking_pairs(matching, coordinator.prefP, coordinator.prefR)
    if blocking:
        logger.error("blocking pairs in the final matching: %s", blocking)

    nb_proposals = sum(len(p.proposed) for p in coordinator.proposers)
    stats = statistics(matching, coordinator.prefP, coordinator.prefR, nb_proposals)
    stats["stable"] = not blocking
    stats["deferred_acceptance"] = matching == expected

    if not silent:
        print_result(
            matching, coordinator.prefP, coordinator.prefR, stats, coordinator.impossible
        )

    return matching, stats


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("MATCHING_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if len(sys.argv) > 3:
        print(
            "Usage: {} [preferences_filename] [matching_filename]".format(sys.argv[0]),
            file=sys.stderr,
        )
        sys.exit(2)

    if len(sys.argv) >= 2:
        prefP, prefR = preferences.load(sys.argv[1])
        try:
            preferences.validate_tables(prefP, prefR)
        except InvalidPreferenceList as e:
            print("Invalid preferences in {}: {}".format(sys.argv[1], e), file=sys.stderr)
            sys.exit(1)
    else:
        print(
            "No preference file, drawing a random profile of size {}".format(
                DEFAULT_SIZE
            ),
            file=sys.stderr,
        )
        _, prefP, prefR = pop.random_profile(DEFAULT_SIZE)

    params = {"idle_timeout": IDLE_TIMEOUT, "balanced": True}
    matching, stats = run_experiment(prefP, prefR, params, silent=False)

    if len(sys.argv) == 3:
        preferences.save_matching(matching, prefP, prefR, sys.argv[2])
        print("Matching saved to " + sys.argv[2], file=sys.stderr)

    print(
        "\nstable {} / same as deferred acceptance {}".format(
            stats["stable"], stats["deferred_acceptance"]
        ),
        file=sys.stderr,
    )
