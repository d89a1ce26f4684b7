import logging

import matplotlib as mpl
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.backends.backend_pdf import PdfPages

import popularities as pop
from coordinator import Coordinator

logger = logging.getLogger(__name__)

"""
In each scenario we draw a random profile of the given size, let the
actors find the stable matching and plot where the matched pairs fall
on the mutual popularity map
"""
scenarios = [
    ("Scenario 1", 10),
    ("Scenario 2", 25),
    ("Scenario 3", 50),
]


def plot_matching(name, logpop, matching, prefP, prefR, pdf):
    proposers, reviewers = list(prefP), list(prefR)
    col = {r: j for j, r in enumerate(reviewers)}
    nbProposers, nbReviewers = logpop.shape

    cmap = mpl.cm.viridis
    norm = mpl.colors.Normalize(vmin=logpop.min(), vmax=logpop.max())

    #####################################

    plt.figure(figsize=(6, 5), tight_layout=True)
    plt.title(name)

    plt.imshow(logpop, origin="lower", norm=norm, cmap=cmap)
    plt.xlabel("reviewers")
    plt.ylabel("proposers")
    plt.colorbar()

    for i, p in enumerate(proposers):
        r = matching.get(p)
        if r is None:
            plt.plot([nbReviewers], [i], "r.", markersize=3)
        else:
            plt.plot([col[r]], [i], "r.", markersize=3)

    plt.xlim((-0.5, nbReviewers + 0.5))
    plt.ylim((-0.5, nbProposers + 0.5))

    pdf.savefig()
    plt.close()

    #####################################

    plt.figure(figsize=(10, 3), tight_layout=True)

    rank_p = sorted(1 + prefP[p].index(r) for p, r in matching.items())
    rank_r = sorted(1 + prefR[r].index(p) for p, r in matching.items())

    ax = plt.subplot(1, 2, 1)
    ax.title.set_text("Rank of the match, proposers side")
    plt.hist(rank_p, bins=np.arange(0.5, nbReviewers + 1.5))
    plt.xlabel("rank")

    ax = plt.subplot(1, 2, 2)
    ax.title.set_text("Rank of the match, reviewers side")
    plt.hist(rank_r, bins=np.arange(0.5, nbProposers + 1.5))
    plt.xlabel("rank")

    pdf.savefig()
    plt.close()


def run_scenarios(filename, seed=None):
    rng = np.random.default_rng(seed)
    results = []
    with PdfPages(filename) as pdf:
        for name, size in scenarios:
            logpop = pop.generate_logpop(size, size, rng)
            prefP, prefR = pop.draw_profile(logpop, rng)
            matching = Coordinator(prefP, prefR).match()
            logger.info("%s: %d pairs matched", name, len(matching))
            plot_matching(name, logpop, matching, prefP, prefR, pdf)
            results.append((name, matching))
    return results


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_scenarios("fig.pdf")
