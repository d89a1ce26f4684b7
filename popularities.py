import numpy as np

"""
Random but "realistic" complete preference profiles
- some proposers are intrinsically more popular
- some reviewers are intrinsically more popular
- some proposer-reviewer pairs share interests
We define pop[p,r] = popularity p and r give each other

Pr[p prefers r1 to r2] = pop[p,r1] / (pop[p,r1] + pop[p,r2])
Pr[r prefers p1 to p2] = pop[p1,r] / (pop[p1,r] + pop[p2,r])

Multiplying all popularities by a constant does not change the distribution.
Popularities get large, so we store the log.
"""


def generate_logpop(nbProposers, nbReviewers, rng=None, percent=0.05, factor=10):
    rng = np.random.default_rng(rng)
    logpop = np.zeros((nbProposers, nbReviewers))

    # step 1: some proposers are intrinsically more popular
    alpha = 1
    for p in range(nbProposers):
        logpop[p, :] += np.log(1 / (p + 1) ** alpha)

    # step 2: some reviewers are intrinsically more popular
    alpha = 2
    for r in range(nbReviewers):
        logpop[:, r] += np.log(1 / (r + 1) ** alpha)

    # step 3: some pairs share interests, their mutual popularity is multiplied by factor
    for _ in range(int(percent * nbProposers * nbReviewers)):
        p, r = rng.integers([nbProposers, nbReviewers])
        logpop[p, r] += np.log(factor)

    return logpop


"""
We want Pr[a > b] = pop[a] / (pop[a] + pop[b]), so we draw without
replacement with probability proportional to pop:
Pr[a > b > ... > z] = pop[a] / (pop[a]+pop[b]+...+pop[z])
                    * pop[b] / (pop[b]+...+pop[z])
                    * ...
 <=> sort by increasing X[i] drawn from Exp(pop[i])
 <=> sort by increasing Y[i] = log(-log(Unif))-log(pop[i])
"""


def draw_pref(logpop, rng=None):
    rng = np.random.default_rng(rng)
    r = np.log(-np.log(rng.random(len(logpop))))
    return [int(i) for i in np.argsort(r - logpop, kind="stable")]


def proposer_ids(n):
    return ["p{}".format(i) for i in range(n)]


def reviewer_ids(n):
    return ["r{}".format(i) for i in range(n)]


def draw_profile(logpop, rng=None):
    """complete strict preference tables for both groups, keyed by id"""
    rng = np.random.default_rng(rng)
    nbProposers, nbReviewers = logpop.shape
    proposers, reviewers = proposer_ids(nbProposers), reviewer_ids(nbReviewers)
    prefP = {
        proposers[p]: [reviewers[i] for i in draw_pref(logpop[p, :], rng)]
        for p in range(nbProposers)
    }
    prefR = {
        reviewers[r]: [proposers[i] for i in draw_pref(logpop[:, r], rng)]
        for r in range(nbReviewers)
    }
    return prefP, prefR


def random_profile(size, seed=None):
    rng = np.random.default_rng(seed)
    logpop = generate_logpop(size, size, rng)
    prefP, prefR = draw_profile(logpop, rng)
    return logpop, prefP, prefR
