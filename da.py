"""
proposer-proposing deferred acceptance, sequential version
takes as input two tables id -> complete preference list

used as the reference the actor implementation must agree with,
plus the stability checks on a final matching
"""


def rank(pref, target):
    return pref.index(target)


def prefers(pref, candidate, current):
    """True if candidate comes before current in pref

    linear scan from the most preferred, stopping at the first of the two ids
    """
    for other in pref:
        if other == candidate:
            return True
        if other == current:
            return False
    raise ValueError("neither {!r} nor {!r} is ranked".format(candidate, current))


def deferred_acceptance(prefP, prefR):
    # rankR[r][p] = rank of p in the list of r
    rankR = {r: {p: k for k, p in enumerate(pr)} for r, pr in prefR.items()}

    # propP[p] = rank of the next proposal from p
    propP = {p: 0 for p in prefP}

    # matchR[r] = tentative match of r
    matchR = {r: None for r in prefR}

    free = list(prefP)
    free.reverse()
    while free:
        p = free.pop()
        if propP[p] >= len(prefP[p]):
            # p has been rejected by everybody
            continue
        r = prefP[p][propP[p]]
        propP[p] += 1
        current = matchR[r]
        if current is None:
            matchR[r] = p
        elif rankR[r][p] < rankR[r][current]:
            matchR[r] = p
            free.append(current)
        else:
            free.append(p)

    # matchP[p] = match of p
    matchP = {p: None for p in prefP}
    for r, p in matchR.items():
        if p is not None:
            matchP[p] = r

    return matchP, matchR


def blocking_pairs(matching, prefP, prefR):
    """pairs (p, r) who both prefer each other to their partner in matching

    matching maps proposer -> reviewer, unmatched actors are simply absent
    """
    matchR = {r: p for p, r in matching.items()}
    result = []
    for p, pr in prefP.items():
        current = matching.get(p)
        for r in pr:
            if r == current:
                # everything after current is worse for p
                break
            other = matchR.get(r)
            if other is None or prefers(prefR[r], p, other):
                result.append((p, r))
    return result


def is_stable(matching, prefP, prefR):
    return not blocking_pairs(matching, prefP, prefR)


def is_bijection(matching, prefP, prefR):
    return (
        set(matching) == set(prefP)
        and set(matching.values()) == set(prefR)
        and len(set(matching.values())) == len(matching)
    )
