"""
errors raised while bootstrapping and running the matching actors
"""


class MatchingError(Exception):
    pass


class InvalidPreferenceList(MatchingError, ValueError):
    """a preference list is not a complete permutation of the opposite group"""

    def __init__(self, side, actor_id, reason):
        self.side = side
        self.actor_id = actor_id
        self.reason = reason
        super().__init__("{} {!r}: {}".format(side, actor_id, reason))


class UnknownActor(MatchingError, KeyError):
    def __init__(self, actor_id):
        self.actor_id = actor_id
        super().__init__(actor_id)

    def __str__(self):
        return "no actor registered under id {!r}".format(self.actor_id)


class Unavailable(MatchingError):
    """the target actor is stopped and will never reply"""

    def __init__(self, actor_id):
        self.actor_id = actor_id
        super().__init__("actor {!r} is unavailable".format(actor_id))
