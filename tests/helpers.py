from collections.abc import Sequence


class ScriptedRandom:
    """RandomSource that picks by index from a fixed script instead of at random."""

    def __init__(self, picks: list[int]):
        self.picks = list(picks)
        self.seen: list[Sequence] = []

    def choice(self, seq):
        self.seen.append(list(seq))
        return seq[self.picks.pop(0)]


class FirstChoice:
    """RandomSource that always takes the first element."""

    def choice(self, seq):
        return seq[0]
