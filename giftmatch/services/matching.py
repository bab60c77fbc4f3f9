from __future__ import annotations

import random
from typing import Dict, FrozenSet, Hashable, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from loguru import logger

MIN_PARTICIPANTS = 3
DEFAULT_MAX_TRIALS = 10

ParticipantId = Hashable
Pair = Tuple[ParticipantId, ParticipantId]
CandidateGraph = Dict[ParticipantId, FrozenSet[ParticipantId]]


class MatchingError(RuntimeError):
    pass


class PreconditionError(MatchingError):
    pass


class InfeasibleMatchError(MatchingError):
    """Some participant has nobody they are allowed to give to."""

    def __init__(self, participant_ids: Sequence[ParticipantId]) -> None:
        self.participant_ids = list(participant_ids)
        super().__init__(
            "No valid matching exists: {0} participant(s) have no eligible recipient.".format(
                len(self.participant_ids)
            )
        )


class MatchNotFoundError(MatchingError):
    """All trials ran out without a complete assignment.

    This does not prove that no assignment exists.
    """

    def __init__(self, trials: int) -> None:
        self.trials = trials
        super().__init__(f"Could not find a valid matching after {trials} attempts.")


def canonical_pair(a: ParticipantId, b: ParticipantId) -> Pair:
    return (a, b) if a <= b else (b, a)


class ExclusionIndex:
    """Symmetric set of participant pairs that must never be matched."""

    def __init__(self, pairs: Optional[Iterable[Pair]] = None) -> None:
        self._pairs: Set[Pair] = set()
        self._partners: Dict[ParticipantId, Set[ParticipantId]] = {}
        for a, b in pairs or []:
            self.add(a, b)

    def add(self, a: ParticipantId, b: ParticipantId) -> None:
        self._pairs.add(canonical_pair(a, b))
        self._partners.setdefault(a, set()).add(b)
        self._partners.setdefault(b, set()).add(a)

    def excluded(self, a: ParticipantId, b: ParticipantId) -> bool:
        return canonical_pair(a, b) in self._pairs

    def partners(self, participant_id: ParticipantId) -> FrozenSet[ParticipantId]:
        return frozenset(self._partners.get(participant_id, ()))

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        return self.excluded(*pair)

    def __iter__(self) -> Iterator[Pair]:
        return iter(sorted(self._pairs))

    def __len__(self) -> int:
        return len(self._pairs)


def build_candidate_graph(
    participant_ids: Sequence[ParticipantId], index: ExclusionIndex
) -> CandidateGraph:
    everyone = frozenset(participant_ids)
    return {
        giver: everyone - {giver} - index.partners(giver)
        for giver in participant_ids
    }


def check_feasibility(graph: CandidateGraph) -> None:
    # Only catches participants with no candidates at all; Hall's condition
    # over larger subsets is left to the search.
    stranded = [giver for giver, receivers in graph.items() if not receivers]
    if stranded:
        raise InfeasibleMatchError(sorted(stranded))


def _run_trial(graph: CandidateGraph, rng: random.Random) -> Optional[Dict[ParticipantId, ParticipantId]]:
    givers: List[ParticipantId] = list(graph)
    rng.shuffle(givers)
    assignments: Dict[ParticipantId, ParticipantId] = {}
    claimed: Set[ParticipantId] = set()

    def backtrack(position: int) -> bool:
        if position == len(givers):
            return True

        giver = givers[position]
        # Sorted first so a seeded rng gives the same result across processes.
        choices = sorted(receiver for receiver in graph[giver] if receiver not in claimed)
        rng.shuffle(choices)
        for receiver in choices:
            assignments[giver] = receiver
            claimed.add(receiver)
            if backtrack(position + 1):
                return True
            claimed.discard(receiver)
            assignments.pop(giver, None)
        return False

    if backtrack(0):
        return assignments
    return None


def find_assignment(
    graph: CandidateGraph,
    rng: random.Random,
    max_trials: int = DEFAULT_MAX_TRIALS,
) -> Dict[ParticipantId, ParticipantId]:
    if max_trials < 1:
        raise PreconditionError("At least one matching attempt is required.")

    for trial in range(1, max_trials + 1):
        assignments = _run_trial(graph, rng)
        if assignments is not None:
            return assignments
        logger.bind(trial=trial, participants=len(graph)).debug("Matching trial failed")

    raise MatchNotFoundError(max_trials)


def validate_assignment(
    assignments: Dict[ParticipantId, ParticipantId],
    participant_ids: Sequence[ParticipantId],
    index: ExclusionIndex,
) -> None:
    everyone = set(participant_ids)
    if set(assignments) != everyone or set(assignments.values()) != everyone:
        raise MatchingError("Assignment does not cover every participant exactly once.")
    for giver, receiver in assignments.items():
        if giver == receiver:
            raise MatchingError("Assignment matches a participant with themselves.")
        if index.excluded(giver, receiver):
            raise MatchingError("Assignment matches an excluded pair.")


def generate_assignment(
    participant_ids: Sequence[ParticipantId],
    exclusions: Optional[Iterable[Pair]] = None,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    max_trials: int = DEFAULT_MAX_TRIALS,
) -> Dict[ParticipantId, ParticipantId]:
    """Match every participant with exactly one recipient.

    Returns a giver -> receiver mapping. Raises ``PreconditionError`` for
    unusable input, ``InfeasibleMatchError`` when somebody has no eligible
    recipient at all, and ``MatchNotFoundError`` when ``max_trials`` random
    orderings all failed.
    """
    participants = list(participant_ids)
    if len(participants) < MIN_PARTICIPANTS:
        raise PreconditionError(f"Need at least {MIN_PARTICIPANTS} participants.")
    if len(set(participants)) != len(participants):
        raise PreconditionError("Participant ids must be unique.")

    index = ExclusionIndex(exclusions)
    graph = build_candidate_graph(participants, index)
    check_feasibility(graph)

    if rng is None:
        rng = random.Random(seed)
    assignments = find_assignment(graph, rng, max_trials=max_trials)
    validate_assignment(assignments, participants, index)
    return assignments
