import random
import uuid

import pytest

from giftmatch.services.matching import (
    ExclusionIndex,
    InfeasibleMatchError,
    MatchingError,
    MatchNotFoundError,
    PreconditionError,
    build_candidate_graph,
    canonical_pair,
    check_feasibility,
    find_assignment,
    generate_assignment,
    validate_assignment,
)

# A, B and C can only give to D, so nobody is stranded but no full match exists.
TRAPPED = ["A", "B", "C", "D"]
TRAPPED_EXCLUSIONS = [("A", "B"), ("A", "C"), ("B", "C")]


def assert_valid(assignments, participants, exclusions=()):
    index = ExclusionIndex(exclusions)
    assert set(assignments.keys()) == set(participants)
    assert sorted(assignments.values()) == sorted(participants)
    for giver, receiver in assignments.items():
        assert giver != receiver
        assert not index.excluded(giver, receiver)


def test_assignment_basic_bijection():
    participants = [1, 2, 3, 4]
    assignments = generate_assignment(participants, seed=42)
    assert_valid(assignments, participants)


def test_three_participants_form_a_cycle():
    for seed in range(20):
        assignments = generate_assignment(["A", "B", "C"], seed=seed)
        assert_valid(assignments, ["A", "B", "C"])
        assert assignments[assignments[assignments["A"]]] == "A"


def test_assignment_respects_exclusions():
    participants = ["A", "B", "C", "D"]
    for seed in range(20):
        assignments = generate_assignment(participants, exclusions=[("A", "B")], seed=seed)
        assert_valid(assignments, participants, [("A", "B")])
        assert assignments["A"] != "B"
        assert assignments["B"] != "A"


def test_single_exclusion_among_three_is_never_violated():
    # A and B may both only give to C, so the search has to give up.
    for seed in range(10):
        with pytest.raises(MatchNotFoundError):
            generate_assignment(["A", "B", "C"], exclusions=[("A", "B")], seed=seed)


def test_assignment_deterministic_seed():
    participants = list(range(1, 9))
    first = generate_assignment(participants, exclusions=[(1, 2), (3, 4)], seed=123)
    second = generate_assignment(participants, exclusions=[(1, 2), (3, 4)], seed=123)
    assert first == second


def test_assignment_accepts_rng():
    participants = [10, 20, 30, 40, 50]
    assignments = generate_assignment(participants, rng=random.Random(7))
    assert_valid(assignments, participants)


def test_assignment_larger_group_with_exclusions():
    participants = list(range(30))
    exclusions = [(n, n + 1) for n in range(0, 30, 2)]
    assignments = generate_assignment(participants, exclusions=exclusions, seed=2024)
    assert_valid(assignments, participants, exclusions)


def test_assignment_with_uuid_participants():
    participants = [uuid.uuid4() for _ in range(6)]
    exclusions = [(participants[0], participants[1])]
    assignments = generate_assignment(participants, exclusions=exclusions, seed=3)
    assert_valid(assignments, participants, exclusions)


def test_assignment_fails_for_two_participants():
    with pytest.raises(PreconditionError):
        generate_assignment(["A", "B"], seed=1)


def test_assignment_fails_for_duplicate_participants():
    with pytest.raises(PreconditionError):
        generate_assignment([1, 2, 2, 3])


def test_stranded_participant_is_structurally_infeasible():
    for seed in range(10):
        with pytest.raises(InfeasibleMatchError) as excinfo:
            generate_assignment(["A", "B", "C"], exclusions=[("A", "B"), ("A", "C")], seed=seed)
        assert excinfo.value.participant_ids == ["A"]


def test_stranded_participant_rejected_before_search(monkeypatch):
    def fail_search(*args, **kwargs):
        raise AssertionError("search must not run")

    monkeypatch.setattr("giftmatch.services.matching.find_assignment", fail_search)
    with pytest.raises(InfeasibleMatchError):
        generate_assignment(["A", "B", "C"], exclusions=[("A", "B"), ("A", "C")])


def test_hidden_infeasibility_exhausts_trials():
    with pytest.raises(MatchNotFoundError) as excinfo:
        generate_assignment(TRAPPED, exclusions=TRAPPED_EXCLUSIONS, seed=5)
    assert excinfo.value.trials == 10
    assert not isinstance(excinfo.value, InfeasibleMatchError)


def test_trial_budget_is_configurable():
    with pytest.raises(MatchNotFoundError) as excinfo:
        generate_assignment(TRAPPED, exclusions=TRAPPED_EXCLUSIONS, seed=5, max_trials=3)
    assert excinfo.value.trials == 3


def test_zero_trials_is_a_precondition_error():
    with pytest.raises(PreconditionError):
        generate_assignment([1, 2, 3], max_trials=0)


def test_first_successful_trial_wins():
    graph = build_candidate_graph([1, 2, 3], ExclusionIndex())

    class CountingRandom(random.Random):
        shuffles = 0

        def shuffle(self, x):
            CountingRandom.shuffles += 1
            super().shuffle(x)

    find_assignment(graph, CountingRandom(1), max_trials=10)
    # One giver shuffle plus one candidate shuffle per giver on the winning path.
    assert CountingRandom.shuffles <= 1 + 3 * 2


def test_exclusion_index_is_symmetric():
    index = ExclusionIndex([(1, 2)])
    assert index.excluded(1, 2)
    assert index.excluded(2, 1)
    assert not index.excluded(1, 3)
    assert (2, 1) in index


def test_exclusion_index_insertion_is_idempotent():
    one_way = ExclusionIndex([("A", "B")])
    both_ways = ExclusionIndex([("A", "B"), ("B", "A"), ("A", "B")])
    assert len(one_way) == len(both_ways) == 1
    assert list(one_way) == list(both_ways) == [("A", "B")]
    for a, b in [("A", "B"), ("B", "A"), ("A", "C"), ("C", "B")]:
        assert one_way.excluded(a, b) == both_ways.excluded(a, b)
    assert both_ways.partners("A") == frozenset({"B"})


def test_empty_exclusion_index():
    index = ExclusionIndex()
    assert len(index) == 0
    assert not index.excluded("A", "B")
    assert index.partners("A") == frozenset()


def test_canonical_pair_orders_members():
    assert canonical_pair(5, 2) == (2, 5)
    assert canonical_pair(2, 5) == (2, 5)


def test_candidate_graph_drops_self_and_excluded():
    graph = build_candidate_graph(["A", "B", "C", "D"], ExclusionIndex([("A", "B")]))
    assert graph["A"] == frozenset({"C", "D"})
    assert graph["B"] == frozenset({"C", "D"})
    assert graph["C"] == frozenset({"A", "B", "D"})


def test_check_feasibility_passes_trapped_configuration():
    graph = build_candidate_graph(TRAPPED, ExclusionIndex(TRAPPED_EXCLUSIONS))
    check_feasibility(graph)
    assert graph["A"] == graph["B"] == graph["C"] == frozenset({"D"})


def test_validate_assignment_rejects_excluded_pair():
    index = ExclusionIndex([(1, 2)])
    with pytest.raises(MatchingError):
        validate_assignment({1: 2, 2: 3, 3: 1}, [1, 2, 3], index)


def test_validate_assignment_rejects_self_match():
    with pytest.raises(MatchingError):
        validate_assignment({1: 1, 2: 3, 3: 2}, [1, 2, 3], ExclusionIndex())


def test_validate_assignment_rejects_partial_cover():
    with pytest.raises(MatchingError):
        validate_assignment({1: 2, 2: 1}, [1, 2, 3], ExclusionIndex())
