"""Shared fixtures for ranked-choice tests."""

import pytest
from tests.conftest import make_election


@pytest.fixture
def single_round_majority():
    """Majority in the first round.

        b1: X > Y
        b2: X > Z
        b3: X > Y

    Round 1: X=3, Y=0, Z=0 over 3 active ballots, 2 needed. X wins.
    """
    return make_election({
        "b1": ["X", "Y"],
        "b2": ["X", "Z"],
        "b3": ["X", "Y"],
    })


@pytest.fixture
def elimination_then_majority():
    """Two-way tie for last, then a majority.

        b1: A > B
        b2: A > B
        b3: B > A
        b4: C

    Round 1: A=2, B=1, C=1 over 4 active ballots, 3 needed.
    B and C are both eliminated: b3 moves to A, b4 exhausts.
    Round 2: A=3 over 3 active ballots, 2 needed. A wins.
    """
    return make_election({
        "b1": ["A", "B"],
        "b2": ["A", "B"],
        "b3": ["B", "A"],
        "b4": ["C"],
    })


@pytest.fixture
def full_tie():
    """Two candidates tied forever.

        b1: A > B
        b2: B > A

    Titles: A = "Zodiac", B = "Arrival". Arrival wins on title order.
    """
    return make_election(
        {"b1": ["A", "B"], "b2": ["B", "A"]},
        titles={"A": "Zodiac", "B": "Arrival"},
    )


@pytest.fixture
def zero_vote_candidate():
    """A candidate with no first preferences is dropped before the round.

        b1: A > D
        b2: A > D
        b3: B > D
        b4: B
        b5: C > A

    D has 0 first preferences and is dropped without using a round.
    Round 1: A=2, B=2, C=1 over 5 ballots, 3 needed. C eliminated, b5 to A.
    Round 2: A=3, B=2. A wins.
    """
    return make_election({
        "b1": ["A", "D"],
        "b2": ["A", "D"],
        "b3": ["B", "D"],
        "b4": ["B"],
        "b5": ["C", "A"],
    })


@pytest.fixture
def long_count():
    """Several rounds with exhaustion along the way.

        b1: A > B > C
        b2: A > C
        b3: B > C > A
        b4: B > D
        b5: C > B
        b6: D
        b7: E > D > B

    Round 1: A=2, B=2, C=1, D=1, E=1 over 7 ballots, 4 needed.
      C, D, E tied for last. b5 -> B, b6 exhausts, b7 -> B.
      Majority stays at 4 of 6 active ballots, so no threshold update.
    Round 2: A=2, B=4 over 6 ballots, 4 needed. B wins.
    """
    return make_election({
        "b1": ["A", "B", "C"],
        "b2": ["A", "C"],
        "b3": ["B", "C", "A"],
        "b4": ["B", "D"],
        "b5": ["C", "B"],
        "b6": ["D"],
        "b7": ["E", "D", "B"],
    })
