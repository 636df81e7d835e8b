import sys
import os
import random
import logging

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import rankvote.evaluate.core
import rankvote.evaluate.sequential
import rankvote.util

IRV = rankvote.evaluate.sequential.InstantRunoffResolver()


def expand(counts):
    ballots = []
    for ranking, n_votes in counts:
        ballots.extend([tuple(ranking)] * n_votes)
    return ballots


def test_rv_irv_nightmare_12():
    # https://rangevoting.org/rangeVirv.html#nightmare
    ballots = expand([
        ('ABCDE', 50),
        ('BACDE', 51),
        ('CDBEA', 100),
        ('DECBA', 53),
        ('EDCBA', 49),
    ])
    assert IRV.evaluate(ballots) == 'D'
    eliminated = [result.eliminated for result in IRV.rounds(ballots)]
    assert eliminated == ['E', 'A', 'C', 'B']


def test_rv_irv_revfail():
    counts = [('BCA', 9), ('ABC', 8), ('CAB', 7)]
    assert IRV.evaluate(expand(counts)) == 'A'
    reversed_counts = [(ranking[::-1], n) for ranking, n in counts]
    assert IRV.evaluate(expand(reversed_counts)) == 'A'


def test_majority_block():
    ballots = expand([('ABC', 60), ('DBE', 39), ('', 1)])
    assert IRV.evaluate(ballots) == 'A'


def test_second_choice_support():
    ballots = expand([
        ('AB', 20), ('BA', 20), ('CB', 20), ('DB', 20), ('EB', 20),
    ])
    assert IRV.evaluate(ballots) == 'B'


def test_single_candidate():
    ballots = [(), ('A',), ('A', 'A')]
    assert IRV.evaluate(ballots) == 'A'
    assert list(IRV.rounds(ballots)) == []


@pytest.mark.parametrize('ballots', [
    [],
    [()],
    [(), (), ()],
])
def test_empty_pool(ballots):
    with pytest.raises(rankvote.evaluate.core.ResolutionInvariantViolation):
        IRV.evaluate(ballots)
    with pytest.raises(rankvote.evaluate.core.VotingSystemError):
        list(IRV.rounds(ballots))


def test_tiebreak_pool_order():
    assert IRV.evaluate([('B',), ('A',)]) == 'A'
    assert IRV.evaluate([('A',), ('B',)]) == 'B'


def test_pool_voter_by_voter():
    # B is ranked by the first voter, so it enters the pool before C
    ballots = [('A', 'B'), ('A',), ('C',), ('B',)]
    assert IRV.initial_pool(ballots) == ['A', 'B', 'C']
    results = list(IRV.rounds(ballots))
    assert list(results[0].tallies.items()) == [('A', 2), ('B', 1), ('C', 1)]
    assert results[0].eliminated == 'B'
    assert results[1].tallies == {'A': 2, 'C': 1}
    assert results[1].eliminated == 'C'


def test_pool_built_once(monkeypatch):
    calls = []
    original = rankvote.util.all_ranked_candidates

    def counting(ballots):
        calls.append(ballots)
        return original(ballots)

    monkeypatch.setattr(rankvote.util, 'all_ranked_candidates', counting)
    assert IRV.evaluate([('A',), ('B',), ('B',)]) == 'B'
    assert len(calls) == 1


def test_eliminate_keeps_pool():
    ballots = [('A',), ('B',), ('B',), ('C',)]
    pool = IRV.initial_pool(ballots)
    results = list(IRV.eliminate(ballots, pool))
    assert pool == ['A', 'B', 'C']
    assert results[-1].remaining == ('B',)


def test_tiebreak_not_by_name():
    # Z appears first in the pool and gets eliminated despite sorting last
    ballots = [('Z', 'A'), ('A',), ('M',), ('M',)]
    results = list(IRV.rounds(ballots))
    assert results[0].tallies == {'Z': 1, 'A': 1, 'M': 2}
    assert results[0].eliminated == 'Z'
    assert results[1].tallies == {'A': 2, 'M': 2}
    assert results[1].eliminated == 'A'
    assert IRV.evaluate(ballots) == 'M'


def test_exhausted_ballots_abstain():
    ballots = [('A',), ('A',), ('B',), ('C',), ('C',)]
    results = list(IRV.rounds(ballots))
    assert results[0].tallies == {'A': 2, 'B': 1, 'C': 2}
    assert results[0].eliminated == 'B'
    assert results[1].tallies == {'A': 2, 'C': 2}
    assert results[1].eliminated == 'A'
    assert IRV.evaluate(ballots) == 'C'


def test_duplicate_ranking_counts_once():
    ballots = [('A', 'A', 'B'), ('B',), ('C', 'B')]
    results = list(IRV.rounds(ballots))
    assert results[0].tallies == {'A': 1, 'B': 1, 'C': 1}
    assert results[1].tallies == {'B': 2, 'C': 1}
    assert IRV.evaluate(ballots) == 'B'


def test_zero_tally_candidates():
    ballots = [('A', 'B', 'C')] * 3
    results = list(IRV.rounds(ballots))
    assert results[0].tallies == {'A': 3, 'B': 0, 'C': 0}
    assert [r.eliminated for r in results] == ['B', 'C']


def test_rounds_numbered_from_zero():
    ballots = [('A',), ('B',), ('B',), ('C',), ('C',), ('C',)]
    results = list(IRV.rounds(ballots))
    assert [r.round for r in results] == [0, 1]
    assert results[-1].remaining == ('C',)


def test_ballots_not_modified():
    ballots = [['A', 'B'], ['B']]
    IRV.evaluate(ballots)
    assert ballots == [['A', 'B'], ['B']]


RANDOM_BALLOT_SETS = []
_rng = random.Random(1711)
for _ in range(20):
    n_cands = _rng.randint(1, 30)
    cands = [f'C{i}' for i in range(n_cands)]
    RANDOM_BALLOT_SETS.append([
        tuple(_rng.choices(cands, k=_rng.randint(0, 10)))
        for _ in range(_rng.randint(1, 60))
    ] + [('C0',)])


@pytest.mark.parametrize('ballots', RANDOM_BALLOT_SETS)
def test_termination(ballots):
    pool = list(dict.fromkeys(cand for ballot in ballots for cand in ballot))
    results = list(IRV.rounds(ballots))
    assert len(results) == len(pool) - 1
    remaining = list(pool)
    for result in results:
        assert list(result.tallies.keys()) == remaining
        assert result.tallies[result.eliminated] == min(result.tallies.values())
        remaining.remove(result.eliminated)
        assert list(result.remaining) == remaining
    assert IRV.evaluate(ballots) in pool
    assert len(remaining) == 1


def test_round_logging(caplog):
    with caplog.at_level(logging.INFO):
        IRV.evaluate([('A',), ('B',), ('B',)])
    assert 'eliminating A' in caplog.text
    assert 'B elected' in caplog.text
