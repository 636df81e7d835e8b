'''Evaluators that operate sequentially on ranked ballots.

This hosts the instant-runoff resolver (:class:`InstantRunoffResolver`) that
determines the winner of an epoch by repeated elimination.
'''
import dataclasses
import logging
from typing import Any, Dict, Iterable, Iterator, List, Sequence, Tuple

import rankvote.util
from rankvote.evaluate.core import Evaluator, ResolutionInvariantViolation
from rankvote.persist import simple_serialization

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class RoundResult:
    '''The outcome of a single elimination round.

    :param round: 0-indexed number of the round.
    :param tallies: Votes counted for each candidate in contention, in the
        order of the candidate pool.
    :param eliminated: The candidate eliminated in this round.
    :param remaining: Candidates remaining in contention after the round,
        in pool order.
    '''
    round: int
    tallies: Dict[Any, int]
    eliminated: Any
    remaining: Tuple[Any, ...]


@simple_serialization
class InstantRunoffResolver(Evaluator):
    '''Elect a single winner by eliminating the weakest candidates one by one.

    This is the evaluator for instant-runoff voting (IRV) with one ballot per
    voter. First, a candidate pool is formed from all candidates that appear
    in any of the ballots, in the order of their first appearance (ballot by
    ballot, rank by rank).

    Then, in each round, every ballot counts as a vote for its highest ranked
    candidate that is still in the pool. Ballots with no such candidate are
    exhausted and do not count at all; a candidate ranked more than once on
    a ballot still gets only a single vote from it. The candidate with the
    fewest votes is removed from the pool. If more candidates share the fewest
    votes, the one that comes first in the pool is removed; this tiebreak is
    arbitrary but deterministic.

    When a single candidate remains, they are the winner. As every round
    removes exactly one candidate, there are at most one round fewer than the
    size of the initial pool.
    '''
    def evaluate(self, ballots: Iterable[Sequence[Any]]) -> Any:
        '''Return the winner of the election.

        :param ballots: Ranked ballots, one per voter, in voter order.
        :raises ResolutionInvariantViolation: If no ballot ranks any
            candidate.
        '''
        ballots = [tuple(ballot) for ballot in ballots]
        pool = self.initial_pool(ballots)
        remaining = tuple(pool)
        for result in self.eliminate(ballots, pool):
            remaining = result.remaining
        winner, = remaining
        logger.info('%s elected', winner)
        return winner

    def rounds(self, ballots: Iterable[Sequence[Any]]) -> Iterator[RoundResult]:
        '''Run the elimination rounds, yielding their results one by one.

        :param ballots: Ranked ballots, one per voter, in voter order.
        :raises ResolutionInvariantViolation: If no ballot ranks any
            candidate.
        '''
        ballots = [tuple(ballot) for ballot in ballots]
        yield from self.eliminate(ballots, self.initial_pool(ballots))

    def eliminate(self,
                  ballots: List[Tuple[Any, ...]],
                  pool: List[Any],
                  ) -> Iterator[RoundResult]:
        '''Eliminate candidates from a ready pool until one remains.

        :param ballots: Ranked ballots, one per voter, in voter order.
        :param pool: The initial candidate pool as returned by
            :meth:`initial_pool`. It is not modified.
        '''
        pool = list(pool)
        logger.info('candidate pool of %d: %s', len(pool), pool)
        round_i = 0
        while len(pool) > 1:
            logger.info('proceeding to round %d', round_i)
            tallies = self.tally(ballots, pool)
            logger.info('current vote totals: %s', tallies)
            eliminated = rankvote.util.first_minimum(tallies)
            logger.info('eliminating %s', eliminated)
            pool.remove(eliminated)
            yield RoundResult(round_i, tallies, eliminated, tuple(pool))
            round_i += 1

    def initial_pool(self, ballots: List[Tuple[Any, ...]]) -> List[Any]:
        '''Gather the candidate pool in order of first appearance.

        :raises ResolutionInvariantViolation: If no ballot ranks any
            candidate.
        '''
        pool = rankvote.util.all_ranked_candidates(ballots)
        if not pool:
            raise ResolutionInvariantViolation(len(ballots))
        return pool

    def tally(self,
              ballots: List[Tuple[Any, ...]],
              pool: List[Any],
              ) -> Dict[Any, int]:
        '''Count the highest remaining preferences for a single round.

        :param ballots: Ranked ballots.
        :param pool: Candidates still in contention.
        :returns: Vote counts for all candidates in the pool, in pool order
            (candidates with no votes get zero).
        '''
        totals = {cand: 0 for cand in pool}
        n_exhausted = 0
        for ballot in ballots:
            top = rankvote.util.first_remaining(ballot, totals)
            if top is None:
                n_exhausted += 1
            else:
                totals[top] += 1
        logger.debug('%d ballots exhausted or empty', n_exhausted)
        return totals
