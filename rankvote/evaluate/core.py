'''General evaluator machinery.'''

import abc
from typing import Any, Iterable, Sequence


class VotingSystemError(Exception):
    '''A voting system with a valid setup ended up in an unresolvable state.'''
    pass


class ResolutionInvariantViolation(VotingSystemError):
    '''The election cannot be resolved since nobody is standing in it.

    Raised when no ballot for the epoch ranks any candidate.

    :param n_ballots: Number of ballots (including empty ones) inspected.
    '''
    def __init__(self, n_ballots: int):
        self.n_ballots = n_ballots
        super().__init__(
            f'no candidates ranked in any of {n_ballots} ballots'
        )


class Evaluator(metaclass=abc.ABCMeta):
    '''Evaluate ranked ballots and elect a single winner.

    A root abstract base class for all evaluators.
    '''
    @abc.abstractmethod
    def evaluate(self, ballots: Iterable[Sequence[Any]]) -> Any:
        '''Return the winner of the election.

        :param ballots: Ranked ballots, one per voter, in voter order.
        '''
        raise NotImplementedError
