'''Ranked ballots and their validation.

A ballot is a voter's ranking of candidates for a single epoch, represented as
a tuple of candidate addresses ordered from the most preferred. The rules
imposed on ballots are deliberately lenient:

-   A ballot may rank at most :data:`MAX_CANDIDATES` candidates.
-   Every ranked candidate must be a well-formed address (checked by
    a nominator from the :mod:`identity` module).
-   The same candidate may be ranked more than once; only the first occurrence
    has any effect on the count.
-   Voters may rank themselves.
-   An empty ballot is valid and amounts to abstaining.

If a ballot is invalid, the validator raises a subclass of
:class:`BallotError` (or :class:`rankvote.identity.IdentityError`, if
a candidate contained in the ballot is malformed).
'''

import abc
from typing import Tuple, Optional, Sequence

import rankvote.identity
from rankvote.identity import Address
from rankvote.persist import simple_serialization

MAX_CANDIDATES = 10

BallotType = Tuple[Address, ...]


class BallotError(Exception, metaclass=abc.ABCMeta):
    '''A ballot is invalid given the election rules.'''
    pass


class BallotTypeError(BallotError):
    '''A ballot is of an invalid type.

    :param btype: Ballot type detected as invalid.
    :param expected: Ballot type that was expected.
    '''
    def __init__(self, btype: type, expected: type = None):
        self.btype = btype
        self.expected = expected
        message = f'invalid ballot type: {btype}'
        if expected:
            message += f', must be {expected}'
        super().__init__(message)


class InvalidBallotLength(BallotError):
    '''A ballot ranks too many candidates.

    :param value: Number of candidates ranked by the ballot.
    :param max_value: Maximum number of candidates permissible.
    '''
    def __init__(self, value: int, max_value: int = MAX_CANDIDATES):
        self.value = value
        self.max_value = max_value
        super().__init__(
            f'invalid ballot length: {value}, must be <={max_value}'
        )


class BallotLengthChecker:
    '''A helper class to check if a ballot length is within bounds.

    :param max_value: Upper bound (inclusive) for the length. None means the
        bound is not checked.
    '''
    def __init__(self, max_value: Optional[int] = MAX_CANDIDATES):
        self.max_value = max_value

    def is_valid(self, value: int) -> bool:
        '''Return True if the length is within the bound.'''
        return self.max_value is None or value <= self.max_value

    def check(self, value: int) -> None:
        '''Check if the length is within the bound.

        :raises InvalidBallotLength: If the length is over the bound.
        '''
        if not self.is_valid(value):
            raise InvalidBallotLength(value, self.max_value)


DEFAULT_NOMINATOR = rankvote.identity.AddressNominator()


@simple_serialization
class RankedBallotValidator:
    '''Validate a ranked ballot (ordering of a number of candidate addresses).

    The ballot must be a list or tuple of candidates. Unlike stricter ranked
    vote validators, this one does not reject duplicated candidates.

    :param max_candidates: Maximum number of entries any ballot can contain.
        None means the length is not checked.
    :param nominator: Nominator used to check candidates. The default only
        checks that the candidates are well-formed addresses.
    '''
    def __init__(self,
                 max_candidates: Optional[int] = MAX_CANDIDATES,
                 nominator: rankvote.identity.Nominator = DEFAULT_NOMINATOR,
                 ):
        self.max_candidates = max_candidates
        self.nominator = nominator
        self._length_checker = BallotLengthChecker(max_candidates)

    def validate(self, ballot: Sequence[Address]) -> None:
        '''Check if the ranked ballot is valid.

        :param ballot: Ranked ballot to be checked.
        :raises BallotTypeError: If the ballot is not a list or tuple.
        :raises InvalidBallotLength: If the ballot ranks more candidates than
            allowed.
        :raises IdentityError: If any of the contained candidates
            is malformed.
        '''
        if not isinstance(ballot, (tuple, list)):
            raise BallotTypeError(type(ballot), tuple)
        self._length_checker.check(len(ballot))
        for cand in ballot:
            self.nominator.validate(cand)

    def normalize(self, ballot: Sequence[Address]) -> BallotType:
        '''Validate the ballot and return it as a tuple of normalized
        addresses.'''
        self.validate(ballot)
        return tuple(rankvote.identity.to_address(cand) for cand in ballot)
