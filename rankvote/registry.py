'''The fixed set of voters eligible to vote.'''

from typing import Iterable, Iterator, List

import rankvote.identity
from rankvote.identity import Address, IdentityError
from rankvote.persist import simple_serialization


class UnauthorizedVoter(IdentityError):
    '''A ballot was authorized by an identity that is not a registered voter.

    :param identity: The authorizing identity (the caller or the signer).
    '''
    def __init__(self, identity: Address):
        super().__init__(identity, 'a registered voter')


@simple_serialization
class VoterRegistry:
    '''An immutable register of voters eligible to cast ballots.

    The voters are kept exactly as given: the registry does not remove
    duplicates, so a voter listed twice is also counted twice when the ballots
    are collected for an election. Supplying a sensible list is the
    responsibility of whoever sets up the election.

    :param voters: Addresses of the eligible voters.
    '''
    def __init__(self, voters: Iterable[Address]):
        self._voters = tuple(
            rankvote.identity.to_address(voter) for voter in voters
        )
        self._members = frozenset(self._voters)

    @property
    def voters(self) -> List[Address]:
        return list(self._voters)

    def is_eligible(self, identity: Address) -> bool:
        '''Return True if the identity is a registered voter.

        Malformed identities are simply not eligible.
        '''
        try:
            return rankvote.identity.to_address(identity) in self._members
        except IdentityError:
            return False

    def check(self, identity: Address) -> None:
        '''Check that the identity may vote.

        :raises UnauthorizedVoter: If the identity is not a registered voter.
        '''
        if not self.is_eligible(identity):
            raise UnauthorizedVoter(identity)

    def __iter__(self) -> Iterator[Address]:
        return iter(self._voters)

    def __len__(self) -> int:
        return len(self._voters)

    def __repr__(self) -> str:
        return f'<VoterRegistry({len(self)} voters)>'
