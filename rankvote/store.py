'''Storage of ranked ballots by voter and epoch.'''

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from rankvote.identity import Address
from rankvote.persist import simple_serialization
from rankvote.vote import BallotType, RankedBallotValidator

logger = logging.getLogger(__name__)


@simple_serialization
class BallotStore:
    '''Record and retrieve ranked ballots of voters for each epoch.

    Every voter has at most one ballot per epoch; recording a new one replaces
    the previous ballot entirely. Ballots of past epochs stay in the store
    but are never changed again, since ballots are only ever recorded for the
    current epoch.

    The store does not check who the voter is; that is the business of
    the caller.

    :param validator: Validator to check the ballots with before recording.
    :param ballots: Previously recorded ballots keyed by (voter, epoch).
    '''
    def __init__(self,
                 validator: Optional[RankedBallotValidator] = None,
                 ballots: Optional[Dict[Tuple[Address, int], BallotType]] = None,
                 ):
        if validator is None:
            validator = RankedBallotValidator()
        self.validator = validator
        self.ballots = {
            key: tuple(ballot) for key, ballot in (ballots or {}).items()
        }

    def record(self,
               voter: Address,
               epoch: int,
               ordered_candidates: Sequence[Address],
               ) -> BallotType:
        '''Record the voter's ballot for the epoch, replacing any earlier one.

        :param voter: Address of the voter.
        :param epoch: Epoch to record the ballot for.
        :param ordered_candidates: Candidates ranked from the most preferred.
        :returns: The ballot as recorded (with normalized addresses).
        :raises InvalidBallotLength: If the ballot ranks too many candidates.
        :raises IdentityError: If any of the candidates is malformed.
        '''
        ballot = self.validator.normalize(ordered_candidates)
        key = (voter, epoch)
        if key in self.ballots:
            logger.debug('replacing ballot of %s for epoch %d', voter, epoch)
        self.ballots[key] = ballot
        logger.debug('recorded ballot of %s for epoch %d: %s',
                     voter, epoch, ballot)
        return ballot

    def get(self, voter: Address, epoch: int) -> BallotType:
        '''Return the voter's ballot for the epoch, empty if none was cast.'''
        return self.ballots.get((voter, epoch), ())

    def ballots_for(self,
                    voters: Iterable[Address],
                    epoch: int,
                    ) -> List[BallotType]:
        '''Return the ballots of the given voters for the epoch, in order.

        Voters that cast no ballot are represented by an empty ballot.
        '''
        return [self.get(voter, epoch) for voter in voters]

    def __len__(self) -> int:
        return len(self.ballots)
