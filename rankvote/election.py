'''The election state machine.

An election runs in epochs. During an epoch, registered voters record their
ranked ballots, either personally or by a signature. Once the cooldown period
since the last election has elapsed, anyone can trigger the election, which
evaluates the ballots of the epoch, installs the winner and opens a new epoch
with no ballots.

The state is kept in an immutable :class:`ElectionState` record; every state
transition produces a new record, which is only installed once the transition
has fully succeeded. A failed operation thus never leaves a trace.

The identity of the caller and the current time are supplied by the host
environment and passed explicitly to the operations that need them.
'''

import dataclasses
import logging
from numbers import Real
from typing import Iterable, List, Optional, Sequence

import rankvote.identity
from rankvote.evaluate.core import Evaluator
from rankvote.evaluate.sequential import InstantRunoffResolver
from rankvote.identity import Address
from rankvote.persist import simple_serialization
from rankvote.registry import VoterRegistry
from rankvote.signature import (
    BALLOT_TYPE, BallotDomain, SignatureAuthorizer, SignatureType
)
from rankvote.store import BallotStore
from rankvote.vote import BallotType, RankedBallotValidator, MAX_CANDIDATES

DEFAULT_COOLDOWN = 4 * 365 * 24 * 60 * 60    # four years in seconds

logger = logging.getLogger(__name__)


class ElectionNotYetDue(Exception):
    '''An election was triggered before the cooldown period elapsed.

    :param now: Time at which the election was triggered.
    :param due_after: The election can be triggered at any time after this.
    '''
    def __init__(self, now: Real, due_after: Real):
        self.now = now
        self.due_after = due_after
        super().__init__(
            f'election triggered at {now} not yet due, must be after'
            f' {due_after}'
        )


@simple_serialization
@dataclasses.dataclass(frozen=True)
class ElectionState:
    '''The election state between operations.

    :param winner: Winner of the last election (initially the administrator
        that set up the election).
    :param last_election: Time of the last election (initially the time of
        the setup).
    :param epoch: Number of the current epoch, increased by each election.
    :param cooldown: Time that must elapse between two elections.
    '''
    winner: Address
    last_election: Real
    epoch: int = 0
    cooldown: Real = DEFAULT_COOLDOWN

    @property
    def due_after(self) -> Real:
        return self.last_election + self.cooldown


@simple_serialization
class ElectionScheduler:
    '''Enforce the cooldown between elections and produce their results.

    :param resolver: Evaluator determining the winner from the epoch ballots.
    '''
    def __init__(self, resolver: Optional[Evaluator] = None):
        if resolver is None:
            resolver = InstantRunoffResolver()
        self.resolver = resolver

    def is_due(self, state: ElectionState, now: Real) -> bool:
        '''Return True if an election can be held at the given time.'''
        return now - state.last_election > state.cooldown

    def trigger(self,
                state: ElectionState,
                ballots: Iterable[Sequence[Address]],
                now: Real,
                ) -> ElectionState:
        '''Hold the election, returning the state after it.

        The given state is left untouched.

        :param state: The current election state.
        :param ballots: Ballots of all registered voters for the current
            epoch, in voter order.
        :param now: Current time.
        :raises ElectionNotYetDue: If the cooldown has not elapsed yet.
        :raises ResolutionInvariantViolation: If no ballot ranks any
            candidate.
        '''
        if not self.is_due(state, now):
            raise ElectionNotYetDue(now, state.due_after)
        logger.info('holding election for epoch %d', state.epoch)
        winner = self.resolver.evaluate(ballots)
        return dataclasses.replace(
            state,
            winner=winner,
            last_election=now,
            epoch=state.epoch + 1,
        )


@simple_serialization
class Election:
    '''A ranked-choice election with a fixed electorate.

    Use :meth:`deploy` to set up a new election; the constructor assembles
    one from its components, e.g. when restoring it from a snapshot made by
    :func:`rankvote.persist.to_dict`.

    :param registry: Voters eligible to vote.
    :param store: Recorded ballots.
    :param state: Current election state.
    :param authorizer: Recovers voters from ballot signatures.
    :param scheduler: Holds the elections.
    '''
    def __init__(self,
                 registry: VoterRegistry,
                 store: BallotStore,
                 state: ElectionState,
                 authorizer: Optional[SignatureAuthorizer] = None,
                 scheduler: Optional[ElectionScheduler] = None,
                 ):
        if authorizer is None:
            authorizer = SignatureAuthorizer()
        if scheduler is None:
            scheduler = ElectionScheduler()
        self.registry = registry
        self.store = store
        self.state = state
        self.authorizer = authorizer
        self.scheduler = scheduler

    @classmethod
    def deploy(cls,
               voters: Iterable[Address],
               admin: Address,
               now: Real,
               cooldown: Real = DEFAULT_COOLDOWN,
               max_candidates: int = MAX_CANDIDATES,
               domain: Optional[BallotDomain] = None,
               ballot_type: str = BALLOT_TYPE,
               ) -> 'Election':
        '''Set up a new election.

        :param voters: Addresses of the eligible voters.
        :param admin: Address of the administrator, who holds the position
            until the first election.
        :param now: Current time.
        :param cooldown: Time that must elapse between two elections.
        :param max_candidates: Maximum number of candidates a ballot can rank.
        :param domain: Signing domain for ballot signatures.
        :param ballot_type: Struct type string bound into ballot signatures.
        '''
        return cls(
            registry=VoterRegistry(voters),
            store=BallotStore(RankedBallotValidator(max_candidates)),
            state=ElectionState(
                winner=rankvote.identity.to_address(admin),
                last_election=now,
                cooldown=cooldown,
            ),
            authorizer=SignatureAuthorizer(domain, ballot_type),
        )

    @property
    def epoch(self) -> int:
        return self.state.epoch

    def record_ballot(self,
                      caller: Address,
                      ordered_candidates: Sequence[Address],
                      ) -> BallotType:
        '''Record the caller's own ballot for the current epoch.

        :param caller: The authenticated caller.
        :param ordered_candidates: Candidates ranked from the most preferred.
        :returns: The ballot as recorded.
        :raises UnauthorizedVoter: If the caller is not a registered voter.
        :raises InvalidBallotLength: If the ballot ranks too many candidates.
        '''
        self.registry.check(caller)
        return self.store.record(
            rankvote.identity.to_address(caller),
            self.state.epoch,
            ordered_candidates,
        )

    def record_ballot_with_signature(self,
                                     ordered_candidates: Sequence[Address],
                                     signature: SignatureType,
                                     ) -> Address:
        '''Record a ballot on behalf of the voter that signed it.

        Whoever submits the ballot is irrelevant; it is recorded for the
        signer. The ballot is validated before the signer is recovered, as
        the signer does not change whether the ballot is acceptable.

        :param ordered_candidates: Candidates ranked from the most preferred.
        :param signature: The voter's signature over the ballot.
        :returns: Address of the voter the ballot was recorded for.
        :raises InvalidBallotLength: If the ballot ranks too many candidates.
        :raises IdentityError: If any of the candidates is malformed.
        :raises InvalidSignature: If no signer can be recovered.
        :raises UnauthorizedVoter: If the signer is not a registered voter.
        '''
        ballot = self.store.validator.normalize(ordered_candidates)
        voter = self.authorizer.recover(ballot, signature)
        logger.debug('recovered signer %s', voter)
        self.registry.check(voter)
        self.store.record(voter, self.state.epoch, ballot)
        return voter

    def trigger_election(self, now: Real) -> Address:
        '''Elect a new winner from the ballots of the current epoch.

        :param now: Current time.
        :returns: The new winner.
        :raises ElectionNotYetDue: If the cooldown has not elapsed yet.
        :raises ResolutionInvariantViolation: If no ballot ranks any
            candidate.
        '''
        new_state = self.scheduler.trigger(
            self.state, self.current_ballots(), now
        )
        self.state = new_state
        logger.info('%s won the election, epoch %d opened',
                    new_state.winner, new_state.epoch)
        return new_state.winner

    def current_ballots(self) -> List[BallotType]:
        '''Return the ballots of all registered voters for the current epoch.'''
        return self.store.ballots_for(self.registry, self.state.epoch)

    def get_ballot(self, voter: Address) -> BallotType:
        '''Return the voter's ballot for the current epoch.'''
        return self.store.get(
            rankvote.identity.to_address(voter), self.state.epoch
        )

    def get_cooldown_duration(self) -> Real:
        return self.state.cooldown

    def get_current_winner(self) -> Address:
        return self.state.winner
