"""A commandline tool for quick evaluation of ranked ballot files.

Reads a JSON file with the registered voters and their ballots, shows the
elimination rounds and the winner. The file looks like this::

    {
        "voters": ["0x...", "0x..."],
        "ballots": {"0x...": ["0x...", "0x..."]}
    }
"""

import argparse
import io
import json
import logging
import sys
import warnings
from typing import List, Tuple

import rankvote.identity
import rankvote.util
from rankvote.evaluate.sequential import InstantRunoffResolver, RoundResult
from rankvote.registry import VoterRegistry
from rankvote.store import BallotStore
from rankvote.vote import BallotType, RankedBallotValidator, MAX_CANDIDATES

argparser = argparse.ArgumentParser(
    description=__doc__,
    formatter_class=argparse.RawDescriptionHelpFormatter,
)
argparser.add_argument(
    '-i', '--input-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='file to load voters and ballots from',
)
argparser.add_argument(
    '-I', '--use-stdin',
    action='store_true',
    help='load voters and ballots from standard input',
)
argparser.add_argument(
    '-m', '--max-candidates',
    type=int,
    default=MAX_CANDIDATES,
    help='maximum number of candidates a ballot may rank',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all evaluator log messages and other info',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any evaluator log messages or other info',
)


def main(input_file: io.TextIOBase,
         use_stdin: bool = False,
         max_candidates: int = MAX_CANDIDATES,
         verbose: bool = False,
         quiet: bool = False,
         ) -> None:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    if use_stdin:
        input_file = sys.stdin
    voters, ballots = load_ballots(input_file, max_candidates=max_candidates)
    if not any(ballots):
        warnings.warn('no candidates ranked: cannot evaluate election,'
                      ' terminating')
        return
    show_ballot_stats(voters, ballots)
    print()
    print('Evaluating the election...')
    resolver = InstantRunoffResolver()
    pool = resolver.initial_pool(ballots)
    remaining = tuple(pool)
    for result in resolver.eliminate(ballots, pool):
        show_round(result)
        remaining = result.remaining
    print()
    print('Elected', remaining[0])


def load_ballots(input_file: io.TextIOBase,
                 max_candidates: int = MAX_CANDIDATES,
                 ) -> Tuple[List[str], List[BallotType]]:
    """Load voters and their ballots, in voter order, from a JSON file."""
    data = json.load(input_file)
    try:
        registry = VoterRegistry(data['voters'])
    except KeyError as e:
        raise ValueError('invalid ballot file: no voters given') from e
    store = BallotStore(RankedBallotValidator(max_candidates))
    for voter, ballot in data.get('ballots', {}).items():
        if registry.is_eligible(voter):
            store.record(rankvote.identity.to_address(voter), 0, ballot)
        else:
            warnings.warn(f'ignoring ballot of unregistered voter {voter}')
    return registry.voters, store.ballots_for(registry, 0)


def show_ballot_stats(voters: List[str], ballots: List[BallotType]) -> None:
    n_cast = sum(1 for ballot in ballots if ballot)
    print(f'Received {n_cast} ballots from {len(voters)} registered voters')
    all_cands = sorted(rankvote.util.all_ranked_candidates(ballots))
    print(f'{len(all_cands)} candidates ranked on any ballot'
          f' (in alphabetical order):')
    for cand in all_cands:
        print(' ' * 10 + str(cand))


def show_round(result: RoundResult) -> None:
    """Show vote totals of a single elimination round."""
    print()
    print(f'Round {result.round}:')
    n_just_chars = len(max(
        (str(total) for total in result.tallies.values()), key=len
    ))
    for cand, total in result.tallies.items():
        mark = ' (eliminated)' if cand == result.eliminated else ''
        print(str(total).rjust(n_just_chars), ' ', cand, mark, sep='')


if __name__ == '__main__':
    args = argparser.parse_args()
    if not args.input_file and not args.use_stdin:
        argparser.print_usage()
    else:
        main(**vars(args))
