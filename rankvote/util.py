'''Various utility functions for other modules of Rankvote.

There should normally be no need to use these functions directly.
'''

from typing import Any, Collection, Dict, Iterable, List, Optional, Sequence


def all_ranked_candidates(ballots: Iterable[Sequence[Any]]) -> List[Any]:
    '''Return a list of all candidates appearing in any of the ballots.

    Preserves the input ordering: the candidates of the first ballot are listed
    in the order of their ranking, then the candidates of the second ballot
    that have not appeared yet, etc.

    :param ballots: Ranked ballots.
    :returns: All unique candidates from the ballots.
    '''
    output = []
    seen = set()
    for ballot in ballots:
        for cand in ballot:
            if cand not in seen:
                seen.add(cand)
                output.append(cand)
    return output


def first_remaining(ballot: Sequence[Any],
                    remaining: Collection[Any],
                    ) -> Optional[Any]:
    '''Return the highest ranked candidate of the ballot still in contention.

    :returns: None if none of the ranked candidates remain (the ballot is
        exhausted).
    '''
    for cand in ballot:
        if cand in remaining:
            return cand
    return None


def first_minimum(totals: Dict[Any, int]) -> Any:
    '''Return the key with the lowest value, the first one on ties.'''
    lowest = None
    lowest_total = None
    for key, total in totals.items():
        if lowest_total is None or total < lowest_total:
            lowest = key
            lowest_total = total
    return lowest
