'''Evaluate the results of the elections.

An evaluator takes the ranked ballots collected for an epoch, one per eligible
voter and in the order the voters were registered, and returns the single
winner. Voters that cast no ballot are represented by empty ballots so that
the evaluators can see the whole electorate.

None of the evaluators validate ballot correctness; use the tools in the
:mod:`rankvote.vote` module for that.
'''

from rankvote.evaluate.core import *    # noqa
