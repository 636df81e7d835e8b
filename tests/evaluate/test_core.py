import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import rankvote.evaluate
import rankvote.evaluate.core


def test_abstract():
    with pytest.raises(TypeError):
        eval = rankvote.evaluate.core.Evaluator()


def test_invariant_violation_message():
    err = rankvote.evaluate.ResolutionInvariantViolation(3)
    assert err.n_ballots == 3
    assert '3 ballots' in str(err)
    assert isinstance(err, rankvote.evaluate.VotingSystemError)
