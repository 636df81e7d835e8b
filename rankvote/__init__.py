"""Rankvote - a ranked-choice election state machine.

Rankvote runs a recurring single-winner election for a fixed electorate:

-   Who can vote is fixed when the election is set up, in a voter registry
    (the ``registry`` module).
-   What ballots are valid is checked by the ballot validators from the
    ``vote`` module; ranked ballots are recorded in a ``store`` per epoch,
    either for the caller or for a voter recovered from a signature by the
    ``signature`` module.
-   Who wins is determined by the instant-runoff evaluator in the
    ``evaluate`` subpackage.

The :class:`Election` object from the :mod:`election` module ties these
together and enforces the cooldown between elections. Its state can be saved
to and restored from JSON-ready dictionaries by the :mod:`persist` module.
"""
