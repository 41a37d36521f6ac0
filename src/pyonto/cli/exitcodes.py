"""Semantic exit codes for the pyonto CLI.

Follows grep/diff/cmp convention:
    0 = success (at least one result for ask)
    1 = error
    2 = no results (ask only)
"""

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_NO_RESULTS = 2
