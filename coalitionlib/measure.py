"""Measure proportionality of apportionment results.

These functions evaluate how proportionally the seats are allocated to parties
according to their votes received. For a review of such indicators, see
[#kalog]_. All of them take an :class:`ApportionmentResult`, which carries
both the vote and the seat shares of every party.

.. [#kalog] "Measures of disproportionality", Kalogirou.
    http://www2.stat-athens.aueb.gr/~jpan/diatrives/Kalogirou/chapter5.pdf
"""

import math
from fractions import Fraction
from typing import List, Tuple

from coalitionlib.apportion import ApportionmentResult


def gallagher(result: ApportionmentResult) -> float:
    """Compute the Gallagher index of election result disproportionality.

    The Gallagher (LSq) index [#lsq]_ expresses the mismatch between the
    fraction of votes received and seats allocated for each party.
    The index ranges from zero (no disproportionality) to 1 (total
    disproportionality).
    Compared to the Loosemore–Hanby index, it highlights large deviations
    rather than small ones.

    .. [#lsq] "Gallagher index", Wikipedia.
        https://en.wikipedia.org/wiki/Gallagher_index
    """
    return math.sqrt(Fraction(1, 2) * sum(
        (vote_frac - seat_frac) ** 2
        for vote_frac, seat_frac in _share_pairs(result)
    ))


def loosemore_hanby(result: ApportionmentResult) -> float:
    """Compute the Loosemore–Hanby index of election result disproportionality.

    The Loosemore–Hanby (LH) index [#lhind]_ is half the sum of absolute
    differences between vote and seat shares, i.e. the share of seats that
    went to parties beyond their vote share. It ranges from zero to 1.

    .. [#lhind] "Loosemore–Hanby index", Wikipedia.
        https://en.wikipedia.org/wiki/Loosemore%E2%80%93Hanby_index
    """
    return float(Fraction(1, 2) * sum(
        abs(vote_frac - seat_frac)
        for vote_frac, seat_frac in _share_pairs(result)
    ))


def effective_parties(result: ApportionmentResult, by_seats: bool = True,
                      ) -> float:
    """Compute the Laakso–Taagepera effective number of parties.

    :param by_seats: Use seat shares (the effective number of parliamentary
        parties); vote shares otherwise.
    """
    shares = [
        seat_frac if by_seats else vote_frac
        for vote_frac, seat_frac in _share_pairs(result)
    ]
    concentration = sum(share ** 2 for share in shares)
    return float(1 / concentration) if concentration else 0.


def _share_pairs(result: ApportionmentResult,
                 ) -> List[Tuple[Fraction, Fraction]]:
    return [(res.vote_share, res.seat_share) for res in result.parties]
