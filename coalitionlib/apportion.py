'''Seat apportionment from vote totals by highest averages.

The :class:`ApportionmentEngine` distributes a fixed number of seats among
party lists proportionally to their votes. Each seat goes to the party with
the largest quotient of its votes divided by a divisor of the seats it holds
so far; with the default D'Hondt divisor this is the method of the Dutch
House of Representatives, which has no legal threshold beyond the effective
quota of one seat.

Ties between equal quotients are never left open: the party with more raw
votes takes the seat, and if the vote totals are equal as well, the party
with the lexicographically smaller identifier does. The result is therefore
a function of its inputs only.
'''

from __future__ import annotations

import bisect
import dataclasses
import logging
from fractions import Fraction
from numbers import Number
from typing import (
    Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union
)

import coalitionlib.component.divisor
from coalitionlib.entity import EntityCatalog, UnknownEntityError
from coalitionlib.persist import simple_serialization

logger = logging.getLogger(__name__)

DEFAULT_SEATS = 150


class InvalidInputError(ValueError):
    '''Votes, seat counts or search parameters are malformed.'''
    pass


class ApportionmentIntegrityError(AssertionError):
    '''The allocated seats do not add up to the number of seats to fill.

    This signals a defect in a divisor function or the allocation loop;
    the allocation is never corrected to hide it.

    :param allocated: Number of seats actually allocated.
    :param expected: Number of seats that should have been allocated.
    '''
    def __init__(self, allocated: int, expected: int):
        self.allocated = allocated
        self.expected = expected
        super().__init__(
            f'allocated {allocated} seats instead of {expected}'
        )


@dataclasses.dataclass(frozen=True)
class PartyResult:
    '''Apportionment outcome for a single party.'''
    party: str
    votes: int
    seats: int
    vote_share: Fraction
    seat_share: Fraction


@dataclasses.dataclass(frozen=True)
class ApportionmentResult:
    '''Seats awarded to all parties that stood in the election.

    Parties are ordered by seats descending, then votes descending, then
    identifier. Parties without seats are included.
    '''
    parties: Tuple[PartyResult, ...]
    total_seats: int
    total_votes: int

    @property
    def seats(self) -> Dict[str, int]:
        '''Seat counts of all parties, in result order.'''
        return {res.party: res.seats for res in self.parties}

    @property
    def votes(self) -> Dict[str, int]:
        return {res.party: res.votes for res in self.parties}

    def seated(self) -> Dict[str, int]:
        '''Seat counts of parties that won at least one seat.'''
        return {res.party: res.seats for res in self.parties if res.seats > 0}

    def __getitem__(self, party: str) -> PartyResult:
        for res in self.parties:
            if res.party == party:
                return res
        raise UnknownEntityError(party)

    def __iter__(self) -> Iterator[PartyResult]:
        return iter(self.parties)

    def __len__(self) -> int:
        return len(self.parties)

    def table(self,
              catalog: Optional[EntityCatalog] = None,
              seated_only: bool = False,
              ) -> List[Dict[str, Any]]:
        '''Produce presentation rows for the result.

        :param catalog: Used to fill in party names; parties missing from it
            are shown by their identifier.
        :param seated_only: Omit parties that won no seats.
        '''
        rows = []
        for res in self.parties:
            if seated_only and not res.seats:
                continue
            if catalog is not None and res.party in catalog:
                name = catalog[res.party].name
            else:
                name = res.party
            rows.append({
                'party': res.party,
                'name': name,
                'votes': res.votes,
                'seats': res.seats,
                'vote_share': float(res.vote_share),
                'seat_share': float(res.seat_share),
            })
        return rows


def verify_seat_total(seats: Mapping[str, int], n_seats: int) -> None:
    '''Check that an allocation awards exactly the given number of seats.

    :raises ApportionmentIntegrityError: If it does not, or if any party
        holds a negative or non-integer number of seats.
    '''
    allocated = sum(seats.values())
    if allocated != n_seats or any(
        not isinstance(count, int) or count < 0 for count in seats.values()
    ):
        raise ApportionmentIntegrityError(allocated, n_seats)


@simple_serialization
class ApportionmentEngine:
    '''Distribute seats proportionally by highest averages.

    :param total_seats: Number of seats to fill unless given at evaluation.
    :param divisor_function: A callable producing the divisor from the number
        of seats awarded to the party so far, or the name of one from
        :mod:`coalitionlib.component.divisor`. D'Hondt by default.
    :param threshold: Minimum fraction of all votes a party needs to take
        part in the allocation. Parties below it keep zero seats.
    '''
    def __init__(self,
                 total_seats: int = DEFAULT_SEATS,
                 divisor_function: Union[
                     str, Callable[[int], Number]
                 ] = 'd_hondt',
                 threshold: Number = 0,
                 ):
        self.total_seats = _check_seat_count(total_seats)
        self.divisor_function = coalitionlib.component.divisor.construct(
            divisor_function
        )
        if not 0 <= threshold < 1:
            raise InvalidInputError(
                f'threshold must be a fraction in [0, 1), got {threshold!r}'
            )
        self.threshold = threshold

    def evaluate(self,
                 votes: Mapping[str, int],
                 total_seats: Optional[int] = None,
                 ) -> ApportionmentResult:
        '''Apportion seats to parties by their votes.

        :param votes: Vote totals of the parties, keyed by party identifier.
        :param total_seats: Number of seats to fill; the engine default if
            not given.
        :raises InvalidInputError: If the votes are empty, negative, not
            integers, all zero, or all below the threshold, or the seat count
            is not a positive integer.
        :raises ApportionmentIntegrityError: If the allocated seats do not
            sum up to the seat count.
        '''
        n_seats = self.total_seats if total_seats is None else (
            _check_seat_count(total_seats)
        )
        _check_votes(votes)
        total_votes = sum(votes.values())
        if total_votes == 0:
            raise InvalidInputError('no votes cast for any party')
        eligible = {
            party: n_votes for party, n_votes in votes.items()
            if n_votes > 0 and Fraction(n_votes, total_votes) >= self.threshold
        }
        if not eligible:
            raise InvalidInputError(
                f'no party reached the threshold of {self.threshold}'
            )
        logger.debug('%d of %d parties eligible for seats',
                     len(eligible), len(votes))
        allocated = self.allocate(eligible, n_seats)
        seats = {party: allocated.get(party, 0) for party in votes}
        verify_seat_total(seats, n_seats)
        order = sorted(votes, key=lambda party: (
            -seats[party], -votes[party], party
        ))
        logger.info('apportioned %d seats among %d parties from %d votes',
                    n_seats, sum(1 for p in order if seats[p]), total_votes)
        return ApportionmentResult(
            parties=tuple(
                PartyResult(
                    party=party,
                    votes=votes[party],
                    seats=seats[party],
                    vote_share=Fraction(votes[party], total_votes),
                    seat_share=Fraction(seats[party], n_seats),
                )
                for party in order
            ),
            total_seats=n_seats,
            total_votes=total_votes,
        )

    def allocate(self,
                 votes: Mapping[str, int],
                 n_seats: int,
                 ) -> Dict[str, int]:
        '''Run the highest averages allocation rounds.

        :param votes: Positive vote totals of the competing parties.
        :param n_seats: Number of seats to award.
        :returns: Seats won by each competing party, zeros included.
        '''
        totals = {party: 0 for party in votes}
        # ascending by rank: the first entry takes the next seat
        queue = sorted(
            self._rank(party, n_votes, 0) for party, n_votes in votes.items()
        )
        for seat_i in range(n_seats):
            neg_quotient, _, party = queue.pop(0)
            totals[party] += 1
            logger.debug('seat %d to %s at quotient %g',
                         seat_i + 1, party, float(-neg_quotient))
            bisect.insort(queue, self._rank(party, votes[party], totals[party]))
        return totals

    def _rank(self,
              party: str,
              n_votes: int,
              n_held: int,
              ) -> Tuple[Fraction, int, str]:
        divisor = self.divisor_function(n_held)
        if divisor <= 0:
            raise InvalidInputError(
                f'divisor function returned {divisor!r} for {n_held} seats'
            )
        return (-Fraction(n_votes) / divisor, -n_votes, party)


def _check_seat_count(n_seats: Any) -> int:
    if isinstance(n_seats, bool) or not isinstance(n_seats, int):
        raise InvalidInputError(f'seat count must be an integer: {n_seats!r}')
    if n_seats <= 0:
        raise InvalidInputError(f'seat count must be positive: {n_seats}')
    return n_seats


def _check_votes(votes: Mapping[str, int]) -> None:
    if not votes:
        raise InvalidInputError('no parties to apportion seats to')
    for party, n_votes in votes.items():
        if not isinstance(party, str):
            raise InvalidInputError(f'party identifier not a string: {party!r}')
        if isinstance(n_votes, bool) or not isinstance(n_votes, int):
            raise InvalidInputError(
                f'vote count of {party} must be an integer: {n_votes!r}'
            )
        if n_votes < 0:
            raise InvalidInputError(
                f'vote count of {party} must not be negative: {n_votes}'
            )
