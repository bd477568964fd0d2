'''Discovery, classification and ranking of governing coalitions.

Given the seats won by each party, :class:`CoalitionSearch` examines every
group of two up to a maximum number of seated parties, scores each group for
ideological compatibility and for stability, and sorts the groups into those
commanding a majority (*viable*), sizeable minority arrangements, and those
that violate a red line (*blocked*). Blocked groups are kept and flagged
rather than discarded, so that a red line can be seen costing a coalition.

The search is exhaustive by default. A pruning floor can be set to skip
groups that cannot reach a given number of seats; since viable groups are
never below the majority threshold, any floor up to the threshold leaves the
viable list unchanged.

Everything here is a function of the inputs: identical seats and settings
give identical analyses, down to the order of every list.
'''

import concurrent.futures
import dataclasses
import logging
import math
import time
from fractions import Fraction
from numbers import Number, Real
from typing import (
    Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union
)

from coalitionlib.apportion import ApportionmentResult, InvalidInputError
from coalitionlib.compatibility import CompatibilityModel, RedLineViolation
from coalitionlib.entity import EntityCatalog, exact
from coalitionlib.persist import simple_serialization

logger = logging.getLogger(__name__)

STATUS_COMPLETE = 'complete'
STATUS_UNVIABLE = 'unviable'
STATUS_TIMED_OUT = 'timed_out'

COALITION_KINDS = {
    1: 'single',
    2: 'two_party',
    3: 'three_party',
    4: 'four_party',
}
GRAND_COALITION = 'grand'


def majority_threshold(total_seats: int,
                       quota: Union[int, Real, None] = None,
                       ) -> int:
    '''Determine the number of seats a coalition needs to govern.

    :param total_seats: Number of seats in the chamber.
    :param quota: If None, a simple majority (more than half of the seats).
        If a number between 0 and 1, the fraction of all seats required (this
        is useful when the coalition wants to attain a higher quorum, e.g.
        two thirds to change the constitution). Otherwise an absolute number
        of seats.
    '''
    if quota is None:
        return total_seats // 2 + 1
    elif isinstance(quota, bool) or quota <= 0:
        raise InvalidInputError(f'invalid majority quota: {quota!r}')
    elif quota < 1:
        return int(math.ceil(exact(quota) * total_seats))
    elif quota != int(quota):
        raise InvalidInputError(f'seat quota must be whole: {quota!r}')
    return int(quota)


def coalition_kind(n_parties: int) -> str:
    return COALITION_KINDS.get(n_parties, GRAND_COALITION)


def enumerate_coalitions(seats: Mapping[str, int],
                         max_size: int,
                         min_size: int = 2,
                         min_seats: int = 0,
                         ) -> Iterator[Tuple[str, ...]]:
    '''Generate groups of parties in a fixed order.

    Parties are taken in the order of seats descending, then identifier, and
    every group lists its members in that order. Groups are generated depth
    first: each group is followed by its extensions with weaker parties.

    :param seats: Seat counts of the parties to combine.
    :param max_size: Largest number of parties in a group.
    :param min_size: Smallest number of parties in a group.
    :param min_seats: Skip groups that cannot reach this number of seats. A
        branch is abandoned as soon as adding the strongest remaining parties
        cannot lift it to the floor.
    '''
    parties = sorted(seats, key=lambda party: (-seats[party], party))
    counts = [seats[party] for party in parties]
    yield from _expand(
        prefix=(), prefix_seats=0, start=0,
        parties=parties, counts=counts,
        max_size=max_size, min_size=min_size, min_seats=min_seats,
    )


def _expand(prefix: Tuple[str, ...],
            prefix_seats: int,
            start: int,
            parties: List[str],
            counts: List[int],
            max_size: int,
            min_size: int,
            min_seats: int,
            ) -> Iterator[Tuple[str, ...]]:
    room = max_size - len(prefix)
    for i in range(start, len(parties)):
        # counts are descending, so later branches can only fall shorter
        if prefix_seats + sum(counts[i:i+room]) < min_seats:
            break
        group = prefix + (parties[i], )
        group_seats = prefix_seats + counts[i]
        if len(group) >= min_size and group_seats >= min_seats:
            yield group
        if room > 1:
            yield from _expand(
                group, group_seats, i + 1, parties, counts,
                max_size, min_size, min_seats,
            )


@simple_serialization
class StabilityPolicy:
    '''A heuristic estimate of how durable a coalition would be.

    Every partner beyond the second costs a fixed penalty; every seat above
    the majority threshold earns a bonus and every seat below it costs one,
    up to a cap in either direction. The result is clamped to [0, 1].

    :param base: Stability of a two-party coalition holding exactly the
        majority threshold.
    :param party_penalty: Deduction per member beyond two.
    :param seat_bonus: Change per seat of surplus or deficit.
    :param surplus_cap: Largest surplus or deficit taken into account.
    '''
    def __init__(self,
                 base: Number = Fraction(7, 10),
                 party_penalty: Number = Fraction(1, 10),
                 seat_bonus: Number = Fraction(1, 100),
                 surplus_cap: int = 30,
                 ):
        self.base = exact(base)
        self.party_penalty = exact(party_penalty)
        self.seat_bonus = exact(seat_bonus)
        if surplus_cap < 0:
            raise InvalidInputError(f'negative surplus cap: {surplus_cap}')
        self.surplus_cap = surplus_cap

    def evaluate(self, n_parties: int, surplus: int) -> float:
        '''Score a coalition of the given size and seat surplus.

        :param surplus: Seats held above the majority threshold; negative
            for a minority.
        '''
        surplus = min(max(surplus, -self.surplus_cap), self.surplus_cap)
        score = (
            self.base
            - self.party_penalty * max(n_parties - 2, 0)
            + self.seat_bonus * surplus
        )
        return float(min(max(score, 0), 1))


@dataclasses.dataclass(frozen=True)
class CoalitionCandidate:
    '''A group of parties considered as a governing coalition.

    Members are ordered by seats descending, then identifier. The
    ``historical_bonus`` is the mean partnership record of the member pairs
    in the catalog (see :meth:`EntityCatalog.historical_bonus`); it is kept
    apart from the ideological ``compatibility``.
    '''
    members: Tuple[str, ...]
    seats: int
    compatibility: float
    stability: float
    violations: Tuple[RedLineViolation, ...]
    viable: bool
    kind: str
    minimal: bool = False
    historical_bonus: float = 0.

    @property
    def blocked(self) -> bool:
        return bool(self.violations)

    @property
    def size(self) -> int:
        return len(self.members)

    def describe(self,
                 catalog: Optional[EntityCatalog] = None,
                 ) -> Dict[str, Any]:
        '''Produce a JSON-ready presentation record of the coalition.'''
        if catalog is None:
            names = list(self.members)
        else:
            names = [
                catalog[member].name if member in catalog else member
                for member in self.members
            ]
        return {
            'members': list(self.members),
            'names': names,
            'seats': self.seats,
            'compatibility': self.compatibility,
            'stability': self.stability,
            'viable': self.viable,
            'blocked': self.blocked,
            'minimal': self.minimal,
            'historical_bonus': self.historical_bonus,
            'kind': self.kind,
            'violations': [str(violation) for violation in self.violations],
        }

    def __str__(self) -> str:
        return (
            f'{"-".join(self.members)} ({self.seats} seats,'
            f' {self.compatibility:.0%} compatible)'
        )


@dataclasses.dataclass(frozen=True)
class CoalitionAnalysis:
    '''Outcome of a coalition search.

    The ``viable``, ``minority`` and ``blocked`` lists are ranked by
    compatibility; blocked coalitions may also appear in the other two.

    :param majority: Seats needed to govern.
    :param total_seats: Seats in the chamber.
    :param status: One of ``complete``, ``unviable`` (no group reaches the
        majority) and ``timed_out`` (the search was cut short and the lists
        only cover the groups examined until then).
    :param viable: Groups reaching the majority.
    :param minority: Groups below the majority but above the minority floor.
    :param blocked: Examined groups containing a red line violation.
    :param single_party: Every seated party on its own, by seats.
    :param ranked_by_stability: The viable groups ranked by stability.
    :param most_compatible: Best ranked unblocked viable group.
    :param most_stable: Most stable unblocked viable group.
    :param n_examined: Number of groups examined.
    :param historically_likely: Unblocked viable group with the best
        partnership record; among equal records, the best ranked by
        compatibility.
    '''
    majority: int
    total_seats: int
    status: str
    viable: Tuple[CoalitionCandidate, ...]
    minority: Tuple[CoalitionCandidate, ...]
    blocked: Tuple[CoalitionCandidate, ...]
    single_party: Tuple[CoalitionCandidate, ...]
    ranked_by_stability: Tuple[CoalitionCandidate, ...]
    most_compatible: Optional[CoalitionCandidate]
    most_stable: Optional[CoalitionCandidate]
    n_examined: int
    historically_likely: Optional[CoalitionCandidate] = None

    @property
    def ranked_by_compatibility(self) -> Tuple[CoalitionCandidate, ...]:
        return self.viable

    @property
    def complete(self) -> bool:
        return self.status != STATUS_TIMED_OUT

    def minimal_winning(self) -> Tuple[CoalitionCandidate, ...]:
        '''Viable groups from which no member can be dropped.'''
        return tuple(cand for cand in self.viable if cand.minimal)

    def find(self, members: Sequence[str]) -> Optional[CoalitionCandidate]:
        '''Return the viable or minority group with exactly these members.'''
        wanted = frozenset(members)
        for cand in self.viable + self.minority:
            if frozenset(cand.members) == wanted:
                return cand
        return None


def _compatibility_rank(cand: CoalitionCandidate) -> tuple:
    return (-cand.compatibility, cand.size, -cand.seats, cand.members)


def _stability_rank(cand: CoalitionCandidate) -> tuple:
    return (-cand.stability, cand.size, -cand.seats, cand.members)


def _partnership_rank(cand: CoalitionCandidate) -> tuple:
    return (-cand.historical_bonus, ) + _compatibility_rank(cand)


@simple_serialization
class CoalitionSearch:
    '''Find and rank the coalitions the seated parties could form.

    :param model: Compatibility model scoring the groups; its catalog must
        contain every seated party.
    :param majority: Seats needed to govern: None for a simple majority, a
        fraction of all seats, or an absolute number. See
        :func:`majority_threshold`.
    :param max_size: Largest number of parties in a coalition.
    :param minority_floor: Smallest number of seats for a group below the
        majority to be reported as a minority arrangement.
    :param prune_below: Skip groups that cannot reach this many seats. None
        examines all groups, which is needed to list every blocked group.
    :param stability: Stability scoring; the default policy if None.
    :param timeout: Seconds after which the search stops and reports the
        groups examined so far. None for no limit.
    '''
    def __init__(self,
                 model: CompatibilityModel,
                 majority: Union[int, Real, None] = None,
                 max_size: int = 6,
                 minority_floor: int = 60,
                 prune_below: Optional[int] = None,
                 stability: Optional[StabilityPolicy] = None,
                 timeout: Optional[float] = None,
                 ):
        if isinstance(max_size, bool) or not isinstance(max_size, int) \
                or max_size < 2:
            raise InvalidInputError(
                f'maximum coalition size must be an integer of at least 2,'
                f' got {max_size!r}'
            )
        if minority_floor < 0:
            raise InvalidInputError(f'negative minority floor: {minority_floor}')
        if timeout is not None and timeout < 0:
            raise InvalidInputError(f'negative timeout: {timeout}')
        self.model = model
        self.majority = majority
        self.max_size = max_size
        self.minority_floor = minority_floor
        self.prune_below = prune_below
        self.stability = StabilityPolicy() if stability is None else stability
        self.timeout = timeout

    def threshold(self, total_seats: int) -> int:
        return majority_threshold(total_seats, self.majority)

    def analyze(self,
                apportionment: Union[ApportionmentResult, Mapping[str, int]],
                ) -> CoalitionAnalysis:
        '''Examine all coalitions of the seated parties.

        :param apportionment: The election result, or a mapping of seat
            counts whose sum is the size of the chamber.
        :raises UnknownEntityError: If a seated party is not in the catalog.
        :raises InvalidInputError: If the seat counts are malformed.
        '''
        seats, total_seats = _seat_counts(apportionment)
        majority = self.threshold(total_seats)
        seated = {party: count for party, count in seats.items() if count > 0}
        self.model.catalog.require(sorted(seated))
        logger.info('searching coalitions of up to %d among %d parties,'
                    ' %d of %d seats needed',
                    self.max_size, len(seated), majority, total_seats)
        start = time.monotonic()
        examined = []
        timed_out = False
        for members in enumerate_coalitions(
            seated, self.max_size, min_seats=(self.prune_below or 0)
        ):
            if self.timeout is not None \
                    and time.monotonic() - start >= self.timeout:
                timed_out = True
                logger.warning('coalition search timed out after %g s,'
                               ' %d groups examined',
                               self.timeout, len(examined))
                break
            examined.append(self._candidate(members, seated, majority))
        singles = [
            self._candidate((party, ), seated, majority)
            for party in sorted(seated, key=lambda p: (-seated[p], p))
        ]
        analysis = self._classify(
            examined, singles, majority, total_seats, timed_out
        )
        logger.info('examined %d groups in %.3f s: %d viable, %d minority,'
                    ' %d blocked; status %s',
                    analysis.n_examined, time.monotonic() - start,
                    len(analysis.viable), len(analysis.minority),
                    len(analysis.blocked), analysis.status)
        return analysis

    def evaluate(self,
                 members: Sequence[str],
                 apportionment: Union[ApportionmentResult, Mapping[str, int]],
                 ) -> CoalitionCandidate:
        '''Score one specific coalition.

        Members without seats count zero seats; repeated members count once.

        :raises UnknownEntityError: If a member is not in the catalog.
        '''
        seats, total_seats = _seat_counts(apportionment)
        ids = self.model.canonical(members)
        seats = {party: seats.get(party, 0) for party in ids}
        ordered = tuple(sorted(ids, key=lambda p: (-seats[p], p)))
        return self._candidate(ordered, seats, self.threshold(total_seats))

    def scenarios(self,
                  named: Mapping[str, Sequence[str]],
                  apportionment: Union[ApportionmentResult, Mapping[str, int]],
                  ) -> Dict[str, CoalitionCandidate]:
        '''Score a set of named coalitions, keeping their order.'''
        return {
            name: self.evaluate(members, apportionment)
            for name, members in named.items()
        }

    def submit(self,
               executor: concurrent.futures.Executor,
               apportionment: Union[ApportionmentResult, Mapping[str, int]],
               ) -> concurrent.futures.Future:
        '''Run :meth:`analyze` in the given executor.

        The future resolves to the same analysis a direct call returns.
        '''
        return executor.submit(self.analyze, apportionment)

    def _candidate(self,
                   members: Tuple[str, ...],
                   seats: Mapping[str, int],
                   majority: int,
                   ) -> CoalitionCandidate:
        n_seats = sum(seats[member] for member in members)
        compatibility = self.model.evaluate(members, seats)
        viable = n_seats >= majority
        return CoalitionCandidate(
            members=members,
            seats=n_seats,
            compatibility=compatibility.score,
            stability=self.stability.evaluate(len(members), n_seats - majority),
            violations=compatibility.violations,
            viable=viable,
            kind=coalition_kind(len(members)),
            minimal=viable and all(
                n_seats - seats[member] < majority for member in members
            ),
            historical_bonus=float(
                self.model.catalog.historical_bonus(members)
            ),
        )

    def _classify(self,
                  examined: List[CoalitionCandidate],
                  singles: List[CoalitionCandidate],
                  majority: int,
                  total_seats: int,
                  timed_out: bool,
                  ) -> CoalitionAnalysis:
        viable = sorted(
            (cand for cand in examined if cand.viable),
            key=_compatibility_rank,
        )
        minority = sorted(
            (
                cand for cand in examined
                if not cand.viable and cand.seats >= self.minority_floor
            ),
            key=_compatibility_rank,
        )
        blocked = sorted(
            (cand for cand in examined if cand.blocked),
            key=_compatibility_rank,
        )
        by_stability = sorted(viable, key=_stability_rank)
        if timed_out:
            status = STATUS_TIMED_OUT
        elif not viable:
            status = STATUS_UNVIABLE
        else:
            status = STATUS_COMPLETE
        return CoalitionAnalysis(
            majority=majority,
            total_seats=total_seats,
            status=status,
            viable=tuple(viable),
            minority=tuple(minority),
            blocked=tuple(blocked),
            single_party=tuple(singles),
            ranked_by_stability=tuple(by_stability),
            most_compatible=next(
                (cand for cand in viable if not cand.blocked), None
            ),
            most_stable=next(
                (cand for cand in by_stability if not cand.blocked), None
            ),
            n_examined=len(examined),
            historically_likely=min(
                (cand for cand in viable if not cand.blocked),
                key=_partnership_rank,
                default=None,
            ),
        )


def _seat_counts(apportionment: Union[ApportionmentResult, Mapping[str, int]],
                 ) -> Tuple[Dict[str, int], int]:
    if isinstance(apportionment, ApportionmentResult):
        return apportionment.seats, apportionment.total_seats
    seats = dict(apportionment)
    for party, count in seats.items():
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise InvalidInputError(
                f'seat count of {party} must be a non-negative integer:'
                f' {count!r}'
            )
    total_seats = sum(seats.values())
    if total_seats <= 0:
        raise InvalidInputError('no seats to form coalitions with')
    return seats, total_seats
