'''Ideological compatibility of prospective coalition partners.

The :class:`CompatibilityModel` scores a group of political entities between
0 (maximally incompatible) and 1 (identical positions). Each unordered pair
of members gets a compatibility equal to one minus its normalized ideological
distance; the pair scores are then combined into a single figure by an
aggregation function. Both the distance and the aggregation are named,
swappable components, see :mod:`coalitionlib.component.distance` and
:mod:`coalitionlib.component.aggregate`.

Red lines are reported next to the score, not folded into it: a coalition
containing two parties that exclude each other keeps its ideological score
and carries a :class:`RedLineViolation` for the pair.
'''

import dataclasses
import itertools
import logging
import types
from numbers import Number
from typing import (
    Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
)

import coalitionlib.component.aggregate
import coalitionlib.component.distance
from coalitionlib.entity import EntityCatalog
from coalitionlib.persist import simple_serialization

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class RedLineViolation:
    '''Two members of a coalition separated by a red line.

    :param first: The member with the smaller identifier.
    :param second: The other member.
    :param declared_by: The member or members that declared the exclusion.
    '''
    first: str
    second: str
    declared_by: Tuple[str, ...]

    @property
    def mutual(self) -> bool:
        return len(self.declared_by) > 1

    @property
    def description(self) -> str:
        if self.mutual:
            return f'{self.first} and {self.second} exclude each other'
        excluder = self.declared_by[0]
        excluded = self.second if excluder == self.first else self.first
        return f'{excluder} excludes {excluded}'

    def __str__(self) -> str:
        return self.description


@dataclasses.dataclass(frozen=True)
class CompatibilityResult:
    score: float
    violations: Tuple[RedLineViolation, ...] = ()

    @property
    def blocked(self) -> bool:
        return bool(self.violations)


@simple_serialization
class CompatibilityModel:
    '''Score the ideological compatibility of groups of entities.

    :param catalog: Catalog providing the ideological positions and red
        lines of the entities.
    :param distance: Distance function between two position vectors, or its
        name from :mod:`coalitionlib.component.distance`.
    :param aggregation: Function combining the pairwise compatibilities, or
        its name from :mod:`coalitionlib.component.aggregate`. The arithmetic
        mean by default.
    '''
    def __init__(self,
                 catalog: EntityCatalog,
                 distance: Union[str, Callable] = 'mean_absolute',
                 aggregation: Union[str, Callable] = 'mean',
                 ):
        self.catalog = catalog
        self.distance = coalitionlib.component.distance.construct(distance)
        self.aggregation = coalitionlib.component.aggregate.construct(
            aggregation
        )
        scores: Dict[Tuple[str, str], Number] = {}
        violations: Dict[Tuple[str, str], RedLineViolation] = {}
        for key in itertools.combinations(sorted(catalog.ids()), 2):
            scores[key] = 1 - self.distance(
                catalog.positions(key[0]),
                catalog.positions(key[1]),
                catalog.span,
            )
            declared = catalog.declared_exclusions(*key)
            if declared:
                violations[key] = RedLineViolation(key[0], key[1], declared)
        # pair tables are read-only once built
        self._pair_scores = types.MappingProxyType(scores)
        self._pair_violations = types.MappingProxyType(violations)
        logger.debug('compatibility tables of %d pairs, %d red lines',
                     len(scores), len(violations))

    def evaluate(self,
                 members: Iterable[str],
                 seats: Optional[Mapping[str, int]] = None,
                 ) -> CompatibilityResult:
        '''Score a group of entities and list its red line violations.

        The result does not depend on the order of the members; repeated
        identifiers count once. Groups of fewer than two entities are fully
        compatible.

        :param members: Identifiers of the group members.
        :param seats: Seat counts of the members, used as pair weights by
            aggregations that take them into account. Members missing from
            it weigh zero.
        :raises UnknownEntityError: If any member is not in the catalog.
        '''
        ids = self.canonical(members)
        pairs = list(itertools.combinations(ids, 2))
        if not pairs:
            return CompatibilityResult(score=1.)
        scores = [self.pair_score(first, second) for first, second in pairs]
        if seats is None:
            weights = [1] * len(pairs)
        else:
            weights = [
                seats.get(first, 0) * seats.get(second, 0)
                for first, second in pairs
            ]
        score = float(self.aggregation(scores, weights))
        return CompatibilityResult(
            score=min(max(score, 0.), 1.),
            violations=self.violations(pairs),
        )

    def canonical(self, members: Iterable[str]) -> Tuple[str, ...]:
        '''Deduplicate and sort member identifiers, checking they exist.'''
        ids = tuple(sorted(set(members)))
        self.catalog.require(ids)
        return ids

    def pair_score(self, first: str, second: str) -> Number:
        '''Compatibility of two entities, one minus their distance.'''
        if first == second:
            self.catalog.require([first])
            return 1
        key = (first, second) if first < second else (second, first)
        if key not in self._pair_scores:
            self.catalog.require(key)
        return self._pair_scores[key]

    def violations(self,
                   pairs: Sequence[Tuple[str, str]],
                   ) -> Tuple[RedLineViolation, ...]:
        '''List the red line violations among the given member pairs.'''
        found: List[RedLineViolation] = []
        for first, second in pairs:
            key = (first, second) if first <= second else (second, first)
            if key in self._pair_violations:
                found.append(self._pair_violations[key])
        return tuple(found)
