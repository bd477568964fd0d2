'''Political entities and the catalog holding their reference data.

A :class:`PoliticalEntity` is an immutable record of a party or list: its
identifier, names, position along the ideological dimensions of the catalog
and the set of other entities it refuses to govern with (its *red lines*).
The :class:`EntityCatalog` keeps all entities of one political system
together with the dimension names and the scale the positions are measured
on, validates them against each other and answers lookups by identifier.

Identifiers are strings, conventionally the party abbreviation. Positions
are stored as exact fractions so that distances computed from them do not
depend on floating point evaluation order.
'''

from __future__ import annotations

import dataclasses
import itertools
import logging
import types
from fractions import Fraction
from numbers import Number
from typing import (
    Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional,
    Sequence, Tuple
)

from coalitionlib.persist import simple_serialization

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS: Tuple[str, ...] = (
    'economic', 'social', 'european', 'immigration'
)
'''Left-right economics, conservative-progressive, eurosceptic-pro EU
and restrictive-open immigration.'''

DEFAULT_SCALE: Tuple[int, int] = (-10, 10)


class UnknownEntityError(LookupError):
    '''An identifier does not refer to any entity of the catalog.

    :param entity_id: The identifier that was looked up.
    :param context: Where the identifier was referenced, if known.
    '''
    def __init__(self, entity_id: Any, context: Optional[str] = None):
        self.entity_id = entity_id
        self.context = context
        message = f'unknown political entity: {entity_id!r}'
        if context:
            message += f' (referenced by {context})'
        super().__init__(message)


class CatalogError(ValueError):
    '''The entity reference data is inconsistent.'''
    pass


def exact(value: Number) -> Fraction:
    '''Convert a position or coefficient to an exact fraction.

    Floats are converted through their shortest decimal representation, so
    ``3.1`` becomes ``31/10`` rather than its binary approximation.
    '''
    if isinstance(value, bool):
        raise TypeError(f'not a number: {value!r}')
    elif isinstance(value, Fraction):
        return value
    elif isinstance(value, int):
        return Fraction(value)
    return Fraction(str(value))


@dataclasses.dataclass(frozen=True)
class PoliticalEntity:
    '''A political party, list or alliance standing in elections.

    :param id: Unique identifier within the catalog.
    :param name: Full display name.
    :param abbreviation: Short name; defaults to the identifier.
    :param ideology: Position on each ideological dimension of the catalog.
    :param red_lines: Identifiers of entities this one refuses to form
        a coalition with.
    :param leader: Name of the party leader, purely informative.
    '''
    id: str
    name: str
    abbreviation: Optional[str] = None
    ideology: Mapping[str, Fraction] = dataclasses.field(
        default_factory=dict, hash=False
    )
    red_lines: FrozenSet[str] = frozenset()
    leader: Optional[str] = None

    def __post_init__(self):
        if self.abbreviation is None:
            object.__setattr__(self, 'abbreviation', self.id)
        positions = {}
        for dimension, position in dict(self.ideology).items():
            try:
                positions[dimension] = exact(position)
            except (TypeError, ValueError) as err:
                raise CatalogError(
                    f'invalid position of {self.id} on {dimension}:'
                    f' {position!r}'
                ) from err
        object.__setattr__(self, 'ideology', types.MappingProxyType(positions))
        object.__setattr__(self, 'red_lines', frozenset(self.red_lines))

    def position(self, dimensions: Sequence[str]) -> Tuple[Fraction, ...]:
        '''Return the positions along the given dimensions, in their order.'''
        return tuple(self.ideology[dim] for dim in dimensions)

    def __str__(self) -> str:
        return self.abbreviation


@simple_serialization
class EntityCatalog:
    '''An immutable catalog of political entities of one political system.

    :param entities: The entities. Their order is kept for iteration.
    :param dimensions: Names of the ideological dimensions, in a fixed order.
        If not given, they are taken from the first entity.
    :param scale: Lowest and highest possible position on every dimension.
    :param partnerships: Record of past cooperation between pairs of
        entities, keyed by the pair of identifiers in either order. Values
        range from -1 (a partnership that failed or was never possible) to 1
        (frequent and successful partners). Pairs not listed have no record.
    :raises CatalogError: If identifiers repeat, an entity is not positioned
        on exactly the catalog dimensions, a position falls outside the
        scale, an entity draws a red line against itself, or a partnership
        is not a pair of distinct entities with a value between -1 and 1
        or is listed twice.
    :raises UnknownEntityError: If a red line or a partnership refers to an
        entity missing from the catalog.
    '''
    def __init__(self,
                 entities: Iterable[PoliticalEntity],
                 dimensions: Optional[Sequence[str]] = None,
                 scale: Tuple[Number, Number] = DEFAULT_SCALE,
                 partnerships: Optional[
                     Mapping[Tuple[str, str], Number]
                 ] = None,
                 ):
        self.entities = tuple(entities)
        if dimensions is None:
            dimensions = (
                tuple(self.entities[0].ideology) if self.entities else ()
            )
        self.dimensions = tuple(dimensions)
        low, high = scale
        self.scale = (exact(low), exact(high))
        if self.scale[0] >= self.scale[1]:
            raise CatalogError(f'empty position scale: {scale!r}')
        self._by_id: Dict[str, PoliticalEntity] = {}
        for entity in self.entities:
            if entity.id in self._by_id:
                raise CatalogError(f'duplicate entity identifier: {entity.id}')
            self._check_positions(entity)
            self._by_id[entity.id] = entity
        for entity in self.entities:
            self._check_red_lines(entity)
        self.partnerships = types.MappingProxyType(
            self._check_partnerships(partnerships or {})
        )
        self._positions = {
            entity.id: entity.position(self.dimensions)
            for entity in self.entities
        }
        logger.debug('catalog of %d entities on dimensions %s',
                     len(self.entities), ', '.join(self.dimensions))

    def _check_positions(self, entity: PoliticalEntity) -> None:
        if set(entity.ideology) != set(self.dimensions):
            raise CatalogError(
                f'{entity.id} positioned on {sorted(entity.ideology)},'
                f' catalog dimensions are {list(self.dimensions)}'
            )
        low, high = self.scale
        for dimension, position in entity.ideology.items():
            if not low <= position <= high:
                raise CatalogError(
                    f'{entity.id} position {position} on {dimension}'
                    f' outside scale [{low}, {high}]'
                )

    def _check_red_lines(self, entity: PoliticalEntity) -> None:
        if entity.id in entity.red_lines:
            raise CatalogError(f'{entity.id} draws a red line against itself')
        for excluded in sorted(entity.red_lines):
            if excluded not in self._by_id:
                raise UnknownEntityError(excluded, f'red line of {entity.id}')

    def _check_partnerships(self,
                            partnerships: Mapping[Tuple[str, str], Number],
                            ) -> Dict[Tuple[str, str], Fraction]:
        checked = {}
        for pair, value in partnerships.items():
            try:
                first, second = pair
            except (TypeError, ValueError):
                raise CatalogError(
                    f'partnership not a pair of entities: {pair!r}'
                ) from None
            for entity_id in (first, second):
                if entity_id not in self:
                    raise UnknownEntityError(
                        entity_id, f'partnership {first}-{second}'
                    )
            if first == second:
                raise CatalogError(f'{first} listed as its own partner')
            key = (first, second) if first < second else (second, first)
            if key in checked:
                raise CatalogError(f'partnership {first}-{second} listed twice')
            try:
                value = exact(value)
            except (TypeError, ValueError) as err:
                raise CatalogError(
                    f'invalid partnership value of {first}-{second}:'
                    f' {value!r}'
                ) from err
            if not -1 <= value <= 1:
                raise CatalogError(
                    f'partnership value of {first}-{second} outside'
                    f' [-1, 1]: {value}'
                )
            checked[key] = value
        return checked

    @classmethod
    def from_records(cls,
                     records: Iterable[Mapping[str, Any]],
                     dimensions: Optional[Sequence[str]] = None,
                     scale: Tuple[Number, Number] = DEFAULT_SCALE,
                     partnerships: Iterable[Sequence[Any]] = (),
                     ) -> EntityCatalog:
        '''Build a catalog from plain JSON-like entity records.

        Each record is a mapping with the keys ``id`` and ``name`` and
        optionally ``abbreviation``, ``ideology``, ``red_lines`` and
        ``leader``, as the :class:`PoliticalEntity` fields. Partnerships
        are given as ``[first, second, value]`` triples.
        '''
        return cls(
            [PoliticalEntity(**record) for record in records],
            dimensions=dimensions,
            scale=scale,
            partnerships={
                (first, second): value
                for first, second, value in partnerships
            },
        )

    @property
    def span(self) -> Fraction:
        '''Width of the position scale.'''
        return self.scale[1] - self.scale[0]

    def __getitem__(self, entity_id: str) -> PoliticalEntity:
        try:
            return self._by_id[entity_id]
        except (KeyError, TypeError):
            raise UnknownEntityError(entity_id) from None

    def __contains__(self, entity_id: Any) -> bool:
        try:
            return entity_id in self._by_id
        except TypeError:
            return False

    def __iter__(self) -> Iterator[PoliticalEntity]:
        return iter(self.entities)

    def __len__(self) -> int:
        return len(self.entities)

    def ids(self) -> Tuple[str, ...]:
        return tuple(entity.id for entity in self.entities)

    def require(self, entity_ids: Iterable[str]) -> List[PoliticalEntity]:
        '''Return the entities for all identifiers, failing on unknown ones.'''
        return [self[entity_id] for entity_id in entity_ids]

    def positions(self, entity_id: str) -> Tuple[Fraction, ...]:
        '''Return the ideological position vector of an entity.'''
        if entity_id not in self._positions:
            raise UnknownEntityError(entity_id)
        return self._positions[entity_id]

    def declared_exclusions(self, first: str, second: str) -> Tuple[str, ...]:
        '''Return which of the two entities exclude the other, in id order.'''
        declared = []
        for this, other in sorted([(first, second), (second, first)]):
            if other in self[this].red_lines:
                declared.append(this)
        return tuple(declared)

    def excludes(self, first: str, second: str) -> bool:
        '''Whether a red line separates the two entities, in any direction.'''
        return bool(self.declared_exclusions(first, second))

    def red_line_pairs(self) -> List[Tuple[str, str]]:
        '''Return all pairs of entities separated by a red line.

        Each pair is listed once, with its identifiers in sorted order.
        '''
        return sorted(set(
            tuple(sorted((entity.id, excluded)))
            for entity in self.entities
            for excluded in entity.red_lines
        ))

    def partnership(self, first: str, second: str) -> Optional[Fraction]:
        '''Return the partnership record of two entities, None if unknown.'''
        self.require([first, second])
        key = (first, second) if first <= second else (second, first)
        return self.partnerships.get(key)

    def historical_bonus(self, members: Iterable[str]) -> Fraction:
        '''Mean partnership record over the member pairs that have one.

        Pairs without a record do not count. A group with no recorded pair,
        including any group of fewer than two members, gets zero.
        '''
        ids = sorted(set(members))
        self.require(ids)
        records = [
            self.partnerships[pair]
            for pair in itertools.combinations(ids, 2)
            if pair in self.partnerships
        ]
        if not records:
            return Fraction(0)
        return sum(records, Fraction(0)) / len(records)

    def __repr__(self) -> str:
        return f'<EntityCatalog({", ".join(self.ids())})>'
