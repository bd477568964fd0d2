'''Reference elections with known outcomes.

Each :class:`ReferenceElection` bundles the official vote totals and seat
result of a real election with the political catalog of its parties, the
coalitions that actually governed after it, a set of named coalition
scenarios worth scoring, and verdicts on whether certain combinations of
parties were able to govern together. They serve as regression data for the
apportionment and as a benchmark for the coalition analysis.

Available elections are registered in `ELECTIONS` by key.
'''

import dataclasses
import types
from fractions import Fraction
from typing import Dict, Mapping, Optional, Tuple

from coalitionlib.entity import (
    DEFAULT_DIMENSIONS, DEFAULT_SCALE, EntityCatalog, PoliticalEntity
)


@dataclasses.dataclass(frozen=True)
class ReferenceElection:
    '''A real election with its official result.

    :param name: Human-readable name of the election.
    :param total_seats: Size of the elected chamber.
    :param votes: Official vote totals of the lists, by party identifier.
    :param seats: Official seat result, by party identifier.
    :param catalog: Political catalog covering the seated parties.
    :param coalitions: Coalitions formed after the election, by name.
    :param scenarios: Hypothetical coalitions worth scoring, by name.
    :param verdicts: Pairs of a party combination and whether it proved
        able to govern together.
    '''
    name: str
    total_seats: int
    votes: Mapping[str, int] = dataclasses.field(hash=False)
    seats: Mapping[str, int] = dataclasses.field(hash=False)
    catalog: Optional[EntityCatalog] = dataclasses.field(
        default=None, hash=False, compare=False
    )
    coalitions: Mapping[str, Tuple[str, ...]] = dataclasses.field(
        default_factory=dict, hash=False
    )
    scenarios: Mapping[str, Tuple[str, ...]] = dataclasses.field(
        default_factory=dict, hash=False
    )
    verdicts: Tuple[Tuple[Tuple[str, ...], bool], ...] = ()

    def __post_init__(self):
        if sum(self.seats.values()) != self.total_seats:
            raise ValueError(
                f'{self.name}: official seats sum to'
                f' {sum(self.seats.values())}, not {self.total_seats}'
            )
        for attr in ('votes', 'seats'):
            object.__setattr__(self, attr, types.MappingProxyType(
                dict(getattr(self, attr))
            ))
        for attr in ('coalitions', 'scenarios'):
            object.__setattr__(self, attr, types.MappingProxyType({
                key: tuple(members)
                for key, members in getattr(self, attr).items()
            }))
        object.__setattr__(self, 'verdicts', tuple(
            (tuple(combination), bool(expected))
            for combination, expected in self.verdicts
        ))


def _party(id, name, leader, ideology, red_lines):
    return PoliticalEntity(
        id=id,
        name=name,
        leader=leader,
        ideology=dict(zip(DEFAULT_DIMENSIONS, ideology)),
        red_lines=frozenset(red_lines),
    )


NL_CATALOG = EntityCatalog([
    _party('PVV', 'Partij voor de Vrijheid', 'Geert Wilders',
           (3, -8, -6, -9), ('GL-PvdA', 'D66', 'DENK', 'Volt')),
    _party('GL-PvdA', 'GroenLinks-PvdA', 'Frans Timmermans',
           (-7, 8, 8, 7), ('PVV', 'FvD', 'JA21')),
    _party('VVD', 'Volkspartij voor Vrijheid en Democratie',
           'Dilan Yeşilgöz-Zegerius',
           (6, 3, 6, -2), ('SP', 'FvD')),
    _party('NSC', 'Nieuw Sociaal Contract', 'Pieter Omtzigt',
           (4, -1, 2, -3), ('FvD', 'DENK')),
    _party('D66', 'Democraten 66', 'Rob Jetten',
           (2, 7, 9, 5), ('PVV', 'FvD', 'JA21')),
    _party('BBB', 'BoerBurgerBeweging', 'Caroline van der Plas',
           (1, -4, -3, -5), ('GL-PvdA', 'D66', 'PvdD')),
    _party('CDA', 'Christen-Democratisch Appèl', 'Henri Bontenbal',
           (3, -3, 5, -2), ('FvD', 'SP')),
    _party('SP', 'Socialistische Partij', 'Lilian Marijnissen',
           (-8, 4, -4, 2), ('VVD', 'PVV', 'FvD', 'JA21')),
    _party('DENK', 'DENK', 'Stephan van Baarle',
           (-4, 7, 2, 9), ('PVV', 'FvD', 'JA21')),
    _party('PvdD', 'Partij voor de Dieren', 'Esther Ouwehand',
           (-3, 6, 4, 4), ('PVV', 'FvD', 'BBB')),
    _party('FvD', 'Forum voor Democratie', 'Thierry Baudet',
           (4, -7, -8, -8), ('GL-PvdA', 'D66', 'Volt', 'DENK', 'CU')),
    _party('SGP', 'Staatkundig Gereformeerde Partij', 'Kees van der Staaij',
           (2, -9, -2, -4), ('D66', 'GL-PvdA', 'PvdD', 'DENK')),
    _party('CU', 'ChristenUnie', 'Miriam Bikker',
           (-1, -5, 3, 0), ('FvD', 'PVV')),
    _party('Volt', 'Volt Nederland', 'Laurens Dassen',
           (1, 8, 10, 7), ('PVV', 'FvD', 'JA21')),
    _party('JA21', 'JA21', 'Joost Eerdmans',
           (5, -6, -4, -7), ('GL-PvdA', 'D66', 'DENK')),
], dimensions=DEFAULT_DIMENSIONS, scale=DEFAULT_SCALE, partnerships={
    # cabinet partners since 1946
    ('VVD', 'D66'): Fraction(8, 10),
    ('VVD', 'CDA'): Fraction(7, 10),
    ('CDA', 'D66'): Fraction(6, 10),
    ('VVD', 'CU'): Fraction(5, 10),
    ('CDA', 'CU'): Fraction(9, 10),
    ('GL-PvdA', 'D66'): Fraction(6, 10),
    # recent partners
    ('VVD', 'NSC'): Fraction(4, 10),
    ('NSC', 'CDA'): Fraction(5, 10),
    ('BBB', 'VVD'): Fraction(3, 10),
    # lasting conflicts
    ('PVV', 'D66'): Fraction(-8, 10),
    ('PVV', 'GL-PvdA'): Fraction(-9, 10),
    ('FvD', 'D66'): Fraction(-7, 10),
    ('SP', 'VVD'): Fraction(-6, 10),
    ('PVV', 'DENK'): Fraction(-1),
    ('FvD', 'CU'): Fraction(-8, 10),
    ('BBB', 'PvdD'): Fraction(-7, 10),
})


NL_TK_2023 = ReferenceElection(
    name='Dutch House of Representatives 2023',
    total_seats=150,
    votes={
        'PVV': 2450878,
        'GL-PvdA': 1643073,
        'VVD': 1589519,
        'NSC': 1343287,
        'D66': 656292,
        'BBB': 485551,
        'CDA': 345822,
        'SP': 328225,
        'DENK': 246765,
        'PvdD': 235148,
        'FvD': 232963,
        'SGP': 217270,
        'CU': 212532,
        'Volt': 178802,
        'JA21': 71345,
    },
    seats={
        'PVV': 37,
        'GL-PvdA': 25,
        'VVD': 24,
        'NSC': 20,
        'D66': 9,
        'BBB': 7,
        'CDA': 5,
        'SP': 5,
        'DENK': 3,
        'PvdD': 3,
        'FvD': 3,
        'SGP': 3,
        'CU': 3,
        'Volt': 2,
        'JA21': 1,
    },
    catalog=NL_CATALOG,
    coalitions={
        'Schoof': ('PVV', 'VVD', 'NSC', 'BBB'),
    },
    scenarios={
        'Current government': ('PVV', 'VVD', 'NSC', 'BBB'),
        'Purple': ('VVD', 'GL-PvdA', 'D66'),
        'Left': ('GL-PvdA', 'D66', 'Volt', 'PvdD', 'SP'),
        'Right': ('PVV', 'VVD', 'FvD', 'JA21', 'BBB'),
        'Center': ('VVD', 'NSC', 'D66', 'CDA', 'CU'),
        'Grand': ('PVV', 'GL-PvdA', 'VVD', 'NSC'),
        'Minority government': ('VVD', 'D66', 'NSC'),
    },
    verdicts=(
        (('VVD', 'D66', 'CDA', 'CU'), True),
        (('VVD', 'GL-PvdA'), True),
        (('PVV', 'GL-PvdA'), False),
        (('SP', 'VVD', 'D66'), False),
        (('FvD', 'D66', 'CU'), False),
    ),
)


ELECTIONS: Dict[str, ReferenceElection] = {
    'nl_tk_2023': NL_TK_2023,
}


def get(key: str) -> ReferenceElection:
    '''Return a reference election by its key.'''
    try:
        return ELECTIONS[key]
    except KeyError:
        raise KeyError(
            f'unknown reference election: {key!r}, available: '
            + ', '.join(sorted(ELECTIONS))
        ) from None
