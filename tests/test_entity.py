import sys
import os
import dataclasses
from fractions import Fraction

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import coalitionlib.entity
from coalitionlib.entity import (
    CatalogError, EntityCatalog, PoliticalEntity, UnknownEntityError
)

DIMS = ('economic', 'social')


def party(id, economic, social, red_lines=()):
    return PoliticalEntity(
        id=id, name=f'Party {id}',
        ideology={'economic': economic, 'social': social},
        red_lines=red_lines,
    )


@pytest.fixture
def catalog():
    return EntityCatalog([
        party('A', -5, 2, red_lines=['C']),
        party('B', 0, 0),
        party('C', 7.5, -3, red_lines=['A']),
        party('D', 4, -1, red_lines=['B']),
    ], dimensions=DIMS)


def test_entity_defaults():
    entity = party('X', 1, 2)
    assert entity.abbreviation == 'X'
    assert entity.red_lines == frozenset()
    assert entity.leader is None
    assert str(entity) == 'X'


def test_entity_exact_positions():
    entity = party('X', 3.1, -2)
    assert entity.ideology['economic'] == Fraction(31, 10)
    assert entity.position(('social', 'economic')) == (-2, Fraction(31, 10))


def test_entity_immutable():
    entity = party('X', 1, 2)
    with pytest.raises(dataclasses.FrozenInstanceError):
        entity.name = 'Other'
    with pytest.raises(TypeError):
        entity.ideology['economic'] = 5


def test_entity_hashable():
    assert len({party('X', 1, 2), party('X', 1, 2)}) == 1


def test_entity_bad_position():
    with pytest.raises(CatalogError):
        party('X', 'left', 2)


def test_lookup(catalog):
    assert catalog['B'].name == 'Party B'
    assert 'B' in catalog
    assert 'Z' not in catalog
    assert catalog.ids() == ('A', 'B', 'C', 'D')
    assert len(catalog) == 4
    assert [entity.id for entity in catalog] == ['A', 'B', 'C', 'D']


def test_lookup_unknown(catalog):
    with pytest.raises(UnknownEntityError) as excinfo:
        catalog['Z']
    assert excinfo.value.entity_id == 'Z'
    with pytest.raises(LookupError):
        catalog.positions('Z')
    with pytest.raises(UnknownEntityError):
        catalog.require(['A', 'Z'])


def test_span_positions(catalog):
    assert catalog.span == 20
    assert catalog.positions('C') == (Fraction(15, 2), -3)


def test_excludes_symmetric(catalog):
    assert catalog.excludes('A', 'C')
    assert catalog.excludes('C', 'A')
    assert catalog.excludes('B', 'D')
    assert catalog.excludes('D', 'B')
    assert not catalog.excludes('A', 'B')


def test_declared_exclusions(catalog):
    assert catalog.declared_exclusions('C', 'A') == ('A', 'C')
    assert catalog.declared_exclusions('B', 'D') == ('D', )
    assert catalog.declared_exclusions('A', 'D') == ()


def test_red_line_pairs(catalog):
    assert catalog.red_line_pairs() == [('A', 'C'), ('B', 'D')]


def test_inferred_dimensions():
    cat = EntityCatalog([party('A', 1, 1)])
    assert cat.dimensions == DIMS


def test_duplicate_ids():
    with pytest.raises(CatalogError):
        EntityCatalog([party('A', 1, 1), party('A', 2, 2)])


def test_missing_dimension():
    with pytest.raises(CatalogError):
        EntityCatalog([party('A', 1, 1)], dimensions=('economic', ))


def test_out_of_scale():
    with pytest.raises(CatalogError):
        EntityCatalog([party('A', 11, 1)])
    EntityCatalog([party('A', 11, 1)], scale=(-20, 20))


def test_self_exclusion():
    with pytest.raises(CatalogError):
        EntityCatalog([party('A', 1, 1, red_lines=['A'])])


def test_unknown_red_line_target():
    with pytest.raises(UnknownEntityError) as excinfo:
        EntityCatalog([party('A', 1, 1, red_lines=['Q'])])
    assert 'A' in str(excinfo.value)


def test_empty_scale():
    with pytest.raises(CatalogError):
        EntityCatalog([party('A', 0, 0)], scale=(5, 5))


def test_from_records():
    cat = EntityCatalog.from_records([
        {'id': 'L', 'name': 'Left', 'ideology': {'economic': -8},
         'red_lines': ['R']},
        {'id': 'R', 'name': 'Right', 'ideology': {'economic': 8},
         'leader': 'Somebody'},
    ])
    assert cat.dimensions == ('economic', )
    assert cat.excludes('R', 'L')
    assert cat['R'].leader == 'Somebody'


def test_exact():
    assert coalitionlib.entity.exact(0.1) == Fraction(1, 10)
    assert coalitionlib.entity.exact(3) == 3
    with pytest.raises(TypeError):
        coalitionlib.entity.exact(True)


def test_partnerships():
    cat = EntityCatalog(
        [party('A', 1, 1), party('B', 2, 2), party('C', 3, 3)],
        partnerships={('B', 'A'): .5, ('A', 'C'): -1},
    )
    assert cat.partnerships == {('A', 'B'): Fraction(1, 2), ('A', 'C'): -1}
    assert cat.partnership('A', 'B') == Fraction(1, 2)
    assert cat.partnership('B', 'A') == Fraction(1, 2)
    assert cat.partnership('B', 'C') is None
    with pytest.raises(UnknownEntityError):
        cat.partnership('A', 'Z')
    with pytest.raises(TypeError):
        cat.partnerships[('B', 'C')] = 1


def test_historical_bonus():
    cat = EntityCatalog(
        [party('A', 1, 1), party('B', 2, 2), party('C', 3, 3),
         party('D', 4, 4)],
        partnerships={('A', 'B'): .5, ('A', 'C'): -.2},
    )
    # only recorded pairs count toward the mean
    assert cat.historical_bonus(['C', 'B', 'A']) == Fraction(3, 20)
    assert cat.historical_bonus(['A', 'B', 'D']) == Fraction(1, 2)
    assert cat.historical_bonus(['B', 'C', 'D']) == 0
    assert cat.historical_bonus(['A']) == 0
    with pytest.raises(UnknownEntityError):
        cat.historical_bonus(['A', 'Z'])


@pytest.mark.parametrize('partnerships, error', [
    ({('A', 'Q'): .5}, UnknownEntityError),
    ({('A', 'A'): .5}, CatalogError),
    ({('A', 'B'): 1.5}, CatalogError),
    ({('A', 'B'): .5, ('B', 'A'): .4}, CatalogError),
    ({('A', 'B', 'C'): .5}, CatalogError),
    ({('A', 'B'): 'good'}, CatalogError),
])
def test_invalid_partnerships(partnerships, error):
    with pytest.raises(error):
        EntityCatalog(
            [party('A', 1, 1), party('B', 2, 2), party('C', 3, 3)],
            partnerships=partnerships,
        )


def test_partnerships_from_records():
    cat = EntityCatalog.from_records([
        {'id': 'L', 'name': 'Left', 'ideology': {'economic': -8}},
        {'id': 'R', 'name': 'Right', 'ideology': {'economic': 8}},
    ], partnerships=[['R', 'L', -0.3]])
    assert cat.partnership('L', 'R') == Fraction(-3, 10)
