import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from coalitionlib.apportion import ApportionmentEngine
from coalitionlib.coalition import CoalitionSearch
from coalitionlib.compatibility import CompatibilityModel
from coalitionlib.entity import EntityCatalog, PoliticalEntity
from coalitionlib.reference import ReferenceElection
from coalitionlib.validate import HistoricalValidator

CATALOG = EntityCatalog([
    PoliticalEntity('A', 'Alpha', ideology={'economic': 0}),
    PoliticalEntity('B', 'Beta', ideology={'economic': 2}),
    PoliticalEntity('C', 'Gamma', ideology={'economic': -8}),
    PoliticalEntity('D', 'Delta', ideology={'economic': 10},
                    red_lines=['A']),
])


@pytest.fixture
def reference():
    return ReferenceElection(
        name='Synthetic',
        total_seats=100,
        votes={'A': 4000, 'B': 3500, 'C': 1500, 'D': 1000},
        seats={'A': 40, 'B': 35, 'C': 15, 'D': 10},
        catalog=CATALOG,
        coalitions={'Real': ('A', 'B')},
        verdicts=[
            (('A', 'B'), True),
            # A-B-D reaches a mean compatibility of 2/3
            (('A', 'D'), False),
            (('C', 'D'), False),
        ],
    )


@pytest.fixture
def validator(reference):
    return HistoricalValidator(reference)


@pytest.fixture
def result(reference):
    return ApportionmentEngine(100).evaluate(reference.votes)


@pytest.fixture
def search():
    return CoalitionSearch(CompatibilityModel(CATALOG))


def test_seat_accuracy(validator, result):
    assert validator.seat_accuracy(result) == 100


def test_seat_accuracy_partial(validator):
    computed = {'A': 41, 'B': 34, 'C': 15, 'D': 10}
    assert validator.seat_accuracy(computed) == 50


def test_seat_accuracy_missing_party(validator):
    assert validator.seat_accuracy({'A': 40, 'B': 35, 'C': 25}) == 50


def test_coalition_accuracy_exact(validator, result, search):
    assert validator.coalition_accuracy(search.analyze(result)) == 100
    assert validator.coalition_accuracy(search.analyze(result), 'Real') == 100


def test_coalition_accuracy_overlap(validator, result, search):
    candidates = [
        search.evaluate(['A', 'C'], result),
        search.evaluate(['A', 'B', 'C'], result),
    ]
    assert validator.coalition_accuracy(candidates) == pytest.approx(200 / 3)
    assert validator.coalition_accuracy(candidates[:1]) == pytest.approx(
        100 / 3
    )
    assert validator.coalition_accuracy([]) == 0


def test_coalition_accuracy_no_reference(result):
    validator = HistoricalValidator(ReferenceElection(
        'Bare', 100, votes={'A': 1}, seats={'A': 100},
    ))
    with pytest.raises(ValueError):
        validator.coalition_accuracy([])


def test_verdict_accuracy(validator, result, search):
    analysis = search.analyze(result)
    assert validator.verdict_accuracy(analysis) == pytest.approx(200 / 3)
    assert validator.verdict_accuracy(analysis, min_compatibility=.7) == 100


def test_verdict_accuracy_none(result, search):
    validator = HistoricalValidator(ReferenceElection(
        'Bare', 100, votes={'A': 1}, seats={'A': 100},
    ))
    assert validator.verdict_accuracy(search.analyze(result)) is None


def test_report(validator, result, search):
    report = validator.report(result, search.analyze(result))
    assert report.election == 'Synthetic'
    assert report.seat_accuracy == 100
    assert report.coalition_accuracy == {'Real': 100}
    assert report.verdict_accuracy == pytest.approx(200 / 3)
    assert report.gallagher == 0
    assert report.loosemore_hanby == 0


def test_report_without_analysis(validator, result):
    report = validator.report(result)
    assert report.coalition_accuracy == {}
    assert report.verdict_accuracy is None


def test_validation_does_not_affect_search(validator, result, search):
    before = search.analyze(result)
    validator.report(result, before)
    assert search.analyze(result) == before


def test_reference_seat_mismatch():
    with pytest.raises(ValueError):
        ReferenceElection('Broken', 100, votes={'A': 1}, seats={'A': 99})


def test_reference_immutable(reference):
    with pytest.raises(TypeError):
        reference.seats['A'] = 50
    assert reference.coalitions['Real'] == ('A', 'B')


def test_coalition_accuracy_unknown_name(validator, result, search):
    with pytest.raises(KeyError, match='available: Real'):
        validator.coalition_accuracy(search.analyze(result), 'Imaginary')


@pytest.mark.parametrize('expected, accuracy', [(False, 100), (True, 0)])
def test_verdict_without_viable_superset(reference, result, expected,
                                         accuracy):
    # no group of two containing C and D reaches the majority
    analysis = CoalitionSearch(
        CompatibilityModel(CATALOG), max_size=2
    ).analyze(result)
    assert not any(
        {'C', 'D'} <= set(cand.members) for cand in analysis.viable
    )
    validator = HistoricalValidator(ReferenceElection(
        'Synthetic', 100, votes=reference.votes, seats=reference.seats,
        catalog=CATALOG, verdicts=[(('C', 'D'), expected)],
    ))
    assert validator.verdict_accuracy(analysis) == accuracy
