import sys
import os
import io
import json
from fractions import Fraction

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import coalitionlib.component.aggregate
import coalitionlib.component.divisor
import coalitionlib.config
from coalitionlib.config import AnalysisConfig
from coalitionlib.entity import EntityCatalog, PoliticalEntity

CATALOG = EntityCatalog([
    PoliticalEntity('A', 'Alpha', ideology={'economic': -2}),
    PoliticalEntity('B', 'Beta', ideology={'economic': 3}),
    PoliticalEntity('C', 'Gamma', ideology={'economic': 9},
                    red_lines=['A']),
])
VOTES = {'A': 4500, 'B': 3500, 'C': 2000}


def test_defaults():
    config = AnalysisConfig()
    engine = config.engine()
    assert engine.total_seats == 150
    assert engine.divisor_function is coalitionlib.component.divisor.d_hondt
    search = config.search(CATALOG)
    assert search.max_size == 6
    assert search.minority_floor == 60
    assert search.prune_below is None
    assert search.timeout is None
    assert search.model.aggregation is coalitionlib.component.aggregate.mean


def test_builds_components():
    config = AnalysisConfig(
        total_seats=20, divisor_function='sainte_lague', distance='chebyshev',
        aggregation='minimum', majority=Fraction(2, 3), max_size=2,
    )
    assert config.engine().divisor_function is \
        coalitionlib.component.divisor.sainte_lague
    search = config.search(CATALOG)
    assert search.max_size == 2
    assert search.threshold(150) == 100
    assert search.model.aggregation is coalitionlib.component.aggregate.minimum


def test_run():
    result, analysis = AnalysisConfig(total_seats=10).run(VOTES, CATALOG)
    assert result.seats == {'A': 5, 'B': 3, 'C': 2}
    assert analysis.majority == 6
    assert [c.members for c in analysis.viable if not c.blocked] == [
        ('A', 'B')
    ]
    assert analysis.find(['A', 'C']).blocked


def test_loads_partial():
    config = coalitionlib.config.loads(
        '{"total_seats": 100, "max_size": 3, "aggregation": "minimum"}'
    )
    assert config.total_seats == 100
    assert config.max_size == 3
    assert config.aggregation == 'minimum'
    assert config.minority_floor == 60


def test_load_file():
    infile = io.StringIO(json.dumps({
        'class': 'coalitionlib.config.AnalysisConfig',
        'timeout': 2.5,
    }))
    assert coalitionlib.config.load(infile).timeout == 2.5


def test_dumps_roundtrip():
    config = AnalysisConfig(majority=Fraction(3, 5), prune_below=50)
    text = coalitionlib.config.dumps(config)
    loaded = coalitionlib.config.loads(text)
    assert loaded.majority == Fraction(3, 5)
    assert loaded.prune_below == 50
    assert coalitionlib.config.dumps(loaded) == text


def test_loads_wrong_class():
    with pytest.raises(ValueError):
        coalitionlib.config.loads(json.dumps(
            {'class': 'coalitionlib.coalition.StabilityPolicy'}
        ))


def test_loads_unknown_setting():
    with pytest.raises(TypeError):
        coalitionlib.config.loads('{"n_parties": 3}')


@pytest.mark.parametrize('definition', [
    {'class': 'os.system', 'command': 'exit 1'},
    {'stability': {'class': 'os.system', 'command': 'exit 1'}},
    {'distance': {'callable': 'os.system'}},
    {'majority': {'type': 'eval', 'value': '1'}},
])
def test_loads_foreign_objects(monkeypatch, definition):
    calls = []
    monkeypatch.setattr(os, 'system', lambda *args: calls.append(args))
    with pytest.raises(ValueError):
        coalitionlib.config.loads(json.dumps(definition))
    assert calls == []


def test_loads_not_object():
    with pytest.raises(ValueError):
        coalitionlib.config.loads('[1, 2]')
