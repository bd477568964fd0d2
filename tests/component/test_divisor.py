import sys
import os
from fractions import Fraction

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import coalitionlib.component.divisor as d
import coalitionlib.apportion

TEST_ORDERS = list(range(10)) + [100, 1000, 10000]


@pytest.mark.parametrize('order', TEST_ORDERS)
def test_result(order):
    for fx in d.DIVISORS.values():
        divisor = fx(order)
        assert divisor > 0
        assert fx(order + 1) > divisor


def test_sequences():
    assert [d.d_hondt(i) for i in range(4)] == [1, 2, 3, 4]
    assert [d.sainte_lague(i) for i in range(4)] == [1, 3, 5, 7]
    assert [d.imperiali(i) for i in range(4)] == [
        1, Fraction(3, 2), 2, Fraction(5, 2)
    ]


def test_modified_first_coef():
    for fx in d.DIVISORS.values():
        modif = d.modified_first_coef(fx, 8654)
        assert modif(0) == 8654
        for i in TEST_ORDERS[1:]:
            assert modif(i) == fx(i)


def test_modified_first_coef_float():
    modif = d.modified_first_coef(d.sainte_lague, 1.4)
    assert modif(0) == Fraction(7, 5)


def test_get():
    for fx_name, fx in d.DIVISORS.items():
        assert d.get(fx_name) == fx
    for bad_name in ('oapsdjf', '', None):
        with pytest.raises(KeyError):
            d.get(bad_name)


def test_construct():
    for fx_name, fx in d.DIVISORS.items():
        assert d.construct(fx_name) == d.get(fx_name) == fx
    for bad_name in ('oapsdjf', '', None):
        with pytest.raises(KeyError):
            d.construct(bad_name)
    def own_divf(ord):
        return ord + 2
    assert d.construct(own_divf) == own_divf


def test_modified_first_coef_default():
    votes = {'A': 100, 'B': 27}
    plain = coalitionlib.apportion.ApportionmentEngine(
        3, divisor_function='sainte_lague'
    )
    modified = coalitionlib.apportion.ApportionmentEngine(
        3, divisor_function=d.modified_first_coef(d.sainte_lague)
    )
    assert plain.evaluate(votes).seats == {'A': 2, 'B': 1}
    assert modified.evaluate(votes).seats == {'A': 3, 'B': 0}
