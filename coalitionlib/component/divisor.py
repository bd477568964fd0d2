'''Divisor functions for highest-averages seat apportionment.

A divisor function takes the number of seats a party has been awarded so far
and returns the number its votes are divided by to obtain the quotient it
competes with for the next seat. Divisor methods are house monotone: adding
votes to a party never costs it a seat.

All divisors are assembled in the `DIVISORS` dictionary keyed by their name.
`get()` retrieves from this dictionary by string key; `construct()` also
accepts callables and passes them through.
'''

from fractions import Fraction
from numbers import Number
from typing import Callable

import coalitionlib.component.core


DIVISORS = {}


divisor_mark, get, construct = coalitionlib.component.core.register_functions(
    DIVISORS, 'divisor'
)


@divisor_mark
def d_hondt(order: int) -> int:
    '''D'Hondt (Jefferson) divisor, forming the sequence 1, 2, 3...

    Used for the Dutch House of Representatives. Slightly favors larger
    parties.
    '''
    return order + 1


@divisor_mark
def sainte_lague(order: int) -> int:
    '''Sainte-Laguë (Webster) divisor, forming the sequence 1, 3, 5...'''
    return 2 * order + 1


@divisor_mark
def imperiali(order: int) -> Fraction:
    '''Imperiali divisor, forming the sequence 1, 1.5, 2...

    Favors large parties greatly.
    '''
    return Fraction(order, 2) + 1


def modified_first_coef(divisor_fx: Callable[[int], Number],
                        first_coef: Number = Fraction(7, 5),
                        ) -> Callable[[int], Number]:
    '''Replace the divisor for parties without seats by a fixed coefficient.

    Raises the bar for the first seat, as in the Scandinavian modified
    Sainte-Laguë method (coefficient 1.4).

    :param divisor_fx: The ordinary divisor function used for the subsequent
        seats.
    :param first_coef: The divisor to be used when no seats are held yet.
    '''
    if not isinstance(first_coef, (int, Fraction)):
        first_coef = Fraction(str(first_coef))

    def _modified_divisor(order: int) -> Number:
        return divisor_fx(order) if order > 0 else first_coef
    return _modified_divisor
