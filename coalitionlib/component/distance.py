'''Ideological distance functions between two political entities.

A distance function takes the positions of two entities along the same
ordered dimensions and the span of the position scale (its high end minus its
low end) and returns a normalized distance between 0 (identical positions)
and 1 (opposite ends of the scale on every dimension). Pairwise compatibility
is the complement of this distance.

All distances are assembled in the `DISTANCES` dictionary keyed by their
name; `construct()` also accepts callables and passes them through.
'''

import math
from fractions import Fraction
from numbers import Number
from typing import Sequence

import coalitionlib.component.core


DISTANCES = {}


distance_mark, get, construct = coalitionlib.component.core.register_functions(
    DISTANCES, 'distance'
)


@distance_mark
def mean_absolute(first: Sequence[Fraction],
                  second: Sequence[Fraction],
                  span: Fraction,
                  ) -> Fraction:
    '''Mean absolute difference of positions, relative to the scale span.

    Exact for rational positions. An entity positioned on no dimension is at
    zero distance from any other.
    '''
    if not first:
        return Fraction(0)
    total = sum(abs(a - b) for a, b in zip(first, second))
    return Fraction(total) / (len(first) * span)


@distance_mark
def euclidean(first: Sequence[Fraction],
              second: Sequence[Fraction],
              span: Fraction,
              ) -> float:
    '''Euclidean distance of positions, relative to its largest possible value.

    Emphasizes a single large disagreement more than the mean absolute
    difference does.
    '''
    if not first:
        return 0.
    squared = sum((a - b) ** 2 for a, b in zip(first, second))
    return math.sqrt(squared / (len(first) * span ** 2))


@distance_mark
def chebyshev(first: Sequence[Fraction],
              second: Sequence[Fraction],
              span: Fraction,
              ) -> Number:
    '''Largest difference along any single dimension, relative to the span.'''
    if not first:
        return Fraction(0)
    return Fraction(max(abs(a - b) for a, b in zip(first, second))) / span
