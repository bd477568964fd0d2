'''Aggregations of pairwise compatibilities into one coalition-wide score.

How pairwise ideological compatibilities combine into the compatibility of
a whole coalition is a modelling choice, not a settled fact. The default is
the arithmetic mean over all unordered pairs; the alternatives below can be
selected by name wherever an aggregation is accepted.

An aggregation function takes the list of pairwise scores and a parallel
list of pair weights (the product of the two parties' seat counts when seats
are known, 1 otherwise) and returns a score between 0 and 1. It is only
called with at least one pair.
'''

from numbers import Number
from typing import List

import coalitionlib.component.core


AGGREGATIONS = {}


aggregation_mark, get, construct = \
    coalitionlib.component.core.register_functions(AGGREGATIONS, 'aggregation')


@aggregation_mark
def mean(scores: List[Number], weights: List[Number]) -> Number:
    '''Arithmetic mean of pairwise scores; weights are ignored.'''
    return sum(scores) / len(scores)


@aggregation_mark
def minimum(scores: List[Number], weights: List[Number]) -> Number:
    '''Score of the least compatible pair.

    A coalition is then only as compatible as its most distant partners.
    '''
    return min(scores)


@aggregation_mark
def seat_weighted_mean(scores: List[Number], weights: List[Number]) -> Number:
    '''Mean of pairwise scores weighted by the seat products of the pairs.

    Disagreements between large partners count more than those involving a
    party with a handful of seats. Falls back to the plain mean when all
    weights are zero.
    '''
    total_weight = sum(weights)
    if not total_weight:
        return mean(scores, weights)
    return sum(s * w for s, w in zip(scores, weights)) / total_weight
