'''Analysis settings and their JSON files.

An :class:`AnalysisConfig` gathers every tunable constant of the pipeline
in one serializable object and builds the configured apportionment engine,
compatibility model and coalition search from it. It is stored in the JSON
form produced by :mod:`coalitionlib.persist`; settings left out of a file
keep their defaults::

    {
        "class": "coalitionlib.config.AnalysisConfig",
        "total_seats": 150,
        "max_size": 5,
        "aggregation": "minimum"
    }
'''

import io
import json
import logging
from numbers import Number, Real
from typing import Callable, Mapping, Optional, Tuple, Union

import coalitionlib.persist
from coalitionlib.apportion import (
    ApportionmentEngine, ApportionmentResult, DEFAULT_SEATS
)
from coalitionlib.coalition import (
    CoalitionAnalysis, CoalitionSearch, StabilityPolicy
)
from coalitionlib.compatibility import CompatibilityModel
from coalitionlib.entity import EntityCatalog
from coalitionlib.persist import simple_serialization

logger = logging.getLogger(__name__)


@simple_serialization
class AnalysisConfig:
    '''Settings of an election analysis.

    Components may be given by name or as callables; names keep the
    configuration readable when saved.

    :param total_seats: Seats to apportion.
    :param divisor_function: Highest averages divisor.
    :param threshold: Legal threshold as a fraction of all votes.
    :param distance: Ideological distance function.
    :param aggregation: Aggregation of pairwise compatibilities.
    :param majority: Majority quota, see
        :func:`coalitionlib.coalition.majority_threshold`.
    :param max_size: Largest coalition examined.
    :param minority_floor: Smallest minority arrangement reported.
    :param prune_below: Pruning floor of the search, None for exhaustive.
    :param stability: Stability scoring policy.
    :param timeout: Search time limit in seconds, None for no limit.
    '''
    def __init__(self,
                 total_seats: int = DEFAULT_SEATS,
                 divisor_function: Union[str, Callable] = 'd_hondt',
                 threshold: Number = 0,
                 distance: Union[str, Callable] = 'mean_absolute',
                 aggregation: Union[str, Callable] = 'mean',
                 majority: Union[int, Real, None] = None,
                 max_size: int = 6,
                 minority_floor: int = 60,
                 prune_below: Optional[int] = None,
                 stability: Optional[StabilityPolicy] = None,
                 timeout: Optional[float] = None,
                 ):
        self.total_seats = total_seats
        self.divisor_function = divisor_function
        self.threshold = threshold
        self.distance = distance
        self.aggregation = aggregation
        self.majority = majority
        self.max_size = max_size
        self.minority_floor = minority_floor
        self.prune_below = prune_below
        self.stability = StabilityPolicy() if stability is None else stability
        self.timeout = timeout

    def engine(self) -> ApportionmentEngine:
        return ApportionmentEngine(
            total_seats=self.total_seats,
            divisor_function=self.divisor_function,
            threshold=self.threshold,
        )

    def model(self, catalog: EntityCatalog) -> CompatibilityModel:
        return CompatibilityModel(
            catalog,
            distance=self.distance,
            aggregation=self.aggregation,
        )

    def search(self, catalog: EntityCatalog) -> CoalitionSearch:
        return CoalitionSearch(
            self.model(catalog),
            majority=self.majority,
            max_size=self.max_size,
            minority_floor=self.minority_floor,
            prune_below=self.prune_below,
            stability=self.stability,
            timeout=self.timeout,
        )

    def run(self,
            votes: Mapping[str, int],
            catalog: EntityCatalog,
            ) -> Tuple[ApportionmentResult, CoalitionAnalysis]:
        '''Apportion seats and analyze the coalitions they allow.'''
        result = self.engine().evaluate(votes)
        return result, self.search(catalog).analyze(result)


def load(infile: io.TextIOBase) -> AnalysisConfig:
    '''Load a configuration from a JSON file.'''
    return loads(infile.read())


def loads(text: str) -> AnalysisConfig:
    '''Load a configuration from a JSON string.

    Nothing is constructed unless the top-level class is
    :class:`AnalysisConfig`; nested definitions may only refer to
    coalitionlib objects.

    :raises ValueError: If the JSON does not describe an analysis
        configuration.
    '''
    definition = json.loads(text)
    if not isinstance(definition, dict):
        raise ValueError(f'not an analysis configuration: {definition!r}')
    config_class = f'{AnalysisConfig.__module__}.{AnalysisConfig.__name__}'
    definition.setdefault('class', config_class)
    if definition['class'] != config_class:
        raise ValueError(
            f"not an analysis configuration: {definition['class']!r}"
        )
    config = coalitionlib.persist.from_dict(definition)
    logger.debug('loaded configuration %s', definition)
    return config


def dumps(config: AnalysisConfig) -> str:
    '''Serialize a configuration to a JSON string, keys sorted.'''
    return json.dumps(config.to_dict(), indent=2, sort_keys=True)
