'''Validation of computed results against a real election.

The :class:`HistoricalValidator` compares apportionment and coalition
outputs with the official result and the actual government formation of a
:class:`~coalitionlib.reference.ReferenceElection` and expresses the
agreement as percentages. It only observes; nothing it computes feeds back
into the apportionment or the search.
'''

import dataclasses
import logging
from typing import Dict, Iterable, Mapping, Optional, Union

import coalitionlib.measure
from coalitionlib.apportion import ApportionmentResult
from coalitionlib.coalition import CoalitionAnalysis, CoalitionCandidate
from coalitionlib.persist import simple_serialization
from coalitionlib.reference import ReferenceElection

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ValidationReport:
    '''Accuracy figures of one validation run, all in percent except the
    disproportionality indices.'''
    election: str
    seat_accuracy: float
    coalition_accuracy: Dict[str, float]
    verdict_accuracy: Optional[float]
    gallagher: float
    loosemore_hanby: float


@simple_serialization
class HistoricalValidator:
    '''Compare computed results with a reference election.

    :param reference: The election whose official outcome is the benchmark.
    '''
    def __init__(self, reference: ReferenceElection):
        self.reference = reference

    def seat_accuracy(self,
                      result: Union[ApportionmentResult, Mapping[str, int]],
                      ) -> float:
        '''Percentage of reference parties whose computed seats match.

        Parties missing from the computed result count as having no seats.
        '''
        computed = result.seats if isinstance(result, ApportionmentResult) \
            else result
        official = self.reference.seats
        if not official:
            return 100.
        n_match = 0
        for party, n_seats in official.items():
            if computed.get(party, 0) == n_seats:
                n_match += 1
            else:
                logger.info('%s: computed %d seats, officially %d',
                            party, computed.get(party, 0), n_seats)
        return 100 * n_match / len(official)

    def coalition_accuracy(self,
                           candidates: Union[
                               CoalitionAnalysis,
                               Iterable[CoalitionCandidate],
                           ],
                           name: Optional[str] = None,
                           ) -> float:
        '''How closely the candidates recover a historical coalition.

        :param candidates: Coalitions found; for an analysis, its viable
            coalitions.
        :param name: Which historical coalition to look for; the first one
            listed in the reference if not given.
        :returns: 100 if a candidate has exactly the historical membership,
            otherwise the best membership overlap (intersection over union)
            of any candidate, in percent.
        '''
        if name is None:
            if not self.reference.coalitions:
                raise ValueError(
                    f'{self.reference.name} lists no historical coalitions'
                )
            name = next(iter(self.reference.coalitions))
        elif name not in self.reference.coalitions:
            raise KeyError(
                f'{self.reference.name} lists no coalition {name!r},'
                f' available: ' + ', '.join(self.reference.coalitions)
            )
        target = frozenset(self.reference.coalitions[name])
        if isinstance(candidates, CoalitionAnalysis):
            candidates = candidates.viable
        best = 0.
        for cand in candidates:
            members = frozenset(cand.members)
            overlap = len(target & members) / len(target | members)
            if overlap > best:
                best = overlap
            if best == 1:
                break
        logger.debug('%s coalition recovered with overlap %g', name, best)
        return 100 * best

    def verdict_accuracy(self,
                         analysis: CoalitionAnalysis,
                         min_compatibility: float = .6,
                         ) -> Optional[float]:
        '''Percentage of historical verdicts the analysis reproduces.

        A combination of parties is predicted to govern if a viable
        coalition containing all of them reaches the compatibility bar.

        :returns: None if the reference has no verdicts.
        '''
        if not self.reference.verdicts:
            return None
        n_correct = 0
        for combination, expected in self.reference.verdicts:
            wanted = frozenset(combination)
            predicted = any(
                wanted <= frozenset(cand.members)
                and cand.compatibility >= min_compatibility
                for cand in analysis.viable
            )
            if predicted == expected:
                n_correct += 1
            else:
                logger.info('%s predicted %s, historically %s',
                            '-'.join(combination),
                            'able' if predicted else 'unable',
                            'able' if expected else 'unable')
        return 100 * n_correct / len(self.reference.verdicts)

    def report(self,
               result: ApportionmentResult,
               analysis: Optional[CoalitionAnalysis] = None,
               ) -> ValidationReport:
        '''Compute all accuracy figures at once.

        Coalition and verdict accuracies need the analysis; they are left
        empty without it.
        '''
        if analysis is None:
            coalition_acc = {}
            verdict_acc = None
        else:
            coalition_acc = {
                name: self.coalition_accuracy(analysis, name)
                for name in self.reference.coalitions
            }
            verdict_acc = self.verdict_accuracy(analysis)
        return ValidationReport(
            election=self.reference.name,
            seat_accuracy=self.seat_accuracy(result),
            coalition_accuracy=coalition_acc,
            verdict_accuracy=verdict_acc,
            gallagher=coalitionlib.measure.gallagher(result),
            loosemore_hanby=coalitionlib.measure.loosemore_hanby(result),
        )
