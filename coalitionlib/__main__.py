"""A commandline tool for a quick coalition analysis of a reference election.

Apportions the seats from the official votes, checks them against the
official result, and lists the best ranked coalitions the seated parties
could form.
"""

import argparse
import io
import logging
from typing import Optional, Sequence

import coalitionlib.config
import coalitionlib.reference
from coalitionlib.coalition import CoalitionAnalysis, CoalitionCandidate
from coalitionlib.entity import EntityCatalog
from coalitionlib.validate import HistoricalValidator, ValidationReport

argparser = argparse.ArgumentParser(
    prog='coalitionlib',
    description=__doc__,
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
argparser.add_argument(
    '-e', '--election',
    default='nl_tk_2023',
    choices=sorted(coalitionlib.reference.ELECTIONS),
    help='reference election to analyze',
)
argparser.add_argument(
    '-c', '--config-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='JSON file with analysis settings',
)
argparser.add_argument(
    '-k', '--max-size',
    type=int,
    help='largest coalition to examine (overrides the settings)',
)
argparser.add_argument(
    '-a', '--aggregation',
    help='aggregation of pairwise compatibilities (overrides the settings)',
)
argparser.add_argument(
    '-n', '--n-top',
    type=int,
    default=10,
    help='number of coalitions to show in each ranking',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all log messages',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any log messages',
)


def main(election: str = 'nl_tk_2023',
         config_file: Optional[io.TextIOBase] = None,
         max_size: Optional[int] = None,
         aggregation: Optional[str] = None,
         n_top: int = 10,
         verbose: bool = False,
         quiet: bool = False,
         ) -> None:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    reference = coalitionlib.reference.get(election)
    if config_file is None:
        config = coalitionlib.config.AnalysisConfig(
            total_seats=reference.total_seats
        )
    else:
        config = coalitionlib.config.load(config_file)
    if max_size is not None:
        config.max_size = max_size
    if aggregation is not None:
        config.aggregation = aggregation
    result, analysis = config.run(reference.votes, reference.catalog)
    print()
    print(f'{reference.name}: {result.total_votes} votes'
          f' for {result.total_seats} seats')
    show_seats(result.table(reference.catalog, seated_only=True))
    print()
    print(f'{analysis.majority} seats needed for a majority;'
          f' {analysis.n_examined} coalitions examined ({analysis.status})')
    show_ranking('By compatibility', analysis.viable, n_top,
                 reference.catalog)
    show_ranking('By stability', analysis.ranked_by_stability, n_top,
                 reference.catalog)
    show_pointers(analysis)
    scenarios = config.search(reference.catalog).scenarios(
        reference.scenarios, result
    )
    if scenarios:
        print()
        print('Scenarios:')
        for name, cand in scenarios.items():
            show_coalition(cand, label=name)
    show_report(HistoricalValidator(reference).report(result, analysis))


def show_seats(rows: Sequence[dict]) -> None:
    n_just_chars = max(len(row['party']) for row in rows)
    for row in rows:
        print(
            row['party'].ljust(n_just_chars),
            str(row['seats']).rjust(4),
            f'{row["vote_share"]:7.2%}',
            f'{row["seat_share"]:7.2%}',
            ' ', row['name'],
        )


def show_ranking(title: str,
                 candidates: Sequence[CoalitionCandidate],
                 n_top: int,
                 catalog: EntityCatalog,
                 ) -> None:
    print()
    print(f'{title}:')
    if not candidates:
        print(' ' * 4 + 'no viable coalition')
    for i, cand in enumerate(candidates[:n_top], start=1):
        show_coalition(cand, label=str(i))


def show_coalition(cand: CoalitionCandidate, label: str = '') -> None:
    flags = ', '.join(str(violation) for violation in cand.violations)
    print(
        label.rjust(4), '-'.join(cand.members),
        f'{cand.seats} seats',
        f'compatibility {cand.compatibility:.3f}',
        f'stability {cand.stability:.3f}',
        ('' if cand.viable else '(minority)'),
        (f'BLOCKED: {flags}' if flags else ''),
    )


def show_pointers(analysis: CoalitionAnalysis) -> None:
    print()
    for label, cand in (
        ('Most compatible', analysis.most_compatible),
        ('Most stable', analysis.most_stable),
        ('Historically likely', analysis.historically_likely),
    ):
        print(f'{label}:', cand if cand is not None else 'none unblocked')


def show_report(report: ValidationReport) -> None:
    print()
    print(f'Validation against {report.election}:')
    print(f'    seat accuracy {report.seat_accuracy:.1f} %')
    for name, accuracy in report.coalition_accuracy.items():
        print(f'    {name} coalition recovered {accuracy:.1f} %')
    if report.verdict_accuracy is not None:
        print(f'    historical verdicts reproduced'
              f' {report.verdict_accuracy:.1f} %')
    print(f'    Gallagher index {report.gallagher:.4f},'
          f' Loosemore-Hanby index {report.loosemore_hanby:.4f}')


if __name__ == '__main__':
    main(**vars(argparser.parse_args()))
