"""
Command Line Interface for ClinDCA.

This module provides a command-line interface for running decision curve
analysis on a CSV file without writing Python code. Results are written to
standard output as CSV.
"""

import argparse
import sys
import json
import logging
from pathlib import Path
import pandas as pd

from .core.config import DCAConfig
from .core.errors import DCAError
from .core.thresholds import ThresholdGrid
from .pipeline.dca_pipeline import DecisionCurvePipeline
from . import __version__


def create_parser():
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="clindca",
        description="ClinDCA: Decision Curve Analysis for Clinical Prediction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Binary outcome
  clindca --data data.csv --outcome cancer --predictors risk_model famhistory \\
          --score-kind famhistory=binary-indicator

  # Time-to-event outcome at 1.5 years
  clindca --data data.csv --outcome event --time ttevent --time-horizon 1.5 \\
          --predictors risk_at_1_5

  # Case-control sample with known prevalence
  clindca --data data.csv --outcome case --predictors marker --case-control --prevalence 0.05
        """
    )

    # Version
    parser.add_argument(
        '--version',
        action='version',
        version=f'ClinDCA {__version__}'
    )

    # Required arguments
    parser.add_argument(
        '--data',
        type=str,
        required=True,
        help='Path to input CSV file with one row per subject'
    )

    parser.add_argument(
        '--outcome',
        type=str,
        required=True,
        help='Outcome column (0/1 flag, or event code for time-to-event data)'
    )

    parser.add_argument(
        '--predictors',
        nargs='+',
        required=True,
        help='Score columns to evaluate'
    )

    # Optional arguments
    parser.add_argument(
        '--config',
        type=str,
        help='Path to JSON configuration file with analysis parameters'
    )

    parser.add_argument(
        '--jobs',
        type=int,
        default=1,
        help='Number of parallel workers (default: 1)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    # Predictor options
    predictor_group = parser.add_argument_group('Predictor Options')
    predictor_group.add_argument(
        '--score-kind',
        action='append',
        default=[],
        metavar='NAME=KIND',
        help='Score kind per predictor: probability, binary-indicator or raw-score-to-rescale'
    )

    predictor_group.add_argument(
        '--harm',
        action='append',
        default=[],
        metavar='NAME=VALUE',
        help='Per-subject harm of acting on a predictor (default: 0)'
    )

    predictor_group.add_argument(
        '--thresholds',
        nargs=3,
        type=float,
        metavar=('START', 'STOP', 'STEP'),
        help='Threshold grid (default: 0.01 0.99 0.01)'
    )

    # Outcome regime options
    regime_group = parser.add_argument_group('Outcome Options')
    regime_group.add_argument(
        '--time',
        type=str,
        help='Time-to-event column (survival analysis)'
    )

    regime_group.add_argument(
        '--time-horizon',
        type=float,
        help='Time at which event probability is evaluated (survival analysis)'
    )

    regime_group.add_argument(
        '--competing',
        action='store_true',
        help='Treat event codes other than the event of interest as competing risks'
    )

    regime_group.add_argument(
        '--event-of-interest',
        type=int,
        help='Event code of interest under competing risks (default: smallest event code)'
    )

    regime_group.add_argument(
        '--prevalence',
        type=float,
        help='Outcome prevalence for case-control samples'
    )

    regime_group.add_argument(
        '--case-control',
        action='store_true',
        help='Outcome column comes from a case-control sample (requires --prevalence)'
    )

    # Output options
    output_group = parser.add_argument_group('Output Options')
    output_group.add_argument(
        '--smooth',
        action='store_true',
        help='Add LOWESS-smoothed net benefit alongside the raw curve'
    )

    output_group.add_argument(
        '--span',
        type=float,
        default=0.25,
        help='LOWESS span as a fraction of thresholds (default: 0.25)'
    )

    output_group.add_argument(
        '--view',
        choices=['table', 'interventions', 'wide', 'best'],
        default='table',
        help='Output view (default: table)'
    )

    output_group.add_argument(
        '--nper',
        type=int,
        default=100,
        help='Scale for net interventions avoided (default: per 100 subjects)'
    )

    return parser


def parse_assignments(values, option, cast=str):
    """Parse repeated NAME=VALUE options into a dict."""
    parsed = {}
    for item in values:
        name, sep, value = item.partition('=')
        if not sep or not name:
            raise ValueError(f"{option} expects NAME=VALUE, got '{item}'")
        parsed[name] = cast(value)
    return parsed


def load_config(config_path):
    """Load configuration from JSON file."""
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
        return config
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error loading configuration file: {e}", file=sys.stderr)
        sys.exit(1)


def validate_inputs(args):
    """Validate input arguments."""
    # Check if data file exists
    if not Path(args.data).exists():
        print(f"Error: Data file '{args.data}' not found.", file=sys.stderr)
        sys.exit(1)

    if args.time_horizon is not None and args.time is None:
        print("Error: --time-horizon requires --time.", file=sys.stderr)
        sys.exit(1)

    if args.time_horizon is not None and args.prevalence is not None:
        print("Error: --time-horizon and --prevalence cannot be combined.", file=sys.stderr)
        sys.exit(1)

    if not 0 < args.span <= 1:
        print("Error: span must be in (0, 1].", file=sys.stderr)
        sys.exit(1)

    if args.nper < 1:
        print("Error: nper must be at least 1.", file=sys.stderr)
        sys.exit(1)


def build_config(args):
    """Build analysis configuration from command line arguments."""
    values = load_config(args.config) if args.config else {}
    values.update({
        'score_kinds': {**values.get('score_kinds', {}), **parse_assignments(args.score_kind, '--score-kind')},
        'harm': {**values.get('harm', {}), **parse_assignments(args.harm, '--harm', float)},
        'n_jobs': args.jobs,
        'verbose': args.verbose,
    })
    if args.thresholds is not None:
        values['thresholds'] = ThresholdGrid.from_range(*args.thresholds).values
    if args.smooth:
        values['smoothing'] = True
        values['smoothing_span'] = args.span
    if args.time_horizon is not None:
        values['time_horizon'] = args.time_horizon
    if args.competing:
        values['competing'] = True
    if args.event_of_interest is not None:
        values['event_of_interest'] = args.event_of_interest
    if args.prevalence is not None:
        values['prevalence'] = args.prevalence
    if args.case_control:
        values['case_control'] = True
    return DCAConfig.from_dict(values)


def render(result, view, nper):
    """Select the output view of a result."""
    if view == 'interventions':
        return result.net_interventions_avoided(nper=nper)
    if view == 'wide':
        return result.wide('net_benefit').reset_index()
    if view == 'best':
        return result.best_strategy()
    return result.table


def main(argv=None):
    """Main CLI function."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Validate inputs
    validate_inputs(args)

    try:
        config = build_config(args)
        data = pd.read_csv(args.data)
        pipeline = DecisionCurvePipeline(config)
        result = pipeline.run(
            data,
            outcome=args.outcome,
            predictors=args.predictors,
            time=args.time,
        )
    except (DCAError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            logging.getLogger(__name__).exception("Decision curve analysis failed")
        sys.exit(1)

    for name, error in result.failures.items():
        print(f"Warning: predictor '{name}' excluded: {error}", file=sys.stderr)

    render(result, args.view, args.nper).to_csv(sys.stdout, index=False)
    if args.verbose:
        print(pipeline.summary(), file=sys.stderr)


if __name__ == "__main__":
    main()
