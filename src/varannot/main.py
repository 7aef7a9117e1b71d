#!python
import argparse
import logging
import platform
import sys
import time
from typing import Dict, List, Optional, Union

import pandas as pd

from . import __version__
from . import util as _util
from .config import CustomHelpFormatter, score_params
from .constants import CLINVAR, PROGNAME, Namespace
from .region import RegionAnnotationStore
from .score import OffsetScoreStore
from .util import filepath
from .variant import Variant, read_variants

AnnotationStore = Union[OffsetScoreStore, RegionAnnotationStore]

VARIANT_COLUMNS = ['chr', 'pos', 'end', 'ref', 'alt', 'strand', 'hgvs_transcript']


class SUBCOMMAND(Namespace):
    ANNOTATE: str = 'annotate'


def create_parser(argv):
    parser = argparse.ArgumentParser(prog=PROGNAME, formatter_class=CustomHelpFormatter)
    parser.add_argument(
        '-v',
        '--version',
        action='version',
        version='%(prog)s version ' + __version__,
        help='Outputs the version number',
    )
    subp = parser.add_subparsers(dest='command', help='specifies which subprogram to use')
    subp.required = True

    subparser = subp.add_parser(
        SUBCOMMAND.ANNOTATE, formatter_class=CustomHelpFormatter, add_help=False
    )
    required = subparser.add_argument_group('required arguments')
    optional = subparser.add_argument_group('optional arguments')
    optional.add_argument('-h', '--help', action='help', help='show this help message and exit')
    optional.add_argument('--log', help='redirect stdout to a log file', default=None)
    optional.add_argument(
        '--log_level', help='level of logging to output', choices=['INFO', 'DEBUG'], default='INFO'
    )
    required.add_argument(
        '-n',
        '--inputs',
        nargs='+',
        help='path to the tab-delimited variant files',
        required=True,
        metavar='FILEPATH',
    )
    required.add_argument(
        '-o', '--output', help='path to the output file', required=True, metavar='FILEPATH'
    )
    optional.add_argument(
        '--scores', help='directory of the per-chromosome binary score files', default=None
    )
    optional.add_argument(
        '--score_param',
        nargs='+',
        default=[],
        metavar='KEY=VALUE',
        help='decoding parameters of the score files (per_bp, min, step, sentinel)',
    )
    optional.add_argument(
        '--clinvar',
        nargs='+',
        default=[],
        metavar='FILEPATH',
        help='the indexed single-variant annotation VCF, optionally followed by the multi-variant VCF',
    )
    optional.add_argument(
        '--clinvar_prefix', default=CLINVAR.PREFIX, help='prefix for the annotation output fields'
    )

    args = parser.parse_args(argv)

    if not args.scores and not args.clinvar:
        parser.error('at least one of --scores or --clinvar is required')
    if len(args.clinvar) > 2:
        parser.error(f'--clinvar accepts at most 2 files. Given: {len(args.clinvar)}')
    try:
        args.score_param = score_params(args.score_param)
    except (KeyError, ValueError) as err:
        parser.error(f'--score_param {err}')
    return parser, args


def annotate_variants(variants: List[Variant], stores: List[AnnotationStore]) -> pd.DataFrame:
    """
    run each annotation store on each variant

    Returns:
        a table of the variants with a column for each field advertised by the stores
    """
    columns = VARIANT_COLUMNS[:]
    for store in stores:
        columns.extend([col for col in store.header_info() if col not in columns])

    rows = []
    annotated = 0
    for variant in variants:
        row: Dict = {
            'chr': variant.chromosome,
            'pos': variant.start,
            'end': variant.end,
            'ref': variant.ref,
            'alt': variant.alt,
            'strand': '+' if variant.strand > 0 else '-',
            'hgvs_transcript': variant.hgvs_transcript,
        }
        found = False
        for store in stores:
            result = store.annotate(variant)
            found = found or bool(result)
            row.update(result)
        annotated += found
        rows.append(row)
    _util.logger.info(f'annotated {annotated} of {len(variants)} variants')
    return pd.DataFrame(rows, columns=columns)


def build_stores(args, stores: List[AnnotationStore]) -> List[AnnotationStore]:
    """
    opens the stores requested by the command line arguments, appending each to stores as it is opened
    """
    if args.scores:
        stores.append(OffsetScoreStore(args.scores, **args.score_param))
    if args.clinvar:
        stores.append(RegionAnnotationStore(*args.clinvar, prefix=args.clinvar_prefix))
    return stores


def main(argv: Optional[List[str]] = None):
    """
    sets up the parser and checks the validity of command line args
    opens the annotation files and annotates the input variants

    Args:
        argv: List of arguments, defaults to command line arguments
    """
    if argv is None:  # need to do at run time or patching will not behave as expected
        argv = sys.argv[1:]
    start_time = int(time.time())
    parser, args = create_parser(argv)

    # try checking the input files exist
    try:
        args.inputs = _util.bash_expands(*args.inputs)
    except FileNotFoundError:
        parser.error('--inputs file(s) for {} {} do not exist'.format(args.command, args.inputs))
    if args.clinvar:
        try:
            args.clinvar = [filepath(f) for f in args.clinvar]
        except TypeError as err:
            parser.error(f'--clinvar {err}')

    log_conf = {
        'format': '{asctime} [{levelname}] {message}',
        'style': '{',
        'level': args.log_level,
    }

    original_logging_handlers = logging.root.handlers[:]
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    if args.log:  # redirect stdout AND stderr to a log file
        log_conf['filename'] = args.log
    logging.basicConfig(**log_conf)

    _util.logger.info(f'{PROGNAME}: {__version__}')
    _util.logger.info(f'hostname: {platform.node()}')
    _util.log_arguments(args)

    stores: List[AnnotationStore] = []
    try:
        build_stores(args, stores)
        variants = []
        for filename in args.inputs:
            variants.extend(read_variants(filename))
        df = annotate_variants(variants, stores)
        _util.logger.info(f'writing: {args.output}')
        df.to_csv(args.output, sep='\t', index=False)

        duration = int(time.time()) - start_time
        _util.logger.info(f'run time (s): {duration}')
    finally:
        for store in stores:
            store.close()
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
            handler.close()
        for handler in original_logging_handlers:
            logging.root.addHandler(handler)


if __name__ == '__main__':
    main()
