#!python
import argparse
import logging
import platform
import sys
import time

from . import __version__
from .annotate import main as annotate_main
from . import config as _config
from .constants import EXIT_OK, PROGNAME, VarprotNamespace
from . import util as _util


REQUIRED_ARGUMENTS = ['reference_genome', 'annotations', 'variants', 'output']
OPTIONAL_ARGUMENTS = [
    'sample', 'selenocysteine', 'threads', 'min_peptide_length', 'up_down_length', 'max_heterozygous_variants',
    'organism'
]
LOGGING_ARGUMENTS = ['log', 'log_level']


def create_parser():
    parser = argparse.ArgumentParser(prog=PROGNAME, formatter_class=_config.CustomHelpFormatter, add_help=False)
    _config.augment_parser(REQUIRED_ARGUMENTS, parser.add_argument_group('required arguments'))
    _config.augment_parser(
        ['help', 'version'] + LOGGING_ARGUMENTS + OPTIONAL_ARGUMENTS, parser.add_argument_group('optional arguments'))
    return parser


def swap_root_handlers(handlers):
    """
    replace the handlers of the root logger

    Returns:
        :class:`list` of :class:`logging.Handler`: the handlers which were removed
    """
    removed = logging.root.handlers[:]
    for handler in removed:
        logging.root.removeHandler(handler)
    for handler in handlers:
        logging.root.addHandler(handler)
    return removed


def main(argv=None):
    """
    parses and validates the command line, then builds the variant protein database for the selected sample

    Args:
        argv (list): List of arguments, defaults to command line arguments

    Returns:
        int: the success exit code. Errors propagate to the caller after being written to the log file
    """
    if argv is None:
        argv = sys.argv[1:]
    start_time = int(time.time())

    args = VarprotNamespace(**vars(create_parser().parse_args(argv)))

    saved_handlers = swap_root_handlers([])
    logging.basicConfig(
        format='{message}', style='{', level=_config.LOG_LEVELS[args.log_level],
        **({'filename': args.log} if args.log else {}))

    _util.LOG('{}: {}'.format(PROGNAME, __version__))
    _util.LOG('hostname:', platform.node())
    _util.log_arguments(args)

    try:
        annotate_main.main(
            start_time=start_time, **{k: v for k, v in args.items() if k not in LOGGING_ARGUMENTS})
    except Exception as err:
        if args.log:
            logging.exception(err)  # the traceback would otherwise only reach the console
        raise
    finally:
        swap_root_handlers(saved_handlers)
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
