import argparse
import logging

from tab import cast_boolean

from . import __version__
from .annotate.constants import DEFAULTS
from .annotate.file_io import REFERENCE_DEFAULTS
from .constants import positive_int
from .util import filepath


LOG_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
}


class CustomHelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    """
    subclass the default help formatter to stop default printing for required arguments
    """

    def _format_args(self, action, default_metavar):
        if action.metavar is None:
            action.metavar = get_metavar(action.type)
        return super(CustomHelpFormatter, self)._format_args(action, default_metavar)

    def _get_help_string(self, action):
        if action.required:
            return action.help
        return super(CustomHelpFormatter, self)._get_help_string(action)

    def add_arguments(self, actions):
        # sort the arguments alphanumerically so they print in the help that way
        actions = sorted(actions, key=lambda x: getattr(x, 'option_strings'))
        super(CustomHelpFormatter, self).add_arguments(actions)


def get_metavar(arg_type):
    """
    the metavar shown in the help for options of a given type

    Example:
        >>> get_metavar(bool)
        '{True,False}'
    """
    metavars = [
        ((bool, cast_boolean), '{True,False}'),
        ((float, ), 'FLOAT'),
        ((int, positive_int), 'INT'),
        ((filepath, ), 'FILEPATH'),
    ]
    for types, metavar in metavars:
        if arg_type in types:
            return metavar
    return None


def nullable_type(cast_type):
    """
    wrap an argparse type so that the string 'none' is read as None
    """
    def _cast(value):
        if str(value).lower() == 'none':
            return None
        return cast_type(value)
    return _cast


SPECIAL_ARGUMENTS = {
    'help': (['-h', '--help'], dict(action='help', help='show this help message and exit')),
    'version': (['-v', '--version'], dict(
        action='version', version='%(prog)s version ' + __version__, help='Outputs the version number')),
    'log': (['--log'], dict(help='redirect stdout to a log file', default=None, metavar='FILEPATH')),
    'log_level': (['--log_level'], dict(
        help='level of logging to output', choices=sorted(LOG_LEVELS.keys()), default='INFO')),
    'output': (['-o', '--output'], dict(
        required=True, metavar='FILEPATH', help='path to the output fasta file of variant proteins')),
    'variants': (['--variants'], dict(required=True, type=filepath, help='path to the VCF file of variant calls')),
    'sample': (['--sample'], dict(
        default=None, help='name of the sample in the VCF to use. Defaults to the first sample')),
}


def augment_parser(arguments, parser, required=None):
    """
    Adds options to the argument parser. Options without a fixed form are looked up in the defaults namespaces, where
    the definition is used as the help and the cast type is used as the argparse type

    Args:
        arguments (list of str): the names of the options to add
        parser (argparse.ArgumentParser): the parser or argument group to add them to
        required (bool): mark the added options as required

    Raises:
        KeyError: an option has not been defined
    """
    for arg in arguments:
        if arg in SPECIAL_ARGUMENTS:
            flags, opts = SPECIAL_ARGUMENTS[arg]
            parser.add_argument(*flags, **opts)
            continue
        nspace = next((n for n in [DEFAULTS, REFERENCE_DEFAULTS] if arg in n), None)
        if nspace is None:
            raise KeyError('invalid argument', arg)
        default_value = nspace[arg]
        cast_type = nspace.type(arg)
        listable = nspace.is_listable(arg)
        nullable = nspace.is_nullable(arg)

        is_required = required if required is not None else (listable and not default_value and not nullable)
        opts = dict(
            required=is_required, help=nspace.define(arg),
            type=nullable_type(cast_type) if nullable else cast_type,
            nargs='+' if listable else None, metavar=get_metavar(cast_type))
        if not is_required:
            opts['default'] = default_value
        parser.add_argument('--{}'.format(arg), **opts)
