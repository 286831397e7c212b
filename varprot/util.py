from datetime import datetime
from glob import glob
import logging
import os

from braceexpand import braceexpand

from .constants import VarprotNamespace


class Log:
    """
    callable wrapper around the builtin logging which joins the message parts, stamps the time and indents nested
    steps. A logger with no level discards everything

    Example:
        >>> LOG('loaded', 3, 'genes', time_stamp=True)
        >>> with LOG.indent() as log:
        ...     log('nested step')
    """
    TIME_FORMAT = '[%Y-%m-%d %H:%M:%S]'

    def __init__(self, indent_str='  ', indent_level=0, level=logging.INFO):
        self.indent_str = indent_str
        self.indent_level = indent_level
        self.level = level

    def __call__(self, *pos, time_stamp=False, level=None, indent_level=0, **kwargs):
        if self.level is None:
            return
        prefix = datetime.now().strftime(self.TIME_FORMAT) if time_stamp else ' ' * len(self.TIME_FORMAT) + ' '
        indent = self.indent_str * (self.indent_level + indent_level)
        message = '{} {}{}'.format(prefix, indent, ' '.join([str(p) for p in pos]))
        logging.log(self.level if level is None else level, message, **kwargs)

    def warning(self, *pos, **kwargs):
        self(*pos, level=logging.WARNING, **kwargs)

    def indent(self):
        return Log(self.indent_str, self.indent_level + 1, self.level)

    def dedent(self):
        return Log(self.indent_str, max(0, self.indent_level - 1), self.level)

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        return False


LOG = Log()
DEVNULL = Log(level=None)


def bash_expands(*expressions):
    """
    expand file glob expressions which may include bash-style brace alternatives

    Returns:
        :class:`list` of :class:`str`: absolute paths of the matching files, in expression order

    Raises:
        FileNotFoundError: an expression does not match any files

    Example:
        >>> bash_expands('./tests/data/mini.{gtf,gff3}')
        ['/path/to/tests/data/mini.gtf', '/path/to/tests/data/mini.gff3']
    """
    result = []
    for expression in expressions:
        matches = [fname for name in braceexpand(expression) for fname in glob(name)]
        if not matches:
            raise FileNotFoundError('The expression does not match any files', expression)
        result.extend(matches)
    return [os.path.abspath(f) for f in result]


def filepath(path):
    """
    argparse type for an existing input file. The path may be a glob expression if it resolves to a single file
    """
    try:
        file_list = bash_expands(path)
    except FileNotFoundError:
        raise TypeError('File does not exist', path)
    if len(file_list) > 1:
        raise TypeError('File pattern match multiple files and expected only one', path)
    return file_list[0]


class WeakVarprotNamespace(VarprotNamespace):
    """
    namespace where every variable can be overridden by the VARPROT_ prefixed environment variable of the same name
    """
    def is_env_overwritable(self, attr):
        return True


def log_arguments(args, log=LOG):
    """
    output the arguments to the console, one per line and one list item per line

    Args:
        args (VarprotNamespace): the namespace to print arguments for
    """
    log('arguments', time_stamp=True)
    log = log.indent()
    for arg, val in sorted(args.items()):
        if isinstance(val, list) and len(val) > 1:
            log(arg, '= [')
            for item in val:
                log(repr(item), indent_level=1)
            log(']')
        elif val is None or isinstance(val, (str, int, float, bool, tuple, list)):
            log(arg, '=', repr(val))
        else:
            log(arg, '=', object.__repr__(val))


def mkdirp(dirname):
    """
    Make a directory or path of directories. Does nothing if the directory already exists

    Raises:
        FileExistsError: the path exists and is not a directory
    """
    LOG("creating output directory: '{}'".format(dirname))
    os.makedirs(dirname, exist_ok=True)
    return dirname
