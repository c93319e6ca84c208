import sys
import os
from functools import wraps

from .structures import PHRPError


class _file_obj(object):
    """Check if `f` is a file name and open the file in `mode`.
    A context manager. Text files are opened with universal newlines
    and written with ``\\n`` line endings."""

    def __init__(self, f, mode, encoding=None):
        self.mode = mode
        if f is None:
            self.file = {'r': sys.stdin, 'a': sys.stdout, 'w': sys.stdout}[mode[0]]
            self._file_spec = None
        elif isinstance(f, (str, os.PathLike)):
            kw = {} if 'b' in mode else {'encoding': encoding or 'utf-8', 'newline': None if 'r' in mode else '\n'}
            self.file = open(f, mode, **kw)
            self._file_spec = f
        else:
            self._file_spec = f
            self.file = f
        self.encoding = getattr(self.file, 'encoding', encoding)
        self.close_file = (self.file is not f)

    @property
    def name(self):
        return getattr(self.file, 'name', self._file_spec)

    def __enter__(self):
        return self

    def __exit__(self, *args, **kwargs):
        if (not self.close_file) or self._file_spec is None:
            return
        self.file.close()

    def __getattr__(self, attr):
        return getattr(self.file, attr)

    def __iter__(self):
        return iter(self.file)


class FileReader(object):
    """Iterator and context manager wrapping a generator function that
    consumes an open file.
    """

    def __init__(self, source, parser_func, mode='r', encoding=None, args=(), kwargs=None):
        self._source_init = source
        self._func = parser_func
        self._mode = mode
        self._encoding = encoding
        self._args = args
        self._kwargs = kwargs or {}
        self.reset()

    def reset(self):
        """Reopen the source and restart iteration."""
        if hasattr(self, '_source'):
            self._source.__exit__(None, None, None)
        self._source = _file_obj(self._source_init, self._mode, self._encoding)
        try:
            self._reader = self._func(self._source, *self._args, **self._kwargs)
        except Exception:
            self.__exit__(*sys.exc_info())
            raise

    def __enter__(self):
        return self

    def __exit__(self, *args, **kwargs):
        self._source.__exit__(*args, **kwargs)

    def __iter__(self):
        return self

    def __next__(self):
        return next(self._reader)

    def __getattr__(self, attr):
        if attr == '_source':
            raise AttributeError
        return getattr(self._source, attr)


def _file_reader(_mode='r'):
    def decorator(_func):
        """A decorator implementing the context manager protocol for
        generator functions that read files.
        """
        @wraps(_func)
        def helper(*args, **kwargs):
            enc = kwargs.pop('encoding', None)
            if args:
                return FileReader(args[0], _func, mode=_mode, encoding=enc, args=args[1:], kwargs=kwargs)
            source = kwargs.pop('source', None)
            return FileReader(source, _func, mode=_mode, encoding=enc, kwargs=kwargs)
        return helper
    return decorator


def _file_writer(_mode='w'):
    def decorator(_func):
        """A decorator that opens output files for writer functions.
        """
        @wraps(_func)
        def helper(*args, **kwargs):
            m = kwargs.pop('file_mode', _mode)
            enc = kwargs.pop('encoding', None)
            if len(args) > 1:
                out_arg = args[1]
            else:
                out_arg = kwargs.pop('output', None)

            with _file_obj(out_arg, m, encoding=enc) as out:
                if len(args) > 1:
                    call_args = (args[0], out) + args[2:]
                    call_kwargs = kwargs
                else:
                    call_args = args
                    call_kwargs = dict(output=out, **kwargs)
                return _func(*call_args, **call_kwargs)
        return helper
    return decorator


def split_line(line, sep='\t'):
    """Strip the line terminator and surrounding whitespace from `line`
    and split it on `sep`."""
    return line.strip().split(sep)


class TableWriter(object):
    """Tab-delimited table writer. The header row is written on open.

    Parameters
    ----------
    output : str or file
        Path to the output file or a writable file object.
    columns : list of str
        Header names.
    """

    def __init__(self, output, columns, sep='\t'):
        self.columns = list(columns)
        self.sep = sep
        self.rows_written = 0
        try:
            self._file = _file_obj(output, 'w')
        except OSError as e:
            raise PHRPError('Cannot create output file: {}'.format(output), e)
        self.path = output if isinstance(output, (str, os.PathLike)) else getattr(output, 'name', None)
        self._write(self.columns)

    def _write(self, values):
        self._file.write(self.sep.join(str(v) for v in values))
        self._file.write('\n')

    def write_row(self, values):
        """Write one row. `values` is a sequence in column order or a
        :py:class:`dict` keyed by column name."""
        if isinstance(values, dict):
            values = [values.get(c, '') for c in self.columns]
        self._write(values)
        self.rows_written += 1

    def close(self):
        self._file.__exit__(None, None, None)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
