import re
from functools import wraps


def memoize(maxsize=1000):
    """Make a memoization decorator. A negative value of `maxsize` means
    no size limit."""
    def deco(f):
        """Memoization decorator. Items of `kwargs` must be hashable."""
        memo = {}

        @wraps(f)
        def func(*args, **kwargs):
            key = (args, frozenset(kwargs.items()))
            if key not in memo:
                if len(memo) == maxsize:
                    memo.pop(next(iter(memo)))
                memo[key] = f(*args, **kwargs)
            return memo[key]
        func.cache_clear = memo.clear
        return func
    return deco


def is_number(value):
    """Return :py:const:`True` if `value` can be parsed as a float."""
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


def is_integer(value):
    """Return :py:const:`True` if `value` is an integer literal."""
    try:
        int(str(value).strip())
    except ValueError:
        return False
    return True


def safe_int(value, default=0):
    """Parse `value` as an integer, returning `default` on failure."""
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def safe_float(value, default=0.0):
    """Parse `value` as a float, returning `default` on failure.
    ``inf`` and ``nan`` literals are accepted."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def dbl_to_string(value, digits):
    """Format `value` with at most `digits` digits after the decimal point,
    dropping trailing zeros.

    >>> dbl_to_string(1.50000, 4)
    '1.5'
    """
    text = '{:.{}f}'.format(value, max(digits, 0))
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        return '0'
    return text


def mass_error_to_string(mass_error):
    """Format a mass error in Da: ``'0'`` below 1e-6, 6 digits below 1e-4
    and 5 digits otherwise."""
    if abs(mass_error) < 0.000001:
        return '0'
    return dbl_to_string(mass_error, 6 if abs(mass_error) < 0.0001 else 5)


_trailing_zeros = re.compile(r'(\.\d*[1-9])0+$')
_all_zeros = re.compile(r'\.0+$')


def remove_extraneous_digits(value):
    """Remove trailing zeros after the decimal point of a number string,
    e.g. ``"0.0500"`` becomes ``"0.05"`` and ``"3.000"`` becomes ``"3"``."""
    if not value:
        return value
    if _trailing_zeros.search(value):
        return _trailing_zeros.sub(r'\1', value)
    return _all_zeros.sub('', value)


def truncate_protein_name(name):
    """Truncate a protein name at the first space."""
    return name.split(' ', 1)[0] if name else name
