"""
version - PHRP version information
==================================

Captures the current version number of the :py:mod:`phrp` package.

Classes
-------

  :py:class:`VersionInfo` - a comparable namedtuple built from a version string.

Constants
---------

  :py:const:`version` - a string with the current version.

  :py:const:`version_info` - a :py:class:`VersionInfo` for the current version.

"""

__version__ = '1.2.0'

from collections import namedtuple
from functools import total_ordering
import re


@total_ordering
class VersionInfo(namedtuple('VersionInfo', ('major', 'minor', 'micro', 'releaselevel'))):
    """Tuple mimicking :py:const:`sys.version_info`"""
    def __new__(cls, version_str):
        match = re.match(r'(\d+)\.(\d+)(?:\.(\d+))?([a-zA-Z]+\d*)?', version_str)
        if match is None:
            raise ValueError('Unrecognized version string: {}'.format(version_str))
        inst = super(VersionInfo, cls).__new__(cls, *match.groups())
        inst._version_str = version_str
        return inst

    @property
    def _key(self):
        return tuple(int(x) if x and x.isdigit() else 0 for x in self[:3])

    def __str__(self):
        return 'PHRP version {}'.format(self._version_str)

    def __eq__(self, other):
        if not isinstance(other, VersionInfo):
            other = VersionInfo(other)
        return self._key == other._key and self.releaselevel == other.releaselevel

    def __lt__(self, other):
        if not isinstance(other, VersionInfo):
            other = VersionInfo(other)
        return self._key < other._key

    def __hash__(self):
        return hash(self._version_str)


version_info = VersionInfo(__version__)
version = __version__
