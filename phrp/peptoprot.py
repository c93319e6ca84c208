"""
peptoprot - peptide to protein mapping files
============================================

Summary
-------

Search engines usually report a single protein per peptide. An external
protein mapping step writes a ``_PepToProtMap.txt`` file listing every protein
containing each peptide, with the peptide's residue range. This module reads
such files, looks peptides up in them and rewrites them with canonical
modification symbols.

Data access
-----------

  :py:func:`read` - iterate over :py:class:`PepToProteinMapping` entries.

  :py:class:`PepToProteinMap` - sorted, searchable mapping table.

  :py:func:`write` - write mapping entries to a tab-delimited file.

  :py:func:`map_file_path` - location of the mapping file for a results file.

-------------------------------------------------------------------------------
"""

#   Copyright 2012 Anton Goloborodko, Lev Levitsky
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

import os
from bisect import bisect_left
from collections import namedtuple

from .auxiliary import _file_reader, _file_writer, TableWriter, is_integer, safe_int

PEP_TO_PROT_MAP_SUFFIX = '_PepToProtMap.txt'
PEP_TO_PROT_MAP_MTS_SUFFIX = '_PepToProtMapMTS.txt'
COLUMNS = ['Peptide', 'Protein', 'Residue_Start', 'Residue_End']

PepToProteinMapping = namedtuple('PepToProteinMapping', ('peptide', 'protein', 'residue_start', 'residue_end'))


@_file_reader()
def read(source):
    """Iterate over the entries of a peptide to protein map file.

    The file is tab-delimited with at least 4 columns: peptide, protein,
    residue start and residue end. The first line is skipped if its third
    column is not an integer. Lines with fewer columns are ignored.

    Parameters
    ----------
    source : str or file
        Path or file object.

    Returns
    -------
    out : iterator
        :py:class:`PepToProteinMapping` tuples.
    """
    for i, line in enumerate(source):
        fields = line.rstrip('\r\n').split('\t')
        if len(fields) < 4:
            continue
        if i == 0 and not is_integer(fields[2]):
            continue
        yield PepToProteinMapping(fields[0], fields[1], safe_int(fields[2]), safe_int(fields[3]))


@_file_writer()
def write(mappings, output=None):
    """Write `mappings` as a tab-delimited table with a header row."""
    writer = TableWriter(output, COLUMNS)
    for m in mappings:
        writer.write_row(m)
    return writer.rows_written


def map_file_path(results_path, strip_suffixes=()):
    """Path of the peptide to protein map for `results_path`.

    Any of `strip_suffixes` at the end of the base name is removed first.

    >>> map_file_path('/d/X_inspect_syn.txt', ('_syn', '_fht'))
    '/d/X_inspect_PepToProtMap.txt'
    """
    base = os.path.splitext(results_path)[0]
    for suffix in strip_suffixes:
        if base.lower().endswith(suffix.lower()):
            base = base[:-len(suffix)]
            break
    return base + PEP_TO_PROT_MAP_SUFFIX


class PepToProteinMap(object):
    """An in-memory mapping table sorted by peptide.

    Parameters
    ----------
    mappings : iterable of PepToProteinMapping
    """

    def __init__(self, mappings=()):
        self.entries = sorted(mappings, key=lambda m: m.peptide)
        self._peptides = [m.peptide for m in self.entries]

    @classmethod
    def from_file(cls, source):
        with read(source) as r:
            return cls(r)

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def lookup(self, peptide):
        """All entries for `peptide`, or an empty list."""
        i = bisect_left(self._peptides, peptide)
        found = []
        while i < len(self._peptides) and self._peptides[i] == peptide:
            found.append(self.entries[i])
            i += 1
        return found

    def proteins(self, peptide):
        return [m.protein for m in self.lookup(peptide)]

    def rewrite(self, peptide_func):
        """Return a new map with every peptide passed through `peptide_func`."""
        return PepToProteinMap(m._replace(peptide=peptide_func(m.peptide)) for m in self.entries)
