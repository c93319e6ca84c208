"""
parser - operations on peptide sequences reported by search engines
===================================================================

Search engines report peptides as ``prefix.SEQUENCE.suffix``, where `prefix`
and `suffix` are the residues flanking the peptide in the protein (``-`` at
a protein terminus) and ``SEQUENCE`` may contain modification symbols
between the residue letters, e.g. ``"K.PEPT*IDE.R"``.

Operations on peptide sequences
-------------------------------

  :py:func:`split_prefix_suffix` - split a sequence into the primary sequence,
  the prefix and the suffix.

  :py:func:`clean_sequence` - strip everything that is not a residue letter.

  :py:func:`sequence_with_prefix_and_suffix` - join a primary sequence and its
  flanking residues.

  :py:func:`parse_cleavage_rule` - convert an X!Tandem ``[RK]|{P}`` cleavage
  site into a pair of regular expressions.

Cleavage and terminus state
---------------------------

  :py:class:`CleavageStateCalculator` - determines whether a peptide is fully,
  partially or non-specifically cleaved, and whether it lies at a protein
  terminus.

  :py:class:`CleavageState`, :py:class:`TerminusState` - enumerations written
  to the sequence-to-protein map.

Data
----

  :py:data:`cleavage_rules` - left and right residue regular expressions for
  the supported cleavage agents.

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

import re
from enum import IntEnum

from .auxiliary import PHRPError, memoize

TERMINUS_SYMBOL = '-'
TERMINUS_SYMBOL_N = '['
TERMINUS_SYMBOL_C = ']'
terminus_symbols = frozenset((TERMINUS_SYMBOL, TERMINUS_SYMBOL_N, TERMINUS_SYMBOL_C))

cleavage_rules = {
    'trypsin': ('[KR]', '[^P]'),
    'trypsin without proline rule': ('[KR]', '[A-Z]'),
    'trypsin plus FVLEY': ('[KRFYVEL]', '[A-Z]'),
    'chymotrypsin': ('[FWYL]', '[A-Z]'),
    'chymotrypsin and trypsin': ('[FWYLKR]', '[A-Z]'),
    'glutamyl endopeptidase': ('[ED]', '[A-Z]'),
    'cyanogen bromide': ('[M]', '[A-Z]'),
    'arg-c': ('[R]', '[A-Z]'),
    'lys-c': ('[K]', '[A-Z]'),
    'asp-n': ('[A-Z]', '[D]'),
}
"""
A dict with (left residue, right residue) regular expressions of the
cleavage rules for the supported cleavage agents. Cleavage happens between
a residue matching the left expression and one matching the right one.
"""


class CleavageState(IntEnum):
    UNKNOWN = -1
    NON_SPECIFIC = 0
    PARTIAL = 1
    FULL = 2


class TerminusState(IntEnum):
    NONE = 0
    PROTEIN_N = 1
    PROTEIN_C = 2
    PROTEIN_N_AND_C = 3


_not_letter = re.compile(r'[^A-Za-z]')


def split_prefix_suffix(sequence):
    """Split a peptide of the form ``prefix.SEQUENCE.suffix``.

    Parameters
    ----------
    sequence : str
        The peptide, optionally with flanking residues.

    Returns
    -------
    out : tuple
        ``(found, primary, prefix, suffix)``, where `found` is
        :py:const:`True` if periods delimiting the prefix or suffix were
        recognized. If not, `primary` is the input sequence.

    Examples
    --------
    >>> split_prefix_suffix('K.PEPTIDE.R')
    (True, 'PEPTIDE', 'K', 'R')
    >>> split_prefix_suffix('PEPTIDE')
    (False, 'PEPTIDE', '', '')
    """
    if not sequence:
        return False, '', '', ''

    if sequence.startswith('..') and len(sequence) > 2:
        sequence = '.' + sequence[2:]
    if sequence.endswith('..') and len(sequence) > 2:
        sequence = sequence[:-2] + '.'

    first = sequence.find('.')
    if first < 0:
        return False, sequence, '', ''
    last = sequence.rfind('.')

    if last > first + 1:
        return True, sequence[first + 1:last], sequence[:first], sequence[last + 1:]

    if last == first + 1:
        if first <= 1:
            return True, '', sequence[:first], sequence[last + 1:]
        return False, sequence, '', ''

    # single period
    if first == 0:
        return True, sequence[1:], '', ''
    if first == len(sequence) - 1:
        return True, sequence[:first], '', ''
    if first == 1 and len(sequence) > 2:
        return True, sequence[first + 1:], sequence[:first], ''
    if first == len(sequence) - 2:
        return True, sequence[:first], '', sequence[first + 1:]
    return False, sequence, '', ''


def clean_sequence(sequence, check_prefix_suffix=True):
    """Return only the residue letters of `sequence`, after removing the
    flanking residues if `check_prefix_suffix` is set.

    >>> clean_sequence('K.PEP*TIDE.R')
    'PEPTIDE'
    """
    if sequence is None:
        return ''
    if check_prefix_suffix:
        found, primary, _, _ = split_prefix_suffix(sequence)
        if found:
            return _not_letter.sub('', primary)
    return _not_letter.sub('', sequence)


def sequence_with_prefix_and_suffix(primary, prefix, suffix):
    """Join `primary` with the residues nearest to it in `prefix` and
    `suffix`. Protein terminus symbols become ``-``.

    >>> sequence_with_prefix_and_suffix('PEPTIDE', 'MK', 'RA')
    'K.PEPTIDE.R'
    """
    pre = prefix.strip()[-1:] if prefix and prefix.strip() else TERMINUS_SYMBOL
    post = suffix.strip()[:1] if suffix and suffix.strip() else TERMINUS_SYMBOL
    if pre == TERMINUS_SYMBOL_N:
        pre = TERMINUS_SYMBOL
    if post == TERMINUS_SYMBOL_C:
        post = TERMINUS_SYMBOL
    return '{}.{}.{}'.format(pre, primary, post)


@memoize()
def parse_cleavage_rule(rule):
    """Convert an X!Tandem cleavage site specification like ``[RK]|{P}``
    into (left, right) regular expressions. ``{X}`` means "not X".

    >>> parse_cleavage_rule('[RK]|{P}')
    ('[RK]', '[^P]')
    """
    if '|' not in rule:
        raise PHRPError('Invalid cleavage rule: {}'.format(rule))
    parts = []
    for part in rule.split('|', 1):
        part = part.strip().upper()
        if part.startswith('{') and part.endswith('}'):
            part = '[^' + part[1:-1] + ']'
        if part in ('[X]', '{}', '[^]'):
            part = '[A-Z]'
        parts.append(part)
    return tuple(parts)


class CleavageStateCalculator(object):
    """Computes cleavage and terminus states of peptides.

    Parameters
    ----------
    rule : str or tuple, optional
        A key of :py:data:`cleavage_rules` or a (left, right) pair of regular
        expressions. Default is ``'trypsin'``.
    """

    def __init__(self, rule='trypsin'):
        self.set_rule(rule)

    def set_rule(self, rule):
        if isinstance(rule, str):
            try:
                left, right = cleavage_rules[rule]
            except KeyError:
                raise PHRPError('Unknown cleavage agent: {}'.format(rule))
        else:
            left, right = rule
        self.left = left
        self.right = right
        self._standard_trypsin = (left, right) == cleavage_rules['trypsin']
        self._left_re = re.compile(left)
        self._right_re = re.compile(right)

    def test_rule(self, left_char, right_char):
        """Check if cleavage can happen between `left_char` and `right_char`."""
        if self._standard_trypsin:
            return left_char in 'KR' and right_char != 'P'
        return bool(self._left_re.match(left_char) and self._right_re.match(right_char))

    @staticmethod
    def _letter_nearest_end(text):
        if not text:
            return TERMINUS_SYMBOL
        for char in reversed(text):
            if char.isalpha() or char in terminus_symbols:
                return char
        return text[0]

    @staticmethod
    def _letter_nearest_start(text):
        if not text:
            return TERMINUS_SYMBOL
        for char in text:
            if char.isalpha() or char in terminus_symbols:
                return char
        return text[-1]

    def terminus_state(self, prefix, suffix):
        """Determine whether the peptide with the given flanking residues
        lies at a protein terminus."""
        pre = self._letter_nearest_end(prefix)
        post = self._letter_nearest_start(suffix)
        if pre in terminus_symbols:
            if post in terminus_symbols:
                return TerminusState.PROTEIN_N_AND_C
            return TerminusState.PROTEIN_N
        if post in terminus_symbols:
            return TerminusState.PROTEIN_C
        return TerminusState.NONE

    def cleavage_state(self, clean_seq, prefix, suffix):
        """Determine the cleavage state of a peptide.

        Parameters
        ----------
        clean_seq : str
            The peptide residues.
        prefix, suffix : str
            Flanking residues.

        Returns
        -------
        out : CleavageState
        """
        if not clean_seq:
            return CleavageState.NON_SPECIFIC
        pre = self._letter_nearest_end(prefix)
        post = self._letter_nearest_start(suffix)
        start = self._letter_nearest_start(clean_seq)
        end = self._letter_nearest_end(clean_seq)

        terminus = self.terminus_state(prefix, suffix)
        if terminus == TerminusState.PROTEIN_N_AND_C:
            return CleavageState.FULL
        if terminus == TerminusState.PROTEIN_N:
            return CleavageState.FULL if self.test_rule(end, post) else CleavageState.NON_SPECIFIC
        if terminus == TerminusState.PROTEIN_C:
            return CleavageState.FULL if self.test_rule(pre, start) else CleavageState.NON_SPECIFIC

        match_start = self.test_rule(pre, start)
        match_end = self.test_rule(end, post)
        if match_start and match_end:
            return CleavageState.FULL
        if match_start or match_end:
            return CleavageState.PARTIAL
        return CleavageState.NON_SPECIFIC

    def missed_cleavages(self, sequence):
        """Count internal cleavage sites in `sequence`, which may carry
        flanking residues and modification symbols."""
        residues = clean_sequence(sequence)
        return sum(1 for a, b in zip(residues, residues[1:]) if self.test_rule(a, b))
