"""
inspect_results - InSpecT search results
========================================

Summary
-------

`InSpecT <http://proteomics.ucsd.edu/Software/Inspect/>`_ writes one
tab-delimited line per candidate peptide-spectrum match. Modified residues are
annotated with the (up to 4 character) modification names from the InSpecT
parameter file, and terminal modifications may appear as ``+<mass>`` at either
end of the peptide.

This module reads InSpecT results, replaces the modification names with
canonical modification symbols, ranks the candidates of every scan and writes
two first-hits files (best TotalPRMScore and best FScore per charge) and a
synopsis file with every candidate passing any of the p-value, TotalPRMScore
and FScore thresholds. The synopsis file is then re-read to create the
sequence tables (see :py:mod:`phrp.output`).

Data access
-----------

  :py:func:`read` - iterate over the records of an InSpecT results file.

  :py:func:`read_param_file` - read modification definitions from an InSpecT
  parameter file.

  :py:func:`parse_results_line` - classify and parse one line of results.

Sequence notation
-----------------

  :py:func:`replace_terminus` - convert InSpecT terminus markers to dashes.

  :py:func:`replace_mod_text_with_symbol` - substitute modification names and
  terminal ``+<mass>`` notation with modification symbols.

Processing
----------

  :py:class:`InspectResultsProcessor` - the complete conversion.

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

import logging
import os
import re
import warnings
from enum import Enum
from operator import attrgetter

from .auxiliary import (LineStatus, TableWriter, _file_reader, is_number, safe_int, safe_float,
                        dbl_to_string, remove_extraneous_digits, truncate_protein_name)
from .mass import MASS_PROTON, convolute_mass, mh_from_precursor, corrected_delta_ppm
from .modifications import ModificationType, ResidueTerminusState
from .parser import TERMINUS_SYMBOL
from .processor import ResultsProcessor
from . import peptoprot
from . import ranking

logger = logging.getLogger(__name__)

N_TERMINUS_SYMBOL_INSPECT = '*.'
C_TERMINUS_SYMBOL_INSPECT = '.*'
UNKNOWN_MOD_SYMBOL = '?'

SYNOPSIS_FILE_SUFFIX = '_syn.txt'
TOTALPRM_FIRST_HITS_FILE_SUFFIX = '_fht.txt'
FSCORE_FIRST_HITS_FILE_SUFFIX = '_Fscore_fht.txt'

PHOS_MOD_NAME = 'phos'
PHOS_MOD_MASS = '79.9663'
PHOS_MOD_RESIDUES = 'STY'

MIN_COLUMNS = 15
SYN_MIN_COLUMNS = 5

RESULTS_COLUMNS = ['SpectrumFile', 'Scan', 'Annotation', 'Protein', 'Charge', 'MQScore', 'Length',
                   'TotalPRMScore', 'MedianPRMScore', 'FractionY', 'FractionB', 'Intensity', 'NTT',
                   'PValue', 'FScore', 'DeltaScore', 'DeltaScoreOther', 'RecordNumber', 'DBFilePos',
                   'SpecFilePos', 'PrecursorMZ', 'PrecursorError']
"""Columns of the InSpecT results file, in order."""

SYN_COLUMNS = ['ResultID', 'Scan', 'Peptide', 'Protein', 'Charge', 'MQScore', 'Length', 'TotalPRMScore',
               'MedianPRMScore', 'FractionY', 'FractionB', 'Intensity', 'NTT', 'PValue', 'FScore',
               'DeltaScore', 'DeltaScoreOther', 'DeltaNormMQScore', 'DeltaNormTotalPRMScore',
               'RankTotalPRMScore', 'RankFScore', 'MH', 'RecordNumber', 'DBFilePos', 'SpecFilePos',
               'PrecursorMZ', 'PrecursorError', 'DelM_PPM']
"""Columns of the synopsis and first-hits files."""

_dta_scan_number = re.compile(r'(\d+)\.\d+\.\d+\.dta', re.I)
_n_terminal_mod_mass = re.compile(r'^\+(\d+)')
_c_terminal_mod_mass = re.compile(r'\+(\d+)$')


class InspectModType(Enum):
    UNKNOWN = 0
    DYNAMIC = 1
    STATIC = 2
    DYN_N_TERM_PEPTIDE = 3
    DYN_C_TERM_PEPTIDE = 4


_param_mod_types = {
    'opt': InspectModType.DYNAMIC,
    'fix': InspectModType.STATIC,
    'nterminal': InspectModType.DYN_N_TERM_PEPTIDE,
    'cterminal': InspectModType.DYN_C_TERM_PEPTIDE,
}


class InspectModInfo(object):
    """A modification from the InSpecT parameter file.

    `mass` is kept as text; `symbol` is assigned when the modification is
    resolved against the modification dictionary.
    """

    def __init__(self, name, mass, residues, mod_type=InspectModType.DYNAMIC, symbol=UNKNOWN_MOD_SYMBOL):
        self.name = name
        self.mass = mass
        self.residues = residues
        self.mod_type = mod_type
        self.symbol = symbol

    def __repr__(self):
        return 'InspectModInfo({!r}, {!r}, {!r}, {}, {!r})'.format(
            self.name, self.mass, self.residues, self.mod_type.name, self.symbol)


def default_mod_info():
    """Phosphorylation of S, T and Y, used when no modifications are known."""
    return [InspectModInfo(PHOS_MOD_NAME, PHOS_MOD_MASS, PHOS_MOD_RESIDUES)]


@_file_reader()
def _iter_param_mods(source):
    unnamed = 0
    for line in source:
        line = line.strip()
        if not line or line.startswith('#') or not line.lower().startswith('mod'):
            continue
        fields = line.split(',')
        if len(fields) < 3 or fields[0].strip().lower() != 'mod':
            continue
        mod = InspectModInfo('', fields[1].strip(), fields[2].strip())
        if len(fields) >= 4:
            kind = fields[3].strip().lower()
            if kind not in _param_mod_types:
                warnings.warn('Unrecognized modification type in the InSpecT parameter file: ' + fields[3])
            mod.mod_type = _param_mod_types.get(kind, InspectModType.DYNAMIC)
        if len(fields) >= 5:
            mod.name = fields[4].strip().lower()[:4]
        else:
            unnamed += 1
            mod.name = 'UnnamedMod{}'.format(unnamed)
        if mod.name == PHOS_MOD_NAME and mod.mass == '80':
            mod.mass = PHOS_MOD_MASS
        yield mod


def read_param_file(source):
    """Read modification definitions from an InSpecT parameter file.

    Modification lines have the form
    ``mod,<mass>,<residues>[,opt|fix|nterminal|cterminal[,<name>]]``.
    Names are lowercased and truncated to 4 characters; modifications
    without a name are called ``UnnamedMod1``, ``UnnamedMod2``, etc.
    Phosphorylation given with mass 80 gets the exact mass 79.9663.

    Parameters
    ----------
    source : str or file

    Returns
    -------
    out : list of InspectModInfo
    """
    with _iter_param_mods(source) as mods:
        return list(mods)


def replace_terminus(peptide):
    """Replace the InSpecT terminus markers ``*.`` and ``.*`` with ``-.`` and ``.-``.

    >>> replace_terminus('*.MPEPTIDE.*')
    '-.MPEPTIDE.-'
    """
    if peptide.startswith(N_TERMINUS_SYMBOL_INSPECT):
        peptide = TERMINUS_SYMBOL + '.' + peptide[len(N_TERMINUS_SYMBOL_INSPECT):]
    if peptide.endswith(C_TERMINUS_SYMBOL_INSPECT):
        peptide = peptide[:-len(C_TERMINUS_SYMBOL_INSPECT)] + '.' + TERMINUS_SYMBOL
    return peptide


def replace_mod_text_with_symbol(peptide, mod_info):
    """Replace modification names in `peptide` with modification symbols.

    Names are replaced in the order of `mod_info`, case-sensitively. For
    terminal modifications, a ``+<mass>`` at the matching end of the peptide
    is also replaced if the integer mass is within 0.5 Da of the modification
    mass. Static modifications are not shown in sequences and are skipped.

    Parameters
    ----------
    peptide : str
        Peptide with one flanking residue on each side, e.g. ``'R.+14HVIFLAER.R'``.
    mod_info : list of InspectModInfo

    Returns
    -------
    out : str
    """
    prefix = suffix = ''
    if len(peptide) >= 4 and peptide[1] == '.' and peptide[-2] == '.':
        prefix, suffix = peptide[:2], peptide[-2:]
        peptide = peptide[2:-2]

    for mod in mod_info:
        if mod.mod_type == InspectModType.STATIC:
            continue
        if mod.name:
            peptide = peptide.replace(mod.name, mod.symbol)

        if mod.mod_type == InspectModType.DYN_N_TERM_PEPTIDE:
            match = _n_terminal_mod_mass.search(peptide)
        elif mod.mod_type == InspectModType.DYN_C_TERM_PEPTIDE:
            match = _c_terminal_mod_mass.search(peptide)
        else:
            continue
        if match and is_number(mod.mass) and abs(int(match.group(1)) - float(mod.mass)) <= 0.5:
            peptide = peptide[:match.start()] + mod.symbol + peptide[match.end():]

    return prefix + peptide + suffix


def scan_from_dta_name(spectrum_file):
    """Extract the scan number from a name like ``Dataset.300.300.2.dta``.
    Returns an empty string if the name does not match."""
    match = _dta_scan_number.search(spectrum_file)
    return match.group(1) if match else ''


class InspectSearchResult(object):
    """One line of InSpecT results.

    Text columns are kept as read, so that they are written back unchanged;
    the ``*_num`` attributes hold their numeric values for sorting and
    filtering.
    """

    def __init__(self):
        self.spectrum_file = ''
        self.scan = ''
        self.scan_num = 0
        self.peptide_annotation = ''
        self.protein = ''
        self.charge = ''
        self.charge_num = 0
        self.mq_score = ''
        self.mq_score_num = 0.0
        self.length = 0
        self.total_prm_score = ''
        self.total_prm_score_num = 0.0
        self.median_prm_score = ''
        self.fraction_y = ''
        self.fraction_b = ''
        self.intensity = ''
        self.ntt = 0
        self.p_value = ''
        self.p_value_num = 0.0
        self.f_score = ''
        self.f_score_num = 0.0
        self.delta_score = ''
        self.delta_score_other = ''
        self.delta_norm_mq_score = 0.0
        self.delta_norm_total_prm_score = 0.0
        self.rank_total_prm_score = 0
        self.rank_f_score = 0
        self.mh = 0.0
        self.record_number = ''
        self.db_file_pos = ''
        self.spec_file_pos = ''
        self.precursor_mz = ''
        self.precursor_error = ''
        self.del_m_ppm = ''

    def to_row(self, result_id):
        """Values for a row of the synopsis or first-hits file."""
        return [result_id, self.scan, self.peptide_annotation, self.protein, self.charge, self.mq_score,
                self.length, self.total_prm_score, self.median_prm_score, self.fraction_y, self.fraction_b,
                self.intensity, self.ntt, self.p_value, self.f_score, self.delta_score, self.delta_score_other,
                dbl_to_string(self.delta_norm_mq_score, 5), dbl_to_string(self.delta_norm_total_prm_score, 5),
                self.rank_total_prm_score, self.rank_f_score, dbl_to_string(self.mh, 6), self.record_number,
                self.db_file_pos, self.spec_file_pos, self.precursor_mz, self.precursor_error, self.del_m_ppm]

    def __repr__(self):
        return 'InspectSearchResult(scan={}, charge={}, {!r}, TotalPRMScore={})'.format(
            self.scan, self.charge, self.peptide_annotation, self.total_prm_score)


def _peptide_mh(precursor_mz, precursor_error, charge):
    if not precursor_mz.strip() or precursor_mz.strip() == '0' or not precursor_error.strip():
        return 0.0
    z = safe_int(charge, -1)
    if z < 1 or not is_number(precursor_mz) or not is_number(precursor_error):
        return 0.0
    return mh_from_precursor(float(precursor_mz), float(precursor_error), z)


def parse_results_line(line, index, mod_info=(), adjust_for_c13=True):
    """Parse one line of an InSpecT results file.

    Parameters
    ----------
    line : str
    index : int
        Zero-based index of the line among the non-blank lines of the file.
        Only the first line may be a header; it is recognized by the absence
        of numbers in its first three columns.
    mod_info : list of InspectModInfo, optional
        Modifications to substitute in the peptide.
    adjust_for_c13 : bool, optional
        Passed to :py:func:`~phrp.mass.corrected_delta_ppm`.

    Returns
    -------
    out : tuple
        ``(status, record)``, where `status` is a
        :py:class:`~phrp.auxiliary.LineStatus` and `record` is an
        :py:class:`InspectSearchResult` for data lines and :py:const:`None`
        otherwise.
    """
    fields = line.rstrip().split('\t')
    if len(fields) < MIN_COLUMNS:
        return LineStatus.INVALID, None
    if index == 0 and not any(is_number(f) for f in fields[:3]):
        return LineStatus.HEADER, None
    column_count = len(fields)
    fields += [''] * (len(RESULTS_COLUMNS) - column_count)

    r = InspectSearchResult()
    r.spectrum_file = fields[0]
    r.scan = scan_from_dta_name(r.spectrum_file) if fields[1].strip() in ('', '0') else fields[1]
    r.scan_num = safe_int(r.scan)
    r.peptide_annotation = replace_mod_text_with_symbol(replace_terminus(fields[2]), mod_info)
    r.protein = truncate_protein_name(fields[3])
    r.charge = fields[4]
    r.charge_num = safe_int(r.charge)
    r.mq_score = fields[5]
    r.mq_score_num = safe_float(r.mq_score)
    r.length = safe_int(fields[6])
    r.total_prm_score = fields[7]
    r.total_prm_score_num = safe_float(r.total_prm_score)
    r.median_prm_score = fields[8]
    r.fraction_y = remove_extraneous_digits(fields[9])
    r.fraction_b = remove_extraneous_digits(fields[10])
    r.intensity = fields[11]
    r.ntt = safe_int(fields[12])
    r.p_value = remove_extraneous_digits(fields[13])
    r.p_value_num = safe_float(r.p_value)
    r.f_score = fields[14]
    r.f_score_num = safe_float(r.f_score)
    r.delta_score = fields[15]
    r.delta_score_other = fields[16]
    r.record_number = fields[17]
    r.db_file_pos = fields[18]
    r.spec_file_pos = fields[19]

    if column_count >= len(RESULTS_COLUMNS):
        r.precursor_mz = fields[20]
        r.precursor_error = fields[21]
        r.mh = _peptide_mh(r.precursor_mz, r.precursor_error, r.charge)
        if is_number(r.precursor_mz):
            precursor_mass = convolute_mass(float(r.precursor_mz), r.charge_num, 0)
            peptide_mass = r.mh - MASS_PROTON
            ppm = corrected_delta_ppm(precursor_mass - peptide_mass, precursor_mass, peptide_mass, adjust_for_c13)
            r.del_m_ppm = '0' if abs(ppm) < 0.00005 else dbl_to_string(ppm, 5)
    else:
        r.precursor_mz = '0'
        r.precursor_error = '0'
        r.del_m_ppm = '0'
    return LineStatus.DATA, r


@_file_reader()
def read(source, mod_info=(), error_log=None, adjust_for_c13=True):
    """Iterate over the records of an InSpecT results file.

    Parameters
    ----------
    source : str or file
    mod_info : list of InspectModInfo, optional
    error_log : ErrorLog, optional
        Receives a message for every line with too few columns.
    adjust_for_c13 : bool, optional

    Returns
    -------
    out : iterator
        :py:class:`InspectSearchResult` objects, in file order.
    """
    index = 0
    for line_number, line in enumerate(source, 1):
        if not line.strip():
            continue
        status, record = parse_results_line(line, index, mod_info, adjust_for_c13)
        index += 1
        if status is LineStatus.DATA:
            yield record
        elif status is LineStatus.INVALID and error_log is not None:
            error_log.add('Line {}: expected at least {} columns'.format(line_number, MIN_COLUMNS))


def assign_rank_and_delta_norm_values(group):
    """Rank the records of one scan by FScore and TotalPRMScore within each
    charge state, and compute normalized MQScore and TotalPRMScore
    differences to the next record of the same charge."""
    charges = [r.charge_num for r in group]
    f_scores = [r.f_score_num for r in group]
    mq_scores = [r.mq_score_num for r in group]
    prm_scores = [r.total_prm_score_num for r in group]

    rank_f = ranking.rank_within_groups(charges, f_scores)
    rank_prm = ranking.rank_within_groups(charges, prm_scores)
    delta_mq = ranking.delta_norm_within_groups(charges, mq_scores)
    delta_prm = ranking.delta_norm_within_groups(charges, prm_scores)
    for i, r in enumerate(group):
        r.rank_f_score = int(rank_f[i])
        r.rank_total_prm_score = int(rank_prm[i])
        r.delta_norm_mq_score = float(delta_mq[i])
        r.delta_norm_total_prm_score = float(delta_prm[i])


def _by_charge_total_prm(r):
    return r.charge_num, -r.total_prm_score_num, -r.f_score_num


def _by_charge_f_score(r):
    return r.charge_num, -r.f_score_num, -r.total_prm_score_num


def _output_order(r):
    return -r.total_prm_score_num, r.scan_num, r.charge_num, r.peptide_annotation, r.protein


class InspectResultsProcessor(ResultsProcessor):
    """Converts InSpecT results to PHRP tables.

    Keyword arguments, in addition to those of
    :py:class:`~phrp.processor.ResultsProcessor`:

    inspect_pvalue_threshold : float, optional
        Synopsis file p-value threshold. Default is 0.2.
    inspect_totalprm_threshold : float, optional
        Synopsis file TotalPRMScore threshold. Default is 50.
    inspect_fscore_threshold : float, optional
        Synopsis file FScore threshold. Default is 0.

    A candidate is written to the synopsis file if any of the thresholds
    is met.
    """

    tool_name = 'InSpecT'
    synopsis_score_column = 'TotalPRMScore'

    def __init__(self, **kwargs):
        self.pvalue_threshold = kwargs.pop('inspect_pvalue_threshold', 0.2)
        self.totalprm_threshold = kwargs.pop('inspect_totalprm_threshold', 50)
        self.fscore_threshold = kwargs.pop('inspect_fscore_threshold', 0)
        super(InspectResultsProcessor, self).__init__(**kwargs)
        self.mod_info = []
        self.passes_filter = ranking.or_filter(
            lambda r: r.p_value_num <= self.pvalue_threshold,
            lambda r: r.total_prm_score_num >= self.totalprm_threshold,
            lambda r: r.f_score_num >= self.fscore_threshold)

    def load_mod_info(self):
        """Read the modifications from the InSpecT parameter file.
        Falls back to phosphorylation if the file is not given, cannot be
        read or defines no modifications."""
        path = self.search_tool_parameter_file
        mod_info = []
        if not path:
            logger.info('No InSpecT parameter file given')
        elif not os.path.exists(path):
            self.warn('InSpecT parameter file not found: {}'.format(path))
        else:
            try:
                mod_info = read_param_file(path)
            except (OSError, UnicodeDecodeError) as e:
                self.warn('Error reading the InSpecT parameter file {}: {}'.format(path, e))
        self.mod_info = mod_info or default_mod_info()
        return self.mod_info

    def resolve_mods(self, mod_info=None):
        """Look up every modification in the modification dictionary and
        assign its symbol. Static modifications are registered as static
        residue modifications."""
        mod_info = self.mod_info if mod_info is None else mod_info
        for mod in mod_info:
            if not is_number(mod.mass):
                continue
            mass = float(mod.mass)
            residues = mod.residues.replace('*', '')
            if mod.mod_type == InspectModType.STATIC:
                if residues:
                    self.mod_dict.verify_present(mass, residues, ModificationType.STATIC)
                continue
            if mod.mod_type == InspectModType.DYN_N_TERM_PEPTIDE:
                state = ResidueTerminusState.PEPTIDE_N
            elif mod.mod_type == InspectModType.DYN_C_TERM_PEPTIDE:
                state = ResidueTerminusState.PEPTIDE_C
            else:
                state = ResidueTerminusState.NONE
            for i, residue in enumerate(residues or ['']):
                definition, _ = self.mod_dict.lookup_or_define(mass, residue, state)
                if i == 0:
                    mod.symbol = definition.symbol
        return mod_info

    def create_filtered_file(self, input_path, output_path, first_hits_sort_key=None):
        """Write a synopsis file, or a first-hits file if `first_hits_sort_key`
        is given.

        Records are read, grouped by scan and ranked. For a synopsis file,
        every record passing :py:attr:`passes_filter` is kept; for a
        first-hits file, the first record per charge after sorting the scan
        with `first_hits_sort_key`.

        Returns
        -------
        out : int
            Number of rows written.
        """
        filtered = []
        result_id = 0
        with read(input_path, self.mod_info, self.error_log, self.adjust_precursor_mass_for_c13) as records, \
                TableWriter(output_path, SYN_COLUMNS) as writer:
            self.output_files.append(output_path)
            for group in ranking.group_by_scan(records, attrgetter('scan_num'), self.should_abort):
                assign_rank_and_delta_norm_values(group)
                if first_hits_sort_key is None:
                    hits = [r for r in sorted(group, key=_by_charge_total_prm) if self.passes_filter(r)]
                else:
                    hits = ranking.select_first_hits(group, first_hits_sort_key, attrgetter('charge_num'))
                if self.sort_output:
                    filtered.extend(hits)
                else:
                    for r in hits:
                        result_id += 1
                        writer.write_row(r.to_row(result_id))

            if self.sort_output:
                filtered.sort(key=_output_order)
                for result_id, r in enumerate(filtered, 1):
                    writer.write_row(r.to_row(result_id))
            logger.info('Wrote %d results to %s', writer.rows_written, output_path)
            return writer.rows_written

    def write_mts_pep_to_prot_map(self, map_path, output_dir):
        """Load the peptide to protein map and write a copy with canonical
        terminus and modification symbols. Returns the rewritten map."""
        pep_to_prot_map = self.load_pep_to_prot_map(map_path)
        if not len(pep_to_prot_map):
            return pep_to_prot_map
        pep_to_prot_map = pep_to_prot_map.rewrite(
            lambda p: replace_mod_text_with_symbol(replace_terminus(p), self.mod_info))
        mts_path = os.path.join(output_dir, os.path.splitext(os.path.basename(map_path))[0] + 'MTS.txt')
        peptoprot.write(pep_to_prot_map, mts_path)
        self.output_files.append(mts_path)
        return pep_to_prot_map

    def _load_synopsis_row(self, row, result):
        if len(row) < SYN_MIN_COLUMNS or not row.get('ResultID', '').strip().isdigit():
            return False
        peptide = row.get('Peptide', '')
        if not peptide:
            return False
        result.result_id = int(row['ResultID'])
        result.scan = safe_int(row.get('Scan'))
        result.charge = safe_int(row.get('Charge'))
        result.protein = row.get('Protein', '')
        result.multiple_protein_count = 0
        result.set_peptide_sequence_with_mods(peptide, True, True)
        result.compute_pseudo_location()
        result.update_cleavage_info()

        # InSpecT reports observed minus theoretical
        error = row.get('PrecursorError', '')
        result.peptide_delta_mass = dbl_to_string(-float(error), 6) if is_number(error) else (error or '0')
        result.scores = {name: row.get(name, '') for name in SYN_COLUMNS[5:]}
        return True

    def _process(self, input_path, output_dir):
        base = os.path.join(output_dir, os.path.splitext(os.path.basename(input_path))[0])
        self.load_mod_info()
        self.resolve_mods()

        if self.create_first_hits_file:
            self.report_progress('Creating the FHT file (top TotalPRMScore)', 0)
            self.create_filtered_file(input_path, base + TOTALPRM_FIRST_HITS_FILE_SUFFIX, _by_charge_total_prm)
            self.report_progress('Creating the FHT file (top FScore)', 20)
            self.create_filtered_file(input_path, base + FSCORE_FIRST_HITS_FILE_SUFFIX, _by_charge_f_score)

        if self.create_synopsis_file:
            self.report_progress('Creating the SYN file', 40)
            syn_path = base + SYNOPSIS_FILE_SUFFIX
            self.create_filtered_file(input_path, syn_path)

            map_path = peptoprot.map_file_path(input_path, self.pep_to_prot_strip_suffixes)
            self.report_progress('Loading the PepToProtein map file: ' + os.path.basename(map_path), 60)
            pep_to_prot_map = self.write_mts_pep_to_prot_map(map_path, output_dir)

            self.report_progress('Creating the PHRP files for ' + os.path.basename(syn_path), 70)
            self.parse_synopsis_file(syn_path, pep_to_prot_map)
        return True
