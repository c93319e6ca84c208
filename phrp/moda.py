"""
moda - MODa search results
==========================

Summary
-------

`MODa <http://prix.hanyang.ac.kr/download/moda.jsp>`_ is an open search
engine: modifications are reported as mass offsets embedded in the peptide
(e.g. ``K.YGQ+0.984SSQQVQVK.M``) rather than as named symbols, and static
modifications from the ``ADD=`` lines of the parameter file are implied.
Spectra are identified by their index in the searched MGF file; the scan
numbers are looked up in the ``*_mgf_IndexToScanMap*`` file written next to
the results.

This module reads MODa results, computes precursor m/z, mass errors and M+H,
ranks the candidates of every scan by probability and writes a synopsis file
with every candidate above the probability threshold. The synopsis file is
then re-read to create the sequence tables (see :py:mod:`phrp.output`). No
first-hits file is created for MODa.

Data access
-----------

  :py:func:`read` - iterate over the records of a MODa results file.

  :py:func:`read_param_file` - read the static modifications from a MODa
  parameter file.

  :py:func:`read_index_to_scan_map` - read an MGF index to scan map file.

  :py:func:`parse_results_line` - classify and parse one line of results.

Modifications
-------------

  :py:func:`resolve_mod_masses` - attach the static and mass-offset
  modifications of a peptide to a :py:class:`~phrp.results.SearchResult`.

Processing
----------

  :py:class:`MODaResultsProcessor` - the complete conversion.

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

import glob
import logging
import os
import re
from collections import namedtuple
from operator import attrgetter

from .auxiliary import (LineStatus, TableWriter, _file_reader, is_number, is_integer, safe_int, safe_float,
                        dbl_to_string, mass_error_to_string, truncate_protein_name)
from .mass import corrected_delta_ppm
from .modifications import (ModificationType, N_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL)
from .parser import split_prefix_suffix, clean_sequence
from .processor import ResultsProcessor
from . import peptoprot
from . import ranking

logger = logging.getLogger(__name__)

FILENAME_SUFFIX_MODA_FILE = '_moda.id'
SYNOPSIS_FILE_SUFFIX = '_syn.txt'
INDEX_TO_SCAN_MAP_PATTERN = '*mgf_IndexToScanMap*'

DEFAULT_PROBABILITY_THRESHOLD = 0.05
MOD_MASS_DIGITS_OF_PRECISION = 0

MIN_COLUMNS = 11
SYN_MIN_COLUMNS = 13

RESULTS_COLUMNS = ['SpectrumFile', 'Index', 'ObservedMW', 'Charge', 'CalculatedMW', 'DeltaMass', 'Score',
                   'Probability', 'Peptide', 'Protein', 'PeptidePosition']
"""Columns of the MODa results file, in order. MODa does not always write
a header line."""

SYN_COLUMNS = ['ResultID', 'Scan', 'Spectrum_Index', 'Charge', 'PrecursorMZ', 'DelM', 'DelM_PPM', 'MH',
               'Peptide', 'Protein', 'Score', 'Probability', 'Rank_Probability', 'Peptide_Position', 'QValue']
"""Columns of the synopsis file."""

_mod_mass = re.compile(r'([+-][0-9.]+)')

MODaStaticMod = namedtuple('MODaStaticMod', ('residue', 'mass'))


class MODaSearchResult(object):
    """One line of MODa results.

    Text columns are kept as read; the ``*_num`` attributes hold the
    numeric values used for sorting, ranking and filtering.
    """

    def __init__(self):
        self.spectrum_file = ''
        self.spectrum_index = ''
        self.spectrum_index_num = 0
        self.scan_num = 0
        self.precursor_mass = ''
        self.precursor_mz = ''
        self.charge = ''
        self.charge_num = 0
        self.calculated_mass = ''
        self.delta_mass = ''
        self.mh = ''
        self.del_m = ''
        self.del_m_ppm = ''
        self.score = ''
        self.probability = ''
        self.probability_num = 0.0
        self.rank_probability = 0
        self.peptide = ''
        self.protein = ''
        self.peptide_position = ''
        self.q_value = 0.0

    def to_row(self, result_id):
        """Values for a row of the synopsis file."""
        q_value = '0' if abs(self.q_value) < 0.00005 else dbl_to_string(self.q_value, 5)
        return [result_id, self.scan_num, self.spectrum_index, self.charge, self.precursor_mz, self.del_m,
                self.del_m_ppm, self.mh, self.peptide, self.protein, self.score, self.probability,
                self.rank_probability, self.peptide_position, q_value]

    def __repr__(self):
        return 'MODaSearchResult(index={}, scan={}, charge={}, {!r}, Probability={})'.format(
            self.spectrum_index, self.scan_num, self.charge, self.peptide, self.probability)


def _normalize_probability(text):
    if text.strip().lower() == 'infinity':
        return '0'
    if text and not is_number(text):
        return ''
    return text


def parse_results_line(line, index):
    """Parse the text columns of one line of a MODa results file.

    Masses, scan numbers and ranks are filled in later by
    :py:class:`MODaResultsProcessor`, since they depend on the
    modification definitions and the index to scan map.

    Parameters
    ----------
    line : str
    index : int
        Zero-based index of the line among the non-blank lines of the file.
        Only the first line may be a header.

    Returns
    -------
    out : tuple
        ``(status, record)``, where `record` is a :py:class:`MODaSearchResult`
        for data lines and :py:const:`None` otherwise.
    """
    fields = line.rstrip().split('\t')
    if len(fields) < MIN_COLUMNS:
        return LineStatus.INVALID, None
    if not is_integer(fields[1]):
        if index == 0:
            return LineStatus.HEADER, None
        return LineStatus.INVALID, None
    if not fields[8].strip():
        return LineStatus.INVALID, None

    r = MODaSearchResult()
    r.spectrum_file = fields[0]
    r.spectrum_index = fields[1].strip()
    r.spectrum_index_num = int(r.spectrum_index)
    r.precursor_mass = fields[2]
    r.charge = fields[3]
    r.charge_num = safe_int(r.charge)
    r.calculated_mass = fields[4]
    r.delta_mass = fields[5]
    r.score = fields[6]
    r.probability = _normalize_probability(fields[7])
    r.probability_num = safe_float(r.probability)
    r.peptide = fields[8]
    r.protein = truncate_protein_name(fields[9])
    r.peptide_position = fields[10]
    return LineStatus.DATA, r


@_file_reader()
def read(source, error_log=None):
    """Iterate over the records of a MODa results file.

    Parameters
    ----------
    source : str or file
    error_log : ErrorLog, optional
        Receives a message for every line that cannot be parsed.

    Returns
    -------
    out : iterator
        :py:class:`MODaSearchResult` objects, in file order.
    """
    index = 0
    for line_number, line in enumerate(source, 1):
        if not line.strip():
            continue
        status, record = parse_results_line(line, index)
        index += 1
        if status is LineStatus.DATA:
            yield record
        elif status is LineStatus.INVALID and error_log is not None:
            error_log.add('Line {}: expected at least {} columns with a numeric spectrum index and a peptide'.format(
                line_number, MIN_COLUMNS))


@_file_reader()
def _iter_param_mods(source):
    for line in source:
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        if key.strip().lower() != 'add':
            continue
        value = value.split('#', 1)[0]
        if ',' not in value:
            continue
        residue, mass = (v.strip() for v in value.split(',', 1))
        if residue.lower() == 'nterm':
            residue = N_TERMINAL_PEPTIDE_SYMBOL
        elif residue.lower() == 'cterm':
            residue = C_TERMINAL_PEPTIDE_SYMBOL
        if is_number(mass) and float(mass) != 0:
            yield MODaStaticMod(residue, float(mass))


def read_param_file(source):
    """Read the static modifications from a MODa parameter file.

    Static modifications are given as ``ADD=<residue>, <mass>``, where the
    residue may be ``NTerm`` or ``CTerm`` (converted to ``<`` and ``>``).
    Lines starting with ``#`` are comments. Zero masses are ignored.

    Parameters
    ----------
    source : str or file

    Returns
    -------
    out : list of MODaStaticMod
    """
    with _iter_param_mods(source) as mods:
        return list(mods)


@_file_reader()
def _iter_scan_map(source):
    for line in source:
        fields = line.rstrip('\r\n').split('\t')
        if len(fields) >= 3 and is_integer(fields[0]) and is_integer(fields[1]):
            yield int(fields[0]), int(fields[1])


def read_index_to_scan_map(source):
    """Read an MGF index to scan map file (spectrum index, first scan and
    last scan per line) into a :py:class:`dict` of first scans."""
    with _iter_scan_map(source) as pairs:
        return dict(pairs)


def find_index_to_scan_map(input_path):
    """Find the index to scan map files for a MODa results file.

    If the file name contains ``_moda``, only map files starting with the
    dataset name preceding it are considered.

    Returns
    -------
    out : list of str
    """
    directory, name = os.path.split(os.path.abspath(input_path))
    match_index = name.lower().rfind('_moda')
    prefix = glob.escape(name[:match_index]) if match_index > 0 else ''
    return sorted(glob.glob(os.path.join(directory, prefix + INDEX_TO_SCAN_MAP_PATTERN)))


def base_name(input_path):
    """Base name of the output files; ``_moda.id`` is shortened to ``_moda``.

    >>> base_name('/data/QC_Shew_moda.id.txt')
    'QC_Shew_moda'
    """
    name = os.path.splitext(os.path.basename(input_path))[0]
    if name.lower().endswith(FILENAME_SUFFIX_MODA_FILE):
        name = name[:-len(FILENAME_SUFFIX_MODA_FILE)] + '_moda'
    return name


def resolve_mod_masses(result, update_count=True, precision=MOD_MASS_DIGITS_OF_PRECISION):
    """Attach modifications to `result` by walking its modified peptide.

    Static residue modifications are added to every residue they target.
    A mass offset such as ``+15.995`` is attached to the residue preceding
    it, or to the first residue if it precedes all residues, after matching
    it against the modification dictionary to `precision` digits.
    Adjacent offsets such as ``+15.995-17.027`` are attached separately.

    Returns
    -------
    out : list of str
        Mass offsets that could not be attached.
    """
    failed = []
    statics = list(result.mod_dict.static_modifications())
    location = 0
    residue = ''
    digits = None

    def attach(mass_text):
        if not is_number(mass_text):
            failed.append(mass_text)
            return
        loc = max(location, 1)
        state = result.determine_residue_terminus_state(loc)
        if not result.add_modification_by_mass(float(mass_text), residue, loc, state, update_count, precision):
            failed.append(mass_text)

    for char in result.peptide_with_mods:
        if char.isalpha():
            if digits is not None:
                attach(digits)
                digits = None
            residue = char
            location += 1
            state = result.determine_residue_terminus_state(location)
            for definition in statics:
                if definition.targets(char):
                    result.add_modification(definition, char, location, state, update_count)
        elif digits is not None:
            if char in '+-':
                attach(digits)
                digits = char
            elif char.isdigit() or char == '.':
                digits += char
        elif char.isdigit() or char in '+-':
            digits = char
    if digits is not None:
        attach(digits)
    return failed


def _scan_charge_probability(r):
    return r.scan_num, r.charge_num, -r.probability_num, r.peptide, r.protein


def _output_order(r):
    return -r.probability_num, r.scan_num, r.charge_num, r.peptide, r.protein


def assign_rank(group):
    """Rank the records of one scan by descending probability, across all
    charge states. Equal probabilities share a rank."""
    ranks = ranking.rank_scores([r.probability_num for r in group])
    for r, rank in zip(group, ranks):
        r.rank_probability = int(rank)


class MODaResultsProcessor(ResultsProcessor):
    """Converts MODa results to PHRP tables.

    Keyword arguments, in addition to those of
    :py:class:`~phrp.processor.ResultsProcessor`:

    moda_probability_threshold : float, optional
        Minimum probability for the synopsis file. Default is 0.05.
    """

    tool_name = 'MODa'
    synopsis_score_column = 'Probability'

    def __init__(self, **kwargs):
        self.probability_threshold = kwargs.pop('moda_probability_threshold', DEFAULT_PROBABILITY_THRESHOLD)
        super(MODaResultsProcessor, self).__init__(**kwargs)
        self.static_mods = []
        self.scan_map = {}
        self.delta_mass_warning_count = 0

    def reset(self):
        super(MODaResultsProcessor, self).reset()
        self.static_mods = []
        self.scan_map = {}
        self.delta_mass_warning_count = 0

    def load_static_mods(self):
        """Read the static modifications from the MODa parameter file.
        A missing file is reported as a warning and no static modifications
        are used."""
        path = self.search_tool_parameter_file
        if not path:
            logger.info('No MODa parameter file given')
        elif not os.path.exists(path):
            self.warn('MODa parameter file not found: {}'.format(path))
        else:
            self.static_mods = read_param_file(path)
        return self.static_mods

    def resolve_mods(self):
        """Register the static modifications in the modification dictionary.
        Terminal ones become terminal peptide static modifications."""
        for mod in self.static_mods:
            if mod.residue in (N_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL):
                mod_type = ModificationType.TERMINAL_PEPTIDE_STATIC
            else:
                mod_type = ModificationType.STATIC
            for residue in mod.residue or ['']:
                self.mod_dict.lookup_or_define_by_type(mod.mass, mod_type, residue,
                                                       precision=MOD_MASS_DIGITS_OF_PRECISION)

    def load_index_to_scan_map(self, input_path):
        """Load the MGF index to scan map next to `input_path` into
        :py:attr:`scan_map`. Without exactly one candidate file, scan
        numbers will be 0."""
        self.scan_map = {}
        candidates = find_index_to_scan_map(input_path)
        if len(candidates) != 1:
            self.warn('{} {} files found for {}; scan numbers will be 0 in the synopsis file'.format(
                'No' if not candidates else 'Multiple', INDEX_TO_SCAN_MAP_PATTERN, input_path))
            return self.scan_map
        logger.info('Reading %s', candidates[0])
        self.scan_map = read_index_to_scan_map(candidates[0])
        return self.scan_map

    def total_mod_mass(self, peptide):
        """Sum the mass offsets in `peptide` and the implied static
        modifications, including terminal ones."""
        primary = split_prefix_suffix(peptide)[1]
        total = sum(float(m.rstrip('.')) for m in _mod_mass.findall(primary) if is_number(m.rstrip('.')))

        letters = [i for i, c in enumerate(primary) if c.isalpha()]
        statics = [d for d in self.mod_dict
                   if d.mod_type in (ModificationType.STATIC, ModificationType.TERMINAL_PEPTIDE_STATIC)]
        for i in letters:
            for definition in statics:
                if (definition.targets(primary[i])
                        or (i == letters[0] and definition.targets(N_TERMINAL_PEPTIDE_SYMBOL))
                        or (i == letters[-1] and definition.targets(C_TERMINAL_PEPTIDE_SYMBOL))):
                    total += definition.mass
        return total

    def _check_mass(self, peptide, mass_phrp, mass_moda):
        threshold = max(mass_moda / 5000 / 10, 0.1)
        if abs(mass_phrp - mass_moda) <= threshold:
            return
        self.delta_mass_warning_count += 1
        if self.delta_mass_warning_count <= 10 or self.delta_mass_warning_count % 100 == 0:
            self.warn('The monoisotopic mass computed by PHRP is more than {:.2f} Da away from the mass '
                      'computed by MODa: {:.4f} vs. {:.4f}; peptide {}'.format(
                          threshold, mass_phrp, mass_moda, peptide[:27] + ('...' if len(peptide) > 27 else '')))

    def complete_record(self, r):
        """Fill in the scan number and the computed masses of `r`."""
        r.scan_num = self.scan_map.get(r.spectrum_index_num, 0)

        precursor_mass = safe_float(r.precursor_mass)
        if is_number(r.precursor_mass) and r.charge_num > 0:
            r.precursor_mz = dbl_to_string(self.mass_calculator.convolute_mass(precursor_mass, 0, r.charge_num), 6)

        sequence_mass = self.mass_calculator.compute_sequence_mass(clean_sequence(r.peptide))
        mass_phrp = sequence_mass + self.total_mod_mass(r.peptide) if sequence_mass >= 0 else 0.0
        mass_moda = safe_float(r.calculated_mass)
        if not mass_moda:
            mass_moda = mass_phrp
        self._check_mass(r.peptide, mass_phrp, mass_moda)

        if mass_moda > 0:
            del_m = precursor_mass - mass_moda
            r.del_m = mass_error_to_string(del_m)
            ppm = corrected_delta_ppm(del_m, precursor_mass, mass_moda, self.adjust_precursor_mass_for_c13)
            r.del_m_ppm = '0' if abs(ppm) < 0.00005 else dbl_to_string(ppm, 5)
        r.mh = dbl_to_string(self.mass_calculator.convolute_mass(mass_phrp, 0), 6)
        return r

    def create_synopsis(self, input_path, output_path):
        """Write the synopsis file.

        All records are read and sorted by scan, charge and descending
        probability, ranked per scan, and those with a probability of at
        least :py:attr:`probability_threshold` are written.

        Returns
        -------
        out : int
            Number of rows written.
        """
        unresolved_indices = []
        records = []
        with read(input_path, self.error_log) as reader:
            for r in reader:
                if self.should_abort():
                    raise ranking.AbortedError()
                self.complete_record(r)
                if not r.scan_num and self.scan_map:
                    unresolved_indices.append(r.spectrum_index)
                records.append(r)
        if unresolved_indices:
            self.warn('Could not resolve {} spectrum indices to scan numbers, e.g. {}'.format(
                len(unresolved_indices), unresolved_indices[0]))

        records.sort(key=_scan_charge_probability)
        filtered = []
        for group in ranking.group_by_scan(records, attrgetter('scan_num'), self.should_abort):
            assign_rank(group)
            filtered.extend(r for r in group if r.probability_num >= self.probability_threshold)
        if self.sort_output:
            filtered.sort(key=_output_order)

        with TableWriter(output_path, SYN_COLUMNS) as writer:
            self.output_files.append(output_path)
            for result_id, r in enumerate(filtered, 1):
                writer.write_row(r.to_row(result_id))
            logger.info('Wrote %d results to %s', writer.rows_written, output_path)
            return writer.rows_written

    def add_modifications_and_compute_mass(self, result, update_count=True):
        result.add_isotopic_modifications(update_count)
        failed = resolve_mod_masses(result, update_count)
        self.log_rejected_modifications(
            result, result.add_static_terminus_modifications(self.allow_duplicate_terminus_mods, update_count))
        result.compute_monoisotopic_mass()
        result.update_mod_description()
        return not failed

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

        # DelM is observed minus theoretical
        del_m = row.get('DelM', '')
        result.peptide_delta_mass = dbl_to_string(-float(del_m), 6) if is_number(del_m) else del_m
        result.scores = {name: row.get(name, '') for name in SYN_COLUMNS[1:] if name not in ('Peptide', 'Protein')}
        return True

    def _process(self, input_path, output_dir):
        self.load_static_mods()
        self.resolve_mods()
        self.load_index_to_scan_map(input_path)

        if not self.create_synopsis_file:
            return True
        syn_path = os.path.join(output_dir, base_name(input_path) + SYNOPSIS_FILE_SUFFIX)
        self.report_progress('Creating the SYN file', 10)
        self.create_synopsis(input_path, syn_path)

        map_path = peptoprot.map_file_path(syn_path, self.pep_to_prot_strip_suffixes)
        if os.path.exists(map_path):
            pep_to_prot_map = self.load_pep_to_prot_map(map_path)
        else:
            logger.info('No peptide to protein map at %s', map_path)
            pep_to_prot_map = None

        self.report_progress('Creating the PHRP files for ' + os.path.basename(syn_path), 60)
        self.parse_synopsis_file(syn_path, pep_to_prot_map)
        return True
