"""
tandem - X!Tandem search results
================================

Summary
-------

`X!Tandem <http://thegpm.org/tandem/>`_ writes its results to an XML file
(described `here (PDF) <http://www.thegpm.org/docs/X_series_output_form.pdf>`_).
Every spectrum with an identification is a ``<group type="model">`` element
holding one ``<protein>`` element per protein the peptide was found in, and
the search settings are stored at the end of the file in
``<group type="parameters" label="input parameters">``.

This module reads both parts with :py:func:`lxml.etree.iterparse`, so that
only one group is held in memory at a time. Modifications are reported as
``<aa>`` elements with a position in the protein and a mass, rather than as
symbols in the peptide; they are resolved with the modification dictionary
and the modified sequence is rebuilt with the dictionary's symbols.

The results file, ``<dataset>_xt.txt``, has one row per unique modified
peptide of every group; all proteins of the group are recorded in the
sequence-to-protein map.

Data access
-----------

  :py:func:`read` - iterate over the model groups of an X!Tandem XML file.

  :py:func:`read_input_parameters` - read the search settings.

  :py:func:`parse_model_group` - convert one ``<group type="model">`` element.

Miscellaneous
-------------

  :py:func:`expect_to_log10` - convert an expectation value to its log10.

  :py:func:`scan_from_description` - extract the scan number from a spectrum
  description.

Processing
----------

  :py:class:`XTandemResultsProcessor` - the complete conversion.

Dependencies
------------

This module requires :py:mod:`lxml`.

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
import math
import os
import re
from collections import namedtuple, Counter

from lxml import etree

from .auxiliary import (PHRPError, ErrorCode, TableWriter, _file_obj, _file_reader, is_number, safe_int, safe_float,
                        dbl_to_string, truncate_protein_name)
from .mass import MASS_PROTON, MASS_HYDROGEN, MASS_OXYGEN, corrected_delta_ppm
from .modifications import (ModificationType, ModificationDefinition, MASS_DIGITS_OF_PRECISION,
                            N_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL,
                            N_TERMINAL_PROTEIN_SYMBOL, C_TERMINAL_PROTEIN_SYMBOL)
from .output import SequenceInfoWriter, write_mod_summary
from .parser import parse_cleavage_rule
from .processor import ResultsProcessor
from .ranking import AbortedError

logger = logging.getLogger(__name__)

ROOT_ELEMENT = 'bioml'
GROUP_TYPE_MODEL = 'model'
GROUP_TYPE_SUPPORT = 'support'
GROUP_TYPE_PARAMETERS = 'parameters'
GROUP_LABEL_INPUT_PARAMETERS = 'input parameters'
GROUP_LABEL_FRAGMENT_ION_SPECTRUM = 'fragment ion mass spectrum'
NOTE_TYPE_INPUT = 'input'
PROTEIN_DESCRIPTION_LABEL = 'description'
REVERSED_PROTEIN_INDICATOR = ':reversed'

N_TERMINAL_SYMBOL_XTANDEM = '['
C_TERMINAL_SYMBOL_XTANDEM = ']'

RESULTS_COLUMNS = ['Result_ID', 'Group_ID', 'Scan', 'Charge', 'Peptide_MH', 'Peptide_Hyperscore',
                   'Peptide_Expectation_Value_Log(e)', 'Multiple_Protein_Count', 'Peptide_Sequence', 'DeltaCn2',
                   'y_score', 'y_ions', 'b_score', 'b_ions', 'Delta_Mass', 'Peptide_Intensity_Log(I)', 'DelM_PPM']
"""Columns of the X!Tandem results file written by
:py:class:`XTandemResultsProcessor`."""

INPUT_PARAMETER_LABELS = [
    'residue, modification mass',
    'residue, potential modification mass',
    'residue, potential modification motif',
    'refine, potential modification mass',
    'refine, potential modification motif',
    'refine, potential n-terminus modifications',
    'refine, potential c-terminus modifications',
    'protein, n-terminal residue modification mass',
    'protein, c-terminal residue modification mass',
    'protein, cleavage n-terminal mass change',
    'protein, cleavage c-terminal mass change',
    'protein, cleavage site',
    'scoring, include reverse',
]
"""Lowercase labels of the input parameters used during processing. The
position of a label is the sort order of the modifications it defines."""

_mod_list_labels = {
    'residue, modification mass': (ModificationType.STATIC, False),
    'residue, potential modification mass': (ModificationType.DYNAMIC, False),
    'residue, potential modification motif': (ModificationType.DYNAMIC, True),
    'refine, potential modification mass': (ModificationType.DYNAMIC, False),
    'refine, potential modification motif': (ModificationType.DYNAMIC, True),
    'refine, potential n-terminus modifications': (ModificationType.DYNAMIC, False),
    'refine, potential c-terminus modifications': (ModificationType.DYNAMIC, False),
}

_scan_patterns = [re.compile(p, re.IGNORECASE) for p in (r'scan=(\d+)', r'scan\s*(\d+)', r'(\d+)\.\d+\.\d\.dta')]
_any_number = re.compile(r'\d+')

XTandemModInfo = namedtuple('XTandemModInfo', ('sort_order', 'mass', 'residues', 'mod_type'))
XTandemModification = namedtuple('XTandemModification', ('residue', 'at', 'mass'))


def expect_to_log10(expect):
    """Convert an expectation value to its base 10 logarithm, formatted with
    three decimals. Non-positive or non-numeric values give ``'0.000'`` and
    values below 1e-307 give ``'-307.000'``.

    >>> expect_to_log10('1.2e-05')
    '-4.921'
    """
    value = safe_float(expect)
    if value <= 0:
        log_value = 0.0
    elif value <= 1e-307:
        log_value = -307.0
    else:
        log_value = round(math.log10(value), 3)
    return '{:.3f}'.format(log_value + 0.0)


def scan_from_description(text):
    """Extract the scan number from the description of a spectrum.

    ``scan=<n>`` is tried first, then ``scan <n>``, then a ``.dta`` file name
    and finally the first number in the text. Without any digits, the
    description itself is returned.

    >>> scan_from_description('QC_Shew.1234.1234.2.dta')
    '1234'
    """
    for pattern in _scan_patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    match = _any_number.search(text)
    return match.group(0) if match else text


def protein_name(label, look_for_reversed=False):
    """Truncate a protein label at the first space, keeping the
    ``:reversed`` suffix of decoy proteins if `look_for_reversed` is set."""
    name = truncate_protein_name(label)
    if look_for_reversed and label.endswith(REVERSED_PROTEIN_INDICATOR) \
            and not name.endswith(REVERSED_PROTEIN_INDICATOR):
        name += REVERSED_PROTEIN_INDICATOR
    return name


def _negated(text):
    if not is_number(text):
        return text
    value = -float(text)
    if value == 0:
        return '0'
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _trim_zero(result_id, text):
    if result_id > 1 and text == '0.0':
        return '0'
    return text


def parse_mod_list(value, mod_type, sort_order=0, motif=False):
    """Parse a comma-separated X!Tandem modification list such as
    ``57.021464@C,15.994915@M``.

    The mass is the number before ``@``, or before ``:`` when a neutral loss
    is given (``79.9663:-97.98@STY``). Target residues follow ``@``; ``X``
    means any residue and X!Tandem terminus symbols ``[`` and ``]`` are
    converted to ``<`` and ``>``. Motif definitions never have target
    residues. Zero masses are skipped.

    Returns
    -------
    out : list of XTandemModInfo
    """
    mods = []
    for definition in (value or '').split(','):
        definition = definition.strip()
        at_sign = definition.find('@')
        if at_sign < 0:
            continue
        colon = definition.find(':')
        mass_text = definition[:colon] if 0 < colon < at_sign else definition[:at_sign]
        mass = float(mass_text) if is_number(mass_text) else 0.0
        if abs(mass) < 1e-7:
            continue
        residues = '' if motif else definition[at_sign + 1:].strip()
        if 'X' in residues:
            residues = ''
        residues = residues.replace(N_TERMINAL_SYMBOL_XTANDEM, N_TERMINAL_PEPTIDE_SYMBOL).replace(
            C_TERMINAL_SYMBOL_XTANDEM, C_TERMINAL_PEPTIDE_SYMBOL)
        mods.append(XTandemModInfo(sort_order, mass, residues, mod_type))
    return mods


class XTandemInputParameters(object):
    """Search settings read from the ``input parameters`` group.

    Attributes
    ----------
    modifications : list of XTandemModInfo
        As listed in the file; see :py:meth:`validated_modifications`.
    cleavage_site : str or None
        X!Tandem cleavage site specification, e.g. ``[RK]|{P}``.
    n_terminus_mass_change, c_terminus_mass_change : float or None
        Masses added to the peptide termini on cleavage.
    include_reverse : bool
        :py:const:`True` if reversed protein sequences were searched.
    """

    def __init__(self):
        self.modifications = []
        self.cleavage_site = None
        self.n_terminus_mass_change = None
        self.c_terminus_mass_change = None
        self.include_reverse = False

    def set(self, label, value):
        """Store the value of one ``note``. Returns :py:const:`False` for
        labels that are not used."""
        label = label.strip().lower()
        if label not in INPUT_PARAMETER_LABELS:
            return False
        sort_order = INPUT_PARAMETER_LABELS.index(label)
        value = (value or '').strip()

        if label in _mod_list_labels:
            mod_type, motif = _mod_list_labels[label]
            self.modifications.extend(parse_mod_list(value, mod_type, sort_order, motif))
        elif label in ('protein, n-terminal residue modification mass',
                       'protein, c-terminal residue modification mass'):
            if is_number(value) and abs(float(value)) > 1e-7:
                target = N_TERMINAL_PROTEIN_SYMBOL if ', n-' in label else C_TERMINAL_PROTEIN_SYMBOL
                self.modifications.append(XTandemModInfo(
                    sort_order, float(value), target, ModificationType.PROTEIN_TERMINUS_STATIC))
        elif label == 'protein, cleavage n-terminal mass change':
            if is_number(value):
                self.n_terminus_mass_change = float(value)
        elif label == 'protein, cleavage c-terminal mass change':
            if is_number(value):
                self.c_terminus_mass_change = float(value)
        elif label == 'protein, cleavage site':
            self.cleavage_site = value or None
        elif label == 'scoring, include reverse':
            self.include_reverse = value.lower() == 'yes'
        return True

    def validated_modifications(self):
        """The modifications to register, sorted by label and mass.

        X!Tandem resets static residue modifications during refinement and
        reports them like dynamic ones, so static modifications are returned
        as dynamic. A static modification identical (by mass and residues)
        to a dynamic one is dropped.
        """
        mods = sorted(self.modifications, key=lambda m: (m.sort_order, m.mass))
        dynamic = [m for m in mods if m.mod_type == ModificationType.DYNAMIC]
        validated = []
        for mod in mods:
            if mod.mod_type == ModificationType.STATIC:
                if any(round(abs(d.mass - mod.mass), MASS_DIGITS_OF_PRECISION) == 0
                       and ModificationDefinition.equivalent_target_residues(d.residues, mod.residues)
                       for d in dynamic):
                    continue
                mod = mod._replace(mod_type=ModificationType.DYNAMIC)
            validated.append(mod)
        return validated


class XTandemSearchResult(object):
    """One protein of a model group with the first peptide domain reported
    for it. Values are kept as text, as read."""

    def __init__(self):
        self.group_id = 0
        self.scan = ''
        self.charge = ''
        self.parent_mh = ''
        self.peptide_expectation = ''
        self.peptide_intensity = ''
        self.peptide_intensity_max = ''
        self.intensity_multiplier = ''
        self.protein = ''
        self.protein_expectation = ''
        self.protein_intensity = ''
        self.protein_start = 0
        self.protein_end = 0
        self.peptide_start = 0
        self.peptide_end = 0
        self.peptide_mh = ''
        self.delta_mass = ''
        self.hyperscore = ''
        self.nextscore = ''
        self.pre = ''
        self.post = ''
        self.sequence = ''
        self.y_score = ''
        self.y_ions = ''
        self.b_score = ''
        self.b_ions = ''
        self.modifications = []
        self.del_m_ppm = '0'

    def load_domain(self, domain):
        """Read the attributes and modified residues of a ``<domain>``."""
        self.peptide_start = safe_int(domain.get('start'))
        self.peptide_end = safe_int(domain.get('end'))
        self.peptide_expectation = expect_to_log10(domain.get('expect', ''))
        self.peptide_mh = domain.get('mh', '')
        # stored as calculated minus observed
        self.delta_mass = _negated(domain.get('delta', ''))
        self.hyperscore = domain.get('hyperscore', '')
        self.nextscore = domain.get('nextscore', '')
        self.pre = domain.get('pre', '')
        self.post = domain.get('post', '')
        self.sequence = domain.get('seq', '').strip()
        self.y_score = domain.get('y_score', '')
        self.y_ions = domain.get('y_ions', '')
        self.b_score = domain.get('b_score', '')
        self.b_ions = domain.get('b_ions', '')
        self.modifications = []
        for aa in domain.iter('aa'):
            at = safe_int(aa.get('at'))
            mass = safe_float(aa.get('modified'))
            if at > 0 and abs(mass) > 1e-7:
                self.modifications.append(XTandemModification(aa.get('type', '').strip()[:1], at, mass))

    @property
    def delta_cn2(self):
        """``(hyperscore - nextscore) / hyperscore``, or 0."""
        if is_number(self.hyperscore) and is_number(self.nextscore) and float(self.hyperscore):
            return (float(self.hyperscore) - float(self.nextscore)) / float(self.hyperscore)
        return 0.0

    def to_row(self, result):
        """Values for a row of the results file; `result` is the
        :py:class:`~phrp.results.SearchResult` built from this record."""
        return [result.result_id, self.group_id, self.scan, self.charge, self.peptide_mh, self.hyperscore,
                self.peptide_expectation, result.multiple_protein_count,
                result.sequence_with_prefix_and_suffix(True), dbl_to_string(round(self.delta_cn2, 4), 4),
                _trim_zero(result.result_id, self.y_score), self.y_ions,
                _trim_zero(result.result_id, self.b_score), self.b_ions,
                self.delta_mass, self.peptide_intensity, self.del_m_ppm]

    def __repr__(self):
        return 'XTandemSearchResult(group={}, scan={}, {!r}, {!r})'.format(
            self.group_id, self.scan, self.sequence, self.protein)


def _iter_top_level_groups(source):
    root = None
    for event, elem in etree.iterparse(source, events=('start', 'end'), remove_comments=True, huge_tree=True):
        if root is None:
            root = elem
            if etree.QName(root).localname != ROOT_ELEMENT:
                raise PHRPError("Root element '{}' not found".format(ROOT_ELEMENT), root.tag)
            continue
        if event == 'end' and elem.getparent() is root:
            if elem.tag == 'group':
                yield elem
            elem.clear()


def parse_model_group(group, look_for_reversed=False):
    """Convert a ``<group type="model">`` element.

    Parameters
    ----------
    group : lxml.etree._Element
    look_for_reversed : bool, optional
        Keep the ``:reversed`` suffix of decoy protein names, and add it when
        the protein description ends with it.

    Returns
    -------
    out : list of XTandemSearchResult
        One item per ``<protein>`` element, in file order.
    """
    scan = ''
    for support in group.iterchildren('group'):
        if support.get('type') == GROUP_TYPE_SUPPORT and support.get('label') == GROUP_LABEL_FRAGMENT_ION_SPECTRUM:
            for note in support.iter('note'):
                if note.text and note.text.strip():
                    scan = scan_from_description(note.text.strip())
                    break

    group_expectation = expect_to_log10(group.get('expect', ''))
    hits = []
    for protein in group.iterchildren('protein'):
        hit = XTandemSearchResult()
        hit.group_id = safe_int(group.get('id'))
        hit.scan = scan
        hit.charge = group.get('z', '')
        hit.parent_mh = group.get('mh', '')
        hit.peptide_expectation = group_expectation
        hit.peptide_intensity = group.get('sumI', '')
        hit.peptide_intensity_max = group.get('maxI', '')
        hit.intensity_multiplier = group.get('fI', '')

        hit.protein_expectation = protein.get('expect', '')
        hit.protein_intensity = protein.get('sumI', '')
        hit.protein = protein_name(protein.get('label', ''), look_for_reversed)
        if look_for_reversed and not hit.protein.endswith(REVERSED_PROTEIN_INDICATOR):
            for note in protein.iterchildren('note'):
                if note.get('label') == PROTEIN_DESCRIPTION_LABEL \
                        and (note.text or '').strip().endswith(REVERSED_PROTEIN_INDICATOR):
                    hit.protein += REVERSED_PROTEIN_INDICATOR
                    break

        peptide = protein.find('peptide')
        if peptide is not None:
            hit.protein_start = safe_int(peptide.get('start'))
            hit.protein_end = safe_int(peptide.get('end'))
            domain = peptide.find('domain')
            if domain is not None:
                hit.load_domain(domain)
        hits.append(hit)
    return hits


@_file_reader('rb')
def read(source, look_for_reversed=False):
    """Iterate over the model groups of an X!Tandem XML file.

    Parameters
    ----------
    source : str or file
        Path or binary file object.
    look_for_reversed : bool, optional
        See :py:func:`parse_model_group`.

    Returns
    -------
    out : iterator
        A list of :py:class:`XTandemSearchResult` per group.

    Raises
    ------
    PHRPError
        If the root element is not ``bioml``.
    """
    for group in _iter_top_level_groups(source):
        if group.get('type') == GROUP_TYPE_MODEL:
            yield parse_model_group(group, look_for_reversed)


def read_input_parameters(source):
    """Read the ``input parameters`` group of an X!Tandem XML file.

    Returns
    -------
    out : XTandemInputParameters

    Raises
    ------
    PHRPError
        If the root element is not ``bioml``.
    """
    params = XTandemInputParameters()
    with _file_obj(source, 'rb') as f:
        for group in _iter_top_level_groups(f):
            if group.get('type') != GROUP_TYPE_PARAMETERS or group.get('label') != GROUP_LABEL_INPUT_PARAMETERS:
                continue
            for note in group.iter('note'):
                if note.get('type') == NOTE_TYPE_INPUT:
                    params.set(note.get('label', ''), note.text)
    return params


def results_file_name(input_path):
    """Name of the results file: the input name with a ``.txt`` extension.

    >>> results_file_name('/data/QC_Shew_xt.xml')
    'QC_Shew_xt.txt'
    """
    return os.path.splitext(os.path.basename(input_path))[0] + '.txt'


class XTandemResultsProcessor(ResultsProcessor):
    """Converts X!Tandem XML results to PHRP tables.

    Keyword arguments, in addition to those of
    :py:class:`~phrp.processor.ResultsProcessor`:

    include_reversed : bool or None, optional
        Keep the ``:reversed`` suffix of decoy proteins. By default, the
        ``scoring, include reverse`` search setting decides.
    """

    tool_name = 'XTandem'
    allow_duplicate_terminus_mods = False

    def __init__(self, **kwargs):
        self.include_reversed = kwargs.pop('include_reversed', None)
        super(XTandemResultsProcessor, self).__init__(**kwargs)
        self.input_parameters = XTandemInputParameters()
        self.look_for_reversed = False
        self.next_result_id = 1

    def reset(self):
        super(XTandemResultsProcessor, self).reset()
        self.input_parameters = XTandemInputParameters()
        self.look_for_reversed = False
        self.next_result_id = 1

    def load_input_parameters(self, input_path):
        """Read the search settings and apply them: register the
        modifications, set the cleavage rule and the terminal mass changes,
        and decide whether to look for reversed proteins."""
        params = read_input_parameters(input_path)
        self.input_parameters = params

        for mod in params.validated_modifications():
            self.mod_dict.verify_present(mod.mass, mod.residues, mod.mod_type)
        self.mod_dict.append_standard_refinement_modifications()

        if params.cleavage_site:
            try:
                self.cleavage_calculator.set_rule(parse_cleavage_rule(params.cleavage_site))
            except PHRPError:
                self.warn('Unsupported cleavage site specification: {}; using {}'.format(
                    params.cleavage_site, self.enzyme))

        n_change, c_change = params.n_terminus_mass_change, params.c_terminus_mass_change
        self.mass_calculator.n_terminus_mass = MASS_HYDROGEN if n_change is None else n_change
        self.mass_calculator.c_terminus_mass = MASS_OXYGEN + MASS_HYDROGEN if c_change is None else c_change

        if self.include_reversed is None:
            self.look_for_reversed = params.include_reverse
        else:
            self.look_for_reversed = bool(self.include_reversed)
        logger.debug('%d modifications defined; cleavage rule %s|%s', len(self.mod_dict),
                     self.cleavage_calculator.left, self.cleavage_calculator.right)
        return params

    def load_hit(self, hit, update_count=True):
        """Build a :py:class:`~phrp.results.SearchResult` from `hit`,
        attaching the modifications of its ``<aa>`` elements."""
        result = self.new_result()
        result.result_id = hit.group_id
        result.group_id = hit.group_id
        result.scan = safe_int(hit.scan)
        result.charge = safe_int(hit.charge)
        result.protein = hit.protein
        result.clean_sequence = hit.sequence
        result.peptide_with_mods = hit.sequence
        result.pre_residues = hit.pre
        result.post_residues = hit.post
        result.protein_residue_start = hit.protein_start
        result.protein_residue_end = hit.protein_end
        result.peptide_loc_start = hit.peptide_start
        result.peptide_loc_end = hit.peptide_end
        result.protein_expectation_value = hit.protein_expectation
        result.protein_intensity = hit.protein_intensity
        result.peptide_delta_mass = hit.delta_mass
        result.update_cleavage_info()

        for mod in hit.modifications:
            location = mod.at - hit.peptide_start + 1
            state = result.determine_residue_terminus_state(location)
            result.add_modification_by_mass(mod.mass, mod.residue, location, state, update_count)
        return result

    def add_modifications_and_compute_mass(self, result, update_count=True):
        result.add_static_terminus_modifications(self.allow_duplicate_terminus_mods, update_count)
        result.compute_monoisotopic_mass()
        result.apply_modification_information()
        return result.monoisotopic_mass >= 0

    def delta_mass_ppm(self, result, parent_mh):
        """Precursor mass error in ppm. The precursor mass comes from the
        parent M+H, or from the peptide mass and the mass error when the
        M+H is missing."""
        if not is_number(result.peptide_delta_mass):
            return 0.0
        del_m = -float(result.peptide_delta_mass)
        if is_number(parent_mh):
            precursor_mass = float(parent_mh) - MASS_PROTON
        else:
            precursor_mass = result.monoisotopic_mass + del_m
        return corrected_delta_ppm(del_m, precursor_mass, result.monoisotopic_mass,
                                   self.adjust_precursor_mass_for_c13)

    def process_group(self, hits, table, writer):
        """Write the results of one model group.

        Every protein of the group yields a search result. Only the first
        result of each (clean sequence, modification description) pair is
        written to `table`, with a new Result_ID; its Multiple_Protein_Count
        is the number of other proteins sharing that pair. All results go to
        the sequence tables of `writer`.

        Returns
        -------
        out : int
            Number of rows written to `table`.
        """
        results = []
        seen_sequences = set()
        for index, hit in enumerate(hits):
            result = self.load_hit(hit, update_count=index == 0)
            update_count = hit.sequence not in seen_sequences
            seen_sequences.add(hit.sequence)
            if not self.add_modifications_and_compute_mass(result, update_count):
                self.error_log.add("Error adding modifications to sequence for Group ID '{}'".format(hit.group_id))
            ppm = self.delta_mass_ppm(result, hit.parent_mh)
            hit.del_m_ppm = '0' if abs(ppm) < 0.00005 else dbl_to_string(ppm, 5)
            results.append(result)

        keys = [(r.clean_sequence, r.mod_description) for r in results]
        counts = Counter(keys)
        result_ids = {}
        for hit, result, key in zip(hits, results, keys):
            result.multiple_protein_count = counts[key] - 1
            first = key not in result_ids
            if first:
                result_ids[key] = self.next_result_id
                self.next_result_id += 1
            result.result_id = result_ids[key]
            if first:
                table.write_row(hit.to_row(result))
            writer.save(result, first)
        return len(result_ids)

    def _process(self, input_path, output_dir):
        self.report_progress('Reading the X!Tandem input parameters', 0)
        try:
            self.load_input_parameters(input_path)
        except (PHRPError, etree.XMLSyntaxError) as e:
            self.set_error(ErrorCode.ERROR_READING_INPUT_FILE, 'Error reading {}: {}'.format(input_path, e))
            return False

        output_path = os.path.join(output_dir, results_file_name(input_path))
        self.report_progress('Parsing ' + os.path.basename(input_path), 5)
        writer = SequenceInfoWriter(output_path, self.mass_digits)
        self.output_files.append(output_path)
        self.output_files.extend(writer.paths.values())
        group_count = 0
        try:
            with TableWriter(output_path, RESULTS_COLUMNS) as table, \
                    read(input_path, self.look_for_reversed) as groups:
                for hits in groups:
                    if self.should_abort():
                        raise AbortedError()
                    self.process_group(hits, table, writer)
                    group_count += 1
                    if group_count % 1000 == 0:
                        self.report_progress('{} groups processed'.format(group_count))
                logger.info('Wrote %d results for %d groups to %s', table.rows_written, group_count, output_path)
        except etree.XMLSyntaxError as e:
            self.set_error(ErrorCode.ERROR_READING_INPUT_FILE, 'Error reading {}: {}'.format(input_path, e))
            return False
        finally:
            writer.close()

        write_mod_summary(self.mod_dict, writer.paths['mod_summary'])
        return True
