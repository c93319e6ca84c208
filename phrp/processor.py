"""
processor - the shared results processing pipeline
==================================================

Summary
-------

:py:class:`ResultsProcessor` is the base class of the search engine specific
processors (:py:class:`~phrp.inspect_results.InspectResultsProcessor`,
:py:class:`~phrp.moda.MODaResultsProcessor`,
:py:class:`~phrp.tandem.XTandemResultsProcessor`). It owns the modification
dictionary and the mass and cleavage state calculators of a run, implements
the status contract (a boolean result plus :py:attr:`error_code` and
:py:attr:`error_message`), cooperative abort and progress reporting, and the
synopsis re-parsing step shared by the delimited-text tools: each synopsis
row is turned into a :py:class:`~phrp.results.SearchResult`, its
modifications are resolved, and the sequence tables are written.

Data access
-----------

  :py:func:`read_table` - iterate over the rows of a PHRP table as dicts.

  :py:func:`read_table_df` - read a PHRP table into a :py:class:`pandas.DataFrame`.

Classes
-------

  :py:class:`ResultsProcessor` - base processor.

Dependencies
------------

:py:func:`read_table_df` requires :py:mod:`pandas`.

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
import warnings

from .auxiliary import PHRPError, ErrorCode, ErrorLog, _file_reader
from .mass import PeptideMassCalculator
from .modifications import ModificationDictionary
from .output import SequenceInfoWriter, write_mod_summary
from .parser import CleavageStateCalculator
from .peptoprot import PepToProteinMap
from .ranking import AbortedError
from .results import SearchResult

logger = logging.getLogger(__name__)


@_file_reader()
def read_table(source, sep='\t'):
    """Iterate over the rows of a tab-delimited table with a header row.

    Parameters
    ----------
    source : str or file
        Path or file object.

    Returns
    -------
    out : iterator
        A :py:class:`dict` per row, keyed by column name. Missing trailing
        values are empty strings.
    """
    header = None
    for line in source:
        line = line.rstrip('\r\n')
        if not line.strip():
            continue
        fields = line.split(sep)
        if header is None:
            header = fields
            continue
        fields += [''] * (len(header) - len(fields))
        yield dict(zip(header, fields))


def read_table_df(*args, **kwargs):
    """Read a PHRP table into a :py:class:`pandas.DataFrame`.

    Requires :py:mod:`pandas`.

    Parameters
    ----------
    *args, **kwargs : passed to :py:func:`pandas.read_csv`. The separator
        defaults to a tab.

    Returns
    -------
    out : pandas.DataFrame
    """
    import pandas as pd
    kwargs.setdefault('sep', '\t')
    return pd.read_csv(*args, **kwargs)


class ResultsProcessor(object):
    """Base class of the search engine results processors.

    Keyword arguments
    -----------------
    mass_correction_tags_file : str, optional
        Tab-delimited mass correction tags; built-in tags are used otherwise.
    modification_definitions_file : str, optional
        Tab-delimited modification definitions.
    search_tool_parameter_file : str, optional
        The search engine's parameter file.
    create_first_hits_file : bool, optional
        Default is :py:const:`True`.
    create_synopsis_file : bool, optional
        Default is :py:const:`True`.
    create_protein_mods_file : bool, optional
        Stored for callers; no protein modifications file is written.
        Default is :py:const:`False`.
    sort_output : bool, optional
        Sort filtered results before writing. Default is :py:const:`True`.
    adjust_precursor_mass_for_c13 : bool, optional
        Default is :py:const:`True`.
    enzyme : str or tuple, optional
        Cleavage rule used for cleavage states. Default is ``'trypsin'``.
    progress_callback : callable, optional
        Called as ``callback(description, percent_complete)``.
    """

    tool_name = 'Unknown'
    synopsis_score_column = None
    synopsis_peptide_column = 'Peptide'
    pep_to_prot_strip_suffixes = ('_syn', '_fht')
    mass_digits = 7
    allow_duplicate_terminus_mods = True

    def __init__(self, **kwargs):
        self.mass_correction_tags_file = kwargs.pop('mass_correction_tags_file', None)
        self.modification_definitions_file = kwargs.pop('modification_definitions_file', None)
        self.search_tool_parameter_file = kwargs.pop('search_tool_parameter_file', None)
        self.create_first_hits_file = kwargs.pop('create_first_hits_file', True)
        self.create_synopsis_file = kwargs.pop('create_synopsis_file', True)
        self.create_protein_mods_file = kwargs.pop('create_protein_mods_file', False)
        self.sort_output = kwargs.pop('sort_output', True)
        self.adjust_precursor_mass_for_c13 = kwargs.pop('adjust_precursor_mass_for_c13', True)
        self.enzyme = kwargs.pop('enzyme', 'trypsin')
        self.progress_callback = kwargs.pop('progress_callback', None)
        self.max_error_log_length = kwargs.pop('max_error_log_length', 4096)
        self._options = kwargs

        self.mod_dict = ModificationDictionary()
        self.mass_calculator = PeptideMassCalculator()
        self.cleavage_calculator = CleavageStateCalculator(self.enzyme)
        self.error_log = ErrorLog(self.max_error_log_length)
        self.error_code = ErrorCode.NO_ERROR
        self.error_message = ''
        self.warnings = []
        self.aborted = False
        self.abort_requested = False
        self.output_files = []

    def option(self, name, default=None):
        """Tool-specific keyword options passed to the constructor."""
        return self._options.get(name, default)

    # status

    def set_error(self, code, message=''):
        self.error_code = ErrorCode(code)
        if message:
            self.error_message = message
            logger.error('%s: %s', self.error_code.name, message)

    def warn(self, message):
        """Report a recoverable problem."""
        self.warnings.append(message)
        logger.warning(message)
        warnings.warn(message)

    def abort_processing(self):
        """Request cooperative cancellation of the current run."""
        self.abort_requested = True

    def should_abort(self):
        return self.abort_requested

    def report_progress(self, description, percent=None):
        logger.debug('%s (%s%%)', description, percent)
        if self.progress_callback is not None:
            self.progress_callback(description, percent)

    def new_result(self):
        return SearchResult(self.mod_dict, self.mass_calculator, self.cleavage_calculator)

    # setup

    def reset(self):
        self.error_log = ErrorLog(self.max_error_log_length)
        self.error_code = ErrorCode.NO_ERROR
        self.error_message = ''
        self.warnings = []
        self.aborted = False
        self.abort_requested = False
        self.output_files = []
        self.mod_dict = ModificationDictionary()
        self.mass_calculator = PeptideMassCalculator()
        self.cleavage_calculator = CleavageStateCalculator(self.enzyme)

    def load_modification_info(self):
        """Read the mass correction tags and modification definitions files.

        A missing file is reported with the matching error code; processing
        continues with the built-in defaults. Returns :py:const:`False` if a
        file exists but cannot be parsed.
        """
        if self.mass_correction_tags_file:
            if not os.path.exists(self.mass_correction_tags_file):
                self.set_error(ErrorCode.MASS_CORRECTION_TAGS_FILE_NOT_FOUND,
                               'Mass correction tags file not found: ' + self.mass_correction_tags_file)
                self.warn(self.error_message)
            else:
                try:
                    self.mod_dict.read_mass_correction_tags(self.mass_correction_tags_file)
                except (OSError, UnicodeDecodeError) as e:
                    self.set_error(ErrorCode.ERROR_READING_MASS_CORRECTION_TAGS_FILE,
                                   'Error reading mass correction tags file: {}'.format(e))
                    return False

        if self.modification_definitions_file:
            if not os.path.exists(self.modification_definitions_file):
                self.set_error(ErrorCode.MODIFICATION_DEFINITION_FILE_NOT_FOUND,
                               'Modification definitions file not found: ' + self.modification_definitions_file)
                self.warn(self.error_message)
            else:
                try:
                    self.mod_dict.read_modification_definitions(self.modification_definitions_file)
                except (OSError, UnicodeDecodeError, PHRPError) as e:
                    self.set_error(ErrorCode.ERROR_READING_MODIFICATION_DEFINITIONS_FILE,
                                   'Error reading modification definitions file: {}'.format(e))
                    return False
        return True

    # driver

    def process_file(self, input_path, output_dir=None, parameter_file=None):
        """Convert one search engine results file.

        Parameters
        ----------
        input_path : str
            The search engine output.
        output_dir : str, optional
            Directory for the output files; defaults to the input directory.
        parameter_file : str, optional
            Overrides :py:attr:`search_tool_parameter_file`.

        Returns
        -------
        out : bool
            :py:const:`True` on success. On failure :py:attr:`error_code` and
            :py:attr:`error_message` describe the problem, and
            :py:attr:`aborted` tells whether the run was cancelled.
        """
        self.reset()
        if parameter_file is not None:
            self.search_tool_parameter_file = parameter_file

        if not input_path or not os.path.isfile(input_path):
            self.set_error(ErrorCode.INVALID_INPUT_FILE_PATH, 'Input file not found: {}'.format(input_path))
            return False
        if output_dir is None:
            output_dir = os.path.dirname(os.path.abspath(input_path))
        try:
            if not os.path.isdir(output_dir):
                os.makedirs(output_dir)
        except OSError as e:
            self.set_error(ErrorCode.INVALID_OUTPUT_DIRECTORY_PATH, 'Cannot create {}: {}'.format(output_dir, e))
            return False

        if not self.load_modification_info():
            return False

        logger.info('Processing %s results in %s', self.tool_name, input_path)
        try:
            success = self._process(input_path, output_dir)
        except AbortedError:
            self.aborted = True
            self.error_message = self.error_message or 'Processing aborted'
            logger.info('Processing of %s aborted', input_path)
            return False
        except PHRPError as e:
            if self.error_code == ErrorCode.NO_ERROR:
                self.set_error(ErrorCode.ERROR_CREATING_OUTPUT_FILES, str(e))
            return False
        except (OSError, UnicodeDecodeError) as e:
            if self.error_code == ErrorCode.NO_ERROR:
                self.set_error(ErrorCode.ERROR_READING_INPUT_FILE, 'Error processing {}: {}'.format(input_path, e))
            return False

        if self.error_log:
            if self.error_message:
                self.error_message += '\n' + str(self.error_log)
            else:
                self.error_message = str(self.error_log)
            logger.warning('%d invalid lines in %s', len(self.error_log), input_path)
        self.report_progress('Processing complete', 100)
        return success

    def _process(self, input_path, output_dir):
        raise NotImplementedError

    # shared synopsis parsing

    def _load_synopsis_row(self, row, result):
        """Fill `result` from a row of the synopsis file. Returns
        :py:const:`False` for an invalid row."""
        raise NotImplementedError

    def add_modifications_and_compute_mass(self, result, update_count=True):
        """Attach isotopic, residue and terminus modifications, compute the
        mass and the modification description. Returns :py:const:`False`
        if a modification symbol could not be resolved. Terminus
        modifications rejected as duplicates are skipped and logged."""
        result.add_isotopic_modifications(update_count)
        unresolved = result.add_dynamic_and_static_residue_modifications(update_count)
        self.log_rejected_modifications(
            result, result.add_static_terminus_modifications(self.allow_duplicate_terminus_mods, update_count))
        result.compute_monoisotopic_mass()
        result.update_mod_description()
        return not unresolved

    def log_rejected_modifications(self, result, rejected):
        for definition in rejected:
            self.error_log.add('Skipped duplicate terminus modification {} for ResultID {}'.format(
                definition.tag or definition.mass, result.result_id))

    def load_pep_to_prot_map(self, path):
        """Load the peptide to protein map at `path`, warning if it is
        missing. Returns a :py:class:`~phrp.peptoprot.PepToProteinMap`."""
        if not path or not os.path.exists(path):
            self.warn('Peptide to protein map file not found: {}'.format(path))
            return PepToProteinMap()
        try:
            return PepToProteinMap.from_file(path)
        except (OSError, UnicodeDecodeError) as e:
            self.warn('Error reading peptide to protein map {}: {}'.format(path, e))
            return PepToProteinMap()

    def parse_synopsis_file(self, syn_path, pep_to_prot_map=None):
        """Re-read a synopsis or first-hits file and write the sequence tables
        and the modification summary next to it.

        Rows with the same peptide, scan and charge at the same score are
        written to the result-to-sequence map once. When `pep_to_prot_map`
        has other proteins for a peptide, they are added to the
        sequence-to-protein map.
        """
        seen = set()
        previous_score = None
        missing_peptides = []
        result = self.new_result()
        writer = SequenceInfoWriter(syn_path, self.mass_digits)
        self.output_files.extend(writer.paths.values())
        try:
            with read_table(syn_path) as rows:
                for line_number, row in enumerate(rows, 2):
                    if self.should_abort():
                        raise AbortedError()
                    result.clear()
                    if not self._load_synopsis_row(row, result):
                        self.error_log.add('Error parsing {} synopsis file, line {}'.format(
                            self.tool_name, line_number))
                        continue

                    score = row.get(self.synopsis_score_column)
                    if score != previous_score:
                        seen.clear()
                        previous_score = score
                    key = (result.peptide_with_mods, result.scan, result.charge)
                    first = key not in seen
                    seen.add(key)

                    if not self.add_modifications_and_compute_mass(result, first):
                        self.error_log.add('Error adding modifications to sequence for ResultID {}'.format(
                            result.result_id))
                    writer.save(result, first)

                    if pep_to_prot_map:
                        self._save_additional_proteins(writer, result, row, pep_to_prot_map, missing_peptides)
        finally:
            writer.close()

        if missing_peptides:
            self.warn('{} peptides were not found in the peptide to protein map, e.g. {}'.format(
                len(missing_peptides), missing_peptides[0]))

        write_mod_summary(self.mod_dict, writer.paths['mod_summary'])
        return True

    def _save_additional_proteins(self, writer, result, row, pep_to_prot_map, missing_peptides):
        peptide = row.get(self.synopsis_peptide_column, '')
        entries = pep_to_prot_map.lookup(peptide) or pep_to_prot_map.lookup(result.peptide_with_mods)
        if not entries:
            missing_peptides.append(peptide)
            return
        current = result.protein
        for entry in entries:
            if entry.protein != current:
                result.protein = entry.protein
                writer.save(result, False)
        result.protein = current
