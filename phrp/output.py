"""
output - canonical PHRP tables and cross references
===================================================

Summary
-------

Besides the tool-specific results table, every processed file yields a set of
auxiliary tables that link results to unique modified sequences and unique
sequences to proteins:

  ``<base>_ResultToSeqMap.txt``, ``<base>_SeqInfo.txt``,
  ``<base>_ModDetails.txt``, ``<base>_SeqToProteinMap.txt`` and
  ``<base>_ModSummary.txt``.

Classes
-------

  :py:class:`UniqueSequences` - assigns sequence IDs to unique
  (clean sequence, modification description) pairs.

  :py:class:`SequenceInfoWriter` - writes the four sequence tables.

Functions
---------

  :py:func:`write_mod_summary` - write the modification summary table.

  :py:func:`output_paths` - names of the auxiliary tables for a results file.

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

from .auxiliary import TableWriter, _file_writer, dbl_to_string

logger = logging.getLogger(__name__)

RESULT_TO_SEQ_MAP_SUFFIX = '_ResultToSeqMap.txt'
SEQ_INFO_SUFFIX = '_SeqInfo.txt'
MOD_DETAILS_SUFFIX = '_ModDetails.txt'
SEQ_TO_PROTEIN_MAP_SUFFIX = '_SeqToProteinMap.txt'
MOD_SUMMARY_SUFFIX = '_ModSummary.txt'

RESULT_TO_SEQ_MAP_COLUMNS = ['Result_ID', 'Unique_Seq_ID']
SEQ_INFO_COLUMNS = ['Unique_Seq_ID', 'Mod_Count', 'Mod_Description', 'Monoisotopic_Mass']
MOD_DETAILS_COLUMNS = ['Unique_Seq_ID', 'Mass_Correction_Tag', 'Position']
SEQ_TO_PROTEIN_MAP_COLUMNS = ['Unique_Seq_ID', 'Cleavage_State', 'Terminus_State', 'Protein_Name',
                              'Protein_Expectation_Value_Log(e)', 'Protein_Intensity_Log(I)']
MOD_SUMMARY_COLUMNS = ['Modification_Symbol', 'Modification_Mass', 'Target_Residues',
                       'Modification_Type', 'Mass_Correction_Tag', 'Occurrence_Count']


def output_paths(results_path):
    """Paths of the auxiliary tables derived from `results_path`.

    >>> output_paths('/data/X_syn.txt')['seq_info']
    '/data/X_syn_SeqInfo.txt'
    """
    base = os.path.splitext(results_path)[0]
    return {
        'result_to_seq_map': base + RESULT_TO_SEQ_MAP_SUFFIX,
        'seq_info': base + SEQ_INFO_SUFFIX,
        'mod_details': base + MOD_DETAILS_SUFFIX,
        'seq_to_protein_map': base + SEQ_TO_PROTEIN_MAP_SUFFIX,
        'mod_summary': base + MOD_SUMMARY_SUFFIX,
    }


class UniqueSequences(object):
    """Map (clean sequence, modification description) pairs to sequence IDs,
    numbered from 1 in order of first appearance."""

    def __init__(self):
        self._ids = {}

    def get_id(self, clean_sequence, mod_description):
        """Return ``(seq_id, is_new)``."""
        key = (clean_sequence, mod_description)
        seq_id = self._ids.get(key)
        if seq_id is not None:
            return seq_id, False
        seq_id = len(self._ids) + 1
        self._ids[key] = seq_id
        return seq_id, True

    def __len__(self):
        return len(self._ids)

    def __contains__(self, key):
        return key in self._ids


class SequenceInfoWriter(object):
    """Writes the result-to-sequence map, sequence info, modification details
    and sequence-to-protein map tables for one results file.

    Parameters
    ----------
    results_path : str
        Path of the results (synopsis or first-hits) file; the table names
        are derived from it.
    mass_digits : int, optional
        Digits after the decimal point for monoisotopic masses. Default is 7.
    """

    def __init__(self, results_path, mass_digits=7):
        self.paths = output_paths(results_path)
        self.mass_digits = mass_digits
        self.unique_sequences = UniqueSequences()
        self._seq_protein_pairs = set()
        self._writers = []
        try:
            self.result_to_seq_map = self._open('result_to_seq_map', RESULT_TO_SEQ_MAP_COLUMNS)
            self.seq_info = self._open('seq_info', SEQ_INFO_COLUMNS)
            self.mod_details = self._open('mod_details', MOD_DETAILS_COLUMNS)
            self.seq_to_protein_map = self._open('seq_to_protein_map', SEQ_TO_PROTEIN_MAP_COLUMNS)
        except Exception:
            self.close()
            raise

    def _open(self, name, columns):
        writer = TableWriter(self.paths[name], columns)
        self._writers.append(writer)
        return writer

    def save(self, result, first_for_group=True):
        """Record `result` in the sequence tables.

        The result-to-sequence map row is written only if `first_for_group`
        is set. A new unique sequence also gets its sequence info row and
        modification detail rows. Each (sequence ID, protein) pair is
        written to the sequence-to-protein map once.

        Parameters
        ----------
        result : SearchResult
        first_for_group : bool, optional

        Returns
        -------
        out : int
            The sequence ID.
        """
        seq_id, is_new = self.unique_sequences.get_id(result.clean_sequence, result.mod_description)
        if first_for_group:
            self.result_to_seq_map.write_row((result.result_id, seq_id))
            if is_new:
                self.seq_info.write_row((seq_id, result.mod_count, result.mod_description,
                                         '{:.{}f}'.format(result.monoisotopic_mass, self.mass_digits)))
                for mod in result.sorted_modifications():
                    self.mod_details.write_row((seq_id, mod.tag, mod.location))

        key = (seq_id, result.protein)
        if key not in self._seq_protein_pairs:
            self._seq_protein_pairs.add(key)
            self.seq_to_protein_map.write_row((seq_id, int(result.cleavage_state), int(result.terminus_state),
                                               result.protein, result.protein_expectation_value,
                                               result.protein_intensity))
        return seq_id

    def close(self):
        for writer in self._writers:
            writer.close()
        self._writers = []

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


@_file_writer()
def write_mod_summary(mod_dict, output=None):
    """Write one row per modification definition that was either defined
    up front or used at least once.

    Parameters
    ----------
    mod_dict : ModificationDictionary
    output : str or file
        Output path or file object.

    Returns
    -------
    out : int
        Number of rows written.
    """
    writer = TableWriter(output, MOD_SUMMARY_COLUMNS)
    for definition in mod_dict:
        if definition.auto_defined and definition.occurrence_count == 0:
            continue
        writer.write_row((definition.symbol, dbl_to_string(definition.mass, 6), definition.target_residues,
                          definition.mod_type.value, definition.tag, definition.occurrence_count))
    return writer.rows_written
