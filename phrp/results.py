"""
results - the shared search result helper
=========================================

Summary
-------

Every search engine parser produces a tool-specific record. Once the record
is accepted for output, its peptide is loaded into a :py:class:`SearchResult`,
which carries the fields common to all tools and implements the algorithms
they share: splitting the peptide into flanking residues and clean sequence,
attaching modifications, computing the monoisotopic mass, the modification
description and the cleavage and terminus states.

Classes
-------

  :py:class:`SearchResult` - shared fields and peptide-level algorithms.

  :py:class:`AminoAcidModInfo` - a modification applied at a given position.

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

from . import parser
from .mass import PeptideMassCalculator
from .modifications import (ModificationType, ResidueTerminusState, NO_AFFECTED_ATOM,
                            MASS_DIGITS_OF_PRECISION, N_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL,
                            N_TERMINAL_PROTEIN_SYMBOL, C_TERMINAL_PROTEIN_SYMBOL)
from .parser import CleavageState, TerminusState

logger = logging.getLogger(__name__)

PROTEIN_RESIDUE_START = 1
PROTEIN_RESIDUE_END = 10000


class AminoAcidModInfo(object):
    """A modification at a residue of a peptide.

    Attributes
    ----------
    residue : str
        The modified residue, or :py:const:`~phrp.modifications.NO_AFFECTED_ATOM`
        for isotopic modifications.
    location : int
        1-based position in the clean sequence (0 for isotopic modifications).
    terminus_state : ResidueTerminusState
    definition : ModificationDefinition
    """

    def __init__(self, residue, location, terminus_state, definition):
        self.residue = residue
        self.location = location
        self.terminus_state = terminus_state
        self.definition = definition

    @property
    def tag(self):
        return self.definition.tag

    def __repr__(self):
        return 'AminoAcidModInfo({!r}, {}, {})'.format(self.residue, self.location, self.definition.tag)


class SearchResult(object):
    """Fields and peptide-level algorithms shared by all search engines.

    Parameters
    ----------
    mod_dict : ModificationDictionary
        Used to resolve modification masses and symbols.
    mass_calculator : PeptideMassCalculator, optional
    cleavage_calculator : CleavageStateCalculator, optional
    """

    def __init__(self, mod_dict, mass_calculator=None, cleavage_calculator=None):
        self.mod_dict = mod_dict
        self.mass_calculator = mass_calculator or PeptideMassCalculator()
        self.cleavage_calculator = cleavage_calculator or parser.CleavageStateCalculator()
        self.clear()

    def clear(self):
        """Reset all per-result fields. Tool-specific score columns are
        kept in :py:attr:`scores`."""
        self.result_id = 0
        self.group_id = 0
        self.scan = 0
        self.charge = 0
        self.protein = ''
        self.multiple_protein_count = 0
        self.peptide_with_mods = ''
        self.clean_sequence = ''
        self.pre_residues = ''
        self.post_residues = ''
        self.modifications = []
        self.monoisotopic_mass = 0.0
        self.mod_description = ''
        self.cleavage_state = CleavageState.NON_SPECIFIC
        self.terminus_state = TerminusState.NONE
        self.peptide_loc_start = 0
        self.peptide_loc_end = 0
        self.protein_residue_start = 0
        self.protein_residue_end = 0
        self.protein_expectation_value = ''
        self.protein_intensity = ''
        self.peptide_delta_mass = ''
        self.scores = {}

    @property
    def mod_count(self):
        return len(self.modifications)

    def set_peptide_sequence_with_mods(self, sequence, check_prefix_suffix=True, auto_populate_clean=True):
        """Store the peptide, splitting off the flanking residues.

        Parameters
        ----------
        sequence : str
            Peptide with modification symbols, e.g. ``'K.PEPT*IDE.R'``.
        check_prefix_suffix : bool, optional
            Look for flanking residues. Default is :py:const:`True`.
        auto_populate_clean : bool, optional
            Also set :py:attr:`clean_sequence` and update the cleavage and
            terminus states. Default is :py:const:`True`.
        """
        sequence = sequence or ''
        primary, prefix, suffix = sequence, '', ''
        if check_prefix_suffix:
            found, primary, prefix, suffix = parser.split_prefix_suffix(sequence)
            if not found:
                primary, prefix, suffix = sequence, '', ''
        self.peptide_with_mods = primary
        self.pre_residues = prefix
        self.post_residues = suffix
        if auto_populate_clean:
            self.clean_sequence = parser.clean_sequence(primary, False)
            self.update_cleavage_info()

    def update_cleavage_info(self):
        """Recompute :py:attr:`cleavage_state` and :py:attr:`terminus_state`."""
        self.cleavage_state = self.cleavage_calculator.cleavage_state(
            self.clean_sequence, self.pre_residues, self.post_residues)
        self.terminus_state = self.cleavage_calculator.terminus_state(self.pre_residues, self.post_residues)

    def compute_pseudo_location(self):
        """Assign a position in a pseudo protein of 10000 residues, so that
        peptides at the protein termini are placed at the protein termini."""
        self.protein_residue_start = PROTEIN_RESIDUE_START
        self.protein_residue_end = PROTEIN_RESIDUE_END
        length = len(self.clean_sequence)
        pre = self.pre_residues.strip()
        post = self.post_residues.strip()

        if pre.endswith(parser.TERMINUS_SYMBOL):
            self.peptide_loc_start = self.protein_residue_start
            self.peptide_loc_end = self.peptide_loc_start + length - 1
            if post.startswith(parser.TERMINUS_SYMBOL):
                self.protein_residue_end = self.peptide_loc_end
            elif self.peptide_loc_end > self.protein_residue_end:
                self.protein_residue_end = self.peptide_loc_end + 1
        elif post.startswith(parser.TERMINUS_SYMBOL):
            self.peptide_loc_end = self.protein_residue_end
            self.peptide_loc_start = self.peptide_loc_end - length + 1
            if self.peptide_loc_start < self.protein_residue_start:
                self.protein_residue_end = self.protein_residue_start + 1 + length
                self.peptide_loc_end = self.protein_residue_end
                self.peptide_loc_start = self.peptide_loc_end - length + 1
        else:
            self.peptide_loc_start = self.protein_residue_start + 1
            self.peptide_loc_end = self.peptide_loc_start + length - 1
            if self.peptide_loc_end > self.protein_residue_end:
                self.protein_residue_end = self.peptide_loc_end + 1

    def determine_residue_terminus_state(self, location):
        """Terminus state of the residue at 1-based `location`, based on the
        peptide position set by :py:meth:`compute_pseudo_location`."""
        if location == 1:
            if self.peptide_loc_start == self.protein_residue_start:
                if self.peptide_loc_end == self.protein_residue_end:
                    return ResidueTerminusState.PROTEIN_N_AND_C
                return ResidueTerminusState.PROTEIN_N
            return ResidueTerminusState.PEPTIDE_N
        if location == self.peptide_loc_end - self.peptide_loc_start + 1:
            if self.peptide_loc_end == self.protein_residue_end:
                return ResidueTerminusState.PROTEIN_C
            return ResidueTerminusState.PEPTIDE_C
        return ResidueTerminusState.NONE

    def add_modification(self, definition, residue, location, terminus_state, update_count=True,
                         allow_duplicate=True):
        """Attach `definition` at `location`.

        Returns
        -------
        out : bool
            :py:const:`False` if the location is invalid or the modification
            duplicates one already at that location while `allow_duplicate`
            is :py:const:`False`.
        """
        if location < 1 and not definition.is_isotopic():
            return False
        if not allow_duplicate:
            for mod in self.modifications:
                if mod.location != location:
                    continue
                if mod.definition is definition or mod.tag == definition.tag:
                    return False
                if abs(round(mod.definition.mass - definition.mass, MASS_DIGITS_OF_PRECISION)) < 1e-7:
                    return False
        self.modifications.append(AminoAcidModInfo(residue, location, terminus_state, definition))
        if update_count:
            self.mod_dict.register_occurrence(definition)
        return True

    def add_modification_by_mass(self, mass, residue, location, terminus_state, update_count=True,
                                 precision=MASS_DIGITS_OF_PRECISION):
        """Resolve `mass` on `residue` with the modification dictionary and
        attach it. Returns :py:const:`False` for an invalid location."""
        if location < 1:
            return False
        definition, _ = self.mod_dict.lookup_or_define(mass, residue, terminus_state, precision)
        return self.add_modification(definition, residue, location, terminus_state, update_count)

    def add_isotopic_modifications(self, update_count=True):
        for definition in self.mod_dict:
            if definition.is_isotopic():
                self.add_modification(definition, NO_AFFECTED_ATOM, 0, ResidueTerminusState.NONE, update_count)

    def add_static_terminus_modifications(self, allow_duplicate=False, update_count=True):
        """Apply peptide terminus and protein terminus static modifications.

        Returns
        -------
        out : list of ModificationDefinition
            Definitions that were not added, i.e. duplicates of a
            modification already at the terminus when `allow_duplicate`
            is :py:const:`False`.
        """
        rejected = []
        length = len(self.clean_sequence)
        at_protein_n = self.terminus_state in (TerminusState.PROTEIN_N, TerminusState.PROTEIN_N_AND_C)
        at_protein_c = self.terminus_state in (TerminusState.PROTEIN_C, TerminusState.PROTEIN_N_AND_C)
        for definition in list(self.mod_dict):
            location = 0
            if definition.mod_type == ModificationType.TERMINAL_PEPTIDE_STATIC:
                if definition.targets(N_TERMINAL_PEPTIDE_SYMBOL):
                    location = 1
                    state = ResidueTerminusState.PROTEIN_N if at_protein_n else ResidueTerminusState.PEPTIDE_N
                elif definition.targets(C_TERMINAL_PEPTIDE_SYMBOL):
                    location = length
                    state = ResidueTerminusState.PROTEIN_C if at_protein_c else ResidueTerminusState.PEPTIDE_C
            elif definition.mod_type == ModificationType.PROTEIN_TERMINUS_STATIC:
                if definition.targets(N_TERMINAL_PROTEIN_SYMBOL) and at_protein_n:
                    location = 1
                    state = ResidueTerminusState.PROTEIN_N
                elif definition.targets(C_TERMINAL_PROTEIN_SYMBOL) and at_protein_c:
                    location = length
                    state = ResidueTerminusState.PROTEIN_C
            if 1 <= location <= length:
                if not self.add_modification(definition, self.clean_sequence[location - 1], location, state,
                                          update_count, allow_duplicate):
                    rejected.append(definition)
        return rejected

    def add_dynamic_and_static_residue_modifications(self, update_count=True):
        """Walk :py:attr:`peptide_with_mods`, attaching static modifications to
        each residue letter and resolving every symbol that follows a letter
        as a dynamic modification. Symbols before the first letter are
        ignored.

        Returns
        -------
        out : list of str
            Symbols that could not be resolved.
        """
        unresolved = []
        location = 0
        residue = ''
        statics = [d for d in self.mod_dict if d.mod_type == ModificationType.STATIC]
        length = len(self.clean_sequence)
        for char in self.peptide_with_mods:
            if char.isalpha():
                residue = char
                location += 1
                state = self.determine_residue_terminus_state(location) if length else ResidueTerminusState.NONE
                for definition in statics:
                    if definition.targets(char):
                        self.add_modification(definition, char, location, state, update_count)
            elif residue:
                state = self.determine_residue_terminus_state(location)
                definition = self.mod_dict.lookup_by_symbol(char, residue, state)
                if definition is None:
                    unresolved.append(char)
                else:
                    self.add_modification(definition, residue, location, state, update_count)
        return unresolved

    def compute_monoisotopic_mass(self):
        self.monoisotopic_mass = self.mass_calculator.compute_sequence_mass(self.clean_sequence, self.modifications)
        return self.monoisotopic_mass

    def sorted_modifications(self):
        """Positional modifications sorted by location, then by tag."""
        return sorted(self.modifications, key=lambda m: (m.location, m.tag))

    def update_mod_description(self):
        """Build ``Tag:location`` pairs joined by commas."""
        self.mod_description = ','.join(
            '{}:{}'.format(m.tag, m.location) for m in self.sorted_modifications())
        return self.mod_description

    def sequence_with_mod_symbols(self):
        """Insert the symbols of the dynamic modifications into
        :py:attr:`clean_sequence`, each after its residue. For
        ``PEPTMIDE`` with a ``*`` modification at position 5 this gives
        ``PEPTM*IDE``."""
        sequence = self.clean_sequence
        for mod in reversed(self.sorted_modifications()):
            if mod.definition.mod_type in (ModificationType.DYNAMIC, ModificationType.UNKNOWN):
                sequence = sequence[:mod.location] + mod.definition.symbol + sequence[mod.location:]
        return sequence

    def apply_modification_information(self):
        """Rebuild :py:attr:`peptide_with_mods` and the modification
        description from the attached modifications. Used for tools that
        report modifications separately from the sequence."""
        self.peptide_with_mods = self.sequence_with_mod_symbols()
        return self.update_mod_description()

    def sequence_with_prefix_and_suffix(self, with_mods=True):
        """The peptide with one flanking residue on each side."""
        primary = self.peptide_with_mods if with_mods else self.clean_sequence
        return parser.sequence_with_prefix_and_suffix(primary, self.pre_residues, self.post_residues)
