"""
modifications - modification definitions and the modification dictionary
========================================================================

Summary
-------

Search engines report post-translational and chemical modifications either as
symbols placed after the modified residue, as names or as mass offsets. This
module keeps a registry of modification definitions for one processing run,
maps masses to short *mass correction tags* (e.g. ``Plus1Oxy`` for
+15.9949 Da) and assigns single-character symbols to dynamic modifications.

Classes
-------

  :py:class:`ModificationDefinition` - a single modification: mass, target
  residues, type, symbol and mass correction tag.

  :py:class:`ModificationDictionary` - the registry. Supports lookup-or-define
  by mass, lookup by symbol, occurrence counting and reading definitions from
  tab-delimited files.

  :py:class:`ModificationType`, :py:class:`ResidueTerminusState` -
  enumerations.

Data
----

  :py:data:`default_mass_correction_tags` - built-in tag name to mass table.

  :py:data:`integer_mass_correction_tags` - preferred tags for integer masses.

  :py:data:`DEFAULT_MODIFICATION_SYMBOLS` - symbols assigned to dynamic
  modifications, in order of use.

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
from collections import deque
from enum import Enum, IntEnum

from .auxiliary import PHRPError, _file_obj, split_line, is_number

logger = logging.getLogger(__name__)

DEFAULT_MODIFICATION_SYMBOLS = '*#@$&!%~^`+='
LAST_RESORT_SYMBOL = '_'
NO_SYMBOL = '-'
NO_AFFECTED_ATOM = '-'
MASS_DIGITS_OF_PRECISION = 3

N_TERMINAL_PEPTIDE_SYMBOL = '<'
C_TERMINAL_PEPTIDE_SYMBOL = '>'
N_TERMINAL_PROTEIN_SYMBOL = '['
C_TERMINAL_PROTEIN_SYMBOL = ']'
terminal_symbols = (N_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL,
                    N_TERMINAL_PROTEIN_SYMBOL, C_TERMINAL_PROTEIN_SYMBOL)

_EPSILON = 1e-7


class ModificationType(Enum):
    """Modification types. The values are the one-letter codes used in
    modification definition files and in the modification summary."""
    DYNAMIC = 'D'
    STATIC = 'S'
    TERMINAL_PEPTIDE_STATIC = 'T'
    ISOTOPIC = 'I'
    PROTEIN_TERMINUS_STATIC = 'P'
    UNKNOWN = '?'

    @classmethod
    def from_symbol(cls, symbol):
        try:
            return cls(symbol.strip().upper())
        except ValueError:
            return cls.DYNAMIC


class ResidueTerminusState(IntEnum):
    NONE = 0
    PEPTIDE_N = 1
    PEPTIDE_C = 2
    PROTEIN_N = 3
    PROTEIN_C = 4
    PROTEIN_N_AND_C = 5

    @property
    def is_n_terminal(self):
        return self in (self.PEPTIDE_N, self.PROTEIN_N, self.PROTEIN_N_AND_C)

    @property
    def is_c_terminal(self):
        return self in (self.PEPTIDE_C, self.PROTEIN_C, self.PROTEIN_N_AND_C)


default_mass_correction_tags = {
    '4xDeut': 4.025107, '6C134N15': 10.008269, '6xC13N15': 7.017164,
    'AcetAmid': 41.02655, 'Acetyl': 42.010567, 'Acrylmid': 71.037117,
    'ADPRibos': 541.061096, 'AlkSulf': -25.0316, 'Aminaton': 15.010899,
    'AmOxButa': -2.01565, 'Bromo': 77.910507, 'BS3Olnk': 156.078644,
    'C13DtFrm': 36.07567, 'Carbamyl': 43.005814, 'Cyano': 24.995249,
    'Cys-Dha': -33.98772, 'Cystnyl': 119.004097, 'Deamide': 0.984016,
    'DeutForm': 32.056407, 'DeutMeth': 17.034479, 'Dimethyl': 28.0313,
    'DTBP_Alk': 144.03573, 'Formyl': 27.994915, 'GalNAFuc': 648.2603,
    'GalNAMan': 664.2551, 'Gluthone': 305.068146, 'Guanid': 42.021797,
    'Heme_615': 615.169458, 'Hexosam': 203.079376, 'Hexose': 162.052826,
    'ICAT_D0': 442.225006, 'ICAT_D8': 450.275208, 'IodoAcet': 57.021465,
    'IodoAcid': 58.005478, 'Iso_N15': 0.997035, 'itrac': 144.102066,
    'iTRAQ8': 304.205353, 'LeuToMet': 17.956421, 'Lipid2': 576.51178,
    'Mercury': 199.9549, 'Met_O18': 16.028204, 'Methyl': 14.01565,
    'Methylmn': 13.031634, 'MinusH2O': -18.010565, 'NEM': 125.047676,
    'NH3_Loss': -17.026548, 'NHS_SS': 87.998283, 'NO2_Addn': 44.985077,
    'None': 0.0, 'OMinus2H': 13.979265, 'One_C12': 12.0,
    'One_O18': 2.004246, 'OxoAla': -17.992805, 'palmtlic': 236.21402,
    'PCGalNAz': 502.202332, 'PEO': 414.193695, 'PhosAden': 329.052521,
    'Phosph': 79.966331, 'PhosUrid': 306.025299, 'Plus1Oxy': 15.994915,
    'Plus2Oxy': 31.989828, 'Plus3Oxy': 47.984745, 'Propnyl': 56.026215,
    'Pyro-cmC': 39.994915, 'SATA_Alk': 131.0041, 'SATA_Lgt': 115.9932,
    'Sucinate': 116.010956, 'SulfoNHS': 226.077591, 'Sumoylat': 484.228149,
    'TMT0Tag': 224.152481, 'TMT6Tag': 229.162933, 'TriMeth': 42.046951,
    'Two_O18': 4.008491, 'Ubiq_02': 114.042931, 'Ubiq_L': 100.016045,
    'ValToMet': 31.972071,
}
"""Mass correction tag names and monoisotopic masses."""

integer_mass_correction_tags = {
    -18: 'MinusH2O', -17: 'NH3_Loss', -11: 'AsnToCys', -8: 'HisToGlu',
    -7: 'TyrToArg', -4: 'ThrToPro', -3: 'MetToLys', -1: 'Dehydro',
    1: 'Deamide', 2: 'GluToMet', 4: 'TrypOxy', 5: '5C13', 6: '6C13',
    10: 'D10-Leu', 13: 'Methylmn', 14: 'Methyl', 16: 'Plus1Oxy',
    18: 'LeuToMet', 25: 'Cyano', 28: 'Dimethyl', 32: 'Plus2Oxy',
    42: 'Acetyl', 43: 'Carbamyl', 45: 'NO2_Addn', 48: 'Plus3Oxy',
    56: 'Propnyl', 58: 'IodoAcid', 80: 'Phosph', 89: 'Biotinyl',
    96: 'PhosphH', 104: 'Ubiq_H', 116: 'Sucinate', 119: 'Cystnyl',
    125: 'NEM', 144: 'itrac', 215: 'MethylHg', 236: 'ICAT_C13',
    442: 'ICAT_D0',
}
"""Preferred tag names for modifications reported with integer masses."""


def _mass_match(mass1, mass2, digits):
    return abs(round(abs(mass1 - mass2), digits)) < _EPSILON


def generic_mod_mass_name(mass):
    """Build an 8-character tag name from a modification mass,
    e.g. ``+15.9949`` or ``-18.0106``.

    >>> generic_mod_mass_name(15.994915)
    '+15.9949'
    """
    if abs(mass) < _EPSILON:
        return '+0.00000'
    if mass < -9999999:
        return '-9999999'
    if mass > 9999999:
        return '+9999999'
    log_mass = math.log10(abs(mass))
    if abs(log_mass - round(log_mass)) < _EPSILON:
        int_digits = int(round(log_mass)) + 1
    else:
        int_digits = int(math.ceil(log_mass))
    int_digits = max(int_digits, 1)
    # sign + integer digits + period + decimals = 8 characters
    decimals = max(8 - 2 - int_digits, 0)
    text = '{:+0{}.{}f}'.format(mass, int_digits + 1 + (decimals + 1 if decimals else 0), decimals)
    if len(text) < 8 and '.' not in text:
        text += '.'
    return text.ljust(8, '0')[:8]


class ModificationDefinition(object):
    """A modification that can be applied to peptides.

    Parameters
    ----------
    symbol : str
        Single-character symbol shown in modified sequences.
        Static modifications use :py:const:`NO_SYMBOL`.
    mass : float
        Monoisotopic mass shift. For isotopic modifications, the shift per
        atom of `affected_atom`.
    target_residues : str, optional
        One-letter residue codes and terminus symbols (``<>[]``).
        An empty string means any residue.
    mod_type : ModificationType, optional
    tag : str, optional
        Mass correction tag.
    affected_atom : str, optional
        Element affected by an isotopic modification.
    auto_defined : bool, optional
        :py:const:`True` if the definition was created during processing
        because no known modification matched a mass.
    """

    def __init__(self, symbol=NO_SYMBOL, mass=0.0, target_residues='', mod_type=ModificationType.DYNAMIC,
                 tag='', affected_atom=NO_AFFECTED_ATOM, auto_defined=False):
        self.symbol = symbol
        self.mass = mass
        self.target_residues = target_residues or ''
        self.mod_type = mod_type
        self.tag = tag
        self.affected_atom = affected_atom
        self.auto_defined = auto_defined
        self.occurrence_count = 0

    def targets(self, residue):
        """Check if `residue` is among the target residues."""
        return bool(residue) and residue in self.target_residues

    def add_target(self, residue):
        if residue and residue not in self.target_residues:
            self.target_residues += residue

    def is_isotopic(self):
        return self.mod_type == ModificationType.ISOTOPIC

    def is_static(self):
        return self.mod_type in (ModificationType.STATIC, ModificationType.TERMINAL_PEPTIDE_STATIC,
                                 ModificationType.PROTEIN_TERMINUS_STATIC)

    def equivalent(self, other):
        """Compare mass (to :py:const:`MASS_DIGITS_OF_PRECISION` digits), type,
        tag and affected atom, ignoring symbol and target residues."""
        return (_mass_match(self.mass, other.mass, MASS_DIGITS_OF_PRECISION)
                and self.mod_type == other.mod_type
                and self.tag == other.tag
                and self.affected_atom == other.affected_atom)

    @staticmethod
    def equivalent_target_residues(residues1, residues2, allow_unordered=True):
        if residues1 == residues2:
            return True
        if allow_unordered and len(residues1) == len(residues2):
            return sorted(residues1) == sorted(residues2)
        return False

    def copy(self):
        new = ModificationDefinition(self.symbol, self.mass, self.target_residues, self.mod_type,
                                     self.tag, self.affected_atom, self.auto_defined)
        return new

    def __repr__(self):
        return 'ModificationDefinition({!r}, {}, {!r}, {}, {!r})'.format(
            self.symbol, self.mass, self.target_residues, self.mod_type.name, self.tag)


class ModificationDictionary(object):
    """Registry of the modification definitions used in one processing run.

    Parameters
    ----------
    mass_correction_tags : dict, optional
        Tag name to mass table. Default is
        :py:data:`default_mass_correction_tags`.
    consider_symbol : bool, optional
        If :py:const:`True`, definitions with different symbols are never
        merged when added. Default is :py:const:`False`.
    """

    def __init__(self, mass_correction_tags=None, consider_symbol=False):
        self.mass_correction_tags = dict(mass_correction_tags or default_mass_correction_tags)
        self.integer_tags = dict(integer_mass_correction_tags)
        self.consider_symbol = consider_symbol
        self.modifications = []
        self._symbols = deque(DEFAULT_MODIFICATION_SYMBOLS)
        self.standard_refinement_modifications = [
            ModificationDefinition(LAST_RESORT_SYMBOL, -17.026549, 'Q', ModificationType.DYNAMIC, 'NH3_Loss'),
            ModificationDefinition(LAST_RESORT_SYMBOL, -18.0106, 'E', ModificationType.DYNAMIC, 'MinusH2O'),
        ]

    def __len__(self):
        return len(self.modifications)

    def __iter__(self):
        return iter(self.modifications)

    def __getitem__(self, index):
        return self.modifications[index]

    def clear(self):
        """Remove all definitions and reset the symbol queue."""
        self.modifications = []
        self._symbols = deque(DEFAULT_MODIFICATION_SYMBOLS)

    def _claim_symbol(self, symbol):
        try:
            self._symbols.remove(symbol)
        except ValueError:
            pass

    def add(self, definition, use_next_symbol=False):
        """Add `definition`, merging it into an equivalent existing one.

        Returns
        -------
        out : ModificationDefinition
            The stored definition.
        """
        for mod in self.modifications:
            if not mod.equivalent(definition):
                continue
            if self.consider_symbol and mod.symbol != definition.symbol:
                continue
            if mod.mod_type in (ModificationType.DYNAMIC, ModificationType.STATIC):
                for residue in definition.target_residues:
                    mod.add_target(residue)
            return mod

        if use_next_symbol and self._symbols:
            definition.symbol = self._symbols.popleft()
        else:
            self._claim_symbol(definition.symbol)
        self.modifications.append(definition)
        return definition

    def register_occurrence(self, definition):
        """Count one more use of `definition`."""
        definition.occurrence_count += 1

    def lookup_tag_by_mass(self, mass, precision=MASS_DIGITS_OF_PRECISION, add_if_unknown=True, precision_loose=1):
        """Find the mass correction tag closest to `mass`.

        Precision is relaxed one digit at a time from `precision` down to
        `precision_loose`. If the loosest precision is 0, integer-mass tags
        take priority. Without a match, a generic name is built from the mass
        (see :py:func:`generic_mod_mass_name`) and, if `add_if_unknown` is set,
        stored as a new tag.
        """
        precision_loose = min(precision, precision_loose)
        if precision_loose == 0:
            for int_mass, tag in self.integer_tags.items():
                if abs(mass - int_mass) < 1e-4:
                    return tag

        closest, closest_diff = None, float('inf')
        for tag, tag_mass in self.mass_correction_tags.items():
            diff = abs(mass - tag_mass)
            if diff < closest_diff:
                closest, closest_diff = tag, diff

        for digits in range(precision, precision_loose - 1, -1):
            if closest is not None and abs(round(closest_diff, digits)) < _EPSILON:
                return closest

        name = generic_mod_mass_name(mass)
        if add_if_unknown:
            if name in self.mass_correction_tags:
                logger.warning('Ignoring duplicate mass correction tag: %s, mass %.3f', name, mass)
            else:
                self.mass_correction_tags[name] = mass
        return name

    def lookup_mass_by_name(self, name):
        """Find the mass of a tag or a common modification name
        (case-insensitive). Returns :py:const:`None` if unknown."""
        for tag, mass in self.mass_correction_tags.items():
            if tag.lower() == name.lower():
                return mass
        return {
            'deamidated': 0.984016, 'methyl': 14.01565, 'oxidation': 15.994915,
            'acetyl': 42.010567, 'phospho': 79.966331}.get(name.lower())

    @staticmethod
    def _terminus_targets(definition, terminus_state):
        if terminus_state.is_n_terminal:
            return definition.targets(N_TERMINAL_PEPTIDE_SYMBOL)
        if terminus_state.is_c_terminal:
            return definition.targets(C_TERMINAL_PEPTIDE_SYMBOL)
        return False

    def _define_unknown(self, mass, mod_type, residue, terminus_state, add, use_next_symbol, symbol,
                        precision, precision_loose):
        targets = residue or ''
        if terminus_state != ResidueTerminusState.NONE:
            if terminus_state.is_n_terminal:
                targets = N_TERMINAL_PEPTIDE_SYMBOL
            else:
                targets = C_TERMINAL_PEPTIDE_SYMBOL
        if not use_next_symbol:
            symbol = NO_SYMBOL
        tag = self.lookup_tag_by_mass(mass, precision, True, precision_loose)
        definition = ModificationDefinition(symbol, mass, targets, mod_type, tag, NO_AFFECTED_ATOM, True)
        if not add:
            return definition
        logger.debug('Auto-defining modification %.4f on %r as %s', mass, targets, tag)
        return self.add(definition, use_next_symbol=bool(self._symbols) and use_next_symbol)

    def lookup_or_define(self, mass, residue='', terminus_state=ResidueTerminusState.NONE,
                         precision=MASS_DIGITS_OF_PRECISION, precision_loose=None, add=True):
        """Find the definition best matching `mass` on `residue`, defining a
        new dynamic modification if none matches.

        Candidates are searched in order: dynamic, static or unknown-type
        definitions targeting `residue` (or the peptide terminus given by
        `terminus_state`); definitions without target residues; the standard
        refinement modifications; dynamic definitions for any residue (which
        then gain `residue` as a target). Within a step, the smallest mass
        difference wins and ties go to the earliest definition.

        Parameters
        ----------
        mass : float
        residue : str, optional
            One-letter residue code, or empty.
        terminus_state : ResidueTerminusState, optional
        precision : int, optional
            Number of decimal digits to which masses must agree.
        precision_loose : int, optional
            Loosest precision used when naming a new definition.
            Defaults to `precision`.
        add : bool, optional
            Store newly created definitions. Default is :py:const:`True`.

        Returns
        -------
        out : tuple
            ``(definition, existing)``; `existing` is :py:const:`False` for a
            newly created definition.
        """
        if precision_loose is None:
            precision_loose = precision
        usable = (ModificationType.DYNAMIC, ModificationType.STATIC, ModificationType.UNKNOWN)

        if residue or terminus_state != ResidueTerminusState.NONE:
            matched = []
            for mod in self.modifications:
                if mod.mod_type not in usable or not mod.target_residues:
                    continue
                diff = abs(mod.mass - mass)
                if abs(round(diff, precision)) > _EPSILON:
                    continue
                if mod.targets(residue) or self._terminus_targets(mod, terminus_state):
                    matched.append((diff, mod))
            if matched:
                return min(matched, key=lambda x: x[0])[1], True

        matched = [(abs(mod.mass - mass), mod) for mod in self.modifications
                   if mod.mod_type in usable and not mod.target_residues.strip()
                   and _mass_match(mod.mass, mass, precision)]
        if matched:
            return min(matched, key=lambda x: x[0])[1], True

        if residue:
            for refinement in self.standard_refinement_modifications:
                if _mass_match(refinement.mass, mass, precision) and refinement.targets(residue):
                    definition = refinement.copy()
                    definition.symbol = LAST_RESORT_SYMBOL
                    if add and self._symbols:
                        return self.add(definition, use_next_symbol=True), True
                    return definition, True

        matched = [(abs(mod.mass - mass), mod) for mod in self.modifications
                   if mod.mod_type in (ModificationType.DYNAMIC, ModificationType.UNKNOWN)
                   and _mass_match(mod.mass, mass, precision)]
        if matched:
            definition = min(matched, key=lambda x: x[0])[1]
            definition.add_target(residue)
            return definition, True

        definition = self._define_unknown(mass, ModificationType.DYNAMIC, residue, terminus_state, add,
                                          True, LAST_RESORT_SYMBOL, precision, precision_loose)
        return definition, False

    def lookup_or_define_by_type(self, mass, mod_type, residue='', terminus_state=ResidueTerminusState.NONE,
                                 precision=MASS_DIGITS_OF_PRECISION, add=True):
        """Like :py:meth:`lookup_or_define`, but only considers definitions of
        `mod_type`. New static definitions get no symbol.

        Returns
        -------
        out : tuple
            ``(definition, existing)``
        """
        if mod_type in (ModificationType.STATIC, ModificationType.TERMINAL_PEPTIDE_STATIC,
                        ModificationType.PROTEIN_TERMINUS_STATIC):
            symbol, use_next_symbol = NO_SYMBOL, False
        else:
            symbol, use_next_symbol = LAST_RESORT_SYMBOL, True

        if residue or terminus_state != ResidueTerminusState.NONE:
            for mod in self.modifications:
                if mod.mod_type != mod_type or not mod.target_residues:
                    continue
                if not _mass_match(mod.mass, mass, precision):
                    continue
                if mod.targets(residue) or self._terminus_targets(mod, terminus_state):
                    return mod, True

        for mod in self.modifications:
            if mod.mod_type == mod_type and not mod.target_residues.strip() and _mass_match(mod.mass, mass, precision):
                return mod, True

        if residue:
            for refinement in self.standard_refinement_modifications:
                if _mass_match(refinement.mass, mass, precision) and refinement.targets(residue):
                    definition = refinement.copy()
                    definition.symbol = symbol
                    definition.mod_type = mod_type
                    if add and self._symbols:
                        return self.add(definition, use_next_symbol=True), True
                    return definition, True

        for mod in self.modifications:
            if mod.mod_type == mod_type and _mass_match(mod.mass, mass, precision):
                mod.add_target(residue)
                return mod, True

        definition = self._define_unknown(mass, mod_type, residue, terminus_state, add, use_next_symbol,
                                          symbol, precision, precision)
        return definition, False

    def lookup_by_symbol(self, symbol, residue, terminus_state=ResidueTerminusState.NONE):
        """Find the dynamic modification shown as `symbol` after `residue`.

        Returns :py:const:`None` if no dynamic modification uses `symbol`.
        """
        dynamic = (ModificationType.DYNAMIC, ModificationType.UNKNOWN)
        for mod in self.modifications:
            if mod.mod_type not in dynamic or mod.symbol != symbol or not mod.target_residues:
                continue
            if mod.targets(residue):
                return mod
            if terminus_state != ResidueTerminusState.NONE:
                if terminus_state == ResidueTerminusState.PROTEIN_N_AND_C:
                    wanted = (N_TERMINAL_PROTEIN_SYMBOL, C_TERMINAL_PROTEIN_SYMBOL,
                              N_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL)
                elif terminus_state == ResidueTerminusState.PROTEIN_N:
                    wanted = (N_TERMINAL_PROTEIN_SYMBOL, N_TERMINAL_PEPTIDE_SYMBOL)
                elif terminus_state == ResidueTerminusState.PROTEIN_C:
                    wanted = (C_TERMINAL_PROTEIN_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL)
                elif terminus_state == ResidueTerminusState.PEPTIDE_N:
                    wanted = (N_TERMINAL_PEPTIDE_SYMBOL,)
                else:
                    wanted = (C_TERMINAL_PEPTIDE_SYMBOL,)
                if any(mod.targets(w) for w in wanted):
                    return mod

        for mod in self.modifications:
            if mod.mod_type in dynamic and mod.symbol == symbol and not mod.target_residues:
                return mod

        for mod in self.modifications:
            if mod.mod_type == ModificationType.DYNAMIC and mod.symbol == symbol:
                return mod
        return None

    def verify_present(self, mass, target_residues, mod_type, precision=MASS_DIGITS_OF_PRECISION):
        """Make sure a definition with `mass`, `target_residues` and
        `mod_type` exists, adding it if needed. Returns the definition."""
        precision = max(precision, 0)
        for mod in self.modifications:
            if mod.mod_type != mod_type or not _mass_match(mod.mass, mass, precision):
                continue
            if ModificationDefinition.equivalent_target_residues(mod.target_residues, target_residues):
                return mod
        definition = ModificationDefinition(LAST_RESORT_SYMBOL if mod_type == ModificationType.DYNAMIC else NO_SYMBOL,
                                            mass, target_residues, mod_type, self.lookup_tag_by_mass(mass))
        return self.add(definition, use_next_symbol=mod_type == ModificationType.DYNAMIC)

    def append_standard_refinement_modifications(self):
        for mod in self.standard_refinement_modifications:
            self.verify_present(mod.mass, mod.target_residues, mod.mod_type)

    def static_modifications(self):
        """Iterate over residue-level static modifications."""
        return (m for m in self.modifications if m.mod_type == ModificationType.STATIC)

    def read_mass_correction_tags(self, source):
        """Replace the mass correction tags with those read from `source`,
        a tab-delimited file with tag names and masses. Lines whose mass is
        not numeric are skipped. If no tags are read, the defaults are kept.
        """
        tags = {}
        with _file_obj(source, 'r') as f:
            for line in f:
                fields = split_line(line)
                if len(fields) < 2 or not fields[0].strip() or not is_number(fields[1]):
                    continue
                tags[fields[0].strip()] = float(fields[1])
        if tags:
            self.mass_correction_tags = tags
        else:
            self.mass_correction_tags = dict(default_mass_correction_tags)
        return len(tags)

    def read_modification_definitions(self, source):
        """Read modification definitions from a tab-delimited file.

        Columns: symbol, mass, target residues (optional), type letter
        (``D``, ``S``, ``T``, ``I`` or ``P``, optional), mass correction tag
        (optional) and affected atom (optional, required for isotopic
        modifications). Existing definitions are cleared first.

        Returns
        -------
        out : int
            Number of definitions read.

        Raises
        ------
        PHRPError
            For an isotopic modification without an affected atom, or a
            terminal static modification with invalid targets.
        """
        self.clear()
        count = 0
        with _file_obj(source, 'r') as f:
            for line in f:
                if not line.strip():
                    continue
                fields = line.rstrip('\r\n').split('\t')
                if len(fields) < 2 or len(fields[0].strip()) != 1 or not is_number(fields[1]):
                    continue
                definition = ModificationDefinition(fields[0].strip(), float(fields[1]))
                if len(fields) >= 3:
                    definition.target_residues = ''.join(
                        c for c in fields[2].strip().upper() if c.isupper() or c in terminal_symbols)
                if len(fields) >= 4 and len(fields[3].strip()) == 1:
                    definition.mod_type = ModificationType.from_symbol(fields[3])
                if len(fields) >= 5 and fields[4].strip():
                    definition.tag = fields[4].strip()
                if len(fields) >= 6 and fields[5].strip():
                    definition.affected_atom = fields[5].strip()[0]

                if definition.mod_type == ModificationType.STATIC and len(definition.target_residues) == 1:
                    if definition.target_residues in (N_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL):
                        definition.mod_type = ModificationType.TERMINAL_PEPTIDE_STATIC
                    elif definition.target_residues in (N_TERMINAL_PROTEIN_SYMBOL, C_TERMINAL_PROTEIN_SYMBOL):
                        definition.mod_type = ModificationType.PROTEIN_TERMINUS_STATIC

                if definition.mod_type == ModificationType.ISOTOPIC:
                    if definition.affected_atom == NO_AFFECTED_ATOM:
                        raise PHRPError('Isotopic modification without an affected atom', line.strip())
                elif definition.mod_type == ModificationType.TERMINAL_PEPTIDE_STATIC:
                    if definition.target_residues not in (N_TERMINAL_PEPTIDE_SYMBOL, C_TERMINAL_PEPTIDE_SYMBOL):
                        raise PHRPError('Terminal peptide static modification must target < or >', line.strip())
                elif definition.mod_type == ModificationType.PROTEIN_TERMINUS_STATIC:
                    if definition.target_residues not in (N_TERMINAL_PROTEIN_SYMBOL, C_TERMINAL_PROTEIN_SYMBOL):
                        raise PHRPError('Protein terminus static modification must target [ or ]', line.strip())

                if definition.mod_type in (ModificationType.ISOTOPIC, ModificationType.TERMINAL_PEPTIDE_STATIC,
                                           ModificationType.PROTEIN_TERMINUS_STATIC):
                    definition.symbol = NO_SYMBOL

                if definition.tag not in self.mass_correction_tags:
                    definition.tag = self.lookup_tag_by_mass(definition.mass)
                self.add(definition, use_next_symbol=False)
                count += 1
        return count
