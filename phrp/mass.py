"""
mass - peptide masses, charge state conversion and mass errors
==============================================================

Summary
-------

This module computes monoisotopic masses of peptides given in one-letter code,
applies residue, terminal and isotopic modifications to them, converts masses
between charge states and computes precursor mass errors in ppm, optionally
corrected for mis-assigned :sup:`13`\\ C isotope peaks.

Mass calculations
-----------------

  :py:func:`fast_mass` - monoisotopic mass of an unmodified peptide.

  :py:class:`PeptideMassCalculator` - a calculator with configurable residue
  masses and terminal groups that also applies modifications.

  :py:func:`convolute_mass` - convert a mass or m/z between charge states.

  :py:func:`neutral_mass` - neutral monoisotopic mass from m/z and charge.

Mass errors
-----------

  :py:func:`corrected_delta_ppm` - precursor mass error in ppm with optional
  :sup:`13`\\ C correction.

  :py:func:`ppm_to_mass` - convert a ppm error back to Da.

Data
----

  :py:data:`nist_mass` - a dict with exact masses of the elements used in
  peptide mass calculations.

  :py:data:`std_aa_mass` - a dict with the monoisotopic residue masses of the
  one-letter amino acid codes, including ambiguity codes B, J, X and Z.

  :py:data:`std_aa_comp` - a dict with the elemental compositions of the
  amino acid residues, used for isotopic modifications.

-----------------------------------------------------------------------------
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
import re

from .auxiliary import PHRPError

logger = logging.getLogger(__name__)

nist_mass = {
    'H': {0: (1.0078246, 0.999885)},
    'C': {0: (12.0, 0.9893), 13: (13.00335483, 0.0107)},
    'N': {0: (14.0030740, 0.99636), 15: (15.0001089, 0.00364)},
    'O': {0: (15.9949141, 0.99757), 18: (17.9991610, 0.00205)},
    'S': {0: (31.9720707, 0.9499)},
    'Se': {0: (79.9165213, 0.4961)},
    'H+': {0: (1.00727649, 1.0)},
}
"""Monoisotopic masses and abundances, keyed by element and mass number
(0 stands for the most abundant isotope)."""

MASS_HYDROGEN = nist_mass['H'][0][0]
MASS_OXYGEN = nist_mass['O'][0][0]
MASS_PROTON = nist_mass['H+'][0][0]
MASS_C13 = nist_mass['C'][13][0] - nist_mass['C'][0][0]
MASS_WATER = 2 * MASS_HYDROGEN + MASS_OXYGEN

std_aa_mass = {
    'A': 71.0371100902557,
    'B': 114.042921543121,
    'C': 103.009180784225,
    'D': 115.026938199997,
    'E': 129.042587518692,
    'F': 147.068408727646,
    'G': 57.0214607715607,
    'H': 137.058904886246,
    'I': 113.084058046341,
    'J': 0.0,
    'K': 128.094955444336,
    'L': 113.084058046341,
    'M': 131.040479421616,
    'N': 114.042921543121,
    'O': 114.079306125641,
    'P': 97.0527594089508,
    'Q': 128.058570861816,
    'R': 156.101100921631,
    'S': 87.0320241451263,
    'T': 101.047673463821,
    'U': 150.95363,
    'V': 99.0684087276459,
    'W': 186.079306125641,
    'X': 113.084058046341,
    'Y': 163.063322782516,
    'Z': 128.058570861816,
}
"""Monoisotopic residue masses of the one-letter amino acid codes."""


def _comp(c, h, n, o, s=0, se=0):
    comp = {'C': c, 'H': h, 'N': n, 'O': o, 'S': s}
    if se:
        comp['Se'] = se
    return comp


std_aa_comp = {
    'A': _comp(3, 5, 1, 1),
    'B': _comp(4, 6, 2, 2),
    'C': _comp(3, 5, 1, 1, 1),
    'D': _comp(4, 5, 1, 3),
    'E': _comp(5, 7, 1, 3),
    'F': _comp(9, 9, 1, 1),
    'G': _comp(2, 3, 1, 1),
    'H': _comp(6, 7, 3, 1),
    'I': _comp(6, 11, 1, 1),
    'J': _comp(0, 0, 0, 0),
    'K': _comp(6, 12, 2, 1),
    'L': _comp(6, 11, 1, 1),
    'M': _comp(5, 9, 1, 1, 1),
    'N': _comp(4, 6, 2, 2),
    'O': _comp(5, 10, 2, 1),
    'P': _comp(5, 7, 1, 1),
    'Q': _comp(5, 8, 2, 2),
    'R': _comp(6, 12, 4, 1),
    'S': _comp(3, 5, 1, 2),
    'T': _comp(4, 7, 1, 2),
    'U': _comp(3, 5, 1, 1, 0, 1),
    'V': _comp(5, 9, 1, 1),
    'W': _comp(11, 10, 2, 1),
    'X': _comp(6, 11, 1, 1),
    'Y': _comp(9, 9, 1, 2),
    'Z': _comp(5, 8, 2, 2),
}
"""Elemental compositions of the amino acid residues."""


def fast_mass(sequence, charge=None, **kwargs):
    """Calculate the monoisotopic mass of an unmodified peptide.

    Parameters
    ----------
    sequence : str
        A peptide sequence in one-letter code.
    charge : int, optional
        If not 0 then m/z is calculated: the mass is increased
        by the corresponding number of proton masses and divided
        by z.
    aa_mass : dict, optional
        A dict with the monoisotopic mass of amino acid residues
        (default is :py:data:`std_aa_mass`).

    Returns
    -------
    mass : float
        Monoisotopic mass or m/z of a peptide molecule/ion.
    """
    aa_mass = kwargs.get('aa_mass', std_aa_mass)
    try:
        mass = sum(aa_mass[i] for i in sequence)
    except KeyError as e:
        raise PHRPError('No mass data for residue: ' + e.args[0])

    mass += MASS_WATER

    if charge:
        mass = (mass + MASS_PROTON * charge) / charge

    return mass


def convolute_mass(mass_mz, current_charge, desired_charge=1, charge_carrier_mass=MASS_PROTON):
    """Convert `mass_mz` from `current_charge` to `desired_charge`.

    A charge of 0 means a neutral mass, 1 means M+H.

    Parameters
    ----------
    mass_mz : float
        Mass or m/z to convert.
    current_charge : int
        Charge state of `mass_mz`.
    desired_charge : int, optional
        Charge state to convert to. Default is 1 (M+H).
    charge_carrier_mass : float, optional
        Mass of the charge carrier. Default is the proton mass.

    Returns
    -------
    out : float
        The converted value, or 0 for a negative `current_charge`.
    """
    if current_charge == desired_charge:
        return mass_mz

    if current_charge == 1:
        mh = mass_mz
    elif current_charge > 1:
        mh = mass_mz * current_charge - charge_carrier_mass * (current_charge - 1)
    elif current_charge == 0:
        mh = mass_mz + charge_carrier_mass
    else:
        return 0.0

    if desired_charge > 1:
        return (mh + charge_carrier_mass * (desired_charge - 1)) / desired_charge
    if desired_charge == 1:
        return mh
    if desired_charge == 0:
        return mh - charge_carrier_mass
    return 0.0


def neutral_mass(mz, z, charge_carrier_mass=MASS_PROTON):
    """Calculate the neutral mass of an ion given its m/z and charge."""
    return convolute_mass(mz, z, 0, charge_carrier_mass)


def mh_from_precursor(precursor_mz, precursor_error, charge):
    """Compute M+H from the precursor m/z, its error (in m/z units) and
    the charge state."""
    return (precursor_mz - precursor_error) * charge - (charge - 1) * MASS_PROTON


def corrected_delta_ppm(delta_mass, precursor_mass, peptide_mass, adjust_for_c13=True):
    """Compute the precursor mass error in ppm.

    If `adjust_for_c13` is set, `delta_mass` is first shifted by integer
    multiples of the :sup:`13`\\ C - :sup:`12`\\ C mass difference until it
    lies within 0.5 Da of zero, and the precursor mass is adjusted accordingly.

    Parameters
    ----------
    delta_mass : float
        Precursor mass minus peptide mass, in Da.
    precursor_mass : float
        Neutral monoisotopic precursor mass.
    peptide_mass : float
        Neutral monoisotopic mass of the identified peptide.
    adjust_for_c13 : bool, optional
        Default is :py:const:`True`.

    Returns
    -------
    out : float
    """
    if adjust_for_c13:
        correction_count = 0
        if delta_mass >= -0.5:
            while delta_mass > 0.5:
                delta_mass -= MASS_C13
                correction_count += 1
        else:
            while delta_mass < -0.5:
                delta_mass += MASS_C13
                correction_count -= 1
        if correction_count:
            precursor_mass -= correction_count * MASS_C13
            delta_mass = precursor_mass - peptide_mass

    if not peptide_mass:
        return 0.0
    return delta_mass / peptide_mass * 1e6


def ppm_to_mass(ppm, mass):
    """Convert a ppm error at `mass` to Da."""
    return ppm * mass / 1e6


_numeric_mod = re.compile(r'[+-]\d*\.?\d+')


class PeptideMassCalculator(object):
    """Computes peptide masses with positional and isotopic modifications.

    Attributes
    ----------
    aa_mass : dict
        Residue masses, a copy of :py:data:`std_aa_mass` by default.
    n_terminus_mass, c_terminus_mass : float
        Masses of the terminal groups (H and OH).
    error_message : str
        Set when the last computation met an unknown residue.
    """

    def __init__(self, aa_mass=None, charge_carrier_mass=MASS_PROTON):
        self.aa_mass = dict(aa_mass if aa_mass is not None else std_aa_mass)
        self.charge_carrier_mass = charge_carrier_mass
        self.n_terminus_mass = MASS_HYDROGEN
        self.c_terminus_mass = MASS_OXYGEN + MASS_HYDROGEN
        self.error_message = ''

    def _residue_mass(self, sequence):
        total = 0.0
        for residue in sequence:
            try:
                total += self.aa_mass[residue]
            except KeyError:
                raise PHRPError('Unknown symbol {} in sequence {}'.format(residue, sequence))
        return total

    def compute_sequence_mass(self, sequence, modifications=()):
        """Compute the monoisotopic mass of `sequence` in one-letter code.

        Parameters
        ----------
        sequence : str
            Clean peptide sequence.
        modifications : iterable, optional
            Objects with a `definition` attribute exposing `mass`, `mod_type`
            and `affected_atom`. Isotopic modifications add `mass` once per
            atom of the affected element, all others add `mass` once.

        Returns
        -------
        out : float
            The mass, or -1 if `sequence` contains an unknown residue.
        """
        self.error_message = ''
        try:
            mass = self._residue_mass(sequence)
        except PHRPError as e:
            self.error_message = e.message
            logger.debug(e.message)
            return -1.0
        if sequence:
            mass += self.n_terminus_mass + self.c_terminus_mass

        for mod in modifications:
            definition = mod.definition
            if definition.is_isotopic():
                mass += definition.mass * self.count_atoms(sequence, definition.affected_atom)
            else:
                mass += definition.mass
        return mass

    def compute_sequence_mass_numeric_mods(self, sequence):
        """Compute the mass of a sequence with numeric modification masses
        embedded in it, e.g. ``'PEP+79.966TIDE'``."""
        total_mods = sum(float(m) for m in _numeric_mod.findall(sequence))
        clean = ''.join(c for c in sequence if c.isalpha())
        mass = self.compute_sequence_mass(clean)
        if mass < 0:
            return mass
        return mass + total_mods

    @staticmethod
    def count_atoms(sequence, element):
        """Count atoms of `element` in the residues of `sequence`, including
        the terminal H and OH groups."""
        count = sum(std_aa_comp.get(aa, {}).get(element, 0) for aa in sequence)
        if element == 'H':
            count += 2
        elif element == 'O':
            count += 1
        return count

    def convolute_mass(self, mass_mz, current_charge, desired_charge=1):
        return convolute_mass(mass_mz, current_charge, desired_charge, self.charge_carrier_mass)

    def set_residue_mass(self, residue, mass):
        """Override the mass of a residue."""
        if len(residue) != 1 or not residue.isalpha():
            raise PHRPError('Invalid residue: {}'.format(residue))
        self.aa_mass[residue.upper()] = mass
