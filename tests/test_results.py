from os import path
import phrp
phrp.__path__ = [path.abspath(path.join(path.dirname(__file__), path.pardir, 'phrp'))]
import unittest
from phrp import mass
from phrp.modifications import ModificationDictionary, ModificationType, ResidueTerminusState
from phrp.parser import CleavageState, TerminusState
from phrp.results import SearchResult


class SearchResultTest(unittest.TestCase):
    def setUp(self):
        self.mod_dict = ModificationDictionary()
        self.phos = self.mod_dict.verify_present(79.966331, 'STY', ModificationType.DYNAMIC)
        self.cam = self.mod_dict.verify_present(57.021464, 'C', ModificationType.STATIC)
        self.result = SearchResult(self.mod_dict)

    def _load(self, peptide):
        self.result.clear()
        self.result.set_peptide_sequence_with_mods(peptide)
        self.result.compute_pseudo_location()
        unresolved = self.result.add_dynamic_and_static_residue_modifications()
        self.result.add_static_terminus_modifications()
        self.result.compute_monoisotopic_mass()
        self.result.update_mod_description()
        return unresolved

    def test_set_peptide(self):
        self.result.set_peptide_sequence_with_mods('K.LGS*PEPTIDEK.A')
        self.assertEqual(self.result.peptide_with_mods, 'LGS*PEPTIDEK')
        self.assertEqual(self.result.clean_sequence, 'LGSPEPTIDEK')
        self.assertEqual(self.result.pre_residues, 'K')
        self.assertEqual(self.result.post_residues, 'A')
        self.assertEqual(self.result.cleavage_state, CleavageState.FULL)
        self.assertEqual(self.result.terminus_state, TerminusState.NONE)
        self.assertEqual(self.result.sequence_with_prefix_and_suffix(), 'K.LGS*PEPTIDEK.A')
        self.assertEqual(self.result.sequence_with_prefix_and_suffix(False), 'K.LGSPEPTIDEK.A')

    def test_pseudo_location(self):
        self.result.set_peptide_sequence_with_mods('K.PEPTIDE.R')
        self.result.compute_pseudo_location()
        self.assertEqual((self.result.peptide_loc_start, self.result.peptide_loc_end), (2, 8))
        self.assertEqual(self.result.determine_residue_terminus_state(1), ResidueTerminusState.PEPTIDE_N)
        self.assertEqual(self.result.determine_residue_terminus_state(7), ResidueTerminusState.PEPTIDE_C)
        self.assertEqual(self.result.determine_residue_terminus_state(3), ResidueTerminusState.NONE)

        self.result.set_peptide_sequence_with_mods('-.PEPTIDE.R')
        self.result.compute_pseudo_location()
        self.assertEqual((self.result.peptide_loc_start, self.result.peptide_loc_end), (1, 7))
        self.assertEqual(self.result.determine_residue_terminus_state(1), ResidueTerminusState.PROTEIN_N)

        self.result.set_peptide_sequence_with_mods('K.PEPTIDE.-')
        self.result.compute_pseudo_location()
        self.assertEqual(self.result.peptide_loc_end, 10000)
        self.assertEqual(self.result.determine_residue_terminus_state(7), ResidueTerminusState.PROTEIN_C)

        self.result.set_peptide_sequence_with_mods('-.PEPTIDE.-')
        self.result.compute_pseudo_location()
        self.assertEqual(self.result.determine_residue_terminus_state(1), ResidueTerminusState.PROTEIN_N_AND_C)

    def test_modifications(self):
        self.assertEqual(self._load('K.ACS*PEPTIDEK.A'), [])
        self.assertEqual(self.result.mod_count, 2)
        self.assertEqual(self.result.mod_description, 'IodoAcet:2,Phosph:3')
        self.assertAlmostEqual(self.result.monoisotopic_mass,
                               mass.fast_mass('ACSPEPTIDEK') + 57.021464 + 79.966331)
        self.assertEqual(self.phos.occurrence_count, 1)
        self.assertEqual(self.cam.occurrence_count, 1)

    def test_unknown_symbol(self):
        self.assertEqual(self._load('K.LGS^PEPTIDEK.A'), ['^'])
        self.assertEqual(self.result.mod_count, 0)

    def test_terminal_static(self):
        acetyl = self.mod_dict.verify_present(42.010565, '<', ModificationType.TERMINAL_PEPTIDE_STATIC)
        protein_c = self.mod_dict.verify_present(14.01565, ']', ModificationType.PROTEIN_TERMINUS_STATIC)
        self._load('K.PEPTIDE.-')
        self.assertEqual(self.result.mod_description, 'Acetyl:1,Methyl:7')
        self.assertEqual(acetyl.occurrence_count, 1)
        self.assertEqual(protein_c.occurrence_count, 1)
        self._load('K.PEPTIDE.R')
        self.assertEqual(self.result.mod_description, 'Acetyl:1')

    def test_isotopic(self):
        self.mod_dict.verify_present(0.997035, '', ModificationType.ISOTOPIC).affected_atom = 'N'
        self.result.set_peptide_sequence_with_mods('K.PEPTIDEK.A')
        self.result.add_isotopic_modifications()
        self.assertEqual(self.result.mod_count, 1)
        self.assertEqual(self.result.modifications[0].location, 0)
        self.assertAlmostEqual(self.result.compute_monoisotopic_mass(), mass.fast_mass('PEPTIDEK') + 9 * 0.997035)

    def test_add_by_mass(self):
        self.result.set_peptide_sequence_with_mods('K.PEPTMIDE.R')
        self.result.compute_pseudo_location()
        self.assertFalse(self.result.add_modification_by_mass(15.9949, 'M', 0, ResidueTerminusState.NONE))
        self.assertTrue(self.result.add_modification_by_mass(15.9949, 'M', 5, ResidueTerminusState.NONE))
        self.assertEqual(self.result.sequence_with_mod_symbols(), 'PEPTM#IDE')
        self.result.apply_modification_information()
        self.assertEqual(self.result.peptide_with_mods, 'PEPTM#IDE')
        self.assertEqual(self.result.mod_description, 'Plus1Oxy:5')

    def test_duplicate_terminus_mod(self):
        acetyl = self.mod_dict.verify_present(42.010565, '<', ModificationType.TERMINAL_PEPTIDE_STATIC)
        self.result.set_peptide_sequence_with_mods('K.PEPTIDE.R')
        self.assertTrue(self.result.add_modification(acetyl, 'P', 1, ResidueTerminusState.PEPTIDE_N))
        self.assertEqual(self.result.add_static_terminus_modifications(allow_duplicate=False), [acetyl])
        self.assertEqual(self.result.mod_count, 1)
        self.assertEqual(self.result.add_static_terminus_modifications(allow_duplicate=True), [])
        self.assertEqual(self.result.mod_count, 2)

    def test_clear(self):
        self._load('K.ACS*PEPTIDEK.A')
        self.result.clear()
        self.assertEqual(self.result.modifications, [])
        self.assertEqual(self.result.peptide_with_mods, '')
        self.assertEqual(self.result.mod_description, '')


if __name__ == '__main__':
    unittest.main()
