from os import path
import phrp
phrp.__path__ = [path.abspath(path.join(path.dirname(__file__), path.pardir, 'phrp'))]
import os
import tempfile
import unittest
from phrp import output
from phrp.modifications import ModificationDictionary, ModificationType
from phrp.results import SearchResult


def read_rows(p):
    with open(p) as f:
        return [line.rstrip('\n').split('\t') for line in f]


class UniqueSequencesTest(unittest.TestCase):
    def test_ids(self):
        seqs = output.UniqueSequences()
        self.assertEqual(seqs.get_id('PEPTIDE', ''), (1, True))
        self.assertEqual(seqs.get_id('PEPTIDE', 'Plus1Oxy:1'), (2, True))
        self.assertEqual(seqs.get_id('PEPTIDE', ''), (1, False))
        self.assertEqual(len(seqs), 2)
        self.assertIn(('PEPTIDE', 'Plus1Oxy:1'), seqs)


class SequenceInfoWriterTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.results_path = os.path.join(self.dir, 'Sample_syn.txt')
        self.mod_dict = ModificationDictionary()
        self.oxidation = self.mod_dict.verify_present(15.994915, 'M', ModificationType.DYNAMIC)

    def _result(self, result_id, peptide, protein):
        result = SearchResult(self.mod_dict)
        result.result_id = result_id
        result.protein = protein
        result.set_peptide_sequence_with_mods(peptide)
        result.compute_pseudo_location()
        result.add_dynamic_and_static_residue_modifications()
        result.compute_monoisotopic_mass()
        result.update_mod_description()
        return result

    def test_output_paths(self):
        paths = output.output_paths(self.results_path)
        self.assertEqual(paths['mod_summary'], os.path.join(self.dir, 'Sample_syn_ModSummary.txt'))
        self.assertEqual(paths['result_to_seq_map'], os.path.join(self.dir, 'Sample_syn_ResultToSeqMap.txt'))

    def test_save(self):
        with output.SequenceInfoWriter(self.results_path) as writer:
            self.assertEqual(writer.save(self._result(1, 'K.M*PEPTIDER.A', 'Prot1')), 1)
            self.assertEqual(writer.save(self._result(1, 'K.M*PEPTIDER.A', 'Prot2'), False), 1)
            self.assertEqual(writer.save(self._result(2, 'K.MPEPTIDER.A', 'Prot1')), 2)
            self.assertEqual(writer.save(self._result(3, 'K.M*PEPTIDER.A', 'Prot1')), 1)
        paths = output.output_paths(self.results_path)

        rows = read_rows(paths['result_to_seq_map'])
        self.assertEqual(rows, [output.RESULT_TO_SEQ_MAP_COLUMNS, ['1', '1'], ['2', '2'], ['3', '1']])

        rows = read_rows(paths['seq_info'])
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[1][:3], ['1', '1', 'Plus1Oxy:1'])
        self.assertEqual(rows[2][:3], ['2', '0', ''])
        self.assertEqual(len(rows[1][3].split('.')[1]), 7)

        rows = read_rows(paths['mod_details'])
        self.assertEqual(rows[1:], [['1', 'Plus1Oxy', '1']])

        rows = read_rows(paths['seq_to_protein_map'])
        self.assertEqual([r[0] + r[3] for r in rows[1:]], ['1Prot1', '1Prot2', '2Prot1'])
        self.assertEqual(rows[1][1:3], ['2', '0'])


class ModSummaryTest(unittest.TestCase):
    def test_write(self):
        mod_dict = ModificationDictionary()
        oxidation = mod_dict.verify_present(15.994915, 'M', ModificationType.DYNAMIC)
        mod_dict.verify_present(57.021464, 'C', ModificationType.STATIC)
        unused, _ = mod_dict.lookup_or_define(79.966331, 'S')
        self.assertTrue(unused.auto_defined)
        mod_dict.register_occurrence(oxidation)

        p = os.path.join(tempfile.mkdtemp(), 'Sample_syn_ModSummary.txt')
        self.assertEqual(output.write_mod_summary(mod_dict, p), 2)
        rows = read_rows(p)
        self.assertEqual(rows[0], output.MOD_SUMMARY_COLUMNS)
        self.assertEqual(rows[1], ['*', '15.994915', 'M', 'D', 'Plus1Oxy', '1'])
        self.assertEqual(rows[2], ['-', '57.021464', 'C', 'S', 'IodoAcet', '0'])


if __name__ == '__main__':
    unittest.main()
