from os import path
import phrp
phrp.__path__ = [path.abspath(path.join(path.dirname(__file__), path.pardir, 'phrp'))]
import os
import tempfile
import unittest
from phrp import moda
from phrp.auxiliary import LineStatus, ErrorCode
from phrp.modifications import ModificationType
from data import moda_param_file, moda_results, moda_index_to_scan_map, write_files


def read_rows(p):
    with open(p) as f:
        return [line.rstrip('\n').split('\t') for line in f]


class ReadTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.paths = write_files(self.dir, {
            'moda_params.txt': moda_param_file,
            'QC_Shew_moda.id.txt': moda_results,
            'QC_Shew_mgf_IndexToScanMap.txt': moda_index_to_scan_map})
        self.lines = [line for line in moda_results.split('\n') if line]

    def test_read_param_file(self):
        self.assertEqual(moda.read_param_file(self.paths['moda_params.txt']), [moda.MODaStaticMod('C', 57.021)])

    def test_terminal_param(self):
        p = write_files(self.dir, {'p.txt': 'ADD=NTerm, 42.0106 # acetyl\nADD=K\nadd=CTerm,-0.984\n'})['p.txt']
        self.assertEqual(moda.read_param_file(p), [moda.MODaStaticMod('<', 42.0106), moda.MODaStaticMod('>', -0.984)])

    def test_index_to_scan_map(self):
        self.assertEqual(moda.read_index_to_scan_map(self.paths['QC_Shew_mgf_IndexToScanMap.txt']),
                         {1: 1234, 2: 1240, 3: 1250})
        self.assertEqual(moda.find_index_to_scan_map(self.paths['QC_Shew_moda.id.txt']),
                         [self.paths['QC_Shew_mgf_IndexToScanMap.txt']])

    def test_base_name(self):
        self.assertEqual(moda.base_name(os.path.join('data', 'QC_Shew_moda.id.txt')), 'QC_Shew_moda')
        self.assertEqual(moda.base_name('QC_Shew.txt'), 'QC_Shew')

    def test_parse_results_line(self):
        self.assertEqual(moda.parse_results_line(self.lines[0], 0), (LineStatus.HEADER, None))
        status, r = moda.parse_results_line(self.lines[2], 2)
        self.assertEqual(status, LineStatus.DATA)
        self.assertEqual(r.spectrum_index_num, 2)
        self.assertEqual(r.protein, 'SO_0002')
        self.assertEqual(r.peptide, 'K.M+16PEPTIDE.R')
        self.assertAlmostEqual(r.probability_num, 0.85)
        status, r = moda.parse_results_line(self.lines[4], 4)
        self.assertEqual((r.probability, r.probability_num), ('0', 0.0))
        self.assertEqual(moda.parse_results_line(self.lines[5], 5), (LineStatus.INVALID, None))

    def test_read(self):
        with moda.read(self.paths['QC_Shew_moda.id.txt']) as r:
            self.assertEqual([x.spectrum_index for x in r], ['1', '2', '2', '3'])


class MassTest(unittest.TestCase):
    def setUp(self):
        self.processor = moda.MODaResultsProcessor()

    def test_total_mod_mass(self):
        self.assertAlmostEqual(self.processor.total_mod_mass('K.M+16PEPTIDE-18.R'), -2.0)
        self.processor.static_mods = [moda.MODaStaticMod('C', 57.021), moda.MODaStaticMod('<', 42.0106)]
        self.processor.resolve_mods()
        self.assertAlmostEqual(self.processor.total_mod_mass('K.ACDCK.A'), 2 * 57.021 + 42.0106)
        types = sorted(d.mod_type.value for d in self.processor.mod_dict)
        self.assertEqual(types, [ModificationType.STATIC.value, ModificationType.TERMINAL_PEPTIDE_STATIC.value])

    def test_resolve_mod_masses(self):
        result = self.processor.new_result()
        result.set_peptide_sequence_with_mods('K.PEPTIDE.R')
        self.assertEqual(moda.resolve_mod_masses(result), [])
        self.assertEqual(result.modifications, [])
        self.assertEqual(result.peptide_with_mods, 'PEPTIDE')

    def test_adjacent_mass_offsets(self):
        result = self.processor.new_result()
        result.set_peptide_sequence_with_mods('K.M+15.995-17.027PEPK.A')
        self.assertEqual(moda.resolve_mod_masses(result), [])
        self.assertEqual([(m.residue, m.location) for m in result.modifications], [('M', 1), ('M', 1)])
        self.assertAlmostEqual(result.modifications[0].definition.mass, 15.995, places=3)
        self.assertAlmostEqual(result.modifications[1].definition.mass, -17.027, places=3)

    def test_malformed_mass_offset(self):
        result = self.processor.new_result()
        result.set_peptide_sequence_with_mods('K.M+-PEPK.A')
        self.assertEqual(moda.resolve_mod_masses(result), ['+', '-'])
        self.assertEqual(result.modifications, [])

    def test_assign_rank(self):
        group = [moda.MODaSearchResult() for i in range(3)]
        for r, p in zip(group, [0.5, 0.9, 0.5]):
            r.probability_num = p
        moda.assign_rank(group)
        self.assertEqual([r.rank_probability for r in group], [2, 1, 2])


class ProcessFileTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.paths = write_files(self.dir, {
            'moda_params.txt': moda_param_file,
            'QC_Shew_moda.id.txt': moda_results,
            'QC_Shew_mgf_IndexToScanMap.txt': moda_index_to_scan_map})
        self.processor = moda.MODaResultsProcessor(search_tool_parameter_file=self.paths['moda_params.txt'])
        self.assertTrue(self.processor.process_file(self.paths['QC_Shew_moda.id.txt']))

    def _rows(self, name):
        return read_rows(os.path.join(self.dir, name))

    def test_status(self):
        self.assertEqual(self.processor.error_code, ErrorCode.NO_ERROR)
        self.assertTrue(self.processor.error_message.startswith('Invalid Lines'))
        self.assertEqual(self.processor.warnings, [])

    def test_synopsis(self):
        rows = self._rows('QC_Shew_moda_syn.txt')
        self.assertEqual(rows[0], moda.SYN_COLUMNS)
        self.assertEqual(len(rows), 3)
        col = moda.SYN_COLUMNS.index
        first, second = rows[1], rows[2]
        self.assertEqual((first[col('ResultID')], first[col('Scan')], first[col('Probability')]),
                         ('1', '1234', '0.9876'))
        self.assertEqual(first[col('DelM')], '0.0011')
        self.assertEqual((second[col('ResultID')], second[col('Scan')], second[col('Rank_Probability')]),
                         ('2', '1240', '1'))
        self.assertEqual(second[col('Peptide')], 'K.M+16PEPTIDE.R')
        self.assertAlmostEqual(float(second[col('PrecursorMZ')]), 474.20553, places=4)

    def test_sequence_tables(self):
        rows = self._rows('QC_Shew_moda_syn_SeqInfo.txt')
        self.assertEqual([r[2] for r in rows[1:]], ['', 'Plus1Oxy:1'])
        rows = self._rows('QC_Shew_moda_syn_ModDetails.txt')
        self.assertEqual(rows[1:], [['2', 'Plus1Oxy', '1']])
        rows = self._rows('QC_Shew_moda_syn_SeqToProteinMap.txt')
        self.assertEqual([r[3] for r in rows[1:]], ['SO_0001', 'SO_0002'])
        rows = self._rows('QC_Shew_moda_syn_ModSummary.txt')
        self.assertEqual([(r[2], r[4], r[5]) for r in rows[1:]], [('<', 'Plus1Oxy', '1')])

    def test_missing_scan_map(self):
        os.remove(self.paths['QC_Shew_mgf_IndexToScanMap.txt'])
        with self.assertWarns(UserWarning):
            self.assertTrue(self.processor.process_file(self.paths['QC_Shew_moda.id.txt']))
        rows = self._rows('QC_Shew_moda_syn.txt')
        self.assertEqual([r[1] for r in rows[1:]], ['0', '0'])


if __name__ == '__main__':
    unittest.main()
