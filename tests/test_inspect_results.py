from os import path
import phrp
phrp.__path__ = [path.abspath(path.join(path.dirname(__file__), path.pardir, 'phrp'))]
import os
import tempfile
import unittest
from phrp import inspect_results as inspect
from phrp.auxiliary import LineStatus, ErrorCode, ErrorLog
from phrp.inspect_results import InspectModInfo, InspectModType
from phrp.modifications import ModificationType
from data import inspect_param_file, inspect_results, inspect_pep_to_prot_map, write_files


def read_rows(p):
    with open(p) as f:
        return [line.rstrip('\n').split('\t') for line in f]


class ParamFileTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.path = write_files(self.dir, {'inspect_params.txt': inspect_param_file})['inspect_params.txt']

    def test_read_param_file(self):
        mods = inspect.read_param_file(self.path)
        self.assertEqual([m.name for m in mods], ['phos', 'UnnamedMod1', 'UnnamedMod2'])
        self.assertEqual(mods[0].mass, '79.9663')
        self.assertEqual(mods[0].residues, 'STY')
        self.assertEqual([m.mod_type for m in mods],
                         [InspectModType.DYNAMIC, InspectModType.DYN_N_TERM_PEPTIDE, InspectModType.STATIC])
        self.assertTrue(all(m.symbol == inspect.UNKNOWN_MOD_SYMBOL for m in mods))

    def test_default_mod_info(self):
        mods = inspect.default_mod_info()
        self.assertEqual(len(mods), 1)
        self.assertEqual((mods[0].name, mods[0].residues), ('phos', 'STY'))

    def test_resolve_mods(self):
        p = inspect.InspectResultsProcessor(search_tool_parameter_file=self.path)
        p.load_mod_info()
        p.resolve_mods()
        self.assertEqual([m.symbol for m in p.mod_info], ['*', '#', inspect.UNKNOWN_MOD_SYMBOL])
        phos = p.mod_dict.lookup_by_symbol('*', 'Y')
        self.assertEqual(phos.tag, 'Phosph')
        self.assertEqual(phos.target_residues, 'STY')
        self.assertEqual(p.mod_dict.lookup_by_symbol('#', 'H', inspect.ResidueTerminusState.PEPTIDE_N).target_residues,
                         '<')
        statics = list(p.mod_dict.static_modifications())
        self.assertEqual(len(statics), 1)
        self.assertEqual(statics[0].tag, 'IodoAcet')
        self.assertEqual(statics[0].mod_type, ModificationType.STATIC)

    def test_missing_param_file(self):
        p = inspect.InspectResultsProcessor(search_tool_parameter_file=os.path.join(self.dir, 'missing.txt'))
        with self.assertWarns(UserWarning):
            mods = p.load_mod_info()
        self.assertEqual([m.name for m in mods], ['phos'])


class NotationTest(unittest.TestCase):
    def setUp(self):
        self.mod_info = [
            InspectModInfo('phos', '79.9663', 'STY', InspectModType.DYNAMIC, '*'),
            InspectModInfo('UnnamedMod1', '14', '*', InspectModType.DYN_N_TERM_PEPTIDE, '#'),
            InspectModInfo('', '17', '*', InspectModType.DYN_C_TERM_PEPTIDE, '@'),
            InspectModInfo('UnnamedMod2', '57.021464', 'C', InspectModType.STATIC),
        ]

    def test_replace_terminus(self):
        self.assertEqual(inspect.replace_terminus('*.MPEPTIDE.*'), '-.MPEPTIDE.-')
        self.assertEqual(inspect.replace_terminus('K.PEPTIDE.R'), 'K.PEPTIDE.R')
        self.assertEqual(inspect.replace_terminus('K.PEPTIDE.*'), 'K.PEPTIDE.-')

    def test_replace_mod_text(self):
        self.assertEqual(inspect.replace_mod_text_with_symbol('K.LGSphosPEPTIDEK.A', self.mod_info),
                         'K.LGS*PEPTIDEK.A')
        self.assertEqual(inspect.replace_mod_text_with_symbol('R.+14HVIFLAER.R', self.mod_info), 'R.#HVIFLAER.R')
        self.assertEqual(inspect.replace_mod_text_with_symbol('K.PEPTIDE+17.-', self.mod_info), 'K.PEPTIDE@.-')
        self.assertEqual(inspect.replace_mod_text_with_symbol('R.+20HVIFLAER.R', self.mod_info), 'R.+20HVIFLAER.R')
        self.assertEqual(inspect.replace_mod_text_with_symbol('PEPTphosIDE', self.mod_info), 'PEPT*IDE')

    def test_canonical_sequence_unchanged(self):
        for peptide in ('K.LGS*PEPT#IDE@.-', 'R.#HVIFLAER.R', 'PEPT*IDE', '-.MPEPTIDER.G'):
            self.assertEqual(inspect.replace_mod_text_with_symbol(peptide, self.mod_info), peptide)
        for peptide in ('K.LGSphosPEPTIDEK.A', 'R.+14HVIFLAER.R', 'K.PEPTIDE+17.-', 'R.+20HVIFLAER.R'):
            once = inspect.replace_mod_text_with_symbol(peptide, self.mod_info)
            self.assertEqual(inspect.replace_mod_text_with_symbol(once, self.mod_info), once)

    def test_scan_from_dta_name(self):
        self.assertEqual(inspect.scan_from_dta_name('QC_Shew.102.102.2.dta'), '102')
        self.assertEqual(inspect.scan_from_dta_name('QC_Shew.mzXML'), '')


class ParseLineTest(unittest.TestCase):
    def setUp(self):
        self.lines = [line for line in inspect_results.split('\n') if line]

    def test_header(self):
        self.assertEqual(inspect.parse_results_line(self.lines[0], 0), (LineStatus.HEADER, None))

    def test_data(self):
        mods = [InspectModInfo('phos', '79.9663', 'STY', InspectModType.DYNAMIC, '*')]
        status, r = inspect.parse_results_line(self.lines[1], 1, mods)
        self.assertEqual(status, LineStatus.DATA)
        self.assertEqual(r.scan, '100')
        self.assertEqual(r.peptide_annotation, 'K.LGS*PEPTIDEK.A')
        self.assertEqual(r.protein, 'SO_0001')
        self.assertEqual(r.charge_num, 2)
        self.assertEqual(r.p_value, '0.01')
        self.assertEqual(r.fraction_y, '0.5')
        self.assertAlmostEqual(r.mh, 999.4727, places=3)
        self.assertEqual(r.to_row(1)[0], 1)
        self.assertEqual(len(r.to_row(1)), len(inspect.SYN_COLUMNS))

    def test_dta_scan(self):
        status, r = inspect.parse_results_line(self.lines[5], 5)
        self.assertEqual(status, LineStatus.DATA)
        self.assertEqual(r.scan, '102')
        self.assertEqual(r.peptide_annotation, '-.MPEPTIDER.G')

    def test_empty_scan_uses_dta_name(self):
        fields = self.lines[5].split('\t')
        fields[0], fields[1] = 'Data.300.300.2.dta', ''
        status, r = inspect.parse_results_line('\t'.join(fields), 5)
        self.assertEqual(status, LineStatus.DATA)
        self.assertEqual((r.scan, r.scan_num), ('300', 300))

    def test_invalid(self):
        self.assertEqual(inspect.parse_results_line(self.lines[4], 4), (LineStatus.INVALID, None))

    def test_short_line(self):
        fields = self.lines[1].split('\t')[:20]
        status, r = inspect.parse_results_line('\t'.join(fields), 1)
        self.assertEqual(status, LineStatus.DATA)
        self.assertEqual((r.precursor_mz, r.precursor_error, r.del_m_ppm), ('0', '0', '0'))

    def test_read(self):
        log = ErrorLog()
        with inspect.read(write_files(tempfile.mkdtemp(), {'x.txt': inspect_results})['x.txt'],
                          error_log=log) as r:
            records = list(r)
        self.assertEqual(len(records), 4)
        self.assertEqual(len(log), 1)
        self.assertIn('Line 5', log.messages[0])


class RankTest(unittest.TestCase):
    def test_assign_rank(self):
        lines = [line for line in inspect_results.split('\n') if line]
        group = [inspect.parse_results_line(lines[i], i)[1] for i in (1, 2, 3)]
        inspect.assign_rank_and_delta_norm_values(group)
        self.assertEqual([r.rank_total_prm_score for r in group], [1, 1, 1])
        self.assertEqual([r.rank_f_score for r in group], [1, 2, 1])
        self.assertAlmostEqual(group[0].delta_norm_mq_score, 0.4)
        self.assertEqual(group[0].delta_norm_total_prm_score, 0.0)


class ProcessFileTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.out = os.path.join(self.dir, 'out')
        self.paths = write_files(self.dir, {
            'QC_Shew_inspect.txt': inspect_results,
            'QC_Shew_inspect_PepToProtMap.txt': inspect_pep_to_prot_map,
            'inspect_params.txt': inspect_param_file})
        self.processor = inspect.InspectResultsProcessor(
            search_tool_parameter_file=self.paths['inspect_params.txt'])
        self.assertTrue(self.processor.process_file(self.paths['QC_Shew_inspect.txt'], self.out))

    def _rows(self, name):
        return read_rows(os.path.join(self.out, name))

    def test_status(self):
        self.assertEqual(self.processor.error_code, ErrorCode.NO_ERROR)
        self.assertTrue(self.processor.error_message.startswith('Invalid Lines'))
        self.assertFalse(self.processor.aborted)

    def test_synopsis(self):
        rows = self._rows('QC_Shew_inspect_syn.txt')
        self.assertEqual(rows[0], inspect.SYN_COLUMNS)
        self.assertEqual([r[2] for r in rows[1:]], ['-.MPEPTIDER.G', 'K.LGS*PEPTIDEK.A', 'K.LGSPEPTIDEK.A'])
        self.assertEqual([r[0] for r in rows[1:]], ['1', '2', '3'])
        self.assertEqual(rows[1][1], '102')
        col = inspect.SYN_COLUMNS.index
        self.assertEqual([r[col('RankTotalPRMScore')] for r in rows[1:]], ['1', '1', '1'])
        self.assertEqual([r[col('RankFScore')] for r in rows[1:]], ['1', '1', '2'])

    def test_first_hits(self):
        rows = self._rows('QC_Shew_inspect_fht.txt')
        self.assertEqual([r[2] for r in rows[1:]], ['-.MPEPTIDER.G', 'K.LGS*PEPTIDEK.A', 'R.#HVIFLAER.R'])
        rows = self._rows('QC_Shew_inspect_Fscore_fht.txt')
        self.assertEqual(len(rows), 4)

    def test_sequence_tables(self):
        rows = self._rows('QC_Shew_inspect_syn_SeqInfo.txt')
        self.assertEqual([r[2] for r in rows[1:]], ['', 'Phosph:3', ''])
        rows = self._rows('QC_Shew_inspect_syn_ResultToSeqMap.txt')
        self.assertEqual(rows[1:], [['1', '1'], ['2', '2'], ['3', '3']])
        rows = self._rows('QC_Shew_inspect_syn_ModDetails.txt')
        self.assertEqual(rows[1:], [['2', 'Phosph', '3']])
        rows = self._rows('QC_Shew_inspect_syn_SeqToProteinMap.txt')
        self.assertEqual([(r[0], r[3]) for r in rows[1:]],
                         [('1', 'SO_0004'), ('1', 'SO_0009'), ('2', 'SO_0001'), ('3', 'SO_0002')])
        self.assertEqual(rows[1][1:3], ['2', '1'])

    def test_mod_summary(self):
        rows = self._rows('QC_Shew_inspect_syn_ModSummary.txt')
        self.assertEqual([(r[0], r[4], r[5]) for r in rows[1:]], [('*', 'Phosph', '1'), ('-', 'IodoAcet', '0')])

    def test_mts_map(self):
        rows = self._rows('QC_Shew_inspect_PepToProtMapMTS.txt')
        self.assertEqual(len(rows), 5)
        self.assertIn('-.MPEPTIDER.G', [r[0] for r in rows])
        self.assertIn('K.LGS*PEPTIDEK.A', [r[0] for r in rows])


if __name__ == '__main__':
    unittest.main()
