from os import path
import phrp
phrp.__path__ = [path.abspath(path.join(path.dirname(__file__), path.pardir, 'phrp'))]
import os
import tempfile
import unittest
import warnings
from phrp import processor
from phrp.auxiliary import ErrorCode, PHRPError
from phrp.modifications import ModificationType, ResidueTerminusState
from phrp.ranking import group_by_scan
from data import write_files

table = """\
Scan\tCharge\tPeptide\tScore
1\t2\tK.PEPTIDE.R\t10.5
1\t2\tK.PEPTIDEK.A\t8

2\t3\tR.M*PEPTIDER.-\t7
"""


class CountingProcessor(processor.ResultsProcessor):
    tool_name = 'Counting'

    def _process(self, input_path, output_dir):
        self.groups = []
        with processor.read_table(input_path) as rows:
            for group in group_by_scan(rows, lambda r: r['Scan'], self.should_abort):
                self.groups.append(group)
                self.report_progress('Reading', 50)
                if self.option('abort_after_first'):
                    self.abort_processing()
        if self.option('invalid_line'):
            self.error_log.add('Line 3 is invalid')
        if self.option('fail'):
            raise PHRPError('Cannot create output file')
        return True


class ReadTableTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.path = write_files(self.dir, {'table.txt': table})['table.txt']

    def test_read_table(self):
        with processor.read_table(self.path) as r:
            rows = list(r)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0], {'Scan': '1', 'Charge': '2', 'Peptide': 'K.PEPTIDE.R', 'Score': '10.5'})
        self.assertEqual(rows[2]['Peptide'], 'R.M*PEPTIDER.-')

    def test_missing_values(self):
        p = write_files(self.dir, {'short.txt': 'A\tB\tC\n1\n'})['short.txt']
        with processor.read_table(p) as r:
            self.assertEqual(list(r), [{'A': '1', 'B': '', 'C': ''}])

    def test_read_table_df(self):
        try:
            import pandas  # noqa: F401
        except ImportError:
            self.skipTest('pandas not installed')
        df = processor.read_table_df(self.path)
        self.assertEqual(df.shape, (3, 4))
        self.assertEqual(df['Score'].tolist(), [10.5, 8.0, 7.0])


class ResultsProcessorTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.path = write_files(self.dir, {'table.txt': table})['table.txt']

    def test_process(self):
        progress = []
        p = CountingProcessor(progress_callback=lambda d, pct: progress.append((d, pct)))
        self.assertTrue(p.process_file(self.path))
        self.assertEqual([len(g) for g in p.groups], [2, 1])
        self.assertEqual(p.error_code, ErrorCode.NO_ERROR)
        self.assertEqual(progress[-1], ('Processing complete', 100))
        self.assertEqual(progress[0], ('Reading', 50))

    def test_missing_input(self):
        p = CountingProcessor()
        self.assertFalse(p.process_file(os.path.join(self.dir, 'missing.txt')))
        self.assertEqual(p.error_code, ErrorCode.INVALID_INPUT_FILE_PATH)
        self.assertFalse(p.process_file(''))
        self.assertEqual(p.error_code, ErrorCode.INVALID_INPUT_FILE_PATH)

    def test_missing_mass_correction_tags(self):
        p = CountingProcessor(mass_correction_tags_file=os.path.join(self.dir, 'tags.txt'))
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter('always')
            self.assertTrue(p.process_file(self.path))
        self.assertEqual(p.error_code, ErrorCode.MASS_CORRECTION_TAGS_FILE_NOT_FOUND)
        self.assertEqual(len(p.warnings), 1)
        self.assertTrue(any('tags.txt' in str(x.message) for x in w))

    def test_invalid_lines_keep_earlier_message(self):
        p = CountingProcessor(mass_correction_tags_file=os.path.join(self.dir, 'tags.txt'), invalid_line=True)
        with warnings.catch_warnings():
            warnings.simplefilter('ignore')
            self.assertTrue(p.process_file(self.path))
        self.assertEqual(p.error_code, ErrorCode.MASS_CORRECTION_TAGS_FILE_NOT_FOUND)
        self.assertTrue(p.error_message.startswith('Mass correction tags file not found'))
        self.assertIn('Invalid Lines:\nLine 3 is invalid', p.error_message)

    def test_rejected_terminus_modification_logged(self):
        p = CountingProcessor()
        p.allow_duplicate_terminus_mods = False
        acetyl = p.mod_dict.verify_present(42.010565, '<', ModificationType.TERMINAL_PEPTIDE_STATIC)
        result = p.new_result()
        result.result_id = 7
        result.set_peptide_sequence_with_mods('K.PEPTIDE.R')
        result.add_modification(acetyl, 'P', 1, ResidueTerminusState.PEPTIDE_N)
        self.assertTrue(p.add_modifications_and_compute_mass(result))
        self.assertEqual(result.mod_count, 1)
        self.assertEqual(len(p.error_log), 1)
        self.assertIn('ResultID 7', p.error_log.messages[0])

    def test_bad_modification_definitions(self):
        defs = write_files(self.dir, {'mods.txt': '-\t0.997035\t-\tI\tIso_N15\n'})['mods.txt']
        p = CountingProcessor(modification_definitions_file=defs)
        self.assertFalse(p.process_file(self.path))
        self.assertEqual(p.error_code, ErrorCode.ERROR_READING_MODIFICATION_DEFINITIONS_FILE)

    def test_abort(self):
        p = CountingProcessor(abort_after_first=True)
        self.assertFalse(p.process_file(self.path))
        self.assertTrue(p.aborted)
        self.assertEqual(len(p.groups), 1)
        self.assertEqual(p.error_message, 'Processing aborted')

    def test_error(self):
        p = CountingProcessor(fail=True)
        self.assertFalse(p.process_file(self.path, os.path.join(self.dir, 'out')))
        self.assertEqual(p.error_code, ErrorCode.ERROR_CREATING_OUTPUT_FILES)
        self.assertTrue(os.path.isdir(os.path.join(self.dir, 'out')))

    def test_missing_pep_to_prot_map(self):
        p = CountingProcessor()
        with warnings.catch_warnings():
            warnings.simplefilter('ignore')
            table_map = p.load_pep_to_prot_map(os.path.join(self.dir, 'X_PepToProtMap.txt'))
        self.assertEqual(len(table_map), 0)
        self.assertEqual(len(p.warnings), 1)


if __name__ == '__main__':
    unittest.main()
