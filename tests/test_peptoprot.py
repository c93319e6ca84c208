from os import path
import phrp
phrp.__path__ = [path.abspath(path.join(path.dirname(__file__), path.pardir, 'phrp'))]
import os
import tempfile
import unittest
from phrp import peptoprot
from data import inspect_pep_to_prot_map, write_files


class PepToProtMapTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.paths = write_files(self.dir, {'X_inspect_PepToProtMap.txt': inspect_pep_to_prot_map})
        self.path = self.paths['X_inspect_PepToProtMap.txt']

    def test_read(self):
        with peptoprot.read(self.path) as r:
            entries = list(r)
        self.assertEqual(len(entries), 4)
        self.assertEqual(entries[0].peptide, 'K.LGSphosPEPTIDEK.A')
        self.assertIsInstance(entries[0].residue_start, int)

    def test_lookup(self):
        table = peptoprot.PepToProteinMap.from_file(self.path)
        self.assertEqual(len(table), 4)
        self.assertEqual(table.proteins('*.MPEPTIDER.G'), ['SO_0004', 'SO_0009'])
        self.assertEqual(table.lookup('K.NOTHERE.A'), [])

    def test_rewrite_and_write(self):
        table = peptoprot.PepToProteinMap.from_file(self.path)
        rewritten = table.rewrite(lambda p: p.replace('phos', '*'))
        self.assertEqual(rewritten.proteins('K.LGS*PEPTIDEK.A'), ['SO_0001'])
        out = os.path.join(self.dir, 'X_inspect_PepToProtMapMTS.txt')
        self.assertEqual(peptoprot.write(rewritten, out), 4)
        with open(out) as f:
            lines = f.read().splitlines()
        self.assertEqual(lines[0].split('\t'), peptoprot.COLUMNS)
        self.assertEqual(len(lines), 5)

    def test_map_file_path(self):
        self.assertEqual(peptoprot.map_file_path(os.path.join('d', 'X_inspect_syn.txt'), ('_syn', '_fht')),
                         os.path.join('d', 'X_inspect_PepToProtMap.txt'))
        self.assertEqual(peptoprot.map_file_path('X_inspect.txt'), 'X_inspect_PepToProtMap.txt')


if __name__ == '__main__':
    unittest.main()
