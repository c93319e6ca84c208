import unittest
import tempfile
import os

from os import path
import phrp
phrp.__path__ = [path.abspath(path.join(path.dirname(__file__), path.pardir, 'phrp'))]
from phrp import auxiliary as aux
from phrp import version


class UtilsTest(unittest.TestCase):
    def test_dbl_to_string(self):
        self.assertEqual(aux.dbl_to_string(1.5, 4), '1.5')
        self.assertEqual(aux.dbl_to_string(2.0, 3), '2')
        self.assertEqual(aux.dbl_to_string(0.123456, 4), '0.1235')
        self.assertEqual(aux.dbl_to_string(-0.00001, 3), '0')
        self.assertEqual(aux.dbl_to_string(-12.5, 0), '-12')

    def test_mass_error_to_string(self):
        self.assertEqual(aux.mass_error_to_string(0.0000001), '0')
        self.assertEqual(aux.mass_error_to_string(0.000051), '0.000051')
        self.assertEqual(aux.mass_error_to_string(-1.0023456), '-1.00235')

    def test_remove_extraneous_digits(self):
        self.assertEqual(aux.remove_extraneous_digits('0.0500'), '0.05')
        self.assertEqual(aux.remove_extraneous_digits('3.000'), '3')
        self.assertEqual(aux.remove_extraneous_digits('120'), '120')
        self.assertEqual(aux.remove_extraneous_digits(''), '')

    def test_numbers(self):
        self.assertTrue(aux.is_number('1e-5'))
        self.assertFalse(aux.is_number('abc'))
        self.assertFalse(aux.is_number(None))
        self.assertTrue(aux.is_integer(' 12 '))
        self.assertFalse(aux.is_integer('1.5'))
        self.assertEqual(aux.safe_int('x', -1), -1)
        self.assertEqual(aux.safe_float('2.5'), 2.5)

    def test_truncate_protein_name(self):
        self.assertEqual(aux.truncate_protein_name('SO_0001 Protein A'), 'SO_0001')
        self.assertEqual(aux.truncate_protein_name('SO_0002'), 'SO_0002')

    def test_memoize(self):
        calls = []

        @aux.memoize(2)
        def square(x):
            calls.append(x)
            return x * x
        self.assertEqual(square(3), 9)
        self.assertEqual(square(3), 9)
        self.assertEqual(calls, [3])
        square(4)
        square(5)
        square(3)
        self.assertEqual(calls, [3, 4, 5, 3])


class ErrorLogTest(unittest.TestCase):
    def test_add(self):
        log = aux.ErrorLog()
        self.assertFalse(log)
        log.add('Line 3: expected at least 15 columns')
        self.assertTrue(log)
        self.assertEqual(len(log), 1)
        self.assertEqual(str(log), 'Invalid Lines:\nLine 3: expected at least 15 columns')

    def test_cap(self):
        log = aux.ErrorLog(max_length=25)
        self.assertTrue(log.add('0123456789'))
        self.assertTrue(log.add('0123456789'))
        self.assertFalse(log.add('0123456789'))
        self.assertEqual(len(log), 2)
        self.assertEqual(log.dropped, 1)
        log.clear()
        self.assertEqual(len(log), 0)
        self.assertEqual(log.dropped, 0)

    def test_error(self):
        e = aux.PHRPError('Invalid cleavage rule', '[RK]')
        self.assertEqual(e.message, 'Invalid cleavage rule')
        self.assertIn('[RK]', str(e))


class TableWriterTest(unittest.TestCase):
    def setUp(self):
        self.dir = tempfile.mkdtemp()
        self.path = os.path.join(self.dir, 'table.txt')

    def test_write(self):
        with aux.TableWriter(self.path, ['A', 'B', 'C']) as writer:
            writer.write_row([1, 'x', 2.5])
            writer.write_row({'C': 'z', 'A': 2})
        self.assertEqual(writer.rows_written, 2)
        with open(self.path) as f:
            self.assertEqual(f.read(), 'A\tB\tC\n1\tx\t2.5\n2\t\tz\n')

    def test_file_object(self):
        with open(self.path, 'w') as f:
            writer = aux.TableWriter(f, ['A'])
            writer.write_row(['1'])
            writer.close()
            self.assertFalse(f.closed)
        with open(self.path) as f:
            self.assertEqual(f.read(), 'A\n1\n')

    def test_bad_path(self):
        with self.assertRaises(aux.PHRPError):
            aux.TableWriter(os.path.join(self.dir, 'missing', 'table.txt'), ['A'])

    def test_file_reader(self):
        with open(self.path, 'w') as f:
            f.write('a\nb\n')

        @aux._file_reader()
        def lines(source):
            for line in source:
                yield line.strip()
        with lines(self.path) as r:
            self.assertEqual(list(r), ['a', 'b'])
        with lines(source=self.path) as r:
            self.assertEqual(next(r), 'a')


class VersionTest(unittest.TestCase):
    def test_fields(self):
        self.assertEqual(tuple(version.VersionInfo('1.2.0')), ('1', '2', '0', None))
        self.assertEqual(version.VersionInfo('1.2.0dev3').releaselevel, 'dev3')

    def test_comparison(self):
        self.assertLess(version.VersionInfo('1.1.4'), version.VersionInfo('1.2.0'))
        self.assertTrue(version.version_info >= '1.0.0')
        self.assertEqual(version.VersionInfo('1.2'), '1.2.0')


if __name__ == '__main__':
    unittest.main()
