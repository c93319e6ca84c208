import logging

from .structures import PHRPError, ErrorCode, LineStatus, ErrorLog

from .file_helpers import (
    _file_obj, FileReader, _file_reader, _file_writer, split_line, TableWriter)

from .utils import (
    memoize, is_number, is_integer, safe_int, safe_float, dbl_to_string, mass_error_to_string,
    remove_extraneous_digits, truncate_protein_name)

logging.getLogger('phrp').addHandler(logging.NullHandler())
