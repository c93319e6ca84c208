from enum import Enum, IntEnum


class PHRPError(Exception):
    """Exception raised for errors in the PHRP library.

    Attributes
    ----------
    message : str
        Error message.
    values : tuple
        Optional values related to the error.
    """

    def __init__(self, msg, *values):
        self.message = msg
        self.values = values

    def __str__(self):
        if not self.values:
            return "PHRP error, message: %s" % (repr(self.message),)
        else:
            return "PHRP error, message: %s %r" % (repr(self.message), self.values)


class ErrorCode(IntEnum):
    """Coarse status categories reported by the results processors."""
    NO_ERROR = 0
    INVALID_INPUT_FILE_PATH = 1
    INVALID_OUTPUT_DIRECTORY_PATH = 2
    PARAMETER_FILE_NOT_FOUND = 3
    MASS_CORRECTION_TAGS_FILE_NOT_FOUND = 4
    MODIFICATION_DEFINITION_FILE_NOT_FOUND = 5
    ERROR_READING_INPUT_FILE = 6
    ERROR_CREATING_OUTPUT_FILES = 7
    ERROR_READING_PARAMETER_FILE = 8
    ERROR_READING_MASS_CORRECTION_TAGS_FILE = 9
    ERROR_READING_MODIFICATION_DEFINITIONS_FILE = 10
    FILE_PATH_ERROR = 11
    UNSPECIFIED_ERROR = -1


class LineStatus(Enum):
    """Classification of a line of a delimited results file."""
    HEADER = 'header'
    DATA = 'data'
    INVALID = 'invalid'


class ErrorLog(object):
    """An append-only list of error messages with a cap on the total length.

    Once the combined length of the stored messages reaches `max_length`,
    further messages are dropped.

    Parameters
    ----------
    max_length : int, optional
        Maximum number of characters kept. Default is 4096.
    """
    def __init__(self, max_length=4096):
        self.max_length = max_length
        self.messages = []
        self._length = 0
        self.dropped = 0

    def add(self, message):
        """Append `message`. Returns :py:const:`False` if the log is full."""
        if self._length + len(message) > self.max_length:
            self.dropped += 1
            return False
        self.messages.append(message)
        self._length += len(message) + 1
        return True

    def clear(self):
        self.messages = []
        self._length = 0
        self.dropped = 0

    def __len__(self):
        return len(self.messages)

    def __bool__(self):
        return bool(self.messages)

    def __iter__(self):
        return iter(self.messages)

    def __str__(self):
        return 'Invalid Lines:\n' + '\n'.join(self.messages)
