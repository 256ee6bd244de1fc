from .compare import Config, DEFAULT_CONFIG, compare, equal
from .cycles import CycleGuard
from .formatting import ANSI, PLAIN, Formatter
from .introspect import DEFAULT_INTROSPECTOR, MISSING, Kind, TypeIntrospector
from .mismatches import (ComparisonCheckingError, ComparisonError, FuncMismatch, LengthMismatch, Mismatch,
    MismatchList, NilMismatch, StringMismatch, TypeMismatch, ValidityMismatch, ValueMismatch, ZeroMismatch)
from .path import ChannelNode, FieldNode, IndexNode, KeyNode, Path, PathNode, RootNode
from .string_diff import Diff, string_diff, trim

__all__ = ['Config', 'DEFAULT_CONFIG', 'compare', 'equal', 'CycleGuard', 'ANSI', 'PLAIN', 'Formatter',
    'DEFAULT_INTROSPECTOR', 'MISSING', 'Kind', 'TypeIntrospector', 'ComparisonCheckingError', 'ComparisonError',
    'FuncMismatch', 'LengthMismatch', 'Mismatch', 'MismatchList', 'NilMismatch', 'StringMismatch', 'TypeMismatch',
    'ValidityMismatch', 'ValueMismatch', 'ZeroMismatch', 'ChannelNode', 'FieldNode', 'IndexNode', 'KeyNode', 'Path',
    'PathNode', 'RootNode', 'Diff', 'string_diff', 'trim']
