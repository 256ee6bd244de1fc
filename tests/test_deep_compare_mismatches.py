"""
Tests for the deep_compare.mismatches, deep_compare.path and deep_compare.formatting files: how mismatches read.
"""

import queue
import re
import numpy as np
from dataclasses import dataclass, field
from deep_compare.compare import compare
from deep_compare.formatting import ANSI, CYAN, GOT_DIFF, PLAIN, RED, RESET, WANT_DIFF, Formatter, limit_str
from deep_compare.mismatches import ComparisonError, LengthMismatch, MismatchList, ValueMismatch
from deep_compare.path import ChannelNode, FieldNode, IndexNode, KeyNode, Path, RootNode


@dataclass
class Tagged:
    f1: str = field(default='', metadata={'cmp': '-'})
    f2: str = field(default='', metadata={'cmp': '+'})


@dataclass
class Author:
    FirstName: str


@dataclass
class Book:
    Authors: list


def _fn():
    pass


_ANSI_RE = re.compile(r'\033\[\d+m')


def _line(got, want, **kwargs):
    mismatches = compare(got, want, **kwargs)
    assert len(mismatches) == 1, str(mismatches)
    return str(mismatches[0])


def test_lines():
    """Tests the line of every kind of mismatch"""
    assert _line(1, 2) == '(int): Value mismatch; got=1, want=2'
    assert _line(None, 1) == '(int): Validity mismatch; got=INVALID, want=VALID'
    assert _line(1, None) == '<None>: Validity mismatch; got=VALID, want=INVALID'
    assert _line(1, 1.0) == '(float): Type mismatch; got=int, want=float'
    assert _line(np.array(1.0), np.array([1.0])) == \
        '(ndarray[float64]): Type mismatch; got=0-d ndarray[float64], want=1-d ndarray[float64]'
    assert _line(np.zeros(1), np.zeros(1, dtype=np.int64)) == \
        '(ndarray[int64]): Type mismatch; got=ndarray[float64], want=ndarray[int64]'
    assert _line([1, 2, 3], [1, 2]) == '(list): Length mismatch; got=3, want=2, container=list'
    assert _line(_fn, _fn) == '(function): Func mismatch; got=_fn, want=_fn, can only match if both are None'
    assert _line([1], [2], ignore_array_order=True) == '(list)[0]: Nil mismatch; got=<nil>, want=2'
    assert _line({'a': 1}, {'a': 2}) == "(dict)['a']: Value mismatch; got=1, want=2"
    assert _line('abc', 'adc') == '(str): String mismatch; got="abc", want="adc", differs at bytes [1:2]'
    assert _line(Tagged(f2='foo'), Tagged(f2=''), observe_field_tag='cmp') == \
        '(Tagged).f2: Zero mismatch; got=<non-zero>, want=<zero>, both values must be either zero or non-zero'


def test_paths():
    """Paths read from the root down to the mismatch"""
    path = Path.root('Book').add(FieldNode('Authors')).add(IndexNode(0)).add(FieldNode('FirstName'))
    assert str(path) == '(Book).Authors[0].FirstName'
    assert len(path) == 4
    assert list(path)[0] == RootNode('Book')

    assert str(Path.root(None)) == '<None>'
    assert str(Path.root('dict').add(KeyNode('k'))) == "(dict)['k']"
    assert str(Path.root('Queue').add(ChannelNode(1))) == '(Queue)[1]'
    assert str(Path()) == ''

    # Adding never changes the original path
    root = Path.root('list')
    child = root.add(IndexNode(3))
    assert len(root) == 1 and len(child) == 2
    assert child == Path.root('list').add(IndexNode(3))
    assert hash(child) == hash(Path.root('list').add(IndexNode(3)))

    got = Book([Author('Haruki')])
    want = Book([Author('Kafka')])
    assert str(compare(got, want)[0].path) == '(Book).Authors[0].FirstName'


def test_mismatch_list():
    """Tests the collection of mismatches"""
    mismatches = compare({'a': 1, 'b': 'x', 'c': [1]}, {'a': 2, 'b': 'y', 'c': [1, 2]})
    assert isinstance(mismatches, MismatchList)
    assert mismatches.kinds() == ['Value', 'String', 'Length']
    assert str(mismatches) == '\n'.join(str(m) for m in mismatches)
    assert len(str(mismatches).splitlines()) == 3
    assert isinstance(mismatches[0], ValueMismatch)
    assert not hasattr(mismatches, 'remove')

    empty = compare([1], [1])
    assert len(empty) == 0 and not empty
    assert str(empty) == ''
    empty.raise_if_any()

    try:
        mismatches.raise_if_any()
    except ComparisonError as e:
        assert e.mismatches is mismatches
        assert '3 mismatches' in str(e)
    else:
        raise AssertionError("raise_if_any() did not raise")


def test_colors():
    """Colors are decoration only, stripping them gives back the plain message"""
    assert Formatter() == PLAIN
    assert not PLAIN.color and ANSI.color
    assert PLAIN.got('x') == 'x'
    assert ANSI.got('x') == RED + 'x' + RESET
    assert ANSI.want('x') == CYAN + 'x' + RESET

    pairs = [(1, 2), (None, 1), (1, None), ([1, 2, 3], [1, 2]), ('abc', 'adc'), ('hello world', 'hello world!!'),
        ('日木語', '日本語'), ({'a': [1]}, {'a': [2]})]
    for got, want in pairs:
        mismatches = compare(got, want)
        colored = mismatches.render(ANSI)
        assert colored != mismatches.render(PLAIN)
        assert _ANSI_RE.sub('', colored) == mismatches.render(PLAIN)
        assert mismatches.render(PLAIN) == str(mismatches)


def test_string_highlight():
    """The differing part of strings is highlighted"""
    line = compare('abc', 'adc')[0].render(ANSI)
    assert GOT_DIFF + 'b' + RESET in line
    assert WANT_DIFF + 'd' + RESET in line

    # The extra tail of the longer string is highlighted
    line = compare('hello world', 'hello world!!')[0].render(ANSI)
    assert WANT_DIFF + '!!' + RESET in line
    assert 'differs at bytes [11:11]' in line

    line = str(compare('日木語', '日本語')[0])
    assert line == '(str): String mismatch; got="日木語", want="日本語", differs at bytes [3:6]'


def test_long_strings():
    """Very long strings are cut down around the difference"""
    got, want = 'a' * 2000 + 'b', 'a' * 2000 + 'c'
    line = str(compare(got, want)[0])
    assert 'got="...' + 'a' * 999 + 'b"' in line
    assert 'want="...' + 'a' * 999 + 'c"' in line

    assert limit_str('a' * 10, limit=5) == "'aaaa..."
    assert limit_str('abc') == "'abc'"


def test_length_of_drained_queue():
    """Lengths are recorded when the mismatch is found"""
    got, want = queue.Queue(), queue.Queue()
    got.put(1)
    want.put(1)
    want.put(2)

    mismatch = compare(got, want)[0]
    assert isinstance(mismatch, LengthMismatch)
    want.get_nowait()
    assert (mismatch.got_len, mismatch.want_len) == (1, 2)
    assert str(mismatch) == '(Queue): Length mismatch; got=1, want=2, container=Queue'
