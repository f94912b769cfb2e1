import pytest

from dfakit import __version__, versionstring
from dfakit.util import make_binary_tree, now


def test_binary_tree():
    assert make_binary_tree(lambda a, b: (a, b), [1]) == 1
    assert make_binary_tree(lambda a, b: (a, b), [1, 2, 3]) == (1, (2, 3))
    assert make_binary_tree(lambda a, b: (a, b), [1, 2, 3, 4]) == ((1, 2), (3, 4))
    with pytest.raises(ValueError):
        make_binary_tree(lambda a, b: (a, b), [])


def test_now():
    t = now()
    assert now() >= t


def test_versionstring():
    assert versionstring() == ".".join(str(n) for n in __version__[:3])
    assert versionstring(build=False) == ".".join(str(n) for n in __version__[:2])
