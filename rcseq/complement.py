"""
Reverse complement of a single nucleotide sequence.

Each worker owns one IndexedSequence until it is handed back on the result queue.
"""

import string
from types import MappingProxyType

from rcseq import utils

logger = utils.get_logger(__name__)

# complementary nucleotides including some ambiguity codes
COMPLEMENT_TABLE = MappingProxyType(
    {
        "A": "T",
        "C": "G",
        "G": "C",
        "T": "A",
        "N": "N",
        "-": "-",
        "W": "W",
        "S": "S",
    }
)

_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)


class MissingInputError(ValueError):
    def __init__(self):
        super().__init__("Must supply at least one sequence as an argument")


class InvalidCharacterError(ValueError):
    def __init__(self, char: str, index=None):
        self.char = char
        self.index = index
        super().__init__(f"No complementary nucleotide for character {char}")


class IndexedSequence:
    """A sequence tagged with its 0-based position in the input list."""

    __slots__ = ("index", "sequence", "error")

    def __init__(self, index: int, sequence: str):
        self.index = index
        self.sequence = sequence
        self.error = None

    def __repr__(self):
        return f"IndexedSequence(index={self.index!r}, sequence={self.sequence!r})"


def normalize(seq: str) -> str:
    """Uppercase ASCII letters and trim surrounding whitespace. Other characters are left as they are.

    >>> normalize("  gattaca\\n")
    'GATTACA'
    """
    return seq.translate(_ASCII_UPPER).strip()


def reverse_complement(seq: str, table=COMPLEMENT_TABLE) -> str:
    """Returns the reverse complement of a nucleotide sequence.

    >>> reverse_complement("GATTACA")
    'TGTAATC'
    >>> reverse_complement(" acgt ")
    'ACGT'
    >>> reverse_complement("NNWS")
    'SWNN'
    >>> reverse_complement("ACXT")
    Traceback (most recent call last):
    ...
    rcseq.complement.InvalidCharacterError: No complementary nucleotide for character X
    """
    seq = normalize(seq)
    comp = []
    for i in range(len(seq) - 1, -1, -1):
        c = seq[i]
        if c not in table:
            raise InvalidCharacterError(c)
        comp.append(table[c])
    return "".join(comp)


def complement_worker(item: IndexedSequence, results, barrier, table=COMPLEMENT_TABLE):
    """
    Replace item.sequence with its reverse complement and put item on results.

    On failure the exception is stored on item.error instead of item.sequence being changed.
    barrier.done() is called exactly once whatever happens.
    """
    try:
        try:
            item.sequence = reverse_complement(item.sequence, table)
        except InvalidCharacterError as e:
            e.index = item.index
            item.error = e
        except Exception as e:
            logger.debug("worker %d failed: %r", item.index, e)
            item.error = e
        results.put(item)
    finally:
        barrier.done()
