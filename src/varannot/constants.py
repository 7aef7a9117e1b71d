"""
module responsible for small utility functions and constants used throughout the varannot package
"""
import re
from typing import Dict, List, Tuple

from Bio.Seq import Seq

PROGNAME: str = 'varannot'


class Namespace:
    """
    Namespace to hold module constants as class attributes

    Example:
        >>> class THING(Namespace):
        ...     A: str = 'a'
        >>> THING.values()
        ['a']
    """

    @classmethod
    def items(cls) -> List[Tuple[str, object]]:
        return [
            (attr, val)
            for attr, val in vars(cls).items()
            if not attr.startswith('_') and not callable(val) and not isinstance(val, classmethod)
        ]

    @classmethod
    def keys(cls) -> List[str]:
        return [attr for attr, _ in cls.items()]

    @classmethod
    def values(cls) -> List[object]:
        return [val for _, val in cls.items()]

    @classmethod
    def enforce(cls, value):
        """
        checks that the current value is a member of the namespace and returns it

        Raises:
            KeyError: the value is not a member of the namespace
        """
        if value not in cls.values():
            raise KeyError('value {0} is not a valid member of '.format(repr(value)), cls.values())
        return value


class STRAND(Namespace):
    """
    holds controlled vocabulary for allowed strand values

    Attributes:
        POS: the positive/forward strand
        NEG: the negative/reverse strand
    """

    POS: int = 1
    NEG: int = -1

    @classmethod
    def parse(cls, value) -> int:
        """
        cast the various strand notations found in input files to the integer strand

        Example:
            >>> STRAND.parse('-')
            -1
        """
        text = str(value).strip()
        if text in {'+', '1', '+1'}:
            return cls.POS
        elif text in {'-', '-1'}:
            return cls.NEG
        raise ValueError('unexpected strand value', value)


DNA_BASES: Tuple[str, ...] = ('A', 'C', 'G', 'T')
"""the bases a single-nucleotide substitution may have as reference or alternate allele"""

CHROMOSOMES: Tuple[str, ...] = tuple([str(i) for i in range(1, 23)] + ['X', 'Y', 'M'])
"""the chromosome labels a per-chromosome score directory may hold files for"""

EMPTY_ALLELE: str = '-'


class SCORE_DEFAULTS(Namespace):
    """
    default decoding parameters of the per-chromosome score files

    Attributes:
        PER_BP: number of bytes stored for each genomic position
        MIN: the score encoded by the byte value 0
        STEP: the score increment for each byte value
        SENTINEL: the byte value marking a position/substitution without a score
    """

    PER_BP: int = 3
    MIN: float = -1.5
    STEP: float = 0.01
    SENTINEL: int = 255


SCORE_LABEL: str = 'BayesDel'


class CLINVAR(Namespace):
    """
    field names and values used in matching records from the indexed clinical annotation files

    Attributes:
        PREFIX: default namespace prefix applied to all output field names
        VARIATION_TYPE: the INFO field holding the variant type of a record
        SIMPLE_TYPE: the variant type of simple (single partition) records
        HGVS_C: the INFO field holding the coding transcript HGVS notations
        HGVS_N: the INFO field holding the non-coding transcript HGVS notations
        TRANSCRIPT_MATCH: synthetic field flagging a match on the caller's HGVS transcript
        ADDITIONAL_VARIATION_TYPES: synthetic field listing the types of non-selected records
        MATCH: the value the transcript match flag is set to
    """

    PREFIX: str = 'ClinVar'
    VARIATION_TYPE: str = 'VARIATION_TYPE'
    SIMPLE_TYPE: str = 'Variant'
    HGVS_C: str = 'HGVS_C'
    HGVS_N: str = 'HGVS_N'
    TRANSCRIPT_MATCH: str = 'TRANSCRIPT_MATCH'
    ADDITIONAL_VARIATION_TYPES: str = 'ADDITIONAL_VARIATION_TYPES'
    MATCH: str = 'YES'


HGVS_DELIM: str = '|'
TYPES_DELIM: str = ';'


def normalize_chromosome(chrom: str) -> str:
    """
    convert a chromosome name to the label used for the per-chromosome score files

    Example:
        >>> normalize_chromosome('chrMT')
        'M'
        >>> normalize_chromosome('chr1')
        '1'
    """
    chrom = re.sub('^chr', '', str(chrom))
    if chrom == 'MT':
        return 'M'
    return chrom


def reverse_complement(s: str) -> str:
    """
    wrapper for the Bio.Seq reverse_complement method

    Args:
        s: the input DNA sequence

    Returns:
        str: the reverse complement of the input sequence

    Warning:
        assumes the input is a DNA sequence

    Example:
        >>> reverse_complement('ATCCGGT')
        'ACCGGAT'
    """
    input_string = str(s)
    if not re.match('^[A-Za-z]*$', input_string):
        raise ValueError('unexpected sequence format. cannot reverse complement', input_string)
    return str(Seq(input_string).reverse_complement())


def build_offset_table(per_bp: int = SCORE_DEFAULTS.PER_BP) -> Dict[str, Dict[str, int]]:
    """
    enumerate the byte offset of each substitution within the bytes stored for a position

    Only one byte per possible alternate base (3 per position) is supported. For any
    other number of bytes per position the table is empty

    Example:
        >>> build_offset_table()['A']
        {'C': 0, 'G': 1, 'T': 2}
    """
    offsets: Dict[str, Dict[str, int]] = {}
    if per_bp != len(DNA_BASES) - 1:
        return offsets
    for ref in DNA_BASES:
        alts = [alt for alt in DNA_BASES if alt != ref]
        offsets[ref] = {alt: offset for offset, alt in enumerate(alts)}
    return offsets
