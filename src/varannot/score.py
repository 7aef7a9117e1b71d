"""
direct-addressed lookup of precomputed substitution scores (BayesDel format)

Scores are stored in one binary file per chromosome, named after the chromosome
label (1-22, X, Y, M). Each 1-based genomic position holds ``per_bp`` contiguous bytes,
one for each possible alternate base. A byte value is a quantized score
(``value * step + min``) and the sentinel value marks a missing score.
"""
import atexit
import os
import threading
from dataclasses import dataclass
from typing import BinaryIO, Dict, List, Optional

from .constants import (
    CHROMOSOMES,
    DNA_BASES,
    SCORE_DEFAULTS,
    SCORE_LABEL,
    STRAND,
    build_offset_table,
    normalize_chromosome,
    reverse_complement,
)
from .error import ConfigurationError
from .util import logger
from .variant import Variant


@dataclass(frozen=True)
class DecodeParams:
    per_bp: int = SCORE_DEFAULTS.PER_BP
    min: float = SCORE_DEFAULTS.MIN
    step: float = SCORE_DEFAULTS.STEP
    sentinel: int = SCORE_DEFAULTS.SENTINEL

    def decode(self, value: int) -> Optional[float]:
        """
        convert a stored byte value to a score, None for the sentinel value

        Example:
            >>> DecodeParams().decode(0)
            -1.5
        """
        if value == self.sentinel:
            return None
        return value * self.step + self.min


class ChromosomeHandle:
    """
    binary file handle for a single chromosome. Seek and read share the file cursor so they
    are done under a lock
    """

    def __init__(self, chromosome: str, path: str):
        self.chromosome = chromosome
        self.path = path
        self.lock = threading.Lock()
        self.fh: BinaryIO = open(path, 'rb')

    def read_byte(self, offset: int) -> Optional[int]:
        """
        Returns:
            the byte value at the given offset from the start of the file or None if it cannot be read
        """
        with self.lock:
            try:
                self.fh.seek(offset, os.SEEK_SET)
                buf = self.fh.read(1)
            except (OSError, ValueError) as err:
                logger.debug(f'could not read offset {offset} from {self.path}: {err}')
                return None
        if len(buf) != 1:
            return None
        return buf[0]

    def close(self):
        self.fh.close()


def validate_offset_table(offsets: Dict[str, Dict[str, int]], per_bp: int):
    """
    check that a substitution offset table lists each alternate base of each reference base
    at a distinct offset within the bytes of a position

    Raises:
        ConfigurationError: the table is empty or malformed
    """
    if not offsets:
        raise ConfigurationError(f'Could not retrieve offset values with per_bp={per_bp}')
    if not set(offsets) <= set(DNA_BASES):
        raise ConfigurationError(
            f'offset table reference bases must be one of {DNA_BASES}. Given: {sorted(offsets)}'
        )
    for ref, alts in offsets.items():
        if ref in alts or not set(alts) <= set(DNA_BASES):
            raise ConfigurationError(f'invalid alternate bases for reference {ref}: {sorted(alts)}')
        if sorted(alts.values()) != list(range(per_bp)):
            raise ConfigurationError(
                f'offsets for reference {ref} must be a permutation of 0..{per_bp - 1}. Given: {alts}'
            )


class OffsetScoreStore:
    """
    Scores single-nucleotide substitutions from a directory of per-chromosome binary files

    Attributes:
        directory: the directory holding the score files
        params: the decoding parameters
        offsets: the substitution offset table (reference base => alternate base => offset)
        handles: the open file handle of each chromosome with a score file
        label: the name of the output field
    """

    def __init__(
        self,
        directory: str,
        per_bp: int = SCORE_DEFAULTS.PER_BP,
        min_score: float = SCORE_DEFAULTS.MIN,
        step: float = SCORE_DEFAULTS.STEP,
        sentinel: int = SCORE_DEFAULTS.SENTINEL,
        offsets: Optional[Dict[str, Dict[str, int]]] = None,
        label: str = SCORE_LABEL,
    ):
        if not directory:
            raise ConfigurationError(f'{label} directory not specified')
        if not os.path.isdir(directory):
            raise ConfigurationError(f'{label} directory not found: {directory}')
        if step <= 0:
            raise ConfigurationError(f'score step must be a positive number. Given: {step}')

        self.directory = directory
        self.label = label
        self.params = DecodeParams(per_bp=per_bp, min=min_score, step=step, sentinel=sentinel)

        if offsets is None:
            offsets = build_offset_table(per_bp)
        validate_offset_table(offsets, per_bp)
        self.offsets = {ref: dict(alts) for ref, alts in offsets.items()}

        self.handles: Dict[str, ChromosomeHandle] = {}
        for chrom in CHROMOSOMES:
            path = os.path.join(directory, chrom)
            if not os.path.exists(path):
                continue
            try:
                self.handles[chrom] = ChromosomeHandle(chrom, path)
            except OSError as err:
                self.close()
                raise ConfigurationError(f'Could not open file {path}: {err}')

        if not self.handles:
            logger.warning(f'no chromosome score files found in {directory}')
        else:
            logger.info(f'opened {len(self.handles)} {label} score files from {directory}')
            logger.debug(f'chromosomes: {", ".join(self.handles)}')
        atexit.register(self.close)  # makes the files 'auto close' on normal python exit

    @property
    def chromosomes(self) -> List[str]:
        return list(self.handles)

    def header_info(self) -> Dict[str, str]:
        return {self.label: f'{self.label} score'}

    def offset(self, position: int, ref: str, alt: str) -> Optional[int]:
        """
        Returns:
            the byte offset of the substitution ref>alt at a given 1-based position, or None if
            the substitution is not in the offset table
        """
        alt_offset = self.offsets.get(ref, {}).get(alt)
        if alt_offset is None or position < 1:
            return None
        return (position - 1) * self.params.per_bp + alt_offset

    def lookup_score(self, variant: Variant) -> Optional[float]:
        """
        Returns:
            the score of the variant or None if the variant is not a scored substitution
        """
        if variant.start != variant.end:
            return None

        allele = variant.alt
        if variant.strand == STRAND.NEG:
            try:
                allele = reverse_complement(allele)
            except ValueError:
                return None
        if allele not in DNA_BASES:
            return None

        handle = self.handles.get(normalize_chromosome(variant.chromosome))
        if handle is None:
            return None

        offset = self.offset(variant.start, variant.ref, allele)
        if offset is None:
            return None

        value = handle.read_byte(offset)
        if value is None:
            logger.debug(f'no {self.label} byte at {handle.chromosome}:{variant.start} (offset {offset})')
            return None
        return self.params.decode(value)

    def annotate(self, variant: Variant) -> Dict[str, float]:
        score = self.lookup_score(variant)
        if score is None:
            return {}
        return {self.label: score}

    def close(self):
        for handle in self.handles.values():
            handle.close()

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        self.close()
