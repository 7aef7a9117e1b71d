from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from .constants import STRAND
from .util import logger, soft_cast

REQUIRED_COLUMNS = ['chr', 'pos', 'ref', 'alt']


@dataclass
class Variant:
    """
    a single variant allele to be annotated

    Attributes:
        chromosome: the chromosome name
        start: the 1-based start position
        ref: the reference allele
        alt: the alternate allele being queried
        end: the 1-based end position, defaults to the start position
        strand: the strand the alleles are given on (1 or -1)
        hgvs_transcript: the HGVS transcript notation of the allele, if known
    """

    chromosome: str
    start: int
    ref: str
    alt: str
    end: Optional[int] = None
    strand: int = STRAND.POS
    hgvs_transcript: Optional[str] = None

    def __post_init__(self):
        if self.end is None:
            self.end = self.start
        STRAND.enforce(self.strand)


def read_variants(filename: str) -> List[Variant]:
    """
    reads a tab-delimited file of variants. The header must contain the following columns

    - chr: the chromosome
    - pos: the 1-based start position
    - ref: the reference allele
    - alt: the alternate allele

    and may contain the optional columns end, strand (+/-) and hgvs_transcript

    Raises:
        KeyError: a required column is missing
    """
    df = pd.read_csv(filename, sep='\t', dtype=str, keep_default_na=False)
    df = df.rename(columns={df.columns[0]: df.columns[0].replace('#', '')})
    for col in REQUIRED_COLUMNS:
        if col not in df:
            raise KeyError(f'missing required column ({col})')

    variants = []
    for row in df.to_dict('records'):
        variants.append(
            Variant(
                chromosome=row['chr'],
                start=int(row['pos']),
                ref=row['ref'].upper(),
                alt=row['alt'].upper(),
                end=soft_cast(row.get('end'), int),
                strand=STRAND.parse(row.get('strand') or '+'),
                hgvs_transcript=row.get('hgvs_transcript') or None,
            )
        )
    logger.info(f'loaded {len(variants)} variants from {filename}')
    return variants
