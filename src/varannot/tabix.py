"""
region queries against bgzipped, tabix-indexed text files
"""
import re
from typing import Dict, Iterable, List, Optional

import pysam

from .error import ConfigurationError
from .util import logger

INFO_HEADER_PATTERN = re.compile(
    r'^##INFO=<ID=(?P<id>.*?),Number=(?P<number>.*?),Type=(?P<type>.*?),Description="(?P<description>.*?)".*>$'
)


def parse_info_fields(lines: Iterable[str]) -> Dict[str, str]:
    """
    collect the INFO field definitions from the meta-information lines of a VCF

    Lines which are not well-formed INFO definitions are ignored

    Returns:
        the field descriptions keyed by the field ID, in the order they were declared

    Example:
        >>> parse_info_fields(['##INFO=<ID=AF,Number=A,Type=Float,Description="Allele Frequency">'])
        {'AF': 'Allele Frequency'}
    """
    fields: Dict[str, str] = {}
    for line in lines:
        match = INFO_HEADER_PATTERN.match(line.strip())
        if not match:
            continue
        fields[match.group('id')] = match.group('description')
    return fields


class IndexedSource:
    """
    interface to a positionally indexed text file
    """

    def __init__(self, filename: str):
        self.filename = filename

    def header(self) -> List[str]:
        """
        Returns:
            the header (meta-information) lines of the file
        """
        raise NotImplementedError('abstract method')

    def query_region(self, chromosome: str, start: int, end: int) -> Iterable[str]:
        """
        Args:
            chromosome: the chromosome name
            start: the 1-based start of the region (inclusive)
            end: the 1-based end of the region (inclusive)

        Returns:
            the raw lines of the records overlapping the region
        """
        raise NotImplementedError('abstract method')

    def close(self):
        pass


class TabixSource(IndexedSource):
    """
    indexed source backed by a bgzipped file and its tabix (.tbi or .csi) index

    Raises:
        ConfigurationError: the file or its index cannot be opened
    """

    def __init__(self, filename: str):
        IndexedSource.__init__(self, filename)
        try:
            self.fh = pysam.TabixFile(filename)
        except (OSError, ValueError) as err:
            raise ConfigurationError(f'Could not open tabix indexed file {filename}: {err}')
        self.contigs = set(self.fh.contigs)

    def header(self) -> List[str]:
        return list(self.fh.header)

    def resolve_contig(self, chromosome: str) -> Optional[str]:
        """
        find the name the file uses for a given chromosome, allowing for chr prefixes and MT/M

        Example:
            >>> source.contigs
            {'chr1', 'chrM'}
            >>> source.resolve_contig('MT')
            'chrM'
        """
        chrom = re.sub('^chr', '', chromosome)
        alternatives = [chromosome, chrom, 'chr' + chrom]
        if chrom in {'M', 'MT'}:
            alternatives.extend(['MT', 'M', 'chrM', 'chrMT'])
        for name in alternatives:
            if name in self.contigs:
                return name
        return None

    def query_region(self, chromosome: str, start: int, end: int) -> Iterable[str]:
        contig = self.resolve_contig(chromosome)
        if contig is None:
            logger.debug(f'{chromosome} is not indexed in {self.filename}')
            return []
        # pysam uses 0-based half-open coordinates
        return list(self.fh.fetch(contig, max(0, start - 1), max(0, end)))

    def close(self):
        self.fh.close()
