"""
matching of variants against clinical annotation records (ClinVar format) held in indexed VCF files

The annotation data may be split into two partitions of the same dataset: a file of simple
(single-variant) records and a file of records that are part of complex/multi variants.
Records are matched on their exact coordinates and alternate allele. When several records
match, simple records take priority and the variation types of the remaining records are
reported in an additional field.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from .constants import CLINVAR, EMPTY_ALLELE, HGVS_DELIM, TYPES_DELIM, Namespace
from .error import ConfigurationError
from .tabix import IndexedSource, TabixSource, parse_info_fields
from .util import logger
from .variant import Variant

VCF_MIN_COLUMNS = 8
VCF_INFO_COLUMN = 7


class SourcePartition(Namespace):
    """
    the partitions an annotation dataset may be split into

    Attributes:
        SINGLE: records of simple variants (required)
        MULTI: records belonging to complex variants (optional)
    """

    SINGLE: str = 'single'
    MULTI: str = 'multi'


@dataclass
class Record:
    """
    an annotation record with coordinates and alleles in Ensembl convention (1-based, inclusive,
    shared leading base removed and '-' for an empty allele)
    """

    chromosome: str
    start: int
    end: int
    ref: str
    alt: str
    fields: Dict[str, str] = field(default_factory=dict)

    @property
    def variant_type(self) -> Optional[str]:
        return self.fields.get(CLINVAR.VARIATION_TYPE)

    def is_simple(self) -> bool:
        return self.variant_type == CLINVAR.SIMPLE_TYPE

    def hgvs_transcripts(self) -> Set[str]:
        """
        Returns:
            all transcript HGVS notations listed in the coding and non-coding HGVS fields
        """
        result: Set[str] = set()
        for key in [CLINVAR.HGVS_C, CLINVAR.HGVS_N]:
            if self.fields.get(key):
                result.update(self.fields[key].split(HGVS_DELIM))
        return result


def parse_info(info: str) -> Dict[str, str]:
    """
    Example:
        >>> parse_info('CLNSIG=Pathogenic;GOLD_STARS=2;FLAG')
        {'CLNSIG': 'Pathogenic', 'GOLD_STARS': '2'}
    """
    fields = {}
    for pair in info.split(';'):
        if '=' in pair:
            key, value = pair.split('=', 1)
            fields[key] = value
    return fields


def normalize_alleles(pos: int, ref: str, alt: str):
    """
    convert VCF style coordinates and alleles to minimal Ensembl style alleles. Bases shared
    by both alleles are trimmed from the start and then from the end

    Returns:
        Tuple[int,int,str,str]: the start, end, reference and alternate alleles

    Example:
        >>> normalize_alleles(100, 'AT', 'A')
        (101, 101, 'T', '-')
        >>> normalize_alleles(100, 'A', 'AT')
        (101, 100, '-', 'T')
        >>> normalize_alleles(100, 'AC', 'GC')
        (100, 100, 'A', 'G')
    """
    start = pos
    while ref and alt and ref[0] == alt[0]:
        ref = ref[1:]
        alt = alt[1:]
        start += 1
    while ref and alt and ref[-1] == alt[-1]:
        ref = ref[:-1]
        alt = alt[:-1]
    end = start + len(ref) - 1
    return start, end, ref or EMPTY_ALLELE, alt or EMPTY_ALLELE


def parse_record(line: str) -> List[Record]:
    """
    parse a single VCF data line. Multi-allelic lines produce one record per alternate allele

    Raises:
        ValueError: the line is not a valid VCF data line
    """
    cols = line.rstrip('\r\n').split('\t')
    if len(cols) < VCF_MIN_COLUMNS:
        raise ValueError(f'expected at least {VCF_MIN_COLUMNS} columns but found {len(cols)}')
    chrom, pos, ref, alts = cols[0], int(cols[1]), cols[3].upper(), cols[4].upper()
    if not ref or not alts:
        raise ValueError('missing reference or alternate allele')
    fields = parse_info(cols[VCF_INFO_COLUMN])

    records = []
    for alt in alts.split(','):
        start, end, norm_ref, norm_alt = normalize_alleles(pos, ref, alt)
        records.append(
            Record(
                chromosome=chrom,
                start=start,
                end=end,
                ref=norm_ref,
                alt=norm_alt,
                fields=dict(fields),
            )
        )
    return records


class RegionAnnotationStore:
    """
    Annotates variants from one or two partitions of an indexed VCF annotation dataset

    Attributes:
        prefix: the namespace prefix added to all output field names
        sources: the indexed source of each partition
        headers: the advertised output fields (without prefix) and their descriptions
    """

    def __init__(
        self,
        single: str,
        multi: Optional[str] = None,
        prefix: str = CLINVAR.PREFIX,
        source_cls: Callable[[str], IndexedSource] = TabixSource,
    ):
        if not single:
            raise ConfigurationError(f'{prefix} annotation file not specified')
        self.prefix = prefix
        self.sources: Dict[str, IndexedSource] = {}

        schemas: Dict[str, Dict[str, str]] = {}
        for partition, filename in [(SourcePartition.SINGLE, single), (SourcePartition.MULTI, multi)]:
            if not filename:
                continue
            try:
                self.sources[partition] = source_cls(filename)
            except ConfigurationError:
                self.close()
                raise
            schemas[partition] = parse_info_fields(self.sources[partition].header())
            logger.info(
                f'read {len(schemas[partition])} INFO fields from the {partition} partition: {filename}'
            )
        self.headers = self.merge_schemas(schemas, single)

    def merge_schemas(self, schemas: Dict[str, Dict[str, str]], single: str) -> Dict[str, str]:
        """
        combine the INFO field definitions of the partitions and add the synthetic output fields

        Raises:
            ConfigurationError: the single partition has no usable header or the partitions differ
        """
        single_headers = schemas[SourcePartition.SINGLE]
        if len(single_headers) < 2:
            self.close()
            raise ConfigurationError(f'Could not read column headers from {single}')

        headers = dict(single_headers)
        multi_headers = schemas.get(SourcePartition.MULTI)
        if multi_headers is not None:
            if len(multi_headers) != len(single_headers):
                self.close()
                raise ConfigurationError(
                    'The input files provided do not contain identical INFO fields '
                    f'({len(single_headers)} vs {len(multi_headers)})'
                )
            for key, description in multi_headers.items():
                headers.setdefault(key, description)

        headers[CLINVAR.TRANSCRIPT_MATCH] = (
            f'{CLINVAR.MATCH} if the transcript HGVS is one of the {CLINVAR.HGVS_C}/{CLINVAR.HGVS_N} values'
        )
        headers[CLINVAR.ADDITIONAL_VARIATION_TYPES] = 'variation types of other records matching the allele'
        return headers

    def prefixed(self, name: str) -> str:
        return '_'.join([self.prefix, name])

    def header_info(self) -> Dict[str, str]:
        return {self.prefixed(key): description for key, description in self.headers.items()}

    def fetch_records(self, chromosome: str, start: int, end: int) -> List[Record]:
        """
        Returns:
            the records of all partitions overlapping the 1-based inclusive region
        """
        records = []
        for partition, source in self.sources.items():
            for line in source.query_region(chromosome, start, end):
                try:
                    records.extend(parse_record(line))
                except ValueError as err:
                    logger.debug(f'skipping malformed line in the {partition} partition: {err}')
        return records

    def lookup_annotation(
        self, variant: Variant, allele: Optional[str] = None, hgvs_transcript: Optional[str] = None
    ) -> Dict[str, str]:
        """
        Args:
            variant: the variant to annotate
            allele: the allele to match, defaults to the alternate allele of the variant
            hgvs_transcript: the HGVS transcript notation to cross-reference, defaults to that of the variant

        Returns:
            the prefixed fields of the selected record, empty if no record matches
        """
        if allele is None:
            allele = variant.alt
        if hgvs_transcript is None:
            hgvs_transcript = variant.hgvs_transcript

        matches = [
            record
            for record in self.fetch_records(variant.chromosome, variant.start - 1, variant.end)
            if record.start == variant.start and record.end == variant.end and record.alt == allele
        ]
        if not matches:
            return {}

        # simple variants are authoritative when the allele is also part of complex variants
        ordered = [r for r in matches if r.is_simple()] + [r for r in matches if not r.is_simple()]
        selected, others = ordered[0], ordered[1:]

        result = {self.prefixed(key): value for key, value in selected.fields.items()}

        if others:
            variant_types = {r.variant_type for r in others if r.variant_type}
            result[self.prefixed(CLINVAR.ADDITIONAL_VARIATION_TYPES)] = TYPES_DELIM.join(
                sorted(variant_types)
            )

        if hgvs_transcript and hgvs_transcript in selected.hgvs_transcripts():
            result[self.prefixed(CLINVAR.TRANSCRIPT_MATCH)] = CLINVAR.MATCH

        return result

    def annotate(self, variant: Variant) -> Dict[str, str]:
        return self.lookup_annotation(variant)

    def close(self):
        for source in self.sources.values():
            source.close()

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        self.close()
