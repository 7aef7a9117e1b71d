import os

import pysam


INFO_FIELDS = [
    ('VARIATION_TYPE', 'String', 'Variation type'),
    ('CLNSIG', 'String', 'Clinical significance'),
    ('GOLD_STARS', 'Integer', 'Review status as gold stars'),
    ('HGVS_C', 'String', 'Coding HGVS notation'),
    ('HGVS_N', 'String', 'Non-coding HGVS notation'),
]


def info_header(fields=INFO_FIELDS):
    lines = ['##fileformat=VCFv4.1']
    for name, info_type, description in fields:
        lines.append(f'##INFO=<ID={name},Number=1,Type={info_type},Description="{description}">')
    lines.append('#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO')
    return lines


def vcf_line(chrom, pos, ref, alt, **info):
    info_field = ';'.join([f'{k}={v}' for k, v in info.items()]) or '.'
    return '\t'.join([str(chrom), str(pos), '.', ref, alt, '.', '.', info_field])


def write_tabix_vcf(path, lines, header=None):
    """
    write the lines as a VCF, bgzip and tabix index it

    Returns:
        str: the path to the compressed file
    """
    if header is None:
        header = info_header()
    with open(path, 'w') as fh:
        fh.write('\n'.join(header + list(lines)) + '\n')
    return pysam.tabix_index(str(path), preset='vcf', force=True)


def write_score_file(directory, chrom, content: bytes):
    path = os.path.join(str(directory), chrom)
    with open(path, 'wb') as fh:
        fh.write(content)
    return path
