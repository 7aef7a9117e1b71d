"""
single-nucleotide variant annotation lookups against precomputed score and clinical annotation files
"""
__version__ = '1.0.0'
