import pytest

from varannot.constants import DNA_BASES, STRAND, build_offset_table
from varannot.error import ConfigurationError
from varannot.score import DecodeParams, OffsetScoreStore, validate_offset_table
from varannot.variant import Variant

from ..util import write_score_file

EXAMPLE_OFFSETS = {'A': {'C': 1, 'G': 2, 'T': 0}}


@pytest.fixture
def score_dir(tmp_path):
    write_score_file(tmp_path, '1', bytes([255, 0, 50, 254, 10, 20]))
    write_score_file(tmp_path, 'M', bytes([1, 2, 3]))
    return tmp_path


@pytest.fixture
def store(score_dir):
    with OffsetScoreStore(str(score_dir)) as store:
        yield store


class TestBuildOffsetTable:
    def test_default_table(self):
        offsets = build_offset_table()
        assert sorted(offsets) == list(DNA_BASES)
        for ref, alts in offsets.items():
            assert ref not in alts
            assert sorted(alts.values()) == [0, 1, 2]
        assert offsets['A'] == {'C': 0, 'G': 1, 'T': 2}
        assert offsets['T'] == {'A': 0, 'C': 1, 'G': 2}

    def test_unsupported_bytes_per_position(self):
        assert build_offset_table(4) == {}
        assert build_offset_table(1) == {}

    def test_validate_duplicate_offsets(self):
        with pytest.raises(ConfigurationError):
            validate_offset_table({'A': {'C': 0, 'G': 0, 'T': 1}}, 3)

    def test_validate_self_substitution(self):
        with pytest.raises(ConfigurationError):
            validate_offset_table({'A': {'A': 0, 'G': 1, 'T': 2}}, 3)

    def test_validate_non_dna_reference(self):
        with pytest.raises(ConfigurationError):
            validate_offset_table({'N': {'C': 0, 'G': 1, 'T': 2}}, 3)


class TestDecodeParams:
    def test_min_byte(self):
        assert DecodeParams().decode(0) == -1.5

    def test_max_byte(self):
        assert DecodeParams().decode(254) == pytest.approx(-1.5 + 254 * 0.01)

    def test_sentinel(self):
        assert DecodeParams().decode(255) is None

    def test_increasing(self):
        params = DecodeParams(min=0, step=0.5)
        scores = [params.decode(i) for i in range(255)]
        assert scores == sorted(scores)
        assert len(set(scores)) == 255


class TestOffsetScoreStoreConstruction:
    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigurationError):
            OffsetScoreStore(str(tmp_path / 'missing'))

    def test_directory_not_specified(self):
        with pytest.raises(ConfigurationError):
            OffsetScoreStore('')

    def test_empty_directory(self, tmp_path):
        store = OffsetScoreStore(str(tmp_path))
        assert store.chromosomes == []
        assert store.lookup_score(Variant('1', 1, 'A', 'C')) is None

    def test_unsupported_bytes_per_position(self, score_dir):
        with pytest.raises(ConfigurationError):
            OffsetScoreStore(str(score_dir), per_bp=4)

    def test_invalid_step(self, score_dir):
        with pytest.raises(ConfigurationError):
            OffsetScoreStore(str(score_dir), step=0)

    def test_ignores_other_files(self, score_dir):
        write_score_file(score_dir, 'MT', bytes([0, 0, 0]))
        write_score_file(score_dir, 'chr2', bytes([0, 0, 0]))
        store = OffsetScoreStore(str(score_dir))
        assert store.chromosomes == ['1', 'M']
        store.close()

    def test_header_info(self, store):
        assert store.header_info() == {'BayesDel': 'BayesDel score'}


class TestOffset:
    def test_offset_within_position(self, store):
        for pos in [1, 2, 1000, 248956422]:
            for ref in DNA_BASES:
                offsets = [store.offset(pos, ref, alt) for alt in DNA_BASES if alt != ref]
                assert sorted(offsets) == [(pos - 1) * 3 + i for i in range(3)]

    def test_no_offset_for_self_substitution(self, store):
        assert store.offset(1, 'A', 'A') is None

    def test_no_offset_for_non_dna_ref(self, store):
        assert store.offset(1, 'N', 'A') is None

    def test_no_offset_for_invalid_position(self, store):
        assert store.offset(0, 'A', 'C') is None


class TestLookupScore:
    def test_example_offset_table(self, score_dir):
        store = OffsetScoreStore(str(score_dir), offsets=EXAMPLE_OFFSETS)
        assert store.lookup_score(Variant('1', 1, 'A', 'C')) == -1.5
        assert store.lookup_score(Variant('1', 1, 'A', 'G')) == pytest.approx(-1.0)
        assert store.lookup_score(Variant('1', 1, 'A', 'T')) is None
        assert store.lookup_score(Variant('1', 1, 'C', 'A')) is None
        store.close()

    def test_default_offset_table(self, store):
        # position 2, ref C: A=0, G=1, T=2
        assert store.lookup_score(Variant('1', 2, 'C', 'A')) == pytest.approx(-1.5 + 254 * 0.01)
        assert store.lookup_score(Variant('1', 2, 'C', 'G')) == pytest.approx(-1.4)
        assert store.lookup_score(Variant('1', 2, 'C', 'T')) == pytest.approx(-1.3)

    def test_sentinel_is_no_score(self, store):
        assert store.lookup_score(Variant('1', 1, 'A', 'C')) is None
        assert store.annotate(Variant('1', 1, 'A', 'C')) == {}

    def test_annotate(self, store):
        assert store.annotate(Variant('1', 1, 'A', 'G')) == {'BayesDel': -1.5}

    def test_reverse_strand(self, store):
        complement = {'A': 'T', 'C': 'G', 'G': 'C', 'T': 'A'}
        for ref in DNA_BASES:
            for alt in DNA_BASES:
                neg = store.lookup_score(Variant('1', 2, ref, alt, strand=STRAND.NEG))
                pos = store.lookup_score(Variant('1', 2, ref, complement[alt]))
                assert neg == pos

    def test_not_single_base(self, store):
        assert store.lookup_score(Variant('1', 1, 'A', 'G', end=2)) is None
        assert store.lookup_score(Variant('1', 1, 'A', 'GT')) is None
        assert store.lookup_score(Variant('1', 1, 'A', '-')) is None

    def test_non_dna_allele(self, store):
        assert store.lookup_score(Variant('1', 1, 'A', 'N')) is None
        assert store.lookup_score(Variant('1', 1, 'N', 'A')) is None

    def test_unscored_chromosome(self, store):
        assert store.lookup_score(Variant('2', 1, 'A', 'G')) is None

    def test_chromosome_names(self, store):
        assert store.lookup_score(Variant('chr1', 1, 'A', 'G')) == -1.5
        assert store.lookup_score(Variant('MT', 1, 'A', 'C')) == pytest.approx(-1.49)
        assert store.lookup_score(Variant('chrM', 1, 'A', 'C')) == pytest.approx(-1.49)

    def test_position_past_end_of_file(self, store):
        assert store.lookup_score(Variant('1', 3, 'A', 'C')) is None
        assert store.lookup_score(Variant('1', 1000000, 'A', 'C')) is None

    def test_invalid_position(self, store):
        assert store.lookup_score(Variant('1', 0, 'A', 'C')) is None

    def test_closed_store(self, score_dir):
        store = OffsetScoreStore(str(score_dir))
        store.close()
        assert store.lookup_score(Variant('1', 1, 'A', 'G')) is None
