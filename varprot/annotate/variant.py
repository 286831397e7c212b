from .base import BioInterval, ReferenceName
from ..constants import GENOTYPE, VARIANT_TYPE
from ..error import InvalidVariantError


class Variant(BioInterval):
    """
    a diploid variant call. The reference allele spans the genomic positions start to end (inclusive) and each
    allele replaces those bases. Leading bases shared by the reference and both alleles are trimmed
    as long as every allele keeps at least one base (so the VCF padding base of an insertion is kept)

    Example:
        >>> v = Variant('1', 100, 'AC', 'AC', 'AT')
        >>> v.start, v.ref, v.alt
        (101, 'C', 'T')
    """

    def __init__(
        self, chr, pos, ref, first_allele, second_allele,
        first_allele_depth=None, second_allele_depth=None,
        genotype=None, structural=False, name=None, data=None
    ):
        """
        Args:
            chr (str): the chromosome name
            pos (int): 1-based position of the first base of the reference allele
            ref (str): the reference allele
            first_allele (str): the first called allele
            second_allele (str): the second called allele
            first_allele_depth (int): read depth supporting the first allele
            second_allele_depth (int): read depth supporting the second allele
            genotype (GENOTYPE): the genotype. Classified from the alleles if not given
            structural (bool): flag for structural variants
            name (str): the variant id
        """
        ref, first_allele, second_allele = [str(s).upper() for s in (ref, first_allele, second_allele)]
        if not ref or not first_allele or not second_allele:
            raise InvalidVariantError('the reference allele and the called alleles cannot be empty', chr, pos)
        trim = 0
        while (
            trim < min(len(ref), len(first_allele), len(second_allele)) - 1
            and ref[trim] == first_allele[trim] == second_allele[trim]
        ):
            trim += 1
        pos = int(pos) + trim
        self.ref = ref[trim:]
        self.first_allele = first_allele[trim:]
        self.second_allele = second_allele[trim:]
        BioInterval.__init__(self, ReferenceName(chr), pos, pos + len(self.ref) - 1, name=name, data=data)
        self.first_allele_depth = first_allele_depth
        self.second_allele_depth = second_allele_depth
        self.structural = structural
        self.genotype = GENOTYPE.enforce(genotype) if genotype else self.classify_genotype()

    @property
    def chr(self):
        return self.reference_object

    @property
    def alt(self):
        """*str*: the allele which is applied to transcripts (the second allele)"""
        return self.second_allele

    @property
    def size_change(self):
        return len(self.alt) - len(self.ref)

    def classify_genotype(self):
        if self.first_allele == self.second_allele:
            if self.first_allele == self.ref:
                return GENOTYPE.HOMOZYGOUS_REF
            return GENOTYPE.HOMOZYGOUS_ALT
        return GENOTYPE.HETEROZYGOUS

    @property
    def variant_type(self):
        """
        Example:
            >>> Variant('1', 10, 'A', 'A', 'ATT').variant_type
            'INS'
        """
        ref, alt = self.ref, self.alt
        if len(ref) == len(alt):
            return VARIANT_TYPE.SNV if len(ref) == 1 else VARIANT_TYPE.MNV
        elif len(alt) > len(ref) and alt.startswith(ref):
            return VARIANT_TYPE.INS
        elif len(ref) > len(alt) and ref.startswith(alt):
            return VARIANT_TYPE.DEL
        return VARIANT_TYPE.MIXED

    @property
    def is_mnv(self):
        return self.variant_type == VARIANT_TYPE.MNV

    @property
    def is_mixed(self):
        return self.variant_type == VARIANT_TYPE.MIXED

    def first_allele_variant(self):
        """
        Returns:
            Variant: a copy of this variant where the second allele (and its depth) is replaced by the first allele
        """
        return Variant(
            self.chr, self.start, self.ref, self.first_allele, self.first_allele,
            first_allele_depth=self.first_allele_depth, second_allele_depth=self.first_allele_depth,
            genotype=self.genotype, structural=self.structural, name=self.name, data=self.data
        )

    def description(self):
        """
        Example:
            >>> Variant('1', 69640, 'T', 'G', 'G').description()
            '1:69640 T>G'
        """
        return '{}:{} {}>{}'.format(self.chr, self.start, self.ref, self.alt)

    def key(self):
        return (self.chr, self.start, self.ref, self.first_allele, self.second_allele)

    def __repr__(self):
        return 'Variant({}, {})'.format(self.description(), self.genotype)
