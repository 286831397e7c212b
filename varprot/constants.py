"""
controlled vocabularies, codon helpers, and the namespace type used to hold constants and tunable defaults
"""
import argparse
import re
import os

from Bio.Data import CodonTable
from Bio.Seq import Seq
from tab import cast_boolean, cast_null


PROGNAME = 'varprot'
EXIT_OK = 0


def positive_int(num):
    """
    cast input to a positive integer, for use as an argparse type

    Raises:
        argparse.ArgumentTypeError: if the input is not an integer greater than zero
    """
    try:
        num = int(num)
    except (TypeError, ValueError):
        num = 0
    if num < 1:
        raise argparse.ArgumentTypeError('Must be a positive integer')
    return num


class VarprotNamespace:
    """
    named constants with optional definitions and types. Members are read as attributes or items and the values can be
    checked with :meth:`enforce` (or by calling the namespace, which makes it usable as an argparse type)

    Example:
        >>> nspace = VarprotNamespace('first', second=2)
        >>> nspace.first, nspace['second']
        ('first', 2)
    """
    DELIM = r'[;,\s]+'
    """:class:`str`: separator pattern for list values read from environment variables"""

    def __init__(self, *pos, **kwargs):
        for attr, value in [(p, p) for p in pos] + list(kwargs.items()):
            if attr in self._members:
                raise AttributeError('Cannot respecify existing attribute', attr, self._members[attr])
            self._members[attr] = value
            self._set_type(attr, type(value))

    # private state is created on first access so that __setattr__ can be reserved for members
    @property
    def _members(self):
        return self._state('_members', dict)

    @property
    def _defns(self):
        return self._state('_defns', dict)

    @property
    def _types(self):
        return self._state('_types', dict)

    @property
    def _nullable(self):
        return self._state('_nullable', set)

    @property
    def _listable(self):
        return self._state('_listable', set)

    def _state(self, name, factory):
        store = self.__dict__
        if name not in store:
            store[name] = factory()
        return store[name]

    def __setattr__(self, attr, val):
        if attr.startswith('_'):
            raise ValueError('cannot set private', attr)
        self._members[attr] = val

    def __getattr__(self, attr):
        # only reached when normal attribute lookup fails
        if attr.startswith('_') or attr not in self._members:
            raise AttributeError(attr)
        if self.is_env_overwritable(attr) and self.get_env_name(attr) in os.environ:
            return self.get_env_var(attr)
        return self._members[attr]

    def __getitem__(self, key):
        return getattr(self, key)

    def __setitem__(self, key, val):
        setattr(self, key, val)

    def __iter__(self):
        return iter(self.keys())

    def __repr__(self):
        members = sorted(['{}={}'.format(k, repr(v)) for k, v in self.items()])
        return '{}({})'.format(self.__class__.__name__, ', '.join(members))

    def keys(self):
        return list(self._members)

    def values(self):
        return [self[k] for k in self.keys()]

    def items(self):
        return [(k, self[k]) for k in self.keys()]

    def to_dict(self):
        return dict(self.items())

    def get(self, key, *pos):
        """
        Example:
            >>> VarprotNamespace(thing=1).get('other_thing', 2)
            2
        """
        if len(pos) > 1:
            raise TypeError('get expects a single default value', pos)
        if key in self._members or not pos:
            return self[key]
        return pos[0]

    def get_env_name(self, attr):
        """
        Example:
            >>> VarprotNamespace(a=1).get_env_name('a')
            'VARPROT_A'
        """
        return '{}_{}'.format(PROGNAME, attr).upper()

    def get_env_var(self, attr):
        """
        read the value of an attribute from its environment variable, cast to the type of the attribute
        """
        raw = os.environ[self.get_env_name(attr)].strip()
        cast_type = self._types.get(attr, str)
        nullable = attr in self._nullable
        if attr in self._listable:
            return self.parse_listable_string(raw, cast_type, nullable)
        return self._cast(raw, cast_type, nullable)

    @staticmethod
    def _cast(value, cast_type, nullable=False):
        if nullable:
            try:
                return cast_null(value)
            except TypeError:
                pass
        return cast_type(value)

    @classmethod
    def parse_listable_string(cls, string, cast_type=str, nullable=False):
        """
        split a delimited string into a list of cast values

        Example:
            >>> VarprotNamespace.parse_listable_string('1;2,None', int, True)
            [1, 2, None]
        """
        string = string.strip()
        if not string:
            return []
        return [cls._cast(val, cast_type, nullable) for val in re.split(cls.DELIM, string)]

    def is_env_overwritable(self, attr):
        return False

    def is_listable(self, attr):
        return attr in self._listable

    def is_nullable(self, attr):
        return attr in self._nullable

    def _set_type(self, attr, cast_type):
        self._types[attr] = cast_boolean if cast_type == bool else cast_type

    def type(self, attr, *pos):
        """
        Example:
            >>> VarprotNamespace(thing=1).type('thing')
            <class 'int'>
        """
        if attr not in self._types and pos:
            return pos[0]
        return self._types[attr]

    def define(self, attr, *pos):
        """
        the definition (help text) of an attribute, or the default if given and the attribute has no definition

        Raises:
            KeyError: the attribute has no definition and a default was not given
        """
        if attr not in self._defns and pos:
            return pos[0]
        return self._defns[attr]

    def add(self, attr, value, defn=None, cast_type=None, nullable=False, listable=False):
        """
        Add an attribute to the namespace

        Args:
            attr (str): name of the attribute being added
            value: the value of the attribute
            defn (str): the definition, used as the help text of the matching command line option
            cast_type (callable): the function used to cast values read from the environment or the command line
            nullable (bool): True if this attribute can have a None value
            listable (bool): True if this attribute can have multiple values
        """
        self._set_type(attr, cast_type if cast_type else type(value))
        if defn:
            self._defns[attr] = defn
        if nullable:
            self._nullable.add(attr)
        if listable:
            self._listable.add(attr)
        self[attr] = value

    def enforce(self, value):
        """
        Returns:
            the input value, if it is a value of this namespace

        Raises:
            KeyError: the value is not a member of this namespace

        Example:
            >>> VarprotNamespace(thing=1).enforce(1)
            1
        """
        if value not in self.values():
            raise KeyError('value {} is not a valid member'.format(repr(value)), self.values())
        return value

    def __call__(self, value):
        try:
            return self.enforce(value)
        except KeyError:
            raise TypeError('Invalid value {} for {}. Must be a valid member: {}'.format(
                repr(value), self.__class__.__name__, self.values()))


CODON_SIZE = 3
""":class:`int`: the number of bases making up a codon"""

STOP_AA = '*'
""":class:`str`: The amino acid expected to be at the end of any CDS"""

SELENOCYSTEINE_AA = 'U'
""":class:`str`: amino acid coded by an in-frame TGA at a known selenocysteine insertion site"""

CODON_TABLE = VarprotNamespace(STANDARD=1, VERTEBRATE_MITOCHONDRIAL=2)
""":class:`VarprotNamespace`: NCBI translation table ids

- ``STANDARD``: the standard code
- ``VERTEBRATE_MITOCHONDRIAL``: used for transcripts on the mitochondrial chromosome
"""


def reverse_complement(s):
    """
    wrapper for the Bio.Seq reverse_complement method

    Args:
        s (str): the input DNA sequence

    Returns:
        :class:`str`: the reverse complement of the input sequence

    Example:
        >>> reverse_complement('ATCCGGT')
        'ACCGGAT'
    """
    input_string = str(s)
    if not re.match('^[A-Za-z]*$', input_string):
        raise ValueError('unexpected sequence format. cannot reverse complement', input_string)
    return str(Seq(input_string).reverse_complement())


def translate(s, reading_frame=0, table=CODON_TABLE.STANDARD):
    """
    given a DNA sequence, translates it and returns the protein amino acid sequence

    Args:
        s (str): the input DNA sequence
        reading_frame (int): where to start translating the sequence
        table (int): the NCBI translation table id

    Returns:
        str: the amino acid sequence (stop codons are included as '*')
    """
    reading_frame = reading_frame % CODON_SIZE

    temp = str(s)[reading_frame:]
    temp = temp[:len(temp) - len(temp) % CODON_SIZE]
    return str(Seq(temp).translate(table=table))


def start_codons(table=CODON_TABLE.STANDARD):
    """:class:`list` of :class:`str`: the codons which can initiate translation for a given table"""
    return CodonTable.unambiguous_dna_by_id[table].start_codons


STRAND = VarprotNamespace(POS='+', NEG='-', NS='?')
""":class:`VarprotNamespace`: holds controlled vocabulary for allowed strand values

- ``POS``: the positive/forward strand
- ``NEG``: the negative/reverse strand
- ``NS``: strand is not specified
"""

GENOTYPE = VarprotNamespace(
    'HOMOZYGOUS_REF', 'HETEROZYGOUS', 'HOMOZYGOUS_ALT', 'HOMOZYGOUS_ALT2', 'UNKNOWN')
""":class:`VarprotNamespace`: classification of the two called alleles of a diploid variant

- ``HOMOZYGOUS_REF``: both alleles are the reference allele
- ``HETEROZYGOUS``: the alleles differ
- ``HOMOZYGOUS_ALT``: both alleles are the first alternate allele
- ``HOMOZYGOUS_ALT2``: both alleles are the same non-first alternate allele
- ``UNKNOWN``: the genotype could not be called
"""

VARIANT_TYPE = VarprotNamespace(SNV='SNV', MNV='MNV', INS='INS', DEL='DEL', MIXED='MIXED')

FUNCTIONAL_CLASS = VarprotNamespace('NONE', 'SILENT', 'MISSENSE', 'NONSENSE')
""":class:`VarprotNamespace`: protein-level consequence, ranked by severity (NONE lowest, NONSENSE highest)"""
object.__setattr__(FUNCTIONAL_CLASS, 'rank', lambda x: FUNCTIONAL_CLASS.values().index(x))

EFFECT_IMPACT = VarprotNamespace('HIGH', 'MODERATE', 'LOW', 'MODIFIER')

EFFECT_TYPE = VarprotNamespace(
    'NONE',
    'TRANSCRIPT',
    'TRANSCRIPT_DELETED',
    'EXON_DELETED',
    'UTR_5_PRIME',
    'UTR_3_PRIME',
    'INTRON',
    'SPLICE_SITE_DONOR',
    'SPLICE_SITE_ACCEPTOR',
    'SYNONYMOUS_CODING',
    'SYNONYMOUS_START',
    'SYNONYMOUS_STOP',
    'NON_SYNONYMOUS_CODING',
    'NON_SYNONYMOUS_START',
    'START_LOST',
    'STOP_GAINED',
    'STOP_LOST',
    'CODON_CHANGE',
    'CODON_INSERTION',
    'CODON_DELETION',
    'CODON_CHANGE_PLUS_CODON_INSERTION',
    'CODON_CHANGE_PLUS_CODON_DELETION',
    'FRAME_SHIFT',
)
""":class:`VarprotNamespace`: the kinds of effect a variant can have on a transcript or region"""

EFFECT_TYPE_IMPACT = {
    EFFECT_TYPE.TRANSCRIPT_DELETED: EFFECT_IMPACT.HIGH,
    EFFECT_TYPE.EXON_DELETED: EFFECT_IMPACT.HIGH,
    EFFECT_TYPE.SPLICE_SITE_DONOR: EFFECT_IMPACT.HIGH,
    EFFECT_TYPE.SPLICE_SITE_ACCEPTOR: EFFECT_IMPACT.HIGH,
    EFFECT_TYPE.START_LOST: EFFECT_IMPACT.HIGH,
    EFFECT_TYPE.STOP_GAINED: EFFECT_IMPACT.HIGH,
    EFFECT_TYPE.STOP_LOST: EFFECT_IMPACT.HIGH,
    EFFECT_TYPE.FRAME_SHIFT: EFFECT_IMPACT.HIGH,
    EFFECT_TYPE.NON_SYNONYMOUS_CODING: EFFECT_IMPACT.MODERATE,
    EFFECT_TYPE.CODON_CHANGE: EFFECT_IMPACT.MODERATE,
    EFFECT_TYPE.CODON_INSERTION: EFFECT_IMPACT.MODERATE,
    EFFECT_TYPE.CODON_DELETION: EFFECT_IMPACT.MODERATE,
    EFFECT_TYPE.CODON_CHANGE_PLUS_CODON_INSERTION: EFFECT_IMPACT.MODERATE,
    EFFECT_TYPE.CODON_CHANGE_PLUS_CODON_DELETION: EFFECT_IMPACT.MODERATE,
    EFFECT_TYPE.SYNONYMOUS_CODING: EFFECT_IMPACT.LOW,
    EFFECT_TYPE.SYNONYMOUS_START: EFFECT_IMPACT.LOW,
    EFFECT_TYPE.SYNONYMOUS_STOP: EFFECT_IMPACT.LOW,
    EFFECT_TYPE.NON_SYNONYMOUS_START: EFFECT_IMPACT.LOW,
}
""":class:`dict`: effect impact by effect type. Anything not listed is a ``MODIFIER``"""

EFFECT_TYPE_FUNCTIONAL_CLASS = {
    EFFECT_TYPE.STOP_GAINED: FUNCTIONAL_CLASS.NONSENSE,
    EFFECT_TYPE.FRAME_SHIFT: FUNCTIONAL_CLASS.NONSENSE,
    EFFECT_TYPE.NON_SYNONYMOUS_CODING: FUNCTIONAL_CLASS.MISSENSE,
    EFFECT_TYPE.NON_SYNONYMOUS_START: FUNCTIONAL_CLASS.MISSENSE,
    EFFECT_TYPE.START_LOST: FUNCTIONAL_CLASS.MISSENSE,
    EFFECT_TYPE.STOP_LOST: FUNCTIONAL_CLASS.MISSENSE,
    EFFECT_TYPE.CODON_CHANGE: FUNCTIONAL_CLASS.MISSENSE,
    EFFECT_TYPE.CODON_INSERTION: FUNCTIONAL_CLASS.MISSENSE,
    EFFECT_TYPE.CODON_DELETION: FUNCTIONAL_CLASS.MISSENSE,
    EFFECT_TYPE.CODON_CHANGE_PLUS_CODON_INSERTION: FUNCTIONAL_CLASS.MISSENSE,
    EFFECT_TYPE.CODON_CHANGE_PLUS_CODON_DELETION: FUNCTIONAL_CLASS.MISSENSE,
    EFFECT_TYPE.SYNONYMOUS_CODING: FUNCTIONAL_CLASS.SILENT,
    EFFECT_TYPE.SYNONYMOUS_START: FUNCTIONAL_CLASS.SILENT,
    EFFECT_TYPE.SYNONYMOUS_STOP: FUNCTIONAL_CLASS.SILENT,
}
""":class:`dict`: functional class by effect type. Anything not listed is ``NONE``"""

ERROR_WARNING = VarprotNamespace(
    'NONE',
    'WARNING_TRANSCRIPT_MULTIPLE_STOP_CODONS',
    'WARNING_TRANSCRIPT_INCOMPLETE',
    'WARNING_TRANSCRIPT_NO_START_CODON',
    'WARNING_TRANSCRIPT_NO_STOP_CODON',
    'WARNING_REF_DOES_NOT_MATCH_GENOME',
)
""":class:`VarprotNamespace`: diagnostics attached to variant effects

- ``WARNING_TRANSCRIPT_MULTIPLE_STOP_CODONS``: the coding sequence has in-frame stop codons before its end
- ``WARNING_TRANSCRIPT_INCOMPLETE``: the coding sequence length is not a multiple of 3
- ``WARNING_TRANSCRIPT_NO_START_CODON``: the coding sequence does not begin with a start codon
- ``WARNING_TRANSCRIPT_NO_STOP_CODON``: the coding sequence does not end with a stop codon
- ``WARNING_REF_DOES_NOT_MATCH_GENOME``: the reference allele differs from the exon sequence
"""
