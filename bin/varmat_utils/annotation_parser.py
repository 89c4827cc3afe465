#!/usr/bin/env python3
"""
Annotation Grammar Parser

Row names of the variant matrices are semicolon/pipe delimited annotation
strings written by the variant annotation pipeline:

    Coding SNP at 1002 > A,C functional=NON_SYNONYMOUS locus_tag=KP_0001 Strand Information: KP_0001=+;A|missense_variant|MODERATE|geneA|KP_0001|transcript|KP_0001|protein_coding|1/1|;C|...|;

This module parses such a label into a ParsedAnnotation (the position segment
plus one GeneSegment per gene context) and provides the counting and pattern
helpers used by the bug filters and the row splitter.

Functions:
    parse_annotation: Parse a label into a ParsedAnnotation
    count_pipes / count_semicolons / count_dividers: Grammar counts
    has_valid_pipe_count: Pipe count is a multiple of 9 per gene segment
    extract_locus_tag: Locus tag text between 'locus_tag=' and ' Strand '
    has_missing_locus_info: NULL locus tag or no strand information
    is_multiallelic: Position segment reports two ALT alleles together
    strand_allele: Allele closing the strand information field
    narrow_multiallelic: Rewrite '> X,Y ... functional=' to a single allele
    distinct_genes: Distinct gene identifiers over the gene segments
    validate_annotation: Parse a label, raising on grammar or locus bugs

Example:
    >>> parsed = parse_annotation('pos100;A|e|i|geneA|t|f|id|bt|1/1|;C|e|i|geneB|t|f|id|bt|1/1|;')
    >>> parsed.position_info
    'pos100'
    >>> [segment.gene for segment in parsed.segments]
    ['geneA', 'geneB']
    >>> parsed.render_event(1)
    'pos100;C|e|i|geneB|t|f|id|bt|1/1|'
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from varmat_common.cleaning_config import ANNOTATION_GRAMMAR, BUG_PATTERNS

from .error_handler import MalformedAnnotation, UnresolvableAnnotationField

SEGMENT_SEPARATOR = ANNOTATION_GRAMMAR["segment_separator"]
FIELD_SEPARATOR = ANNOTATION_GRAMMAR["field_separator"]
PIPES_PER_GENE_SEGMENT = ANNOTATION_GRAMMAR["pipes_per_gene_segment"]
GENE_FIELD_INDEX = ANNOTATION_GRAMMAR["gene_field_index"]

_NUCLEOTIDE_CLASS = f"[{ANNOTATION_GRAMMAR['nucleotides']}]"
DIVIDER_PATTERN = re.compile(re.escape(SEGMENT_SEPARATOR) + _NUCLEOTIDE_CLASS)
MULTIALLELIC_PATTERN = re.compile(rf"^.+> {_NUCLEOTIDE_CLASS},{_NUCLEOTIDE_CLASS}")
MULTIALLELIC_FRAGMENT = re.compile(
    rf"> {_NUCLEOTIDE_CLASS},{_NUCLEOTIDE_CLASS}.*{re.escape(ANNOTATION_GRAMMAR['functional_marker'])}"
)
LOCUS_TAG_PREFIX = re.compile(r"^.+" + re.escape(ANNOTATION_GRAMMAR["locus_tag_key"]))
STRAND_SUFFIX = re.compile(re.escape(ANNOTATION_GRAMMAR["strand_key"]) + r".*$")
STRAND_INFORMATION_PREFIX = re.compile(r"^.*" + re.escape(ANNOTATION_GRAMMAR["strand_information_key"]))
FIRST_FIELD_SUFFIX = re.compile(re.escape(FIELD_SEPARATOR) + r".*$")


@dataclass(frozen=True)
class GeneSegment:
    """One pipe-delimited gene context of an annotation."""

    raw: str
    fields: Tuple[str, ...]

    @property
    def allele(self) -> str:
        return self.fields[0]

    @property
    def gene(self) -> Optional[str]:
        if len(self.fields) > GENE_FIELD_INDEX:
            return self.fields[GENE_FIELD_INDEX]
        return None

    @property
    def pipe_count(self) -> int:
        return len(self.fields) - 1

    def is_well_formed(self) -> bool:
        return self.pipe_count == PIPES_PER_GENE_SEGMENT


@dataclass(frozen=True)
class ParsedAnnotation:
    """Structured view of an annotation label."""

    label: str
    position_info: str
    segments: Tuple[GeneSegment, ...]
    terminated: bool = False

    @property
    def events(self) -> Tuple[GeneSegment, ...]:
        """Alias for the gene segments, one per annotated event."""
        return self.segments

    def render_event(self, index: int) -> Optional[str]:
        """
        Render the label of a single annotated event.

        Args:
            index: 0-based gene segment index

        Returns:
            '<position info>;<segment>' or None when the segment does not exist
        """
        if index < 0 or index >= len(self.segments):
            return None
        return f"{self.position_info}{SEGMENT_SEPARATOR}{self.segments[index].raw}"

    def is_well_formed(self) -> bool:
        """True when every gene segment carries exactly 9 pipes."""
        return bool(self.segments) and all(segment.is_well_formed() for segment in self.segments)


class _AnnotationParser:
    """Recursive-descent parser over the annotation grammar.

    annotation := position (';' segment)* [';']
    segment    := field ('|' field)*
    """

    def __init__(self, label: str):
        self.label = label
        self.pos = 0

    def _at_end(self) -> bool:
        return self.pos >= len(self.label)

    def _read_until(self, stops: str) -> str:
        start = self.pos
        while not self._at_end() and self.label[self.pos] not in stops:
            self.pos += 1
        return self.label[start:self.pos]

    def parse(self) -> ParsedAnnotation:
        position_info = self._read_until(SEGMENT_SEPARATOR)
        segments: List[GeneSegment] = []
        terminated = False

        while not self._at_end():
            # consume ';'
            self.pos += 1
            if self._at_end():
                terminated = True
                break
            segments.append(self._parse_segment())

        return ParsedAnnotation(
            label=self.label,
            position_info=position_info,
            segments=tuple(segments),
            terminated=terminated,
        )

    def _parse_segment(self) -> GeneSegment:
        start = self.pos
        fields = [self._parse_field()]
        while not self._at_end() and self.label[self.pos] == FIELD_SEPARATOR:
            self.pos += 1
            fields.append(self._parse_field())
        return GeneSegment(raw=self.label[start:self.pos], fields=tuple(fields))

    def _parse_field(self) -> str:
        return self._read_until(SEGMENT_SEPARATOR + FIELD_SEPARATOR)


def parse_annotation(label: str) -> ParsedAnnotation:
    """Parse an annotation label into its position segment and gene segments."""
    return _AnnotationParser(str(label)).parse()


def count_pipes(label: str) -> int:
    return label.count(FIELD_SEPARATOR)


def count_semicolons(label: str) -> int:
    return label.count(SEGMENT_SEPARATOR)


def count_dividers(label: str) -> int:
    """
    Count dividers (';' immediately followed by A, C, G or T).

    Each divider opens one annotated event, so the count is the number of
    rows the label expands to in the row splitter.
    """
    return len(DIVIDER_PATTERN.findall(label))


def has_valid_pipe_count(label: str) -> bool:
    """
    Check that pipe_count / (semicolon_count - 1) is a whole multiple of 9.

    A label with exactly one semicolon leaves no gene segment count to divide
    by and is treated as malformed. Labels without semicolons divide by -1 and
    follow the same multiple-of-9 rule.

    Example:
        >>> has_valid_pipe_count('pos;A|b|c|d|e|f|g|h|i|;')
        True
        >>> has_valid_pipe_count('pos;A|b|c|d|e|f|g|h|i|')
        False
    """
    pipes = count_pipes(label)
    segments = count_semicolons(label) - 1
    if segments == 0:
        return False
    if pipes % segments != 0:
        return False
    return (pipes // segments) % PIPES_PER_GENE_SEGMENT == 0


def extract_locus_tag(label: str) -> str:
    """
    Extract the locus tag: text after the last 'locus_tag=' up to ' Strand '.

    Labels without a 'locus_tag=' key are returned with only the strand
    suffix removed.
    """
    tag = LOCUS_TAG_PREFIX.sub("", label, count=1)
    return STRAND_SUFFIX.sub("", tag, count=1)


def has_missing_locus_info(label: str) -> bool:
    """True for a NULL locus tag or a label reporting no strand information."""
    if BUG_PATTERNS["null_locus_tag"] in extract_locus_tag(label):
        return True
    return BUG_PATTERNS["no_strand"] in label


def is_multiallelic(label: str) -> bool:
    """True when the label reports two ALT alleles, e.g. '> A,C'."""
    return MULTIALLELIC_PATTERN.search(label) is not None


def strand_allele(label: str) -> Optional[str]:
    """
    Return the allele that closes the strand information field.

    The text after the last 'Strand Information:' up to the first pipe ends
    with the allele of the gene segment that follows the position segment.
    """
    text = STRAND_INFORMATION_PREFIX.sub("", label, count=1)
    text = FIRST_FIELD_SUFFIX.sub("", text, count=1)
    return text[-1:] or None


def narrow_multiallelic(label: str) -> Optional[str]:
    """
    Narrow '> X,Y ... functional=' down to the allele of this row.

    Args:
        label: Single-event label ('<position info>;<segment>')

    Returns:
        Rewritten label, or None when the fragment or the allele is missing

    Example:
        >>> narrow_multiallelic('SNP > A,C functional=X Strand Information: +;C|e|i|g|t|f|id|bt|1/1|')
        'SNP > C functional=X Strand Information: +;C|e|i|g|t|f|id|bt|1/1|'
    """
    if not MULTIALLELIC_FRAGMENT.search(label):
        return None
    allele = strand_allele(label)
    if allele is None:
        return None
    replacement = f"> {allele} {ANNOTATION_GRAMMAR['functional_marker']}"
    return MULTIALLELIC_FRAGMENT.sub(lambda _: replacement, label, count=1)


def distinct_genes(parsed: ParsedAnnotation) -> List[str]:
    """Distinct gene identifiers over all gene segments, in order of appearance."""
    genes = []
    for segment in parsed.segments:
        gene = segment.gene
        if gene is not None and gene not in genes:
            genes.append(gene)
    return genes


def validate_annotation(label: str) -> ParsedAnnotation:
    """
    Parse a label and raise if the bug filter would reject it.

    Raises:
        MalformedAnnotation: Pipe count inconsistent with the grammar
        UnresolvableAnnotationField: NULL locus tag or no strand information
    """
    if not has_valid_pipe_count(label):
        raise MalformedAnnotation(label, "pipe count is not a multiple of 9 per gene segment")
    if has_missing_locus_info(label):
        raise UnresolvableAnnotationField(label, "locus tag or strand")
    return parse_annotation(label)
