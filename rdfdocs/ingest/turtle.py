import re
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional
from urllib.parse import urljoin

import rdflib
from pydantic import BaseModel, Field
from rdflib import BNode, Graph, Literal, URIRef
from rdflib.exceptions import ParserError
from rdflib.plugins.parsers.notation3 import BadSyntax
from rdflib.plugins.serializers.nt import _quoteLiteral

from ..document.models import Triple
from .scanner import BNODE_IRI_PREFIX, Statement, scan_statement, skip_insignificant


_AT_PREFIX = re.compile(r"@prefix\s+([^\s:]*):\s*<([^>]*)>\s*\.\Z")
_SPARQL_PREFIX = re.compile(r"PREFIX\s+([^\s:]*):\s*<([^>]*)>\Z", re.IGNORECASE)
_AT_BASE = re.compile(r"@base\s+<([^>]*)>\s*\.\Z")
_SPARQL_BASE = re.compile(r"BASE\s+<([^>]*)>\Z", re.IGNORECASE)
_BAD_SYNTAX = re.compile(r"Bad syntax \((.*)\) at \^ in:", re.DOTALL)

_EXCERPT_LENGTH = 80


class TurtleSyntaxError(ValueError):
    """Malformed Turtle statement"""

    def __init__(self, message: str, line: int = 0):
        super().__init__(f"line {line}: {message}" if line else message)
        self.line = line


class ParseDiagnostic(BaseModel):
    """A statement skipped because it could not be parsed"""
    line: int = Field(..., description="Line where the statement starts")
    statement: str = Field(..., description="Excerpt of the skipped statement")
    message: str = Field(..., description="Grammar error")


class IngestState(BaseModel):
    """Parser state between steps"""
    source: str
    position: int = 0
    line: int = 1
    known_prefixes: Dict[str, str] = Field(default_factory=dict)
    base: Optional[str] = None
    emitted_triples: List[Triple] = Field(default_factory=list)
    diagnostics: List[ParseDiagnostic] = Field(default_factory=list)
    at_end: bool = False

    @property
    def remaining_input(self) -> str:
        return self.source[self.position:]


class IngestStep(BaseModel):
    """Triples of one statement plus the prefixes known after it"""
    triples: List[Triple] = Field(default_factory=list)
    prefixes: Dict[str, str] = Field(default_factory=dict)
    diagnostic: Optional[ParseDiagnostic] = None


class IngestResult(BaseModel):
    """Outcome of ingesting a whole document"""
    triples: List[Triple] = Field(default_factory=list)
    prefixes: Dict[str, str] = Field(default_factory=dict)
    diagnostics: List[ParseDiagnostic] = Field(default_factory=list)


class _OrderedGraph(Graph):
    """Graph that records statements in the order the parser asserts them"""

    def __init__(self):
        super().__init__(bind_namespaces="none")
        self.asserted = []

    def add(self, triple):
        self.asserted.append(triple)
        return super().add(triple)


class TurtleIngest:
    """
    Step-wise Turtle reader.

    Every step consumes one statement. Directives update the prefix table,
    triple statements are parsed by rdflib against the prefixes and base
    declared so far. Iterating yields steps until the end of input.
    """

    def __init__(self, source: str, base_iri: Optional[str] = None, strict: bool = False):
        self.strict = strict
        self.state = IngestState(source=source, base=base_iri)
        self.state.at_end = skip_insignificant(source, 0) >= len(source)
        self._anonymous: Dict[BNode, str] = {}

    @property
    def prefixes(self) -> Dict[str, str]:
        return dict(self.state.known_prefixes)

    @property
    def diagnostics(self) -> List[ParseDiagnostic]:
        return list(self.state.diagnostics)

    def __iter__(self) -> Iterator[IngestStep]:
        while not self.state.at_end:
            yield self.step()

    def step(self) -> IngestStep:
        """Consume the next statement"""
        state = self.state
        if state.at_end:
            return IngestStep(prefixes=self.prefixes)

        statement = scan_statement(state.source, state.position)
        if statement is None:
            state.at_end = True
            return IngestStep(prefixes=self.prefixes)

        line = state.line + state.source.count("\n", state.position, statement.start)
        state.line = line + state.source.count("\n", statement.start, statement.end)
        state.position = statement.end

        triples: List[Triple] = []
        diagnostic = None
        try:
            if statement.kind == "prefix":
                self._declare_prefix(statement)
            elif statement.kind == "base":
                self._declare_base(statement)
            else:
                triples = self._parse_triples(statement)
        except (TurtleSyntaxError, BadSyntax, ParserError) as e:
            message = _grammar_message(e)
            if self.strict:
                raise TurtleSyntaxError(message, line=line) from e
            diagnostic = ParseDiagnostic(line=line, statement=_excerpt(statement.text), message=message)
            state.diagnostics.append(diagnostic)

        state.emitted_triples.extend(triples)
        state.at_end = skip_insignificant(state.source, state.position) >= len(state.source)

        return IngestStep(triples=triples, prefixes=self.prefixes, diagnostic=diagnostic)

    def _declare_prefix(self, statement: Statement) -> None:
        match = _AT_PREFIX.match(statement.text) or _SPARQL_PREFIX.match(statement.text)
        if match is None:
            raise TurtleSyntaxError("malformed prefix declaration")
        name, iri = match.groups()
        self.state.known_prefixes[name] = self._resolve(iri)

    def _declare_base(self, statement: Statement) -> None:
        match = _AT_BASE.match(statement.text) or _SPARQL_BASE.match(statement.text)
        if match is None:
            raise TurtleSyntaxError("malformed base declaration")
        self.state.base = self._resolve(match.group(1))

    def _resolve(self, iri: str) -> str:
        return urljoin(self.state.base, iri) if self.state.base else iri

    def _header(self) -> str:
        lines = []
        if self.state.base:
            lines.append(f"@base <{self.state.base}> .")
        for name, iri in self.state.known_prefixes.items():
            lines.append(f"@prefix {name}: <{iri}> .")
        return "\n".join(lines) + "\n"

    def _parse_triples(self, statement: Statement) -> List[Triple]:
        graph = _OrderedGraph()
        with _lexical_literals():
            graph.parse(
                data=self._header() + statement.text + "\n",
                format="turtle",
                publicID=self.state.base
            )
        return [self._to_triple(s, p, o) for s, p, o in graph.asserted]

    def _to_triple(self, s, p, o) -> Triple:
        subject = self._subject_text(s)
        return Triple(
            subject=subject,
            predicate=str(p),
            object=self._object_text(o),
            subject_label=subject
        )

    def _subject_text(self, term) -> str:
        if isinstance(term, URIRef):
            return _unmask_blank(str(term))
        if isinstance(term, BNode):
            return self._anonymous_label(term)
        return ""

    def _object_text(self, term) -> str:
        if isinstance(term, URIRef):
            value = str(term)
            # Blank node objects have no textual form
            return "" if value.startswith(BNODE_IRI_PREFIX) else value
        if isinstance(term, Literal):
            return _quoteLiteral(term)
        return ""

    def _anonymous_label(self, node: BNode) -> str:
        label = self._anonymous.get(node)
        if label is None:
            label = f"_:genid{len(self._anonymous) + 1}"
            self._anonymous[node] = label
        return label


@contextmanager
def _lexical_literals():
    """Keep typed literals in their source lexical form while parsing"""
    previous = rdflib.NORMALIZE_LITERALS
    rdflib.NORMALIZE_LITERALS = False
    try:
        yield
    finally:
        rdflib.NORMALIZE_LITERALS = previous


def _grammar_message(error: Exception) -> str:
    """Grammar error text without the parser's position and input echo"""
    text = str(error)
    match = _BAD_SYNTAX.search(text)
    if match:
        return match.group(1)
    lines = text.strip().splitlines()
    return lines[0] if lines else type(error).__name__


def _unmask_blank(value: str) -> str:
    if value.startswith(BNODE_IRI_PREFIX):
        return "_:" + value[len(BNODE_IRI_PREFIX):]
    return value


def _excerpt(text: str) -> str:
    text = " ".join(text.split())
    if len(text) <= _EXCERPT_LENGTH:
        return text
    return text[:_EXCERPT_LENGTH - 3] + "..."


def ingest_turtle(
    source: str,
    base_iri: Optional[str] = None,
    strict: bool = False
) -> IngestResult:
    """Run every step of a document and collect the raw triples"""
    ingest = TurtleIngest(source, base_iri=base_iri, strict=strict)
    for _ in ingest:
        pass

    return IngestResult(
        triples=list(ingest.state.emitted_triples),
        prefixes=ingest.prefixes,
        diagnostics=ingest.diagnostics
    )
