import re
from typing import Dict, Iterable, List, Optional, Sequence

from .models import PageDocument, SubjectGroup, Triple
from ..ingest.turtle import IngestStep


_SCHEME = re.compile(r"([A-Za-z][A-Za-z0-9+.\-]*):")
_AUTHORITY_END = re.compile(r"[/?#]")

# Schemes whose URLs always carry a host
_HOST_SCHEMES = {"http", "https", "ftp", "ws", "wss"}


def is_absolute_url(value: str) -> bool:
    """
    True if the value has a URL scheme and no whitespace.

    Web schemes (http, https, ftp, ws, wss) also need a non-empty host, so
    `http://` alone is rejected. Any other scheme is accepted on the scheme
    alone, which is looser than a full URL parser.
    """
    match = _SCHEME.match(value)
    if match is None or any(ch.isspace() for ch in value):
        return False
    if match.group(1).lower() in _HOST_SCHEMES:
        rest = value[match.end():].lstrip("/\\")
        authority = _AUTHORITY_END.split(rest, 1)[0]
        return bool(authority.rpartition("@")[2])
    return True


def _match_namespace(value: str, namespaces: Sequence[str]) -> Optional[str]:
    """First namespace the value starts with, in the given order"""
    if not is_absolute_url(value):
        return None
    for namespace in namespaces:
        if value.startswith(namespace):
            return namespace
    return None


def _shorten(value: str, namespace: str) -> str:
    # The value starts with the namespace, so its first occurrence is the prefix
    return value[len(namespace):]


def resolve_links(triple: Triple, prefixes: Iterable[str]) -> Triple:
    """
    Link the fields of a triple that fall under a known namespace.

    Subject keeps its full value and gets a shortened label, predicate and
    object are shortened in place. Fields without a matching namespace are
    left as they are.

    Args:
        triple: Triple to update in place
        prefixes: Namespace IRIs, tried in order

    Returns:
        The same triple
    """
    namespaces = list(prefixes)

    namespace = _match_namespace(triple.subject, namespaces)
    if namespace is not None:
        triple.subject_link = triple.subject
        triple.subject_label = _shorten(triple.subject, namespace)

    namespace = _match_namespace(triple.predicate, namespaces)
    if namespace is not None:
        triple.predicate_link = triple.predicate
        triple.predicate = _shorten(triple.predicate, namespace)

    namespace = _match_namespace(triple.object, namespaces)
    if namespace is not None:
        triple.object_link = triple.object
        triple.object = _shorten(triple.object, namespace)

    return triple


def group_by_subject(triples: Iterable[Triple]) -> List[SubjectGroup]:
    """Group triples by subject, keeping first-seen order"""
    groups: Dict[str, SubjectGroup] = {}

    for triple in triples:
        group = groups.get(triple.subject)
        if group is None:
            group = SubjectGroup(
                subject=triple.subject,
                subject_label=triple.subject_label,
                subject_link=triple.subject_link
            )
            groups[triple.subject] = group
        group.triples.append(triple)

    return list(groups.values())


def sort_subject_groups(groups: Iterable[SubjectGroup]) -> List[SubjectGroup]:
    """Order groups by subject (code point order)"""
    return sorted(groups, key=lambda group: group.subject)


class DocumentBuilder:
    """Accumulate the triples of one file and build its page document"""

    def __init__(self, title: str = "Definitions"):
        self.title = title
        self.triples: List[Triple] = []

    def add(self, triples: Iterable[Triple], prefixes: Iterable[str]) -> None:
        """Link triples with the namespaces known so far and keep them"""
        namespaces = list(prefixes)
        for triple in triples:
            self.triples.append(resolve_links(triple, namespaces))

    def add_step(self, step: IngestStep) -> None:
        self.add(step.triples, step.prefixes.values())

    def build(self) -> PageDocument:
        groups = sort_subject_groups(group_by_subject(self.triples))
        return PageDocument(title=self.title, subject_groups=groups)


def build_document(steps: Iterable[IngestStep], title: str = "Definitions") -> PageDocument:
    """Build the page document from a sequence of ingest steps"""
    builder = DocumentBuilder(title=title)
    for step in steps:
        builder.add_step(step)
    return builder.build()
