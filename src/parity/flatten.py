"""
Tree flattener for ATML-style test result documents.

Walks the result hierarchy depth-first, pre-order, in document order, and
emits one flat node descriptor per recognized element:

    ResultSet / TestGroup  → GroupNode
    Test with numeric data → MeasurementNode
    Test / SessionAction   → StepNode

Anything else (text, comments, unknown elements and whatever sits below
them) is skipped. The output order is part of the contract: ordinals and the
embedded annotations both depend on every consumer seeing the same sequence.
"""

import re
from collections.abc import Iterator
from xml.etree.ElementTree import Element

from src.domain.schemas import (
    FlatNode,
    GroupNode,
    LimitEntry,
    MeasurementNode,
    StepNode,
)

ROOT_TAG = "ResultSet"
GROUP_TAGS = frozenset({"ResultSet", "TestGroup"})
LEAF_TAGS = frozenset({"Test", "SessionAction"})
WRAPPER_TAGS = frozenset({"TestResultsCollection", "TestResults"})

NUMERIC_DATUM_TYPES = frozenset({
    "double", "float", "decimal", "integer", "int", "long", "short",
    "unsignedint", "unsignedlong", "unsignedshort", "byte", "unsignedbyte",
    "int64", "uint64",
})

# Types that never make a Measurement, even when the value looks numeric
TEXT_DATUM_TYPES = frozenset({"string", "boolean", "bool", "datetime", "date", "time"})

# TestStand writes its own types, e.g. xsi:type="ts:TS_double"
TESTSTAND_TYPE_PREFIX = "ts_"

_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def local_name(tag: object) -> str:
    """Element tag without namespace; "" for comments/processing instructions."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _children(element: Element, name: str) -> Iterator[Element]:
    for child in element:
        if local_name(child.tag) == name:
            yield child


def _child(element: Element | None, *names: str) -> Element | None:
    """First descendant following the chain of local names."""
    current = element
    for name in names:
        if current is None:
            return None
        current = next(_children(current, name), None)
    return current


def _attr(element: Element | None, name: str) -> str | None:
    """Attribute by local name (namespace prefixes ignored)."""
    if element is None:
        return None
    if name in element.attrib:
        return element.attrib[name]
    for key, value in element.attrib.items():
        if local_name(key) == name:
            return value
    return None


def format_root_name(raw: str) -> str:
    """
    Reformat the top-level container name.

    Examples:
        "C:\\Seqs\\UUT_Test.seq#MainSequence" → "UUT Test"
        "UUT_Test#123"                         → "UUT Test"
    """
    name = raw.split("#", 1)[0]
    name = re.split(r"[\\/]", name)[-1]
    name = re.sub(r"\.seq$", "", name, flags=re.IGNORECASE)
    name = name.replace("_", " ")
    return re.sub(r"\s+", " ", name).strip()


class TreeFlattener:
    """
    Flatten a result document into pre-order node descriptors.

    Usage:
        flattener = TreeFlattener()
        nodes = flattener.flatten(document_root)
    """

    def locate_roots(self, document: Element) -> list[Element]:
        """
        Find the top-level containers.

        A bare ResultSet document is its own root. Under a known wrapper,
        every outermost ResultSet (document order) is a depth-0 root. Returns an empty
        list for any other document element.
        """
        tag = local_name(document.tag)
        if tag == ROOT_TAG:
            return [document]
        if tag not in WRAPPER_TAGS:
            return []
        return list(self._nested_roots(document))

    def _nested_roots(self, element: Element) -> Iterator[Element]:
        # ResultSets nested in another ResultSet are walked as groups, not roots
        for child in element:
            if local_name(child.tag) == ROOT_TAG:
                yield child
            else:
                yield from self._nested_roots(child)

    def is_known_document(self, document: Element) -> bool:
        return local_name(document.tag) in WRAPPER_TAGS | {ROOT_TAG}

    def flatten(self, document: Element) -> list[FlatNode]:
        """Flatten every root found in the document."""
        nodes: list[FlatNode] = []
        for root in self.locate_roots(document):
            nodes.extend(self.walk(root))
        return nodes

    def walk(self, root: Element) -> Iterator[FlatNode]:
        """
        Iterative pre-order walk from a top-level container at depth 0.

        Children are pushed in reverse so they pop in document order.
        """
        stack: list[tuple[Element, int]] = [(root, 0)]
        while stack:
            element, depth = stack.pop()
            yield self.describe(element, depth)

            if local_name(element.tag) not in GROUP_TAGS:
                continue

            recognized = [
                child for child in element
                if local_name(child.tag) in GROUP_TAGS | LEAF_TAGS
            ]
            for child in reversed(recognized):
                stack.append((child, depth + 1))

    # -------------------------------------------------------------------------
    # Node description
    # -------------------------------------------------------------------------

    def describe(self, element: Element, depth: int) -> FlatNode:
        """Build the flat descriptor for one recognized element."""
        tag = local_name(element.tag)
        name = self.node_name(element, depth)
        node_id = _attr(element, "ID") or f"{tag}@{depth}:{name}"
        status = self.node_status(element)
        timestamp = _attr(element, "startDateTime")

        if tag in GROUP_TAGS:
            return GroupNode(
                name=name,
                depth=depth,
                node_id=node_id,
                status=status,
                timestamp=timestamp,
            )

        result = _child(element, "TestResult")
        candidates, expected = self.limit_entries(result)
        datum = _child(result, "TestData", "Datum")

        if datum is not None and self.is_numeric_datum(datum):
            return MeasurementNode(
                name=name,
                depth=depth,
                node_id=node_id,
                status=status,
                timestamp=timestamp,
                value=_attr(datum, "value"),
                units=_attr(datum, "nonStandardUnit") or _attr(datum, "unit"),
                limit_candidates=candidates,
                expected=expected,
            )

        return StepNode(
            name=name,
            depth=depth,
            node_id=node_id,
            status=status,
            timestamp=timestamp,
            limit_candidates=candidates,
            expected=expected,
        )

    def node_name(self, element: Element, depth: int) -> str:
        """Caller-assigned label first, then the internal identifier."""
        raw = (
            _attr(element, "callerName")
            or _attr(element, "name")
            or _attr(element, "ID")
            or ""
        )
        if depth == 0 and local_name(element.tag) == ROOT_TAG:
            return format_root_name(raw) or _attr(element, "ID") or ""
        return raw

    def node_status(self, element: Element) -> str | None:
        outcome = _child(element, "Outcome")
        if outcome is None:
            outcome = _child(element, "ActionOutcome")
        return _attr(outcome, "value")

    def is_numeric_datum(self, datum: Element) -> bool:
        """
        Typed datums use xsi:type (XSD or TestStand TS_* names). Untyped ones,
        and types not in either table, must hold a plain number.
        """
        xsi_type = (_attr(datum, "type") or "").rsplit(":", 1)[-1].lower()
        xsi_type = xsi_type.removeprefix(TESTSTAND_TYPE_PREFIX)
        if xsi_type in NUMERIC_DATUM_TYPES:
            return True
        if xsi_type in TEXT_DATUM_TYPES:
            return False
        value = _attr(datum, "value")
        return value is not None and _NUMBER_PATTERN.fullmatch(value.strip()) is not None

    def limit_entries(
        self,
        result: Element | None,
    ) -> tuple[tuple[LimitEntry, ...], LimitEntry | None]:
        """
        Collect raw limit candidates and the expected entry.

        Candidates: every Limit under LimitPair plus any SingleLimit, in
        document order.
        """
        limits = _child(result, "TestLimits", "Limits")
        if limits is None:
            return (), None

        candidates: list[LimitEntry] = []
        expected: LimitEntry | None = None
        for child in limits:
            tag = local_name(child.tag)
            if tag == "LimitPair":
                for limit in _children(child, "Limit"):
                    candidates.append(self._entry(limit))
            elif tag == "SingleLimit":
                candidates.append(self._entry(child))
            elif tag == "Expected" and expected is None:
                expected = self._entry(child)
        return tuple(candidates), expected

    def _entry(self, element: Element) -> LimitEntry:
        datum = _child(element, "Datum")
        value = _attr(datum, "value") if datum is not None else _attr(element, "value")
        return LimitEntry(comparator=_attr(element, "comparator"), value=value)
