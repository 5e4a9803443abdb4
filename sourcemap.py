"""Resolve source map mappings into absolute generated -> source positions

Every field of a mapping segment is stored as a delta against the previous
segment. The generated column restarts at 0 on every line, all other fields
carry over for the whole document.
"""

import json
from bisect import bisect
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from base64vlq import base64vlq_decode

# a segment holds the generated column, optionally followed by source,
# original line and original column, optionally followed by name
_SEGMENT_SIZES = (1, 4, 5)


def decode_mappings(mappings: str, strict: bool = True) -> List[List[Tuple[int, ...]]]:
    """Decode a mappings string into per-line lists of delta segments

    Lines are separated by ``;``, segments within a line by ``,``.

    """
    lines = []
    for gline, vlqs in enumerate(mappings.split(";")):
        segments = []
        if vlqs:
            for segment in vlqs.split(","):
                deltas = base64vlq_decode(segment, strict)
                if len(deltas) not in _SEGMENT_SIZES:
                    raise ValueError(
                        f"Invalid mapping segment {segment!r} on line {gline}; "
                        f"expected 1, 4 or 5 values, got {len(deltas)}"
                    )
                segments.append(deltas)
        lines.append(segments)
    return lines


@dataclass(frozen=True)
class Mapping:
    """One segment with its deltas applied; sources and names are indexes"""

    line: int
    column: int
    source: Optional[int] = None
    source_line: Optional[int] = None
    source_column: Optional[int] = None
    name: Optional[int] = None

    def __post_init__(self):
        if self.source is not None and (
            self.source_line is None or self.source_column is None
        ):
            raise TypeError("Mapping with a source needs its line and column")
        if self.name is not None and self.source is None:
            raise TypeError("Mapping with a name needs a source")


def resolve_mappings(mappings: str, strict: bool = True) -> List[List[Mapping]]:
    """Decode a mappings string and accumulate its deltas"""
    source = source_line = source_column = name = 0
    lines = []
    for gline, segments in enumerate(decode_mappings(mappings, strict)):
        resolved = []
        column = 0
        for column_delta, *ref in segments:
            column += column_delta
            if not ref:
                resolved.append(Mapping(gline, column))
                continue
            source_delta, line_delta, source_column_delta, *name_delta = ref
            source += source_delta
            source_line += line_delta
            source_column += source_column_delta
            if name_delta:
                name += name_delta[0]
            resolved.append(
                Mapping(
                    gline,
                    column,
                    source,
                    source_line,
                    source_column,
                    name if name_delta else None,
                )
            )
        lines.append(resolved)
    return lines


@dataclass(frozen=True)
class SourceMap:
    """A version 3 source map with its mappings resolved"""

    sources: List[str]
    names: List[str]
    lines: List[List[Mapping]]
    file: Optional[str] = None
    source_root: Optional[str] = None
    _columns: List[List[int]] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self):
        if not self._columns:
            columns = [[m.column for m in line] for line in self.lines]
            object.__setattr__(self, "_columns", columns)

    @classmethod
    def from_json(cls, smap: Dict[str, Any], strict: bool = True) -> "SourceMap":
        if smap.get("version") != 3:
            raise ValueError("Only version 3 sourcemaps are supported")
        sources, names = smap.get("sources", []), smap.get("names", [])
        lines = resolve_mappings(smap["mappings"], strict)
        for mapping in (m for line in lines for m in line):
            if mapping.source is not None and not 0 <= mapping.source < len(sources):
                raise ValueError(
                    f"Invalid source index {mapping.source} on line {mapping.line}"
                )
            if mapping.name is not None and not 0 <= mapping.name < len(names):
                raise ValueError(
                    f"Invalid name index {mapping.name} on line {mapping.line}"
                )
        return cls(
            sources,
            names,
            # lookups bisect on the column
            [sorted(line, key=lambda m: m.column) for line in lines],
            smap.get("file"),
            smap.get("sourceRoot"),
        )

    @classmethod
    def load(cls, path: str, strict: bool = True) -> "SourceMap":
        with open(path) as reader:
            return cls.from_json(json.load(reader), strict)

    def source_path(self, mapping: Mapping) -> Optional[str]:
        if mapping.source is None:
            return None
        path = self.sources[mapping.source]
        if self.source_root:
            return f"{self.source_root.rstrip('/')}/{path}"
        return path

    def name_of(self, mapping: Mapping) -> Optional[str]:
        if mapping.name is None:
            return None
        return self.names[mapping.name]

    def __getitem__(self, idx: Union[int, Tuple[int, int]]) -> Mapping:
        """Closest mapping at or before the given generated column"""
        try:
            l, c = idx
        except TypeError:
            l, c = idx, 0
        if not 0 <= l < len(self.lines):
            raise IndexError(idx)
        cidx = bisect(self._columns[l], c)
        if not cidx:
            raise IndexError(idx)
        return self.lines[l][cidx - 1]
