#!/usr/bin/env python
"""
Dump the mappings of a source map, one generated line at a time.

The mappings are given either directly on the command line or read from a
source map JSON file. Every segment is printed with the absolute values its
deltas resolve to. When a file is given, source paths and names are printed
next to their indexes.
"""

import argparse
import json
import sys
from typing import Iterator, List, Optional

from sourcemap import Mapping, SourceMap, resolve_mappings


def dump_lines(lines: List[List[Mapping]], smap: Optional[SourceMap] = None) -> Iterator[str]:
    for line, mappings in enumerate(lines):
        yield "================"
        yield f"Line {line}"

        for mapping in mappings:
            yield f"   column {mapping.column}"

            if mapping.source is not None:
                source = f"   source #{mapping.source}"
                if smap is not None:
                    source += f" {smap.source_path(mapping)}"
                yield source
                yield f"   orig line {mapping.source_line}"
                yield f"   orig column {mapping.source_column}"
                if mapping.name is not None:
                    name = f"   name #{mapping.name}"
                    if smap is not None:
                        name += f" {smap.name_of(mapping)}"
                    yield name

            yield ""

        yield ""


def dump_mappings(mappings: str, strict: bool = True) -> Iterator[str]:
    return dump_lines(resolve_mappings(mappings, strict))


def dump_sourcemap(smap: SourceMap) -> Iterator[str]:
    return dump_lines(smap.lines, smap)


def get_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="dump source map mappings")
    opt = parser.add_argument
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("mappings", nargs="?", help="mappings string to decode")
    group.add_argument("-f", "--file", help="source map JSON file to read mappings from")
    opt("--permissive", action="store_true", help="wrap oversized values instead of failing")

    args = parser.parse_args(argv)
    return args


def main(argv=None) -> int:
    args = get_args(argv)
    strict = not args.permissive
    try:
        if args.file:
            lines = list(dump_sourcemap(SourceMap.load(args.file, strict)))
        else:
            # decode everything first so a bad segment produces no partial dump
            lines = list(dump_mappings(args.mappings, strict))
    except (OSError, KeyError, TypeError, AttributeError, json.JSONDecodeError) as exc:
        print(f"Error while reading source map: {exc!r}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Error while decoding mappings: {exc}", file=sys.stderr)
        return 1
    for text in lines:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
