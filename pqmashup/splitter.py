"""Split a Power Query section document into one file per shared query.

This is a textual heuristic, not an M parser. A body ends at the first
``;`` followed (after whitespace) by ``shared`` or by the end of the text,
so a string literal containing ``;`` directly followed by the word
``shared`` cuts that body short.
"""

import re
import sys
from pathlib import Path
from typing import Dict, Iterator, List, NamedTuple, Union

QUERY_PATTERN = re.compile(
    r'shared\s+(?:#"(?P<quoted>[^"]+)"|(?P<bare>\w+))\s*=\s*(?P<body>.*?);\s*(?=shared|\Z)',
    re.DOTALL,
)

_UNSAFE = re.compile(r"[^0-9A-Za-z.\-]")
_UNSAFE_KEEP_SPACES = re.compile(r"[^0-9A-Za-z.\- ]")


class QueryBlock(NamedTuple):
    name: str
    filename: str
    body: str


def safe_filename(name: str, keep_spaces: bool = False) -> str:
    pattern = _UNSAFE_KEEP_SPACES if keep_spaces else _UNSAFE
    return pattern.sub("_", name) + ".m"


def iter_queries(section_text: str, keep_spaces: bool = False) -> Iterator[QueryBlock]:
    for match in QUERY_PATTERN.finditer(section_text):
        name = match.group("quoted") or match.group("bare")
        yield QueryBlock(name, safe_filename(name, keep_spaces), match.group("body").strip())


def split(section_text: str, keep_spaces: bool = False) -> Dict[str, str]:
    """Map safe filename to query body, in order of appearance."""
    return {block.filename: block.body for block in iter_queries(section_text, keep_spaces)}


def split_file(
    section_path: Union[str, Path],
    queries_dir: Union[str, Path],
    keep_spaces: bool = False,
) -> List[Path]:
    section_path = Path(section_path)
    queries_dir = Path(queries_dir)
    if not section_path.is_file():
        print(f"Warning: {section_path.name} not found, skipping split.", file=sys.stderr)
        return []

    # Bytes in, bytes out: query bodies keep their original line endings.
    content = section_path.read_bytes().decode("utf-8-sig")
    queries_dir.mkdir(parents=True, exist_ok=True)

    written = []
    seen = set()
    for block in iter_queries(content, keep_spaces):
        if block.filename in seen:
            print(f"Warning: query '{block.name}' overwrites {block.filename}", file=sys.stderr)
        target = queries_dir / block.filename
        target.write_bytes(block.body.encode("utf-8"))
        print(f"Split: {block.name} -> {target}")
        if block.filename not in seen:
            written.append(target)
        seen.add(block.filename)
    return written
