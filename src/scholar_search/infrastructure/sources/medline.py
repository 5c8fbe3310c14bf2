"""
MEDLINE text parser.

E-utilities ``efetch`` with ``rettype=medline&retmode=text`` returns records as
tagged lines::

    PMID- 12345678
    TI  - A title that wraps
          onto the next line.
    AB  - The abstract text,
          continued here.
    FAU - Doe, Jane

A tag occupies the first four columns followed by ``- ``; continuation lines
are indented. Only abstracts are extracted here, the bibliographic fields come
from ``esummary`` JSON.
"""

from __future__ import annotations

import re
from enum import Enum, auto

_TAG_RE = re.compile(r"^([A-Z]{2,4})\s*-\s?(.*)$")


class _State(Enum):
    SEEKING_RECORD = auto()
    IN_ABSTRACT = auto()
    IN_OTHER_FIELD = auto()


def parse_abstracts(text: str) -> dict[str, str]:
    """
    Extract ``{pmid: abstract}`` from MEDLINE text.

    Records without an ``AB`` field are omitted. A repeated ``AB`` field in
    the same record is appended to the first.
    """
    abstracts: dict[str, list[str]] = {}
    state = _State.SEEKING_RECORD
    pmid: str | None = None

    for line in text.splitlines():
        if not line.strip():
            # A blank line separates records
            state = _State.SEEKING_RECORD
            pmid = None
            continue

        match = _TAG_RE.match(line)
        if match:
            tag, value = match.group(1), match.group(2).strip()
            if tag == "PMID":
                pmid = value or None
                state = _State.IN_OTHER_FIELD if pmid else _State.SEEKING_RECORD
            elif pmid is None:
                state = _State.SEEKING_RECORD
            elif tag == "AB":
                abstracts.setdefault(pmid, [])
                if value:
                    abstracts[pmid].append(value)
                state = _State.IN_ABSTRACT
            else:
                state = _State.IN_OTHER_FIELD
        elif line[:1].isspace():
            if state is _State.IN_ABSTRACT and pmid is not None:
                abstracts[pmid].append(line.strip())

    result = {}
    for key, parts in abstracts.items():
        abstract = " ".join(parts).strip()
        if abstract:
            result[key] = abstract
    return result
