import re

# Matches: CSC 1051, CSC-1051, csc1051, MAT 1500, ECE 2042L, etc.
CANONICAL = re.compile(r'^([A-Za-z]{2,5})\s*[-]?\s*(\d{3,4}[A-Za-z]?)$')
DEPT_NUMBER = re.compile(r'^([A-Z]+)\s*(\d+)')


def normalize_code(raw: str) -> str | None:
    """
    Normalizes a course code to canonical 'DEPT NNNN' format.
    Handles: 'csc1051', 'CSC-1051', 'CSC 1051', 'mat 1500'
    Returns None if the string cannot be parsed as a course code.
    """
    if not raw or not raw.strip():
        return None
    m = CANONICAL.match(raw.strip())
    if m:
        return f"{m.group(1).upper()} {m.group(2).upper()}"
    return None


def dept_and_number(course_code: str) -> tuple[str, int]:
    """Sort key: department alphabetically, then course number ascending."""
    m = DEPT_NUMBER.match(course_code or "")
    if not m:
        return (course_code or "", 0)
    return (m.group(1), int(m.group(2)))


def normalize_completed(raw_codes, catalog_codes: set) -> dict:
    """
    Normalizes a completed-course selection.

    Accepts a list of codes or a single comma/newline/semicolon-separated
    string.

    Returns:
      {
        "valid":          ["CSC 1051", "MAT 1500"],   # normalized + found in catalog
        "invalid":        ["asdfasdf"],               # failed regex
        "not_in_catalog": ["CSC 9999"]                # valid format but unknown course
      }
    """
    if raw_codes is None:
        return {"valid": [], "invalid": [], "not_in_catalog": []}
    if isinstance(raw_codes, str):
        tokens = re.split(r'[,\n;]+', raw_codes)
    else:
        tokens = [str(t) for t in raw_codes if t is not None]

    valid = []
    invalid = []
    not_in_catalog = []
    seen: set[str] = set()

    for token in tokens:
        token = token.strip()
        if not token:
            continue
        normalized = normalize_code(token)
        if normalized is None:
            if token not in seen:
                invalid.append(token)
                seen.add(token)
        elif normalized in seen:
            pass  # deduplicate silently
        elif normalized not in catalog_codes:
            not_in_catalog.append(normalized)
            seen.add(normalized)
        else:
            valid.append(normalized)
            seen.add(normalized)

    return {"valid": valid, "invalid": invalid, "not_in_catalog": not_in_catalog}
