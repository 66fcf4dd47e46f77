"""Heuristic candidate identity (email + name) extraction from CV text.

Both extractions are ordered cascades of small pure functions: each step
returns a value or ``None`` and the first non-``None`` result wins. Nothing
here raises on odd input; "not found" is an ordinary outcome.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

UNKNOWN_NAME = "Unknown"

# Both patterns only start at the left edge of a local-part run, so a long
# run without "@" is scanned once instead of once per character.
_STRICT_EMAIL_RE = re.compile(
    r"(?<![A-Za-z0-9._%+-])[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"
)
# Tolerates whitespace that PDF text runs insert around "@" and "."
_LENIENT_EMAIL_RE = re.compile(
    r"(?<![A-Za-z0-9._%+-])([A-Za-z0-9._%+-]+)\s*@\s*([A-Za-z0-9.-]+)\s*\.\s*([A-Za-z]{2,})"
)

_JOB_TITLE_RE = re.compile(
    r"\b(developer|engineer|manager|designer|analyst|consultant|specialist|"
    r"architect|administrator|coordinator|director|lead|intern|support|"
    r"technician|officer|assistant|associate|executive|president|scrum|"
    r"devops|qa|tester|admin)\b",
    re.IGNORECASE,
)
_SECTION_HEADER_RE = re.compile(
    r"^(education|contact|skills|experience|work|profile|reference|languages|"
    r"summary|objective|certifications?|awards?|projects?|publications?|"
    r"interests?|hobbies)$",
    re.IGNORECASE,
)

_CAPS_WORD_RE = re.compile(r"^[A-Z]{2,}$")
_SPACED_LETTERS_RE = re.compile(r"^[A-Z](\s+[A-Z.])+$")
_FIRST_INITIAL_LAST_RE = re.compile(r"^([A-Z][a-z]+)\s+([A-Z]\.)\s+([A-Z][a-z]+)$")
_CAPS_FIRST_INITIAL_LAST_RE = re.compile(r"^([A-Z]{2,})\s+([A-Z]\.)\s+([A-Z]{2,})$")
_FIRST_LAST_RE = re.compile(r"^([A-Z][a-z]+)\s+([A-Z][a-z]+)$")
_CAPS_FIRST_LAST_RE = re.compile(r"^([A-Z]{2,})\s+([A-Z]{2,})$")
_FIRST_MIDDLE_LAST_RE = re.compile(r"^([A-Z][a-z]+)\s+([A-Z][a-z]+)\s+([A-Z][a-z]+)$")


@dataclass(frozen=True)
class ExtractedIdentity:
    name: str
    email: Optional[str]


def title_case(value: str) -> str:
    """Lower-case, then capitalise the first letter of each word."""
    return " ".join(word[:1].upper() + word[1:] for word in value.lower().split())


# --------------------------------------------------------------------------
# Email
# --------------------------------------------------------------------------


def normalise_email_text(text: str) -> str:
    """Undo common obfuscation and PDF spacing around email addresses."""
    # (?<!\s) keeps long whitespace runs linear
    text = re.sub(r"(?<!\s)\s*@\s*", "@", text)
    text = re.sub(r"(?<!\s)\s*\.\s*", ".", text)
    text = re.sub(r"\bat\b", "@", text, flags=re.IGNORECASE)
    text = re.sub(r"\bdot\b", ".", text, flags=re.IGNORECASE)
    text = re.sub(r"\s{2,}", " ", text)
    return text.strip()


def _email_verbatim(raw: str, normalised: str) -> Optional[str]:
    match = _STRICT_EMAIL_RE.search(raw)
    return match.group(0).lower() if match else None


def _email_strict(raw: str, normalised: str) -> Optional[str]:
    match = _STRICT_EMAIL_RE.search(normalised)
    return match.group(0).lower() if match else None


def _email_lenient(raw: str, normalised: str) -> Optional[str]:
    # Spacing around "@" and "." is already gone after normalise_email_text,
    # so within extract_email this step only repeats _email_strict.
    match = _LENIENT_EMAIL_RE.search(normalised)
    if not match:
        return None
    local, domain, tld = (re.sub(r"\s+", "", part) for part in match.groups())
    return f"{local}@{domain}.{tld}".lower()


# The verbatim pass runs before the "at"/"dot" rewriting so an address that
# is literally in the text wins over one assembled from prose.
_EMAIL_STEPS: Tuple[Callable[[str, str], Optional[str]], ...] = (
    _email_verbatim,
    _email_strict,
    _email_lenient,
)


def extract_email(raw_text: Optional[str]) -> Optional[str]:
    """Return the first plausible email address in the text, lower-cased."""
    if not raw_text:
        return None
    raw = str(raw_text)
    normalised = normalise_email_text(raw)
    if "@" not in normalised:
        return None
    for step in _EMAIL_STEPS:
        email = step(raw, normalised)
        if email:
            return email
    return None


# --------------------------------------------------------------------------
# Name
# --------------------------------------------------------------------------


def _is_excluded(line: str) -> bool:
    """Section headers and job titles are never names."""
    return bool(_SECTION_HEADER_RE.match(line) or _JOB_TITLE_RE.search(line))


def _name_from_spaced_letters(line: str) -> Optional[str]:
    # "J O H N A . D O E": a lone "." marks the letter before it as an initial
    if not _SPACED_LETTERS_RE.match(line):
        return None
    parts = line.split()
    if "." in parts and parts.index(".") > 0:
        dot_idx = parts.index(".")
        first = title_case("".join(parts[: dot_idx - 1]))
        initial = parts[dot_idx - 1] + "."
        last = title_case("".join(parts[dot_idx + 1 :]))
        return " ".join(p for p in (first, initial, last) if p)
    return title_case("".join(parts))


def _name_first_initial_last(line: str) -> Optional[str]:
    match = _FIRST_INITIAL_LAST_RE.match(line)
    return " ".join(match.groups()) if match else None


def _name_caps_first_initial_last(line: str) -> Optional[str]:
    match = _CAPS_FIRST_INITIAL_LAST_RE.match(line)
    if not match:
        return None
    first, initial, last = match.groups()
    return f"{title_case(first)} {initial} {title_case(last)}"


def _name_first_last(line: str) -> Optional[str]:
    match = _FIRST_LAST_RE.match(line)
    return " ".join(match.groups()) if match else None


def _name_caps_first_last(line: str) -> Optional[str]:
    match = _CAPS_FIRST_LAST_RE.match(line)
    return title_case(" ".join(match.groups())) if match else None


def _name_first_middle_last(line: str) -> Optional[str]:
    match = _FIRST_MIDDLE_LAST_RE.match(line)
    if not match:
        return None
    first, middle, last = match.groups()
    return f"{first} {middle[0]}. {last}"


_LINE_NAME_STEPS: Tuple[Callable[[str], Optional[str]], ...] = (
    _name_from_spaced_letters,
    _name_first_initial_last,
    _name_caps_first_initial_last,
    _name_first_last,
    _name_caps_first_last,
    _name_first_middle_last,
)


def _name_from_stacked_caps(lines: Sequence[str]) -> Optional[str]:
    """Two consecutive single all-caps words, e.g. a "DOE" / "JANE" banner."""
    for first, second in zip(lines, lines[1:]):
        if _is_excluded(first) or _is_excluded(second):
            continue
        if _CAPS_WORD_RE.match(first) and _CAPS_WORD_RE.match(second):
            return title_case(f"{first} {second}")
    return None


def _name_from_single_line(lines: Sequence[str]) -> Optional[str]:
    for line in lines:
        if _is_excluded(line):
            continue
        for step in _LINE_NAME_STEPS:
            name = step(line)
            if name:
                return name
    return None


def extract_name(raw_text: Optional[str]) -> Optional[str]:
    """Find a person's name directly in the text, or None."""
    if not raw_text:
        return None
    lines: List[str] = [line.strip() for line in str(raw_text).splitlines()]
    lines = [line for line in lines if line]
    return _name_from_stacked_caps(lines) or _name_from_single_line(lines)


def name_from_email(email: Optional[str]) -> Optional[str]:
    """Derive a display name from an address such as ``jane.doe92@x.com``."""
    if not email or "@" not in email:
        return None
    local = email.split("@", 1)[0]
    local = re.sub(r"\d+", "", local)
    local = re.sub(r"[._-]+", " ", local).strip()
    return title_case(local) or None


def extract_identity(raw_text: Optional[str]) -> ExtractedIdentity:
    """Best-effort ``(name, email)`` for a CV; the name falls back to "Unknown"."""
    email = extract_email(raw_text)
    name = extract_name(raw_text) or name_from_email(email) or UNKNOWN_NAME
    return ExtractedIdentity(name=name, email=email)
