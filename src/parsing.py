"""GEDCOM import: read individuals and families into Person and Union records."""

from datetime import date
from pathlib import Path
import logging
import re

from ged4py import GedcomReader

from models import Person, Union

logger = logging.getLogger(__name__)


# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1, "JANUARY": 1,
    "FEB": 2, "FEBRUARY": 2,
    "MAR": 3, "MARCH": 3,
    "APR": 4, "APRIL": 4,
    "MAY": 5,
    "JUN": 6, "JUNE": 6,
    "JUL": 7, "JULY": 7,
    "AUG": 8, "AUGUST": 8,
    "SEP": 9, "SEPT": 9, "SEPTEMBER": 9,
    "OCT": 10, "OCTOBER": 10,
    "NOV": 11, "NOVEMBER": 11,
    "DEC": 12, "DECEMBER": 12,
}

QUALIFIER_RE = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|FROM|TO|BET\.?|AND|CIRCA|CA\.?|AROUND):?\s*",
    flags=re.IGNORECASE,
)

# (pattern, order of the captured groups). "M" is a month name, "m" a month number.
DATE_PATTERNS = [
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), "Ymd"),  # 1839-08-29, 1746-00-00
    (re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$"), "dMY"),  # 25 NOV 1954, 11 Aug. 1968
    (re.compile(r"^([A-Za-z]+)\.?,?\s*(\d{4})$"), "MY"),  # NOV 1954, May, 1837
    (re.compile(r"^(\d{4})$"), "Y"),  # 1698
    (re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$"), "mdY"),  # 01-27-1920, 1/15/1957
    (re.compile(r"^(\d{1,2})\s+(\d{1,2})\s+(\d{4})$"), "mdY"),  # 04 05 1911
    (re.compile(r"^(\d{1,2})\s+([A-Za-z]+)(\d{4})$"), "dMY"),  # 02 May1838
    (re.compile(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$"), "MdY"),  # April 17, 1850
]


def parse_date_string(date_str: str | None) -> str | None:
    """
    Parse a free-form GEDCOM date string into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Qualifiers (ABT, BEF, AROUND, ...), parentheses and trailing question marks
    are ignored. Missing month or day default to 01.
    """
    if not date_str:
        return None

    s = date_str.strip().strip("()").rstrip("?")
    s = QUALIFIER_RE.sub("", s).strip()
    if not s:
        return None

    for pattern, order in DATE_PATTERNS:
        match = pattern.match(s)
        if not match:
            continue

        year, month, day = None, 1, 1
        for part, value in zip(order, match.groups()):
            if part == "Y":
                year = int(value)
            elif part == "m":
                month = int(value)
            elif part == "M":
                month = MONTH_MAP.get(value.upper().rstrip("."))
            elif part == "d":
                day = int(value)

        # ISO dates may carry 00 for an unknown month or day
        if order == "Ymd":
            month = month or 1
            day = day or 1

        if not month:
            continue
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            # 31 FEB, month 13 and the like
            continue

    return None


def xref_to_id(xref_id: str) -> str:
    """Turn a GEDCOM xref like '@I_347421849@' into an opaque id 'I_347421849'."""
    return xref_id.strip("@")


def parse_gedcom(filepath: Path) -> GedcomReader:
    """Parse a GEDCOM file and return the reader object."""
    return GedcomReader(str(filepath))


def extract_full_name(indi) -> str:
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return "Unknown"

    name_value = name_rec.value
    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_value, tuple):
        parts = [p for p in name_value if p]
        return " ".join(parts) if parts else "Unknown"

    # Fallback: string format "Given /Surname/"
    return " ".join(str(name_value).replace("/", " ").split()) or "Unknown"


def extract_event_date(rec, tag: str) -> str | None:
    """Extract the ISO date of an event tag (BIRT, DEAT, MARR, DIV)."""
    event = rec.sub_tag(tag)
    if event is None:
        return None

    date_rec = event.sub_tag("DATE")
    if date_rec is None or not date_rec.value:
        return None

    # ged4py may return DateValue objects
    raw = str(date_rec.value)
    parsed = parse_date_string(raw)
    if parsed is None:
        logger.debug("Unparsed %s date %r on %s", tag, raw, rec.xref_id)
    return parsed


def extract_sex(indi) -> str | None:
    sex_rec = indi.sub_tag("SEX")
    return sex_rec.value if sex_rec else None


def extract_note(indi) -> str | None:
    note_rec = indi.sub_tag("NOTE")
    if note_rec is None or not note_rec.value:
        return None
    return str(note_rec.value)


def normalize_data(reader: GedcomReader) -> tuple[list[Person], list[Union]]:
    """
    Extract persons and unions from parsed GEDCOM data.

    Family records set each child's father_id (HUSB) and mother_id (WIFE); a
    family with both spouses becomes a Union. Non-standard tags are ignored.
    """
    unions: list[Union] = []
    parents_of: dict[str, tuple[str | None, str | None]] = {}

    for rec in reader.records0("FAM"):
        if rec.xref_id is None:
            continue

        husb = rec.sub_tag("HUSB")
        wife = rec.sub_tag("WIFE")
        husb_id = xref_to_id(husb.xref_id) if husb and husb.xref_id else None
        wife_id = xref_to_id(wife.xref_id) if wife and wife.xref_id else None

        if husb_id and wife_id:
            unions.append(
                Union(
                    id=xref_to_id(rec.xref_id),
                    person1_id=husb_id,
                    person2_id=wife_id,
                    union_date=extract_event_date(rec, "MARR"),
                    divorce_date=extract_event_date(rec, "DIV"),
                    type="marriage",
                )
            )

        for child in rec.sub_tags("CHIL"):
            if not child.xref_id:
                continue
            child_id = xref_to_id(child.xref_id)
            # A child listed in several families keeps its first (birth) family
            parents_of.setdefault(child_id, (husb_id, wife_id))

    persons: list[Person] = []
    for rec in reader.records0("INDI"):
        if rec.xref_id is None:
            continue

        indi_id = xref_to_id(rec.xref_id)
        father_id, mother_id = parents_of.get(indi_id, (None, None))
        persons.append(
            Person(
                id=indi_id,
                full_name=extract_full_name(rec),
                birth_date=extract_event_date(rec, "BIRT"),
                death_date=extract_event_date(rec, "DEAT"),
                bio=extract_note(rec),
                father_id=father_id,
                mother_id=mother_id,
                sex=extract_sex(rec),
            )
        )

    return persons, unions
