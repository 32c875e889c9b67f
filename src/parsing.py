"""Dataset loading: JSON files, record ingestion, date handling and GEDCOM import."""

import json
import logging
from pathlib import Path
import re
from typing import Any

from ged4py import GedcomReader

from models import Dataset, Person, Relationship

logger = logging.getLogger("genealogy.parsing")


class DatasetLoadError(Exception):
    """Raised when a dataset file cannot be read or decoded."""


# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

DATE_QUALIFIERS = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|FROM|TO|BET\.?|AND|CIRCA|CA\.?|AROUND):?\s*",
    flags=re.IGNORECASE,
)

# (pattern, field order) pairs, tried in order. "M" is a numeric month, "N" a month name.
DATE_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), "YMD"),  # 1839-08-29, 1746-00-00
    (re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$"), "DNY"),  # 25 NOV 1954, 02 May1838
    (re.compile(r"^([A-Za-z]+)\.?,?\s*(\d{4})$"), "NY"),  # NOV 1954, May, 1837
    (re.compile(r"^(\d{4})$"), "Y"),  # 1698
    (re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$"), "MDY"),  # 01-27-1920, 1/15/1957
    (re.compile(r"^(\d{1,2})\s+(\d{1,2})\s+(\d{4})$"), "MDY"),  # 04 05 1911
    (re.compile(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$"), "NDY"),  # April 17, 1850; Oct.12,1929
]

LEADING_YEAR = re.compile(r"^\s*(\d{4})")


def _date_from_match(groups: tuple[str, ...], order: str) -> str | None:
    year, month, day = None, 1, 1
    for code, value in zip(order, groups):
        if code == "Y":
            year = int(value)
        elif code == "M":
            month = int(value)
        elif code == "D":
            day = int(value)
        elif code == "N":
            month = MONTH_MAP.get(value.upper().rstrip("."))
            if month is None:
                return None

    # 00 month/day placeholders mean "unknown"
    month = month or 1
    day = day or 1
    if year is None or not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


def parse_date_string(date_str: str | None) -> str | None:
    """
    Parse a free-form or GEDCOM date string into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Handles formats like "25 NOV 1954", "ABOUT 1905", "JAN 1905", "(01-27-1920)",
    "(02 May1838)", "(05/15/1923)", "(SEPT. 17,1910)", "(May, 1837)", "(1789?)",
    "(About:1746-00-00)" and "(11 Aug. 1968)". Missing month or day default to 1.
    """
    if not date_str:
        return None

    s = date_str.strip().strip("()").rstrip("?")
    s = DATE_QUALIFIERS.sub("", s).strip()
    if not s:
        return None

    for pattern, order in DATE_PATTERNS:
        match = pattern.match(s)
        if match:
            parsed = _date_from_match(match.groups(), order)
            if parsed:
                return parsed
    return None


def extract_year(date_str: Any) -> int | None:
    """
    Year of a date string: the leading 4-digit year when there is one,
    otherwise whatever the GEDCOM-aware parser recovers.
    """
    if not isinstance(date_str, str) or not date_str.strip():
        return None
    match = LEADING_YEAR.match(date_str)
    if match:
        return int(match.group(1))
    iso = parse_date_string(date_str)
    return int(iso[:4]) if iso else None


# ============================================================================
# JSON datasets
# ============================================================================


def load_dataset_json(filepath: Path) -> dict[str, Any]:
    """Read a dataset JSON file. This is the only place the package raises on bad input."""
    try:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise DatasetLoadError(f"Cannot read {filepath}: {e}") from e
    except json.JSONDecodeError as e:
        raise DatasetLoadError(f"Malformed JSON in {filepath}: {e}") from e

    if not isinstance(data, dict):
        raise DatasetLoadError(f"Expected a JSON object at the top level of {filepath}")
    return data


def parse_people(records: list[Any]) -> list[Person]:
    """Convert raw person records to Person objects, skipping records without an id."""
    persons: list[Person] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            logger.warning("Skipping person at index %d: not an object", index)
            continue
        try:
            persons.append(Person.from_dict(record))
        except ValueError as e:
            logger.warning("Skipping person at index %d: %s", index, e)
    return persons


def parse_relationships(records: list[Any]) -> list[Relationship]:
    """Convert raw relationship records, collapsing type synonyms onto canonical kinds."""
    relationships: list[Relationship] = []
    for index, record in enumerate(records):
        rel = Relationship.from_dict(record) if isinstance(record, dict) else None
        if rel is None:
            logger.warning("Skipping relationship at index %d: %r", index, record)
            continue
        relationships.append(rel)
    return relationships


def parse_dataset(raw: dict[str, Any]) -> Dataset:
    """Build a typed Dataset from decoded JSON. `people` must be a list."""
    people = parse_people(raw["people"])
    rel_records = raw.get("relationships") or []
    relationships = parse_relationships(rel_records if isinstance(rel_records, list) else [])
    metadata = raw.get("metadata")
    return Dataset(
        people=people,
        relationships=relationships,
        metadata=dict(metadata) if isinstance(metadata, dict) else {},
    )


# ============================================================================
# GEDCOM import
# ============================================================================


def normalize_xref(xref_id: str) -> str:
    """Turn a GEDCOM xref like '@I_347421849@' into a plain person id ('I_347421849')."""
    ident = xref_id.strip().strip("@")
    if not ident:
        raise ValueError(f"Empty xref id: {xref_id!r}")
    return ident


def parse_gedcom(filepath: Path) -> GedcomReader:
    """Parse a GEDCOM file and return the reader object."""
    return GedcomReader(str(filepath))


def extract_name_parts(indi) -> tuple[str, str | None, str | None]:
    """Extract full name, given name, and surname from an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return ("Unknown", None, None)

    name_value = name_rec.value

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_value, tuple):
        given, surname, suffix = name_value
        parts = [p for p in [given, surname, suffix] if p]
        return (" ".join(parts) if parts else "Unknown", given or None, surname or None)

    # Fallback: string format "Given /Surname/"
    full_name = " ".join(str(name_value).replace("/", " ").split()) or "Unknown"
    givn = name_rec.sub_tag("GIVN")
    surn = name_rec.sub_tag("SURN")
    return (full_name, givn.value if givn else None, surn.value if surn else None)


def extract_event_details(indi, tag: str) -> tuple[str | None, str | None]:
    """Extract date and place from an event tag (BIRT, DEAT, etc.)."""
    event = indi.sub_tag(tag)
    if event is None:
        return (None, None)

    date_rec = event.sub_tag("DATE")
    place_rec = event.sub_tag("PLAC")

    # ged4py may return DateValue objects
    date_val = str(date_rec.value) if date_rec and date_rec.value else None
    place_val = str(place_rec.value) if place_rec and place_rec.value else None
    return (date_val, place_val)


def extract_sex(indi) -> str | None:
    """Extract sex from an individual record."""
    sex_rec = indi.sub_tag("SEX")
    return sex_rec.value if sex_rec else None


def gedcom_to_raw(reader: GedcomReader) -> dict[str, Any]:
    """
    Convert GEDCOM INDI/FAM records into the raw JSON dataset shape
    ({"people": [...], "relationships": [...]}) consumed by enrichment.
    Ignores non-standard, vendor-specific tags (starting with _).
    """
    people: list[dict[str, Any]] = []
    relationships: list[dict[str, Any]] = []

    for rec in reader.records0("INDI"):
        if rec.xref_id is None:
            continue

        full_name, given_name, surname = extract_name_parts(rec)
        birth_date_string, birth_place = extract_event_details(rec, "BIRT")
        death_date_string, _ = extract_event_details(rec, "DEAT")

        person: dict[str, Any] = {
            "id": normalize_xref(rec.xref_id),
            "name": full_name,
            "gender": extract_sex(rec),
        }
        if given_name:
            person["givenName"] = given_name
        if surname:
            person["surname"] = surname
        # ISO when parseable, the raw GEDCOM text otherwise
        if birth_date_string:
            person["birthDate"] = parse_date_string(birth_date_string) or birth_date_string
        if death_date_string:
            person["deathDate"] = parse_date_string(death_date_string) or death_date_string
        if birth_place:
            person["birthplace"] = birth_place
        people.append(person)

    for rec in reader.records0("FAM"):
        if rec.xref_id is None:
            continue

        husb = rec.sub_tag("HUSB")
        wife = rec.sub_tag("WIFE")
        husb_id = normalize_xref(husb.xref_id) if husb and husb.xref_id else None
        wife_id = normalize_xref(wife.xref_id) if wife and wife.xref_id else None

        if husb_id and wife_id:
            relationships.append({"from": husb_id, "to": wife_id, "type": "marriage"})

        for child in rec.sub_tags("CHIL"):
            if not child.xref_id:
                continue
            child_id = normalize_xref(child.xref_id)
            if husb_id:
                relationships.append({"from": husb_id, "to": child_id, "type": "father-child"})
            if wife_id:
                relationships.append({"from": wife_id, "to": child_id, "type": "mother-child"})

    logger.info("GEDCOM import: %d people, %d relationships", len(people), len(relationships))
    return {"people": people, "relationships": relationships}
