"""Bulk senior import from CSV.

Rows are parsed into plain string dicts, validated as a whole, and only then
written to the store in fixed-size batches.
"""
import csv
import io
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from utils import SeniorIn

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10
HOUSEHOLD_TYPES = ("single", "family")
DELIVERY_METHODS = ("doorstep", "phone_confirmed", "family_member")

# field -> (accepted header names, default)
COLUMNS = {
    "name": (("name", "full_name"), ""),
    "age": (("age",), "0"),
    "household_type": (("household_type",), "single"),
    "family_adults": (("family_adults", "adults"), "1"),
    "family_children": (("family_children", "children"), "0"),
    "race_ethnicity": (("race_ethnicity", "ethnicity"), ""),
    "health_conditions": (("health_conditions", "health"), ""),
    "address": (("address",), ""),
    "dietary_restrictions": (("dietary_restrictions", "dietary"), ""),
    "phone": (("phone", "phone_number"), ""),
    "emergency_contact": (("emergency_contact", "emergency"), ""),
    "has_smartphone": (("has_smartphone", "smartphone"), "false"),
    "preferred_language": (("preferred_language", "language"), "english"),
    "needs_translation": (("needs_translation", "translation"), "false"),
    "delivery_method": (("delivery_method",), "doorstep"),
    "special_instructions": (("special_instructions", "instructions"), ""),
}

TEMPLATE_CSV = (
    "name,age,household_type,family_adults,family_children,race_ethnicity,health_conditions,address,"
    "dietary_restrictions,phone,emergency_contact,has_smartphone,preferred_language,needs_translation,"
    "delivery_method,special_instructions\n"
    "John Doe,75,single,1,0,White,Diabetes,123 Main St,None,555-0123,Jane Doe (555-0124),true,english,false,"
    "doorstep,Leave at front door\n"
    "Maria Garcia,68,family,2,1,Hispanic,None,456 Oak Ave,Gluten-free,555-0125,Carlos Garcia (555-0126),false,"
    "spanish,true,phone_confirmed,Call before delivery\n"
)


class CsvFormatError(ValueError):
    pass


class CsvValidationError(ValueError):
    def __init__(self, errors: List[str]):
        super().__init__(f"{len(errors)} validation error(s)")
        self.errors = errors


@dataclass
class ImportResult:
    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)


def normalize_header(header: str) -> str:
    return re.sub(r"\s+", "_", (header or "").strip().lower())


def parse_csv(text: str) -> List[Dict[str, str]]:
    """Parse CSV text into rows keyed by canonical field name.

    Raises CsvFormatError when there is no header or no data row.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = [line for line in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in line)]
    if len(lines) < 2:
        raise CsvFormatError("CSV file must have at least a header and one data row")

    headers = [normalize_header(h) for h in lines[0]]
    rows = []
    for values in lines[1:]:
        raw = {h: (values[i].strip() if i < len(values) else "") for i, h in enumerate(headers)}
        row = {}
        for name, (aliases, default) in COLUMNS.items():
            value = next((raw[a] for a in aliases if raw.get(a)), "")
            row[name] = value or default
        rows.append(row)
    return rows


def _as_int(value: str) -> Optional[int]:
    # spreadsheets export whole numbers as "75.0"; fractions truncate
    try:
        return int(float(value.strip()))
    except (AttributeError, ValueError, OverflowError):
        return None


def validate_rows(rows: List[Dict[str, str]]) -> List[str]:
    errors = []
    for index, row in enumerate(rows):
        # +2: header is line 1
        n = index + 2
        if not row.get("name", "").strip():
            errors.append(f"Row {n}: Name is required")
        age = _as_int(row.get("age", ""))
        if age is None or age < 0 or age > 120:
            errors.append(f"Row {n}: Age must be a valid number between 0 and 120")
        if not row.get("address", "").strip():
            errors.append(f"Row {n}: Address is required")
        adults = _as_int(row.get("family_adults", ""))
        if adults is None or adults < 0:
            errors.append(f"Row {n}: Family adults must be a valid number")
        children = _as_int(row.get("family_children", ""))
        if children is None or children < 0:
            errors.append(f"Row {n}: Family children must be a valid number")
        if row.get("household_type", "").strip().lower() not in HOUSEHOLD_TYPES:
            errors.append(f"Row {n}: Household type must be 'single' or 'family'")
        if row.get("delivery_method", "").strip().lower() not in DELIVERY_METHODS:
            errors.append(f"Row {n}: Delivery method must be 'doorstep', 'phone_confirmed', or 'family_member'")
    return errors


def _flag(value: str) -> bool:
    return (value or "").strip().lower() in ("true", "yes", "y", "1")


def to_senior_record(row: Dict[str, str]) -> Dict:
    senior = SeniorIn(
        name=row["name"].strip(),
        age=_as_int(row["age"]),
        household_type=row["household_type"].strip().lower(),
        family_adults=_as_int(row["family_adults"]),
        family_children=_as_int(row["family_children"]),
        race_ethnicity=row["race_ethnicity"] or None,
        health_conditions=row["health_conditions"] or None,
        address=row["address"].strip(),
        dietary_restrictions=row["dietary_restrictions"] or None,
        phone=row["phone"] or None,
        emergency_contact=row["emergency_contact"] or None,
        has_smartphone=_flag(row["has_smartphone"]),
        preferred_language=row["preferred_language"].strip().lower(),
        needs_translation=_flag(row["needs_translation"]),
        delivery_method=row["delivery_method"].strip().lower(),
        special_instructions=row["special_instructions"] or None,
        active=True,
    )
    return senior.model_dump()


class SeniorImporter:
    def __init__(self, store, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.batch_size = batch_size

    def run(self, rows: List[Dict[str, str]]) -> ImportResult:
        errors = validate_rows(rows)
        if errors:
            logger.warning(f"CSV import rejected with {len(errors)} validation errors")
            raise CsvValidationError(errors)

        records = [to_senior_record(r) for r in rows]
        result = ImportResult(total=len(records))
        for start in range(0, len(records), self.batch_size):
            batch = records[start:start + self.batch_size]
            number = start // self.batch_size + 1
            try:
                self.store.bulk_create_seniors(batch)
            except Exception as e:
                logger.error(f"Import batch {number} failed: {e}")
                result.failed += len(batch)
                result.errors.append(f"Batch {number}: {e}")
            else:
                result.successful += len(batch)
        logger.info(f"Imported {result.successful} of {result.total} seniors ({result.failed} failed)")
        return result
