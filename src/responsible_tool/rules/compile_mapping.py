"""
Mapping Compiler - Validates and compiles the responsible mapping from CSV to JSON.

Reads responsible_mapping.csv, validates every row, and outputs the
responsible_mapping.json document consumed by the resolver.
"""
import csv
import json
import logging
import re
from pathlib import Path
from typing import Optional
from datetime import datetime
from dataclasses import dataclass

from ..engine.models import WEEKDAY_CODES

logger = logging.getLogger(__name__)

CSV_COLUMNS = ['rule_type', 'match_value', 'responsible_id', 'active', 'notes']

# rule_type → compiled JSON section
SECTION_BY_RULE_TYPE = {
    'weekday': 'byWeekday',
    'tag': 'byTag',
    'country': 'byCountryCode',
    'source': 'bySource',
}

VALID_RULE_TYPES = set(SECTION_BY_RULE_TYPE) | {'default'}

COUNTRY_CODE_RE = re.compile(r'^[A-Z]{2}$')


@dataclass
class MappingRow:
    """A validated mapping row."""
    rule_type: str
    match_value: Optional[str]
    responsible_id: str | int
    active: bool
    notes: str = ""


def parse_bool(value: str) -> bool:
    """Parse a boolean from CSV string."""
    return (value or '').strip().lower() in ('true', '1', 'yes', 'on')


def parse_active(value: Optional[str]) -> bool:
    """Parse the active flag; a blank cell means active."""
    if value is None or str(value).strip() == '':
        return True
    return parse_bool(str(value))


def parse_optional_str(value: Optional[str]) -> Optional[str]:
    """Parse optional string (empty = None)."""
    if value is None or value.strip() == '':
        return None
    return value.strip()


def parse_identifier(value: str) -> str | int:
    """CRM user ids are numeric in Bitrix; keep anything else as text."""
    return int(value) if value.isdigit() else value


def normalize_match_value(rule_type: str, value: Optional[str]) -> Optional[str]:
    """Canonical form of a match value (country codes are upper-cased)."""
    if value is None:
        return None
    if rule_type == 'country':
        return value.upper()
    return value


def validate_row(row: dict, line_num: int) -> tuple[Optional[MappingRow], list[str]]:
    """
    Validate and parse a mapping row from the CSV.

    Returns (row, errors) - row is None if validation failed.
    """
    errors = []

    rule_type = (parse_optional_str(row.get('rule_type')) or '').lower()
    if rule_type not in VALID_RULE_TYPES:
        errors.append(
            f"Line {line_num}: invalid rule_type '{rule_type}', must be one of: {sorted(VALID_RULE_TYPES)}"
        )
        return None, errors

    match_value = normalize_match_value(rule_type, parse_optional_str(row.get('match_value')))

    if rule_type == 'default':
        if match_value is not None:
            errors.append(f"Line {line_num}: default rows take no match_value")
    elif match_value is None:
        errors.append(f"Line {line_num}: match_value is required for {rule_type} rows")
    elif rule_type == 'weekday' and match_value not in WEEKDAY_CODES:
        errors.append(f"Line {line_num}: weekday must be 0 (Sunday) to 6 (Saturday), got '{match_value}'")
    elif rule_type == 'country' and not COUNTRY_CODE_RE.match(match_value):
        errors.append(f"Line {line_num}: country must be a two-letter ISO code, got '{match_value}'")

    responsible = parse_optional_str(row.get('responsible_id'))
    if responsible is None:
        errors.append(f"Line {line_num}: responsible_id is required")

    if errors:
        return None, errors

    return MappingRow(
        rule_type=rule_type,
        match_value=match_value,
        responsible_id=parse_identifier(responsible),
        active=parse_active(row.get('active')),
        notes=parse_optional_str(row.get('notes')) or "",
    ), []


def build_document(rows: list[MappingRow]) -> tuple[dict, list[str]]:
    """
    Fold active rows into the mapping document.

    Returns (document, errors); duplicates of an active key are errors.
    """
    errors = []
    document = {'default': None}
    for section in SECTION_BY_RULE_TYPE.values():
        document[section] = {}

    seen_default = False
    for row in rows:
        if not row.active:
            continue
        if row.rule_type == 'default':
            if seen_default:
                errors.append("More than one active default row")
                continue
            seen_default = True
            document['default'] = row.responsible_id
            continue

        section = document[SECTION_BY_RULE_TYPE[row.rule_type]]
        if row.match_value in section:
            errors.append(f"Duplicate active {row.rule_type} rule for '{row.match_value}'")
            continue
        section[row.match_value] = row.responsible_id

    return document, errors


def read_rows(mapping_csv: Path) -> tuple[list[MappingRow], list[str]]:
    """Read and validate every row of the mapping table."""
    all_errors = []
    rows = []

    with open(mapping_csv, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for line_num, raw in enumerate(reader, start=2):  # +2 for 1-indexed header row
            if not any((v or '').strip() for v in raw.values() if isinstance(v, str)):
                continue
            row, errors = validate_row(raw, line_num)
            if errors:
                all_errors.extend(errors)
            elif row:
                rows.append(row)

    return rows, all_errors


def compile_mapping(
    mapping_csv: Path,
    output_json: Path,
) -> tuple[bool, dict, list[str]]:
    """
    Compile the mapping table from CSV to JSON.

    Returns (success, document, errors). Nothing is written on failure.
    """
    if not mapping_csv.exists():
        return False, {}, [f"Mapping file not found: {mapping_csv}"]

    rows, all_errors = read_rows(mapping_csv)
    document, fold_errors = build_document(rows)
    all_errors.extend(fold_errors)

    if all_errors:
        for err in all_errors:
            logger.error("Mapping validation error: %s", err)
        return False, document, all_errors

    output_data = {
        "compiled_at": datetime.now().isoformat(),
        "source_file": str(mapping_csv),
        "total_rows": len(rows),
        "active_rows": sum(1 for r in rows if r.active),
        **document,
    }

    output_json.parent.mkdir(parents=True, exist_ok=True)
    with open(output_json, 'w', encoding='utf-8') as f:
        json.dump(output_data, f, indent=2, ensure_ascii=False)

    logger.info(
        "Compiled %d mapping rows (%d active) to %s",
        output_data['total_rows'], output_data['active_rows'], output_json,
    )
    return True, output_data, []


def main():
    """CLI entry point."""
    import sys

    from ..config.logging import configure_logging
    from ..config.settings import get_settings

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_dir)

    success, _, errors = compile_mapping(settings.mapping_csv, settings.mapping_json)
    if not success:
        logger.error("Compilation failed with %d errors", len(errors))
        sys.exit(1)


if __name__ == "__main__":
    main()
