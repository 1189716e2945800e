"""
Mapping Service - CRUD operations for the responsible mapping table.
Handles reading/writing responsible_mapping.csv and auto-compiling to JSON.
"""
import logging
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field

import pandas as pd

from ..rules.compile_mapping import (
    CSV_COLUMNS,
    compile_mapping,
    normalize_match_value,
    parse_active,
    validate_row,
)

logger = logging.getLogger(__name__)


@dataclass
class MappingEntry:
    """One row of the mapping table."""
    rule_type: str
    match_value: str = ""
    responsible_id: str = ""
    active: bool = True
    notes: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        return self.rule_type, self.match_value

    def to_csv_row(self) -> dict:
        """Convert to CSV row format."""
        return {
            'rule_type': self.rule_type,
            'match_value': self.match_value or '',
            'responsible_id': '' if self.responsible_id is None else str(self.responsible_id),
            'active': 'true' if self.active else 'false',
            'notes': self.notes or '',
        }

    @classmethod
    def from_csv_row(cls, row: dict) -> 'MappingEntry':
        """Create MappingEntry from CSV row."""
        rule_type = str(row.get('rule_type', '')).strip().lower()
        match_value = normalize_match_value(rule_type, str(row.get('match_value', '')).strip()) or ''
        return cls(
            rule_type=rule_type,
            match_value=match_value,
            responsible_id=str(row.get('responsible_id', '')).strip(),
            active=parse_active(row.get('active')),
            notes=str(row.get('notes', '')).strip() or None,
        )


@dataclass
class ValidationResult:
    """Result of entry validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class MappingService:
    """Reads, edits and recompiles the mapping table."""

    def __init__(self, mapping_csv_path: Path, mapping_json_path: Path):
        self.mapping_csv_path = mapping_csv_path
        self.mapping_json_path = mapping_json_path

    def _load_frame(self) -> pd.DataFrame:
        if not self.mapping_csv_path.exists():
            return pd.DataFrame(columns=CSV_COLUMNS)
        df = pd.read_csv(self.mapping_csv_path, dtype=str, keep_default_na=False)
        # Strip all strings and headers
        df.columns = [c.strip() for c in df.columns]
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip()
        return df

    def list_entries(self, include_inactive: bool = True) -> list[MappingEntry]:
        """List all entries from CSV."""
        df = self._load_frame()
        entries = []
        for row in df.to_dict(orient='records'):
            if not row.get('rule_type'):
                continue
            entry = MappingEntry.from_csv_row(row)
            if include_inactive or entry.active:
                entries.append(entry)
        return entries

    def get_entry(self, rule_type: str, match_value: str = "") -> Optional[MappingEntry]:
        """Get a single entry by its (rule_type, match_value) key."""
        key = self._key(rule_type, match_value)
        for entry in self.list_entries():
            if entry.key == key:
                return entry
        return None

    def create_entry(self, entry: MappingEntry, auto_compile: bool = True) -> MappingEntry:
        """Create a new entry."""
        entry = MappingEntry.from_csv_row(entry.to_csv_row())
        if self.get_entry(*entry.key):
            raise ValueError(f"Entry {entry.rule_type} '{entry.match_value}' already exists")

        entries = self.list_entries()
        entries.append(entry)
        self._write_entries(entries)

        if auto_compile:
            self.compile()

        return entry

    def update_entry(self, rule_type: str, match_value: str, updates: dict, auto_compile: bool = True) -> MappingEntry:
        """Update an existing entry."""
        key = self._key(rule_type, match_value)
        entries = self.list_entries()

        for i, entry in enumerate(entries):
            if entry.key == key:
                for name, value in updates.items():
                    if hasattr(entry, name):
                        setattr(entry, name, value)
                entries[i] = MappingEntry.from_csv_row(entry.to_csv_row())
                break
        else:
            raise ValueError(f"Entry {rule_type} '{match_value}' not found")

        new_key = entries[i].key
        if new_key != key and any(e.key == new_key for j, e in enumerate(entries) if j != i):
            raise ValueError(f"Entry {new_key[0]} '{new_key[1]}' already exists")

        self._write_entries(entries)

        if auto_compile:
            self.compile()

        return entries[i]

    def delete_entry(self, rule_type: str, match_value: str = "", auto_compile: bool = True) -> bool:
        """Delete an entry."""
        key = self._key(rule_type, match_value)
        entries = self.list_entries()
        remaining = [e for e in entries if e.key != key]

        if len(remaining) == len(entries):
            raise ValueError(f"Entry {rule_type} '{match_value}' not found")

        self._write_entries(remaining)

        if auto_compile:
            self.compile()

        return True

    def validate_entry(self, entry: MappingEntry) -> ValidationResult:
        """Validate an entry before saving."""
        result = ValidationResult(valid=True)

        _, errors = validate_row(entry.to_csv_row(), line_num=0)
        if errors:
            result.valid = False
            result.errors.extend(e.replace("Line 0: ", "") for e in errors)
            return result

        if entry.rule_type == 'tag' and ',' in entry.match_value:
            result.warnings.append("Tags are split on commas, a tag containing a comma never matches")

        existing = self.get_entry(*MappingEntry.from_csv_row(entry.to_csv_row()).key)
        if existing and existing.responsible_id != str(entry.responsible_id):
            result.warnings.append(
                f"Changes {entry.rule_type} '{entry.match_value}' from responsible {existing.responsible_id}"
            )

        if not entry.active:
            result.warnings.append("Entry is inactive and will not be compiled")

        return result

    def compile(self) -> tuple[bool, list[str]]:
        """Compile the table to JSON."""
        success, _, errors = compile_mapping(self.mapping_csv_path, self.mapping_json_path)
        return success, errors

    def get_stats(self) -> dict:
        """Get statistics about the mapping table."""
        df = self._load_frame()
        if df.empty:
            return {'total': 0, 'active': 0, 'inactive': 0, 'by_rule_type': {}, 'responsibles': 0}

        active = df[df['active'].map(parse_active)]
        return {
            'total': len(df),
            'active': len(active),
            'inactive': len(df) - len(active),
            'by_rule_type': {k: int(v) for k, v in active['rule_type'].str.lower().value_counts().items()},
            'responsibles': int(active['responsible_id'].nunique()),
        }

    def to_frame(self) -> pd.DataFrame:
        """The mapping table as a DataFrame (for display)."""
        return self._load_frame()

    @staticmethod
    def _key(rule_type: str, match_value: str) -> tuple[str, str]:
        rule_type = rule_type.strip().lower()
        return rule_type, normalize_match_value(rule_type, (match_value or '').strip()) or ''

    def _write_entries(self, entries: list[MappingEntry]):
        """Write entries back to CSV."""
        df = pd.DataFrame([e.to_csv_row() for e in entries], columns=CSV_COLUMNS)
        df.to_csv(self.mapping_csv_path, index=False)
        logger.info("Wrote %d mapping entries to %s", len(entries), self.mapping_csv_path)
