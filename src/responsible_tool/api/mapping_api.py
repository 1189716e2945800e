"""
Mapping API - FastAPI router for responsible mapping management.
"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Optional

from ..services.mapping_service import MappingEntry
from . import state

router = APIRouter(prefix="/api/mapping", tags=["mapping"])

# Fields an update may omit but never clear
NON_NULLABLE_FIELDS = ('responsible_id', 'active')


# Pydantic models for API
class EntryCreate(BaseModel):
    """Request model for creating an entry."""
    rule_type: str
    match_value: str = ""
    responsible_id: str
    active: bool = True
    notes: Optional[str] = None


class EntryUpdate(BaseModel):
    """Request model for updating an entry."""
    match_value: Optional[str] = None
    responsible_id: Optional[str] = None
    active: Optional[bool] = None
    notes: Optional[str] = None


class EntryResponse(BaseModel):
    """Response model for an entry."""
    rule_type: str
    match_value: str
    responsible_id: str
    active: bool
    notes: Optional[str]


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def _reload_live_mapping():
    try:
        state.mapping_store.reload()
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(status_code=500, detail=f"Compiled mapping could not be loaded: {e}")


def _compile_and_reload():
    success, errors = state.mapping_service.compile()
    if not success:
        raise HTTPException(status_code=400, detail={"errors": errors})
    _reload_live_mapping()


# Endpoints

@router.get("", response_model=list[EntryResponse])
async def list_entries(include_inactive: bool = True):
    """List all mapping entries."""
    entries = state.mapping_service.list_entries(include_inactive=include_inactive)
    return [EntryResponse(**entry.__dict__) for entry in entries]


@router.get("/stats")
async def get_stats():
    """Get mapping statistics."""
    return state.mapping_service.get_stats()


@router.post("/validate", response_model=ValidationResponse)
async def validate_entry(entry_data: EntryCreate):
    """Validate an entry without saving."""
    result = state.mapping_service.validate_entry(MappingEntry(**entry_data.model_dump()))
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)


@router.post("/compile")
async def compile_mapping():
    """Force recompile of the mapping and reload the live config."""
    success, errors = state.mapping_service.compile()
    if success:
        _reload_live_mapping()
    return {"success": success, "errors": errors}


@router.get("/{rule_type}", response_model=EntryResponse)
async def get_entry(rule_type: str, match_value: str = ""):
    """Get a single entry by rule type and match value."""
    entry = state.mapping_service.get_entry(rule_type, match_value)
    if not entry:
        raise HTTPException(status_code=404, detail=f"Entry {rule_type} '{match_value}' not found")
    return EntryResponse(**entry.__dict__)


@router.post("", response_model=EntryResponse)
async def create_entry(entry_data: EntryCreate):
    """Create a new mapping entry."""
    entry = MappingEntry(**entry_data.model_dump())

    validation = state.mapping_service.validate_entry(entry)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        created = state.mapping_service.create_entry(entry, auto_compile=False)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _compile_and_reload()
    return EntryResponse(**created.__dict__)


@router.put("/{rule_type}", response_model=EntryResponse)
async def update_entry(rule_type: str, updates: EntryUpdate, match_value: str = ""):
    """Update an existing entry."""
    update_dict = updates.model_dump(exclude_unset=True)

    null_fields = [name for name in NON_NULLABLE_FIELDS if name in update_dict and update_dict[name] is None]
    if null_fields:
        raise HTTPException(status_code=400, detail={"errors": [f"{name} cannot be null" for name in null_fields]})

    current = state.mapping_service.get_entry(rule_type, match_value)
    if not current:
        raise HTTPException(status_code=404, detail=f"Entry {rule_type} '{match_value}' not found")

    candidate = MappingEntry(**{**current.__dict__, **update_dict})
    validation = state.mapping_service.validate_entry(candidate)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        updated = state.mapping_service.update_entry(rule_type, match_value, update_dict, auto_compile=False)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    _compile_and_reload()
    return EntryResponse(**updated.__dict__)


@router.delete("/{rule_type}")
async def delete_entry(rule_type: str, match_value: str = ""):
    """Delete an entry."""
    try:
        state.mapping_service.delete_entry(rule_type, match_value, auto_compile=False)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    _compile_and_reload()
    return {"success": True, "message": f"Entry {rule_type} '{match_value}' deleted"}
