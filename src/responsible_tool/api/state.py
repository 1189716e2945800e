"""
Shared API state: the live mapping, the resolver and the mapping service.
"""
from ..config.logging import configure_logging
from ..config.settings import get_settings
from ..engine import ResponsibleResolver, ZoneClock
from ..rules.mapping_loader import MappingStore
from ..services.mapping_service import MappingService

settings = get_settings()
configure_logging(settings.log_level, settings.log_dir)

clock = ZoneClock(settings.timezone)
resolver = ResponsibleResolver(clock=clock)
mapping_store = MappingStore(settings.mapping_json)
mapping_service = MappingService(
    mapping_csv_path=settings.mapping_csv,
    mapping_json_path=settings.mapping_json,
)
