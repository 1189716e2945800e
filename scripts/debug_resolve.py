import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from responsible_tool.config.logging import configure_logging
from responsible_tool.config.settings import get_settings
from responsible_tool.engine import FixedClock, Order, ResponsibleResolver, ZoneClock
from responsible_tool.rules.mapping_loader import load_mapping

def debug():
    settings = get_settings()
    configure_logging("DEBUG")
    config = load_mapping(settings.mapping_json)
    
    print("Loaded Mapping:")
    print(config.to_dict())
    
    order = Order.from_shopify({
        "id": 5012345678,
        "tags": "vip, wholesale",
        "shipping_address": None,
        "billing_address": {"country_code": "CY"},
        "source_name": "web",
    })

    print(f"\n--- Now ({settings.timezone}) ---")
    result = ResponsibleResolver(clock=ZoneClock(settings.timezone)).resolve(config, order)
    print(result.get_trace_text())
    
    # Both sides of each handover window
    for weekday, hour, minute in [(1, 9, 0), (1, 9, 1), (5, 19, 0), (5, 19, 1), (6, 12, 0)]:
        clock = FixedClock(weekday, hour, minute)
        result = ResponsibleResolver(clock=clock).resolve(config, order)
        print(f"\n--- {clock.now()} ---")
        print(f"Responsible: {result.responsible_id} (matched by {result.matched_by.value if result.matched_by else 'nothing'})")

if __name__ == "__main__":
    debug()
