#!/usr/bin/env python
"""
Build pipeline - compiles the responsible mapping and runs the tests.

Usage:
    python scripts/build_all.py
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from responsible_tool.config.logging import configure_logging
from responsible_tool.config.settings import get_settings
from responsible_tool.rules.compile_mapping import compile_mapping


def main():
    print("=" * 60)
    print("RESPONSIBLE TOOL BUILD PIPELINE")
    print("=" * 60)
    print()
    
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_dir)

    print("[1/2] Compiling responsible mapping...")
    success, document, errors = compile_mapping(settings.mapping_csv, settings.mapping_json)
    
    if not success:
        print("\n❌ BUILD FAILED")
        for error in errors:
            print(f"  ERROR: {error}")
        sys.exit(1)
    
    print()
    print("[2/2] Running tests...")
    
    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )
    
    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)
    
    print()
    print("=" * 60)
    print("✅ BUILD COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Rows: {document['active_rows']} active / {document['total_rows']} total")
    print(f"  Default responsible: {document['default']}")
    for section in ('byWeekday', 'byTag', 'byCountryCode', 'bySource'):
        print(f"  {section}: {len(document[section])}")


if __name__ == "__main__":
    main()
