#!/usr/bin/env python3
"""
Scheduler entry - development use
Runs the scheduler daemon from a source checkout
"""

import sys
from pathlib import Path

# add src to the path
src_dir = Path(__file__).parent / 'src'
sys.path.insert(0, str(src_dir))

def main():
    """Run the scheduler"""

    try:
        from offline_sync.utils.loguru_setting import loguru_setting
        from offline_sync.scheduling.core.scheduler import run_scheduler
        loguru_setting()
        run_scheduler()
    except KeyboardInterrupt:
        print("\ninterrupted")
        sys.exit(1)
    except Exception as e:
        print(f"scheduler failed to start: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

if __name__ == "__main__":
    main()
