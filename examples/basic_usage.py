#!/usr/bin/env python3
"""
Basic usage example for rexec: prepare a backup destination that may be
local or on another host, without branching on where it lives.
"""

import sys
import tempfile
from pathlib import Path

from rexec import Dispatcher, SshConnectionError


def prepare_destination(dispatcher: Dispatcher, dest: str) -> bool:
    """Create a dated snapshot directory under *dest*."""
    if not dispatcher.exists(dest):
        print(f"Creating {dest}")
        dispatcher.execute(dest, "mkdir -p ::path::")

    result = dispatcher.run(
        dest, ["mkdir", "-p", "::path::/snapshots/latest"]
    )
    if not result.success:
        print(f"mkdir failed with exit status {result.exit_code}")
        return False

    listing = dispatcher.execute(
        dest, "ls -1 ::path::/snapshots", capture_output=True
    )
    print(f"Snapshots on {dest}:")
    print(listing.stdout)
    return True


def main():
    """Run against a temp dir, or the location given on the command line."""
    print("rexec - Basic Usage Example")
    print("=" * 50)

    dispatcher = Dispatcher()
    with tempfile.TemporaryDirectory() as temp_dir:
        if len(sys.argv) > 1:
            dest = sys.argv[1]
        else:
            dest = str(Path(temp_dir) / "dst")
        try:
            ok = prepare_destination(dispatcher, dest)
        except SshConnectionError as e:
            print(f"Error: {e}")
            return e.exit_code
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
