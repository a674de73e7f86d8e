"""
Pytest configuration for kvcache.

Puts the project root on the Python path so tests run from a plain checkout.
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
