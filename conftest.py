"""Root conftest.py: puts the project root on sys.path so `tigress` imports in tests."""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
