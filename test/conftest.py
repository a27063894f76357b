"""
Test configuration for arithcomb tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from arithmetic import create_parser
from interpreter import create_interpreter


@pytest.fixture
def parser():
    """Expression parser shared by a test"""
    return create_parser()


@pytest.fixture
def interpret():
    """Parse-and-evaluate function"""
    return create_interpreter()
