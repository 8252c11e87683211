"""Submoduler Child: lifecycle helper for child submodules"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Import core modules for easier access
from submoduler_child.core.config import Config
from submoduler_child.core.git import GitManager
from submoduler_child.symlinks import SymlinkReconciler
from submoduler_child.workflow import UpdateWorkflow

__all__ = [
    "Config",
    "GitManager",
    "SymlinkReconciler",
    "UpdateWorkflow",
]
