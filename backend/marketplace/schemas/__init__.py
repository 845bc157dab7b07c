# marketplace/schemas/__init__.py
"""
Schema module initialization.
Exports all request schema classes from submodules for convenient imports.
"""
from .auth import *
from .admin import *
from .catalog import *
from .promotion import *
from .chat import *
from .payment import *
