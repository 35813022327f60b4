"""
Utility functions and classes used across the AV bag preprocessor
"""
from .datamgmt import *
from .logging import blab
