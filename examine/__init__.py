"""Enhanced inspect debugging for Python pipelines.

``examine.inspect`` prints the source of the expression it receives, the
result of each step of a method chain and the time every step took. Call
sites are expanded by a source transform (``examine.run_path`` or
``python -m examine script.py``); outside the profiles listed in
``EXAMINE_ENVIRONMENTS`` they compile down to the bare expression.
"""

from . import api as _api
from .api import *  # re-export public API symbols
from .errors import ExamineConfigError, ExamineError

__version__ = "0.1.0"

__all__ = [*_api.__all__, "ExamineConfigError", "ExamineError", "__version__"]
