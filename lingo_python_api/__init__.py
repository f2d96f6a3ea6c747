# Import API class and errors directly from the module
from .lingo_api import LingoAPI, RequestOptions
from .lingo_error import ErrorCode, LingoError
from .search import SearchQuery
from .upload import Upload

# Import the datatypes module so users can do `from lingo_python_api.datatypes import ...`
from . import datatypes

# Define the package version
# This is the single source of truth, read by setup.py.
__version__ = LingoAPI.VERSION

__all__ = [
    "LingoAPI",
    "RequestOptions",
    "LingoError",
    "ErrorCode",
    "SearchQuery",
    "Upload",
    "datatypes",
    "__version__",
]
