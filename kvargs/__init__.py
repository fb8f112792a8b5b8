__title__ = 'kvargs'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
__version__ = "0.1.0"

from .arguments import *
from .engine import *
from .faults import *
from .helps import *
from .parsers import *
from .records import Container, declare, foreach, iscontainer, pformat, prettyprint, dumps, loads, todict
from . import records
from .validation import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the records; get/set/remove/size/count stay under kvargs.records
__all__ += (
    "records",
    "Container",
    "declare",
    "foreach",
    "iscontainer",
    "pformat",
    "prettyprint",
    "dumps",
    "loads",
    "todict",
)
# Load the exposed API of the arguments
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parsers
__all__ += parsers.__all__  # type: ignore[attr-defined]
# Load the exposed API of the engine
__all__ += engine.__all__  # type: ignore[attr-defined]
# Load the exposed API of the validation
__all__ += validation.__all__  # type: ignore[attr-defined]
# Load the exposed API of the helps
__all__ += helps.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
