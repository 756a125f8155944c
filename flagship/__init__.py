__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'flagship'
__author__ = 'Flagship Developers'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0"

from .schema import *
from .declarations import *
from .boundaries import *
from .tokens import *
from .binder import *
from .coercion import *
from .flagset import *
from .application import *
from .faults import *
from .utils import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 1, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the schema
__all__ += schema.__all__  # type: ignore[attr-defined]
# Load the exposed API of the resolution pipeline
__all__ += declarations.__all__  # type: ignore[attr-defined]
__all__ += boundaries.__all__  # type: ignore[attr-defined]
__all__ += tokens.__all__  # type: ignore[attr-defined]
__all__ += binder.__all__  # type: ignore[attr-defined]
__all__ += coercion.__all__  # type: ignore[attr-defined]
# Load the exposed API of the flag sets
__all__ += flagset.__all__  # type: ignore[attr-defined]
# Load the exposed API of the application facade
__all__ += application.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the utilities
__all__ += utils.__all__  # type: ignore[attr-defined]
