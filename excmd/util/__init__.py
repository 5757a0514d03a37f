
from .core import (ImmutableListView,
                   singleton,
                   clamp,
                   time_limited,
                   plural)

from .debug import nonreentrant
