
from .signal import Signal
from . import errors
