"""D-Bus type signature model and parser."""

from .parser import MAX_ARRAY_DEPTH as MAX_ARRAY_DEPTH
from .parser import MAX_SIGNATURE_LENGTH as MAX_SIGNATURE_LENGTH
from .parser import MAX_STRUCT_DEPTH as MAX_STRUCT_DEPTH
from .parser import MalformedSignature as MalformedSignature
from .parser import parse as parse
from .types import *
