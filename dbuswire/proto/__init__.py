"""Decoding of D-Bus message arguments."""

from .errors import DecodeError as DecodeError
from .errors import InvalidType as InvalidType
from .errors import MalformedData as MalformedData
from .errors import NulError as NulError
from .errors import TextDecodeError as TextDecodeError
from .errors import TrailingType as TrailingType
from .errors import UnexpectedEnd as UnexpectedEnd
from .errors import UnexpectedType as UnexpectedType
from .message import ByteOrder as ByteOrder
from .message import Message as Message
from .readable import *
from .reader import MAX_ARRAY_LENGTH as MAX_ARRAY_LENGTH
from .reader import MAX_DEPTH as MAX_DEPTH
from .reader import Reader as Reader
from .values import AnyValue as AnyValue
from .values import DictEntry as DictEntry
from .values import ObjectPath as ObjectPath
from .values import UnixFd as UnixFd
from .values import Variant as Variant
