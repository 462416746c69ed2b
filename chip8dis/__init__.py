from .common import *
from .dump import splitter, decoder, format_line, dump, ENTRY_POINT
