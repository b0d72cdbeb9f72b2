# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Exception classes for dpichanger

This module defines the exceptions raised by the codec internals,
the file helpers and the command-line interface. The public codec
functions catch them and return typed results instead.

Copyright 2025 DNAi inc.
"""


class DPIChangerError(Exception):
    """
    Base exception for all dpichanger errors.
    
    All dpichanger exceptions inherit from this class, allowing
    catch-all error handling for any DPI read/write problem.
    """
    def __init__(self, message: str = ""):
        """
        Initialize the exception with an optional error message.
        
        Args:
            message: Descriptive error message explaining what went wrong
        """
        self.message = message
        super().__init__(message)


class UnsupportedFormatError(DPIChangerError):
    """
    Raised when the buffer is neither a JPEG nor a PNG file.
    """
    pass


class MalformedInputError(DPIChangerError):
    """
    Raised when the container cannot be safely modified.
    
    This exception is raised when:
    - A segment or chunk header is truncated
    - A declared length points past the end of the buffer
    - A required chunk (IHDR) is missing or misplaced
    - A DPI segment has an unexpected size
    """
    pass


class TruncatedDataError(MalformedInputError):
    """
    Raised when a read falls outside the buffer bounds.
    """
    def __init__(self, offset: int, size: int, length: int):
        self.offset = offset
        self.size = size
        self.length = length
        super().__init__(
            f"Read of {size} byte(s) at offset {offset} exceeds buffer length {length}"
        )


class ValueOutOfRangeError(DPIChangerError):
    """
    Raised when a requested DPI does not fit the target field.
    
    This exception is raised when:
    - A DPI component is below 1 or not a whole number
    - A DPI exceeds the 16-bit JPEG density field
    - Pixels-per-meter exceeds the PNG 31-bit range after conversion
    """
    pass
