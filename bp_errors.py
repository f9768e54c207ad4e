#!/usr/bin/env python3
"""
Blueprint Error Types
=====================

Every failure raised by the blueprint codecs derives from BlueprintError,
which is itself a ValueError so older callers that only catch ValueError
keep working.

| Error                    | Raised when                                          |
|--------------------------|------------------------------------------------------|
| InsufficientDataError    | buffer too short for the record at the cursor        |
| CorruptedDataError       | a parsed value breaks a documented range             |
| UnknownCatalogValueError | id has no catalog entry and one is required          |
| HashNotFinalizedError    | digest requested before finalize()                   |
| HashFinalizedError       | update() called after finalize()                     |
| HashMismatchError        | envelope hash differs from the recomputed one        |
| EnvelopeFormatError      | the BLUEPRINT: text envelope is malformed            |
"""


class BlueprintError(ValueError):
    """Base class for all blueprint errors"""


class InsufficientDataError(BlueprintError):
    def __init__(self, needed: int, available: int, offset: int, what: str = "record"):
        self.needed = needed
        self.available = available
        self.offset = offset
        self.what = what
        super().__init__(
            f"Not enough data for {what} at offset 0x{offset:04X}: "
            f"need {needed} bytes, {available} available")


class CorruptedDataError(BlueprintError):
    pass


class UnknownCatalogValueError(BlueprintError):
    def __init__(self, kind: str, value: int):
        self.kind = kind
        self.value = value
        super().__init__(f"Unknown {kind}: {value}")


class HashNotFinalizedError(BlueprintError):
    def __init__(self):
        super().__init__("Hash is not finalized, call finalize() first")


class HashFinalizedError(BlueprintError):
    def __init__(self):
        super().__init__("Hash already finalized, no more data can be added")


class HashMismatchError(BlueprintError):
    def __init__(self, expected: str, calculated: str):
        self.expected = expected
        self.calculated = calculated
        super().__init__(
            f"Blueprint string has invalid hash value "
            f"(expected {expected}, calculated {calculated})")


class EnvelopeFormatError(BlueprintError):
    pass
