# src/nfc_page_tool_qt5/nfc/errors.py


class TagError(Exception):
    """Base class for reader/tag failures shown to the user."""


class NoReaderError(TagError):
    pass


class NoTagError(TagError):
    pass


class TransportError(TagError):
    """Reader answered with an error status or the connection broke."""

    def __init__(self, message: str, sw1: int = 0x6F, sw2: int = 0x00):
        super().__init__(message)
        self.sw1 = sw1
        self.sw2 = sw2


class UnsupportedTechnologyError(TagError):
    """Tag lacks the technology needed for the requested operation."""

    def __init__(self, technology: str):
        super().__init__(f"This tag doesn't support {technology}")
        self.technology = technology
