"""Failure taxonomy shared by every source adapter.

Adapters return a :class:`FetchError` value instead of raising for the
failures they expect (HTTP errors, malformed payloads, missing markers).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FetchErrorKind(str, Enum):
    TRANSPORT = "transport"
    JSON_DECODE = "json_decode"
    XML_DECODE = "xml_decode"
    CHAPTER_NOT_FOUND = "chapter_not_found"
    PAGE_NOT_FOUND = "page_not_found"
    SESSION = "session"
    REMOTE_COMMAND = "remote_command"


_DEFAULT_MESSAGES = {
    FetchErrorKind.TRANSPORT: "Request Failed",
    FetchErrorKind.JSON_DECODE: "JSON Decode Failed",
    FetchErrorKind.XML_DECODE: "XML Decode Failed",
    FetchErrorKind.CHAPTER_NOT_FOUND: "Chapter Not Found",
    FetchErrorKind.PAGE_NOT_FOUND: "Page Not Found",
    FetchErrorKind.SESSION: "Browser Session Failed",
    FetchErrorKind.REMOTE_COMMAND: "Browser Command Failed",
}


@dataclass(frozen=True)
class FetchError:
    kind: FetchErrorKind
    message: Optional[str] = None

    @classmethod
    def transport(cls, message=None):
        return cls(FetchErrorKind.TRANSPORT, message)

    @classmethod
    def json_decode(cls, message=None):
        return cls(FetchErrorKind.JSON_DECODE, message)

    @classmethod
    def xml_decode(cls, message=None):
        return cls(FetchErrorKind.XML_DECODE, message)

    @classmethod
    def chapter_not_found(cls, message=None):
        return cls(FetchErrorKind.CHAPTER_NOT_FOUND, message)

    @classmethod
    def page_not_found(cls, message=None):
        return cls(FetchErrorKind.PAGE_NOT_FOUND, message)

    @classmethod
    def session(cls, message=None):
        return cls(FetchErrorKind.SESSION, message)

    @classmethod
    def remote_command(cls, message=None):
        return cls(FetchErrorKind.REMOTE_COMMAND, message)

    def describe(self) -> str:
        default = _DEFAULT_MESSAGES[self.kind]
        if self.message:
            return f"{default}: {self.message}"
        return default

    def __str__(self):
        return self.describe()
