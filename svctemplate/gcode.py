"""Business error codes bound to HTTP status codes."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class HttpResponse(Protocol):
    """A JSON response body that carries a business code and a message."""

    code: int
    message: str


class HttpStatus(IntEnum):
    """HTTP status codes, plus a marker for "no status specified"."""

    NOT_SPECIFIED = -1

    CONTINUE = 100
    SWITCHING_PROTOCOLS = 101
    PROCESSING = 102
    EARLY_HINTS = 103

    OK = 200
    CREATED = 201
    ACCEPTED = 202
    NON_AUTHORITATIVE_INFO = 203
    NO_CONTENT = 204
    RESET_CONTENT = 205
    PARTIAL_CONTENT = 206
    MULTI_STATUS = 207
    ALREADY_REPORTED = 208
    IM_USED = 226

    MULTIPLE_CHOICES = 300
    MOVED_PERMANENTLY = 301
    FOUND = 302
    SEE_OTHER = 303
    NOT_MODIFIED = 304
    USE_PROXY = 305
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    NOT_ACCEPTABLE = 406
    PROXY_AUTH_REQUIRED = 407
    REQUEST_TIMEOUT = 408
    CONFLICT = 409
    GONE = 410
    LENGTH_REQUIRED = 411
    PRECONDITION_FAILED = 412
    REQUEST_ENTITY_TOO_LARGE = 413
    REQUEST_URI_TOO_LONG = 414
    UNSUPPORTED_MEDIA_TYPE = 415
    REQUESTED_RANGE_NOT_SATISFIABLE = 416
    EXPECTATION_FAILED = 417
    TEAPOT = 418
    MISDIRECTED_REQUEST = 421
    UNPROCESSABLE_ENTITY = 422
    LOCKED = 423
    FAILED_DEPENDENCY = 424
    TOO_EARLY = 425
    UPGRADE_REQUIRED = 426
    PRECONDITION_REQUIRED = 428
    TOO_MANY_REQUESTS = 429
    REQUEST_HEADER_FIELDS_TOO_LARGE = 431
    UNAVAILABLE_FOR_LEGAL_REASONS = 451

    INTERNAL_SERVER_ERROR = 500
    NOT_IMPLEMENTED = 501
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    GATEWAY_TIMEOUT = 504
    HTTP_VERSION_NOT_SUPPORTED = 505
    VARIANT_ALSO_NEGOTIATES = 506
    INSUFFICIENT_STORAGE = 507
    LOOP_DETECTED = 508
    NOT_EXTENDED = 510
    NETWORK_AUTHENTICATION_REQUIRED = 511


_STATUS_TEXT: dict[int, str] = {
    100: "Continue",
    101: "Switching Protocols",
    102: "Processing",
    103: "Early Hints",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    207: "Multi-Status",
    208: "Already Reported",
    226: "IM Used",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    308: "Permanent Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Timeout",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Request Entity Too Large",
    414: "Request URI Too Long",
    415: "Unsupported Media Type",
    416: "Requested Range Not Satisfiable",
    417: "Expectation Failed",
    418: "I'm a teapot",
    421: "Misdirected Request",
    422: "Unprocessable Entity",
    423: "Locked",
    424: "Failed Dependency",
    425: "Too Early",
    426: "Upgrade Required",
    428: "Precondition Required",
    429: "Too Many Requests",
    431: "Request Header Fields Too Large",
    451: "Unavailable For Legal Reasons",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
    505: "HTTP Version Not Supported",
    506: "Variant Also Negotiates",
    507: "Insufficient Storage",
    508: "Loop Detected",
    510: "Not Extended",
    511: "Network Authentication Required",
}


def status_text(code: int) -> str:
    """Return the standard text for an HTTP status, or "" if it is unknown."""
    return _STATUS_TEXT.get(int(code), "")


@dataclass(frozen=True)
class Code:
    """A business error code with its HTTP status, message, reason and metadata."""

    code: int
    http_code: int
    message: str
    reason: str = ""
    metadata: Any = None

    def __str__(self) -> str:
        http_code = int(self.http_code)
        if self.reason:
            metadata = "<nil>" if self.metadata is None else str(self.metadata)
            return (
                f"Code[{self.code}]-HttpCode[{http_code}]: "
                f"CodeMsg[{self.message}]-HttpMsg[{status_text(http_code)}] "
                f"{self.reason} {metadata}"
            )
        if self.message:
            return (
                f"Code[{self.code}]-HttpCode[{http_code}]: "
                f"CodeMsg[{self.message}]-HttpMsg[{status_text(http_code)}]"
            )
        return f"Code[{self.code}]-HttpCode[{http_code}]"


def new(
    code: int,
    http_code: int,
    message: str,
    reason: str = "",
    metadata: Any = None,
) -> Code:
    """Create a new error code."""
    return Code(code, http_code, message, reason, metadata)


def with_code(code: Code, reason: str = "", metadata: Any = None) -> Code:
    """Return a copy of ``code`` carrying the given reason and metadata."""
    return dataclasses.replace(code, reason=reason, metadata=metadata)


CODE_NIL = new(-1, HttpStatus.NOT_SPECIFIED, "")
CODE_OK = new(0, HttpStatus.OK, "OK")
CODE_INTERNAL_ERROR = new(50, HttpStatus.INTERNAL_SERVER_ERROR, "Internal Error")
CODE_VALIDATION_FAILED = new(51, HttpStatus.BAD_REQUEST, "Validation Failed")
CODE_DB_OPERATION_ERROR = new(
    52, HttpStatus.INTERNAL_SERVER_ERROR, "Database Operation Error"
)
CODE_INVALID_PARAMETER = new(53, HttpStatus.BAD_REQUEST, "Invalid Parameter")
CODE_MISSING_PARAMETER = new(54, HttpStatus.BAD_REQUEST, "Missing Parameter")
CODE_INVALID_OPERATION = new(55, HttpStatus.METHOD_NOT_ALLOWED, "Invalid Operation")
CODE_INVALID_CONFIGURATION = new(
    56, HttpStatus.INTERNAL_SERVER_ERROR, "Invalid Configuration"
)
CODE_MISSING_CONFIGURATION = new(
    57, HttpStatus.INTERNAL_SERVER_ERROR, "Missing Configuration"
)
CODE_NOT_IMPLEMENTED = new(58, HttpStatus.NOT_IMPLEMENTED, "Not Implemented")
CODE_NOT_SUPPORTED = new(59, HttpStatus.METHOD_NOT_ALLOWED, "Not Supported")
CODE_OPERATION_FAILED = new(60, HttpStatus.INTERNAL_SERVER_ERROR, "Operation Failed")
CODE_NOT_AUTHORIZED = new(61, HttpStatus.UNAUTHORIZED, "Not Authorized")
CODE_SECURITY_REASON = new(62, HttpStatus.FORBIDDEN, "Security Reason")
CODE_SERVER_BUSY = new(63, HttpStatus.TOO_MANY_REQUESTS, "Server Is Busy")
CODE_UNKNOWN = new(64, HttpStatus.INTERNAL_SERVER_ERROR, "Unknown Error")
CODE_NOT_FOUND = new(65, HttpStatus.NOT_FOUND, "Not Found")
CODE_INVALID_REQUEST = new(66, HttpStatus.BAD_REQUEST, "Invalid Request")
CODE_BUSINESS_VALIDATION_FAILED = new(
    300, HttpStatus.INTERNAL_SERVER_ERROR, "Business Validation Failed"
)