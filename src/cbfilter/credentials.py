"""Protection of stored API keys.

Keys are encrypted with a platform secret-protection primitive and stored as
``dpapi:<base64>``. Values without the prefix are legacy plaintext and are
returned unchanged. Failures never raise: ``protect`` yields ``""`` and the
caller decides whether to keep the plaintext, ``unprotect`` yields ``""``
which callers treat as "key unset".
"""

import base64
import binascii
import ctypes
import sys
from typing import Optional, Protocol

from .errors import CredentialError
from .logging import LogEvent, log_error, log_warning

DPAPI_PREFIX = "dpapi:"
DPAPI_DESCRIPTION = "cbfilter"
KEY_ENCODING = "utf-16-le"

CRYPTPROTECT_UI_FORBIDDEN = 0x01


class SecretProtector(Protocol):
    """Encrypt and decrypt opaque bytes for the current user and machine."""

    def protect(self, data: bytes) -> bytes: ...

    def unprotect(self, data: bytes) -> bytes: ...


class _DataBlob(ctypes.Structure):
    _fields_ = [("cbData", ctypes.c_uint32), ("pbData", ctypes.POINTER(ctypes.c_char))]


class DpapiProtector:
    """Windows Data Protection API (CryptProtectData / CryptUnprotectData)."""

    def __init__(self) -> None:
        if sys.platform != "win32":
            raise CredentialError("DPAPI is only available on Windows")
        self._crypt32 = ctypes.windll.crypt32  # type: ignore[attr-defined]
        self._kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]

    @staticmethod
    def _blob(data: bytes) -> _DataBlob:
        buffer = ctypes.create_string_buffer(data, len(data))
        return _DataBlob(len(data), ctypes.cast(buffer, ctypes.POINTER(ctypes.c_char)))

    def _take(self, blob: _DataBlob) -> bytes:
        try:
            return ctypes.string_at(blob.pbData, blob.cbData)
        finally:
            self._kernel32.LocalFree(blob.pbData)

    def protect(self, data: bytes) -> bytes:
        blob_in = self._blob(data)
        blob_out = _DataBlob()
        ok = self._crypt32.CryptProtectData(
            ctypes.byref(blob_in),
            ctypes.c_wchar_p(DPAPI_DESCRIPTION),
            None,
            None,
            None,
            CRYPTPROTECT_UI_FORBIDDEN,
            ctypes.byref(blob_out),
        )
        if not ok:
            raise CredentialError(f"CryptProtectData failed: {ctypes.GetLastError()}")  # type: ignore[attr-defined]
        return self._take(blob_out)

    def unprotect(self, data: bytes) -> bytes:
        blob_in = self._blob(data)
        blob_out = _DataBlob()
        ok = self._crypt32.CryptUnprotectData(
            ctypes.byref(blob_in),
            None,
            None,
            None,
            None,
            CRYPTPROTECT_UI_FORBIDDEN,
            ctypes.byref(blob_out),
        )
        if not ok:
            raise CredentialError(f"CryptUnprotectData failed: {ctypes.GetLastError()}")  # type: ignore[attr-defined]
        return self._take(blob_out)


def default_protector() -> Optional[SecretProtector]:
    """Return the platform protector, or None where none is available."""
    if sys.platform == "win32":
        return DpapiProtector()
    return None


class CredentialStore:
    """Encrypt API keys for storage and decrypt them on load."""

    def __init__(self, protector: Optional[SecretProtector] = None, use_platform_default: bool = True) -> None:
        if protector is None and use_platform_default:
            protector = default_protector()
        self._protector = protector

    @property
    def available(self) -> bool:
        return self._protector is not None

    def protect(self, plaintext: str) -> str:
        """Return ``dpapi:<base64 ciphertext>``, or ``""`` on failure or empty input."""
        if not plaintext:
            return ""
        if self._protector is None:
            log_warning(LogEvent.CREDENTIALS, "No secret protector available on this platform")
            return ""
        try:
            ciphertext = self._protector.protect(plaintext.encode(KEY_ENCODING))
        except CredentialError as e:
            log_error(LogEvent.CREDENTIALS, f"Protecting API key failed: {e}")
            return ""
        return DPAPI_PREFIX + base64.b64encode(ciphertext).decode("ascii")

    def unprotect(self, token: str) -> str:
        """Decrypt a stored token.

        Legacy plaintext (no prefix) is returned unchanged. A token that
        cannot be decoded or decrypted gives ``""``.
        """
        if not token:
            return ""
        if not token.startswith(DPAPI_PREFIX):
            return token
        if self._protector is None:
            log_warning(LogEvent.CREDENTIALS, "Encrypted API key found but no secret protector is available")
            return ""

        try:
            ciphertext = base64.b64decode(token[len(DPAPI_PREFIX) :], validate=True)
        except (binascii.Error, ValueError) as e:
            log_error(LogEvent.CREDENTIALS, f"Stored API key is not valid base64: {e}")
            return ""

        try:
            plain = self._protector.unprotect(ciphertext)
        except CredentialError as e:
            log_error(LogEvent.CREDENTIALS, f"Unprotecting API key failed: {e}")
            return ""

        if len(plain) % 2 != 0:
            log_error(LogEvent.CREDENTIALS, f"Decrypted API key has unexpected byte length: {len(plain)}")
            return ""
        return plain.decode(KEY_ENCODING, errors="replace")
