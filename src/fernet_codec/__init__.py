"""
fernet-codec
============

Fernet tokens: AES-128-CBC encrypted, HMAC-SHA256 authenticated,
timestamped, base64url encoded.

    >>> from fernet_codec import Fernet, FernetKey
    >>> fernet = Fernet(FernetKey.generate())
    >>> output = fernet.decode(fernet.encode(b"secret"))
    >>> output.data, output.hmac_success
    (b'secret', True)
"""

__version__ = "1.0.0"

from fernet_codec.crypto import (
    AuthenticationFailedError,
    AuthError,
    CipherError,
    DecodeOutput,
    Fernet,
    FernetError,
    FernetKey,
    InvalidIVError,
    InvalidKeyError,
    InvalidKeyFormatError,
    InvalidKeyLengthError,
    InvalidTimestampError,
    InvalidTokenFormatError,
    TokenDecodingError,
    UnknownVersionError,
    decode,
    encode,
)

__all__ = [
    "AuthError",
    "AuthenticationFailedError",
    "CipherError",
    "DecodeOutput",
    "Fernet",
    "FernetError",
    "FernetKey",
    "InvalidIVError",
    "InvalidKeyError",
    "InvalidKeyFormatError",
    "InvalidKeyLengthError",
    "InvalidTimestampError",
    "InvalidTokenFormatError",
    "TokenDecodingError",
    "UnknownVersionError",
    "__version__",
    "decode",
    "encode",
]
