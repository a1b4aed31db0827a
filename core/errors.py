"""
Codec Error Taxonomy
"""


class CodecError(ValueError):
    """Base class for every error raised by the semi-private codec."""


class EncodingError(CodecError):
    """Invalid encoder input. Raised before any output is produced."""


class DecodingError(CodecError):
    """The document is structurally broken (not hex, not UTF-8 JSON)."""


class InvalidKeyFormat(CodecError):
    """A key has the wrong length or is not a valid secp256k1 key."""


class DecryptionFailure(CodecError):
    """
    A ciphertext or envelope could not be opened.

    `reason` is "authentication" when an authenticated cipher rejected the
    tag (wrong key or tampering) and "corrupted" when the input is
    structurally unusable.
    """

    AUTHENTICATION = "authentication"
    CORRUPTED = "corrupted"

    def __init__(self, message: str, reason: str = CORRUPTED):
        super().__init__(message)
        self.reason = reason
