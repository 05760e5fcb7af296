"""
Exceptions for LockDrop
Every error raised by the package derives from LockDropError so the HTTP layer
has a single place to catch and map them
"""


class LockDropError(Exception):
    # general container for errors
    pass


class CryptoError(LockDropError):
    # raised by the sealing/opening core
    pass


class MalformedBlobError(CryptoError):
    # raised when a blob is too short to hold salt and nonce
    pass


class AuthenticationFailedError(CryptoError):
    # raised on a tag mismatch: wrong password and corrupted data look the same
    pass


class CipherConfigurationError(CryptoError):
    # raised when the cipher cannot be built from the derived key (never expected)
    pass


class StorageError(LockDropError):
    # raised if storage fails in some way
    pass


class BlobNotFoundError(StorageError):
    # raised if a blob is not in storage
    pass


class InvalidBlobIdError(StorageError):
    # raised when an identifier is not one we could have issued
    pass


class BlobExpiredError(StorageError):
    # raised when a blob is read after its expiry
    pass


class InvalidUploadError(LockDropError):
    # raised when an upload is missing its file or password
    pass


class FileTooLargeError(InvalidUploadError):
    # raised when an upload exceeds the configured size cap
    pass


class ConfigurationError(LockDropError):
    # raised when the environment holds an unusable setting
    pass
