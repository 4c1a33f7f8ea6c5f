"""
Exceptions for KeyBox
Every error raised by the core derives from KeyBoxError so frontends have a single catcher
"""


class KeyBoxError(Exception):
    # general container for errors
    pass


class AuthenticationError(KeyBoxError):
    # raised when a vault cannot be opened: wrong passphrase, wrong salt or tampered data
    pass


class StorageUnavailableError(KeyBoxError):
    # raised when the vault file is missing, unreadable or unwritable
    pass


class MalformedVaultError(KeyBoxError):
    # raised when decrypted vault content is not a valid list of entries
    pass


class MalformedImportError(KeyBoxError):
    # raised when an import document is not a valid list of entries
    pass


class EntryNotFoundError(KeyBoxError):
    # raised when no entry matches the given id
    pass


class DuplicateEntryError(KeyBoxError):
    # raised when adding an entry whose id already exists
    pass


class InvalidEntryError(KeyBoxError):
    # raised when an entry misses its id or name
    pass


class OTPNotConfiguredError(KeyBoxError):
    # raised when asking an OTP code from an entry without seed
    pass


class InvalidOTPSecretError(KeyBoxError):
    # raised when the OTP seed is not valid base32
    pass


class InvalidOTPTimeError(KeyBoxError):
    # raised when an OTP code is asked for a time before the unix epoch
    pass


class InvalidConfigurationError(KeyBoxError):
    # raised when password generation is asked for an impossible password
    pass


class ConfigError(KeyBoxError):
    # raised when the configuration file cannot be parsed or written
    pass


class SessionLockedError(KeyBoxError):
    # raised when using a session that is locked
    pass


class InputTimeoutError(KeyBoxError):
    # raised when the user did not answer before the deadline
    pass
