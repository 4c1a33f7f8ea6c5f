"""
Base data model for wallet entries
"""

import binascii
import math
import uuid
from datetime import datetime

import pyotp

from .exceptions import InvalidEntryError, InvalidOTPSecretError, InvalidOTPTimeError, OTPNotConfiguredError


OTP_INTERVAL = 30
OTP_DIGITS = 6

# Fields stored as text in the JSON record, in serialization order
TEXT_FIELDS = ("name", "group", "uri", "user", "password", "otp", "comment")


def _unix_seconds(now):
    # Accept None (current time), a datetime or a unix timestamp
    if now is None:
        now = datetime.now().timestamp()
    elif isinstance(now, datetime):
        now = now.timestamp()
    return math.floor(now)


class Entry:
    """
        One credential stored in a wallet
    """

    __slots__ = ('id', 'name', 'group', 'uri', 'user', 'password', 'otp', 'comment')

    def __init__(self, id="", name="", group="", uri="", user="", password="", otp="", comment=""):
        """
            Initialize Entry
        """
        self.id = id
        self.name = name
        self.group = group
        self.uri = uri
        self.user = user
        self.password = password
        self.otp = otp
        self.comment = comment

    @classmethod
    def create(cls, **fields):
        """
            Build a new entry with a freshly generated id
        """
        entry = cls(**fields)
        entry.generate_id()
        return entry

    def generate_id(self):
        """
            Assign a new random identifier (uuid4, 122 random bits)
        """
        self.id = uuid.uuid4().hex
        return self.id

    def validate(self):
        """
            Check the fields required to store the entry
        """
        if not self.id:
            raise InvalidEntryError("entry has no id")
        if not self.name:
            raise InvalidEntryError(f"entry {self.id} has no name")

    def has_otp(self):
        return self.otp != ""

    def otp_code(self, now=None):
        """
            Return the current TOTP code and the seconds it stays valid.

            ``now`` may be None, a datetime or unix seconds, not before 1970.
            Codes follow RFC 6238: 30 second step, HMAC-SHA1, 6 digits.
        """
        if not self.otp:
            raise OTPNotConfiguredError(f"entry {self.name!r} has no OTP secret")

        secret = self.otp.replace(" ", "").upper()
        totp = pyotp.TOTP(secret, digits=OTP_DIGITS, interval=OTP_INTERVAL)
        try:
            totp.byte_secret()
        except (binascii.Error, ValueError) as err:
            raise InvalidOTPSecretError(f"entry {self.name!r} has an OTP secret that is not base32") from err

        seconds = _unix_seconds(now)
        if seconds < 0:
            raise InvalidOTPTimeError(f"no OTP code before the unix epoch (t={seconds})")
        code = totp.generate_otp(seconds // OTP_INTERVAL)
        return code, OTP_INTERVAL - (seconds % OTP_INTERVAL)

    def copy(self):
        """
            Return an independent copy
        """
        return Entry(**{field: getattr(self, field) for field in self.__slots__})

    def to_dict(self):
        """
            Convert entry to its JSON record
        """
        data = {'id': self.id}
        for field in TEXT_FIELDS:
            data[field] = getattr(self, field)
        return data

    def __repr__(self):
        """
            String representation, secrets left out
        """
        return f"Entry(id={self.id!r}, name={self.name!r}, group={self.group!r})"

    def __eq__(self, other):
        """
            Entries are equal when every field is equal
        """
        if not isinstance(other, Entry):
            return NotImplemented
        return all(getattr(self, field) == getattr(other, field) for field in self.__slots__)


def create_entry_from_dict(data, require_id=True):
    """
        Create an Entry from its JSON record

        Missing text fields default to an empty string. Raises ValueError if
        the record is not an object, a field is not a string, or the id is
        missing while ``require_id`` is set.
    """
    if not isinstance(data, dict):
        raise ValueError(f"entry record must be an object, got {type(data).__name__}")

    entry_id = data.get('id', "")
    if entry_id is None:
        entry_id = ""
    if not isinstance(entry_id, str):
        raise ValueError(f"entry id must be a string, got {type(entry_id).__name__}")
    if require_id and not entry_id:
        raise ValueError("entry record has no id")

    fields = {}
    for field in TEXT_FIELDS:
        value = data.get(field, "")
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ValueError(f"entry field {field!r} must be a string, got {type(value).__name__}")
        fields[field] = value

    return Entry(id=entry_id, **fields)
