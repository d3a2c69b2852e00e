"""Custom SQLAlchemy types and identifier helpers"""
from sqlalchemy import TypeDecorator, String
import re
import secrets
import string
import uuid


# Project ids double as subdomain labels
PROJECT_ID_PATTERN = re.compile(r"^[a-z0-9]+$")
PROJECT_ID_MAX_LENGTH = 32
PROJECT_ID_LENGTH = 12
_PROJECT_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_uuid():
    """Generate a UUID string"""
    return str(uuid.uuid4())


def generate_project_id() -> str:
    """Generate an opaque lowercase-alphanumeric project id"""
    return ''.join(secrets.choice(_PROJECT_ID_ALPHABET) for _ in range(PROJECT_ID_LENGTH))


def is_valid_project_id(value) -> bool:
    """True if value can be used both as a project id and as a host label"""
    return (
        isinstance(value, str)
        and 0 < len(value) <= PROJECT_ID_MAX_LENGTH
        and PROJECT_ID_PATTERN.match(value) is not None
    )


class GUID(TypeDecorator):
    """Platform-independent GUID type that stores UUIDs as VARCHAR(36)"""
    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value
