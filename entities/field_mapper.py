"""Field-selection flags for each entity type.

A fetch only asks the server for the properties whose flag is set in the
entity type's ``downloaded_fields``. The property registries map each flag to
the wire field (or nested sub-resource) it stands for.
"""

import functools
import operator
from enum import Flag, auto
from typing import TypeVar

F = TypeVar("F", bound=Flag)


class MemberFields(Flag):
    FULL_NAME = auto()
    USERNAME = auto()
    INITIALS = auto()
    BIO = auto()
    AVATAR_URL = auto()


class AttachmentFields(Flag):
    BYTES = auto()
    DATE = auto()
    IS_UPLOAD = auto()
    MEMBER = auto()
    MIME_TYPE = auto()
    NAME = auto()
    PREVIEWS = auto()
    URL = auto()
    EDGE_COLOR = auto()
    POSITION = auto()


class ActionFields(Flag):
    CREATOR = auto()
    DATA = auto()
    DATE = auto()
    TYPE = auto()


class StickerFields(Flag):
    LEFT = auto()
    NAME = auto()
    PREVIEWS = auto()
    ROTATION = auto()
    TOP = auto()
    IMAGE_URL = auto()
    Z_INDEX = auto()


def all_fields(flag_type: type[F]) -> F:
    """Selection with every flag of ``flag_type`` set."""
    return functools.reduce(operator.or_, flag_type, flag_type(0))
