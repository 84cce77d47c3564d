from __future__ import annotations

import re

from ..core.constants import MISSING
from .model import RollInfo

# <admission year><ug|pg><branch code><serial>, e.g. 2046ugcm300
ROLL_PATTERN = re.compile(r"^(\d{4})(ug|pg)([a-z]{2,4})(\d+)$", re.IGNORECASE)


def local_part(email: str) -> str:
    return email.strip().lower().split("@", 1)[0]


def parse_roll_info(local: str) -> RollInfo:
    """Split a local-part like '2046ugcm300' into year/program/branch/serial.

    Unknown shapes still get roll_number (the upper-cased local-part); every
    other field is "-".
    """

    local = local.strip().lower()
    match = ROLL_PATTERN.match(local)
    if not match:
        return RollInfo(year=MISSING, program=MISSING, branch=MISSING, roll_no=MISSING, roll_number=local.upper())

    year, program, branch, serial = match.groups()
    return RollInfo(
        year=year,
        program=program.upper(),
        branch=branch.upper(),
        roll_no=serial,
        roll_number=local.upper(),
    )


def parse_email(email: str) -> RollInfo:
    return parse_roll_info(local_part(email))
