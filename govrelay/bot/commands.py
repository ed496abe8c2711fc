"""Chat command recognition and parsing."""
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Command(str, Enum):
    NEW_DAO = "!new"
    NEW_PROPOSAL = "!proposal"
    SETUP = "!setup"


DEADLINE_FORMAT = "%m %d %Y %H:%M:%S"

# !proposal [MM dd yyyy HH:mm:ss] [message]; the brackets are optional
_PROPOSAL_RE = re.compile(
    r"^!proposal\s+\[?\s*(?P<deadline>\d{1,2}\s+\d{1,2}\s+\d{4}\s+\d{1,2}:\d{2}:\d{2})\s*\]?"
    r"(?:\s+\[?(?P<text>.*?)\]?)?\s*$",
    re.DOTALL,
)


@dataclass
class ProposalCommand:
    deadline: Optional[float]
    description: Optional[str]


@dataclass
class SetupCommand:
    dao_name: Optional[str]


def find_command(content: str) -> Optional[Command]:
    """Return the command a message starts with, if any."""
    if not content:
        return None
    head = content.strip().split(maxsplit=1)[0] if content.strip() else ""
    for command in Command:
        if head == command.value:
            return command
    return None


def parse_deadline(value: str) -> Optional[float]:
    """Parse `MM dd yyyy HH:mm:ss` (UTC) into epoch seconds, None if malformed."""
    normalized = " ".join(value.split())
    try:
        parsed = datetime.strptime(normalized, DEADLINE_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc).timestamp()


def parse_proposal(content: str) -> ProposalCommand:
    match = _PROPOSAL_RE.match(content.strip())
    if not match:
        return ProposalCommand(deadline=None, description=None)
    text = (match.group("text") or "").strip()
    return ProposalCommand(
        deadline=parse_deadline(match.group("deadline")),
        description=text or None,
    )


def parse_setup(content: str) -> SetupCommand:
    parts = content.strip().split(maxsplit=1)
    name = parts[1].strip() if len(parts) > 1 else ""
    return SetupCommand(dao_name=name or None)
