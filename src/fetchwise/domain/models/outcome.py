"""AttemptOutcome - classification of a single request attempt"""

from dataclasses import dataclass
from typing import Optional, Union

import requests


@dataclass(frozen=True)
class Success:
    """Final response that needs no retry"""

    response: requests.Response


@dataclass(frozen=True)
class RetryableFailure:
    """Response that should be retried if attempts remain"""

    response: requests.Response
    suggested_delay: Optional[float] = None  # Server retry hint in seconds


@dataclass(frozen=True)
class TerminalFailure:
    """Error response that must not be retried"""

    response: requests.Response


AttemptOutcome = Union[Success, RetryableFailure, TerminalFailure]
