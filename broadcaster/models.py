"""
Broadcast request and payload models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict

from broadcaster.operations import Batch

SuccessCallback = Callable[[], Any]
ErrorCallback = Callable[[str], Any]


class BroadcastRequest(BaseModel):
    """
    A user-intended operation as submitted to the Orchestrator.

    Immutable: the confirmation and login paths replay an augmented copy
    made with ``model_copy(update=...)``.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: str
    operation: dict[str, Any]
    confirm: Union[bool, str, Callable[[], Any], None] = None
    warning: Optional[str] = None
    keys: list[str] = []
    username: Optional[str] = None
    password: Optional[str] = None
    use_external_signer: bool = False
    success_callback: Optional[SuccessCallback] = None
    error_callback: Optional[ErrorCallback] = None
    allow_unsafe_post: bool = False

    def confirm_required(self) -> bool:
        """Evaluate ``confirm`` (literal or predicate) for truthiness."""
        conf = self.confirm() if callable(self.confirm) else self.confirm
        return bool(conf)


@dataclass
class BroadcastPayload:
    """What the Orchestrator hands to the executor."""
    operations: Batch
    needs_active_auth: bool
    keys: list[str] = field(default_factory=list)
    username: Optional[str] = None
    success_callback: Optional[SuccessCallback] = None
    error_callback: Optional[ErrorCallback] = None
    use_external_signer: bool = False
