"""Closed table of message routes between environment roles.

Every valid (sender, receiver, payload kind) triple is listed in ROUTES;
anything else is rejected with a RoutingError.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import RoutingError, ValidationError


class Role(Enum):
    ENVIRONMENT = "environment"
    BODY = "body"
    ACTUATOR = "actuator"
    AGENT = "agent"


class PayloadKind(Enum):
    COMMAND = "command"   # agent sets an actuator value
    TICK = "tick"         # environment advances a body by dt
    OBSERVE = "observe"   # body reports its state


@dataclass(frozen=True)
class Message:
    sender: Role
    receiver: Role
    kind: PayloadKind
    body: Optional[str] = None
    actuator: Optional[str] = None
    value: Optional[float] = None

    @property
    def route(self) -> Tuple[Role, Role, PayloadKind]:
        return self.sender, self.receiver, self.kind


def _require(message: Message, *names: str):
    missing = [n for n in names if getattr(message, n) is None]
    if missing:
        raise ValidationError(f"{message.kind.value} message is missing {missing}")


def _command(controller, message: Message):
    _require(message, "body", "actuator", "value")
    return controller.receive(message.body, message.actuator, message.value)


def _tick(controller, message: Message):
    _require(message, "value")
    return controller.tick(message.value, body=message.body)


def _observation(controller, message: Message):
    _require(message, "body")
    return controller.observe(message.body)


def _state(controller, message: Message):
    _require(message, "body")
    return controller.observe(message.body, raw=True)


ROUTES: Dict[Tuple[Role, Role, PayloadKind], Callable] = {
    (Role.AGENT, Role.ACTUATOR, PayloadKind.COMMAND): _command,
    (Role.ENVIRONMENT, Role.BODY, PayloadKind.TICK): _tick,
    (Role.BODY, Role.AGENT, PayloadKind.OBSERVE): _observation,
    (Role.BODY, Role.ENVIRONMENT, PayloadKind.OBSERVE): _state,
}


def routes() -> List[Tuple[Role, Role, PayloadKind]]:
    return list(ROUTES)


def dispatch(controller, message: Message):
    """Deliver `message` to `controller` through its route.

    Returns whatever the route produces: the applied command value, None
    for ticks, or an observation array.
    """
    try:
        handler = ROUTES[message.route]
    except KeyError:
        sender, receiver, kind = message.route
        raise RoutingError(
            f"No route for {kind.value} from {sender.value} to {receiver.value}"
        ) from None
    return handler(controller, message)
