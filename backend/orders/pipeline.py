"""
Order pipelines.

A pipeline is an ordered tuple of stages. Each stage after the first names the
command that moves an order into it, the operator role allowed to issue that
command, which operator terminals hear about it, and whether it is the stage
that alerts the customer or settles payment. The predecessor of a stage is
simply the entry before it.

Nothing outside this module branches on a particular stage name; reordering
or reshaping a pipeline is a data change only.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .models import OrderStatus

KITCHEN = "kitchen"
CASHIER = "cashier"
OPERATOR_ROLES = (KITCHEN, CASHIER)


@dataclass(frozen=True)
class Stage:
    status: str
    command: Optional[str] = None
    role: Optional[str] = None
    audience: Tuple[str, ...] = OPERATOR_ROLES
    event: str = "status_updated"
    notifies_customer: bool = False
    settles_payment: bool = False


class Pipeline:
    def __init__(self, name: str, stages: Tuple[Stage, ...]):
        if not stages:
            raise ImproperlyConfigured(f"Pipeline '{name}' has no stages")
        statuses = [stage.status for stage in stages]
        if len(set(statuses)) != len(statuses):
            raise ImproperlyConfigured(f"Pipeline '{name}' repeats a stage")
        for stage in stages[1:]:
            if not stage.command or stage.role not in OPERATOR_ROLES:
                raise ImproperlyConfigured(
                    f"Stage {stage.status} in pipeline '{name}' needs a command and an operator role"
                )

        self.name = name
        self.stages = stages
        self._by_status: Dict[str, Stage] = {stage.status: stage for stage in stages}
        self._by_command: Dict[str, Stage] = {
            stage.command: stage for stage in stages if stage.command
        }
        self._position: Dict[str, int] = {stage.status: i for i, stage in enumerate(stages)}

    def __repr__(self):
        return f"<Pipeline {self.name}: {' -> '.join(s.status for s in self.stages)}>"

    @property
    def first(self) -> Stage:
        return self.stages[0]

    @property
    def terminal(self) -> Stage:
        return self.stages[-1]

    def stage(self, status: str) -> Optional[Stage]:
        return self._by_status.get(status)

    def stage_for_command(self, command: str) -> Optional[Stage]:
        return self._by_command.get(command)

    def predecessor(self, status: str) -> Optional[Stage]:
        """The stage an order must be in to advance to ``status``."""
        position = self._position.get(status)
        if not position:
            return None
        return self.stages[position - 1]

    def paid_statuses(self) -> Tuple[str, ...]:
        """The payment-settling stage and every stage after it."""
        for i, stage in enumerate(self.stages):
            if stage.settles_payment:
                return tuple(s.status for s in self.stages[i:])
        return (self.terminal.status,)


COOK_FIRST = Pipeline(
    "cook_first",
    (
        Stage(OrderStatus.COOKING, event="new_kitchen_order"),
        Stage(
            OrderStatus.AWAITING_PAYMENT,
            command="cooking_complete",
            role=KITCHEN,
            notifies_customer=True,
        ),
        Stage(
            OrderStatus.SERVED,
            command="confirm_payment",
            role=CASHIER,
            settles_payment=True,
        ),
    ),
)

PAYMENT_FIRST = Pipeline(
    "payment_first",
    (
        Stage(OrderStatus.AWAITING_PAYMENT, audience=(CASHIER,), event="new_pending_order"),
        Stage(
            OrderStatus.ACCEPTED,
            command="confirm_payment",
            role=CASHIER,
            event="new_kitchen_order",
            settles_payment=True,
        ),
        Stage(OrderStatus.COOKING, command="start_cooking", role=KITCHEN),
        Stage(
            OrderStatus.READY,
            command="cooking_complete",
            role=KITCHEN,
            event="order_is_ready",
        ),
        Stage(
            OrderStatus.SERVED,
            command="call_customer",
            role=CASHIER,
            notifies_customer=True,
        ),
    ),
)

PIPELINES = {
    COOK_FIRST.name: COOK_FIRST,
    PAYMENT_FIRST.name: PAYMENT_FIRST,
}


def get_pipeline(name: Optional[str] = None) -> Pipeline:
    """Return the named pipeline, defaulting to the ORDER_PIPELINE setting."""
    name = name or getattr(settings, "ORDER_PIPELINE", COOK_FIRST.name)
    try:
        return PIPELINES[name]
    except KeyError:
        raise ImproperlyConfigured(
            f"Unknown ORDER_PIPELINE '{name}'. Choose one of: {', '.join(PIPELINES)}"
        )
