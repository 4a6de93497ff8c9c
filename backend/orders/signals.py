from django.dispatch import Signal

# Custom signals for order lifecycle events. The lifecycle service sends these
# after the store has been updated and operator terminals have been notified.

# kwargs: order
order_submitted = Signal()

# kwargs: order, previous_status, stage
order_transitioned = Signal()

# Sent when an advance command is ignored (unknown order, wrong stage, wrong
# role). Callers of advance() never see an error for these.
# kwargs: order_id, target_status, current_status, role, reason
transition_rejected = Signal()
