from lifecycle_hooks import Hook, Severity, hook


@hook("PaymentService", "paymentBegin", Severity.CRITICAL)
class ValidateAmount(Hook):
    def handle(self, args):
        if args["total"] <= 0:
            raise ValueError("Total must be positive")


@hook("PaymentService", "payment_complete")
class MisplacedHook(Hook):
    """Lives under PaymentBegin but declares another point; never resolved for paymentBegin."""

    def handle(self, args):
        raise AssertionError("should not run")
