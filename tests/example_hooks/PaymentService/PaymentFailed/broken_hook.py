from lifecycle_hooks import Hook, hook


@hook("PaymentService", "payment.failed")
class BrokenHook(Hook):
    def __init__(self):
        raise RuntimeError("missing dependency")

    def handle(self, args):
        pass
