from lifecycle_hooks import Hook, hook


@hook("PaymentService", "paymentBegin")
class ApplyDiscount(Hook):
    def handle(self, args):
        args["discount"] = 10
        args["total"] = args["total"] - args["discount"]
