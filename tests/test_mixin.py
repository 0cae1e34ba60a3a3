"""Tests for LifecycleMixin: instance dispatch and per-instance hooks."""

import pytest

from conftest import RecordingHook, make_hook
from lifecycle_hooks import (
    HookExecutionFailure,
    InvalidHook,
    InvalidLifecyclePoint,
    LifecycleMixin,
    Severity,
    lifecycle_point,
)
from lifecycle_hooks.models import HookSource


@lifecycle_point("before_charge", ["user_id", "amount"])
@lifecycle_point("after_charge", ["receipt"])
class BillingService(LifecycleMixin):
    def charge(self, user_id, amount):
        user_id, amount = self.run_lifecycle_hook("before_charge", user_id, amount).unpack()
        receipt = {"user_id": user_id, "amount": amount}
        self.run_lifecycle_hook("after_charge", receipt)
        return receipt


@pytest.fixture
def service(context):
    """BillingService bound to the test context."""
    billing = BillingService()
    billing.lifecycle_context = context
    return billing


class TestRunLifecycleHook:
    """Dispatch through an instance."""

    def test_runs_class_hooks(self, service, context):
        context.add_hook(
            BillingService,
            make_hook(lambda a: a.update(amount=a["amount"] + 5), "before_charge"),
        )

        assert service.charge(1, 10) == {"user_id": 1, "amount": 15}

    def test_default_context(self, default_context, calls):
        default_context.add_hook(BillingService, RecordingHook("audit", "after_charge", calls=calls))

        BillingService().charge(1, 10)

        assert calls == ["audit"]

    def test_undeclared_point(self, service):
        with pytest.raises(InvalidLifecyclePoint, match="refund"):
            service.run_lifecycle_hook("refund", 1)

    def test_missing_arguments(self, service):
        with pytest.raises(InvalidLifecyclePoint):
            service.run_lifecycle_hook("before_charge", 1)


class TestInstanceHooks:
    """Hooks attached to one instance."""

    def test_run_after_class_hooks(self, service, context, calls):
        context.add_hook(BillingService, RecordingHook("class", "before_charge", calls=calls))
        service.add_hook(RecordingHook("instance", "before_charge", calls=calls))

        service.charge(1, 10)

        assert calls == ["class", "instance"]

    def test_only_for_their_instance(self, service, context, calls):
        other = BillingService()
        other.lifecycle_context = context
        service.add_hook(RecordingHook("mine", "before_charge", calls=calls))

        other.charge(1, 10)
        service.charge(1, 10)

        assert calls == ["mine"]

    def test_not_visible_in_class_resolution(self, service, context, calls):
        service.add_hook(RecordingHook("mine", "before_charge", calls=calls))
        assert context.hooks_for(BillingService, "before_charge") == ()

    def test_add_hook_registration(self, service):
        registration = service.add_hook(make_hook(lambda a: None, "after_charge"), point="before_charge")

        assert registration.point == "before_charge"
        assert registration.source is HookSource.INSTANCE
        assert registration.target == f"{__name__}.BillingService"

    def test_add_hook_validates(self, service):
        with pytest.raises(InvalidHook):
            service.add_hook(object())

    def test_set_and_get_hooks(self, service, calls):
        first = RecordingHook("first", "before_charge", calls=calls)
        second = RecordingHook("second", "after_charge", calls=calls)
        service.add_hook(RecordingHook("replaced", "before_charge", calls=calls))

        service.set_hooks([first, second])

        assert service.get_hooks() == (first, second)
        assert service.get_hooks("after_charge") == (second,)
        service.charge(1, 10)
        assert calls == ["first", "second"]

    def test_remove_hooks_for(self, service, calls):
        service.add_hook(RecordingHook("a", "before_charge", calls=calls))
        service.add_hook(RecordingHook("b", "before_charge", calls=calls))
        service.add_hook(RecordingHook("c", "after_charge", calls=calls))

        assert service.remove_hooks_for("before_charge") == 2
        assert service.remove_hooks_for("before_charge") == 0
        service.charge(1, 10)
        assert calls == ["c"]

    def test_new_instance_has_no_hooks(self):
        assert BillingService().get_hooks() == ()

    def test_critical_instance_hook_aborts(self, service, calls):
        service.add_hook(RecordingHook("guard", "before_charge", Severity.CRITICAL, calls=calls, fail=True))
        service.add_hook(RecordingHook("after", "before_charge", calls=calls))

        with pytest.raises(HookExecutionFailure) as exc_info:
            service.charge(1, 10)

        assert calls == ["guard"]
        assert str(exc_info.value.cause) == "guard failed"

    def test_optional_instance_hook_continues(self, service, calls):
        service.add_hook(RecordingHook("flaky", "after_charge", calls=calls, fail=True))

        assert service.charge(1, 10) == {"user_id": 1, "amount": 10}
        assert calls == ["flaky"]
