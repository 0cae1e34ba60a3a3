"""Tests for HookKernel ordering configuration."""

import pytest

from example_hooks.PaymentService.PaymentBegin.apply_discount import ApplyDiscount
from example_hooks.services import PaymentService
from lifecycle_hooks import HookKernel, KernelConfigError


KERNEL_YAML = """
hooks:
  example_hooks.services.PaymentService:
    paymentBegin:
      - example_hooks.PaymentService.PaymentBegin.validate_amount.ValidateAmount
      - example_hooks.PaymentService.PaymentBegin.apply_discount.ApplyDiscount
    payment.failed:
      - example_hooks.PaymentService.PaymentFailed.log_error.LogError
"""


class TestHookKernel:
    """Tests for HookKernel."""

    def test_explicit_order(self):
        kernel = HookKernel({"app.Shop": {"checkout": ["a.First", "a.Second"]}})
        assert kernel.explicit_order("app.Shop", "checkout") == ("a.First", "a.Second")

    def test_unspecified_pair_returns_none(self):
        kernel = HookKernel({"app.Shop": {"checkout": ["a.First"]}})
        assert kernel.explicit_order("app.Shop", "refund") is None
        assert kernel.explicit_order("app.Other", "checkout") is None

    def test_empty_order_is_not_unspecified(self):
        kernel = HookKernel({"app.Shop": {"checkout": []}})
        assert kernel.explicit_order("app.Shop", "checkout") == ()

    def test_class_keys_normalized(self):
        kernel = HookKernel({PaymentService: {"paymentBegin": [ApplyDiscount]}})
        assert kernel.explicit_order(
            "example_hooks.services.PaymentService", "paymentBegin"
        ) == (ApplyDiscount,)
        assert kernel.explicit_order(PaymentService(), "paymentBegin") == (ApplyDiscount,)

    def test_set_order_replaces(self):
        kernel = HookKernel()
        kernel.set_order("app.Shop", "checkout", ["a.First"])
        kernel.set_order("app.Shop", "checkout", ["a.Second"])
        assert kernel.explicit_order("app.Shop", "checkout") == ("a.Second",)
        assert len(kernel) == 1

    def test_string_order_rejected(self):
        with pytest.raises(KernelConfigError, match="must be a list"):
            HookKernel({"app.Shop": {"checkout": "a.First"}})

    def test_points_must_be_mapping(self):
        with pytest.raises(KernelConfigError, match="must map lifecycle points"):
            HookKernel({"app.Shop": ["a.First"]})

    def test_describe(self):
        kernel = HookKernel({PaymentService: {"paymentBegin": [ApplyDiscount, "x.Y"]}})
        assert kernel.describe() == {
            "example_hooks.services.PaymentService": {
                "paymentBegin": [
                    "example_hooks.PaymentService.PaymentBegin.apply_discount.ApplyDiscount",
                    "x.Y",
                ]
            }
        }


class TestKernelLoading:
    """Tests for HookKernel.from_dict / from_yaml."""

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "kernel.yaml"
        path.write_text(KERNEL_YAML)

        kernel = HookKernel.from_yaml(str(path))

        assert len(kernel) == 2
        order = kernel.explicit_order(PaymentService, "paymentBegin")
        assert order[0].endswith("ValidateAmount")
        assert kernel.explicit_order(PaymentService, "payment.failed")[0].endswith("LogError")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Kernel YAML not found"):
            HookKernel.from_yaml(str(tmp_path / "absent.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "kernel.yaml"
        path.write_text("hooks: [unclosed")
        with pytest.raises(KernelConfigError, match="Failed to parse"):
            HookKernel.from_yaml(str(path))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "kernel.yaml"
        path.write_text("")
        assert len(HookKernel.from_yaml(str(path))) == 0

    def test_top_level_must_be_mapping(self):
        with pytest.raises(KernelConfigError, match="expected dict, got list"):
            HookKernel.from_dict(["hooks"])

    def test_hooks_must_be_mapping(self):
        with pytest.raises(KernelConfigError, match="'hooks' must be a mapping"):
            HookKernel.from_dict({"hooks": ["a"]})

    def test_missing_hooks_key(self):
        assert len(HookKernel.from_dict({"other": 1})) == 0
