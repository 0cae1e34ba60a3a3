"""Tests for the lifecycle-hooks command line."""

import io

import pytest

from conftest import RecordingHook
from example_hooks.services import OrderService, PaymentService, PlainService
from lifecycle_hooks import LifecycleContext, PackageDiscovery, Severity
from lifecycle_hooks import cli


@pytest.fixture
def cli_context(monkeypatch):
    """Route main() to a context discovering the example hooks."""
    ctx = LifecycleContext(discovery=PackageDiscovery("example_hooks"), auto_discovery=True)
    monkeypatch.setattr(cli, "build_context", lambda: ctx)
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    return ctx


class TestLoadTarget:
    def test_colon_form(self):
        assert cli.load_target("example_hooks.services:PaymentService") is PaymentService

    def test_dotted_form(self):
        assert cli.load_target("example_hooks.services.OrderService") is OrderService

    def test_missing_attribute(self):
        with pytest.raises(ImportError, match="has no attribute"):
            cli.load_target("example_hooks.services:Nope")

    def test_missing_module(self):
        with pytest.raises(ImportError):
            cli.load_target("example_hooks.nowhere:Thing")

    def test_not_a_reference(self):
        with pytest.raises(ImportError, match="is not a module:Class"):
            cli.load_target("PaymentService")


class TestAnalyze:
    """Tests for analyze()."""

    def test_points_hooks_and_summary(self):
        ctx = LifecycleContext(discovery=PackageDiscovery("example_hooks"), auto_discovery=True)
        out = io.StringIO()

        assert cli.analyze(ctx, PaymentService, out) == 0

        text = out.getvalue()
        assert "Analyzing lifecycle for: example_hooks.services.PaymentService" in text
        assert "Lifecycle Points (3):" in text
        assert "  - paymentBegin: [total, discount]" in text
        assert "  - paymentBegin: 2 hooks (1 critical, 1 optional)" in text
        assert "ValidateAmount [critical] (discovered, scope: PaymentService)" in text
        assert "  - Total hooks: 4" in text
        assert "  - Critical hooks: 1" in text
        assert "critical hooks that raise on failure" in text

    def test_manual_hooks_listed(self, calls):
        ctx = LifecycleContext(auto_discovery=False)
        ctx.add_hook(OrderService, RecordingHook("audit", "after_create", Severity.OPTIONAL, calls=calls))
        out = io.StringIO()

        cli.analyze(ctx, OrderService, out)

        text = out.getvalue()
        assert "  - after_create: 1 hooks (0 critical, 1 optional)" in text
        assert "conftest.RecordingHook [optional] (manual, scope: unknown)" in text
        assert "raise on failure" not in text
        assert calls == []

    def test_target_without_points(self):
        out = io.StringIO()
        cli.analyze(LifecycleContext(auto_discovery=False), PlainService, out)
        assert "No lifecycle points found in example_hooks.services.PlainService" in out.getvalue()


class TestMain:
    """Tests for main()."""

    def test_analyze_command(self, cli_context, capsys):
        assert cli.main(["analyze", "example_hooks.services:PaymentService"]) == 0
        assert "Lifecycle Points (3):" in capsys.readouterr().out

    def test_unknown_class(self, cli_context, capsys):
        assert cli.main(["analyze", "example_hooks.services:Missing"]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_clear_cache(self, cli_context, capsys):
        cli_context.hooks_for(PaymentService, "paymentBegin")
        assert len(cli_context.resolution_cache.backend) == 1

        assert cli.main(["clear-cache"]) == 0

        assert "cache cleared" in capsys.readouterr().out
        assert len(cli_context.resolution_cache.backend) == 0

    def test_context_build_failure(self, monkeypatch):
        def fail():
            raise ValueError("Config validation failed: CACHE_TTL must be > 0, got 0")

        monkeypatch.setattr(cli, "build_context", fail)
        monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)

        assert cli.main(["clear-cache"]) == 1

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])
