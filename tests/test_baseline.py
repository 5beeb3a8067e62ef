# tests/test_baseline.py
# Tests for the baseline filter.

"""
Unit tests for computing the validation set at deploy start.
"""

import pytest

from deploy_health_gate.errors import ProviderRefreshError
from deploy_health_gate.gates.baseline import compute_validation_set, store_validation_monitors
from deploy_health_gate.models import MonitorQuery

from conftest import script


class TestComputeValidationSet:
    """Tests for compute_validation_set."""

    def test_informational_queries_are_ignored(self, provider_for, pod1):
        provider = provider_for(script("1", ["OK"]), script("2", ["OK"]))
        queries = [MonitorQuery(query="service:api"), MonitorQuery(query="id:2", failure_behavior="")]
        assert compute_validation_set(queries, [pod1], provider) == ()

    def test_keeps_ok_monitors_in_query_order(self, provider_for, pod1):
        provider = provider_for(
            script("1", ["OK"], tags=["team:core"]),
            script("2", ["OK"], tags=["service:api"]),
        )
        queries = [
            MonitorQuery(query="service:api", failure_behavior="fail_deploy"),
            MonitorQuery(query="team:core", failure_behavior="redeploy_previous"),
        ]
        result = compute_validation_set(queries, [pod1], provider)
        assert [m.id for m in result] == ["2", "1"]

    def test_excludes_monitors_alerting_at_start(self, provider_for, pod1, fail_query):
        provider = provider_for(script("1", ["Alert", "OK"]), script("2", ["Alert"]))
        assert compute_validation_set([fail_query], [pod1], provider) == ()

    def test_partial_baseline_exclusion(self, provider_for, pod1, fail_query):
        provider = provider_for(script("1", ["Alert"]), script("2", ["OK"]), script("3", ["No Data"]))
        result = compute_validation_set([fail_query], [pod1], provider)
        assert [m.id for m in result] == ["2", "3"]

    def test_alert_outside_deploy_groups_is_kept(self, provider_for, pod1):
        provider = provider_for(
            script("1", ["Alert"], groups={"pod:pod1": ["OK"], "pod:pod2": ["Alert"]}),
        )
        query = MonitorQuery(
            query="service:api",
            failure_behavior="fail_deploy",
            match_target="pod",
            match_source="deploy_group.permalink",
        )
        result = compute_validation_set([query], [pod1], provider)
        assert [m.id for m in result] == ["1"]

    def test_idempotent(self, provider_for, pod1, fail_query):
        provider = provider_for(script("1", ["OK"]), script("2", ["Alert"]), script("3", ["OK"]))
        first = compute_validation_set([fail_query], [pod1], provider)
        second = compute_validation_set([fail_query], [pod1], provider)
        assert [m.id for m in first] == [m.id for m in second] == ["1", "3"]

    def test_resolve_failure_is_reported(self, provider_for, pod1, fail_query):
        provider = provider_for(script("1", ["!error"]))
        with pytest.raises(ProviderRefreshError, match="service:api"):
            compute_validation_set([fail_query], [pod1], provider)


class TestStoreValidationMonitors:
    def test_attaches_to_deploy(self, provider_for, make_stage, make_deploy, fail_query):
        provider = provider_for(script("1", ["OK"]), script("2", ["Alert"]))
        deploy = make_deploy(make_stage(fail_query))
        stored = store_validation_monitors(deploy, provider)
        assert deploy.validation_monitors == stored
        assert [m.id for m in deploy.validation_monitors] == ["1"]

    def test_does_not_refresh(self, provider_for, make_stage, make_deploy, fail_query):
        provider = provider_for(script("1", ["OK"]))
        store_validation_monitors(make_deploy(make_stage(fail_query)), provider)
        assert provider.refresh_calls == 0
