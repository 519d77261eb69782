"""
Integration Tests for the gating flow

Drives the application over HTTP with a mocked platform adapter and
verifies what is published back to the pull request: the commit
status, the summary comment and the stats, across a sequence of
deliveries for the same PR.
"""

import json

import pytest

from models.platform import ChangedFile, Review


def deliver(client, event_type: str, payload) -> dict:
    response = client.post(
        "/webhook",
        content=json.dumps(payload),
        headers={"X-GitHub-Event": event_type},
    )
    assert response.status_code == 200
    return response.json()


@pytest.mark.integration
class TestGatingFlow:
    """End-to-end webhook to status and comment."""

    def test_opened_pr_with_failing_check_is_blocked(self, client, mock_adapter, pr_opened_payload):
        """
        GIVEN a PR with enough approvals that changes a secrets file
        WHEN it is opened
        THEN the commit status is failure and the comment is not ready to merge
        """
        # Arrange
        mock_adapter.list_files.return_value = [
            ChangedFile(filename="tests/test_app.py", additions=20),
            ChangedFile(filename="config/secret_keys.yaml", additions=3),
        ]
        client.app.state.dispatcher.orchestrator.required_checks = ["test", "security", "build"]

        # Act
        deliver(client, "pull_request", pr_opened_payload)

        # Assert
        status = mock_adapter.create_status.call_args.kwargs
        assert status["sha"] == "b" * 40
        assert status["state"] == "failure"
        assert status["description"] == "Some checks failed"
        assert status["status_context"] == "ci/review-bot"

        body = mock_adapter.create_comment.call_args.args[1]
        assert "- ✅ **test**: All tests passed" in body
        assert "- ❌ **security**: Potential security issues found in 1 files" in body
        assert "- ✅ **build**: No build configuration changes" in body
        assert "❌ **Not ready to merge** - Some checks failed" in body

    def test_review_flow_reaches_ready_to_merge(self, client, mock_adapter, pr_opened_payload, review_submitted_payload):
        """
        GIVEN a PR opened with one approval
        WHEN a second approval is submitted
        THEN the status moves from pending to success
        """
        # Arrange
        mock_adapter.list_reviews.return_value = [Review(state="APPROVED", reviewer="alice")]

        # Act: PR opened with a single approval
        deliver(client, "pull_request", pr_opened_payload)

        # Assert
        first = mock_adapter.create_status.call_args.kwargs
        assert first["state"] == "pending"
        assert first["description"] == "Need 2 approvals, have 1"
        assert "⏳ **Not ready to merge** - Need 2 approvals, have 1" in (
            mock_adapter.create_comment.call_args.args[1]
        )

        # Act: second approval arrives
        mock_adapter.list_reviews.return_value = [
            Review(state="APPROVED", reviewer="alice"),
            Review(state="APPROVED", reviewer="bob"),
        ]
        outcome = deliver(client, "pull_request_review", review_submitted_payload)

        # Assert
        assert outcome["outcome"] == "reevaluated"
        second = mock_adapter.create_status.call_args.kwargs
        assert second["state"] == "success"
        assert second["description"] == "All checks passed - ready to merge"
        assert "✅ **Ready to merge** - All merge policies satisfied" in (
            mock_adapter.create_comment.call_args.args[1]
        )

    def test_synchronize_reprocesses_same_pr(self, client, pr_opened_payload):
        """
        GIVEN the same PR opened then synchronized
        WHEN both deliveries are processed
        THEN both are counted and the average uses the latest duration
        """
        deliver(client, "pull_request", pr_opened_payload)
        deliver(client, "pull_request", {**pr_opened_payload, "action": "synchronize"})

        stats = client.get("/stats").json()

        assert stats["total_prs_processed"] == 2
        assert stats["total_checks_run"] == 6

    def test_closed_pr_is_not_processed(self, client, mock_adapter, pr_closed_payload):
        """
        GIVEN a closed PR delivery
        WHEN it is received
        THEN nothing is published
        """
        outcome = deliver(client, "pull_request", pr_closed_payload)

        assert outcome["outcome"] == "ignored"
        mock_adapter.create_status.assert_not_called()
        mock_adapter.create_comment.assert_not_called()

    def test_external_check_run_only_updates_stats(self, client, mock_adapter, check_run_payload):
        """
        GIVEN a check_run from another integration
        WHEN it is received
        THEN only check timings change
        """
        deliver(client, "check_run", check_run_payload)

        stats = client.get("/stats").json()
        assert "ci/build" in stats["check_run_times"]
        assert stats["total_checks_run"] == 0
        mock_adapter.create_comment.assert_not_called()
