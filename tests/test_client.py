"""
Unit tests for AnalyticsClient and MockAnalyticsClient.

The HTTP session is replaced with a MagicMock; no network access.
"""
from unittest.mock import MagicMock, patch

import pytest
import requests

from learner_analytics.client import (
    DASHBOARD_PATH,
    TIMEFRAMES_PATH,
    AnalyticsAPIError,
    AnalyticsClient,
    MockAnalyticsClient,
)
from learner_analytics.controller import DashboardController
from learner_analytics.credentials import StaticTokenProvider
from learner_analytics.models import Timeframe
from learner_analytics.state import LoadStatus


def _response(body=None, status_code=200, url="http://backend.test"):
    resp = MagicMock()
    resp.status_code = status_code
    resp.url = url
    resp.json.return_value = body
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(response=resp)
    return resp


@pytest.fixture
def client():
    return AnalyticsClient("http://backend.test/", token_provider=StaticTokenProvider("tok-123"), timeout=7)


class TestRequests:

    @pytest.mark.unit
    def test_get_dashboard_request_shape(self, client, sample_raw):
        """Verify the dashboard call sends timeframe, comparisons flag and bearer token."""
        with patch.object(client.session, "get", return_value=_response({"data": sample_raw})) as mock_get:
            payload = client.get_dashboard("weekly")

        mock_get.assert_called_once_with(
            "http://backend.test" + DASHBOARD_PATH,
            params={"timeframe": "weekly", "include_comparisons": "true"},
            headers={"Authorization": "Bearer tok-123"},
            timeout=7,
        )
        assert payload.timeframe_id == "weekly"
        assert payload.user_analytics.performance_metrics.accuracy_rate == pytest.approx(0.674)

    @pytest.mark.unit
    def test_get_timeframes(self, client):
        body = {"timeframes": [{"id": "weekly", "name": "This Week"}, {"id": "monthly", "name": "This Month"}]}
        with patch.object(client.session, "get", return_value=_response(body)) as mock_get:
            timeframes = client.get_timeframes()

        assert mock_get.call_args.args[0] == "http://backend.test" + TIMEFRAMES_PATH
        assert timeframes == [Timeframe("weekly", "This Week"), Timeframe("monthly", "This Month")]

    @pytest.mark.unit
    def test_no_token_omits_authorization(self):
        client = AnalyticsClient("http://backend.test", token_provider=StaticTokenProvider(None))
        with patch.object(client.session, "get", return_value=_response({"timeframes": []})) as mock_get:
            client.get_timeframes()
        assert mock_get.call_args.kwargs["headers"] == {}

    @pytest.mark.unit
    def test_token_is_read_on_every_request(self):
        tokens = iter(["first", "second"])
        client = AnalyticsClient("http://backend.test", token_provider=lambda: next(tokens))
        with patch.object(client.session, "get", return_value=_response({"timeframes": []})) as mock_get:
            client.get_timeframes()
            client.get_timeframes()
        sent = [c.kwargs["headers"]["Authorization"] for c in mock_get.call_args_list]
        assert sent == ["Bearer first", "Bearer second"]


class TestFailures:

    @pytest.mark.unit
    def test_http_error_carries_status(self, client):
        with patch.object(client.session, "get", return_value=_response({}, status_code=401)):
            with pytest.raises(AnalyticsAPIError) as exc_info:
                client.get_dashboard("monthly")
        assert exc_info.value.status_code == 401

    @pytest.mark.unit
    def test_transport_error(self, client):
        with patch.object(client.session, "get", side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(AnalyticsAPIError) as exc_info:
                client.get_dashboard("monthly")
        assert exc_info.value.status_code is None

    @pytest.mark.unit
    def test_invalid_json(self, client):
        resp = _response()
        resp.json.side_effect = ValueError("not json")
        with patch.object(client.session, "get", return_value=resp):
            with pytest.raises(AnalyticsAPIError):
                client.get_timeframes()

    @pytest.mark.unit
    @pytest.mark.parametrize("body", [[1, 2], {"data": None}, {"data": []}, {"something": "else"}])
    def test_dashboard_envelope_must_hold_data_object(self, client, body):
        with patch.object(client.session, "get", return_value=_response(body)):
            with pytest.raises(AnalyticsAPIError):
                client.get_dashboard("monthly")

    @pytest.mark.unit
    def test_timeframes_envelope_must_hold_list(self, client):
        with patch.object(client.session, "get", return_value=_response({"timeframes": "weekly"})):
            with pytest.raises(AnalyticsAPIError):
                client.get_timeframes()


class TestMockClient:

    @pytest.mark.unit
    def test_lists_standard_timeframes(self):
        ids = [tf.id for tf in MockAnalyticsClient().get_timeframes()]
        assert ids == ["daily", "weekly", "monthly", "quarterly", "yearly", "all_time"]

    @pytest.mark.unit
    def test_payload_is_deterministic_per_timeframe(self):
        mock = MockAnalyticsClient()
        first = mock.get_dashboard("weekly")
        second = mock.get_dashboard("weekly")
        assert first.user_analytics == second.user_analytics
        assert first.comparison_data == second.comparison_data
        assert first.user_analytics != mock.get_dashboard("yearly").user_analytics

    @pytest.mark.unit
    def test_payload_is_complete(self):
        payload = MockAnalyticsClient().get_dashboard("monthly")
        ua = payload.user_analytics
        assert payload.generated_at is not None
        assert 0.0 <= ua.performance_metrics.accuracy_rate <= 1.0
        assert set(ua.performance_metrics.difficulty_breakdown) == {"easy", "medium", "hard"}
        assert payload.comparison_data.performance_comparison is not None

    @pytest.mark.unit
    def test_configured_failures(self):
        mock = MockAnalyticsClient(fail_timeframes=["daily"])
        with pytest.raises(AnalyticsAPIError):
            mock.get_dashboard("daily")
        assert mock.get_dashboard("weekly").user_analytics is not None


class TestOversizedNumbers:

    @pytest.mark.unit
    def test_huge_integer_does_not_escape_load(self, client):
        """Verify a JSON integer beyond float range is read as absent and the load still succeeds."""
        body = {"data": {"user_analytics": {"performance_metrics": {"total_questions": 10 ** 400}}}}
        with patch.object(client.session, "get", return_value=_response(body)):
            controller = DashboardController(client)
            controller.load_analytics()

        assert controller.state.status is LoadStatus.READY
        assert controller.state.error_message is None
        assert controller.state.payload.user_analytics.performance_metrics.total_questions is None
