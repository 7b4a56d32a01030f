"""
Tests for the aggregation engine.
"""

import random
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from riverconditions.engine import (
    build_river_record,
    classify_flow,
    collect_source_results,
    get_river_record,
    latest_temperature,
    merge_flow_history,
)
from riverconditions.models import (
    FlowStatus,
    FlowThresholds,
    RiverProfile,
    SourceKind,
    SourceResult,
    SourceStatus,
    StationRef,
    TelemetrySample,
)
from riverconditions.rivers import get_river_profile

T0 = datetime(2024, 5, 1, 17, 0, tzinfo=timezone.utc)
MCKENZIE_THRESHOLDS = FlowThresholds(low=900, optimal_low=1000, optimal_high=2500, high=3000)


def _sample(minutes, value):
    return TelemetrySample(timestamp=T0 + timedelta(minutes=minutes), value=value)


def _result(source=SourceKind.USGS, flow=(), temps=(), fetched_offset=0):
    return SourceResult(
        source=source,
        station_id="test",
        status=SourceStatus.OK,
        flow=list(flow),
        temperature_f=list(temps),
        fetched_at=T0 + timedelta(seconds=fetched_offset),
    )


class TestClassifyFlow:
    """Test flow classification precedence."""

    @pytest.mark.parametrize(
        "flow, expected",
        [
            (0, FlowStatus.LOW),
            (899.9, FlowStatus.LOW),
            (900, FlowStatus.FAIR),  # exactly low
            (950, FlowStatus.FAIR),
            (1000, FlowStatus.OPTIMAL),
            (1500, FlowStatus.OPTIMAL),
            (2500, FlowStatus.OPTIMAL),
            (2700, FlowStatus.FAIR),
            (3000, FlowStatus.FAIR),  # exactly high
            (3000.1, FlowStatus.HIGH),
            (12000, FlowStatus.HIGH),
        ],
    )
    def test_mckenzie_thresholds(self, flow, expected):
        assert classify_flow(flow, MCKENZIE_THRESHOLDS) is expected

    def test_partition_is_consistent(self):
        thresholds = FlowThresholds(low=10, optimal_low=20, optimal_high=30, high=40)
        for tenth in range(0, 500):
            flow = tenth / 10
            status = classify_flow(flow, thresholds)
            if flow < 10:
                assert status is FlowStatus.LOW
            elif flow > 40:
                assert status is FlowStatus.HIGH
            elif 20 <= flow <= 30:
                assert status is FlowStatus.OPTIMAL
            else:
                assert status is FlowStatus.FAIR


class TestMergeFlowHistory:
    """Test merging of flow sample sequences."""

    def test_sorted_and_unique(self):
        a = [_sample(30, 3), _sample(0, 1)]
        b = [_sample(15, 2), _sample(30, 4)]

        merged = merge_flow_history([a, b])

        assert [s.timestamp for s in merged] == [
            T0,
            T0 + timedelta(minutes=15),
            T0 + timedelta(minutes=30),
        ]
        # Last seen wins for duplicate timestamps
        assert merged[-1].value == 4

    def test_order_independent_and_idempotent(self):
        samples = [_sample(m, float(m)) for m in range(0, 120, 15)]
        shuffled = samples[:]
        random.Random(7).shuffle(shuffled)

        merged = merge_flow_history([shuffled[:3], shuffled[3:]])

        assert merged == samples
        assert merge_flow_history([merged]) == merged

    def test_duplicates_across_offsets(self):
        pacific = timezone(timedelta(hours=-7))
        same_instant = TelemetrySample(T0.astimezone(pacific), 99)

        merged = merge_flow_history([[_sample(0, 1)], [same_instant]])

        assert len(merged) == 1
        assert merged[0].value == 99

    def test_empty(self):
        assert merge_flow_history([]) == []
        assert merge_flow_history([[], []]) == []


class TestLatestTemperature:
    """Test last-writer-wins temperature selection."""

    def test_most_recently_fetched_wins(self):
        early = _result(temps=[_sample(0, 50)], fetched_offset=1)
        late = _result(temps=[_sample(0, 54)], fetched_offset=2)

        assert latest_temperature([late, early]) == 54
        assert latest_temperature([early, late]) == 54

    def test_ignores_results_without_temperature(self):
        with_temp = _result(temps=[_sample(0, 48), _sample(15, 49)], fetched_offset=1)
        without = _result(flow=[_sample(0, 1000)], fetched_offset=5)

        assert latest_temperature([with_temp, without]) == 49

    def test_none_when_no_source_has_temperature(self):
        assert latest_temperature([_result()]) is None
        assert latest_temperature([]) is None


class TestBuildRiverRecord:
    """Test record assembly."""

    def test_optimal_scenario(self):
        profile = RiverProfile("test", "Test", thresholds=MCKENZIE_THRESHOLDS)
        results = [_result(flow=[_sample(0, 1400), _sample(15, 1500)], temps=[_sample(15, 51)])]

        record = build_river_record("test", profile, results)

        assert record.current_flow_cfs == 1500
        assert record.current_temp_f == 51
        assert record.flow_status is FlowStatus.OPTIMAL
        assert record.thresholds == MCKENZIE_THRESHOLDS

    def test_boundary_scenario_is_fair(self):
        profile = RiverProfile("test", "Test", thresholds=MCKENZIE_THRESHOLDS)

        record = build_river_record("test", profile, [_result(flow=[_sample(0, 3000)])])

        assert record.flow_status is FlowStatus.FAIR

    def test_current_flow_is_last_history_value(self):
        profile = RiverProfile("test", "Test")
        results = [
            _result(flow=[_sample(30, 7), _sample(0, 5)]),
            _result(source=SourceKind.NWRFC, flow=[_sample(15, 6)]),
        ]

        record = build_river_record("test", profile, results)

        assert [s.value for s in record.flow_history] == [5, 6, 7]
        assert record.current_flow_cfs == record.flow_history[-1].value

    def test_no_flow_means_no_classification(self):
        profile = RiverProfile("test", "Test", thresholds=MCKENZIE_THRESHOLDS)

        record = build_river_record("test", profile, [_result(temps=[_sample(0, 50)])])

        assert record.flow_history == []
        assert record.current_flow_cfs is None
        assert record.flow_status is None
        assert record.thresholds is None
        assert record.current_temp_f == 50

    def test_no_thresholds_means_no_classification(self):
        record = build_river_record(
            "test", RiverProfile.empty("test"), [_result(flow=[_sample(0, 1500)])]
        )

        assert record.current_flow_cfs == 1500
        assert record.flow_status is None
        assert record.thresholds is None
        assert "flow_status" not in record.to_dict()


class TestCollectSourceResults:
    """Test concurrent fan-out with isolated failures."""

    @pytest.mark.asyncio
    async def test_exception_in_one_adapter_does_not_affect_other(self):
        stations = [
            StationRef(SourceKind.USGS, "14158050", ("00010",)),
            StationRef(SourceKind.NWRFC, "EUGO3"),
        ]
        nwrfc_result = _result(source=SourceKind.NWRFC, flow=[_sample(0, 4100)])

        with patch(
            "riverconditions.engine.fetch_usgs_result",
            AsyncMock(side_effect=RuntimeError("boom")),
        ), patch(
            "riverconditions.engine.fetch_nwrfc_result",
            AsyncMock(return_value=nwrfc_result),
        ):
            results = await collect_source_results(Mock(), stations)

        assert [r.source for r in results] == [SourceKind.USGS, SourceKind.NWRFC]
        assert results[0].status is SourceStatus.FAILED
        assert results[0].error == "boom"
        assert results[1] is nwrfc_result


def _usgs_temperature_payload(celsius):
    return {
        "value": {
            "timeSeries": [
                {
                    "variable": {
                        "variableCode": [{"value": "00010"}],
                        "noDataValue": -999999.0,
                    },
                    "values": [
                        {"value": [{"dateTime": "2024-05-01T10:00:00-07:00", "value": celsius}]}
                    ],
                }
            ]
        }
    }


def _mock_data_client(usgs_get, nwrfc_get):
    client = Mock()
    client.usgs = Mock()
    client.usgs.get_instantaneous_values = usgs_get
    client.nwrfc = Mock()
    client.nwrfc.get_observed_discharge = nwrfc_get
    return client


class TestGetRiverRecord:
    """Test the full pipeline with mocked upstream clients."""

    @pytest.mark.asyncio
    async def test_unknown_river(self):
        record = await get_river_record("columbia_xyz", client=Mock())

        assert record.river_id == "columbia_xyz"
        assert record.flow_history == []
        assert record.flow_status is None
        assert record.thresholds is None
        assert record.to_dict() == {"river_id": "columbia_xyz", "flow_history": []}

    @pytest.mark.asyncio
    async def test_willamette_combines_both_sources(self):
        usgs_get = AsyncMock(
            return_value={
                "00010": [_sample(0, 12.0)],
            }
        )
        nwrfc_get = AsyncMock(return_value=[_sample(0, 2400), _sample(60, 2450)])
        client = _mock_data_client(usgs_get, nwrfc_get)

        record = await get_river_record("Willamette_Eugene", client=client)

        assert record.river_id == "willamette_eugene"
        assert record.current_temp_f == 54  # 53.6F
        assert record.current_flow_cfs == 2450
        assert record.flow_status is FlowStatus.OPTIMAL
        assert record.thresholds == get_river_profile("willamette_eugene").thresholds
        usgs_get.assert_awaited_once_with("14158050", ("00010",), None)
        nwrfc_get.assert_awaited_once_with("EUGO3", 2)

    @pytest.mark.asyncio
    async def test_flow_survives_temperature_source_failure(self):
        from riverconditions.exceptions import UpstreamConnectionError

        usgs_get = AsyncMock(side_effect=UpstreamConnectionError("USGS network error"))
        nwrfc_get = AsyncMock(return_value=[_sample(0, 900)])
        client = _mock_data_client(usgs_get, nwrfc_get)

        record = await get_river_record("willamette_eugene", client=client)

        assert record.current_temp_f is None
        assert record.current_flow_cfs == 900
        assert record.flow_status is FlowStatus.LOW
        statuses = {r.source: r.status for r in record.sources}
        assert statuses == {
            SourceKind.USGS: SourceStatus.FAILED,
            SourceKind.NWRFC: SourceStatus.OK,
        }

    @pytest.mark.asyncio
    async def test_temperature_survives_flow_source_failure(self):
        from riverconditions.exceptions import UpstreamQueryError

        usgs_get = AsyncMock(return_value={"00010": [_sample(0, 0.0)]})
        nwrfc_get = AsyncMock(side_effect=UpstreamQueryError("Invalid XML response"))
        client = _mock_data_client(usgs_get, nwrfc_get)

        record = await get_river_record("willamette_eugene", client=client)

        assert record.current_temp_f == 32
        assert record.flow_history == []
        assert record.current_flow_cfs is None
        assert record.flow_status is None

    @pytest.mark.asyncio
    async def test_mckenzie_through_http_mock(self):
        """End to end through the real adapters with a mocked HTTP layer."""
        from riverconditions.client import RiverDataClient

        payload = _usgs_temperature_payload("11.0")
        payload["value"]["timeSeries"].append(
            {
                "variable": {"variableCode": [{"value": "00060"}], "noDataValue": -999999.0},
                "values": [
                    {
                        "value": [
                            {"dateTime": "2024-05-01T10:00:00-07:00", "value": "2900"},
                            {"dateTime": "2024-05-01T10:15:00-07:00", "value": "3100"},
                        ]
                    }
                ],
            }
        )
        mock_response = Mock()
        mock_response.json.return_value = payload
        mock_response.raise_for_status.return_value = None

        client = RiverDataClient()
        await client.close()
        mock_http = AsyncMock()
        mock_http.get.return_value = mock_response
        client.usgs._client = mock_http

        record = await get_river_record("mckenzie_hayden", client=client)

        assert [s.value for s in record.flow_history] == [2900.0, 3100.0]
        assert record.current_flow_cfs == 3100.0
        assert record.current_temp_f == 52
        assert record.flow_status is FlowStatus.HIGH
        assert mock_http.get.await_count == 1

    @pytest.mark.asyncio
    async def test_mckenzie_network_failure(self):
        from riverconditions.client import RiverDataClient

        client = RiverDataClient()
        await client.close()
        mock_http = AsyncMock()
        mock_http.get.side_effect = httpx.ConnectError("refused")
        client.usgs._client = mock_http

        record = await get_river_record("mckenzie_hayden", client=client)

        assert record.to_dict() == {"river_id": "mckenzie_hayden", "flow_history": []}
