# tests/shared/test_messages.py
"""
Тесты для src/shared/models/messages.py и src/shared/models/ride.py
"""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from src.common.constants import RideStatus
from src.shared.models.messages import (
    HEARTBEAT_RESPONSE_TYPES,
    Envelope,
    HeartbeatPayload,
    heartbeat_envelope,
)
from src.shared.models.ride import AdminStatsDTO, RideDTO, RideRequestDTO


class TestEnvelope:
    """Тесты конверта кадра."""

    def test_to_wire(self) -> None:
        envelope = Envelope(type="location", payload={"lat": 49.61, "lng": 6.13})

        assert envelope.to_wire() == '{"type": "location", "payload": {"lat": 49.61, "lng": 6.13}}'

    def test_to_wire_without_payload(self) -> None:
        assert json.loads(Envelope(type="ping").to_wire()) == {"type": "ping", "payload": None}

    def test_from_wire(self) -> None:
        envelope = Envelope.from_wire('{"type": "ride:1", "payload": [1, 2]}')

        assert envelope.type == "ride:1"
        assert envelope.payload == [1, 2]

    def test_from_wire_bytes(self) -> None:
        assert Envelope.from_wire(b'{"type": "admin:stats"}').type == "admin:stats"

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[]",
            '"text"',
            '{"payload": {}}',
            '{"type": ""}',
            '{"type": 5}',
        ],
    )
    def test_from_wire_rejects(self, raw: str) -> None:
        with pytest.raises(ValueError):
            Envelope.from_wire(raw)

    def test_deeply_nested_frame_is_value_error(self) -> None:
        with pytest.raises(ValueError, match="вложенность"):
            Envelope.from_wire("[" * 200000)

    def test_empty_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Envelope(type="")


class TestHeartbeat:
    """Тесты heartbeat-сообщений."""

    def test_payload_has_millisecond_timestamp(self) -> None:
        payload = HeartbeatPayload()

        assert payload.timestamp > 1_600_000_000_000

    def test_envelope(self) -> None:
        envelope = heartbeat_envelope()

        assert envelope.type == "heartbeat"
        assert set(envelope.payload) == {"timestamp"}

    def test_response_types(self) -> None:
        assert "heartbeat_ack" in HEARTBEAT_RESPONSE_TYPES
        assert "heartbeat" in HEARTBEAT_RESPONSE_TYPES
        assert "connected" not in HEARTBEAT_RESPONSE_TYPES


class TestRideModels:
    """Тесты DTO поездки."""

    def test_ride_from_camel_case(self, sample_ride_payload: dict) -> None:
        ride = RideDTO.model_validate(sample_ride_payload)

        assert ride.status is RideStatus.ACCEPTED
        assert ride.request.pickup_location.coordinates == (49.6116, 6.13)
        assert ride.driver.vehicle.license_plate == "LX 1234"
        assert ride.created_at is not None

    def test_ride_minimal_update(self) -> None:
        ride = RideDTO.model_validate({"id": "r1", "status": "in_progress"})

        assert ride.driver is None
        assert ride.status is RideStatus.IN_PROGRESS

    def test_ride_unknown_status(self) -> None:
        with pytest.raises(ValidationError):
            RideDTO.model_validate({"id": "r1", "status": "teleported"})

    def test_request_dumps_camel_case(self) -> None:
        request = RideRequestDTO(
            pickup_location={"address": "Gare", "coordinates": (49.6, 6.13)},
            dropoff_location={"address": "Kirchberg", "coordinates": (49.63, 6.16)},
        )

        data = request.model_dump(by_alias=True)

        assert set(data) == {"pickupLocation", "dropoffLocation"}

    def test_partial_admin_stats(self) -> None:
        stats = AdminStatsDTO.model_validate({"activeRides": 12})

        assert stats.active_rides == 12
        assert stats.model_dump(exclude_none=True) == {"active_rides": 12}

    def test_admin_rating_bounds(self) -> None:
        with pytest.raises(ValidationError):
            AdminStatsDTO.model_validate({"averageRating": 7})
