"""Tests for the ServiceDescription model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from runctl.domain.service import ServiceDescription


class TestServiceDescription:
    def test_defaults(self) -> None:
        service = ServiceDescription(name="demo")
        assert service.source == ""
        assert service.version == ""
        assert service.metadata == {}

    def test_nameless_backend_record_accepted(self) -> None:
        service = ServiceDescription.from_wire({"name": "", "source": "x"})
        assert service.name == ""
        assert service.source == "x"

    def test_name_immutable(self) -> None:
        service = ServiceDescription(name="demo")
        with pytest.raises(ValidationError):
            service.name = "other"  # type: ignore[misc]

    def test_with_metadata_returns_copy(self) -> None:
        service = ServiceDescription(name="demo")
        updated = service.with_metadata({"status": "running"})
        assert updated.meta("status") == "running"
        assert service.metadata == {}

    def test_meta_missing_key(self) -> None:
        assert ServiceDescription(name="demo").meta("owner") == ""


class TestWireFormat:
    def test_round_trip_keeps_unknown_metadata(self) -> None:
        service = ServiceDescription(
            name="svc",
            source="github.com/acme/svc",
            version="1",
            metadata={"status": "running", "zone": "b", "build": "42"},
        )
        again = ServiceDescription.from_wire(service.to_wire())
        assert again == service
        assert list(again.metadata) == ["status", "zone", "build"]

    def test_from_wire_tolerates_missing_fields(self) -> None:
        service = ServiceDescription.from_wire({"name": "svc", "metadata": None})
        assert service.source == ""
        assert service.metadata == {}

    def test_from_wire_stringifies_metadata(self) -> None:
        service = ServiceDescription.from_wire({"name": "svc", "metadata": {"build": 7}})
        assert service.metadata == {"build": "7"}
