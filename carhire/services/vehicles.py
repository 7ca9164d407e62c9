"""Fleet registry: add, edit and retire vehicles."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from carhire.domain.errors import NotFoundError, ValidationError, validation_message
from carhire.domain.models import Vehicle, VehicleStatus
from carhire.repos.memory import VehicleRepository
from carhire.services.normalize import normalize_vehicle_fields

logger = logging.getLogger(__name__)

REQUIRED_VEHICLE_FIELDS = ("make", "model", "year", "license_plate", "daily_rate")
INVALID_STATUS = "Invalid status. Must be one of: Available, Booked, Maintenance"


class VehicleService:
    def __init__(self, vehicle_repo: VehicleRepository) -> None:
        self.vehicle_repo = vehicle_repo

    def add(self, payload: dict[str, Any]) -> Vehicle:
        fields = {k: v for k, v in normalize_vehicle_fields(payload).items() if v != ""}
        missing = [name for name in REQUIRED_VEHICLE_FIELDS if fields.get(name) is None]
        if missing:
            raise ValidationError(
                "Missing required fields: " + ", ".join(to_camel(name) for name in missing)
            )

        with self.vehicle_repo.locked():
            if self.vehicle_repo.find_by_license_plate(fields["license_plate"]) is not None:
                raise ValidationError("License plate already exists")
            if fields.get("status") is not None:
                fields["status"] = self._parse_status(fields["status"])

            try:
                vehicle = Vehicle(**{k: v for k, v in fields.items() if v is not None})
            except PydanticValidationError as exc:
                raise ValidationError(validation_message(exc)) from None
            vehicle = self.vehicle_repo.add(vehicle)
        logger.info("vehicle %s (%s) added", vehicle.id, vehicle.license_plate)
        return vehicle

    def list_all(self) -> list[Vehicle]:
        return self.vehicle_repo.list_all()

    def get(self, vehicle_id: str) -> Vehicle:
        vehicle = self.vehicle_repo.get(vehicle_id)
        if vehicle is None:
            raise NotFoundError("Vehicle not found")
        return vehicle

    def update(self, vehicle_id: str, payload: dict[str, Any]) -> Vehicle:
        self.get(vehicle_id)
        fields = {
            name: value
            for name, value in normalize_vehicle_fields(payload).items()
            if value is not None and value != ""
        }

        if "status" in fields:
            fields["status"] = self._parse_status(fields["status"])

        plate = fields.get("license_plate")
        with self.vehicle_repo.locked():
            if plate:
                clash = self.vehicle_repo.find_by_license_plate(plate)
                if clash is not None and clash.id != vehicle_id:
                    raise ValidationError("License plate already exists")
            return self._write(vehicle_id, fields)

    def set_status(self, vehicle_id: str, status: str | None) -> Vehicle:
        new_status = self._parse_status(status.strip() if isinstance(status, str) else status)
        self.get(vehicle_id)
        return self._write(vehicle_id, {"status": new_status})

    def delete(self, vehicle_id: str) -> None:
        if not self.vehicle_repo.delete(vehicle_id):
            raise NotFoundError("Vehicle not found")

    def _write(self, vehicle_id: str, fields: dict[str, Any]) -> Vehicle:
        try:
            vehicle = self.vehicle_repo.update(vehicle_id, **fields)
        except PydanticValidationError as exc:
            raise ValidationError(validation_message(exc)) from None
        if vehicle is None:
            raise NotFoundError("Vehicle not found")
        return vehicle

    @staticmethod
    def _parse_status(status: Any) -> VehicleStatus:
        try:
            return VehicleStatus(status)
        except ValueError:
            raise ValidationError(INVALID_STATUS) from None
